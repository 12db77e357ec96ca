"""
Recommendation engine: converts a ``ScoreResult`` into ranked remediation
actions, and writes score reports.

Modules
-------
rules    : RemediationRule + REMEDIATION_RULES + default_rule(): static
           action text and effort tier per (category, factor).
ranker   : classify_impact() + build_recommendations(): pure functions,
           no DB or I/O.
reporter : build_report_payload() + write_report_json(): file output.
"""
