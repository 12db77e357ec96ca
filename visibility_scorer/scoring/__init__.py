"""
Scoring core: turns extracted page facts into a graded ``ScoreResult``.

Pure and synchronous; nothing in this package performs I/O.

Modules
-------
weights     : WeightConfig + DEFAULT_WEIGHTS + load_weights(): validated
              category/factor weights, caps, context multipliers, grade bands.
curves      : Piecewise-linear and step curves mapping counts to 0–100.
factors     : ScoringContext + FactorCollector: multiplier, cap, accumulate.
scorers     : One CategoryScorer per category + CATEGORY_SCORERS order.
aggregation : aggregate() + category_summary() + critical_issues()
              + improvement_potential().
engine      : ScoringEngine + score_page(): the public entry point.
"""
