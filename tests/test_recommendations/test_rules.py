"""
Tests for visibility_scorer/recommendations/rules.py.

What we test
------------
  - Every factor in the default weight table has a dedicated rule.
  - No rule points at a factor that does not exist.
  - Rule actions are non-empty sentences.
  - Unknown factors fall back to the default rule (medium effort, names the
    factor).
"""

from __future__ import annotations

import pytest

from visibility_scorer.recommendations.rules import (
    DEFAULT_EFFORT,
    REMEDIATION_RULES,
    default_rule,
    rule_for,
)
from visibility_scorer.scoring.weights import DEFAULT_WEIGHTS
from visibility_scorer.taxonomy.scoring_taxonomy import CategoryKey, Effort

_ALL_FACTORS = [
    (category, key)
    for category, factors in DEFAULT_WEIGHTS.factor_weights.items()
    for key in factors
]


class TestRuleTable:
    @pytest.mark.parametrize("category, key", _ALL_FACTORS)
    def test_every_factor_has_a_rule(self, category, key):
        assert (category, key) in REMEDIATION_RULES

    def test_no_orphan_rules(self):
        assert set(REMEDIATION_RULES) == set(_ALL_FACTORS)

    @pytest.mark.parametrize("rule", list(REMEDIATION_RULES.values()))
    def test_action_text(self, rule):
        assert rule.action.strip()
        assert rule.action.rstrip().endswith(".")
        assert isinstance(rule.effort, Effort)

    def test_webp_rule_names_safe_formats(self):
        rule = REMEDIATION_RULES[(CategoryKey.PROTOCOL_META, "og_image_format")]
        assert "JPEG" in rule.action and "PNG" in rule.action


class TestRuleFor:
    def test_known_factor(self):
        rule = rule_for(CategoryKey.STRUCTURED_DATA, "offer_schema", "Offer Schema")
        assert rule is REMEDIATION_RULES[(CategoryKey.STRUCTURED_DATA, "offer_schema")]

    def test_key_is_scoped_by_category(self):
        # "awards" exists only under authority_trust.
        rule = rule_for(CategoryKey.STRUCTURED_DATA, "awards", "Awards")
        assert rule == default_rule("Awards")

    def test_unknown_factor_uses_default(self):
        rule = rule_for(CategoryKey.CONTENT_QUALITY, "video_content", "Product Video")
        assert "'Product Video'" in rule.action
        assert rule.effort == DEFAULT_EFFORT == Effort.MEDIUM
