"""
Tests for visibility_scorer/scoring/aggregation.py.

What we test
------------
round_half_up():
  - .5 always rounds up (no banker's rounding).

aggregate():
  - Total is the weighted sum, rounded once and clamped to [0, 100].
  - Grade follows the total at every boundary.
  - Raising any single category score never lowers the total.
  - Accepts a mapping or an iterable of category scores.
  - Missing categories contribute 0.

category_summary():
  - Sorted ascending by score; ties keep evaluation order.
  - Status counts per category.

critical_issues():
  - Only failed critical factors, in evaluation order.

improvement_potential():
  - Points to the next grade; none at A.
"""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from visibility_scorer.models.score import CategoryScore, Factor
from visibility_scorer.scoring.aggregation import (
    aggregate,
    category_summary,
    critical_issues,
    improvement_potential,
    round_half_up,
    weighted_total,
)
from visibility_scorer.scoring.weights import DEFAULT_WEIGHTS
from visibility_scorer.taxonomy.scoring_taxonomy import (
    CategoryKey,
    Context,
    FactorStatus,
    Grade,
)

_NAMES = {
    CategoryKey.STRUCTURED_DATA:   "Structured Data",
    CategoryKey.PROTOCOL_META:     "Protocol & Meta Compliance",
    CategoryKey.CONTENT_QUALITY:   "Content Depth & Quality",
    CategoryKey.CONTENT_STRUCTURE: "Content Structure & Accessibility",
    CategoryKey.AUTHORITY_TRUST:   "Authority & Trust Signals",
}


def _factor(
    key: str = "f",
    status: FactorStatus = FactorStatus.PASS,
    points: float = 10.0,
    max_points: float = 10.0,
    critical: bool = False,
) -> Factor:
    return Factor(
        key=key,
        name=key.replace("_", " ").title(),
        status=status,
        points=points,
        max_points=max_points,
        critical=critical,
        details=f"{key} details",
    )


def _category(key: CategoryKey, score: float, factors: list[Factor] | None = None) -> CategoryScore:
    return CategoryScore(
        category=key,
        category_name=_NAMES[key],
        score=score,
        weight=DEFAULT_WEIGHTS.category_weights[key],
        factors=factors or [],
    )


def _uniform(score: float) -> dict[CategoryKey, CategoryScore]:
    return {key: _category(key, score) for key in CategoryKey}


# ── Rounding ──────────────────────────────────────────────────────────────────


class TestRoundHalfUp:
    @pytest.mark.parametrize(
        "value, expected",
        [(0.49, 0), (0.5, 1), (1.5, 2), (2.5, 3), (89.5, 90), (89.49, 89), (100.0, 100)],
    )
    def test_values(self, value, expected):
        assert round_half_up(value) == expected


# ── aggregate() ───────────────────────────────────────────────────────────────


class TestAggregate:
    def test_weighted_sum(self):
        scores = {
            CategoryKey.STRUCTURED_DATA:   _category(CategoryKey.STRUCTURED_DATA, 100),
            CategoryKey.PROTOCOL_META:     _category(CategoryKey.PROTOCOL_META, 50),
            CategoryKey.CONTENT_QUALITY:   _category(CategoryKey.CONTENT_QUALITY, 0),
            CategoryKey.CONTENT_STRUCTURE: _category(CategoryKey.CONTENT_STRUCTURE, 40),
            CategoryKey.AUTHORITY_TRUST:   _category(CategoryKey.AUTHORITY_TRUST, 20),
        }
        # 25 + 10 + 0 + 6 + 3
        assert weighted_total(scores) == pytest.approx(44.0)
        result = aggregate(scores)
        assert result.total_score == 44
        assert result.grade == Grade.F

    def test_rounds_once_at_the_end(self):
        # 0.5 + 0.5 = 1.0; rounding each weighted category first would give 2.
        scores = _uniform(0.0)
        scores[CategoryKey.PROTOCOL_META] = _category(CategoryKey.PROTOCOL_META, 2.5)
        scores[CategoryKey.CONTENT_QUALITY] = _category(CategoryKey.CONTENT_QUALITY, 2.0)
        assert aggregate(scores).total_score == 1

    @pytest.mark.parametrize(
        "score, grade",
        [(100, Grade.A), (90, Grade.A), (89, Grade.B), (80, Grade.B), (79, Grade.C),
         (70, Grade.C), (69, Grade.D), (60, Grade.D), (59, Grade.F), (0, Grade.F)],
    )
    def test_grade_boundaries(self, score, grade):
        result = aggregate(_uniform(score))
        assert result.total_score == score
        assert result.grade == grade
        assert result.grade_description == DEFAULT_WEIGHTS.describe(grade)

    @pytest.mark.parametrize("key", list(CategoryKey))
    def test_monotone_in_each_category(self, key):
        base = _uniform(55.0)
        previous = aggregate(base).total_score
        for bump in (60.0, 70.0, 85.0, 100.0):
            scores = dict(base)
            scores[key] = _category(key, bump)
            total = aggregate(scores).total_score
            assert total >= previous
            previous = total

    def test_accepts_iterable(self):
        result = aggregate(list(_uniform(75).values()), Context.NEED)
        assert result.total_score == 75
        assert result.context == Context.NEED
        assert list(result.category_scores) == list(CategoryKey)

    def test_missing_category_contributes_zero(self):
        scores = _uniform(100.0)
        del scores[CategoryKey.STRUCTURED_DATA]
        assert aggregate(scores).total_score == 75

    def test_unknown_context_recorded_as_hybrid(self):
        assert aggregate(_uniform(50), "impulse").context == Context.HYBRID

    def test_timestamp_passthrough(self):
        ts = datetime(2026, 10, 18, 12, 0, tzinfo=timezone.utc)
        assert aggregate(_uniform(50), timestamp=ts).timestamp == ts

    def test_result_is_json_serialisable(self):
        payload = aggregate(_uniform(50)).model_dump(mode="json")
        assert payload["grade"] == "F"
        assert set(payload["category_scores"]) == {k.value for k in CategoryKey}


# ── Views ─────────────────────────────────────────────────────────────────────


class TestCategorySummary:
    def test_sorted_ascending_with_stable_ties(self):
        scores = _uniform(80.0)
        scores[CategoryKey.CONTENT_QUALITY] = _category(CategoryKey.CONTENT_QUALITY, 20)
        scores[CategoryKey.AUTHORITY_TRUST] = _category(CategoryKey.AUTHORITY_TRUST, 20)
        summary = category_summary(aggregate(scores))
        assert [s.key for s in summary] == [
            CategoryKey.CONTENT_QUALITY,
            CategoryKey.AUTHORITY_TRUST,
            CategoryKey.STRUCTURED_DATA,
            CategoryKey.PROTOCOL_META,
            CategoryKey.CONTENT_STRUCTURE,
        ]

    def test_status_counts(self):
        factors = [
            _factor("a", FactorStatus.PASS),
            _factor("b", FactorStatus.WARNING, points=5),
            _factor("c", FactorStatus.FAIL, points=0),
            _factor("d", FactorStatus.UNKNOWN, points=5),
        ]
        scores = _uniform(50)
        scores[CategoryKey.STRUCTURED_DATA] = _category(CategoryKey.STRUCTURED_DATA, 20, factors)
        summary = {s.key: s for s in category_summary(aggregate(scores))}
        sd = summary[CategoryKey.STRUCTURED_DATA]
        assert (sd.pass_count, sd.warning_count, sd.fail_count, sd.total_factors) == (1, 1, 1, 4)
        assert sd.weighted_score == pytest.approx(20 * 0.25)


class TestCriticalIssues:
    def test_only_failed_critical_factors(self):
        sd = [
            _factor("product_schema", FactorStatus.FAIL, points=0, max_points=30, critical=True),
            _factor("offer_schema", FactorStatus.PASS, points=20, max_points=20, critical=True),
            _factor("faq_schema", FactorStatus.FAIL, points=0),
        ]
        pm = [
            _factor("og_image_format", FactorStatus.FAIL, points=0, max_points=15, critical=True),
        ]
        scores = _uniform(50)
        scores[CategoryKey.STRUCTURED_DATA] = _category(CategoryKey.STRUCTURED_DATA, 20, sd)
        scores[CategoryKey.PROTOCOL_META] = _category(CategoryKey.PROTOCOL_META, 0, pm)
        issues = critical_issues(aggregate(scores))
        assert [i.factor for i in issues] == ["Product Schema", "Og Image Format"]
        assert issues[0].category == "Structured Data"
        assert all(i.impact == "high" for i in issues)

    def test_none_when_clean(self):
        assert critical_issues(aggregate(_uniform(100))) == []


class TestImprovementPotential:
    @pytest.mark.parametrize(
        "total, next_grade, points",
        [(89, Grade.A, 1), (72, Grade.B, 8), (60, Grade.C, 10), (0, Grade.D, 60), (59, Grade.D, 1)],
    )
    def test_points_to_next(self, total, next_grade, points):
        potential = improvement_potential(total)
        assert potential.next_grade == next_grade
        assert potential.points_to_next == points
        assert potential.has_room
        assert potential.message == f"{points} points to reach {next_grade} grade"

    def test_top_grade(self):
        potential = improvement_potential(95)
        assert potential.grade == Grade.A
        assert potential.next_grade is None
        assert not potential.has_room
        assert potential.message.startswith("Excellent!")
