"""
Aggregation and grading: combine category scores into a ``ScoreResult``.

Rounding discipline
-------------------
Factor points and category scores stay unrounded floats.  The weighted
total is rounded exactly once, half-up (``floor(x + 0.5)``), then clamped
to [0, 100].  Python's ``round()`` is banker's rounding and is not used.

The read-only views (``category_summary``, ``critical_issues``,
``improvement_potential``) never modify the result they inspect.
"""

from __future__ import annotations

import logging
import math
from datetime import datetime
from typing import Iterable, Mapping, Optional

from visibility_scorer.models.score import (
    CategoryScore,
    CategorySummary,
    CriticalIssue,
    ImprovementPotential,
    ScoreResult,
)
from visibility_scorer.scoring.weights import DEFAULT_WEIGHTS, WeightConfig, resolve_context
from visibility_scorer.taxonomy.scoring_taxonomy import (
    CategoryKey,
    Context,
    FactorStatus,
    Grade,
    Impact,
)
from visibility_scorer.utils.time_utils import utcnow

logger = logging.getLogger(__name__)


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def weighted_total(
    category_scores: Mapping[CategoryKey, CategoryScore],
    weights: WeightConfig = DEFAULT_WEIGHTS,
) -> float:
    """Unrounded weighted sum of category scores.

    Categories absent from ``category_scores`` contribute 0.
    """
    return sum(
        category_scores[key].score * weight
        for key, weight in weights.category_weights.items()
        if key in category_scores
    )


def aggregate(
    category_scores: Mapping[CategoryKey, CategoryScore] | Iterable[CategoryScore],
    context: Context | str | None = Context.HYBRID,
    weights: WeightConfig = DEFAULT_WEIGHTS,
    timestamp: Optional[datetime] = None,
) -> ScoreResult:
    """Combine five category scores into a graded ``ScoreResult``.

    Args:
        category_scores: Mapping (or iterable) of category scores, in
            evaluation order.
        context: Context the categories were scored under.
        weights: Weight tables supplying category weights and grade bands.
        timestamp: Result timestamp; defaults to now (UTC).

    Returns:
        Frozen ``ScoreResult`` with the total rounded once.
    """
    if not isinstance(category_scores, Mapping):
        category_scores = {cs.category: cs for cs in category_scores}

    raw_total = weighted_total(category_scores, weights)
    total = max(0, min(100, round_half_up(raw_total)))
    grade = weights.grade_for(total)

    logger.debug("Aggregate: raw=%.4f total=%d grade=%s", raw_total, total, grade)

    return ScoreResult(
        total_score=total,
        grade=grade,
        grade_description=weights.describe(grade),
        context=resolve_context(context),
        category_scores=dict(category_scores),
        timestamp=timestamp or utcnow(),
    )


def category_summary(result: ScoreResult) -> list[CategorySummary]:
    """Per-category roll-up, lowest score first (ties keep evaluation order)."""
    summaries = []
    for key, cs in result.category_scores.items():
        statuses = [f.status for f in cs.factors]
        summaries.append(
            CategorySummary(
                key=key,
                name=cs.category_name,
                score=cs.score,
                weight=cs.weight,
                weighted_score=cs.score * cs.weight,
                pass_count=statuses.count(FactorStatus.PASS),
                warning_count=statuses.count(FactorStatus.WARNING),
                fail_count=statuses.count(FactorStatus.FAIL),
                total_factors=len(statuses),
            )
        )
    return sorted(summaries, key=lambda s: s.score)


def critical_issues(result: ScoreResult) -> list[CriticalIssue]:
    """Every failed critical factor, in evaluation order."""
    return [
        CriticalIssue(
            category=category.category_name,
            factor=factor.name,
            details=factor.details,
            impact=Impact.HIGH,
        )
        for category, factor in result.iter_factors()
        if factor.critical and factor.status == FactorStatus.FAIL
    ]


def improvement_potential(
    total_score: int,
    grade: Optional[Grade] = None,
    weights: WeightConfig = DEFAULT_WEIGHTS,
) -> ImprovementPotential:
    """Points needed to reach the next grade up; none at the top grade."""
    grade = grade or weights.grade_for(total_score)
    ordered = [t.grade for t in weights.grade_thresholds]  # best first
    index = ordered.index(grade)
    if index == 0:
        return ImprovementPotential(grade=grade)

    next_grade = ordered[index - 1]
    needed = math.ceil(weights.threshold_for(next_grade) - total_score)
    return ImprovementPotential(
        grade=grade,
        next_grade=next_grade,
        points_to_next=max(0, needed),
    )
