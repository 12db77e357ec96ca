"""
Recommendation ranker: converts a ``ScoreResult`` into an ordered list of
``Recommendation`` records.

Usage flow
----------
1. collect_candidates(result)      -> list[Candidate]   (warning / fail factors)
2. classify_impact(factor, config) -> Impact            (critical flag + point gap)
3. build_recommendations(result)   -> list[Recommendation], ranked

Ordering
--------
  1. impact        high > medium > low
  2. point gap     descending
  3. evaluation    category order, then factor order within the category
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from visibility_scorer.config import RecommendationConfig
from visibility_scorer.models.score import CategoryScore, Factor, Recommendation, ScoreResult
from visibility_scorer.recommendations.rules import rule_for
from visibility_scorer.taxonomy.scoring_taxonomy import IMPACT_ORDER, FactorStatus, Impact

logger = logging.getLogger(__name__)

# Statuses that produce a recommendation; ``unknown`` is pending, not failing.
_ACTIONABLE = frozenset({FactorStatus.WARNING, FactorStatus.FAIL})


@dataclass
class Candidate:
    """A non-passing factor awaiting ranking.

    Attributes:
        category: The factor's category score.
        factor:   The factor itself.
        position: Evaluation index across the whole result.
        impact:   Impact tier.
    """

    category: CategoryScore
    factor:   Factor
    position: int
    impact:   Impact


def classify_impact(
    factor: Factor,
    config: RecommendationConfig = RecommendationConfig(),
) -> Impact:
    """Impact tier from the critical flag and point gap.

    high  : critical and failed, or gap >= ``high_gap_threshold``
    medium: critical, or gap >= ``medium_gap_threshold``
    low   : everything else
    """
    gap = factor.point_gap
    if (factor.critical and factor.status == FactorStatus.FAIL) or gap >= config.high_gap_threshold:
        return Impact.HIGH
    if factor.critical or gap >= config.medium_gap_threshold:
        return Impact.MEDIUM
    return Impact.LOW


def collect_candidates(
    result: ScoreResult,
    config: RecommendationConfig = RecommendationConfig(),
) -> list[Candidate]:
    """Every warning / fail factor in evaluation order."""
    candidates: list[Candidate] = []
    for position, (category, factor) in enumerate(result.iter_factors()):
        if factor.status not in _ACTIONABLE:
            continue
        candidates.append(
            Candidate(
                category=category,
                factor=factor,
                position=position,
                impact=classify_impact(factor, config),
            )
        )
    return candidates


def build_recommendations(
    result: ScoreResult,
    config: RecommendationConfig = RecommendationConfig(),
    max_items: Optional[int] = None,
) -> list[Recommendation]:
    """Rank remediation actions for every non-passing factor.

    Args:
        result: A scored page.
        config: Impact thresholds and default list length.
        max_items: Truncate after ranking; overrides ``config.max_items``.

    Returns:
        Recommendations with 1-based ``priority_rank``, most urgent first.
    """
    candidates = collect_candidates(result, config)
    ranked = sorted(
        candidates,
        key=lambda c: (IMPACT_ORDER[c.impact], -c.factor.point_gap, c.position),
    )

    limit = max_items if max_items is not None else config.max_items
    if limit is not None:
        ranked = ranked[:limit]

    recommendations = []
    for rank, cand in enumerate(ranked, start=1):
        rule = rule_for(cand.category.category, cand.factor.key, cand.factor.name)
        recommendations.append(
            Recommendation(
                category=cand.category.category_name,
                category_key=cand.category.category,
                factor=cand.factor.name,
                factor_key=cand.factor.key,
                details=cand.factor.details,
                action=rule.action,
                impact=cand.impact,
                effort=rule.effort,
                point_gap=cand.factor.point_gap,
                critical=cand.factor.critical,
                priority_rank=rank,
            )
        )

    logger.debug(
        "Recommendations: %d candidates, %d returned", len(candidates), len(recommendations)
    )
    return recommendations


def count_by_impact(recommendations: list[Recommendation]) -> dict[Impact, int]:
    """Recommendation counts per impact tier (every tier present, possibly 0)."""
    counts = {impact: 0 for impact in Impact}
    for rec in recommendations:
        counts[rec.impact] += 1
    return counts
