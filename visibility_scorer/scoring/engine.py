"""
Scoring engine entry point.

Usage::

    from visibility_scorer.scoring.engine import ScoringEngine

    engine = ScoringEngine(context="need")
    result = engine.score(page_data, image_verification=None)
    print(result.total_score, result.grade)

The engine is pure and synchronous: it performs no I/O and holds no
mutable state, so one instance may score any number of pages.  Image
verification (network probing) must finish before ``score`` is called; its
result is passed in as a plain value.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

from visibility_scorer.models.image import ImageVerificationResult
from visibility_scorer.models.page_data import ExtractedPageData
from visibility_scorer.models.score import ScoreResult
from visibility_scorer.scoring.aggregation import aggregate
from visibility_scorer.scoring.factors import ScoringContext
from visibility_scorer.scoring.scorers import CATEGORY_SCORERS
from visibility_scorer.scoring.weights import DEFAULT_WEIGHTS, WeightConfig, resolve_context
from visibility_scorer.taxonomy.scoring_taxonomy import Context

logger = logging.getLogger(__name__)


class ScoringEngine:
    """Scores extracted page facts under one purchase context.

    Attributes:
        context: Resolved context (unrecognised values become ``hybrid``).
        weights: Weight tables injected into every scorer.
    """

    def __init__(
        self,
        context: Context | str | None = Context.HYBRID,
        weights: WeightConfig = DEFAULT_WEIGHTS,
    ) -> None:
        self.context = resolve_context(context)
        self.weights = weights

    def score(
        self,
        page: ExtractedPageData | Mapping[str, Any],
        image_verification: Optional[ImageVerificationResult | Mapping[str, Any]] = None,
    ) -> ScoreResult:
        """Run every category scorer, then aggregate.

        Args:
            page: Extracted page facts, as a model or the collector's raw dict.
            image_verification: Resolved og:image format, if verification ran.

        Returns:
            Frozen ``ScoreResult``.
        """
        if not isinstance(page, ExtractedPageData):
            page = ExtractedPageData.model_validate(page)
        if image_verification is not None and not isinstance(
            image_verification, ImageVerificationResult
        ):
            image_verification = ImageVerificationResult.model_validate(image_verification)

        ctx = ScoringContext.build(self.context, self.weights, image_verification)
        category_scores = {
            scorer.key: scorer.score(page, ctx) for scorer in CATEGORY_SCORERS
        }
        return aggregate(category_scores, self.context, self.weights)


def score_page(
    page: ExtractedPageData | Mapping[str, Any],
    context: Context | str | None = Context.HYBRID,
    image_verification: Optional[ImageVerificationResult | Mapping[str, Any]] = None,
    weights: WeightConfig = DEFAULT_WEIGHTS,
) -> ScoreResult:
    """One-shot convenience wrapper around ``ScoringEngine.score``."""
    return ScoringEngine(context, weights).score(page, image_verification)
