"""
Per-factor construction shared by every category scorer.

``ScoringContext`` bundles everything a scorer needs besides its own slice
of page facts: the resolved purchase context, the active multiplier table,
the weight tables and the (optional) image verification result.

``FactorCollector`` implements the per-factor steps once:

  1. raw points   = status fraction × factor weight
  2. contextual   → raw points × context multiplier (1.0 when key is absent)
  3. cap          → min(points, weight × cap_multiple), floor 0
  4. append the ``Factor`` and accumulate
  5. ``finish()`` clamps the category total to [0, 100]

No rounding happens here; the aggregator rounds the final total once.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Mapping, Optional

from visibility_scorer.models.image import ImageVerificationResult
from visibility_scorer.models.score import CategoryScore, Factor
from visibility_scorer.scoring.weights import DEFAULT_WEIGHTS, WeightConfig, resolve_context
from visibility_scorer.taxonomy.scoring_taxonomy import CategoryKey, Context, FactorStatus

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScoringContext:
    """Read-only inputs shared by all scorers for one scoring call."""

    context: Context
    multipliers: Mapping[str, float]
    weights: WeightConfig
    image_verification: Optional[ImageVerificationResult] = None

    @classmethod
    def build(
        cls,
        context: Context | str | None = Context.HYBRID,
        weights: WeightConfig = DEFAULT_WEIGHTS,
        image_verification: Optional[ImageVerificationResult] = None,
    ) -> "ScoringContext":
        resolved = resolve_context(context)
        return cls(
            context=resolved,
            multipliers=weights.multipliers_for(resolved),
            weights=weights,
            image_verification=image_verification,
        )

    def multiplier(self, key: str) -> float:
        return self.multipliers.get(key, 1.0)


class FactorCollector:
    """Accumulates the factors of one category.

    Usage::

        collector = FactorCollector(CategoryKey.STRUCTURED_DATA, "Structured Data", ctx)
        collector.add("product_schema", "Product Schema", FactorStatus.PASS, 1.0, critical=True)
        category_score = collector.finish()
    """

    def __init__(self, category: CategoryKey, category_name: str, ctx: ScoringContext) -> None:
        self.category = category
        self.category_name = category_name
        self.ctx = ctx
        self.factors: list[Factor] = []
        self._raw_total = 0.0

    def weight(self, key: str) -> float:
        return self.ctx.weights.factor_weight(self.category, key)

    def ceiling(self, key: str) -> float:
        return self.weight(key) * self.ctx.weights.cap_multiple(self.category, key)

    def add(
        self,
        key: str,
        name: str,
        status: FactorStatus,
        fraction: float,
        *,
        multiplier_key: Optional[str] = None,
        critical: bool = False,
        details: str = "",
    ) -> Factor:
        """Add a factor scored as ``fraction`` of its weight.

        When ``multiplier_key`` is given the factor is contextual and its raw
        points are scaled by the active context's multiplier for that key.
        """
        raw = fraction * self.weight(key)
        contextual = multiplier_key is not None
        if contextual:
            raw *= self.ctx.multiplier(multiplier_key)
        return self.add_points(
            key, name, status, raw,
            contextual=contextual, critical=critical, details=details,
        )

    def add_points(
        self,
        key: str,
        name: str,
        status: FactorStatus,
        raw_points: float,
        *,
        contextual: bool = False,
        critical: bool = False,
        details: str = "",
    ) -> Factor:
        """Add a factor whose (already multiplied) raw points are known."""
        cap_multiple = self.ctx.weights.cap_multiple(self.category, key)
        max_points = self.weight(key)
        points = max(0.0, min(raw_points, max_points * cap_multiple))

        factor = Factor(
            key=key,
            name=name,
            status=status,
            points=points,
            max_points=max_points,
            cap_multiple=cap_multiple,
            critical=critical,
            contextual=contextual,
            details=details,
        )
        self.factors.append(factor)
        self._raw_total += points
        return factor

    def finish(self) -> CategoryScore:
        """Clamp the accumulated total to [0, 100] and build the category score."""
        score = max(0.0, min(100.0, self._raw_total))
        logger.debug(
            "Category %s: raw=%.2f clamped=%.2f factors=%d",
            self.category, self._raw_total, score, len(self.factors),
        )
        return CategoryScore(
            category=self.category,
            category_name=self.category_name,
            score=score,
            weight=self.ctx.weights.category_weights[self.category],
            factors=list(self.factors),
        )
