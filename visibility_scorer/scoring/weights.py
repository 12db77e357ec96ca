"""
Scoring weight configuration: category weights, factor weights, overshoot
caps, context multipliers and grade thresholds.

Tables
------
category_weights    : 5 entries, must sum to exactly 1.0.
factor_weights      : per category, factor key -> max points (positive).
cap_multiples       : per category, factor key -> ceiling multiple (>= 1.0)
                      for the few factors allowed to overshoot their weight.
context_multipliers : want / need / hybrid, identical key sets; hybrid is the
                      all-1.0 identity table.
grade_thresholds    : descending, left-closed intervals covering [0, 100].

Overshoot caps
--------------
A handful of contextual factors may exceed their nominal weight so that
strong context alignment can make up for weak factors elsewhere in the same
category.  The category total is still clamped to 100.  All such factors
are listed in ``cap_multiples``; every other factor is capped at its weight.

Validation happens once, when a ``WeightConfig`` is constructed: at import
time for the built-in defaults, at startup for a TOML override.  A failed
check raises ``pydantic.ValidationError``; it is a programming error, never a
per-page error.
"""

from __future__ import annotations

import logging
import math
import tomllib
from pathlib import Path
from typing import Any, Mapping, Optional

from pydantic import BaseModel, ConfigDict, field_validator, model_validator

from visibility_scorer.config import deep_merge
from visibility_scorer.taxonomy.scoring_taxonomy import CategoryKey, Context, Grade

logger = logging.getLogger(__name__)

# ── Built-in tables ───────────────────────────────────────────────────────────

_DEFAULT_RAW: dict[str, Any] = {
    "category_weights": {
        "structured_data":   0.25,
        "protocol_meta":     0.20,
        "content_quality":   0.25,
        "content_structure": 0.15,
        "authority_trust":   0.15,
    },
    "factor_weights": {
        "structured_data": {
            "product_schema":      30,   # critical
            "offer_schema":        20,   # critical
            "aggregate_rating":    15,
            "review_schema":       10,
            "faq_schema":          10,
            "breadcrumb_schema":    5,
            "organization_schema":  5,
            "image_schema":         5,
        },
        "protocol_meta": {
            "og_image":         20,      # critical
            "og_image_format":  15,      # critical, WebP fails
            "og_title":         10,
            "og_description":   10,
            "og_type":           5,
            "twitter_card":     10,
            "twitter_image":     5,
            "canonical":        10,
            "meta_description": 10,
            "robots_indexing":   5,      # critical when blocked
        },
        "content_quality": {
            "description_length":   15,
            "description_quality":  10,  # contextual
            "specification_count":  10,  # contextual
            "specification_detail":  5,  # contextual
            "feature_count":        10,
            "faq_presence":         10,
            "dimensions":            5,  # need boost
            "materials":             5,
            "care_instructions":     3,
            "warranty_info":         7,  # contextual
            "compatibility_info":   10,  # contextual
            "comparison_content":    5,  # contextual
        },
        "content_structure": {
            "h1_presence":        15,
            "heading_hierarchy":  12,
            "semantic_html":      12,
            "content_ratio":      12,
            "table_structure":    10,
            "list_structure":      8,
            "aria_labels":         6,
            "primary_image_alt":  10,
            "image_alt_coverage":  8,
            "js_dependency":      10,
            "readability":         8,
        },
        "authority_trust": {
            "review_count":   25,        # contextual
            "average_rating": 20,        # contextual
            "review_recency": 15,
            "review_depth":   10,
            "brand_clarity":  15,
            "certifications": 10,        # contextual
            "awards":          5,
            "social_proof":    5,        # contextual
        },
    },
    "cap_multiples": {
        "content_quality": {
            "description_quality": 1.5,
            "specification_count": 1.5,
            "dimensions":          1.3,
            "warranty_info":       1.5,
            "compatibility_info":  2.0,
        },
        "authority_trust": {
            "review_count":   1.5,
            "average_rating": 1.5,
            "certifications": 1.6,
            "social_proof":   1.4,
        },
    },
    "context_multipliers": {
        "want": {
            "emotional_benefit_copy":   1.5,
            "technical_specifications": 0.6,
            "compatibility_info":       0.4,
            "social_proof":             1.4,
            "certifications":           0.5,
            "review_count":             1.4,
            "review_rating":            1.3,
            "benefit_statements":       1.5,
            "warranty_info":            0.7,
            "comparison_content":       0.6,
        },
        "need": {
            "emotional_benefit_copy":   0.5,
            "technical_specifications": 1.5,
            "compatibility_info":       2.0,
            "social_proof":             0.8,
            "certifications":           1.6,
            "review_count":             0.8,
            "review_rating":            1.0,
            "benefit_statements":       0.5,
            "warranty_info":            1.4,
            "comparison_content":       1.4,
        },
        "hybrid": {
            "emotional_benefit_copy":   1.0,
            "technical_specifications": 1.0,
            "compatibility_info":       1.0,
            "social_proof":             1.0,
            "certifications":           1.0,
            "review_count":             1.0,
            "review_rating":            1.0,
            "benefit_statements":       1.0,
            "warranty_info":            1.0,
            "comparison_content":       1.0,
        },
    },
    "grade_thresholds": [
        {"grade": "A", "min_score": 90},
        {"grade": "B", "min_score": 80},
        {"grade": "C", "min_score": 70},
        {"grade": "D", "min_score": 60},
        {"grade": "F", "min_score": 0},
    ],
    "grade_descriptions": {
        "A": "Excellent LLM visibility; minor optimizations possible",
        "B": "Good foundation; specific gaps to address",
        "C": "Average visibility; significant opportunities",
        "D": "Below average; multiple critical issues",
        "F": "Poor visibility; fundamental changes needed",
    },
    "need_dimension_boost": 1.3,
}


# ── Models ────────────────────────────────────────────────────────────────────


class GradeThreshold(BaseModel):
    """Lower bound (inclusive) of one grade band."""

    model_config = ConfigDict(frozen=True)

    grade: Grade
    min_score: float


class WeightConfig(BaseModel):
    """Validated, immutable scoring weight tables.

    Attributes:
        category_weights: Category key -> weight in the total (sum 1.0).
        factor_weights: Category key -> factor key -> max points.
        cap_multiples: Category key -> factor key -> overshoot ceiling multiple.
        context_multipliers: Context -> multiplier key -> multiplier.
        grade_thresholds: Descending grade bands.
        grade_descriptions: Grade -> one-line meaning.
        need_dimension_boost: Extra multiplier for the dimensions factor under
            the ``need`` context, layered on the generic multiplier table.
    """

    model_config = ConfigDict(frozen=True)

    category_weights: dict[CategoryKey, float]
    factor_weights: dict[CategoryKey, dict[str, float]]
    cap_multiples: dict[CategoryKey, dict[str, float]] = {}
    context_multipliers: dict[Context, dict[str, float]]
    grade_thresholds: list[GradeThreshold]
    grade_descriptions: dict[Grade, str]
    need_dimension_boost: float = 1.3

    @field_validator("category_weights")
    @classmethod
    def validate_category_weights(cls, v: dict[CategoryKey, float]) -> dict[CategoryKey, float]:
        missing = set(CategoryKey) - set(v)
        if missing:
            raise ValueError(f"category_weights missing categories: {sorted(missing)}.")
        for key, weight in v.items():
            if not 0.0 < weight <= 1.0:
                raise ValueError(f"Category weight for '{key}' must be in (0, 1], got {weight}.")
        total = sum(v.values())
        if not math.isclose(total, 1.0, abs_tol=1e-9):
            raise ValueError(f"category_weights must sum to 1.0, got {total}.")
        return v

    @field_validator("factor_weights")
    @classmethod
    def validate_factor_weights(
        cls, v: dict[CategoryKey, dict[str, float]]
    ) -> dict[CategoryKey, dict[str, float]]:
        missing = set(CategoryKey) - set(v)
        if missing:
            raise ValueError(f"factor_weights missing categories: {sorted(missing)}.")
        for category, factors in v.items():
            if not factors:
                raise ValueError(f"factor_weights['{category}'] must not be empty.")
            for key, weight in factors.items():
                if weight <= 0:
                    raise ValueError(
                        f"Factor weight '{category}.{key}' must be positive, got {weight}."
                    )
        return v

    @field_validator("context_multipliers")
    @classmethod
    def validate_context_multipliers(
        cls, v: dict[Context, dict[str, float]]
    ) -> dict[Context, dict[str, float]]:
        missing = set(Context) - set(v)
        if missing:
            raise ValueError(f"context_multipliers missing contexts: {sorted(missing)}.")
        reference = set(v[Context.HYBRID])
        for context, table in v.items():
            if set(table) != reference:
                raise ValueError(
                    f"Multiplier keys for '{context}' differ from 'hybrid': "
                    f"{sorted(set(table) ^ reference)}."
                )
            for key, mult in table.items():
                if mult <= 0:
                    raise ValueError(f"Multiplier '{context}.{key}' must be positive, got {mult}.")
        not_identity = {k: m for k, m in v[Context.HYBRID].items() if m != 1.0}
        if not_identity:
            raise ValueError(f"'hybrid' multipliers must all be 1.0, got {not_identity}.")
        return v

    @field_validator("grade_thresholds")
    @classmethod
    def validate_grade_thresholds(cls, v: list[GradeThreshold]) -> list[GradeThreshold]:
        grades = [t.grade for t in v]
        if len(grades) != len(set(grades)) or set(grades) != set(Grade):
            raise ValueError(f"grade_thresholds must list each grade exactly once, got {grades}.")
        scores = [t.min_score for t in v]
        if any(a <= b for a, b in zip(scores, scores[1:])):
            raise ValueError(f"grade_thresholds must be strictly descending, got {scores}.")
        if scores[0] > 100:
            raise ValueError(f"Highest grade threshold must be <= 100, got {scores[0]}.")
        if scores[-1] != 0:
            raise ValueError(f"Lowest grade threshold must be 0, got {scores[-1]}.")
        return v

    @field_validator("grade_descriptions")
    @classmethod
    def validate_grade_descriptions(cls, v: dict[Grade, str]) -> dict[Grade, str]:
        missing = set(Grade) - set(v)
        if missing:
            raise ValueError(f"grade_descriptions missing grades: {sorted(missing)}.")
        return v

    @field_validator("need_dimension_boost")
    @classmethod
    def validate_boost(cls, v: float) -> float:
        if v <= 0:
            raise ValueError(f"need_dimension_boost must be positive, got {v}.")
        return v

    @model_validator(mode="after")
    def validate_cap_multiples(self) -> "WeightConfig":
        for category, caps in self.cap_multiples.items():
            known = self.factor_weights.get(category, {})
            for key, cap in caps.items():
                if key not in known:
                    raise ValueError(f"cap_multiples entry '{category}.{key}' has no factor weight.")
                if cap < 1.0:
                    raise ValueError(f"cap_multiples '{category}.{key}' must be >= 1.0, got {cap}.")
        return self

    # ── Lookups ───────────────────────────────────────────────────────────────

    def multipliers_for(self, context: Context | str | None) -> Mapping[str, float]:
        """Multiplier table for ``context``; ``hybrid`` for unrecognised values."""
        return self.context_multipliers[resolve_context(context)]

    def factor_weight(self, category: CategoryKey, key: str) -> float:
        return self.factor_weights[category][key]

    def cap_multiple(self, category: CategoryKey, key: str) -> float:
        return self.cap_multiples.get(category, {}).get(key, 1.0)

    def grade_for(self, score: float) -> Grade:
        """Strict descending-threshold scan."""
        for threshold in self.grade_thresholds:
            if score >= threshold.min_score:
                return threshold.grade
        return self.grade_thresholds[-1].grade

    def describe(self, grade: Grade) -> str:
        return self.grade_descriptions[grade]

    def threshold_for(self, grade: Grade) -> float:
        for threshold in self.grade_thresholds:
            if threshold.grade == grade:
                return threshold.min_score
        raise KeyError(grade)


# ── Context resolution ────────────────────────────────────────────────────────


def resolve_context(value: Context | str | None) -> Context:
    """Map a caller-supplied context selector to a ``Context``.

    Unrecognised or empty values silently resolve to ``Context.HYBRID``.
    """
    if isinstance(value, Context):
        return value
    try:
        return Context(str(value).strip().lower())
    except ValueError:
        logger.debug("Unrecognised context %r; falling back to 'hybrid'.", value)
        return Context.HYBRID


# ── Loader ────────────────────────────────────────────────────────────────────


def load_weights(weights_path: Optional[Path] = None) -> WeightConfig:
    """Build a validated ``WeightConfig``.

    Args:
        weights_path: Optional TOML file whose tables are deep-merged over the
            built-in defaults (e.g. to retune a single factor weight).

    Returns:
        Validated ``WeightConfig``. ``DEFAULT_WEIGHTS`` when no path is given.

    Raises:
        FileNotFoundError: If ``weights_path`` does not exist.
        pydantic.ValidationError: If the merged tables violate an invariant.
    """
    if weights_path is None:
        return DEFAULT_WEIGHTS

    weights_path = Path(weights_path)
    if not weights_path.exists():
        raise FileNotFoundError(f"Weights file not found: {weights_path}")

    with open(weights_path, "rb") as f:
        override: dict[str, Any] = tomllib.load(f)

    merged = deep_merge(_DEFAULT_RAW, override)
    weights = WeightConfig.model_validate(merged)
    logger.info("Loaded weight overrides from %s", weights_path)
    return weights


DEFAULT_WEIGHTS: WeightConfig = WeightConfig.model_validate(_DEFAULT_RAW)
