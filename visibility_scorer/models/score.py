"""
Score and recommendation output models.

``Factor``        : one evaluated check within a category.
``CategoryScore`` : the factors of one category plus their capped total.
``ScoreResult``   : the complete, serialisable result of one scoring call.
``CategorySummary`` / ``CriticalIssue`` / ``ImprovementPotential``: read-only
views over a result.
``Recommendation``: one prioritised improvement action.

All models are frozen: once a page is scored its result must not change.
Re-scoring the same input yields an equal result except for ``timestamp``.
"""

from __future__ import annotations

from datetime import datetime
from typing import Iterator, Optional

from pydantic import BaseModel, ConfigDict, field_validator, model_validator

from visibility_scorer.taxonomy.scoring_taxonomy import (
    CategoryKey,
    Context,
    Effort,
    FactorStatus,
    Grade,
    Impact,
)

# Float slack for ceiling comparisons (e.g. 0.7 * 10 == 7.000000000000001).
_EPSILON = 1e-9


class Factor(BaseModel):
    """A single scored check.

    ``points`` may exceed ``max_points`` only for overshoot factors, and
    never beyond ``max_points * cap_multiple``.

    Attributes:
        key: Stable snake_case identifier, unique within its category.
        name: Human-readable label.
        status: pass / warning / fail / unknown.
        points: Awarded points after context multiplier and cap.
        max_points: Nominal factor weight.
        cap_multiple: Ceiling multiple of ``max_points`` (1.0 = standard cap).
        critical: Failure is surfaced as a high-impact issue.
        contextual: Points were scaled by the active context multiplier.
        details: Short description of what was observed.
    """

    model_config = ConfigDict(frozen=True)

    key: str
    name: str
    status: FactorStatus
    points: float
    max_points: float
    cap_multiple: float = 1.0
    critical: bool = False
    contextual: bool = False
    details: str = ""

    @field_validator("cap_multiple")
    @classmethod
    def validate_cap_multiple(cls, v: float) -> float:
        if v < 1.0:
            raise ValueError(f"cap_multiple must be >= 1.0, got {v}.")
        return v

    @model_validator(mode="after")
    def validate_points(self) -> "Factor":
        if self.max_points <= 0:
            raise ValueError(f"max_points must be positive, got {self.max_points}.")
        if self.points < 0:
            raise ValueError(f"points must be non-negative, got {self.points}.")
        if self.points > self.ceiling + _EPSILON:
            raise ValueError(
                f"Factor '{self.key}' points ({self.points}) exceed ceiling ({self.ceiling})."
            )
        return self

    @property
    def ceiling(self) -> float:
        """Highest points this factor may carry."""
        return self.max_points * self.cap_multiple

    @property
    def point_gap(self) -> float:
        """Points missing to the nominal weight (0 when met or overshot)."""
        return max(0.0, self.max_points - self.points)


class CategoryScore(BaseModel):
    """Capped total and factor list for one category.

    Attributes:
        category: Category key.
        category_name: Display name.
        score: Sum of factor points, clamped to [0, 100]; unrounded.
        max_score: Always 100.
        weight: Category weight in the total (0–1).
        factors: Factors in evaluation order.
    """

    model_config = ConfigDict(frozen=True)

    category: CategoryKey
    category_name: str
    score: float
    max_score: float = 100.0
    weight: float
    factors: list[Factor]

    @field_validator("score")
    @classmethod
    def validate_score_range(cls, v: float) -> float:
        if not 0.0 <= v <= 100.0:
            raise ValueError(f"Category score must be in [0, 100], got {v}.")
        return v

    @field_validator("weight")
    @classmethod
    def validate_weight_range(cls, v: float) -> float:
        if not 0.0 <= v <= 1.0:
            raise ValueError(f"Category weight must be in [0, 1], got {v}.")
        return v


class ScoreResult(BaseModel):
    """Complete result of scoring one page under one context.

    Attributes:
        total_score: Weighted sum of category scores, rounded once (0–100).
        grade: Letter grade for ``total_score``.
        grade_description: One-line meaning of the grade.
        context: Context the page was scored under.
        category_scores: Category key -> CategoryScore, in evaluation order.
        timestamp: UTC time the result was produced.
    """

    model_config = ConfigDict(frozen=True)

    total_score: int
    grade: Grade
    grade_description: str
    context: Context
    category_scores: dict[CategoryKey, CategoryScore]
    timestamp: datetime

    @field_validator("total_score")
    @classmethod
    def validate_total_range(cls, v: int) -> int:
        if not 0 <= v <= 100:
            raise ValueError(f"total_score must be in [0, 100], got {v}.")
        return v

    def iter_factors(self) -> Iterator[tuple[CategoryScore, Factor]]:
        """Yield ``(CategoryScore, Factor)`` pairs in evaluation order."""
        for category in self.category_scores.values():
            for factor in category.factors:
                yield category, factor


class CategorySummary(BaseModel):
    """Per-category roll-up used to surface the biggest opportunities."""

    model_config = ConfigDict(frozen=True)

    key: CategoryKey
    name: str
    score: float
    weight: float
    weighted_score: float
    pass_count: int
    warning_count: int
    fail_count: int
    total_factors: int


class CriticalIssue(BaseModel):
    """A failed critical factor."""

    model_config = ConfigDict(frozen=True)

    category: str
    factor: str
    details: str
    impact: Impact = Impact.HIGH


class ImprovementPotential(BaseModel):
    """Distance from the current total to the next grade up."""

    model_config = ConfigDict(frozen=True)

    grade: Grade
    next_grade: Optional[Grade] = None
    points_to_next: int = 0

    @property
    def has_room(self) -> bool:
        return self.next_grade is not None

    @property
    def message(self) -> str:
        if self.next_grade is None:
            return "Excellent! You've achieved the highest grade."
        return f"{self.points_to_next} points to reach {self.next_grade} grade"


class Recommendation(BaseModel):
    """A prioritised remediation for one non-passing factor.

    Attributes:
        category: Category display name.
        category_key: Category key.
        factor: Factor display name.
        factor_key: Factor key.
        details: What the scorer observed.
        action: What to change.
        impact: Expected score impact tier.
        effort: Static effort estimate of the remediation.
        point_gap: ``max_points - points`` of the factor (>= 0).
        critical: The factor is flagged critical.
        priority_rank: 1-based position in the ordered list.
    """

    model_config = ConfigDict(frozen=True)

    category: str
    category_key: CategoryKey
    factor: str
    factor_key: str
    details: str
    action: str
    impact: Impact
    effort: Effort
    point_gap: float
    critical: bool = False
    priority_rank: int

    @field_validator("priority_rank")
    @classmethod
    def validate_priority_rank(cls, v: int) -> int:
        if v < 1:
            raise ValueError(f"priority_rank must be >= 1, got {v}.")
        return v

    @field_validator("action")
    @classmethod
    def validate_action_not_empty(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("action must not be empty.")
        return v.strip()
