"""
Scoring curves: map raw counts and measurements to a 0–100 sub-score.

Every curve is a piecewise-linear interpolation between fixed anchor
points, except the rating curve, which is a step function.  Values beyond
the last anchor saturate at that anchor's score; some curves additionally
jump to 100 at their last anchor (``saturate_at``), matching how a page
that clearly clears the bar is treated as "complete".

All functions are pure and return a float in [0, 100].
"""

from __future__ import annotations

from typing import Optional, Sequence

Anchor = tuple[float, float]

# ── Anchor tables ─────────────────────────────────────────────────────────────

DESCRIPTION_WORDS_CURVE: tuple[Anchor, ...] = ((0, 0), (100, 50), (200, 80), (400, 100))
REVIEW_COUNT_CURVE: tuple[Anchor, ...]      = ((0, 0), (10, 25), (50, 60), (200, 85))
REVIEW_DEPTH_CURVE: tuple[Anchor, ...]      = ((0, 0), (50, 40), (100, 70), (200, 100))
SPEC_COUNT_CURVE: tuple[Anchor, ...]        = ((0, 0), (5, 25), (10, 50), (20, 80))
FEATURE_COUNT_CURVE: tuple[Anchor, ...]     = ((0, 0), (3, 25), (5, 50), (10, 80))
FAQ_COUNT_CURVE: tuple[Anchor, ...]         = ((0, 0), (3, 50), (5, 75))

# (upper bound exclusive, score); first matching band wins.
RATING_BANDS: tuple[Anchor, ...] = ((3.0, 25), (3.5, 50), (4.0, 75), (4.5, 90))


def piecewise_linear(
    value: float,
    anchors: Sequence[Anchor],
    saturate_at: Optional[float] = None,
) -> float:
    """Interpolate ``value`` over ascending ``anchors``.

    Args:
        value: Raw measurement (negative values are treated as 0).
        anchors: Ascending ``(x, score)`` pairs; first must be ``(0, 0)``.
        saturate_at: When set, any ``value >= saturate_at`` scores 100.

    Returns:
        Score in [0, 100].
    """
    value = max(0.0, float(value))
    if saturate_at is not None and value >= saturate_at:
        return 100.0

    for (x0, y0), (x1, y1) in zip(anchors, anchors[1:]):
        if value <= x1:
            return y0 + (value - x0) / (x1 - x0) * (y1 - y0)

    return float(anchors[-1][1])


def description_length_score(word_count: int) -> float:
    """0→0, 100→50, 200→80, 400→100; longer descriptions stay at 100."""
    return piecewise_linear(word_count, DESCRIPTION_WORDS_CURVE)


def review_count_score(count: int) -> float:
    """0→0, 10→25, 50→60, 200→85; 200+ reviews score 100."""
    return piecewise_linear(count, REVIEW_COUNT_CURVE, saturate_at=200)


def review_depth_score(avg_length: float) -> float:
    """Average review length in characters: 0→0, 50→40, 100→70, 200→100."""
    return piecewise_linear(avg_length, REVIEW_DEPTH_CURVE)


def spec_count_score(count: int) -> float:
    return piecewise_linear(count, SPEC_COUNT_CURVE, saturate_at=20)


def feature_count_score(count: int) -> float:
    return piecewise_linear(count, FEATURE_COUNT_CURVE, saturate_at=10)


def faq_count_score(count: int) -> float:
    return piecewise_linear(count, FAQ_COUNT_CURVE, saturate_at=5)


def rating_score(rating: Optional[float]) -> float:
    """Step function over the average star rating (0–5).

    Missing or zero rating → 0; <3 → 25; <3.5 → 50; <4 → 75; <4.5 → 90;
    otherwise 100.
    """
    if not rating or rating <= 0:
        return 0.0
    for upper, score in RATING_BANDS:
        if rating < upper:
            return float(score)
    return 100.0


def clamp_subscore(value: Optional[float]) -> float:
    """Clamp a collector-supplied sub-score to [0, 100]; ``None`` → 0."""
    if value is None:
        return 0.0
    return max(0.0, min(100.0, float(value)))
