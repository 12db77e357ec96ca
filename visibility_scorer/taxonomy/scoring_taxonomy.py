"""
Scoring taxonomy for product page visibility audits.

Every score result is described along a handful of closed vocabularies:
  - ``Context``      : the purchase-intent mode the page is judged under.
  - ``CategoryKey``  : the five top-level scoring groups.
  - ``FactorStatus`` : the outcome of a single check.
  - ``Grade``        : the letter grade derived from the total score.
  - ``Impact`` / ``Effort``: recommendation tiers.
  - ``ImageFormat``  : image formats the verifier can tell apart.

Usage example::

    from visibility_scorer.taxonomy.scoring_taxonomy import Context, Grade

    context = Context.NEED
    grade   = Grade.B

This module has NO imports from any other ``visibility_scorer`` package.
"""

from enum import StrEnum


class Context(StrEnum):
    """Purchase-intent mode; selects the active context multiplier table."""

    WANT = "want"
    """Emotional, lifestyle-driven purchase; social proof and copy weigh more."""

    NEED = "need"
    """Functional, specification-driven purchase; specs and compatibility weigh more."""

    HYBRID = "hybrid"
    """Balanced consideration; the identity multiplier table."""


class CategoryKey(StrEnum):
    """The five scoring categories, in evaluation order."""

    STRUCTURED_DATA   = "structured_data"
    PROTOCOL_META     = "protocol_meta"
    CONTENT_QUALITY   = "content_quality"
    CONTENT_STRUCTURE = "content_structure"
    AUTHORITY_TRUST   = "authority_trust"


class FactorStatus(StrEnum):
    """Outcome of one factor check."""

    PASS    = "pass"
    WARNING = "warning"
    FAIL    = "fail"
    UNKNOWN = "unknown"
    """Not enough information to decide (e.g. image format pending verification)."""


class Grade(StrEnum):
    """Letter grade, a pure function of the total score."""

    A = "A"
    B = "B"
    C = "C"
    D = "D"
    F = "F"


class Impact(StrEnum):
    """Expected score impact of acting on a recommendation."""

    HIGH   = "high"
    MEDIUM = "medium"
    LOW    = "low"


class Effort(StrEnum):
    """Static effort estimate attached to a remediation rule."""

    LOW    = "low"
    MEDIUM = "medium"
    HIGH   = "high"


class ImageFormat(StrEnum):
    """Image formats distinguished by the verifier."""

    JPEG    = "jpeg"
    PNG     = "png"
    GIF     = "gif"
    WEBP    = "webp"
    AVIF    = "avif"
    SVG     = "svg"
    UNKNOWN = "unknown"


# Raster formats downstream LLM consumers render reliably.
VALID_IMAGE_FORMATS: frozenset[ImageFormat] = frozenset({
    ImageFormat.JPEG, ImageFormat.PNG, ImageFormat.GIF,
})

# Rank order used when sorting recommendations (lower = more urgent).
IMPACT_ORDER: dict[Impact, int] = {
    Impact.HIGH:   0,
    Impact.MEDIUM: 1,
    Impact.LOW:    2,
}
