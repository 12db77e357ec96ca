"""
Image format verification result.

Produced by the image format verifier (network probing) before the engine
runs, and handed to the Protocol & Meta scorer as a plain value.  When no
verification was run the scorer falls back to inspecting the og:image URL.

Only ``is_web_p``, ``is_valid_format`` and ``format`` influence scoring; the
remaining fields are diagnostics surfaced in reports.
"""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

VerificationMethod = Literal["content_type", "magic_bytes", "url_extension"]


class ImageVerificationResult(BaseModel):
    """Resolved format of one image URL.

    Attributes:
        is_web_p: True when the image is WebP (invisible to many LLM chat UIs).
        is_valid_format: True for JPEG / PNG / GIF.
        format: Detected format slug, or ``None`` when unknown.
        url: The checked URL.
        accessible: Whether the image answered an HTTP request.
        content_type: Raw ``Content-Type`` header from the HEAD response.
        size_mb: Size from ``Content-Length``, when reported.
        is_size_valid: False when the image exceeds the configured size limit.
        method: Which check produced the verdict.
        error: Network / HTTP error text for the failed request, if any.
    """

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    is_web_p: bool = Field(default=False, alias="isWebP")
    is_valid_format: bool = False
    format: Optional[str] = None
    url: Optional[str] = None
    accessible: bool = False
    content_type: Optional[str] = None
    size_mb: Optional[float] = None
    is_size_valid: bool = True
    method: Optional[VerificationMethod] = None
    error: Optional[str] = None

    @property
    def is_valid(self) -> bool:
        """Overall fitness for LLM consumers: valid format and acceptable size."""
        return self.is_valid_format and self.is_size_valid
