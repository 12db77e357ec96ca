"""
og:image format verification over HTTP.

Check order (each step is a separate failure point)::

    1. HEAD            -> Content-Type + Content-Length
    2. GET bytes=0-16  -> magic-byte sniffing (when 1 is inconclusive or failed)
    3. URL extension   -> last resort, never fails

``verify()`` never raises for network errors; a failed request simply falls
through to the next one and its error text is kept on the result.

The result is handed to the scoring engine as a plain value; the engine
itself never performs I/O.
"""

from __future__ import annotations

import logging
import re
from concurrent.futures import ThreadPoolExecutor
from typing import Iterable, Optional

import httpx

from visibility_scorer.config import VerificationConfig
from visibility_scorer.models.image import ImageVerificationResult
from visibility_scorer.taxonomy.scoring_taxonomy import VALID_IMAGE_FORMATS, ImageFormat

logger = logging.getLogger(__name__)

_BYTES_PER_MB = 1024 * 1024
_SNIFF_RANGE = "bytes=0-16"

# Content-Type substring -> format, checked in order.
_CONTENT_TYPES: tuple[tuple[str, ImageFormat], ...] = (
    ("image/jpeg", ImageFormat.JPEG),
    ("image/jpg",  ImageFormat.JPEG),
    ("image/png",  ImageFormat.PNG),
    ("image/gif",  ImageFormat.GIF),
    ("image/webp", ImageFormat.WEBP),
    ("image/avif", ImageFormat.AVIF),
    ("image/svg",  ImageFormat.SVG),
)

_URL_EXTENSIONS: tuple[tuple[re.Pattern[str], ImageFormat], ...] = (
    (re.compile(r"\.jpe?g(\?|$)"), ImageFormat.JPEG),
    (re.compile(r"\.png(\?|$)"),   ImageFormat.PNG),
    (re.compile(r"\.webp(\?|$)"),  ImageFormat.WEBP),
    (re.compile(r"\.gif(\?|$)"),   ImageFormat.GIF),
    (re.compile(r"\.avif(\?|$)"),  ImageFormat.AVIF),
    (re.compile(r"\.svg(\?|$)"),   ImageFormat.SVG),
)


# ── Pure helpers ──────────────────────────────────────────────────────────────


def format_from_content_type(content_type: Optional[str]) -> Optional[ImageFormat]:
    """Map a ``Content-Type`` header to a format; ``None`` when inconclusive."""
    if not content_type:
        return None
    lowered = content_type.lower()
    for needle, fmt in _CONTENT_TYPES:
        if needle in lowered:
            return fmt
    return None


def sniff_magic_bytes(data: bytes) -> Optional[ImageFormat]:
    """Identify an image from its leading bytes; ``None`` when unrecognised.

    Signatures: JPEG ``FF D8 FF``, PNG ``89 50 4E 47``, WebP ``RIFF....WEBP``,
    GIF ``GIF``, AVIF ``....ftypavif``.
    """
    if data[:3] == b"\xff\xd8\xff":
        return ImageFormat.JPEG
    if data[:4] == b"\x89PNG":
        return ImageFormat.PNG
    if data[:4] == b"RIFF" and data[8:12] == b"WEBP":
        return ImageFormat.WEBP
    if data[:3] == b"GIF":
        return ImageFormat.GIF
    if data[4:8] == b"ftyp" and data[8:12] == b"avif":
        return ImageFormat.AVIF
    return None


def format_from_url(url: str) -> ImageFormat:
    """Guess the format from the URL path extension (query string allowed)."""
    lowered = url.lower()
    for pattern, fmt in _URL_EXTENSIONS:
        if pattern.search(lowered):
            return fmt
    return ImageFormat.UNKNOWN


def _result_for(fmt: Optional[ImageFormat], **fields) -> ImageVerificationResult:
    fmt = fmt or ImageFormat.UNKNOWN
    return ImageVerificationResult(
        is_web_p=fmt == ImageFormat.WEBP,
        is_valid_format=fmt in VALID_IMAGE_FORMATS,
        format=fmt.value,
        **fields,
    )


# ── Verifier ──────────────────────────────────────────────────────────────────


class ImageFormatVerifier:
    """Resolves the true format of image URLs over HTTP.

    Usage::

        with ImageFormatVerifier.from_config(config.verification) as verifier:
            result = verifier.verify("https://shop.example/p/123.jpg")

    Args:
        timeout_seconds: Per-request timeout.
        max_image_size_mb: Images at or above this size are flagged invalid.
        user_agent: ``User-Agent`` header sent with every request.
        max_workers: Thread pool size for ``verify_many``.
        client: Optional pre-built ``httpx.Client`` (e.g. with a mock transport).
    """

    def __init__(
        self,
        timeout_seconds: float = 10.0,
        max_image_size_mb: float = 5.0,
        user_agent: str = "visibility-scorer/0.1 (+image-format-check)",
        max_workers: int = 4,
        client: Optional[httpx.Client] = None,
    ) -> None:
        self.max_image_size_mb = max_image_size_mb
        self.max_workers = max_workers
        self._owns_client = client is None
        self.client = client or httpx.Client(
            timeout=timeout_seconds,
            follow_redirects=True,
            headers={"User-Agent": user_agent},
        )

    @classmethod
    def from_config(
        cls,
        config: VerificationConfig,
        client: Optional[httpx.Client] = None,
    ) -> "ImageFormatVerifier":
        return cls(
            timeout_seconds=config.timeout_seconds,
            max_image_size_mb=config.max_image_size_mb,
            user_agent=config.user_agent,
            max_workers=config.max_workers,
            client=client,
        )

    def close(self) -> None:
        if self._owns_client:
            self.client.close()

    def __enter__(self) -> "ImageFormatVerifier":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    # ── Probing ───────────────────────────────────────────────────────────────

    def verify(self, url: str) -> ImageVerificationResult:
        """Resolve the format of one image URL. Never raises for network errors."""
        if not url:
            return ImageVerificationResult(format=None, error="No image URL")

        try:
            resp = self.client.head(url)
        except httpx.HTTPError as exc:
            logger.info("HEAD %s failed (%s); trying byte-range sniff", url, exc)
            return self._fallback(url, error=str(exc) or exc.__class__.__name__)

        if not resp.is_success:
            logger.warning("HEAD %s returned HTTP %d", url, resp.status_code)
            return ImageVerificationResult(
                url=url,
                accessible=False,
                error=f"HTTP {resp.status_code}",
            )

        content_type = resp.headers.get("content-type")
        size_mb = _size_mb(resp.headers.get("content-length"))
        is_size_valid = size_mb is None or size_mb < self.max_image_size_mb
        common = dict(
            url=url,
            accessible=True,
            content_type=content_type,
            size_mb=size_mb,
            is_size_valid=is_size_valid,
        )

        fmt = format_from_content_type(content_type)
        if fmt is not None:
            return _result_for(fmt, method="content_type", **common)

        sniffed = self._sniff(url)
        if sniffed is not None:
            return _result_for(sniffed, method="magic_bytes", **common)

        return _result_for(format_from_url(url), method="url_extension", **common)

    def _fallback(self, url: str, error: str) -> ImageVerificationResult:
        """Byte-range sniff, then URL extension, after a failed HEAD."""
        sniffed = self._sniff(url)
        if sniffed is not None:
            return _result_for(sniffed, url=url, accessible=True, method="magic_bytes")

        return _result_for(
            format_from_url(url),
            url=url,
            accessible=False,
            method="url_extension",
            error=error,
        )

    def _sniff(self, url: str) -> Optional[ImageFormat]:
        try:
            resp = self.client.get(url, headers={"Range": _SNIFF_RANGE})
            resp.raise_for_status()
        except httpx.HTTPError as exc:
            logger.info("Byte-range GET %s failed: %s", url, exc)
            return None
        return sniff_magic_bytes(resp.content[:17])

    def verify_many(self, urls: Iterable[str]) -> list[ImageVerificationResult]:
        """Verify several URLs concurrently; results keep input order."""
        urls = list(urls)
        if not urls:
            return []
        with ThreadPoolExecutor(max_workers=min(self.max_workers, len(urls))) as pool:
            return list(pool.map(self.verify, urls))


def _size_mb(content_length: Optional[str]) -> Optional[float]:
    if not content_length:
        return None
    try:
        return int(content_length) / _BYTES_PER_MB
    except ValueError:
        return None
