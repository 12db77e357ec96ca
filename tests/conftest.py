"""
Shared pytest fixtures for the Visibility Scorer test suite.

Provides:
  - ``in_memory_db``: A fresh in-memory SQLite connection with the schema
    applied. Created anew for each test that requests it.
  - ``strong_page``: collector JSON (camelCase) for a page that passes every
    check under the ``hybrid`` context.
  - ``empty_page``: the worst-case page, ``{}``.
  - ``weak_page``: no schema markup, JPEG og:image, 150-word description and
    no reviews.
"""

from __future__ import annotations

import copy
import sqlite3
from typing import Any, Generator

import pytest

from visibility_scorer.db.schema import apply_schema

# 155 characters; inside both the og:description and meta description bands.
DESCRIPTION_155 = "Durable stainless steel widget " * 5


# ── Database fixture ──────────────────────────────────────────────────────────

@pytest.fixture
def in_memory_db() -> Generator[sqlite3.Connection, None, None]:
    """Yield a fresh in-memory SQLite connection with the schema applied."""
    conn = sqlite3.connect(":memory:")
    conn.row_factory = sqlite3.Row
    apply_schema(conn)
    yield conn
    conn.close()


# ── Page fixtures ─────────────────────────────────────────────────────────────

_STRONG_PAGE: dict[str, Any] = {
    "pageInfo": {
        "url": "https://shop.example/p/acme-widget-pro",
        "title": "Acme Widget Pro | Acme",
        "domain": "shop.example",
    },
    "structuredData": {
        "schemas": {
            "product": {"name": "Acme Widget Pro"},
            "offer": {"price": "49.99", "priceCurrency": "USD"},
            "aggregateRating": {"ratingValue": 4.7, "reviewCount": 312},
            "reviews": [{"author": "Sam"}, {"author": "Alex"}],
            "faq": {"questionCount": 6},
            "breadcrumb": {"itemListElement": []},
            "organization": {"name": "Acme"},
            "brand": "Acme",
            "images": ["https://shop.example/img/widget.jpg"],
        }
    },
    "metaTags": {
        "openGraph": {
            "title": "Acme Widget Pro",
            "type": "product",
            "description": DESCRIPTION_155,
            "image": "https://shop.example/img/widget.jpg",
        },
        "twitterCards": {
            "card": "summary_large_image",
            "image": "https://shop.example/img/widget.jpg",
        },
        "standard": {"title": "Acme Widget Pro", "description": DESCRIPTION_155},
        "canonical": {
            "url": "https://shop.example/p/acme-widget-pro",
            "present": True,
            "matchesCurrentUrl": True,
        },
        "robots": {"content": "index, follow", "noindex": False, "nofollow": False},
    },
    "contentQuality": {
        "description": {
            "found": True,
            "wordCount": 450,
            "hasEmotionalLanguage": True,
            "hasBenefitStatements": True,
            "hasTechnicalTerms": True,
        },
        "specifications": {"count": 24, "detailScore": 100},
        "features": {"count": 12},
        "faq": {"count": 6},
        "productDetails": {
            "hasDimensions": True,
            "hasMaterials": True,
            "hasCareInstructions": True,
            "hasWarranty": True,
            "hasCompatibility": True,
            "hasComparison": True,
        },
    },
    "contentStructure": {
        "headings": {
            "h1": {"count": 1},
            "h2": {"count": 4},
            "h3": {"count": 6},
        },
        "semanticHTML": {"hasMain": True, "hasArticle": True, "score": 100},
        "contentRatio": {"mainContentFound": True, "ratio": 0.65, "score": 100},
        "tables": {"tableCount": 1, "hasProperTables": True, "score": 100},
        "lists": {"hasProperLists": True, "score": 100},
        "accessibility": {"ariaLabels": 14},
        "images": {
            "primaryImage": {"hasAlt": True},
            "altCoverage": 1.0,
            "totalImages": 8,
            "imagesWithAlt": 8,
        },
        "jsDependency": {"dependencyLevel": "low", "score": 100},
        "readability": {"score": 100},
    },
    "trustSignals": {
        "reviews": {
            "count": 312,
            "averageRating": 4.7,
            "hasRecentReviews": True,
            "averageReviewLength": 240,
        },
        "brand": {"name": "Acme", "inH1": True, "inTitle": True},
        "certifications": {"count": 2, "items": ["UL", "CE"], "score": 100},
        "awards": {"count": 1, "items": ["Red Dot 2025"]},
        "socialProof": {"soldCount": 12000, "customerCount": 8000, "hasTestimonials": True},
    },
}

_WEAK_PAGE: dict[str, Any] = {
    "pageInfo": {"url": "https://shop.example/p/plain", "domain": "shop.example"},
    "structuredData": {"schemas": {}},
    "metaTags": {
        "openGraph": {"title": "Plain Item", "image": "https://shop.example/img/plain.jpg"},
    },
    "contentQuality": {"description": {"found": True, "wordCount": 150}},
    "trustSignals": {"reviews": {"count": 0}},
}


@pytest.fixture
def strong_page() -> dict[str, Any]:
    """A page that passes every check under ``hybrid`` (fresh copy per test)."""
    return copy.deepcopy(_STRONG_PAGE)


@pytest.fixture
def weak_page() -> dict[str, Any]:
    """No schemas, JPEG og:image, 150-word description, no reviews."""
    return copy.deepcopy(_WEAK_PAGE)


@pytest.fixture
def empty_page() -> dict[str, Any]:
    """Worst case: every section absent."""
    return {}
