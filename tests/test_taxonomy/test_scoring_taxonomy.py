"""Tests for the scoring taxonomy enums and lookup tables."""

from __future__ import annotations

import pytest

from visibility_scorer.taxonomy.scoring_taxonomy import (
    IMPACT_ORDER,
    VALID_IMAGE_FORMATS,
    CategoryKey,
    Context,
    Grade,
    ImageFormat,
    Impact,
)


class TestContext:
    def test_values(self):
        assert {c.value for c in Context} == {"want", "need", "hybrid"}

    def test_from_string(self):
        assert Context("need") is Context.NEED

    def test_invalid_raises(self):
        with pytest.raises(ValueError):
            Context("impulse")


class TestCategoryKey:
    def test_evaluation_order(self):
        assert [c.value for c in CategoryKey] == [
            "structured_data",
            "protocol_meta",
            "content_quality",
            "content_structure",
            "authority_trust",
        ]


class TestGrade:
    def test_best_first(self):
        assert [g.value for g in Grade] == ["A", "B", "C", "D", "F"]

    def test_str_is_value(self):
        assert f"{Grade.B}" == "B"


class TestImageFormats:
    def test_webp_and_avif_not_valid(self):
        assert ImageFormat.WEBP not in VALID_IMAGE_FORMATS
        assert ImageFormat.AVIF not in VALID_IMAGE_FORMATS
        assert ImageFormat.UNKNOWN not in VALID_IMAGE_FORMATS

    def test_safe_raster_formats(self):
        assert VALID_IMAGE_FORMATS == {ImageFormat.JPEG, ImageFormat.PNG, ImageFormat.GIF}


class TestImpactOrder:
    def test_covers_every_tier(self):
        assert set(IMPACT_ORDER) == set(Impact)

    def test_high_sorts_first(self):
        assert sorted(Impact, key=IMPACT_ORDER.__getitem__) == [Impact.HIGH, Impact.MEDIUM, Impact.LOW]
