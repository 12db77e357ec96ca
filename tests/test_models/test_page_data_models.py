"""Tests for the extracted page data input models."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from visibility_scorer.models.page_data import (
    ExtractedPageData,
    HeadingFacts,
    ImageAltFacts,
)


class TestExtractedPageData:
    def test_camel_case_keys(self, strong_page):
        page = ExtractedPageData.model_validate(strong_page)
        assert page.page_info.domain == "shop.example"
        assert page.structured_data.schemas.aggregate_rating == {"ratingValue": 4.7, "reviewCount": 312}
        assert page.meta_tags.open_graph.type == "product"
        assert page.meta_tags.canonical.matches_current_url is True
        assert page.content_quality.product_details.has_care_instructions is True
        assert page.content_structure.semantic_html.has_main is True
        assert page.trust_signals.social_proof.sold_count == 12000

    def test_snake_case_keys(self):
        page = ExtractedPageData.model_validate(
            {"trust_signals": {"reviews": {"average_rating": 4.2, "has_recent_reviews": True}}}
        )
        assert page.trust_signals.reviews.average_rating == 4.2
        assert page.trust_signals.reviews.has_recent_reviews is True

    def test_empty_input_uses_defaults(self, empty_page):
        page = ExtractedPageData.model_validate(empty_page)
        assert page.structured_data.schemas.product is None
        assert page.content_quality.description.word_count == 0
        assert page.trust_signals.reviews.has_recent_reviews is None

    def test_nulls_fall_back_to_defaults(self):
        page = ExtractedPageData.model_validate(
            {
                "metaTags": None,
                "contentQuality": {"description": {"found": None, "wordCount": None}},
                "trustSignals": {"reviews": {"count": None}},
            }
        )
        assert page.meta_tags.open_graph.image is None
        assert page.content_quality.description.found is False
        assert page.content_quality.description.word_count == 0
        assert page.trust_signals.reviews.count == 0

    def test_unknown_keys_ignored(self):
        page = ExtractedPageData.model_validate(
            {"pageInfo": {"url": "https://x.example", "crawlId": 7}, "performance": {"lcp": 1.2}}
        )
        assert page.page_info.url == "https://x.example"

    def test_brand_may_be_string_or_object(self):
        as_str = ExtractedPageData.model_validate({"structuredData": {"schemas": {"brand": "Acme"}}})
        as_obj = ExtractedPageData.model_validate(
            {"structuredData": {"schemas": {"brand": {"name": "Acme"}}}}
        )
        assert as_str.structured_data.schemas.brand == "Acme"
        assert as_obj.structured_data.schemas.brand == {"name": "Acme"}

    def test_wrong_type_raises(self):
        with pytest.raises(ValidationError):
            ExtractedPageData.model_validate({"trustSignals": {"reviews": {"count": "many"}}})

    def test_text_metrics_keys(self):
        page = ExtractedPageData.model_validate(
            {
                "contentQuality": {
                    "textMetrics": {
                        "totalWords": 640,
                        "totalSentences": 40,
                        "averageWordsPerSentence": 16.0,
                        "readabilityScore": 62.5,
                        "readabilityGrade": "Standard",
                    }
                }
            }
        )
        metrics = page.content_quality.text_metrics
        assert metrics.total_words == 640
        assert metrics.readability_score == 62.5
        assert metrics.readability_grade == "Standard"

    def test_social_proof_collector_keys(self):
        page = ExtractedPageData.model_validate(
            {"trustSignals": {"socialProof": {"testimonials": True, "viewCount": 31}}}
        )
        assert page.trust_signals.social_proof.has_testimonials is True
        assert page.trust_signals.social_proof.view_count == 31

    def test_frozen(self, weak_page):
        page = ExtractedPageData.model_validate(weak_page)
        with pytest.raises(ValidationError):
            page.page_info = None


class TestHeadingFacts:
    def test_level_counts_in_order(self):
        headings = HeadingFacts.model_validate({"h1": {"count": 1}, "h3": {"count": 4}})
        assert headings.level_counts() == [1, 0, 4, 0, 0, 0]


class TestImageAltCoverage:
    def test_prefers_reported_ratio(self):
        facts = ImageAltFacts(alt_coverage=0.4, total_images=10, images_with_alt=10)
        assert facts.coverage() == 0.4

    def test_reported_ratio_clamped(self):
        assert ImageAltFacts(alt_coverage=1.7).coverage() == 1.0

    def test_falls_back_to_counts(self):
        assert ImageAltFacts(total_images=8, images_with_alt=6).coverage() == pytest.approx(0.75)

    def test_no_images(self):
        assert ImageAltFacts().coverage() == 0.0
