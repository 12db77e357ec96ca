"""
Extracted page data: the read-only input record of the scoring engine.

The page-fact collector inspects a live product page and emits one JSON
document with five sections (plus page info)::

    {
      "pageInfo":         {...},
      "structuredData":   {...},   # schema.org markup facts
      "metaTags":         {...},   # protocol / meta facts
      "contentQuality":   {...},   # description, specs, features, FAQ
      "contentStructure": {...},   # headings, semantics, accessibility
      "trustSignals":     {...}    # reviews, brand, certifications
    }

Design rules
------------
- Keys are accepted in the collector's camelCase or in snake_case.
- Unknown keys are ignored; the collector may send more than we score.
- ``null`` values are dropped before validation so the field default
  ("feature absent") applies.  A partially failed collector therefore
  degrades the score instead of failing validation.
- Every model is frozen: the engine never mutates its input.

Sub-scores (``score``, ``detail_score`` ...) are the collector's own 0–100
ratings; scorers clamp them to that range when reading.
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel


class FactsModel(BaseModel):
    """Base for all collector-facing models."""

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    @model_validator(mode="before")
    @classmethod
    def drop_nulls(cls, data: Any) -> Any:
        if isinstance(data, dict):
            return {k: v for k, v in data.items() if v is not None}
        return data


# ── Page info ─────────────────────────────────────────────────────────────────


class PageInfo(FactsModel):
    """Identity of the audited page; not scored."""

    url: Optional[str] = None
    title: Optional[str] = None
    domain: Optional[str] = None


# ── Structured data ───────────────────────────────────────────────────────────


class FaqSchemaFacts(FactsModel):
    question_count: int = 0


class SchemaFacts(FactsModel):
    """schema.org entities found in JSON-LD or microdata.

    Entity payloads are kept as opaque dicts; only their presence (and a
    few display fields) matter for scoring.
    """

    product: Optional[dict[str, Any]] = None
    offer: Optional[dict[str, Any]] = None
    aggregate_rating: Optional[dict[str, Any]] = None
    reviews: list[dict[str, Any]] = []
    faq: Optional[FaqSchemaFacts] = None
    breadcrumb: Optional[dict[str, Any]] = None
    organization: Optional[dict[str, Any]] = None
    brand: Optional[dict[str, Any] | str] = None
    images: list[Any] = []


class StructuredDataFacts(FactsModel):
    schemas: SchemaFacts = SchemaFacts()


# ── Protocol & meta ───────────────────────────────────────────────────────────


class OpenGraphFacts(FactsModel):
    title: Optional[str] = None
    type: Optional[str] = None
    description: Optional[str] = None
    image: Optional[str] = None


class TwitterCardFacts(FactsModel):
    card: Optional[str] = None
    image: Optional[str] = None


class StandardMetaFacts(FactsModel):
    title: Optional[str] = None
    description: Optional[str] = None


class CanonicalFacts(FactsModel):
    url: Optional[str] = None
    present: bool = False
    matches_current_url: Optional[bool] = None


class RobotsFacts(FactsModel):
    content: Optional[str] = None
    noindex: bool = False
    nofollow: bool = False
    is_blocked: bool = False


class ProtocolMetaFacts(FactsModel):
    open_graph: OpenGraphFacts = OpenGraphFacts()
    twitter_cards: TwitterCardFacts = TwitterCardFacts()
    standard: StandardMetaFacts = StandardMetaFacts()
    canonical: CanonicalFacts = CanonicalFacts()
    robots: RobotsFacts = RobotsFacts()


# ── Content quality ───────────────────────────────────────────────────────────


class DescriptionFacts(FactsModel):
    found: bool = False
    word_count: int = 0
    has_emotional_language: bool = False
    has_benefit_statements: bool = False
    has_technical_terms: bool = False


class SpecificationFacts(FactsModel):
    count: int = 0
    detail_score: Optional[float] = None


class FeatureFacts(FactsModel):
    count: int = 0


class FaqFacts(FactsModel):
    count: int = 0


class TextMetricsFacts(FactsModel):
    """Whole-page text statistics; ``readability_score`` is 0-100."""

    total_words: int = 0
    total_sentences: int = 0
    average_words_per_sentence: Optional[float] = None
    readability_score: Optional[float] = None
    readability_grade: Optional[str] = None


class ProductDetailFacts(FactsModel):
    has_dimensions: bool = False
    has_materials: bool = False
    has_care_instructions: bool = False
    has_warranty: bool = False
    has_compatibility: bool = False
    has_comparison: bool = False


class ContentQualityFacts(FactsModel):
    description: DescriptionFacts = DescriptionFacts()
    specifications: SpecificationFacts = SpecificationFacts()
    features: FeatureFacts = FeatureFacts()
    faq: FaqFacts = FaqFacts()
    product_details: ProductDetailFacts = ProductDetailFacts()
    text_metrics: TextMetricsFacts = TextMetricsFacts()


# ── Content structure ─────────────────────────────────────────────────────────


class HeadingLevelFacts(FactsModel):
    count: int = 0


class HeadingFacts(FactsModel):
    """Heading counts per level, as reported by the collector."""

    h1: HeadingLevelFacts = HeadingLevelFacts()
    h2: HeadingLevelFacts = HeadingLevelFacts()
    h3: HeadingLevelFacts = HeadingLevelFacts()
    h4: HeadingLevelFacts = HeadingLevelFacts()
    h5: HeadingLevelFacts = HeadingLevelFacts()
    h6: HeadingLevelFacts = HeadingLevelFacts()

    def level_counts(self) -> list[int]:
        """Counts for H1..H6, in level order."""
        return [self.h1.count, self.h2.count, self.h3.count,
                self.h4.count, self.h5.count, self.h6.count]


class SemanticHtmlFacts(FactsModel):
    has_main: bool = False
    has_article: bool = False
    score: Optional[float] = None


class ContentRatioFacts(FactsModel):
    main_content_found: bool = False
    ratio: float = 0.0
    score: Optional[float] = None


class TableFacts(FactsModel):
    table_count: int = 0
    has_proper_tables: bool = False
    score: Optional[float] = None


class ListFacts(FactsModel):
    has_proper_lists: bool = False
    score: Optional[float] = None


class AccessibilityFacts(FactsModel):
    aria_labels: int = 0


class PrimaryImageFacts(FactsModel):
    has_alt: bool = False


class ImageAltFacts(FactsModel):
    primary_image: PrimaryImageFacts = PrimaryImageFacts()
    alt_coverage: Optional[float] = None
    total_images: int = 0
    images_with_alt: int = 0

    def coverage(self) -> float:
        """Alt-text coverage ratio in [0, 1].

        Prefers the collector's ratio; falls back to ``images_with_alt /
        total_images``; 0.0 when neither is available.
        """
        if self.alt_coverage is not None:
            return max(0.0, min(1.0, self.alt_coverage))
        if self.total_images > 0:
            return max(0.0, min(1.0, self.images_with_alt / self.total_images))
        return 0.0


class JsDependencyFacts(FactsModel):
    dependency_level: Optional[str] = None
    score: Optional[float] = None
    framework_detected: Optional[str] = None


class ReadabilityFacts(FactsModel):
    score: Optional[float] = None


class ContentStructureFacts(FactsModel):
    headings: HeadingFacts = HeadingFacts()
    semantic_html: SemanticHtmlFacts = Field(
        default=SemanticHtmlFacts(), alias="semanticHTML"
    )
    content_ratio: ContentRatioFacts = ContentRatioFacts()
    tables: TableFacts = TableFacts()
    lists: ListFacts = ListFacts()
    accessibility: AccessibilityFacts = AccessibilityFacts()
    images: ImageAltFacts = ImageAltFacts()
    js_dependency: JsDependencyFacts = JsDependencyFacts()
    readability: ReadabilityFacts = ReadabilityFacts()


# ── Authority & trust ─────────────────────────────────────────────────────────


class ReviewFacts(FactsModel):
    count: int = 0
    average_rating: Optional[float] = None
    has_recent_reviews: Optional[bool] = None
    average_review_length: float = 0.0


class BrandFacts(FactsModel):
    name: Optional[str] = None
    in_h1: bool = False
    in_title: bool = False


class CertificationFacts(FactsModel):
    count: int = 0
    items: list[str] = []
    score: Optional[float] = None


class AwardFacts(FactsModel):
    count: int = 0
    items: list[str] = []


class SocialProofFacts(FactsModel):
    sold_count: Optional[int] = None
    view_count: Optional[int] = None
    customer_count: Optional[int] = None
    # The collector reports this flag as ``testimonials``.
    has_testimonials: bool = Field(
        default=False,
        validation_alias=AliasChoices("testimonials", "hasTestimonials", "has_testimonials"),
    )


class TrustSignalFacts(FactsModel):
    reviews: ReviewFacts = ReviewFacts()
    brand: BrandFacts = BrandFacts()
    certifications: CertificationFacts = CertificationFacts()
    awards: AwardFacts = AwardFacts()
    social_proof: SocialProofFacts = SocialProofFacts()


# ── Root record ───────────────────────────────────────────────────────────────


class ExtractedPageData(FactsModel):
    """Complete collector output for one product page.

    Attributes:
        page_info: URL / title / domain of the page (not scored).
        structured_data: schema.org markup facts.
        meta_tags: Open Graph, Twitter, canonical, robots and meta facts.
        content_quality: Description, specification, feature and FAQ facts.
        content_structure: Headings, semantics, accessibility and JS facts.
        trust_signals: Review, brand, certification and award facts.
    """

    page_info: PageInfo = PageInfo()
    structured_data: StructuredDataFacts = StructuredDataFacts()
    meta_tags: ProtocolMetaFacts = ProtocolMetaFacts()
    content_quality: ContentQualityFacts = ContentQualityFacts()
    content_structure: ContentStructureFacts = ContentStructureFacts()
    trust_signals: TrustSignalFacts = TrustSignalFacts()
