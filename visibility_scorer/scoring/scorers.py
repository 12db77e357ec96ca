"""
Category scorers: one ``CategoryScorer`` subclass per scoring category.

Each scorer reads its own slice of ``ExtractedPageData`` and enumerates
every factor of its category, in a fixed order, through a
``FactorCollector``.  Scorers hold no state; a single instance of each is
registered in ``CATEGORY_SCORERS``, whose order is the evaluation order of
the whole engine (and therefore the tie-break order of recommendations).

Overshoot factors
-----------------
Contextual factors listed in ``WeightConfig.cap_multiples`` may carry more
points than their nominal weight, up to the configured multiple.  The
category total is still clamped to 100.
"""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from typing import Any

from visibility_scorer.models.page_data import (
    ContentQualityFacts,
    ContentStructureFacts,
    ExtractedPageData,
    HeadingFacts,
    ProtocolMetaFacts,
    ReadabilityFacts,
    StructuredDataFacts,
    TrustSignalFacts,
)
from visibility_scorer.models.score import CategoryScore
from visibility_scorer.scoring import curves
from visibility_scorer.scoring.factors import FactorCollector, ScoringContext
from visibility_scorer.taxonomy.scoring_taxonomy import (
    VALID_IMAGE_FORMATS,
    CategoryKey,
    Context,
    FactorStatus,
    ImageFormat,
)

PASS = FactorStatus.PASS
WARNING = FactorStatus.WARNING
FAIL = FactorStatus.FAIL
UNKNOWN = FactorStatus.UNKNOWN

# Present-but-outside-the-optimal-band share of a factor's weight.
_SUBOPTIMAL = 0.7

_WEBP_URL = re.compile(r"\.webp(\?|$)")
_RASTER_URL = re.compile(r"\.(jpe?g|png|gif)(\?|$)")


def _binary(present: bool) -> tuple[FactorStatus, float]:
    return (PASS, 1.0) if present else (FAIL, 0.0)


class CategoryScorer(ABC):
    """Scores one category of page facts.

    Subclasses set ``key`` / ``name`` and implement ``select`` and
    ``evaluate``.
    """

    key: CategoryKey
    name: str

    @abstractmethod
    def select(self, page: ExtractedPageData) -> Any:
        """Return the slice of ``page`` this scorer consumes."""
        ...

    @abstractmethod
    def evaluate(self, facts: Any, ctx: ScoringContext) -> CategoryScore:
        """Score ``facts`` under ``ctx``."""
        ...

    def score(self, page: ExtractedPageData, ctx: ScoringContext) -> CategoryScore:
        return self.evaluate(self.select(page), ctx)

    def _collector(self, ctx: ScoringContext) -> FactorCollector:
        return FactorCollector(self.key, self.name, ctx)


# ── Structured data ───────────────────────────────────────────────────────────


class StructuredDataScorer(CategoryScorer):
    """schema.org entity presence; all binary, none contextual."""

    key = CategoryKey.STRUCTURED_DATA
    name = "Structured Data"

    def select(self, page: ExtractedPageData) -> StructuredDataFacts:
        return page.structured_data

    def evaluate(self, facts: StructuredDataFacts, ctx: ScoringContext) -> CategoryScore:
        c = self._collector(ctx)
        s = facts.schemas

        status, frac = _binary(s.product is not None)
        product_name = (s.product or {}).get("name") or "Product"
        c.add("product_schema", "Product Schema", status, frac, critical=True,
              details=f"Found: {product_name}" if s.product is not None
              else "Missing Product schema markup")

        status, frac = _binary(s.offer is not None)
        c.add("offer_schema", "Offer Schema", status, frac, critical=True,
              details="Price and availability structured" if s.offer is not None
              else "Missing Offer schema")

        status, frac = _binary(s.aggregate_rating is not None)
        rating_value = (s.aggregate_rating or {}).get("ratingValue")
        c.add("aggregate_rating", "AggregateRating Schema", status, frac,
              details=f"Rating: {rating_value}/5" if s.aggregate_rating is not None
              else "Missing rating schema")

        status, frac = _binary(len(s.reviews) > 0)
        c.add("review_schema", "Review Schema", status, frac,
              details=f"{len(s.reviews)} reviews structured" if s.reviews
              else "No structured reviews")

        faq_count = s.faq.question_count if s.faq is not None else 0
        status, frac = _binary(faq_count > 0)
        c.add("faq_schema", "FAQ Schema", status, frac,
              details=f"{faq_count} FAQs structured" if faq_count else "No FAQ schema")

        status, frac = _binary(s.breadcrumb is not None)
        c.add("breadcrumb_schema", "Breadcrumb Schema", status, frac,
              details="Breadcrumb trail structured" if s.breadcrumb is not None
              else "No breadcrumb schema")

        has_org = s.organization is not None or s.brand is not None
        status, frac = _binary(has_org)
        c.add("organization_schema", "Organization/Brand Schema", status, frac,
              details="Organization or brand structured" if has_org
              else "No organization or brand schema")

        status, frac = _binary(len(s.images) > 0)
        c.add("image_schema", "ImageObject Schema", status, frac,
              details=f"{len(s.images)} image objects" if s.images else "No ImageObject schema")

        return c.finish()


# ── Protocol & meta ───────────────────────────────────────────────────────────


class ProtocolMetaScorer(CategoryScorer):
    """Open Graph, Twitter, canonical, robots and meta description."""

    key = CategoryKey.PROTOCOL_META
    name = "Protocol & Meta Compliance"

    def select(self, page: ExtractedPageData) -> ProtocolMetaFacts:
        return page.meta_tags

    def evaluate(self, facts: ProtocolMetaFacts, ctx: ScoringContext) -> CategoryScore:
        c = self._collector(ctx)
        og = facts.open_graph
        twitter = facts.twitter_cards

        has_og_image = bool(og.image)
        status, frac = _binary(has_og_image)
        c.add("og_image", "og:image Present", status, frac, critical=True,
              details=og.image[:50] if has_og_image else "No og:image tag found")

        status, frac, details = self._image_format(og.image, ctx)
        c.add("og_image_format", "og:image Format", status, frac, critical=True, details=details)

        status, frac, details = _length_band(og.title, 1, 60)
        c.add("og_title", "og:title", status, frac, details=details)

        status, frac, details = _length_band(og.description, 100, 200)
        c.add("og_description", "og:description", status, frac, details=details)

        is_product = (og.type or "").strip().lower() in ("product", "og:product")
        status, frac = _binary(is_product)
        c.add("og_type", "og:type = product", status, frac,
              details=f"Type: {og.type}" if og.type else "Missing og:type")

        if not twitter.card:
            status, frac, details = FAIL, 0.0, "Missing twitter:card"
        elif twitter.card == "summary_large_image":
            status, frac, details = PASS, 1.0, f"Type: {twitter.card}"
        else:
            status, frac, details = WARNING, _SUBOPTIMAL, f"Type: {twitter.card}"
        c.add("twitter_card", "Twitter Card", status, frac, details=details)

        status, frac = _binary(bool(twitter.image))
        c.add("twitter_image", "Twitter Image", status, frac,
              details="twitter:image set" if twitter.image else "Missing twitter:image")

        canonical = facts.canonical
        if not (canonical.present or canonical.url):
            status, frac, details = FAIL, 0.0, "Missing canonical"
        elif canonical.matches_current_url:
            status, frac, details = PASS, 1.0, "Matches current URL"
        else:
            status, frac, details = WARNING, _SUBOPTIMAL, "Does not match current URL"
        c.add("canonical", "Canonical URL", status, frac, details=details)

        status, frac, details = _length_band(facts.standard.description, 120, 160)
        c.add("meta_description", "Meta Description", status, frac, details=details)

        robots = facts.robots
        content = (robots.content or "").lower()
        blocked = robots.is_blocked or robots.noindex or "noindex" in content
        nofollow = robots.nofollow or "nofollow" in content
        if blocked:
            status, frac, details = FAIL, 0.0, "BLOCKED: noindex directive found"
        elif nofollow:
            status, frac, details = WARNING, _SUBOPTIMAL, "nofollow directive found"
        else:
            status, frac, details = PASS, 1.0, "Indexing allowed"
        c.add("robots_indexing", "Robots Allows Indexing", status, frac,
              critical=blocked, details=details)

        return c.finish()

    @staticmethod
    def _image_format(image_url: str | None, ctx: ScoringContext) -> tuple[FactorStatus, float, str]:
        """Three-way og:image format verdict: WebP fails, raster passes, rest pending."""
        verification = ctx.image_verification
        if verification is not None:
            if verification.is_web_p:
                return FAIL, 0.0, "CRITICAL: WebP format - invisible in LLM chats"
            fmt = (verification.format or "").lower()
            if verification.is_valid_format or fmt in VALID_IMAGE_FORMATS:
                return PASS, 1.0, f"Format: {fmt.upper() or 'Valid'}"
            return WARNING, 0.5, f"Format: {verification.format or ImageFormat.UNKNOWN}"

        if not image_url:
            return FAIL, 0.0, "No og:image to verify"

        url = image_url.lower()
        if _WEBP_URL.search(url):
            return FAIL, 0.0, "CRITICAL: WebP format detected in URL"
        if _RASTER_URL.search(url):
            return PASS, 1.0, "Valid format detected in URL"
        return UNKNOWN, 0.5, "Format needs verification"


def _length_band(text: str | None, low: int, high: int) -> tuple[FactorStatus, float, str]:
    """Full inside ``[low, high]`` characters, 70% outside, 0 when absent."""
    if not text:
        return FAIL, 0.0, "Missing"
    length = len(text)
    if low <= length <= high:
        return PASS, 1.0, f"{length} chars"
    hint = "too long" if length > high else "too short"
    return WARNING, _SUBOPTIMAL, f"{length} chars ({hint}; aim for {low}-{high})"


# ── Content quality ───────────────────────────────────────────────────────────


class ContentQualityScorer(CategoryScorer):
    """Description depth, specifications, features, FAQ and product details."""

    key = CategoryKey.CONTENT_QUALITY
    name = "Content Depth & Quality"

    def select(self, page: ExtractedPageData) -> ContentQualityFacts:
        return page.content_quality

    def evaluate(self, facts: ContentQualityFacts, ctx: ScoringContext) -> CategoryScore:
        c = self._collector(ctx)
        desc = facts.description
        specs = facts.specifications
        details = facts.product_details

        words = desc.word_count
        status = PASS if words >= 100 else WARNING if words >= 50 else FAIL
        c.add("description_length", "Description Length", status,
              curves.description_length_score(words) / 100,
              details=f"{words} words" + (" (aim for 100+)" if words < 100 else ""))

        self._description_quality(c, facts, ctx)

        status = PASS if specs.count >= 5 else WARNING if specs.count >= 3 else FAIL
        c.add("specification_count", "Specifications", status,
              curves.spec_count_score(specs.count) / 100,
              multiplier_key="technical_specifications",
              details=f"{specs.count} specifications found")

        detail = curves.clamp_subscore(specs.detail_score)
        status = PASS if detail >= 70 else WARNING if detail > 0 else FAIL
        c.add("specification_detail", "Specification Detail", status, detail / 100,
              multiplier_key="technical_specifications",
              details=f"Detail score {detail:.0f}/100" if specs.detail_score is not None
              else "Specification detail not measured")

        count = facts.features.count
        status = PASS if count >= 5 else WARNING if count >= 3 else FAIL
        c.add("feature_count", "Features List", status,
              curves.feature_count_score(count) / 100,
              details=f"{count} features found")

        count = facts.faq.count
        status = PASS if count >= 3 else WARNING if count > 0 else FAIL
        c.add("faq_presence", "FAQ Section", status, curves.faq_count_score(count) / 100,
              details=f"{count} FAQs" if count else "No FAQ found")

        # Boost layered on top of the generic table; no table key of its own.
        boost = ctx.weights.need_dimension_boost if ctx.context == Context.NEED else 1.0
        status, frac = _binary(details.has_dimensions)
        c.add_points("dimensions", "Dimensions/Size", status,
                     frac * c.weight("dimensions") * boost, contextual=True,
                     details="Dimensions listed" if details.has_dimensions else "No dimensions found")

        status, frac = _binary(details.has_materials)
        c.add("materials", "Materials", status, frac,
              details="Materials listed" if details.has_materials else "No materials found")

        status, frac = _binary(details.has_care_instructions)
        c.add("care_instructions", "Care Instructions", status, frac,
              details="Care instructions present" if details.has_care_instructions
              else "No care instructions")

        status, frac = _binary(details.has_warranty)
        c.add("warranty_info", "Warranty Information", status, frac,
              multiplier_key="warranty_info",
              details="Warranty stated" if details.has_warranty else "No warranty information")

        status, frac = _binary(details.has_compatibility)
        c.add("compatibility_info", "Compatibility Information", status, frac,
              multiplier_key="compatibility_info",
              details="Compatibility stated" if details.has_compatibility
              else "No compatibility information")

        # Fed only by inputs that set productDetails.hasComparison; absent means FAIL.
        status, frac = _binary(details.has_comparison)
        c.add("comparison_content", "Comparison Content", status, frac,
              multiplier_key="comparison_content",
              details="Comparison content present" if details.has_comparison
              else "No comparison content")

        return c.finish()

    @staticmethod
    def _description_quality(
        c: FactorCollector, facts: ContentQualityFacts, ctx: ScoringContext
    ) -> None:
        desc = facts.description
        weight = c.weight("description_quality")
        half = weight / 2

        emotional = desc.has_benefit_statements or desc.has_emotional_language
        raw = 0.0
        if emotional:
            raw += half * ctx.multiplier("emotional_benefit_copy")
        if desc.has_technical_terms:
            raw += half * ctx.multiplier("technical_specifications")

        capped = min(raw, c.ceiling("description_quality"))
        if not emotional and not desc.has_technical_terms:
            status = FAIL
        elif capped >= weight * 0.7:
            status = PASS
        else:
            status = WARNING

        signals = [
            label for flag, label in (
                (desc.has_benefit_statements, "Benefits"),
                (desc.has_emotional_language, "Emotional"),
                (desc.has_technical_terms, "Technical"),
            ) if flag
        ]
        c.add_points("description_quality", "Description Quality", status, raw,
                     contextual=True, details=", ".join(signals) or "Needs improvement")


# ── Content structure ─────────────────────────────────────────────────────────


def heading_violations(headings: HeadingFacts) -> list[str]:
    """Heading hierarchy issues, one entry per violation.

    A missing or repeated H1 is one violation; every heading level skipped
    between two consecutive present levels is one more.
    """
    counts = headings.level_counts()
    issues: list[str] = []
    if counts[0] == 0:
        issues.append("Missing H1")
    elif counts[0] > 1:
        issues.append(f"Multiple H1s ({counts[0]})")

    present = [level for level, count in enumerate(counts, start=1) if count > 0]
    for upper, lower in zip(present, present[1:]):
        for skipped in range(upper + 1, lower):
            issues.append(f"Skipped H{skipped} (H{upper} to H{lower})")
    return issues


class ContentStructureScorer(CategoryScorer):
    """Headings, semantic markup, accessibility and rendering dependency."""

    key = CategoryKey.CONTENT_STRUCTURE
    name = "Content Structure & Accessibility"

    def select(self, page: ExtractedPageData) -> ContentStructureFacts:
        # Prefer the whole-page text metrics when the collector measured them.
        measured = page.content_quality.text_metrics.readability_score
        if measured is None:
            return page.content_structure
        return page.content_structure.model_copy(
            update={"readability": ReadabilityFacts(score=measured)}
        )

    def evaluate(self, facts: ContentStructureFacts, ctx: ScoringContext) -> CategoryScore:
        c = self._collector(ctx)

        h1_count = facts.headings.h1.count
        if h1_count == 1:
            status, frac, details = PASS, 1.0, "Single H1 found"
        elif h1_count > 1:
            status, frac, details = WARNING, 0.5, f"{h1_count} H1s (should be 1)"
        else:
            status, frac, details = FAIL, 0.0, "No H1 found"
        c.add("h1_presence", "H1 Heading", status, frac, details=details)

        issues = heading_violations(facts.headings)
        frac = max(0.0, 1.0 - 0.25 * len(issues))
        status = PASS if not issues else FAIL if frac == 0 else WARNING
        c.add("heading_hierarchy", "Heading Hierarchy", status, frac,
              details=", ".join(issues) or "Valid hierarchy")

        semantic = facts.semantic_html
        status = PASS if semantic.has_main else WARNING if semantic.has_article else FAIL
        c.add("semantic_html", "Semantic HTML", status,
              curves.clamp_subscore(semantic.score) / 100,
              details="Uses <main>" if semantic.has_main
              else "Uses <article>" if semantic.has_article else "Limited semantic markup")

        ratio = facts.content_ratio
        status = PASS if ratio.ratio >= 0.5 else WARNING if ratio.ratio >= 0.3 else FAIL
        c.add("content_ratio", "Content-to-Chrome Ratio", status,
              curves.clamp_subscore(ratio.score) / 100,
              details=f"{ratio.ratio * 100:.0f}% content" if ratio.main_content_found
              else "Main content not identified")

        tables = facts.tables
        status = PASS if tables.has_proper_tables else WARNING if tables.table_count > 0 else FAIL
        c.add("table_structure", "Table Structure", status,
              curves.clamp_subscore(tables.score) / 100,
              details="Proper table markup" if tables.has_proper_tables
              else f"{tables.table_count} tables without headers" if tables.table_count
              else "No structured tables")

        lists = facts.lists
        c.add("list_structure", "List Structure", PASS if lists.has_proper_lists else FAIL,
              curves.clamp_subscore(lists.score) / 100,
              details="Proper list markup" if lists.has_proper_lists else "No structured lists")

        aria = facts.accessibility.aria_labels
        status, frac = _binary(aria > 0)
        c.add("aria_labels", "ARIA Labels", status, frac,
              details=f"{aria} labels found" if aria > 0 else "No ARIA labels")

        has_alt = facts.images.primary_image.has_alt
        status, frac = _binary(has_alt)
        c.add("primary_image_alt", "Primary Image Alt Text", status, frac,
              details="Has alt text" if has_alt else "Missing alt text on primary image")

        coverage = facts.images.coverage()
        status = PASS if coverage >= 0.9 else WARNING if coverage >= 0.5 else FAIL
        c.add("image_alt_coverage", "Image Alt Coverage", status, coverage,
              details=f"{coverage * 100:.0f}% of images have alt text")

        js = facts.js_dependency
        level = (js.dependency_level or "").lower()
        status = PASS if level == "low" else WARNING if level == "medium" else FAIL
        framework = f" ({js.framework_detected})" if js.framework_detected else ""
        c.add("js_dependency", "JavaScript Dependency", status,
              curves.clamp_subscore(js.score) / 100,
              details=f"{level.capitalize() or 'Unknown'} JS dependency{framework}")

        readability = curves.clamp_subscore(facts.readability.score)
        status = PASS if readability >= 60 else WARNING if readability >= 30 else FAIL
        c.add("readability", "Readability", status, readability / 100,
              details=f"Readability {readability:.0f}/100" if facts.readability.score is not None
              else "Readability not measured")

        return c.finish()


# ── Authority & trust ─────────────────────────────────────────────────────────


class AuthorityTrustScorer(CategoryScorer):
    """Reviews, brand clarity, certifications, awards and social proof."""

    key = CategoryKey.AUTHORITY_TRUST
    name = "Authority & Trust Signals"

    def select(self, page: ExtractedPageData) -> TrustSignalFacts:
        return page.trust_signals

    def evaluate(self, facts: TrustSignalFacts, ctx: ScoringContext) -> CategoryScore:
        c = self._collector(ctx)
        reviews = facts.reviews

        status = PASS if reviews.count >= 50 else WARNING if reviews.count >= 10 else FAIL
        c.add("review_count", "Review Count", status,
              curves.review_count_score(reviews.count) / 100,
              multiplier_key="review_count",
              details=f"{reviews.count} reviews" if reviews.count > 0 else "No reviews found")

        rating = reviews.average_rating or 0.0
        status = PASS if rating >= 4 else WARNING if rating >= 3.5 else FAIL
        c.add("average_rating", "Average Rating", status,
              curves.rating_score(rating) / 100,
              multiplier_key="review_rating",
              details=f"{rating:.1f}/5" if rating else "No rating")

        if reviews.has_recent_reviews is True:
            status, frac, details = PASS, 1.0, "Recent reviews present"
        elif reviews.has_recent_reviews is False:
            status, frac, details = WARNING, 0.5, "No recent reviews"
        else:
            status, frac, details = FAIL, 0.0, "Review recency unknown"
        c.add("review_recency", "Review Recency", status, frac, details=details)

        depth = reviews.average_review_length
        status = PASS if depth >= 100 else WARNING if depth >= 50 else FAIL
        c.add("review_depth", "Review Depth", status,
              curves.review_depth_score(depth) / 100,
              details=f"Average review length {depth:.0f} chars")

        brand = facts.brand
        if not brand.name:
            status, frac, details = FAIL, 0.0, "Brand not identified"
        elif brand.in_h1 and brand.in_title:
            status, frac, details = PASS, 1.0, f"{brand.name} (in H1 and title)"
        elif brand.in_h1 or brand.in_title:
            where = "H1" if brand.in_h1 else "title"
            status, frac, details = WARNING, 0.7, f"{brand.name} (in {where} only)"
        else:
            status, frac, details = FAIL, 0.4, f"{brand.name} (not in H1 or title)"
        c.add("brand_clarity", "Brand Clarity", status, frac, details=details)

        certs = facts.certifications
        if certs.score is not None:
            cert_frac = curves.clamp_subscore(certs.score) / 100
        else:
            cert_frac = 1.0 if certs.count > 0 else 0.0
        c.add("certifications", "Certifications", PASS if certs.count > 0 else FAIL, cert_frac,
              multiplier_key="certifications",
              details=", ".join(certs.items[:3]) if certs.count > 0 and certs.items
              else f"{certs.count} certifications" if certs.count > 0
              else "No certifications found")

        awards = facts.awards
        status, frac = _binary(awards.count > 0)
        c.add("awards", "Awards", status, frac,
              details=", ".join(awards.items[:2]) if awards.count > 0 and awards.items
              else f"{awards.count} awards" if awards.count > 0 else "No awards found")

        social = facts.social_proof
        signals = []
        if social.sold_count:
            signals.append(f"{social.sold_count} sold")
        if social.view_count:
            signals.append(f"{social.view_count} views")
        if social.customer_count:
            signals.append(f"{social.customer_count} customers")
        if social.has_testimonials:
            signals.append("testimonials")
        status, frac = _binary(bool(signals))
        c.add("social_proof", "Social Proof", status, frac,
              multiplier_key="social_proof",
              details=", ".join(signals) or "No social proof found")

        return c.finish()


# Fixed evaluation order for the whole engine.
CATEGORY_SCORERS: tuple[CategoryScorer, ...] = (
    StructuredDataScorer(),
    ProtocolMetaScorer(),
    ContentQualityScorer(),
    ContentStructureScorer(),
    AuthorityTrustScorer(),
)
