"""
Remediation rule table: (category, factor key) -> action text + effort tier.

Effort tiers are static estimates of the work the action implies:
  low   : add or edit a tag / attribute / markup block
  medium: add a content section, restructure markup
  high  : rewrite copy, gather reviews or certifications, re-platform

A factor with no rule here still produces a recommendation, using
``default_rule(factor_name)``.
"""

from __future__ import annotations

from dataclasses import dataclass

from visibility_scorer.taxonomy.scoring_taxonomy import CategoryKey, Effort

SD = CategoryKey.STRUCTURED_DATA
PM = CategoryKey.PROTOCOL_META
CQ = CategoryKey.CONTENT_QUALITY
CS = CategoryKey.CONTENT_STRUCTURE
AT = CategoryKey.AUTHORITY_TRUST


@dataclass(frozen=True)
class RemediationRule:
    """Static remediation attached to one factor."""

    action: str
    effort: Effort


DEFAULT_EFFORT = Effort.MEDIUM


def default_rule(factor_name: str) -> RemediationRule:
    """Fallback for factors without a dedicated rule."""
    return RemediationRule(
        action=(
            f"Review the '{factor_name}' check and bring it in line with "
            "best practice for product pages."
        ),
        effort=DEFAULT_EFFORT,
    )


REMEDIATION_RULES: dict[tuple[CategoryKey, str], RemediationRule] = {
    # ── Structured data ───────────────────────────────────────────────────────
    (SD, "product_schema"): RemediationRule(
        "Add schema.org Product markup (JSON-LD) with name, description, image, "
        "sku and brand.",
        Effort.MEDIUM,
    ),
    (SD, "offer_schema"): RemediationRule(
        "Add an Offer to the Product markup with price, priceCurrency and availability.",
        Effort.LOW,
    ),
    (SD, "aggregate_rating"): RemediationRule(
        "Expose the review summary as AggregateRating (ratingValue, reviewCount).",
        Effort.LOW,
    ),
    (SD, "review_schema"): RemediationRule(
        "Mark up individual customer reviews with schema.org Review.",
        Effort.MEDIUM,
    ),
    (SD, "faq_schema"): RemediationRule(
        "Wrap the product FAQ in FAQPage markup with one Question per entry.",
        Effort.LOW,
    ),
    (SD, "breadcrumb_schema"): RemediationRule(
        "Add BreadcrumbList markup mirroring the category path.",
        Effort.LOW,
    ),
    (SD, "organization_schema"): RemediationRule(
        "Add Organization markup or a Brand entity on the Product.",
        Effort.LOW,
    ),
    (SD, "image_schema"): RemediationRule(
        "Describe product images with ImageObject (contentUrl, caption).",
        Effort.LOW,
    ),
    # ── Protocol & meta ───────────────────────────────────────────────────────
    (PM, "og_image"): RemediationRule(
        "Add an og:image meta tag pointing at the primary product photo.",
        Effort.LOW,
    ),
    (PM, "og_image_format"): RemediationRule(
        "Serve og:image as JPEG or PNG; WebP images do not render in many LLM "
        "chat interfaces.",
        Effort.LOW,
    ),
    (PM, "og_title"): RemediationRule(
        "Set og:title to the product name, 60 characters or fewer.",
        Effort.LOW,
    ),
    (PM, "og_description"): RemediationRule(
        "Write an og:description of 100-200 characters summarising the product.",
        Effort.LOW,
    ),
    (PM, "og_type"): RemediationRule(
        "Set og:type to 'product'.",
        Effort.LOW,
    ),
    (PM, "twitter_card"): RemediationRule(
        "Add twitter:card with the value 'summary_large_image'.",
        Effort.LOW,
    ),
    (PM, "twitter_image"): RemediationRule(
        "Add twitter:image pointing at the primary product photo.",
        Effort.LOW,
    ),
    (PM, "canonical"): RemediationRule(
        "Add a rel=canonical link that matches the page's own URL.",
        Effort.LOW,
    ),
    (PM, "meta_description"): RemediationRule(
        "Write a meta description of 120-160 characters.",
        Effort.LOW,
    ),
    (PM, "robots_indexing"): RemediationRule(
        "Remove noindex/nofollow directives so the page can be indexed and followed.",
        Effort.LOW,
    ),
    # ── Content quality ───────────────────────────────────────────────────────
    (CQ, "description_length"): RemediationRule(
        "Expand the product description to at least 100 words (200+ is better).",
        Effort.HIGH,
    ),
    (CQ, "description_quality"): RemediationRule(
        "Rewrite the description to state concrete benefits and the key "
        "technical terms buyers search for.",
        Effort.HIGH,
    ),
    (CQ, "specification_count"): RemediationRule(
        "List at least five specifications in a structured spec table.",
        Effort.MEDIUM,
    ),
    (CQ, "specification_detail"): RemediationRule(
        "Give each specification a value and unit rather than a bare label.",
        Effort.MEDIUM,
    ),
    (CQ, "feature_count"): RemediationRule(
        "Add a bulleted list of at least five product features.",
        Effort.MEDIUM,
    ),
    (CQ, "faq_presence"): RemediationRule(
        "Add an FAQ section answering at least three common buyer questions.",
        Effort.MEDIUM,
    ),
    (CQ, "dimensions"): RemediationRule(
        "State product dimensions and weight with units.",
        Effort.LOW,
    ),
    (CQ, "materials"): RemediationRule(
        "List the materials the product is made of.",
        Effort.LOW,
    ),
    (CQ, "care_instructions"): RemediationRule(
        "Add care and maintenance instructions.",
        Effort.LOW,
    ),
    (CQ, "warranty_info"): RemediationRule(
        "State the warranty length and what it covers.",
        Effort.LOW,
    ),
    (CQ, "compatibility_info"): RemediationRule(
        "Add a compatibility section naming supported models, sizes or systems.",
        Effort.MEDIUM,
    ),
    (CQ, "comparison_content"): RemediationRule(
        "Add a comparison against sibling products or previous versions.",
        Effort.HIGH,
    ),
    # ── Content structure ─────────────────────────────────────────────────────
    (CS, "h1_presence"): RemediationRule(
        "Use exactly one H1 containing the product name.",
        Effort.LOW,
    ),
    (CS, "heading_hierarchy"): RemediationRule(
        "Fix the heading outline: one H1, then H2/H3 in order without skipped levels.",
        Effort.MEDIUM,
    ),
    (CS, "semantic_html"): RemediationRule(
        "Wrap the product content in <main> and <article> elements.",
        Effort.MEDIUM,
    ),
    (CS, "content_ratio"): RemediationRule(
        "Reduce navigation and boilerplate around the product content.",
        Effort.HIGH,
    ),
    (CS, "table_structure"): RemediationRule(
        "Use <table> with <th> header cells for specifications.",
        Effort.MEDIUM,
    ),
    (CS, "list_structure"): RemediationRule(
        "Present features and specs as <ul>/<ol> lists instead of styled divs.",
        Effort.LOW,
    ),
    (CS, "aria_labels"): RemediationRule(
        "Add aria-label attributes to interactive controls.",
        Effort.LOW,
    ),
    (CS, "primary_image_alt"): RemediationRule(
        "Give the primary product image descriptive alt text.",
        Effort.LOW,
    ),
    (CS, "image_alt_coverage"): RemediationRule(
        "Add alt text to every product image (target 90%+ coverage).",
        Effort.MEDIUM,
    ),
    (CS, "js_dependency"): RemediationRule(
        "Render product content server-side so it is readable without JavaScript.",
        Effort.HIGH,
    ),
    (CS, "readability"): RemediationRule(
        "Shorten sentences and paragraphs to improve readability.",
        Effort.MEDIUM,
    ),
    # ── Authority & trust ─────────────────────────────────────────────────────
    (AT, "review_count"): RemediationRule(
        "Collect more customer reviews (50+) with post-purchase review requests.",
        Effort.HIGH,
    ),
    (AT, "average_rating"): RemediationRule(
        "Address recurring complaints in reviews to lift the average rating above 4.",
        Effort.HIGH,
    ),
    (AT, "review_recency"): RemediationRule(
        "Show review dates and keep fresh reviews coming in.",
        Effort.MEDIUM,
    ),
    (AT, "review_depth"): RemediationRule(
        "Prompt reviewers for detail (use cases, pros and cons) to lengthen reviews.",
        Effort.MEDIUM,
    ),
    (AT, "brand_clarity"): RemediationRule(
        "Include the brand name in both the H1 and the page title.",
        Effort.LOW,
    ),
    (AT, "certifications"): RemediationRule(
        "Display relevant certifications (safety, eco, standards) on the page.",
        Effort.MEDIUM,
    ),
    (AT, "awards"): RemediationRule(
        "Mention awards or press recognition the product has received.",
        Effort.LOW,
    ),
    (AT, "social_proof"): RemediationRule(
        "Show social proof such as units sold, customer counts or testimonials.",
        Effort.MEDIUM,
    ),
}


def rule_for(category: CategoryKey, factor_key: str, factor_name: str) -> RemediationRule:
    """Look up the rule for a factor, falling back to ``default_rule``."""
    return REMEDIATION_RULES.get((category, factor_key)) or default_rule(factor_name)
