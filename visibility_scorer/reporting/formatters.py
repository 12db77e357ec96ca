"""
ASCII terminal formatters for CLI commands.

All formatters accept in-memory models and return plain multi-line strings
suitable for ``typer.echo()``.

No third-party dependencies (no ``rich``, no ``colorama``).

Status tags
-----------
Factor rows carry a fixed-width tag so columns line up in any terminal::

  [PASS]  [WARN]  [FAIL]  [ ?? ]   (unknown = pending verification)
"""

from __future__ import annotations

from typing import Optional

from visibility_scorer.models.history import HistoryEntry, HistoryStats
from visibility_scorer.models.page_data import PageInfo
from visibility_scorer.models.score import Recommendation, ScoreResult
from visibility_scorer.scoring.aggregation import (
    category_summary,
    critical_issues,
    improvement_potential,
)
from visibility_scorer.scoring.weights import DEFAULT_WEIGHTS, WeightConfig
from visibility_scorer.taxonomy.scoring_taxonomy import Context, FactorStatus
from visibility_scorer.utils.time_utils import isoformat_z

_STATUS_TAGS: dict[FactorStatus, str] = {
    FactorStatus.PASS:    "[PASS]",
    FactorStatus.WARNING: "[WARN]",
    FactorStatus.FAIL:    "[FAIL]",
    FactorStatus.UNKNOWN: "[ ?? ]",
}


def _bar(score: float, width: int = 20) -> str:
    filled = int(max(0.0, min(100.0, score)) / 100 * width)
    return "#" * filled + "." * (width - filled)


# ── Score report ──────────────────────────────────────────────────────────────


def format_score_report(
    result: ScoreResult,
    recommendations: list[Recommendation],
    page_info: Optional[PageInfo] = None,
    show_factors: bool = False,
    weights: WeightConfig = DEFAULT_WEIGHTS,
) -> str:
    """Format one scored page: header, categories, critical issues, actions.

    Example::

        === LLM Visibility Score ===
          URL:      https://shop.example/p/123
          Score:    72 / 100   Grade: C   (context: hybrid)
          Average visibility; significant opportunities
          8 points to reach B grade

          Category                              Score  Weight  Bar
          ---------------------------------------------------------------------
          Structured Data                        45.0     25%  #########...........

    Args:
        result:          The scored page.
        recommendations: Ranked recommendations for ``result``.
        page_info:       Optional URL / title for the header.
        show_factors:    Include every factor row under each category.
        weights:         Weight tables the result was scored with (grade bands).

    Returns:
        Multi-line string.
    """
    lines: list[str] = []
    lines.append("")
    lines.append("=== LLM Visibility Score ===")
    if page_info and page_info.url:
        lines.append(f"  URL:      {page_info.url}")
    if page_info and page_info.title:
        lines.append(f"  Title:    {page_info.title[:70]}")
    lines.append(
        f"  Score:    {result.total_score} / 100   Grade: {result.grade}   "
        f"(context: {result.context})"
    )
    lines.append(f"  {result.grade_description}")
    lines.append(f"  {improvement_potential(result.total_score, result.grade, weights).message}")
    lines.append(f"  Scored at: {isoformat_z(result.timestamp)}")

    lines.append("")
    header = f"  {'Category':<36}  {'Score':>5}  {'Weight':>6}  Bar"
    lines.append(header)
    lines.append("  " + "-" * 69)
    for cs in result.category_scores.values():
        lines.append(
            f"  {cs.category_name:<36}  {cs.score:>5.1f}  {cs.weight:>6.0%}  {_bar(cs.score)}"
        )
        if show_factors:
            for f in cs.factors:
                marker = "*" if f.contextual else " "
                lines.append(
                    f"      {_STATUS_TAGS[f.status]} {f.name:<30}{marker} "
                    f"{f.points:>5.1f}/{f.max_points:<4g} {f.details[:40]}"
                )
    if show_factors:
        lines.append("  (* = scaled by context multiplier)")

    summary = category_summary(result)
    if summary:
        weakest = summary[0]
        lines.append("")
        lines.append(
            f"  Biggest opportunity: {weakest.name} "
            f"({weakest.fail_count} failing, {weakest.warning_count} warnings)"
        )

    issues = critical_issues(result)
    lines.append("")
    lines.append(f"  Critical issues: {len(issues)}")
    for issue in issues:
        lines.append(f"    ! {issue.category} / {issue.factor}: {issue.details}")

    lines.append("")
    lines.append(f"  Recommendations: {len(recommendations)}")
    if recommendations:
        lines.append(
            f"    {'#':>3}  {'Impact':<6}  {'Effort':<6}  {'Gap':>5}  Action"
        )
        lines.append("    " + "-" * 67)
        for rec in recommendations:
            lines.append(
                f"    {rec.priority_rank:>3}  {rec.impact:<6}  {rec.effort:<6}  "
                f"{rec.point_gap:>5.1f}  [{rec.factor}] {rec.action}"
            )

    return "\n".join(lines)


# ── History ───────────────────────────────────────────────────────────────────


def format_history_table(entries: list[HistoryEntry], domain: Optional[str] = None) -> str:
    """Format recent history entries, newest first, optionally for one domain."""
    lines: list[str] = []
    lines.append("")
    lines.append(f"=== Score History: {domain} ===" if domain else "=== Score History ===")

    if not entries:
        lines.append("")
        if domain:
            lines.append(f"  (no history for {domain})")
        else:
            lines.append("  (no history yet; run 'visibility-scorer score' first)")
        return "\n".join(lines)

    lines.append("")
    header = (
        f"  {'ID':<12}  {'Created':<20}  {'Score':>5}  {'Grade':>5}  "
        f"{'Context':<7}  {'Recs':>4}  {'Crit':>4}  Page"
    )
    lines.append(header)
    lines.append("  " + "-" * (len(header) + 10))
    for e in entries:
        page = e.domain or e.url or "-"
        lines.append(
            f"  {e.entry_id[:12]:<12}  {isoformat_z(e.created_at):<20}  {e.total_score:>5}  "
            f"{e.grade:>5}  {e.context:<7}  {e.recommendation_count:>4}  "
            f"{e.critical_count:>4}  {page[:40]}"
        )
    return "\n".join(lines)


def format_history_entry(entry: HistoryEntry) -> str:
    """Format one history entry with its per-category scores."""
    lines: list[str] = []
    lines.append("")
    lines.append(f"=== History Entry {entry.entry_id} ===")
    lines.append(f"  URL:       {entry.url or '-'}")
    lines.append(f"  Title:     {entry.title or '-'}")
    lines.append(f"  Created:   {isoformat_z(entry.created_at)}")
    lines.append(
        f"  Score:     {entry.total_score} / 100   Grade: {entry.grade}   "
        f"(context: {entry.context})"
    )
    lines.append(
        f"  Recommendations: {entry.recommendation_count} "
        f"({entry.critical_count} high impact)"
    )
    lines.append("")
    for cat in entry.category_scores.values():
        lines.append(f"  {cat.name:<36}  {cat.score:>3}  {_bar(cat.score)}")
    return "\n".join(lines)


def _human_bytes(n: int) -> str:
    size = float(n)
    for unit in ("B", "KB", "MB"):
        if size < 1024:
            return f"{size:.0f} {unit}" if unit == "B" else f"{size:.1f} {unit}"
        size /= 1024
    return f"{size:.1f} GB"


def format_history_stats(stats: HistoryStats, db_path: Optional[str] = None) -> str:
    """Format history store size and age."""
    lines: list[str] = []
    lines.append("")
    lines.append("=== History Stats ===")
    if db_path:
        lines.append(f"  Database:  {db_path}")
    lines.append(f"  Entries:   {stats.entry_count}")
    lines.append(f"  Size:      {_human_bytes(stats.db_bytes)}")
    lines.append(
        f"  Oldest:    {isoformat_z(stats.oldest_at) if stats.oldest_at else '-'}"
    )
    lines.append(
        f"  Newest:    {isoformat_z(stats.newest_at) if stats.newest_at else '-'}"
    )
    return "\n".join(lines)


# ── Weights ───────────────────────────────────────────────────────────────────


def format_weights_table(weights: WeightConfig, context: Context) -> str:
    """Category weights, grade bands and the active multiplier table."""
    lines: list[str] = []
    lines.append("")
    lines.append("=== Scoring Weights ===")
    lines.append("")
    lines.append(f"  {'Category':<20}  {'Weight':>6}  {'Factors':>7}  {'Max pts':>7}")
    lines.append("  " + "-" * 46)
    for key, weight in weights.category_weights.items():
        factors = weights.factor_weights[key]
        lines.append(
            f"  {key:<20}  {weight:>6.0%}  {len(factors):>7}  {sum(factors.values()):>7g}"
        )

    lines.append("")
    lines.append("  Grades: " + ", ".join(
        f"{t.grade}>={t.min_score:g}" for t in weights.grade_thresholds
    ))

    lines.append("")
    lines.append(f"  Context multipliers ({context}):")
    for key, mult in weights.multipliers_for(context).items():
        lines.append(f"    {key:<26}  x{mult:.2f}")

    if weights.cap_multiples:
        lines.append("")
        lines.append("  Overshoot caps:")
        for category, caps in weights.cap_multiples.items():
            for key, cap in caps.items():
                lines.append(f"    {category}.{key:<24}  {cap:g}x")
    return "\n".join(lines)
