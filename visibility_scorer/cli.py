"""
Visibility Scorer: CLI entry point.

All commands follow this pattern:
  1. Load ``AppConfig`` via ``load_config()``.
  2. Configure logging.
  3. Validate inputs.
  4. Execute action (score a page, read history, print weights).
  5. Report result to stdout.

Install and run::

    pip install -e .
    visibility-scorer --help
    visibility-scorer validate-config
    visibility-scorer show-weights --context need
    visibility-scorer score page.json --context want --verify-image
    visibility-scorer history --limit 10
    visibility-scorer history-show <entry-id>
    visibility-scorer history-delete <entry-id>
    visibility-scorer history --domain shop.example
    visibility-scorer history-export history.csv --domain shop.example
    visibility-scorer history-stats

The ``score`` input file is the JSON object produced by the page-fact
collector (camelCase keys, e.g. ``structuredData``, ``metaTags``).
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

import typer

app = typer.Typer(
    name="visibility-scorer",
    help="Product page LLM-visibility scorer and recommendation engine.",
    add_completion=False,
)


# ── Helpers ───────────────────────────────────────────────────────────────────

def _load_config_or_exit(config_path: Optional[str] = None):
    """Load AppConfig, printing a friendly error and exiting on failure."""
    from visibility_scorer.config import load_config

    try:
        cfg_path = Path(config_path) if config_path else None
        return load_config(cfg_path)
    except FileNotFoundError as exc:
        typer.echo(f"[ERROR] {exc}", err=True)
        raise typer.Exit(code=1)
    except Exception as exc:
        typer.echo(f"[ERROR] Config validation failed: {exc}", err=True)
        raise typer.Exit(code=1)


def _load_weights_or_exit(config):
    """Load the weight tables named by ``config.scoring.weights_file``."""
    from visibility_scorer.scoring.weights import load_weights

    weights_file = config.scoring.weights_file
    try:
        return load_weights(Path(weights_file) if weights_file else None)
    except FileNotFoundError as exc:
        typer.echo(f"[ERROR] {exc}", err=True)
        raise typer.Exit(code=1)
    except Exception as exc:
        typer.echo(f"[ERROR] Weight config validation failed: {exc}", err=True)
        raise typer.Exit(code=1)


def _configure_logging(config):
    """Set up logging from config."""
    from visibility_scorer.utils.logging import configure_logging
    configure_logging(config.logging)


def _open_history(config):
    """Open the history DB with the schema applied; caller closes via ``with``."""
    from visibility_scorer.db.connection import get_connection

    return get_connection(
        config.history.db_path,
        wal_mode=config.history.wal_mode,
        busy_timeout_ms=config.history.busy_timeout_ms,
    )


# ── Commands ──────────────────────────────────────────────────────────────────

@app.command("validate-config")
def validate_config(
    config_path: Optional[str] = typer.Option(
        None,
        "--config",
        help="Path to TOML config file (default: config/default.toml).",
    ),
    show_full: bool = typer.Option(
        False,
        "--full",
        help="Print full config including all fields.",
    ),
) -> None:
    """Validate the configuration and weight tables and print parsed values.

    Exits with code 1 if either fails validation.
    """
    config = _load_config_or_exit(config_path)
    weights = _load_weights_or_exit(config)

    typer.echo("Configuration validated successfully.")
    typer.echo("")
    typer.echo(f"  Default context:  {config.scoring.default_context}")
    typer.echo(f"  Weights file:     {config.scoring.weights_file or '(built-in)'}")
    typer.echo(f"  History DB:       {config.history.db_path}")
    typer.echo(f"  History cap:      {config.history.max_entries}")
    typer.echo(f"  Reports dir:      {config.output.reports_dir}")
    typer.echo(f"  Log level:        {config.logging.level}")
    typer.echo(f"  Debug mode:       {config.debug}")

    if show_full:
        typer.echo("")
        typer.echo("Full config (JSON):")
        typer.echo(json.dumps(config.model_dump(), indent=2, default=str))
        typer.echo("")
        typer.echo("Weights (JSON):")
        typer.echo(json.dumps(weights.model_dump(mode="json"), indent=2))

    typer.echo("")
    typer.echo("[OK] Config valid.")


@app.command("show-weights")
def show_weights(
    context: Optional[str] = typer.Option(
        None,
        "--context",
        help="want | need | hybrid (default: scoring.default_context).",
    ),
    config_path: Optional[str] = typer.Option(
        None,
        "--config",
        help="Path to TOML config file.",
    ),
) -> None:
    """Print category weights, grade bands and the context multiplier table."""
    from visibility_scorer.reporting.formatters import format_weights_table
    from visibility_scorer.scoring.weights import resolve_context

    config = _load_config_or_exit(config_path)
    _configure_logging(config)
    weights = _load_weights_or_exit(config)

    active = resolve_context(context or config.scoring.default_context)
    typer.echo(format_weights_table(weights, active))


@app.command("score")
def score(
    input_file: str = typer.Argument(
        ...,
        help="JSON file of extracted page facts.",
    ),
    context: Optional[str] = typer.Option(
        None,
        "--context",
        help="want | need | hybrid (default: scoring.default_context).",
    ),
    verify_image: bool = typer.Option(
        False,
        "--verify-image/--no-verify-image",
        help="Fetch the og:image URL over HTTP to resolve its real format.",
    ),
    save: bool = typer.Option(
        True,
        "--save/--no-save",
        help="Record the result in the score history DB.",
    ),
    output_dir: Optional[str] = typer.Option(
        None,
        "--output-dir",
        help="Directory for the JSON report (default: output.reports_dir).",
    ),
    as_json: bool = typer.Option(
        False,
        "--json",
        help="Print the full JSON report to stdout instead of the text summary.",
    ),
    show_factors: bool = typer.Option(
        False,
        "--factors",
        help="List every factor under its category in the text summary.",
    ),
    config_path: Optional[str] = typer.Option(
        None,
        "--config",
        help="Path to TOML config file.",
    ),
) -> None:
    """Score one product page and print ranked recommendations.

    Writes a JSON report to the reports directory and, unless ``--no-save``
    is given, appends a summary to the score history.
    """
    from pydantic import ValidationError

    from visibility_scorer.models.history import build_history_entry
    from visibility_scorer.models.page_data import ExtractedPageData
    from visibility_scorer.recommendations.ranker import build_recommendations
    from visibility_scorer.recommendations.reporter import (
        build_report_payload,
        write_report_json,
    )
    from visibility_scorer.reporting.formatters import format_score_report
    from visibility_scorer.scoring.engine import ScoringEngine

    config = _load_config_or_exit(config_path)
    _configure_logging(config)
    weights = _load_weights_or_exit(config)

    input_path = Path(input_file)
    if not input_path.exists():
        typer.echo(f"[ERROR] Input file not found: {input_path}", err=True)
        raise typer.Exit(code=1)

    try:
        raw = json.loads(input_path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        typer.echo(f"[ERROR] JSON parse error: {exc}", err=True)
        raise typer.Exit(code=1)

    if not isinstance(raw, dict):
        typer.echo("[ERROR] Input file must contain a JSON object.", err=True)
        raise typer.Exit(code=1)

    try:
        page = ExtractedPageData.model_validate(raw)
    except ValidationError as exc:
        typer.echo(f"[ERROR] Page data failed validation:\n{exc}", err=True)
        raise typer.Exit(code=1)

    image_result = None
    og_image = page.meta_tags.open_graph.image
    if verify_image and og_image:
        from visibility_scorer.verification.image_format import ImageFormatVerifier

        with ImageFormatVerifier.from_config(config.verification) as verifier:
            image_result = verifier.verify(og_image)
        if not as_json:
            typer.echo(
                f"  og:image verified: {image_result.format or 'unknown'} "
                f"(via {image_result.method})"
            )
    elif verify_image and not as_json:
        typer.echo("  og:image verification skipped: no og:image URL.")

    engine = ScoringEngine(context or config.scoring.default_context, weights)
    result = engine.score(page, image_verification=image_result)
    recommendations = build_recommendations(result, config.recommendations)

    if as_json:
        payload = build_report_payload(result, recommendations, page.page_info, weights)
        typer.echo(json.dumps(payload, indent=2, default=str))
    else:
        typer.echo(
            format_score_report(result, recommendations, page.page_info, show_factors, weights)
        )

    report_dir = Path(output_dir or config.output.reports_dir)
    report_path = write_report_json(result, recommendations, report_dir, page.page_info, weights)

    entry_id = None
    if save:
        from visibility_scorer.db.repositories.history_repo import HistoryRepository
        from visibility_scorer.db.schema import apply_schema

        entry = build_history_entry(result, recommendations, page.page_info)
        with _open_history(config) as conn:
            apply_schema(conn)
            repo = HistoryRepository(conn)
            entry_id = repo.insert(entry)
            repo.trim(config.history.max_entries)

    if not as_json:
        typer.echo("")
        typer.echo(f"  Report:  {report_path}")
        if entry_id:
            typer.echo(f"  History: {entry_id}")
        typer.echo("[OK] Page scored.")


@app.command("history")
def history(
    limit: int = typer.Option(
        20,
        "--limit",
        min=1,
        help="Number of most recent entries to show.",
    ),
    domain: Optional[str] = typer.Option(
        None,
        "--domain",
        help="Only show entries for this domain (case-insensitive).",
    ),
    config_path: Optional[str] = typer.Option(
        None,
        "--config",
        help="Path to TOML config file.",
    ),
) -> None:
    """List recent score history entries, newest first (optionally one domain)."""
    from visibility_scorer.db.repositories.history_repo import HistoryRepository
    from visibility_scorer.db.schema import apply_schema
    from visibility_scorer.reporting.formatters import format_history_table

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    with _open_history(config) as conn:
        apply_schema(conn)
        repo = HistoryRepository(conn)
        if domain:
            entries = repo.list_by_domain(domain, limit=limit)
        else:
            entries = repo.list_recent(limit=limit)

    typer.echo(format_history_table(entries, domain))


@app.command("history-show")
def history_show(
    entry_id: str = typer.Argument(..., help="History entry id."),
    config_path: Optional[str] = typer.Option(
        None,
        "--config",
        help="Path to TOML config file.",
    ),
) -> None:
    """Show one history entry with its per-category scores."""
    from visibility_scorer.db.repositories.history_repo import HistoryRepository
    from visibility_scorer.db.schema import apply_schema
    from visibility_scorer.reporting.formatters import format_history_entry

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    with _open_history(config) as conn:
        apply_schema(conn)
        entry = HistoryRepository(conn).get(entry_id)

    if entry is None:
        typer.echo(f"[ERROR] No history entry with id '{entry_id}'.", err=True)
        raise typer.Exit(code=1)

    typer.echo(format_history_entry(entry))


@app.command("history-delete")
def history_delete(
    entry_id: str = typer.Argument(..., help="History entry id."),
    config_path: Optional[str] = typer.Option(
        None,
        "--config",
        help="Path to TOML config file.",
    ),
) -> None:
    """Delete one history entry."""
    from visibility_scorer.db.repositories.history_repo import HistoryRepository
    from visibility_scorer.db.schema import apply_schema

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    with _open_history(config) as conn:
        apply_schema(conn)
        removed = HistoryRepository(conn).delete(entry_id)

    if not removed:
        typer.echo(f"[ERROR] No history entry with id '{entry_id}'.", err=True)
        raise typer.Exit(code=1)

    typer.echo(f"[OK] Deleted history entry {entry_id}.")


@app.command("history-clear")
def history_clear(
    yes: bool = typer.Option(
        False,
        "--yes",
        help="Confirm deletion of every history entry.",
    ),
    config_path: Optional[str] = typer.Option(
        None,
        "--config",
        help="Path to TOML config file.",
    ),
) -> None:
    """Delete every score history entry (requires --yes)."""
    from visibility_scorer.db.repositories.history_repo import HistoryRepository
    from visibility_scorer.db.schema import apply_schema

    if not yes:
        typer.echo("[ERROR] Refusing to clear history without --yes.", err=True)
        raise typer.Exit(code=1)

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    with _open_history(config) as conn:
        apply_schema(conn)
        removed = HistoryRepository(conn).clear()

    typer.echo(f"[OK] Cleared {removed} history entries.")


@app.command("history-export")
def history_export(
    output_path: str = typer.Argument(..., help="Destination file (.json or .csv)."),
    domain: Optional[str] = typer.Option(
        None,
        "--domain",
        help="Only export entries for this domain (case-insensitive).",
    ),
    config_path: Optional[str] = typer.Option(
        None,
        "--config",
        help="Path to TOML config file.",
    ),
) -> None:
    """Export score history, newest first, to a JSON or CSV file."""
    from visibility_scorer.db.repositories.history_repo import HistoryRepository
    from visibility_scorer.db.schema import apply_schema
    from visibility_scorer.reporting.export import export_history_csv, export_history_json

    out = Path(output_path)
    fmt = out.suffix.lower()
    if fmt not in (".json", ".csv"):
        typer.echo(
            f"[ERROR] Unsupported file format '{fmt or out.name}'. Use .json or .csv.", err=True
        )
        raise typer.Exit(code=1)

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    with _open_history(config) as conn:
        apply_schema(conn)
        repo = HistoryRepository(conn)
        entries = repo.list_by_domain(domain) if domain else repo.list_all()

    try:
        if fmt == ".json":
            written = export_history_json(entries, out)
        else:
            written = export_history_csv(entries, out)
    except OSError as exc:
        typer.echo(f"[ERROR] Could not write export: {exc}", err=True)
        raise typer.Exit(code=1)

    typer.echo(f"[OK] Exported {len(entries)} history entries to {written}.")


@app.command("history-stats")
def history_stats(
    config_path: Optional[str] = typer.Option(
        None,
        "--config",
        help="Path to TOML config file.",
    ),
) -> None:
    """Show history entry count, date range and database size."""
    from visibility_scorer.db.repositories.history_repo import HistoryRepository
    from visibility_scorer.db.schema import apply_schema
    from visibility_scorer.reporting.formatters import format_history_stats

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    with _open_history(config) as conn:
        apply_schema(conn)
        stats = HistoryRepository(conn).stats()

    typer.echo(format_history_stats(stats, str(config.history.db_path)))


if __name__ == "__main__":
    app()
