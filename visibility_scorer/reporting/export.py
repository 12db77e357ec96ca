"""
Export helpers for score history.

All functions write to disk and return the written ``Path``.

The JSON export keeps each entry's nested ``category_scores``; the CSV
export is flat, one row per entry with one ``<category>_score`` column per
category, so it loads directly in a spreadsheet or pandas.
"""

from __future__ import annotations

import csv
import json
from pathlib import Path

from visibility_scorer.models.history import HistoryEntry
from visibility_scorer.taxonomy.scoring_taxonomy import CategoryKey
from visibility_scorer.utils.time_utils import isoformat_z

HISTORY_CSV_COLUMNS: list[str] = [
    "entry_id",
    "created_at",
    "url",
    "title",
    "domain",
    "total_score",
    "grade",
    "context",
    *(f"{key.value}_score" for key in CategoryKey),
    "recommendation_count",
    "critical_count",
]


def export_to_csv(
    records: list[dict],
    path: Path,
    fieldnames: list[str] | None = None,
) -> Path:
    """Write ``records`` to a UTF-8 CSV file.

    Args:
        records:    List of row dicts.
        path:       Destination file path (parent dirs created if missing).
        fieldnames: Column order.  If None, uses the keys of the first record.

    Returns:
        ``path`` as written.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    if not records and not fieldnames:
        path.write_text("", encoding="utf-8")
        return path
    cols = fieldnames or list(records[0].keys())
    with path.open("w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=cols, extrasaction="ignore")
        writer.writeheader()
        writer.writerows(records)
    return path


def export_to_json(data: dict | list, path: Path) -> Path:
    """Write ``data`` to a pretty-printed JSON file (parent dirs created)."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2, default=str), encoding="utf-8")
    return path


def flatten_history_for_export(entries: list[HistoryEntry]) -> list[dict]:
    """One flat row per entry; categories without a score are left blank."""
    rows: list[dict] = []
    for e in entries:
        row = {
            "entry_id":             e.entry_id,
            "created_at":           isoformat_z(e.created_at),
            "url":                  e.url or "",
            "title":                e.title or "",
            "domain":               e.domain or "",
            "total_score":          e.total_score,
            "grade":                e.grade.value,
            "context":              e.context.value,
            "recommendation_count": e.recommendation_count,
            "critical_count":       e.critical_count,
        }
        for key in CategoryKey:
            cs = e.category_scores.get(key)
            row[f"{key.value}_score"] = cs.score if cs else ""
        rows.append(row)
    return rows


def export_history_json(entries: list[HistoryEntry], path: Path) -> Path:
    """Write history entries, newest first as given, to a JSON array."""
    return export_to_json([e.model_dump(mode="json") for e in entries], path)


def export_history_csv(entries: list[HistoryEntry], path: Path) -> Path:
    """Write history entries to CSV; an empty history still gets a header row."""
    return export_to_csv(flatten_history_for_export(entries), path, HISTORY_CSV_COLUMNS)
