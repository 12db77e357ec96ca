"""Tests for visibility_scorer.reporting.export."""

from __future__ import annotations

import csv
import json
from datetime import datetime, timezone
from pathlib import Path

from visibility_scorer.models.history import HistoryCategoryScore, HistoryEntry
from visibility_scorer.reporting.export import (
    HISTORY_CSV_COLUMNS,
    export_history_csv,
    export_history_json,
    export_to_csv,
    export_to_json,
    flatten_history_for_export,
)
from visibility_scorer.taxonomy.scoring_taxonomy import CategoryKey, Context, Grade


def _entry(entry_id: str = "abc123", url: str | None = "https://shop.example/p/1") -> HistoryEntry:
    return HistoryEntry(
        entry_id=entry_id,
        url=url,
        title="Widget, large",
        domain="shop.example" if url else None,
        total_score=83,
        grade=Grade.B,
        context=Context.WANT,
        category_scores={
            CategoryKey.STRUCTURED_DATA: HistoryCategoryScore(score=90, name="Structured Data"),
            CategoryKey.AUTHORITY_TRUST: HistoryCategoryScore(score=40, name="Authority & Trust"),
        },
        recommendation_count=4,
        critical_count=1,
        created_at=datetime(2026, 10, 18, 9, 30, tzinfo=timezone.utc),
    )


# ── Generic writers ───────────────────────────────────────────────────────────


def test_export_to_csv_custom_fieldnames(tmp_path: Path) -> None:
    """Custom fieldnames control column order; extra keys are ignored."""
    out = tmp_path / "cols.csv"
    export_to_csv([{"a": 1, "b": 2, "c": 3}], out, fieldnames=["c", "a"])

    with out.open(encoding="utf-8") as f:
        assert f.readline().strip() == "c,a"


def test_export_to_csv_empty_without_fieldnames(tmp_path: Path) -> None:
    out = tmp_path / "empty.csv"
    export_to_csv([], out)
    assert out.read_text(encoding="utf-8") == ""


def test_export_to_json_creates_parents(tmp_path: Path) -> None:
    out = tmp_path / "nested" / "dir" / "data.json"
    result = export_to_json({"when": datetime(2026, 10, 18)}, out)
    assert result == out
    assert json.loads(out.read_text(encoding="utf-8")) == {"when": "2026-10-18 00:00:00"}


# ── History exports ───────────────────────────────────────────────────────────


def test_flatten_history_columns() -> None:
    """One column per category; categories missing from an entry stay blank."""
    row = flatten_history_for_export([_entry()])[0]
    assert set(row) == set(HISTORY_CSV_COLUMNS)
    assert row["created_at"] == "2026-10-18T09:30:00Z"
    assert row["grade"] == "B"
    assert row["context"] == "want"
    assert row["structured_data_score"] == 90
    assert row["content_quality_score"] == ""


def test_flatten_history_without_url() -> None:
    row = flatten_history_for_export([_entry(url=None)])[0]
    assert row["url"] == ""
    assert row["domain"] == ""


def test_export_history_csv(tmp_path: Path) -> None:
    """Rows keep the given order and quote commas in titles."""
    out = tmp_path / "history.csv"
    result = export_history_csv([_entry("new"), _entry("old")], out)

    assert result == out
    with out.open(encoding="utf-8", newline="") as f:
        rows = list(csv.DictReader(f))
    assert [r["entry_id"] for r in rows] == ["new", "old"]
    assert rows[0]["title"] == "Widget, large"
    assert rows[0]["authority_trust_score"] == "40"


def test_export_history_csv_empty_has_header(tmp_path: Path) -> None:
    out = tmp_path / "history.csv"
    export_history_csv([], out)
    assert out.read_text(encoding="utf-8").strip() == ",".join(HISTORY_CSV_COLUMNS)


def test_export_history_json(tmp_path: Path) -> None:
    out = tmp_path / "history.json"
    export_history_json([_entry("new"), _entry("old")], out)

    data = json.loads(out.read_text(encoding="utf-8"))
    assert [e["entry_id"] for e in data] == ["new", "old"]
    assert data[0]["grade"] == "B"
    assert data[0]["category_scores"]["structured_data"] == {"score": 90, "name": "Structured Data"}
