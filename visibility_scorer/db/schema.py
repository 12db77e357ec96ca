"""
SQLite schema DDL for the score history store.

All statements use ``IF NOT EXISTS`` so ``apply_schema()`` is idempotent:
safe to call on every CLI invocation and in tests.

One table:
  score_history: one summarised row per scoring run (no factor lists).
"""

from __future__ import annotations

import logging
import sqlite3

logger = logging.getLogger(__name__)

# ── DDL statements ─────────────────────────────────────────────────────────────

_DDL_SCORE_HISTORY = """
CREATE TABLE IF NOT EXISTS score_history (
    entry_id             TEXT    PRIMARY KEY,
    url                  TEXT,
    title                TEXT,
    domain               TEXT,
    total_score          INTEGER NOT NULL CHECK (total_score BETWEEN 0 AND 100),
    grade                TEXT    NOT NULL CHECK (grade IN ('A', 'B', 'C', 'D', 'F')),
    context              TEXT    NOT NULL CHECK (context IN ('want', 'need', 'hybrid')),
    category_scores      TEXT    NOT NULL,          -- JSON {key: {score, name}}
    recommendation_count INTEGER NOT NULL DEFAULT 0,
    critical_count       INTEGER NOT NULL DEFAULT 0,
    created_at           TEXT    NOT NULL
);
"""

_DDL_SCORE_HISTORY_INDEXES = """
CREATE INDEX IF NOT EXISTS idx_score_history_created ON score_history(created_at);
CREATE INDEX IF NOT EXISTS idx_score_history_domain  ON score_history(domain);
"""

_ALL_DDL: list[str] = [
    _DDL_SCORE_HISTORY,
    _DDL_SCORE_HISTORY_INDEXES,
]

# Table names for introspection / tests
ALL_TABLE_NAMES = [
    "score_history",
]


def apply_schema(conn: sqlite3.Connection) -> None:
    """Apply all DDL statements to ``conn``.

    Args:
        conn: An open ``sqlite3.Connection``.
    """
    logger.debug("Applying schema to database...")

    for ddl in _ALL_DDL:
        for statement in _split_ddl(ddl):
            conn.execute(statement)

    conn.commit()
    logger.debug("Schema applied: %d tables, indexes created/verified.", len(ALL_TABLE_NAMES))


def _split_ddl(ddl: str) -> list[str]:
    """Split a multi-statement DDL block on semicolons."""
    return [s.strip() for s in ddl.split(";") if s.strip()]


def get_existing_tables(conn: sqlite3.Connection) -> list[str]:
    """Return table names present in the database, sorted alphabetically."""
    rows = conn.execute(
        "SELECT name FROM sqlite_master WHERE type='table' ORDER BY name;"
    ).fetchall()
    return [row["name"] for row in rows]


def get_existing_indexes(conn: sqlite3.Connection) -> list[str]:
    """Return user-defined index names, sorted alphabetically."""
    rows = conn.execute(
        "SELECT name FROM sqlite_master WHERE type='index' AND name NOT LIKE 'sqlite_%' "
        "ORDER BY name;"
    ).fetchall()
    return [row["name"] for row in rows]
