"""
Repository for score history: insert, fetch, list, delete, trim and stats.
"""

from __future__ import annotations

import json
import logging
import sqlite3
from datetime import datetime
from typing import Optional

from visibility_scorer.db.repositories.base import BaseRepository
from visibility_scorer.models.history import HistoryCategoryScore, HistoryEntry, HistoryStats
from visibility_scorer.taxonomy.scoring_taxonomy import CategoryKey, Context, Grade

logger = logging.getLogger(__name__)

# Newest first; rowid breaks ties between entries created in the same instant.
_NEWEST_FIRST = "ORDER BY created_at DESC, rowid DESC"


class HistoryRepository(BaseRepository):
    """Read/write access to the ``score_history`` table."""

    def insert(self, entry: HistoryEntry) -> str:
        """Persist ``entry`` and return its ``entry_id``."""
        self.execute(
            """
            INSERT INTO score_history (
                entry_id, url, title, domain, total_score, grade, context,
                category_scores, recommendation_count, critical_count, created_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?);
            """,
            (
                entry.entry_id,
                entry.url,
                entry.title,
                entry.domain,
                entry.total_score,
                entry.grade.value,
                entry.context.value,
                json.dumps(
                    {k.value: v.model_dump() for k, v in entry.category_scores.items()}
                ),
                entry.recommendation_count,
                entry.critical_count,
                entry.created_at.isoformat(),
            ),
        )
        logger.info(
            "History entry saved: %s (score=%d, grade=%s)",
            entry.entry_id, entry.total_score, entry.grade,
        )
        return entry.entry_id

    def get(self, entry_id: str) -> Optional[HistoryEntry]:
        """Fetch a single entry by id, or ``None`` if not found."""
        row = self.fetchone(
            "SELECT * FROM score_history WHERE entry_id = ?;", (entry_id,)
        )
        return _row_to_entry(row) if row else None

    def list_recent(self, limit: int = 20) -> list[HistoryEntry]:
        """Most recent entries first."""
        rows = self.fetchall(
            f"SELECT * FROM score_history {_NEWEST_FIRST} LIMIT ?;", (limit,)
        )
        return [_row_to_entry(r) for r in rows]

    def list_by_domain(self, domain: str, limit: Optional[int] = None) -> list[HistoryEntry]:
        """Entries for one domain (case-insensitive), newest first."""
        sql = f"SELECT * FROM score_history WHERE lower(domain) = ? {_NEWEST_FIRST}"
        params: tuple = (domain.lower(),)
        if limit is not None:
            sql += " LIMIT ?"
            params += (limit,)
        rows = self.fetchall(sql + ";", params)
        return [_row_to_entry(r) for r in rows]

    def list_all(self) -> list[HistoryEntry]:
        """Every entry, newest first."""
        rows = self.fetchall(f"SELECT * FROM score_history {_NEWEST_FIRST};")
        return [_row_to_entry(r) for r in rows]

    def delete(self, entry_id: str) -> bool:
        """Delete one entry. Returns ``True`` if a row was removed."""
        cur = self.execute("DELETE FROM score_history WHERE entry_id = ?;", (entry_id,))
        return cur.rowcount > 0

    def clear(self) -> int:
        """Delete every entry. Returns the number of rows removed."""
        cur = self.execute("DELETE FROM score_history;")
        logger.info("History cleared: %d entries removed", cur.rowcount)
        return cur.rowcount

    def trim(self, max_entries: int) -> int:
        """Keep only the newest ``max_entries`` rows. Returns rows removed."""
        cur = self.execute(
            f"""
            DELETE FROM score_history
            WHERE entry_id NOT IN (
                SELECT entry_id FROM score_history {_NEWEST_FIRST} LIMIT ?
            );
            """,
            (max_entries,),
        )
        if cur.rowcount:
            logger.info("History trimmed: %d old entries removed", cur.rowcount)
        return cur.rowcount

    def count(self) -> int:
        """Return total number of entries in the table."""
        row = self.fetchone("SELECT COUNT(*) AS n FROM score_history;")
        assert row is not None
        return int(row["n"])

    def stats(self) -> HistoryStats:
        """Entry count, oldest/newest creation time and database size."""
        row = self.fetchone(
            "SELECT COUNT(*) AS n, MIN(created_at) AS oldest, MAX(created_at) AS newest "
            "FROM score_history;"
        )
        assert row is not None
        page_count = self.fetchone("PRAGMA page_count;")
        page_size = self.fetchone("PRAGMA page_size;")
        return HistoryStats(
            entry_count=int(row["n"]),
            oldest_at=datetime.fromisoformat(row["oldest"]) if row["oldest"] else None,
            newest_at=datetime.fromisoformat(row["newest"]) if row["newest"] else None,
            db_bytes=int(page_count[0]) * int(page_size[0]) if page_count and page_size else 0,
        )


# ── Private helper ────────────────────────────────────────────────────────────


def _row_to_entry(row: sqlite3.Row) -> HistoryEntry:
    """Convert a ``sqlite3.Row`` from ``score_history`` to a ``HistoryEntry``."""
    raw_scores = json.loads(row["category_scores"])
    return HistoryEntry(
        entry_id=row["entry_id"],
        url=row["url"],
        title=row["title"],
        domain=row["domain"],
        total_score=row["total_score"],
        grade=Grade(row["grade"]),
        context=Context(row["context"]),
        category_scores={
            CategoryKey(k): HistoryCategoryScore(**v) for k, v in raw_scores.items()
        },
        recommendation_count=row["recommendation_count"],
        critical_count=row["critical_count"],
        created_at=datetime.fromisoformat(row["created_at"]),
    )
