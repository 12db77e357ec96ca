"""
Opens the score history database.

``get_connection()`` is used by every history-touching CLI command as a
``with`` block; the caller applies the schema and hands the connection to
``HistoryRepository``.  The block commits when it exits normally and rolls
back when it raises, so a failed ``score`` never leaves half a history row.

Rows come back as ``sqlite3.Row``.  File databases run in WAL mode with a
busy timeout, letting ``history`` read while another ``score`` is writing.

Usage::

    from visibility_scorer.db.connection import get_connection

    with get_connection(config.history.db_path) as conn:
        apply_schema(conn)
        entries = HistoryRepository(conn).list_recent(10)
"""

from __future__ import annotations

import logging
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Generator

logger = logging.getLogger(__name__)


@contextmanager
def get_connection(
    db_path: str,
    wal_mode: bool = True,
    busy_timeout_ms: int = 5000,
) -> Generator[sqlite3.Connection, None, None]:
    """Yield a connection to ``db_path``, creating its directory first.

    Args:
        db_path: History database file, or ``":memory:"``.
        wal_mode: If ``True``, enable WAL journal mode.
        busy_timeout_ms: How long a locked database is retried.

    Raises:
        sqlite3.OperationalError: The file cannot be opened or stays locked.
    """
    if db_path != ":memory:":
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)

    conn = sqlite3.connect(db_path, timeout=busy_timeout_ms / 1000)
    conn.row_factory = sqlite3.Row

    try:
        conn.execute(f"PRAGMA busy_timeout = {int(busy_timeout_ms)};")
        if wal_mode and db_path != ":memory:":
            conn.execute("PRAGMA journal_mode = WAL;")

        yield conn
        conn.commit()

    except Exception:
        conn.rollback()
        raise

    finally:
        conn.close()
