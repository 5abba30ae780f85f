"""
Opening the planner database.

``get_connection()`` yields a connection whose rows are ``sqlite3.Row``
(column access by name), commits when the block finishes and rolls back when
it raises.  A file-backed database gets its directory created on first use;
``":memory:"`` is passed straight through for tests.

    with get_connection(config.database.db_path) as conn:
        apply_schema(conn)
        ScheduleRepository(conn, "local").add_entry(entry)
"""

from __future__ import annotations

import logging
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

logger = logging.getLogger(__name__)

MEMORY_DB = ":memory:"


def _apply_pragmas(
    conn: sqlite3.Connection, db_path: str, busy_timeout_ms: int, wal_mode: bool
) -> None:
    conn.execute(f"PRAGMA busy_timeout = {int(busy_timeout_ms)};")
    if wal_mode and db_path != MEMORY_DB:
        conn.execute("PRAGMA journal_mode = WAL;")


@contextmanager
def get_connection(
    db_path: str,
    wal_mode: bool = True,
    busy_timeout_ms: int = 5000,
) -> Iterator[sqlite3.Connection]:
    """Yield an open connection scoped to one unit of work.

    Args:
        db_path:         SQLite file, or ``":memory:"``.
        wal_mode:        Switch file databases to write-ahead logging.
        busy_timeout_ms: How long a writer waits on a locked database.

    Raises:
        sqlite3.OperationalError: The file cannot be opened or stays locked.
    """
    if db_path != MEMORY_DB:
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)

    conn = sqlite3.connect(db_path, timeout=busy_timeout_ms / 1000)
    conn.row_factory = sqlite3.Row
    try:
        _apply_pragmas(conn, db_path, busy_timeout_ms, wal_mode)
        logger.debug("Opened %s (wal=%s)", db_path, wal_mode)
        yield conn
    except Exception:
        conn.rollback()
        raise
    else:
        conn.commit()
    finally:
        conn.close()
