"""
Common base for the SQLite repositories.

A repository borrows the connection it is given and never commits or closes
it; ``get_connection()`` owns the transaction.
"""

from __future__ import annotations

import logging
import sqlite3
from typing import Any, Mapping, Optional, Sequence, Union

logger = logging.getLogger(__name__)

Params = Union[Sequence[Any], Mapping[str, Any]]


class BaseRepository:
    """Thin wrapper that logs every statement at DEBUG."""

    def __init__(self, conn: sqlite3.Connection) -> None:
        self.conn = conn

    def execute(self, sql: str, params: Params = ()) -> sqlite3.Cursor:
        logger.debug("%s -- %r", " ".join(sql.split()), params)
        return self.conn.execute(sql, params)

    def fetchone(self, sql: str, params: Params = ()) -> Optional[sqlite3.Row]:
        return self.execute(sql, params).fetchone()
