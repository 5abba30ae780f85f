"""
SQLite schema DDL for the user store.

One table holds every user-scoped entity as a JSON document keyed by
``(user_scope, entity_type)``.  ``apply_schema()`` is idempotent: all
statements use ``IF NOT EXISTS``.
"""

from __future__ import annotations

import logging
import sqlite3

logger = logging.getLogger(__name__)

_DDL_USER_STORE = """
CREATE TABLE IF NOT EXISTS user_store (
    user_scope   TEXT NOT NULL,
    entity_type  TEXT NOT NULL,
    payload_json TEXT NOT NULL,
    updated_at   TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ', 'now')),
    PRIMARY KEY (user_scope, entity_type)
);
"""

_DDL_INDEXES = """
CREATE INDEX IF NOT EXISTS idx_user_store_entity ON user_store (entity_type);
"""

ALL_TABLE_NAMES: tuple[str, ...] = ("user_store",)


def apply_schema(conn: sqlite3.Connection) -> None:
    """Create all tables and indexes if they do not already exist."""
    conn.executescript(_DDL_USER_STORE + _DDL_INDEXES)
    logger.debug("Schema applied: %s", ", ".join(ALL_TABLE_NAMES))
