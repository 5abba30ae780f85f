"""
User-scoped key-value repository over the ``user_store`` table.

Each ``(user_scope, entity_type)`` pair holds one JSON document.  Entity
types are a closed set so that a typo cannot silently create a new bucket.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Optional

from beautrip_planner.db.repositories.base import BaseRepository

logger = logging.getLogger(__name__)

ENTITY_FAVORITES = "favorites"
ENTITY_SCHEDULES = "schedules"
ENTITY_TRAVEL_PERIOD = "travel_period"

VALID_ENTITY_TYPES = frozenset({ENTITY_FAVORITES, ENTITY_SCHEDULES, ENTITY_TRAVEL_PERIOD})


def _check_entity_type(entity_type: str) -> None:
    if entity_type not in VALID_ENTITY_TYPES:
        raise ValueError(
            f"Unknown entity type '{entity_type}'. "
            f"Must be one of {sorted(VALID_ENTITY_TYPES)}."
        )


class UserStoreRepository(BaseRepository):
    """Read/write access to the ``user_store`` table."""

    def get(self, user_scope: str, entity_type: str) -> Optional[Any]:
        """Return the decoded document, or ``None`` if nothing is stored.

        Raises:
            ValueError: If ``entity_type`` is unknown.
        """
        _check_entity_type(entity_type)
        row = self.fetchone(
            "SELECT payload_json FROM user_store WHERE user_scope = ? AND entity_type = ?;",
            (user_scope, entity_type),
        )
        if row is None:
            return None
        return json.loads(row["payload_json"])

    def set(self, user_scope: str, entity_type: str, value: Any) -> None:
        """Insert or replace the document for ``(user_scope, entity_type)``.

        Raises:
            ValueError: If ``entity_type`` is unknown.
        """
        _check_entity_type(entity_type)
        self.execute(
            """
            INSERT INTO user_store (user_scope, entity_type, payload_json, updated_at)
            VALUES (?, ?, ?, strftime('%Y-%m-%dT%H:%M:%SZ', 'now'))
            ON CONFLICT(user_scope, entity_type) DO UPDATE SET
                payload_json = excluded.payload_json,
                updated_at   = excluded.updated_at;
            """,
            (user_scope, entity_type, json.dumps(value, ensure_ascii=False, default=str)),
        )

    def delete(self, user_scope: str, entity_type: str) -> bool:
        """Delete the document; return ``True`` if one existed.

        Raises:
            ValueError: If ``entity_type`` is unknown.
        """
        _check_entity_type(entity_type)
        cur = self.execute(
            "DELETE FROM user_store WHERE user_scope = ? AND entity_type = ?;",
            (user_scope, entity_type),
        )
        return cur.rowcount > 0
