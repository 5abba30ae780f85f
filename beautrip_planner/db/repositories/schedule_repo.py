"""
Schedule repository: a user's planned procedures, travel period and
favorite treatments, stored through ``UserStoreRepository``.

Entries are kept as one JSON array per user in insertion order; that order is
the order the schedule model sees (it decides which overlapping recovery
window reports its index first).
"""

from __future__ import annotations

import logging
import sqlite3
from typing import Optional, Union

from beautrip_planner.db.repositories.user_store_repo import (
    ENTITY_FAVORITES,
    ENTITY_SCHEDULES,
    ENTITY_TRAVEL_PERIOD,
    UserStoreRepository,
)
from beautrip_planner.models.schedule import ScheduleEntry, TravelPeriod

logger = logging.getLogger(__name__)


class ScheduleRepository:
    """Typed access to one user's planner data.

    Attributes:
        store: Underlying key-value repository.
        user_scope: Identifier of the user whose data is read and written.
    """

    def __init__(self, conn: sqlite3.Connection, user_scope: str) -> None:
        self.store = UserStoreRepository(conn)
        self.user_scope = user_scope

    # ── Schedule entries ──────────────────────────────────────────────────────

    def list_entries(self) -> list[ScheduleEntry]:
        raw = self.store.get(self.user_scope, ENTITY_SCHEDULES) or []
        return [ScheduleEntry.model_validate(item) for item in raw]

    def add_entry(self, entry: ScheduleEntry) -> ScheduleEntry:
        """Append ``entry`` (replacing any entry with the same ``entry_id``)."""
        entries = [e for e in self.list_entries() if e.entry_id != entry.entry_id]
        entries.append(entry)
        self._save_entries(entries)
        logger.info("Schedule entry %s added for user %s", entry.entry_id, self.user_scope)
        return entry

    def remove_entry(self, entry_id: str) -> bool:
        """Delete an entry by id; return ``True`` if it existed."""
        entries = self.list_entries()
        remaining = [e for e in entries if e.entry_id != entry_id]
        if len(remaining) == len(entries):
            return False
        self._save_entries(remaining)
        logger.info("Schedule entry %s removed for user %s", entry_id, self.user_scope)
        return True

    def _save_entries(self, entries: list[ScheduleEntry]) -> None:
        self.store.set(
            self.user_scope,
            ENTITY_SCHEDULES,
            [e.model_dump(mode="json") for e in entries],
        )

    # ── Travel period ─────────────────────────────────────────────────────────

    def get_travel_period(self) -> Optional[TravelPeriod]:
        raw = self.store.get(self.user_scope, ENTITY_TRAVEL_PERIOD)
        if raw is None:
            return None
        return TravelPeriod.model_validate(raw)

    def set_travel_period(self, period: TravelPeriod) -> None:
        self.store.set(self.user_scope, ENTITY_TRAVEL_PERIOD, period.model_dump(mode="json"))

    def clear_travel_period(self) -> bool:
        return self.store.delete(self.user_scope, ENTITY_TRAVEL_PERIOD)

    # ── Favorites ─────────────────────────────────────────────────────────────

    def list_favorites(self) -> list[Union[int, str]]:
        return list(self.store.get(self.user_scope, ENTITY_FAVORITES) or [])

    def toggle_favorite(self, treatment_id: Union[int, str]) -> bool:
        """Add or remove a favorite; return ``True`` if it is now a favorite."""
        favorites = self.list_favorites()
        if treatment_id in favorites:
            favorites.remove(treatment_id)
            now_favorite = False
        else:
            favorites.append(treatment_id)
            now_favorite = True
        self.store.set(self.user_scope, ENTITY_FAVORITES, favorites)
        return now_favorite
