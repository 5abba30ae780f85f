"""
Order-preserving deduplication helpers for ranked item lists.

``dedupe_consecutive_by_name`` runs first on a score-sorted list and collapses
adjacent repeats; ``limit_by_key`` then caps how many items may share a key
across the whole list.  Neither function sorts or mutates its input.
"""

from __future__ import annotations

from collections import defaultdict
from typing import Any, Callable, Hashable, Iterable, Optional, TypeVar

T = TypeVar("T")


def _is_blank(key: Optional[Hashable]) -> bool:
    if key is None:
        return True
    return isinstance(key, str) and not key.strip()


def limit_by_key(
    items:  Iterable[T],
    key_fn: Callable[[T], Optional[Hashable]],
    limit:  int,
) -> list[T]:
    """Keep at most ``limit`` items per key, first-seen first-kept.

    Items whose key is ``None`` or a blank string are always kept.

    Args:
        items:  Input sequence (not modified).
        key_fn: Extracts the grouping key from an item.
        limit:  Maximum occurrences per non-blank key; ``<= 0`` drops them all.

    Returns:
        A sub-sequence of ``items`` in original relative order.
    """
    seen: dict[Hashable, int] = defaultdict(int)
    kept: list[T] = []
    for item in items:
        key = key_fn(item)
        if _is_blank(key):
            kept.append(item)
            continue
        if seen[key] < limit:
            seen[key] += 1
            kept.append(item)
    return kept


def dedupe_consecutive_by_name(sorted_items: Iterable[Any]) -> list[Any]:
    """Collapse adjacent runs of the same ``name`` to their first item.

    An item is dropped when its name equals the previous *kept* item's name.
    Non-adjacent repeats survive (``limit_by_key`` caps those).  Blank names
    are never collapsed.
    """
    kept: list[Any] = []
    prev_name: Optional[str] = None
    for item in sorted_items:
        name = getattr(item, "name", None)
        if not _is_blank(name) and name == prev_name:
            continue
        kept.append(item)
        prev_name = name
    return kept
