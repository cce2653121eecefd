"""
Recency windowing and identity deduplication of candidate pools.
"""
from __future__ import annotations

import time
from typing import Iterable, List, Optional, Sequence

from trendscan.models import Item

DEFAULT_WINDOW_SECONDS = 24 * 60 * 60


def filter_recent(
    items: Iterable[Item],
    window_seconds: float = DEFAULT_WINDOW_SECONDS,
    now: Optional[float] = None,
) -> List[Item]:
    """
    Keep items created within `window_seconds` of `now`.

    Args:
        items: Candidate items, order is preserved
        window_seconds: Maximum age in seconds (inclusive)
        now: Reference unix timestamp, defaults to the current time

    Returns:
        Items whose age is <= window_seconds. Items dated in the future have a
        negative age and are kept.
    """
    if now is None:
        now = time.time()
    return [item for item in items if now - item.created_at <= window_seconds]


def merge_unique(item_lists: Iterable[Sequence[Item]]) -> List[Item]:
    """
    Concatenate item lists and drop every repeat of an id already seen.

    Args:
        item_lists: Lists in the order they should be considered

    Returns:
        Items in first-seen order; the first occurrence of each id wins
    """
    seen_ids: set[str] = set()
    unique_items: List[Item] = []

    for items in item_lists:
        for item in items:
            if item.id in seen_ids:
                continue
            seen_ids.add(item.id)
            unique_items.append(item)

    return unique_items
