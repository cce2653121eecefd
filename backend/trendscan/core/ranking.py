"""
Multi-criterion ranking of candidate pools.

Each criterion names the pool it ranks and the key it ranks by. Every sort is
stable, so exact ties keep the pool's assembly order.
"""
from __future__ import annotations

from typing import Callable, Dict, List, Optional, Sequence

from trendscan.models import Criterion, Item, SortMode

RankKey = Callable[[Item], float]


def hotness(item: Item) -> float:
    """Votes discounted by the share of downvotes."""
    return item.popularity * item.approval_ratio


def popularity(item: Item) -> float:
    return item.popularity


def discussion(item: Item) -> float:
    return item.discussion_count


def controversy(item: Item) -> float:
    return item.controversy_score


RANK_KEYS: Dict[Criterion, RankKey] = {
    Criterion.HOTTEST: hotness,
    Criterion.MOST_VOTED: popularity,
    Criterion.MOST_COMMENTED: discussion,
    Criterion.MOST_CONTROVERSIAL: controversy,
}

# None means the deduplicated pool across every sort mode;
# comment volume does not depend on which listing surfaced a post.
CRITERION_POOLS: Dict[Criterion, Optional[SortMode]] = {
    Criterion.HOTTEST: SortMode.HOT,
    Criterion.MOST_VOTED: SortMode.TOP,
    Criterion.MOST_COMMENTED: None,
    Criterion.MOST_CONTROVERSIAL: SortMode.CONTROVERSIAL,
}


def rank(pool: Sequence[Item], criterion: Criterion) -> List[Item]:
    """
    Sort a pool best-first under one criterion.

    Args:
        pool: Items in assembly order
        criterion: Ranking strategy

    Returns:
        New list, highest key first; equal keys keep their relative order
    """
    # sorted() stays stable with reverse=True
    return sorted(pool, key=RANK_KEYS[criterion], reverse=True)


def top_n(ranked: Sequence[Item], n: int) -> List[Item]:
    """Prefix take; shorter pools are returned whole."""
    return list(ranked[: max(0, n)])


def top_one(ranked: Sequence[Item]) -> Optional[Item]:
    return ranked[0] if ranked else None
