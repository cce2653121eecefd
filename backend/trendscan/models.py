"""
File: trendscan/models.py
Internal data structures used during one aggregation run.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Tuple, Union


DEFAULT_PAGE_LIMIT = 50


class SortMode(str, Enum):
    """Listing variants a subreddit can be queried with."""

    HOT = "hot"
    NEW = "new"
    RISING = "rising"
    TOP = "top"
    CONTROVERSIAL = "controversial"

    @property
    def time_bounded(self) -> bool:
        # only these listings accept the `t=` range token
        return self in (SortMode.TOP, SortMode.CONTROVERSIAL)


class Criterion(str, Enum):
    HOTTEST = "hottest"
    MOST_VOTED = "mostVoted"
    MOST_COMMENTED = "mostCommented"
    MOST_CONTROVERSIAL = "mostControversial"


class FailureKind(str, Enum):
    SOURCE_UNAVAILABLE = "SourceUnavailable"
    MALFORMED_PAYLOAD = "MalformedPayload"


@dataclass
class Item:
    """One candidate post, normalized from a listing payload.

    `id` is the identity key: the same post fetched through different sort
    modes carries the same id.
    """

    id: str
    title: str
    source_name: str  # subreddit, grouping only
    created_at: float  # unix seconds, UTC
    popularity: int = 0  # net votes
    approval_ratio: float = 0.0  # [0, 1]
    discussion_count: int = 0
    permalink: str = ""

    @property
    def controversy_score(self) -> float:
        return self.popularity * (1 - self.approval_ratio)


@dataclass(frozen=True)
class SourceSpec:
    """Static configuration for one source: which listings to pull and how many items each."""

    name: str
    sort_modes: Tuple[SortMode, ...]
    # (sort mode, page size) pairs; a dict is accepted and frozen on init
    page_limits: Tuple[Tuple[SortMode, int], ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "sort_modes", tuple(self.sort_modes))
        object.__setattr__(self, "page_limits", tuple(dict(self.page_limits).items()))

    def page_limit(self, sort_mode: SortMode) -> int:
        limits: Dict[SortMode, int] = dict(self.page_limits)
        return limits.get(sort_mode, DEFAULT_PAGE_LIMIT)


@dataclass(frozen=True)
class FetchFailure:
    """A (source, sort mode) pair that produced no usable data."""

    kind: FailureKind
    source_name: str
    sort_mode: SortMode
    cause: str = ""


FetchResult = Union[List[Item], FetchFailure]


@dataclass
class PairResult:
    """Outcome slot for one dispatched (source, sort mode) fetch."""

    source_name: str
    sort_mode: SortMode
    items: List[Item] = field(default_factory=list)
    failure: Optional[FetchFailure] = None

    @property
    def failed(self) -> bool:
        return self.failure is not None


__all__ = [
    "Criterion",
    "FailureKind",
    "FetchFailure",
    "FetchResult",
    "Item",
    "PairResult",
    "SortMode",
    "SourceSpec",
]
