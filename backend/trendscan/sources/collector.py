"""
Trend collection coordinator that fans out over every subreddit and sort mode.
"""
from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from typing import Dict, List, Optional, Protocol, Sequence, Tuple

import httpx

from trendscan.config import Settings, build_source_specs, settings
from trendscan.core.filtering import DEFAULT_WINDOW_SECONDS, filter_recent, merge_unique
from trendscan.core.ranking import CRITERION_POOLS, rank, top_n, top_one
from trendscan.errors import InvalidConfigurationError, NoDataError
from trendscan.models import (
    Criterion,
    FailureKind,
    FetchFailure,
    FetchResult,
    Item,
    PairResult,
    SortMode,
    SourceSpec,
)
from trendscan.schemas import DegradedSource, PostSummary, RelatedPosts, TopPosts, TrendReport
from trendscan.sources.reddit import RedditFetcher
from trendscan.utils import format_window, now_utc

logger = logging.getLogger(__name__)

DEFAULT_TOP_N = 3


class SourceFetcher(Protocol):
    async def fetch(
        self, source_name: str, sort_mode: SortMode, page_limit: int, time_range: Optional[str] = None
    ) -> FetchResult:
        ...


def summarize(item: Item, criterion: Criterion) -> PostSummary:
    """
    Project an Item onto the fields shown for a criterion.

    Args:
        item: Ranked item
        criterion: Criterion the item was ranked under

    Returns:
        PostSummary with only the metrics relevant to that criterion
    """
    summary = PostSummary(
        title=item.title,
        url=item.permalink,
        score=item.popularity,
        subreddit=item.source_name,
    )
    if criterion in (Criterion.HOTTEST, Criterion.MOST_VOTED):
        summary.upvote_ratio = item.approval_ratio
        summary.num_comments = item.discussion_count
    elif criterion is Criterion.MOST_COMMENTED:
        summary.num_comments = item.discussion_count
    elif criterion is Criterion.MOST_CONTROVERSIAL:
        summary.upvote_ratio = item.approval_ratio
        summary.controversy_score = item.controversy_score
    return summary


def assemble_pools(results: Sequence[PairResult]) -> Tuple[Dict[SortMode, List[Item]], List[Item]]:
    """
    Group fetched items into per-sort-mode pools and one combined pool.

    `results` must already be in configured order (sources first, then each
    source's sort modes); completion order never leaks into the pools.

    Returns:
        (pools keyed by sort mode, deduplicated combined pool)
    """
    per_mode: Dict[SortMode, List[Item]] = {}
    for result in results:
        per_mode.setdefault(result.sort_mode, []).extend(result.items)

    combined = merge_unique(result.items for result in results)
    return per_mode, combined


def build_trend_report(
    ranked: Dict[Criterion, List[Item]],
    limit: int,
    window_seconds: int,
    generated_at: datetime,
    failures: Sequence[FetchFailure] = (),
) -> TrendReport:
    top_posts = {}
    related_posts = {}
    for criterion, items in ranked.items():
        best = top_one(items)
        top_posts[criterion.value] = summarize(best, criterion) if best else None
        related_posts[criterion.value] = [summarize(item, criterion) for item in top_n(items, limit)]

    return TrendReport(
        timestamp=generated_at.isoformat(),
        time_window=format_window(window_seconds),
        top_posts=TopPosts(**top_posts),
        related_posts=RelatedPosts(**related_posts),
        degraded_sources=[
            DegradedSource(
                source=failure.source_name,
                sort_mode=failure.sort_mode.value,
                kind=failure.kind.value,
                detail=failure.cause,
            )
            for failure in failures
        ],
    )


class TrendCollector:
    """Runs one aggregation pass: fetch, window, pool, rank, report.

    Stateless between runs; every call to collect() starts from fresh fetches.
    """

    def __init__(
        self,
        fetcher: SourceFetcher,
        max_concurrency: Optional[int] = None,
        fetch_timeout: Optional[float] = None,
        time_range: Optional[str] = None,
    ):
        self.fetcher = fetcher
        self.max_concurrency = max_concurrency
        self.fetch_timeout = fetch_timeout
        self.time_range = time_range

    async def collect(
        self,
        sources: Sequence[SourceSpec],
        window_seconds: int = DEFAULT_WINDOW_SECONDS,
        limit: int = DEFAULT_TOP_N,
        now: Optional[datetime] = None,
    ) -> TrendReport:
        """
        Aggregate trending posts across sources.

        Args:
            sources: Sources in the order that breaks ranking ties
            window_seconds: Recency window
            limit: Related posts per criterion
            now: Reference time, defaults to the current UTC time

        Returns:
            TrendReport, possibly with empty criteria

        Raises:
            InvalidConfigurationError: Bad sources / window / limit
            NoDataError: Every fetch failed
        """
        self._validate(sources, window_seconds, limit)

        pairs = [(spec, sort_mode) for spec in sources for sort_mode in spec.sort_modes]
        logger.info("Dispatching %d fetches across %d sources", len(pairs), len(sources))

        results = await self._fetch_all(pairs)

        failures = [result.failure for result in results if result.failed]
        if len(failures) == len(results):
            logger.error("All %d fetches failed", len(failures))
            raise NoDataError(failures)
        if failures:
            logger.warning("%d of %d fetches degraded", len(failures), len(results))

        generated_at = now or now_utc()
        reference = generated_at.timestamp()
        for result in results:
            result.items = filter_recent(result.items, window_seconds, reference)

        per_mode, combined = assemble_pools(results)
        ranked: Dict[Criterion, List[Item]] = {}
        for criterion, sort_mode in CRITERION_POOLS.items():
            pool = combined if sort_mode is None else per_mode.get(sort_mode, [])
            ranked[criterion] = rank(pool, criterion)

        logger.info(
            "Ranked pools: %s, combined=%d",
            ", ".join(f"{mode.value}={len(items)}" for mode, items in per_mode.items()),
            len(combined),
        )
        return build_trend_report(ranked, limit, window_seconds, generated_at, failures)

    @staticmethod
    def _validate(sources: Sequence[SourceSpec], window_seconds: int, limit: int) -> None:
        if not sources:
            raise InvalidConfigurationError("At least one source is required")
        for spec in sources:
            if not spec.name:
                raise InvalidConfigurationError("Source name must not be empty")
            if not spec.sort_modes:
                raise InvalidConfigurationError(f"Source {spec.name!r} has no sort modes")
        if window_seconds <= 0:
            raise InvalidConfigurationError("Recency window must be positive")
        if limit < 1:
            raise InvalidConfigurationError("Top N must be at least 1")

    async def _fetch_all(self, pairs: Sequence[Tuple[SourceSpec, SortMode]]) -> List[PairResult]:
        # gather keeps input order, so each pair lands in its own slot
        semaphore = asyncio.Semaphore(self.max_concurrency) if self.max_concurrency else None
        return list(
            await asyncio.gather(*(self._fetch_pair(spec, sort_mode, semaphore) for spec, sort_mode in pairs))
        )

    async def _fetch_pair(
        self, spec: SourceSpec, sort_mode: SortMode, semaphore: Optional[asyncio.Semaphore]
    ) -> PairResult:
        slot = PairResult(source_name=spec.name, sort_mode=sort_mode)

        try:
            if semaphore is None:
                outcome = await self._call_fetcher(spec, sort_mode)
            else:
                async with semaphore:
                    outcome = await self._call_fetcher(spec, sort_mode)
        except asyncio.TimeoutError:
            outcome = FetchFailure(FailureKind.SOURCE_UNAVAILABLE, spec.name, sort_mode, "timed out")
        except Exception as e:
            logger.exception("Fetcher crashed on r/%s/%s", spec.name, sort_mode.value)
            outcome = FetchFailure(FailureKind.SOURCE_UNAVAILABLE, spec.name, sort_mode, f"{type(e).__name__}: {e}")

        if isinstance(outcome, FetchFailure):
            slot.failure = outcome
        else:
            slot.items = list(outcome)
        return slot

    async def _call_fetcher(self, spec: SourceSpec, sort_mode: SortMode) -> FetchResult:
        return await asyncio.wait_for(
            self.fetcher.fetch(spec.name, sort_mode, spec.page_limit(sort_mode), self.time_range),
            timeout=self.fetch_timeout,
        )


async def collect_trends(
    window_hours: Optional[int] = None,
    limit: Optional[int] = None,
    config: Settings = settings,
) -> TrendReport:
    """
    Collect trending posts for the configured subreddits.

    Args:
        window_hours: Recency window override (defaults to WINDOW_HOURS)
        limit: Related posts per criterion (defaults to TOP_N)
        config: Settings to read sources and credentials from

    Returns:
        TrendReport
    """
    window_seconds = window_hours * 3600 if window_hours else config.window_seconds
    sources = build_source_specs(config)

    async with httpx.AsyncClient(timeout=config.FETCH_TIMEOUT_SECONDS, follow_redirects=True) as client:
        collector = TrendCollector(
            RedditFetcher(client, config),
            max_concurrency=config.MAX_CONCURRENCY,
            fetch_timeout=config.FETCH_TIMEOUT_SECONDS,
            time_range=config.TIME_RANGE,
        )
        return await collector.collect(sources, window_seconds=window_seconds, limit=limit or config.TOP_N)
