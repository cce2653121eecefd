"""
File: trendscan/sources/reddit.py
Reddit listing and post fetchers over the public JSON endpoints.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import httpx

from trendscan.config import Settings, settings
from trendscan.errors import PostUnavailableError
from trendscan.models import FailureKind, FetchFailure, FetchResult, Item, SortMode
from trendscan.sources.common import (
    absolute_permalink,
    as_float,
    as_int,
    as_ratio,
    as_text,
    base_url,
    build_headers,
)
from trendscan.utils import normalize_text

logger = logging.getLogger(__name__)


class MalformedPayload(ValueError):
    """Listing JSON did not have the data.children shape."""


def listing_children(payload: Any) -> List[Dict[str, Any]]:
    """
    Pull the child records out of a Reddit listing document.

    Args:
        payload: Decoded JSON body

    Returns:
        List of `child["data"]` dicts

    Raises:
        MalformedPayload: If the document is not a listing
    """
    if not isinstance(payload, dict):
        raise MalformedPayload(f"expected object, got {type(payload).__name__}")
    data = payload.get("data")
    if not isinstance(data, dict) or not isinstance(data.get("children"), list):
        raise MalformedPayload("missing data.children")

    records = []
    for child in data["children"]:
        if isinstance(child, dict) and isinstance(child.get("data"), dict):
            records.append(child["data"])
    return records


def item_from_record(record: Dict[str, Any], source_name: str) -> Optional[Item]:
    """
    Map one listing record to an Item.

    Missing optional fields default to zero values; a record without an id
    cannot be deduplicated and is skipped.
    """
    post_id = as_text(record.get("id"))
    if not post_id:
        return None

    return Item(
        id=post_id,
        title=normalize_text(as_text(record.get("title"))),
        source_name=as_text(record.get("subreddit")) or source_name,
        created_at=as_float(record.get("created_utc")),
        popularity=as_int(record.get("score", record.get("ups"))),
        approval_ratio=as_ratio(record.get("upvote_ratio")),
        discussion_count=max(0, as_int(record.get("num_comments"))),
        permalink=absolute_permalink(record.get("permalink")) or as_text(record.get("url")),
    )


class RedditFetcher:
    """Fetches one listing page for one subreddit and sort mode.

    Never raises for upstream problems: HTTP errors, timeouts and unexpected
    payloads come back as FetchFailure so the caller can degrade.
    """

    def __init__(self, client: httpx.AsyncClient, config: Settings = settings):
        self.client = client
        self.config = config

    def build_request(
        self, source_name: str, sort_mode: SortMode, page_limit: int, time_range: Optional[str] = None
    ) -> tuple[str, Dict[str, Any]]:
        url = f"{base_url(self.config)}/r/{source_name}/{sort_mode.value}.json"
        params: Dict[str, Any] = {"limit": page_limit, "raw_json": 1}
        if sort_mode.time_bounded:
            params["t"] = time_range or self.config.TIME_RANGE
        return url, params

    async def fetch(
        self,
        source_name: str,
        sort_mode: SortMode,
        page_limit: int,
        time_range: Optional[str] = None,
    ) -> FetchResult:
        """
        Fetch and normalize one page of posts.

        Args:
            source_name: Subreddit name without the r/ prefix
            sort_mode: Listing to query
            page_limit: Page size
            time_range: Range token for top/controversial (hour, day, week, ...)

        Returns:
            List of Item on success, FetchFailure otherwise
        """
        url, params = self.build_request(source_name, sort_mode, page_limit, time_range)
        logger.debug("Fetching r/%s/%s limit=%s", source_name, sort_mode.value, page_limit)

        try:
            response = await self.client.get(
                url,
                params=params,
                headers=build_headers(self.config),
                timeout=self.config.FETCH_TIMEOUT_SECONDS,
            )
            response.raise_for_status()
            payload = response.json()
        except httpx.TimeoutException:
            return self._failure(FailureKind.SOURCE_UNAVAILABLE, source_name, sort_mode, "timed out")
        except httpx.HTTPStatusError as e:
            return self._failure(
                FailureKind.SOURCE_UNAVAILABLE, source_name, sort_mode, f"HTTP {e.response.status_code}"
            )
        except httpx.HTTPError as e:
            return self._failure(
                FailureKind.SOURCE_UNAVAILABLE, source_name, sort_mode, f"{type(e).__name__}: {e}"
            )
        except ValueError as e:
            # body was not JSON
            return self._failure(FailureKind.MALFORMED_PAYLOAD, source_name, sort_mode, str(e))

        try:
            records = listing_children(payload)
        except MalformedPayload as e:
            return self._failure(FailureKind.MALFORMED_PAYLOAD, source_name, sort_mode, str(e))

        items: List[Item] = []
        for record in records:
            item = item_from_record(record, source_name)
            if item is not None:
                items.append(item)
        return items

    @staticmethod
    def _failure(kind: FailureKind, source_name: str, sort_mode: SortMode, cause: str) -> FetchFailure:
        logger.warning("r/%s/%s unavailable (%s): %s", source_name, sort_mode.value, kind.value, cause)
        return FetchFailure(kind=kind, source_name=source_name, sort_mode=sort_mode, cause=cause)


class RedditPostFetcher:
    """Fetches a single post with its comment tree."""

    def __init__(self, client: httpx.AsyncClient, config: Settings = settings):
        self.client = client
        self.config = config

    async def fetch(self, subreddit: str, post_id: str) -> List[Any]:
        url = f"{base_url(self.config)}/r/{subreddit}/comments/{post_id}.json"
        logger.info("Fetching r/%s post %s", subreddit, post_id)

        try:
            response = await self.client.get(
                url,
                params={"sort": "top", "raw_json": 1},
                headers=build_headers(self.config),
                timeout=self.config.FETCH_TIMEOUT_SECONDS,
            )
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPStatusError as e:
            raise PostUnavailableError(
                f"Reddit returned HTTP {e.response.status_code}", status_code=e.response.status_code
            ) from e
        except httpx.HTTPError as e:
            raise PostUnavailableError(f"Reddit request failed: {e}") from e
        except ValueError as e:
            raise PostUnavailableError("Reddit returned a non-JSON body") from e

        # [post listing, comment listing]
        if not isinstance(payload, list) or not payload:
            raise PostUnavailableError("Unexpected post payload")
        return payload
