"""
Shared utility functions for the trend service.
"""
from __future__ import annotations

import re
from datetime import datetime, timezone
from typing import Tuple

import tldextract

from trendscan.errors import InvalidRedditUrlError

REDDIT_POST_PATH = re.compile(r"/r/([^/]+)/comments/([^/?#]+)")

# bundled public-suffix snapshot only, no network lookups
_extract_domain = tldextract.TLDExtract(suffix_list_urls=())


def now_utc() -> datetime:
    """
    Get current UTC datetime with timezone information.

    Returns:
        Current UTC datetime
    """
    return datetime.now(timezone.utc)


def normalize_text(text: str | None) -> str:
    """
    Normalize whitespace in text content.

    Args:
        text: Input text string (can be None)

    Returns:
        Normalized text with single spaces and trimmed edges
    """
    if not text:
        return ""
    return re.sub(r"\s+", " ", text).strip()


def extract_domain_from_url(url: str) -> str:
    """
    Extract the registered domain from a URL.

    Args:
        url: Full URL string

    Returns:
        Normalized domain name in lowercase, e.g. "reddit.com"
    """
    extracted = _extract_domain(url or "")
    domain = f"{extracted.domain}.{extracted.suffix}" if extracted.suffix else extracted.domain
    return domain.lower()


def parse_reddit_url(url: str) -> Tuple[str, str]:
    """
    Split a Reddit post URL into subreddit and post id.

    Args:
        url: Post URL such as https://www.reddit.com/r/OpenAI/comments/abc123/some_title/

    Returns:
        (subreddit, post_id)

    Raises:
        InvalidRedditUrlError: If the URL is not a reddit.com post link
    """
    url = (url or "").strip()
    if extract_domain_from_url(url) != "reddit.com":
        raise InvalidRedditUrlError("Invalid Reddit URL")

    match = REDDIT_POST_PATH.search(url)
    if not match:
        raise InvalidRedditUrlError("Invalid Reddit URL")
    return match.group(1), match.group(2)


def format_window(window_seconds: int) -> str:
    """Human label for a recency window, e.g. 86400 -> "24 hours"."""
    if window_seconds % 3600 == 0:
        hours = window_seconds // 3600
        return f"{hours} hour" if hours == 1 else f"{hours} hours"
    if window_seconds % 60 == 0:
        return f"{window_seconds // 60} minutes"
    return f"{window_seconds} seconds"
