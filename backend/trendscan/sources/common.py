"""
Common utilities for source fetchers.

Upstream listings are loosely shaped: any field may be missing or null. These
helpers map such gaps to zero values instead of rejecting the whole record.
"""
from __future__ import annotations

from typing import Any, Dict, Optional

from trendscan.config import Settings

REDDIT_WEB_URL = "https://www.reddit.com"
REDDIT_OAUTH_URL = "https://oauth.reddit.com"


def build_headers(config: Settings) -> Dict[str, str]:
    """
    Headers sent with every Reddit request.

    Args:
        config: Settings carrying the client identifier and optional credentials

    Returns:
        Header dict with User-Agent, plus Cookie / Authorization when configured
    """
    headers = {"User-Agent": config.REDDIT_USER_AGENT}
    if config.REDDIT_COOKIE:
        headers["Cookie"] = config.REDDIT_COOKIE
    if config.REDDIT_ACCESS_TOKEN:
        headers["Authorization"] = f"Bearer {config.REDDIT_ACCESS_TOKEN}"
    return headers


def base_url(config: Settings) -> str:
    # bearer tokens are only honoured on the oauth host
    return REDDIT_OAUTH_URL if config.REDDIT_ACCESS_TOKEN else REDDIT_WEB_URL


def as_text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def as_int(value: Any) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


def as_float(value: Any) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


def as_ratio(value: Any) -> float:
    return max(0.0, min(1.0, as_float(value)))


def absolute_permalink(permalink: Optional[str]) -> str:
    """Turn a site-relative permalink into a full www.reddit.com URL."""
    permalink = as_text(permalink)
    if not permalink:
        return ""
    if permalink.startswith("http"):
        return permalink
    return f"{REDDIT_WEB_URL}{permalink}"
