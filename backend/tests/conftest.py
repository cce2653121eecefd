"""Shared fixtures for trendscan tests."""
from datetime import datetime, timezone

import pytest

from trendscan.config import Settings
from trendscan.models import Item

NOW = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)
NOW_TS = NOW.timestamp()


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def make_item():
    """Factory for Items created one hour before NOW unless told otherwise."""

    def _make(item_id, popularity=10, ratio=0.9, comments=0, source="artificial", age=3600, title=None):
        return Item(
            id=item_id,
            title=title or f"Post {item_id}",
            source_name=source,
            created_at=NOW_TS - age,
            popularity=popularity,
            approval_ratio=ratio,
            discussion_count=comments,
            permalink=f"https://www.reddit.com/r/{source}/comments/{item_id}/",
        )

    return _make


@pytest.fixture
def test_settings():
    return Settings(
        _env_file=None,
        REDDIT_USER_AGENT="trendscan-tests/1.0",
        SUBREDDITS=["artificial", "OpenAI"],
        FETCH_TIMEOUT_SECONDS=5.0,
    )
