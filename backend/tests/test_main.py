"""API tests for the trend service."""
from unittest.mock import AsyncMock, patch

import pytest
from fastapi.testclient import TestClient

from trendscan.errors import InvalidConfigurationError, InvalidRedditUrlError, NoDataError, PostUnavailableError
from trendscan.main import app
from trendscan.models import Criterion, FailureKind, FetchFailure, SortMode
from trendscan.schemas import CommentSummary, PostContent, PostDigest
from trendscan.sources.collector import build_trend_report

from conftest import NOW


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def report(make_item):
    hot = make_item("hot1", popularity=200, ratio=0.9, comments=40, source="OpenAI")
    flame = make_item("flame1", popularity=100, ratio=0.5, comments=300, source="singularity")
    ranked = {
        Criterion.HOTTEST: [hot],
        Criterion.MOST_VOTED: [hot],
        Criterion.MOST_COMMENTED: [flame, hot],
        Criterion.MOST_CONTROVERSIAL: [flame, hot],
    }
    failure = FetchFailure(FailureKind.SOURCE_UNAVAILABLE, "Bard", SortMode.TOP, "HTTP 404")
    return build_trend_report(ranked, 3, 86400, NOW, [failure])


def test_health_check(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_trends_returns_report(client, report):
    with patch("trendscan.main.collect_trends", new=AsyncMock(return_value=report)) as collect:
        response = client.get("/trends")

    assert response.status_code == 200
    collect.assert_awaited_once_with(window_hours=None, limit=None)

    data = response.json()
    assert data["timestamp"] == NOW.isoformat()
    assert data["timeWindow"] == "24 hours"
    assert data["topPosts"]["hottest"] == {
        "title": "Post hot1",
        "url": "https://www.reddit.com/r/OpenAI/comments/hot1/",
        "score": 200,
        "subreddit": "OpenAI",
        "upvoteRatio": 0.9,
        "numComments": 40,
    }
    assert data["topPosts"]["mostCommented"]["numComments"] == 300
    assert "upvoteRatio" not in data["topPosts"]["mostCommented"]
    assert data["topPosts"]["mostControversial"]["controversyScore"] == 50
    assert len(data["relatedPosts"]["mostControversial"]) == 2
    assert data["degradedSources"] == [
        {"source": "Bard", "sortMode": "top", "kind": "SourceUnavailable", "detail": "HTTP 404"}
    ]


def test_trends_passes_overrides(client, report):
    with patch("trendscan.main.collect_trends", new=AsyncMock(return_value=report)) as collect:
        response = client.get("/trends", params={"window_hours": 6, "top_n": 5})

    assert response.status_code == 200
    collect.assert_awaited_once_with(window_hours=6, limit=5)


def test_trends_rejects_out_of_range_overrides(client):
    assert client.get("/trends", params={"top_n": 0}).status_code == 422
    assert client.get("/trends", params={"window_hours": 1000}).status_code == 422


def test_trends_empty_report_is_404(client):
    empty = build_trend_report({criterion: [] for criterion in Criterion}, 3, 86400, NOW)

    with patch("trendscan.main.collect_trends", new=AsyncMock(return_value=empty)):
        response = client.get("/trends")

    assert response.status_code == 404
    assert response.json() == {"error": "No trending topics found"}


def test_trends_total_failure_is_500(client):
    failures = [FetchFailure(FailureKind.SOURCE_UNAVAILABLE, "OpenAI", SortMode.HOT, "HTTP 503")]

    with patch("trendscan.main.collect_trends", new=AsyncMock(side_effect=NoDataError(failures))):
        response = client.get("/trends")

    assert response.status_code == 500
    assert response.json() == {"error": "Failed to fetch trending topics"}


def test_post_digest(client):
    digest = PostDigest(
        post=PostContent(title="Hello", content="Body", upvotes=10, subreddit="OpenAI"),
        comments=[CommentSummary(user_id="carol", comment="Nice", upvotes=300)],
        provided_context="ctx",
    )

    with patch("trendscan.main.build_post_digest", new=AsyncMock(return_value=digest)) as build:
        response = client.post(
            "/reddit/post", json={"url": "https://www.reddit.com/r/OpenAI/comments/abc/", "context": "ctx"}
        )

    assert response.status_code == 200
    build.assert_awaited_once_with("https://www.reddit.com/r/OpenAI/comments/abc/", context="ctx")
    data = response.json()
    assert data["post"]["title"] == "Hello"
    assert data["comments"][0]["userId"] == "carol"
    assert data["providedContext"] == "ctx"


def test_post_digest_invalid_url(client):
    with patch("trendscan.main.build_post_digest", new=AsyncMock(side_effect=InvalidRedditUrlError("Invalid Reddit URL"))):
        response = client.post("/reddit/post", json={"url": "https://example.com/whatever"})

    assert response.status_code == 400
    assert response.json() == {"error": "Invalid Reddit URL"}


def test_post_digest_missing_url(client):
    assert client.post("/reddit/post", json={}).status_code == 422


def test_post_digest_passes_upstream_status_through(client):
    error = PostUnavailableError("Reddit returned HTTP 429", status_code=429)

    with patch("trendscan.main.build_post_digest", new=AsyncMock(side_effect=error)):
        response = client.post("/reddit/post", json={"url": "https://www.reddit.com/r/OpenAI/comments/abc/"})

    assert response.status_code == 429
    assert response.json() == {"error": "Reddit returned HTTP 429"}


def test_post_digest_transport_failure_is_502(client):
    error = PostUnavailableError("Reddit request failed: connection reset")

    with patch("trendscan.main.build_post_digest", new=AsyncMock(side_effect=error)):
        response = client.post("/reddit/post", json={"url": "https://www.reddit.com/r/OpenAI/comments/abc/"})

    assert response.status_code == 502
    assert response.json()["error"] == "Reddit request failed: connection reset"


def test_trends_invalid_configuration_is_500(client):
    error = InvalidConfigurationError("Unsupported sort mode in SORT_MODES")

    with patch("trendscan.main.collect_trends", new=AsyncMock(side_effect=error)):
        response = client.get("/trends")

    assert response.status_code == 500
    assert response.json() == {"error": "Invalid configuration: Unsupported sort mode in SORT_MODES"}


def test_trends_unexpected_error_is_500(client):
    with patch("trendscan.main.collect_trends", new=AsyncMock(side_effect=RuntimeError("boom"))):
        response = client.get("/trends")

    assert response.status_code == 500
    assert response.json() == {"error": "Failed to fetch trending topics"}
