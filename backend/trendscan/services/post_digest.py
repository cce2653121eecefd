"""
Post and comment extraction for a single Reddit thread.

Produces the structured input the downstream content-generation service
expects: post body, a handful of strong top-level comments, and their replies.
"""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import httpx

from trendscan.config import Settings, settings
from trendscan.errors import PostUnavailableError
from trendscan.schemas import CommentSummary, PostContent, PostDigest
from trendscan.sources.common import as_float, as_int, as_text
from trendscan.sources.reddit import RedditPostFetcher
from trendscan.utils import parse_reddit_url

logger = logging.getLogger(__name__)

MAX_TOP_COMMENTS = 5
MIN_COMMENT_UPVOTES = 100
EXCLUDED_AUTHORS = {"AutoModerator"}


def _children(listing: Any) -> List[Dict[str, Any]]:
    if not isinstance(listing, dict):
        return []
    children = (listing.get("data") or {}).get("children") or []
    return [child for child in children if isinstance(child, dict)]


def post_type(post: Dict[str, Any]) -> str:
    if post.get("is_self"):
        return "text"
    if post.get("is_video"):
        return "video"
    if post.get("is_gallery"):
        return "gallery"
    return "link"


def extract_post_content(listing: Any) -> Optional[PostContent]:
    """
    Extract the post itself from the first listing of a thread payload.

    Args:
        listing: `payload[0]` of a /comments/<id>.json response

    Returns:
        PostContent, or None when the listing holds no post
    """
    children = _children(listing)
    post = children[0].get("data") if children else None
    if not isinstance(post, dict):
        return None

    created_utc = post.get("created_utc")
    created = (
        datetime.fromtimestamp(as_float(created_utc), tz=timezone.utc).isoformat()
        if created_utc is not None
        else None
    )

    return PostContent(
        title=as_text(post.get("title")),
        content=as_text(post.get("selftext")),
        type=post_type(post),
        author=post.get("author"),
        upvotes=as_int(post.get("ups")),
        upvote_ratio=as_float(post.get("upvote_ratio")),
        url=post.get("url"),
        media=post.get("media_metadata") or post.get("media") or None,
        thumbnail=post.get("thumbnail"),
        created=created,
        subreddit=post.get("subreddit"),
        subreddit_subscribers=post.get("subreddit_subscribers"),
    )


def extract_replies(children: List[Dict[str, Any]]) -> List[CommentSummary]:
    replies: List[CommentSummary] = []
    for child in children:
        # "more" stubs carry no body
        if child.get("kind") == "more":
            continue
        data = child.get("data") or {}
        replies.append(
            CommentSummary(user_id=data.get("author"), comment=data.get("body"), upvotes=as_int(data.get("ups")))
        )
    return replies


def is_quality_comment(comment: CommentSummary) -> bool:
    """Substantive, well-upvoted, human, and not quoting another comment."""
    return bool(
        comment.comment
        and comment.user_id not in EXCLUDED_AUTHORS
        and comment.upvotes > MIN_COMMENT_UPVOTES
        and ">" not in comment.comment
    )


def extract_top_comments(listing: Any, limit: int = MAX_TOP_COMMENTS) -> List[CommentSummary]:
    """
    Pick the leading top-level comments of a thread.

    Args:
        listing: `payload[1]` of a /comments/<id>.json response (sorted by top)
        limit: Maximum number of comments to keep

    Returns:
        Up to `limit` comments passing is_quality_comment, in listing order
    """
    comments: List[CommentSummary] = []

    for child in _children(listing):
        data = child.get("data") or {}
        replies = data.get("replies")
        comment = CommentSummary(
            user_id=data.get("author"),
            comment=data.get("body"),
            upvotes=as_int(data.get("ups")),
            replies=extract_replies(_children(replies)),
        )
        if is_quality_comment(comment):
            comments.append(comment)
        if len(comments) >= limit:
            break

    return comments


async def build_post_digest(
    url: str,
    context: str = "",
    client: Optional[httpx.AsyncClient] = None,
    config: Settings = settings,
) -> PostDigest:
    """
    Fetch a thread by URL and reduce it to post content plus top comments.

    Args:
        url: Reddit post URL
        context: Caller-supplied context, echoed back for the generation step
        client: Optional shared HTTP client
        config: Settings carrying headers and timeouts

    Returns:
        PostDigest

    Raises:
        InvalidRedditUrlError: URL is not a Reddit post link
        PostUnavailableError: Reddit could not serve the thread
    """
    subreddit, post_id = parse_reddit_url(url)

    if client is None:
        async with httpx.AsyncClient(timeout=config.FETCH_TIMEOUT_SECONDS, follow_redirects=True) as owned:
            payload = await RedditPostFetcher(owned, config).fetch(subreddit, post_id)
    else:
        payload = await RedditPostFetcher(client, config).fetch(subreddit, post_id)

    post = extract_post_content(payload[0])
    if post is None:
        raise PostUnavailableError("Failed to extract post content")

    comments = extract_top_comments(payload[1] if len(payload) > 1 else None)
    logger.info("Extracted post %r with %d top comments", post.title[:50], len(comments))
    return PostDigest(post=post, comments=comments, provided_context=context)
