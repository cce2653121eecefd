# trendscan/schemas.py
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_serializer
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class PostSummary(CamelModel):
    """Display projection of an Item; which metrics are set depends on the criterion."""

    title: str
    url: str
    score: int
    subreddit: str
    upvote_ratio: Optional[float] = None
    num_comments: Optional[int] = None
    controversy_score: Optional[float] = None

    @model_serializer(mode="wrap")
    def omit_unset_metrics(self, handler) -> Dict[str, Any]:
        return {key: value for key, value in handler(self).items() if value is not None}


class TopPosts(CamelModel):
    hottest: Optional[PostSummary] = None
    most_voted: Optional[PostSummary] = None
    most_commented: Optional[PostSummary] = None
    most_controversial: Optional[PostSummary] = None


class RelatedPosts(CamelModel):
    hottest: List[PostSummary] = Field(default_factory=list)
    most_voted: List[PostSummary] = Field(default_factory=list)
    most_commented: List[PostSummary] = Field(default_factory=list)
    most_controversial: List[PostSummary] = Field(default_factory=list)


class DegradedSource(CamelModel):
    source: str
    sort_mode: str
    kind: str
    detail: str = ""


class TrendReport(CamelModel):
    timestamp: str
    time_window: str
    top_posts: TopPosts
    related_posts: RelatedPosts
    degraded_sources: List[DegradedSource] = Field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        related = self.related_posts
        return not (
            related.hottest or related.most_voted or related.most_commented or related.most_controversial
        )


class PostRequest(BaseModel):
    url: str = Field(..., min_length=1, description="Reddit post URL")
    context: str = Field(default="", description="Caller context forwarded to content generation")


class CommentSummary(CamelModel):
    user_id: Optional[str] = None
    comment: Optional[str] = None
    upvotes: int = 0
    replies: List["CommentSummary"] = Field(default_factory=list)


class PostContent(CamelModel):
    title: str = ""
    content: str = ""
    type: str = "link"
    author: Optional[str] = None
    upvotes: int = 0
    upvote_ratio: float = 0.0
    url: Optional[str] = None
    media: Optional[Any] = None
    thumbnail: Optional[str] = None
    created: Optional[str] = None
    subreddit: Optional[str] = None
    subreddit_subscribers: Optional[int] = None


class PostDigest(CamelModel):
    post: PostContent
    comments: List[CommentSummary]
    provided_context: str = ""
