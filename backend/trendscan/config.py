"""
Application configuration with environment variable support.
"""
from __future__ import annotations

import json
import logging
from typing import Annotated, Any, List, Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from trendscan.errors import InvalidConfigurationError
from trendscan.models import SortMode, SourceSpec

# Reddit refuses listing pages larger than this
MAX_PAGE_LIMIT = 100

# AI / LLM communities crawled by default
DEFAULT_SUBREDDITS: List[str] = [
    "artificial",
    "MachineLearning",
    "singularity",
    "LocalLLaMA",
    "ChatGPT",
    "OpenAI",
    "Bard",
    "MistralAI",
    "LLMDevs",
    "hardwareai",
]


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Outbound HTTP
    REDDIT_USER_AGENT: str = "trendscan/0.1 (reddit trend crawler)"
    REDDIT_COOKIE: str = ""
    REDDIT_ACCESS_TOKEN: str = ""
    FETCH_TIMEOUT_SECONDS: float = 15.0
    MAX_CONCURRENCY: Optional[int] = None

    # Crawl matrix
    SUBREDDITS: Annotated[List[str], NoDecode] = DEFAULT_SUBREDDITS
    SORT_MODES: Annotated[List[str], NoDecode] = ["hot", "top", "controversial"]
    POST_LIMIT_PER_SOURCE: int = 50
    TIME_RANGE: str = "day"

    # Ranking
    WINDOW_HOURS: int = 24
    TOP_N: int = 3

    # Web layer
    CORS_ALLOW_ORIGINS: Annotated[List[str], NoDecode] = ["*"]
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    PORT: int = 8000

    @field_validator("SUBREDDITS", "SORT_MODES", "CORS_ALLOW_ORIGINS", mode="before")
    @classmethod
    def split_env_list(cls, value: Any) -> Any:
        """Accept "a, b" as well as a JSON array for list settings."""
        if not isinstance(value, str):
            return value
        if value.strip().startswith("["):
            return json.loads(value)
        return [item.strip() for item in value.split(",") if item.strip()]

    @property
    def window_seconds(self) -> int:
        return self.WINDOW_HOURS * 3600


settings = Settings()


def build_source_specs(config: Settings) -> List[SourceSpec]:
    """
    Expand the flat subreddit / sort-mode settings into one SourceSpec per subreddit.

    Args:
        config: Loaded settings

    Returns:
        SourceSpec list in configured subreddit order
    """
    page_limit = max(1, min(config.POST_LIMIT_PER_SOURCE, MAX_PAGE_LIMIT))
    try:
        sort_modes = tuple(SortMode(mode.strip().lower()) for mode in config.SORT_MODES)
    except ValueError as e:
        supported = ", ".join(mode.value for mode in SortMode)
        raise InvalidConfigurationError(f"Unsupported sort mode in SORT_MODES ({supported}): {e}") from e

    return [
        SourceSpec(
            name=name.strip(),
            sort_modes=sort_modes,
            page_limits=tuple((mode, page_limit) for mode in sort_modes),
        )
        for name in config.SUBREDDITS
        if name.strip()
    ]


def configure_logging(config: Settings) -> None:
    """Apply LOG_LEVEL / LOG_FORMAT to the root logger."""
    logging.basicConfig(level=config.LOG_LEVEL.upper(), format=config.LOG_FORMAT)
