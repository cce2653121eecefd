"""
Exception taxonomy for run-level failures.

Per-pair fetch problems are not exceptions; they travel as FetchFailure values
and end up as degraded-source notes on the report.
"""
from __future__ import annotations

from typing import List, Optional

from trendscan.models import FetchFailure


class TrendError(Exception):
    """Base class for errors surfaced by the trend engine."""


class InvalidConfigurationError(TrendError):
    """Rejected before any fetch is dispatched."""


class NoDataError(TrendError):
    """Every dispatched fetch failed, so there is nothing to aggregate."""

    def __init__(self, failures: List[FetchFailure]):
        self.failures = failures
        super().__init__(f"All {len(failures)} source fetches failed")


class InvalidRedditUrlError(TrendError, ValueError):
    pass


class PostUnavailableError(TrendError):
    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)
