"""
Main FastAPI application and routing layer.
"""
from __future__ import annotations

import logging
from typing import Optional

from fastapi import FastAPI, Query
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from trendscan.config import configure_logging, settings
from trendscan.errors import InvalidConfigurationError, InvalidRedditUrlError, NoDataError, PostUnavailableError
from trendscan.schemas import PostDigest, PostRequest, TrendReport
from trendscan.services.post_digest import build_post_digest
from trendscan.sources.collector import collect_trends
from trendscan.utils import now_utc

configure_logging(settings)
logger = logging.getLogger("uvicorn")


# Initialize FastAPI app
app = FastAPI(
    title="Reddit Trend API",
    version="0.1.0",
    description="Trending posts across a set of subreddits, ranked under several criteria",
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ALLOW_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "ok",
        "as_of": now_utc().isoformat(),
        "service": "trendscan-api",
    }


def error_response(status_code: int, message: str) -> JSONResponse:
    """Error body shared by every route: {"error": message}."""
    return JSONResponse(status_code=status_code, content={"error": message})


@app.get("/trends", response_model=TrendReport)
async def get_trends(
    window_hours: Optional[int] = Query(None, ge=1, le=168, description="Recency window in hours"),
    top_n: Optional[int] = Query(None, ge=1, le=25, description="Related posts per criterion"),
):
    """
    Rank recent posts across the configured subreddits.

    Returns:
        TrendReport with the top post and related posts per criterion
    """
    try:
        logger.info("Collecting trends (window=%s, top_n=%s)", window_hours, top_n)
        report = await collect_trends(window_hours=window_hours, limit=top_n)
    except NoDataError as e:
        logger.error("No source answered: %s", e)
        return error_response(500, "Failed to fetch trending topics")
    except InvalidConfigurationError as e:
        logger.error("Invalid trend configuration: %s", e)
        return error_response(500, f"Invalid configuration: {e}")
    except Exception as e:
        logger.error(f"Error fetching trending topics: {e}")
        return error_response(500, "Failed to fetch trending topics")

    if report.is_empty:
        logger.warning("No posts inside the %s window", report.time_window)
        return error_response(404, "No trending topics found")

    return report


@app.post("/reddit/post", response_model=PostDigest)
async def get_post_digest(request: PostRequest):
    """
    Fetch one Reddit thread and reduce it to post content plus its strongest comments.

    The result is the input of the external post-writing service; nothing is
    generated here.
    """
    try:
        return await build_post_digest(request.url, context=request.context)
    except InvalidRedditUrlError as e:
        return error_response(400, str(e))
    except PostUnavailableError as e:
        logger.error(f"Error fetching Reddit post {request.url}: {e}")
        return error_response(e.status_code or 502, str(e))


if __name__ == "__main__":
    # For development
    import uvicorn
    uvicorn.run("trendscan.main:app", host="0.0.0.0", port=settings.PORT, reload=True)
