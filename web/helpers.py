"""Shared constants and presentation helpers used across web routers."""

from fastapi.responses import JSONResponse

from youtube.client import CatalogError

SORT_LABELS = {
    "date": "Newest",
    "trending": "Trending",
    "relevance": "Relevance",
    "rating": "Top rated",
    "title": "Title",
}

CATEGORIES = ["music", "gaming", "news", "sports", "education", "comedy", "science"]


def format_views(count) -> str:
    """Format view count for display: 999, 1.5K, 2.5M."""
    try:
        count = int(count or 0)
    except (TypeError, ValueError):
        return "0"
    if count >= 1_000_000:
        return f"{count / 1_000_000:.1f}M"
    if count >= 1_000:
        return f"{count / 1_000:.1f}K"
    return str(count)


def catalog_error_response(error: CatalogError, state=None) -> JSONResponse:
    """JSON body for a batch-level catalog failure, with the current state attached."""
    body = {"error": error.message}
    if state is not None:
        body["state"] = state.snapshot()
    return JSONResponse(body, status_code=error.status_code)
