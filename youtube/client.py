"""YouTube Data API v3 client: search request building, HTTP calls, error taxonomy."""

from __future__ import annotations

import logging
from typing import Optional, Protocol, runtime_checkable

import httpx

from youtube.models import FetchRequest

logger = logging.getLogger(__name__)

DEFAULT_API_BASE_URL = "https://www.googleapis.com/youtube/v3"
DEFAULT_QUERY = "music"
PAGE_SIZE = 10
DETAIL_PARTS = "snippet,statistics,contentDetails"

# Catalog sort key -> YouTube search `order` value
SORT_ORDERS = {
    "trending": "viewCount",
    "date": "date",
    "relevance": "relevance",
    "rating": "rating",
    "title": "title",
}
_DEFAULT_ORDER = "date"

ACCESS_DENIED_MESSAGE = (
    "YouTube API access denied. Please check your API key configuration or quota limits."
)
FETCH_FAILED_MESSAGE = "Failed to fetch videos"


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------

class CatalogError(Exception):
    """Batch-level catalog failure, carrying the message shown to the user."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ConfigurationError(CatalogError):
    """API credential missing; raised before any network call."""
    status_code = 503


class AccessDeniedError(CatalogError):
    """403 from the provider: bad key or quota exhausted."""
    status_code = 403

    def __init__(self, message: str = ACCESS_DENIED_MESSAGE):
        super().__init__(message)


class ProviderError(CatalogError):
    """Any other non-success provider response or transport failure."""
    status_code = 502


class VideoNotFoundError(CatalogError):
    status_code = 404

    def __init__(self, message: str = "Video not found"):
        super().__init__(message)


# ---------------------------------------------------------------------------
# Query building
# ---------------------------------------------------------------------------

def resolve_order(sort: str) -> str:
    """Map a catalog sort key to the provider's ordering vocabulary."""
    return SORT_ORDERS.get((sort or "").strip().lower(), _DEFAULT_ORDER)


def resolve_query_text(category: str, default_query: str = DEFAULT_QUERY) -> str:
    return (category or "").strip() or default_query


def query_fingerprint(request: FetchRequest, default_query: str = DEFAULT_QUERY) -> str:
    """Identify the result cursor a continuation token belongs to."""
    return f"{resolve_query_text(request.category, default_query).lower()}|{resolve_order(request.sort)}"


def build_search_params(
    request: FetchRequest,
    page_token: Optional[str] = None,
    page_size: int = PAGE_SIZE,
    default_query: str = DEFAULT_QUERY,
) -> dict:
    """Build the search.list query parameters for one catalog selection.

    The token is only attached past page 1; page 2+ without a token
    re-requests the first page of results.
    """
    params = {
        "part": "snippet",
        "q": resolve_query_text(request.category, default_query),
        "type": "video",
        "maxResults": str(page_size),
        "order": resolve_order(request.sort),
    }
    if request.page > 1 and page_token:
        params["pageToken"] = page_token
    return params


# ---------------------------------------------------------------------------
# HTTP client
# ---------------------------------------------------------------------------

def _error_message(resp: httpx.Response, fallback: str) -> str:
    """Pull `error.message` out of a provider error body."""
    try:
        body = resp.json()
    except ValueError:
        return fallback
    if isinstance(body, dict):
        err = body.get("error")
        if isinstance(err, dict) and err.get("message"):
            return str(err["message"])
    return fallback


class YouTubeClient:
    """Async YouTube Data API client over a shared httpx.AsyncClient."""

    def __init__(
        self,
        api_key: str = "",
        base_url: str = DEFAULT_API_BASE_URL,
        timeout: float = 10,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self._http = http_client or httpx.AsyncClient(timeout=timeout)

    def _require_key(self) -> None:
        if not self.api_key:
            raise ConfigurationError("YouTube API key is not configured")

    async def search(self, params: dict) -> dict:
        """Run search.list. Returns the decoded JSON body."""
        self._require_key()
        logger.debug("YouTube search: %s", params)
        try:
            resp = await self._http.get(
                f"{self.base_url}/search", params={**params, "key": self.api_key})
        except httpx.HTTPError as e:
            logger.error("YouTube search request failed: %s", e)
            raise ProviderError(FETCH_FAILED_MESSAGE) from e

        if resp.status_code == 403:
            raise AccessDeniedError()
        if not resp.is_success:
            raise ProviderError(_error_message(resp, FETCH_FAILED_MESSAGE))
        try:
            data = resp.json()
        except ValueError as e:
            raise ProviderError(FETCH_FAILED_MESSAGE) from e
        if not isinstance(data, dict):
            raise ProviderError(FETCH_FAILED_MESSAGE)
        return data

    async def video_details(self, video_id: str) -> Optional[dict]:
        """Run videos.list for one id. Returns the resource, or None if the id is unknown."""
        self._require_key()
        try:
            resp = await self._http.get(
                f"{self.base_url}/videos",
                params={"part": DETAIL_PARTS, "id": video_id, "key": self.api_key},
            )
        except httpx.HTTPError as e:
            raise ProviderError(f"YouTube API error: {e}") from e
        if not resp.is_success:
            raise ProviderError(f"YouTube API error: {resp.status_code}")
        try:
            items = resp.json().get("items") or []
        except (ValueError, AttributeError) as e:
            raise ProviderError("YouTube API error: malformed response") from e
        return items[0] if items else None

    async def aclose(self) -> None:
        await self._http.aclose()


# ---------------------------------------------------------------------------
# Protocol for dependency injection / mocking
# ---------------------------------------------------------------------------

@runtime_checkable
class YouTubeClientProtocol(Protocol):
    """Protocol for the provider client: use for type hints and test mocks."""

    async def search(self, params: dict) -> dict: ...
    async def video_details(self, video_id: str) -> Optional[dict]: ...
