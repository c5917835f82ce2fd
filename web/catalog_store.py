"""Catalog state store and the fetch operations that feed it.

A fetch takes a sequence number when it starts. Results from a fetch that
has been superseded by a newer one are discarded, so the last-issued
selection always wins regardless of network completion order.
"""

import logging
import math
from dataclasses import dataclass, field
from typing import Callable, Optional

from data.token_store import PageTokenStore
from youtube.client import (
    CatalogError, ProviderError, VideoNotFoundError, YouTubeClientProtocol,
    build_search_params, query_fingerprint, DEFAULT_QUERY, FETCH_FAILED_MESSAGE, PAGE_SIZE,
)
from youtube.models import CatalogPage, FetchRequest, VideoSummary
from youtube.normalizer import normalize_results, video_to_summary

logger = logging.getLogger(__name__)


@dataclass
class CatalogState:
    videos: list[VideoSummary] = field(default_factory=list)
    is_loading: bool = False
    error: Optional[str] = None
    total_pages: int = 0
    current_page: int = 0
    current_video: Optional[VideoSummary] = None
    video_error: Optional[str] = None

    def snapshot(self) -> dict:
        """JSON-ready view for the presentation layer."""
        return {
            "videos": [v.to_dict() for v in self.videos],
            "is_loading": self.is_loading,
            "error": self.error,
            "total_pages": self.total_pages,
            "current_page": self.current_page,
            "current_video": self.current_video.to_dict() if self.current_video else None,
            "video_error": self.video_error,
        }


def _log_notification(message: str) -> None:
    logger.warning("User notification: %s", message)


class CatalogStore:
    """Owns CatalogState and applies pending/fulfilled/rejected transitions."""

    def __init__(self, notify: Optional[Callable[[str], None]] = None):
        self.state = CatalogState()
        self._notify = notify or _log_notification
        self._issued = 0
        self._video_issued = 0

    # --- Catalog fetch lifecycle ---

    def pending(self) -> int:
        """Start a fetch: returns its sequence number."""
        self._issued += 1
        self.state.is_loading = True
        self.state.error = None
        return self._issued

    def is_superseded(self, seq: int) -> bool:
        return seq < self._issued

    def fulfilled(self, seq: int, page: CatalogPage, append: bool = False) -> bool:
        """Commit a normalized batch. First pages replace the list, later pages append."""
        if self.is_superseded(seq):
            logger.info("Discarding superseded catalog result #%d (latest #%d)", seq, self._issued)
            return False
        self.state.is_loading = False
        if append:
            self.state.videos = self.state.videos + list(page.videos)
            self.state.current_page += 1
        else:
            self.state.videos = list(page.videos)
            self.state.current_page = 1
        self.state.total_pages = page.total_pages
        return True

    def rejected(self, seq: int, message: str) -> bool:
        """Record a failed fetch; the current list stays visible."""
        if self.is_superseded(seq):
            logger.info("Discarding superseded catalog error #%d: %s", seq, message)
            return False
        self.state.is_loading = False
        self.state.error = message
        self._notify(message or FETCH_FAILED_MESSAGE)
        return True

    def clear_error(self) -> None:
        self.state.error = None

    # --- Single video lifecycle ---

    def video_pending(self) -> int:
        self._video_issued += 1
        self.state.video_error = None
        return self._video_issued

    def video_fulfilled(self, seq: int, video: VideoSummary) -> bool:
        if seq < self._video_issued:
            return False
        self.state.current_video = video
        self.state.video_error = None
        return True

    def video_rejected(self, seq: int, message: str) -> bool:
        if seq < self._video_issued:
            return False
        self.state.video_error = message or "Failed to fetch video"
        return True


def total_pages_for(total_results, page_size: int) -> int:
    try:
        total = int(total_results or 0)
    except (TypeError, ValueError):
        total = 0
    return math.ceil(max(total, 0) / page_size)


async def load_catalog_page(
    client: YouTubeClientProtocol,
    tokens: PageTokenStore,
    request: FetchRequest,
    page_size: int = PAGE_SIZE,
    default_query: str = DEFAULT_QUERY,
) -> CatalogPage:
    """Run one catalog query against the provider and normalize the result.

    The cursor is only read here. The caller stores page.next_page_token once
    the page has been committed. Raises CatalogError subclasses for
    batch-level failures, including a malformed response body.
    """
    fingerprint = query_fingerprint(request, default_query)
    token = tokens.retrieve(fingerprint) if request.page > 1 else None
    if request.page > 1 and not token:
        logger.debug("No cached page token for %r; requesting first page", fingerprint)
    params = build_search_params(request, page_token=token,
                                 page_size=page_size, default_query=default_query)

    data = await client.search(params)
    if not isinstance(data, dict):
        raise ProviderError(FETCH_FAILED_MESSAGE)
    items = data.get("items") or []
    page_info = data.get("pageInfo") or {}
    if not isinstance(items, list) or not isinstance(page_info, dict):
        logger.warning("Malformed search response for %r", fingerprint)
        raise ProviderError(FETCH_FAILED_MESSAGE)

    videos = await normalize_results(client, items)
    if items and not videos:
        raise ProviderError("Failed to load video details")

    next_token = data.get("nextPageToken")
    return CatalogPage(
        videos=videos,
        total_pages=total_pages_for(page_info.get("totalResults"), page_size),
        next_page_token=next_token if isinstance(next_token, str) else None,
    )


async def fetch_catalog(
    store: CatalogStore,
    client: YouTubeClientProtocol,
    tokens: PageTokenStore,
    request: FetchRequest,
    page_size: int = PAGE_SIZE,
    default_query: str = DEFAULT_QUERY,
) -> Optional[CatalogPage]:
    """Fetch a catalog page and commit it to the store.

    Returns the page if it was committed, None if a newer fetch superseded it.
    Only a committed page advances the cursor for its query. CatalogError is
    re-raised after being recorded; any other failure is recorded and raised
    as a ProviderError.
    """
    seq = store.pending()
    try:
        page = await load_catalog_page(client, tokens, request,
                                       page_size=page_size, default_query=default_query)
    except CatalogError as e:
        logger.error("Catalog fetch failed (%s): %s", request, e.message)
        store.rejected(seq, e.message)
        raise
    except Exception as e:
        logger.exception("Unexpected catalog fetch failure (%s)", request)
        store.rejected(seq, FETCH_FAILED_MESSAGE)
        raise ProviderError(FETCH_FAILED_MESSAGE) from e
    if not store.fulfilled(seq, page, append=not request.is_first_page):
        return None
    if page.next_page_token:
        tokens.store(query_fingerprint(request, default_query), page.next_page_token)
    return page


async def fetch_video(store: CatalogStore, client: YouTubeClientProtocol,
                      video_id: str) -> VideoSummary:
    """Load one video's details into state.current_video."""
    seq = store.video_pending()
    try:
        video = await client.video_details(video_id)
        if not video:
            raise VideoNotFoundError()
        summary = video_to_summary(video)
    except CatalogError as e:
        store.video_rejected(seq, e.message)
        raise
    store.video_fulfilled(seq, summary)
    return summary


def init_app_state(state, store: Optional[CatalogStore] = None):
    """Attach a catalog store to app.state. Called by main.py after setting deps."""
    notify = getattr(state, "notify_callback", None)
    state.catalog_store = store or CatalogStore(notify=notify)
    return state.catalog_store
