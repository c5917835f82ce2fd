"""Catalog API routes: YouTube-backed paginated video listing."""

from fastapi import APIRouter, Request, Query
from fastapi.responses import JSONResponse

from web.shared import limiter
from web.deps import get_catalog_store, get_token_store, get_youtube_client, get_youtube_config
from web.helpers import catalog_error_response
from web.catalog_store import fetch_catalog, fetch_video
from youtube.client import CatalogError
from youtube.models import FetchRequest

router = APIRouter()


@router.get("/api/catalog")
@limiter.limit("30/minute")
async def api_catalog(
    request: Request,
    page: int = Query(1, ge=1, le=500),
    category: str = Query("", max_length=100),
    sort: str = Query("date", max_length=20),
):
    """Fetch one page of the catalog and return the resulting state."""
    store = get_catalog_store(request)
    yt_cfg = get_youtube_config(request)
    try:
        page_result = await fetch_catalog(
            store,
            get_youtube_client(request),
            get_token_store(request),
            FetchRequest(page=page, category=category, sort=sort),
            page_size=yt_cfg.page_size,
            default_query=yt_cfg.default_query,
        )
    except CatalogError as e:
        return catalog_error_response(e, store.state)
    body = store.state.snapshot()
    body["superseded"] = page_result is None
    body["has_more"] = bool(page_result and page_result.next_page_token)
    return JSONResponse(body)


@router.get("/api/catalog/state")
async def api_catalog_state(request: Request):
    """Current catalog state without fetching."""
    return JSONResponse(get_catalog_store(request).state.snapshot())


@router.delete("/api/catalog/error")
async def api_clear_error(request: Request):
    get_catalog_store(request).clear_error()
    return JSONResponse({"ok": True})


@router.get("/api/youtube/{video_id}")
@limiter.limit("30/minute")
async def api_youtube_video(request: Request, video_id: str):
    """Single YouTube video details."""
    store = get_catalog_store(request)
    try:
        video = await fetch_video(store, get_youtube_client(request), video_id)
    except CatalogError as e:
        return catalog_error_response(e)
    return JSONResponse(video.to_dict())
