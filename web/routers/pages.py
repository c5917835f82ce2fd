"""Page routes: catalog homepage."""

from fastapi import APIRouter, Request, Query
from fastapi.responses import HTMLResponse

from web.shared import templates
from web.deps import get_catalog_store, get_token_store, get_youtube_client, get_youtube_config
from web.helpers import CATEGORIES, SORT_LABELS
from web.catalog_store import fetch_catalog
from youtube.client import CatalogError
from youtube.models import FetchRequest

router = APIRouter()


@router.get("/", response_class=HTMLResponse)
async def index(
    request: Request,
    page: int = Query(1, ge=1, le=500),
    category: str = Query("", max_length=100),
    sort: str = Query("date", max_length=20),
):
    """Homepage: category/sort filters + video grid with 'load more'."""
    store = get_catalog_store(request)
    yt_cfg = get_youtube_config(request)
    fetch_req = FetchRequest(page=page, category=category, sort=sort)
    try:
        await fetch_catalog(
            store,
            get_youtube_client(request),
            get_token_store(request),
            fetch_req,
            page_size=yt_cfg.page_size,
            default_query=yt_cfg.default_query,
        )
    except CatalogError:
        pass  # recorded on store.state.error and rendered below
    state = store.state
    return templates.TemplateResponse(request, "index.html", {
        "state": state,
        "category": fetch_req.category,
        "sort": fetch_req.sort,
        "categories": CATEGORIES,
        "sort_labels": SORT_LABELS,
        "next_page": state.current_page + 1,
        "has_more": state.current_page < state.total_pages,
    })
