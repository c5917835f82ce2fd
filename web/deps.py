"""FastAPI dependency providers: read from app.state, set by main.py."""

from fastapi import HTTPException, Request

from data.token_store import PageTokenStore


def get_video_store(request: Request):
    """VideoStore instance."""
    return request.app.state.video_store


def get_token_store(request: Request) -> PageTokenStore:
    """Page token cache backed by the VideoStore settings table."""
    return PageTokenStore(request.app.state.video_store)


def get_catalog_store(request: Request):
    """CatalogStore instance (process-wide catalog state)."""
    return request.app.state.catalog_store


def get_youtube_client(request: Request):
    """YouTubeClient instance."""
    return request.app.state.youtube_client


def get_web_config(request: Request):
    """WebConfig instance."""
    return request.app.state.web_config


def get_youtube_config(request: Request):
    """YouTubeConfig instance."""
    return request.app.state.youtube_config


def get_current_user(request: Request) -> str:
    """Caller identity set by the upstream identity provider."""
    user_id = request.headers.get("x-user-id", "").strip()
    if not user_id:
        raise HTTPException(status_code=401, detail="unauthorized")
    return user_id
