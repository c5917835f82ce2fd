"""FastAPI application: routers, rate limiting, error handlers."""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded

from version import __version__
from web.shared import limiter, register_filters
from web.routers.catalog import router as catalog_router
from web.routers.pages import router as pages_router
from web.routers.videos import router as videos_router

logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    """Build a FastAPI app with all routers. Dependencies are attached to app.state by the caller."""
    application = FastAPI(title="VidShare", version=__version__)
    application.state.limiter = limiter

    @application.exception_handler(RateLimitExceeded)
    async def rate_limit_handler(request: Request, exc: RateLimitExceeded):
        return JSONResponse({"error": "Too many requests, please wait a moment."}, status_code=429)

    application.include_router(pages_router)
    application.include_router(catalog_router)
    application.include_router(videos_router)
    register_filters()
    return application


app = create_app()
