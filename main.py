#!/usr/bin/env python3
"""VidShare - video sharing web app backed by the YouTube Data API."""

import argparse
import asyncio
import logging
import signal
import os

import uvicorn

from config import load_config, Config
from data.video_store import VideoStore
from web.app import app as fastapi_app
from web.catalog_store import CatalogStore, init_app_state
from web.middleware import SecurityHeadersMiddleware
from youtube.client import YouTubeClient

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger("vidshare")


class VidShare:
    """Main orchestrator - wires stores and the YouTube client, runs FastAPI."""

    def __init__(self, config: Config):
        self.config = config
        self.video_store = None
        self.youtube_client = None
        self.catalog_store = None
        self.server = None
        self.running = False

    def setup(self) -> None:
        """Initialize all components."""
        db_path = self.config.database.path
        os.makedirs(os.path.dirname(db_path) or ".", exist_ok=True)
        self.video_store = VideoStore(db_path=db_path)
        logger.info("Database initialized")

        yt_cfg = self.config.youtube
        self.youtube_client = YouTubeClient(
            api_key=yt_cfg.api_key,
            base_url=yt_cfg.api_base_url,
            timeout=yt_cfg.request_timeout,
        )
        self.catalog_store = CatalogStore()

        state = fastapi_app.state
        state.video_store = self.video_store
        state.youtube_client = self.youtube_client
        state.youtube_config = yt_cfg
        state.web_config = self.config.web
        init_app_state(state, self.catalog_store)

        fastapi_app.add_middleware(SecurityHeadersMiddleware)
        logger.info("Web app initialized")

    async def run(self) -> None:
        """Start everything."""
        self.running = True
        self.setup()

        config = uvicorn.Config(
            fastapi_app,
            host=self.config.web.host,
            port=self.config.web.port,
            log_level="info",
        )
        self.server = uvicorn.Server(config)
        logger.info("VidShare started on %s:%d", self.config.web.host, self.config.web.port)

        try:
            await self.server.serve()
        except asyncio.CancelledError:
            logger.info("Server cancelled")
        finally:
            await self.stop()

    async def stop(self) -> None:
        """Stop all components."""
        if not self.running:
            return
        self.running = False
        if self.server:
            self.server.should_exit = True
        if self.youtube_client:
            await self.youtube_client.aclose()
        if self.video_store:
            self.video_store.close()
        logger.info("VidShare stopped")


async def main() -> None:
    parser = argparse.ArgumentParser(description="VidShare")
    parser.add_argument("-c", "--config", help="Path to config file", default=None)
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose logging")
    args = parser.parse_args()

    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    config = load_config(args.config)
    app = VidShare(config)

    loop = asyncio.get_running_loop()

    def signal_handler():
        if app.server:
            app.server.should_exit = True

    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, signal_handler)
        except NotImplementedError:
            signal.signal(sig, lambda s, f: signal_handler())

    try:
        await app.run()
    except KeyboardInterrupt:
        await app.stop()


def cli() -> None:
    """Console entry point."""
    asyncio.run(main())


if __name__ == "__main__":
    cli()
