"""Configuration management for VidShare."""

import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)


def expand_env_vars(value: Any) -> Any:
    """Recursively expand environment variables in strings, dicts, and lists.

    Supports both ${VAR} and $VAR patterns.
    """
    if isinstance(value, str):
        # Expand ${VAR} pattern
        pattern = re.compile(r'\$\{([^}]+)\}')
        result = pattern.sub(lambda m: os.environ.get(m.group(1), ''), value)
        # Expand $VAR pattern
        pattern = re.compile(r'\$([A-Za-z_][A-Za-z0-9_]*)')
        result = pattern.sub(lambda m: os.environ.get(m.group(1), ''), result)
        return result
    elif isinstance(value, dict):
        return {k: expand_env_vars(v) for k, v in value.items()}
    elif isinstance(value, list):
        return [expand_env_vars(item) for item in value]
    else:
        return value


@dataclass
class WebConfig:
    """Web server configuration."""
    host: str = "0.0.0.0"
    port: int = 8080
    base_url: str = ""  # public URL, used in absolute links

    def __post_init__(self):
        if not self.base_url:
            self.base_url = os.environ.get("VIDSHARE_BASE_URL", "")


@dataclass
class YouTubeConfig:
    """YouTube Data API configuration."""
    api_key: str = ""  # required before any catalog fetch
    page_size: int = 10
    default_query: str = "music"  # search text when no category is selected
    request_timeout: int = 10  # seconds, per HTTP call
    api_base_url: str = "https://www.googleapis.com/youtube/v3"


@dataclass
class DatabaseConfig:
    """Database configuration."""
    path: str = "db/vidshare.db"


@dataclass
class Config:
    """Main configuration container."""
    web: WebConfig = field(default_factory=WebConfig)
    youtube: YouTubeConfig = field(default_factory=YouTubeConfig)
    database: DatabaseConfig = field(default_factory=DatabaseConfig)

    @classmethod
    def from_yaml(cls, path: Path | str) -> "Config":
        """Load configuration from YAML file with environment variable expansion."""
        path = Path(path)
        with open(path, "r") as f:
            raw_config = yaml.safe_load(f) or {}

        expanded_config = expand_env_vars(raw_config)

        web_data = expanded_config.get("web", {}) or {}
        youtube_data = expanded_config.get("youtube", {}) or {}
        database_data = expanded_config.get("database", {}) or {}

        return cls(
            web=WebConfig(**web_data),
            youtube=YouTubeConfig(**youtube_data),
            database=DatabaseConfig(**database_data),
        )

    @classmethod
    def from_env(cls) -> "Config":
        """Load configuration directly from environment variables."""
        return cls(
            web=WebConfig(
                host=os.environ.get("VIDSHARE_WEB_HOST", "0.0.0.0"),
                port=int(os.environ.get("VIDSHARE_WEB_PORT", "8080")),
                base_url=os.environ.get("VIDSHARE_BASE_URL", ""),
            ),
            youtube=YouTubeConfig(
                api_key=os.environ.get("VIDSHARE_YOUTUBE_API_KEY", ""),
                page_size=int(os.environ.get("VIDSHARE_PAGE_SIZE", "10")),
                default_query=os.environ.get("VIDSHARE_DEFAULT_QUERY", "music"),
                request_timeout=int(os.environ.get("VIDSHARE_REQUEST_TIMEOUT", "10")),
                api_base_url=os.environ.get(
                    "VIDSHARE_YOUTUBE_API_URL", "https://www.googleapis.com/youtube/v3"),
            ),
            database=DatabaseConfig(
                path=os.environ.get("VIDSHARE_DB_PATH", "db/vidshare.db"),
            ),
        )


def load_config(config_path: str | None = None) -> Config:
    """Load configuration from file or environment.

    Tries in order:
    1. Provided config_path
    2. Default paths: config.yaml, config.yml
    3. Environment variables (fallback)
    """
    config: Config | None = None

    if config_path:
        path = Path(config_path)
        if path.exists():
            config = Config.from_yaml(path)
        else:
            raise FileNotFoundError(f"Config file not found: {config_path}")
    else:
        for default_path in ["config.yaml", "config.yml"]:
            path = Path(default_path)
            if path.exists():
                config = Config.from_yaml(path)
                break

    if config is None:
        config = Config.from_env()

    if not config.youtube.api_key:
        logger.warning("youtube.api_key is empty, catalog fetches will fail until it is set")

    if config.youtube.page_size < 1 or config.youtube.page_size > 50:
        logger.warning("youtube.page_size %d out of range 1-50, using 10", config.youtube.page_size)
        config.youtube.page_size = 10

    if not config.youtube.default_query.strip():
        config.youtube.default_query = "music"

    return config
