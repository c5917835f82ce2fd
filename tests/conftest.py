"""Shared pytest fixtures for VidShare tests."""

import pytest

from config import Config, WebConfig, YouTubeConfig, DatabaseConfig
from data.video_store import VideoStore
from data.token_store import PageTokenStore


@pytest.fixture
def video_store(tmp_path):
    """VideoStore backed by a temp-dir SQLite file."""
    db = tmp_path / "test.db"
    store = VideoStore(db_path=str(db))
    yield store
    store.close()


@pytest.fixture
def token_store(video_store):
    return PageTokenStore(video_store)


@pytest.fixture
def sample_config(tmp_path):
    """Minimal Config with safe defaults for testing."""
    return Config(
        web=WebConfig(host="127.0.0.1", port=9999),
        youtube=YouTubeConfig(api_key="test-key", page_size=10),
        database=DatabaseConfig(path=str(tmp_path / "test.db")),
    )


@pytest.fixture
def config_yaml(tmp_path):
    """Write a minimal config.yaml and return its path."""
    cfg = tmp_path / "config.yaml"
    cfg.write_text("""\
web:
  host: 0.0.0.0
  port: 8080
youtube:
  api_key: "yaml-key"
  page_size: 12
  default_query: "jazz"
database:
  path: "{db_path}"
""".format(db_path=str(tmp_path / "cfg_test.db")))
    return cfg


def make_search_item(video_id: str, title: str = "", channel: str = "Some Channel",
                     thumbnails: dict | None = None) -> dict:
    """A search.list item as the YouTube Data API returns it."""
    if thumbnails is None:
        thumbnails = {
            "default": {"url": f"https://i.ytimg.com/vi/{video_id}/default.jpg"},
            "high": {"url": f"https://i.ytimg.com/vi/{video_id}/hqdefault.jpg"},
        }
    return {
        "kind": "youtube#searchResult",
        "id": {"kind": "youtube#video", "videoId": video_id},
        "snippet": {
            "publishedAt": "2024-03-01T12:00:00Z",
            "channelId": "UC" + channel.replace(" ", ""),
            "title": title or f"Video {video_id}",
            "description": f"About {video_id}",
            "thumbnails": thumbnails,
            "channelTitle": channel,
        },
    }


def make_details(video_id: str, duration: str = "PT4M13S", views: str = "1234") -> dict:
    """A videos.list resource with the parts the catalog reads."""
    return {
        "kind": "youtube#video",
        "id": video_id,
        "snippet": {
            "publishedAt": "2024-03-01T12:00:00Z",
            "channelId": "UCchan",
            "title": f"Video {video_id}",
            "description": "",
            "thumbnails": {"high": {"url": f"https://i.ytimg.com/vi/{video_id}/hqdefault.jpg"}},
            "channelTitle": "Chan",
        },
        "contentDetails": {"duration": duration},
        "statistics": {"viewCount": views},
    }


def make_search_response(video_ids, total: int = 95, next_token: str | None = "TOKEN_2") -> dict:
    body = {
        "kind": "youtube#searchListResponse",
        "pageInfo": {"totalResults": total, "resultsPerPage": 10},
        "items": [make_search_item(v) for v in video_ids],
    }
    if next_token:
        body["nextPageToken"] = next_token
    return body
