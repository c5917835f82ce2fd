"""Map YouTube search/detail records into VideoSummary objects."""

from __future__ import annotations

import asyncio
import logging
import re
from typing import Optional
from urllib.parse import quote, urlparse

from youtube.client import ProviderError, YouTubeClientProtocol
from youtube.models import Uploader, VideoSummary

logger = logging.getLogger(__name__)

# Allowlisted YouTube thumbnail CDN hostnames
THUMB_ALLOWED_HOSTS = frozenset({
    "i.ytimg.com", "i1.ytimg.com", "i2.ytimg.com", "i3.ytimg.com",
    "i4.ytimg.com", "i9.ytimg.com", "img.youtube.com",
})

# Highest resolution first
_THUMB_VARIANTS = ("maxres", "standard", "high", "medium", "default")

_VIDEO_ID_RE = re.compile(r'^[a-zA-Z0-9_-]{11}$')

# ISO-8601 duration as returned in contentDetails.duration: P[nD][T[nH][nM][nS]]
_DURATION_RE = re.compile(
    r'^P(?:(\d+)D)?(?:T(?:(\d+)H)?(?:(\d+)M)?(?:(\d+)S)?)?$'
)


# ---------------------------------------------------------------------------
# Durations
# ---------------------------------------------------------------------------

def parse_duration(value) -> Optional[int]:
    """Parse an ISO-8601 video duration into seconds. None if unparseable."""
    if not isinstance(value, str):
        return None
    m = _DURATION_RE.match(value.strip().upper())
    if not m:
        return None
    days, hours, minutes, seconds = (int(g) if g else 0 for g in m.groups())
    return ((days * 24 + hours) * 60 + minutes) * 60 + seconds


def format_duration(seconds) -> str:
    """Format seconds as a clock: '0:45', '5:23', '1:02:15'."""
    if not seconds or int(seconds) < 0:
        return "0:00"
    seconds = int(seconds)
    hours, remainder = divmod(seconds, 3600)
    minutes, secs = divmod(remainder, 60)
    if hours:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes}:{secs:02d}"


def duration_to_clock(value) -> str:
    """'PT1H5M30S' -> '1:05:30'; anything unparseable -> '0:00'."""
    return format_duration(parse_duration(value))


# ---------------------------------------------------------------------------
# Thumbnails / avatars
# ---------------------------------------------------------------------------

def _safe_thumbnail(url: Optional[str], video_id: str) -> str:
    """Return the thumbnail URL if it's from an allowlisted host, else use ytimg fallback."""
    if url:
        try:
            parsed = urlparse(url)
            if parsed.scheme == "https" and parsed.hostname in THUMB_ALLOWED_HOSTS:
                return url
        except ValueError:
            pass
    if video_id and _VIDEO_ID_RE.match(video_id):
        return f"https://i.ytimg.com/vi/{video_id}/hqdefault.jpg"
    return ""


def pick_thumbnail(thumbnails: Optional[dict], video_id: str = "") -> str:
    """Choose the highest-resolution thumbnail offered, falling back to 'default'."""
    thumbnails = thumbnails or {}
    for variant in _THUMB_VARIANTS:
        url = (thumbnails.get(variant) or {}).get("url")
        if url:
            return _safe_thumbnail(url, video_id)
    return _safe_thumbnail(None, video_id)


def placeholder_avatar(display_name: str) -> str:
    """Synthesize an avatar from the first letter of the uploader's name."""
    initial = (display_name or "").strip()[:1].upper() or "?"
    return f"https://placehold.co/40?text={quote(initial)}"


def generated_avatar(display_name: str) -> str:
    return f"https://ui-avatars.com/api/?name={quote(display_name or '?')}&background=random"


# ---------------------------------------------------------------------------
# Record mapping
# ---------------------------------------------------------------------------

def search_item_video_id(item: dict) -> str:
    """Video id of a search.list item; ValueError for channels/playlists/garbage."""
    ident = item.get("id") if isinstance(item, dict) else None
    video_id = ident.get("videoId") if isinstance(ident, dict) else None
    if not video_id:
        raise ValueError("search item has no videoId")
    return video_id


def _view_count(details: dict) -> int:
    raw = (details.get("statistics") or {}).get("viewCount") or 0
    return int(raw)


def to_summary(item: dict, details: dict) -> VideoSummary:
    """Combine a search.list item with its videos.list resource."""
    video_id = search_item_video_id(item)
    snippet = item.get("snippet") or {}
    channel_title = snippet.get("channelTitle", "")
    return VideoSummary(
        id=video_id,
        title=snippet.get("title", ""),
        description=snippet.get("description", ""),
        thumbnail=pick_thumbnail(snippet.get("thumbnails"), video_id),
        duration=duration_to_clock((details.get("contentDetails") or {}).get("duration")),
        views=_view_count(details),
        uploader=Uploader(
            id=snippet.get("channelId", ""),
            display_name=channel_title,
            avatar=placeholder_avatar(channel_title),
        ),
        created_at=snippet.get("publishedAt", ""),
    )


def video_to_summary(video: dict) -> VideoSummary:
    """Map a standalone videos.list resource (single video page)."""
    snippet = video.get("snippet") or {}
    video_id = video.get("id", "")
    channel_title = snippet.get("channelTitle", "")
    return VideoSummary(
        id=video_id,
        title=snippet.get("title", ""),
        description=snippet.get("description", ""),
        thumbnail=pick_thumbnail(snippet.get("thumbnails"), video_id),
        duration=duration_to_clock((video.get("contentDetails") or {}).get("duration")),
        views=_view_count(video),
        uploader=Uploader(
            id=snippet.get("channelId", ""),
            display_name=channel_title,
            avatar=generated_avatar(channel_title),
        ),
        created_at=snippet.get("publishedAt", ""),
    )


async def _summarize_item(client: YouTubeClientProtocol, item: dict) -> VideoSummary:
    video_id = search_item_video_id(item)
    details = await client.video_details(video_id)
    if not details:
        raise ProviderError(f"No details returned for {video_id}")
    return to_summary(item, details)


async def normalize_results(client: YouTubeClientProtocol, items: list[dict]) -> list[VideoSummary]:
    """Fetch details for every item concurrently and map them to summaries.

    Items whose detail lookup fails are dropped; order of the rest is kept.
    """
    results = await asyncio.gather(
        *(_summarize_item(client, item) for item in items), return_exceptions=True)
    videos = []
    for item, result in zip(items, results):
        if isinstance(result, Exception):
            logger.warning("Dropping search item %r: %s",
                           item.get("id") if isinstance(item, dict) else item, result)
            continue
        if isinstance(result, BaseException):
            raise result
        videos.append(result)
    return videos
