"""
SQLite-backed storage for VidShare.
Holds the local video library (uploaded video metadata, likes) and a
key/value settings table used for small durable values such as page tokens.
"""

import logging
import math
import sqlite3
import threading
from pathlib import Path
from typing import Optional
from urllib.parse import urlparse

logger = logging.getLogger(__name__)

_UPDATABLE_FIELDS = ("title", "description", "category", "tags", "is_public", "thumbnail_url")


def _validate_media_url(url: Optional[str]) -> str:
    """Return the URL only if it is an absolute https URL, else empty."""
    if not url:
        return ""
    try:
        parsed = urlparse(url)
        if parsed.scheme == "https" and parsed.hostname:
            return url
    except ValueError:
        pass
    return ""


def _split_tags(tags) -> str:
    """Normalize 'a, b ,c' or ['a', 'b'] into 'a,b,c'."""
    if not tags:
        return ""
    if isinstance(tags, str):
        tags = tags.split(",")
    return ",".join(t.strip() for t in tags if t and t.strip())


class VideoStore:
    """SQLite database for the video library and app settings."""

    def __init__(self, db_path: str = "db/vidshare.db"):
        """Initialize database connection and create schema."""
        db_file = Path(db_path)
        db_file.parent.mkdir(parents=True, exist_ok=True)

        self._lock = threading.Lock()
        self.conn = sqlite3.connect(db_file, check_same_thread=False)
        self.conn.row_factory = sqlite3.Row
        self.conn.execute("PRAGMA journal_mode=WAL")
        self.conn.execute("PRAGMA foreign_keys=ON")
        self._create_tables()

    def _create_tables(self) -> None:
        """Create all tables if they don't exist."""
        self.conn.execute("""
            CREATE TABLE IF NOT EXISTS videos (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                title TEXT NOT NULL,
                description TEXT NOT NULL DEFAULT '',
                video_url TEXT NOT NULL DEFAULT '',
                thumbnail_url TEXT NOT NULL DEFAULT '',
                category TEXT NOT NULL DEFAULT '',
                tags TEXT NOT NULL DEFAULT '',
                is_public INTEGER NOT NULL DEFAULT 1,
                creator TEXT NOT NULL,
                views INTEGER NOT NULL DEFAULT 0,
                created_at TEXT NOT NULL DEFAULT (strftime('%Y-%m-%d %H:%M:%f', 'now'))
            )
        """)
        self.conn.execute("""
            CREATE INDEX IF NOT EXISTS idx_videos_category ON videos(category)
        """)
        self.conn.execute("""
            CREATE TABLE IF NOT EXISTS likes (
                video_id INTEGER NOT NULL REFERENCES videos(id) ON DELETE CASCADE,
                user_id TEXT NOT NULL,
                liked_at TEXT NOT NULL DEFAULT (datetime('now')),
                UNIQUE(video_id, user_id)
            )
        """)
        self.conn.execute("""
            CREATE TABLE IF NOT EXISTS settings (
                key TEXT PRIMARY KEY,
                value TEXT NOT NULL,
                updated_at TEXT NOT NULL DEFAULT (datetime('now'))
            )
        """)
        self.conn.commit()

    # --- Video library ---

    def _row_to_video(self, row) -> dict:
        video = dict(row)
        video["is_public"] = bool(video["is_public"])
        video["tags"] = [t for t in video["tags"].split(",") if t]
        video["likes"] = self.conn.execute(
            "SELECT COUNT(*) FROM likes WHERE video_id = ?", (video["id"],)
        ).fetchone()[0]
        return video

    def _get_video_unlocked(self, video_id: int) -> Optional[dict]:
        """Get video by id (caller must hold _lock)."""
        row = self.conn.execute("SELECT * FROM videos WHERE id = ?", (video_id,)).fetchone()
        return self._row_to_video(row) if row else None

    def add_video(
        self,
        title: str,
        creator: str,
        description: str = "",
        video_url: str = "",
        thumbnail_url: str = "",
        category: str = "",
        tags=None,
        is_public: bool = True,
    ) -> dict:
        """Store metadata for an uploaded video. Returns the new row as a dict."""
        with self._lock:
            cursor = self.conn.execute(
                """
                INSERT INTO videos
                (title, description, video_url, thumbnail_url, category, tags, is_public, creator)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (title, description or "", _validate_media_url(video_url),
                 _validate_media_url(thumbnail_url), category or "", _split_tags(tags),
                 int(bool(is_public)), creator),
            )
            self.conn.commit()
            logger.info("Added video %d '%s' by %s", cursor.lastrowid, title, creator)
            return self._get_video_unlocked(cursor.lastrowid)

    def get_video(self, video_id: int) -> Optional[dict]:
        """Get video by id."""
        with self._lock:
            return self._get_video_unlocked(video_id)

    def list_videos(self, category: str = "", sort: str = "", page: int = 1,
                    limit: int = 10) -> tuple[list[dict], int]:
        """Get one page of public videos and the total page count.

        sort='trending' orders by views, anything else newest first.
        """
        page = max(page, 1)
        order = "views DESC, created_at DESC" if sort == "trending" else "created_at DESC, id DESC"
        where = "is_public = 1"
        args: list = []
        if category:
            where += " AND category = ? COLLATE NOCASE"
            args.append(category)
        with self._lock:
            total = self.conn.execute(
                f"SELECT COUNT(*) FROM videos WHERE {where}", args
            ).fetchone()[0]
            cursor = self.conn.execute(
                f"SELECT * FROM videos WHERE {where} ORDER BY {order} LIMIT ? OFFSET ?",
                (*args, limit, (page - 1) * limit),
            )
            videos = [self._row_to_video(row) for row in cursor.fetchall()]
        return videos, math.ceil(total / limit) if limit else 0

    def record_view(self, video_id: int) -> Optional[dict]:
        """Increment view count and return the updated video (None if missing)."""
        with self._lock:
            cursor = self.conn.execute(
                "UPDATE videos SET views = views + 1 WHERE id = ?", (video_id,)
            )
            self.conn.commit()
            if cursor.rowcount == 0:
                return None
            return self._get_video_unlocked(video_id)

    def update_video(self, video_id: int, creator: str, **fields) -> Optional[dict]:
        """Update a video owned by creator. Returns None if missing or not owned."""
        updates = {}
        for name in _UPDATABLE_FIELDS:
            value = fields.get(name)
            if value is None:
                continue
            if name == "tags":
                value = _split_tags(value)
            elif name == "is_public":
                value = int(bool(value))
            elif name == "thumbnail_url":
                value = _validate_media_url(value)
            updates[name] = value
        with self._lock:
            row = self.conn.execute(
                "SELECT id FROM videos WHERE id = ? AND creator = ?", (video_id, creator)
            ).fetchone()
            if not row:
                return None
            if updates:
                assignments = ", ".join(f"{name} = ?" for name in updates)
                self.conn.execute(
                    f"UPDATE videos SET {assignments} WHERE id = ?",
                    (*updates.values(), video_id),
                )
                self.conn.commit()
            return self._get_video_unlocked(video_id)

    def delete_video(self, video_id: int, creator: str) -> bool:
        """Delete a video owned by creator."""
        with self._lock:
            cursor = self.conn.execute(
                "DELETE FROM videos WHERE id = ? AND creator = ?", (video_id, creator)
            )
            self.conn.commit()
            return cursor.rowcount > 0

    def toggle_like(self, video_id: int, user_id: str) -> Optional[dict]:
        """Like the video, or unlike it if already liked. None if the video is missing."""
        with self._lock:
            if not self.conn.execute("SELECT 1 FROM videos WHERE id = ?", (video_id,)).fetchone():
                return None
            cursor = self.conn.execute(
                "DELETE FROM likes WHERE video_id = ? AND user_id = ?", (video_id, user_id)
            )
            if cursor.rowcount == 0:
                self.conn.execute(
                    "INSERT INTO likes (video_id, user_id) VALUES (?, ?)", (video_id, user_id)
                )
            self.conn.commit()
            return self._get_video_unlocked(video_id)

    def is_liked_by(self, video_id: int, user_id: str) -> bool:
        with self._lock:
            row = self.conn.execute(
                "SELECT 1 FROM likes WHERE video_id = ? AND user_id = ?", (video_id, user_id)
            ).fetchone()
            return row is not None

    # --- Settings ---

    def get_setting(self, key: str, default: str = "") -> str:
        """Read a setting value."""
        with self._lock:
            cursor = self.conn.execute(
                "SELECT value FROM settings WHERE key = ?", (key,)
            )
            row = cursor.fetchone()
            return row[0] if row else default

    def set_setting(self, key: str, value: str) -> None:
        """Write a setting (upsert)."""
        with self._lock:
            self.conn.execute(
                """INSERT INTO settings (key, value) VALUES (?, ?)
                   ON CONFLICT(key) DO UPDATE SET value = ?, updated_at = datetime('now')""",
                (key, value, value),
            )
            self.conn.commit()

    def delete_setting(self, key: str) -> bool:
        """Delete a single setting."""
        with self._lock:
            cursor = self.conn.execute("DELETE FROM settings WHERE key = ?", (key,))
            self.conn.commit()
            return cursor.rowcount > 0

    def delete_settings(self, prefix: str) -> int:
        """Delete every setting whose key starts with prefix. Returns count removed."""
        escaped = prefix.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
        with self._lock:
            cursor = self.conn.execute(
                "DELETE FROM settings WHERE key LIKE ? ESCAPE '\\'", (escaped + "%",)
            )
            self.conn.commit()
            return cursor.rowcount

    def close(self) -> None:
        """Close database connection."""
        self.conn.close()
