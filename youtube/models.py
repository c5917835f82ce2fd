"""Catalog data types shared by the YouTube client, normalizer, and web layer."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Optional


def _clean_text(value, default: str = "") -> str:
    if not isinstance(value, str):
        return default
    return value.strip() or default


@dataclass(frozen=True)
class FetchRequest:
    """One user selection: which page of which category, in which order."""
    page: int = 1
    category: str = ""
    sort: str = "date"

    def __post_init__(self):
        # Malformed input degrades to defaults instead of failing
        try:
            page = int(self.page)
        except (TypeError, ValueError):
            page = 1
        object.__setattr__(self, "page", max(page, 1))
        object.__setattr__(self, "category", _clean_text(self.category))
        object.__setattr__(self, "sort", _clean_text(self.sort, "date").lower())

    @property
    def is_first_page(self) -> bool:
        return self.page == 1


@dataclass(frozen=True)
class Uploader:
    id: str
    display_name: str
    avatar: str


@dataclass(frozen=True)
class VideoSummary:
    """Uniform video shape for the catalog, built from a search + detail record pair."""
    id: str
    title: str
    description: str
    thumbnail: str
    duration: str
    views: int
    uploader: Uploader
    created_at: str

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class CatalogPage:
    """A normalized batch plus the provider's paging metadata."""
    videos: list[VideoSummary] = field(default_factory=list)
    total_pages: int = 0
    next_page_token: Optional[str] = None
