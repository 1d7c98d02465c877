from __future__ import annotations

import datetime as dt
from dataclasses import dataclass, field, replace
from typing import Any, Optional

COLLECTION_TAG = "tag"
COLLECTION_CATEGORY = "category"
COLLECTION_POSTS = "posts"

ASSET_CSS = "css"
ASSET_JS = "js"
ASSET_BINARY = "binary"


@dataclass(frozen=True)
class Page:
    slug: str
    url: str
    title: str = "Untitled"
    content: str = ""
    file_path: Optional[str] = None
    frontmatter: dict[str, Any] = field(default_factory=dict)
    date: Optional[dt.date] = None
    draft: bool = False
    layout: Optional[str] = None
    tags: list[str] = field(default_factory=list)
    category: Optional[str] = None


@dataclass(frozen=True)
class Collection:
    name: str
    type: str
    pages: list[Page] = field(default_factory=list)

    def with_pages(self, pages: list[Page]) -> "Collection":
        return replace(self, pages=list(pages))


@dataclass(frozen=True)
class Pagination:
    current_page: int
    total_pages: int
    per_page: int
    total_items: int
    has_prev: bool
    has_next: bool
    prev_url: Optional[str]
    next_url: Optional[str]
    page_numbers: list[int]


@dataclass(frozen=True)
class PaginatedPage:
    page_number: int
    items: list[Any]
    pagination: Pagination


@dataclass
class Asset:
    original_path: str
    output_path: str
    type: str
    content: bytes = b""
    fingerprint: Optional[str] = None


@dataclass
class AssetResult:
    assets: list[Asset] = field(default_factory=list)
    mappings: dict[str, str] = field(default_factory=dict)


@dataclass
class ContentResult:
    pages: list[Page] = field(default_factory=list)
    stats: dict[str, int] = field(default_factory=dict)


@dataclass
class BuildStats:
    total_pages: int = 0
    drafts: int = 0
    rendered_pages: int = 0
    tag_pages: int = 0
    category_pages: int = 0
    posts_pages: int = 0
    rss_feed: int = 0
    incremental: bool = False
    changed: int = 0
    skipped: int = 0


@dataclass
class BuildSummary:
    pages: int = 0
    collections: int = 0
    assets: int = 0
    files_written: int = 0
    stats: BuildStats = field(default_factory=BuildStats)
