from __future__ import annotations

import datetime as dt
import logging
from typing import Iterable

from .models import COLLECTION_CATEGORY, COLLECTION_POSTS, COLLECTION_TAG, Collection, Page

logger = logging.getLogger(__name__)


def sort_by_date(pages: Iterable[Page]) -> list[Page]:
    return sorted(pages, key=lambda page: page.date or dt.date.min, reverse=True)


def is_post(page: Page) -> bool:
    if page.layout == "post":
        return True
    return page.date is not None and page.layout != "page"


def _visible(pages: Iterable[Page], include_drafts: bool) -> list[Page]:
    if include_drafts:
        return list(pages)
    return [page for page in pages if not page.draft]


def group_by_tag(pages: list[Page]) -> list[Collection]:
    groups: dict[str, list[Page]] = {}
    for page in pages:
        for tag in dict.fromkeys(page.tags):
            groups.setdefault(tag, []).append(page)
    return [
        Collection(name=name, type=COLLECTION_TAG, pages=sort_by_date(members))
        for name, members in sorted(groups.items(), key=lambda item: item[0].lower())
    ]


def group_by_category(pages: list[Page]) -> list[Collection]:
    groups: dict[str, list[Page]] = {}
    for page in pages:
        if page.category:
            groups.setdefault(page.category, []).append(page)
    return [
        Collection(name=name, type=COLLECTION_CATEGORY, pages=sort_by_date(members))
        for name, members in sorted(groups.items(), key=lambda item: item[0].lower())
    ]


def posts_collection(pages: list[Page]) -> list[Collection]:
    posts = [page for page in pages if is_post(page)]
    if not posts:
        return []
    return [Collection(name="posts", type=COLLECTION_POSTS, pages=sort_by_date(posts))]


def generate_collections(pages: list[Page], options: object = None) -> list[Collection]:
    include_drafts = bool(getattr(options, "draft", False))
    visible = _visible(pages, include_drafts)

    collections: list[Collection] = []
    collections.extend(group_by_tag(visible))
    collections.extend(group_by_category(visible))
    collections.extend(posts_collection(visible))
    logger.debug("Generated %d collections from %d pages", len(collections), len(visible))
    return collections
