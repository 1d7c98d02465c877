from __future__ import annotations

import math
from typing import Any, Optional, Sequence

from .models import PaginatedPage, Pagination

PAGE_PLACEHOLDER = ":page"


def calculate_total_pages(total_items: int, per_page: int) -> int:
    if total_items <= 0:
        return 1
    return math.ceil(total_items / per_page)


def build_page_url(page_number: int, url_template: str, index_url: Optional[str] = None, **replacements: Any) -> Optional[str]:
    if page_number == 1:
        return index_url
    url = url_template.replace(PAGE_PLACEHOLDER, str(page_number))
    for key, value in replacements.items():
        url = url.replace(f":{key}", str(value))
    return url


def build_pagination_meta(
    current_page: int,
    total_pages: int,
    per_page: int,
    total_items: int,
    url_template: str,
    index_url: Optional[str] = None,
) -> Pagination:
    has_prev = current_page > 1
    has_next = current_page < total_pages
    return Pagination(
        current_page=current_page,
        total_pages=total_pages,
        per_page=per_page,
        total_items=total_items,
        has_prev=has_prev,
        has_next=has_next,
        prev_url=build_page_url(current_page - 1, url_template, index_url) if has_prev else None,
        next_url=build_page_url(current_page + 1, url_template, index_url) if has_next else None,
        page_numbers=list(range(1, total_pages + 1)),
    )


def paginate(
    items: Sequence[Any],
    per_page: int = 10,
    url_template: str = "/page/:page.html",
    index_url: Optional[str] = None,
) -> list[PaginatedPage]:
    if per_page <= 0:
        raise ValueError(f"per_page must be positive, got {per_page}")
    total_items = len(items)
    total_pages = calculate_total_pages(total_items, per_page)
    pages = []
    for page_number in range(1, total_pages + 1):
        start = (page_number - 1) * per_page
        pages.append(
            PaginatedPage(
                page_number=page_number,
                items=list(items[start : start + per_page]),
                pagination=build_pagination_meta(
                    page_number, total_pages, per_page, total_items, url_template, index_url
                ),
            )
        )
    return pages
