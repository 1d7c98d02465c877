from __future__ import annotations

import html
from typing import Optional
from urllib.parse import quote

from .models import COLLECTION_CATEGORY, COLLECTION_POSTS, COLLECTION_TAG, Collection, Page, Pagination
from .paginate import build_page_url

COLLECTION_DIRS = {COLLECTION_TAG: "tags", COLLECTION_CATEGORY: "categories"}
DATE_DISPLAY_FMT = "%B %d, %Y"


def collection_dir(collection: Collection) -> str:
    if collection.type == COLLECTION_POSTS:
        return "posts"
    return COLLECTION_DIRS.get(collection.type, f"{collection.type}s")


def collection_output_path(collection: Collection, page_number: int = 1) -> str:
    base = collection_dir(collection)
    if collection.type == COLLECTION_POSTS:
        if page_number == 1:
            return f"{base}/index.html"
        return f"{base}/page/{page_number}.html"
    if page_number == 1:
        return f"{base}/{collection.name}.html"
    return f"{base}/{collection.name}/page/{page_number}.html"


def collection_url_template(collection: Collection) -> str:
    if collection.type == COLLECTION_POSTS:
        return f"/{collection_dir(collection)}/page/:page.html"
    return f"/{collection_dir(collection)}/{collection.name}/page/:page.html"


def collection_index_url(collection: Collection) -> str:
    return "/" + collection_output_path(collection, 1)


def relative_root(output_path: str) -> str:
    depth = output_path.strip("/").count("/")
    return "/".join([".."] * depth) if depth else "."


def relative_url(url: str, root: str) -> str:
    # Output names are raw collection names; "C#" needs escaping in an href.
    path = quote(url.lstrip("/"))
    return f"{root}/{path}" if path else f"{root}/index.html"


def collection_title(collection: Collection, pagination: Optional[Pagination] = None) -> str:
    page_info = ""
    if pagination is not None:
        page_info = f" (Page {pagination.current_page} of {pagination.total_pages})"
    if collection.type == COLLECTION_POSTS:
        return f"All Posts{page_info}"
    return f"{collection.type.capitalize()}: {collection.name}{page_info}"


def render_post_item(page: Page, root: str) -> str:
    intro = page.frontmatter.get("intro") or page.frontmatter.get("description") or ""
    intro_html = f'<p class="post-intro">{html.escape(intro)}</p>' if intro else ""
    date_html = ""
    if page.date:
        date_html = (
            f'<time class="post-date" datetime="{page.date.isoformat()}">'
            f"{page.date.strftime(DATE_DISPLAY_FMT)}</time>"
        )
    return (
        '<article class="post-item">'
        f'<h3 class="post-title"><a href="{relative_url(page.url, root)}">{html.escape(page.title)}</a></h3>'
        f"{intro_html}"
        f"{date_html}"
        "</article>"
    )


def render_pagination(pagination: Pagination, root: str, url_template: str, index_url: str) -> str:
    def page_href(number: int) -> str:
        return relative_url(build_page_url(number, url_template, index_url), root)

    items = []
    if pagination.has_prev:
        prev_url = relative_url(pagination.prev_url or index_url, root)
        items.append(f'<a class="pagination-prev" href="{prev_url}">&larr; Previous</a>')
    else:
        items.append('<span class="pagination-prev disabled">&larr; Previous</span>')
    numbers = []
    for number in pagination.page_numbers:
        if number == pagination.current_page:
            numbers.append(f'<span class="pagination-page current">{number}</span>')
        else:
            numbers.append(f'<a class="pagination-page" href="{page_href(number)}">{number}</a>')
    items.append(f'<span class="pagination-pages">{" ".join(numbers)}</span>')
    if pagination.has_next:
        items.append(f'<a class="pagination-next" href="{relative_url(pagination.next_url, root)}">Next &rarr;</a>')
    else:
        items.append('<span class="pagination-next disabled">Next &rarr;</span>')
    return f'<nav class="pagination">{"".join(items)}</nav>'


def render_collection_content(
    collection: Collection, output_path: str, pagination: Optional[Pagination] = None
) -> tuple[str, str]:
    root = relative_root(output_path)
    count = len(collection.pages)
    meta = f"Total posts: {count}" if collection.type == COLLECTION_POSTS else f"Posts: {count}"
    posts_html = "\n".join(render_post_item(page, root) for page in collection.pages)
    pagination_html = ""
    if pagination is not None:
        pagination_html = render_pagination(
            pagination, root, collection_url_template(collection), collection_index_url(collection)
        )
    content = (
        f'<p class="collection-meta">{meta}</p>'
        f'<div class="posts">{posts_html}</div>'
        f"{pagination_html}"
    )
    return collection_title(collection, pagination), content
