from __future__ import annotations

import datetime as dt
from typing import Optional
from xml.sax.saxutils import escape

from .errors import FeedError
from .models import Page
from .render import strip_tags
from .utils import join_url, rfc822_date

FEED_FILE = "feed.xml"
FEED_LIMIT = 20
SUMMARY_LENGTH = 200
XML_ENTITIES = {'"': "&quot;", "'": "&apos;"}


def xml_escape(value: object) -> str:
    return escape(str(value), XML_ENTITIES)


def is_feed_post(page: Page) -> bool:
    # Deliberately URL based; it does not consult the posts collection rules.
    return page.date is not None and not page.draft and "/posts/" in page.url


def summarize(html_text: str) -> str:
    summary = strip_tags(html_text).strip().replace("\n", " ")
    return summary[:SUMMARY_LENGTH] + ("..." if len(summary) > SUMMARY_LENGTH else "")


def publication_date(page: Page) -> dt.datetime:
    date = page.date
    if isinstance(date, dt.datetime):
        return date
    return dt.datetime.combine(date, dt.time(), tzinfo=dt.timezone.utc)


def render_item(page: Page, site_url: str) -> str:
    link = join_url(site_url, page.url)
    return "\n".join(
        [
            "<item>",
            f"<title>{xml_escape(page.title)}</title>",
            f"<link>{xml_escape(link)}</link>",
            f"<guid>{xml_escape(link)}</guid>",
            f"<pubDate>{rfc822_date(publication_date(page))}</pubDate>",
            f"<description>{xml_escape(summarize(page.content))}</description>",
            "</item>",
        ]
    )


def generate_rss_feed(
    pages: list[Page],
    site_url: str,
    feed_title: str = "Blog",
    feed_description: str = "Latest posts",
    max_items: int = FEED_LIMIT,
    now: Optional[dt.datetime] = None,
) -> str:
    site_url = (site_url or "").strip().rstrip("/")
    if not site_url:
        raise FeedError("site_url is required for RSS feed generation")

    posts = sorted(
        (page for page in pages if is_feed_post(page)),
        key=publication_date,
        reverse=True,
    )[: max(0, max_items)]
    last_build = rfc822_date(now or dt.datetime.now(dt.timezone.utc))
    items = [render_item(page, site_url) for page in posts]

    return "\n".join(
        [
            '<?xml version="1.0" encoding="UTF-8"?>',
            '<rss version="2.0" xmlns:atom="http://www.w3.org/2005/Atom">',
            "<channel>",
            f"<title>{xml_escape(feed_title)}</title>",
            f"<link>{xml_escape(site_url)}</link>",
            f"<description>{xml_escape(feed_description)}</description>",
            f'<atom:link href="{xml_escape(join_url(site_url, FEED_FILE))}" rel="self" type="application/rss+xml"/>',
            f"<lastBuildDate>{last_build}</lastBuildDate>",
            "<generator>sitesmith</generator>",
            *items,
            "</channel>",
            "</rss>",
        ]
    )
