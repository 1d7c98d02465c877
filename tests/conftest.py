"""Shared fixtures: a small on-disk site and a page factory."""

import datetime as dt
from pathlib import Path

import pytest

from sitesmith.models import Page

PNG_BYTES = (
    b"\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR\x00\x00\x00\x01\x00\x00\x00\x01\x08\x06\x00\x00\x00"
    b"\x1f\x15\xc4\x89\x00\x00\x00\rIDATx\x9cc\xf8\x0f\x00\x00\x01\x01\x00\x05\x18\xd8N\x00"
    b"\x00\x00\x00IEND\xaeB`\x82"
)


def write(path: Path, text: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


@pytest.fixture
def site(tmp_path: Path) -> Path:
    root = tmp_path / "site"
    write(
        root / "site.toml",
        'site_name = "Test Blog"\n'
        'description = "Notes & experiments"\n'
        'site_url = "https://example.com"\n',
    )
    write(root / "layouts" / "partials" / "head.html", '<link rel="stylesheet" href="/css/app.css">\n')
    write(
        root / "layouts" / "default.html",
        "<html><head><title>{{title}}</title>{{> head.html}}</head><body>{{content}}</body></html>",
    )
    write(
        root / "layouts" / "post.html",
        "<html><head>{{> head.html}}</head><body><h1>{{title}}</h1>"
        "<time>{{date}}</time>{{content}}</body></html>",
    )
    write(root / "layouts" / "page.html", "<html><body class=\"page\">{{content}}</body></html>")
    write(
        root / "content" / "posts" / "2024-01-01-post-a.md",
        "---\n"
        "title: Post A\n"
        "layout: post\n"
        "tags: [python, web]\n"
        "category: dev\n"
        "---\n"
        "Hello from **A**.\n",
    )
    write(
        root / "content" / "posts" / "post-b.md",
        "---\n"
        "title: Post B\n"
        "date: 2024-02-01\n"
        "layout: post\n"
        "draft: true\n"
        "tags: [python]\n"
        "---\n"
        "Not ready yet.\n",
    )
    write(
        root / "content" / "about.md",
        "---\n"
        "title: About\n"
        "layout: page\n"
        "---\n"
        "About this site.\n",
    )
    write(root / "static" / "css" / "app.css", "/* header */\nbody {\n  color: red;\n}\n")
    write(root / "static" / "js" / "app.js", "// boot\nconsole.log('hi');\n")
    logo = root / "static" / "img" / "logo.png"
    logo.parent.mkdir(parents=True, exist_ok=True)
    logo.write_bytes(PNG_BYTES)
    return root


@pytest.fixture
def make_page():
    def factory(slug: str, **fields) -> Page:
        fields.setdefault("url", f"/posts/{slug}.html")
        fields.setdefault("title", slug.replace("-", " ").title())
        date = fields.get("date")
        if isinstance(date, str):
            fields["date"] = dt.date.fromisoformat(date)
        return Page(slug=slug, **fields)

    return factory
