import datetime as dt
from pathlib import Path

import pytest

from sitesmith.content import (
    extract_title,
    parse_content,
    parse_front_matter,
    parse_page,
    slugify,
    split_date_prefix,
)
from sitesmith.errors import ContentError

from conftest import write


def test_slugify() -> None:
    assert slugify("Hello, World!") == "hello-world"
    assert slugify("snake_case name") == "snake-case-name"
    assert slugify("!!!") == "page"


def test_front_matter_lists_and_quotes() -> None:
    meta, body = parse_front_matter(
        "\ufeff---\n"
        "title: 'Quoted'\n"
        "tags: [a, \"b\", c]\n"
        "categories: x, y\n"
        "# ignored\n"
        "---\n"
        "Body\n"
    )

    assert meta == {"title": "Quoted", "tags": ["a", "b", "c"], "categories": ["x", "y"]}
    assert body == "Body"


def test_unterminated_front_matter_is_body() -> None:
    meta, body = parse_front_matter("---\ntitle: x\nno end\n")

    assert meta == {}
    assert body.startswith("---")


def test_title_falls_back_to_first_heading() -> None:
    assert extract_title({}, "# Heading\n\nText") == ("Heading", "Text")
    assert extract_title({}, "Text first\n# Later") == ("Untitled", "Text first\n# Later")


def test_split_date_prefix() -> None:
    assert split_date_prefix("2024-03-09-launch") == (dt.date(2024, 3, 9), "launch")
    assert split_date_prefix("2024-13-40-bad") == (None, "2024-13-40-bad")
    assert split_date_prefix("plain") == (None, "plain")


def test_parse_page_fields(tmp_path: Path) -> None:
    root = tmp_path / "content"
    path = root / "posts" / "2024-03-09-launch.md"
    raw = "---\ntitle: Launch\ncategories: [news, misc]\ntags: [a]\ndraft: yes\n---\nSome *text*.\n"

    page = parse_page(path, raw, root)

    assert page.slug == "launch"
    assert page.url == "/posts/launch.html"
    assert page.date == dt.date(2024, 3, 9)
    assert page.category == "news"
    assert page.tags == ["a"]
    assert page.draft is True
    assert page.layout is None
    assert "<em>text</em>" in page.content
    assert page.file_path == str(path)


def test_front_matter_date_and_slug_win(tmp_path: Path) -> None:
    root = tmp_path / "content"
    raw = "---\ndate: 2023-05-06\nslug: Custom Slug\n---\nx\n"

    page = parse_page(root / "2024-01-01-ignored.md", raw, root)

    assert page.date == dt.date(2023, 5, 6)
    assert page.url == "/custom-slug.html"


def test_bad_date_raises(tmp_path: Path) -> None:
    with pytest.raises(ContentError, match="Invalid date 'soon'"):
        parse_page(tmp_path / "a.md", "---\ndate: soon\n---\n", tmp_path)


def test_fenced_code_is_highlighted(tmp_path: Path) -> None:
    page = parse_page(tmp_path / "code.md", "```python\nprint('x')\n```\n", tmp_path)

    assert "codehilite" in page.content


def test_parse_content_counts_files_and_drafts(site: Path) -> None:
    result = parse_content(site / "content")

    assert sorted(page.slug for page in result.pages) == ["about", "post-a", "post-b"]
    assert result.stats == {"total_files": 3, "drafts": 1}


def test_parse_content_requires_directory(tmp_path: Path) -> None:
    with pytest.raises(ContentError, match="Content directory not found"):
        parse_content(tmp_path / "nope")


def test_parse_content_reads_markdown_extension_only(tmp_path: Path) -> None:
    write(tmp_path / "a.markdown", "A")
    write(tmp_path / "notes.txt", "ignored")

    result = parse_content(tmp_path)

    assert [page.slug for page in result.pages] == ["a"]
