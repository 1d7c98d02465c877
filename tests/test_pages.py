import pytest

from sitesmith.models import Collection
from sitesmith.pages import (
    collection_output_path,
    collection_title,
    relative_root,
    relative_url,
    render_collection_content,
)
from sitesmith.paginate import paginate


@pytest.mark.parametrize(
    "collection, page_number, expected",
    [
        (Collection("posts", "posts"), 1, "posts/index.html"),
        (Collection("posts", "posts"), 3, "posts/page/3.html"),
        (Collection("Web Dev", "tag"), 1, "tags/Web Dev.html"),
        (Collection("Web Dev", "tag"), 2, "tags/Web Dev/page/2.html"),
        (Collection("C#", "tag"), 1, "tags/C#.html"),
        (Collection("life", "category"), 1, "categories/life.html"),
        (Collection("2024", "archive"), 1, "archives/2024.html"),
    ],
)
def test_collection_output_path(collection: Collection, page_number: int, expected: str) -> None:
    assert collection_output_path(collection, page_number) == expected


def test_relative_links() -> None:
    assert relative_root("index.html") == "."
    assert relative_root("tags/web/page/2.html") == "../../.."
    assert relative_url("/posts/a.html", "..") == "../posts/a.html"
    assert relative_url("/", ".") == "./index.html"
    assert relative_url("/tags/C#.html", "..") == "../tags/C%23.html"
    assert relative_url("/tags/C++.html", "..") == "../tags/C%2B%2B.html"


def test_titles() -> None:
    pages = paginate([1, 2, 3], per_page=2)

    assert collection_title(Collection("posts", "posts")) == "All Posts"
    assert collection_title(Collection("python", "tag"), pages[1].pagination) == "Tag: python (Page 2 of 2)"


def test_collection_content_lists_posts(make_page) -> None:
    collection = Collection(
        "python",
        "tag",
        [make_page("a", date="2024-01-02", title="A <1>", frontmatter={"intro": "First"}), make_page("b")],
    )

    title, content = render_collection_content(collection, "tags/python.html")

    assert title == "Tag: python"
    assert '<p class="collection-meta">Posts: 2</p>' in content
    assert '<a href="../posts/a.html">A &lt;1&gt;</a>' in content
    assert '<p class="post-intro">First</p>' in content
    assert '<time class="post-date" datetime="2024-01-02">January 02, 2024</time>' in content
    assert "pagination" not in content


def test_first_page_pagination_links(make_page) -> None:
    posts = Collection("posts", "posts")
    pages = paginate(list(range(3)), per_page=1, url_template="/posts/page/:page.html", index_url="/posts/index.html")

    _, content = render_collection_content(posts.with_pages([make_page("a")]), "posts/index.html", pages[0].pagination)

    assert '<span class="pagination-prev disabled">' in content
    assert '<a class="pagination-page" href="../posts/page/2.html">2</a>' in content
    assert '<a class="pagination-next" href="../posts/page/2.html">' in content
