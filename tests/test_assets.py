from pathlib import Path

import pytest

from sitesmith.assets import (
    discover_assets,
    fingerprinted_path,
    minify_css,
    minify_js,
    process_assets,
    web_output_path,
    web_path,
)
from sitesmith.cache import hash_bytes
from sitesmith.errors import AssetError
from sitesmith.models import ASSET_BINARY, ASSET_CSS, ASSET_JS, Asset

from conftest import PNG_BYTES, write


def test_minify_css_drops_comments_and_collapses_whitespace() -> None:
    source = "/* a\n multi-line comment */\n.a {\n    margin: 0;\n}\n\n.b { padding: 1px; }\n"

    assert minify_css(source) == ".a { margin: 0; } .b { padding: 1px; }"


def test_minify_js_drops_line_comments() -> None:
    source = "// setup\nvar a = 1;   // trailing\n\n\nvar b = 2;\n"

    assert minify_js(source) == "var a = 1; var b = 2;"


def test_fingerprinted_path_keeps_directory_and_extension() -> None:
    assert fingerprinted_path("css/app.css", "0123456789abcdef") == "css/app-01234567.css"
    assert fingerprinted_path("bundle.min.js", "ffffffff00") == "bundle.min-ffffffff.js"


@pytest.mark.parametrize(
    "path, expected",
    [
        ("static/css/app.css", "/css/app.css"),
        ("/srv/site/static/js/app.js", "/js/app.js"),
        ("img/logo.png", "/img/logo.png"),
    ],
)
def test_web_path(path: str, expected: str) -> None:
    assert web_path(path) == expected


def test_web_output_path_strips_output_prefix() -> None:
    assert web_output_path("_site/css/app-1.css") == "/css/app-1.css"
    assert web_output_path("css/app-1.css") == "/css/app-1.css"
    assert web_output_path("public/css/app-1.css", output_prefix="public") == "/css/app-1.css"


def test_discover_assets_lists_files_with_relative_output_paths(site: Path) -> None:
    assets = discover_assets(site / "static")

    assert [(asset.output_path, asset.type) for asset in assets] == [
        ("css/app.css", ASSET_CSS),
        ("img/logo.png", ASSET_BINARY),
        ("js/app.js", ASSET_JS),
    ]


def test_discover_assets_without_static_dir(tmp_path: Path) -> None:
    assert discover_assets(tmp_path / "static") == []


def test_css_asset_is_minified_fingerprinted_and_mapped_twice(tmp_path: Path) -> None:
    original = write(tmp_path / "static" / "css" / "app.css", "body {\n  color: red;\n}\n")
    asset = Asset(original_path=str(original), output_path="css/app.css", type=ASSET_CSS)

    result = process_assets([asset])

    processed = result.assets[0]
    expected_hash = hash_bytes(b"body { color: red; }")
    assert processed.content == b"body { color: red; }"
    assert processed.fingerprint == expected_hash
    assert processed.output_path == f"css/app-{expected_hash[:8]}.css"
    assert result.mappings == {
        str(original): processed.output_path,
        "/css/app.css": f"/css/app-{expected_hash[:8]}.css",
    }


def test_binary_asset_passes_through_untouched(tmp_path: Path) -> None:
    logo = tmp_path / "static" / "img" / "logo.png"
    logo.parent.mkdir(parents=True)
    logo.write_bytes(PNG_BYTES)

    result = process_assets([Asset(original_path=str(logo), output_path="img/logo.png", type=ASSET_BINARY)])

    processed = result.assets[0]
    assert processed.content == PNG_BYTES
    assert processed.output_path == "img/logo.png"
    assert processed.fingerprint is None
    assert result.mappings["/img/logo.png"] == "/img/logo.png"


def test_unreadable_asset_raises(tmp_path: Path) -> None:
    missing = Asset(original_path=str(tmp_path / "static" / "gone.css"), output_path="gone.css", type=ASSET_CSS)

    with pytest.raises(AssetError, match="Cannot read asset"):
        process_assets([missing])
