from __future__ import annotations

import logging
import re
from pathlib import Path, PurePosixPath
from typing import Optional

from .cache import hash_bytes
from .errors import AssetError
from .filesystem import LocalFileSystem, list_files
from .models import ASSET_BINARY, ASSET_CSS, ASSET_JS, Asset, AssetResult

logger = logging.getLogger(__name__)

FINGERPRINT_LENGTH = 8
CSS_COMMENT_RE = re.compile(r"/\*.*?\*/", re.DOTALL)
JS_LINE_COMMENT_RE = re.compile(r"//[^\n]*")
WHITESPACE_RE = re.compile(r"\s+")
ASSET_TYPES = {".css": ASSET_CSS, ".js": ASSET_JS}


def asset_type(path: str | Path) -> str:
    return ASSET_TYPES.get(Path(path).suffix.lower(), ASSET_BINARY)


def discover_assets(static_dir: str | Path, fs: Optional[LocalFileSystem] = None) -> list[Asset]:
    fs = fs or LocalFileSystem()
    root = Path(static_dir)
    assets = []
    for item in list_files(fs, root):
        relative = Path(item).relative_to(root).as_posix()
        assets.append(Asset(original_path=str(item), output_path=relative, type=asset_type(item)))
    return assets


def minify_css(text: str) -> str:
    text = CSS_COMMENT_RE.sub("", text)
    return WHITESPACE_RE.sub(" ", text).strip()


def minify_js(text: str) -> str:
    # Textual only: a "//" inside a string literal is treated as a comment too.
    text = JS_LINE_COMMENT_RE.sub("", text)
    return WHITESPACE_RE.sub(" ", text).strip()


def fingerprinted_path(output_path: str, fingerprint: str) -> str:
    path = PurePosixPath(output_path)
    name = f"{path.stem}-{fingerprint[:FINGERPRINT_LENGTH]}{path.suffix}"
    return str(path.with_name(name))


def web_path(path: str) -> str:
    posix = path.replace("\\", "/")
    marker = "/static/"
    if marker in posix:
        posix = posix.split(marker, 1)[1]
    elif posix.startswith("static/"):
        posix = posix[len("static/") :]
    return "/" + posix.lstrip("/")


def web_output_path(path: str, output_prefix: str = "_site") -> str:
    posix = path.replace("\\", "/").lstrip("/")
    prefix = output_prefix.strip("/") + "/"
    if posix.startswith(prefix):
        posix = posix[len(prefix) :]
    return "/" + posix


def process_asset(asset: Asset, fs: LocalFileSystem) -> Asset:
    try:
        data = fs.read_bytes(asset.original_path)
    except OSError as exc:
        raise AssetError(f"Cannot read asset {asset.original_path}: {exc}") from exc

    kind = asset.type or asset_type(asset.original_path)
    if kind == ASSET_BINARY:
        return Asset(original_path=asset.original_path, output_path=asset.output_path, type=kind, content=data)

    text = data.decode("utf-8", errors="replace")
    minified = minify_css(text) if kind == ASSET_CSS else minify_js(text)
    content = minified.encode("utf-8")
    fingerprint = hash_bytes(content)
    return Asset(
        original_path=asset.original_path,
        output_path=fingerprinted_path(asset.output_path, fingerprint),
        type=kind,
        content=content,
        fingerprint=fingerprint,
    )


def process_assets(assets: list[Asset], options: object = None, output_prefix: str = "_site") -> AssetResult:
    fs = getattr(options, "file_system", None) or LocalFileSystem()
    processed = []
    mappings: dict[str, str] = {}
    for asset in assets:
        result = process_asset(asset, fs)
        processed.append(result)
        # Templates may reference an asset by source path or by web path.
        mappings[result.original_path] = result.output_path
        mappings[web_path(result.original_path)] = web_output_path(result.output_path, output_prefix)
        logger.debug("Processed asset %s -> %s", result.original_path, result.output_path)
    return AssetResult(assets=processed, mappings=mappings)
