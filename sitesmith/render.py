from __future__ import annotations

import datetime as dt
import html
import re
from pathlib import Path
from typing import Any, Optional

from .errors import LayoutError, RenderError
from .filesystem import LocalFileSystem

LAYOUT_SUFFIX = ".html"
LAYOUT_PATTERNS = ("*.html", "*.htm")
PARTIALS_DIR = "partials"
TAG_RE = re.compile(r"<[^>]+>")
PARTIAL_RE = re.compile(r"\{\{>\s*([^}\s]+)\s*\}\}")
CONTENT_ROOTS = {"content", "posts", "pages"}


def strip_tags(html_text: str) -> str:
    return TAG_RE.sub("", html_text)


def render_template(template: str, **context: str) -> str:
    output = template
    late_keys = {"content", "sidebar"}
    for key, value in context.items():
        if key in late_keys:
            continue
        output = output.replace(f"{{{{{key}}}}}", value)
    for key in late_keys:
        if key in context:
            output = output.replace(f"{{{{{key}}}}}", context[key])
    return output


def extract_folder_from_url(url: str) -> str:
    parts = [part for part in url.split("/") if part]
    if len(parts) >= 2:
        return parts[0]
    return "page"


def singularize(word: str) -> str:
    if word.endswith("ies"):
        return word[:-3] + "y"
    if word.endswith(("ses", "xes")):
        return word[:-2]
    if word.endswith("s"):
        return word[:-1]
    return word


def _folder_layout(url: str, layouts_dir: Path, fs: LocalFileSystem) -> str:
    folder = extract_folder_from_url(url)
    for name in (folder, singularize(folder)):
        if fs.exists(layouts_dir / f"{name}{LAYOUT_SUFFIX}"):
            return name
    return "default"


def resolve_layout(page: Any, config: Any, options: object = None) -> str:
    fs = getattr(options, "file_system", None) or LocalFileSystem()
    layouts_dir = Path(config.absolute_layouts_path)
    name = page.layout or _folder_layout(page.url, layouts_dir, fs)
    layout_path = layouts_dir / f"{name}{LAYOUT_SUFFIX}"
    if fs.exists(layout_path):
        return str(layout_path)

    message = f"Layout '{name}' not found"
    file_path = getattr(page, "file_path", None)
    if file_path:
        parts = Path(file_path).parts
        for index, part in enumerate(parts):
            if part in CONTENT_ROOTS:
                message += f"\nReferenced in: {Path(*parts[index:]).as_posix()}"
                break
    raise LayoutError(f"{message}\nLooked in: {layout_path}")


def preprocess_partials(template: str, layouts_dir: Path, fs: LocalFileSystem) -> str:
    def include(match: re.Match) -> str:
        partial_path = layouts_dir / PARTIALS_DIR / match.group(1)
        try:
            return fs.read_text(partial_path).strip()
        except OSError:
            return ""

    return PARTIAL_RE.sub(include, template)


def replace_asset_references(html_text: str, asset_mappings: dict[str, str]) -> str:
    if not asset_mappings:
        return html_text
    keys = sorted(asset_mappings, key=len, reverse=True)
    pattern = re.compile("|".join(re.escape(key) for key in keys))
    return pattern.sub(lambda match: asset_mappings[match.group(0)], html_text)


def page_context(page: Any, config: Any) -> dict[str, str]:
    date = getattr(page, "date", None)
    tags = getattr(page, "tags", None) or []
    return {
        "title": html.escape(getattr(page, "title", "") or ""),
        "url": getattr(page, "url", "") or "",
        "date": date.isoformat() if date else "",
        "tags": ", ".join(html.escape(tag) for tag in tags),
        "category": html.escape(getattr(page, "category", None) or ""),
        "site_name": html.escape(config.site_name),
        "site_description": html.escape(config.description),
        "site_url": config.site_url,
        "year": str(dt.date.today().year),
        "content": getattr(page, "content", "") or "",
    }


def render_with_layout(
    page: Any,
    layout_path: str | Path,
    config: Any,
    options: object = None,
    assigns: Optional[dict[str, str]] = None,
    asset_mappings: Optional[dict[str, str]] = None,
) -> str:
    fs = getattr(options, "file_system", None) or LocalFileSystem()
    layout_path = Path(layout_path)
    try:
        template = fs.read_text(layout_path)
    except OSError as exc:
        raise RenderError(f"Failed to read layout {layout_path}: {exc}") from exc

    template = preprocess_partials(template, layout_path.parent, fs)
    context = page_context(page, config)
    context.update(assigns or {})
    output = render_template(template, **context)
    return replace_asset_references(output, asset_mappings or {})
