from __future__ import annotations

import datetime as dt
import logging
import re
from pathlib import Path
from typing import Optional

import markdown

from .errors import ContentError
from .filesystem import LocalFileSystem, list_files
from .models import ContentResult, Page
from .utils import parse_bool

logger = logging.getLogger(__name__)

CONTENT_PATTERNS = ("*.md", "*.markdown")
LIST_KEYS = {"tags", "categories"}
LIST_MARKER_RE = re.compile(r"^(?P<indent>[ \t]*)(?:[-+*]|\d+[.)])\s+")
FENCE_RE = re.compile(r"^(?P<indent>[ \t]*)(`{3,}|~{3,})")
DATE_PREFIX_RE = re.compile(r"^(?P<date>\d{4}-\d{2}-\d{2})-(?P<rest>.+)$")


def slugify(text: str) -> str:
    text = text.lower()
    text = re.sub(r"[^\w]+", "-", text, flags=re.UNICODE)
    text = text.strip("-_").replace("_", "-")
    return text or "page"


def parse_list(value: str) -> list[str]:
    value = value.strip()
    if value.startswith("[") and value.endswith("]"):
        inner = value[1:-1]
        items = [item.strip().strip("'\"") for item in inner.split(",")]
    else:
        items = [item.strip() for item in value.split(",")]
    return [item for item in items if item]


def parse_front_matter(text: str) -> tuple[dict, str]:
    clean_text = text.lstrip("\ufeff")
    lines = clean_text.splitlines()
    if not lines or lines[0].strip() != "---":
        return {}, clean_text

    end = None
    for i in range(1, len(lines)):
        if lines[i].strip() == "---":
            end = i
            break
    if end is None:
        return {}, clean_text

    meta: dict = {}
    for line in lines[1:end]:
        line = line.strip()
        if not line or line.startswith("#") or ":" not in line:
            continue
        key, value = line.split(":", 1)
        key = key.strip().lower()
        value = value.strip()
        if key in LIST_KEYS:
            meta[key] = parse_list(value)
        else:
            meta[key] = value.strip("'\"")
    body = "\n".join(lines[end + 1 :])
    return meta, body


def extract_title(meta: dict, body: str) -> tuple[str, str]:
    if meta.get("title"):
        return meta["title"], body
    lines = body.splitlines()
    for i, line in enumerate(lines):
        stripped = line.strip()
        if stripped.startswith("# "):
            title = stripped[2:].strip() or "Untitled"
            new_body = "\n".join(lines[i + 1 :]).lstrip()
            return title, new_body
        if stripped:
            break
    return "Untitled", body


def split_date_prefix(stem: str) -> tuple[Optional[dt.date], str]:
    match = DATE_PREFIX_RE.match(stem)
    if not match:
        return None, stem
    try:
        return dt.date.fromisoformat(match.group("date")), match.group("rest")
    except ValueError:
        return None, stem


def parse_date(value: str, file_path: Path) -> Optional[dt.date]:
    value = (value or "").strip()
    if not value:
        return None
    try:
        if "T" in value or " " in value:
            return dt.datetime.fromisoformat(value).date()
        return dt.date.fromisoformat(value)
    except ValueError as exc:
        raise ContentError(f"Invalid date '{value}' in {file_path}") from exc


def normalize_list_spacing(text: str) -> str:
    lines = text.splitlines()
    out: list[str] = []
    in_fence = False
    fence_marker = ""
    for line in lines:
        fence_match = FENCE_RE.match(line)
        if fence_match:
            marker = fence_match.group(2)
            if not in_fence:
                in_fence = True
                fence_marker = marker
            elif marker == fence_marker:
                in_fence = False
                fence_marker = ""
            out.append(line)
            continue
        if in_fence:
            out.append(line)
            continue
        list_match = LIST_MARKER_RE.match(line)
        if list_match and not list_match.group("indent"):
            if out and out[-1].strip() and not LIST_MARKER_RE.match(out[-1]):
                out.append("")
        out.append(line)
    return "\n".join(out)


def render_markdown(body: str) -> str:
    md = markdown.Markdown(
        extensions=["fenced_code", "tables", "toc", "codehilite"],
        extension_configs={"codehilite": {"guess_lang": False}},
    )
    return md.convert(normalize_list_spacing(body))


def page_url(relative: Path, slug: str) -> str:
    parent = relative.parent.as_posix()
    if parent in {"", "."}:
        return f"/{slug}.html"
    return f"/{parent}/{slug}.html"


def parse_page(path: Path, raw_text: str, content_root: Path) -> Page:
    meta, body = parse_front_matter(raw_text)
    title, body = extract_title(meta, body)
    prefix_date, stem = split_date_prefix(path.stem)

    explicit_slug = (meta.get("slug") or "").strip()
    slug = slugify(explicit_slug) if explicit_slug else slugify(stem)
    date = parse_date(meta.get("date", ""), path) or prefix_date

    category = (meta.get("category") or "").strip() or None
    if category is None and meta.get("categories"):
        category = meta["categories"][0]

    try:
        relative = path.relative_to(content_root)
    except ValueError:
        relative = Path(path.name)

    return Page(
        slug=slug,
        url=page_url(relative, slug),
        title=title,
        content=render_markdown(body),
        file_path=str(path),
        frontmatter=meta,
        date=date,
        draft=parse_bool(meta.get("draft")),
        layout=(meta.get("layout") or "").strip() or None,
        tags=list(meta.get("tags") or []),
        category=category,
    )


def parse_content(content_path: str | Path, options: object = None) -> ContentResult:
    fs = getattr(options, "file_system", None) or LocalFileSystem()
    root = Path(content_path)
    if not fs.is_dir(root):
        raise ContentError(f"Content directory not found: {root}")

    pages = []
    for item in list_files(fs, root, CONTENT_PATTERNS):
        path = Path(item)
        try:
            raw_text = fs.read_text(path)
        except (OSError, UnicodeDecodeError) as exc:
            raise ContentError(f"Cannot read {path}: {exc}") from exc
        pages.append(parse_page(path, raw_text, root))
        logger.debug("Parsed %s", path)

    drafts = sum(1 for page in pages if page.draft)
    return ContentResult(pages=pages, stats={"total_files": len(pages), "drafts": drafts})
