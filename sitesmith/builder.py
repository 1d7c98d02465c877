from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from functools import partial
from pathlib import Path
from typing import Any, Callable, Iterable, Optional, TypeVar

from .assets import discover_assets, process_assets
from .cache import file_changed, load_cache, remove_cache, save_cache, update_cache
from .collection import generate_collections
from .config import SiteConfig, config_from_mapping, load_config
from .content import parse_content, slugify
from .errors import BuildError, DuplicateSlugError, SitesmithError
from .feeds import FEED_FILE, generate_rss_feed
from .filesystem import LocalFileSystem, list_files
from .models import (
    COLLECTION_CATEGORY,
    COLLECTION_POSTS,
    COLLECTION_TAG,
    Asset,
    AssetResult,
    BuildStats,
    BuildSummary,
    Collection,
    ContentResult,
    Page,
)
from .pages import (
    collection_index_url,
    collection_output_path,
    collection_url_template,
    render_collection_content,
)
from .paginate import paginate
from .render import LAYOUT_PATTERNS, LAYOUT_SUFFIX, render_with_layout, resolve_layout
from .utils import clean_output_dir

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")

STATIC_DIR = "static"
LEGACY_LAYOUT_ID = "layout.html"
COUNTER_KEYS = {
    COLLECTION_TAG: "tag_pages",
    COLLECTION_CATEGORY: "category_pages",
    COLLECTION_POSTS: "posts_pages",
}


@dataclass
class BuildOptions:
    """Switches and collaborator overrides for :func:`build_site`.

    Settings left as ``None`` fall back to the site config. Collaborators
    left as ``None`` use the production implementation.
    """

    draft: bool = False
    verbose: bool = False
    incremental: bool = True
    clean: bool = False
    posts_per_page: Optional[int] = None
    paginate_collections: Optional[list[str]] = None
    generate_rss: Optional[bool] = None
    rss_max_items: Optional[int] = None
    workers: Optional[int] = None

    config_loader: Optional[Callable[[str], Any]] = None
    content_parser: Optional[Callable[[str, Any], ContentResult]] = None
    collections_generator: Optional[Callable[[list[Page], Any], list[Collection]]] = None
    assets_processor: Optional[Callable[[list[Asset], Any], AssetResult]] = None
    template_renderer: Optional[Callable[[str, dict, Any], str]] = None
    layout_resolver: Optional[Callable[..., str]] = None
    render_with_layout: Optional[Callable[..., str]] = None
    file_writer: Optional[Callable[[str, str], Any]] = None
    asset_writer: Optional[Callable[[str, bytes], Any]] = None
    file_system: Optional[LocalFileSystem] = None


def _progress(options: BuildOptions, message: str, *args: Any) -> None:
    if options.verbose:
        logger.info(message, *args)
    else:
        logger.debug(message, *args)


def _map(func: Callable[[T], R], items: list[T], workers: int) -> list[R]:
    if workers <= 1 or len(items) <= 1:
        return [func(item) for item in items]
    with ThreadPoolExecutor(max_workers=min(workers, len(items))) as executor:
        return list(executor.map(func, items))


def _write(writer: Callable[[str, Any], Any], path: Path, data: Any) -> bool:
    try:
        writer(str(path), data)
    except OSError as exc:
        logger.warning("Failed to write %s: %s", path, exc)
        return False
    return True


def page_output_path(url: str, output_root: Path) -> Path:
    relative = url.lstrip("/")
    if not relative.endswith(".html"):
        relative += ".html"
    return output_root / relative


def load_site_config(site_path: str, options: BuildOptions) -> SiteConfig:
    _progress(options, "Loading configuration...")
    loader = options.config_loader or load_config
    try:
        config = loader(site_path)
    except (SitesmithError, OSError) as exc:
        raise BuildError(f"Failed to load config: {exc}") from exc
    if isinstance(config, dict):
        config = config_from_mapping(site_path, config)
    if not config.site_path:
        config.site_path = site_path
    return config


def parse_site_content(config: SiteConfig, options: BuildOptions) -> ContentResult:
    _progress(options, "Parsing content...")
    parser = options.content_parser or parse_content
    try:
        return parser(str(config.absolute_content_path), options)
    except (SitesmithError, OSError) as exc:
        raise BuildError(f"Failed to parse content: {exc}") from exc


def validate_unique_slugs(pages: list[Page]) -> None:
    by_slug: dict[str, list[str]] = {}
    for page in pages:
        by_slug.setdefault(page.slug, []).append(page.file_path or page.url)
    duplicates = {slug: paths for slug, paths in by_slug.items() if len(paths) > 1}
    if duplicates:
        raise DuplicateSlugError(duplicates)


def filter_drafts(pages: list[Page], include_drafts: bool) -> list[Page]:
    if include_drafts:
        return list(pages)
    return [page for page in pages if not page.draft]


def list_layout_files(config: SiteConfig, fs: LocalFileSystem) -> list[str]:
    return list_files(fs, config.absolute_layouts_path, LAYOUT_PATTERNS)


def filter_changed_pages(
    pages: list[Page],
    cache: dict[str, str],
    layout_files: list[str],
    fs: LocalFileSystem,
    options: BuildOptions,
) -> tuple[list[Page], list[Page]]:
    _progress(options, "Checking for changed files...")
    changed_layouts = [path for path in layout_files if file_changed(path, cache)]
    if changed_layouts:
        for path in changed_layouts:
            _progress(options, "  Layout file changed: %s", path)
        _progress(options, "  Layout files changed - rebuilding all pages")
        return list(pages), []

    changed: list[Page] = []
    skipped: list[Page] = []
    for page in pages:
        if page.file_path and fs.exists(page.file_path) and not file_changed(page.file_path, cache):
            skipped.append(page)
        else:
            changed.append(page)
    _progress(options, "  Changed: %d files", len(changed))
    _progress(options, "  Skipped: %d files", len(skipped))
    return changed, skipped


def build_collections(pages: list[Page], options: BuildOptions) -> list[Collection]:
    _progress(options, "Generating collections...")
    generator = options.collections_generator or generate_collections
    try:
        return list(generator(pages, options))
    except (SitesmithError, ValueError) as exc:
        raise BuildError(f"Failed to generate collections: {exc}") from exc


def write_rss_feed(
    pages: list[Page],
    config: SiteConfig,
    options: BuildOptions,
    writer: Callable[[str, str], Any],
) -> int:
    enabled = config.generate_rss if options.generate_rss is None else options.generate_rss
    if not enabled:
        _progress(options, "Skipping RSS feed generation (disabled)")
        return 0
    _progress(options, "Generating RSS feed...")
    if not config.site_url:
        logger.warning("site_url not configured, skipping RSS feed")
        return 0
    max_items = config.rss_max_items if options.rss_max_items is None else options.rss_max_items
    try:
        xml = generate_rss_feed(
            pages,
            config.site_url,
            feed_title=config.site_name,
            feed_description=config.description,
            max_items=max_items,
        )
    except SitesmithError as exc:
        logger.warning("Failed to generate RSS feed: %s", exc)
        return 0
    feed_path = config.absolute_output_path / FEED_FILE
    if not _write(writer, feed_path, xml):
        return 0
    _progress(options, "  Written: %s", FEED_FILE)
    return 1


def process_site_assets(config: SiteConfig, options: BuildOptions, fs: LocalFileSystem) -> AssetResult:
    _progress(options, "Processing assets...")
    static_dir = config.absolute_site_path / STATIC_DIR
    assets = discover_assets(static_dir, fs) if fs.is_dir(static_dir) else []
    processor = options.assets_processor or partial(
        process_assets, output_prefix=Path(config.output_path).name
    )
    try:
        return processor(assets, options)
    except (SitesmithError, OSError) as exc:
        raise BuildError(f"Failed to process assets: {exc}") from exc


def render_page(
    page: Page,
    config: SiteConfig,
    collections: list[Collection],
    mappings: dict[str, str],
    options: BuildOptions,
) -> str:
    if options.template_renderer is not None:
        assigns = {"page": page, "site": config, "collections": collections, "assets": mappings}
        return options.template_renderer(LEGACY_LAYOUT_ID, assigns, options)
    resolver = options.layout_resolver or resolve_layout
    renderer = options.render_with_layout or render_with_layout
    layout_path = resolver(page, config, options)
    return renderer(page, layout_path, config, options, asset_mappings=mappings)


def render_and_write_pages(
    pages: list[Page],
    config: SiteConfig,
    collections: list[Collection],
    mappings: dict[str, str],
    options: BuildOptions,
    writer: Callable[[str, str], Any],
    workers: int,
) -> int:
    output_root = config.absolute_output_path

    def build_one(page: Page) -> bool:
        _progress(options, "  Rendering: %s", page.url)
        try:
            html_doc = render_page(page, config, collections, mappings, options)
        except (SitesmithError, OSError) as exc:
            raise BuildError(f"Failed to render page {page.url}: {exc}") from exc
        return _write(writer, page_output_path(page.url, output_root), html_doc)

    return sum(_map(build_one, pages, workers))


def _collection_layout(collection: Collection, config: SiteConfig, fs: LocalFileSystem) -> Optional[Path]:
    layouts_dir = config.absolute_layouts_path
    for name in (collection.type, "collection", "default"):
        candidate = layouts_dir / f"{name}{LAYOUT_SUFFIX}"
        if fs.exists(candidate):
            return candidate
    return None


def render_collection_page(
    collection: Collection,
    output_path: str,
    config: SiteConfig,
    mappings: dict[str, str],
    options: BuildOptions,
    fs: LocalFileSystem,
    pagination=None,
) -> str:
    title, content = render_collection_content(collection, output_path, pagination)
    layout_path = _collection_layout(collection, config, fs)
    if layout_path is None:
        return content
    page = Page(
        slug=slugify(collection.name),
        url="/" + output_path,
        title=title,
        content=content,
        layout="collection",
    )
    renderer = options.render_with_layout or render_with_layout
    try:
        return renderer(page, layout_path, config, options, asset_mappings=mappings)
    except (SitesmithError, OSError) as exc:
        logger.warning("Falling back to bare HTML for %s: %s", output_path, exc)
        return content


def collection_jobs(collection: Collection, per_page: Optional[int], paginated_types: Iterable[str]) -> list[tuple]:
    if per_page is None or collection.type not in paginated_types or len(collection.pages) <= per_page:
        return [(collection, collection_output_path(collection), None)]
    jobs = []
    for page in paginate(
        collection.pages,
        per_page=per_page,
        url_template=collection_url_template(collection),
        index_url=collection_index_url(collection),
    ):
        jobs.append(
            (
                collection.with_pages(page.items),
                collection_output_path(collection, page.page_number),
                page.pagination,
            )
        )
    return jobs


def render_and_write_collection_pages(
    collections: list[Collection],
    config: SiteConfig,
    mappings: dict[str, str],
    options: BuildOptions,
    fs: LocalFileSystem,
    writer: Callable[[str, str], Any],
    workers: int,
) -> dict[str, int]:
    _progress(options, "Rendering collection pages...")
    per_page = options.posts_per_page if options.posts_per_page is not None else config.posts_per_page
    paginated_types = (
        options.paginate_collections if options.paginate_collections is not None else config.paginate_collections
    )
    output_root = config.absolute_output_path

    jobs = []
    for collection in collections:
        _progress(options, "  Rendering collection: %s (%s)", collection.name, collection.type)
        jobs.extend(collection_jobs(collection, per_page, paginated_types))

    def build_one(job: tuple) -> tuple[str, bool]:
        collection, output_path, pagination = job
        html_doc = render_collection_page(collection, output_path, config, mappings, options, fs, pagination)
        return collection.type, _write(writer, output_root / output_path, html_doc)

    counts = {"tag_pages": 0, "category_pages": 0, "posts_pages": 0, "total": 0}
    for kind, written in _map(build_one, jobs, workers):
        if not written:
            continue
        counts["total"] += 1
        key = COUNTER_KEYS.get(kind)
        if key:
            counts[key] += 1
    return counts


def write_assets(
    assets: list[Asset],
    config: SiteConfig,
    options: BuildOptions,
    writer: Callable[[str, bytes], Any],
    workers: int,
) -> int:
    output_root = config.absolute_output_path

    def write_one(asset: Asset) -> bool:
        _progress(options, "  Writing asset: %s", asset.output_path)
        return _write(writer, output_root / asset.output_path, asset.content or b"")

    return sum(_map(write_one, assets, workers))


def build_site(site_path: str | Path, options: Optional[BuildOptions] = None) -> BuildSummary:
    """Build the site rooted at ``site_path``.

    Returns a :class:`BuildSummary`. Raises :class:`BuildError` when a fatal
    step fails (config, content, duplicate slugs, collections, assets, or
    rendering a page). Failed writes are only left out of the counts.
    """
    options = options or BuildOptions()
    fs = options.file_system or LocalFileSystem()
    site_path = str(site_path)

    cache: dict[str, str] = {}
    if options.incremental and not options.clean:
        _progress(options, "Loading build cache...")
        cache = load_cache(site_path)

    config = load_site_config(site_path, options)
    if options.clean:
        try:
            clean_output_dir(config.absolute_output_path, config.absolute_site_path, fs)
        except SitesmithError as exc:
            raise BuildError(f"Failed to clean output: {exc}") from exc
        remove_cache(site_path)

    workers = max(1, options.workers if options.workers is not None else config.workers)
    page_writer = options.file_writer or fs.write
    asset_writer = options.asset_writer or fs.write

    content = parse_site_content(config, options)
    validate_unique_slugs(content.pages)
    pages = filter_drafts(content.pages, options.draft)

    layout_files = list_layout_files(config, fs)
    incremental = options.incremental and bool(cache)
    if incremental:
        pages_to_build, pages_skipped = filter_changed_pages(pages, cache, layout_files, fs, options)
    else:
        pages_to_build, pages_skipped = list(pages), []

    collections = build_collections(pages, options)
    rss_written = write_rss_feed(pages, config, options, page_writer)
    assets = process_site_assets(config, options, fs)

    pages_written = render_and_write_pages(
        pages_to_build, config, collections, assets.mappings, options, page_writer, workers
    )
    collection_counts = render_and_write_collection_pages(
        collections, config, assets.mappings, options, fs, page_writer, workers
    )
    assets_written = write_assets(assets.assets, config, options, asset_writer, workers)

    if options.incremental:
        tracked = [page.file_path for page in content.pages if page.file_path]
        tracked.extend(list_layout_files(config, fs))
        save_cache(site_path, update_cache(cache, tracked))

    summary = BuildSummary(
        pages=len(pages),
        collections=len(collections),
        assets=len(assets.assets),
        files_written=pages_written + collection_counts["total"] + assets_written + rss_written,
        stats=BuildStats(
            total_pages=content.stats.get("total_files", len(content.pages)),
            drafts=content.stats.get("drafts", 0),
            rendered_pages=pages_written,
            tag_pages=collection_counts["tag_pages"],
            category_pages=collection_counts["category_pages"],
            posts_pages=collection_counts["posts_pages"],
            rss_feed=rss_written,
            incremental=incremental,
            changed=len(pages_to_build),
            skipped=len(pages_skipped),
        ),
    )
    rss_info = ", RSS feed" if rss_written else ""
    _progress(
        options,
        "Build complete: %d pages, %d collections, %d assets%s",
        summary.pages,
        summary.collections,
        summary.assets,
        rss_info,
    )
    return summary
