from __future__ import annotations

import argparse
import logging
import sys
import time
from pathlib import Path
from typing import Optional, Sequence

from .builder import BuildOptions, build_site
from .config import find_config_file, read_config_file
from .errors import SitesmithError
from .models import BuildSummary
from .utils import parse_bool, parse_int


def configure_logging(verbose: bool) -> None:
    level = logging.INFO if verbose else logging.WARNING
    logging.basicConfig(level=level, format="%(message)s")


def print_summary(summary: BuildSummary, elapsed: float) -> None:
    stats = summary.stats
    print(
        f"Built {summary.pages} pages, {summary.collections} collections, "
        f"{summary.assets} assets ({summary.files_written} files written) in {elapsed:.2f}s."
    )
    if stats.incremental:
        print(f"Incremental: {stats.changed} changed, {stats.skipped} skipped.")


def build_parser(site_default: str, config: dict) -> argparse.ArgumentParser:
    def cfg_bool(key: str, default: bool) -> bool:
        value = config.get(key)
        return default if value is None else parse_bool(value)

    def cfg_int(key: str, default: Optional[int]) -> Optional[int]:
        return parse_int(config.get(key), default)

    parser = argparse.ArgumentParser(description="Incremental static site builder.")
    parser.add_argument("--site", default=site_default, help="Site directory (default: current directory).")
    parser.add_argument(
        "--drafts",
        action=argparse.BooleanOptionalAction,
        default=cfg_bool("drafts", False),
        help="Include draft pages.",
    )
    parser.add_argument(
        "--incremental",
        action=argparse.BooleanOptionalAction,
        default=cfg_bool("incremental", True),
        help="Only re-render pages whose sources changed since the last build.",
    )
    parser.add_argument(
        "--clean",
        action=argparse.BooleanOptionalAction,
        default=False,
        help="Remove the output directory and build cache first.",
    )
    parser.add_argument(
        "--posts-per-page",
        default=cfg_int("posts_per_page", None),
        type=int,
        help="Paginate collections longer than this many pages.",
    )
    parser.add_argument(
        "--paginate",
        action="append",
        dest="paginate_collections",
        default=None,
        help="Collection type to paginate (repeatable, default: posts).",
    )
    parser.add_argument(
        "--rss",
        action=argparse.BooleanOptionalAction,
        default=cfg_bool("generate_rss", True),
        help="Write feed.xml (needs site_url).",
    )
    parser.add_argument(
        "--rss-max-items",
        default=cfg_int("rss_max_items", 20),
        type=int,
        help="Maximum number of items in feed.xml.",
    )
    parser.add_argument(
        "--workers",
        default=cfg_int("workers", 1),
        type=int,
        help="Worker threads for rendering and writing.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log build progress.")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    pre_parser = argparse.ArgumentParser(add_help=False)
    pre_parser.add_argument("--site", default=".")
    pre_args, _ = pre_parser.parse_known_args(argv)

    config: dict = {}
    config_path = find_config_file(Path(pre_args.site))
    if config_path is not None:
        try:
            config = read_config_file(config_path)
        except SitesmithError as exc:
            print(str(exc), file=sys.stderr)
            return 1

    args = build_parser(pre_args.site, config).parse_args(argv)
    configure_logging(args.verbose)

    if args.posts_per_page is not None and args.posts_per_page <= 0:
        print("--posts-per-page must be positive.", file=sys.stderr)
        return 1

    options = BuildOptions(
        draft=args.drafts,
        verbose=args.verbose,
        incremental=args.incremental,
        clean=args.clean,
        posts_per_page=args.posts_per_page,
        paginate_collections=args.paginate_collections,
        generate_rss=args.rss,
        rss_max_items=args.rss_max_items,
        workers=max(1, args.workers),
    )

    start = time.perf_counter()
    try:
        summary = build_site(args.site, options)
    except SitesmithError as exc:
        print(f"Build failed: {exc}", file=sys.stderr)
        return 1
    print_summary(summary, time.perf_counter() - start)
    return 0


if __name__ == "__main__":
    sys.exit(main())
