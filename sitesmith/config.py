from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import yaml

try:
    import tomllib as toml
except ImportError:  # Python < 3.11
    import tomli as toml

from .errors import ConfigError
from .utils import parse_bool, parse_int, resolve_path

CONFIG_FILES = ("site.toml", "site.yaml", "site.yml", "site.json")


@dataclass
class SiteConfig:
    site_path: str = ""
    content_path: str = "content"
    layouts_path: str = "layouts"
    output_path: str = "_site"
    site_url: str = ""
    site_name: str = "Blog"
    description: str = "Latest posts"
    posts_per_page: Optional[int] = None
    paginate_collections: list[str] = field(default_factory=lambda: ["posts"])
    rss_max_items: int = 20
    generate_rss: bool = True
    workers: int = 1
    extra: dict[str, Any] = field(default_factory=dict)

    @property
    def absolute_site_path(self) -> Path:
        return Path(self.site_path or ".").expanduser().resolve()

    @property
    def absolute_content_path(self) -> Path:
        return resolve_path(self.absolute_site_path, self.content_path)

    @property
    def absolute_layouts_path(self) -> Path:
        return resolve_path(self.absolute_site_path, self.layouts_path)

    @property
    def absolute_output_path(self) -> Path:
        return resolve_path(self.absolute_site_path, self.output_path)


def find_config_file(site_path: str | Path) -> Optional[Path]:
    for name in CONFIG_FILES:
        candidate = Path(site_path) / name
        if candidate.is_file():
            return candidate
    return None


def read_config_file(path: Path) -> dict:
    if not path.exists():
        return {}
    suffix = path.suffix.lower()
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Cannot read config file {path}: {exc}") from exc
    if suffix == ".toml":
        try:
            data = toml.loads(text)
        except toml.TOMLDecodeError as exc:
            raise ConfigError(f"Invalid TOML in config file {path}: {exc}") from exc
    elif suffix in {".yml", ".yaml"}:
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as exc:
            raise ConfigError(f"Invalid YAML in config file {path}: {exc}") from exc
        if data is None:
            return {}
    else:
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            raise ConfigError(f"Invalid JSON in config file {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Config file must contain a mapping: {path}")
    return data


def config_from_mapping(site_path: str | Path, data: dict) -> SiteConfig:
    known = {
        "site_path",
        "content_path",
        "layouts_path",
        "output_path",
        "site_url",
        "site_name",
        "description",
        "posts_per_page",
        "paginate_collections",
        "rss_max_items",
        "generate_rss",
        "workers",
    }

    def text(key: str, default: str) -> str:
        value = data.get(key)
        return default if value is None else str(value)

    paginate_collections = data.get("paginate_collections", ["posts"])
    if isinstance(paginate_collections, str):
        paginate_collections = [item.strip() for item in paginate_collections.split(",") if item.strip()]

    posts_per_page = parse_int(data.get("posts_per_page"), None)
    if posts_per_page is not None and posts_per_page <= 0:
        raise ConfigError(f"posts_per_page must be positive, got {posts_per_page}")

    return SiteConfig(
        site_path=text("site_path", str(site_path)),
        content_path=text("content_path", "content"),
        layouts_path=text("layouts_path", "layouts"),
        output_path=text("output_path", "_site"),
        site_url=text("site_url", "").strip(),
        site_name=text("site_name", "Blog"),
        description=text("description", "Latest posts"),
        posts_per_page=posts_per_page,
        paginate_collections=[str(item) for item in paginate_collections],
        rss_max_items=parse_int(data.get("rss_max_items"), 20),
        generate_rss=parse_bool(data.get("generate_rss", True)),
        workers=max(1, parse_int(data.get("workers"), 1)),
        extra={key: value for key, value in data.items() if key not in known},
    )


def load_config(site_path: str | Path) -> SiteConfig:
    site_dir = Path(site_path)
    if not site_dir.is_dir():
        raise ConfigError(f"Site directory not found: {site_dir}")
    path = find_config_file(site_dir)
    data = read_config_file(path) if path is not None else {}
    return config_from_mapping(site_dir, data)
