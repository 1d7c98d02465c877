from __future__ import annotations

import hashlib
import json
import logging
from pathlib import Path
from typing import Iterable

logger = logging.getLogger(__name__)

CACHE_FILE = ".sitesmith-cache.json"
CACHE_VERSION = 1


def hash_bytes(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


def hash_file(path: str | Path) -> str:
    return hash_bytes(Path(path).read_bytes())


def cache_path(site_path: str | Path) -> Path:
    return Path(site_path) / CACHE_FILE


def load_cache(site_path: str | Path) -> dict[str, str]:
    path = cache_path(site_path)
    if not path.exists():
        return {}
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        logger.warning("Ignoring unreadable build cache %s: %s", path, exc)
        return {}
    if not isinstance(data, dict) or data.get("version") != CACHE_VERSION:
        return {}
    files = data.get("files")
    if not isinstance(files, dict):
        return {}
    return {str(key): str(value) for key, value in files.items()}


def save_cache(site_path: str | Path, cache: dict[str, str]) -> None:
    path = cache_path(site_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    data = {"version": CACHE_VERSION, "files": dict(sorted(cache.items()))}
    path.write_text(json.dumps(data, indent=2, ensure_ascii=True), encoding="utf-8")


def file_changed(path: str | Path, cache: dict[str, str]) -> bool:
    key = str(path)
    previous = cache.get(key)
    if previous is None:
        return True
    try:
        return hash_file(key) != previous
    except OSError:
        return True


def update_cache(cache: dict[str, str], paths: Iterable[str | Path]) -> dict[str, str]:
    # Only the paths seen by this build survive; deleted sources drop out.
    updated: dict[str, str] = {}
    for path in paths:
        key = str(path)
        try:
            updated[key] = hash_file(key)
        except OSError as exc:
            logger.warning("Could not fingerprint %s: %s", key, exc)
            if key in cache:
                updated[key] = cache[key]
    return updated


def remove_cache(site_path: str | Path) -> None:
    path = cache_path(site_path)
    if path.exists():
        path.unlink()
