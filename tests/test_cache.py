import json
from pathlib import Path

from sitesmith.cache import (
    CACHE_FILE,
    file_changed,
    hash_bytes,
    hash_file,
    load_cache,
    remove_cache,
    save_cache,
    update_cache,
)

from conftest import write


def test_cache_round_trip(tmp_path: Path) -> None:
    save_cache(tmp_path, {"b.md": "2", "a.md": "1"})

    data = json.loads((tmp_path / CACHE_FILE).read_text(encoding="utf-8"))
    assert data == {"version": 1, "files": {"a.md": "1", "b.md": "2"}}
    assert load_cache(tmp_path) == {"a.md": "1", "b.md": "2"}


def test_missing_corrupt_or_foreign_cache_is_empty(tmp_path: Path) -> None:
    assert load_cache(tmp_path) == {}

    write(tmp_path / CACHE_FILE, "{not json")
    assert load_cache(tmp_path) == {}

    write(tmp_path / CACHE_FILE, json.dumps({"version": 99, "files": {"a.md": "1"}}))
    assert load_cache(tmp_path) == {}


def test_file_changed(tmp_path: Path) -> None:
    source = write(tmp_path / "a.md", "one")
    cache = {str(source): hash_bytes(b"one")}

    assert file_changed(source, cache) is False
    write(source, "two")
    assert file_changed(source, cache) is True
    assert file_changed(tmp_path / "new.md", cache) is True


def test_update_cache_keeps_only_given_paths(tmp_path: Path) -> None:
    kept = write(tmp_path / "a.md", "a")
    cache = {str(kept): "stale", str(tmp_path / "deleted.md"): "old"}

    updated = update_cache(cache, [kept])

    assert updated == {str(kept): hash_file(kept)}


def test_update_cache_keeps_previous_fingerprint_for_unreadable_file(tmp_path: Path) -> None:
    gone = str(tmp_path / "gone.md")

    assert update_cache({gone: "old"}, [gone]) == {gone: "old"}
    assert update_cache({}, [gone]) == {}


def test_remove_cache(tmp_path: Path) -> None:
    save_cache(tmp_path, {})
    remove_cache(tmp_path)
    remove_cache(tmp_path)

    assert not (tmp_path / CACHE_FILE).exists()
