from __future__ import annotations

import glob
import shutil
from pathlib import Path


class LocalFileSystem:
    def exists(self, path: str | Path) -> bool:
        return Path(path).exists()

    def is_dir(self, path: str | Path) -> bool:
        return Path(path).is_dir()

    def is_file(self, path: str | Path) -> bool:
        return Path(path).is_file()

    def mkdir_all(self, path: str | Path) -> None:
        Path(path).mkdir(parents=True, exist_ok=True)

    def wildcard(self, pattern: str | Path) -> list[str]:
        return sorted(glob.glob(str(pattern), recursive=True))

    def list_dir(self, path: str | Path) -> list[str]:
        return sorted(str(item) for item in Path(path).iterdir())

    def read_bytes(self, path: str | Path) -> bytes:
        return Path(path).read_bytes()

    def read_text(self, path: str | Path) -> str:
        return Path(path).read_text(encoding="utf-8")

    def write(self, path: str | Path, data: str | bytes) -> None:
        path = Path(path)
        self.mkdir_all(path.parent)
        if isinstance(data, bytes):
            path.write_bytes(data)
        else:
            path.write_text(data, encoding="utf-8")

    def remove_all(self, path: str | Path) -> None:
        path = Path(path)
        if path.is_dir():
            shutil.rmtree(path)
        elif path.exists():
            path.unlink()


def list_files(fs: LocalFileSystem, root: str | Path, patterns: tuple[str, ...] = ("*",)) -> list[str]:
    if not fs.is_dir(root):
        return []
    found: set[str] = set()
    for pattern in patterns:
        for item in fs.wildcard(Path(root) / "**" / pattern):
            if fs.is_file(item):
                found.add(item)
    return sorted(found)
