from __future__ import annotations

import os
from pathlib import Path
import re
import tempfile
from typing import Protocol


class StoreUnavailable(RuntimeError):
    """The shared store could not be read or written."""


class KeyValueStore(Protocol):
    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...

    def delete(self, key: str) -> None: ...


class MemoryStore:
    """Dict-backed store; several clients in one process can share it."""

    def __init__(self) -> None:
        self._data: dict[str, str] = {}

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[str(key)] = str(value)

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self) -> list[str]:
        return sorted(self._data)


_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9_.-]+")


class FileStore:
    """
    One file per key under ``root``. Two processes on one machine pointing
    at the same directory share rooms. Writes go through a temp file and
    ``os.replace`` so readers never see half a record.
    """

    def __init__(self, root: str | Path) -> None:
        self.root = Path(root)

    def _path_for(self, key: str) -> Path:
        slug = _UNSAFE_CHARS.sub("_", str(key)).strip("_")
        if not slug:
            raise ValueError(f"invalid store key {key!r}")
        return self.root / f"{slug}.json"

    def get(self, key: str) -> str | None:
        path = self._path_for(key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as exc:
            raise StoreUnavailable(f"read failed for {key!r}: {exc}") from exc

    def set(self, key: str, value: str) -> None:
        path = self._path_for(key)
        try:
            self.root.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self.root, prefix=".tmp-", suffix=".json")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    f.write(value)
                os.replace(tmp_name, path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as exc:
            raise StoreUnavailable(f"write failed for {key!r}: {exc}") from exc

    def delete(self, key: str) -> None:
        path = self._path_for(key)
        try:
            path.unlink(missing_ok=True)
        except OSError as exc:
            raise StoreUnavailable(f"delete failed for {key!r}: {exc}") from exc
