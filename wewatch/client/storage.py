"""Durable key-value backends for the client-side caches.

Both backends behave like browser local storage: string keys, string
values, and a byte quota that rejects writes with
:class:`StorageQuotaExceeded` instead of evicting anything on their own.
"""

from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path
from typing import Protocol


class StorageQuotaExceeded(Exception):
    """The write would push the store past its byte quota."""


class DurableStore(Protocol):
    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...

    def remove(self, key: str) -> None: ...


def _size_of(data: dict[str, str]) -> int:
    return sum(len(k.encode("utf-8")) + len(v.encode("utf-8")) for k, v in data.items())


class MemoryStore:
    """Dict-backed store, mainly for tests and headless use."""

    def __init__(self, quota_bytes: int | None = None) -> None:
        self.quota_bytes = quota_bytes
        self._data: dict[str, str] = {}

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        candidate = {**self._data, key: value}
        if self.quota_bytes is not None and _size_of(candidate) > self.quota_bytes:
            raise StorageQuotaExceeded(f"{key!r} exceeds quota of {self.quota_bytes} bytes")
        self._data = candidate

    def remove(self, key: str) -> None:
        self._data.pop(key, None)


class JsonFileStore:
    """Key-value map persisted as one JSON object on disk.

    Writes go to a temp file in the same directory and are moved into place,
    so a crash never leaves a half-written file behind.
    """

    def __init__(self, path: str | Path, quota_bytes: int | None = None) -> None:
        self.path = Path(path)
        self.quota_bytes = quota_bytes

    def _read(self) -> dict[str, str]:
        try:
            raw = self.path.read_text(encoding="utf-8")
        except (FileNotFoundError, UnicodeDecodeError):
            # Missing or not text: start over with an empty map
            return {}
        try:
            data = json.loads(raw)
        except json.JSONDecodeError:
            return {}
        if not isinstance(data, dict):
            return {}
        return {str(k): v for k, v in data.items() if isinstance(v, str)}

    def _write(self, data: dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=self.path.parent, prefix=f".{self.path.name}.")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(data, fh)
            os.replace(tmp_path, self.path)
        except BaseException:
            Path(tmp_path).unlink(missing_ok=True)
            raise

    def get(self, key: str) -> str | None:
        return self._read().get(key)

    def set(self, key: str, value: str) -> None:
        data = self._read()
        data[key] = value
        if self.quota_bytes is not None and _size_of(data) > self.quota_bytes:
            raise StorageQuotaExceeded(f"{key!r} exceeds quota of {self.quota_bytes} bytes")
        self._write(data)

    def remove(self, key: str) -> None:
        data = self._read()
        if data.pop(key, None) is not None:
            self._write(data)
