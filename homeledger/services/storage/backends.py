"""
Key-Value Backends

FileKeyValueBackend keeps one `<key>.json` file per key in a data
directory. Writes go to a temporary file first and are moved into place
with Path.replace, so a crash mid-write leaves the previous value intact.

InMemoryKeyValueBackend keeps values in a dict. Tests can make chosen
keys fail to exercise the fail-soft paths above it.
"""

import asyncio
import re
from pathlib import Path
from typing import Iterable, Optional

from homeledger.services.storage.interface import (
    InvalidKeyError,
    KeyValueBackend,
    StorageError,
)


KEY_PATTERN = re.compile(r"^[A-Za-z0-9_.-]{1,100}$")


class FileKeyValueBackend(KeyValueBackend):
    """Crash-safe file-per-key storage."""

    def __init__(self, base_path: Path):
        self._base_path = Path(base_path)

    @property
    def base_path(self) -> Path:
        return self._base_path

    def _path_for(self, key: str) -> Path:
        if not KEY_PATTERN.fullmatch(key) or key.startswith("."):
            raise InvalidKeyError(f"Invalid storage key: {key!r}")
        return self._base_path / f"{key}.json"

    async def get(self, key: str) -> Optional[str]:
        path = self._path_for(key)
        return await asyncio.to_thread(self._read, path)

    async def set(self, key: str, value: str) -> None:
        path = self._path_for(key)
        await asyncio.to_thread(self._write, path, value)

    async def remove(self, key: str) -> None:
        path = self._path_for(key)
        await asyncio.to_thread(self._unlink, path)

    def _read(self, path: Path) -> Optional[str]:
        if not path.exists():
            return None
        try:
            return path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise StorageError(f"Unable to read from {path}: {e}") from e

    def _write(self, path: Path, value: str) -> None:
        temp_path = path.with_suffix(path.suffix + ".tmp")
        try:
            self._base_path.mkdir(parents=True, exist_ok=True)
            with temp_path.open("w", encoding="utf-8") as handle:
                handle.write(value)
                handle.flush()
            temp_path.replace(path)
        except OSError as e:
            raise StorageError(f"Unable to write to {path}: {e}") from e

    def _unlink(self, path: Path) -> None:
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            raise StorageError(f"Unable to remove {path}: {e}") from e


class InMemoryKeyValueBackend(KeyValueBackend):
    """Dict-backed storage for tests and throwaway sessions."""

    def __init__(
        self,
        initial: Optional[dict[str, str]] = None,
        fail_on: Optional[Iterable[str]] = None,
    ):
        self._data: dict[str, str] = dict(initial or {})
        self.fail_on: set[str] = set(fail_on or ())

    def _check(self, key: str) -> None:
        if key in self.fail_on:
            raise StorageError(f"Simulated failure for key: {key}")

    async def get(self, key: str) -> Optional[str]:
        self._check(key)
        return self._data.get(key)

    async def set(self, key: str, value: str) -> None:
        self._check(key)
        self._data[key] = value

    async def remove(self, key: str) -> None:
        self._check(key)
        self._data.pop(key, None)

    def snapshot(self) -> dict[str, str]:
        """Raw stored strings, for assertions."""
        return dict(self._data)
