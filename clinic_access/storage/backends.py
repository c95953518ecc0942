"""
Key/value storage backends.

Two flavours back the access-control stores:

- ``FileStorage``: durable, one JSON file per key under a directory.
  Survives restarts; holds the access configuration.
- ``MemoryStorage``: volatile, lives exactly as long as the process.
  Holds elevated session records so a forgotten elevation dies with the app.
"""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

from ..exceptions import StorageCorruptError, StorageUnavailableError
from .file_ops import list_json_stems, read_json, remove_file, write_json_atomic


def validate_key(key: str) -> None:
    """Validate a storage key to prevent path traversal.

    Raises:
        StorageUnavailableError: If the key is empty or contains separators
    """
    if not key or not key.strip():
        raise StorageUnavailableError("validate_key", key, ValueError("key cannot be empty"))
    if "/" in key or "\\" in key or key in (".", "..") or key.startswith("."):
        raise StorageUnavailableError("validate_key", key, ValueError("invalid key"))


class KeyValueStorage(ABC):
    """Abstract storage of JSON documents by string key."""

    @abstractmethod
    def get(self, key: str) -> dict[str, Any] | None:
        """Return the document stored under ``key``, or None.

        Raises:
            StorageCorruptError: If the stored value cannot be parsed
            StorageUnavailableError: If the storage cannot be read
        """
        ...

    @abstractmethod
    def set(self, key: str, value: dict[str, Any]) -> None:
        """Store ``value`` under ``key``, replacing any previous value."""
        ...

    @abstractmethod
    def remove(self, key: str) -> bool:
        """Remove ``key``. Returns True if something was removed."""
        ...

    @abstractmethod
    def keys(self) -> list[str]:
        """List every stored key."""
        ...

    def keys_with_prefix(self, prefix: str) -> list[str]:
        return [key for key in self.keys() if key.startswith(prefix)]


class FileStorage(KeyValueStorage):
    """Durable storage: ``{base_dir}/{key}.json``."""

    def __init__(self, base_dir: Path):
        self.base_dir = Path(base_dir).expanduser()

    def _path(self, key: str) -> Path:
        validate_key(key)
        return self.base_dir / f"{key}.json"

    def get(self, key: str) -> dict[str, Any] | None:
        return read_json(self._path(key))

    def set(self, key: str, value: dict[str, Any]) -> None:
        write_json_atomic(self._path(key), value)

    def remove(self, key: str) -> bool:
        return remove_file(self._path(key))

    def keys(self) -> list[str]:
        return list_json_stems(self.base_dir)


class MemoryStorage(KeyValueStorage):
    """Volatile storage kept in process memory.

    Values are held as serialized JSON text so that what comes back is a
    fresh copy, never an alias of what was stored.
    """

    def __init__(self) -> None:
        self._items: dict[str, str] = {}

    def get(self, key: str) -> dict[str, Any] | None:
        raw = self._items.get(key)
        if raw is None:
            return None
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            raise StorageCorruptError(key, e) from e
        if not isinstance(data, dict):
            raise StorageCorruptError(key, TypeError(f"expected object, got {type(data).__name__}"))
        return data

    def set(self, key: str, value: dict[str, Any]) -> None:
        try:
            self._items[key] = json.dumps(value)
        except (TypeError, ValueError) as e:
            raise StorageUnavailableError("set", key, e) from e

    def remove(self, key: str) -> bool:
        return self._items.pop(key, None) is not None

    def keys(self) -> list[str]:
        return list(self._items)

    def __len__(self) -> int:
        return len(self._items)
