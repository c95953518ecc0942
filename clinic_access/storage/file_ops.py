"""
JSON file operations for durable storage.

Provides read/write helpers for single JSON documents with:
- Atomic writes using temp file + rename
- Distinct errors for unreadable versus unparseable files
"""

import json
import os
import tempfile
from datetime import datetime
from pathlib import Path
from typing import Any

from ..exceptions import StorageCorruptError, StorageUnavailableError


def ensure_directory(path: Path) -> None:
    """Ensure directory exists, creating if necessary.

    Args:
        path: Directory path to ensure exists
    """
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise StorageUnavailableError("create_directory", str(path), e) from e


def read_json(path: Path) -> dict[str, Any] | None:
    """Read a JSON document.

    Args:
        path: Path to JSON file

    Returns:
        Parsed JSON object or None if the file doesn't exist or is empty

    Raises:
        StorageCorruptError: If the content is not a JSON object
        StorageUnavailableError: If the file cannot be read
    """
    try:
        if not path.exists():
            return None
        content = path.read_text(encoding="utf-8")
    except OSError as e:
        raise StorageUnavailableError("read_json", str(path), e) from e

    if not content.strip():
        return None
    try:
        data = json.loads(content)
    except json.JSONDecodeError as e:
        raise StorageCorruptError(str(path), e) from e
    if not isinstance(data, dict):
        raise StorageCorruptError(str(path), TypeError(f"expected object, got {type(data).__name__}"))
    return data


def write_json_atomic(path: Path, data: dict[str, Any]) -> None:
    """Write JSON file atomically using temp file + rename.

    Args:
        path: Target path for JSON file
        data: Data to serialize as JSON
    """
    ensure_directory(path.parent)

    fd, temp_path = tempfile.mkstemp(
        dir=path.parent,
        prefix=".tmp_",
        suffix=".json",
    )
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(json.dumps(data, indent=2, default=_json_serializer))
            f.flush()
            os.fsync(f.fileno())

        # Atomic rename
        os.replace(temp_path, path)
    except Exception as e:
        # Clean up temp file on error
        try:
            os.remove(temp_path)
        except OSError:
            pass
        raise StorageUnavailableError("write_json", str(path), e) from e


def remove_file(path: Path) -> bool:
    """Remove a file if it exists.

    Args:
        path: Path to remove

    Returns:
        True if file was removed, False if it didn't exist
    """
    try:
        path.unlink()
        return True
    except FileNotFoundError:
        return False
    except OSError as e:
        raise StorageUnavailableError("remove", str(path), e) from e


def list_json_stems(path: Path) -> list[str]:
    """List the stems of ``*.json`` files directly inside ``path``.

    Args:
        path: Directory to list

    Returns:
        Sorted file stems, empty if the directory doesn't exist
    """
    try:
        if not path.is_dir():
            return []
        return sorted(p.stem for p in path.iterdir() if p.suffix == ".json" and p.is_file())
    except OSError as e:
        raise StorageUnavailableError("list", str(path), e) from e


def _json_serializer(obj: Any) -> Any:
    """Custom JSON serializer for types not handled by default.

    Args:
        obj: Object to serialize

    Returns:
        JSON-serializable representation
    """
    if isinstance(obj, datetime):
        return obj.isoformat()
    if hasattr(obj, "to_dict"):
        return obj.to_dict()
    raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")
