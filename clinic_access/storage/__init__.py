"""
Storage for access control state.

Key classes:
- ConfigStore: durable access configuration
- SessionStore: volatile per-identity elevated sessions
- FileStorage / MemoryStorage: the key/value backends behind them
"""

from .backends import FileStorage, KeyValueStorage, MemoryStorage
from .config_store import DEFAULT_CONFIG_NAMESPACE, ConfigStore
from .file_ops import read_json, remove_file, write_json_atomic
from .session_store import DEFAULT_SESSION_PREFIX, DEFAULT_USER_KEY, SessionStore

__all__ = [
    "ConfigStore",
    "SessionStore",
    "DEFAULT_CONFIG_NAMESPACE",
    "DEFAULT_SESSION_PREFIX",
    "DEFAULT_USER_KEY",
    # Backends
    "KeyValueStorage",
    "FileStorage",
    "MemoryStorage",
    # Low-level file operations
    "read_json",
    "write_json_atomic",
    "remove_file",
]
