"""
Application settings for access control.

Read from ``~/.clinic_access/settings.yaml``:

```yaml
access_control:
  data_dir: "~/.clinic_access/data"
  config_namespace: "clinic_access_config_v4"
  session_prefix: "clinic_access_session_"
  max_attempts: 3
  lockout_seconds: 30
  verification_delay_seconds: 0.5
  log_level: "INFO"
```

Environment variables override the file:

    CLINIC_ACCESS_DATA_DIR: Directory for the durable config record
    CLINIC_ACCESS_NAMESPACE: Key of the config record
    CLINIC_ACCESS_LOG_LEVEL: Logging level name

A missing or unreadable file gives the defaults.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any

import yaml

from .access.guard import DEFAULT_LOCKOUT_SECONDS, DEFAULT_MAX_ATTEMPTS, DEFAULT_VERIFICATION_DELAY
from .storage.config_store import DEFAULT_CONFIG_NAMESPACE
from .storage.session_store import DEFAULT_SESSION_PREFIX

logger = logging.getLogger(__name__)

DEFAULT_SETTINGS_PATH = Path.home() / ".clinic_access" / "settings.yaml"
SETTINGS_SECTION = "access_control"


@dataclass(frozen=True)
class Settings:
    """Runtime settings for the access control subsystem."""

    data_dir: Path = field(default_factory=lambda: Path.home() / ".clinic_access" / "data")
    config_namespace: str = DEFAULT_CONFIG_NAMESPACE
    session_prefix: str = DEFAULT_SESSION_PREFIX
    max_attempts: int = DEFAULT_MAX_ATTEMPTS
    lockout_seconds: float = DEFAULT_LOCKOUT_SECONDS
    verification_delay_seconds: float = DEFAULT_VERIFICATION_DELAY
    log_level: str = "INFO"

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> Settings:
        """Build settings from a mapping, ignoring unknown or mistyped keys."""
        default = cls()
        values: dict[str, Any] = {}
        for f in fields(cls):
            if f.name not in data or data[f.name] is None:
                continue
            raw = data[f.name]
            current = getattr(default, f.name)
            try:
                if isinstance(current, Path):
                    values[f.name] = Path(str(raw)).expanduser()
                elif isinstance(current, bool) or isinstance(raw, bool):
                    raise TypeError("booleans are not accepted here")
                elif isinstance(current, int):
                    values[f.name] = int(raw)
                elif isinstance(current, float):
                    values[f.name] = float(raw)
                else:
                    values[f.name] = str(raw)
            except (TypeError, ValueError):
                logger.warning("Ignoring invalid setting %s=%r", f.name, raw)
        return cls(**values)


def _load_yaml(path: Path) -> dict[str, Any]:
    """Load configuration from YAML file."""
    if not path.exists():
        return {}

    try:
        content = path.read_text()
        data = yaml.safe_load(content) or {}
    except (OSError, yaml.YAMLError) as e:
        logger.warning("Could not read settings file %s: %s", path, e)
        return {}
    return data if isinstance(data, dict) else {}


def load_settings(path: Path | None = None, environ: Mapping[str, str] | None = None) -> Settings:
    """Load settings from YAML, then apply environment overrides.

    Args:
        path: Settings file. Defaults to ~/.clinic_access/settings.yaml
        environ: Environment mapping (defaults to os.environ)
    """
    environ = os.environ if environ is None else environ
    data = _load_yaml(path or DEFAULT_SETTINGS_PATH)
    section = data.get(SETTINGS_SECTION, {})
    settings = Settings.from_mapping(section if isinstance(section, dict) else {})

    overrides: dict[str, Any] = {}
    if environ.get("CLINIC_ACCESS_DATA_DIR"):
        overrides["data_dir"] = Path(environ["CLINIC_ACCESS_DATA_DIR"]).expanduser()
    if environ.get("CLINIC_ACCESS_NAMESPACE"):
        overrides["config_namespace"] = environ["CLINIC_ACCESS_NAMESPACE"]
    if environ.get("CLINIC_ACCESS_LOG_LEVEL"):
        overrides["log_level"] = environ["CLINIC_ACCESS_LOG_LEVEL"]
    return replace(settings, **overrides) if overrides else settings
