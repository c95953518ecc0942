"""
Durable persistence of the access configuration.

The whole ``AccessConfig`` is stored as one JSON document under a fixed
namespace key. Reads fail soft: a missing, unreadable or corrupt document
yields the built-in defaults and a logged warning, never an exception.
Merging partial updates is the controller's job; this layer always writes
the full record.
"""

from __future__ import annotations

import logging

from ..exceptions import StorageCorruptError, StorageUnavailableError
from ..access.types import AccessConfig
from .backends import KeyValueStorage

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_NAMESPACE = "clinic_access_config_v4"


class ConfigStore:
    """
    Loads, saves and resets the persisted ``AccessConfig``.

    Contract:
    - Inputs: AccessConfig instances
    - Outputs: AccessConfig merged over defaults
    - Side Effects: writes to ``storage`` under ``namespace``
    """

    def __init__(self, storage: KeyValueStorage, namespace: str = DEFAULT_CONFIG_NAMESPACE):
        self.storage = storage
        self.namespace = namespace

    def exists(self) -> bool:
        """True if a readable config record is stored."""
        try:
            return self.storage.get(self.namespace) is not None
        except (StorageCorruptError, StorageUnavailableError):
            return False

    def load(self) -> AccessConfig:
        """Return the persisted config merged over defaults.

        Never raises; falls back to defaults on any storage problem.
        """
        try:
            data = self.storage.get(self.namespace)
        except StorageCorruptError as e:
            logger.warning("Access config is corrupt, using defaults: %s", e.message)
            return AccessConfig()
        except StorageUnavailableError as e:
            logger.warning("Access config unavailable, using defaults: %s", e.message)
            return AccessConfig()

        if data is None:
            return AccessConfig()
        return AccessConfig.from_dict(data)

    def save(self, config: AccessConfig) -> None:
        """Persist the full config, replacing the previous record.

        Raises:
            StorageUnavailableError: If the record cannot be written
        """
        self.storage.set(self.namespace, config.to_dict())
        logger.debug("Saved access config to %s", self.namespace)

    def reset(self) -> AccessConfig:
        """Discard the stored config and persist fresh defaults.

        Returns the defaults even if they could not be written.
        """
        config = AccessConfig()
        try:
            self.storage.remove(self.namespace)
            self.storage.set(self.namespace, config.to_dict())
        except StorageUnavailableError as e:
            logger.warning("Could not persist default access config: %s", e.message)
        logger.info("Access config reset to defaults")
        return config
