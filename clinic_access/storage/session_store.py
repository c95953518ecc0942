"""
Volatile persistence of elevated sessions.

One ``SessionRecord`` per user key, stored under ``{prefix}{user_key}`` in
storage that does not outlive the process. BASE is implicit and never
written.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import UTC, datetime, timedelta

from ..exceptions import StorageCorruptError, StorageUnavailableError
from ..access.types import AccessTier, SessionPolicy, SessionRecord
from .backends import KeyValueStorage

logger = logging.getLogger(__name__)

DEFAULT_SESSION_PREFIX = "clinic_access_session_"
DEFAULT_USER_KEY = "default"


def _utcnow() -> datetime:
    return datetime.now(UTC)


class SessionStore:
    """
    Manages per-identity elevated session records.

    Contract:
    - Inputs: user_key (str | None), tier, SessionPolicy
    - Outputs: SessionRecord or None
    - Side Effects: writes/removes ``{prefix}{user_key}`` in ``storage``
    """

    def __init__(
        self,
        storage: KeyValueStorage,
        prefix: str = DEFAULT_SESSION_PREFIX,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.storage = storage
        self.prefix = prefix
        self._clock = clock

    def key_for(self, user_key: str | None) -> str:
        return f"{self.prefix}{user_key or DEFAULT_USER_KEY}"

    def save(self, user_key: str | None, tier: AccessTier, policy: SessionPolicy) -> SessionRecord | None:
        """Record an elevated session.

        No-op when ``tier`` is BASE or the policy does not require a
        credential per session.

        Returns:
            The written record, or None when nothing was written

        Raises:
            StorageUnavailableError: If the record cannot be written
        """
        if tier == AccessTier.BASE or not policy.require_credential_per_session:
            return None

        now = self._clock()
        record = SessionRecord(
            tier=tier,
            expires_at=now + timedelta(minutes=policy.expiry_minutes),
            issued_at=now,
        )
        self.storage.set(self.key_for(user_key), record.to_dict())
        return record

    def load(self, user_key: str | None, now: datetime | None = None) -> SessionRecord | None:
        """Return the live session record for ``user_key``.

        Expired and unreadable records are removed and reported as absent.
        """
        key = self.key_for(user_key)
        try:
            data = self.storage.get(key)
            if data is None:
                return None
            record = SessionRecord.from_dict(data)
        except (StorageCorruptError, KeyError, ValueError, TypeError) as e:
            logger.warning("Discarding unreadable session record %s: %s", key, e)
            self._discard(key)
            return None
        except StorageUnavailableError as e:
            logger.warning("Session storage unavailable: %s", e.message)
            return None

        if record.is_expired(now or self._clock()):
            logger.info("Session record %s expired at %s", key, record.expires_at.isoformat())
            self._discard(key)
            return None
        return record

    def clear(self, user_key: str | None) -> None:
        """Remove the record for ``user_key`` if any."""
        self._discard(self.key_for(user_key))

    def clear_all(self) -> int:
        """Remove every record under this store's prefix.

        Unrelated keys in the same storage are left alone.

        Returns:
            Number of records removed
        """
        removed = 0
        try:
            keys = self.storage.keys_with_prefix(self.prefix)
        except StorageUnavailableError as e:
            logger.warning("Cannot enumerate session records: %s", e.message)
            return 0
        for key in keys:
            if self._discard(key):
                removed += 1
        if removed:
            logger.debug("Cleared %d session records", removed)
        return removed

    def _discard(self, key: str) -> bool:
        try:
            return self.storage.remove(key)
        except StorageUnavailableError as e:
            logger.warning("Could not remove session record %s: %s", key, e.message)
            return False
