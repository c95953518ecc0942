"""Hierarchical access control for the clinic back office."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Mapping
from datetime import datetime
from typing import Any

from ..exceptions import ConfigValidationError, StorageUnavailableError
from ..logging_utils import AccessLoggerAdapter
from ..notifications import (
    LoggingNotifier,
    Notification,
    NotificationLevel,
    Notifier,
    describe_config_update,
    describe_credentials_reset,
    describe_force_reset,
    describe_logout,
    describe_sessions_cleared,
    describe_switch,
)
from ..storage.config_store import ConfigStore
from ..storage.session_store import DEFAULT_USER_KEY, SessionStore
from .permissions import (
    AccessDecision,
    AccessError,
    ConfigUpdateResult,
    SwitchResult,
    decide_switch,
    is_credential_free,
)
from .types import DEFAULT_REPORT_TIER, AccessConfig, AccessTier, TierCredentials

logger = logging.getLogger(__name__)

StateListener = Callable[[AccessTier], None]


class AccessController:
    """Single source of truth for the current access tier.

    Loads the configuration once, starts every process at BASE, and routes
    all tier changes and configuration updates back through the stores.
    Construct one per application and hand it to every consumer.

    Failures never raise out of ``switch_tier``, ``update_config`` or
    ``logout``; they come back as result objects and a notification.
    """

    def __init__(
        self,
        config_store: ConfigStore,
        session_store: SessionStore,
        notifier: Notifier | None = None,
        user_key: str | None = None,
        verification_delay: float = 0.0,
    ):
        """
        Args:
            config_store: Durable store for the access configuration
            session_store: Volatile store for elevated sessions
            notifier: Receives user-facing messages (logs them if omitted)
            user_key: Opaque key of the authenticated user, if known
            verification_delay: Seconds to wait before checking a credential
        """
        self.config_store = config_store
        self.session_store = session_store
        self.notifier = notifier or LoggingNotifier()
        self.verification_delay = verification_delay

        self._user_key = user_key
        self._config = AccessConfig()
        self._current_tier = AccessTier.BASE
        self._listeners: list[StateListener] = []
        self._initialized = False

    # -- state -------------------------------------------------------------

    @property
    def current_tier(self) -> AccessTier:
        return self._current_tier

    @property
    def config(self) -> AccessConfig:
        return self._config

    @property
    def user_key(self) -> str | None:
        return self._user_key

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    @property
    def log(self) -> AccessLoggerAdapter:
        return AccessLoggerAdapter(logger, {"user_key": self._user_key or DEFAULT_USER_KEY})

    def initialize(self) -> None:
        """Load configuration and start fresh at BASE.

        Every elevated session this subsystem owns is wiped; a previous
        elevation is never resumed.
        """
        if self.config_store.exists():
            self._config = self.config_store.load()
        else:
            self._config = AccessConfig()
            try:
                self.config_store.save(self._config)
            except StorageUnavailableError as e:
                self.log.warning("Could not persist default access config: %s", e.message)

        cleared = self.session_store.clear_all()
        self._initialized = True
        self.log.info("Access control initialized at BASE", extra={"sessions_cleared": cleared})
        self._transition(AccessTier.BASE, force_notify=True)

    def change_identity(self, user_key: str | None) -> None:
        """Switch to another authenticated user and re-initialize."""
        self._user_key = user_key
        self.initialize()

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """Call ``listener`` with the current tier after every tier or config change.

        Returns:
            A function that removes the listener
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # -- queries -----------------------------------------------------------

    def has_access(self, required: AccessTier) -> bool:
        return self._current_tier >= required

    def resource_tier(self, resource_id: str) -> AccessTier:
        """Minimum tier for a page or feature; unknown resources are BASE."""
        return self._config.resource_access.get(resource_id, AccessTier.BASE)

    def report_tier(self, report_id: str) -> AccessTier:
        """Minimum tier for a report; unknown reports need owner access."""
        return self._config.report_access.get(report_id, DEFAULT_REPORT_TIER)

    def check_resource(self, resource_id: str) -> AccessDecision:
        required = self.resource_tier(resource_id)
        return AccessDecision(
            allowed=self.has_access(required),
            resource_id=resource_id,
            required=required,
            current=self._current_tier,
        )

    def is_credential_set(self, tier: AccessTier) -> bool:
        return self._config.credentials.is_set(tier)

    def requires_credential(self, tier: AccessTier) -> bool:
        """True if stepping up to ``tier`` needs a credential."""
        return not is_credential_free(self._config, tier)

    def tier_name(self, tier: AccessTier) -> str:
        return tier.display_name

    def tier_icon(self, tier: AccessTier) -> str:
        return tier.icon

    def tier_color(self, tier: AccessTier) -> str:
        return self._config.color_scheme.get(tier)

    # -- tier changes ------------------------------------------------------

    async def switch_tier(self, target: AccessTier, credential: str | None = None) -> SwitchResult:
        """Move to ``target``.

        Stepping down or staying is free. Stepping up needs the target's
        credential unless it is the configured credential-free tier.
        """
        target = AccessTier.parse(target)
        if self.verification_delay > 0 and target > self._current_tier:
            await asyncio.sleep(self.verification_delay)
        result = decide_switch(self._config, self._current_tier, target, credential)
        return self._apply(result)

    async def authenticate(self, target: AccessTier, credential: str | None = None) -> SwitchResult:
        """Enter ``target`` by credential, without the free-downgrade shortcut.

        BASE and the credential-free tier still need no credential.
        """
        target = AccessTier.parse(target)
        if self.verification_delay > 0:
            await asyncio.sleep(self.verification_delay)
        result = decide_switch(
            self._config, self._current_tier, target, credential, allow_free_downgrade=False
        )
        return self._apply(result)

    def logout(self) -> None:
        """Step back down to BASE. The authenticated identity is kept."""
        self._transition(AccessTier.BASE)
        self.log.info("Stepped down to BASE")
        self._notify(describe_logout())

    def expire_stale_session(self, now: datetime | None = None) -> bool:
        """Demote to BASE if the elevated session has expired.

        Only applies when the session policy enables auto logout and
        records sessions at all.

        Returns:
            True if the tier was lowered
        """
        policy = self._config.session_policy
        if self._current_tier == AccessTier.BASE:
            return False
        if not (policy.auto_logout_enabled and policy.require_credential_per_session):
            return False
        if self.session_store.load(self._user_key, now) is not None:
            return False

        previous = self._current_tier
        self._transition(AccessTier.BASE)
        self.log.info("Elevated session expired", extra={"tier": int(previous)})
        self._notify(
            Notification(
                NotificationLevel.INFO,
                f"{previous.display_name} session expired, returned to "
                f"{AccessTier.BASE.display_name} access",
            )
        )
        return True

    # -- configuration -----------------------------------------------------

    def update_config(self, partial: Mapping[str, Any] | None = None, **changes: Any) -> ConfigUpdateResult:
        """Shallow-merge changes into the config and persist it.

        Last write wins. On failure the in-memory config is left unchanged.
        """
        merged_changes = {**(partial or {}), **changes}
        try:
            new_config = self._config.merged(merged_changes)
        except ConfigValidationError as e:
            result = ConfigUpdateResult(False, self._config, AccessError.INVALID_CONFIG, e.message)
            self.log.warning("Rejected access config update: %s", e.message)
            self._notify(describe_config_update(result))
            return result

        return self._commit_config(new_config, describe_config_update)

    def reset_credentials(self) -> ConfigUpdateResult:
        """Restore the default credentials, leaving the rest of the config."""
        new_config = self._config.merged({"credentials": TierCredentials()})
        return self._commit_config(new_config, lambda result: (
            describe_credentials_reset() if result.ok else describe_config_update(result)
        ))

    def clear_all_sessions(self) -> int:
        """Remove every stored session record. The current tier is kept."""
        removed = self.session_store.clear_all()
        self._notify(describe_sessions_cleared())
        return removed

    def force_reset(self) -> AccessConfig:
        """Reset config to defaults, drop all sessions and return to BASE."""
        self._config = self.config_store.reset()
        self.session_store.clear_all()
        self.log.warning("Access control force reset")
        self._transition(AccessTier.BASE, force_notify=True)
        self._notify(describe_force_reset())
        return self._config

    # -- internals ---------------------------------------------------------

    def _apply(self, result: SwitchResult) -> SwitchResult:
        if result.ok:
            self._transition(result.target)
            self.log.info(
                "Switched tier",
                extra={"from_tier": int(result.previous), "tier": int(result.target), "reason": result.reason},
            )
        else:
            self.log.warning(
                "Tier switch refused",
                extra={"tier": int(result.target), "reason": result.reason},
            )
        self._notify(describe_switch(result))
        return result

    def _transition(self, tier: AccessTier, force_notify: bool = False) -> None:
        """Update the tier, persist the session, then tell listeners."""
        changed = tier != self._current_tier
        self._current_tier = tier
        self._persist_session(tier)
        if changed or force_notify:
            self._fire()

    def _persist_session(self, tier: AccessTier) -> None:
        try:
            record = self.session_store.save(self._user_key, tier, self._config.session_policy)
        except StorageUnavailableError as e:
            self.log.warning("Could not persist session: %s", e.message)
            return
        if record is None:
            self.session_store.clear(self._user_key)

    def _commit_config(
        self,
        new_config: AccessConfig,
        describe: Callable[[ConfigUpdateResult], Notification],
    ) -> ConfigUpdateResult:
        try:
            self.config_store.save(new_config)
        except StorageUnavailableError as e:
            result = ConfigUpdateResult(False, self._config, AccessError.STORAGE_UNAVAILABLE, e.message)
            self.log.warning("Access config not saved: %s", e.message)
            self._notify(describe(result))
            return result

        self._config = new_config
        result = ConfigUpdateResult(True, new_config)
        self.log.info("Access config updated")
        self._notify(describe(result))
        self._fire()
        return result

    def _fire(self) -> None:
        for listener in list(self._listeners):
            listener(self._current_tier)

    def _notify(self, notification: Notification) -> None:
        self.notifier.publish(notification)
