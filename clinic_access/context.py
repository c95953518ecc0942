"""
Access control context.

Wires the stores, controller and UI helpers together once at application
start-up. The resulting object is passed explicitly to every consumer
instead of being reached through module-level globals.

Usage:
    context = AccessControlContext.create(settings, identity=identity)

    guard = context.guard("reports")
    if not guard.evaluate():
        await guard.submit(password)
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from .access.controller import AccessController
from .access.editor import ConfigEditor
from .access.guard import AccessGuard
from .access.menu import DEFAULT_MENU, MenuComposer, MenuItem
from .access.switcher import TierSwitcher
from .identity import UserIdentity
from .notifications import Notifier
from .settings import Settings
from .storage.backends import FileStorage, KeyValueStorage, MemoryStorage
from .storage.config_store import ConfigStore
from .storage.session_store import SessionStore


@dataclass
class AccessControlContext:
    """Everything the UI needs for access control, built once."""

    settings: Settings
    controller: AccessController
    menu: MenuComposer
    switcher: TierSwitcher

    @classmethod
    def create(
        cls,
        settings: Settings | None = None,
        *,
        identity: UserIdentity | None = None,
        notifier: Notifier | None = None,
        durable_storage: KeyValueStorage | None = None,
        volatile_storage: KeyValueStorage | None = None,
        menu_items: Sequence[MenuItem] = DEFAULT_MENU,
    ) -> AccessControlContext:
        """Build and initialize a context.

        Args:
            settings: Runtime settings (defaults if omitted)
            identity: Authenticated user, if known
            notifier: Where user-facing messages go
            durable_storage: Backend for the config record (files under
                ``settings.data_dir`` by default)
            volatile_storage: Backend for session records (process memory
                by default)
            menu_items: Navigation catalogue
        """
        settings = settings or Settings()
        config_store = ConfigStore(
            durable_storage or FileStorage(settings.data_dir),
            namespace=settings.config_namespace,
        )
        session_store = SessionStore(volatile_storage or MemoryStorage(), prefix=settings.session_prefix)
        controller = AccessController(
            config_store,
            session_store,
            notifier=notifier,
            user_key=identity.user_key if identity else None,
        )
        controller.initialize()
        return cls(
            settings=settings,
            controller=controller,
            menu=MenuComposer(controller, menu_items),
            switcher=TierSwitcher(controller),
        )

    def guard(self, resource_id: str) -> AccessGuard:
        """A new guard for ``resource_id`` using the configured limits."""
        return AccessGuard(
            self.controller,
            resource_id,
            max_attempts=self.settings.max_attempts,
            lockout_seconds=self.settings.lockout_seconds,
            verification_delay=self.settings.verification_delay_seconds,
        )

    def editor(self) -> ConfigEditor:
        """A settings editor holding a fresh draft of the current config."""
        return ConfigEditor(self.controller)

    def sign_in(self, identity: UserIdentity | None) -> None:
        """Adopt a new authenticated identity and start again at BASE."""
        self.controller.change_identity(identity.user_key if identity else None)
