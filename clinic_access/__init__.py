"""
Clinic Access

Hierarchical access control and session management for the clinic back
office.

Provides:
- Ordered privilege tiers with per-tier passwords (doctor, staff, owner,
  super user)
- Durable access configuration and volatile per-user elevated sessions
- Resource guards with attempt counting and lockout
- Tier switching and tier-grouped navigation menus

Usage:

    >>> from clinic_access import AccessControlContext, AccessTier
    >>> context = AccessControlContext.create()
    >>> context.controller.has_access(AccessTier.BASE)
    True
    >>> result = await context.controller.switch_tier(AccessTier.ELEVATED2, "owner456")
    >>> context.menu.compose()

Storage:

    # Durable config on disk, sessions in process memory (the default)
    from clinic_access.storage import ConfigStore, FileStorage, MemoryStorage, SessionStore
"""

# Access control (imported before storage, which depends on its types)
from .access import (
    AccessConfig,
    AccessController,
    AccessDecision,
    AccessError,
    AccessGuard,
    AccessTier,
    ConfigEditor,
    ConfigUpdateResult,
    GuardSubmission,
    MenuComposer,
    MenuGroup,
    MenuItem,
    SessionPolicy,
    SessionRecord,
    SwitchResult,
    TierColorScheme,
    TierCredentials,
    TierSwitcher,
)
from .context import AccessControlContext

# Exceptions
from .exceptions import (
    AccessControlError,
    ConfigValidationError,
    CredentialError,
    CredentialMismatchError,
    CredentialNotConfiguredError,
    StorageCorruptError,
    StorageError,
    StorageUnavailableError,
)
from .identity import UserIdentity
from .notifications import (
    CollectingNotifier,
    LoggingNotifier,
    Notification,
    NotificationLevel,
    Notifier,
)
from .settings import Settings, load_settings
from .storage import ConfigStore, FileStorage, KeyValueStorage, MemoryStorage, SessionStore

__version__ = "0.1.0"

__all__ = [
    # Tiers and config
    "AccessTier",
    "AccessConfig",
    "TierCredentials",
    "TierColorScheme",
    "SessionPolicy",
    "SessionRecord",
    # Outcomes
    "AccessDecision",
    "AccessError",
    "SwitchResult",
    "ConfigUpdateResult",
    "GuardSubmission",
    # Components
    "AccessController",
    "AccessGuard",
    "TierSwitcher",
    "MenuComposer",
    "MenuGroup",
    "MenuItem",
    "ConfigEditor",
    "AccessControlContext",
    # Storage
    "ConfigStore",
    "SessionStore",
    "KeyValueStorage",
    "FileStorage",
    "MemoryStorage",
    # Identity and settings
    "UserIdentity",
    "Settings",
    "load_settings",
    # Notifications
    "Notification",
    "NotificationLevel",
    "Notifier",
    "LoggingNotifier",
    "CollectingNotifier",
    # Exceptions
    "AccessControlError",
    "StorageError",
    "StorageUnavailableError",
    "StorageCorruptError",
    "ConfigValidationError",
    "CredentialError",
    "CredentialMismatchError",
    "CredentialNotConfiguredError",
]
