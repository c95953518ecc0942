"""
User-facing notifications.

The access controller and its UI helpers decide outcomes; this module turns
those outcomes into the toast-style messages the clinic staff see. Delivery
is pluggable through ``Notifier`` so a UI can route messages to its own
toast component while tests collect them in a list.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum

from .access.permissions import AccessError, ConfigUpdateResult, SwitchResult
from .access.types import AccessTier

logger = logging.getLogger(__name__)


class NotificationLevel(Enum):
    SUCCESS = "success"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


@dataclass(frozen=True)
class Notification:
    """A single user-facing message."""

    level: NotificationLevel
    message: str
    description: str | None = None


class Notifier(ABC):
    """Delivers notifications to the user."""

    @abstractmethod
    def publish(self, notification: Notification) -> None:
        ...


class LoggingNotifier(Notifier):
    """Writes notifications to the log. Used when no UI is attached."""

    _levels = {
        NotificationLevel.SUCCESS: logging.INFO,
        NotificationLevel.INFO: logging.INFO,
        NotificationLevel.WARNING: logging.WARNING,
        NotificationLevel.ERROR: logging.WARNING,
    }

    def __init__(self, logger_name: str = "clinic_access.notifications"):
        self._logger = logging.getLogger(logger_name)

    def publish(self, notification: Notification) -> None:
        self._logger.log(
            self._levels[notification.level],
            notification.message,
            extra={"notification_level": notification.level.value},
        )


class CollectingNotifier(Notifier):
    """Keeps every notification in memory, newest last."""

    def __init__(self) -> None:
        self.notifications: list[Notification] = []

    def publish(self, notification: Notification) -> None:
        self.notifications.append(notification)

    @property
    def last(self) -> Notification | None:
        return self.notifications[-1] if self.notifications else None

    def messages(self) -> list[str]:
        return [n.message for n in self.notifications]

    def clear(self) -> None:
        self.notifications.clear()


def credential_not_configured_message(tier: AccessTier) -> str:
    return (
        f"The {tier.display_name} password has not been set. "
        "Set it first in Security Settings."
    )


def describe_switch(result: SwitchResult) -> Notification:
    """Message for a completed ``switch_tier`` call."""
    name = result.target.display_name
    if result.ok:
        return Notification(NotificationLevel.SUCCESS, f"Switched to {name} access")
    if result.error == AccessError.CREDENTIAL_NOT_CONFIGURED:
        return Notification(NotificationLevel.ERROR, credential_not_configured_message(result.target))
    if result.error == AccessError.CREDENTIAL_MISMATCH:
        return Notification(NotificationLevel.ERROR, "Incorrect password!")
    return Notification(NotificationLevel.ERROR, f"Could not switch to {name} access")


def describe_logout() -> Notification:
    return Notification(
        NotificationLevel.INFO, f"Returned to {AccessTier.BASE.display_name} access"
    )


def describe_config_update(result: ConfigUpdateResult) -> Notification:
    if result.ok:
        return Notification(NotificationLevel.SUCCESS, "Security configuration updated")
    if result.error == AccessError.INSUFFICIENT_TIER:
        return Notification(
            NotificationLevel.ERROR,
            f"{AccessTier.top().display_name} access is required to change security settings",
        )
    if result.error == AccessError.STORAGE_UNAVAILABLE:
        return Notification(
            NotificationLevel.ERROR,
            "Security configuration could not be saved",
            result.detail,
        )
    return Notification(NotificationLevel.ERROR, "Invalid security configuration", result.detail)


def describe_credentials_reset() -> Notification:
    return Notification(NotificationLevel.SUCCESS, "Emergency reset: default passwords restored")


def describe_sessions_cleared() -> Notification:
    return Notification(NotificationLevel.INFO, "All security sessions cleared")


def describe_force_reset() -> Notification:
    return Notification(
        NotificationLevel.SUCCESS,
        "Security system reset: every account now sees the same menu",
    )


def describe_lockout(seconds: float) -> Notification:
    return Notification(
        NotificationLevel.ERROR,
        "Too many failed attempts",
        f"Wait {int(round(seconds))} seconds before trying again",
    )


def describe_navigation_denied(required: AccessTier) -> Notification:
    return Notification(
        NotificationLevel.ERROR, f"{required.display_name} access is required for this page"
    )
