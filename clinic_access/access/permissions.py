"""Decision and outcome types for access control."""

from __future__ import annotations

import hmac
from dataclasses import dataclass
from enum import Enum

from ..exceptions import (
    AccessControlError,
    CredentialMismatchError,
    CredentialNotConfiguredError,
)
from .types import AccessConfig, AccessTier, is_blank


class AccessError(Enum):
    """Why an access operation did not succeed."""

    CREDENTIAL_NOT_CONFIGURED = "credential_not_configured"
    CREDENTIAL_MISMATCH = "credential_mismatch"
    STORAGE_UNAVAILABLE = "storage_unavailable"
    INVALID_CONFIG = "invalid_config"
    INSUFFICIENT_TIER = "insufficient_tier"
    LOCKED_OUT = "locked_out"
    PENDING = "pending"


@dataclass(frozen=True)
class AccessDecision:
    """Result of checking a resource against the current tier."""

    allowed: bool
    resource_id: str
    required: AccessTier
    current: AccessTier


@dataclass(frozen=True)
class SwitchResult:
    """Outcome of a tier switch request.

    Truthy on success, so callers can keep the boolean contract.
    """

    ok: bool
    previous: AccessTier
    target: AccessTier
    reason: str
    error: AccessError | None = None

    def __bool__(self) -> bool:
        return self.ok

    @property
    def is_step_up(self) -> bool:
        return self.target > self.previous

    def raise_for_error(self) -> None:
        """Raise the matching exception for a failed switch."""
        if self.ok:
            return
        name = self.target.display_name
        if self.error == AccessError.CREDENTIAL_NOT_CONFIGURED:
            raise CredentialNotConfiguredError(int(self.target), name)
        if self.error == AccessError.CREDENTIAL_MISMATCH:
            raise CredentialMismatchError(int(self.target), name)
        raise AccessControlError(f"Switch to {name} failed: {self.reason}", {"error": str(self.error)})


@dataclass(frozen=True)
class ConfigUpdateResult:
    """Outcome of a configuration update."""

    ok: bool
    config: AccessConfig
    error: AccessError | None = None
    detail: str | None = None

    def __bool__(self) -> bool:
        return self.ok


def is_credential_free(config: AccessConfig, tier: AccessTier) -> bool:
    """True if ``tier`` can be entered without a credential."""
    if tier == AccessTier.BASE:
        return True
    return (
        config.credential_free_tier is not None
        and tier == config.credential_free_tier
        and tier == AccessTier.lowest_elevated()
    )


def decide_switch(
    config: AccessConfig,
    current: AccessTier,
    target: AccessTier,
    credential: str | None = None,
    *,
    allow_free_downgrade: bool = True,
) -> SwitchResult:
    """Decide a tier switch without touching any state.

    Args:
        config: Active access configuration
        current: Tier currently held
        target: Requested tier
        credential: Secret supplied by the user, if any
        allow_free_downgrade: Whether stepping down (or staying) skips the
            credential check

    Returns:
        SwitchResult describing the decision
    """
    if allow_free_downgrade and target <= current:
        return SwitchResult(True, current, target, "downgrade")

    if is_credential_free(config, target):
        return SwitchResult(True, current, target, "credential_free")

    expected = config.credentials.get(target)
    if is_blank(expected):
        return SwitchResult(
            False, current, target, "credential_not_configured", AccessError.CREDENTIAL_NOT_CONFIGURED
        )

    if credential is None or not hmac.compare_digest(credential.encode(), expected.encode()):
        return SwitchResult(False, current, target, "credential_mismatch", AccessError.CREDENTIAL_MISMATCH)

    return SwitchResult(True, current, target, "credential_accepted")
