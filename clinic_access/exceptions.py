"""
Custom exceptions for clinic access control.

Storage and validation problems are raised as these exceptions inside the
library. The access controller converts every one of them into a result
object at its boundary, so UI code only sees them when it opts in via
``SwitchResult.raise_for_error()``.
"""


class AccessControlError(Exception):
    """Base exception for all access control errors."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class StorageError(AccessControlError):
    """Base class for persisted config/session failures."""


class StorageUnavailableError(StorageError):
    """Raised when a storage read or write cannot be performed."""

    def __init__(self, operation: str, key: str | None = None, cause: Exception | None = None):
        details = {"operation": operation}
        if key:
            details["key"] = key
        if cause:
            details["cause"] = str(cause)
        message = f"Storage unavailable during {operation}"
        if key:
            message += f": {key}"
        super().__init__(message, details)
        self.operation = operation
        self.key = key
        self.cause = cause


class StorageCorruptError(StorageError):
    """Raised when a stored record exists but cannot be parsed."""

    def __init__(self, key: str, cause: Exception | None = None):
        details = {"key": key}
        if cause:
            details["cause"] = str(cause)
        super().__init__(f"Stored record is corrupt: {key}", details)
        self.key = key
        self.cause = cause


class ConfigValidationError(AccessControlError):
    """Raised when an access configuration value is invalid."""

    def __init__(self, field: str, reason: str, value: object | None = None):
        details = {"field": field, "reason": reason}
        if value is not None:
            details["value"] = repr(value)
        super().__init__(f"Invalid access config field {field}: {reason}", details)
        self.field = field
        self.reason = reason
        self.value = value


class CredentialError(AccessControlError):
    """Base class for failed step-up attempts."""

    def __init__(self, message: str, tier: int):
        super().__init__(message, {"tier": tier})
        self.tier = tier


class CredentialNotConfiguredError(CredentialError):
    """The target tier has no usable credential configured."""

    def __init__(self, tier: int, tier_name: str | None = None):
        label = tier_name or str(tier)
        super().__init__(f"No credential configured for tier {label}", tier)


class CredentialMismatchError(CredentialError):
    """The supplied credential does not match the configured one."""

    def __init__(self, tier: int, tier_name: str | None = None):
        label = tier_name or str(tier)
        super().__init__(f"Incorrect credential for tier {label}", tier)
