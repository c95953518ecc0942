"""
Access tier and configuration types.

Defines the privilege ladder, the per-tier credential and colour records,
the session policy and the aggregate access configuration, together with
their JSON-friendly serialisation.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field, fields, replace
from datetime import UTC, datetime
from enum import IntEnum
from typing import Any

from ..exceptions import ConfigValidationError

logger = logging.getLogger(__name__)


class AccessTier(IntEnum):
    """Ordered privilege tiers, lowest first."""

    BASE = 0  # Doctor, no password
    ELEVATED1 = 1  # Cashier / staff
    ELEVATED2 = 2  # Owner
    ELEVATED3 = 3  # Super user, administers the configuration

    @classmethod
    def top(cls) -> AccessTier:
        """The administrator tier."""
        return cls.ELEVATED3

    @classmethod
    def lowest_elevated(cls) -> AccessTier:
        """The lowest tier above BASE."""
        return cls.ELEVATED1

    @classmethod
    def parse(cls, value: Any) -> AccessTier:
        """Coerce an int, numeric string or member name into a tier.

        Raises:
            ValueError: If the value names no tier
        """
        if isinstance(value, AccessTier):
            return value
        if isinstance(value, bool):
            raise ValueError(f"Not an access tier: {value!r}")
        if isinstance(value, int):
            return cls(value)
        if isinstance(value, str):
            text = value.strip()
            if text.lstrip("-").isdigit():
                return cls(int(text))
            try:
                return cls[text.upper()]
            except KeyError:
                pass
        raise ValueError(f"Not an access tier: {value!r}")

    @property
    def profile(self) -> TierProfile:
        return TIER_PROFILES[self]

    @property
    def display_name(self) -> str:
        return TIER_PROFILES[self].name

    @property
    def icon(self) -> str:
        return TIER_PROFILES[self].icon


@dataclass(frozen=True)
class TierProfile:
    """Presentation attributes for a tier."""

    name: str
    icon: str
    section_title: str


TIER_PROFILES: dict[AccessTier, TierProfile] = {
    AccessTier.BASE: TierProfile("Doctor", "👨‍⚕️", "Doctor Access"),
    AccessTier.ELEVATED1: TierProfile("Cashier/Staff", "👩‍💼", "Cashier/Staff Access"),
    AccessTier.ELEVATED2: TierProfile("Owner", "👑", "Owner Access"),
    AccessTier.ELEVATED3: TierProfile("Super User", "🔧", "Super User Access"),
}


def is_blank(value: str | None) -> bool:
    """A credential is unset when absent, empty or whitespace-only."""
    return value is None or value.strip() == ""


def _require_strings(name: str, record: Any) -> None:
    for f in fields(record):
        value = getattr(record, f.name)
        if not isinstance(value, str):
            raise ConfigValidationError(f"{name}.{f.name}", "must be a string", value)


@dataclass(frozen=True)
class TierCredentials:
    """One secret per non-BASE tier.

    BASE has no slot; it never needs a credential.
    """

    elevated1: str = "staff123"
    elevated2: str = "owner456"
    elevated3: str = "super789"

    def __post_init__(self) -> None:
        _require_strings("credentials", self)

    def get(self, tier: AccessTier) -> str:
        """Return the configured secret for ``tier``.

        Raises:
            ValueError: For BASE, which has no credential
        """
        match tier:
            case AccessTier.ELEVATED1:
                return self.elevated1
            case AccessTier.ELEVATED2:
                return self.elevated2
            case AccessTier.ELEVATED3:
                return self.elevated3
            case AccessTier.BASE:
                raise ValueError("BASE tier has no credential")

    def with_credential(self, tier: AccessTier, secret: str) -> TierCredentials:
        """Return a copy with ``tier``'s secret replaced."""
        match tier:
            case AccessTier.ELEVATED1:
                return replace(self, elevated1=secret)
            case AccessTier.ELEVATED2:
                return replace(self, elevated2=secret)
            case AccessTier.ELEVATED3:
                return replace(self, elevated3=secret)
            case AccessTier.BASE:
                raise ValueError("BASE tier has no credential")

    def is_set(self, tier: AccessTier) -> bool:
        if tier == AccessTier.BASE:
            return True
        return not is_blank(self.get(tier))

    def to_dict(self) -> dict[str, str]:
        return {"elevated1": self.elevated1, "elevated2": self.elevated2, "elevated3": self.elevated3}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> TierCredentials:
        """Deserialize, keeping defaults for missing or non-string entries."""
        values = {}
        for f in fields(cls):
            raw = data.get(f.name)
            if isinstance(raw, str):
                values[f.name] = raw
            elif raw is None and f.name in data:
                values[f.name] = ""
        return cls(**values)


@dataclass(frozen=True)
class TierColorScheme:
    """Menu styling per tier."""

    base: str = "text-green-600 hover:text-green-800 hover:bg-green-50"
    elevated1: str = "text-blue-600 hover:text-blue-800 hover:bg-blue-50"
    elevated2: str = "text-purple-600 hover:text-purple-800 hover:bg-purple-50"
    elevated3: str = "text-red-600 hover:text-red-800 hover:bg-red-50"

    def __post_init__(self) -> None:
        _require_strings("color_scheme", self)

    def get(self, tier: AccessTier) -> str:
        """Style for ``tier``, falling back to the BASE style when blank."""
        match tier:
            case AccessTier.BASE:
                value = self.base
            case AccessTier.ELEVATED1:
                value = self.elevated1
            case AccessTier.ELEVATED2:
                value = self.elevated2
            case AccessTier.ELEVATED3:
                value = self.elevated3
        return value or self.base

    def to_dict(self) -> dict[str, str]:
        return {f.name: getattr(self, f.name) for f in fields(self)}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> TierColorScheme:
        return cls(**{f.name: data[f.name] for f in fields(cls) if isinstance(data.get(f.name), str)})


# One week
MAX_EXPIRY_MINUTES = 7 * 24 * 60


def _valid_expiry(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and 0 < value <= MAX_EXPIRY_MINUTES


@dataclass(frozen=True)
class SessionPolicy:
    """How elevated sessions are recorded and expired."""

    expiry_minutes: int = 30
    require_credential_per_session: bool = True
    auto_logout_enabled: bool = True

    def __post_init__(self) -> None:
        if not _valid_expiry(self.expiry_minutes):
            raise ConfigValidationError(
                "session_policy.expiry_minutes",
                f"must be an integer from 1 to {MAX_EXPIRY_MINUTES}",
                self.expiry_minutes,
            )
        for name in ("require_credential_per_session", "auto_logout_enabled"):
            if not isinstance(getattr(self, name), bool):
                raise ConfigValidationError(f"session_policy.{name}", "must be a boolean", getattr(self, name))

    def to_dict(self) -> dict[str, Any]:
        return {
            "expiry_minutes": self.expiry_minutes,
            "require_credential_per_session": self.require_credential_per_session,
            "auto_logout_enabled": self.auto_logout_enabled,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> SessionPolicy:
        """Deserialize, keeping defaults for missing or malformed entries."""
        default = cls()
        expiry = data.get("expiry_minutes", default.expiry_minutes)
        if not _valid_expiry(expiry):
            logger.warning("Ignoring invalid session expiry_minutes: %r", expiry)
            expiry = default.expiry_minutes

        def _flag(name: str) -> bool:
            value = data.get(name, getattr(default, name))
            return value if isinstance(value, bool) else getattr(default, name)

        return cls(
            expiry_minutes=expiry,
            require_credential_per_session=_flag("require_credential_per_session"),
            auto_logout_enabled=_flag("auto_logout_enabled"),
        )


# Pages of the clinic back office. Every page is reachable at BASE until an
# administrator raises it.
DEFAULT_RESOURCE_IDS: tuple[str, ...] = (
    "dashboard",
    "patients",
    "forms",
    "medical-record-summary",
    "treatments",
    "products",
    "product-field-trip",
    "field-trip-sales",
    "doctor-status",
    "attendance",
    "sitting-fees",
    "sales",
    "stock-opname",
    "promo",
    "expenses",
    "salaries",
    "reports",
    "security-settings",
)

DEFAULT_REPORT_IDS: tuple[str, ...] = (
    "financial",
    "doctor-fees",
    "salary",
    "attendance",
    "treatment",
    "patient",
)

# Reports missing from the report map need owner access.
DEFAULT_REPORT_TIER = AccessTier.ELEVATED2


def default_resource_access() -> dict[str, AccessTier]:
    return {resource_id: AccessTier.BASE for resource_id in DEFAULT_RESOURCE_IDS}


def default_report_access() -> dict[str, AccessTier]:
    return {report_id: AccessTier.BASE for report_id in DEFAULT_REPORT_IDS}


def _coerce_tier(name: str, value: Any) -> AccessTier:
    try:
        return AccessTier.parse(value)
    except ValueError as e:
        raise ConfigValidationError(name, "not an access tier", value) from e


def _coerce_tier_map(name: str, data: Mapping[str, Any], strict: bool) -> dict[str, AccessTier]:
    if not isinstance(data, Mapping):
        raise ConfigValidationError(name, "expected a mapping of resource id to tier", data)
    result: dict[str, AccessTier] = {}
    for key, value in data.items():
        try:
            result[str(key)] = AccessTier.parse(value)
        except ValueError as e:
            if strict:
                raise ConfigValidationError(f"{name}.{key}", "not an access tier", value) from e
            logger.warning("Ignoring invalid tier for %s.%s: %r", name, key, value)
    return result


def _strict_record(name: str, record_type: type, data: Mapping[str, Any]) -> Any:
    """Build a nested record from an update, rejecting what ``from_dict`` would skip."""
    known = {f.name for f in fields(record_type)}
    for key in data:
        if key not in known:
            raise ConfigValidationError(f"{name}.{key}", "unknown field", data[key])
    return record_type(**data)


@dataclass(frozen=True)
class AccessConfig:
    """The whole persisted access-control configuration.

    Instances are immutable; updates produce a new config via ``merged``.
    """

    default_tier: AccessTier = AccessTier.BASE
    credentials: TierCredentials = field(default_factory=TierCredentials)
    resource_access: dict[str, AccessTier] = field(default_factory=default_resource_access)
    report_access: dict[str, AccessTier] = field(default_factory=default_report_access)
    session_policy: SessionPolicy = field(default_factory=SessionPolicy)
    color_scheme: TierColorScheme = field(default_factory=TierColorScheme)
    credential_free_tier: AccessTier | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "default_tier", _coerce_tier("default_tier", self.default_tier))
        for name, record_type in (
            ("credentials", TierCredentials),
            ("session_policy", SessionPolicy),
            ("color_scheme", TierColorScheme),
        ):
            if not isinstance(getattr(self, name), record_type):
                raise ConfigValidationError(name, f"expected {record_type.__name__}", getattr(self, name))
        object.__setattr__(
            self, "resource_access", _coerce_tier_map("resource_access", self.resource_access, True)
        )
        object.__setattr__(
            self, "report_access", _coerce_tier_map("report_access", self.report_access, True)
        )
        if self.credential_free_tier is not None:
            tier = _coerce_tier("credential_free_tier", self.credential_free_tier)
            if tier != AccessTier.lowest_elevated():
                raise ConfigValidationError(
                    "credential_free_tier",
                    "only the lowest elevated tier may be credential-free",
                    self.credential_free_tier,
                )
            object.__setattr__(self, "credential_free_tier", tier)

    @classmethod
    def field_names(cls) -> frozenset[str]:
        return frozenset(f.name for f in fields(cls))

    def merged(self, partial: Mapping[str, Any]) -> AccessConfig:
        """Shallow-merge ``partial`` over this config.

        Nested records are replaced wholesale, never merged key by key.

        Raises:
            ConfigValidationError: For unknown fields or invalid values
        """
        unknown = set(partial) - self.field_names()
        if unknown:
            raise ConfigValidationError(sorted(unknown)[0], "unknown field")

        values = dict(partial)
        for name, record_type in (
            ("credentials", TierCredentials),
            ("session_policy", SessionPolicy),
            ("color_scheme", TierColorScheme),
        ):
            if name in values and isinstance(values[name], Mapping):
                values[name] = _strict_record(name, record_type, values[name])
        return replace(self, **values)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a JSON-compatible dictionary."""
        return {
            "default_tier": int(self.default_tier),
            "credentials": self.credentials.to_dict(),
            "resource_access": {k: int(v) for k, v in self.resource_access.items()},
            "report_access": {k: int(v) for k, v in self.report_access.items()},
            "session_policy": self.session_policy.to_dict(),
            "color_scheme": self.color_scheme.to_dict(),
            "credential_free_tier": (
                int(self.credential_free_tier) if self.credential_free_tier is not None else None
            ),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> AccessConfig:
        """Deserialize over defaults.

        Older or partial records load fine: missing fields take their
        defaults and malformed fields are dropped with a warning.
        """
        default = cls()
        values: dict[str, Any] = {}

        if "default_tier" in data:
            try:
                values["default_tier"] = AccessTier.parse(data["default_tier"])
            except ValueError:
                logger.warning("Ignoring invalid default_tier: %r", data["default_tier"])

        if isinstance(data.get("credentials"), Mapping):
            values["credentials"] = TierCredentials.from_dict(data["credentials"])
        if isinstance(data.get("resource_access"), Mapping):
            values["resource_access"] = {
                **default.resource_access,
                **_coerce_tier_map("resource_access", data["resource_access"], False),
            }
        if isinstance(data.get("report_access"), Mapping):
            values["report_access"] = {
                **default.report_access,
                **_coerce_tier_map("report_access", data["report_access"], False),
            }
        if isinstance(data.get("session_policy"), Mapping):
            values["session_policy"] = SessionPolicy.from_dict(data["session_policy"])
        if isinstance(data.get("color_scheme"), Mapping):
            values["color_scheme"] = TierColorScheme.from_dict(data["color_scheme"])

        free_tier = data.get("credential_free_tier")
        if free_tier is not None:
            try:
                tier = AccessTier.parse(free_tier)
            except ValueError:
                tier = None
            if tier == AccessTier.lowest_elevated():
                values["credential_free_tier"] = tier
            else:
                logger.warning("Ignoring invalid credential_free_tier: %r", free_tier)

        return cls(**values)


@dataclass(frozen=True)
class SessionRecord:
    """Short-lived memo of the currently elevated tier."""

    tier: AccessTier
    expires_at: datetime
    issued_at: datetime

    def is_expired(self, now: datetime | None = None) -> bool:
        return (now or datetime.now(UTC)) >= self.expires_at

    def to_dict(self) -> dict[str, Any]:
        return {
            "tier": int(self.tier),
            "expires_at": self.expires_at.isoformat(),
            "issued_at": self.issued_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> SessionRecord:
        """Deserialize from dictionary.

        Raises:
            KeyError, ValueError, TypeError: If the record is malformed
        """
        return cls(
            tier=AccessTier.parse(data["tier"]),
            expires_at=datetime.fromisoformat(data["expires_at"]),
            issued_at=datetime.fromisoformat(data["issued_at"]),
        )
