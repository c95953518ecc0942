"""Access control module: tiers, controller, guard, switcher and menu."""

from .types import (
    DEFAULT_REPORT_TIER,
    DEFAULT_RESOURCE_IDS,
    TIER_PROFILES,
    AccessConfig,
    AccessTier,
    SessionPolicy,
    SessionRecord,
    TierColorScheme,
    TierCredentials,
    TierProfile,
)
from .permissions import (
    AccessDecision,
    AccessError,
    ConfigUpdateResult,
    SwitchResult,
    decide_switch,
    is_credential_free,
)
from .controller import AccessController
from .credentials import CredentialStrength, credential_strength, generate_credential
from .editor import ConfigEditor
from .guard import AccessGuard, GuardSubmission
from .menu import DEFAULT_MENU, MenuComposer, MenuGroup, MenuItem
from .switcher import SelectionOutcome, TierOption, TierSwitcher

__all__ = [
    # Types
    "AccessTier",
    "AccessConfig",
    "TierCredentials",
    "TierColorScheme",
    "TierProfile",
    "SessionPolicy",
    "SessionRecord",
    "TIER_PROFILES",
    "DEFAULT_RESOURCE_IDS",
    "DEFAULT_REPORT_TIER",
    # Decisions
    "AccessDecision",
    "AccessError",
    "ConfigUpdateResult",
    "SwitchResult",
    "decide_switch",
    "is_credential_free",
    # Components
    "AccessController",
    "AccessGuard",
    "GuardSubmission",
    "TierSwitcher",
    "TierOption",
    "SelectionOutcome",
    "MenuComposer",
    "MenuGroup",
    "MenuItem",
    "DEFAULT_MENU",
    "ConfigEditor",
    # Credentials
    "CredentialStrength",
    "credential_strength",
    "generate_credential",
]
