"""
Security settings editor.

Holds a draft copy of the access configuration that an administrator edits
field by field, then saves in one ``update_config`` call. Only the top tier
may save.
"""

from __future__ import annotations

import logging

from ..notifications import describe_config_update
from .controller import AccessController
from .credentials import generate_for_tier
from .permissions import AccessError, ConfigUpdateResult
from .types import AccessConfig, AccessTier, SessionPolicy, TierCredentials

logger = logging.getLogger(__name__)


class ConfigEditor:
    """Draft-and-save editing of the access configuration."""

    def __init__(self, controller: AccessController):
        self.controller = controller
        self.draft: AccessConfig = controller.config
        self.has_changes = False

    @property
    def can_edit(self) -> bool:
        return self.controller.has_access(AccessTier.top())

    def set_credential(self, tier: AccessTier, secret: str) -> None:
        credentials = self.draft.credentials.with_credential(AccessTier.parse(tier), secret)
        self._stage(credentials=credentials)

    def set_resource_tier(self, resource_id: str, tier: AccessTier) -> None:
        access = dict(self.draft.resource_access)
        access[resource_id] = AccessTier.parse(tier)
        self._stage(resource_access=access)

    def set_report_tier(self, report_id: str, tier: AccessTier) -> None:
        access = dict(self.draft.report_access)
        access[report_id] = AccessTier.parse(tier)
        self._stage(report_access=access)

    def set_session_policy(self, policy: SessionPolicy) -> None:
        self._stage(session_policy=policy)

    def set_credential_free_tier(self, tier: AccessTier | None) -> None:
        self._stage(credential_free_tier=tier)

    def generate_credential(self, tier: AccessTier) -> str:
        """Put a freshly generated password for ``tier`` into the draft."""
        secret = generate_for_tier(AccessTier.parse(tier))
        self.set_credential(tier, secret)
        return secret

    def generate_all_credentials(self) -> TierCredentials:
        credentials = TierCredentials(
            elevated1=generate_for_tier(AccessTier.ELEVATED1),
            elevated2=generate_for_tier(AccessTier.ELEVATED2),
            elevated3=generate_for_tier(AccessTier.ELEVATED3),
        )
        self._stage(credentials=credentials)
        return credentials

    def restore_default_credentials(self) -> None:
        self._stage(credentials=TierCredentials())

    def discard(self) -> None:
        """Drop all draft changes."""
        self.draft = self.controller.config
        self.has_changes = False

    def save(self) -> ConfigUpdateResult:
        """Persist the draft through the controller.

        Refused without persisting when the current tier is below the top.
        """
        if not self.can_edit:
            result = ConfigUpdateResult(False, self.controller.config, AccessError.INSUFFICIENT_TIER)
            logger.warning("Config save refused at tier %s", self.controller.current_tier.name)
            self.controller.notifier.publish(describe_config_update(result))
            return result

        result = self.controller.update_config(
            {name: getattr(self.draft, name) for name in AccessConfig.field_names()}
        )
        if result.ok:
            self.draft = result.config
            self.has_changes = False
        return result

    def _stage(self, **changes) -> None:
        self.draft = self.draft.merged(changes)
        self.has_changes = True
