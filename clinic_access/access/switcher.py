"""Explicit tier switching, as offered by the header level picker."""

from __future__ import annotations

from dataclasses import dataclass

from ..notifications import Notification, NotificationLevel, credential_not_configured_message
from .controller import AccessController
from .permissions import AccessError, SwitchResult
from .types import AccessTier


@dataclass(frozen=True)
class TierOption:
    """One entry of the tier picker."""

    tier: AccessTier
    name: str
    icon: str
    color: str
    is_current: bool
    credential_set: bool
    requires_credential: bool


@dataclass(frozen=True)
class SelectionOutcome:
    """What happened when the user picked a tier.

    ``prompt_opened`` means a credential is now expected via ``submit``.
    """

    prompt_opened: bool = False
    result: SwitchResult | None = None
    error: AccessError | None = None


class TierSwitcher:
    """Lets the user pick a tier directly instead of via a guarded page."""

    def __init__(self, controller: AccessController):
        self.controller = controller
        self.prompt_open = False
        self.target_tier = AccessTier.BASE
        self.pending = False

    def options(self) -> list[TierOption]:
        current = self.controller.current_tier
        return [
            TierOption(
                tier=tier,
                name=self.controller.tier_name(tier),
                icon=self.controller.tier_icon(tier),
                color=self.controller.tier_color(tier),
                is_current=tier == current,
                credential_set=self.controller.is_credential_set(tier),
                requires_credential=tier > current and self.controller.requires_credential(tier),
            )
            for tier in AccessTier
        ]

    async def select(self, tier: AccessTier) -> SelectionOutcome:
        """Handle a pick from the tier list.

        Downgrades and credential-free tiers switch immediately. An upgrade
        whose credential is unset is refused without opening the prompt.
        """
        tier = AccessTier.parse(tier)
        controller = self.controller
        if tier == controller.current_tier:
            return SelectionOutcome()

        if tier < controller.current_tier or not controller.requires_credential(tier):
            result = await controller.switch_tier(tier)
            return SelectionOutcome(result=result, error=result.error)

        if not controller.is_credential_set(tier):
            controller.notifier.publish(
                Notification(NotificationLevel.ERROR, credential_not_configured_message(tier))
            )
            return SelectionOutcome(error=AccessError.CREDENTIAL_NOT_CONFIGURED)

        self.target_tier = tier
        self.prompt_open = True
        return SelectionOutcome(prompt_opened=True)

    async def submit(self, credential: str) -> SwitchResult | None:
        """Submit the credential for the selected tier.

        Returns None when no prompt is open or a submission is in flight.
        """
        if not self.prompt_open or self.pending:
            return None
        self.pending = True
        try:
            result = await self.controller.switch_tier(self.target_tier, credential)
        finally:
            self.pending = False
        if result.ok:
            self.prompt_open = False
        return result

    def cancel(self) -> None:
        self.prompt_open = False

    def logout(self) -> None:
        self.prompt_open = False
        self.controller.logout()
