"""
Resource guard with step-up prompt.

An ``AccessGuard`` wraps one named resource. When the current tier is too
low it opens a prompt for the resource's tier and accepts credential
submissions. Failed attempts are counted per guard instance: after
``max_attempts`` consecutive failures input is locked for
``lockout_seconds``, then the counter starts again from zero. The counter
also restarts when the resource's required tier changes outside a lockout.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable
from dataclasses import dataclass

from ..notifications import credential_not_configured_message, describe_lockout
from .controller import AccessController
from .permissions import AccessError, SwitchResult
from .types import AccessTier

logger = logging.getLogger(__name__)

DEFAULT_MAX_ATTEMPTS = 3
DEFAULT_LOCKOUT_SECONDS = 30.0
DEFAULT_VERIFICATION_DELAY = 0.5


@dataclass(frozen=True)
class GuardSubmission:
    """Outcome of one prompt submission."""

    ok: bool
    attempts: int
    error: AccessError | None = None
    locked_for: float = 0.0
    result: SwitchResult | None = None

    def __bool__(self) -> bool:
        return self.ok


class AccessGuard:
    """Gate for one resource.

    Attributes:
        prompt_open: Whether the step-up prompt is showing
        target_tier: Tier the prompt asks for
        attempts: Consecutive failed submissions
        message: Inline message for the prompt, if any
        pending: True while a submission is being verified
    """

    def __init__(
        self,
        controller: AccessController,
        resource_id: str,
        *,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        lockout_seconds: float = DEFAULT_LOCKOUT_SECONDS,
        verification_delay: float = DEFAULT_VERIFICATION_DELAY,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.controller = controller
        self.resource_id = resource_id
        self.max_attempts = max_attempts
        self.lockout_seconds = lockout_seconds
        self.verification_delay = verification_delay
        self._clock = clock

        self.prompt_open = False
        self.target_tier = AccessTier.BASE
        self.attempts = 0
        self.message: str | None = None
        self.pending = False
        self._locked_until: float | None = None

    @property
    def required_tier(self) -> AccessTier:
        return self.controller.resource_tier(self.resource_id)

    @property
    def content_visible(self) -> bool:
        """Whether the protected content may be shown right now."""
        return self.controller.has_access(self.required_tier)

    @property
    def requires_credential(self) -> bool:
        return self.controller.requires_credential(self.target_tier)

    def evaluate(self) -> bool:
        """Re-check access, opening or closing the prompt as needed.

        Returns:
            True if the content may be shown
        """
        self.controller.expire_stale_session()
        required = self.required_tier
        if self.controller.has_access(required):
            self._close()
            return True

        if not self.prompt_open or self.target_tier != required:
            if self.target_tier != required and not self.is_locked():
                # Failures only count against one target tier
                self.attempts = 0
                self.message = None
            self.target_tier = required
            self.prompt_open = True
            logger.debug(
                "Prompting for %s on %s", required.display_name, self.resource_id
            )
        return False

    def lockout_remaining(self, now: float | None = None) -> float:
        """Seconds until input is re-enabled, 0 when not locked."""
        if self._locked_until is None:
            return 0.0
        now = self._clock() if now is None else now
        remaining = self._locked_until - now
        if remaining <= 0:
            # Cool-down over: re-enable input and start counting afresh
            self._locked_until = None
            self.attempts = 0
            self.message = None
            return 0.0
        return remaining

    def is_locked(self, now: float | None = None) -> bool:
        return self.lockout_remaining(now) > 0

    async def switch(self) -> GuardSubmission:
        """Single-action switch for targets that need no credential."""
        return await self._attempt(None)

    async def submit(self, credential: str) -> GuardSubmission:
        """Submit a credential for the prompt's target tier."""
        return await self._attempt(credential)

    def cancel(self) -> None:
        """Close the prompt without touching the current tier.

        A running lockout stays in force.
        """
        self.prompt_open = False
        if not self.is_locked():
            self.attempts = 0
            self.message = None

    async def _attempt(self, credential: str | None) -> GuardSubmission:
        remaining = self.lockout_remaining()
        if remaining > 0:
            self.message = self._lockout_text(remaining)
            return GuardSubmission(False, self.attempts, AccessError.LOCKED_OUT, locked_for=remaining)
        if self.pending:
            return GuardSubmission(False, self.attempts, AccessError.PENDING)

        self.pending = True
        try:
            if self.verification_delay > 0 and credential is not None:
                await asyncio.sleep(self.verification_delay)
            result = await self.controller.switch_tier(self.target_tier, credential)
        finally:
            self.pending = False

        if result.ok:
            self.attempts = 0
            self._close()
            return GuardSubmission(True, 0, result=result)

        self.attempts += 1
        self.message = self._failure_text(result)
        if self.attempts >= self.max_attempts:
            self._locked_until = self._clock() + self.lockout_seconds
            self.message = self._lockout_text(self.lockout_seconds)
            logger.warning(
                "Locking guard after %d failed attempts",
                self.attempts,
                extra={"resource_id": self.resource_id, "tier": int(self.target_tier)},
            )
            self.controller.notifier.publish(describe_lockout(self.lockout_seconds))
            return GuardSubmission(
                False, self.attempts, result.error, locked_for=self.lockout_seconds, result=result
            )
        return GuardSubmission(False, self.attempts, result.error, result=result)

    def _close(self) -> None:
        self.prompt_open = False
        self.message = None

    def _failure_text(self, result: SwitchResult) -> str:
        if result.error == AccessError.CREDENTIAL_NOT_CONFIGURED:
            return credential_not_configured_message(result.target)
        return f"Incorrect password. Attempt {self.attempts} of {self.max_attempts}."

    def _lockout_text(self, seconds: float) -> str:
        return f"Too many failed attempts. Try again in {int(round(seconds))} seconds."
