"""Tests for AccessGuard prompts, attempt counting and lockout."""

import asyncio

import pytest

from clinic_access.access import AccessController, AccessError, AccessGuard, AccessTier
from clinic_access.access.types import SessionPolicy, TierCredentials
from clinic_access.notifications import CollectingNotifier

from conftest import FakeClock, FakeUtcClock


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def reports_guard(controller: AccessController, clock: FakeClock) -> AccessGuard:
    controller.update_config(resource_access={"reports": AccessTier.ELEVATED2})
    return AccessGuard(controller, "reports", verification_delay=0, clock=clock)


class TestEvaluate:
    """Tests for deciding between content and prompt."""

    def test_open_resource_shows_content(self, controller: AccessController) -> None:
        guard = AccessGuard(controller, "patients", verification_delay=0)
        assert guard.evaluate() is True
        assert guard.content_visible is True
        assert guard.prompt_open is False

    def test_protected_resource_opens_prompt(self, reports_guard: AccessGuard) -> None:
        assert reports_guard.evaluate() is False
        assert reports_guard.prompt_open is True
        assert reports_guard.target_tier is AccessTier.ELEVATED2
        assert reports_guard.requires_credential is True

    async def test_elevation_elsewhere_closes_prompt(
        self, reports_guard: AccessGuard, controller: AccessController
    ) -> None:
        reports_guard.evaluate()
        await controller.switch_tier(AccessTier.ELEVATED3, "super789")
        assert reports_guard.evaluate() is True
        assert reports_guard.prompt_open is False

    async def test_expired_session_reopens_prompt(
        self, reports_guard: AccessGuard, controller: AccessController, utc_clock: FakeUtcClock
    ) -> None:
        reports_guard.evaluate()
        await reports_guard.submit("owner456")
        assert reports_guard.evaluate() is True

        utc_clock.advance(minutes=31)
        assert reports_guard.evaluate() is False
        assert controller.current_tier is AccessTier.BASE

    def test_retargets_after_config_change(self, reports_guard: AccessGuard, controller: AccessController) -> None:
        reports_guard.evaluate()
        controller.update_config(resource_access={"reports": AccessTier.ELEVATED3})
        reports_guard.evaluate()
        assert reports_guard.target_tier is AccessTier.ELEVATED3


class TestSubmit:
    """Tests for credential submission."""

    async def test_correct_credential_elevates(self, reports_guard: AccessGuard, controller: AccessController) -> None:
        reports_guard.evaluate()
        outcome = await reports_guard.submit("owner456")

        assert outcome.ok
        assert outcome.attempts == 0
        assert controller.current_tier is AccessTier.ELEVATED2
        assert reports_guard.prompt_open is False
        assert reports_guard.content_visible is True

    async def test_wrong_credential_counts(self, reports_guard: AccessGuard, controller: AccessController) -> None:
        reports_guard.evaluate()
        outcome = await reports_guard.submit("wrong")

        assert not outcome
        assert outcome.error is AccessError.CREDENTIAL_MISMATCH
        assert reports_guard.attempts == 1
        assert reports_guard.message == "Incorrect password. Attempt 1 of 3."
        assert reports_guard.prompt_open is True
        assert controller.current_tier is AccessTier.BASE

    async def test_success_resets_counter(self, reports_guard: AccessGuard, controller: AccessController) -> None:
        reports_guard.evaluate()
        await reports_guard.submit("wrong")
        await reports_guard.submit("wrong")
        assert reports_guard.attempts == 2

        assert await reports_guard.submit("owner456")
        assert reports_guard.attempts == 0

        controller.logout()
        reports_guard.evaluate()
        await reports_guard.submit("wrong")
        assert reports_guard.attempts == 1
        assert not reports_guard.is_locked()

    async def test_unset_credential_message(self, reports_guard: AccessGuard, controller: AccessController) -> None:
        controller.update_config(credentials=TierCredentials(elevated2=""))
        reports_guard.evaluate()
        outcome = await reports_guard.submit("owner456")
        assert outcome.error is AccessError.CREDENTIAL_NOT_CONFIGURED
        assert "has not been set" in reports_guard.message

    async def test_switch_without_credential_for_free_tier(
        self, controller: AccessController, clock: FakeClock
    ) -> None:
        controller.update_config(
            resource_access={"sales": AccessTier.ELEVATED1}, credential_free_tier=AccessTier.ELEVATED1
        )
        guard = AccessGuard(controller, "sales", verification_delay=0, clock=clock)
        guard.evaluate()
        assert guard.requires_credential is False

        assert await guard.switch()
        assert controller.current_tier is AccessTier.ELEVATED1

    async def test_pending_submission_is_refused(
        self, reports_guard: AccessGuard, controller: AccessController
    ) -> None:
        reports_guard.verification_delay = 0.05
        reports_guard.evaluate()

        first = asyncio.create_task(reports_guard.submit("owner456"))
        await asyncio.sleep(0)
        assert reports_guard.pending is True
        second = await reports_guard.submit("owner456")

        assert second.error is AccessError.PENDING
        assert (await first).ok
        assert reports_guard.pending is False
        assert controller.current_tier is AccessTier.ELEVATED2


class TestLockout:
    """Tests for the cool-down after repeated failures."""

    async def test_third_failure_locks(
        self, reports_guard: AccessGuard, clock: FakeClock, notifier: CollectingNotifier
    ) -> None:
        reports_guard.evaluate()
        await reports_guard.submit("one")
        await reports_guard.submit("two")
        outcome = await reports_guard.submit("three")

        assert outcome.locked_for == 30
        assert reports_guard.is_locked()
        assert reports_guard.message == "Too many failed attempts. Try again in 30 seconds."
        assert notifier.last.message == "Too many failed attempts"
        assert notifier.last.description == "Wait 30 seconds before trying again"

    async def test_locked_guard_rejects_even_correct_credential(
        self, reports_guard: AccessGuard, controller: AccessController, clock: FakeClock
    ) -> None:
        reports_guard.evaluate()
        for _ in range(3):
            await reports_guard.submit("wrong")

        clock.advance(10)
        outcome = await reports_guard.submit("owner456")

        assert outcome.error is AccessError.LOCKED_OUT
        assert outcome.locked_for == pytest.approx(20)
        assert controller.current_tier is AccessTier.BASE

    async def test_cool_down_resets_counter(
        self, reports_guard: AccessGuard, controller: AccessController, clock: FakeClock
    ) -> None:
        reports_guard.evaluate()
        for _ in range(3):
            await reports_guard.submit("wrong")

        clock.advance(30)
        assert reports_guard.is_locked() is False
        assert reports_guard.attempts == 0
        assert reports_guard.message is None

        assert await reports_guard.submit("owner456")
        assert controller.current_tier is AccessTier.ELEVATED2

    async def test_cancel_keeps_lockout_and_tier(
        self, reports_guard: AccessGuard, controller: AccessController
    ) -> None:
        reports_guard.evaluate()
        for _ in range(3):
            await reports_guard.submit("wrong")

        reports_guard.cancel()

        assert reports_guard.prompt_open is False
        assert reports_guard.is_locked()
        assert controller.current_tier is AccessTier.BASE

    async def test_cancel_resets_attempts_when_not_locked(self, reports_guard: AccessGuard) -> None:
        reports_guard.evaluate()
        await reports_guard.submit("wrong")
        reports_guard.cancel()
        assert reports_guard.attempts == 0
        assert reports_guard.message is None

    async def test_counters_are_per_guard(self, controller: AccessController, clock: FakeClock) -> None:
        controller.update_config(
            resource_access={"reports": AccessTier.ELEVATED2, "salaries": AccessTier.ELEVATED2},
            session_policy=SessionPolicy(),
        )
        reports = AccessGuard(controller, "reports", verification_delay=0, clock=clock)
        salaries = AccessGuard(controller, "salaries", verification_delay=0, clock=clock)
        reports.evaluate()
        salaries.evaluate()

        for _ in range(3):
            await reports.submit("wrong")

        assert reports.is_locked()
        assert not salaries.is_locked()
        assert await salaries.submit("owner456")

    async def test_custom_limits(self, controller: AccessController, clock: FakeClock) -> None:
        controller.update_config(resource_access={"reports": AccessTier.ELEVATED2})
        guard = AccessGuard(
            controller, "reports", max_attempts=5, lockout_seconds=60, verification_delay=0, clock=clock
        )
        guard.evaluate()
        for _ in range(4):
            await guard.submit("wrong")
        assert not guard.is_locked()
        assert guard.message == "Incorrect password. Attempt 4 of 5."

        outcome = await guard.submit("wrong")
        assert outcome.locked_for == 60
        assert guard.is_locked()

    async def test_retarget_restarts_counter(
        self, reports_guard: AccessGuard, controller: AccessController
    ) -> None:
        reports_guard.evaluate()
        await reports_guard.submit("wrong")
        await reports_guard.submit("wrong")
        assert reports_guard.attempts == 2

        controller.update_config(resource_access={"reports": AccessTier.ELEVATED3})
        assert reports_guard.evaluate() is False
        assert reports_guard.target_tier is AccessTier.ELEVATED3
        assert reports_guard.attempts == 0
        assert reports_guard.message is None

        outcome = await reports_guard.submit("wrong")
        assert outcome.attempts == 1
        assert outcome.locked_for == 0
        assert not reports_guard.is_locked()
        assert reports_guard.message == "Incorrect password. Attempt 1 of 3."

    async def test_retarget_keeps_running_lockout(
        self, reports_guard: AccessGuard, controller: AccessController
    ) -> None:
        reports_guard.evaluate()
        for _ in range(3):
            await reports_guard.submit("wrong")

        controller.update_config(resource_access={"reports": AccessTier.ELEVATED3})
        reports_guard.evaluate()

        assert reports_guard.target_tier is AccessTier.ELEVATED3
        assert reports_guard.is_locked()
        outcome = await reports_guard.submit("super789")
        assert outcome.error is AccessError.LOCKED_OUT
        assert controller.current_tier is AccessTier.BASE
