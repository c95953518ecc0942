"""
Shared test configuration and fixtures.

Builds the access-control stack on a temporary directory (durable config)
and process memory (sessions), with a collecting notifier so tests can
assert on user-facing messages.
"""

import tempfile
from collections.abc import Iterator
from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest

from clinic_access.access import AccessController
from clinic_access.notifications import CollectingNotifier
from clinic_access.storage import ConfigStore, FileStorage, MemoryStorage, SessionStore

USER_KEY = "user-123"


class FakeClock:
    """Monotonic clock that only moves when told to."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeUtcClock:
    """Wall clock returning a settable UTC datetime."""

    def __init__(self, start: datetime | None = None):
        self.now = start or datetime(2026, 1, 15, 9, 0, tzinfo=UTC)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def temp_dir() -> Iterator[Path]:
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def durable_storage(temp_dir: Path) -> FileStorage:
    return FileStorage(temp_dir / "data")


@pytest.fixture
def volatile_storage() -> MemoryStorage:
    return MemoryStorage()


@pytest.fixture
def utc_clock() -> FakeUtcClock:
    return FakeUtcClock()


@pytest.fixture
def config_store(durable_storage: FileStorage) -> ConfigStore:
    return ConfigStore(durable_storage)


@pytest.fixture
def session_store(volatile_storage: MemoryStorage, utc_clock: FakeUtcClock) -> SessionStore:
    return SessionStore(volatile_storage, clock=utc_clock)


@pytest.fixture
def notifier() -> CollectingNotifier:
    return CollectingNotifier()


@pytest.fixture
def controller(
    config_store: ConfigStore, session_store: SessionStore, notifier: CollectingNotifier
) -> AccessController:
    """An initialized controller for USER_KEY on the default config."""
    controller = AccessController(config_store, session_store, notifier=notifier, user_key=USER_KEY)
    controller.initialize()
    return controller
