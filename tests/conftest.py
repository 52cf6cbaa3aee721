"""Shared pytest fixtures for the sagascript test suite."""

import pytest


# ---------------------------------------------------------------------------
# Test doubles
# ---------------------------------------------------------------------------

class FakeClock:
    """Controllable epoch-millisecond clock."""

    def __init__(self, start: int = 1_700_000_000_000):
        self.now = start

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


class RecordingSleep:
    """Async sleep replacement that records requested delays without waiting."""

    def __init__(self):
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


class RecordingNotifier:
    """NotificationSink that keeps every notice."""

    def __init__(self):
        self.notifications = []

    def notify(self, notification) -> None:
        self.notifications.append(notification)

    @property
    def titles(self) -> list[str]:
        return [n.title for n in self.notifications]


class FlakyOperation:
    """Async operation failing ``failures`` times before returning ``result``."""

    def __init__(self, failures: int, result="ok", error_factory=None):
        self.failures = failures
        self.result = result
        self.calls = 0
        self._error_factory = error_factory or (lambda n: RuntimeError(f"failure {n}"))

    async def __call__(self):
        self.calls += 1
        if self.calls <= self.failures:
            raise self._error_factory(self.calls)
        return self.result


# ---------------------------------------------------------------------------
# Settings fixture
# ---------------------------------------------------------------------------

@pytest.fixture
def settings(tmp_path):
    """Return a Settings instance with all paths pointing to tmp_path."""
    from config.settings import Settings
    return Settings(
        _env_file=None,
        cache_store_path=tmp_path / "offline_cache.db",
        log_dir=tmp_path / "logs",
        retry_max_attempts=3,
        retry_delay=0.01,
        api_base_url="http://sagascript.test",
    )


# ---------------------------------------------------------------------------
# Storage and connectivity fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def kv_store():
    from storage.kv_store import MemoryKeyValueStore
    return MemoryKeyValueStore()


@pytest.fixture
def cache_store(kv_store):
    from storage.cache_store import CacheStore
    return CacheStore(kv_store)


@pytest.fixture
def connectivity():
    from resilience.connectivity import ConnectivityMonitor
    return ConnectivityMonitor(is_online=True)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def fake_sleep():
    return RecordingSleep()


@pytest.fixture
def make_cache(cache_store, connectivity, clock, notifier):
    """Factory for OfflineCache handles sharing one store, monitor and clock."""
    from resilience.offline_cache import OfflineCache

    handles = []

    def _make(cache_key="test_key", ttl_ms=5000, **kwargs):
        kwargs.setdefault("notifier", notifier)
        kwargs.setdefault("clock", clock)
        handle = OfflineCache(cache_key, cache_store, connectivity, ttl_ms=ttl_ms, **kwargs)
        handles.append(handle)
        return handle

    yield _make
    for handle in handles:
        handle.close()
