"""Namespaced TTL cache over the shared offline cache blob."""

import logging
import time
from typing import Any, Callable, Optional

from config.exceptions import InvalidConfigError
from models.cache_entry import CacheEntry, CacheInfo
from models.enums import ConnectivityEvent, NotificationSeverity
from resilience.connectivity import ConnectivityMonitor
from resilience.notifications import Notification, NotificationSink
from storage.cache_store import CacheStore

logger = logging.getLogger(__name__)

DEFAULT_TTL_MS = 1000 * 60 * 5

Clock = Callable[[], int]


def now_ms() -> int:
    """Current time in epoch milliseconds."""
    return int(time.time() * 1000)


class OfflineCache:
    """Cache handle for one key inside the shared blob, plus connectivity state.

    Caching is best-effort: no method raises on storage failures. Expired
    entries are evicted lazily when read through ``get_cached_data``.
    """

    def __init__(
        self,
        cache_key: str,
        store: CacheStore,
        connectivity: ConnectivityMonitor,
        ttl_ms: int = DEFAULT_TTL_MS,
        enable_notifications: bool = True,
        notifier: Optional[NotificationSink] = None,
        clock: Optional[Clock] = None,
    ):
        if not cache_key:
            raise InvalidConfigError("cache_key must not be empty")
        if ttl_ms <= 0:
            raise InvalidConfigError("ttl_ms must be positive", {"ttl_ms": ttl_ms})
        self.cache_key = cache_key
        self.store = store
        self.connectivity = connectivity
        self.ttl_ms = ttl_ms
        self.enable_notifications = enable_notifications
        self.notifier = notifier
        self._clock = clock or now_ms
        self._is_online = connectivity.is_online
        self._unsubscribe: Optional[Callable[[], None]] = connectivity.subscribe(
            self._handle_connectivity
        )

    # ---- Connectivity ----

    @property
    def is_online(self) -> bool:
        return self._is_online

    @property
    def is_offline(self) -> bool:
        return not self._is_online

    def _handle_connectivity(self, event: ConnectivityEvent) -> None:
        if event == ConnectivityEvent.ONLINE:
            self._is_online = True
            self._notify(Notification(
                title="Back online",
                description="Your connection has been restored",
            ))
        else:
            self._is_online = False
            self._notify(Notification(
                title="You're offline",
                description="Some features may not be available",
                severity=NotificationSeverity.WARNING,
            ))

    def _notify(self, notification: Notification) -> None:
        if self.enable_notifications and self.notifier is not None:
            self.notifier.notify(notification)

    def close(self) -> None:
        """Release the connectivity subscription."""
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def __enter__(self) -> "OfflineCache":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # ---- Cache operations ----

    def cache_data(self, data: Any, custom_ttl_ms: Optional[int] = None) -> bool:
        """Write ``data`` under this handle's key.

        Returns:
            False if the write was skipped because the store failed.
        """
        entry = CacheEntry(
            data=data,
            timestamp=self._clock(),
            ttl=custom_ttl_ms if custom_ttl_ms is not None else self.ttl_ms,
        )
        with self.store.lock:
            blob = self.store.load()
            blob[self.cache_key] = entry.to_dict()
            saved = self.store.save(blob)
        if not saved:
            logger.warning("Failed to cache data for '%s'", self.cache_key)
        return saved

    def get_cached_data(self) -> Any:
        """Return the cached payload, or None if absent or expired."""
        with self.store.lock:
            blob = self.store.load()
            raw = blob.get(self.cache_key)
            if raw is None:
                return None

            entry = CacheEntry.from_dict(raw)
            if entry is None:
                logger.warning("Dropping malformed cache entry '%s'", self.cache_key)
                del blob[self.cache_key]
                self.store.save(blob)
                return None

            if entry.is_expired(self._clock(), self.ttl_ms):
                logger.debug("Cache entry '%s' expired, evicting", self.cache_key)
                del blob[self.cache_key]
                self.store.save(blob)
                return None

        return entry.data

    def clear_cache(self) -> None:
        """Remove this handle's entry; other keys are untouched."""
        with self.store.lock:
            blob = self.store.load()
            if self.cache_key in blob:
                del blob[self.cache_key]
                self.store.save(blob)

    def clear_all_cache(self) -> None:
        """Delete the whole blob, for every key."""
        with self.store.lock:
            self.store.clear()

    def get_cache_info(self) -> Optional[CacheInfo]:
        """Diagnostic view of this handle's entry. Never evicts."""
        with self.store.lock:
            raw = self.store.load().get(self.cache_key)
        entry = CacheEntry.from_dict(raw)
        if entry is None:
            return None
        age = entry.age(self._clock())
        remaining = entry.effective_ttl(self.ttl_ms) - age
        return CacheInfo(
            age=age,
            remaining=max(0, remaining),
            is_expired=remaining < 0,
            timestamp=entry.timestamp,
        )


def cached_keys(store: CacheStore) -> list[str]:
    """Keys currently present in the shared blob, expired or not."""
    return sorted(store.load())
