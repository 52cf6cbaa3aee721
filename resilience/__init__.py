"""Retry executor, offline cache and offline-aware fetching."""

from resilience.connectivity import ConnectivityMonitor
from resilience.notifications import (
    Notification,
    NotificationSink,
    LoggingNotifier,
    RichNotifier,
)
from resilience.retry import RetryExecutor, RetryOptions, ManualRetry
from resilience.offline_cache import OfflineCache, DEFAULT_TTL_MS, cached_keys, now_ms
from resilience.offline_query import OfflineQuery
from resilience.fetcher import OfflineAwareFetcher, FetchResult, build_cache_key

__all__ = [
    "ConnectivityMonitor",
    "Notification",
    "NotificationSink",
    "LoggingNotifier",
    "RichNotifier",
    "RetryExecutor",
    "RetryOptions",
    "ManualRetry",
    "OfflineCache",
    "DEFAULT_TTL_MS",
    "cached_keys",
    "now_ms",
    "OfflineQuery",
    "OfflineAwareFetcher",
    "FetchResult",
    "build_cache_key",
]
