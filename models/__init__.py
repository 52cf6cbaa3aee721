"""Data models: retry state, cache entries and plan usage."""

from models.retry_state import RetryState
from models.cache_entry import CacheEntry, CacheInfo
from models.plan_usage import PlanUsage, UsageMetric
from models.enums import (
    NotificationSeverity,
    ConnectivityEvent,
    StatsPeriod,
    CacheBackend,
)

__all__ = [
    "RetryState",
    "CacheEntry",
    "CacheInfo",
    "PlanUsage",
    "UsageMetric",
    "NotificationSeverity",
    "ConnectivityEvent",
    "StatsPeriod",
    "CacheBackend",
]
