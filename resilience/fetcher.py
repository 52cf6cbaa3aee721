"""Composition of RetryExecutor and OfflineCache for remote reads."""

import logging
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Any, Awaitable, Callable, Generic, Optional, TypeVar

from config.exceptions import OfflineNoCacheError, RetryCancelledError
from resilience.offline_cache import OfflineCache
from resilience.retry import RetryExecutor

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _format_param(value: Any) -> str:
    if value is None:
        return "none"
    if isinstance(value, Enum):
        return str(value.value)
    if isinstance(value, date):
        return value.isoformat()
    return str(value)


def build_cache_key(resource: str, *params: Any) -> str:
    """Deterministic cache key encoding every identity parameter.

    >>> build_cache_key("detailed_stats", "week", "2024-01-01", "2024-01-07")
    'detailed_stats_week_2024-01-01_2024-01-07'
    """
    return "_".join([resource, *(_format_param(p) for p in params)])


@dataclass
class FetchResult(Generic[T]):
    data: T
    from_cache: bool = False


class OfflineAwareFetcher:
    """Retried network read whose successes are cached and whose failures
    fall back to the cached value when one is still valid."""

    def __init__(self, executor: RetryExecutor, cache: OfflineCache):
        self.executor = executor
        self.cache = cache

    @property
    def cache_key(self) -> str:
        return self.cache.cache_key

    def placeholder(self) -> Optional[Any]:
        """Cached value to show before the network answers."""
        return self.cache.get_cached_data()

    async def fetch(
        self,
        operation: Callable[[], Awaitable[T]],
        cancel_event=None,
    ) -> FetchResult[T]:
        """Run ``operation`` through the executor with cache write-through.

        Raises:
            OfflineNoCacheError: Offline and nothing valid is cached.
            Exception: The operation's last error when no cache is available.
        """
        if self.cache.is_offline:
            cached = self.cache.get_cached_data()
            if cached is not None:
                return FetchResult(cached, from_cache=True)
            raise OfflineNoCacheError(self.cache_key)

        async def attempt() -> T:
            result = await operation()
            self.cache.cache_data(result)
            return result

        try:
            data = await self.executor.execute_with_retry(attempt, cancel_event=cancel_event)
        except RetryCancelledError:
            raise
        except Exception as e:
            cached = self.cache.get_cached_data()
            if cached is None:
                raise
            logger.warning("Fetch for '%s' failed (%s), serving cached data", self.cache_key, e)
            return FetchResult(cached, from_cache=True)
        return FetchResult(data)
