"""Offline-aware query: network fetch with cached fallback and reconnect refetch."""

import asyncio
import logging
from typing import Awaitable, Callable, Generic, Optional, TypeVar

from config.exceptions import OfflineNoCacheError
from models.enums import ConnectivityEvent
from resilience.offline_cache import OfflineCache

logger = logging.getLogger(__name__)

T = TypeVar("T")


class OfflineQuery(Generic[T]):
    """Holds the last known value of one remote resource.

    State mirrors what a view needs: ``data``, ``is_loading``, ``error`` and
    whether the current ``data`` came from the cache.

    Example:
        >>> query = OfflineQuery(client.get_profile, cache)
        >>> await query.start()
        >>> query.data
    """

    def __init__(
        self,
        query_fn: Callable[[], Awaitable[T]],
        cache: OfflineCache,
        fallback_data: Optional[T] = None,
        refetch_on_reconnect: bool = True,
    ):
        self.query_fn = query_fn
        self.cache = cache
        self.refetch_on_reconnect = refetch_on_reconnect
        self.data: Optional[T] = fallback_data
        self.is_loading = False
        self.error: Optional[Exception] = None
        self.is_using_cache = False
        self._reconnect_task: Optional[asyncio.Task] = None
        self._unsubscribe: Optional[Callable[[], None]] = cache.connectivity.subscribe(
            self._handle_connectivity
        )

    @property
    def is_online(self) -> bool:
        return self.cache.is_online

    @property
    def reconnect_task(self) -> Optional[asyncio.Task]:
        """The refetch scheduled by the last reconnect, if any."""
        return self._reconnect_task

    async def fetch_data(self, use_cache: bool = False) -> T:
        """Fetch the resource, falling back to the cache while offline.

        Raises:
            OfflineNoCacheError: Offline and nothing valid is cached.
            Exception: Whatever ``query_fn`` raised, when no fallback applies.
        """
        if not self.cache.is_online and not use_cache:
            return self._serve_cached()

        self.is_loading = True
        self.error = None
        try:
            result = await self.query_fn()
        except Exception as e:
            if not self.cache.is_online:
                cached = self.cache.get_cached_data()
                if cached is not None:
                    logger.info("Query '%s' failed offline, serving cache", self.cache.cache_key)
                    self._adopt_cached(cached)
                    return cached
            self.error = e
            raise
        finally:
            self.is_loading = False

        self.data = result
        self.is_using_cache = False
        if self.cache.is_online:
            self.cache.cache_data(result)
        return result

    async def refetch(self) -> T:
        return await self.fetch_data(use_cache=False)

    async def start(self) -> Optional[T]:
        """Initial load: adopt a valid cached value, else fetch if online.

        A failed initial fetch is recorded in ``error`` rather than raised.
        """
        if self.data is not None or self.is_loading:
            return self.data

        cached = self.cache.get_cached_data()
        if cached is not None:
            self._adopt_cached(cached)
        elif self.cache.is_online:
            try:
                await self.fetch_data()
            except Exception as e:
                logger.warning("Initial fetch for '%s' failed: %s", self.cache.cache_key, e)
        return self.data

    def close(self) -> None:
        """Release the connectivity subscription and drop a pending refetch."""
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        if self._reconnect_task is not None and not self._reconnect_task.done():
            self._reconnect_task.cancel()

    def _serve_cached(self) -> T:
        cached = self.cache.get_cached_data()
        if cached is not None:
            self._adopt_cached(cached)
            return cached
        error = OfflineNoCacheError(self.cache.cache_key)
        self.error = error
        raise error

    def _adopt_cached(self, cached: T) -> None:
        self.data = cached
        self.is_using_cache = True

    def _needs_fresh_data(self) -> bool:
        return self.data is None or self.is_using_cache

    def _handle_connectivity(self, event: ConnectivityEvent) -> None:
        if event != ConnectivityEvent.ONLINE or not self.refetch_on_reconnect:
            return
        if not self._needs_fresh_data() or self.is_loading:
            return
        if self._reconnect_task is not None and not self._reconnect_task.done():
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug("No running event loop, skipping reconnect refetch")
            return
        self._reconnect_task = loop.create_task(self._refetch_after_reconnect())

    async def _refetch_after_reconnect(self) -> None:
        logger.info("Back online, refetching '%s'", self.cache.cache_key)
        try:
            await self.fetch_data()
        except Exception as e:
            logger.warning("Refetch after reconnect failed for '%s': %s", self.cache.cache_key, e)
