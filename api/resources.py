"""Offline-aware accessors for the SagaScript resources read by the client."""

import logging
from dataclasses import dataclass
from typing import Any, Optional

from config.settings import Settings
from api.api_client import SagaScriptClient
from models.enums import StatsPeriod
from models.plan_usage import PlanUsage
from resilience.connectivity import ConnectivityMonitor
from resilience.fetcher import FetchResult, OfflineAwareFetcher, build_cache_key
from resilience.notifications import NotificationSink
from resilience.offline_cache import Clock, OfflineCache
from resilience.retry import RetryExecutor, RetryOptions, Sleep
from storage.cache_store import CacheStore

logger = logging.getLogger(__name__)

_MINUTE_MS = 1000 * 60


@dataclass(frozen=True)
class ResourcePolicy:
    """Cache key prefix and TTL (ms) for one logical resource."""
    key: str
    ttl_ms: int


PROFILE = ResourcePolicy("profile_data", 10 * _MINUTE_MS)
RECENT_ACTIVITY = ResourcePolicy("recent_activity", 5 * _MINUTE_MS)
PLAN_USAGE = ResourcePolicy("plan_usage", 10 * _MINUTE_MS)
SUBSCRIPTION = ResourcePolicy("subscription", 30 * _MINUTE_MS)
SUBSCRIPTION_PLAN = ResourcePolicy("subscription_plan", 60 * _MINUTE_MS)
USER_STATS = ResourcePolicy("user_stats", 5 * _MINUTE_MS)
WRITING_STATS = ResourcePolicy("writing_stats", 5 * _MINUTE_MS)
DETAILED_STATS = ResourcePolicy("detailed_stats", 5 * _MINUTE_MS)


class SagaScriptResources:
    """One OfflineAwareFetcher per distinct resource identity.

    Fetchers are created on first use and reused, so each resource keeps its
    own retry state and cache handle.
    """

    def __init__(
        self,
        client: SagaScriptClient,
        store: CacheStore,
        connectivity: ConnectivityMonitor,
        settings: Optional[Settings] = None,
        notifier: Optional[NotificationSink] = None,
        sleep: Optional[Sleep] = None,
        clock: Optional[Clock] = None,
    ):
        self.client = client
        self.store = store
        self.connectivity = connectivity
        self.settings = settings or client.settings
        self.notifier = notifier
        self._sleep = sleep
        self._clock = clock
        self._fetchers: dict[str, OfflineAwareFetcher] = {}

    def fetcher(self, policy: ResourcePolicy, *params: Any) -> OfflineAwareFetcher:
        key = build_cache_key(policy.key, *params) if params else policy.key
        fetcher = self._fetchers.get(key)
        if fetcher is None:
            executor = RetryExecutor(
                RetryOptions.from_settings(self.settings),
                notifier=self.notifier,
                sleep=self._sleep,
            )
            # Connectivity notices are left to the owning view, one per app
            cache = OfflineCache(
                key,
                self.store,
                self.connectivity,
                ttl_ms=policy.ttl_ms,
                enable_notifications=False,
                clock=self._clock,
            )
            fetcher = OfflineAwareFetcher(executor, cache)
            self._fetchers[key] = fetcher
        return fetcher

    def close(self) -> None:
        for fetcher in self._fetchers.values():
            fetcher.cache.close()
        self._fetchers.clear()

    # ---- Profile ----

    async def profile(self) -> FetchResult[dict]:
        return await self.fetcher(PROFILE).fetch(self.client.get_profile)

    async def recent_activity(self) -> FetchResult[list]:
        return await self.fetcher(RECENT_ACTIVITY).fetch(self.client.get_recent_activity)

    # ---- Subscription ----

    async def plan_usage(self) -> FetchResult[PlanUsage]:
        result = await self.fetcher(PLAN_USAGE).fetch(self.client.get_plan_usage)
        return FetchResult(PlanUsage.from_dict(result.data), result.from_cache)

    async def subscription(self) -> FetchResult[dict]:
        return await self.fetcher(SUBSCRIPTION).fetch(self.client.get_subscription)

    async def subscription_plan(self, plan_id: int | str) -> FetchResult[dict]:
        return await self.fetcher(SUBSCRIPTION_PLAN, plan_id).fetch(
            lambda: self.client.get_subscription_plan(plan_id)
        )

    # ---- Statistics ----

    async def user_stats(self) -> FetchResult[dict]:
        return await self.fetcher(USER_STATS).fetch(self.client.get_user_stats)

    async def writing_stats(self, period: StatsPeriod = StatsPeriod.WEEK) -> FetchResult[list]:
        period = StatsPeriod(period)
        return await self.fetcher(WRITING_STATS, period).fetch(
            lambda: self.client.get_writing_stats(period.value)
        )

    async def detailed_stats(
        self,
        period: StatsPeriod,
        start_date: str,
        end_date: str,
    ) -> FetchResult[list]:
        period = StatsPeriod(period)
        return await self.fetcher(DETAILED_STATS, period, start_date, end_date).fetch(
            lambda: self.client.get_writing_stats(period.value, start_date, end_date)
        )
