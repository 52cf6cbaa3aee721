"""Tests for OfflineQuery fetch-with-fallback behavior."""

import asyncio
from unittest.mock import AsyncMock

import pytest

from config.exceptions import OfflineNoCacheError


@pytest.fixture
def make_query(make_cache):
    from resilience.offline_query import OfflineQuery

    queries = []

    def _make(query_fn, cache=None, **kwargs):
        query = OfflineQuery(query_fn, cache or make_cache(), **kwargs)
        queries.append(query)
        return query

    yield _make
    for query in queries:
        query.close()


class TestFetchOnline:
    @pytest.mark.asyncio
    async def test_success_stores_and_caches(self, make_query, make_cache):
        cache = make_cache()
        query_fn = AsyncMock(return_value={"words": 1200})
        query = make_query(query_fn, cache)

        result = await query.fetch_data()

        assert result == {"words": 1200}
        assert query.data == {"words": 1200}
        assert query.error is None
        assert query.is_loading is False
        assert query.is_using_cache is False
        assert cache.get_cached_data() == {"words": 1200}

    @pytest.mark.asyncio
    async def test_failure_online_sets_error_and_raises(self, make_query, make_cache):
        cache = make_cache()
        cache.cache_data("stale")
        query = make_query(AsyncMock(side_effect=RuntimeError("server down")), cache)

        with pytest.raises(RuntimeError, match="server down"):
            await query.fetch_data()

        assert isinstance(query.error, RuntimeError)
        assert query.is_loading is False

    @pytest.mark.asyncio
    async def test_loading_flag_during_fetch(self, make_query):
        observed = []
        query = None

        async def query_fn():
            observed.append(query.is_loading)
            return "x"

        query = make_query(query_fn)
        await query.fetch_data()
        assert observed == [True]
        assert query.is_loading is False

    @pytest.mark.asyncio
    async def test_error_cleared_on_next_success(self, make_query):
        query_fn = AsyncMock(side_effect=[RuntimeError("once"), "second"])
        query = make_query(query_fn)

        with pytest.raises(RuntimeError):
            await query.fetch_data()
        assert await query.refetch() == "second"
        assert query.error is None


class TestFetchOffline:
    @pytest.mark.asyncio
    async def test_offline_serves_cache_without_network(self, make_query, make_cache, connectivity):
        cache = make_cache()
        cache.cache_data(["chapter 1"])
        query_fn = AsyncMock(return_value=["fresh"])
        query = make_query(query_fn, cache)
        connectivity.set_online(False)

        result = await query.fetch_data()

        assert result == ["chapter 1"]
        assert query.data == ["chapter 1"]
        assert query.is_using_cache is True
        query_fn.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_offline_without_cache_raises(self, make_query, connectivity):
        query_fn = AsyncMock(return_value="fresh")
        query = make_query(query_fn)
        connectivity.set_online(False)

        with pytest.raises(OfflineNoCacheError, match="no cached data"):
            await query.fetch_data()

        query_fn.assert_not_awaited()
        assert isinstance(query.error, OfflineNoCacheError)
        assert query.is_loading is False

    @pytest.mark.asyncio
    async def test_use_cache_flag_still_queries_while_offline(self, make_query, make_cache, connectivity):
        cache = make_cache()
        query_fn = AsyncMock(return_value="from network")
        query = make_query(query_fn, cache)
        connectivity.set_online(False)

        assert await query.fetch_data(use_cache=True) == "from network"
        query_fn.assert_awaited_once()
        # Not written back while offline
        assert cache.get_cached_data() is None

    @pytest.mark.asyncio
    async def test_failure_after_going_offline_falls_back(self, make_query, make_cache, connectivity):
        cache = make_cache()
        cache.cache_data("cached copy")

        async def query_fn():
            connectivity.set_online(False)
            raise ConnectionError("network vanished")

        query = make_query(query_fn, cache)
        assert await query.fetch_data() == "cached copy"
        assert query.error is None
        assert query.is_loading is False

    @pytest.mark.asyncio
    async def test_failure_after_going_offline_without_cache(self, make_query, connectivity):
        async def query_fn():
            connectivity.set_online(False)
            raise ConnectionError("network vanished")

        query = make_query(query_fn)
        with pytest.raises(ConnectionError):
            await query.fetch_data()
        assert isinstance(query.error, ConnectionError)
        assert query.is_loading is False


class TestStart:
    @pytest.mark.asyncio
    async def test_adopts_valid_cache_without_fetching(self, make_query, make_cache):
        cache = make_cache()
        cache.cache_data("cached")
        query_fn = AsyncMock(return_value="fresh")
        query = make_query(query_fn, cache)

        assert await query.start() == "cached"
        assert query.is_using_cache is True
        query_fn.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_fetches_when_no_cache_and_online(self, make_query):
        query_fn = AsyncMock(return_value="fresh")
        query = make_query(query_fn)

        assert await query.start() == "fresh"
        query_fn.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_does_nothing_offline_without_cache(self, make_query, connectivity):
        connectivity.set_online(False)
        query_fn = AsyncMock(return_value="fresh")
        query = make_query(query_fn)

        assert await query.start() is None
        query_fn.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_fallback_data_skips_initial_load(self, make_query):
        query_fn = AsyncMock(return_value="fresh")
        query = make_query(query_fn, fallback_data={"placeholder": True})

        assert await query.start() == {"placeholder": True}
        query_fn.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_initial_failure_recorded_not_raised(self, make_query):
        query = make_query(AsyncMock(side_effect=RuntimeError("500")))
        assert await query.start() is None
        assert isinstance(query.error, RuntimeError)


class TestReconnect:
    @pytest.mark.asyncio
    async def test_cached_then_single_refetch_on_reconnect(self, make_query, make_cache, connectivity):
        cache = make_cache()
        cache.cache_data("yesterday")
        query_fn = AsyncMock(return_value="today")
        query = make_query(query_fn, cache, refetch_on_reconnect=True)

        connectivity.set_online(False)
        assert await query.fetch_data() == "yesterday"
        query_fn.assert_not_awaited()

        connectivity.set_online(True)
        assert query.reconnect_task is not None
        await query.reconnect_task

        assert query.data == "today"
        assert query.is_using_cache is False
        query_fn.assert_awaited_once()

        # Fresh data held: later reconnects do not refetch
        connectivity.set_online(False)
        connectivity.set_online(True)
        await asyncio.sleep(0)
        query_fn.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_refetch_when_no_data_held(self, make_query, connectivity):
        connectivity.set_online(False)
        query_fn = AsyncMock(return_value="now online")
        query = make_query(query_fn)

        connectivity.set_online(True)
        await query.reconnect_task
        assert query.data == "now online"

    @pytest.mark.asyncio
    async def test_disabled_refetch(self, make_query, connectivity):
        connectivity.set_online(False)
        query_fn = AsyncMock(return_value="x")
        query = make_query(query_fn, refetch_on_reconnect=False)

        connectivity.set_online(True)
        assert query.reconnect_task is None
        query_fn.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_refetch_failure_is_recorded(self, make_query, connectivity):
        connectivity.set_online(False)
        query = make_query(AsyncMock(side_effect=RuntimeError("still failing")))

        connectivity.set_online(True)
        await query.reconnect_task
        assert isinstance(query.error, RuntimeError)

    @pytest.mark.asyncio
    async def test_no_refetch_while_loading(self, make_query, connectivity):
        gate = asyncio.Event()
        calls = 0

        async def query_fn():
            nonlocal calls
            calls += 1
            await gate.wait()
            return "done"

        query = make_query(query_fn)
        in_flight = asyncio.create_task(query.fetch_data())
        await asyncio.sleep(0)
        assert query.is_loading is True

        connectivity.set_online(False)
        connectivity.set_online(True)
        assert query.reconnect_task is None

        gate.set()
        await in_flight
        assert calls == 1

    def test_reconnect_without_event_loop_is_ignored(self, make_query, connectivity):
        connectivity.set_online(False)
        query = make_query(AsyncMock(return_value="x"))
        connectivity.set_online(True)
        assert query.reconnect_task is None

    @pytest.mark.asyncio
    async def test_close_unsubscribes(self, make_query, connectivity):
        query = make_query(AsyncMock(return_value="x"))
        count = connectivity.listener_count
        query.close()
        assert connectivity.listener_count == count - 1

        connectivity.set_online(False)
        connectivity.set_online(True)
        assert query.reconnect_task is None
