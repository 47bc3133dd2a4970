"""Tests for the cache coordinator."""

import threading
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

import httpx
import pytest

from fxproxy.errors import RefreshError, StoreError, TransportError
from fxproxy.models.resource import CachedResource
from fxproxy.services.cache import FileCacheStore, MemoryCacheStore
from fxproxy.services.coordinator import CacheCoordinator
from fxproxy.services.fetcher import RemoteFetcher
from fxproxy.services.staleness import AlignedTTLPolicy, RollingTTLPolicy

T0 = datetime(2026, 2, 14, 10, 30, tzinfo=timezone.utc)
RATES = {"base": "USD", "rates": {"EUR": 0.92, "JPY": 150.1}}
LATEST = CachedResource(
    key="latest",
    source_url="https://upstream.test/latest.json?app_id=x",
    error_message="Failed to fetch exchange rates",
)


class FakeClock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock():
    return FakeClock(T0)


@pytest.fixture
def fetcher():
    mock = MagicMock(spec=RemoteFetcher)
    mock.fetch.return_value = RATES
    return mock


@pytest.fixture
def store():
    return MemoryCacheStore()


@pytest.fixture
def coordinator(store, fetcher, clock):
    return CacheCoordinator(store, RollingTTLPolicy(timedelta(hours=1)), fetcher, clock=clock)


class TestGet:
    def test_miss_fetches_once_and_stores(self, coordinator, store, fetcher, clock):
        def fetch_takes_time(url):
            clock.advance(seconds=2)
            return RATES

        fetcher.fetch.side_effect = fetch_takes_time

        assert coordinator.get(LATEST) == RATES
        fetcher.fetch.assert_called_once_with(LATEST.source_url)
        entry = store.get("latest")
        assert entry.value == RATES
        assert entry.fetched_at == T0 + timedelta(seconds=2)

    def test_hit_avoids_network(self, coordinator, store, fetcher, clock):
        cached = {"rates": {"EUR": 0.9}}
        store.put("latest", cached, T0)
        clock.advance(minutes=30)

        assert coordinator.get(LATEST) == cached
        fetcher.fetch.assert_not_called()

    def test_expired_entry_is_refreshed(self, coordinator, store, fetcher, clock):
        store.put("latest", {"old": True}, T0)
        clock.advance(hours=1, seconds=1)

        assert coordinator.get(LATEST) == RATES
        fetcher.fetch.assert_called_once()
        assert store.get("latest").fetched_at == clock.now

    def test_failure_does_not_serve_stale(self, coordinator, store, fetcher, clock):
        store.put("latest", {"old": True}, T0)
        clock.advance(hours=2)
        fetcher.fetch.side_effect = TransportError("connection refused", LATEST.source_url)

        with pytest.raises(RefreshError) as exc_info:
            coordinator.get(LATEST)
        assert exc_info.value.key == "latest"
        assert "connection refused" not in str(exc_info.value)
        entry = store.get("latest")
        assert entry.value == {"old": True}
        assert entry.fetched_at == T0

    def test_failure_on_first_fetch(self, coordinator, store, fetcher):
        fetcher.fetch.side_effect = TransportError("dns", LATEST.source_url)
        with pytest.raises(RefreshError):
            coordinator.get(LATEST)
        assert store.get("latest") is None

    def test_store_write_error_is_refresh_error(self, fetcher, clock):
        store = MagicMock()
        store.get.return_value = None
        store.put.side_effect = StoreError("disk full")
        coordinator = CacheCoordinator(store, RollingTTLPolicy(), fetcher, clock=clock)
        with pytest.raises(RefreshError):
            coordinator.get(LATEST)

    def test_store_read_error_is_refresh_error(self, fetcher, clock):
        store = MagicMock()
        store.get.side_effect = StoreError("permission denied")
        coordinator = CacheCoordinator(store, RollingTTLPolicy(), fetcher, clock=clock)
        with pytest.raises(RefreshError):
            coordinator.get(LATEST)
        fetcher.fetch.assert_not_called()


@pytest.mark.parametrize("status", [404, 503])
def test_upstream_error_status_leaves_cache_untouched(store, clock, status):
    transport = httpx.MockTransport(lambda request: httpx.Response(status))
    fetcher = RemoteFetcher(client=httpx.Client(transport=transport))
    coordinator = CacheCoordinator(store, RollingTTLPolicy(), fetcher, clock=clock)

    with pytest.raises(RefreshError):
        coordinator.get(LATEST)
    assert store.get("latest") is None


def test_concurrent_readers_share_valid_value(coordinator, store, fetcher):
    store.put("latest", RATES, T0)
    barrier = threading.Barrier(16)

    def read():
        barrier.wait()
        return coordinator.get(LATEST)

    with ThreadPoolExecutor(max_workers=16) as pool:
        results = list(pool.map(lambda _: read(), range(16)))

    assert all(r == RATES for r in results)
    fetcher.fetch.assert_not_called()


def test_fetch_runs_without_store_lock(store, clock):
    """A slow upstream call must not block readers of other keys."""
    release = threading.Event()
    store.put("currencies", {"USD": "US Dollar"}, T0)

    class SlowFetcher:
        def fetch(self, url):
            release.wait(timeout=5)
            return RATES

    coordinator = CacheCoordinator(store, RollingTTLPolicy(), SlowFetcher(), clock=clock)
    currencies = CachedResource(key="currencies", source_url="https://upstream.test/c.json")

    with ThreadPoolExecutor(max_workers=1) as pool:
        pending = pool.submit(coordinator.get, LATEST)
        assert coordinator.get(currencies) == {"USD": "US Dollar"}
        release.set()
        assert pending.result(timeout=5) == RATES


def test_aligned_policy_refreshes_after_reset(store, fetcher):
    clock = FakeClock(datetime(2026, 2, 14, 10, 58, tzinfo=timezone.utc))
    coordinator = CacheCoordinator(store, AlignedTTLPolicy(5), fetcher, clock=clock)

    coordinator.get(LATEST)
    clock.now = datetime(2026, 2, 14, 11, 4, tzinfo=timezone.utc)
    coordinator.get(LATEST)
    assert fetcher.fetch.call_count == 1

    clock.now = datetime(2026, 2, 14, 11, 5, 1, tzinfo=timezone.utc)
    coordinator.get(LATEST)
    assert fetcher.fetch.call_count == 2


def test_file_store_backend(tmp_path, fetcher, clock):
    coordinator = CacheCoordinator(
        FileCacheStore(tmp_path), RollingTTLPolicy(), fetcher, clock=clock
    )
    assert coordinator.get(LATEST) == RATES
    clock.advance(minutes=10)
    assert coordinator.get(LATEST) == RATES
    fetcher.fetch.assert_called_once()
    assert (tmp_path / "latest.json").exists()
