"""Cache coordinator: serve from the store or refresh from upstream."""

import logging
from datetime import datetime, timezone
from typing import Any, Callable

from fxproxy.errors import FetchError, RefreshError, StoreError
from fxproxy.models.resource import CachedResource
from fxproxy.services.cache import CacheStore
from fxproxy.services.fetcher import RemoteFetcher
from fxproxy.services.staleness import StalenessPolicy

logger = logging.getLogger(__name__)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CacheCoordinator:
    """Serves cached upstream JSON, refreshing it when the policy says so.

    A failed refresh raises RefreshError even when an older value is still
    in the store; stale data is never served as a fallback. Concurrent
    requests that all see an expired entry each fetch, and the last write
    wins. No store lock is held while the upstream call is in flight.
    """

    def __init__(
        self,
        store: CacheStore,
        policy: StalenessPolicy,
        fetcher: RemoteFetcher,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.store = store
        self.policy = policy
        self.fetcher = fetcher
        self._clock = clock

    def get(self, resource: CachedResource) -> Any:
        try:
            entry = self.store.get(resource.key)
        except StoreError as e:
            logger.error(f"Cache read for {resource.key} failed: {e}")
            raise RefreshError(resource.key) from e

        if entry is not None and self.policy.is_valid(entry.fetched_at, self._clock()):
            logger.debug(f"Cache hit for {resource.key}")
            return entry.value

        return self.refresh(resource)

    def refresh(self, resource: CachedResource) -> Any:
        """Fetch ``resource`` from upstream and replace its cache entry."""
        try:
            value = self.fetcher.fetch(resource.source_url)
        except FetchError as e:
            logger.error(f"Failed to refresh {resource.key}: {e}")
            raise RefreshError(resource.key) from e

        try:
            self.store.put(resource.key, value, self._clock())
        except StoreError as e:
            logger.error(f"Failed to store {resource.key}: {e}")
            raise RefreshError(resource.key) from e

        logger.info(f"Refreshed {resource.key} from upstream")
        return value
