"""Background cache warm-up so the first request after expiry is not the one paying for it."""

import logging
from datetime import timezone

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger
from apscheduler.triggers.interval import IntervalTrigger

from fxproxy.errors import RefreshError
from fxproxy.models.resource import CachedResource
from fxproxy.services.coordinator import CacheCoordinator
from fxproxy.services.staleness import AlignedTTLPolicy

logger = logging.getLogger(__name__)

scheduler = AsyncIOScheduler()


def warm_cache(
    coordinator: CacheCoordinator,
    resources: dict[str, CachedResource],
    force: bool = False,
) -> int:
    """Run every resource through the coordinator. Returns how many succeeded.

    With ``force`` every resource is refetched; otherwise entries the policy
    still considers valid are left alone.
    """
    ok = 0
    for resource in resources.values():
        try:
            if force:
                coordinator.refresh(resource)
            else:
                coordinator.get(resource)
            ok += 1
        except RefreshError as e:
            logger.warning(f"Cache warm-up for {e.key} failed")
    logger.info(f"Cache warm-up: {ok}/{len(resources)} resources ready")
    return ok


def _job_for(coordinator: CacheCoordinator, ttl_seconds: int):
    """Return ``(trigger, force)`` for the coordinator's policy.

    An interval tick lands slightly before the entry it refreshed last time
    turns TTL-old (fetched_at is stamped after the upstream call), so the
    rolling job must refetch unconditionally.
    """
    policy = coordinator.policy
    if isinstance(policy, AlignedTTLPolicy):
        # one second past the reset point so the entry is already expired
        minute = int(policy.offset.total_seconds() // 60)
        return CronTrigger(minute=minute, second=1, timezone=timezone.utc), False
    return IntervalTrigger(seconds=ttl_seconds), True


def start_scheduler(
    coordinator: CacheCoordinator,
    resources: dict[str, CachedResource],
    ttl_seconds: int,
):
    """Start the background scheduler."""
    trigger, force = _job_for(coordinator, ttl_seconds)
    scheduler.add_job(
        warm_cache,
        trigger=trigger,
        args=[coordinator, resources, force],
        id="warm_cache",
        replace_existing=True,
    )
    scheduler.start()
    logger.info(f"Scheduler started, warming cache on {trigger}")


def stop_scheduler():
    """Stop the background scheduler."""
    if scheduler.running:
        scheduler.shutdown()
        logger.info("Scheduler stopped")
