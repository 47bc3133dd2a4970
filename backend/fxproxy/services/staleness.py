"""Staleness policies: decide whether a cached value may still be served."""

from datetime import datetime, timedelta
from typing import Protocol

from fxproxy.errors import ConfigError

ONE_HOUR = timedelta(hours=1)


class StalenessPolicy(Protocol):
    def is_valid(self, fetched_at: datetime | None, now: datetime) -> bool: ...


class RollingTTLPolicy:
    """Valid while younger than ``ttl``."""

    def __init__(self, ttl: timedelta = ONE_HOUR):
        self.ttl = ttl

    def is_valid(self, fetched_at: datetime | None, now: datetime) -> bool:
        if fetched_at is None:
            return False
        return now - fetched_at < self.ttl

    def __repr__(self) -> str:
        return f"RollingTTLPolicy(ttl={self.ttl})"


class AlignedTTLPolicy:
    """Valid until the next ``HH:00 + offset`` after the fetch, and never longer than an hour.

    Upstream publishes fresh rates once an hour; the offset gives it a few
    minutes past the boundary before the cache resets.
    """

    def __init__(self, offset_minutes: int = 5, max_age: timedelta = ONE_HOUR):
        if not 0 <= offset_minutes < 60:
            raise ConfigError(f"Alignment offset must be 0-59 minutes, got {offset_minutes}")
        self.offset = timedelta(minutes=offset_minutes)
        self.max_age = max_age

    def expiration(self, fetched_at: datetime) -> datetime:
        """First hour boundary plus offset strictly after ``fetched_at``."""
        hour_start = fetched_at.replace(minute=0, second=0, microsecond=0)
        candidate = hour_start + self.offset
        if candidate <= fetched_at:
            candidate += ONE_HOUR
        return candidate

    def is_valid(self, fetched_at: datetime | None, now: datetime) -> bool:
        if fetched_at is None:
            return False
        return now < self.expiration(fetched_at) and now - fetched_at < self.max_age

    def __repr__(self) -> str:
        return f"AlignedTTLPolicy(offset={self.offset})"


def build_policy(name: str, ttl_seconds: int, offset_minutes: int) -> StalenessPolicy:
    if name == "rolling":
        return RollingTTLPolicy(timedelta(seconds=ttl_seconds))
    if name == "aligned":
        return AlignedTTLPolicy(offset_minutes)
    raise ConfigError(f"Unknown cache policy: {name!r} (expected 'rolling' or 'aligned')")
