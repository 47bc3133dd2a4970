"""Cached upstream resources."""

from dataclasses import dataclass
from urllib.parse import urlencode

LATEST = "latest"
CURRENCIES = "currencies"


@dataclass(frozen=True)
class CachedResource:
    """One upstream endpoint and the cache slot it is stored under."""

    key: str
    source_url: str
    error_message: str = "Failed to fetch data"


def build_resources(
    app_id: str, exchange_rate_url: str, currencies_url: str
) -> dict[str, CachedResource]:
    """Build the two resources served by the proxy, keyed by cache key."""
    return {
        LATEST: CachedResource(
            key=LATEST,
            source_url=f"{exchange_rate_url}?{urlencode({'app_id': app_id})}",
            error_message="Failed to fetch exchange rates",
        ),
        CURRENCIES: CachedResource(
            key=CURRENCIES,
            source_url=currencies_url,
            error_message="Failed to fetch currency list",
        ),
    }
