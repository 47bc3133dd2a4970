"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI

from fxproxy import config
from fxproxy.api.deps import get_coordinator
from fxproxy.api.envelope import ENVELOPE, RAW
from fxproxy.api.rates import router as rates_router
from fxproxy.api.schemas import HealthResponse
from fxproxy.errors import ConfigError, register_error_handlers
from fxproxy.models.resource import build_resources
from fxproxy.services.cache import build_store
from fxproxy.services.coordinator import CacheCoordinator
from fxproxy.services.fetcher import RemoteFetcher
from fxproxy.services.staleness import build_policy
from fxproxy.tasks.scheduler import start_scheduler, stop_scheduler

logger = logging.getLogger(__name__)


def build_coordinator() -> CacheCoordinator:
    """Build the process-wide coordinator from configuration."""
    return CacheCoordinator(
        store=build_store(config.CACHE_BACKEND, config.CACHE_DIR),
        policy=build_policy(
            config.CACHE_POLICY, config.CACHE_TTL, config.CACHE_ALIGN_OFFSET_MINUTES
        ),
        fetcher=RemoteFetcher(timeout=config.FETCH_TIMEOUT),
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    missing = config.missing_required()
    if missing:
        raise ConfigError(f"Missing required env vars: {', '.join(missing)}")
    if config.RESPONSE_MODE not in (ENVELOPE, RAW):
        raise ConfigError(f"Unknown response mode: {config.RESPONSE_MODE!r}")

    coordinator = build_coordinator()
    app.state.coordinator = coordinator
    app.state.resources = build_resources(
        config.APP_ID, config.EXCHANGE_RATE_URL, config.CURRENCIES_URL
    )
    app.state.response_mode = config.RESPONSE_MODE
    logger.info(
        f"Serving with {config.CACHE_BACKEND} cache, policy {coordinator.policy!r}"
    )

    if config.CACHE_WARMUP_ENABLED:
        start_scheduler(coordinator, app.state.resources, config.CACHE_TTL)
    yield
    stop_scheduler()
    coordinator.fetcher.close()


app = FastAPI(title="FX Rates Proxy", version="0.1.0", lifespan=lifespan)

register_error_handlers(app)
app.include_router(rates_router)


@app.get("/api/health", response_model=HealthResponse)
async def health_check(coordinator: CacheCoordinator = Depends(get_coordinator)):
    return HealthResponse(
        status="ok",
        cache_backend=type(coordinator.store).__name__,
        cache_policy=repr(coordinator.policy),
    )
