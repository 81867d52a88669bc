"""FastAPI dependency providers.

The object graph is built lazily from settings and cached for the process.
Tests swap pieces with ``app.dependency_overrides``.
"""

import logging
from functools import lru_cache

from itinerary_ai.adapters.factory import build_provider_adapters
from itinerary_ai.adapters.places import GooglePlacesClient
from itinerary_ai.cache.memory import MemoryCache
from itinerary_ai.cache.redis_cache import RedisCache
from itinerary_ai.config import get_settings
from itinerary_ai.db.engine import create_session_factory, get_async_engine
from itinerary_ai.db.inmemory import InMemoryTelemetrySink
from itinerary_ai.db.telemetry import SqlTelemetrySink, TelemetrySink
from itinerary_ai.orchestration.orchestrator import ItineraryOrchestrator
from itinerary_ai.orchestration.poi_grounding import PoiGroundingService
from itinerary_ai.utils.logging import StructuredRunLogger
from itinerary_ai.utils.metrics import PrometheusOrchestrationMetrics

logger = logging.getLogger(__name__)


@lru_cache
def get_memory_cache() -> MemoryCache:
    """Process-wide local cache tier."""
    return MemoryCache(max_entries=get_settings().memory_cache_max_entries)


@lru_cache
def get_redis_cache() -> RedisCache | None:
    """Distributed cache tier, or None when REDIS_URL is unset."""
    settings = get_settings()
    if not settings.redis_url:
        logger.info("REDIS_URL not configured, distributed cache disabled")
        return None
    return RedisCache.from_url(settings.redis_url, prefix=settings.redis_cache_prefix)


@lru_cache
def get_telemetry_sink() -> TelemetrySink:
    """SQL telemetry when a database is configured, in-memory otherwise."""
    try:
        engine = get_async_engine()
    except ValueError as e:
        logger.warning(f"Telemetry database unavailable ({e}), using in-memory sink")
        return InMemoryTelemetrySink()
    return SqlTelemetrySink(create_session_factory(engine))


@lru_cache
def get_orchestrator() -> ItineraryOrchestrator:
    """Build the orchestrator.

    Raises:
        ProviderConfigurationError: If a provider API key is missing
    """
    settings = get_settings()
    primary, secondary = build_provider_adapters(settings)
    return ItineraryOrchestrator(
        primary,
        secondary,
        memory_cache=get_memory_cache(),
        redis_cache=get_redis_cache(),
        telemetry=get_telemetry_sink(),
        settings=settings,
        metrics=PrometheusOrchestrationMetrics(),
        run_logger=StructuredRunLogger(),
    )


@lru_cache
def get_places_client() -> GooglePlacesClient:
    """Build the Places client.

    Raises:
        ProviderConfigurationError: If GOOGLE_MAPS_API_KEY is missing
    """
    return GooglePlacesClient.from_settings(get_settings())


@lru_cache
def get_poi_grounding_service() -> PoiGroundingService:
    """Build the POI grounding service."""
    return PoiGroundingService(get_places_client())


async def close_dependencies() -> None:
    """Flush telemetry and close network clients (call at application shutdown).

    Only objects that were actually built are touched; their caches are then
    cleared so a later startup builds fresh clients.
    """
    if get_orchestrator.cache_info().currsize:
        await get_orchestrator().drain_telemetry()
        get_orchestrator.cache_clear()
    if get_redis_cache.cache_info().currsize:
        redis_cache = get_redis_cache()
        if redis_cache is not None:
            await redis_cache.close()
        get_redis_cache.cache_clear()
    if get_places_client.cache_info().currsize:
        await get_places_client().aclose()
        get_places_client.cache_clear()
        get_poi_grounding_service.cache_clear()
    logger.info("Dependencies closed")
