"""Integration tests for application shutdown."""

from collections.abc import Generator
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from fastapi.testclient import TestClient
from pydantic import SecretStr

from itinerary_ai.adapters.places import GooglePlacesClient
from itinerary_ai.api import dependencies
from itinerary_ai.cache.redis_cache import RedisCache
from itinerary_ai.config import Settings
from itinerary_ai.main import app


def _clear_dependency_caches() -> None:
    for provider in (
        dependencies.get_redis_cache,
        dependencies.get_places_client,
        dependencies.get_poi_grounding_service,
    ):
        provider.cache_clear()


@pytest.fixture
def networked_settings(settings: Settings) -> Generator[Settings, None, None]:
    """Settings with Redis and Places configured, patched into the dependency graph."""
    configured = settings.model_copy(
        update={
            "redis_url": "redis://localhost:6379/0",
            "google_maps_api_key": SecretStr("test-maps"),
        }
    )
    _clear_dependency_caches()
    with patch("itinerary_ai.api.dependencies.get_settings", return_value=configured):
        yield configured
    _clear_dependency_caches()


class TestShutdown:
    """Test the lifespan shutdown hook."""

    def test_closes_clients_that_were_built(self, networked_settings: Settings) -> None:
        with (
            patch.object(RedisCache, "close", new_callable=AsyncMock) as close_redis,
            patch.object(GooglePlacesClient, "aclose", new_callable=AsyncMock) as close_places,
        ):
            with TestClient(app):
                assert dependencies.get_redis_cache() is not None
                dependencies.get_poi_grounding_service()

            close_redis.assert_awaited_once()
            close_places.assert_awaited_once()

        assert dependencies.get_redis_cache.cache_info().currsize == 0
        assert dependencies.get_places_client.cache_info().currsize == 0
        assert dependencies.get_poi_grounding_service.cache_info().currsize == 0

    def test_skips_clients_that_were_never_built(self, networked_settings: Settings) -> None:
        with (
            patch.object(RedisCache, "close", new_callable=AsyncMock) as close_redis,
            patch.object(GooglePlacesClient, "aclose", new_callable=AsyncMock) as close_places,
        ):
            with TestClient(app):
                pass

            close_redis.assert_not_awaited()
            close_places.assert_not_awaited()

    def test_drains_orchestrator_telemetry(self) -> None:
        orchestrator = MagicMock()
        orchestrator.drain_telemetry = AsyncMock()
        provider = MagicMock(return_value=orchestrator)
        provider.cache_info.return_value.currsize = 1

        with patch("itinerary_ai.api.dependencies.get_orchestrator", provider):
            with TestClient(app):
                pass

        orchestrator.drain_telemetry.assert_awaited_once()
        provider.cache_clear.assert_called_once()
