"""Integration tests for /ai endpoints."""

import asyncio
import json
from collections.abc import Generator
from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from itinerary_ai.api.dependencies import (
    get_orchestrator,
    get_poi_grounding_service,
    get_telemetry_sink,
)
from itinerary_ai.db.inmemory import InMemoryTelemetrySink
from itinerary_ai.main import app
from itinerary_ai.models.itinerary import GeneratedItinerary, LatLng
from itinerary_ai.models.places import PlaceDetails, PlaceSummary
from itinerary_ai.models.telemetry import OrchestrationRun
from itinerary_ai.orchestration.errors import ProviderConfigurationError, TransportError
from itinerary_ai.orchestration.orchestrator import ItineraryOrchestrator
from itinerary_ai.orchestration.poi_grounding import PoiGroundingService


class StaticPlaces:
    """PlacesClient returning the same place for every query."""

    async def text_search(self, query, *, near=None, radius_meters=None, limit=10):
        return [
            PlaceSummary(
                place_id="ChIJ-han", name="Han Market", address="Da Nang", lat=16.07, lng=108.22
            )
        ]

    async def get_details(self, place_id):
        return PlaceDetails(
            place_id=place_id,
            name="Han Market",
            formatted_address="119 Tran Phu, Da Nang",
            location=LatLng(lat=16.07, lng=108.22),
        )


@pytest.fixture
def client() -> Generator[TestClient, None, None]:
    """Test client with dependency overrides cleared afterwards."""
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


class TestPreviewItinerary:
    """Test POST /ai/preview-itinerary."""

    def test_returns_success_envelope(
        self, client: TestClient, make_adapter, make_payload, settings
    ) -> None:
        payload = make_payload(days=3)
        orchestrator = ItineraryOrchestrator(
            make_adapter("gemini", [f"Here you go:\n```json\n{json.dumps(payload)}\n```"]),
            make_adapter("openrouter", [None]),
            settings=settings,
        )
        app.dependency_overrides[get_orchestrator] = lambda: orchestrator

        response = client.post(
            "/ai/preview-itinerary",
            json={"prompt": "3 days in Da Nang", "currency_hint": "vnd"},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["data"]["currency"] == "VND"
        assert len(body["data"]["days"]) == 3
        activity = body["data"]["days"][0]["activities"][0]
        assert activity["durationMinutes"] == 90
        assert activity["poi"] is None

    def test_forwards_request_metadata(self, client: TestClient, make_payload) -> None:
        orchestrator = MagicMock()
        orchestrator.generate_itinerary = AsyncMock(
            return_value=GeneratedItinerary.model_validate(make_payload())
        )
        app.dependency_overrides[get_orchestrator] = lambda: orchestrator

        response = client.post(
            "/ai/preview-itinerary",
            json={
                "prompt": "Weekend in Hue",
                "task_type": "generate_itinerary",
                "trip_id": "trip-9",
                "user_id": "user-3",
                "cache_ttl_seconds": 60,
            },
            headers={"X-Request-Id": "req-abc"},
        )

        assert response.status_code == 200
        call = orchestrator.generate_itinerary.await_args
        assert call.args == ("Weekend in Hue",)
        assert call.kwargs["request_id"] == "req-abc"
        assert call.kwargs["task_type"] == "generate_itinerary"
        assert call.kwargs["trip_id"] == "trip-9"
        assert call.kwargs["user_id"] == "user-3"
        assert call.kwargs["cache_ttl_seconds"] == 60

    def test_generates_request_id_when_missing(self, client: TestClient, make_payload) -> None:
        orchestrator = MagicMock()
        orchestrator.generate_itinerary = AsyncMock(
            return_value=GeneratedItinerary.model_validate(make_payload())
        )
        app.dependency_overrides[get_orchestrator] = lambda: orchestrator

        client.post("/ai/preview-itinerary", json={"prompt": "Weekend in Hue"})

        call = orchestrator.generate_itinerary.await_args
        assert call.kwargs["request_id"]
        assert call.kwargs["task_type"] == "preview_itinerary"

    def test_structured_fields_build_prompt(self, client: TestClient, make_payload) -> None:
        orchestrator = MagicMock()
        orchestrator.generate_itinerary = AsyncMock(
            return_value=GeneratedItinerary.model_validate(make_payload())
        )
        app.dependency_overrides[get_orchestrator] = lambda: orchestrator

        response = client.post(
            "/ai/preview-itinerary",
            json={
                "destination": "Da Nang",
                "startDate": "2025-03-01",
                "endDate": "2025-03-04",
                "budget": 600,
                "currency": "USD",
                "travelers": 2,
                "preferences": {"interests": ["food"], "travelStyle": "budget"},
            },
        )

        assert response.status_code == 200
        call = orchestrator.generate_itinerary.await_args
        [prompt] = call.args
        assert prompt.startswith("Create a 3-day itinerary for 2 travelers visiting Da Nang")
        assert "- Budget Category: Mid-range" in prompt
        assert "- Focus on budget-friendly options and free activities." in prompt
        assert call.kwargs["currency_hint"] == "USD"

    def test_explicit_hint_wins_over_budget_currency(
        self, client: TestClient, make_payload
    ) -> None:
        orchestrator = MagicMock()
        orchestrator.generate_itinerary = AsyncMock(
            return_value=GeneratedItinerary.model_validate(make_payload())
        )
        app.dependency_overrides[get_orchestrator] = lambda: orchestrator

        client.post(
            "/ai/preview-itinerary",
            json={"destination": "Hue", "currency": "USD", "currency_hint": "VND"},
        )

        assert orchestrator.generate_itinerary.await_args.kwargs["currency_hint"] == "VND"

    @pytest.mark.parametrize(
        "body",
        [
            {},
            {"budget": 100},
            {"destination": "Hue", "startDate": "2025-03-05", "endDate": "2025-03-01"},
        ],
    )
    def test_invalid_structured_request_rejected(self, client: TestClient, body) -> None:
        app.dependency_overrides[get_orchestrator] = lambda: MagicMock()

        response = client.post("/ai/preview-itinerary", json=body)

        assert response.status_code == 422

    def test_exhausted_providers_is_502(self, client: TestClient, make_adapter, settings) -> None:
        orchestrator = ItineraryOrchestrator(
            make_adapter("gemini", [TransportError("gemini", "down")]),
            make_adapter("openrouter", ["not json at all"]),
            settings=settings,
        )
        app.dependency_overrides[get_orchestrator] = lambda: orchestrator

        response = client.post("/ai/preview-itinerary", json={"prompt": "3 days in Da Nang"})

        assert response.status_code == 502
        assert response.json()["detail"] == (
            "Both AI providers failed. Unable to generate itinerary."
        )

    def test_missing_provider_keys_is_503(self, client: TestClient) -> None:
        def unconfigured() -> ItineraryOrchestrator:
            raise ProviderConfigurationError("GEMINI_API_KEY is not set.")

        app.dependency_overrides[get_orchestrator] = unconfigured

        response = client.post("/ai/preview-itinerary", json={"prompt": "3 days in Da Nang"})

        assert response.status_code == 503
        assert response.json() == {"detail": "AI providers are not configured"}

    def test_empty_prompt_rejected(self, client: TestClient) -> None:
        app.dependency_overrides[get_orchestrator] = lambda: MagicMock()

        response = client.post("/ai/preview-itinerary", json={"prompt": ""})

        assert response.status_code == 422


class TestGroundPois:
    """Test POST /ai/ground-pois."""

    def test_attaches_pois(self, client: TestClient, make_payload) -> None:
        app.dependency_overrides[get_poi_grounding_service] = lambda: PoiGroundingService(
            StaticPlaces()
        )

        response = client.post(
            "/ai/ground-pois",
            json={
                "destination": "Da Nang",
                "itinerary": make_payload(days=1, activities_per_day=2),
                "max_activities_per_day": 1,
            },
        )

        assert response.status_code == 200
        activities = response.json()["data"]["days"][0]["activities"]
        assert activities[0]["poi"]["placeId"] == "ChIJ-han"
        assert activities[0]["poi"]["formattedAddress"] == "119 Tran Phu, Da Nang"
        assert activities[1]["poi"] is None

    def test_invalid_itinerary_rejected(self, client: TestClient) -> None:
        app.dependency_overrides[get_poi_grounding_service] = lambda: PoiGroundingService(
            StaticPlaces()
        )

        response = client.post(
            "/ai/ground-pois", json={"destination": "Da Nang", "itinerary": {"days": "none"}}
        )

        assert response.status_code == 422


class TestListRuns:
    """Test GET /ai/runs."""

    @pytest.fixture
    def sink(self) -> InMemoryTelemetrySink:
        sink = InMemoryTelemetrySink()
        base = datetime(2025, 3, 1, tzinfo=UTC)

        async def seed() -> None:
            for minutes in range(3):
                await sink.record_run(
                    OrchestrationRun(
                        request_id=f"req-{minutes}",
                        provider="primary",
                        provider_name="gemini",
                        json_valid=True,
                        created_at=base + timedelta(minutes=minutes),
                    )
                )

        asyncio.run(seed())
        return sink

    def test_newest_first(self, client: TestClient, sink: InMemoryTelemetrySink) -> None:
        app.dependency_overrides[get_telemetry_sink] = lambda: sink

        response = client.get("/ai/runs")

        assert response.status_code == 200
        rows = response.json()
        assert [row["request_id"] for row in rows] == ["req-2", "req-1", "req-0"]
        assert rows[0]["provider"] == "primary"

    def test_limit(self, client: TestClient, sink: InMemoryTelemetrySink) -> None:
        app.dependency_overrides[get_telemetry_sink] = lambda: sink

        response = client.get("/ai/runs", params={"limit": 1})

        assert [row["request_id"] for row in response.json()] == ["req-2"]
