"""Google Places adapter (Text Search + Details web APIs)."""

import logging
from typing import Any

import httpx

from itinerary_ai.config import Settings
from itinerary_ai.models.itinerary import LatLng, OpeningHours
from itinerary_ai.models.places import PlaceDetails, PlaceSummary
from itinerary_ai.orchestration.errors import ProviderConfigurationError

logger = logging.getLogger(__name__)

PLACES_BASE_URL = "https://maps.googleapis.com/maps/api/place"
DETAILS_FIELDS = (
    "place_id,name,formatted_address,geometry,rating,user_ratings_total,"
    "price_level,types,opening_hours"
)


class PlacesApiError(Exception):
    """Places API answered with a non-OK status."""

    pass


def _summary_from_result(result: dict[str, Any]) -> PlaceSummary:
    location = (result.get("geometry") or {}).get("location") or {}
    return PlaceSummary(
        place_id=result.get("place_id") or "",
        name=result.get("name") or "Unknown",
        address=result.get("formatted_address") or result.get("vicinity") or "",
        lat=location.get("lat") or 0.0,
        lng=location.get("lng") or 0.0,
        rating=result.get("rating"),
        user_ratings_total=result.get("user_ratings_total"),
        types=result.get("types"),
    )


def _details_from_result(result: dict[str, Any]) -> PlaceDetails:
    location = (result.get("geometry") or {}).get("location") or {}
    hours = result.get("opening_hours")
    opening_hours = None
    if isinstance(hours, dict):
        opening_hours = OpeningHours(
            open_now=hours.get("open_now"),
            weekday_text=hours.get("weekday_text"),
        )
    return PlaceDetails(
        place_id=result["place_id"],
        name=result.get("name") or "Unknown",
        formatted_address=result.get("formatted_address") or "",
        location=LatLng(lat=location.get("lat") or 0.0, lng=location.get("lng") or 0.0),
        rating=result.get("rating"),
        user_ratings_total=result.get("user_ratings_total"),
        price_level=result.get("price_level"),
        types=result.get("types"),
        opening_hours=opening_hours,
    )


class GooglePlacesClient:
    """httpx-based PlacesClient."""

    def __init__(
        self,
        api_key: str | None,
        *,
        base_url: str = PLACES_BASE_URL,
        language: str = "en",
        timeout_seconds: float = 5.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize places client.

        Args:
            api_key: Google Maps API key
            base_url: Places web service root
            language: Result language
            timeout_seconds: Per-request timeout
            client: Optional httpx client (for testing with mocks)

        Raises:
            ProviderConfigurationError: If api_key is missing
        """
        if not api_key:
            raise ProviderConfigurationError("GOOGLE_MAPS_API_KEY is not set.")
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._language = language
        self._client = client or httpx.AsyncClient(timeout=timeout_seconds)

    @classmethod
    def from_settings(cls, settings: Settings) -> "GooglePlacesClient":
        api_key = (
            settings.google_maps_api_key.get_secret_value()
            if settings.google_maps_api_key
            else None
        )
        return cls(api_key=api_key)

    async def _get(self, path: str, params: dict[str, str | int]) -> dict[str, Any]:
        response = await self._client.get(
            f"{self._base_url}/{path}",
            params={**params, "key": self._api_key, "language": self._language},
        )
        response.raise_for_status()
        data: dict[str, Any] = response.json()
        status = data.get("status")
        if status not in ("OK", "ZERO_RESULTS"):
            raise PlacesApiError(f"Places API returned status: {status}")
        return data

    async def text_search(
        self,
        query: str,
        *,
        near: LatLng | None = None,
        radius_meters: int | None = None,
        limit: int = 10,
    ) -> list[PlaceSummary]:
        """Run a Text Search and map the top `limit` hits.

        Raises:
            httpx.HTTPError: On network or HTTP errors
            PlacesApiError: On a non-OK API status
        """
        params: dict[str, str | int] = {"query": query}
        if near is not None:
            params["location"] = f"{near.lat},{near.lng}"
            params["radius"] = radius_meters or 5000

        data = await self._get("textsearch/json", params)
        results = data.get("results") or []
        return [_summary_from_result(r) for r in results[:limit]]

    async def get_details(self, place_id: str) -> PlaceDetails | None:
        """Fetch place details, or None when the place is unknown.

        Raises:
            httpx.HTTPError: On network or HTTP errors
            PlacesApiError: On a non-OK API status
        """
        data = await self._get("details/json", {"place_id": place_id, "fields": DETAILS_FIELDS})
        result = data.get("result")
        if not result or not result.get("place_id"):
            return None
        return _details_from_result(result)

    async def aclose(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()
