"""Adapter contracts for text-generation providers and the POI collaborator."""

from typing import Protocol

from itinerary_ai.models.envelope import ChatMessage, ProviderEnvelope
from itinerary_ai.models.itinerary import LatLng
from itinerary_ai.models.places import PlaceDetails, PlaceSummary


class ProviderAdapter(Protocol):
    """Protocol for text-generation provider implementations."""

    name: str

    async def submit(self, conversation: list[ChatMessage]) -> ProviderEnvelope:
        """Send a conversation and return the decoded reply.

        Args:
            conversation: Ordered chat turns (system first when present)

        Returns:
            ProviderEnvelope; empty content is returned, not raised

        Raises:
            TransportError: On SDK, network, auth or timeout failures
        """
        ...


class PlacesClient(Protocol):
    """Protocol for point-of-interest lookups."""

    async def text_search(
        self,
        query: str,
        *,
        near: LatLng | None = None,
        radius_meters: int | None = None,
        limit: int = 10,
    ) -> list[PlaceSummary]:
        """Ranked places matching a free-text query."""
        ...

    async def get_details(self, place_id: str) -> PlaceDetails | None:
        """Rich record for one place, or None when unknown."""
        ...
