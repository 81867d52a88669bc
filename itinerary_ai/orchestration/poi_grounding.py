"""Attach real-world places to generated activities.

Runs after generation: the orchestrator always returns ``poi=None`` and callers
opt into grounding before persisting.
"""

import logging
from typing import Literal

from itinerary_ai.adapters.base import PlacesClient
from itinerary_ai.models.itinerary import (
    GeneratedActivity,
    GeneratedItinerary,
    LatLng,
    POISnapshot,
)
from itinerary_ai.models.places import PlaceDetails, PlaceSummary

logger = logging.getLogger(__name__)

GroundingMode = Literal["thin", "full"]

DEFAULT_RADIUS_METERS = 8000
ACTIVITY_SEARCH_LIMIT = 5


def snapshot_from_summary(summary: PlaceSummary) -> POISnapshot:
    """Build a POI snapshot from a text-search hit."""
    return POISnapshot(
        place_id=summary.place_id,
        name=summary.name,
        formatted_address=summary.address,
        location=LatLng(lat=summary.lat, lng=summary.lng),
        rating=summary.rating,
        user_ratings_total=summary.user_ratings_total,
        types=summary.types,
    )


def snapshot_from_details(details: PlaceDetails) -> POISnapshot:
    """Build a POI snapshot from a details record."""
    return POISnapshot(
        place_id=details.place_id,
        name=details.name,
        formatted_address=details.formatted_address,
        location=details.location,
        rating=details.rating,
        user_ratings_total=details.user_ratings_total,
        price_level=details.price_level,
        types=details.types,
        opening_hours=details.opening_hours,
    )


def build_activity_query(destination: str, activity: GeneratedActivity) -> str:
    """Search query for an activity; bare destination when the title is blank."""
    title = activity.title.strip() if activity.title else ""
    if not title:
        return destination
    return f"{title} in {destination}"


class PoiGroundingService:
    """Resolves activities to places through a PlacesClient."""

    def __init__(self, places: PlacesClient) -> None:
        self._places = places

    async def resolve_destination_center(self, destination: str) -> LatLng | None:
        """Anchor point for activity searches, or None when lookup fails."""
        try:
            results = await self._places.text_search(destination, limit=1)
        except Exception as e:
            logger.warning(f"Destination lookup failed for {destination!r}: {e}")
            return None
        if not results:
            return None
        return LatLng(lat=results[0].lat, lng=results[0].lng)

    async def ground_activity(
        self,
        destination: str,
        activity: GeneratedActivity,
        *,
        center: LatLng | None = None,
        radius_meters: int = DEFAULT_RADIUS_METERS,
        mode: GroundingMode = "full",
    ) -> POISnapshot | None:
        """Best-effort POI for one activity; any failure yields None."""
        query = build_activity_query(destination, activity)
        try:
            results = await self._places.text_search(
                query,
                near=center,
                radius_meters=radius_meters,
                limit=ACTIVITY_SEARCH_LIMIT,
            )
            candidate = results[0] if results else None
            if candidate is None or not candidate.place_id:
                return None

            if mode == "thin":
                return snapshot_from_summary(candidate)

            details = await self._places.get_details(candidate.place_id)
            if details is None or not details.place_id:
                return None
            return snapshot_from_details(details)
        except Exception as e:
            logger.warning(f"POI grounding failed for {query!r}: {type(e).__name__}: {e}")
            return None

    async def ground_itinerary(
        self,
        destination: str,
        itinerary: GeneratedItinerary,
        *,
        radius_meters: int = DEFAULT_RADIUS_METERS,
        max_activities_per_day: int | None = None,
        mode: GroundingMode = "full",
    ) -> GeneratedItinerary:
        """Return a copy of the itinerary with POIs attached.

        Args:
            destination: Free-text destination used for every query
            itinerary: Validated itinerary (not mutated)
            radius_meters: Search radius around the destination anchor
            max_activities_per_day: Cap per day; None or <= 0 means no cap
            mode: "thin" snapshots the search hit, "full" fetches details

        Returns:
            New GeneratedItinerary
        """
        grounded = itinerary.model_copy(deep=True)
        center = await self.resolve_destination_center(destination)

        for day in grounded.days:
            limit = len(day.activities)
            if max_activities_per_day is not None and max_activities_per_day > 0:
                limit = min(max_activities_per_day, limit)

            for activity in day.activities[:limit]:
                activity.poi = await self.ground_activity(
                    destination,
                    activity,
                    center=center,
                    radius_meters=radius_meters,
                    mode=mode,
                )

        return grounded
