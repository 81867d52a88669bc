"""Place records returned by the POI collaborator."""

from pydantic import BaseModel

from itinerary_ai.models.itinerary import LatLng, OpeningHours


class PlaceSummary(BaseModel):
    """Ranked text-search hit."""

    place_id: str
    name: str
    address: str
    lat: float
    lng: float
    rating: float | None = None
    user_ratings_total: int | None = None
    types: list[str] | None = None


class PlaceDetails(BaseModel):
    """Rich place record from a details lookup."""

    place_id: str
    name: str
    formatted_address: str
    location: LatLng
    rating: float | None = None
    user_ratings_total: int | None = None
    price_level: int | None = None
    types: list[str] | None = None
    opening_hours: OpeningHours | None = None
