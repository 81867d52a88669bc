"""Generated itinerary models - the structured output of a generation run.

Wire form is camelCase (``dayNumber``, ``durationMinutes``...); Python attributes
are snake_case. Unknown properties are kept so that good-faith model output
with extra fields still validates.
"""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class WireModel(BaseModel):
    """Base for camelCase wire models that tolerate extra properties."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
    )

    def to_wire(self) -> dict:
        """Dump to JSON-compatible camelCase dict."""
        return self.model_dump(mode="json", by_alias=True)


class LatLng(WireModel):
    """Point coordinates as returned by the places collaborator."""

    lat: float
    lng: float


class OpeningHours(WireModel):
    """Opening hours summary."""

    open_now: bool | None = None
    weekday_text: list[str] | None = None


class POISnapshot(WireModel):
    """Point of interest attached to an activity by downstream enrichment."""

    place_id: str
    name: str
    formatted_address: str
    location: LatLng
    rating: float | None = None
    user_ratings_total: int | None = None
    price_level: int | None = None
    types: list[str] | None = None
    opening_hours: OpeningHours | None = None


class GeneratedActivity(WireModel):
    """Single activity in a generated day."""

    time: str | None = None
    title: str
    description: str | None = None
    duration_minutes: int | float | None = None
    cost: int | float | None = None
    currency: str | None = None
    poi: POISnapshot | None = None


class GeneratedDay(WireModel):
    """One day of a generated itinerary."""

    day_number: int
    date: str | None = None
    activities: list[GeneratedActivity]


class GeneratedItinerary(WireModel):
    """Complete generated itinerary."""

    days: list[GeneratedDay]
    total_cost: int | float | None = None
    currency: str | None = None
    notes: list[str] | None = None
