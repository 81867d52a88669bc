"""Post-validation transforms on generated itineraries.

All transforms return new objects; the input itinerary is never mutated.
"""

from dataclasses import dataclass

from itinerary_ai.generation.normalize import normalize_iso_currency
from itinerary_ai.models.itinerary import GeneratedItinerary


@dataclass(frozen=True)
class ItineraryStats:
    """Counts recorded in telemetry."""

    days_count: int
    activities_count: int
    poi_count: int


def apply_currency_fallback(
    itinerary: GeneratedItinerary, currency_hint: str | None
) -> GeneratedItinerary:
    """Resolve itinerary currency from the response, then the caller hint.

    Activities without a valid currency of their own inherit the resolved one.
    When neither source yields a currency the itinerary is returned as-is.
    """
    resolved = normalize_iso_currency(itinerary.currency) or normalize_iso_currency(currency_hint)
    if resolved is None:
        return itinerary

    result = itinerary.model_copy(deep=True)
    result.currency = resolved
    for day in result.days:
        for activity in day.activities:
            activity.currency = normalize_iso_currency(activity.currency) or resolved
    return result


def strip_poi(itinerary: GeneratedItinerary) -> tuple[GeneratedItinerary, int]:
    """Null out every activity poi.

    Returns:
        (stripped copy, number of poi payloads removed)
    """
    result = itinerary.model_copy(deep=True)
    stripped = 0
    for day in result.days:
        for activity in day.activities:
            if activity.poi is not None:
                activity.poi = None
                stripped += 1
    return result, stripped


def count_itinerary_stats(itinerary: GeneratedItinerary) -> ItineraryStats:
    """Count days, activities and attached POIs."""
    activities = [activity for day in itinerary.days for activity in day.activities]
    return ItineraryStats(
        days_count=len(itinerary.days),
        activities_count=len(activities),
        poi_count=sum(1 for activity in activities if activity.poi is not None),
    )
