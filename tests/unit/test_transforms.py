"""Unit tests for post-validation itinerary transforms."""

from itinerary_ai.generation.transforms import (
    apply_currency_fallback,
    count_itinerary_stats,
    strip_poi,
)
from itinerary_ai.models.itinerary import GeneratedItinerary

POI = {
    "placeId": "p1",
    "name": "Han Market",
    "formattedAddress": "Da Nang",
    "location": {"lat": 16.07, "lng": 108.22},
}


def _itinerary(make_payload, **kwargs) -> GeneratedItinerary:
    return GeneratedItinerary.model_validate(make_payload(**kwargs))


class TestCurrencyFallback:
    """Test currency resolution."""

    def test_hint_used_when_response_has_none(self, make_payload) -> None:
        itinerary = _itinerary(make_payload)
        result = apply_currency_fallback(itinerary, "usd")
        assert result.currency == "USD"
        assert all(a.currency == "USD" for d in result.days for a in d.activities)

    def test_response_currency_wins(self, make_payload) -> None:
        result = apply_currency_fallback(_itinerary(make_payload, currency="EUR"), "USD")
        assert result.currency == "EUR"
        assert result.days[0].activities[0].currency == "EUR"

    def test_activity_currency_kept(self, make_payload) -> None:
        payload = make_payload()
        payload["days"][0]["activities"][0]["currency"] = "THB"
        result = apply_currency_fallback(GeneratedItinerary.model_validate(payload), "VND")
        assert result.days[0].activities[0].currency == "THB"
        assert result.days[0].activities[1].currency == "VND"

    def test_input_not_mutated(self, make_payload) -> None:
        itinerary = _itinerary(make_payload)
        apply_currency_fallback(itinerary, "USD")
        assert itinerary.currency is None
        assert itinerary.days[0].activities[0].currency is None

    def test_no_sources_leaves_currency_empty(self, make_payload) -> None:
        assert apply_currency_fallback(_itinerary(make_payload), None).currency is None


class TestStripPoi:
    """Test POI stripping and stats."""

    def test_strip_counts_and_copies(self, make_payload) -> None:
        payload = make_payload()
        payload["days"][0]["activities"][0]["poi"] = POI
        itinerary = GeneratedItinerary.model_validate(payload)

        stripped, count = strip_poi(itinerary)

        assert count == 1
        assert all(a.poi is None for d in stripped.days for a in d.activities)
        assert itinerary.days[0].activities[0].poi is not None

    def test_stats(self, make_payload) -> None:
        payload = make_payload(days=3, activities_per_day=2)
        payload["days"][1]["activities"][1]["poi"] = POI
        stats = count_itinerary_stats(GeneratedItinerary.model_validate(payload))
        assert stats.days_count == 3
        assert stats.activities_count == 6
        assert stats.poi_count == 1
