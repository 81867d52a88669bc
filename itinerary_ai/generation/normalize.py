"""Pre-validation normalization of loosely-typed model output.

Coerces, never rejects: every helper maps an unexpected shape to ``None`` (or a
default) so that formatting slips in otherwise good output survive validation.
Absent keys stay absent.
"""

import copy
import math
import re
from typing import Any

_ISO_CURRENCY_RE = re.compile(r"^[A-Z]{3}$")


def normalize_iso_currency(value: Any) -> str | None:
    """Return an uppercase 3-letter currency code, or None."""
    if not isinstance(value, str):
        return None
    candidate = value.strip().upper()
    if not _ISO_CURRENCY_RE.match(candidate):
        return None
    return candidate


def coerce_number(value: Any) -> int | float | None:
    """Coerce a numeric-looking value to a finite number.

    Integral results are returned as ``int``. Booleans are not numbers.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        number = value
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            number = float(text)
        except ValueError:
            return None
    else:
        return None

    if not math.isfinite(number):
        return None
    if number.is_integer():
        return int(number)
    return number


def normalize_notes(value: Any) -> list[str] | None:
    """Accept a single string or an array of strings; anything else is None."""
    if isinstance(value, str):
        text = value.strip()
        return [text] if text else None
    if not isinstance(value, list):
        return None

    notes: list[str] = []
    for item in value:
        if not isinstance(item, str):
            return None
        text = item.strip()
        if text:
            notes.append(text)
    return notes or None


def _trimmed_or_none(value: Any) -> str | None:
    if not isinstance(value, str):
        return None
    text = value.strip()
    return text or None


def _is_number(value: Any) -> bool:
    return isinstance(value, int | float) and not isinstance(value, bool)


def is_complete_poi(value: Any) -> bool:
    """Check that a poi payload carries every required snapshot field."""
    if not isinstance(value, dict):
        return False
    location = value.get("location")
    return (
        isinstance(value.get("placeId"), str)
        and isinstance(value.get("name"), str)
        and isinstance(value.get("formattedAddress"), str)
        and isinstance(location, dict)
        and _is_number(location.get("lat"))
        and _is_number(location.get("lng"))
    )


def _normalize_activity(activity: dict[str, Any]) -> None:
    for key in ("time", "description"):
        if key in activity:
            activity[key] = _trimmed_or_none(activity[key])

    if isinstance(activity.get("title"), str):
        activity["title"] = activity["title"].strip()

    for key in ("durationMinutes", "cost"):
        if key in activity:
            activity[key] = coerce_number(activity[key])

    if "currency" in activity:
        activity["currency"] = normalize_iso_currency(activity["currency"])

    if "poi" in activity and not is_complete_poi(activity["poi"]):
        activity["poi"] = None


def _normalize_day(day: dict[str, Any]) -> None:
    day_number = coerce_number(day.get("dayNumber"))
    day["dayNumber"] = day_number if day_number is not None else 0

    if "date" in day:
        day["date"] = _trimmed_or_none(day["date"])

    activities = day.get("activities")
    if not isinstance(activities, list):
        return
    for activity in activities:
        if isinstance(activity, dict):
            _normalize_activity(activity)


def normalize_itinerary_payload(value: Any) -> Any:
    """Return a coerced deep copy of a parsed itinerary payload.

    Non-dict inputs are returned unchanged and left for validation to reject.
    """
    if not isinstance(value, dict):
        return value

    payload = copy.deepcopy(value)

    if "notes" not in payload and "rationale" in payload:
        payload["notes"] = payload["rationale"]
    if "notes" in payload:
        payload["notes"] = normalize_notes(payload["notes"])

    if "totalCost" in payload:
        payload["totalCost"] = coerce_number(payload["totalCost"])
    if "currency" in payload:
        payload["currency"] = normalize_iso_currency(payload["currency"])

    days = payload.get("days")
    if isinstance(days, list):
        for day in days:
            if isinstance(day, dict):
                _normalize_day(day)

    return payload


def count_poi_payloads(value: Any) -> int:
    """Count activities whose raw payload carries a non-null poi."""
    if not isinstance(value, dict) or not isinstance(value.get("days"), list):
        return 0
    count = 0
    for day in value["days"]:
        if not isinstance(day, dict) or not isinstance(day.get("activities"), list):
            continue
        for activity in day["activities"]:
            if isinstance(activity, dict) and activity.get("poi"):
                count += 1
    return count
