"""Conversation, repair-prompt and trip-prompt builders."""

from datetime import date

from itinerary_ai.models.envelope import ChatMessage

OPENROUTER_SYSTEM_PROMPT = "You are a travel assistant that must return pure JSON only."


def build_conversation(prompt: str, system_prompt: str | None = None) -> list[ChatMessage]:
    """Build the provider conversation: optional system turn, then the user turn."""
    messages: list[ChatMessage] = []
    if system_prompt:
        messages.append(ChatMessage(role="system", content=system_prompt))
    messages.append(ChatMessage(role="user", content=prompt))
    return messages


def build_repair_prompt(original_prompt: str, validation_summary: str) -> str:
    """Append the failure explanation to the original prompt for one retry."""
    lines = [
        original_prompt,
        "",
        "IMPORTANT: Your previous response did not match the required JSON schema.",
        f"Validation errors: {validation_summary}",
        "Return exactly one JSON object, no markdown, no code fences, no extra text.",
    ]
    return "\n".join(lines)


ITINERARY_JSON_SHAPE = """{
  "days": [
    {
      "dayNumber": 1,
      "date": "YYYY-MM-DD",
      "activities": [
        {
          "time": "09:00",
          "title": "Activity name",
          "description": "Brief description",
          "durationMinutes": 120,
          "cost": 50,
          "currency": "ISO-4217 code"
        }
      ]
    }
  ],
  "totalCost": 500,
  "currency": "ISO-4217 code",
  "notes": ["practical tip"]
}"""

_STYLE_REQUESTS = {
    "luxury": "Include high-end experiences and premium accommodations.",
    "budget": "Focus on budget-friendly options and free activities.",
    "adventure": "Include outdoor activities and adventurous experiences.",
    "cultural": "Emphasize cultural immersion and historical significance.",
}

_INTEREST_REQUESTS = {
    "food": "Include diverse culinary experiences and food tours.",
    "history": "Focus on historical sites and cultural heritage.",
    "nature": "Include natural attractions and outdoor activities.",
}

# Daily thresholds are in USD
_BUDGET_CATEGORIES = (
    (50, "Budget/Backpacker"),
    (150, "Mid-range"),
    (300, "Comfort"),
)


def trip_length_days(start_date: date, end_date: date) -> int:
    """Number of days between the dates, never less than one."""
    return max((end_date - start_date).days, 1)


def determine_season(day: date) -> str:
    """Northern-hemisphere season by month."""
    if 3 <= day.month <= 5:
        return "spring"
    if 6 <= day.month <= 8:
        return "summer"
    if 9 <= day.month <= 11:
        return "autumn"
    return "winter"


def categorize_budget(daily_budget: float) -> str:
    for ceiling, label in _BUDGET_CATEGORIES:
        if daily_budget <= ceiling:
            return label
    return "Luxury"


def _format_amount(value: float) -> str:
    return f"{value:.0f}" if float(value).is_integer() else f"{value:.2f}"


def build_itinerary_prompt(
    destination: str,
    *,
    start_date: date | None = None,
    end_date: date | None = None,
    budget: float | None = None,
    currency: str | None = None,
    travelers: int | None = None,
    interests: list[str] | None = None,
    travel_style: str | None = None,
) -> str:
    """Build a generation prompt from structured trip fields.

    Sections without input are omitted, so a bare destination still gives a
    usable prompt. The budget category is only stated for USD budgets.

    Args:
        destination: City or region to plan for
        start_date: First day of the trip
        end_date: Last day of the trip
        budget: Total budget for the whole group
        currency: ISO-4217 code the budget is expressed in
        travelers: Group size
        interests: Free-form interest tags (e.g. "food", "history")
        travel_style: e.g. "luxury", "budget", "adventure", "cultural"

    Returns:
        Prompt text ending with the JSON output contract
    """
    interests = [i.strip() for i in interests or [] if i.strip()]
    days = trip_length_days(start_date, end_date) if start_date and end_date else None

    opening = f"Create a {days}-day itinerary" if days else "Create an itinerary"
    if travelers:
        opening += f" for {travelers} {'traveler' if travelers == 1 else 'travelers'}"
    opening += f" visiting {destination}"
    if start_date and end_date:
        opening += f" from {start_date.isoformat()} to {end_date.isoformat()}"
    lines = [opening + "."]

    parameters: list[str] = []
    if budget is not None:
        amount = f"{_format_amount(budget)} {currency}" if currency else _format_amount(budget)
        if days:
            daily = budget // days
            parameters.append(f"- Total Budget: {amount} ({_format_amount(daily)} per day)")
            if (currency or "USD").upper() == "USD":
                category = categorize_budget(daily / (travelers or 1))
                parameters.append(f"- Budget Category: {category}")
        else:
            parameters.append(f"- Total Budget: {amount}")
    if start_date:
        parameters.append(f"- Season: {determine_season(start_date)}")
    if travelers:
        parameters.append(f"- Travelers: {travelers} {'person' if travelers == 1 else 'people'}")
    if parameters:
        lines += ["", "TRIP PARAMETERS:", *parameters]

    profile: list[str] = []
    if travel_style:
        profile.append(f"- Travel Style: {travel_style}")
    if interests:
        profile.append(f"- Primary Interests: {', '.join(interests)}")
    if profile:
        lines += ["", "TRAVELER PROFILE:", *profile]

    requests: list[str] = []
    if travel_style and travel_style.lower() in _STYLE_REQUESTS:
        requests.append(_STYLE_REQUESTS[travel_style.lower()])
    lowered = {i.lower() for i in interests}
    requests += [text for tag, text in _INTEREST_REQUESTS.items() if tag in lowered]
    if requests:
        lines += ["", "Special Requests:", *(f"- {r}" for r in requests)]

    lines += [
        "",
        "PRIORITIES:",
        "- Authentic local experiences over tourist traps",
        "- Realistic travel times between locations",
        "- Accurate local pricing",
        "",
        "Respond with exactly one JSON object in this shape, no markdown, no extra text:",
        ITINERARY_JSON_SHAPE,
    ]
    if currency:
        lines.append(f"Express every cost in {currency}.")
    return "\n".join(lines)
