"""Generation task types."""

from enum import Enum


class AiTaskType(str, Enum):
    """Enumerated purpose of a generation request."""

    GENERATE_ITINERARY = "generate_itinerary"
    REGENERATE_DAY = "regenerate_day"
    SUGGEST_ACTIVITIES_FOR_DAY = "suggest_activities_day"
    REWRITE_DESCRIPTION = "rewrite_description"
    BUDGET_REBALANCE = "budget_rebalance"
    OPTIMIZE_ROUTE_ORDER = "optimize_route_order"
    # Legacy alias kept for older clients; resolves to GENERATE_ITINERARY
    PREVIEW_ITINERARY = "preview_itinerary"


DEFAULT_TASK_TYPE = AiTaskType.GENERATE_ITINERARY

_ALIASES: dict[AiTaskType, AiTaskType] = {
    AiTaskType.PREVIEW_ITINERARY: AiTaskType.GENERATE_ITINERARY,
}


def normalize_task_type(task_type: str | AiTaskType | None) -> AiTaskType:
    """Resolve a raw task type to its canonical enum value.

    Unknown values and legacy aliases map to the default task type.
    """
    if task_type is None:
        return DEFAULT_TASK_TYPE
    try:
        resolved = AiTaskType(task_type)
    except ValueError:
        return DEFAULT_TASK_TYPE
    return _ALIASES.get(resolved, resolved)
