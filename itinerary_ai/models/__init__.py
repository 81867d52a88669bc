"""Models package - re-exports for convenience."""

from itinerary_ai.models.envelope import (
    ChatMessage,
    EnvelopeChoice,
    EnvelopeMessage,
    ProviderEnvelope,
)
from itinerary_ai.models.itinerary import (
    GeneratedActivity,
    GeneratedDay,
    GeneratedItinerary,
    LatLng,
    OpeningHours,
    POISnapshot,
)
from itinerary_ai.models.places import PlaceDetails, PlaceSummary
from itinerary_ai.models.task_types import AiTaskType, normalize_task_type
from itinerary_ai.models.telemetry import OrchestrationRun

__all__ = [
    # Itinerary
    "GeneratedItinerary",
    "GeneratedDay",
    "GeneratedActivity",
    "POISnapshot",
    "LatLng",
    "OpeningHours",
    # Envelope
    "ChatMessage",
    "ProviderEnvelope",
    "EnvelopeChoice",
    "EnvelopeMessage",
    # Places
    "PlaceSummary",
    "PlaceDetails",
    # Task types
    "AiTaskType",
    "normalize_task_type",
    # Telemetry
    "OrchestrationRun",
]
