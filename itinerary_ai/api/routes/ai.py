"""AI itinerary endpoints - preview generation, POI grounding, run telemetry."""

import uuid
from datetime import date
from typing import Annotated, Any, Literal

from fastapi import APIRouter, Depends, Header, HTTPException, Query, status
from pydantic import AliasChoices, BaseModel, Field, model_validator

from itinerary_ai.api.dependencies import (
    get_orchestrator,
    get_poi_grounding_service,
    get_telemetry_sink,
)
from itinerary_ai.config import get_settings
from itinerary_ai.db.telemetry import DEFAULT_LIST_LIMIT, TelemetrySink
from itinerary_ai.models.itinerary import GeneratedItinerary
from itinerary_ai.orchestration.errors import ExhaustedProvidersError
from itinerary_ai.orchestration.orchestrator import ItineraryOrchestrator
from itinerary_ai.orchestration.poi_grounding import PoiGroundingService
from itinerary_ai.orchestration.prompts import build_itinerary_prompt

router = APIRouter(prefix="/ai", tags=["ai"])


class TripPreferences(BaseModel):
    """Traveler preferences for a structured preview request."""

    interests: list[str] = Field(default_factory=list)
    travel_style: str | None = Field(
        None, validation_alias=AliasChoices("travel_style", "travelStyle")
    )


class PreviewItineraryRequest(BaseModel):
    """Request body for POST /ai/preview-itinerary.

    Either a ready prompt or structured trip fields (destination first). A
    given prompt is used verbatim and the trip fields are ignored.
    """

    prompt: str | None = Field(None, min_length=1, description="Generation prompt")
    destination: str | None = Field(None, min_length=1)
    start_date: date | None = Field(
        None, validation_alias=AliasChoices("start_date", "startDate")
    )
    end_date: date | None = Field(None, validation_alias=AliasChoices("end_date", "endDate"))
    budget: float | None = Field(None, ge=0)
    currency: str | None = Field(None, description="Budget currency, also the fallback hint")
    travelers: int | None = Field(None, ge=1)
    preferences: TripPreferences | None = None
    currency_hint: str | None = Field(None, description="ISO-4217 fallback currency")
    task_type: str | None = Field(None, description="Task type (default: generate_itinerary)")
    trip_id: str | None = None
    user_id: str | None = None
    cache_ttl_seconds: int | None = Field(None, gt=0)

    @model_validator(mode="after")
    def validate_prompt_source(self) -> "PreviewItineraryRequest":
        """Require a prompt or a destination, and ordered dates."""
        if not self.prompt and not self.destination:
            raise ValueError("either prompt or destination is required")
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValueError(f"end_date {self.end_date} is before start_date {self.start_date}")
        return self

    def resolve_prompt(self) -> str:
        """The prompt sent to the providers."""
        if self.prompt:
            return self.prompt
        preferences = self.preferences or TripPreferences()
        return build_itinerary_prompt(
            self.destination or "",
            start_date=self.start_date,
            end_date=self.end_date,
            budget=self.budget,
            currency=self.currency,
            travelers=self.travelers,
            interests=preferences.interests,
            travel_style=preferences.travel_style,
        )


class ItineraryEnvelope(BaseModel):
    """Success envelope returned by itinerary endpoints."""

    success: bool = True
    data: dict[str, Any]


class GroundPoisRequest(BaseModel):
    """Request body for POST /ai/ground-pois."""

    destination: str = Field(..., min_length=1)
    itinerary: GeneratedItinerary
    mode: Literal["thin", "full"] = "full"
    radius_meters: int | None = Field(None, gt=0)
    max_activities_per_day: int | None = None


@router.post("/preview-itinerary", response_model=ItineraryEnvelope)
async def preview_itinerary(
    request: PreviewItineraryRequest,
    orchestrator: Annotated[ItineraryOrchestrator, Depends(get_orchestrator)],
    x_request_id: Annotated[str | None, Header()] = None,
) -> ItineraryEnvelope:
    """Generate a structured itinerary from a prompt or structured trip fields.

    Returns:
        {"success": true, "data": <camelCase itinerary>}

    Raises:
        HTTPException: 502 when every provider failed
    """
    try:
        itinerary = await orchestrator.generate_itinerary(
            request.resolve_prompt(),
            currency_hint=request.currency_hint or request.currency,
            task_type=request.task_type or "preview_itinerary",
            request_id=x_request_id or str(uuid.uuid4()),
            user_id=request.user_id,
            trip_id=request.trip_id,
            cache_ttl_seconds=request.cache_ttl_seconds,
        )
    except ExhaustedProvidersError as e:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e)) from e

    return ItineraryEnvelope(data=itinerary.to_wire())


@router.post("/ground-pois", response_model=ItineraryEnvelope)
async def ground_pois(
    request: GroundPoisRequest,
    grounding: Annotated[PoiGroundingService, Depends(get_poi_grounding_service)],
) -> ItineraryEnvelope:
    """Attach best-effort POIs to an already generated itinerary."""
    grounded = await grounding.ground_itinerary(
        request.destination,
        request.itinerary,
        radius_meters=request.radius_meters or get_settings().poi_search_radius_meters,
        max_activities_per_day=request.max_activities_per_day,
        mode=request.mode,
    )
    return ItineraryEnvelope(data=grounded.to_wire())


@router.get("/runs")
async def list_runs(
    telemetry: Annotated[TelemetrySink, Depends(get_telemetry_sink)],
    limit: Annotated[int, Query()] = DEFAULT_LIST_LIMIT,
) -> list[dict[str, Any]]:
    """Recent generation runs, newest first (limit clamped to 1..200)."""
    runs = await telemetry.list_recent(limit)
    return [run.model_dump(mode="json") for run in runs]
