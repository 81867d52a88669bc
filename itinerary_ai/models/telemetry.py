"""Telemetry record for one orchestration attempt."""

import uuid
from datetime import UTC, datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

ProviderLabel = Literal["primary", "secondary", "cache"]


class OrchestrationRun(BaseModel):
    """Immutable record of one generation request outcome."""

    model_config = ConfigDict(frozen=True, from_attributes=True)

    id: uuid.UUID = Field(default_factory=uuid.uuid4)
    request_id: str | None = None
    user_id: str | None = None
    trip_id: str | None = None
    task_type: str | None = None
    prompt_hash: str | None = None
    prompt_length: int | None = None

    provider: ProviderLabel | None = None
    provider_name: str | None = None
    fallback_used: bool = False
    cache_memory_hit: bool = False
    cache_redis_hit: bool = False

    total_ms: int | None = None
    provider_ms: int | None = None
    parse_ms: int | None = None

    json_valid: bool = False
    json_repaired: bool = False
    schema_errors_count: int = 0

    days_count: int | None = None
    activities_count: int | None = None
    poi_count: int | None = None
    poi_dropped_count: int | None = None

    response_length: int | None = None
    currency_hint: str | None = None
    error_message: str | None = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
