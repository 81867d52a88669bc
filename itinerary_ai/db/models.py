"""SQLAlchemy ORM models for generation telemetry."""

import uuid
from datetime import datetime

from sqlalchemy import Boolean, DateTime, Index, Integer, String, Text, Uuid
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.sql import func


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""

    pass


class AiRun(Base):
    """ai_runs table - one row per generation request outcome."""

    __tablename__ = "ai_runs"
    __table_args__ = (
        Index("idx_ai_runs_created_at", "created_at"),
        Index("idx_ai_runs_request_id", "request_id"),
        Index("idx_ai_runs_user_id", "user_id"),
        Index("idx_ai_runs_trip_id", "trip_id"),
        Index("idx_ai_runs_task_type", "task_type"),
        Index("idx_ai_runs_provider", "provider"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    request_id: Mapped[str | None] = mapped_column(String(128), nullable=True)
    user_id: Mapped[str | None] = mapped_column(String(128), nullable=True)
    trip_id: Mapped[str | None] = mapped_column(String(128), nullable=True)
    task_type: Mapped[str | None] = mapped_column(String(64), nullable=True)
    prompt_hash: Mapped[str | None] = mapped_column(String(64), nullable=True)
    prompt_length: Mapped[int | None] = mapped_column(Integer, nullable=True)

    provider: Mapped[str | None] = mapped_column(String(16), nullable=True)
    provider_name: Mapped[str | None] = mapped_column(String(64), nullable=True)
    fallback_used: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    cache_memory_hit: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    cache_redis_hit: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    total_ms: Mapped[int | None] = mapped_column(Integer, nullable=True)
    provider_ms: Mapped[int | None] = mapped_column(Integer, nullable=True)
    parse_ms: Mapped[int | None] = mapped_column(Integer, nullable=True)

    json_valid: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    json_repaired: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    schema_errors_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    days_count: Mapped[int | None] = mapped_column(Integer, nullable=True)
    activities_count: Mapped[int | None] = mapped_column(Integer, nullable=True)
    poi_count: Mapped[int | None] = mapped_column(Integer, nullable=True)
    poi_dropped_count: Mapped[int | None] = mapped_column(Integer, nullable=True)

    response_length: Mapped[int | None] = mapped_column(Integer, nullable=True)
    currency_hint: Mapped[str | None] = mapped_column(String(3), nullable=True)
    error_message: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
