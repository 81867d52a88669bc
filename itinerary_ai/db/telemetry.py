"""Telemetry sink: one row per orchestration outcome.

Writes are best-effort. Storage errors are logged and swallowed so that
telemetry can never fail a generation request.
"""

import logging
from typing import Any, Protocol

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from itinerary_ai.db.models import AiRun
from itinerary_ai.models.telemetry import OrchestrationRun

logger = logging.getLogger(__name__)

DEFAULT_LIST_LIMIT = 50
MAX_LIST_LIMIT = 200


def clamp_limit(limit: Any) -> int:
    """Clamp a requested page size: invalid or <= 0 means 50, capped at 200."""
    try:
        value = int(limit)
    except (TypeError, ValueError):
        return DEFAULT_LIST_LIMIT
    if value <= 0:
        return DEFAULT_LIST_LIMIT
    return min(value, MAX_LIST_LIMIT)


class TelemetrySink(Protocol):
    """Protocol for telemetry storage implementations."""

    async def record_run(self, run: OrchestrationRun) -> None:
        """Persist one run (best-effort)."""
        ...

    async def list_recent(self, limit: int = DEFAULT_LIST_LIMIT) -> list[OrchestrationRun]:
        """Most recent runs, newest first."""
        ...

    async def update_latest_by_request_id(self, request_id: str, **patch: Any) -> None:
        """Patch the newest run for a request id (best-effort)."""
        ...


def _row_from_run(run: OrchestrationRun) -> AiRun:
    return AiRun(**run.model_dump())


class SqlTelemetrySink:
    """SQLAlchemy-backed telemetry sink over the ai_runs table."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def record_run(self, run: OrchestrationRun) -> None:
        """Insert one ai_runs row."""
        try:
            async with self._session_factory() as session:
                session.add(_row_from_run(run))
                await session.commit()
        except Exception as e:
            logger.warning(f"Failed to record AI run {run.id}: {type(e).__name__}: {e}")

    async def list_recent(self, limit: int = DEFAULT_LIST_LIMIT) -> list[OrchestrationRun]:
        """Return up to `limit` rows ordered by created_at descending."""
        async with self._session_factory() as session:
            result = await session.execute(
                select(AiRun).order_by(AiRun.created_at.desc()).limit(clamp_limit(limit))
            )
            return [OrchestrationRun.model_validate(row) for row in result.scalars().all()]

    async def update_latest_by_request_id(self, request_id: str, **patch: Any) -> None:
        """Apply `patch` to the newest row carrying request_id."""
        if not request_id or not patch:
            return
        try:
            async with self._session_factory() as session:
                result = await session.execute(
                    select(AiRun.id)
                    .where(AiRun.request_id == request_id)
                    .order_by(AiRun.created_at.desc())
                    .limit(1)
                )
                run_id = result.scalar_one_or_none()
                if run_id is None:
                    return
                await session.execute(update(AiRun).where(AiRun.id == run_id).values(**patch))
                await session.commit()
        except Exception as e:
            logger.warning(
                f"Failed to update AI run for request {request_id}: {type(e).__name__}: {e}"
            )
