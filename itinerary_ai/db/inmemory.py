"""In-memory telemetry sink."""

from collections import deque
from typing import Any

from itinerary_ai.db.telemetry import DEFAULT_LIST_LIMIT, clamp_limit
from itinerary_ai.models.telemetry import OrchestrationRun

DEFAULT_MAX_RUNS = 1000


class InMemoryTelemetrySink:
    """In-memory implementation of TelemetrySink.

    Keeps at most max_runs rows; the oldest are dropped first.
    """

    def __init__(self, max_runs: int = DEFAULT_MAX_RUNS) -> None:
        self._runs: deque[OrchestrationRun] = deque(maxlen=max_runs)

    @property
    def runs(self) -> list[OrchestrationRun]:
        """Recorded runs in insertion order."""
        return list(self._runs)

    async def record_run(self, run: OrchestrationRun) -> None:
        """Append a run."""
        self._runs.append(run)

    async def list_recent(self, limit: int = DEFAULT_LIST_LIMIT) -> list[OrchestrationRun]:
        """Newest first, clamped like the SQL sink."""
        ordered = sorted(
            enumerate(self._runs), key=lambda item: (item[1].created_at, item[0]), reverse=True
        )
        return [run for _, run in ordered[: clamp_limit(limit)]]

    async def update_latest_by_request_id(self, request_id: str, **patch: Any) -> None:
        """Replace the newest run for request_id with a patched copy."""
        if not request_id or not patch:
            return
        for index in range(len(self._runs) - 1, -1, -1):
            if self._runs[index].request_id == request_id:
                self._runs[index] = self._runs[index].model_copy(update=patch)
                return

    def clear(self) -> None:
        """Drop all runs (useful for testing)."""
        self._runs.clear()
