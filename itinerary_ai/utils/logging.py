"""Structured logging for orchestration attempts and cache events."""

import logging
from typing import Any

logger = logging.getLogger(__name__)

_OK_OUTCOMES = ("success", "hit", "miss")


class StructuredRunLogger:
    """Structured logger for provider attempts and cache lookups."""

    def log_event(
        self,
        request_id: str | None,
        provider: str,
        stage: str,
        outcome: str,
        latency_ms: float,
        error_reason: str | None = None,
    ) -> None:
        """Log one orchestration event with structured data."""
        log_data: dict[str, Any] = {
            "request_id": request_id,
            "provider": provider,
            "stage": stage,
            "outcome": outcome,
            "latency_ms": round(latency_ms, 2),
        }

        if error_reason:
            log_data["error_reason"] = error_reason

        log_msg = f"AI {stage}: {provider} - {outcome}"

        if outcome in _OK_OUTCOMES:
            logger.info(log_msg, extra={"structured": log_data})
        else:
            logger.warning(log_msg, extra={"structured": log_data})
