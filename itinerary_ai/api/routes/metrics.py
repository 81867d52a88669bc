"""Prometheus metrics endpoint."""

from fastapi import APIRouter, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

router = APIRouter()


@router.get("/metrics")
async def metrics() -> Response:
    """Prometheus metrics endpoint.

    Exposes all registered Prometheus metrics including:
    - ai_provider_attempts_total{provider, outcome}
    - ai_provider_latency_ms{provider, outcome}
    - ai_cache_hits_total{tier}
    - ai_generation_failures_total
    """
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
