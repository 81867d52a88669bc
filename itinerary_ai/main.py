"""FastAPI application."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from itinerary_ai.api.dependencies import close_dependencies
from itinerary_ai.api.routes.ai import router as ai_router
from itinerary_ai.api.routes.health import router as health_router
from itinerary_ai.api.routes.metrics import router as metrics_router
from itinerary_ai.orchestration.errors import ProviderConfigurationError

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Flush pending telemetry and close clients on shutdown."""
    yield
    await close_dependencies()


app = FastAPI(title="Itinerary AI API", version="0.1.0", lifespan=lifespan)

# Register routes
app.include_router(health_router, tags=["health"])
app.include_router(metrics_router, tags=["metrics"])
app.include_router(ai_router, tags=["ai"])


@app.exception_handler(ProviderConfigurationError)
async def provider_configuration_error_handler(
    request: Request, exc: ProviderConfigurationError
) -> JSONResponse:
    """Missing provider credentials surface as 503."""
    logger.error(f"Provider configuration error on {request.url.path}: {exc}")
    return JSONResponse(status_code=503, content={"detail": "AI providers are not configured"})


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint."""
    return {"message": "Itinerary AI API", "version": "0.1.0"}
