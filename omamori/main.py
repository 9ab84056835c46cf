"""OMAMORI widget sync - shared task list engine behind the home-screen widget."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.responses import JSONResponse

from omamori.core.config import settings
from omamori.core.logging import configure_logfire, instrument_fastapi
from omamori.interface.intent_router import router as intent_router
from omamori.services.runtime import build_runtime, close_runtime


logger = logging.getLogger(__name__)


def validate_startup_configuration() -> None:
    """Warn about missing backend credentials.

    The host app may still write them into the shared store later, so this never
    aborts startup.
    """
    for field_name, service_name in (("supabase_url", "Backend URL"), ("supabase_anon_key", "Backend API key")):
        try:
            settings.require_credential(field_name, service_name)
        except ValueError as e:
            logger.warning("startup_validation", extra={"field": field_name, "status": "missing", "error": str(e)})
    logger.info("startup_validation_complete", extra={"storage_backend": settings.storage_backend})


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan context manager."""
    configure_logfire()
    validate_startup_configuration()
    app.state.runtime = build_runtime(settings)
    logger.info("Widget runtime initialized")
    yield
    # Shutdown
    await close_runtime(app.state.runtime)


app = FastAPI(
    title="omamori-widget-sync",
    description="Task state synchronization engine for the OMAMORI shared task widget",
    version="0.1.0",
    lifespan=lifespan,
)

# Instrument FastAPI with Logfire
instrument_fastapi(app)

# Register routers
app.include_router(intent_router)


@app.get("/health")
async def health_check() -> JSONResponse:
    """Health check endpoint."""
    return JSONResponse(content={"status": "healthy"}, status_code=200)
