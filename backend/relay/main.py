"""Relay FastAPI Application Entry Point."""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text

from relay.config import Settings, get_settings
from relay.database import close_database, get_database, init_database
from relay.middleware.error_handler import (
    RelayException,
    general_exception_handler,
    relay_exception_handler,
    validation_exception_handler,
)
from relay.models.schemas import HealthResponse
from relay.publishing.orchestrator import PublishOrchestrator
from relay.tasks.scheduler import SessionCleanupScheduler

logger = logging.getLogger(__name__)


def configure_logging(settings: Settings) -> None:
    """Configure root logging from settings."""
    logging.basicConfig(
        level=logging.DEBUG if settings.debug else settings.log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    settings: Settings = app.state.settings
    logger.info(f"Starting {settings.app_name} API...")
    logger.info(f"Environment: {settings.environment}")
    logger.info(f"Workspace: {settings.workspace_path}")

    database = await init_database(settings)
    app.state.orchestrator = PublishOrchestrator.from_settings(settings)
    app.state.session_cleanup = SessionCleanupScheduler(
        database,
        interval_seconds=settings.session_cleanup_interval_seconds,
    )
    await app.state.session_cleanup.start()

    yield

    logger.info(f"Shutting down {settings.app_name} API...")
    await app.state.session_cleanup.shutdown()
    await app.state.orchestrator.close()
    await close_database()


def create_application(settings: Optional[Settings] = None) -> FastAPI:
    """Factory function to create and configure the FastAPI application."""
    settings = settings or get_settings()
    configure_logging(settings)

    app = FastAPI(
        title=settings.app_name,
        description="Relay content publishing backend",
        version=settings.app_version,
        docs_url="/api/docs",
        redoc_url="/api/redoc",
        openapi_url="/api/openapi.json",
        lifespan=lifespan,
    )
    app.state.settings = settings

    # Configure CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "PATCH", "OPTIONS"],
        allow_headers=["*"],
    )

    # Register exception handlers
    app.add_exception_handler(RelayException, relay_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)

    @app.get("/health", tags=["Health"], response_model=HealthResponse)
    async def health_check() -> HealthResponse:
        """Health check endpoint."""
        return HealthResponse(
            status="healthy",
            version=settings.app_version,
            checks={"api": "up", "database": await _database_status()},
        )

    @app.get("/ready", tags=["Health"])
    async def readiness_check(request: Request) -> dict:
        """Readiness check for deployments."""
        return {"ready": getattr(request.app.state, "orchestrator", None) is not None}

    return app


async def _database_status() -> str:
    try:
        async with get_database().session() as session:
            await session.execute(text("SELECT 1"))
    except Exception as e:
        logger.warning(f"Database health check failed: {e}")
        return "down"
    return "up"


app = create_application()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "relay.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level="debug" if settings.debug else "info",
    )
