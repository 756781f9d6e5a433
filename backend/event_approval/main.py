from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

import uvicorn
from fastapi import FastAPI

from event_approval.api.health import router as health_router
from event_approval.api.router import api_router
from event_approval.config import get_settings
from event_approval.exceptions import setup_exception_handlers
from event_approval.logging_config import configure_logging
from event_approval.middleware import setup_middleware
from event_approval.seed import seed_demo_data, seed_identities
from event_approval.services.identity import InMemoryIdentityService
from event_approval.services.lifecycle import LifecycleService

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from event_approval.config import Settings
    from event_approval.services.identity import IdentityService

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan manager for startup and shutdown."""
    settings: Settings = app.state.settings
    lifecycle: LifecycleService = app.state.lifecycle
    logger.info(
        "Starting %s v%s [%s, %s store]",
        settings.app_name,
        settings.app_version,
        settings.environment,
        settings.data_mode,
    )
    await lifecycle.initialize()
    if settings.seed_demo_data:
        await seed_demo_data(lifecycle)
    yield
    logger.info("Shutting down %s", settings.app_name)
    await lifecycle.close()


def create_app(
    settings: Settings | None = None,
    *,
    lifecycle: LifecycleService | None = None,
    identity: IdentityService | None = None,
) -> FastAPI:
    """Application factory."""
    settings = settings or get_settings()
    configure_logging(settings)

    if identity is None:
        directory = InMemoryIdentityService()
        seed_identities(directory)
        identity = directory

    application = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        debug=settings.debug,
        lifespan=lifespan,
        docs_url="/docs" if settings.environment != "production" else None,
        redoc_url="/redoc" if settings.environment != "production" else None,
    )
    application.state.settings = settings
    application.state.lifecycle = lifecycle or LifecycleService.from_settings(settings)
    application.state.identity = identity

    setup_middleware(application, settings)
    setup_exception_handlers(application)

    application.include_router(health_router)
    application.include_router(api_router)

    return application


app = create_app()


def run() -> None:
    """Serve the API with uvicorn using the configured settings."""
    settings = get_settings()
    uvicorn.run(
        "event_approval.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
        reload=settings.debug,
    )


if __name__ == "__main__":
    run()
