from __future__ import annotations

"""Application factory for FastAPI app.

Centralizes app construction (metadata, lifespan, middleware, handlers,
routers) so tests can build isolated instances.
"""

import logging
import time
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from app.adapters.rate_limit.sweeper import RateLimitSweeper
from app.adapters.speech.factory import create_speech_client
from app.adapters.storage.factory import create_transcription_repository
from app.api.dependencies import api_rate_limit
from app.api.routes import health_router, info_router, transcription_router
from app.core.config import settings
from app.core.exception_handlers import setup_exception_handlers
from app.core.logging import configure_logging
from app.core.middleware import request_id_middleware
from app.core.openapi import apply_openapi_customizations
from app.core.rate_limit import build_rate_limiters
from app.services.audio_service import AudioService
from app.services.transcription_service import TranscriptionService

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Build shared state on startup and release it on shutdown.

    Limiters are constructed here (one per traffic class) and injected
    through ``app.state``; the sweeper purges their expired entries in the
    background until shutdown.
    """
    rate_limiters = build_rate_limiters(settings.app)
    repository = create_transcription_repository()
    speech_client = create_speech_client()
    audio_service = AudioService(settings.app)

    app.state.started_at = time.monotonic()
    app.state.rate_limiters = rate_limiters
    app.state.repository = repository
    app.state.speech_client = speech_client
    app.state.transcription_service = TranscriptionService(
        repository=repository,
        speech_client=speech_client,
        audio_service=audio_service,
        app_settings=settings.app,
    )

    sweeper = RateLimitSweeper(
        rate_limiters.values(),
        interval_seconds=settings.app.rate_limit_sweep_interval_seconds,
    )
    sweeper.start()
    app.state.rate_limit_sweeper = sweeper

    logger.info(
        "app.started",
        extra={
            "app_env": settings.app_env,
            "storage_backend": settings.storage.backend,
            "speech_provider": speech_client.name,
        },
    )

    try:
        yield
    finally:
        await sweeper.stop()
        await repository.close()
        logger.info("app.stopped")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application instance.

    Returns:
        Configured FastAPI app with middleware, handlers, routers and docs.
    """
    # Logging first so subsequent init logs are formatted as desired
    configure_logging(settings.log)

    app = FastAPI(
        title="Transcription API",
        description=(
            "Accepts an audio URL, produces a transcription (mock or via a "
            "speech-to-text provider) and stores it. Requests are rate limited "
            "per client address."
        ),
        version="1.0.0",
        lifespan=lifespan,
    )

    # Middleware
    app.middleware("http")(request_id_middleware)

    # Exception handlers
    setup_exception_handlers(app)

    # Routers
    app.include_router(health_router)
    app.include_router(
        info_router,
        prefix="/api",
        dependencies=[api_rate_limit],
    )
    app.include_router(
        transcription_router,
        prefix="/api",
        dependencies=[api_rate_limit],
    )

    # OpenAPI customizations (tags, rate limit responses)
    apply_openapi_customizations(app)

    return app
