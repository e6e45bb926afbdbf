"""
FastAPI application entrypoint.

Startup sequence:
  1. Configure structured logging.
  2. Register versioned routers.
  3. Register global exception handlers.
  4. Optionally attach rate limiter.

Blur detection needs no model weights, so startup is immediate.

Serve with:  uvicorn ecofinds_quality.main:app
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from ecofinds_quality.api.v1.endpoints.health import router as health_router
from ecofinds_quality.api.v1.router import v1_router
from ecofinds_quality.core.config import Settings, get_settings
from ecofinds_quality.core.errors import register_exception_handlers
from ecofinds_quality.core.logging import configure_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """
    FastAPI lifespan handler.
    Everything before `yield` runs at startup; everything after at shutdown.
    """
    settings = get_settings()
    configure_logging(
        level=settings.log_level,
        json_logs=settings.log_json,
        service=settings.app_name,
    )

    logger.info(
        "Starting %s v%s [%s]",
        settings.app_name,
        settings.app_version,
        settings.environment,
    )
    logger.info(
        "Auth: %s | Rate limiting: %s | Blur threshold: %g",
        "enabled" if settings.auth_enabled else "disabled (open mode)",
        "enabled" if settings.rate_limit_enabled else "disabled",
        settings.blur_threshold,
    )
    yield

    logger.info("Shutting down %s.", settings.app_name)


def create_app() -> FastAPI:
    settings = get_settings()

    app = FastAPI(
        title="ecofinds-image-quality",
        description=(
            "Blur detection for EcoFinds listing photos.\n\n"
            "Scores each image by Laplacian variance, classifies it as sharp or "
            "blurry against a threshold, and returns the labels the upload form "
            "shows. Batch analysis isolates per-image failures.\n\n"
            "**Authentication**: Pass your API key in the `X-Api-Key` header. "
            "Authentication is disabled when the `API_KEY` environment variable is unset."
        ),
        version=settings.app_version,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # CORS: the upload form calls the service from the browser.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )

    if settings.rate_limit_enabled:
        _attach_rate_limiter(app, settings)

    # Routers.
    app.include_router(health_router)   # /health (no prefix, no auth)
    app.include_router(v1_router)       # /v1/analyze, /v1/quality, /v1/config

    # Global exception handlers (must come after routers).
    register_exception_handlers(app)

    return app


def _attach_rate_limiter(app: FastAPI, settings: Settings) -> None:
    try:
        from slowapi import Limiter, _rate_limit_exceeded_handler  # type: ignore
        from slowapi.errors import RateLimitExceeded
        from slowapi.middleware import SlowAPIMiddleware
        from slowapi.util import get_remote_address
    except ImportError:
        logger.warning(
            "slowapi is not installed. Rate limiting is disabled. "
            "Install the package with its default dependencies to enable it."
        )
        return

    limiter = Limiter(
        key_func=get_remote_address,
        default_limits=[f"{settings.rate_limit_per_minute}/minute"],
    )
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
    app.add_middleware(SlowAPIMiddleware)
    logger.info("Rate limiter: %d req/min per IP", settings.rate_limit_per_minute)


app = create_app()
