"""
Health check endpoints.

GET /health     root-level health (no auth required, used by Docker/k8s health checks)
GET /v1/health  versioned alias
"""

from __future__ import annotations

import time

from fastapi import APIRouter

from ecofinds_quality.core.config import get_settings
from ecofinds_quality.schemas.health import HealthResponse

router = APIRouter(tags=["Health"])

# Recorded at import time, roughly the process start.
_START_TIME = time.time()


def _build_health_response() -> HealthResponse:
    settings = get_settings()
    return HealthResponse(
        status="ok",
        version=settings.app_version,
        environment=settings.environment,
        uptime_seconds=round(time.time() - _START_TIME, 1),
        blur_threshold=settings.blur_threshold,
    )


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
    description=(
        "Returns the service status and version. "
        "Does not require authentication. Suitable for Docker HEALTHCHECK and "
        "Kubernetes liveness and readiness checks."
    ),
)
async def health_root() -> HealthResponse:
    return _build_health_response()


@router.get(
    "/v1/health",
    response_model=HealthResponse,
    summary="Service health check (versioned alias)",
)
async def health_v1() -> HealthResponse:
    return _build_health_response()
