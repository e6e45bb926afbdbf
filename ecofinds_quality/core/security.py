"""
API key authentication dependency for the quality service itself.

Usage in a route:
    @router.post("/analyze")
    async def analyze(body: AnalyzeRequest, _auth: AuthDep) -> ...:
        ...

When `API_KEY` env var is empty the dependency is a no-op so the service
works without authentication in development mode. Marketplace users never
call this service directly; the listing backend holds the key.
"""

from __future__ import annotations

import secrets
from typing import Annotated

from fastapi import Depends, Security
from fastapi.security import APIKeyHeader

from ecofinds_quality.core.config import get_settings
from ecofinds_quality.core.errors import UnauthorizedError

_KEY_HEADER = APIKeyHeader(
    name="X-Api-Key",
    auto_error=False,      # we raise a custom error below
    description="API key for service authentication. "
                "Set the `API_KEY` environment variable on the server to enable.",
)


async def verify_api_key(
    key: Annotated[str | None, Security(_KEY_HEADER)],
) -> None:
    """
    - If `API_KEY` env var is blank: authentication is disabled, all requests pass.
    - If `API_KEY` env var is set: the incoming `X-Api-Key` header must match.
    """
    settings = get_settings()

    if not settings.auth_enabled:
        return

    if not key or not secrets.compare_digest(key, settings.api_key):
        raise UnauthorizedError()


AuthDep = Annotated[None, Depends(verify_api_key)]
