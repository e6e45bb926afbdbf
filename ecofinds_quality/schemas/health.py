"""
Health check response schemas.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """Response body for GET /health and GET /v1/health"""

    status: Literal["ok"] = Field(
        description="Always `ok` while the process is serving requests; "
                    "blur detection has no model to load."
    )
    version: str = Field(description="Service version string.", examples=["1.0.0"])
    environment: str = Field(examples=["production"])
    uptime_seconds: float = Field(description="Seconds since the process started.")
    blur_threshold: float = Field(
        description="Default blur threshold applied when a request sets none.",
        examples=[100.0],
    )
