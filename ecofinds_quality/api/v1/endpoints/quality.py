"""
Lookup endpoints that need no image.

GET /v1/quality — map a blur score to its display band
GET /v1/config  — effective blur-detection defaults
"""

from __future__ import annotations

from fastapi import APIRouter, Query

from ecofinds_quality.core.config import get_settings
from ecofinds_quality.core.security import AuthDep
from ecofinds_quality.schemas.analysis import QualityLookupResponse
from ecofinds_quality.schemas.blur import BlurConfig
from ecofinds_quality.services.quality_labels import (
    quality_advice,
    quality_band,
    quality_color,
    quality_text,
    sharpness_percent,
)

router = APIRouter(tags=["Quality"])


@router.get(
    "/quality",
    response_model=QualityLookupResponse,
    summary="Map a blur score to its quality label",
    description=(
        "Returns the text, colour class and advice the upload UI shows for a "
        "score. Useful for re-rendering stored scores without re-analysing."
    ),
)
async def quality_lookup(
    _auth: AuthDep,
    score: float = Query(ge=0, description="Blur score from a previous analysis."),
    threshold: float | None = Query(default=None, gt=0),
) -> QualityLookupResponse:
    if threshold is None:
        threshold = get_settings().blur_threshold
    return QualityLookupResponse(
        score=score,
        threshold=threshold,
        band=quality_band(score, threshold),
        text=quality_text(score, threshold),
        color=quality_color(score, threshold),
        advice=quality_advice(score, threshold),
        sharpness_percent=sharpness_percent(score, threshold),
    )


@router.get(
    "/config",
    response_model=BlurConfig,
    summary="Effective blur-detection configuration",
)
async def blur_config(_auth: AuthDep) -> BlurConfig:
    return get_settings().blur_config()
