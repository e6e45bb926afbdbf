"""
Single-image and batch analysis endpoints.

POST /v1/analyze        — analyse one image
POST /v1/analyze/batch  — analyse up to MAX_BATCH_SIZE images
"""

from __future__ import annotations

import time

from fastapi import APIRouter

from ecofinds_quality.core.config import get_settings
from ecofinds_quality.core.errors import BatchTooLargeError
from ecofinds_quality.core.security import AuthDep
from ecofinds_quality.schemas.analysis import (
    AnalyzeRequest,
    AnalyzeResponse,
    BatchAnalyzeRequest,
    BatchAnalyzeResponse,
)
from ecofinds_quality.services.analysis_orchestrator import (
    analyse_many,
    analyse_single_image,
)

router = APIRouter(prefix="/analyze", tags=["Analysis"])


@router.post(
    "",
    response_model=AnalyzeResponse,
    summary="Analyse a single image",
    description=(
        "Submit a single image (URL or base64) and receive its blur score, "
        "sharp/blurry classification and display labels. "
        "Images that cannot be fetched or decoded still return 200 with "
        "`analysis.quality = \"error\"` and the reason in `analysis.error`."
    ),
    responses={
        401: {"description": "Missing or invalid X-Api-Key header."},
        422: {"description": "Validation error."},
    },
)
async def analyze_single(
    body: AnalyzeRequest,
    _auth: AuthDep,
) -> AnalyzeResponse:
    config = get_settings().blur_config(body.threshold)
    result = await analyse_single_image(body.image, config)
    return AnalyzeResponse(result=result)


@router.post(
    "/batch",
    response_model=BatchAnalyzeResponse,
    summary="Analyse multiple images in one request",
    description=(
        "Submit a list of images (mix of URLs and base64 is allowed). "
        "Per-image failures are isolated: a single bad image does not fail the "
        "entire batch, and results keep the request order. "
        "`blurry_image_ids` lists the images the seller should review. "
        "Maximum batch size is configurable via the MAX_BATCH_SIZE environment "
        "variable (default: 20)."
    ),
    responses={
        401: {"description": "Missing or invalid X-Api-Key header."},
        422: {"description": "Validation error or batch exceeds size limit."},
    },
)
async def analyze_batch(
    body: BatchAnalyzeRequest,
    _auth: AuthDep,
) -> BatchAnalyzeResponse:
    settings = get_settings()
    if len(body.images) > settings.max_batch_size:
        raise BatchTooLargeError(len(body.images), settings.max_batch_size)

    config = settings.blur_config(body.threshold)

    t0 = time.perf_counter()
    results = await analyse_many(body.images, config, settings.batch_concurrency)
    elapsed = (time.perf_counter() - t0) * 1000

    failed = sum(1 for r in results if r.failed)
    blurry_ids = [r.image_id for r in results if r.analysis.is_blurry]

    return BatchAnalyzeResponse(
        total=len(results),
        succeeded=len(results) - failed,
        failed=failed,
        blurry_image_ids=blurry_ids,
        needs_review=bool(blurry_ids),
        results=results,
        total_processing_time_ms=round(elapsed, 2),
    )
