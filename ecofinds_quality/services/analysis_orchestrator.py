"""
Analysis orchestrator: load, analyse and report on one or many images.

Responsibilities:
  1. Load the image (URL or base64), the only awaited step.
  2. Run the synchronous blur analysis on the decoded pixels.
  3. Attach display labels and advisory size warnings.
  4. Fold per-image domain errors into an `error`-quality result so a
     batch always returns one entry per input, in input order.

Anything that is not a QualityAPIError (e.g. MemoryError) propagates.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Sequence

from ecofinds_quality.core.errors import QualityAPIError
from ecofinds_quality.schemas.analysis import ImageAnalysisResult
from ecofinds_quality.schemas.blur import BlurConfig
from ecofinds_quality.schemas.common import ImageInput
from ecofinds_quality.services.blur_service import analyse_blur, error_analysis
from ecofinds_quality.services.quality_labels import build_quality_report
from ecofinds_quality.utils.image_loader import load_image, size_warnings

logger = logging.getLogger(__name__)


async def analyse_single_image(
    image_input: ImageInput,
    config: BlurConfig,
) -> ImageAnalysisResult:
    """
    Run blur analysis on one image.
    Never raises for load/decode/size problems; see module docstring.
    """
    t0 = time.perf_counter()
    source_url = str(image_input.url) if image_input.url else None

    try:
        image = await load_image(image_input, config)
        analysis = analyse_blur(image.pixels, config.threshold)
    except QualityAPIError as exc:
        elapsed = (time.perf_counter() - t0) * 1000
        logger.warning("Blur analysis failed for id=%s: %s", image_input.image_id, exc)
        return ImageAnalysisResult(
            image_id=image_input.image_id,
            source_url=source_url,
            analysis=error_analysis(config.threshold, str(exc)),
            processing_time_ms=round(elapsed, 2),
        )

    elapsed = (time.perf_counter() - t0) * 1000
    logger.debug(
        "id=%s score=%d blurry=%s (%.1f ms)",
        image_input.image_id,
        analysis.blur_score,
        analysis.is_blurry,
        elapsed,
    )

    return ImageAnalysisResult(
        image_id=image_input.image_id,
        source_url=source_url,
        width_px=image.width,
        height_px=image.height,
        format=image.format,
        analysis=analysis,
        report=build_quality_report(analysis),
        warnings=size_warnings(image, config),
        processing_time_ms=round(elapsed, 2),
    )


async def analyse_many(
    images: Sequence[ImageInput],
    config: BlurConfig,
    concurrency: int = 1,
) -> list[ImageAnalysisResult]:
    """
    Analyse a list of images; result `i` always belongs to input `i`.

    With `concurrency=1` images are processed strictly one after another.
    Higher values overlap the downloads/decodes of up to that many images.
    """
    if concurrency < 1:
        raise ValueError(f"concurrency must be >= 1, got {concurrency}")

    semaphore = asyncio.Semaphore(concurrency)

    async def _bounded(image_input: ImageInput) -> ImageAnalysisResult:
        async with semaphore:
            return await analyse_single_image(image_input, config)

    # gather() returns results in argument order regardless of completion order.
    results = await asyncio.gather(*(_bounded(i) for i in images))
    failed = sum(1 for r in results if r.failed)
    logger.info("Analysed %d image(s): %d failed", len(results), failed)
    return list(results)
