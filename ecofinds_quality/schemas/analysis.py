"""
Request / response schemas for single-image and batch analysis endpoints.
"""

from __future__ import annotations

from typing import Annotated

from pydantic import BaseModel, Field

from ecofinds_quality.schemas.blur import BlurAnalysis, QualityBand, QualityReport
from ecofinds_quality.schemas.common import ImageInput


class ThresholdOverride(BaseModel):
    threshold: float | None = Field(
        default=None,
        gt=0,
        description="Blur threshold for this request. "
                    "Defaults to the server's BLUR_THRESHOLD (100).",
        examples=[100.0],
    )


# --------------------------------------------------------------------------- #
# Per-image result
# --------------------------------------------------------------------------- #

class ImageAnalysisResult(BaseModel):
    image_id: str | None = Field(
        default=None,
        description="Echoed back from the request `image_id` field.",
        examples=["upload_1"],
    )
    source_url: str | None = Field(
        default=None,
        description="Echoed back when the image was submitted as a URL.",
        examples=["https://cdn.ecofinds.example/listings/123/front.jpg"],
    )
    width_px: int | None = Field(default=None, description="Image width in pixels.")
    height_px: int | None = Field(default=None, description="Image height in pixels.")
    format: str | None = Field(default=None, examples=["jpeg"])
    analysis: BlurAnalysis = Field(
        description="Blur analysis. `quality='error'` when the image could not "
                    "be loaded or analysed; `error` then carries the reason.",
    )
    report: QualityReport | None = Field(
        default=None,
        description="Display labels for the score. Null when the analysis failed.",
    )
    warnings: list[str] = Field(
        default_factory=list,
        description="Advisory notes, e.g. the image is below the recommended size.",
    )
    processing_time_ms: float = Field(
        description="Wall-clock time in milliseconds to analyse this image.",
        examples=[41.7],
    )

    @property
    def failed(self) -> bool:
        return self.analysis.quality == "error"


# --------------------------------------------------------------------------- #
# Single-image endpoint
# --------------------------------------------------------------------------- #

class AnalyzeRequest(ThresholdOverride):
    """Request body for POST /v1/analyze"""

    image: ImageInput

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "image": {
                        "url": "https://cdn.ecofinds.example/listings/123/front.jpg",
                        "image_id": "upload_1",
                    },
                    "threshold": 100,
                }
            ]
        }
    }


class AnalyzeResponse(BaseModel):
    """Response body for POST /v1/analyze"""

    api_version: str = Field(default="1.0", description="API version string.")
    result: ImageAnalysisResult


# --------------------------------------------------------------------------- #
# Batch endpoint
# --------------------------------------------------------------------------- #

class BatchAnalyzeRequest(ThresholdOverride):
    """Request body for POST /v1/analyze/batch"""

    images: Annotated[
        list[ImageInput],
        Field(
            min_length=1,
            description="List of images to analyse. Maximum 20 per request "
                        "(configurable via MAX_BATCH_SIZE env var).",
        ),
    ]

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "images": [
                        {"url": "https://cdn.ecofinds.example/listings/123/front.jpg", "image_id": "p1"},
                        {"url": "https://cdn.ecofinds.example/listings/123/back.jpg", "image_id": "p2"},
                    ],
                }
            ]
        }
    }


class BatchAnalyzeResponse(BaseModel):
    """Response body for POST /v1/analyze/batch"""

    api_version: str = Field(default="1.0")
    total: int = Field(description="Total number of images submitted.")
    succeeded: int = Field(description="Number of images successfully analysed.")
    failed: int = Field(description="Number of images that failed.")
    blurry_image_ids: list[str | None] = Field(
        description="`image_id` of every result flagged blurry (failed images "
                    "included), in request order.",
    )
    needs_review: bool = Field(
        description="True when the seller should be asked to retake, remove "
                    "or keep the blurry images.",
    )
    results: list[ImageAnalysisResult] = Field(
        description="One entry per submitted image, in request order.",
    )
    total_processing_time_ms: float = Field(
        description="Total wall-clock time for the entire batch."
    )


# --------------------------------------------------------------------------- #
# Band lookup
# --------------------------------------------------------------------------- #

class QualityLookupResponse(BaseModel):
    """Response body for GET /v1/quality"""

    score: float
    threshold: float
    band: QualityBand
    text: str
    color: str
    advice: str | None = None
    sharpness_percent: int
