"""
Blur analysis value objects: configuration, per-image result and the
display report derived from it.
"""

from __future__ import annotations

from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class BlurConfig(BaseModel):
    """
    Analyzer configuration.

    Built from `Settings.blur_config()` in the service, or directly in tests
    and library code. Frozen so it can be shared across concurrent analyses.
    """

    model_config = ConfigDict(frozen=True)

    threshold: float = Field(
        default=100.0,
        gt=0,
        description="Variance below this value classifies the image as blurry.",
    )
    min_image_size: int = Field(
        default=100,
        description="Advisory minimum side length in pixels. Smaller images "
                    "are analysed but flagged with a warning.",
    )
    max_image_size: int = Field(
        default=4000,
        description="Advisory maximum side length in pixels.",
    )
    supported_formats: tuple[str, ...] = Field(
        default=("jpeg", "jpg", "png", "webp"),
        description="Accepted image formats (lower-case, without `image/`).",
    )
    decode_timeout_seconds: float = Field(default=20.0, gt=0)
    fetch_timeout_seconds: float = Field(default=15.0, gt=0)
    max_image_size_bytes: int = Field(default=30 * 1024 * 1024, gt=0)

    def accepts_format(self, fmt: str | None) -> bool:
        if not fmt:
            return False
        fmt = fmt.lower().removeprefix("image/")
        return fmt in {f.lower().removeprefix("image/") for f in self.supported_formats}


class BlurAnalysis(BaseModel):
    """Outcome of one blur analysis. `quality='error'` marks a soft failure."""

    model_config = ConfigDict(frozen=True)

    blur_score: int = Field(
        description="Laplacian variance rounded to the nearest integer. "
                    "Higher = sharper.",
        examples=[312],
    )
    is_blurry: bool = Field(
        description="True when the unrounded variance is below `threshold`.",
        examples=[False],
    )
    threshold: float = Field(
        description="Threshold used for the `is_blurry` classification.",
        examples=[100.0],
    )
    quality: Literal["sharp", "blurry", "error"] = Field(examples=["sharp"])
    laplacian_variance: float | None = Field(
        default=None,
        description="Unrounded variance. Null when the analysis failed.",
        examples=[312.4821],
    )
    error: str | None = Field(
        default=None,
        description="Failure message when `quality='error'`.",
        examples=["image_decode_error: Could not decode image bytes."],
    )


class QualityBand(str, Enum):
    very_blurry = "very_blurry"
    somewhat_blurry = "somewhat_blurry"
    good = "good"
    excellent = "excellent"


class QualityReport(BaseModel):
    """Display-oriented summary consumed by the listing upload UI."""

    band: QualityBand
    text: str = Field(examples=["Good quality"])
    color: str = Field(
        description="CSS colour class for the quality label.",
        examples=["text-green-600"],
    )
    advice: str | None = Field(
        default=None,
        examples=["Please upload a clearer image"],
    )
    status: Literal["Good", "Needs Improvement"]
    sharpness_percent: int = Field(
        ge=0,
        le=100,
        description="blur_score / (2 * threshold), clamped to 0-100 %.",
        examples=[62],
    )
