"""
Blur / sharpness detection using Laplacian variance.

The Laplacian operator approximates the second derivative of an image.
High-frequency edges produce large variance; blurry images lose those
edges and produce low variance.

The variance is centred on the global *grayscale* mean rather than the
mean of the Laplacian field, so a flat image scores `mean ** 2`, not 0.
See DESIGN.md before changing this.

Pure CPU operation, no I/O: callers decode the image first (see
`ecofinds_quality.utils.image_loader`) and hand over an RGB(A) array.
"""

from __future__ import annotations

import math

import numpy as np

from ecofinds_quality.core.errors import InvalidImageError
from ecofinds_quality.schemas.blur import BlurAnalysis

BLUR_THRESHOLD = 100.0

# ITU-R BT.601 luma weights.
_LUMA_R = 0.299
_LUMA_G = 0.587
_LUMA_B = 0.114

# Smallest side that still leaves one interior pixel for the 3x3 kernel.
MIN_ANALYSABLE_SIDE = 3


def to_grayscale(pixels: np.ndarray) -> np.ndarray:
    """Return the (H, W) float64 luminance field of an (H, W, 3|4) array."""
    if pixels.ndim != 3 or pixels.shape[2] not in (3, 4):
        raise InvalidImageError(
            f"Expected an (H, W, 3) or (H, W, 4) pixel array, got shape {pixels.shape}."
        )
    rgb = pixels[:, :, :3].astype(np.float64)
    return _LUMA_R * rgb[:, :, 0] + _LUMA_G * rgb[:, :, 1] + _LUMA_B * rgb[:, :, 2]


def laplacian_field(gray: np.ndarray) -> np.ndarray:
    """
    4-neighbour Laplacian `[[0,-1,0],[-1,4,-1],[0,-1,0]]` over interior pixels.

    Border pixels are excluded, so the result is (H-2, W-2).
    """
    height, width = gray.shape
    if height < MIN_ANALYSABLE_SIDE or width < MIN_ANALYSABLE_SIDE:
        raise InvalidImageError(
            f"Image is {width}x{height}; blur detection needs at least "
            f"{MIN_ANALYSABLE_SIDE}x{MIN_ANALYSABLE_SIDE} pixels."
        )
    centre = gray[1:-1, 1:-1]
    return (
        4 * centre
        - gray[:-2, 1:-1]   # up
        - gray[2:, 1:-1]    # down
        - gray[1:-1, :-2]   # left
        - gray[1:-1, 2:]    # right
    )


def laplacian_variance(pixels: np.ndarray) -> float:
    gray = to_grayscale(pixels)
    lap = laplacian_field(gray)
    # Running sums (cumsum) add values one at a time in row-major order;
    # np.mean would sum pairwise and differ in the last bits.
    mean = np.cumsum(gray.ravel())[-1] / gray.size
    squared = (lap - mean) ** 2
    return float(np.cumsum(squared.ravel())[-1] / squared.size)


def analyse_blur(pixels: np.ndarray, threshold: float = BLUR_THRESHOLD) -> BlurAnalysis:
    """
    Score the sharpness of a decoded image.

    Raises InvalidImageError when the array is not an RGB(A) image or is
    smaller than 3x3, and ValueError for a non-positive threshold.
    """
    if not threshold > 0:
        raise ValueError(f"threshold must be positive, got {threshold!r}")

    variance = laplacian_variance(pixels)
    is_blurry = variance < threshold

    return BlurAnalysis(
        blur_score=round_half_up(variance),
        is_blurry=is_blurry,
        threshold=threshold,
        quality="blurry" if is_blurry else "sharp",
        laplacian_variance=round(variance, 4),
    )


def error_analysis(threshold: float, message: str) -> BlurAnalysis:
    """Soft-fail result for an image that could not be loaded or analysed."""
    return BlurAnalysis(
        blur_score=0,
        is_blurry=True,
        threshold=threshold,
        quality="error",
        error=message,
    )


def round_half_up(value: float) -> int:
    """Round .5 upwards for non-negative display values; round() is half-to-even."""
    return int(math.floor(value + 0.5))
