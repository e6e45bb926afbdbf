"""Unit tests for blur / sharpness detection."""

from __future__ import annotations

import math

import numpy as np
import pytest

from ecofinds_quality.core.errors import InvalidImageError
from ecofinds_quality.services.blur_service import (
    BLUR_THRESHOLD,
    analyse_blur,
    error_analysis,
    laplacian_field,
    laplacian_variance,
    to_grayscale,
)
from tests.helpers import checkerboard, flat


def test_sharp_image_not_blurry() -> None:
    """A pixel-level checkerboard is detected as sharp."""
    result = analyse_blur(checkerboard(64))

    assert result.is_blurry is False
    assert result.quality == "sharp"
    assert result.blur_score > BLUR_THRESHOLD


def test_grayscale_uses_bt601_weights() -> None:
    pixels = np.array([[[100, 0, 0], [0, 100, 0], [0, 0, 100]]], dtype=np.uint8)
    gray = to_grayscale(pixels)

    assert gray.shape == (1, 3)
    assert gray.dtype == np.float64
    assert gray.tolist() == pytest.approx([[29.9, 58.7, 11.4]])


def test_flat_image_has_zero_laplacian() -> None:
    gray = to_grayscale(flat(200, size=10))
    lap = laplacian_field(gray)

    assert lap.shape == (8, 8)
    assert np.allclose(lap, 0.0, atol=1e-9)


@pytest.mark.parametrize("value", [5, 64, 128, 200])
def test_flat_image_variance_is_squared_grayscale_mean(value: int) -> None:
    """The Laplacian is 0 everywhere, so the variance is (0 - mean)^2 = mean^2."""
    pixels = flat(value)
    mean = to_grayscale(pixels).mean()

    assert laplacian_variance(pixels) == pytest.approx(mean ** 2)


def test_dark_flat_image_is_blurry() -> None:
    result = analyse_blur(flat(5))

    assert result.is_blurry is True
    assert result.quality == "blurry"
    assert result.blur_score == 25


def test_bright_flat_image_is_sharp() -> None:
    """Centering on the grayscale mean makes a bright flat field score high."""
    result = analyse_blur(flat(128))

    assert result.is_blurry is False
    assert result.blur_score == 16384


def test_black_image_scores_zero() -> None:
    result = analyse_blur(flat(0))

    assert result.laplacian_variance == 0.0
    assert result.blur_score == 0
    assert result.is_blurry is True


def test_single_bright_centre_pixel() -> None:
    """3x3 image: exactly one interior pixel, worked by hand."""
    pixels = np.zeros((3, 3, 3), dtype=np.uint8)
    pixels[1, 1] = 255
    centre = to_grayscale(pixels)[1, 1]
    mean = centre / 9
    expected = (4 * centre - mean) ** 2

    result = analyse_blur(pixels)

    assert result.laplacian_variance == pytest.approx(expected, abs=1e-3)
    assert result.blur_score == math.floor(expected + 0.5)
    assert result.is_blurry is False


def test_boundary_score_equal_to_threshold_is_not_blurry() -> None:
    pixels = checkerboard(16, square=4)
    variance = laplacian_variance(pixels)

    at_threshold = analyse_blur(pixels, threshold=variance)
    just_above = analyse_blur(pixels, threshold=math.nextafter(variance, math.inf))

    assert at_threshold.is_blurry is False
    assert just_above.is_blurry is True


def test_custom_threshold_is_echoed() -> None:
    result = analyse_blur(checkerboard(16), threshold=50)

    assert result.threshold == 50


def test_repeated_analysis_is_identical() -> None:
    rng = np.random.default_rng(7)
    pixels = rng.integers(0, 256, size=(40, 30, 3), dtype=np.uint8)

    first = analyse_blur(pixels)
    second = analyse_blur(pixels)

    assert first == second


def test_alpha_channel_is_ignored() -> None:
    rgb = checkerboard(20, square=2)
    alpha = np.full(rgb.shape[:2] + (1,), 17, dtype=np.uint8)
    rgba = np.concatenate([rgb, alpha], axis=2)

    assert analyse_blur(rgba) == analyse_blur(rgb)


def test_input_is_not_modified() -> None:
    pixels = checkerboard(12)
    before = pixels.copy()

    analyse_blur(pixels)

    assert np.array_equal(pixels, before)


@pytest.mark.parametrize("shape", [(2, 2, 3), (2, 10, 3), (10, 2, 4), (1, 1, 3)])
def test_too_small_image_raises(shape: tuple[int, int, int]) -> None:
    with pytest.raises(InvalidImageError, match="at least 3x3"):
        analyse_blur(np.zeros(shape, dtype=np.uint8))


@pytest.mark.parametrize("shape", [(10, 10), (10, 10, 2), (10, 10, 3, 1)])
def test_wrong_shape_raises(shape: tuple[int, ...]) -> None:
    with pytest.raises(InvalidImageError):
        analyse_blur(np.zeros(shape, dtype=np.uint8))


@pytest.mark.parametrize("threshold", [0, -1.0, float("nan")])
def test_non_positive_threshold_raises(threshold: float) -> None:
    with pytest.raises(ValueError, match="threshold"):
        analyse_blur(checkerboard(8), threshold=threshold)


def test_error_analysis_fields() -> None:
    result = error_analysis(80.0, "image_decode_error: bad bytes")

    assert result.blur_score == 0
    assert result.is_blurry is True
    assert result.threshold == 80.0
    assert result.quality == "error"
    assert result.laplacian_variance is None
    assert result.error == "image_decode_error: bad bytes"


def test_variance_matches_sequential_sum() -> None:
    """Sums run pixel by pixel in row-major order, not pairwise."""
    rng = np.random.default_rng(7)
    pixels = rng.integers(0, 256, size=(48, 64, 3), dtype=np.uint8)
    gray = to_grayscale(pixels)
    height, width = gray.shape

    total = 0.0
    for value in gray.ravel().tolist():
        total += value
    mean = total / gray.size

    squares = 0.0
    for y in range(1, height - 1):
        for x in range(1, width - 1):
            lap = (
                4 * gray[y, x]
                - gray[y - 1, x]
                - gray[y + 1, x]
                - gray[y, x - 1]
                - gray[y, x + 1]
            )
            squares += (float(lap) - mean) ** 2
    expected = squares / ((height - 2) * (width - 2))

    assert laplacian_variance(pixels) == expected
