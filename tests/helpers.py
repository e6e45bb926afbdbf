"""Synthetic test images."""

from __future__ import annotations

import base64
import io

import numpy as np
from PIL import Image


def checkerboard(size: int = 64, square: int = 1) -> np.ndarray:
    """High-contrast black/white RGB checkerboard."""
    rows, cols = np.indices((size, size)) // square
    grey = np.where((rows + cols) % 2 == 0, 255, 0).astype(np.uint8)
    return np.stack([grey, grey, grey], axis=2)


def flat(value: int, size: int = 32) -> np.ndarray:
    return np.full((size, size, 3), value, dtype=np.uint8)


def encode(pixels: np.ndarray, fmt: str = "PNG") -> bytes:
    buf = io.BytesIO()
    Image.fromarray(pixels).save(buf, format=fmt)
    return buf.getvalue()


def encode_b64(pixels: np.ndarray, fmt: str = "PNG") -> str:
    return base64.b64encode(encode(pixels, fmt)).decode("ascii")


NOT_AN_IMAGE_B64 = base64.b64encode(b"definitely not an image").decode("ascii")
