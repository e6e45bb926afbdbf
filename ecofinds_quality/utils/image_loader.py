"""
Image loading utilities.

Accepts both URL and base64 inputs; returns an (H, W, 3) RGB numpy array
ready for blur analysis. Enforces byte limits, the supported-format list
and a per-image timeout. This is the only step of an analysis that awaits.
"""

from __future__ import annotations

import asyncio
import io
import logging
from typing import NamedTuple
from urllib.parse import urlparse

import httpx
import numpy as np
from PIL import Image, UnidentifiedImageError

from ecofinds_quality.core.errors import (
    ImageDecodeError,
    ImageFetchError,
    ImageTooLargeError,
    UnsupportedFormatError,
)
from ecofinds_quality.schemas.blur import BlurConfig
from ecofinds_quality.schemas.common import ImageInput

logger = logging.getLogger(__name__)

# Allowlist of schemes that the service will fetch from.
_ALLOWED_SCHEMES = {"http", "https"}

# Multi-picture JPEGs written by many phone cameras.
_FORMAT_ALIASES = {"mpo": "jpeg"}


class LoadedImage(NamedTuple):
    pixels: np.ndarray          # RGB uint8, shape (H, W, 3)
    width: int
    height: int
    format: str                 # lower-case Pillow format name, e.g. "jpeg"


async def load_image(image_input: ImageInput, config: BlurConfig) -> LoadedImage:
    """
    Fetch or decode the image described by `image_input`.
    Raises QualityAPIError subclasses on failure; a load that exceeds
    `config.decode_timeout_seconds` raises ImageDecodeError.
    """
    try:
        return await asyncio.wait_for(
            _load(image_input, config), timeout=config.decode_timeout_seconds
        )
    except asyncio.TimeoutError:
        raise ImageDecodeError(
            f"Image load did not finish within {config.decode_timeout_seconds:g}s."
        ) from None


async def _load(image_input: ImageInput, config: BlurConfig) -> LoadedImage:
    if image_input.url is not None:
        raw_bytes = await _fetch_url(str(image_input.url), config)
    else:
        # base64 is already decoded by Pydantic Base64Bytes
        raw_bytes = bytes(image_input.data)  # type: ignore[arg-type]

    return await asyncio.to_thread(decode_bytes, raw_bytes, config)


async def _fetch_url(url: str, config: BlurConfig) -> bytes:
    parsed = urlparse(url)
    if parsed.scheme not in _ALLOWED_SCHEMES:
        raise ImageFetchError(f"Unsupported URL scheme '{parsed.scheme}'. Only http/https allowed.")

    try:
        async with httpx.AsyncClient(
            follow_redirects=True,
            timeout=config.fetch_timeout_seconds,
        ) as client:
            response = await client.get(url)
            response.raise_for_status()
    except httpx.TimeoutException:
        raise ImageFetchError(
            f"Request to '{url}' timed out after {config.fetch_timeout_seconds:g}s."
        )
    except httpx.HTTPStatusError as exc:
        raise ImageFetchError(
            f"HTTP {exc.response.status_code} fetching '{url}'."
        )
    except httpx.RequestError as exc:
        raise ImageFetchError(f"Network error fetching '{url}': {exc}")

    raw = response.content
    if len(raw) > config.max_image_size_bytes:
        raise ImageTooLargeError(len(raw), config.max_image_size_bytes)

    return raw


def decode_bytes(raw_bytes: bytes, config: BlurConfig) -> LoadedImage:
    """Decode encoded image bytes into an RGB array. Synchronous."""
    if len(raw_bytes) > config.max_image_size_bytes:
        raise ImageTooLargeError(len(raw_bytes), config.max_image_size_bytes)

    try:
        pil_image = Image.open(io.BytesIO(raw_bytes))
        fmt = (pil_image.format or "").lower()
        fmt = _FORMAT_ALIASES.get(fmt, fmt)
        if not config.accepts_format(fmt):
            raise UnsupportedFormatError(fmt or None, config.supported_formats)
        if pil_image.mode.startswith("I"):
            # 16-bit grayscale (PNG "I;16" / "I"): keep the high byte, as
            # convert() would clip every value above 255 to white.
            high = np.clip(np.asarray(pil_image).astype(np.int64) >> 8, 0, 255)
            pil_image = Image.fromarray(high.astype(np.uint8))
        rgb = pil_image.convert("RGB")
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as exc:
        raise ImageDecodeError(f"Could not decode image bytes: {exc}")

    width, height = rgb.size
    logger.debug("Decoded %s image %dx%d", fmt, width, height)
    return LoadedImage(pixels=np.asarray(rgb), width=width, height=height, format=fmt)


def size_warnings(image: LoadedImage, config: BlurConfig) -> list[str]:
    """Advisory notes when the image falls outside the recommended size range."""
    warnings: list[str] = []
    if min(image.width, image.height) < config.min_image_size:
        warnings.append(
            f"Image is {image.width}x{image.height}; at least "
            f"{config.min_image_size}px per side is recommended."
        )
    if max(image.width, image.height) > config.max_image_size:
        warnings.append(
            f"Image is {image.width}x{image.height}; at most "
            f"{config.max_image_size}px per side is recommended."
        )
    return warnings
