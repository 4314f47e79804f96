"""Decode uploads into RGBA canvases and encode results for download."""
from __future__ import annotations

import io
import logging
import time

import numpy as np
from PIL import Image, ImageOps, UnidentifiedImageError

from image_studio import config
from image_studio.filters import FilterPreset, apply_filters, apply_filters_parallel

logger = logging.getLogger(__name__)


class ImageDecodeError(ValueError):
    """Raised when an upload is not an image Pillow can read."""


def decode_image(data) -> np.ndarray:
    """Turn uploaded bytes or a file-like object into an ``(H, W, 4)`` RGBA array."""
    source = io.BytesIO(data) if isinstance(data, (bytes, bytearray)) else data
    try:
        with Image.open(source) as img:
            upright = ImageOps.exif_transpose(img)
            pixels = np.array(upright.convert("RGBA"), dtype=np.uint8)
    except (UnidentifiedImageError, OSError) as exc:
        raise ImageDecodeError(f"Could not read image: {exc}") from exc

    logger.info("Decoded image %dx%d", pixels.shape[1], pixels.shape[0])
    return pixels


def encode_png(pixels: np.ndarray) -> bytes:
    """Encode an RGBA canvas as PNG bytes."""
    buf = io.BytesIO()
    Image.fromarray(pixels).save(buf, format="PNG")
    return buf.getvalue()


def process_image(pixels: np.ndarray, preset: FilterPreset) -> np.ndarray:
    """Return a transformed copy of ``pixels``; large images use the worker pool."""
    t0 = time.time()
    canvas = np.array(pixels, dtype=np.uint8, copy=True, order="C")

    if config.WORKERS > 1 and canvas.shape[0] >= config.PARALLEL_MIN_ROWS:
        apply_filters_parallel(canvas, preset, config.WORKERS, config.CHUNK_ROWS)
    else:
        apply_filters(canvas, preset)

    logger.info("Applied %s in %.3fs", preset.name, time.time() - t0)
    return canvas
