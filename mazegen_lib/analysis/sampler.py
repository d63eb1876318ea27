# --- mazegen_lib/analysis/sampler.py ---
import logging
from io import BytesIO
from typing import Any, Dict, Tuple

import cv2
import numpy as np
from PIL import Image, UnidentifiedImageError

from mazegen_lib.errors import DecodeError

log = logging.getLogger("mazegen.sample")

# ITU-R BT.601 luma weights for R, G, B.
LUMA_WEIGHTS = np.array([0.299, 0.587, 0.114])


def decode_with_info(image_bytes: bytes) -> Tuple[np.ndarray, Dict[str, Any]]:
    """
    Decodes raw image bytes into an RGB uint8 array of shape (h, w, 3).

    Also returns the source size, pixel mode and format as reported by Pillow.
    Oversized images tripping Pillow's decompression bomb guard are decode
    errors like any other unreadable input.
    """
    if not image_bytes:
        raise DecodeError("Failed to process image: empty image data")
    try:
        with Image.open(BytesIO(image_bytes)) as img:
            info = {
                "width": img.width,
                "height": img.height,
                "mode": img.mode,
                "format": img.format,
            }
            rgb = np.array(img.convert("RGB"), dtype=np.uint8)
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as e:
        raise DecodeError(f"Failed to process image: {e}") from e
    return rgb, info


def decode_image(image_bytes: bytes) -> np.ndarray:
    rgb, _ = decode_with_info(image_bytes)
    log.debug("Decoded source image of %dx%d pixels.", rgb.shape[1], rgb.shape[0])
    return rgb


def to_brightness(rgb: np.ndarray) -> np.ndarray:
    """Converts an RGB image to integer luminance, truncated to 0-255."""
    luma = rgb.astype(np.float64) @ LUMA_WEIGHTS
    return np.clip(luma.astype(np.int32), 0, 255).astype(np.uint8)


def sample(image_bytes: bytes, width: int, height: int) -> np.ndarray:
    """
    Decodes an image and resamples it to a (height, width) brightness grid.

    Resampling happens on the RGB image with bilinear interpolation, and the
    luminance is computed afterwards per grid cell.
    """
    rgb = decode_image(image_bytes)
    resized = cv2.resize(rgb, (width, height), interpolation=cv2.INTER_LINEAR)
    grid = to_brightness(resized)
    log.debug("Resampled to %dx%d brightness grid.", width, height)
    return grid


def describe(grid: np.ndarray) -> Dict[str, float]:
    """Summarizes the brightness distribution of a grid for diagnostics."""
    min_b = int(grid.min())
    max_b = int(grid.max())
    stats = {
        "min": min_b,
        "max": max_b,
        "mean": round(float(grid.mean()), 1),
        "contrast": max_b - min_b,
    }
    log.debug(
        "Brightness min=%d max=%d avg=%.1f contrast=%d",
        stats["min"],
        stats["max"],
        stats["mean"],
        stats["contrast"],
    )
    if stats["contrast"] < 50:
        log.warning("Low contrast range (%d), may have few detectable edges.", stats["contrast"])
    return stats


def analyze(image_bytes: bytes) -> Dict[str, Any]:
    """Source size, mode and full-resolution brightness statistics of an image."""
    rgb, info = decode_with_info(image_bytes)
    info["brightness"] = describe(to_brightness(rgb))
    return info
