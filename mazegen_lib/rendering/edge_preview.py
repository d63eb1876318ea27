# --- mazegen_lib/rendering/edge_preview.py ---
import logging

import cv2
import numpy as np

log = logging.getLogger("mazegen.render")

PREVIEW_SCALE = 8


def edge_image(mask: np.ndarray, scale: int = PREVIEW_SCALE) -> np.ndarray:
    """Draws edge cells black on white, scaled up with nearest-neighbor."""
    canvas = np.full(mask.shape, 255, dtype=np.uint8)
    canvas[mask] = 0
    height, width = mask.shape
    return cv2.resize(
        canvas, (width * scale, height * scale), interpolation=cv2.INTER_NEAREST
    )


def edge_png(mask: np.ndarray, scale: int = PREVIEW_SCALE) -> bytes:
    """Encodes the edge preview as PNG bytes."""
    ok, buf = cv2.imencode(".png", edge_image(mask, scale))
    if not ok:
        raise ValueError("Could not encode edge preview as PNG")
    log.debug("Encoded edge preview of %d bytes.", len(buf))
    return buf.tobytes()
