# --- mazegen_lib/analysis/edges.py ---
import logging
import random
from dataclasses import dataclass

import cv2
import numpy as np

log = logging.getLogger("mazegen.edges")

MIN_EDGE_DENSITY = 0.02
MIN_EDGE_COUNT = 10
MAX_SCATTER_POINTS = 20
NEIGHBOR_DIFF_THRESHOLD = 10

TIER_GRADIENT = "gradient"
TIER_NEIGHBOR = "neighbor"
TIER_SYNTHETIC = "synthetic"

_EIGHT_DIRECTIONS = [(-1, -1), (-1, 0), (-1, 1), (0, -1), (0, 1), (1, -1), (1, 0), (1, 1)]


@dataclass
class EdgeDetection:
    """The mask produced by one detection tier."""

    mask: np.ndarray
    tier: str
    edge_count: int

    @property
    def density(self) -> float:
        return self.edge_count / self.mask.size if self.mask.size else 0.0


def _result(mask: np.ndarray, tier: str) -> EdgeDetection:
    return EdgeDetection(mask=mask, tier=tier, edge_count=int(np.count_nonzero(mask)))


def adaptive_threshold(grid: np.ndarray) -> np.ndarray:
    """
    Per-cell gradient threshold derived from the 5x5 local contrast.

    Out-of-image pixels do not take part in the window, which is what the
    default border value of cv2.dilate/cv2.erode gives.
    """
    kernel = np.ones((5, 5), np.uint8)
    src = np.ascontiguousarray(grid, dtype=np.uint8)
    local_max = cv2.dilate(src, kernel).astype(np.int16)
    local_min = cv2.erode(src, kernel).astype(np.int16)
    contrast = local_max - local_min
    return np.where(contrast > 100, 40, np.where(contrast > 50, 25, 15))


def detect_gradient(grid: np.ndarray) -> EdgeDetection:
    """Tier 1: 4-neighborhood gradient magnitude against an adaptive threshold."""
    g = grid.astype(np.int16)
    mask = np.zeros(g.shape, dtype=bool)
    gx = np.abs(g[1:-1, 2:] - g[1:-1, :-2])
    gy = np.abs(g[2:, 1:-1] - g[:-2, 1:-1])
    threshold = adaptive_threshold(grid)[1:-1, 1:-1]
    mask[1:-1, 1:-1] = (gx + gy) > threshold
    return _result(mask, TIER_GRADIENT)


def detect_neighbor_difference(grid: np.ndarray) -> EdgeDetection:
    """Tier 2: maximum absolute difference to any of the 8 neighbors."""
    g = grid.astype(np.int16)
    h, w = g.shape
    mask = np.zeros(g.shape, dtype=bool)
    center = g[1:-1, 1:-1]
    max_diff = np.zeros_like(center)
    for dy, dx in _EIGHT_DIRECTIONS:
        neighbor = g[1 + dy : h - 1 + dy, 1 + dx : w - 1 + dx]
        max_diff = np.maximum(max_diff, np.abs(center - neighbor))
    mask[1:-1, 1:-1] = max_diff > NEIGHBOR_DIFF_THRESHOLD
    return _result(mask, TIER_NEIGHBOR)


def synthesize(width: int, height: int, rng: random.Random) -> EdgeDetection:
    """
    Tier 3: a centered cross over the inner half of each axis plus scattered
    random interior cells. Always holds at least MIN_EDGE_COUNT cells.
    """
    mask = np.zeros((height, width), dtype=bool)
    mask[height // 2, width // 4 : 3 * width // 4] = True
    mask[height // 4 : 3 * height // 4, width // 2] = True

    free_cells = [
        (x, y)
        for y in range(1, height - 1)
        for x in range(1, width - 1)
        if not mask[y, x]
    ]
    n_scatter = min(MAX_SCATTER_POINTS, width * height // 50)
    n_scatter = max(n_scatter, MIN_EDGE_COUNT - int(np.count_nonzero(mask)))
    n_scatter = min(n_scatter, len(free_cells))
    for x, y in rng.sample(free_cells, n_scatter):
        mask[y, x] = True
    return _result(mask, TIER_SYNTHETIC)


def detect(grid: np.ndarray, rng: random.Random) -> EdgeDetection:
    """
    Builds the edge mask for a brightness grid, escalating through the tiers
    until the mask carries enough signal to guide the pathfinder.
    """
    height, width = grid.shape
    total = width * height

    detection = detect_gradient(grid)
    log.info(
        "Gradient pass found %d edge cells out of %d (%.2f%%).",
        detection.edge_count,
        total,
        detection.density * 100,
    )

    if detection.edge_count < total * MIN_EDGE_DENSITY:
        log.info("Low edge count detected, trying 8-neighbor difference pass...")
        detection = detect_neighbor_difference(grid)
        log.info("Neighbor pass found %d edge cells.", detection.edge_count)

    if detection.edge_count < MIN_EDGE_COUNT:
        log.info("Very few edges found, synthesizing a cross pattern.")
        detection = synthesize(width, height, rng)
        log.info("Synthetic mask holds %d edge cells.", detection.edge_count)

    log.debug("Edge mask produced by tier '%s'.", detection.tier)
    return detection
