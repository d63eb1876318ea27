# --- mazegen_lib/generator.py ---
import logging
import random
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional, Tuple

import numpy as np
import psutil

from mazegen_lib import errors, schema
from mazegen_lib.analysis import edges, sampler
from mazegen_lib.generation import pathfinder, topology
from mazegen_lib.rendering import text_renderer
from mazegen_lib.services.config_service import MazeLimits

log = logging.getLogger("mazegen.generate")


class Stage(Enum):
    VALIDATING = "validating"
    SAMPLING = "sampling"
    EDGE_DETECTING = "edge_detecting"
    TOPOLOGY_BUILDING = "topology_building"
    PATHFINDING = "pathfinding"
    RENDERING = "rendering"
    DONE = "done"
    FAILED = "failed"


@dataclass
class _PipelineState:
    """Tracks which stage a single generation call is in."""

    stage: Stage = Stage.VALIDATING

    def enter(self, stage: Stage) -> None:
        log.debug("Stage: %s -> %s", self.stage.value, stage.value)
        self.stage = stage


def estimate_memory_usage(width: int, height: int) -> int:
    """Rough byte estimate for grid, mask, path nodes and text, doubled for safety."""
    cells = width * height
    cells_mem = cells * 2
    edges_mem = cells
    path_mem = cells * 24
    str_mem = cells * 2
    return (cells_mem + edges_mem + path_mem + str_mem) * 2


def available_memory() -> int:
    return psutil.virtual_memory().available


def epoch_millis() -> int:
    return int(time.time() * 1000)


class MazeGenerator:
    """
    Orchestrates the image-to-maze pipeline.

    Holds no per-request state, so one instance can serve concurrent requests.
    Every call builds its own random source, grids and path.
    """

    def __init__(
        self,
        image_store,
        limits: Optional[MazeLimits] = None,
        rng_factory: Callable[[], random.Random] = random.Random,
        clock: Callable[[], int] = epoch_millis,
        memory_probe: Callable[[], int] = available_memory,
    ):
        self.image_store = image_store
        self.limits = limits or MazeLimits()
        self.rng_factory = rng_factory
        self.clock = clock
        self.memory_probe = memory_probe

    def generate(
        self, image_id: str, width: int, height: int, seed: Optional[int] = None
    ) -> schema.GenerationResult:
        """
        Generates a maze from a stored image.

        Returns a successful GenerationResult carrying the rendered text and
        metadata, or a failed one carrying a stable error kind and a message.
        Never raises.
        """
        request = schema.GenerationRequest(image_id=image_id, width=width, height=height)
        state = _PipelineState()
        log.info("Generating maze: %dx%d for image %s", width, height, image_id)
        try:
            self.validate(request)
            rng = random.Random(seed) if seed is not None else self.rng_factory()
            maze, path, edge_count = self._solve(request, rng, state)

            state.enter(Stage.RENDERING)
            text, metadata = text_renderer.render(
                maze,
                path,
                edge_count=edge_count,
                generated_at=self.clock(),
                image_id=request.image_id,
            )
            state.enter(Stage.DONE)
            log.debug("\n%s", text, extra={"raw": True})
        except MemoryError as e:
            log.error("Out of memory during %s: %s", state.stage.value, e)
            error = errors.ResourceExhausted("Out of memory. Please try a smaller size.")
            return self._fail(state, error.kind, error.message)
        except errors.InternalPathfindingFailure as e:
            log.error("Pathfinding invariant violated: %s", e.message)
            return self._fail(state, errors.INTERNAL_ERROR, f"Failed to generate maze: {e}")
        except errors.MazeGenerationError as e:
            return self._fail(state, e.kind, e.message)
        except Exception as e:
            log.error(
                "Maze generation error during %s: %s", state.stage.value, e, exc_info=True
            )
            return self._fail(state, errors.INTERNAL_ERROR, f"Failed to generate maze: {e}")

        log.info(
            "Maze generated: %dx%d, solution %d cells, difficulty %s.",
            metadata.width,
            metadata.height,
            metadata.solutionPathLength,
            metadata.difficulty,
        )
        return schema.GenerationResult.ok(text, metadata)

    def validate_dimensions(self, width: int, height: int) -> None:
        """Rejects non-positive axes, then oversized grids, then per-axis bounds."""
        limits = self.limits
        if width <= 0 or height <= 0:
            raise errors.InvalidDimensions(
                f"Invalid maze dimensions: {width}x{height}. Both axes must be positive."
            )
        if width * height > limits.max_cells:
            raise errors.SizeExceeded(
                f"Maze size too large: {width}x{height} has {width * height} cells, "
                f"maximum allowed is {limits.max_cells}."
            )
        if not (
            limits.min_size <= width <= limits.max_width
            and limits.min_size <= height <= limits.max_height
        ):
            raise errors.InvalidDimensions(
                f"Invalid maze dimensions. Width must be between {limits.min_size} and "
                f"{limits.max_width}, height between {limits.min_size} and "
                f"{limits.max_height}."
            )

    def validate(self, request: schema.GenerationRequest) -> None:
        """Admission control. Raises before any grid is allocated."""
        self.validate_dimensions(request.width, request.height)
        if not self.image_store.exists(request.image_id):
            raise errors.ImageNotFound(request.image_id)

        needed = estimate_memory_usage(request.width, request.height)
        free = self.memory_probe()
        log.debug(
            "Free memory: %dMB, estimated needed: %dMB",
            free // 1024 // 1024,
            needed // 1024 // 1024,
        )
        if needed > free * self.limits.memory_fraction:
            raise errors.InsufficientMemory(
                "Not enough memory for maze of this size. Try a smaller dimension."
            )

    def detect_edges(
        self,
        image_id: str,
        width: int,
        height: int,
        rng: Optional[random.Random] = None,
        state: Optional[_PipelineState] = None,
    ) -> edges.EdgeDetection:
        """Samples a stored image and returns its edge mask."""
        state = state or _PipelineState()
        state.enter(Stage.SAMPLING)
        grid = sampler.sample(self.image_store.fetch(image_id), width, height)
        sampler.describe(grid)

        state.enter(Stage.EDGE_DETECTING)
        return edges.detect(grid, rng or self.rng_factory())

    def _solve(
        self, request: schema.GenerationRequest, rng: random.Random, state: _PipelineState
    ) -> Tuple[np.ndarray, schema.Path, int]:
        """Runs sampling through pathfinding. The edge mask does not outlive this call."""
        detection = self.detect_edges(
            request.image_id, request.width, request.height, rng, state
        )

        state.enter(Stage.TOPOLOGY_BUILDING)
        maze = topology.generate(request.width, request.height, rng)
        entry = topology.entry_point()
        exit = topology.exit_point(request.width, request.height)
        maze[entry.y, entry.x] = schema.CellState.ENTRY
        maze[exit.y, exit.x] = schema.CellState.EXIT

        state.enter(Stage.PATHFINDING)
        result = pathfinder.find_path(maze, detection.mask, entry, exit)
        log.debug("Path strategy: %s", result.strategy)
        return maze, result.path, detection.edge_count

    def _fail(self, state: _PipelineState, kind: str, message: str) -> schema.GenerationResult:
        log.warning("Generation failed during %s: %s", state.stage.value, message)
        state.enter(Stage.FAILED)
        return schema.GenerationResult.failure(kind, message)
