# --- mazegen_lib/rendering/text_renderer.py ---
import logging
from typing import Optional, Tuple

import numpy as np

from mazegen_lib.schema import CellState, MazeMetadata, Path

log = logging.getLogger("mazegen.render")

CELL_CHARS = {
    CellState.WALL: "█",
    CellState.OPEN: " ",
    CellState.ENTRY: "S",
    CellState.EXIT: "E",
    CellState.SOLUTION: ".",
}
CHAR_CELLS = {v: k for k, v in CELL_CHARS.items()}


def calculate_difficulty(width: int, height: int, solution_length: int) -> str:
    """Rates a maze from its size and how much of it the solution covers."""
    total_cells = width * height
    complexity = solution_length / total_cells

    if total_cells < 500 and complexity < 0.3:
        return "Easy"
    if total_cells < 1000 and complexity < 0.5:
        return "Medium"
    if total_cells < 2000 and complexity < 0.7:
        return "Hard"
    return "Expert"


def overlay_path(maze: np.ndarray, path: Path) -> np.ndarray:
    """Returns a copy of the maze with OPEN path cells marked as SOLUTION."""
    canvas = maze.copy()
    for c in path:
        if canvas[c.y, c.x] == CellState.OPEN:
            canvas[c.y, c.x] = CellState.SOLUTION
    return canvas


def to_text(maze: np.ndarray) -> str:
    """Serializes a maze row-major, one character per cell, no trailing newline."""
    lookup = np.array([CELL_CHARS[s] for s in CellState])
    return "\n".join("".join(row) for row in lookup[maze])


def parse(text: str) -> np.ndarray:
    """Rebuilds a CellState grid from rendered maze text."""
    rows = text.split("\n")
    return np.array([[CHAR_CELLS[ch] for ch in row] for row in rows], dtype=np.uint8)


def render(
    maze: np.ndarray,
    path: Path,
    edge_count: int,
    generated_at: int,
    image_id: Optional[str] = None,
) -> Tuple[str, MazeMetadata]:
    """Composes the maze and its solution into text plus derived metadata."""
    height, width = maze.shape
    text = to_text(overlay_path(maze, path))
    metadata = MazeMetadata(
        width=width,
        height=height,
        imageId=image_id,
        imagePathLength=edge_count,
        solutionPathLength=len(path),
        difficulty=calculate_difficulty(width, height, len(path)),
        generatedAt=generated_at,
    )
    log.debug(
        "Rendered %dx%d maze, solution %d cells, difficulty %s.",
        width,
        height,
        len(path),
        metadata.difficulty,
    )
    return text, metadata
