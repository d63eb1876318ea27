# --- mazegen_lib/generation/topology.py ---
import logging
import random
from typing import List, Tuple

import numpy as np

from mazegen_lib.schema import CellState, Coordinate

log = logging.getLogger("mazegen.topology")

# Half-step lattice moves: north, east, south, west.
LATTICE_DIRECTIONS = [(0, -2), (2, 0), (0, 2), (-2, 0)]

RELAXATION_PROBABILITY = 0.3
MAX_RELAXATION_CANDIDATES = 20


def entry_point() -> Coordinate:
    return Coordinate(1, 1)


def exit_point(width: int, height: int) -> Coordinate:
    return Coordinate(width - 2, height - 2)


def _is_interior(x: int, y: int, width: int, height: int) -> bool:
    return 0 < x < width - 1 and 0 < y < height - 1


def carve(maze: np.ndarray, start: Tuple[int, int], rng: random.Random) -> None:
    """
    Randomized backtracking over the odd-aligned lattice, in place.

    Uses an explicit stack of (cell, remaining directions) frames. Directions are
    shuffled when a cell is entered, so the visit order and the random draws are
    identical to the recursive formulation.
    """
    height, width = maze.shape

    def enter(x: int, y: int) -> Tuple[int, int, List[Tuple[int, int]]]:
        maze[y, x] = CellState.OPEN
        directions = list(LATTICE_DIRECTIONS)
        rng.shuffle(directions)
        return x, y, directions

    stack = [enter(*start)]
    while stack:
        x, y, directions = stack[-1]
        if not directions:
            stack.pop()
            continue
        dx, dy = directions.pop(0)
        nx, ny = x + dx, y + dy
        if _is_interior(nx, ny, width, height) and maze[ny, nx] == CellState.WALL:
            maze[y + dy // 2, x + dx // 2] = CellState.OPEN
            stack.append(enter(nx, ny))


def open_neighbor_count(maze: np.ndarray, x: int, y: int) -> int:
    height, width = maze.shape
    count = 0
    for nx, ny in ((x, y - 1), (x + 1, y), (x, y + 1), (x - 1, y)):
        if 0 <= nx < width and 0 <= ny < height and maze[ny, nx] != CellState.WALL:
            count += 1
    return count


def relax(maze: np.ndarray, rng: random.Random) -> int:
    """Opens a few extra WALL cells next to 2-3 open cells to add short cycles."""
    height, width = maze.shape
    candidates = min(width * height // 50, MAX_RELAXATION_CANDIDATES)
    opened = 0
    for _ in range(candidates):
        x = rng.randint(1, width - 2)
        y = rng.randint(1, height - 2)
        if maze[y, x] != CellState.WALL:
            continue
        if 2 <= open_neighbor_count(maze, x, y) <= 3 and rng.random() < RELAXATION_PROBABILITY:
            maze[y, x] = CellState.OPEN
            opened += 1
    return opened


def seal_border(maze: np.ndarray) -> None:
    maze[0, :] = CellState.WALL
    maze[-1, :] = CellState.WALL
    maze[:, 0] = CellState.WALL
    maze[:, -1] = CellState.WALL


def connect_to_lattice(maze: np.ndarray, cell: Coordinate) -> None:
    """
    Opens a cell and, when it is off the odd lattice, the neighbor joining it
    to a lattice cell. Every odd/odd interior cell is open after carving.
    """
    x, y = cell.x, cell.y
    maze[y, x] = CellState.OPEN
    if x % 2 == 0:
        maze[y, x - 1] = CellState.OPEN
    elif y % 2 == 0:
        maze[y - 1, x] = CellState.OPEN


def generate(width: int, height: int, rng: random.Random) -> np.ndarray:
    """
    Builds a (height, width) maze of WALL and OPEN cells in which the entry at
    (1, 1) and the exit at (width-2, height-2) are connected.
    """
    maze = np.full((height, width), CellState.WALL, dtype=np.uint8)

    start = (
        1 + 2 * rng.randrange((width - 1) // 2),
        1 + 2 * rng.randrange((height - 1) // 2),
    )
    log.debug("Carving %dx%d maze from lattice cell %s.", width, height, start)
    carve(maze, start, rng)

    opened = relax(maze, rng)
    log.debug("Relaxation opened %d extra cells.", opened)

    seal_border(maze)
    connect_to_lattice(maze, entry_point())
    connect_to_lattice(maze, exit_point(width, height))

    log.info(
        "Topology ready: %d open cells out of %d.",
        int(np.count_nonzero(maze != CellState.WALL)),
        width * height,
    )
    return maze
