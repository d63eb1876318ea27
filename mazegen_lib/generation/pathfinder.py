# --- mazegen_lib/generation/pathfinder.py ---
import heapq
import itertools
import logging
from collections import deque
from dataclasses import dataclass
from typing import Dict, Optional

import numpy as np

from mazegen_lib.errors import InternalPathfindingFailure
from mazegen_lib.schema import PASSABLE, CellState, Coordinate, Path

log = logging.getLogger("mazegen.path")

STEP_COST = 1.0
EDGE_BONUS = 0.8

STRATEGY_ASTAR = "edge_astar"
STRATEGY_BFS = "bfs"
STRATEGY_CARVED_BFS = "carved_bfs"
STRATEGY_DIRECT = "direct_line"

_PASSABLE_VALUES = [int(s) for s in PASSABLE]


@dataclass
class PathResult:
    path: Path
    strategy: str


def _in_bounds(maze: np.ndarray, c: Coordinate) -> bool:
    height, width = maze.shape
    return 0 <= c.x < width and 0 <= c.y < height


def _is_interior(maze: np.ndarray, c: Coordinate) -> bool:
    height, width = maze.shape
    return 0 < c.x < width - 1 and 0 < c.y < height - 1


def _passable(maze: np.ndarray, c: Coordinate) -> bool:
    return _in_bounds(maze, c) and int(maze[c.y, c.x]) in _PASSABLE_VALUES


def _reconstruct(came_from: Dict[Coordinate, Coordinate], current: Coordinate) -> Path:
    path = [current]
    while current in came_from:
        current = came_from[current]
        path.append(current)
    path.reverse()
    return path


def edge_biased_astar(
    maze: np.ndarray, edges: np.ndarray, entry: Coordinate, exit: Coordinate
) -> Path:
    """
    A* over passable 4-neighbors with Manhattan heuristic. Stepping onto an edge
    cell costs STEP_COST - EDGE_BONUS, so cheap paths hug detected contours.
    Returns an empty list when the exit is unreachable.
    """
    counter = itertools.count()
    open_heap = [(float(entry.manhattan(exit)), next(counter), entry)]
    g_score: Dict[Coordinate, float] = {entry: 0.0}
    came_from: Dict[Coordinate, Coordinate] = {}
    closed = set()

    while open_heap:
        _, _, current = heapq.heappop(open_heap)
        if current == exit:
            return _reconstruct(came_from, current)
        if current in closed:
            continue
        closed.add(current)

        for neighbor in current.neighbors4():
            if neighbor in closed or not _passable(maze, neighbor):
                continue
            cost = STEP_COST - (EDGE_BONUS if edges[neighbor.y, neighbor.x] else 0.0)
            tentative = g_score[current] + cost
            if tentative < g_score.get(neighbor, float("inf")):
                came_from[neighbor] = current
                g_score[neighbor] = tentative
                f_score = tentative + neighbor.manhattan(exit)
                heapq.heappush(open_heap, (f_score, next(counter), neighbor))
    return []


def bfs(maze: np.ndarray, entry: Coordinate, exit: Coordinate, through_walls=False) -> Path:
    """
    Breadth-first search from entry to exit. With through_walls, WALL cells in
    the interior may be crossed; the outer ring never is.
    """
    queue = deque([entry])
    came_from: Dict[Coordinate, Optional[Coordinate]] = {entry: None}
    while queue:
        current = queue.popleft()
        if current == exit:
            path = []
            node: Optional[Coordinate] = current
            while node is not None:
                path.append(node)
                node = came_from[node]
            path.reverse()
            return path
        for neighbor in current.neighbors4():
            if neighbor in came_from:
                continue
            if through_walls:
                if not _is_interior(maze, neighbor):
                    continue
            elif not _passable(maze, neighbor):
                continue
            came_from[neighbor] = current
            queue.append(neighbor)
    return []


def direct_line(maze: np.ndarray, entry: Coordinate, exit: Coordinate) -> Path:
    """Steps toward the exit along x first, then along y."""
    path = [entry]
    x, y = entry.x, entry.y
    max_steps = maze.shape[0] + maze.shape[1]
    while (x, y) != (exit.x, exit.y) and len(path) <= max_steps:
        if x != exit.x:
            x += 1 if exit.x > x else -1
        else:
            y += 1 if exit.y > y else -1
        path.append(Coordinate(x, y))
    return path


def carve_path(maze: np.ndarray, path: Path) -> int:
    """Opens every WALL cell on the path. Returns how many were carved."""
    carved = 0
    for c in path:
        if maze[c.y, c.x] == CellState.WALL:
            maze[c.y, c.x] = CellState.OPEN
            carved += 1
    return carved


def find_path(
    maze: np.ndarray, edges: np.ndarray, entry: Coordinate, exit: Coordinate
) -> PathResult:
    """
    Finds a path from entry to exit, preferring edge cells. Falls back to BFS
    (carving through walls if it has to) and finally to a direct line. May
    mutate the maze to keep the entry and exit connected.
    """
    path = edge_biased_astar(maze, edges, entry, exit)
    if path:
        on_edges = sum(1 for c in path if edges[c.y, c.x])
        log.info("Edge-guided path found with %d cells (%d on edges).", len(path), on_edges)
        return PathResult(path, STRATEGY_ASTAR)

    log.warning("Edge-guided search found no path, falling back to BFS.")
    path = bfs(maze, entry, exit)
    if path:
        return PathResult(path, STRATEGY_BFS)

    path = bfs(maze, entry, exit, through_walls=True)
    if path:
        carved = carve_path(maze, path)
        log.warning("BFS carved %d wall cells to connect entry and exit.", carved)
        return PathResult(path, STRATEGY_CARVED_BFS)

    log.warning("BFS failed, building a direct line path.")
    path = direct_line(maze, entry, exit)
    if path and path[-1] == exit:
        carve_path(maze, path)
        return PathResult(path, STRATEGY_DIRECT)

    raise InternalPathfindingFailure(
        f"No path could be constructed from {entry} to {exit}."
    )
