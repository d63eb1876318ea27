import random

import numpy as np
import pytest

from mazegen_lib.generation import topology
from mazegen_lib.schema import CellState, Coordinate

from conftest import ScriptedRandom, reachable

SIZES = [(10, 10), (11, 11), (10, 13), (13, 10), (25, 40), (200, 50), (50, 200), (100, 100)]


def open_pairs(maze):
    """Counts 4-adjacent pairs of open cells."""
    is_open = maze != CellState.WALL
    horizontal = np.count_nonzero(is_open[:, 1:] & is_open[:, :-1])
    vertical = np.count_nonzero(is_open[1:, :] & is_open[:-1, :])
    return int(horizontal + vertical)


@pytest.mark.parametrize("width, height", SIZES)
@pytest.mark.parametrize("seed", [0, 1, 2, 99])
def test_entry_and_exit_are_mutually_reachable(width, height, seed):
    maze = topology.generate(width, height, random.Random(seed))
    assert maze.shape == (height, width)
    entry = (1, 1)
    exit = (width - 2, height - 2)
    assert maze[1, 1] == CellState.OPEN
    assert maze[exit[1], exit[0]] == CellState.OPEN
    assert reachable(maze, entry, exit)
    assert reachable(maze, exit, entry)


@pytest.mark.parametrize("width, height", SIZES)
def test_outer_ring_is_wall(width, height):
    maze = topology.generate(width, height, random.Random(width * height))
    assert np.all(maze[0, :] == CellState.WALL)
    assert np.all(maze[-1, :] == CellState.WALL)
    assert np.all(maze[:, 0] == CellState.WALL)
    assert np.all(maze[:, -1] == CellState.WALL)


@pytest.mark.parametrize("width, height", [(10, 10), (21, 15), (60, 40)])
def test_carving_alone_builds_a_perfect_maze(width, height):
    maze = np.full((height, width), CellState.WALL, dtype=np.uint8)
    topology.carve(maze, (1, 1), random.Random(8))

    open_cells = int(np.count_nonzero(maze != CellState.WALL))
    # A spanning tree has exactly one fewer adjacency than it has nodes.
    assert open_pairs(maze) == open_cells - 1
    # Every odd-aligned interior cell is visited.
    lattice = maze[1 : height - 1 : 2, 1 : width - 1 : 2]
    assert np.all(lattice == CellState.OPEN)


def test_same_seed_gives_same_topology():
    a = topology.generate(40, 30, random.Random(1234))
    b = topology.generate(40, 30, random.Random(1234))
    c = topology.generate(40, 30, random.Random(4321))
    assert np.array_equal(a, b)
    assert not np.array_equal(a, c)


def test_carving_follows_shuffled_direction_order():
    maze = np.full((10, 10), CellState.WALL, dtype=np.uint8)
    topology.carve(maze, (1, 1), ScriptedRandom())
    # North, east, south, west in order: the carve runs east along the top,
    # then south down column 7, and snakes back through the rest.
    assert all(maze[1, x] == CellState.OPEN for x in range(1, 8))
    assert all(maze[y, 7] == CellState.OPEN for y in range(1, 8))
    assert maze[1, 8] == CellState.WALL
    assert maze[2, 1] == CellState.WALL  # (1,1) only connects east
    assert maze[6, 1] == CellState.OPEN  # (1,7) -> (1,5)


@pytest.mark.parametrize("seed", range(10))
def test_relaxation_only_opens_cells_next_to_two_or_three_open_cells(seed, mocker):
    mocker.patch.object(topology, "RELAXATION_PROBABILITY", 1.01)
    maze = np.full((30, 30), CellState.WALL, dtype=np.uint8)
    topology.carve(maze, (1, 1), random.Random(3))
    before = maze.copy()
    opened = topology.relax(maze, random.Random(seed))

    changed = np.argwhere(maze != before)
    assert len(changed) == opened
    assert opened <= topology.MAX_RELAXATION_CANDIDATES
    for y, x in changed:
        assert before[y, x] == CellState.WALL
        # Open counts only grow while relaxing, so these bound the count seen
        # when the cell was picked.
        assert topology.open_neighbor_count(before, x, y) <= 3
        assert topology.open_neighbor_count(maze, x, y) >= 2


def test_relaxation_opens_something_when_the_gate_always_passes(mocker):
    mocker.patch.object(topology, "RELAXATION_PROBABILITY", 1.01)
    opened = []
    for seed in range(5):
        maze = np.full((60, 60), CellState.WALL, dtype=np.uint8)
        topology.carve(maze, (1, 1), random.Random(3))
        opened.append(topology.relax(maze, random.Random(seed)))
    assert sum(opened) > 0


def test_relaxation_respects_probability_gate(mocker):
    mocker.patch.object(topology, "RELAXATION_PROBABILITY", 0.0)
    maze = np.full((30, 30), CellState.WALL, dtype=np.uint8)
    topology.carve(maze, (1, 1), random.Random(3))
    before = maze.copy()
    assert topology.relax(maze, random.Random(17)) == 0
    assert np.array_equal(maze, before)


@pytest.mark.parametrize(
    "cell, joined",
    [
        (Coordinate(8, 8), (7, 8)),  # even/even joins west, next to lattice (7, 7)
        (Coordinate(8, 7), (7, 7)),  # even/odd joins the lattice directly
        (Coordinate(7, 8), (7, 7)),  # odd/even joins north
    ],
)
def test_connect_to_lattice(cell, joined):
    maze = np.full((10, 10), CellState.WALL, dtype=np.uint8)
    topology.connect_to_lattice(maze, cell)
    assert maze[cell.y, cell.x] == CellState.OPEN
    assert maze[joined[1], joined[0]] == CellState.OPEN


def test_entry_and_exit_points():
    assert topology.entry_point() == Coordinate(1, 1)
    assert topology.exit_point(10, 12) == Coordinate(8, 10)
