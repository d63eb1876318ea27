import logging
import random
from collections import deque
from io import BytesIO

import numpy as np
import pytest
from PIL import Image, ImageDraw

from mazegen_lib.schema import PASSABLE, CellState


class ScriptedRandom(random.Random):
    """
    A random source with predictable topology choices: directions keep their
    declared order and range picks return the lowest value.
    """

    def shuffle(self, x):
        pass

    def randrange(self, start, stop=None, step=1):
        return 0 if stop is None else start


def png_bytes(img: Image.Image) -> bytes:
    buf = BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


def reachable(grid: np.ndarray, start, goal) -> bool:
    """Independent 4-connected BFS over non-wall cells."""
    height, width = grid.shape
    passable = {int(s) for s in PASSABLE}
    seen = {start}
    queue = deque([start])
    while queue:
        x, y = queue.popleft()
        if (x, y) == goal:
            return True
        for nx, ny in ((x, y - 1), (x + 1, y), (x, y + 1), (x - 1, y)):
            if (
                0 <= nx < width
                and 0 <= ny < height
                and (nx, ny) not in seen
                and int(grid[ny, nx]) in passable
            ):
                seen.add((nx, ny))
                queue.append((nx, ny))
    return False


def assert_valid_path(maze: np.ndarray, path, entry, exit):
    assert path, "path must not be empty"
    assert path[0] == entry
    assert path[-1] == exit
    for a, b in zip(path, path[1:]):
        assert abs(a.x - b.x) + abs(a.y - b.y) == 1, f"{a} -> {b} is not 4-adjacent"
    for c in path:
        assert maze[c.y, c.x] != CellState.WALL, f"{c} is a wall"


@pytest.fixture
def gray_png():
    return png_bytes(Image.new("RGB", (64, 64), color=(128, 128, 128)))


@pytest.fixture
def circle_png():
    img = Image.new("RGB", (200, 200), color="white")
    draw = ImageDraw.Draw(img)
    draw.ellipse((40, 40, 160, 160), fill="black")
    draw.rectangle((10, 150, 60, 190), fill=(200, 30, 30))
    return png_bytes(img)


@pytest.fixture(autouse=True)
def reset_mazegen_logging():
    """Drops handlers that setup_logging attached during a test."""
    yield
    root = logging.getLogger("mazegen")
    for h in root.handlers[:]:
        root.removeHandler(h)
        h.close()
    root.setLevel(logging.NOTSET)
