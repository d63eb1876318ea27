# --- mazegen_lib/schema.py ---
import json
from dataclasses import asdict, dataclass
from enum import IntEnum
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class Coordinate:
    """A single cell position in the maze grid."""

    x: int
    y: int

    def neighbors4(self) -> List["Coordinate"]:
        return [
            Coordinate(self.x, self.y - 1),
            Coordinate(self.x + 1, self.y),
            Coordinate(self.x, self.y + 1),
            Coordinate(self.x - 1, self.y),
        ]

    def manhattan(self, other: "Coordinate") -> int:
        return abs(self.x - other.x) + abs(self.y - other.y)


# A Path is an ordered list of 4-adjacent coordinates from entry to exit.
Path = List[Coordinate]


class CellState(IntEnum):
    """The state of a single cell in a MazeGrid."""

    WALL = 0
    OPEN = 1
    ENTRY = 2
    EXIT = 3
    SOLUTION = 4


# Cells a path may step on.
PASSABLE = (CellState.OPEN, CellState.ENTRY, CellState.EXIT, CellState.SOLUTION)


@dataclass
class GenerationRequest:
    """Represents a request to turn a stored image into a maze."""

    image_id: str
    width: int
    height: int

    @property
    def total_cells(self) -> int:
        return self.width * self.height


@dataclass
class MazeMetadata:
    """Derived facts about a rendered maze."""

    width: int
    height: int
    imageId: Optional[str]
    imagePathLength: int  # number of edge-mask cells
    solutionPathLength: int
    difficulty: str
    generatedAt: int  # epoch milliseconds


@dataclass
class GenerationResult:
    """The tagged success/failure outcome of one generation call."""

    success: bool
    message: str
    maze: Optional[str] = None
    metadata: Optional[MazeMetadata] = None
    error_kind: Optional[str] = None

    @classmethod
    def ok(cls, maze: str, metadata: MazeMetadata) -> "GenerationResult":
        return cls(True, "Maze generated successfully", maze, metadata)

    @classmethod
    def failure(cls, error_kind: str, message: str) -> "GenerationResult":
        return cls(False, message, error_kind=error_kind)

    def to_dict(self) -> Dict[str, Any]:
        """Serializes the result, dropping unset fields."""
        data = asdict(self)
        return {k: v for k, v in data.items() if v is not None}


def save_json(result: GenerationResult, output_path: str) -> None:
    """
    Serializes a GenerationResult to a JSON file.

    Args:
        result: The GenerationResult to serialize.
        output_path: The path to the output .json file.
    """
    with open(output_path, "w", encoding="utf-8") as f:
        json.dump(result.to_dict(), f, indent=2, ensure_ascii=False)


def load_json(input_path: str) -> GenerationResult:
    """
    Deserializes a JSON file into a GenerationResult.

    Args:
        input_path: The path to the input .json file.

    Returns:
        A GenerationResult representing the content of the JSON file.
    """
    with open(input_path, "r", encoding="utf-8") as f:
        data = json.load(f)

    if data.get("metadata"):
        data["metadata"] = MazeMetadata(**data["metadata"])
    return GenerationResult(**data)
