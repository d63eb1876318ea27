"""
mazegen_lib/errors.py: Typed failures raised by the maze generation pipeline.

Every error carries a stable ``kind`` string. The orchestrator turns these into
failed GenerationResults and the web layer maps them to HTTP status codes.
"""


class MazeGenerationError(Exception):
    """Base class for all typed generation failures."""

    kind = "GenerationError"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class DecodeError(MazeGenerationError):
    """The image bytes are not a supported raster format."""

    kind = "DecodeError"


class ImageNotFound(MazeGenerationError):
    """The image handle does not resolve in the image store."""

    kind = "ImageNotFound"

    def __init__(self, image_id: str):
        super().__init__(f"Image not found with ID: {image_id}")
        self.image_id = image_id


class InvalidDimensions(MazeGenerationError):
    kind = "InvalidDimensions"


class SizeExceeded(MazeGenerationError):
    kind = "SizeExceeded"


class InsufficientMemory(MazeGenerationError):
    kind = "InsufficientMemory"


class ResourceExhausted(MazeGenerationError):
    """An allocation failed while the pipeline was running."""

    kind = "ResourceExhausted"


class InternalPathfindingFailure(MazeGenerationError):
    """Every pathfinding strategy came back empty. Should be unreachable."""

    kind = "InternalPathfindingFailure"


# Kind used for unexpected exceptions caught by the orchestrator.
INTERNAL_ERROR = "InternalError"
