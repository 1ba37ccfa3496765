# Core module
from .maze_solver import (
    MazeSolver,
    Point,
    Direction,
    SolverState,
    StepEvent,
    PixelSource,
    PositionSink,
)
from .maze_raster import (
    MazeParseError,
    MazeValidationError,
    RasterMaze,
    parse_maze_text,
    maze_from_image_bytes,
    load_maze_image,
    load_maze_file,
)

__all__ = [
    "MazeSolver",
    "Point",
    "Direction",
    "SolverState",
    "StepEvent",
    "PixelSource",
    "PositionSink",
    "MazeParseError",
    "MazeValidationError",
    "RasterMaze",
    "parse_maze_text",
    "maze_from_image_bytes",
    "load_maze_image",
    "load_maze_file",
]
