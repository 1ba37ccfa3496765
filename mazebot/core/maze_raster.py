"""
Maze rasters for the robot solver.

Builds pixel sources from text grids or image files.

Text Format:
    . = Path (white); a space is also path
    X = Wall (black); # is also wall

Each character becomes a cell_size x cell_size block of pixels.
"""

import io
from pathlib import Path
from typing import Optional, Sequence

from PIL import Image, UnidentifiedImageError


class MazeParseError(Exception):
    """Exception raised when maze parsing fails."""

    pass


class MazeValidationError(Exception):
    """Exception raised when maze validation fails."""

    pass


PATH_COLOR = (255, 255, 255, 255)
WALL_COLOR = (0, 0, 0, 255)

# Upper bound on raster size, in pixels
MAX_PIXELS = 4_000_000

CHAR_COLORS = {
    ".": PATH_COLOR,
    " ": PATH_COLOR,
    "X": WALL_COLOR,
    "#": WALL_COLOR,
}


class RasterMaze:
    """
    In-memory maze raster addressable pixel by pixel.

    Colors are whatever the loader produced (RGBA tuples for images and
    text grids). Rows are indexed by y.
    """

    def __init__(self, rows: Sequence[Sequence[tuple]]):
        if not rows or not rows[0]:
            raise MazeValidationError("Maze raster has no pixels")

        width = len(rows[0])
        for y, row in enumerate(rows):
            if len(row) != width:
                raise MazeValidationError(
                    f"Row {y} has {len(row)} pixels, expected {width}"
                )

        self._rows = [tuple(row) for row in rows]
        self._width = width
        self._height = len(self._rows)

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    def color_at(self, px: int, py: int) -> tuple:
        """Get the color of a pixel. Coordinates must be inside the raster."""
        if not (0 <= px < self._width and 0 <= py < self._height):
            raise IndexError(f"Pixel ({px}, {py}) outside {self._width}x{self._height} raster")
        return self._rows[py][px]

    @classmethod
    def from_image(cls, image: Image.Image) -> "RasterMaze":
        """Build a raster from a Pillow image (converted to RGBA)."""
        width, height = image.size
        if width * height > MAX_PIXELS:
            raise MazeValidationError(
                f"Maze too large: {width * height} pixels, limit is {MAX_PIXELS}"
            )

        rgba = image.convert("RGBA")
        pixels = rgba.load()
        rows = [[pixels[x, y] for x in range(width)] for y in range(height)]
        return cls(rows)


def parse_maze_text(maze_text: str, cell_size: int = 1) -> RasterMaze:
    """
    Parse a text grid into a raster.

    Args:
        maze_text: Multi-line string representing the maze grid.
        cell_size: Pixels per character along each axis.

    Returns:
        RasterMaze of size (columns * cell_size) x (rows * cell_size).

    Raises:
        MazeParseError: If the text is empty.
        MazeValidationError: If the grid is ragged, has invalid characters,
            has a non-positive cell size or exceeds MAX_PIXELS.
    """
    if not maze_text or not maze_text.strip():
        raise MazeParseError("Maze text is empty")

    if cell_size <= 0:
        raise MazeValidationError(f"Cell size must be positive, got {cell_size}")

    lines = [line.rstrip("\r") for line in maze_text.strip("\n").split("\n")]
    width = len(lines[0])

    pixels = width * len(lines) * cell_size * cell_size
    if pixels > MAX_PIXELS:
        raise MazeValidationError(
            f"Maze too large: {pixels} pixels, limit is {MAX_PIXELS}"
        )

    rows = []
    for y, line in enumerate(lines):
        if len(line) != width:
            raise MazeValidationError(
                f"All maze rows must be the same width: row {y} has "
                f"{len(line)} characters, expected {width}"
            )

        row = []
        for x, char in enumerate(line):
            color = CHAR_COLORS.get(char)
            if color is None:
                raise MazeValidationError(
                    f"Invalid character '{char}' at position ({x}, {y}). "
                    f"Valid characters: {', '.join(repr(c) for c in sorted(CHAR_COLORS))}"
                )
            row.extend([color] * cell_size)

        rows.extend([row] * cell_size)

    return RasterMaze(rows)


def maze_from_image_bytes(data: bytes) -> RasterMaze:
    """
    Decode an encoded image (PNG, BMP, ...) into a raster.

    Raises:
        MazeParseError: If the data is not a decodable image.
        MazeValidationError: If the image exceeds MAX_PIXELS.
    """
    try:
        with Image.open(io.BytesIO(data)) as image:
            return RasterMaze.from_image(image)
    except (UnidentifiedImageError, OSError) as e:
        raise MazeParseError(f"Failed to decode maze image: {e}") from e


def load_maze_image(file_path: Path | str) -> RasterMaze:
    """
    Load a maze raster from an image file.

    Raises:
        FileNotFoundError: If the file doesn't exist.
        MazeParseError: If the file is not a decodable image.
    """
    file_path = Path(file_path)

    if not file_path.exists():
        raise FileNotFoundError(f"Maze file not found: {file_path}")

    if not file_path.is_file():
        raise MazeParseError(f"Path is not a file: {file_path}")

    return maze_from_image_bytes(file_path.read_bytes())


def load_maze_file(file_path: Path | str, cell_size: Optional[int] = None) -> RasterMaze:
    """
    Load a maze raster from a text grid (.txt) or an image file.

    Args:
        file_path: Path to the maze file.
        cell_size: Pixels per character for text grids. Defaults to 1.
            Ignored for images.

    Raises:
        FileNotFoundError: If the file doesn't exist.
        MazeParseError: If the maze cannot be parsed.
        MazeValidationError: If the maze is invalid.
    """
    file_path = Path(file_path)

    if file_path.suffix.lower() != ".txt":
        return load_maze_image(file_path)

    if not file_path.exists():
        raise FileNotFoundError(f"Maze file not found: {file_path}")

    try:
        maze_text = file_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise MazeParseError(f"Failed to read maze file: {e}") from e

    return parse_maze_text(maze_text, cell_size=cell_size or 1)


# Sample mazes for a robot with step_size=1 and robot_size=0
CORRIDOR_MAZE = """
XXXXXXXXXX
XXXXXXXXXX
XXXXXXXXXX
..........
XXXXXXXXXX
""".strip("\n")

BRANCH_MAZE = """
XXXXXXXXX
XX.XXXXXX
XX.XXXXXX
.........
XXXXXXXXX
""".strip("\n")
