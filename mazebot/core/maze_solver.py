"""
Maze Robot Solver

Core traversal logic for a robot moving over a raster maze:
- Path color sampling at the robot's start position
- Entrance/exit detection on the maze border
- Footprint validity checks against pixel data
- Incremental depth-first search with backtracking
- Manual moves

The solver never renders or sleeps. Pixels come from a PixelSource, committed
positions go to a PositionSink, and an external clock calls tick().
"""

import logging
import math
import threading
from enum import Enum
from dataclasses import dataclass
from typing import Hashable, Optional, Protocol


logger = logging.getLogger(__name__)

STEP_SIZE = 10
ROBOT_SIZE = 20
SOLVE_SPEED_MS = 100

Color = Hashable


class PixelSource(Protocol):
    """Read-only access to maze pixels."""

    @property
    def width(self) -> int: ...

    @property
    def height(self) -> int: ...

    def color_at(self, px: int, py: int) -> Color: ...


class PositionSink(Protocol):
    """Receives every committed robot position."""

    def set_position(self, x: float, y: float) -> None: ...


class _NullSink:
    def set_position(self, x: float, y: float) -> None:
        pass


class SolverState(Enum):
    """Lifecycle of a solve attempt."""
    IDLE = "idle"
    SOLVING = "solving"
    STUCK = "stuck"
    REACHED = "reached"

    @property
    def is_terminal(self) -> bool:
        return self in (SolverState.STUCK, SolverState.REACHED)


class StepEvent(Enum):
    """Outcome of a single tick."""
    ADVANCED = "advanced"
    BACKTRACKED = "backtracked"
    REACHED = "reached"
    STUCK = "stuck"


class Direction(Enum):
    """Neighbor directions, declared in exploration order."""
    UP = "up"
    RIGHT = "right"
    DOWN = "down"
    LEFT = "left"

    @property
    def delta(self) -> tuple[int, int]:
        """Get unit (dx, dy) for this direction."""
        deltas = {
            Direction.UP: (0, -1),
            Direction.RIGHT: (1, 0),
            Direction.DOWN: (0, 1),
            Direction.LEFT: (-1, 0),
        }
        return deltas[self]


@dataclass(frozen=True)
class Point:
    """Position in image-pixel space."""
    x: float
    y: float

    def offset(self, dx: float, dy: float) -> "Point":
        """Return a new point translated by (dx, dy)."""
        return Point(self.x + dx, self.y + dy)

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {"x": self.x, "y": self.y}


class MazeSolver:
    """
    Depth-first maze solver for a square robot on a raster maze.

    The path color is whatever color lies under the robot when the solver is
    created. Start and exit are discovered on the border right away.

    Example usage:
        solver = MazeSolver(maze, start_x=0, start_y=5, sink=view)
        if solver.exit_point is not None and solver.solve_maze():
            while solver.is_solving:
                event = solver.tick()
    """

    def __init__(
        self,
        maze: PixelSource,
        start_x: float,
        start_y: float,
        sink: Optional[PositionSink] = None,
        step_size: int = STEP_SIZE,
        robot_size: int = ROBOT_SIZE,
    ):
        """
        Initialize the solver.

        Args:
            maze: Pixel source for the maze raster.
            start_x: Initial robot x in pixels.
            start_y: Initial robot y in pixels.
            sink: Receiver for committed positions. Defaults to a no-op.
            step_size: Grid pitch for search and exit tolerance.
            robot_size: Side of the robot's square footprint.

        Raises:
            ValueError: If the start position lies outside the maze or the
                step size is not positive.
        """
        if step_size <= 0:
            raise ValueError(f"step_size must be positive, got {step_size}")
        if robot_size < 0:
            raise ValueError(f"robot_size must not be negative, got {robot_size}")

        self.maze = maze
        self.width: int = maze.width
        self.height: int = maze.height
        self.step_size = step_size
        self.robot_size = robot_size
        self.sink: PositionSink = sink or _NullSink()

        if not (0 <= start_x < self.width and 0 <= start_y < self.height):
            raise ValueError(
                f"Start position ({start_x}, {start_y}) is outside the "
                f"{self.width}x{self.height} maze"
            )

        self.x: float = start_x
        self.y: float = start_y
        self.state = SolverState.IDLE
        self.path: list[Point] = []
        self.visited: set[Point] = set()
        self.path_color: Color = maze.color_at(int(start_x), int(start_y))
        self.start_point: Optional[Point] = None
        self.exit_point: Optional[Point] = None

        self._lock = threading.Lock()

        self.find_entrance_and_exit()

    @property
    def position(self) -> Point:
        return Point(self.x, self.y)

    @property
    def is_solving(self) -> bool:
        return self.state is SolverState.SOLVING

    def _border_scan(self):
        """Yield border pixels in scan order: top, bottom, left, right."""
        for x in range(self.width):
            yield x, 0
        for x in range(self.width):
            yield x, self.height - 1
        for y in range(self.height):
            yield 0, y
        for y in range(self.height):
            yield self.width - 1, y

    def find_entrance_and_exit(self) -> None:
        """Record the first two path-colored border pixels as start and exit."""
        found: list[Point] = []
        for px, py in self._border_scan():
            point = Point(px, py)
            if point in found:
                continue
            if self.maze.color_at(px, py) == self.path_color:
                found.append(point)
                if len(found) == 2:
                    break

        self.start_point = found[0] if found else None
        self.exit_point = found[1] if len(found) > 1 else None

        if self.exit_point is None:
            logger.warning(
                f"No exit found on maze border (start: {self.start_point})"
            )

    def is_path_available(self, x: float, y: float) -> bool:
        """Check whether the pixel under (x, y) has the path color."""
        if not (0 <= x < self.width and 0 <= y < self.height):
            return False
        return self.maze.color_at(int(x), int(y)) == self.path_color

    def is_valid_move(self, new_x: float, new_y: float) -> bool:
        """
        Check whether the robot fits at (new_x, new_y).

        Only the four corners of the footprint are sampled; walls thinner
        than the robot can slip between them.
        """
        if not (math.isfinite(new_x) and math.isfinite(new_y)):
            return False

        size = self.robot_size
        if (new_x < 0 or new_x > self.width - size
                or new_y < 0 or new_y > self.height - size):
            return False

        return (
            self.is_path_available(new_x, new_y)
            and self.is_path_available(new_x + size, new_y)
            and self.is_path_available(new_x, new_y + size)
            and self.is_path_available(new_x + size, new_y + size)
        )

    def is_at_exit(self) -> bool:
        """Check whether the robot is within one step of the exit on both axes."""
        if self.exit_point is None:
            return False
        return (
            abs(self.x - self.exit_point.x) < self.step_size
            and abs(self.y - self.exit_point.y) < self.step_size
        )

    def unvisited_neighbors(self, point: Point) -> list[Point]:
        """Get valid, unvisited neighbors of a point in exploration order."""
        neighbors = []
        for direction in Direction:
            dx, dy = direction.delta
            neighbor = point.offset(dx * self.step_size, dy * self.step_size)
            if self.is_valid_move(neighbor.x, neighbor.y) and neighbor not in self.visited:
                neighbors.append(neighbor)
        return neighbors

    def move(self, delta_x: float, delta_y: float) -> bool:
        """
        Translate the robot by (delta_x, delta_y) if it fits there.

        Manual moves are refused while a solve is in progress.

        Returns:
            True if the move was committed.
        """
        with self._lock:
            if self.is_solving:
                logger.debug("Manual move ignored while solving")
                return False

            new_x = self.x + delta_x
            new_y = self.y + delta_y
            if not self.is_valid_move(new_x, new_y):
                return False

            self._move_to(Point(new_x, new_y))
            return True

    def solve_maze(self) -> bool:
        """
        Start a depth-first solve from the current position.

        Returns:
            True if a solve is running after the call, False if the maze
            has no exit (the solver is then STUCK).
        """
        with self._lock:
            if self.is_solving:
                return True

            if self.exit_point is None:
                logger.warning("Cannot solve maze without an exit")
                self.state = SolverState.STUCK
                return False

            current = self.position
            self.path = [current]
            self.visited = {current}
            self.state = SolverState.SOLVING
            logger.info(
                f"Solving from {current.to_dict()} towards {self.exit_point.to_dict()}"
            )
            return True

    def tick(self) -> Optional[StepEvent]:
        """
        Advance the solve by one clock tick: exit check, then one step.

        Returns:
            The step event, or None when no solve is running.
        """
        with self._lock:
            if not self.is_solving:
                return None

            if self.is_at_exit():
                self.state = SolverState.REACHED
                logger.info(f"Exit reached at {self.position.to_dict()}")
                return StepEvent.REACHED

            return self._step()

    def step(self) -> Optional[StepEvent]:
        """Perform one depth-first step without checking the exit."""
        with self._lock:
            if not self.is_solving:
                return None
            return self._step()

    def _step(self) -> StepEvent:
        if not self.path:
            self.state = SolverState.STUCK
            logger.info(f"Path exhausted after visiting {len(self.visited)} cells")
            return StepEvent.STUCK

        current = self.path[-1]
        neighbors = self.unvisited_neighbors(current)

        if neighbors:
            nxt = neighbors[0]
            self.path.append(nxt)
            self.visited.add(nxt)
            self._move_to(nxt)
            return StepEvent.ADVANCED

        # Dead end
        self.path.pop()
        if self.path:
            self._move_to(self.path[-1])
        return StepEvent.BACKTRACKED

    def _move_to(self, point: Point) -> None:
        self.x = point.x
        self.y = point.y
        self.sink.set_position(self.x, self.y)

    def get_solver_info(self) -> dict:
        """Get solver metadata."""
        return {
            "position": self.position.to_dict(),
            "state": self.state.value,
            "start_point": self.start_point.to_dict() if self.start_point else None,
            "exit_point": self.exit_point.to_dict() if self.exit_point else None,
            "path_length": len(self.path),
            "visited_count": len(self.visited),
        }


if __name__ == "__main__":
    # Quick demo on a text maze with a one-pixel robot grid
    from mazebot.core.maze_raster import parse_maze_text, CORRIDOR_MAZE

    maze = parse_maze_text(CORRIDOR_MAZE)
    solver = MazeSolver(maze, start_x=0, start_y=3, step_size=1, robot_size=0)
    print("Solver info:", solver.get_solver_info())

    solver.solve_maze()
    ticks = 0
    while solver.is_solving:
        event = solver.tick()
        ticks += 1
        print(f"Tick {ticks}: {event.value} -> {solver.position.to_dict()}")

    print("\nFinal:", solver.get_solver_info())
