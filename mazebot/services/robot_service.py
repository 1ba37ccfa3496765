"""Robot service for owning robots and driving their solves."""

import asyncio
import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional

from mazebot.config import get_settings
from mazebot.core.maze_solver import MazeSolver, PixelSource, Point, StepEvent

logger = logging.getLogger(__name__)


class RobotBusyError(Exception):
    """Raised when a robot cannot accept a request in its current state."""

    pass


class RobotLimitError(Exception):
    """Raised when the robot registry is full."""

    pass


class PositionRecorder:
    """Position sink that remembers the last committed position."""

    def __init__(self, x: float, y: float):
        self.last = Point(x, y)
        self.updates = 0

    def set_position(self, x: float, y: float) -> None:
        self.last = Point(x, y)
        self.updates += 1


class SolveDriver:
    """
    Periodic clock for a solver.

    Sleeps for the interval, ticks the solver and repeats until the solver
    reports a terminal event or the driver is stopped.
    """

    def __init__(self, solver: MazeSolver, interval_ms: int):
        self.solver = solver
        self.interval_ms = interval_ms
        self.ticks = 0
        self.last_event: Optional[StepEvent] = None
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        """Whether the driver task is still alive."""
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Start ticking on the running event loop."""
        if self.running:
            return
        self._task = asyncio.create_task(self._run())

    async def _run(self) -> None:
        interval = self.interval_ms / 1000
        try:
            while True:
                await asyncio.sleep(interval)
                event = self.solver.tick()
                if event is None:
                    break
                self.ticks += 1
                self.last_event = event
                if event in (StepEvent.REACHED, StepEvent.STUCK):
                    logger.info(f"Solve finished: {event.value} after {self.ticks} ticks")
                    break
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.error(f"Solve driver failed: {type(e).__name__}: {e}")

    async def stop(self) -> None:
        """Stop ticking. The solver keeps its state."""
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None

    async def wait(self) -> None:
        """Wait for the driver to finish on its own."""
        if self._task is not None:
            await self._task


@dataclass
class Robot:
    """A robot placed on a maze."""

    id: uuid.UUID
    solver: MazeSolver
    recorder: PositionRecorder
    driver: Optional[SolveDriver] = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def driving(self) -> bool:
        return self.driver is not None and self.driver.running


class RobotService:
    """In-memory registry of robots."""

    def __init__(self):
        self.settings = get_settings()
        self._robots: dict[uuid.UUID, Robot] = {}

    @property
    def robot_count(self) -> int:
        """Number of registered robots."""
        return len(self._robots)

    def create_robot(
        self,
        maze: PixelSource,
        start_x: float,
        start_y: float,
        step_size: Optional[int] = None,
        robot_size: Optional[int] = None,
    ) -> Robot:
        """
        Place a new robot on a maze.

        Args:
            maze: Pixel source for the maze.
            start_x: Initial x in pixels.
            start_y: Initial y in pixels.
            step_size: Grid pitch override. Defaults to settings.
            robot_size: Footprint override. Defaults to settings.

        Returns:
            The registered Robot.

        Raises:
            RobotLimitError: If the registry is full.
            ValueError: If the start position is outside the maze.
        """
        if len(self._robots) >= self.settings.max_robots:
            raise RobotLimitError(
                f"Robot limit reached ({self.settings.max_robots})"
            )

        recorder = PositionRecorder(start_x, start_y)
        solver = MazeSolver(
            maze,
            start_x=start_x,
            start_y=start_y,
            sink=recorder,
            step_size=step_size if step_size is not None else self.settings.step_size,
            robot_size=robot_size if robot_size is not None else self.settings.robot_size,
        )

        robot = Robot(id=uuid.uuid4(), solver=solver, recorder=recorder)
        self._robots[robot.id] = robot
        logger.info(
            f"Robot {robot.id} placed at ({start_x}, {start_y}) on "
            f"{maze.width}x{maze.height} maze"
        )
        return robot

    def get_robot(self, robot_id: uuid.UUID) -> Optional[Robot]:
        """Get robot by ID."""
        return self._robots.get(robot_id)

    async def remove_robot(self, robot_id: uuid.UUID) -> bool:
        """Stop and remove a robot."""
        robot = self._robots.pop(robot_id, None)
        if robot is None:
            return False
        if robot.driver is not None:
            await robot.driver.stop()
        logger.info(f"Robot {robot_id} removed")
        return True

    def start_solve(
        self,
        robot: Robot,
        drive: bool = True,
        speed_ms: Optional[int] = None,
    ) -> bool:
        """
        Start solving the maze.

        A robot that is solving without a driver (stopped, or ticked by
        hand) keeps its path and only gets a new driver.

        Args:
            robot: Robot to solve with.
            drive: Start the periodic driver. Otherwise the caller ticks.
            speed_ms: Driver interval override. Defaults to settings.

        Returns:
            True if a solve is running, False if the maze has no exit.

        Raises:
            RobotBusyError: If the periodic driver is already running.
        """
        if robot.driving:
            raise RobotBusyError("Robot is already solving")

        if not robot.solver.solve_maze():
            return False

        if drive:
            robot.driver = SolveDriver(
                robot.solver, speed_ms or self.settings.solve_speed_ms
            )
            robot.driver.start()
        return True

    def tick(self, robot: Robot) -> Optional[StepEvent]:
        """
        Tick a robot's solve once by hand.

        Raises:
            RobotBusyError: If the periodic driver is running.
        """
        if robot.driving:
            raise RobotBusyError("Robot is driven by the solve clock")
        return robot.solver.tick()

    async def stop(self, robot: Robot) -> None:
        """Stop the periodic driver of a robot."""
        if robot.driver is not None:
            await robot.driver.stop()

    async def shutdown(self) -> None:
        """Stop all drivers and clear the registry."""
        for robot in list(self._robots.values()):
            if robot.driver is not None:
                await robot.driver.stop()
        self._robots.clear()


# Global service instance
_robot_service: Optional[RobotService] = None


def get_robot_service() -> RobotService:
    """Get singleton robot service."""
    global _robot_service
    if _robot_service is None:
        _robot_service = RobotService()
    return _robot_service
