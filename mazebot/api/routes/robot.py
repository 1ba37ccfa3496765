"""Robot routes for placing robots, solving and moving."""

import base64
import binascii
import logging

from fastapi import APIRouter, HTTPException, Request, Response, status
from slowapi import Limiter
from slowapi.util import get_remote_address

from mazebot.api.deps import CurrentRobot, Service
from mazebot.config import get_settings
from mazebot.core.maze_raster import (
    MazeParseError,
    MazeValidationError,
    RasterMaze,
    maze_from_image_bytes,
    parse_maze_text,
)
from mazebot.core.maze_solver import Point
from mazebot.schemas.robot import (
    MoveRequest,
    MoveResponse,
    RobotCreateRequest,
    RobotPosition,
    RobotState,
    SolveRequest,
    TickResponse,
)
from mazebot.services.robot_service import Robot, RobotBusyError, RobotLimitError

logger = logging.getLogger(__name__)

settings = get_settings()
limiter = Limiter(key_func=get_remote_address)

router = APIRouter(prefix="/robots", tags=["Robots"])


def _position(point: Point) -> RobotPosition:
    return RobotPosition(x=point.x, y=point.y)


def _robot_state(robot: Robot) -> RobotState:
    solver = robot.solver
    return RobotState(
        id=robot.id,
        width=solver.width,
        height=solver.height,
        **solver.get_solver_info(),
        driving=robot.driving,
        ticks=robot.driver.ticks if robot.driver else 0,
        position_updates=robot.recorder.updates,
        created_at=robot.created_at,
    )


def _load_maze(robot_data: RobotCreateRequest) -> RasterMaze:
    """Build the maze raster from the request payload."""
    try:
        if robot_data.grid_data is not None:
            return parse_maze_text(robot_data.grid_data, cell_size=robot_data.cell_size)
        data = base64.b64decode(robot_data.image_base64, validate=True)
        return maze_from_image_bytes(data)
    except binascii.Error as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid base64 image data: {e}",
        )
    except (MazeParseError, MazeValidationError) as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        )


@router.post(
    "",
    response_model=RobotState,
    status_code=status.HTTP_201_CREATED,
)
@limiter.limit(f"{settings.rate_limit_robots}/minute")
async def create_robot(
    request: Request,
    robot_data: RobotCreateRequest,
    service: Service,
) -> RobotState:
    """Place a robot on a maze.

    The maze comes from a text grid or a base64 encoded image. The color
    under the start position becomes the path color.
    """
    maze = _load_maze(robot_data)

    try:
        robot = service.create_robot(
            maze,
            start_x=robot_data.start_x,
            start_y=robot_data.start_y,
            step_size=robot_data.step_size,
            robot_size=robot_data.robot_size,
        )
    except RobotLimitError as e:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=str(e),
        )
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        )

    return _robot_state(robot)


@router.get(
    "/{robot_id}",
    response_model=RobotState,
)
async def get_robot(robot: CurrentRobot) -> RobotState:
    """Get robot state by ID."""
    return _robot_state(robot)


@router.delete(
    "/{robot_id}",
    status_code=status.HTTP_204_NO_CONTENT,
)
async def delete_robot(robot: CurrentRobot, service: Service) -> Response:
    """Stop and remove a robot."""
    await service.remove_robot(robot.id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/{robot_id}/solve",
    response_model=RobotState,
)
async def solve(
    robot: CurrentRobot,
    service: Service,
    solve_data: SolveRequest | None = None,
) -> RobotState:
    """Start solving the maze.

    With drive enabled the robot ticks itself every speed_ms milliseconds.
    A maze without an exit leaves the robot stuck.
    """
    solve_data = solve_data or SolveRequest()

    try:
        started = service.start_solve(
            robot,
            drive=solve_data.drive,
            speed_ms=solve_data.speed_ms,
        )
    except RobotBusyError as e:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=str(e),
        )

    if not started:
        logger.info(f"Robot {robot.id} cannot solve: maze has no exit")

    return _robot_state(robot)


@router.post(
    "/{robot_id}/tick",
    response_model=TickResponse,
)
async def tick(robot: CurrentRobot, service: Service) -> TickResponse:
    """Advance a solve by one tick by hand."""
    try:
        event = service.tick(robot)
    except RobotBusyError as e:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=str(e),
        )

    return TickResponse(
        event=event.value if event else None,
        state=robot.solver.state.value,
        position=_position(robot.solver.position),
    )


@router.post(
    "/{robot_id}/stop",
    response_model=RobotState,
)
async def stop(robot: CurrentRobot, service: Service) -> RobotState:
    """Stop the solve clock. The robot keeps its path."""
    await service.stop(robot)
    return _robot_state(robot)


@router.post(
    "/{robot_id}/move",
    response_model=MoveResponse,
)
async def move(robot: CurrentRobot, move_data: MoveRequest) -> MoveResponse:
    """Move the robot by hand.

    Moves into walls, off the maze or during a solve are ignored.
    """
    accepted = robot.solver.move(move_data.dx, move_data.dy)
    return MoveResponse(
        accepted=accepted,
        position=_position(robot.solver.position),
    )
