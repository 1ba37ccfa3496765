# Services module
from .robot_service import (
    PositionRecorder,
    Robot,
    RobotBusyError,
    RobotLimitError,
    RobotService,
    SolveDriver,
    get_robot_service,
)

__all__ = [
    "PositionRecorder",
    "Robot",
    "RobotBusyError",
    "RobotLimitError",
    "RobotService",
    "SolveDriver",
    "get_robot_service",
]
