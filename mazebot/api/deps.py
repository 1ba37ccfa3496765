"""API dependencies for dependency injection."""

import uuid
from typing import Annotated

from fastapi import Depends, HTTPException, status

from mazebot.services.robot_service import Robot, RobotService, get_robot_service


def get_service() -> RobotService:
    """Get the robot service."""
    return get_robot_service()


async def get_robot(
    robot_id: uuid.UUID,
    service: RobotService = Depends(get_service),
) -> Robot:
    """Get a robot by its path ID."""
    robot = service.get_robot(robot_id)
    if robot is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Robot not found: {robot_id}",
        )
    return robot


# Type aliases for cleaner route signatures
Service = Annotated[RobotService, Depends(get_service)]
CurrentRobot = Annotated[Robot, Depends(get_robot)]
