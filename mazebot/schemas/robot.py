"""Robot schemas for request/response validation."""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, model_validator


class RobotPosition(BaseModel):
    """Schema for a position in pixel space."""

    x: float
    y: float


class RobotCreateRequest(BaseModel):
    """Schema for placing a robot on a maze.

    Exactly one of grid_data or image_base64 must be given.
    """

    grid_data: Optional[str] = Field(None, min_length=1, max_length=1_000_000)
    image_base64: Optional[str] = Field(None, min_length=1, max_length=8_000_000)
    cell_size: int = Field(1, gt=0, le=100)
    start_x: float = Field(..., ge=0)
    start_y: float = Field(..., ge=0)
    step_size: Optional[int] = Field(None, gt=0)
    robot_size: Optional[int] = Field(None, ge=0)

    @model_validator(mode="after")
    def check_single_source(self) -> "RobotCreateRequest":
        if (self.grid_data is None) == (self.image_base64 is None):
            raise ValueError("Provide exactly one of grid_data or image_base64")
        return self


class RobotState(BaseModel):
    """Schema for robot state."""

    id: uuid.UUID
    width: int
    height: int
    position: RobotPosition
    state: str  # idle, solving, stuck, reached
    start_point: Optional[RobotPosition] = None
    exit_point: Optional[RobotPosition] = None
    path_length: int
    visited_count: int
    driving: bool
    ticks: int
    position_updates: int
    created_at: datetime


class SolveRequest(BaseModel):
    """Schema for starting a solve."""

    drive: bool = True
    speed_ms: Optional[int] = Field(None, gt=0, le=10_000)


class TickResponse(BaseModel):
    """Schema for a manual tick response."""

    event: Optional[str] = None  # advanced, backtracked, reached, stuck
    state: str
    position: RobotPosition


class MoveRequest(BaseModel):
    """Schema for a manual move request."""

    dx: float = Field(..., allow_inf_nan=False)
    dy: float = Field(..., allow_inf_nan=False)


class MoveResponse(BaseModel):
    """Schema for move response."""

    accepted: bool
    position: RobotPosition
