"""Pytest configuration and fixtures."""

from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

from mazebot.main import app
from mazebot.core.maze_raster import CORRIDOR_MAZE
from mazebot.services import robot_service as robot_service_module
from mazebot.services.robot_service import RobotService


class RecordingSink:
    """Position sink that keeps every committed position."""

    def __init__(self):
        self.positions: list[tuple[float, float]] = []

    def set_position(self, x: float, y: float) -> None:
        self.positions.append((x, y))


@pytest.fixture
def sink() -> RecordingSink:
    """Fresh recording position sink."""
    return RecordingSink()


@pytest.fixture(autouse=True)
def robot_service(monkeypatch) -> RobotService:
    """Give every test its own robot registry."""
    service = RobotService()
    monkeypatch.setattr(robot_service_module, "_robot_service", service)
    return service


@pytest_asyncio.fixture(scope="function")
async def client(robot_service) -> AsyncGenerator[AsyncClient, None]:
    """Create a test HTTP client."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test"
    ) as ac:
        yield ac

    await robot_service.shutdown()


@pytest.fixture
def corridor_robot_data() -> dict:
    """Robot on a straight corridor, one-pixel grid, point footprint."""
    return {
        "grid_data": CORRIDOR_MAZE,
        "cell_size": 1,
        "start_x": 0,
        "start_y": 3,
        "step_size": 1,
        "robot_size": 0,
    }
