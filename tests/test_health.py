"""Tests for health check endpoint."""

import pytest
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_health_check(client: AsyncClient):
    """Test that health endpoint returns ok status."""
    response = await client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"
    assert "version" in data
    assert "X-Request-ID" in response.headers


@pytest.mark.asyncio
async def test_root_endpoint(client: AsyncClient, corridor_robot_data):
    """Test that root endpoint returns API info and the robot count."""
    response = await client.get("/")
    assert response.status_code == 200
    data = response.json()
    assert "name" in data
    assert "version" in data
    assert "docs" in data
    assert data["robots"] == 0

    await client.post("/v1/robots", json=corridor_robot_data)
    response = await client.get("/")
    assert response.json()["robots"] == 1
