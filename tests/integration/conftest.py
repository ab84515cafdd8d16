"""Fixtures shared by the API integration tests."""

from datetime import date, timedelta
from typing import Any

import pytest
from httpx import AsyncClient

from domain.entities.service import sunday_based_weekday


def upcoming(weekday: int, weeks_ahead: int = 1) -> date:
    """A date on ``weekday`` (Sunday = 0) inside the current availability window."""
    today = date.today()
    offset = (weekday - sunday_based_weekday(today)) % 7
    return today + timedelta(days=offset + 7 * (weeks_ahead - 1))


@pytest.fixture
async def team(authenticated_client: AsyncClient) -> dict[str, Any]:
    """A team owned by the test user."""
    response = await authenticated_client.post(
        "/api/v1/teams",
        json={"name": "Grace Worship", "description": "Main service band"},
    )
    assert response.status_code == 201
    return response.json()["data"]


@pytest.fixture
async def membership(other_client: AsyncClient, team: dict[str, Any]) -> dict[str, Any]:
    """The second user's membership in ``team``, joined by invite code."""
    response = await other_client.post(
        "/api/v1/teams/join", json={"invite_code": team["invite_code"]}
    )
    assert response.status_code == 200
    return response.json()["data"]
