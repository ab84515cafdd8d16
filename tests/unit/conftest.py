"""Shared fixtures for unit tests."""

from typing import Any
from unittest.mock import AsyncMock
from uuid import UUID, uuid4

import pytest

from domain.entities.team import Membership, MembershipRole, Team


class FakeUnitOfWork:
    """Fake Unit of Work with all 8 repository mocks for unit testing."""

    def __init__(self) -> None:
        self.profiles = AsyncMock()
        self.teams = AsyncMock()
        self.roles = AsyncMock()
        self.services = AsyncMock()
        self.assignments = AsyncMock()
        self.availability = AsyncMock()
        self.invitations = AsyncMock()
        self.transfers = AsyncMock()
        self.committed = False
        self.rolled_back = False

    async def commit(self) -> None:
        self.committed = True

    async def rollback(self) -> None:
        self.rolled_back = True

    async def __aenter__(self) -> "FakeUnitOfWork":
        return self

    async def __aexit__(self, *args: Any) -> None:
        pass


def as_member(
    uow: FakeUnitOfWork,
    team_id: UUID,
    user_id: UUID,
    role: MembershipRole = MembershipRole.MEMBER,
) -> Membership:
    """Make ``user_id`` an active member of an existing team in the fake repositories."""
    member = Membership(team_id=team_id, user_id=user_id, role=role)
    uow.teams.get.return_value = Team(
        id=team_id, name="Grace Worship", owner_id=uuid4(), invite_code="ABCD2345"
    )
    uow.teams.get_member.return_value = member
    return member


@pytest.fixture
def uow() -> FakeUnitOfWork:
    """Create a fresh FakeUnitOfWork."""
    return FakeUnitOfWork()


@pytest.fixture
def user_id() -> UUID:
    """A random user ID."""
    return uuid4()


@pytest.fixture
def team_id() -> UUID:
    """A random team ID."""
    return uuid4()


@pytest.fixture
def actor_id() -> UUID:
    """A random actor ID (distinct from user_id)."""
    return uuid4()
