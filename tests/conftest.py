"""Pytest configuration and fixtures."""

import os
import sys
from collections.abc import AsyncGenerator, Awaitable, Callable
from pathlib import Path
from typing import Any
from uuid import uuid4

# Disable rate limiting in tests
os.environ["RATE_LIMIT_ENABLED"] = "false"

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.ext.compiler import compiles
from sqlalchemy.pool import StaticPool

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from infrastructure.auth.jwt_provider import JWTAuthProvider
from infrastructure.auth.provider import TokenUser
from infrastructure.database.models import Base


# Compile JSONB as JSON for SQLite (used in tests)
@compiles(JSONB, "sqlite")
def _compile_jsonb_sqlite(type_: Any, compiler: Any, **kw: Any) -> str:
    return "JSON"


# Test database URL (SQLite in memory)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

# Fixed test user ID for consistency
TEST_USER_ID = uuid4()

ClientFactory = Callable[[TokenUser], Awaitable[AsyncClient]]


@pytest.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """One in-memory database per test, shared across connections."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create session factory."""
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest.fixture
async def db_session(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    """Create a fresh database session for each test."""
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
def test_user() -> TokenUser:
    """Create a test user with fixed ID."""
    return TokenUser(
        id=TEST_USER_ID,
        email="leader@example.com",
        display_name="Worship Leader",
    )


@pytest.fixture
def other_user() -> TokenUser:
    """A second user, e.g. a team member invited by the test user."""
    return TokenUser(id=uuid4(), email="singer@example.com", display_name="Singer")


@pytest.fixture
def auth_provider() -> JWTAuthProvider:
    """Create auth provider for testing."""
    return JWTAuthProvider(
        secret_key="test-secret-key",
        algorithm="HS256",
        expire_minutes=30,
    )


@pytest.fixture
def auth_token(auth_provider: JWTAuthProvider, test_user: TokenUser) -> str:
    """Create auth token for test user."""
    return str(auth_provider.create_token(test_user))


@pytest.fixture
def auth_headers(auth_token: str) -> dict[str, str]:
    """Create authorization headers."""
    return {"Authorization": f"Bearer {auth_token}"}


@pytest.fixture
async def client() -> AsyncGenerator[AsyncClient, None]:
    """Create async test client (no auth)."""
    from main import app

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


@pytest.fixture
async def client_for(
    session_factory: async_sessionmaker[AsyncSession],
    auth_provider: JWTAuthProvider,
) -> AsyncGenerator[ClientFactory, None]:
    """
    Build authenticated clients, one app per user, all on the same database.

    Each client:
    - Overrides auth to return the given user
    - Overrides every service getter to use the test session factory
    """
    from api.dependencies.auth import get_auth_provider, get_current_user
    from api.v1 import dependencies as deps
    from domain.services.assignment_service import AssignmentService
    from domain.services.availability_service import AvailabilityService
    from domain.services.calendar_service import CalendarService
    from domain.services.invitation_service import InvitationService
    from domain.services.ownership_service import OwnershipService
    from domain.services.profile_service import ProfileService
    from domain.services.role_service import RoleService
    from domain.services.schedule_service import ScheduleService
    from domain.services.team_service import TeamService
    from infrastructure.database.sqlalchemy_uow import SQLAlchemyUnitOfWork
    from main import create_app

    def test_uow_factory() -> SQLAlchemyUnitOfWork:
        return SQLAlchemyUnitOfWork(session_factory)

    overrides: dict[Callable[..., Any], Callable[[], Any]] = {
        get_auth_provider: lambda: auth_provider,
        deps.get_profile_service: lambda: ProfileService(test_uow_factory),
        deps.get_team_service: lambda: TeamService(test_uow_factory),
        deps.get_ownership_service: lambda: OwnershipService(test_uow_factory),
        deps.get_invitation_service: lambda: InvitationService(test_uow_factory),
        deps.get_role_service: lambda: RoleService(test_uow_factory),
        deps.get_schedule_service: lambda: ScheduleService(test_uow_factory),
        deps.get_assignment_service: lambda: AssignmentService(test_uow_factory),
        deps.get_availability_service: lambda: AvailabilityService(test_uow_factory),
        deps.get_calendar_service: lambda: CalendarService(test_uow_factory),
    }

    opened: list[AsyncClient] = []

    async def make(user: TokenUser) -> AsyncClient:
        app = create_app()

        async def override_get_user() -> TokenUser:
            return user

        app.dependency_overrides.update(overrides)
        app.dependency_overrides[get_current_user] = override_get_user

        c = AsyncClient(transport=ASGITransport(app=app), base_url="http://test")
        opened.append(c)
        return c

    yield make

    for c in opened:
        await c.aclose()


@pytest.fixture
async def authenticated_client(client_for: ClientFactory, test_user: TokenUser) -> AsyncClient:
    """Authenticated client for the test user."""
    return await client_for(test_user)


@pytest.fixture
async def other_client(client_for: ClientFactory, other_user: TokenUser) -> AsyncClient:
    """Authenticated client for the second user."""
    return await client_for(other_user)
