"""SQLAlchemy Unit of Work implementation."""

from typing import Any, Optional

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from infrastructure.database.repositories.sqlalchemy_assignment_repo import SQLAlchemyAssignmentRepository
from infrastructure.database.repositories.sqlalchemy_availability_repo import (
    SQLAlchemyAvailabilityRepository,
)
from infrastructure.database.repositories.sqlalchemy_invitation_repo import SQLAlchemyInvitationRepository
from infrastructure.database.repositories.sqlalchemy_ownership_transfer_repo import (
    SQLAlchemyOwnershipTransferRepository,
)
from infrastructure.database.repositories.sqlalchemy_profile_repo import SQLAlchemyProfileRepository
from infrastructure.database.repositories.sqlalchemy_role_repo import SQLAlchemyRoleRepository
from infrastructure.database.repositories.sqlalchemy_service_repo import SQLAlchemyServiceRepository
from infrastructure.database.repositories.sqlalchemy_team_repo import SQLAlchemyTeamRepository


class SQLAlchemyUnitOfWork:
    """Unit of Work implementation using SQLAlchemy."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory
        self._session: Optional[AsyncSession] = None

    def _require_session(self) -> AsyncSession:
        if not self._session:
            raise RuntimeError("UnitOfWork not initialized. Use as context manager.")
        return self._session

    @property
    def profiles(self) -> SQLAlchemyProfileRepository:
        """Get profile repository."""
        return SQLAlchemyProfileRepository(self._require_session())

    @property
    def teams(self) -> SQLAlchemyTeamRepository:
        """Get team and membership repository."""
        return SQLAlchemyTeamRepository(self._require_session())

    @property
    def roles(self) -> SQLAlchemyRoleRepository:
        """Get musical role repository."""
        return SQLAlchemyRoleRepository(self._require_session())

    @property
    def services(self) -> SQLAlchemyServiceRepository:
        """Get service and service type repository."""
        return SQLAlchemyServiceRepository(self._require_session())

    @property
    def assignments(self) -> SQLAlchemyAssignmentRepository:
        """Get assignment repository."""
        return SQLAlchemyAssignmentRepository(self._require_session())

    @property
    def availability(self) -> SQLAlchemyAvailabilityRepository:
        """Get availability repository."""
        return SQLAlchemyAvailabilityRepository(self._require_session())

    @property
    def invitations(self) -> SQLAlchemyInvitationRepository:
        """Get invitation repository."""
        return SQLAlchemyInvitationRepository(self._require_session())

    @property
    def transfers(self) -> SQLAlchemyOwnershipTransferRepository:
        """Get ownership transfer repository."""
        return SQLAlchemyOwnershipTransferRepository(self._require_session())

    async def commit(self) -> None:
        """Commit the current transaction."""
        if self._session:
            await self._session.commit()

    async def rollback(self) -> None:
        """Rollback the current transaction."""
        if self._session:
            await self._session.rollback()

    async def __aenter__(self) -> "SQLAlchemyUnitOfWork":
        """Enter the context manager and create session."""
        self._session = self._session_factory()
        return self

    async def __aexit__(
        self,
        exc_type: Optional[type],
        exc_val: Optional[Exception],
        exc_tb: Any,
    ) -> None:
        """Exit the context manager and cleanup."""
        if self._session:
            if exc_type:
                await self.rollback()
            await self._session.close()
            self._session = None
