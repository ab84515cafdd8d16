"""Unit of Work protocol."""

from typing import Protocol

from domain.repositories.assignment_repository import IAssignmentRepository
from domain.repositories.availability_repository import IAvailabilityRepository
from domain.repositories.invitation_repository import IInvitationRepository
from domain.repositories.ownership_transfer_repository import IOwnershipTransferRepository
from domain.repositories.profile_repository import IProfileRepository
from domain.repositories.role_repository import IRoleRepository
from domain.repositories.service_repository import IServiceRepository
from domain.repositories.team_repository import ITeamRepository


class IUnitOfWork(Protocol):
    """Unit of Work interface for managing transactions."""

    profiles: IProfileRepository
    teams: ITeamRepository
    roles: IRoleRepository
    services: IServiceRepository
    assignments: IAssignmentRepository
    availability: IAvailabilityRepository
    invitations: IInvitationRepository
    transfers: IOwnershipTransferRepository

    async def commit(self) -> None:
        """Commit the current transaction."""
        ...

    async def rollback(self) -> None:
        """Rollback the current transaction."""
        ...

    async def __aenter__(self) -> "IUnitOfWork":
        """Enter the context manager."""
        ...

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:  # type: ignore
        """Exit the context manager."""
        ...
