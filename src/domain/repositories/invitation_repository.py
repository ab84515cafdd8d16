"""Invitation repository protocol."""

from typing import Protocol
from uuid import UUID

from domain.entities.invitation import Invitation


class IInvitationRepository(Protocol):
    """Repository interface for Invitation entities."""

    async def create(self, invitation: Invitation) -> Invitation:
        """Create a new invitation."""
        ...

    async def get_by_id(self, id: UUID) -> Invitation | None:
        """Get an invitation by ID."""
        ...

    async def get_by_token(self, token: str) -> Invitation | None:
        """Get an invitation by its token."""
        ...

    async def get_for_team(self, team_id: UUID) -> list[Invitation]:
        """Get all invitations of a team, newest first."""
        ...

    async def get_pending_for_team_email(self, team_id: UUID, email: str) -> Invitation | None:
        """Get a pending, unexpired invitation for a team and email."""
        ...

    async def get_pending_for_email(self, email: str) -> list[Invitation]:
        """Get all pending, unexpired invitations for an email address."""
        ...

    async def update(self, invitation: Invitation) -> Invitation:
        """Persist status and acceptance changes."""
        ...
