"""Team repository protocol."""

from typing import Protocol
from uuid import UUID

from domain.entities.team import Membership, Team, TeamSummary


class ITeamRepository(Protocol):
    """Repository interface for Team and Membership entities."""

    async def get(self, id: UUID) -> Team | None:
        """Get a team by ID."""
        ...

    async def get_by_invite_code(self, code: str) -> Team | None:
        """Get a team by its invite code."""
        ...

    async def invite_code_exists(self, code: str) -> bool:
        """Check whether any team already uses the invite code."""
        ...

    async def get_all_for_user(self, user_id: UUID) -> list[TeamSummary]:
        """Get all teams a user is an active member of, with their role."""
        ...

    async def create(self, team: Team) -> Team:
        """Create a new team."""
        ...

    async def update(self, team: Team) -> Team:
        """Update an existing team."""
        ...

    async def delete(self, id: UUID) -> bool:
        """Delete a team and everything scoped to it."""
        ...

    async def get_member(self, team_id: UUID, user_id: UUID) -> Membership | None:
        """Get a membership (any status) by team and user IDs."""
        ...

    async def get_member_by_id(self, member_id: UUID) -> Membership | None:
        """Get a membership by its ID."""
        ...

    async def get_members(self, team_id: UUID, include_inactive: bool = False) -> list[Membership]:
        """Get the memberships of a team, active only by default."""
        ...

    async def add_member(self, member: Membership) -> Membership:
        """Add a membership row."""
        ...

    async def update_member(self, member: Membership) -> Membership:
        """Persist role, status and nickname changes of a membership."""
        ...

    async def count_active_members(self, team_id: UUID) -> int:
        """Count active memberships of a team."""
        ...
