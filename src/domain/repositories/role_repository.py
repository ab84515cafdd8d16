"""Musical role repository protocol."""

from typing import Protocol
from uuid import UUID

from domain.entities.role import MemberRole, Role


class IRoleRepository(Protocol):
    """Repository interface for Role and MemberRole entities."""

    async def get(self, id: UUID) -> Role | None:
        """Get a role by ID."""
        ...

    async def get_for_team(self, team_id: UUID, include_inactive: bool = False) -> list[Role]:
        """Get a team's roles ordered by display order."""
        ...

    async def get_by_name(self, team_id: UUID, name: str) -> Role | None:
        """Get a team's role by its unique name."""
        ...

    async def create(self, role: Role) -> Role:
        ...

    async def update(self, role: Role) -> Role:
        ...

    async def delete(self, id: UUID) -> bool:
        ...

    async def get_member_roles(self, team_member_id: UUID) -> list[MemberRole]:
        """Get the roles linked to a membership."""
        ...

    async def get_member_roles_for_team(self, team_id: UUID) -> list[MemberRole]:
        """Get every member-role link in a team."""
        ...

    async def add_member_role(self, member_role: MemberRole) -> MemberRole:
        ...

    async def update_member_role(self, member_role: MemberRole) -> MemberRole:
        ...

    async def remove_member_role(self, team_member_id: UUID, role_id: UUID) -> bool:
        ...

    async def clear_primary(self, team_member_id: UUID) -> None:
        """Unset ``is_primary`` on every role of a membership."""
        ...
