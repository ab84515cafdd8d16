"""Musical role catalogue and member-role links."""

from collections.abc import Callable
from uuid import UUID

from core.exceptions import (
    CrossTeamReferenceError,
    DuplicateRoleError,
    MemberNotFoundError,
    RoleNotFoundError,
)
from domain.entities.role import MemberRole, Proficiency, Role
from domain.permissions import Capability
from domain.repositories.unit_of_work import IUnitOfWork
from domain.services.access import require_capability, require_team


class RoleService:
    """Service layer for the parts members can be assigned to."""

    def __init__(self, uow_factory: Callable[[], IUnitOfWork]) -> None:
        self._uow_factory = uow_factory

    async def list_roles(self, team_id: UUID, user_id: UUID, include_inactive: bool = False) -> list[Role]:
        async with self._uow_factory() as uow:
            await require_team(uow, team_id)
            await require_capability(uow, team_id, user_id, Capability.VIEW_MEMBERS)
            return await uow.roles.get_for_team(team_id, include_inactive)  # type: ignore[no-any-return]

    async def create_role(
        self,
        team_id: UUID,
        user_id: UUID,
        name: str,
        name_ko: str | None = None,
        description: str | None = None,
        color: str | None = None,
        icon: str | None = None,
        min_required: int = 0,
        max_allowed: int | None = None,
        display_order: int | None = None,
    ) -> Role:
        """Add a role to the team. Names are unique per team."""
        async with self._uow_factory() as uow:
            await require_team(uow, team_id)
            await require_capability(uow, team_id, user_id, Capability.MANAGE_ROLES)

            if await uow.roles.get_by_name(team_id, name):
                raise DuplicateRoleError(name)

            if display_order is None:
                existing = await uow.roles.get_for_team(team_id, True)
                display_order = max((r.display_order for r in existing), default=0) + 1

            role = Role(
                team_id=team_id,
                name=name,
                name_ko=name_ko,
                description=description,
                color=color,
                icon=icon,
                min_required=min_required,
                max_allowed=max_allowed,
                display_order=display_order,
            )
            created = await uow.roles.create(role)
            await uow.commit()
            return created  # type: ignore[no-any-return]

    async def update_role(
        self,
        team_id: UUID,
        user_id: UUID,
        role_id: UUID,
        **changes: object,
    ) -> Role:
        """Update role fields. Unknown or None values are ignored."""
        async with self._uow_factory() as uow:
            await require_capability(uow, team_id, user_id, Capability.MANAGE_ROLES)
            role = await self._get_team_role(uow, team_id, role_id)

            new_name = changes.get("name")
            if isinstance(new_name, str) and new_name != role.name:
                if await uow.roles.get_by_name(team_id, new_name):
                    raise DuplicateRoleError(new_name)

            for field_name, value in changes.items():
                if value is not None and hasattr(role, field_name) and field_name not in ("id", "team_id"):
                    setattr(role, field_name, value)

            updated = await uow.roles.update(role)
            await uow.commit()
            return updated  # type: ignore[no-any-return]

    async def delete_role(self, team_id: UUID, user_id: UUID, role_id: UUID) -> bool:
        async with self._uow_factory() as uow:
            await require_capability(uow, team_id, user_id, Capability.MANAGE_ROLES)
            await self._get_team_role(uow, team_id, role_id)
            deleted = await uow.roles.delete(role_id)
            await uow.commit()
            return deleted  # type: ignore[no-any-return]

    async def get_member_roles(self, team_id: UUID, user_id: UUID, member_id: UUID) -> list[MemberRole]:
        async with self._uow_factory() as uow:
            await require_capability(uow, team_id, user_id, Capability.VIEW_MEMBERS)
            await self._get_team_member(uow, team_id, member_id)
            return await uow.roles.get_member_roles(member_id)  # type: ignore[no-any-return]

    async def assign_role(
        self,
        team_id: UUID,
        user_id: UUID,
        member_id: UUID,
        role_id: UUID,
        proficiency: Proficiency = Proficiency.INTERMEDIATE,
        is_primary: bool = False,
        notes: str | None = None,
    ) -> MemberRole:
        """Link a member to a role they can cover.

        Re-assigning an existing link updates it. Marking a role primary
        clears the flag on the member's other roles.
        """
        async with self._uow_factory() as uow:
            await require_capability(uow, team_id, user_id, Capability.ASSIGN_ROLES)
            await self._get_team_member(uow, team_id, member_id)
            role = await uow.roles.get(role_id)
            if not role:
                raise RoleNotFoundError(str(role_id))
            if role.team_id != team_id:
                raise CrossTeamReferenceError("role")

            if is_primary:
                await uow.roles.clear_primary(member_id)

            current = await uow.roles.get_member_roles(member_id)
            link = next((mr for mr in current if mr.role_id == role_id), None)
            if link:
                link.proficiency = proficiency
                link.is_primary = is_primary
                link.notes = notes
                saved = await uow.roles.update_member_role(link)
            else:
                saved = await uow.roles.add_member_role(
                    MemberRole(
                        team_member_id=member_id,
                        role_id=role_id,
                        proficiency=proficiency,
                        is_primary=is_primary,
                        notes=notes,
                    )
                )
            await uow.commit()
            return saved  # type: ignore[no-any-return]

    async def unassign_role(self, team_id: UUID, user_id: UUID, member_id: UUID, role_id: UUID) -> bool:
        async with self._uow_factory() as uow:
            await require_capability(uow, team_id, user_id, Capability.ASSIGN_ROLES)
            await self._get_team_member(uow, team_id, member_id)
            removed = await uow.roles.remove_member_role(member_id, role_id)
            await uow.commit()
            return removed  # type: ignore[no-any-return]

    # --- Internal helpers ---

    async def _get_team_role(self, uow: IUnitOfWork, team_id: UUID, role_id: UUID) -> Role:
        role = await uow.roles.get(role_id)
        if not role or role.team_id != team_id:
            raise RoleNotFoundError(str(role_id))
        return role

    async def _get_team_member(self, uow: IUnitOfWork, team_id: UUID, member_id: UUID) -> None:
        member = await uow.teams.get_member_by_id(member_id)
        if not member or member.team_id != team_id:
            raise MemberNotFoundError(str(member_id))
