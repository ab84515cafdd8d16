"""Team service layer with business logic."""

import secrets
from collections.abc import Callable
from datetime import datetime
from typing import Any
from uuid import UUID

import structlog

from core.config import settings
from core.exceptions import (
    AlreadyAMemberError,
    AppException,
    ErrorCode,
    InvalidInviteCodeError,
    MemberNotFoundError,
    OwnerCannotLeaveError,
)
from domain.entities.team import (
    INVITE_CODE_ALPHABET,
    MemberStatus,
    Membership,
    MembershipRole,
    Team,
    TeamSummary,
    default_team_settings,
)
from domain.permissions import (
    Capabilities,
    Capability,
    ensure_can_change_role,
    ensure_can_remove_member,
    permissions_for,
)
from domain.repositories.unit_of_work import IUnitOfWork
from domain.services.access import require_capability, require_member, require_team

logger = structlog.get_logger()


def generate_invite_code(length: int | None = None) -> str:
    """Random invite code from the unambiguous alphabet."""
    length = length or settings.invite_code_length
    return "".join(secrets.choice(INVITE_CODE_ALPHABET) for _ in range(length))


class TeamService:
    """Service layer for Team and Membership business logic."""

    def __init__(self, uow_factory: Callable[[], IUnitOfWork]) -> None:
        self._uow_factory = uow_factory

    async def get_all_for_user(self, user_id: UUID) -> list[TeamSummary]:
        """Get all teams the user is an active member of."""
        async with self._uow_factory() as uow:
            return await uow.teams.get_all_for_user(user_id)  # type: ignore[no-any-return]

    async def get_by_id(self, team_id: UUID, user_id: UUID) -> Team:
        """Get a team by ID, verifying active membership."""
        async with self._uow_factory() as uow:
            team = await require_team(uow, team_id)
            await require_member(uow, team_id, user_id)
            return team

    async def get_capabilities(
        self, team_id: UUID, user_id: UUID
    ) -> tuple[MembershipRole, Capabilities]:
        """Return the caller's role and the capabilities it grants."""
        async with self._uow_factory() as uow:
            await require_team(uow, team_id)
            member = await require_member(uow, team_id, user_id)
            return member.role, permissions_for(member.role)

    async def create(
        self,
        user_id: UUID,
        name: str,
        description: str | None = None,
        color: str | None = None,
        timezone: str | None = None,
    ) -> Team:
        """Create a team with a fresh invite code and the creator as owner."""
        async with self._uow_factory() as uow:
            code = await self._unique_invite_code(uow)
            team = Team(name=name, owner_id=user_id, invite_code=code, description=description)
            if color:
                team.color = color
            if timezone:
                team.timezone = timezone

            created = await uow.teams.create(team)
            await uow.teams.add_member(
                Membership(team_id=created.id, user_id=user_id, role=MembershipRole.OWNER)
            )

            await uow.commit()
            logger.info("team_created", team_id=str(created.id), owner_id=str(user_id))
            return created

    async def update(
        self,
        team_id: UUID,
        user_id: UUID,
        name: str | None = None,
        description: str | None = None,
        color: str | None = None,
        timezone: str | None = None,
        team_settings: dict[str, Any] | None = None,
    ) -> Team:
        """Update team details. Requires the manage_team capability."""
        async with self._uow_factory() as uow:
            team = await require_team(uow, team_id)
            await require_capability(uow, team_id, user_id, Capability.MANAGE_TEAM)

            if name is not None:
                team.name = name
            if description is not None:
                team.description = description
            if color is not None:
                team.color = color
            if timezone is not None:
                team.timezone = timezone
            if team_settings is not None:
                merged = default_team_settings()
                merged.update(team.settings)
                merged.update(team_settings)
                team.settings = merged

            team.updated_at = datetime.utcnow()
            updated = await uow.teams.update(team)
            await uow.commit()
            return updated

    async def delete(self, team_id: UUID, user_id: UUID) -> bool:
        """Delete a team and all its data. Owner only."""
        async with self._uow_factory() as uow:
            await require_team(uow, team_id)
            await require_capability(uow, team_id, user_id, Capability.DELETE_TEAM)

            deleted = await uow.teams.delete(team_id)
            await uow.commit()
            logger.info("team_deleted", team_id=str(team_id), user_id=str(user_id))
            return deleted  # type: ignore[no-any-return]

    async def regenerate_invite_code(self, team_id: UUID, user_id: UUID) -> str:
        """Replace the team's invite code. Old codes stop working immediately."""
        async with self._uow_factory() as uow:
            team = await require_team(uow, team_id)
            await require_capability(uow, team_id, user_id, Capability.REGENERATE_INVITE_CODE)

            team.invite_code = await self._unique_invite_code(uow)
            team.updated_at = datetime.utcnow()
            await uow.teams.update(team)
            await uow.commit()
            return team.invite_code

    async def join_by_code(self, user_id: UUID, code: str) -> Membership:
        """Join a team by invite code.

        Codes are case-insensitive. A previous inactive membership is
        reactivated as a plain member instead of creating a second row.
        """
        async with self._uow_factory() as uow:
            team = await uow.teams.get_by_invite_code(code.strip().upper())
            if not team:
                raise InvalidInviteCodeError(code)

            existing = await uow.teams.get_member(team.id, user_id)
            if existing and existing.is_active:
                raise AlreadyAMemberError(str(user_id))

            if existing:
                existing.status = MemberStatus.ACTIVE
                existing.role = MembershipRole.MEMBER
                existing.joined_at = datetime.utcnow()
                member = await uow.teams.update_member(existing)
            else:
                member = await uow.teams.add_member(
                    Membership(team_id=team.id, user_id=user_id, role=MembershipRole.MEMBER)
                )

            await uow.commit()
            logger.info("team_joined", team_id=str(team.id), user_id=str(user_id))
            return member  # type: ignore[no-any-return]

    async def leave(self, team_id: UUID, user_id: UUID) -> None:
        """Leave a team. The owner has to transfer ownership first."""
        async with self._uow_factory() as uow:
            await require_team(uow, team_id)
            member = await require_member(uow, team_id, user_id)
            if member.role == MembershipRole.OWNER:
                raise OwnerCannotLeaveError()

            member.status = MemberStatus.INACTIVE
            await uow.teams.update_member(member)
            await uow.commit()

    async def get_members(self, team_id: UUID, user_id: UUID) -> list[Membership]:
        """Get active members of a team. Requires membership."""
        async with self._uow_factory() as uow:
            await require_team(uow, team_id)
            await require_capability(uow, team_id, user_id, Capability.VIEW_MEMBERS)
            return await uow.teams.get_members(team_id)  # type: ignore[no-any-return]

    async def update_nickname(self, team_id: UUID, user_id: UUID, nickname: str | None) -> Membership:
        """Set the caller's own nickname within a team."""
        async with self._uow_factory() as uow:
            member = await require_member(uow, team_id, user_id)
            member.nickname = nickname
            updated = await uow.teams.update_member(member)
            await uow.commit()
            return updated  # type: ignore[no-any-return]

    async def update_member_role(
        self,
        team_id: UUID,
        user_id: UUID,
        member_id: UUID,
        role: MembershipRole,
    ) -> Membership:
        """Change another member's role between admin and member."""
        async with self._uow_factory() as uow:
            await require_team(uow, team_id)
            actor = await require_member(uow, team_id, user_id)
            target = await self._get_team_member(uow, team_id, member_id)

            ensure_can_change_role(actor.role, target.role, role)

            target.role = role
            updated = await uow.teams.update_member(target)
            await uow.commit()
            logger.info(
                "member_role_changed",
                team_id=str(team_id),
                member_id=str(member_id),
                role=role.value,
            )
            return updated  # type: ignore[no-any-return]

    async def remove_member(self, team_id: UUID, user_id: UUID, member_id: UUID) -> None:
        """Remove a member (soft delete: status becomes inactive)."""
        async with self._uow_factory() as uow:
            await require_team(uow, team_id)
            actor = await require_member(uow, team_id, user_id)
            target = await self._get_team_member(uow, team_id, member_id)

            ensure_can_remove_member(actor.role, target.role)

            target.status = MemberStatus.INACTIVE
            await uow.teams.update_member(target)
            await uow.commit()

    # --- Internal helpers ---

    async def _get_team_member(self, uow: IUnitOfWork, team_id: UUID, member_id: UUID) -> Membership:
        member = await uow.teams.get_member_by_id(member_id)
        if not member or member.team_id != team_id or not member.is_active:
            raise MemberNotFoundError(str(member_id))
        return member

    async def _unique_invite_code(self, uow: IUnitOfWork) -> str:
        for _ in range(settings.invite_code_max_attempts):
            code = generate_invite_code()
            if not await uow.teams.invite_code_exists(code):
                return code
        raise AppException(
            error_code=ErrorCode.INTERNAL_ERROR,
            message="Could not generate a unique invite code",
            status_code=500,
        )
