"""Membership and capability checks shared by the domain services."""

from uuid import UUID

from core.exceptions import NotAMemberError, TeamNotFoundError
from domain.entities.team import Membership, Team
from domain.permissions import Capability, require_permission
from domain.repositories.unit_of_work import IUnitOfWork


async def require_team(uow: IUnitOfWork, team_id: UUID) -> Team:
    team = await uow.teams.get(team_id)
    if not team:
        raise TeamNotFoundError(str(team_id))
    return team


async def require_member(uow: IUnitOfWork, team_id: UUID, user_id: UUID) -> Membership:
    """Return the caller's active membership or raise NotAMemberError."""
    member = await uow.teams.get_member(team_id, user_id)
    if not member or not member.is_active:
        raise NotAMemberError(str(team_id))
    return member


async def require_capability(
    uow: IUnitOfWork,
    team_id: UUID,
    user_id: UUID,
    capability: Capability,
) -> Membership:
    """Return the caller's membership if its role grants ``capability``."""
    member = await require_member(uow, team_id, user_id)
    require_permission(member.role, capability)
    return member
