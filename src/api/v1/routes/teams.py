"""Team and membership API routes."""

from uuid import UUID

from fastapi import APIRouter, Depends, Request, status

from api.dependencies.auth import CurrentUser
from api.v1.dependencies import InitializedUser, get_ownership_service, get_team_service
from api.v1.schemas.team import (
    CapabilitiesResponse,
    InviteCodeResponse,
    JoinTeamRequest,
    MemberDetailResponse,
    MemberListResponse,
    MemberResponse,
    TeamCreate,
    TeamDetailResponse,
    TeamListResponse,
    TeamResponse,
    TeamUpdate,
    TransferDetailResponse,
    TransferOwnershipRequest,
    TransferResponse,
    UpdateMemberRoleRequest,
    UpdateNicknameRequest,
)
from core.rate_limit import limiter
from domain.entities.ownership_transfer import OwnershipTransfer
from domain.entities.team import Membership, MembershipRole, Team
from domain.services.ownership_service import OwnershipService
from domain.services.team_service import TeamService

router = APIRouter(prefix="/teams", tags=["teams"])


@router.get(
    "",
    response_model=TeamListResponse,
    summary="List user's teams",
    responses={200: {"description": "Teams the user is an active member of"}},
)
@limiter.limit("30/minute")  # type: ignore[untyped-decorator]
async def list_teams(
    request: Request,
    user: InitializedUser,
    service: TeamService = Depends(get_team_service),
) -> TeamListResponse:
    """Get all teams the authenticated user belongs to, with their role."""
    summaries = await service.get_all_for_user(user.id)
    data = [
        _build_team_response(s.team, role=s.role, member_count=s.member_count)
        for s in summaries
    ]
    return TeamListResponse(data=data, meta={"total": len(data)})


@router.post(
    "",
    response_model=TeamDetailResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a team",
    responses={201: {"description": "Team created, creator is owner"}},
)
@limiter.limit("10/minute")  # type: ignore[untyped-decorator]
async def create_team(
    request: Request,
    body: TeamCreate,
    user: InitializedUser,
    service: TeamService = Depends(get_team_service),
) -> TeamDetailResponse:
    """Create a new team. The creator becomes its owner."""
    team = await service.create(
        user_id=user.id,
        name=body.name,
        description=body.description,
        color=body.color,
        timezone=body.timezone,
    )
    return TeamDetailResponse(
        data=_build_team_response(team, role=MembershipRole.OWNER, member_count=1)
    )


@router.post(
    "/join",
    response_model=MemberDetailResponse,
    summary="Join a team by invite code",
    responses={
        200: {"description": "Joined the team as a member"},
        404: {"description": "Invalid invite code"},
        409: {"description": "Already a member"},
    },
)
@limiter.limit("10/minute")  # type: ignore[untyped-decorator]
async def join_team(
    request: Request,
    body: JoinTeamRequest,
    user: InitializedUser,
    service: TeamService = Depends(get_team_service),
) -> MemberDetailResponse:
    """Join a team with its invite code. Codes are case-insensitive."""
    member = await service.join_by_code(user.id, body.invite_code)
    return MemberDetailResponse(data=_build_member_response(member))


@router.get(
    "/{team_id}",
    response_model=TeamDetailResponse,
    summary="Get team details",
    responses={
        200: {"description": "Team details"},
        403: {"description": "Not a member"},
        404: {"description": "Team not found"},
    },
)
@limiter.limit("30/minute")  # type: ignore[untyped-decorator]
async def get_team(
    request: Request,
    team_id: UUID,
    user: CurrentUser,
    service: TeamService = Depends(get_team_service),
) -> TeamDetailResponse:
    """Get a specific team by ID. Requires membership."""
    team = await service.get_by_id(team_id, user.id)
    return TeamDetailResponse(data=_build_team_response(team))


@router.patch(
    "/{team_id}",
    response_model=TeamDetailResponse,
    summary="Update team",
    responses={
        200: {"description": "Team updated"},
        403: {"description": "Requires manage_team"},
        404: {"description": "Team not found"},
    },
)
@limiter.limit("10/minute")  # type: ignore[untyped-decorator]
async def update_team(
    request: Request,
    team_id: UUID,
    body: TeamUpdate,
    user: CurrentUser,
    service: TeamService = Depends(get_team_service),
) -> TeamDetailResponse:
    """Update team details. Settings are merged into the existing ones."""
    team = await service.update(
        team_id=team_id,
        user_id=user.id,
        name=body.name,
        description=body.description,
        color=body.color,
        timezone=body.timezone,
        team_settings=body.settings,
    )
    return TeamDetailResponse(data=_build_team_response(team))


@router.delete(
    "/{team_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete team",
    responses={
        204: {"description": "Team deleted"},
        403: {"description": "Owner only"},
        404: {"description": "Team not found"},
    },
)
@limiter.limit("10/minute")  # type: ignore[untyped-decorator]
async def delete_team(
    request: Request,
    team_id: UUID,
    user: CurrentUser,
    service: TeamService = Depends(get_team_service),
) -> None:
    """Delete a team and everything in it. Owner only."""
    await service.delete(team_id, user.id)
    return None


@router.post(
    "/{team_id}/leave",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Leave team",
    responses={
        204: {"description": "Left the team"},
        400: {"description": "Owner must transfer ownership first"},
    },
)
@limiter.limit("10/minute")  # type: ignore[untyped-decorator]
async def leave_team(
    request: Request,
    team_id: UUID,
    user: CurrentUser,
    service: TeamService = Depends(get_team_service),
) -> None:
    await service.leave(team_id, user.id)
    return None


@router.get(
    "/{team_id}/capabilities",
    response_model=CapabilitiesResponse,
    summary="Get the caller's capabilities",
    responses={
        200: {"description": "Role and capability flags"},
        403: {"description": "Not a member"},
    },
)
@limiter.limit("30/minute")  # type: ignore[untyped-decorator]
async def get_capabilities(
    request: Request,
    team_id: UUID,
    user: CurrentUser,
    service: TeamService = Depends(get_team_service),
) -> CapabilitiesResponse:
    """Which actions the caller may take in this team, for gating the UI."""
    role, capabilities = await service.get_capabilities(team_id, user.id)
    return CapabilitiesResponse(role=role, capabilities=capabilities.as_dict())


@router.post(
    "/{team_id}/invite-code",
    response_model=InviteCodeResponse,
    summary="Regenerate invite code",
    responses={
        200: {"description": "New invite code"},
        403: {"description": "Insufficient permissions"},
    },
)
@limiter.limit("10/minute")  # type: ignore[untyped-decorator]
async def regenerate_invite_code(
    request: Request,
    team_id: UUID,
    user: CurrentUser,
    service: TeamService = Depends(get_team_service),
) -> InviteCodeResponse:
    """Replace the invite code. The old code stops working immediately."""
    code = await service.regenerate_invite_code(team_id, user.id)
    return InviteCodeResponse(invite_code=code)


# --- Members ---


@router.get(
    "/{team_id}/members",
    response_model=MemberListResponse,
    summary="List team members",
    responses={
        200: {"description": "Active members, owner first"},
        403: {"description": "Not a member"},
    },
)
@limiter.limit("30/minute")  # type: ignore[untyped-decorator]
async def list_members(
    request: Request,
    team_id: UUID,
    user: CurrentUser,
    service: TeamService = Depends(get_team_service),
) -> MemberListResponse:
    members = await service.get_members(team_id, user.id)
    data = [_build_member_response(m) for m in members]
    return MemberListResponse(data=data, meta={"total": len(data)})


@router.patch(
    "/{team_id}/members/me",
    response_model=MemberDetailResponse,
    summary="Update own nickname",
    responses={200: {"description": "Nickname updated"}},
)
@limiter.limit("10/minute")  # type: ignore[untyped-decorator]
async def update_my_nickname(
    request: Request,
    team_id: UUID,
    body: UpdateNicknameRequest,
    user: CurrentUser,
    service: TeamService = Depends(get_team_service),
) -> MemberDetailResponse:
    member = await service.update_nickname(team_id, user.id, body.nickname)
    return MemberDetailResponse(data=_build_member_response(member))


@router.patch(
    "/{team_id}/members/{member_id}/role",
    response_model=MemberDetailResponse,
    summary="Change member role",
    responses={
        200: {"description": "Role updated"},
        400: {"description": "Owner role cannot be assigned here"},
        403: {"description": "Insufficient permissions"},
        404: {"description": "Member not found"},
    },
)
@limiter.limit("10/minute")  # type: ignore[untyped-decorator]
async def update_member_role(
    request: Request,
    team_id: UUID,
    member_id: UUID,
    body: UpdateMemberRoleRequest,
    user: CurrentUser,
    service: TeamService = Depends(get_team_service),
) -> MemberDetailResponse:
    """Promote or demote a member between admin and member."""
    member = await service.update_member_role(team_id, user.id, member_id, body.role)
    return MemberDetailResponse(data=_build_member_response(member))


@router.delete(
    "/{team_id}/members/{member_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Remove member",
    responses={
        204: {"description": "Member removed"},
        403: {"description": "Insufficient permissions"},
        404: {"description": "Member not found"},
    },
)
@limiter.limit("10/minute")  # type: ignore[untyped-decorator]
async def remove_member(
    request: Request,
    team_id: UUID,
    member_id: UUID,
    user: CurrentUser,
    service: TeamService = Depends(get_team_service),
) -> None:
    await service.remove_member(team_id, user.id, member_id)
    return None


# --- Ownership transfer ---


@router.post(
    "/{team_id}/transfer-ownership",
    response_model=TransferDetailResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Transfer ownership",
    responses={
        201: {"description": "Transfer created or completed"},
        403: {"description": "Owner only"},
        404: {"description": "Target is not an active member"},
        409: {"description": "A transfer is already pending"},
    },
)
@limiter.limit("10/minute")  # type: ignore[untyped-decorator]
async def transfer_ownership(
    request: Request,
    team_id: UUID,
    body: TransferOwnershipRequest,
    user: CurrentUser,
    service: OwnershipService = Depends(get_ownership_service),
) -> TransferDetailResponse:
    """Hand the team to another member, immediately or on their acceptance."""
    if body.immediate:
        transfer = await service.transfer_now(
            team_id,
            user.id,
            body.new_owner_id,
            previous_owner_role=body.previous_owner_role,
            reason=body.reason,
        )
    else:
        transfer = await service.initiate(
            team_id,
            user.id,
            body.new_owner_id,
            reason=body.reason,
            previous_owner_role=body.previous_owner_role,
        )
    return TransferDetailResponse(data=_build_transfer_response(transfer))


@router.get(
    "/{team_id}/transfer-ownership",
    response_model=TransferDetailResponse,
    summary="Get pending ownership transfer",
    responses={200: {"description": "The pending transfer, or null"}},
)
@limiter.limit("30/minute")  # type: ignore[untyped-decorator]
async def get_pending_transfer(
    request: Request,
    team_id: UUID,
    user: CurrentUser,
    service: OwnershipService = Depends(get_ownership_service),
) -> TransferDetailResponse:
    transfer = await service.get_pending(team_id, user.id)
    return TransferDetailResponse(data=_build_transfer_response(transfer) if transfer else None)


@router.post(
    "/transfers/{transfer_id}/accept",
    response_model=TransferDetailResponse,
    summary="Accept ownership transfer",
    responses={
        200: {"description": "Transfer completed"},
        400: {"description": "Transfer expired"},
        403: {"description": "Not the transfer target"},
        404: {"description": "Transfer not found or no longer pending"},
    },
)
@limiter.limit("10/minute")  # type: ignore[untyped-decorator]
async def accept_transfer(
    request: Request,
    transfer_id: UUID,
    user: CurrentUser,
    service: OwnershipService = Depends(get_ownership_service),
) -> TransferDetailResponse:
    transfer = await service.accept(transfer_id, user.id)
    return TransferDetailResponse(data=_build_transfer_response(transfer))


@router.post(
    "/transfers/{transfer_id}/cancel",
    response_model=TransferDetailResponse,
    summary="Cancel ownership transfer",
    responses={
        200: {"description": "Transfer cancelled"},
        403: {"description": "Not a party to the transfer"},
        404: {"description": "Transfer not found or no longer pending"},
    },
)
@limiter.limit("10/minute")  # type: ignore[untyped-decorator]
async def cancel_transfer(
    request: Request,
    transfer_id: UUID,
    user: CurrentUser,
    service: OwnershipService = Depends(get_ownership_service),
) -> TransferDetailResponse:
    transfer = await service.cancel(transfer_id, user.id)
    return TransferDetailResponse(data=_build_transfer_response(transfer))


def _build_team_response(
    team: Team,
    role: MembershipRole | None = None,
    member_count: int | None = None,
) -> TeamResponse:
    return TeamResponse(
        id=team.id,
        name=team.name,
        description=team.description,
        owner_id=team.owner_id,
        invite_code=team.invite_code,
        color=team.color,
        timezone=team.timezone,
        settings=team.settings,
        role=role,
        member_count=member_count,
        created_at=team.created_at,
        updated_at=team.updated_at,
    )


def _build_member_response(member: Membership) -> MemberResponse:
    return MemberResponse(
        id=member.id,
        team_id=member.team_id,
        user_id=member.user_id,
        role=member.role,
        status=member.status,
        nickname=member.nickname,
        display_name=member.display_name,
        email=member.email,
        joined_at=member.joined_at,
    )


def _build_transfer_response(transfer: OwnershipTransfer) -> TransferResponse:
    return TransferResponse.model_validate(transfer)
