"""Invitation API routes."""

from uuid import UUID

from fastapi import APIRouter, Depends, Request, status

from api.dependencies.auth import CurrentUser
from api.v1.dependencies import InitializedUser, get_invitation_service
from api.v1.schemas.invitation import (
    AcceptInvitationRequest,
    CreateInvitationRequest,
    InvitationDetailResponse,
    InvitationListResponse,
    InvitationResponse,
)
from api.v1.schemas.team import MemberDetailResponse, MemberResponse
from core.rate_limit import limiter
from domain.entities.invitation import Invitation
from domain.services.invitation_service import InvitationService

# Team-scoped invitation routes
team_invitations_router = APIRouter(
    prefix="/teams/{team_id}/invitations",
    tags=["invitations"],
)

# User-scoped invitation routes (lookup, accept, pending)
invitations_router = APIRouter(
    prefix="/invitations",
    tags=["invitations"],
)


@team_invitations_router.post(
    "",
    response_model=InvitationDetailResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create team invitation",
    responses={
        201: {"description": "Invitation created; the token is in the response"},
        400: {"description": "Owner role cannot be suggested"},
        403: {"description": "Requires invite_members; admin invitations need the owner"},
        404: {"description": "Team not found"},
        409: {"description": "A pending invitation already exists for this email"},
    },
)
@limiter.limit("10/minute")  # type: ignore[untyped-decorator]
async def create_invitation(
    request: Request,
    team_id: UUID,
    body: CreateInvitationRequest,
    user: CurrentUser,
    service: InvitationService = Depends(get_invitation_service),
) -> InvitationDetailResponse:
    invitation = await service.create_invitation(
        team_id=team_id,
        user_id=user.id,
        email=body.email,
        role_suggestion=body.role_suggestion,
        message=body.message,
    )
    return InvitationDetailResponse(data=_build_invitation_response(invitation, with_token=True))


@team_invitations_router.get(
    "",
    response_model=InvitationListResponse,
    summary="List team invitations",
    responses={
        200: {"description": "Invitations of the team, newest first"},
        403: {"description": "Requires invite_members"},
    },
)
@limiter.limit("30/minute")  # type: ignore[untyped-decorator]
async def list_team_invitations(
    request: Request,
    team_id: UUID,
    user: CurrentUser,
    service: InvitationService = Depends(get_invitation_service),
) -> InvitationListResponse:
    invitations = await service.get_team_invitations(team_id, user.id)
    data = [_build_invitation_response(inv) for inv in invitations]
    return InvitationListResponse(data=data, meta={"total": len(data)})


@team_invitations_router.delete(
    "/{invitation_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Cancel invitation",
    responses={
        204: {"description": "Invitation cancelled"},
        403: {"description": "Requires invite_members"},
        404: {"description": "Invitation not found or no longer pending"},
    },
)
@limiter.limit("10/minute")  # type: ignore[untyped-decorator]
async def cancel_invitation(
    request: Request,
    team_id: UUID,
    invitation_id: UUID,
    user: CurrentUser,
    service: InvitationService = Depends(get_invitation_service),
) -> None:
    await service.cancel_invitation(team_id, invitation_id, user.id)
    return None


# --- User-scoped routes ---


@invitations_router.get(
    "/pending",
    response_model=InvitationListResponse,
    summary="Get pending invitations",
    responses={200: {"description": "Pending invitations addressed to the caller's email"}},
)
@limiter.limit("30/minute")  # type: ignore[untyped-decorator]
async def get_pending_invitations(
    request: Request,
    user: CurrentUser,
    service: InvitationService = Depends(get_invitation_service),
) -> InvitationListResponse:
    invitations = await service.get_user_pending_invitations(user.email)
    data = [_build_invitation_response(inv) for inv in invitations]
    return InvitationListResponse(data=data, meta={"total": len(data)})


@invitations_router.get(
    "/{token}",
    response_model=InvitationDetailResponse,
    summary="Look up invitation by token",
    responses={
        200: {"description": "Pending invitation"},
        400: {"description": "Invitation expired"},
        404: {"description": "Unknown or no longer pending"},
    },
)
@limiter.limit("30/minute")  # type: ignore[untyped-decorator]
async def get_invitation(
    request: Request,
    token: str,
    user: CurrentUser,
    service: InvitationService = Depends(get_invitation_service),
) -> InvitationDetailResponse:
    invitation = await service.get_by_token(token)
    return InvitationDetailResponse(data=_build_invitation_response(invitation))


@invitations_router.post(
    "/accept",
    response_model=MemberDetailResponse,
    summary="Accept invitation",
    responses={
        200: {"description": "Invitation accepted, user added to the team"},
        400: {"description": "Invitation expired"},
        404: {"description": "Invitation not found"},
        409: {"description": "Already a member"},
    },
)
@limiter.limit("10/minute")  # type: ignore[untyped-decorator]
async def accept_invitation(
    request: Request,
    body: AcceptInvitationRequest,
    user: InitializedUser,
    service: InvitationService = Depends(get_invitation_service),
) -> MemberDetailResponse:
    """Join the invitation's team with the suggested role."""
    member = await service.accept_invitation(token=body.token, user_id=user.id)
    return MemberDetailResponse(data=MemberResponse.model_validate(member))


def _build_invitation_response(invitation: Invitation, with_token: bool = False) -> InvitationResponse:
    return InvitationResponse(
        id=invitation.id,
        team_id=invitation.team_id,
        email=invitation.email,
        role_suggestion=invitation.role_suggestion,
        status=invitation.status,
        invited_by=invitation.invited_by,
        message=invitation.message,
        token=invitation.token if with_token else None,
        created_at=invitation.created_at,
        expires_at=invitation.expires_at,
        accepted_at=invitation.accepted_at,
    )
