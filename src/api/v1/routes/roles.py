"""Musical role API routes."""

from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request, status

from api.dependencies.auth import CurrentUser
from api.v1.dependencies import get_role_service
from api.v1.schemas.role import (
    MemberRoleAssign,
    MemberRoleDetailResponse,
    MemberRoleListResponse,
    MemberRoleResponse,
    RoleCreate,
    RoleDetailResponse,
    RoleListResponse,
    RoleResponse,
    RoleUpdate,
)
from core.rate_limit import limiter
from domain.services.role_service import RoleService

router = APIRouter(prefix="/teams/{team_id}", tags=["roles"])


@router.get(
    "/roles",
    response_model=RoleListResponse,
    summary="List team roles",
    responses={
        200: {"description": "Roles ordered by display order"},
        403: {"description": "Not a member"},
    },
)
@limiter.limit("30/minute")  # type: ignore[untyped-decorator]
async def list_roles(
    request: Request,
    team_id: UUID,
    user: CurrentUser,
    include_inactive: bool = Query(False, description="Include deactivated roles"),
    service: RoleService = Depends(get_role_service),
) -> RoleListResponse:
    roles = await service.list_roles(team_id, user.id, include_inactive)
    data = [RoleResponse.model_validate(r) for r in roles]
    return RoleListResponse(data=data, meta={"total": len(data)})


@router.post(
    "/roles",
    response_model=RoleDetailResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create role",
    responses={
        201: {"description": "Role created"},
        403: {"description": "Requires manage_roles"},
        409: {"description": "Role name already used in this team"},
    },
)
@limiter.limit("10/minute")  # type: ignore[untyped-decorator]
async def create_role(
    request: Request,
    team_id: UUID,
    body: RoleCreate,
    user: CurrentUser,
    service: RoleService = Depends(get_role_service),
) -> RoleDetailResponse:
    role = await service.create_role(team_id, user.id, **body.model_dump())
    return RoleDetailResponse(data=RoleResponse.model_validate(role))


@router.patch(
    "/roles/{role_id}",
    response_model=RoleDetailResponse,
    summary="Update role",
    responses={
        200: {"description": "Role updated"},
        403: {"description": "Requires manage_roles"},
        404: {"description": "Role not found"},
        409: {"description": "Role name already used in this team"},
    },
)
@limiter.limit("10/minute")  # type: ignore[untyped-decorator]
async def update_role(
    request: Request,
    team_id: UUID,
    role_id: UUID,
    body: RoleUpdate,
    user: CurrentUser,
    service: RoleService = Depends(get_role_service),
) -> RoleDetailResponse:
    role = await service.update_role(team_id, user.id, role_id, **body.model_dump(exclude_unset=True))
    return RoleDetailResponse(data=RoleResponse.model_validate(role))


@router.delete(
    "/roles/{role_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete role",
    responses={
        204: {"description": "Role deleted"},
        403: {"description": "Requires manage_roles"},
        404: {"description": "Role not found"},
    },
)
@limiter.limit("10/minute")  # type: ignore[untyped-decorator]
async def delete_role(
    request: Request,
    team_id: UUID,
    role_id: UUID,
    user: CurrentUser,
    service: RoleService = Depends(get_role_service),
) -> None:
    await service.delete_role(team_id, user.id, role_id)
    return None


# --- Member roles ---


@router.get(
    "/members/{member_id}/roles",
    response_model=MemberRoleListResponse,
    summary="List a member's roles",
    responses={
        200: {"description": "Roles the member can cover"},
        404: {"description": "Member not found"},
    },
)
@limiter.limit("30/minute")  # type: ignore[untyped-decorator]
async def list_member_roles(
    request: Request,
    team_id: UUID,
    member_id: UUID,
    user: CurrentUser,
    service: RoleService = Depends(get_role_service),
) -> MemberRoleListResponse:
    links = await service.get_member_roles(team_id, user.id, member_id)
    data = [MemberRoleResponse.model_validate(link) for link in links]
    return MemberRoleListResponse(data=data, meta={"total": len(data)})


@router.post(
    "/members/{member_id}/roles",
    response_model=MemberRoleDetailResponse,
    summary="Assign a role to a member",
    responses={
        200: {"description": "Role linked or link updated"},
        403: {"description": "Requires assign_roles"},
        404: {"description": "Member or role not found"},
    },
)
@limiter.limit("10/minute")  # type: ignore[untyped-decorator]
async def assign_member_role(
    request: Request,
    team_id: UUID,
    member_id: UUID,
    body: MemberRoleAssign,
    user: CurrentUser,
    service: RoleService = Depends(get_role_service),
) -> MemberRoleDetailResponse:
    """Link a member to a role. Marking it primary clears their other primary role."""
    link = await service.assign_role(
        team_id,
        user.id,
        member_id,
        body.role_id,
        proficiency=body.proficiency,
        is_primary=body.is_primary,
        notes=body.notes,
    )
    return MemberRoleDetailResponse(data=MemberRoleResponse.model_validate(link))


@router.delete(
    "/members/{member_id}/roles/{role_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Remove a role from a member",
    responses={204: {"description": "Role unlinked"}},
)
@limiter.limit("10/minute")  # type: ignore[untyped-decorator]
async def unassign_member_role(
    request: Request,
    team_id: UUID,
    member_id: UUID,
    role_id: UUID,
    user: CurrentUser,
    service: RoleService = Depends(get_role_service),
) -> None:
    await service.unassign_role(team_id, user.id, member_id, role_id)
    return None
