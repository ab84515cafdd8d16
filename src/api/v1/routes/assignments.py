"""Assignment API routes."""

from datetime import date
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request, status

from api.dependencies.auth import CurrentUser
from api.v1.dependencies import get_assignment_service
from api.v1.schemas.assignment import (
    AssignmentCreate,
    AssignmentDetailResponse,
    AssignmentListResponse,
    AssignmentRespondRequest,
    AssignmentResponse,
    BulkAssignmentCreate,
    RosterEntryResponse,
    RosterListResponse,
)
from core.rate_limit import limiter
from domain.entities.assignment import AssignmentDetail
from domain.services.assignment_service import AssignmentRequest, AssignmentService

router = APIRouter(tags=["assignments"])


@router.get(
    "/services/{service_id}/assignments",
    response_model=RosterListResponse,
    summary="Get service roster",
    responses={
        200: {"description": "Assignments with member and role names"},
        403: {"description": "Not a member, or draft hidden from members"},
        404: {"description": "Service not found"},
    },
)
@limiter.limit("30/minute")  # type: ignore[untyped-decorator]
async def list_assignments(
    request: Request,
    service_id: UUID,
    user: CurrentUser,
    service: AssignmentService = Depends(get_assignment_service),
) -> RosterListResponse:
    roster = await service.list_for_service(service_id, user.id)
    data = [build_roster_entry(d) for d in roster]
    return RosterListResponse(data=data, meta={"total": len(data)})


@router.post(
    "/services/{service_id}/assignments",
    response_model=AssignmentDetailResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Assign a member",
    responses={
        201: {"description": "Assignment created as pending"},
        400: {"description": "Member or role belongs to another team"},
        403: {"description": "Requires assign_members"},
        404: {"description": "Service, member or role not found"},
        409: {"description": "Member already holds this role on the service"},
    },
)
@limiter.limit("10/minute")  # type: ignore[untyped-decorator]
async def create_assignment(
    request: Request,
    service_id: UUID,
    body: AssignmentCreate,
    user: CurrentUser,
    service: AssignmentService = Depends(get_assignment_service),
) -> AssignmentDetailResponse:
    assignment = await service.create(
        service_id,
        user.id,
        team_member_id=body.team_member_id,
        role_id=body.role_id,
        notes=body.notes,
    )
    return AssignmentDetailResponse(data=AssignmentResponse.model_validate(assignment))


@router.post(
    "/services/{service_id}/assignments/bulk",
    response_model=AssignmentListResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Assign several members",
    responses={
        201: {"description": "All assignments created"},
        409: {"description": "A pair is duplicated; nothing was created"},
    },
)
@limiter.limit("10/minute")  # type: ignore[untyped-decorator]
async def bulk_create_assignments(
    request: Request,
    service_id: UUID,
    body: BulkAssignmentCreate,
    user: CurrentUser,
    service: AssignmentService = Depends(get_assignment_service),
) -> AssignmentListResponse:
    """Create many assignments in one transaction, all or nothing."""
    created = await service.bulk_create(
        service_id,
        user.id,
        [AssignmentRequest(a.team_member_id, a.role_id, a.notes) for a in body.assignments],
    )
    data = [AssignmentResponse.model_validate(a) for a in created]
    return AssignmentListResponse(data=data, meta={"total": len(data)})


@router.delete(
    "/assignments/{assignment_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Remove assignment",
    responses={
        204: {"description": "Assignment removed"},
        403: {"description": "Requires assign_members"},
        404: {"description": "Assignment not found"},
    },
)
@limiter.limit("10/minute")  # type: ignore[untyped-decorator]
async def delete_assignment(
    request: Request,
    assignment_id: UUID,
    user: CurrentUser,
    service: AssignmentService = Depends(get_assignment_service),
) -> None:
    await service.delete(assignment_id, user.id)
    return None


@router.post(
    "/assignments/{assignment_id}/respond",
    response_model=AssignmentDetailResponse,
    summary="Confirm or decline an assignment",
    responses={
        200: {"description": "Response recorded"},
        400: {"description": "Transition not allowed or decline reason missing"},
        403: {"description": "Not the assigned member"},
        404: {"description": "Assignment not found"},
    },
)
@limiter.limit("10/minute")  # type: ignore[untyped-decorator]
async def respond_to_assignment(
    request: Request,
    assignment_id: UUID,
    body: AssignmentRespondRequest,
    user: CurrentUser,
    service: AssignmentService = Depends(get_assignment_service),
) -> AssignmentDetailResponse:
    """Answer a pending assignment. Confirmed and declined answers are final."""
    assignment = await service.respond(assignment_id, user.id, body.status, body.decline_reason)
    return AssignmentDetailResponse(data=AssignmentResponse.model_validate(assignment))


@router.get(
    "/teams/{team_id}/assignments/me",
    response_model=AssignmentListResponse,
    summary="My assignments",
    responses={200: {"description": "The caller's assignments in this team"}},
)
@limiter.limit("30/minute")  # type: ignore[untyped-decorator]
async def my_assignments(
    request: Request,
    team_id: UUID,
    user: CurrentUser,
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    service: AssignmentService = Depends(get_assignment_service),
) -> AssignmentListResponse:
    assignments = await service.my_assignments(team_id, user.id, start_date, end_date)
    data = [AssignmentResponse.model_validate(a) for a in assignments]
    return AssignmentListResponse(data=data, meta={"total": len(data)})


def build_roster_entry(detail: AssignmentDetail) -> RosterEntryResponse:
    a = detail.assignment
    return RosterEntryResponse(
        id=a.id,
        service_id=a.service_id,
        team_member_id=a.team_member_id,
        role_id=a.role_id,
        status=a.status,
        assigned_by=a.assigned_by,
        decline_reason=a.decline_reason,
        notes=a.notes,
        responded_at=a.responded_at,
        created_at=a.created_at,
        updated_at=a.updated_at,
        user_id=detail.user_id,
        member_name=detail.member_name,
        role_name=detail.role_name,
        role_name_ko=detail.role_name_ko,
    )
