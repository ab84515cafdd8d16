"""Availability API routes."""

from datetime import date
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request, status

from api.dependencies.auth import CurrentUser
from api.v1.dependencies import get_availability_service
from api.v1.schemas.availability import (
    AvailabilityListResponse,
    AvailabilityRequestsResponse,
    AvailabilityResponse,
    BulkAvailabilityRequest,
    DateAvailabilityResponse,
    MemberAvailabilityResponse,
    PendingRequestResponse,
    SubmittedResponseSchema,
    TeamAvailabilityListResponse,
)
from core.rate_limit import limiter
from domain.entities.availability import AvailabilityInput, DateAvailabilitySummary
from domain.services.availability_service import AvailabilityService

router = APIRouter(prefix="/teams/{team_id}/availability", tags=["availability"])


@router.get(
    "/me",
    response_model=AvailabilityListResponse,
    summary="My availability",
    responses={200: {"description": "The caller's answers, ordered by date"}},
)
@limiter.limit("30/minute")  # type: ignore[untyped-decorator]
async def get_my_availability(
    request: Request,
    team_id: UUID,
    user: CurrentUser,
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    service: AvailabilityService = Depends(get_availability_service),
) -> AvailabilityListResponse:
    rows = await service.get_my_availability(team_id, user.id, start_date, end_date)
    data = [AvailabilityResponse.model_validate(r) for r in rows]
    return AvailabilityListResponse(data=data, meta={"total": len(data)})


@router.put(
    "/me",
    response_model=AvailabilityListResponse,
    summary="Set availability for many dates",
    responses={
        200: {"description": "Rows written; one per distinct date"},
        403: {"description": "Not a member"},
    },
)
@limiter.limit("10/minute")  # type: ignore[untyped-decorator]
async def set_my_availability(
    request: Request,
    team_id: UUID,
    body: BulkAvailabilityRequest,
    user: CurrentUser,
    service: AvailabilityService = Depends(get_availability_service),
) -> AvailabilityListResponse:
    """Upsert answers in one statement. An empty list writes nothing."""
    rows = await service.bulk_set(
        team_id,
        user.id,
        [AvailabilityInput(e.date, e.is_available, e.reason) for e in body.entries],
    )
    data = [AvailabilityResponse.model_validate(r) for r in rows]
    return AvailabilityListResponse(data=data, meta={"total": len(data)})


@router.delete(
    "/me/{day}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Clear availability for a date",
    responses={204: {"description": "The date reads as unknown again"}},
)
@limiter.limit("10/minute")  # type: ignore[untyped-decorator]
async def delete_my_availability(
    request: Request,
    team_id: UUID,
    day: date,
    user: CurrentUser,
    service: AvailabilityService = Depends(get_availability_service),
) -> None:
    await service.delete_availability(team_id, user.id, day)
    return None


@router.get(
    "/requests",
    response_model=AvailabilityRequestsResponse,
    summary="Pending availability requests",
    responses={200: {"description": "Draft services split into pending and answered"}},
)
@limiter.limit("30/minute")  # type: ignore[untyped-decorator]
async def get_availability_requests(
    request: Request,
    team_id: UUID,
    user: CurrentUser,
    service: AvailabilityService = Depends(get_availability_service),
) -> AvailabilityRequestsResponse:
    """Draft services from this month through next month, matched to the caller's answers."""
    snapshot = await service.pending_requests(team_id, user.id)
    return AvailabilityRequestsResponse(
        pending=[PendingRequestResponse.model_validate(p) for p in snapshot.pending],
        responded=[SubmittedResponseSchema.model_validate(r) for r in snapshot.responded],
        meta={
            "total": snapshot.total_requested,
            "pending": len(snapshot.pending),
            "complete": snapshot.is_complete,
        },
    )


@router.get(
    "/team",
    response_model=TeamAvailabilityListResponse,
    summary="Team availability for a date range",
    responses={
        200: {"description": "One summary per date; members without an answer are unknown"},
        400: {"description": "Invalid or too long date range"},
        403: {"description": "Requires assign_members"},
    },
)
@limiter.limit("30/minute")  # type: ignore[untyped-decorator]
async def get_team_availability(
    request: Request,
    team_id: UUID,
    user: CurrentUser,
    start_date: date = Query(...),
    end_date: Optional[date] = Query(None, description="Defaults to start_date"),
    service: AvailabilityService = Depends(get_availability_service),
) -> TeamAvailabilityListResponse:
    summaries = await service.team_availability_range(
        team_id, user.id, start_date, end_date or start_date
    )
    data = [_build_summary_response(s) for s in summaries]
    return TeamAvailabilityListResponse(data=data, meta={"total": len(data)})


def _build_summary_response(summary: DateAvailabilitySummary) -> DateAvailabilityResponse:
    return DateAvailabilityResponse(
        date=summary.date,
        total_members=summary.total_members,
        available_count=summary.available_count,
        unavailable_count=summary.unavailable_count,
        unknown_count=summary.unknown_count,
        members=[MemberAvailabilityResponse.model_validate(m) for m in summary.members],
    )
