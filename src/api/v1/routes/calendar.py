"""Personal calendar API routes (across all of the caller's teams)."""

from datetime import date

from fastapi import APIRouter, Depends, Query, Request

from api.dependencies.auth import CurrentUser
from api.v1.dependencies import get_calendar_service
from api.v1.schemas.calendar import (
    AvailabilityBrief,
    CalendarEntryResponse,
    CalendarListResponse,
    MyAssignmentBrief,
    ServiceBrief,
    TeamBrief,
    UpcomingServiceListResponse,
    UpcomingServiceResponse,
)
from core.rate_limit import limiter
from domain.entities.assignment import AssignmentDetail
from domain.entities.calendar import CalendarEntry, UpcomingService
from domain.entities.team import Team
from domain.services.calendar_service import MAX_UPCOMING, CalendarService

router = APIRouter(prefix="/me", tags=["calendar"])


@router.get(
    "/upcoming-services",
    response_model=UpcomingServiceListResponse,
    summary="My upcoming services",
    responses={200: {"description": "Next published services across all of the caller's teams"}},
)
@limiter.limit("30/minute")  # type: ignore[untyped-decorator]
async def upcoming_services(
    request: Request,
    user: CurrentUser,
    limit: int = Query(5, ge=1, le=MAX_UPCOMING),
    service: CalendarService = Depends(get_calendar_service),
) -> UpcomingServiceListResponse:
    upcoming = await service.upcoming_services(user.id, limit)
    data = [_upcoming(u) for u in upcoming]
    return UpcomingServiceListResponse(data=data, meta={"total": len(data)})


@router.get(
    "/calendar",
    response_model=CalendarListResponse,
    summary="My personal calendar",
    responses={
        200: {"description": "Assigned services, rehearsals and unavailable days, by date"},
        400: {"description": "Invalid or too long date range"},
    },
)
@limiter.limit("30/minute")  # type: ignore[untyped-decorator]
async def personal_calendar(
    request: Request,
    user: CurrentUser,
    start_date: date = Query(...),
    end_date: date = Query(...),
    service: CalendarService = Depends(get_calendar_service),
) -> CalendarListResponse:
    entries = await service.personal_calendar(user.id, start_date, end_date)
    data = [_entry(e) for e in entries]
    return CalendarListResponse(data=data, meta={"total": len(data)})


def _team(team: Team) -> TeamBrief:
    return TeamBrief(id=team.id, name=team.name, color=team.color)


def _assignment(detail: AssignmentDetail | None) -> MyAssignmentBrief | None:
    if detail is None:
        return None
    return MyAssignmentBrief(
        id=detail.assignment.id,
        status=detail.assignment.status,
        role_id=detail.assignment.role_id,
        role_name=detail.role_name,
        role_name_ko=detail.role_name_ko,
    )


def _upcoming(upcoming: UpcomingService) -> UpcomingServiceResponse:
    s = upcoming.service
    return UpcomingServiceResponse(
        id=s.id,
        name=s.name,
        service_date=s.service_date,
        start_time=s.start_time,
        end_time=s.end_time,
        location=s.location,
        status=s.status,
        team=_team(upcoming.team),
        my_assignment=_assignment(upcoming.my_assignment),
    )


def _entry(entry: CalendarEntry) -> CalendarEntryResponse:
    service = entry.service
    availability = entry.availability
    return CalendarEntryResponse(
        id=entry.key,
        type=entry.type,
        title=entry.title,
        date=entry.date,
        start_time=entry.start_time,
        end_time=entry.end_time,
        team=_team(entry.team),
        service=(
            ServiceBrief(
                id=service.id, name=service.name, status=service.status, location=service.location
            )
            if service
            else None
        ),
        assignment=_assignment(entry.assignment),
        availability=(
            AvailabilityBrief(is_available=availability.is_available, reason=availability.reason)
            if availability
            else None
        ),
    )
