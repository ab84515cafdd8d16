"""Service and service type API routes."""

from datetime import date
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request, status

from api.dependencies.auth import CurrentUser
from api.v1.dependencies import get_schedule_service
from api.v1.routes.assignments import build_roster_entry
from api.v1.schemas.service import (
    DateOverviewResponse,
    OverviewListResponse,
    OverviewRequest,
    ServiceCreate,
    ServiceDetailResponse,
    ServiceListResponse,
    ServiceResponse,
    ServiceSlotResponse,
    ServiceStatsResponse,
    ServiceTypeCreate,
    ServiceTypeDetailResponse,
    ServiceTypeListResponse,
    ServiceTypeResponse,
    ServiceTypeUpdate,
    ServiceUpdate,
    ServiceWithRosterResponse,
    SyncRequestedDatesRequest,
    SyncResultResponse,
)
from core.rate_limit import limiter
from domain.entities.service import Service, ServiceStats, ServiceStatus
from domain.scheduling.aggregator import DateOverview, DateStatus
from domain.services.schedule_service import ScheduleService

# Team-scoped routes (listing, creation, types, overview)
team_services_router = APIRouter(prefix="/teams/{team_id}", tags=["services"])

# Service-scoped routes (detail, edit, lifecycle)
services_router = APIRouter(prefix="/services", tags=["services"])


# --- Service types ---


@team_services_router.get(
    "/service-types",
    response_model=ServiceTypeListResponse,
    summary="List service types",
    responses={200: {"description": "Service templates ordered by display order"}},
)
@limiter.limit("30/minute")  # type: ignore[untyped-decorator]
async def list_service_types(
    request: Request,
    team_id: UUID,
    user: CurrentUser,
    service: ScheduleService = Depends(get_schedule_service),
) -> ServiceTypeListResponse:
    types = await service.list_service_types(team_id, user.id)
    data = [ServiceTypeResponse.model_validate(t) for t in types]
    return ServiceTypeListResponse(data=data, meta={"total": len(data)})


@team_services_router.post(
    "/service-types",
    response_model=ServiceTypeDetailResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create service type",
    responses={
        201: {"description": "Service type created"},
        403: {"description": "Requires manage_team"},
        409: {"description": "Name already used in this team"},
    },
)
@limiter.limit("10/minute")  # type: ignore[untyped-decorator]
async def create_service_type(
    request: Request,
    team_id: UUID,
    body: ServiceTypeCreate,
    user: CurrentUser,
    service: ScheduleService = Depends(get_schedule_service),
) -> ServiceTypeDetailResponse:
    """Add a service template. The team's first type becomes its primary type."""
    created = await service.create_service_type(team_id, user.id, **body.model_dump())
    return ServiceTypeDetailResponse(data=ServiceTypeResponse.model_validate(created))


@team_services_router.patch(
    "/service-types/{service_type_id}",
    response_model=ServiceTypeDetailResponse,
    summary="Update service type",
    responses={
        200: {"description": "Service type updated"},
        404: {"description": "Service type not found"},
    },
)
@limiter.limit("10/minute")  # type: ignore[untyped-decorator]
async def update_service_type(
    request: Request,
    team_id: UUID,
    service_type_id: UUID,
    body: ServiceTypeUpdate,
    user: CurrentUser,
    service: ScheduleService = Depends(get_schedule_service),
) -> ServiceTypeDetailResponse:
    updated = await service.update_service_type(
        team_id, user.id, service_type_id, **body.model_dump(exclude_unset=True)
    )
    return ServiceTypeDetailResponse(data=ServiceTypeResponse.model_validate(updated))


@team_services_router.delete(
    "/service-types/{service_type_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete service type",
    responses={
        204: {"description": "Service type deleted; its services become untyped"},
        404: {"description": "Service type not found"},
    },
)
@limiter.limit("10/minute")  # type: ignore[untyped-decorator]
async def delete_service_type(
    request: Request,
    team_id: UUID,
    service_type_id: UUID,
    user: CurrentUser,
    service: ScheduleService = Depends(get_schedule_service),
) -> None:
    await service.delete_service_type(team_id, user.id, service_type_id)
    return None


# --- Services ---


@team_services_router.get(
    "/services",
    response_model=ServiceListResponse,
    summary="List services",
    responses={
        200: {"description": "Services with assignment counts"},
        403: {"description": "Not a member"},
    },
)
@limiter.limit("30/minute")  # type: ignore[untyped-decorator]
async def list_services(
    request: Request,
    team_id: UUID,
    user: CurrentUser,
    start_date: Optional[date] = Query(None, description="First service date (inclusive)"),
    end_date: Optional[date] = Query(None, description="Last service date (inclusive)"),
    status_filter: Optional[ServiceStatus] = Query(None, alias="status"),
    service: ScheduleService = Depends(get_schedule_service),
) -> ServiceListResponse:
    """List a team's services. Members only see published and completed ones."""
    items = await service.list_services(team_id, user.id, start_date, end_date, status_filter)
    data = [_build_service_response(i.service, i.stats) for i in items]
    return ServiceListResponse(data=data, meta={"total": len(data)})


@team_services_router.post(
    "/services",
    response_model=ServiceDetailResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create service",
    responses={
        201: {"description": "Draft service created"},
        400: {"description": "Service type belongs to another team"},
        403: {"description": "Requires create_services"},
    },
)
@limiter.limit("10/minute")  # type: ignore[untyped-decorator]
async def create_service(
    request: Request,
    team_id: UUID,
    body: ServiceCreate,
    user: CurrentUser,
    service: ScheduleService = Depends(get_schedule_service),
) -> ServiceDetailResponse:
    created = await service.create_service(team_id, user.id, **body.model_dump())
    return ServiceDetailResponse(data=_build_service_response(created))


@team_services_router.put(
    "/requested-dates",
    response_model=SyncResultResponse,
    summary="Sync requested dates",
    responses={
        200: {"description": "Draft services now match the selected dates"},
        403: {"description": "Requires create_services"},
    },
)
@limiter.limit("10/minute")  # type: ignore[untyped-decorator]
async def sync_requested_dates(
    request: Request,
    team_id: UUID,
    body: SyncRequestedDatesRequest,
    user: CurrentUser,
    service: ScheduleService = Depends(get_schedule_service),
) -> SyncResultResponse:
    """Create or remove availability-request drafts for the leader's date selection.

    Drafts that already have assignments are kept and reported in ``kept``.
    """
    result = await service.sync_requested_dates(
        team_id, user.id, body.dates, body.start_date, body.end_date
    )
    return SyncResultResponse(
        added=result.added, removed=result.removed, kept=result.kept, changed=result.changed
    )


@team_services_router.post(
    "/schedule-overview",
    response_model=OverviewListResponse,
    summary="Per-date roster completion",
    responses={
        200: {"description": "One entry per date with expected and assigned slots"},
        403: {"description": "Requires assign_members"},
    },
)
@limiter.limit("30/minute")  # type: ignore[untyped-decorator]
async def schedule_overview(
    request: Request,
    team_id: UUID,
    body: OverviewRequest,
    user: CurrentUser,
    service: ScheduleService = Depends(get_schedule_service),
) -> OverviewListResponse:
    """Completion status per date for the leader's calendar."""
    overviews = await service.dates_overview(
        team_id,
        user.id,
        body.start_date,
        body.end_date,
        dates=body.dates,
        local_counts=body.local_counts,
    )
    data = [_build_overview_response(o) for o in overviews]
    totals = {
        "total": len(data),
        "complete": sum(1 for o in data if o.status == DateStatus.COMPLETE),
        "partial": sum(1 for o in data if o.status == DateStatus.PARTIAL),
        "pending": sum(1 for o in data if o.status == DateStatus.PENDING),
    }
    return OverviewListResponse(data=data, meta=totals)


@services_router.get(
    "/{service_id}",
    response_model=ServiceWithRosterResponse,
    summary="Get service with roster",
    responses={
        200: {"description": "Service details and assignments"},
        403: {"description": "Not a member, or draft hidden from members"},
        404: {"description": "Service not found"},
    },
)
@limiter.limit("30/minute")  # type: ignore[untyped-decorator]
async def get_service(
    request: Request,
    service_id: UUID,
    user: CurrentUser,
    service: ScheduleService = Depends(get_schedule_service),
) -> ServiceWithRosterResponse:
    found, roster = await service.get_service(service_id, user.id)
    return ServiceWithRosterResponse(
        data=_build_service_response(found),
        assignments=[build_roster_entry(d) for d in roster],
    )


@services_router.patch(
    "/{service_id}",
    response_model=ServiceDetailResponse,
    summary="Update service",
    responses={
        200: {"description": "Service updated"},
        403: {"description": "Requires edit_services"},
        404: {"description": "Service not found"},
    },
)
@limiter.limit("10/minute")  # type: ignore[untyped-decorator]
async def update_service(
    request: Request,
    service_id: UUID,
    body: ServiceUpdate,
    user: CurrentUser,
    service: ScheduleService = Depends(get_schedule_service),
) -> ServiceDetailResponse:
    updated = await service.update_service(service_id, user.id, **body.model_dump(exclude_unset=True))
    return ServiceDetailResponse(data=_build_service_response(updated))


@services_router.delete(
    "/{service_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete service",
    responses={
        204: {"description": "Service and its assignments deleted"},
        403: {"description": "Requires delete_services"},
        404: {"description": "Service not found"},
    },
)
@limiter.limit("10/minute")  # type: ignore[untyped-decorator]
async def delete_service(
    request: Request,
    service_id: UUID,
    user: CurrentUser,
    service: ScheduleService = Depends(get_schedule_service),
) -> None:
    await service.delete_service(service_id, user.id)
    return None


@services_router.post(
    "/{service_id}/publish",
    response_model=ServiceDetailResponse,
    summary="Publish service",
    responses={
        200: {"description": "Service published; assignees are notified"},
        400: {"description": "Only drafts can be published"},
        403: {"description": "Requires publish_services"},
    },
)
@limiter.limit("10/minute")  # type: ignore[untyped-decorator]
async def publish_service(
    request: Request,
    service_id: UUID,
    user: CurrentUser,
    service: ScheduleService = Depends(get_schedule_service),
) -> ServiceDetailResponse:
    published = await service.publish_service(service_id, user.id)
    return ServiceDetailResponse(data=_build_service_response(published))


@services_router.post(
    "/{service_id}/complete",
    response_model=ServiceDetailResponse,
    summary="Mark service completed",
    responses={400: {"description": "Only published services can be completed"}},
)
@limiter.limit("10/minute")  # type: ignore[untyped-decorator]
async def complete_service(
    request: Request,
    service_id: UUID,
    user: CurrentUser,
    service: ScheduleService = Depends(get_schedule_service),
) -> ServiceDetailResponse:
    completed = await service.complete_service(service_id, user.id)
    return ServiceDetailResponse(data=_build_service_response(completed))


@services_router.post(
    "/{service_id}/cancel",
    response_model=ServiceDetailResponse,
    summary="Cancel service",
    responses={400: {"description": "Service already completed or cancelled"}},
)
@limiter.limit("10/minute")  # type: ignore[untyped-decorator]
async def cancel_service(
    request: Request,
    service_id: UUID,
    user: CurrentUser,
    service: ScheduleService = Depends(get_schedule_service),
) -> ServiceDetailResponse:
    cancelled = await service.cancel_service(service_id, user.id)
    return ServiceDetailResponse(data=_build_service_response(cancelled))


def _build_service_response(service: Service, stats: ServiceStats | None = None) -> ServiceResponse:
    response = ServiceResponse.model_validate(service)
    if stats is not None:
        response.stats = ServiceStatsResponse.model_validate(stats)
    return response


def _build_overview_response(overview: DateOverview) -> DateOverviewResponse:
    return DateOverviewResponse(
        date=overview.date,
        status=overview.status,
        expected=overview.expected,
        assigned=overview.assigned,
        slots=[ServiceSlotResponse.model_validate(s) for s in overview.slots],
    )
