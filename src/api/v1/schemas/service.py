"""Pydantic schemas for Service and Service Type API."""

from datetime import date, datetime, time
from typing import Any, List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, model_validator

from api.v1.schemas.assignment import RosterEntryResponse
from domain.entities.service import ScheduleType, ServiceStatus
from domain.scheduling.aggregator import DateStatus, SlotProgress

# --- Service types ---


class ServiceTypeCreate(BaseModel):
    """Schema for creating a Service Type.

    Weekdays count from 0 (Sunday) to 6 (Saturday).
    """

    name: str = Field(..., min_length=1, max_length=100)
    schedule_type: ScheduleType = ScheduleType.RECURRING
    default_weekday: Optional[int] = Field(None, ge=0, le=6)
    service_time: Optional[time] = None
    rehearsal_weekday: Optional[int] = Field(None, ge=0, le=6)
    rehearsal_time: Optional[time] = None
    display_order: Optional[int] = Field(None, ge=0)
    is_primary: bool = False


class ServiceTypeUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    schedule_type: Optional[ScheduleType] = None
    default_weekday: Optional[int] = Field(None, ge=0, le=6)
    service_time: Optional[time] = None
    rehearsal_weekday: Optional[int] = Field(None, ge=0, le=6)
    rehearsal_time: Optional[time] = None
    display_order: Optional[int] = Field(None, ge=0)
    is_primary: Optional[bool] = None


class ServiceTypeResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    team_id: UUID
    name: str
    schedule_type: ScheduleType
    default_weekday: Optional[int] = None
    service_time: Optional[time] = None
    rehearsal_weekday: Optional[int] = None
    rehearsal_time: Optional[time] = None
    display_order: int = 0
    is_primary: bool = False
    created_at: datetime


class ServiceTypeListResponse(BaseModel):
    data: List[ServiceTypeResponse]
    meta: dict[str, Any] = Field(default_factory=dict)


class ServiceTypeDetailResponse(BaseModel):
    data: ServiceTypeResponse


# --- Services ---


class ServiceCreate(BaseModel):
    """Schema for creating a draft Service.

    With ``service_type_id`` and no name, the name is generated as
    ``"<M>/<D> <TypeName>"``.
    """

    service_date: date
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    service_type_id: Optional[UUID] = None
    description: Optional[str] = Field(None, max_length=2000)
    start_time: Optional[time] = None
    end_time: Optional[time] = None
    rehearsal_date: Optional[date] = None
    rehearsal_time: Optional[time] = None
    location: Optional[str] = Field(None, max_length=255)
    notes: Optional[str] = Field(None, max_length=2000)

    @model_validator(mode="after")
    def check_times(self) -> "ServiceCreate":
        if self.start_time and self.end_time and self.end_time <= self.start_time:
            raise ValueError("end_time must be after start_time")
        return self


class ServiceUpdate(BaseModel):
    """Schema for editing Service details. Status changes use the lifecycle endpoints."""

    name: Optional[str] = Field(None, min_length=1, max_length=255)
    service_date: Optional[date] = None
    service_type_id: Optional[UUID] = None
    description: Optional[str] = Field(None, max_length=2000)
    start_time: Optional[time] = None
    end_time: Optional[time] = None
    rehearsal_date: Optional[date] = None
    rehearsal_time: Optional[time] = None
    location: Optional[str] = Field(None, max_length=255)
    notes: Optional[str] = Field(None, max_length=2000)


class ServiceStatsResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    assignment_count: int = 0
    confirmed_count: int = 0
    pending_count: int = 0
    declined_count: int = 0


class ServiceResponse(BaseModel):
    """Schema for Service response."""

    model_config = ConfigDict(
        from_attributes=True,
        json_schema_extra={
            "example": {
                "id": "123e4567-e89b-12d3-a456-426614174000",
                "team_id": "456e4567-e89b-12d3-a456-426614174000",
                "service_type_id": "789e4567-e89b-12d3-a456-426614174000",
                "name": "3/16 Sunday Worship",
                "service_date": "2026-03-16",
                "start_time": "10:00:00",
                "status": "draft",
                "created_by": "456e4567-e89b-12d3-a456-426614174000",
                "created_at": "2026-03-01T10:00:00",
                "updated_at": "2026-03-01T10:00:00",
            }
        },
    )

    id: UUID
    team_id: UUID
    service_type_id: Optional[UUID] = None
    name: str
    description: Optional[str] = None
    service_date: date
    start_time: Optional[time] = None
    end_time: Optional[time] = None
    status: ServiceStatus
    notes: Optional[str] = None
    rehearsal_date: Optional[date] = None
    rehearsal_time: Optional[time] = None
    location: Optional[str] = None
    created_by: UUID
    published_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime
    stats: Optional[ServiceStatsResponse] = None


class ServiceListResponse(BaseModel):
    data: List[ServiceResponse]
    meta: dict[str, Any] = Field(default_factory=dict)


class ServiceDetailResponse(BaseModel):
    data: ServiceResponse


class ServiceWithRosterResponse(BaseModel):
    """A service together with its assignments."""

    data: ServiceResponse
    assignments: List[RosterEntryResponse] = Field(default_factory=list)


class SyncRequestedDatesRequest(BaseModel):
    """The leader's selected dates for a window; drafts are created or removed to match."""

    dates: List[date] = Field(default_factory=list, max_length=200)
    start_date: date
    end_date: date

    @model_validator(mode="after")
    def check_window(self) -> "SyncRequestedDatesRequest":
        if self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self


class SyncResultResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    added: List[str]
    removed: List[str]
    kept: List[str]
    changed: bool


# --- Overview ---


class ServiceSlotResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    key: str
    name: str
    assignment_count: int
    progress: SlotProgress
    service_id: Optional[UUID] = None
    service_type_id: Optional[UUID] = None
    service_time: Optional[time] = None
    is_ad_hoc: bool = False


class DateOverviewResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    date: date
    status: DateStatus
    expected: int
    assigned: int
    slots: List[ServiceSlotResponse]


class OverviewRequest(BaseModel):
    """Window and optional extra inputs for the per-date overview."""

    start_date: date
    end_date: date
    dates: List[date] = Field(default_factory=list, max_length=200)
    local_counts: dict[str, int] = Field(
        default_factory=dict,
        description="Cached assignment counts keyed by 'YYYY-MM-DD:serviceTypeId'.",
    )


class OverviewListResponse(BaseModel):
    data: List[DateOverviewResponse]
    meta: dict[str, Any] = Field(default_factory=dict)
