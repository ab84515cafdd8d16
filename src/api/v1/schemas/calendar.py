"""Pydantic schemas for the personal calendar API."""

from datetime import date, time
from typing import Any, List, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from domain.entities.assignment import AssignmentStatus
from domain.entities.calendar import CalendarEntryType
from domain.entities.service import ServiceStatus


class TeamBrief(BaseModel):
    id: UUID
    name: str
    color: str


class ServiceBrief(BaseModel):
    id: UUID
    name: str
    status: ServiceStatus
    location: Optional[str] = None


class MyAssignmentBrief(BaseModel):
    """The caller's assignment on a service, with the role it is for."""

    id: UUID
    status: AssignmentStatus
    role_id: UUID
    role_name: Optional[str] = None
    role_name_ko: Optional[str] = None


class AvailabilityBrief(BaseModel):
    is_available: bool
    reason: Optional[str] = None


class CalendarEntryResponse(BaseModel):
    """One dated line of the personal calendar."""

    id: str = Field(..., description="Stable key, e.g. service-<service id>-<assignment id>")
    type: CalendarEntryType
    title: str
    date: date
    start_time: Optional[time] = None
    end_time: Optional[time] = None
    team: TeamBrief
    service: Optional[ServiceBrief] = None
    assignment: Optional[MyAssignmentBrief] = None
    availability: Optional[AvailabilityBrief] = None


class CalendarListResponse(BaseModel):
    data: List[CalendarEntryResponse]
    meta: dict[str, Any] = Field(default_factory=dict)


class UpcomingServiceResponse(BaseModel):
    id: UUID
    name: str
    service_date: date
    start_time: Optional[time] = None
    end_time: Optional[time] = None
    location: Optional[str] = None
    status: ServiceStatus
    team: TeamBrief
    my_assignment: Optional[MyAssignmentBrief] = None


class UpcomingServiceListResponse(BaseModel):
    data: List[UpcomingServiceResponse]
    meta: dict[str, Any] = Field(default_factory=dict)
