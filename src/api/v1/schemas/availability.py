"""Pydantic schemas for Availability API."""

from datetime import date, datetime, time
from typing import Any, List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from domain.entities.availability import AvailabilityState


class AvailabilityEntry(BaseModel):
    """One date of a bulk availability write."""

    date: date
    is_available: bool
    reason: Optional[str] = Field(None, max_length=500)


class BulkAvailabilityRequest(BaseModel):
    """Schema for writing many dates at once. Repeated dates keep the last entry."""

    entries: List[AvailabilityEntry] = Field(default_factory=list, max_length=400)


class AvailabilityResponse(BaseModel):
    """Schema for Availability response."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    team_id: UUID
    user_id: UUID
    date: date
    is_available: bool
    reason: Optional[str] = None
    state: AvailabilityState
    created_at: datetime
    updated_at: datetime


class AvailabilityListResponse(BaseModel):
    data: List[AvailabilityResponse]
    meta: dict[str, Any] = Field(default_factory=dict)


class MemberAvailabilityResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    user_id: UUID
    team_member_id: UUID
    display_name: Optional[str] = None
    state: AvailabilityState
    reason: Optional[str] = None


class DateAvailabilityResponse(BaseModel):
    """Team-wide availability for one date."""

    model_config = ConfigDict(from_attributes=True)

    date: date
    total_members: int
    available_count: int
    unavailable_count: int
    unknown_count: int
    members: List[MemberAvailabilityResponse]


class TeamAvailabilityListResponse(BaseModel):
    data: List[DateAvailabilityResponse]
    meta: dict[str, Any] = Field(default_factory=dict)


class PendingRequestResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    key: str
    team_id: UUID
    service_id: UUID
    date: date
    service_type_id: Optional[UUID] = None
    service_type_name: str
    service_time: Optional[time] = None


class SubmittedResponseSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    key: str
    team_id: UUID
    service_id: UUID
    date: date
    service_type_id: Optional[UUID] = None
    state: AvailabilityState
    reason: Optional[str] = None


class AvailabilityRequestsResponse(BaseModel):
    """Draft services in the active window split by whether the caller has answered."""

    pending: List[PendingRequestResponse]
    responded: List[SubmittedResponseSchema]
    meta: dict[str, Any] = Field(default_factory=dict)
