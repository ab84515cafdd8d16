"""Pydantic schemas for Assignment API."""

from datetime import datetime
from typing import Any, List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from domain.entities.assignment import AssignmentStatus


class AssignmentCreate(BaseModel):
    """Schema for putting one member on a service in one role."""

    team_member_id: UUID
    role_id: UUID
    notes: Optional[str] = Field(None, max_length=500)


class BulkAssignmentCreate(BaseModel):
    assignments: List[AssignmentCreate] = Field(..., min_length=1, max_length=100)


class AssignmentRespondRequest(BaseModel):
    """Schema for a member's answer to an assignment."""

    status: AssignmentStatus = Field(..., description="confirmed or declined")
    decline_reason: Optional[str] = Field(None, max_length=500)


class AssignmentResponse(BaseModel):
    """Schema for Assignment response."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    service_id: UUID
    team_member_id: UUID
    role_id: UUID
    status: AssignmentStatus
    assigned_by: Optional[UUID] = None
    decline_reason: Optional[str] = None
    notes: Optional[str] = None
    responded_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime


class RosterEntryResponse(AssignmentResponse):
    """Assignment with the names needed to render a roster."""

    user_id: UUID
    member_name: Optional[str] = None
    role_name: Optional[str] = None
    role_name_ko: Optional[str] = None


class AssignmentListResponse(BaseModel):
    data: List[AssignmentResponse]
    meta: dict[str, Any] = Field(default_factory=dict)


class AssignmentDetailResponse(BaseModel):
    data: AssignmentResponse


class RosterListResponse(BaseModel):
    data: List[RosterEntryResponse]
    meta: dict[str, Any] = Field(default_factory=dict)
