"""Pydantic schemas for Team and membership API."""

from datetime import datetime
from typing import Any, List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from domain.entities.ownership_transfer import TransferStatus
from domain.entities.team import MemberStatus, MembershipRole

_HEX_COLOR = "^#[0-9A-Fa-f]{6}$"


class TeamCreate(BaseModel):
    """Schema for creating a Team."""

    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=1000)
    color: Optional[str] = Field(None, pattern=_HEX_COLOR)
    timezone: Optional[str] = Field(None, max_length=64)


class TeamUpdate(BaseModel):
    """Schema for updating a Team (all fields optional)."""

    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=1000)
    color: Optional[str] = Field(None, pattern=_HEX_COLOR)
    timezone: Optional[str] = Field(None, max_length=64)
    settings: Optional[dict[str, Any]] = None


class TeamResponse(BaseModel):
    """Schema for Team response."""

    model_config = ConfigDict(
        from_attributes=True,
        json_schema_extra={
            "example": {
                "id": "123e4567-e89b-12d3-a456-426614174000",
                "name": "Sunday Worship Team",
                "description": "Main service band",
                "owner_id": "456e4567-e89b-12d3-a456-426614174000",
                "invite_code": "K7MQ2XPA",
                "color": "#D4A574",
                "timezone": "America/Los_Angeles",
                "settings": {"require_decline_reason": False},
                "role": "owner",
                "member_count": 12,
                "created_at": "2026-02-01T10:00:00",
                "updated_at": "2026-02-01T10:00:00",
            }
        },
    )

    id: UUID
    name: str
    description: Optional[str]
    owner_id: UUID
    invite_code: Optional[str] = None
    color: str
    timezone: str
    settings: dict[str, Any] = Field(default_factory=dict)
    role: Optional[MembershipRole] = None
    member_count: Optional[int] = None
    created_at: datetime
    updated_at: datetime


class TeamListResponse(BaseModel):
    """Schema for list of Teams response."""

    data: List[TeamResponse]
    meta: dict[str, Any] = Field(default_factory=dict)


class TeamDetailResponse(BaseModel):
    """Schema for single Team response."""

    data: TeamResponse


class JoinTeamRequest(BaseModel):
    """Schema for joining a team by invite code."""

    invite_code: str = Field(..., min_length=4, max_length=16)


class InviteCodeResponse(BaseModel):
    invite_code: str


class CapabilitiesResponse(BaseModel):
    """The caller's role in a team and what it allows."""

    role: MembershipRole
    capabilities: dict[str, bool]


class MemberResponse(BaseModel):
    """Schema for Team Member response."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    team_id: UUID
    user_id: UUID
    role: MembershipRole
    status: MemberStatus
    nickname: Optional[str] = None
    display_name: Optional[str] = None
    email: Optional[str] = None
    joined_at: datetime


class MemberListResponse(BaseModel):
    """Schema for list of Team Members response."""

    data: List[MemberResponse]
    meta: dict[str, Any] = Field(default_factory=dict)


class MemberDetailResponse(BaseModel):
    data: MemberResponse


class UpdateMemberRoleRequest(BaseModel):
    """Schema for changing a member's role. Ownership moves by transfer only."""

    role: MembershipRole


class UpdateNicknameRequest(BaseModel):
    nickname: Optional[str] = Field(None, max_length=100)


class TransferOwnershipRequest(BaseModel):
    """Schema for handing team ownership to another member."""

    new_owner_id: UUID
    previous_owner_role: MembershipRole = MembershipRole.ADMIN
    reason: Optional[str] = Field(None, max_length=500)
    immediate: bool = Field(
        False,
        description="Complete the transfer at once instead of waiting for acceptance.",
    )


class TransferResponse(BaseModel):
    """Schema for Ownership Transfer response."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    team_id: UUID
    from_user_id: UUID
    to_user_id: UUID
    previous_owner_role: MembershipRole
    status: TransferStatus
    reason: Optional[str] = None
    initiated_at: datetime
    expires_at: datetime
    completed_at: Optional[datetime] = None


class TransferDetailResponse(BaseModel):
    data: Optional[TransferResponse]
