"""Pydantic schemas for Invitation API."""

from datetime import datetime
from typing import Any, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from domain.entities.invitation import InvitationStatus
from domain.entities.team import MembershipRole


class CreateInvitationRequest(BaseModel):
    """Schema for inviting someone to a team by email."""

    email: str = Field(..., min_length=3, max_length=255)
    role_suggestion: MembershipRole = Field(
        MembershipRole.MEMBER, description="Role granted on acceptance: admin or member"
    )
    message: Optional[str] = Field(None, max_length=500)

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        """Basic email validation."""
        v = v.strip().lower()
        if "@" not in v or "." not in v.split("@")[-1]:
            raise ValueError("Invalid email address")
        return v


class AcceptInvitationRequest(BaseModel):
    token: str = Field(..., min_length=1)


class InvitationResponse(BaseModel):
    """Schema for Invitation response. The token is only included for the inviter."""

    model_config = ConfigDict(
        from_attributes=True,
        json_schema_extra={
            "example": {
                "id": "123e4567-e89b-12d3-a456-426614174000",
                "team_id": "456e4567-e89b-12d3-a456-426614174000",
                "email": "singer@example.com",
                "role_suggestion": "member",
                "status": "pending",
                "invited_by": "789e4567-e89b-12d3-a456-426614174000",
                "created_at": "2026-02-01T10:00:00",
                "expires_at": "2026-02-08T10:00:00",
            }
        },
    )

    id: UUID
    team_id: UUID
    email: str
    role_suggestion: MembershipRole
    status: InvitationStatus
    invited_by: UUID
    message: Optional[str] = None
    token: Optional[str] = None
    created_at: datetime
    expires_at: datetime
    accepted_at: Optional[datetime] = None


class InvitationListResponse(BaseModel):
    data: list[InvitationResponse]
    meta: dict[str, Any] = Field(default_factory=dict)


class InvitationDetailResponse(BaseModel):
    data: InvitationResponse
