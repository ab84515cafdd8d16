"""Pydantic schemas for musical Role API."""

from datetime import datetime
from typing import Any, List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from domain.entities.role import Proficiency


class RoleCreate(BaseModel):
    """Schema for creating a Role."""

    name: str = Field(..., min_length=1, max_length=50)
    name_ko: Optional[str] = Field(None, max_length=50)
    description: Optional[str] = Field(None, max_length=500)
    color: Optional[str] = Field(None, pattern="^#[0-9A-Fa-f]{6}$")
    icon: Optional[str] = Field(None, max_length=50)
    min_required: int = Field(0, ge=0)
    max_allowed: Optional[int] = Field(None, ge=1)
    display_order: Optional[int] = Field(None, ge=0)


class RoleUpdate(BaseModel):
    """Schema for updating a Role (all fields optional)."""

    name: Optional[str] = Field(None, min_length=1, max_length=50)
    name_ko: Optional[str] = Field(None, max_length=50)
    description: Optional[str] = Field(None, max_length=500)
    color: Optional[str] = Field(None, pattern="^#[0-9A-Fa-f]{6}$")
    icon: Optional[str] = Field(None, max_length=50)
    min_required: Optional[int] = Field(None, ge=0)
    max_allowed: Optional[int] = Field(None, ge=1)
    display_order: Optional[int] = Field(None, ge=0)
    is_active: Optional[bool] = None


class RoleResponse(BaseModel):
    """Schema for Role response."""

    model_config = ConfigDict(
        from_attributes=True,
        json_schema_extra={
            "example": {
                "id": "123e4567-e89b-12d3-a456-426614174000",
                "team_id": "456e4567-e89b-12d3-a456-426614174000",
                "name": "Keys",
                "name_ko": "건반",
                "min_required": 1,
                "display_order": 2,
                "is_active": True,
            }
        },
    )

    id: UUID
    team_id: UUID
    name: str
    name_ko: Optional[str] = None
    description: Optional[str] = None
    color: Optional[str] = None
    icon: Optional[str] = None
    min_required: int = 0
    max_allowed: Optional[int] = None
    display_order: int = 0
    is_active: bool = True
    created_at: datetime


class RoleListResponse(BaseModel):
    data: List[RoleResponse]
    meta: dict[str, Any] = Field(default_factory=dict)


class RoleDetailResponse(BaseModel):
    data: RoleResponse


class MemberRoleAssign(BaseModel):
    """Schema for linking a member to a role."""

    role_id: UUID
    proficiency: Proficiency = Proficiency.INTERMEDIATE
    is_primary: bool = False
    notes: Optional[str] = Field(None, max_length=500)


class MemberRoleResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    team_member_id: UUID
    role_id: UUID
    proficiency: Proficiency
    is_primary: bool
    notes: Optional[str] = None
    created_at: datetime


class MemberRoleListResponse(BaseModel):
    data: List[MemberRoleResponse]
    meta: dict[str, Any] = Field(default_factory=dict)


class MemberRoleDetailResponse(BaseModel):
    data: MemberRoleResponse
