"""Pydantic schemas for Profile API."""

from datetime import datetime
from typing import Literal, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class ProfileUpdate(BaseModel):
    """Schema for editing the caller's profile."""

    display_name: Optional[str] = Field(None, max_length=100)
    avatar_url: Optional[str] = Field(None, max_length=500)
    preferred_language: Optional[Literal["en", "ko"]] = None


class ProfileResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    email: str
    display_name: Optional[str] = None
    avatar_url: Optional[str] = None
    preferred_language: str
    created_at: datetime
    updated_at: datetime


class ProfileDetailResponse(BaseModel):
    data: ProfileResponse
