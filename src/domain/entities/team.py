"""Team and membership domain entities."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from typing import Any
from uuid import UUID, uuid4

DEFAULT_TEAM_COLOR = "#D4A574"
DEFAULT_TIMEZONE = "America/Los_Angeles"

# Ambiguous characters (0/O, 1/I) are left out so codes can be read aloud
INVITE_CODE_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"


def default_team_settings() -> dict[str, Any]:
    """Settings blob applied to newly created teams."""
    return {
        "default_service_duration": 90,
        "reminder_hours_before": 24,
        "allow_member_swap": True,
        "require_decline_reason": False,
        "auto_publish_services": False,
    }


class MembershipRole(StrEnum):
    """Role of a user within a team."""

    OWNER = "owner"
    ADMIN = "admin"
    MEMBER = "member"


class MemberStatus(StrEnum):
    """Membership status. Leaving or removal sets INACTIVE; rows are never deleted."""

    ACTIVE = "active"
    INACTIVE = "inactive"
    PENDING = "pending"


@dataclass
class Team:
    """Domain entity for a worship team."""

    name: str
    owner_id: UUID
    invite_code: str
    id: UUID = field(default_factory=uuid4)
    description: str | None = None
    color: str = DEFAULT_TEAM_COLOR
    timezone: str = DEFAULT_TIMEZONE
    settings: dict[str, Any] = field(default_factory=default_team_settings)
    created_at: datetime = field(default_factory=datetime.utcnow)
    updated_at: datetime = field(default_factory=datetime.utcnow)

    def __post_init__(self) -> None:
        if self.updated_at < self.created_at:
            self.updated_at = self.created_at


@dataclass
class Membership:
    """A user's participation in one team."""

    team_id: UUID
    user_id: UUID
    role: MembershipRole = MembershipRole.MEMBER
    status: MemberStatus = MemberStatus.ACTIVE
    id: UUID = field(default_factory=uuid4)
    nickname: str | None = None
    joined_at: datetime = field(default_factory=datetime.utcnow)
    display_name: str | None = None
    email: str | None = None

    @property
    def is_active(self) -> bool:
        return self.status == MemberStatus.ACTIVE

    @property
    def is_owner(self) -> bool:
        return self.role == MembershipRole.OWNER and self.is_active


@dataclass
class TeamSummary:
    """A team as seen by one of its members."""

    team: Team
    role: MembershipRole
    member_count: int = 0
