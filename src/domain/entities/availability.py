"""Availability domain entities."""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import StrEnum
from uuid import UUID, uuid4


class AvailabilityState(StrEnum):
    """Tri-state answer for a date. UNKNOWN means no row exists."""

    AVAILABLE = "available"
    UNAVAILABLE = "unavailable"
    UNKNOWN = "unknown"


@dataclass
class Availability:
    """A member's yes/no answer for one calendar date, unique per (team, user, date)."""

    team_id: UUID
    user_id: UUID
    date: date
    is_available: bool = True
    id: UUID = field(default_factory=uuid4)
    reason: str | None = None
    created_at: datetime = field(default_factory=datetime.utcnow)
    updated_at: datetime = field(default_factory=datetime.utcnow)

    @property
    def state(self) -> AvailabilityState:
        return AvailabilityState.AVAILABLE if self.is_available else AvailabilityState.UNAVAILABLE


@dataclass(frozen=True)
class AvailabilityInput:
    """One row of a bulk availability write."""

    date: date
    is_available: bool
    reason: str | None = None


@dataclass
class MemberAvailability:
    user_id: UUID
    team_member_id: UUID
    display_name: str | None
    state: AvailabilityState
    reason: str | None = None

    @property
    def has_responded(self) -> bool:
        return self.state != AvailabilityState.UNKNOWN


@dataclass
class DateAvailabilitySummary:
    """Team-wide availability for one date."""

    date: date
    total_members: int
    available_count: int = 0
    unavailable_count: int = 0
    members: list[MemberAvailability] = field(default_factory=list)

    @property
    def unknown_count(self) -> int:
        return self.total_members - self.available_count - self.unavailable_count
