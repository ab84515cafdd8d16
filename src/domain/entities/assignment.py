"""Assignment domain entity."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from uuid import UUID, uuid4

from core.exceptions import InvalidTransitionError


class AssignmentStatus(StrEnum):
    """Response state of an assignment.

    A member answers once: PENDING moves to CONFIRMED or DECLINED and both
    are final. To ask again a leader deletes the assignment and creates a
    new one.
    """

    PENDING = "pending"
    CONFIRMED = "confirmed"
    DECLINED = "declined"


_ASSIGNMENT_TRANSITIONS: dict[AssignmentStatus, frozenset[AssignmentStatus]] = {
    AssignmentStatus.PENDING: frozenset({AssignmentStatus.CONFIRMED, AssignmentStatus.DECLINED}),
    AssignmentStatus.CONFIRMED: frozenset(),
    AssignmentStatus.DECLINED: frozenset(),
}


@dataclass
class Assignment:
    """A member's designated role on a specific service."""

    service_id: UUID
    team_member_id: UUID
    role_id: UUID
    id: UUID = field(default_factory=uuid4)
    status: AssignmentStatus = AssignmentStatus.PENDING
    assigned_by: UUID | None = None
    decline_reason: str | None = None
    notes: str | None = None
    responded_at: datetime | None = None
    created_at: datetime = field(default_factory=datetime.utcnow)
    updated_at: datetime = field(default_factory=datetime.utcnow)

    def respond(self, status: AssignmentStatus, decline_reason: str | None = None) -> None:
        """Apply the member's one response and stamp ``responded_at``."""
        if status not in _ASSIGNMENT_TRANSITIONS[self.status]:
            raise InvalidTransitionError("assignment", self.status.value, status.value)
        self.status = status
        self.decline_reason = decline_reason if status == AssignmentStatus.DECLINED else None
        now = datetime.utcnow()
        self.responded_at = now
        self.updated_at = now


@dataclass
class AssignmentDetail:
    """Assignment joined with the names needed to render a roster."""

    assignment: Assignment
    user_id: UUID
    member_name: str | None = None
    role_name: str | None = None
    role_name_ko: str | None = None
