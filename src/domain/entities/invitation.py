"""Invitation domain entity."""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import StrEnum
from uuid import UUID, uuid4

from core.exceptions import InvalidTransitionError
from domain.entities.team import MembershipRole


class InvitationStatus(StrEnum):
    """Status of a team invitation."""

    PENDING = "pending"
    ACCEPTED = "accepted"
    EXPIRED = "expired"
    CANCELLED = "cancelled"


# Default invitation expiry: 7 days
INVITATION_EXPIRY_DAYS = 7


@dataclass
class Invitation:
    """Domain entity for a token-addressed team invitation."""

    team_id: UUID
    email: str
    token: str
    invited_by: UUID
    role_suggestion: MembershipRole = MembershipRole.MEMBER
    id: UUID = field(default_factory=uuid4)
    message: str | None = None
    status: InvitationStatus = InvitationStatus.PENDING
    created_at: datetime = field(default_factory=datetime.utcnow)
    expires_at: datetime = field(
        default_factory=lambda: datetime.utcnow() + timedelta(days=INVITATION_EXPIRY_DAYS)
    )
    accepted_at: datetime | None = None

    @property
    def is_expired(self) -> bool:
        """Check if the invitation has passed its expiry time."""
        return datetime.utcnow() > self.expires_at

    @property
    def is_pending(self) -> bool:
        """Check if the invitation is still pending and not expired."""
        return self.status == InvitationStatus.PENDING and not self.is_expired

    def _leave_pending(self, target: InvitationStatus) -> None:
        if self.status != InvitationStatus.PENDING:
            raise InvalidTransitionError("invitation", self.status.value, target.value)
        self.status = target

    def accept(self) -> None:
        """Mark the invitation as accepted."""
        self._leave_pending(InvitationStatus.ACCEPTED)
        self.accepted_at = datetime.utcnow()

    def cancel(self) -> None:
        self._leave_pending(InvitationStatus.CANCELLED)

    def expire(self) -> None:
        self._leave_pending(InvitationStatus.EXPIRED)
