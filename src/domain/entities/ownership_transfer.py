"""Ownership transfer domain entity."""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import StrEnum
from uuid import UUID, uuid4

from core.exceptions import InvalidTransitionError
from domain.entities.team import MembershipRole

TRANSFER_EXPIRY_DAYS = 7


class TransferStatus(StrEnum):
    PENDING = "pending"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    EXPIRED = "expired"


@dataclass
class OwnershipTransfer:
    """Request to hand team ownership from one member to another.

    On completion the previous owner keeps ``previous_owner_role``
    (admin or member). They are never left without a role.
    """

    team_id: UUID
    from_user_id: UUID
    to_user_id: UUID
    id: UUID = field(default_factory=uuid4)
    previous_owner_role: MembershipRole = MembershipRole.ADMIN
    status: TransferStatus = TransferStatus.PENDING
    reason: str | None = None
    initiated_at: datetime = field(default_factory=datetime.utcnow)
    expires_at: datetime = field(
        default_factory=lambda: datetime.utcnow() + timedelta(days=TRANSFER_EXPIRY_DAYS)
    )
    completed_at: datetime | None = None

    def __post_init__(self) -> None:
        if self.from_user_id == self.to_user_id:
            raise ValueError("Ownership cannot be transferred to the current owner")
        if self.previous_owner_role == MembershipRole.OWNER:
            raise ValueError("Previous owner must become admin or member")

    @property
    def is_expired(self) -> bool:
        return datetime.utcnow() > self.expires_at

    def _leave_pending(self, target: TransferStatus) -> None:
        if self.status != TransferStatus.PENDING:
            raise InvalidTransitionError("ownership transfer", self.status.value, target.value)
        self.status = target

    def complete(self) -> None:
        self._leave_pending(TransferStatus.COMPLETED)
        self.completed_at = datetime.utcnow()

    def cancel(self) -> None:
        self._leave_pending(TransferStatus.CANCELLED)

    def expire(self) -> None:
        self._leave_pending(TransferStatus.EXPIRED)
