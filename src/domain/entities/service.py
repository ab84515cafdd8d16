"""Service and service type domain entities."""

from dataclasses import dataclass, field
from datetime import date, datetime, time
from enum import StrEnum
from uuid import UUID, uuid4

from core.exceptions import InvalidTransitionError


def sunday_based_weekday(day: date) -> int:
    """Weekday with Sunday as 0 and Saturday as 6."""
    return (day.weekday() + 1) % 7


class ServiceStatus(StrEnum):
    """Lifecycle of a service.

    A DRAFT service is only an availability request. PUBLISHED exposes the
    roster to members. COMPLETED and CANCELLED are terminal.
    """

    DRAFT = "draft"
    PUBLISHED = "published"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


_SERVICE_TRANSITIONS: dict[ServiceStatus, frozenset[ServiceStatus]] = {
    ServiceStatus.DRAFT: frozenset({ServiceStatus.PUBLISHED, ServiceStatus.CANCELLED}),
    ServiceStatus.PUBLISHED: frozenset({ServiceStatus.COMPLETED, ServiceStatus.CANCELLED}),
    ServiceStatus.COMPLETED: frozenset(),
    ServiceStatus.CANCELLED: frozenset(),
}

# Statuses a plain member is allowed to see
MEMBER_VISIBLE_STATUSES = frozenset({ServiceStatus.PUBLISHED, ServiceStatus.COMPLETED})


class ScheduleType(StrEnum):
    RECURRING = "recurring"
    MANUAL = "manual"


@dataclass
class ServiceType:
    """Team template for a kind of service, e.g. "Sunday Worship" on Sundays."""

    team_id: UUID
    name: str
    id: UUID = field(default_factory=uuid4)
    schedule_type: ScheduleType = ScheduleType.RECURRING
    default_weekday: int | None = None
    service_time: time | None = None
    rehearsal_weekday: int | None = None
    rehearsal_time: time | None = None
    display_order: int = 0
    is_primary: bool = False
    created_at: datetime = field(default_factory=datetime.utcnow)

    def __post_init__(self) -> None:
        for value in (self.default_weekday, self.rehearsal_weekday):
            if value is not None and not 0 <= value <= 6:
                raise ValueError(f"weekday must be between 0 (Sunday) and 6 (Saturday): {value}")

    def falls_on(self, day: date) -> bool:
        """Return True if ``day`` is this type's default weekday."""
        return self.default_weekday is not None and sunday_based_weekday(day) == self.default_weekday


@dataclass
class Service:
    """A single calendar instance of worship that needs role coverage."""

    team_id: UUID
    name: str
    service_date: date
    created_by: UUID
    id: UUID = field(default_factory=uuid4)
    service_type_id: UUID | None = None
    description: str | None = None
    start_time: time | None = None
    end_time: time | None = None
    status: ServiceStatus = ServiceStatus.DRAFT
    notes: str | None = None
    rehearsal_date: date | None = None
    rehearsal_time: time | None = None
    location: str | None = None
    published_at: datetime | None = None
    created_at: datetime = field(default_factory=datetime.utcnow)
    updated_at: datetime = field(default_factory=datetime.utcnow)

    @property
    def is_draft(self) -> bool:
        return self.status == ServiceStatus.DRAFT

    @property
    def visible_to_members(self) -> bool:
        return self.status in MEMBER_VISIBLE_STATUSES

    def can_transition(self, target: ServiceStatus) -> bool:
        return target in _SERVICE_TRANSITIONS[self.status]

    def transition(self, target: ServiceStatus) -> None:
        if not self.can_transition(target):
            raise InvalidTransitionError("service", self.status.value, target.value)
        self.status = target
        self.updated_at = datetime.utcnow()

    def publish(self) -> None:
        self.transition(ServiceStatus.PUBLISHED)
        self.published_at = datetime.utcnow()

    def complete(self) -> None:
        self.transition(ServiceStatus.COMPLETED)

    def cancel(self) -> None:
        self.transition(ServiceStatus.CANCELLED)


@dataclass
class ServiceStats:
    """Assignment counts aggregated server-side for one service."""

    assignment_count: int = 0
    confirmed_count: int = 0
    pending_count: int = 0
    declined_count: int = 0


@dataclass
class ServiceWithStats:
    service: Service
    stats: ServiceStats = field(default_factory=ServiceStats)
