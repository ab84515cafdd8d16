"""Match draft services against a member's availability rows.

A draft service is an availability request. For one member this module
works out which requests are still pending and which were answered. It also
computes how a locally cached copy of that state changes when a fresh remote
snapshot arrives.

Service type resolution prefers the explicit ``service_type_id``. Older rows
without it are matched by name: the leading date token of
``"<M>/<D> <ServiceTypeName>"`` is dropped and the remainder compared exactly
with the team's type names. A service matched to a type is only genuine when
it falls on the type's default weekday. Services that match no type are
ad-hoc and always kept.
"""

import calendar
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from datetime import date, time
from uuid import UUID

from domain.entities.availability import Availability, AvailabilityState
from domain.entities.service import Service, ServiceStatus, ServiceType


def active_window(today: date) -> tuple[date, date]:
    """First day of the current month through the last day of next month."""
    start = today.replace(day=1)
    year, month = (today.year + 1, 1) if today.month == 12 else (today.year, today.month + 1)
    end = date(year, month, calendar.monthrange(year, month)[1])
    return start, end


def parse_service_type_name(service_name: str) -> str:
    """Drop the leading date token from a generated service name.

    >>> parse_service_type_name("3/16 Sunday Worship")
    'Sunday Worship'
    >>> parse_service_type_name("Retreat")
    'Retreat'
    """
    remainder = " ".join(service_name.split(" ")[1:])
    return remainder or service_name


def request_key(day: date, slot: str) -> str:
    """Cache key for one (date, service type) request."""
    return f"{day.isoformat()}:{slot}"


@dataclass(frozen=True)
class ResolvedService:
    """A service together with the type it resolved to (None for ad-hoc)."""

    service: Service
    service_type: ServiceType | None

    @property
    def is_ad_hoc(self) -> bool:
        return self.service_type is None

    @property
    def is_genuine(self) -> bool:
        """False when a typed service sits on the wrong weekday."""
        if self.service_type is None or self.service_type.default_weekday is None:
            return True
        return self.service_type.falls_on(self.service.service_date)

    @property
    def slot(self) -> str:
        if self.service_type is None:
            return f"adhoc-{self.service.id}"
        return str(self.service_type.id)

    @property
    def key(self) -> str:
        return request_key(self.service.service_date, self.slot)

    @property
    def display_name(self) -> str:
        if self.service_type is not None:
            return self.service_type.name
        return parse_service_type_name(self.service.name)

    @property
    def service_time(self) -> time | None:
        if self.service_type is not None and self.service_type.service_time is not None:
            return self.service_type.service_time
        return self.service.start_time


class ServiceTypeResolver:
    """Resolves services to the team's service types."""

    def __init__(self, service_types: Iterable[ServiceType]) -> None:
        self._by_id: dict[UUID, ServiceType] = {}
        self._by_name: dict[str, ServiceType] = {}
        for service_type in service_types:
            self._by_id[service_type.id] = service_type
            self._by_name.setdefault(service_type.name, service_type)

    @property
    def service_types(self) -> list[ServiceType]:
        return sorted(self._by_id.values(), key=lambda t: (t.display_order, t.name))

    def resolve(self, service: Service) -> ResolvedService:
        if service.service_type_id is not None:
            return ResolvedService(service, self._by_id.get(service.service_type_id))
        # Legacy rows carry the type only in their name
        name = parse_service_type_name(service.name)
        return ResolvedService(service, self._by_name.get(name))

    def types_on(self, day: date) -> list[ServiceType]:
        return [t for t in self.service_types if t.falls_on(day)]


def genuine_services(
    services: Iterable[Service],
    service_types: Iterable[ServiceType],
) -> list[ResolvedService]:
    """Resolve services and drop those scheduled on the wrong weekday for their type."""
    resolver = ServiceTypeResolver(service_types)
    resolved = (resolver.resolve(s) for s in services)
    return [r for r in resolved if r.is_genuine]


@dataclass(frozen=True)
class PendingRequest:
    """A draft service the member has not answered yet."""

    key: str
    team_id: UUID
    service_id: UUID
    date: date
    service_type_id: UUID | None
    service_type_name: str
    service_time: time | None = None


@dataclass(frozen=True)
class SubmittedResponse:
    """A member's answer for a draft service."""

    key: str
    team_id: UUID
    service_id: UUID
    date: date
    service_type_id: UUID | None
    state: AvailabilityState
    reason: str | None = None


@dataclass
class AvailabilitySnapshot:
    pending: list[PendingRequest] = field(default_factory=list)
    responded: list[SubmittedResponse] = field(default_factory=list)

    @property
    def total_requested(self) -> int:
        return len(self.pending) + len(self.responded)

    @property
    def is_complete(self) -> bool:
        return not self.pending and bool(self.responded)


def match_availability(
    services: Iterable[Service],
    availabilities: Iterable[Availability],
    service_types: Iterable[ServiceType],
) -> AvailabilitySnapshot:
    """Split genuine draft services into pending requests and submitted responses.

    A draft service is pending when the member has no availability row for its
    date. Non-draft services are ignored.
    """
    by_date = {a.date: a for a in availabilities}
    drafts = [s for s in services if s.status == ServiceStatus.DRAFT]

    snapshot = AvailabilitySnapshot()
    for resolved in sorted(genuine_services(drafts, service_types), key=_sort_key):
        service = resolved.service
        type_id = resolved.service_type.id if resolved.service_type else None
        row = by_date.get(service.service_date)
        if row is None:
            snapshot.pending.append(
                PendingRequest(
                    key=resolved.key,
                    team_id=service.team_id,
                    service_id=service.id,
                    date=service.service_date,
                    service_type_id=type_id,
                    service_type_name=resolved.display_name,
                    service_time=resolved.service_time,
                )
            )
        else:
            snapshot.responded.append(
                SubmittedResponse(
                    key=resolved.key,
                    team_id=service.team_id,
                    service_id=service.id,
                    date=service.service_date,
                    service_type_id=type_id,
                    state=row.state,
                    reason=row.reason,
                )
            )
    return snapshot


def _sort_key(resolved: ResolvedService) -> tuple[date, int, str]:
    order = resolved.service_type.display_order if resolved.service_type else 1_000_000
    return resolved.service.service_date, order, resolved.display_name


@dataclass
class SyncResult:
    """Key-level difference between a cached state and a fresh one."""

    added: list[str] = field(default_factory=list)
    removed: list[str] = field(default_factory=list)
    kept: list[str] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return bool(self.added or self.removed)


def diff_keys(existing: Iterable[str], incoming: Sequence[str]) -> SyncResult:
    """Compare cached keys with incoming keys, preserving incoming order."""
    existing_set = set(existing)
    incoming_set = set(incoming)
    result = SyncResult()
    for key in incoming:
        (result.kept if key in existing_set else result.added).append(key)
    result.removed = sorted(existing_set - incoming_set)
    return result


def requested_keys(dates: Iterable[date], service_types: Iterable[ServiceType]) -> list[str]:
    """Request keys a leader's selected dates expand to.

    Each date yields one key per service type whose default weekday matches.
    Dates with no matching type yield nothing; they become ad-hoc services.
    """
    resolver = ServiceTypeResolver(service_types)
    keys: list[str] = []
    for day in sorted(set(dates)):
        keys.extend(request_key(day, str(t.id)) for t in resolver.types_on(day))
    return keys
