"""Per-date roster completion derived from assignment counts."""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import date, time
from enum import StrEnum
from uuid import UUID

from domain.entities.service import Service, ServiceStatus, ServiceType
from domain.scheduling.matcher import ServiceTypeResolver, request_key


class DateStatus(StrEnum):
    COMPLETE = "complete"
    PARTIAL = "partial"
    PENDING = "pending"


class SlotProgress(StrEnum):
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    PUBLISHED = "published"


@dataclass(frozen=True)
class CountSources:
    """Assignment counts for one slot, one per source. None means unavailable."""

    detail: int | None = None
    aggregate: int | None = None
    local: int | None = None


def resolve_assignment_count(sources: CountSources) -> int:
    """Pick the count from the most trustworthy source that has one.

    Priority: the live detail fetch, then the server-aggregated count column,
    then the local schedule cache.
    """
    for count in (sources.detail, sources.aggregate, sources.local):
        if count is not None:
            return count
    return 0


@dataclass
class ServiceSlot:
    """One expected service on a date, backed by a real service or not yet created."""

    key: str
    name: str
    assignment_count: int
    progress: SlotProgress
    service_id: UUID | None = None
    service_type_id: UUID | None = None
    service_time: time | None = None
    is_ad_hoc: bool = False


@dataclass
class DateOverview:
    date: date
    slots: list[ServiceSlot] = field(default_factory=list)
    typed_slots: int = 0

    @property
    def expected(self) -> int:
        """Slots the date's service types call for, or 1 when no type falls on it.

        Ad-hoc and weekday-less services add to ``assigned`` but never to the target.
        """
        return self.typed_slots or 1

    @property
    def assigned(self) -> int:
        return sum(1 for slot in self.slots if slot.assignment_count > 0)

    @property
    def status(self) -> DateStatus:
        if self.assigned == 0:
            return DateStatus.PENDING
        if self.assigned >= self.expected:
            return DateStatus.COMPLETE
        return DateStatus.PARTIAL


@dataclass
class OverviewTotals:
    dates: int = 0
    complete: int = 0
    partial: int = 0
    pending: int = 0


class AssignmentAggregator:
    """Builds date overviews from services, service types and count sources.

    ``detail_counts`` and ``aggregate_counts`` are keyed by service id;
    ``local_counts`` is keyed by ``request_key(date, service_type_id)``.
    """

    def __init__(
        self,
        service_types: Iterable[ServiceType],
        detail_counts: Mapping[UUID, int] | None = None,
        aggregate_counts: Mapping[UUID, int] | None = None,
        local_counts: Mapping[str, int] | None = None,
    ) -> None:
        self._resolver = ServiceTypeResolver(service_types)
        self._detail = detail_counts or {}
        self._aggregate = aggregate_counts or {}
        self._local = local_counts or {}

    def overview(self, dates: Iterable[date], services: Iterable[Service]) -> list[DateOverview]:
        """One overview per requested date or service date, ascending."""
        services = [s for s in services if s.status != ServiceStatus.CANCELLED]
        by_date: dict[date, list[Service]] = {}
        for service in services:
            by_date.setdefault(service.service_date, []).append(service)

        all_dates = sorted(set(dates) | set(by_date))
        return [self.for_date(day, by_date.get(day, [])) for day in all_dates]

    def for_date(self, day: date, services: Iterable[Service]) -> DateOverview:
        resolved = [self._resolver.resolve(s) for s in services]
        overview = DateOverview(date=day)

        for service_type in self._resolver.types_on(day):
            typed = [r.service for r in resolved if r.service_type is service_type]
            local_key = request_key(day, str(service_type.id))
            if not typed:
                count = resolve_assignment_count(CountSources(local=self._local.get(local_key)))
                overview.slots.append(
                    ServiceSlot(
                        key=local_key,
                        name=service_type.name,
                        assignment_count=count,
                        progress=_progress(count, None),
                        service_type_id=service_type.id,
                        service_time=service_type.service_time,
                    )
                )
                continue
            for service in typed:
                count = self._count(service, local_key)
                overview.slots.append(
                    ServiceSlot(
                        key=local_key if len(typed) == 1 else f"{local_key}:{service.id}",
                        name=service_type.name,
                        assignment_count=count,
                        progress=_progress(count, service),
                        service_id=service.id,
                        service_type_id=service_type.id,
                        service_time=service_type.service_time or service.start_time,
                    )
                )

        overview.typed_slots = len(overview.slots)

        # Ad-hoc services and types without a fixed weekday. Typed services on
        # the wrong weekday are left out.
        for r in resolved:
            if r.service_type is not None and r.service_type.default_weekday is not None:
                continue
            count = self._count(r.service, r.key)
            overview.slots.append(
                ServiceSlot(
                    key=r.key,
                    name=r.display_name,
                    assignment_count=count,
                    progress=_progress(count, r.service),
                    service_id=r.service.id,
                    service_type_id=r.service_type.id if r.service_type else None,
                    service_time=r.service_time,
                    is_ad_hoc=r.is_ad_hoc,
                )
            )

        if not overview.slots:
            overview.slots.append(
                ServiceSlot(
                    key=request_key(day, "default"),
                    name="Service",
                    assignment_count=0,
                    progress=SlotProgress.NOT_STARTED,
                )
            )
        return overview

    def _count(self, service: Service, local_key: str) -> int:
        return resolve_assignment_count(
            CountSources(
                detail=self._detail.get(service.id),
                aggregate=self._aggregate.get(service.id),
                local=self._local.get(local_key),
            )
        )


def _progress(count: int, service: Service | None) -> SlotProgress:
    if count == 0:
        return SlotProgress.NOT_STARTED
    if service is not None and service.status in (ServiceStatus.PUBLISHED, ServiceStatus.COMPLETED):
        return SlotProgress.PUBLISHED
    return SlotProgress.IN_PROGRESS


def summarize(overviews: Iterable[DateOverview]) -> OverviewTotals:
    totals = OverviewTotals()
    for overview in overviews:
        totals.dates += 1
        status = overview.status
        if status == DateStatus.COMPLETE:
            totals.complete += 1
        elif status == DateStatus.PARTIAL:
            totals.partial += 1
        else:
            totals.pending += 1
    return totals
