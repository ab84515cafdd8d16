"""Services, service types and the per-date roster overview."""

from collections.abc import Callable, Iterable, Mapping
from datetime import date, datetime, time
from typing import Optional
from uuid import UUID

import structlog

from core.exceptions import (
    CrossTeamReferenceError,
    DuplicateServiceTypeError,
    PermissionDeniedError,
    ServiceNotFoundError,
    ServiceTypeNotFoundError,
)
from domain.entities.assignment import AssignmentDetail
from domain.entities.service import (
    MEMBER_VISIBLE_STATUSES,
    ScheduleType,
    Service,
    ServiceStats,
    ServiceStatus,
    ServiceType,
    ServiceWithStats,
)
from domain.entities.team import Membership
from domain.permissions import Capability, has_permission
from domain.repositories.unit_of_work import IUnitOfWork
from domain.scheduling.aggregator import AssignmentAggregator, DateOverview
from domain.scheduling.matcher import ServiceTypeResolver, SyncResult, diff_keys, requested_keys
from domain.services.access import require_capability, require_member, require_team
from infrastructure.notifications.provider import IAssignmentNotifier

logger = structlog.get_logger()


def default_service_name(day: date, type_name: str) -> str:
    """Generated name for a typed service, e.g. ``"3/16 Sunday Worship"``."""
    return f"{day.month}/{day.day} {type_name}"


class ScheduleService:
    """Service layer for worship services and their lifecycle."""

    def __init__(
        self,
        uow_factory: Callable[[], IUnitOfWork],
        notifier: Optional[IAssignmentNotifier] = None,
    ) -> None:
        self._uow_factory = uow_factory
        self._notifier = notifier

    # --- Service types ---

    async def list_service_types(self, team_id: UUID, user_id: UUID) -> list[ServiceType]:
        async with self._uow_factory() as uow:
            await require_team(uow, team_id)
            await require_member(uow, team_id, user_id)
            return await uow.services.get_types(team_id)  # type: ignore[no-any-return]

    async def create_service_type(
        self,
        team_id: UUID,
        user_id: UUID,
        name: str,
        default_weekday: int | None = None,
        service_time: time | None = None,
        schedule_type: ScheduleType = ScheduleType.RECURRING,
        rehearsal_weekday: int | None = None,
        rehearsal_time: time | None = None,
        display_order: int | None = None,
        is_primary: bool = False,
    ) -> ServiceType:
        """Add a service template. Names are unique per team."""
        async with self._uow_factory() as uow:
            await require_team(uow, team_id)
            await require_capability(uow, team_id, user_id, Capability.MANAGE_TEAM)

            if await uow.services.get_type_by_name(team_id, name):
                raise DuplicateServiceTypeError(name)

            existing = await uow.services.get_types(team_id)
            if display_order is None:
                display_order = max((t.display_order for t in existing), default=0) + 1

            service_type = ServiceType(
                team_id=team_id,
                name=name,
                schedule_type=schedule_type,
                default_weekday=default_weekday,
                service_time=service_time,
                rehearsal_weekday=rehearsal_weekday,
                rehearsal_time=rehearsal_time,
                display_order=display_order,
                is_primary=is_primary or not existing,
            )
            created = await uow.services.create_type(service_type)
            await uow.commit()
            return created  # type: ignore[no-any-return]

    async def update_service_type(
        self,
        team_id: UUID,
        user_id: UUID,
        service_type_id: UUID,
        **changes: object,
    ) -> ServiceType:
        async with self._uow_factory() as uow:
            await require_capability(uow, team_id, user_id, Capability.MANAGE_TEAM)
            service_type = await self._get_team_type(uow, team_id, service_type_id)

            new_name = changes.get("name")
            if isinstance(new_name, str) and new_name != service_type.name:
                if await uow.services.get_type_by_name(team_id, new_name):
                    raise DuplicateServiceTypeError(new_name)

            for field_name, value in changes.items():
                if value is not None and hasattr(service_type, field_name) and field_name not in ("id", "team_id"):
                    setattr(service_type, field_name, value)
            service_type.__post_init__()

            updated = await uow.services.update_type(service_type)
            await uow.commit()
            return updated  # type: ignore[no-any-return]

    async def delete_service_type(self, team_id: UUID, user_id: UUID, service_type_id: UUID) -> bool:
        async with self._uow_factory() as uow:
            await require_capability(uow, team_id, user_id, Capability.MANAGE_TEAM)
            await self._get_team_type(uow, team_id, service_type_id)
            deleted = await uow.services.delete_type(service_type_id)
            await uow.commit()
            return deleted  # type: ignore[no-any-return]

    # --- Services ---

    async def list_services(
        self,
        team_id: UUID,
        user_id: UUID,
        start_date: date | None = None,
        end_date: date | None = None,
        status: ServiceStatus | None = None,
    ) -> list[ServiceWithStats]:
        """List services with assignment counts.

        Members only ever see published and completed services.
        """
        async with self._uow_factory() as uow:
            await require_team(uow, team_id)
            member = await require_member(uow, team_id, user_id)

            statuses: set[ServiceStatus] | None = {status} if status else None
            if not _can_see_drafts(member):
                statuses = (statuses or set(ServiceStatus)) & set(MEMBER_VISIBLE_STATUSES)
                if not statuses:
                    return []

            services = await uow.services.get_for_team(team_id, start_date, end_date, statuses)
            stats = await uow.services.get_stats([s.id for s in services])
            return [
                ServiceWithStats(service=s, stats=stats.get(s.id) or ServiceStats())
                for s in services
            ]

    async def get_service(self, service_id: UUID, user_id: UUID) -> tuple[Service, list[AssignmentDetail]]:
        """Get a service with its roster."""
        async with self._uow_factory() as uow:
            service = await self._get_service(uow, service_id)
            member = await require_member(uow, service.team_id, user_id)
            if not _can_see_drafts(member) and not service.visible_to_members:
                raise PermissionDeniedError("Service not available")
            assignments = await uow.assignments.get_for_service(service_id)
            return service, assignments

    async def create_service(
        self,
        team_id: UUID,
        user_id: UUID,
        service_date: date,
        name: str | None = None,
        service_type_id: UUID | None = None,
        description: str | None = None,
        start_time: time | None = None,
        end_time: time | None = None,
        rehearsal_date: date | None = None,
        rehearsal_time: time | None = None,
        location: str | None = None,
        notes: str | None = None,
    ) -> Service:
        """Create a draft service.

        With a service type and no explicit name, the name becomes
        ``"<M>/<D> <TypeName>"`` and the start time defaults to the type's time.
        """
        async with self._uow_factory() as uow:
            await require_team(uow, team_id)
            await require_capability(uow, team_id, user_id, Capability.CREATE_SERVICES)

            service_type: ServiceType | None = None
            if service_type_id is not None:
                service_type = await uow.services.get_type(service_type_id)
                if not service_type:
                    raise ServiceTypeNotFoundError(str(service_type_id))
                if service_type.team_id != team_id:
                    raise CrossTeamReferenceError("service_type")

            if not name:
                name = default_service_name(service_date, service_type.name) if service_type else "Service"
            if start_time is None and service_type is not None:
                start_time = service_type.service_time

            service = Service(
                team_id=team_id,
                name=name,
                service_date=service_date,
                created_by=user_id,
                service_type_id=service_type_id,
                description=description,
                start_time=start_time,
                end_time=end_time,
                rehearsal_date=rehearsal_date,
                rehearsal_time=rehearsal_time,
                location=location,
                notes=notes,
            )
            created = await uow.services.create(service)
            await uow.commit()
            return created  # type: ignore[no-any-return]

    async def sync_requested_dates(
        self,
        team_id: UUID,
        user_id: UUID,
        dates: Iterable[date],
        start_date: date,
        end_date: date,
    ) -> SyncResult:
        """Make the team's draft services in a window match the leader's selected dates.

        Each selected date gets one draft per service type on that weekday.
        Drafts for dates no longer selected are deleted unless someone has
        already been assigned to them.
        """
        selected = sorted({d for d in dates if start_date <= d <= end_date})
        async with self._uow_factory() as uow:
            await require_team(uow, team_id)
            await require_capability(uow, team_id, user_id, Capability.CREATE_SERVICES)

            types = await uow.services.get_types(team_id)
            resolver = ServiceTypeResolver(types)
            drafts = await uow.services.get_for_team(
                team_id, start_date, end_date, {ServiceStatus.DRAFT}
            )
            existing = {}
            for service in drafts:
                resolved = resolver.resolve(service)
                if resolved.service_type is not None:
                    existing.setdefault(resolved.key, service)

            wanted = requested_keys(selected, types)
            result = diff_keys(existing.keys(), wanted)

            types_by_id = {str(t.id): t for t in types}
            for key in result.added:
                day_text, type_id = key.split(":", 1)
                day = date.fromisoformat(day_text)
                service_type = types_by_id[type_id]
                await uow.services.create(
                    Service(
                        team_id=team_id,
                        name=default_service_name(day, service_type.name),
                        service_date=day,
                        created_by=user_id,
                        service_type_id=service_type.id,
                        start_time=service_type.service_time,
                    )
                )

            removed: list[str] = []
            if result.removed:
                stats = await uow.services.get_stats([existing[k].id for k in result.removed])
                for key in result.removed:
                    service = existing[key]
                    service_stats = stats.get(service.id)
                    if service_stats and service_stats.assignment_count > 0:
                        result.kept.append(key)
                        continue
                    await uow.services.delete(service.id)
                    removed.append(key)
            result.removed = removed

            await uow.commit()
            logger.info(
                "requested_dates_synced",
                team_id=str(team_id),
                added=len(result.added),
                removed=len(result.removed),
                kept=len(result.kept),
            )
            return result

    async def update_service(
        self,
        service_id: UUID,
        user_id: UUID,
        **changes: object,
    ) -> Service:
        """Edit service details. Status changes go through the lifecycle methods."""
        async with self._uow_factory() as uow:
            service = await self._get_service(uow, service_id)
            await require_capability(uow, service.team_id, user_id, Capability.EDIT_SERVICES)

            type_id = changes.get("service_type_id")
            if isinstance(type_id, UUID):
                service_type = await uow.services.get_type(type_id)
                if not service_type:
                    raise ServiceTypeNotFoundError(str(type_id))
                if service_type.team_id != service.team_id:
                    raise CrossTeamReferenceError("service_type")

            protected = {"id", "team_id", "status", "published_at", "created_by", "created_at"}
            for field_name, value in changes.items():
                if value is not None and hasattr(service, field_name) and field_name not in protected:
                    setattr(service, field_name, value)
            service.updated_at = datetime.utcnow()

            updated = await uow.services.update(service)
            await uow.commit()
            return updated  # type: ignore[no-any-return]

    async def delete_service(self, service_id: UUID, user_id: UUID) -> bool:
        """Delete a service and, with it, its assignments."""
        async with self._uow_factory() as uow:
            service = await self._get_service(uow, service_id)
            await require_capability(uow, service.team_id, user_id, Capability.DELETE_SERVICES)
            deleted = await uow.services.delete(service_id)
            await uow.commit()
            return deleted  # type: ignore[no-any-return]

    async def publish_service(self, service_id: UUID, user_id: UUID) -> Service:
        """Publish a draft and notify its assignees.

        The notification is best effort: a failure is logged and the service
        stays published.
        """
        async with self._uow_factory() as uow:
            service = await self._get_service(uow, service_id)
            await require_capability(uow, service.team_id, user_id, Capability.PUBLISH_SERVICES)

            service.publish()
            published = await uow.services.update(service)
            await uow.commit()

        logger.info("service_published", service_id=str(service_id), team_id=str(service.team_id))
        await self._notify_assignees(service_id)
        return published  # type: ignore[no-any-return]

    async def complete_service(self, service_id: UUID, user_id: UUID) -> Service:
        return await self._transition(service_id, user_id, Service.complete)

    async def cancel_service(self, service_id: UUID, user_id: UUID) -> Service:
        return await self._transition(service_id, user_id, Service.cancel)

    async def dates_overview(
        self,
        team_id: UUID,
        user_id: UUID,
        start_date: date,
        end_date: date,
        dates: Iterable[date] = (),
        local_counts: Mapping[str, int] | None = None,
    ) -> list[DateOverview]:
        """Per-date completion for the leader's schedule view.

        Counts come from the live roster of each service, then the
        aggregated count, then ``local_counts`` supplied by the caller.
        """
        async with self._uow_factory() as uow:
            await require_team(uow, team_id)
            await require_capability(uow, team_id, user_id, Capability.ASSIGN_MEMBERS)

            types = await uow.services.get_types(team_id)
            services = await uow.services.get_for_team(team_id, start_date, end_date)
            stats = await uow.services.get_stats([s.id for s in services])

            detail_counts: dict[UUID, int] = {}
            for service in services:
                if service.status in MEMBER_VISIBLE_STATUSES:
                    roster = await uow.assignments.get_for_service(service.id)
                    detail_counts[service.id] = len(roster)

        aggregator = AssignmentAggregator(
            types,
            detail_counts=detail_counts,
            aggregate_counts={sid: s.assignment_count for sid, s in stats.items()},
            local_counts=local_counts,
        )
        in_window = [d for d in dates if start_date <= d <= end_date]
        return aggregator.overview(in_window, services)

    # --- Internal helpers ---

    async def _transition(
        self,
        service_id: UUID,
        user_id: UUID,
        action: Callable[[Service], None],
    ) -> Service:
        async with self._uow_factory() as uow:
            service = await self._get_service(uow, service_id)
            await require_capability(uow, service.team_id, user_id, Capability.EDIT_SERVICES)
            action(service)
            updated = await uow.services.update(service)
            await uow.commit()
            return updated  # type: ignore[no-any-return]

    async def _notify_assignees(self, service_id: UUID) -> None:
        if not self._notifier:
            return
        try:
            await self._notifier.send_assignment_notifications(service_id)
        except Exception as exc:
            logger.warning(
                "assignment_notification_failed",
                service_id=str(service_id),
                error=str(exc),
                error_type=type(exc).__name__,
            )

    async def _get_service(self, uow: IUnitOfWork, service_id: UUID) -> Service:
        service = await uow.services.get(service_id)
        if not service:
            raise ServiceNotFoundError(str(service_id))
        return service

    async def _get_team_type(self, uow: IUnitOfWork, team_id: UUID, service_type_id: UUID) -> ServiceType:
        service_type = await uow.services.get_type(service_type_id)
        if not service_type or service_type.team_id != team_id:
            raise ServiceTypeNotFoundError(str(service_type_id))
        return service_type


def _can_see_drafts(member: Membership) -> bool:
    return has_permission(member.role, Capability.EDIT_SERVICES)
