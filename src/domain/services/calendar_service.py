"""Personal schedule across every team a user belongs to."""

from collections.abc import Callable
from datetime import date
from uuid import UUID

import structlog

from core.exceptions import ValidationError
from domain.entities.assignment import AssignmentDetail
from domain.entities.calendar import CalendarEntry, CalendarEntryType, UpcomingService
from domain.entities.service import MEMBER_VISIBLE_STATUSES, ServiceStatus
from domain.entities.team import Team
from domain.repositories.unit_of_work import IUnitOfWork

logger = structlog.get_logger()

MAX_UPCOMING = 50
MAX_CALENDAR_DAYS = 366


class CalendarService:
    """Read-only views over the caller's services and availability in all their teams.

    Only published and completed services appear; drafts are availability
    requests, not schedule entries.
    """

    def __init__(self, uow_factory: Callable[[], IUnitOfWork]) -> None:
        self._uow_factory = uow_factory

    async def upcoming_services(
        self,
        user_id: UUID,
        limit: int = 5,
        today: date | None = None,
    ) -> list[UpcomingService]:
        """Next published services from ``today`` on, each with the caller's assignment if any."""
        if not 1 <= limit <= MAX_UPCOMING:
            raise ValidationError(
                f"limit must be between 1 and {MAX_UPCOMING}", details={"limit": limit}
            )
        today = today or date.today()

        async with self._uow_factory() as uow:
            teams = await self._teams_of(uow, user_id)
            if not teams:
                return []
            services = await uow.services.get_for_teams(
                list(teams), start_date=today, statuses=[ServiceStatus.PUBLISHED], limit=limit
            )
            mine = await uow.assignments.get_for_user(user_id, [s.id for s in services])

        first_by_service: dict[UUID, AssignmentDetail] = {}
        for detail in mine:
            first_by_service.setdefault(detail.assignment.service_id, detail)
        return [
            UpcomingService(
                service=service,
                team=teams[service.team_id],
                my_assignment=first_by_service.get(service.id),
            )
            for service in services
        ]

    async def personal_calendar(
        self, user_id: UUID, start_date: date, end_date: date
    ) -> list[CalendarEntry]:
        """Services the caller is assigned to, their rehearsals and days marked unavailable.

        A service produces one entry per assignment the caller holds on it,
        plus a rehearsal entry when it has a rehearsal date. Only dates with
        ``is_available`` false become availability entries.
        """
        if end_date < start_date:
            raise ValidationError(
                "end_date must not be before start_date",
                details={"start_date": str(start_date), "end_date": str(end_date)},
            )
        if (end_date - start_date).days >= MAX_CALENDAR_DAYS:
            raise ValidationError(f"Date range is limited to {MAX_CALENDAR_DAYS} days")

        async with self._uow_factory() as uow:
            teams = await self._teams_of(uow, user_id)
            if not teams:
                return []
            services = await uow.services.get_for_teams(
                list(teams), start_date, end_date, statuses=MEMBER_VISIBLE_STATUSES
            )
            mine = await uow.assignments.get_for_user(user_id, [s.id for s in services])
            availability = await uow.availability.get_for_user_in_teams(
                user_id, list(teams), start_date, end_date
            )

        by_service: dict[UUID, list[AssignmentDetail]] = {}
        for detail in mine:
            by_service.setdefault(detail.assignment.service_id, []).append(detail)

        entries: list[CalendarEntry] = []
        for service in services:
            team = teams[service.team_id]
            for detail in by_service.get(service.id, []):
                assignment_id = detail.assignment.id
                entries.append(
                    CalendarEntry(
                        key=f"service-{service.id}-{assignment_id}",
                        type=CalendarEntryType.SERVICE,
                        title=service.name,
                        date=service.service_date,
                        team=team,
                        start_time=service.start_time,
                        end_time=service.end_time,
                        service=service,
                        assignment=detail,
                    )
                )
                if service.rehearsal_date is not None:
                    entries.append(
                        CalendarEntry(
                            key=f"rehearsal-{service.id}-{assignment_id}",
                            type=CalendarEntryType.REHEARSAL,
                            title=f"Rehearsal: {service.name}",
                            date=service.rehearsal_date,
                            team=team,
                            start_time=service.rehearsal_time,
                            service=service,
                            assignment=detail,
                        )
                    )

        for row in availability:
            if row.is_available:
                continue
            entries.append(
                CalendarEntry(
                    key=f"availability-{row.id}",
                    type=CalendarEntryType.AVAILABILITY,
                    title="Unavailable",
                    date=row.date,
                    team=teams[row.team_id],
                    availability=row,
                )
            )

        entries.sort(key=lambda entry: entry.sort_key)
        logger.debug("personal_calendar_built", user_id=str(user_id), entries=len(entries))
        return entries

    @staticmethod
    async def _teams_of(uow: IUnitOfWork, user_id: UUID) -> dict[UUID, Team]:
        summaries = await uow.teams.get_all_for_user(user_id)
        return {summary.team.id: summary.team for summary in summaries}
