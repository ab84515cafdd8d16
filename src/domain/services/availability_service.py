"""Availability service layer with business logic."""

from collections.abc import Callable, Sequence
from datetime import date, timedelta
from uuid import UUID

import structlog

from core.exceptions import ValidationError
from domain.entities.availability import (
    Availability,
    AvailabilityInput,
    AvailabilityState,
    DateAvailabilitySummary,
    MemberAvailability,
)
from domain.entities.service import ServiceStatus
from domain.permissions import Capability
from domain.repositories.unit_of_work import IUnitOfWork
from domain.scheduling.matcher import AvailabilitySnapshot, active_window, match_availability
from domain.services.access import require_capability, require_member, require_team

logger = structlog.get_logger()

# Upper bound for a team-wide range query
MAX_RANGE_DAYS = 93


def dedupe_entries(entries: Sequence[AvailabilityInput]) -> list[AvailabilityInput]:
    """Keep the last entry per date, ordered by date."""
    by_date: dict[date, AvailabilityInput] = {}
    for entry in entries:
        by_date[entry.date] = entry
    return [by_date[d] for d in sorted(by_date)]


class AvailabilityService:
    """Service layer for member availability."""

    def __init__(self, uow_factory: Callable[[], IUnitOfWork]) -> None:
        self._uow_factory = uow_factory

    async def get_my_availability(
        self,
        team_id: UUID,
        user_id: UUID,
        start_date: date | None = None,
        end_date: date | None = None,
    ) -> list[Availability]:
        async with self._uow_factory() as uow:
            await require_team(uow, team_id)
            await require_member(uow, team_id, user_id)
            return await uow.availability.get_for_user(  # type: ignore[no-any-return]
                team_id, user_id, start_date, end_date
            )

    async def set_availability(
        self,
        team_id: UUID,
        user_id: UUID,
        day: date,
        is_available: bool,
        reason: str | None = None,
    ) -> Availability:
        """Answer for a single date, replacing any earlier answer."""
        written = await self.bulk_set(team_id, user_id, [AvailabilityInput(day, is_available, reason)])
        return written[0]

    async def bulk_set(
        self,
        team_id: UUID,
        user_id: UUID,
        entries: Sequence[AvailabilityInput],
    ) -> list[Availability]:
        """Write many dates in one statement.

        Duplicate dates collapse to the last entry. An empty batch writes
        nothing and returns an empty list.
        """
        rows = dedupe_entries(entries)
        if not rows:
            return []

        async with self._uow_factory() as uow:
            await require_team(uow, team_id)
            await require_capability(uow, team_id, user_id, Capability.SET_AVAILABILITY)

            written = await uow.availability.upsert_many(team_id, user_id, rows)
            await uow.commit()
            logger.info(
                "availability_upserted",
                team_id=str(team_id),
                user_id=str(user_id),
                count=len(written),
            )
            return written  # type: ignore[no-any-return]

    async def delete_availability(self, team_id: UUID, user_id: UUID, day: date) -> bool:
        """Clear an answer so the date reads as unknown."""
        async with self._uow_factory() as uow:
            await require_capability(uow, team_id, user_id, Capability.SET_AVAILABILITY)
            deleted = await uow.availability.delete(team_id, user_id, day)
            await uow.commit()
            return deleted  # type: ignore[no-any-return]

    async def team_availability(self, team_id: UUID, user_id: UUID, day: date) -> DateAvailabilitySummary:
        """Every active member's state for one date."""
        summaries = await self.team_availability_range(team_id, user_id, day, day)
        return summaries[0]

    async def team_availability_range(
        self,
        team_id: UUID,
        user_id: UUID,
        start_date: date,
        end_date: date,
    ) -> list[DateAvailabilitySummary]:
        """Per-date team summaries. Members without a row count as unknown."""
        if end_date < start_date:
            raise ValidationError("end_date must not be before start_date")
        if (end_date - start_date).days >= MAX_RANGE_DAYS:
            raise ValidationError(f"Date range cannot exceed {MAX_RANGE_DAYS} days")

        async with self._uow_factory() as uow:
            await require_team(uow, team_id)
            await require_capability(uow, team_id, user_id, Capability.VIEW_AVAILABILITY)
            await require_capability(uow, team_id, user_id, Capability.ASSIGN_MEMBERS)

            members = await uow.teams.get_members(team_id)
            rows = await uow.availability.get_for_team(team_id, start_date, end_date)

        by_key = {(row.user_id, row.date): row for row in rows}
        summaries: list[DateAvailabilitySummary] = []
        day = start_date
        while day <= end_date:
            summary = DateAvailabilitySummary(date=day, total_members=len(members))
            for member in members:
                row = by_key.get((member.user_id, day))
                state = row.state if row else AvailabilityState.UNKNOWN
                if state == AvailabilityState.AVAILABLE:
                    summary.available_count += 1
                elif state == AvailabilityState.UNAVAILABLE:
                    summary.unavailable_count += 1
                summary.members.append(
                    MemberAvailability(
                        user_id=member.user_id,
                        team_member_id=member.id,
                        display_name=member.nickname or member.display_name,
                        state=state,
                        reason=row.reason if row else None,
                    )
                )
            summaries.append(summary)
            day += timedelta(days=1)
        return summaries

    async def pending_requests(
        self,
        team_id: UUID,
        user_id: UUID,
        today: date | None = None,
    ) -> AvailabilitySnapshot:
        """Draft services in the active window the caller has or has not answered."""
        start, end = active_window(today or date.today())
        async with self._uow_factory() as uow:
            await require_team(uow, team_id)
            await require_member(uow, team_id, user_id)

            types = await uow.services.get_types(team_id)
            drafts = await uow.services.get_for_team(team_id, start, end, {ServiceStatus.DRAFT})
            rows = await uow.availability.get_for_user(team_id, user_id, start, end)

        return match_availability(drafts, rows, types)
