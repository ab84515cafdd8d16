"""Availability repository protocol."""

from collections.abc import Collection, Sequence
from datetime import date
from typing import Protocol
from uuid import UUID

from domain.entities.availability import Availability, AvailabilityInput


class IAvailabilityRepository(Protocol):
    """Repository interface for Availability entities."""

    async def get_for_user(
        self,
        team_id: UUID,
        user_id: UUID,
        start_date: date | None = None,
        end_date: date | None = None,
    ) -> list[Availability]:
        """Get one member's rows ordered by date."""
        ...

    async def get_for_team(
        self,
        team_id: UUID,
        start_date: date,
        end_date: date,
    ) -> list[Availability]:
        """Get every member's rows in a date range."""
        ...

    async def get_for_user_in_teams(
        self,
        user_id: UUID,
        team_ids: Collection[UUID],
        start_date: date,
        end_date: date,
    ) -> list[Availability]:
        """Get one user's rows across several teams, ordered by date."""
        ...

    async def upsert_many(
        self,
        team_id: UUID,
        user_id: UUID,
        entries: Sequence[AvailabilityInput],
    ) -> list[Availability]:
        """Insert or replace rows keyed by (team, user, date) in one statement.

        Returns the written rows ordered by date.
        """
        ...

    async def delete(self, team_id: UUID, user_id: UUID, day: date) -> bool:
        """Delete a row so the date reads as unknown again."""
        ...
