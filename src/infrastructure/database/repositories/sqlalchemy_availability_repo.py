"""SQLAlchemy implementation of Availability repository."""

from collections.abc import Collection, Sequence
from datetime import date, datetime
from uuid import UUID, uuid4

from sqlalchemy import delete, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession

from domain.entities.availability import Availability, AvailabilityInput
from infrastructure.database.models import AvailabilityModel


class SQLAlchemyAvailabilityRepository:
    """SQLAlchemy implementation of IAvailabilityRepository."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_for_user(
        self,
        team_id: UUID,
        user_id: UUID,
        start_date: date | None = None,
        end_date: date | None = None,
    ) -> list[Availability]:
        stmt = select(AvailabilityModel).where(
            AvailabilityModel.team_id == team_id,
            AvailabilityModel.user_id == user_id,
        )
        if start_date is not None:
            stmt = stmt.where(AvailabilityModel.date >= start_date)
        if end_date is not None:
            stmt = stmt.where(AvailabilityModel.date <= end_date)
        stmt = stmt.order_by(AvailabilityModel.date)
        result = await self._session.execute(stmt)
        return [self._to_entity(model) for model in result.scalars()]

    async def get_for_team(self, team_id: UUID, start_date: date, end_date: date) -> list[Availability]:
        stmt = (
            select(AvailabilityModel)
            .where(
                AvailabilityModel.team_id == team_id,
                AvailabilityModel.date >= start_date,
                AvailabilityModel.date <= end_date,
            )
            .order_by(AvailabilityModel.date)
        )
        result = await self._session.execute(stmt)
        return [self._to_entity(model) for model in result.scalars()]

    async def get_for_user_in_teams(
        self,
        user_id: UUID,
        team_ids: Collection[UUID],
        start_date: date,
        end_date: date,
    ) -> list[Availability]:
        if not team_ids:
            return []
        stmt = (
            select(AvailabilityModel)
            .where(
                AvailabilityModel.user_id == user_id,
                AvailabilityModel.team_id.in_(list(team_ids)),
                AvailabilityModel.date >= start_date,
                AvailabilityModel.date <= end_date,
            )
            .order_by(AvailabilityModel.date)
        )
        result = await self._session.execute(stmt)
        return [self._to_entity(model) for model in result.scalars()]

    async def upsert_many(
        self,
        team_id: UUID,
        user_id: UUID,
        entries: Sequence[AvailabilityInput],
    ) -> list[Availability]:
        """Write all entries with one INSERT ... ON CONFLICT DO UPDATE.

        Entries must have distinct dates; the service layer dedupes them.
        """
        if not entries:
            return []

        now = datetime.utcnow()
        rows = [
            {
                "id": uuid4(),
                "team_id": team_id,
                "user_id": user_id,
                "date": entry.date,
                "is_available": entry.is_available,
                "reason": entry.reason,
                "created_at": now,
                "updated_at": now,
            }
            for entry in entries
        ]

        insert = sqlite.insert if self._session.get_bind().dialect.name == "sqlite" else postgresql.insert
        stmt = insert(AvailabilityModel).values(rows)
        stmt = stmt.on_conflict_do_update(
            index_elements=[AvailabilityModel.team_id, AvailabilityModel.user_id, AvailabilityModel.date],
            set_={
                "is_available": stmt.excluded.is_available,
                "reason": stmt.excluded.reason,
                "updated_at": stmt.excluded.updated_at,
            },
        )
        await self._session.execute(stmt)
        await self._session.flush()

        written = sorted(entry.date for entry in entries)
        result = await self._session.execute(
            select(AvailabilityModel)
            .where(
                AvailabilityModel.team_id == team_id,
                AvailabilityModel.user_id == user_id,
                AvailabilityModel.date.in_(written),
            )
            .order_by(AvailabilityModel.date)
            .execution_options(populate_existing=True)
        )
        return [self._to_entity(model) for model in result.scalars()]

    async def delete(self, team_id: UUID, user_id: UUID, day: date) -> bool:
        stmt = delete(AvailabilityModel).where(
            AvailabilityModel.team_id == team_id,
            AvailabilityModel.user_id == user_id,
            AvailabilityModel.date == day,
        )
        result = await self._session.execute(stmt)
        await self._session.flush()
        return result.rowcount > 0  # type: ignore[attr-defined, no-any-return]

    def _to_entity(self, model: AvailabilityModel) -> Availability:
        """Convert ORM model to domain entity."""
        return Availability(
            id=model.id,
            team_id=model.team_id,
            user_id=model.user_id,
            date=model.date,
            is_available=model.is_available,
            reason=model.reason,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )
