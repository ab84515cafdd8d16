"""SQLAlchemy implementation of Service repository."""

from collections.abc import Collection
from datetime import date
from uuid import UUID

from sqlalchemy import case, delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from domain.entities.assignment import AssignmentStatus
from domain.entities.service import ScheduleType, Service, ServiceStats, ServiceStatus, ServiceType
from infrastructure.database.models import AssignmentModel, ServiceModel, ServiceTypeModel


class SQLAlchemyServiceRepository:
    """SQLAlchemy implementation of IServiceRepository."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, id: UUID) -> Service | None:
        model = await self._session.get(ServiceModel, id)
        return self._to_entity(model) if model else None

    async def get_for_team(
        self,
        team_id: UUID,
        start_date: date | None = None,
        end_date: date | None = None,
        statuses: Collection[ServiceStatus] | None = None,
    ) -> list[Service]:
        return await self.get_for_teams([team_id], start_date, end_date, statuses)

    async def get_for_teams(
        self,
        team_ids: Collection[UUID],
        start_date: date | None = None,
        end_date: date | None = None,
        statuses: Collection[ServiceStatus] | None = None,
        limit: int | None = None,
    ) -> list[Service]:
        if not team_ids:
            return []
        stmt = select(ServiceModel).where(ServiceModel.team_id.in_(list(team_ids)))
        if start_date is not None:
            stmt = stmt.where(ServiceModel.service_date >= start_date)
        if end_date is not None:
            stmt = stmt.where(ServiceModel.service_date <= end_date)
        if statuses is not None:
            stmt = stmt.where(ServiceModel.status.in_([s.value for s in statuses]))
        stmt = stmt.order_by(ServiceModel.service_date, ServiceModel.start_time, ServiceModel.name)
        if limit is not None:
            stmt = stmt.limit(limit)
        result = await self._session.execute(stmt)
        return [self._to_entity(model) for model in result.scalars()]

    async def create(self, service: Service) -> Service:
        model = self._to_model(service)
        self._session.add(model)
        await self._session.flush()
        await self._session.refresh(model)
        return self._to_entity(model)

    async def update(self, service: Service) -> Service:
        model = await self._session.get(ServiceModel, service.id)
        if not model:
            raise ValueError(f"Service {service.id} not found")

        model.service_type_id = service.service_type_id
        model.name = service.name
        model.description = service.description
        model.service_date = service.service_date
        model.start_time = service.start_time
        model.end_time = service.end_time
        model.status = service.status.value
        model.notes = service.notes
        model.rehearsal_date = service.rehearsal_date
        model.rehearsal_time = service.rehearsal_time
        model.location = service.location
        model.published_at = service.published_at
        model.updated_at = service.updated_at

        await self._session.flush()
        await self._session.refresh(model)
        return self._to_entity(model)

    async def delete(self, id: UUID) -> bool:
        """Delete a service and its assignments."""
        model = await self._session.get(ServiceModel, id)
        if not model:
            return False

        await self._session.execute(delete(AssignmentModel).where(AssignmentModel.service_id == id))
        await self._session.delete(model)
        await self._session.flush()
        return True

    async def get_stats(self, service_ids: Collection[UUID]) -> dict[UUID, ServiceStats]:
        """Aggregate assignment counts per service in a single query."""
        if not service_ids:
            return {}

        def count_status(status: AssignmentStatus):  # type: ignore[no-untyped-def]
            return func.sum(case((AssignmentModel.status == status.value, 1), else_=0))

        stmt = (
            select(
                AssignmentModel.service_id,
                func.count(AssignmentModel.id),
                count_status(AssignmentStatus.CONFIRMED),
                count_status(AssignmentStatus.PENDING),
                count_status(AssignmentStatus.DECLINED),
            )
            .where(AssignmentModel.service_id.in_(list(service_ids)))
            .group_by(AssignmentModel.service_id)
        )
        result = await self._session.execute(stmt)
        stats = {service_id: ServiceStats() for service_id in service_ids}
        for service_id, total, confirmed, pending, declined in result.all():
            stats[service_id] = ServiceStats(
                assignment_count=total or 0,
                confirmed_count=confirmed or 0,
                pending_count=pending or 0,
                declined_count=declined or 0,
            )
        return stats

    # --- Service types ---

    async def get_type(self, id: UUID) -> ServiceType | None:
        model = await self._session.get(ServiceTypeModel, id)
        return self._type_to_entity(model) if model else None

    async def get_types(self, team_id: UUID) -> list[ServiceType]:
        stmt = (
            select(ServiceTypeModel)
            .where(ServiceTypeModel.team_id == team_id)
            .order_by(ServiceTypeModel.display_order, ServiceTypeModel.name)
        )
        result = await self._session.execute(stmt)
        return [self._type_to_entity(model) for model in result.scalars()]

    async def get_type_by_name(self, team_id: UUID, name: str) -> ServiceType | None:
        stmt = select(ServiceTypeModel).where(
            ServiceTypeModel.team_id == team_id,
            ServiceTypeModel.name == name,
        )
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return self._type_to_entity(model) if model else None

    async def create_type(self, service_type: ServiceType) -> ServiceType:
        model = ServiceTypeModel(
            id=service_type.id,
            team_id=service_type.team_id,
            created_at=service_type.created_at,
        )
        self._apply_type(model, service_type)
        self._session.add(model)
        await self._session.flush()
        await self._session.refresh(model)
        return self._type_to_entity(model)

    async def update_type(self, service_type: ServiceType) -> ServiceType:
        model = await self._session.get(ServiceTypeModel, service_type.id)
        if not model:
            raise ValueError(f"Service type {service_type.id} not found")

        self._apply_type(model, service_type)
        await self._session.flush()
        await self._session.refresh(model)
        return self._type_to_entity(model)

    async def delete_type(self, id: UUID) -> bool:
        """Delete a service type. Services keep their rows with the reference cleared."""
        model = await self._session.get(ServiceTypeModel, id)
        if not model:
            return False

        await self._session.execute(
            update(ServiceModel).where(ServiceModel.service_type_id == id).values(service_type_id=None)
        )
        await self._session.delete(model)
        await self._session.flush()
        return True

    def _to_entity(self, model: ServiceModel) -> Service:
        """Convert ORM model to domain entity."""
        return Service(
            id=model.id,
            team_id=model.team_id,
            service_type_id=model.service_type_id,
            name=model.name,
            description=model.description,
            service_date=model.service_date,
            start_time=model.start_time,
            end_time=model.end_time,
            status=ServiceStatus(model.status),
            notes=model.notes,
            rehearsal_date=model.rehearsal_date,
            rehearsal_time=model.rehearsal_time,
            location=model.location,
            created_by=model.created_by,
            published_at=model.published_at,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )

    def _to_model(self, entity: Service) -> ServiceModel:
        """Convert domain entity to ORM model."""
        return ServiceModel(
            id=entity.id,
            team_id=entity.team_id,
            service_type_id=entity.service_type_id,
            name=entity.name,
            description=entity.description,
            service_date=entity.service_date,
            start_time=entity.start_time,
            end_time=entity.end_time,
            status=entity.status.value,
            notes=entity.notes,
            rehearsal_date=entity.rehearsal_date,
            rehearsal_time=entity.rehearsal_time,
            location=entity.location,
            created_by=entity.created_by,
            published_at=entity.published_at,
            created_at=entity.created_at,
            updated_at=entity.updated_at,
        )

    def _type_to_entity(self, model: ServiceTypeModel) -> ServiceType:
        return ServiceType(
            id=model.id,
            team_id=model.team_id,
            name=model.name,
            schedule_type=ScheduleType(model.schedule_type),
            default_weekday=model.default_weekday,
            service_time=model.service_time,
            rehearsal_weekday=model.rehearsal_weekday,
            rehearsal_time=model.rehearsal_time,
            display_order=model.display_order,
            is_primary=model.is_primary,
            created_at=model.created_at,
        )

    @staticmethod
    def _apply_type(model: ServiceTypeModel, entity: ServiceType) -> None:
        model.name = entity.name
        model.schedule_type = entity.schedule_type.value
        model.default_weekday = entity.default_weekday
        model.service_time = entity.service_time
        model.rehearsal_weekday = entity.rehearsal_weekday
        model.rehearsal_time = entity.rehearsal_time
        model.display_order = entity.display_order
        model.is_primary = entity.is_primary
