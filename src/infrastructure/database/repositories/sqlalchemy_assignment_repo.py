"""SQLAlchemy implementation of Assignment repository."""

from collections.abc import Collection
from datetime import date
from typing import Any
from uuid import UUID

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from domain.entities.assignment import Assignment, AssignmentDetail, AssignmentStatus
from domain.entities.team import MemberStatus
from infrastructure.database.models import (
    AssignmentModel,
    ProfileModel,
    RoleModel,
    ServiceModel,
    TeamMemberModel,
)


class SQLAlchemyAssignmentRepository:
    """SQLAlchemy implementation of IAssignmentRepository."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, id: UUID) -> Assignment | None:
        model = await self._session.get(AssignmentModel, id)
        return self._to_entity(model) if model else None

    async def get_for_service(self, service_id: UUID) -> list[AssignmentDetail]:
        """Get a service's roster with member and role names, ordered by role."""
        stmt = (
            self._detail_select()
            .where(AssignmentModel.service_id == service_id)
            .order_by(RoleModel.display_order, AssignmentModel.created_at)
        )
        return await self._details(stmt)

    async def get_for_user(
        self, user_id: UUID, service_ids: Collection[UUID]
    ) -> list[AssignmentDetail]:
        """Get a user's assignments on the given services through active memberships."""
        if not service_ids:
            return []
        stmt = (
            self._detail_select()
            .where(
                TeamMemberModel.user_id == user_id,
                TeamMemberModel.status == MemberStatus.ACTIVE.value,
                AssignmentModel.service_id.in_(list(service_ids)),
            )
            .order_by(RoleModel.display_order, AssignmentModel.created_at)
        )
        return await self._details(stmt)

    @staticmethod
    def _detail_select() -> Select[Any]:
        return (
            select(
                AssignmentModel,
                TeamMemberModel.user_id,
                TeamMemberModel.nickname,
                ProfileModel.display_name,
                RoleModel.name,
                RoleModel.name_ko,
            )
            .join(TeamMemberModel, TeamMemberModel.id == AssignmentModel.team_member_id)
            .join(RoleModel, RoleModel.id == AssignmentModel.role_id)
            .outerjoin(ProfileModel, ProfileModel.id == TeamMemberModel.user_id)
        )

    async def _details(self, stmt: Select[Any]) -> list[AssignmentDetail]:
        result = await self._session.execute(stmt)
        return [
            AssignmentDetail(
                assignment=self._to_entity(model),
                user_id=user_id,
                member_name=nickname or display_name,
                role_name=role_name,
                role_name_ko=role_name_ko,
            )
            for model, user_id, nickname, display_name, role_name, role_name_ko in result.all()
        ]

    async def get_for_member(
        self,
        team_member_id: UUID,
        start_date: date | None = None,
        end_date: date | None = None,
    ) -> list[Assignment]:
        stmt = (
            select(AssignmentModel)
            .join(ServiceModel, ServiceModel.id == AssignmentModel.service_id)
            .where(AssignmentModel.team_member_id == team_member_id)
        )
        if start_date is not None:
            stmt = stmt.where(ServiceModel.service_date >= start_date)
        if end_date is not None:
            stmt = stmt.where(ServiceModel.service_date <= end_date)
        stmt = stmt.order_by(ServiceModel.service_date)
        result = await self._session.execute(stmt)
        return [self._to_entity(model) for model in result.scalars()]

    async def exists(self, service_id: UUID, team_member_id: UUID, role_id: UUID) -> bool:
        stmt = select(func.count()).select_from(AssignmentModel).where(
            AssignmentModel.service_id == service_id,
            AssignmentModel.team_member_id == team_member_id,
            AssignmentModel.role_id == role_id,
        )
        result = await self._session.execute(stmt)
        return (result.scalar() or 0) > 0

    async def create(self, assignment: Assignment) -> Assignment:
        created = await self.create_many([assignment])
        return created[0]

    async def create_many(self, assignments: list[Assignment]) -> list[Assignment]:
        models = [self._to_model(a) for a in assignments]
        self._session.add_all(models)
        await self._session.flush()
        for model in models:
            await self._session.refresh(model)
        return [self._to_entity(model) for model in models]

    async def update(self, assignment: Assignment) -> Assignment:
        model = await self._session.get(AssignmentModel, assignment.id)
        if not model:
            raise ValueError(f"Assignment {assignment.id} not found")

        model.status = assignment.status.value
        model.decline_reason = assignment.decline_reason
        model.notes = assignment.notes
        model.responded_at = assignment.responded_at
        model.updated_at = assignment.updated_at

        await self._session.flush()
        await self._session.refresh(model)
        return self._to_entity(model)

    async def delete(self, id: UUID) -> bool:
        model = await self._session.get(AssignmentModel, id)
        if not model:
            return False

        await self._session.delete(model)
        await self._session.flush()
        return True

    def _to_entity(self, model: AssignmentModel) -> Assignment:
        """Convert ORM model to domain entity."""
        return Assignment(
            id=model.id,
            service_id=model.service_id,
            team_member_id=model.team_member_id,
            role_id=model.role_id,
            status=AssignmentStatus(model.status),
            assigned_by=model.assigned_by,
            decline_reason=model.decline_reason,
            notes=model.notes,
            responded_at=model.responded_at,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )

    def _to_model(self, entity: Assignment) -> AssignmentModel:
        """Convert domain entity to ORM model."""
        return AssignmentModel(
            id=entity.id,
            service_id=entity.service_id,
            team_member_id=entity.team_member_id,
            role_id=entity.role_id,
            status=entity.status.value,
            assigned_by=entity.assigned_by,
            decline_reason=entity.decline_reason,
            notes=entity.notes,
            responded_at=entity.responded_at,
            created_at=entity.created_at,
            updated_at=entity.updated_at,
        )
