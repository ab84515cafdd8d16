"""SQLAlchemy implementation of Role repository."""

from uuid import UUID

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from domain.entities.role import MemberRole, Proficiency, Role
from infrastructure.database.models import MemberRoleModel, RoleModel, TeamMemberModel


class SQLAlchemyRoleRepository:
    """SQLAlchemy implementation of IRoleRepository."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, id: UUID) -> Role | None:
        model = await self._session.get(RoleModel, id)
        return self._to_entity(model) if model else None

    async def get_for_team(self, team_id: UUID, include_inactive: bool = False) -> list[Role]:
        stmt = select(RoleModel).where(RoleModel.team_id == team_id)
        if not include_inactive:
            stmt = stmt.where(RoleModel.is_active.is_(True))
        stmt = stmt.order_by(RoleModel.display_order, RoleModel.name)
        result = await self._session.execute(stmt)
        return [self._to_entity(model) for model in result.scalars()]

    async def get_by_name(self, team_id: UUID, name: str) -> Role | None:
        stmt = select(RoleModel).where(RoleModel.team_id == team_id, RoleModel.name == name)
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return self._to_entity(model) if model else None

    async def create(self, role: Role) -> Role:
        model = self._to_model(role)
        self._session.add(model)
        await self._session.flush()
        await self._session.refresh(model)
        return self._to_entity(model)

    async def update(self, role: Role) -> Role:
        model = await self._session.get(RoleModel, role.id)
        if not model:
            raise ValueError(f"Role {role.id} not found")

        model.name = role.name
        model.name_ko = role.name_ko
        model.description = role.description
        model.color = role.color
        model.icon = role.icon
        model.min_required = role.min_required
        model.max_allowed = role.max_allowed
        model.display_order = role.display_order
        model.is_active = role.is_active

        await self._session.flush()
        await self._session.refresh(model)
        return self._to_entity(model)

    async def delete(self, id: UUID) -> bool:
        model = await self._session.get(RoleModel, id)
        if not model:
            return False

        await self._session.delete(model)
        await self._session.flush()
        return True

    async def get_member_roles(self, team_member_id: UUID) -> list[MemberRole]:
        stmt = (
            select(MemberRoleModel)
            .where(MemberRoleModel.team_member_id == team_member_id)
            .order_by(MemberRoleModel.is_primary.desc(), MemberRoleModel.created_at)
        )
        result = await self._session.execute(stmt)
        return [self._member_role_to_entity(model) for model in result.scalars()]

    async def get_member_roles_for_team(self, team_id: UUID) -> list[MemberRole]:
        stmt = (
            select(MemberRoleModel)
            .join(TeamMemberModel, TeamMemberModel.id == MemberRoleModel.team_member_id)
            .where(TeamMemberModel.team_id == team_id)
        )
        result = await self._session.execute(stmt)
        return [self._member_role_to_entity(model) for model in result.scalars()]

    async def add_member_role(self, member_role: MemberRole) -> MemberRole:
        model = MemberRoleModel(
            id=member_role.id,
            team_member_id=member_role.team_member_id,
            role_id=member_role.role_id,
            proficiency=member_role.proficiency.value,
            is_primary=member_role.is_primary,
            notes=member_role.notes,
            created_at=member_role.created_at,
        )
        self._session.add(model)
        await self._session.flush()
        await self._session.refresh(model)
        return self._member_role_to_entity(model)

    async def update_member_role(self, member_role: MemberRole) -> MemberRole:
        model = await self._session.get(MemberRoleModel, member_role.id)
        if not model:
            raise ValueError(f"Member role {member_role.id} not found")

        model.proficiency = member_role.proficiency.value
        model.is_primary = member_role.is_primary
        model.notes = member_role.notes

        await self._session.flush()
        return self._member_role_to_entity(model)

    async def remove_member_role(self, team_member_id: UUID, role_id: UUID) -> bool:
        stmt = delete(MemberRoleModel).where(
            MemberRoleModel.team_member_id == team_member_id,
            MemberRoleModel.role_id == role_id,
        )
        result = await self._session.execute(stmt)
        await self._session.flush()
        return result.rowcount > 0  # type: ignore[attr-defined, no-any-return]

    async def clear_primary(self, team_member_id: UUID) -> None:
        stmt = (
            update(MemberRoleModel)
            .where(MemberRoleModel.team_member_id == team_member_id)
            .values(is_primary=False)
        )
        await self._session.execute(stmt)
        await self._session.flush()

    def _to_entity(self, model: RoleModel) -> Role:
        """Convert ORM model to domain entity."""
        return Role(
            id=model.id,
            team_id=model.team_id,
            name=model.name,
            name_ko=model.name_ko,
            description=model.description,
            color=model.color,
            icon=model.icon,
            min_required=model.min_required,
            max_allowed=model.max_allowed,
            display_order=model.display_order,
            is_active=model.is_active,
            created_at=model.created_at,
        )

    def _to_model(self, entity: Role) -> RoleModel:
        """Convert domain entity to ORM model."""
        return RoleModel(
            id=entity.id,
            team_id=entity.team_id,
            name=entity.name,
            name_ko=entity.name_ko,
            description=entity.description,
            color=entity.color,
            icon=entity.icon,
            min_required=entity.min_required,
            max_allowed=entity.max_allowed,
            display_order=entity.display_order,
            is_active=entity.is_active,
            created_at=entity.created_at,
        )

    def _member_role_to_entity(self, model: MemberRoleModel) -> MemberRole:
        return MemberRole(
            id=model.id,
            team_member_id=model.team_member_id,
            role_id=model.role_id,
            proficiency=Proficiency(model.proficiency),
            is_primary=model.is_primary,
            notes=model.notes,
            created_at=model.created_at,
        )
