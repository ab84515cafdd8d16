"""SQLAlchemy implementation of Team repository."""

from uuid import UUID

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from domain.entities.team import MemberStatus, Membership, MembershipRole, Team, TeamSummary
from infrastructure.database.models import TeamMemberModel, TeamModel


class SQLAlchemyTeamRepository:
    """SQLAlchemy implementation of ITeamRepository."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, id: UUID) -> Team | None:
        """Get a team by ID."""
        model = await self._session.get(TeamModel, id)
        return self._to_entity(model) if model else None

    async def get_by_invite_code(self, code: str) -> Team | None:
        stmt = select(TeamModel).where(TeamModel.invite_code == code)
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return self._to_entity(model) if model else None

    async def invite_code_exists(self, code: str) -> bool:
        stmt = select(func.count()).select_from(TeamModel).where(TeamModel.invite_code == code)
        result = await self._session.execute(stmt)
        return (result.scalar() or 0) > 0

    async def get_all_for_user(self, user_id: UUID) -> list[TeamSummary]:
        """Get all teams a user is an active member of, with role and member count."""
        member_count = (
            select(func.count(TeamMemberModel.id))
            .where(
                TeamMemberModel.team_id == TeamModel.id,
                TeamMemberModel.status == MemberStatus.ACTIVE.value,
            )
            .correlate(TeamModel)
            .scalar_subquery()
        )
        stmt = (
            select(TeamModel, TeamMemberModel.role, member_count)
            .join(TeamMemberModel, TeamMemberModel.team_id == TeamModel.id)
            .where(
                TeamMemberModel.user_id == user_id,
                TeamMemberModel.status == MemberStatus.ACTIVE.value,
            )
            .order_by(TeamModel.name)
        )
        result = await self._session.execute(stmt)
        return [
            TeamSummary(team=self._to_entity(model), role=MembershipRole(role), member_count=count or 0)
            for model, role, count in result.all()
        ]

    async def create(self, team: Team) -> Team:
        """Create a new team."""
        model = self._to_model(team)
        self._session.add(model)
        await self._session.flush()
        await self._session.refresh(model)
        return self._to_entity(model)

    async def update(self, team: Team) -> Team:
        """Update an existing team."""
        model = await self._session.get(TeamModel, team.id)
        if not model:
            raise ValueError(f"Team {team.id} not found")

        model.name = team.name
        model.description = team.description
        model.owner_id = team.owner_id
        model.invite_code = team.invite_code
        model.color = team.color
        model.timezone = team.timezone
        model.settings = team.settings
        model.updated_at = team.updated_at

        await self._session.flush()
        await self._session.refresh(model)
        return self._to_entity(model)

    async def delete(self, id: UUID) -> bool:
        """Delete a team. Team-scoped rows go with it through ON DELETE CASCADE."""
        stmt = delete(TeamModel).where(TeamModel.id == id)
        result = await self._session.execute(stmt)
        await self._session.flush()
        return result.rowcount > 0  # type: ignore[attr-defined, no-any-return]

    async def get_member(self, team_id: UUID, user_id: UUID) -> Membership | None:
        stmt = select(TeamMemberModel).where(
            TeamMemberModel.team_id == team_id,
            TeamMemberModel.user_id == user_id,
        )
        result = await self._session.execute(stmt)
        model = result.unique().scalar_one_or_none()
        return self._member_to_entity(model) if model else None

    async def get_member_by_id(self, member_id: UUID) -> Membership | None:
        model = await self._session.get(TeamMemberModel, member_id)
        return self._member_to_entity(model) if model else None

    async def get_members(self, team_id: UUID, include_inactive: bool = False) -> list[Membership]:
        """Get memberships ordered owner, admins, then members by join date."""
        stmt = select(TeamMemberModel).where(TeamMemberModel.team_id == team_id)
        if not include_inactive:
            stmt = stmt.where(TeamMemberModel.status == MemberStatus.ACTIVE.value)
        stmt = stmt.order_by(TeamMemberModel.joined_at)
        result = await self._session.execute(stmt)
        members = [self._member_to_entity(m) for m in result.unique().scalars()]
        rank = {MembershipRole.OWNER: 0, MembershipRole.ADMIN: 1, MembershipRole.MEMBER: 2}
        return sorted(members, key=lambda m: rank[m.role])

    async def add_member(self, member: Membership) -> Membership:
        model = TeamMemberModel(
            id=member.id,
            team_id=member.team_id,
            user_id=member.user_id,
            role=member.role.value,
            status=member.status.value,
            nickname=member.nickname,
            joined_at=member.joined_at,
        )
        self._session.add(model)
        await self._session.flush()
        await self._session.refresh(model)
        return self._member_to_entity(model)

    async def update_member(self, member: Membership) -> Membership:
        """Persist role, status and nickname. Flushed at once so statement order is kept."""
        model = await self._session.get(TeamMemberModel, member.id)
        if not model:
            raise ValueError(f"Team member {member.id} not found")

        model.role = member.role.value
        model.status = member.status.value
        model.nickname = member.nickname
        model.joined_at = member.joined_at

        await self._session.flush()
        return self._member_to_entity(model)

    async def count_active_members(self, team_id: UUID) -> int:
        stmt = select(func.count()).select_from(TeamMemberModel).where(
            TeamMemberModel.team_id == team_id,
            TeamMemberModel.status == MemberStatus.ACTIVE.value,
        )
        result = await self._session.execute(stmt)
        return result.scalar() or 0

    def _to_entity(self, model: TeamModel) -> Team:
        """Convert ORM model to domain entity."""
        return Team(
            id=model.id,
            name=model.name,
            description=model.description,
            owner_id=model.owner_id,
            invite_code=model.invite_code,
            color=model.color,
            timezone=model.timezone,
            settings=dict(model.settings or {}),
            created_at=model.created_at,
            updated_at=model.updated_at,
        )

    def _to_model(self, entity: Team) -> TeamModel:
        """Convert domain entity to ORM model."""
        return TeamModel(
            id=entity.id,
            name=entity.name,
            description=entity.description,
            owner_id=entity.owner_id,
            invite_code=entity.invite_code,
            color=entity.color,
            timezone=entity.timezone,
            settings=entity.settings,
            created_at=entity.created_at,
            updated_at=entity.updated_at,
        )

    def _member_to_entity(self, model: TeamMemberModel) -> Membership:
        profile = model.user
        return Membership(
            id=model.id,
            team_id=model.team_id,
            user_id=model.user_id,
            role=MembershipRole(model.role),
            status=MemberStatus(model.status),
            nickname=model.nickname,
            joined_at=model.joined_at,
            display_name=profile.display_name if profile else None,
            email=profile.email if profile else None,
        )
