"""SQLAlchemy implementation of Invitation repository."""

from datetime import datetime
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from domain.entities.invitation import Invitation, InvitationStatus
from domain.entities.team import MembershipRole
from infrastructure.database.models import InvitationModel


class SQLAlchemyInvitationRepository:
    """SQLAlchemy implementation of IInvitationRepository."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(self, invitation: Invitation) -> Invitation:
        """Create a new invitation."""
        model = self._to_model(invitation)
        self._session.add(model)
        await self._session.flush()
        await self._session.refresh(model)
        return self._to_entity(model)

    async def get_by_id(self, id: UUID) -> Invitation | None:
        model = await self._session.get(InvitationModel, id)
        return self._to_entity(model) if model else None

    async def get_by_token(self, token: str) -> Invitation | None:
        """Get an invitation by its token."""
        stmt = select(InvitationModel).where(InvitationModel.token == token)
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return self._to_entity(model) if model else None

    async def get_for_team(self, team_id: UUID) -> list[Invitation]:
        """Get all invitations for a team."""
        stmt = (
            select(InvitationModel)
            .where(InvitationModel.team_id == team_id)
            .order_by(InvitationModel.created_at.desc())
        )
        result = await self._session.execute(stmt)
        return [self._to_entity(model) for model in result.scalars()]

    async def get_pending_for_email(self, email: str) -> list[Invitation]:
        """Get all pending (non-expired) invitations for an email address."""
        now = datetime.utcnow()
        stmt = (
            select(InvitationModel)
            .where(
                InvitationModel.email == email,
                InvitationModel.status == InvitationStatus.PENDING.value,
                InvitationModel.expires_at > now,
            )
            .order_by(InvitationModel.created_at.desc())
        )
        result = await self._session.execute(stmt)
        return [self._to_entity(model) for model in result.scalars()]

    async def get_pending_for_team_email(self, team_id: UUID, email: str) -> Invitation | None:
        """Get a pending invitation for a specific team and email."""
        now = datetime.utcnow()
        stmt = select(InvitationModel).where(
            InvitationModel.team_id == team_id,
            InvitationModel.email == email,
            InvitationModel.status == InvitationStatus.PENDING.value,
            InvitationModel.expires_at > now,
        )
        result = await self._session.execute(stmt)
        model = result.scalars().first()
        return self._to_entity(model) if model else None

    async def update(self, invitation: Invitation) -> Invitation:
        """Persist status and acceptance changes."""
        model = await self._session.get(InvitationModel, invitation.id)
        if not model:
            raise ValueError(f"Invitation {invitation.id} not found")

        model.status = invitation.status.value
        model.accepted_at = invitation.accepted_at

        await self._session.flush()
        return self._to_entity(model)

    def _to_entity(self, model: InvitationModel) -> Invitation:
        """Convert ORM model to domain entity."""
        return Invitation(
            id=model.id,
            team_id=model.team_id,
            email=model.email,
            token=model.token,
            role_suggestion=MembershipRole(model.role_suggestion),
            message=model.message,
            invited_by=model.invited_by,
            status=InvitationStatus(model.status),
            created_at=model.created_at,
            expires_at=model.expires_at,
            accepted_at=model.accepted_at,
        )

    def _to_model(self, entity: Invitation) -> InvitationModel:
        """Convert domain entity to ORM model."""
        return InvitationModel(
            id=entity.id,
            team_id=entity.team_id,
            email=entity.email,
            token=entity.token,
            role_suggestion=entity.role_suggestion.value,
            message=entity.message,
            invited_by=entity.invited_by,
            status=entity.status.value,
            created_at=entity.created_at,
            expires_at=entity.expires_at,
            accepted_at=entity.accepted_at,
        )
