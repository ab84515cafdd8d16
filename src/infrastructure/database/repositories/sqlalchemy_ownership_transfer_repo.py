"""SQLAlchemy implementation of OwnershipTransfer repository."""

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from domain.entities.ownership_transfer import OwnershipTransfer, TransferStatus
from domain.entities.team import MembershipRole
from infrastructure.database.models import OwnershipTransferModel


class SQLAlchemyOwnershipTransferRepository:
    """SQLAlchemy implementation of IOwnershipTransferRepository."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(self, transfer: OwnershipTransfer) -> OwnershipTransfer:
        model = OwnershipTransferModel(
            id=transfer.id,
            team_id=transfer.team_id,
            from_user_id=transfer.from_user_id,
            to_user_id=transfer.to_user_id,
            previous_owner_role=transfer.previous_owner_role.value,
            status=transfer.status.value,
            reason=transfer.reason,
            initiated_at=transfer.initiated_at,
            expires_at=transfer.expires_at,
            completed_at=transfer.completed_at,
        )
        self._session.add(model)
        await self._session.flush()
        await self._session.refresh(model)
        return self._to_entity(model)

    async def get(self, id: UUID) -> OwnershipTransfer | None:
        model = await self._session.get(OwnershipTransferModel, id)
        return self._to_entity(model) if model else None

    async def get_pending_for_team(self, team_id: UUID) -> OwnershipTransfer | None:
        stmt = (
            select(OwnershipTransferModel)
            .where(
                OwnershipTransferModel.team_id == team_id,
                OwnershipTransferModel.status == TransferStatus.PENDING.value,
            )
            .order_by(OwnershipTransferModel.initiated_at.desc())
        )
        result = await self._session.execute(stmt)
        model = result.scalars().first()
        return self._to_entity(model) if model else None

    async def get_for_team(self, team_id: UUID) -> list[OwnershipTransfer]:
        stmt = (
            select(OwnershipTransferModel)
            .where(OwnershipTransferModel.team_id == team_id)
            .order_by(OwnershipTransferModel.initiated_at.desc())
        )
        result = await self._session.execute(stmt)
        return [self._to_entity(model) for model in result.scalars()]

    async def update(self, transfer: OwnershipTransfer) -> OwnershipTransfer:
        model = await self._session.get(OwnershipTransferModel, transfer.id)
        if not model:
            raise ValueError(f"Ownership transfer {transfer.id} not found")

        model.status = transfer.status.value
        model.completed_at = transfer.completed_at

        await self._session.flush()
        return self._to_entity(model)

    def _to_entity(self, model: OwnershipTransferModel) -> OwnershipTransfer:
        return OwnershipTransfer(
            id=model.id,
            team_id=model.team_id,
            from_user_id=model.from_user_id,
            to_user_id=model.to_user_id,
            previous_owner_role=MembershipRole(model.previous_owner_role),
            status=TransferStatus(model.status),
            reason=model.reason,
            initiated_at=model.initiated_at,
            expires_at=model.expires_at,
            completed_at=model.completed_at,
        )
