"""Ownership transfer business logic."""

from collections.abc import Callable
from datetime import datetime
from uuid import UUID

import structlog

from core.exceptions import (
    InvalidRoleError,
    MemberNotFoundError,
    PermissionDeniedError,
    TransferAlreadyPendingError,
    TransferExpiredError,
    TransferNotFoundError,
    ValidationError,
)
from domain.entities.ownership_transfer import OwnershipTransfer, TransferStatus
from domain.entities.team import Membership, MembershipRole
from domain.permissions import Capability
from domain.repositories.unit_of_work import IUnitOfWork
from domain.services.access import require_capability, require_member, require_team

logger = structlog.get_logger()


class OwnershipService:
    """Moves the owner role between members.

    Two flows share one completion step: an owner can request a transfer that
    the target accepts later, or hand ownership over immediately. Completion
    demotes the current owner before promoting the new one so that the
    one-owner-per-team index holds at every statement.
    """

    def __init__(self, uow_factory: Callable[[], IUnitOfWork]) -> None:
        self._uow_factory = uow_factory

    async def initiate(
        self,
        team_id: UUID,
        user_id: UUID,
        to_user_id: UUID,
        reason: str | None = None,
        previous_owner_role: MembershipRole = MembershipRole.ADMIN,
    ) -> OwnershipTransfer:
        """Create a pending transfer for the target member to accept."""
        async with self._uow_factory() as uow:
            await require_team(uow, team_id)
            await require_capability(uow, team_id, user_id, Capability.TRANSFER_OWNERSHIP)
            await self._require_target(uow, team_id, user_id, to_user_id)
            _check_previous_role(previous_owner_role)

            pending = await uow.transfers.get_pending_for_team(team_id)
            if pending:
                if not pending.is_expired:
                    raise TransferAlreadyPendingError(str(team_id))
                pending.expire()
                await uow.transfers.update(pending)

            transfer = await uow.transfers.create(
                OwnershipTransfer(
                    team_id=team_id,
                    from_user_id=user_id,
                    to_user_id=to_user_id,
                    reason=reason,
                    previous_owner_role=previous_owner_role,
                )
            )
            await uow.commit()
            return transfer  # type: ignore[no-any-return]

    async def transfer_now(
        self,
        team_id: UUID,
        user_id: UUID,
        to_user_id: UUID,
        previous_owner_role: MembershipRole = MembershipRole.ADMIN,
        reason: str | None = None,
    ) -> OwnershipTransfer:
        """Hand ownership over immediately in a single transaction."""
        async with self._uow_factory() as uow:
            await require_team(uow, team_id)
            await require_capability(uow, team_id, user_id, Capability.TRANSFER_OWNERSHIP)
            await self._require_target(uow, team_id, user_id, to_user_id)
            _check_previous_role(previous_owner_role)

            pending = await uow.transfers.get_pending_for_team(team_id)
            if pending:
                pending.cancel()
                await uow.transfers.update(pending)

            transfer = await uow.transfers.create(
                OwnershipTransfer(
                    team_id=team_id,
                    from_user_id=user_id,
                    to_user_id=to_user_id,
                    reason=reason,
                    previous_owner_role=previous_owner_role,
                )
            )
            completed = await self._complete(uow, transfer)
            await uow.commit()
            return completed

    async def accept(self, transfer_id: UUID, user_id: UUID) -> OwnershipTransfer:
        """Accept a pending transfer. Only the target member may accept."""
        async with self._uow_factory() as uow:
            transfer = await self._get_pending(uow, transfer_id)
            if transfer.to_user_id != user_id:
                raise PermissionDeniedError("Only the new owner can accept this transfer")

            await require_member(uow, transfer.team_id, user_id)
            completed = await self._complete(uow, transfer)
            await uow.commit()
            return completed

    async def cancel(self, transfer_id: UUID, user_id: UUID) -> OwnershipTransfer:
        """Cancel a pending transfer. Either party may cancel."""
        async with self._uow_factory() as uow:
            transfer = await self._get_pending(uow, transfer_id)
            if user_id not in (transfer.from_user_id, transfer.to_user_id):
                raise PermissionDeniedError("Only the owner or the target can cancel this transfer")

            transfer.cancel()
            updated = await uow.transfers.update(transfer)
            await uow.commit()
            return updated  # type: ignore[no-any-return]

    async def get_pending(self, team_id: UUID, user_id: UUID) -> OwnershipTransfer | None:
        """Get the team's pending transfer. Expired requests are closed on read."""
        async with self._uow_factory() as uow:
            await require_member(uow, team_id, user_id)
            transfer = await uow.transfers.get_pending_for_team(team_id)
            if transfer and transfer.is_expired:
                transfer.expire()
                await uow.transfers.update(transfer)
                await uow.commit()
                return None
            return transfer

    # --- Internal helpers ---

    async def _require_target(
        self, uow: IUnitOfWork, team_id: UUID, user_id: UUID, to_user_id: UUID
    ) -> Membership:
        if to_user_id == user_id:
            raise ValidationError("New owner must be a different member")
        target = await uow.teams.get_member(team_id, to_user_id)
        if not target or not target.is_active:
            raise MemberNotFoundError(str(to_user_id))
        if target.role == MembershipRole.OWNER:
            raise ValidationError("User is already the team owner")
        return target

    async def _get_pending(self, uow: IUnitOfWork, transfer_id: UUID) -> OwnershipTransfer:
        transfer = await uow.transfers.get(transfer_id)
        if not transfer or transfer.status != TransferStatus.PENDING:
            raise TransferNotFoundError(str(transfer_id))
        if transfer.is_expired:
            transfer.expire()
            await uow.transfers.update(transfer)
            await uow.commit()
            raise TransferExpiredError()
        return transfer

    async def _complete(self, uow: IUnitOfWork, transfer: OwnershipTransfer) -> OwnershipTransfer:
        team = await require_team(uow, transfer.team_id)
        current = await uow.teams.get_member(transfer.team_id, transfer.from_user_id)
        target = await uow.teams.get_member(transfer.team_id, transfer.to_user_id)
        if not current or current.role != MembershipRole.OWNER:
            raise PermissionDeniedError("Transfer initiator is no longer the owner")
        if not target or not target.is_active:
            raise MemberNotFoundError(str(transfer.to_user_id))

        current.role = transfer.previous_owner_role
        await uow.teams.update_member(current)
        target.role = MembershipRole.OWNER
        await uow.teams.update_member(target)

        team.owner_id = transfer.to_user_id
        team.updated_at = datetime.utcnow()
        await uow.teams.update(team)

        transfer.complete()
        updated = await uow.transfers.update(transfer)
        logger.info(
            "ownership_transferred",
            team_id=str(transfer.team_id),
            from_user_id=str(transfer.from_user_id),
            to_user_id=str(transfer.to_user_id),
        )
        return updated  # type: ignore[no-any-return]


def _check_previous_role(role: MembershipRole) -> None:
    if role == MembershipRole.OWNER:
        raise InvalidRoleError("Previous owner must become admin or member")
