"""Ownership transfer repository protocol."""

from typing import Protocol
from uuid import UUID

from domain.entities.ownership_transfer import OwnershipTransfer


class IOwnershipTransferRepository(Protocol):
    async def create(self, transfer: OwnershipTransfer) -> OwnershipTransfer:
        ...

    async def get(self, id: UUID) -> OwnershipTransfer | None:
        ...

    async def get_pending_for_team(self, team_id: UUID) -> OwnershipTransfer | None:
        """Get the team's pending transfer, if any."""
        ...

    async def get_for_team(self, team_id: UUID) -> list[OwnershipTransfer]:
        """Get a team's transfer history, newest first."""
        ...

    async def update(self, transfer: OwnershipTransfer) -> OwnershipTransfer:
        ...
