"""Profile repository protocol."""

from typing import Protocol
from uuid import UUID

from domain.entities.profile import Profile


class IProfileRepository(Protocol):
    """Repository interface for Profile entities."""

    async def get(self, id: UUID) -> Profile | None:
        ...

    async def upsert(self, profile: Profile) -> Profile:
        """Insert the profile or refresh its email and display name."""
        ...

    async def update(self, profile: Profile) -> Profile:
        ...
