"""Assignment repository protocol."""

from collections.abc import Collection
from datetime import date
from typing import Protocol
from uuid import UUID

from domain.entities.assignment import Assignment, AssignmentDetail


class IAssignmentRepository(Protocol):
    """Repository interface for Assignment entities."""

    async def get(self, id: UUID) -> Assignment | None:
        ...

    async def get_for_service(self, service_id: UUID) -> list[AssignmentDetail]:
        """Get a service's assignments with member and role names."""
        ...

    async def get_for_user(
        self, user_id: UUID, service_ids: Collection[UUID]
    ) -> list[AssignmentDetail]:
        """Get a user's assignments on the given services across their active memberships."""
        ...

    async def get_for_member(
        self,
        team_member_id: UUID,
        start_date: date | None = None,
        end_date: date | None = None,
    ) -> list[Assignment]:
        """Get a membership's assignments, optionally by service date range."""
        ...

    async def exists(self, service_id: UUID, team_member_id: UUID, role_id: UUID) -> bool:
        """Check the (service, member, role) uniqueness constraint."""
        ...

    async def create(self, assignment: Assignment) -> Assignment:
        ...

    async def create_many(self, assignments: list[Assignment]) -> list[Assignment]:
        ...

    async def update(self, assignment: Assignment) -> Assignment:
        ...

    async def delete(self, id: UUID) -> bool:
        ...
