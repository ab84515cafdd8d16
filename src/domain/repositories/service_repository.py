"""Service and service type repository protocol."""

from collections.abc import Collection
from datetime import date
from typing import Protocol
from uuid import UUID

from domain.entities.service import Service, ServiceStats, ServiceStatus, ServiceType


class IServiceRepository(Protocol):
    """Repository interface for Service and ServiceType entities."""

    async def get(self, id: UUID) -> Service | None:
        """Get a service by ID."""
        ...

    async def get_for_team(
        self,
        team_id: UUID,
        start_date: date | None = None,
        end_date: date | None = None,
        statuses: Collection[ServiceStatus] | None = None,
    ) -> list[Service]:
        """Get a team's services ordered by date, optionally filtered."""
        ...

    async def get_for_teams(
        self,
        team_ids: Collection[UUID],
        start_date: date | None = None,
        end_date: date | None = None,
        statuses: Collection[ServiceStatus] | None = None,
        limit: int | None = None,
    ) -> list[Service]:
        """Get services across several teams ordered by date and start time."""
        ...

    async def create(self, service: Service) -> Service:
        ...

    async def update(self, service: Service) -> Service:
        ...

    async def delete(self, id: UUID) -> bool:
        """Delete a service. Its assignments are deleted with it."""
        ...

    async def get_stats(self, service_ids: Collection[UUID]) -> dict[UUID, ServiceStats]:
        """Aggregate assignment counts per service."""
        ...

    async def get_type(self, id: UUID) -> ServiceType | None:
        ...

    async def get_types(self, team_id: UUID) -> list[ServiceType]:
        """Get a team's service types ordered by display order."""
        ...

    async def get_type_by_name(self, team_id: UUID, name: str) -> ServiceType | None:
        ...

    async def create_type(self, service_type: ServiceType) -> ServiceType:
        ...

    async def update_type(self, service_type: ServiceType) -> ServiceType:
        ...

    async def delete_type(self, id: UUID) -> bool:
        """Delete a service type. Services keep their rows with the reference cleared."""
        ...
