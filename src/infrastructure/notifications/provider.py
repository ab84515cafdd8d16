"""Assignment notification protocol."""

from typing import Protocol
from uuid import UUID


class IAssignmentNotifier(Protocol):
    """Tells assigned members that a service roster was published."""

    async def send_assignment_notifications(self, service_id: UUID) -> None:
        """
        Notify every member assigned to the service.

        Args:
            service_id: The service that was just published

        Raises:
            Any transport error. Callers treat delivery as best effort.
        """
        ...
