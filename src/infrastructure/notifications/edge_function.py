"""Assignment notifications delivered through a Supabase edge function."""

from uuid import UUID

import httpx
import structlog

from core.config import settings

logger = structlog.get_logger()


class EdgeFunctionNotifier:
    """Invokes the notification edge function over HTTP.

    The function resolves the service's assignees and fans out push
    notifications; this side only posts ``{"serviceId", "type"}``.
    """

    def __init__(
        self,
        function_url: str = settings.notification_function_url,
        api_key: str = settings.supabase_service_role_key,
        timeout: float = settings.notification_timeout_seconds,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._function_url = function_url
        self._api_key = api_key
        self._timeout = timeout
        self._transport = transport

    async def send_assignment_notifications(self, service_id: UUID) -> None:
        if not self._function_url:
            logger.info("notification_skipped", reason="no_function_url", service_id=str(service_id))
            return

        headers = {"Content-Type": "application/json"}
        if self._api_key:
            headers["Authorization"] = f"Bearer {self._api_key}"
            headers["apikey"] = self._api_key

        async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
            response = await client.post(
                self._function_url,
                json={"serviceId": str(service_id), "type": "assignment"},
                headers=headers,
            )
            response.raise_for_status()

        logger.info("assignment_notifications_sent", service_id=str(service_id))
