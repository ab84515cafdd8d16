"""HTTP client for the worship roster API.

Every call goes through :func:`core.resilience.with_retry_and_timeout`, and
error envelopes are turned back into the same exception types the service
raises. Reference data that rarely changes (roles, service types) is cached
in memory for ``settings.cache_ttl_seconds``.
"""

from collections.abc import Awaitable, Callable, Sequence
from datetime import date
from typing import Any, Optional
from uuid import UUID

import httpx
import orjson
import structlog

from api.v1.schemas.assignment import AssignmentResponse, RosterEntryResponse
from api.v1.schemas.availability import (
    AvailabilityResponse,
    PendingRequestResponse,
    SubmittedResponseSchema,
)
from api.v1.schemas.calendar import CalendarEntryResponse, UpcomingServiceResponse
from api.v1.schemas.role import RoleResponse
from api.v1.schemas.service import (
    DateOverviewResponse,
    ServiceResponse,
    ServiceTypeResponse,
    SyncResultResponse,
)
from api.v1.schemas.team import CapabilitiesResponse, TeamResponse
from core.config import settings
from core.error_tracking import IErrorTracker
from core.exceptions import (
    AppException,
    AuthenticationError,
    ErrorCode,
    NotFoundError,
    PermissionDeniedError,
)
from core.resilience import ttl_cache, with_retry_and_timeout
from domain.entities.assignment import AssignmentStatus
from domain.entities.availability import AvailabilityInput
from domain.scheduling.matcher import AvailabilitySnapshot, PendingRequest, SubmittedResponse

logger = structlog.get_logger()

# Returns the current access token, or None when signed out
TokenProvider = Callable[[], Awaitable[Optional[str]]]


def error_from_response(status_code: int, payload: Any) -> AppException:
    """Rebuild the service's exception from an error envelope.

    Bodies that are not an envelope still produce an exception carrying the
    status code, so retry classification works the same way.
    """
    body = payload if isinstance(payload, dict) else {}
    message = str(body.get("message") or f"HTTP {status_code}")
    details = body.get("details")
    try:
        code: ErrorCode | None = ErrorCode(body.get("error_code"))
    except ValueError:
        code = None

    error: AppException
    if status_code == 401:
        error = AuthenticationError(message, code or ErrorCode.UNAUTHORIZED)
    elif status_code == 403:
        error = PermissionDeniedError(message, code or ErrorCode.FORBIDDEN, details)
    elif status_code == 404:
        error = NotFoundError(code or ErrorCode.NOT_FOUND, "Resource")
        error.message = message
        error.args = (message,)
        error.details = details
    else:
        error = AppException(code or ErrorCode.INTERNAL_ERROR, message, status_code, details)
    return error


def _encode(value: Any) -> bytes:
    return orjson.dumps(value, option=orjson.OPT_NON_STR_KEYS)


def _decode(response: httpx.Response) -> Any:
    if not response.content:
        return None
    try:
        return orjson.loads(response.content)
    except orjson.JSONDecodeError:
        # Proxies may answer with HTML; keep the status code, drop the body
        logger.warning("non_json_response", status_code=response.status_code)
        return None


class WorshipRosterClient:
    """Async client for the v1 API.

    Use as an async context manager, or call :meth:`aclose` when done.
    """

    def __init__(
        self,
        token_provider: TokenProvider,
        base_url: str = settings.api_base_url,
        timeout_ms: int | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        tracker: IErrorTracker | None = None,
    ) -> None:
        self._token_provider = token_provider
        self._timeout_ms = timeout_ms
        self._tracker = tracker
        self._http = httpx.AsyncClient(base_url=base_url.rstrip("/"), transport=transport)
        # Bound per instance so clients never share cached entries
        self.get_roles = ttl_cache()(self._fetch_roles)
        self.get_service_types = ttl_cache()(self._fetch_service_types)

    async def __aenter__(self) -> "WorshipRosterClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    async def has_session(self) -> bool:
        return bool(await self._token_provider())

    def invalidate_cache(self) -> None:
        """Drop cached reference data, e.g. after sign-out or a team switch."""
        self.get_roles.cache_clear()  # type: ignore[attr-defined]
        self.get_service_types.cache_clear()  # type: ignore[attr-defined]

    # --- Teams ---

    async def get_teams(
        self,
        timeout_ms: int | None = None,
        passthrough: tuple[type[BaseException], ...] = (),
    ) -> list[TeamResponse]:
        payload = await self._request(
            "GET", "/teams", context="get_teams", timeout_ms=timeout_ms, passthrough=passthrough
        )
        return [TeamResponse.model_validate(item) for item in payload["data"]]

    async def get_capabilities(self, team_id: UUID) -> CapabilitiesResponse:
        payload = await self._request(
            "GET", f"/teams/{team_id}/capabilities", context="get_capabilities"
        )
        return CapabilitiesResponse.model_validate(payload)

    async def join_team(self, invite_code: str) -> dict[str, Any]:
        payload = await self._request(
            "POST", "/teams/join", json={"invite_code": invite_code}, context="join_team"
        )
        return payload["data"]  # type: ignore[no-any-return]

    async def _fetch_roles(self, team_id: UUID) -> list[RoleResponse]:
        payload = await self._request("GET", f"/teams/{team_id}/roles", context="get_roles")
        return [RoleResponse.model_validate(item) for item in payload["data"]]

    # --- Services ---

    async def _fetch_service_types(self, team_id: UUID) -> list[ServiceTypeResponse]:
        payload = await self._request(
            "GET", f"/teams/{team_id}/service-types", context="get_service_types"
        )
        return [ServiceTypeResponse.model_validate(item) for item in payload["data"]]

    async def list_services(
        self,
        team_id: UUID,
        start_date: date | None = None,
        end_date: date | None = None,
    ) -> list[ServiceResponse]:
        params: dict[str, str] = {}
        if start_date:
            params["start_date"] = start_date.isoformat()
        if end_date:
            params["end_date"] = end_date.isoformat()
        payload = await self._request(
            "GET", f"/teams/{team_id}/services", params=params, context="list_services"
        )
        return [ServiceResponse.model_validate(item) for item in payload["data"]]

    async def get_roster(self, service_id: UUID) -> list[RosterEntryResponse]:
        payload = await self._request(
            "GET", f"/services/{service_id}/assignments", context="get_roster"
        )
        return [RosterEntryResponse.model_validate(item) for item in payload["data"]]

    async def publish_service(self, service_id: UUID) -> ServiceResponse:
        payload = await self._request(
            "POST", f"/services/{service_id}/publish", context="publish_service"
        )
        return ServiceResponse.model_validate(payload["data"])

    async def sync_requested_dates(
        self,
        team_id: UUID,
        dates: Sequence[date],
        start_date: date,
        end_date: date,
    ) -> SyncResultResponse:
        payload = await self._request(
            "PUT",
            f"/teams/{team_id}/requested-dates",
            json={"dates": list(dates), "start_date": start_date, "end_date": end_date},
            context="sync_requested_dates",
        )
        return SyncResultResponse.model_validate(payload)

    async def schedule_overview(
        self,
        team_id: UUID,
        start_date: date,
        end_date: date,
        dates: Sequence[date] = (),
        local_counts: dict[str, int] | None = None,
    ) -> list[DateOverviewResponse]:
        payload = await self._request(
            "POST",
            f"/teams/{team_id}/schedule-overview",
            json={
                "start_date": start_date,
                "end_date": end_date,
                "dates": list(dates),
                "local_counts": local_counts or {},
            },
            context="schedule_overview",
        )
        return [DateOverviewResponse.model_validate(item) for item in payload["data"]]

    # --- Assignments ---

    async def respond_to_assignment(
        self,
        assignment_id: UUID,
        status: AssignmentStatus,
        decline_reason: str | None = None,
    ) -> AssignmentResponse:
        payload = await self._request(
            "POST",
            f"/assignments/{assignment_id}/respond",
            json={"status": status.value, "decline_reason": decline_reason},
            context="respond_to_assignment",
        )
        return AssignmentResponse.model_validate(payload["data"])

    # --- Availability ---

    async def get_availability_requests(self, team_id: UUID) -> AvailabilitySnapshot:
        payload = await self._request(
            "GET", f"/teams/{team_id}/availability/requests", context="get_availability_requests"
        )
        return AvailabilitySnapshot(
            pending=[
                PendingRequest(**PendingRequestResponse.model_validate(item).model_dump())
                for item in payload["pending"]
            ],
            responded=[
                SubmittedResponse(**SubmittedResponseSchema.model_validate(item).model_dump())
                for item in payload["responded"]
            ],
        )

    async def set_availability(
        self,
        team_id: UUID,
        entries: Sequence[AvailabilityInput],
    ) -> list[AvailabilityResponse]:
        """Write many dates at once. The write is idempotent, so a retry after a timeout is safe."""
        if not entries:
            return []
        payload = await self._request(
            "PUT",
            f"/teams/{team_id}/availability/me",
            json={
                "entries": [
                    {"date": e.date, "is_available": e.is_available, "reason": e.reason}
                    for e in entries
                ]
            },
            context="set_availability",
        )
        return [AvailabilityResponse.model_validate(item) for item in payload["data"]]

    # --- Personal calendar ---

    async def get_upcoming_services(self, limit: int = 5) -> list[UpcomingServiceResponse]:
        payload = await self._request(
            "GET",
            "/me/upcoming-services",
            params={"limit": str(limit)},
            context="get_upcoming_services",
        )
        return [UpcomingServiceResponse.model_validate(item) for item in payload["data"]]

    async def get_personal_calendar(
        self, start_date: date, end_date: date
    ) -> list[CalendarEntryResponse]:
        payload = await self._request(
            "GET",
            "/me/calendar",
            params={"start_date": start_date.isoformat(), "end_date": end_date.isoformat()},
            context="get_personal_calendar",
        )
        return [CalendarEntryResponse.model_validate(item) for item in payload["data"]]

    # --- Transport ---

    async def _request(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        params: dict[str, str] | None = None,
        context: str,
        timeout_ms: int | None = None,
        passthrough: tuple[type[BaseException], ...] = (),
    ) -> Any:
        async def send() -> Any:
            headers = {"Accept": "application/json"}
            token = await self._token_provider()
            if token:
                headers["Authorization"] = f"Bearer {token}"
            content = None
            if json is not None:
                content = _encode(json)
                headers["Content-Type"] = "application/json"

            try:
                response = await self._http.request(
                    method, path, content=content, params=params, headers=headers
                )
            except httpx.TransportError as exc:
                raise AppException(
                    ErrorCode.NETWORK_ERROR, f"Network error: {exc}", status_code=503
                ) from exc
            if response.status_code == 204:
                return None
            payload = _decode(response)
            if response.is_error:
                raise error_from_response(response.status_code, payload)
            return payload

        return await with_retry_and_timeout(
            send,
            timeout_ms if timeout_ms is not None else self._timeout_ms,
            context=context,
            tracker=self._tracker,
            passthrough=passthrough,
        )
