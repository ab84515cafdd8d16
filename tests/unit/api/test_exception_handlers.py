"""Unit tests for exception handlers."""

import json
from unittest.mock import MagicMock, patch

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from api.exception_handlers import setup_exception_handlers
from core.exceptions import (
    AppException,
    ErrorCode,
    InsufficientPermissionsError,
    InvalidTransitionError,
    OperationTimeoutError,
    ServiceNotFoundError,
)


def _create_test_app(exc: Exception | None = None) -> FastAPI:
    app = FastAPI()
    setup_exception_handlers(app)

    if exc is not None:

        @app.get("/raise")
        async def _() -> None:
            raise exc

    return app


async def _get(app: FastAPI, path: str = "/raise") -> tuple[int, dict]:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        response = await c.get(path)
    return response.status_code, response.json()


class TestAppExceptionEnvelope:
    @pytest.mark.asyncio
    async def test_not_found_carries_code_and_id(self) -> None:
        status, body = await _get(_create_test_app(ServiceNotFoundError("svc-1")))

        assert status == 404
        assert body["error_code"] == "SERVICE_NOT_FOUND"
        assert "svc-1" in body["message"]
        assert body["details"] == {"id": "svc-1"}

    @pytest.mark.asyncio
    async def test_missing_capability_is_403(self) -> None:
        status, body = await _get(_create_test_app(InsufficientPermissionsError("assign_members")))

        assert status == 403
        assert body["error_code"] == "INSUFFICIENT_PERMISSIONS"
        assert body["details"] == {"capability": "assign_members"}

    @pytest.mark.asyncio
    async def test_invalid_transition_details(self) -> None:
        status, body = await _get(
            _create_test_app(InvalidTransitionError("service", "completed", "published"))
        )

        assert status == 400
        assert body["error_code"] == "INVALID_TRANSITION"
        assert body["details"] == {"entity": "service", "from": "completed", "to": "published"}

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("exc", "expected_status"),
        [
            (OperationTimeoutError("publish", 5000), 504),
            (AppException(error_code=ErrorCode.DUPLICATE_ROLE, message="dup", status_code=409), 409),
        ],
    )
    async def test_status_code_follows_exception(
        self, exc: AppException, expected_status: int
    ) -> None:
        status, body = await _get(_create_test_app(exc))

        assert status == expected_status
        assert body["message"] == exc.message


class TestFrameworkErrors:
    @pytest.mark.asyncio
    async def test_http_exception_returns_standard_format(self) -> None:
        from starlette.exceptions import HTTPException

        status, body = await _get(
            _create_test_app(HTTPException(status_code=405, detail="Method Not Allowed"))
        )

        assert status == 405
        assert body["error_code"] == "HTTP_ERROR"
        assert body["message"] == "Method Not Allowed"

    @pytest.mark.asyncio
    async def test_unknown_route_uses_envelope(self) -> None:
        status, body = await _get(_create_test_app(), "/missing")

        assert status == 404
        assert body["error_code"] == "HTTP_ERROR"

    @pytest.mark.asyncio
    async def test_validation_error_returns_field_details(self) -> None:
        from pydantic import BaseModel, Field

        app = _create_test_app()

        class Body(BaseModel):
            name: str = Field(..., min_length=1)

        @app.post("/validate")
        async def _(body: Body) -> dict[str, bool]:
            return {"ok": True}

        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as c:
            response = await c.post("/validate", json={"name": ""})

        assert response.status_code == 422
        body = response.json()
        assert body["error_code"] == "VALIDATION_ERROR"
        assert body["details"][0]["field"] == "body.name"


class TestUnhandledException:
    @pytest.mark.asyncio
    async def test_returns_500_and_reports(self) -> None:
        app = _create_test_app()
        handler = app.exception_handlers.get(Exception)
        assert handler is not None, "Global exception handler not registered"

        mock_request = MagicMock()
        mock_request.state.request_id = "test-req-id"
        mock_request.url.path = "/api/v1/services/1/publish"
        mock_request.method = "POST"
        tracker = MagicMock()

        with patch("api.exception_handlers.get_error_tracker", return_value=tracker):
            response = await handler(mock_request, RuntimeError("Something went wrong"))

        assert response.status_code == 500
        body = json.loads(response.body)
        assert body["error_code"] == "INTERNAL_ERROR"
        assert body["details"]["request_id"] == "test-req-id"
        tracker.capture_error.assert_called_once()
        assert tracker.capture_error.call_args.args[1]["method"] == "POST"
