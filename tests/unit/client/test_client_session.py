"""Tests for ClientSession bootstrap and preferences."""

import asyncio
from datetime import datetime
from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock, MagicMock
from uuid import UUID, uuid4

import httpx
import orjson
import pytest

from api.v1.schemas.team import TeamResponse
from client.api_client import WorshipRosterClient
from client.local_state import LocalStateStore, Preferences
from client.session import ClientSession
from core.config import settings
from core.exceptions import OperationTimeoutError


def _team(team_id: UUID | None = None, name: str = "Grace Worship") -> TeamResponse:
    now = datetime(2026, 3, 1, 9, 0)
    return TeamResponse(
        id=team_id or uuid4(),
        name=name,
        description=None,
        owner_id=uuid4(),
        color="#D4A574",
        timezone="UTC",
        created_at=now,
        updated_at=now,
    )


@pytest.fixture
def api() -> MagicMock:
    api = MagicMock()
    api.has_session = AsyncMock(return_value=True)
    api.get_teams = AsyncMock(return_value=[])
    return api


@pytest.fixture
def store(tmp_path: Path) -> LocalStateStore:
    return LocalStateStore(tmp_path / "state.json")


class TestBootstrap:
    """Tests for ClientSession.bootstrap."""

    @pytest.mark.asyncio
    async def test_signed_out_skips_fetch(self, api: MagicMock, store: LocalStateStore) -> None:
        api.has_session.return_value = False
        session = ClientSession(api, store)

        teams = await session.bootstrap()

        assert teams == []
        assert session.initialized is True
        api.get_teams.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_picks_first_team_when_none_stored(
        self, api: MagicMock, store: LocalStateStore
    ) -> None:
        first, second = _team(name="First"), _team(name="Second")
        api.get_teams.return_value = [first, second]
        session = ClientSession(api, store)

        await session.bootstrap()

        assert session.active_team == first
        assert store.load().active_team_id == first.id

    @pytest.mark.asyncio
    async def test_keeps_stored_team(self, api: MagicMock, store: LocalStateStore) -> None:
        first, second = _team(), _team()
        store.save(Preferences(active_team_id=second.id))
        api.get_teams.return_value = [first, second]
        session = ClientSession(api, store)

        await session.bootstrap()

        assert session.active_team == second

    @pytest.mark.asyncio
    async def test_stale_stored_team_is_replaced(
        self, api: MagicMock, store: LocalStateStore
    ) -> None:
        team = _team()
        store.save(Preferences(active_team_id=uuid4()))
        api.get_teams.return_value = [team]
        session = ClientSession(api, store)

        await session.bootstrap()

        assert session.preferences.active_team_id == team.id

    @pytest.mark.asyncio
    async def test_concurrent_calls_share_one_fetch(
        self, api: MagicMock, store: LocalStateStore
    ) -> None:
        release = asyncio.Event()
        team = _team()

        async def slow_get_teams(**kwargs: Any) -> list[TeamResponse]:
            await release.wait()
            return [team]

        api.get_teams.side_effect = slow_get_teams
        session = ClientSession(api, store)

        first = asyncio.ensure_future(session.bootstrap())
        second = asyncio.ensure_future(session.bootstrap())
        await asyncio.sleep(0)
        assert session.is_bootstrapping is True
        release.set()
        results = await asyncio.gather(first, second)

        assert results == [[team], [team]]
        assert api.get_teams.await_count == 1
        assert session.is_bootstrapping is False

    @pytest.mark.asyncio
    async def test_timeout_without_stored_team_is_benign(
        self, api: MagicMock, store: LocalStateStore
    ) -> None:
        api.get_teams.side_effect = OperationTimeoutError("get_teams", 2000)
        session = ClientSession(api, store)

        teams = await session.bootstrap()

        assert teams == []
        assert session.initialized is True
        assert api.get_teams.call_args.kwargs["passthrough"] == (OperationTimeoutError,)

    @pytest.mark.asyncio
    async def test_timeout_with_stored_team_raises(
        self, api: MagicMock, store: LocalStateStore
    ) -> None:
        store.save(Preferences(active_team_id=uuid4()))
        api.get_teams.side_effect = OperationTimeoutError("get_teams", 2000)
        session = ClientSession(api, store)

        with pytest.raises(OperationTimeoutError):
            await session.bootstrap()

        assert session.initialized is False
        assert api.get_teams.call_args.kwargs["passthrough"] == ()


async def _token() -> str:
    return "token-123"


async def _stalled(request: httpx.Request) -> httpx.Response:
    await asyncio.sleep(5)
    return httpx.Response(200, content=orjson.dumps({"data": []}))


class TestBootstrapOverHttp:
    """Bootstrap against a real client whose server never answers in time."""

    @pytest.fixture(autouse=True)
    def fast_timeouts(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(settings, "bootstrap_timeout_ms", 20)
        monkeypatch.setattr(settings, "retry_base_delay_ms", 0)
        monkeypatch.setattr(settings, "retry_max_attempts", 3)

    @pytest.mark.asyncio
    async def test_first_run_timeout_is_not_retried_or_reported(
        self, store: LocalStateStore
    ) -> None:
        calls: list[httpx.Request] = []
        tracker = MagicMock()

        async def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return await _stalled(request)

        async with WorshipRosterClient(
            _token, base_url="http://test", transport=httpx.MockTransport(handler), tracker=tracker
        ) as api:
            teams = await ClientSession(api, store).bootstrap()

        assert teams == []
        assert len(calls) == 1
        tracker.capture_error.assert_not_called()

    @pytest.mark.asyncio
    async def test_timeout_with_stored_team_is_retried_and_reported(
        self, store: LocalStateStore
    ) -> None:
        store.save(Preferences(active_team_id=uuid4()))
        calls: list[httpx.Request] = []
        tracker = MagicMock()

        async def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return await _stalled(request)

        async with WorshipRosterClient(
            _token, base_url="http://test", transport=httpx.MockTransport(handler), tracker=tracker
        ) as api:
            with pytest.raises(OperationTimeoutError):
                await ClientSession(api, store).bootstrap()

        assert len(calls) == 3
        tracker.capture_error.assert_called_once()
        assert tracker.capture_error.call_args.args[1]["context"] == "get_teams"


class TestPreferences:
    """Tests for team selection, theme and language."""

    @pytest.mark.asyncio
    async def test_select_team_persists_and_invalidates(
        self, api: MagicMock, store: LocalStateStore
    ) -> None:
        first, second = _team(), _team()
        api.get_teams.return_value = [first, second]
        session = ClientSession(api, store)
        await session.bootstrap()

        selected = session.select_team(second.id)

        assert selected == second
        assert store.load().active_team_id == second.id
        api.invalidate_cache.assert_called_once()

    def test_select_unknown_team(self, api: MagicMock, store: LocalStateStore) -> None:
        session = ClientSession(api, store)

        with pytest.raises(ValueError):
            session.select_team(uuid4())

    def test_theme_and_language(self, api: MagicMock, store: LocalStateStore) -> None:
        session = ClientSession(api, store)

        session.set_theme("dark")
        session.set_language("ko")

        prefs = store.load()
        assert prefs.theme == "dark"
        assert prefs.language == "ko"

    def test_rejects_unknown_values(self, api: MagicMock, store: LocalStateStore) -> None:
        session = ClientSession(api, store)

        with pytest.raises(ValueError):
            session.set_theme("neon")
        with pytest.raises(ValueError):
            session.set_language("fr")


class TestSignOut:
    """Tests for ClientSession.sign_out."""

    @pytest.mark.asyncio
    async def test_clears_local_state(self, api: MagicMock, store: LocalStateStore) -> None:
        api.get_teams.return_value = [_team()]
        on_sign_out = AsyncMock()
        session = ClientSession(api, store, on_sign_out=on_sign_out)
        await session.bootstrap()
        session.set_theme("dark")

        await session.sign_out()

        assert session.teams == []
        assert session.initialized is False
        assert session.preferences == Preferences()
        assert store.load() == Preferences()
        api.invalidate_cache.assert_called_once()
        on_sign_out.assert_awaited_once()
