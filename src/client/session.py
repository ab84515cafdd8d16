"""Client session: bootstrap, active team selection and sign-out."""

from collections.abc import Awaitable, Callable
from typing import Optional
from uuid import UUID

import structlog

from api.v1.schemas.team import TeamResponse
from client.api_client import WorshipRosterClient
from client.local_state import THEMES, LocalStateStore, Preferences
from core.concurrency import SingleFlight
from core.config import settings
from core.exceptions import OperationTimeoutError
from domain.entities.profile import SUPPORTED_LANGUAGES

logger = structlog.get_logger()

BOOTSTRAP_KEY = "bootstrap"


class ClientSession:
    """Owns the signed-in user's team list and persisted preferences.

    :meth:`bootstrap` loads preferences and fetches teams. Concurrent calls
    share one in-flight run.
    """

    def __init__(
        self,
        api: WorshipRosterClient,
        store: LocalStateStore,
        on_sign_out: Optional[Callable[[], Awaitable[None]]] = None,
    ) -> None:
        self._api = api
        self._store = store
        self._on_sign_out = on_sign_out
        self._flight = SingleFlight()
        self.preferences = Preferences()
        self.teams: list[TeamResponse] = []
        self.initialized = False

    @property
    def is_bootstrapping(self) -> bool:
        return self._flight.is_running(BOOTSTRAP_KEY)

    @property
    def active_team(self) -> Optional[TeamResponse]:
        return next((t for t in self.teams if t.id == self.preferences.active_team_id), None)

    async def bootstrap(self) -> list[TeamResponse]:
        return await self._flight.run(BOOTSTRAP_KEY, self._bootstrap)

    async def _bootstrap(self) -> list[TeamResponse]:
        self.preferences = self._store.load()
        if not await self._api.has_session():
            self.teams = []
            self.initialized = True
            return self.teams

        # A user who never picked a team most likely has none yet, so a
        # timeout is expected and must not be retried or reported
        first_run = self.preferences.active_team_id is None
        try:
            teams = await self._api.get_teams(
                timeout_ms=settings.bootstrap_timeout_ms,
                passthrough=(OperationTimeoutError,) if first_run else (),
            )
        except OperationTimeoutError as exc:
            if first_run:
                logger.info("bootstrap_timeout_without_teams", error=str(exc))
                self.teams = []
                self.initialized = True
                return self.teams
            raise

        self.teams = teams
        self._ensure_active_team()
        self.initialized = True
        logger.info("bootstrap_completed", team_count=len(teams))
        return teams

    def select_team(self, team_id: UUID) -> TeamResponse:
        team = next((t for t in self.teams if t.id == team_id), None)
        if team is None:
            raise ValueError(f"Not a member of team {team_id}")
        self.preferences.active_team_id = team_id
        self._store.save(self.preferences)
        self._api.invalidate_cache()
        return team

    def set_theme(self, theme: str) -> None:
        if theme not in THEMES:
            raise ValueError(f"Unknown theme: {theme}")
        self.preferences.theme = theme
        self._store.save(self.preferences)

    def set_language(self, language: str) -> None:
        if language not in SUPPORTED_LANGUAGES:
            raise ValueError(f"Unsupported language: {language}")
        self.preferences.language = language
        self._store.save(self.preferences)

    async def sign_out(self) -> None:
        """Clear every piece of local state tied to the user."""
        self._store.clear()
        self._api.invalidate_cache()
        self.preferences = Preferences()
        self.teams = []
        self.initialized = False
        if self._on_sign_out is not None:
            await self._on_sign_out()
        logger.info("signed_out")

    def _ensure_active_team(self) -> None:
        ids = [t.id for t in self.teams]
        if self.preferences.active_team_id in ids:
            return
        self.preferences.active_team_id = ids[0] if ids else None
        self._store.save(self.preferences)
