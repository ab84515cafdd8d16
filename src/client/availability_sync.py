"""Local cache of availability requests, reconciled with the server.

The cache is only a hint. Every refresh replaces it with the server's
snapshot; cached entries the server no longer reports are dropped without
notice.
"""

from collections.abc import Sequence
from typing import Optional
from uuid import UUID

import structlog

from api.v1.schemas.availability import AvailabilityResponse
from client.api_client import WorshipRosterClient
from core.resilience import Debounced, debounce
from domain.entities.availability import AvailabilityInput
from domain.scheduling.matcher import (
    AvailabilitySnapshot,
    PendingRequest,
    SubmittedResponse,
    SyncResult,
    diff_keys,
)

logger = structlog.get_logger()

# Foreground events arrive in bursts when the app is switched quickly
FOREGROUND_DEBOUNCE_MS = 500


class AvailabilityCache:
    """Pending requests and submitted responses for one team, keyed by request key."""

    def __init__(self) -> None:
        self.pending: dict[str, PendingRequest] = {}
        self.responded: dict[str, SubmittedResponse] = {}

    @property
    def keys(self) -> list[str]:
        return [*self.pending, *self.responded]

    def replace(self, snapshot: AvailabilitySnapshot) -> SyncResult:
        """Swap in a fresh snapshot and report what changed."""
        incoming = [p.key for p in snapshot.pending] + [r.key for r in snapshot.responded]
        result = diff_keys(self.keys, incoming)
        self.pending = {p.key: p for p in snapshot.pending}
        self.responded = {r.key: r for r in snapshot.responded}
        return result

    def clear(self) -> None:
        self.pending.clear()
        self.responded.clear()


class AvailabilitySync:
    """Keeps an :class:`AvailabilityCache` in step with the server for the active team."""

    def __init__(self, api: WorshipRosterClient) -> None:
        self._api = api
        self._team_id: Optional[UUID] = None
        self.cache = AvailabilityCache()
        self._foreground: Debounced = debounce(self.refresh, FOREGROUND_DEBOUNCE_MS)

    @property
    def team_id(self) -> Optional[UUID]:
        return self._team_id

    def set_team(self, team_id: Optional[UUID]) -> None:
        """Switch teams. The previous team's cache is discarded."""
        if team_id != self._team_id:
            self._foreground.cancel()
            self.cache.clear()
            self._team_id = team_id

    async def refresh(self) -> SyncResult:
        if self._team_id is None:
            return self.cache.replace(AvailabilitySnapshot())
        team_id = self._team_id
        snapshot = await self._api.get_availability_requests(team_id)
        if team_id != self._team_id:
            # The team changed while the request was in flight
            return SyncResult()
        result = self.cache.replace(snapshot)
        if result.changed:
            logger.info(
                "availability_cache_reconciled",
                team_id=str(team_id),
                added=len(result.added),
                removed=len(result.removed),
            )
        return result

    def on_foreground(self) -> None:
        """Schedule a refresh when the app returns to the foreground."""
        self._foreground()

    async def submit(self, entries: Sequence[AvailabilityInput]) -> list[AvailabilityResponse]:
        """Send answers, then reconcile so answered requests leave the pending list."""
        if self._team_id is None:
            raise ValueError("No active team")
        written = await self._api.set_availability(self._team_id, entries)
        await self.refresh()
        return written

    def close(self) -> None:
        self._foreground.cancel()
