"""Persisted client preferences.

Preferences live in one JSON file under the namespaced key
``worship-roster:preferences`` so the file can be shared with other state.
"""

import os
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Optional
from uuid import UUID

import orjson
import structlog

from core.config import settings
from domain.entities.profile import SUPPORTED_LANGUAGES

logger = structlog.get_logger()

PREFERENCES_KEY = "worship-roster:preferences"

THEMES = ("system", "light", "dark")


@dataclass
class Preferences:
    active_team_id: Optional[UUID] = None
    theme: str = "system"
    language: str = "en"

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> "Preferences":
        """Build preferences from stored JSON, falling back to defaults per field."""
        prefs = cls()
        team_id = raw.get("active_team_id")
        if team_id:
            try:
                prefs.active_team_id = UUID(str(team_id))
            except ValueError:
                logger.warning("local_state_invalid_team_id", value=team_id)
        if raw.get("theme") in THEMES:
            prefs.theme = raw["theme"]
        if raw.get("language") in SUPPORTED_LANGUAGES:
            prefs.language = raw["language"]
        return prefs


class LocalStateStore:
    """Loads and saves :class:`Preferences` to a JSON file."""

    def __init__(self, path: str | Path = settings.local_state_path) -> None:
        self._path = Path(path).expanduser()

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> Preferences:
        """Read preferences. A missing or unreadable file yields defaults."""
        document = self._read()
        raw = document.get(PREFERENCES_KEY)
        return Preferences.from_dict(raw) if isinstance(raw, dict) else Preferences()

    def save(self, preferences: Preferences) -> None:
        document = self._read()
        document[PREFERENCES_KEY] = asdict(preferences)
        self._write(document)

    def clear(self) -> None:
        """Forget the stored preferences, keeping any unrelated keys."""
        document = self._read()
        if document.pop(PREFERENCES_KEY, None) is not None:
            self._write(document)

    def _read(self) -> dict[str, Any]:
        try:
            document = orjson.loads(self._path.read_bytes())
        except FileNotFoundError:
            return {}
        except (OSError, orjson.JSONDecodeError) as exc:
            logger.warning("local_state_unreadable", path=str(self._path), error=str(exc))
            return {}
        return document if isinstance(document, dict) else {}

    def _write(self, document: dict[str, Any]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self._path.with_suffix(self._path.suffix + ".tmp")
        tmp.write_bytes(orjson.dumps(document, option=orjson.OPT_INDENT_2))
        os.replace(tmp, self._path)
