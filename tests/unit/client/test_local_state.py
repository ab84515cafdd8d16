"""Tests for persisted client preferences."""

from pathlib import Path
from uuid import uuid4

import orjson

from client.local_state import PREFERENCES_KEY, LocalStateStore, Preferences


class TestLocalStateStore:
    """Tests for LocalStateStore."""

    def test_missing_file_yields_defaults(self, tmp_path: Path) -> None:
        store = LocalStateStore(tmp_path / "state.json")

        prefs = store.load()

        assert prefs == Preferences()
        assert prefs.theme == "system"
        assert prefs.language == "en"

    def test_save_then_load(self, tmp_path: Path) -> None:
        store = LocalStateStore(tmp_path / "nested" / "state.json")
        team_id = uuid4()

        store.save(Preferences(active_team_id=team_id, theme="dark", language="ko"))
        prefs = LocalStateStore(store.path).load()

        assert prefs.active_team_id == team_id
        assert prefs.theme == "dark"
        assert prefs.language == "ko"

    def test_stored_under_namespaced_key(self, tmp_path: Path) -> None:
        path = tmp_path / "state.json"
        path.write_bytes(orjson.dumps({"other-app": {"x": 1}}))
        store = LocalStateStore(path)

        store.save(Preferences(theme="light"))

        document = orjson.loads(path.read_bytes())
        assert document["other-app"] == {"x": 1}
        assert document[PREFERENCES_KEY]["theme"] == "light"

    def test_clear_keeps_unrelated_keys(self, tmp_path: Path) -> None:
        path = tmp_path / "state.json"
        store = LocalStateStore(path)
        store.save(Preferences(theme="dark"))
        document = orjson.loads(path.read_bytes())
        document["other-app"] = True
        path.write_bytes(orjson.dumps(document))

        store.clear()

        assert orjson.loads(path.read_bytes()) == {"other-app": True}
        assert store.load() == Preferences()

    def test_corrupt_file_yields_defaults(self, tmp_path: Path) -> None:
        path = tmp_path / "state.json"
        path.write_text("{not json")

        assert LocalStateStore(path).load() == Preferences()

    def test_invalid_fields_fall_back(self, tmp_path: Path) -> None:
        path = tmp_path / "state.json"
        path.write_bytes(
            orjson.dumps(
                {
                    PREFERENCES_KEY: {
                        "active_team_id": "not-a-uuid",
                        "theme": "neon",
                        "language": "fr",
                    }
                }
            )
        )

        assert LocalStateStore(path).load() == Preferences()
