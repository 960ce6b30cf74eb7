from pathlib import Path

import pytest

from urban_insights.db import SessionDB
from urban_insights.models.session import ChatSession
from urban_insights.sessions import load_chat_sessions, save_chat_sessions
from urban_insights.storage import MemoryStorage, StorageQuotaExceeded


class TestSessionDB:
    def _make_db(self, tmp_path: Path, quota: int | None = None) -> SessionDB:
        return SessionDB(tmp_path / "test.db", quota_bytes=quota)

    def test_schema_creation(self, tmp_path: Path) -> None:
        db = self._make_db(tmp_path)
        tables = db.conn.execute(
            "SELECT name FROM sqlite_master WHERE type='table' ORDER BY name"
        ).fetchall()
        assert "kv_store" in {r["name"] for r in tables}
        db.close()

    def test_get_missing_key(self, tmp_path: Path) -> None:
        db = self._make_db(tmp_path)
        assert db.get_item("nope") is None
        db.close()

    def test_set_and_overwrite(self, tmp_path: Path) -> None:
        db = self._make_db(tmp_path)
        db.set_item("k", "one")
        db.set_item("k", "two")
        assert db.get_item("k") == "two"
        summary = db.get_status_summary()
        assert summary["keys"] == 1
        assert summary["total_bytes"] == 3
        db.close()

    def test_quota_rejects_and_keeps_previous_value(self, tmp_path: Path) -> None:
        db = self._make_db(tmp_path, quota=5)
        db.set_item("k", "small")
        with pytest.raises(StorageQuotaExceeded) as exc:
            db.set_item("k", "much too large")
        assert exc.value.quota == 5
        assert db.get_item("k") == "small"
        db.close()

    def test_persists_across_connections(self, tmp_path: Path) -> None:
        db = self._make_db(tmp_path)
        db.set_item("k", "ü")
        db.close()
        reopened = self._make_db(tmp_path)
        assert reopened.get_item("k") == "ü"
        assert reopened.get_status_summary()["total_bytes"] == 2
        reopened.close()

    def test_creates_parent_directory(self, tmp_path: Path) -> None:
        db = SessionDB(tmp_path / "nested" / "dir" / "s.db")
        db.set_item("k", "v")
        assert (tmp_path / "nested" / "dir" / "s.db").exists()
        db.close()

    def test_session_round_trip(self, tmp_path: Path) -> None:
        session = ChatSession(
            id="s1",
            title="Parks",
            created_at="2025-01-01T00:00:00Z",
            updated_at="2025-01-02T00:00:00Z",
        )
        db = self._make_db(tmp_path)
        assert save_chat_sessions([session], db)
        loaded = load_chat_sessions(db)
        assert [s.id for s in loaded] == ["s1"]
        assert loaded[0].title == "Parks"
        db.close()


class TestMemoryStorage:
    def test_set_get(self):
        storage = MemoryStorage()
        storage.set_item("k", "v")
        assert storage.get_item("k") == "v"
        assert storage.get_item("other") is None

    def test_quota_counts_utf8_bytes(self):
        storage = MemoryStorage(quota_bytes=3)
        storage.set_item("k", "abc")
        with pytest.raises(StorageQuotaExceeded):
            storage.set_item("k", "éé")
        assert storage.get_item("k") == "abc"

    def test_quota_message(self):
        err = StorageQuotaExceeded("k", 10, 4)
        assert str(err) == "Writing 10 bytes under 'k' exceeds the 4-byte quota"
