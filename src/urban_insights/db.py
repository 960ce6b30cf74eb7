import logging
import sqlite3
from datetime import UTC, datetime
from pathlib import Path

from urban_insights.storage import StorageError, StorageQuotaExceeded

logger = logging.getLogger(__name__)

SCHEMA_SQL = """\
CREATE TABLE IF NOT EXISTS kv_store (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL,
    size_bytes INTEGER NOT NULL,
    updated_at TEXT NOT NULL
);
"""

DEFAULT_DB_DIR = Path("sessions")


def _now() -> str:
    return datetime.now(UTC).strftime("%Y-%m-%d %H:%M:%S")


class SessionDB:
    """SQLite-backed key/value store for persisted chat sessions.

    ``quota_bytes`` mimics the per-origin limit of browser storage: a value
    larger than the quota is rejected and the stored value is left untouched.
    """

    def __init__(
        self, db_path: Path | None = None, quota_bytes: int | None = None
    ) -> None:
        self.db_path = db_path or (DEFAULT_DB_DIR / "sessions.db")
        self.quota_bytes = quota_bytes
        self._conn: sqlite3.Connection | None = None

    @property
    def conn(self) -> sqlite3.Connection:
        if self._conn is None:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            self._conn = sqlite3.connect(str(self.db_path))
            self._conn.row_factory = sqlite3.Row
            self._conn.execute("PRAGMA journal_mode=WAL")
            self._init_schema()
        return self._conn

    def _init_schema(self) -> None:
        cursor = self.conn.executescript(SCHEMA_SQL)
        cursor.close()
        self.conn.commit()

    def close(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    def get_item(self, key: str) -> str | None:
        row = self.conn.execute(
            "SELECT value FROM kv_store WHERE key = ?", (key,)
        ).fetchone()
        return row["value"] if row else None

    def set_item(self, key: str, value: str) -> None:
        size = len(value.encode("utf-8"))
        if self.quota_bytes is not None and size > self.quota_bytes:
            raise StorageQuotaExceeded(key, size, self.quota_bytes)
        try:
            self.conn.execute(
                """INSERT INTO kv_store (key, value, size_bytes, updated_at)
                VALUES (?, ?, ?, ?)
                ON CONFLICT(key) DO UPDATE SET
                    value = excluded.value,
                    size_bytes = excluded.size_bytes,
                    updated_at = excluded.updated_at""",
                (key, value, size, _now()),
            )
            self.conn.commit()
        except sqlite3.Error as e:
            self.conn.rollback()
            raise StorageError(f"Failed to write {key!r}: {e}") from e
        logger.debug("Stored %d bytes under %s", size, key)

    def get_status_summary(self) -> dict:
        rows = self.conn.execute(
            "SELECT key, size_bytes, updated_at FROM kv_store ORDER BY key"
        ).fetchall()
        return {
            "keys": len(rows),
            "total_bytes": sum(r["size_bytes"] for r in rows),
            "entries": [dict(r) for r in rows],
        }
