"""
SQLite store for durable engine state.

Human-inspectable single-file archive of drafts and cached lists, so both
survive process restarts.
"""

from __future__ import annotations

import sqlite3
from datetime import datetime
from pathlib import Path

from inspection_sync.storage.base import BaseStore


class SQLiteStore(BaseStore):
    """
    SQLite-based key-value storage.

    Features:
    - Human-inspectable database
    - ACID writes, WAL journal
    - Portable single-file database
    """

    def __init__(self, db_path: str | Path):
        self._db_path = Path(db_path).expanduser()
        self._conn: sqlite3.Connection | None = None

    async def initialize(self) -> None:
        """Initialize SQLite database and table."""
        if self._conn is not None:
            return

        self._db_path.parent.mkdir(parents=True, exist_ok=True)

        self._conn = sqlite3.connect(str(self._db_path))
        self._conn.row_factory = sqlite3.Row

        # Enable WAL mode for better concurrency
        self._conn.execute("PRAGMA journal_mode=WAL")

        self._conn.execute("""
            CREATE TABLE IF NOT EXISTS kv (
                key TEXT PRIMARY KEY,
                value TEXT NOT NULL,
                updated_at TEXT NOT NULL
            )
        """)
        self._conn.commit()

    async def close(self) -> None:
        """Close database connection."""
        if self._conn:
            self._conn.close()
            self._conn = None

    def _require_conn(self) -> sqlite3.Connection:
        if self._conn is None:
            raise RuntimeError("SQLiteStore used before initialize()")
        return self._conn

    async def get(self, key: str) -> str | None:
        conn = self._require_conn()
        row = conn.execute("SELECT value FROM kv WHERE key = ?", (key,)).fetchone()
        return row["value"] if row else None

    async def set(self, key: str, value: str) -> None:
        conn = self._require_conn()
        conn.execute(
            """
            INSERT INTO kv (key, value, updated_at) VALUES (?, ?, ?)
            ON CONFLICT(key) DO UPDATE SET value = excluded.value, updated_at = excluded.updated_at
            """,
            (key, value, datetime.now().isoformat()),
        )
        conn.commit()

    async def delete(self, key: str) -> bool:
        conn = self._require_conn()
        cursor = conn.execute("DELETE FROM kv WHERE key = ?", (key,))
        conn.commit()
        return cursor.rowcount > 0

    async def keys(self, prefix: str = "") -> list[str]:
        conn = self._require_conn()
        # Escape LIKE wildcards so the prefix is matched literally
        escaped = prefix.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
        rows = conn.execute(
            "SELECT key FROM kv WHERE key LIKE ? ESCAPE '\\' ORDER BY key",
            (f"{escaped}%",),
        ).fetchall()
        return [row["key"] for row in rows]
