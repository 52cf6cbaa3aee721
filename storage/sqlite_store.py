"""SQLite-backed persistent key-value store."""

import logging
import sqlite3
from pathlib import Path
from typing import Optional

from config.exceptions import StorageError

logger = logging.getLogger(__name__)

_CREATE_TABLES_SQL = """
CREATE TABLE IF NOT EXISTS kv_store (
    name TEXT PRIMARY KEY,
    value TEXT NOT NULL,
    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
);
"""


class SqliteKeyValueStore:
    """SQLite store holding one row per name."""

    def __init__(self, db_path: str | Path):
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_db()

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self.db_path))
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA journal_mode = WAL")
        return conn

    def _init_db(self):
        try:
            with self._get_conn() as conn:
                conn.executescript(_CREATE_TABLES_SQL)
        except sqlite3.Error as e:
            raise StorageError(f"Failed to initialize store: {e}", {"path": str(self.db_path)}) from e

    def get(self, name: str) -> Optional[str]:
        try:
            with self._get_conn() as conn:
                row = conn.execute("SELECT value FROM kv_store WHERE name = ?", (name,)).fetchone()
        except sqlite3.Error as e:
            raise StorageError(f"Failed to read '{name}': {e}") from e
        return row["value"] if row else None

    def set(self, name: str, value: str) -> None:
        try:
            with self._get_conn() as conn:
                conn.execute(
                    "INSERT INTO kv_store (name, value) VALUES (?, ?) "
                    "ON CONFLICT(name) DO UPDATE SET value=excluded.value, "
                    "updated_at=CURRENT_TIMESTAMP",
                    (name, value),
                )
        except sqlite3.Error as e:
            raise StorageError(f"Failed to write '{name}': {e}") from e

    def remove(self, name: str) -> None:
        try:
            with self._get_conn() as conn:
                conn.execute("DELETE FROM kv_store WHERE name = ?", (name,))
        except sqlite3.Error as e:
            raise StorageError(f"Failed to remove '{name}': {e}") from e

    def keys(self) -> list[str]:
        try:
            with self._get_conn() as conn:
                rows = conn.execute("SELECT name FROM kv_store ORDER BY name").fetchall()
        except sqlite3.Error as e:
            raise StorageError(f"Failed to list keys: {e}") from e
        return [r["name"] for r in rows]
