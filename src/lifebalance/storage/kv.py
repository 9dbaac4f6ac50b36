"""Key-value backends for the record repository.

Two interchangeable stores with string keys and string values:
- SQLiteKeyValueStore: single-table SQLite file, WAL mode, one connection
  per operation so no handle is held between calls
- InMemoryKeyValueStore: dict-backed, for tests and dry runs

Usage:
    from lifebalance.storage.kv import SQLiteKeyValueStore

    store = SQLiteKeyValueStore("data/lifebalance.db")
    store.set("greeting", "hello")
    store.get("greeting")
"""

import sqlite3
from datetime import datetime, timezone
from pathlib import Path
from typing import Protocol


SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS kv (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL,
    updated_at TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ', 'now'))
);
"""


class KeyValueStore(Protocol):
    """Minimal string key-value interface used by the repository."""

    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...

    def delete(self, key: str) -> None: ...

    def keys(self, prefix: str = "") -> list[str]: ...


class InMemoryKeyValueStore:
    """Dict-backed store; contents vanish with the instance."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self, prefix: str = "") -> list[str]:
        return sorted(k for k in self._data if k.startswith(prefix))


class SQLiteKeyValueStore:
    """Persistent key-value store in a single SQLite table.

    Args:
        db_path: Path to SQLite database file. Parent directories are
            created on first use.
    """

    def __init__(self, db_path: str | Path) -> None:
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_db()

    def _init_db(self) -> None:
        """Initialize database schema if not exists."""
        with self._connect() as conn:
            conn.executescript(SCHEMA_SQL)

    def _connect(self) -> sqlite3.Connection:
        """Create a database connection with WAL mode."""
        conn = sqlite3.connect(str(self.db_path))
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA journal_mode=WAL")
        return conn

    def get(self, key: str) -> str | None:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT value FROM kv WHERE key = ?",
                (key,),
            ).fetchone()
            return row["value"] if row else None

    def set(self, key: str, value: str) -> None:
        """Insert or replace a value, stamping updated_at."""
        now = datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")
        with self._connect() as conn:
            conn.execute(
                "INSERT INTO kv (key, value, updated_at) VALUES (?, ?, ?) "
                "ON CONFLICT(key) DO UPDATE SET "
                "value = excluded.value, updated_at = excluded.updated_at",
                (key, value, now),
            )

    def delete(self, key: str) -> None:
        with self._connect() as conn:
            conn.execute("DELETE FROM kv WHERE key = ?", (key,))

    def keys(self, prefix: str = "") -> list[str]:
        """Keys starting with `prefix`, sorted."""
        with self._connect() as conn:
            rows = conn.execute(
                "SELECT key FROM kv WHERE substr(key, 1, ?) = ? ORDER BY key",
                (len(prefix), prefix),
            ).fetchall()
            return [row["key"] for row in rows]

    def updated_at(self, key: str) -> str | None:
        """Timestamp of the last write to `key`, or None if absent."""
        with self._connect() as conn:
            row = conn.execute(
                "SELECT updated_at FROM kv WHERE key = ?",
                (key,),
            ).fetchone()
            return row["updated_at"] if row else None
