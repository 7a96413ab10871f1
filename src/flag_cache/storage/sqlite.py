"""SQLiteStorage — durable, single-file storage backend."""

from __future__ import annotations

import json
import sqlite3
from typing import Any

from flag_cache.exceptions import StorageError
from flag_cache.storage.base import Storage

_CREATE_TABLE = """
CREATE TABLE IF NOT EXISTS flag_cache_storage (
    key   TEXT PRIMARY KEY,
    value TEXT NOT NULL
)
"""


class SQLiteStorage(Storage):
    """Persistent storage backed by a single SQLite file.

    Blobs are stored as JSON text.  The connection is opened on first use
    and released by :meth:`close` or by leaving a ``with`` block.

    Parameters:
        db_path: Path to the SQLite database file.  Use ``":memory:"``
                 for an in-memory database (useful for testing).
    """

    def __init__(self, db_path: str = "flag_cache.db") -> None:
        self._db_path = db_path
        self._db: sqlite3.Connection | None = None

    def _connect(self) -> sqlite3.Connection:
        if self._db is None:
            try:
                self._db = sqlite3.connect(self._db_path)
                self._db.execute(_CREATE_TABLE)
                self._db.commit()
            except sqlite3.Error as exc:
                self._db = None
                raise StorageError("connect", str(exc)) from exc
        return self._db

    def close(self) -> None:
        if self._db:
            self._db.close()
            self._db = None

    def __enter__(self) -> SQLiteStorage:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # ── Storage protocol ─────────────────────────────────────

    def get(self, key: str) -> Any | None:
        db = self._connect()
        try:
            row = db.execute(
                "SELECT value FROM flag_cache_storage WHERE key = ?",
                (key,),
            ).fetchone()
        except sqlite3.Error as exc:
            raise StorageError("get", str(exc)) from exc
        if row is None:
            return None
        try:
            return json.loads(row[0])
        except json.JSONDecodeError as exc:
            raise StorageError("get", f"corrupt blob under '{key}': {exc}") from exc

    def set(self, key: str, value: Any) -> None:
        try:
            encoded = json.dumps(value)
        except (TypeError, ValueError) as exc:
            raise StorageError("set", f"value is not JSON-serializable: {exc}") from exc
        db = self._connect()
        try:
            db.execute(
                "INSERT OR REPLACE INTO flag_cache_storage (key, value) VALUES (?, ?)",
                (key, encoded),
            )
            db.commit()
        except sqlite3.Error as exc:
            raise StorageError("set", str(exc)) from exc

    def remove(self, key: str) -> None:
        db = self._connect()
        try:
            db.execute("DELETE FROM flag_cache_storage WHERE key = ?", (key,))
            db.commit()
        except sqlite3.Error as exc:
            raise StorageError("remove", str(exc)) from exc
