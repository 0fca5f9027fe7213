"""SQLite-backed storage for delegated tokens."""

from __future__ import annotations

import json
import sqlite3
from pathlib import Path
from typing import Any, Dict, List, Optional

_COLUMNS = ("id", "token", "created", "expiry", "boundAccountId", "boundApiToken")


def _ensure_directory(db_path: Path) -> None:
    if db_path.parent and not db_path.parent.exists():
        db_path.parent.mkdir(parents=True, exist_ok=True)


class SQLiteTokenTable:
    """Primary token store: one row per token keyed by ``id``."""

    def __init__(self, db_path: str) -> None:
        self._db_path = Path(db_path)
        _ensure_directory(self._db_path)
        self._ensure_schema()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._db_path, check_same_thread=False)
        conn.row_factory = sqlite3.Row
        return conn

    def _ensure_schema(self) -> None:
        with self._connect() as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS user_tokens (
                    id TEXT PRIMARY KEY,
                    token TEXT,
                    created INTEGER,
                    expiry INTEGER,
                    boundAccountId TEXT,
                    boundApiToken TEXT
                )
                """
            )

    def select_all(self) -> List[Dict[str, Any]]:
        with self._connect() as conn:
            rows = conn.execute(
                "SELECT * FROM user_tokens ORDER BY created ASC"
            ).fetchall()
        return [dict(row) for row in rows]

    def upsert(self, row: Dict[str, Any]) -> None:
        self._write("INSERT OR REPLACE", row)

    def insert_if_absent(self, row: Dict[str, Any]) -> None:
        self._write("INSERT OR IGNORE", row)

    def _write(self, verb: str, row: Dict[str, Any]) -> None:
        if not row.get("id"):
            raise ValueError("Token row must include an 'id'")
        placeholders = ", ".join("?" for _ in _COLUMNS)
        with self._connect() as conn:
            conn.execute(
                f"{verb} INTO user_tokens ({', '.join(_COLUMNS)}) VALUES ({placeholders})",
                tuple(row.get(column) for column in _COLUMNS),
            )

    def delete(self, token_id: str) -> None:
        with self._connect() as conn:
            conn.execute("DELETE FROM user_tokens WHERE id = ?", (token_id,))


class SQLiteBlobStore:
    """Secondary store keeping whole JSON documents under a fixed key."""

    def __init__(self, db_path: str) -> None:
        self._db_path = Path(db_path)
        _ensure_directory(self._db_path)
        self._ensure_schema()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._db_path, check_same_thread=False)
        conn.row_factory = sqlite3.Row
        return conn

    def _ensure_schema(self) -> None:
        with self._connect() as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS kv_blobs (
                    key TEXT PRIMARY KEY,
                    data TEXT NOT NULL
                )
                """
            )

    def get(self, key: str) -> Optional[Any]:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT data FROM kv_blobs WHERE key = ?", (key,)
            ).fetchone()
        if not row:
            return None
        return json.loads(row["data"])

    def put(self, key: str, value: Any) -> None:
        with self._connect() as conn:
            conn.execute(
                """
                INSERT INTO kv_blobs (key, data)
                VALUES (?, ?)
                ON CONFLICT(key) DO UPDATE SET data = excluded.data
                """,
                (key, json.dumps(value)),
            )


__all__ = ["SQLiteBlobStore", "SQLiteTokenTable"]
