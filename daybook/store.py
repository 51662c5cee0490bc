from __future__ import annotations

import asyncio
import copy
import json
import sqlite3
from pathlib import Path
from typing import Any, Protocol


class SessionStore(Protocol):
    async def get(self, namespace: str, key: str) -> Any | None: ...

    async def set(self, namespace: str, key: str, value: Any) -> None: ...

    async def remove(self, namespace: str, key: str) -> None: ...


class MemoryStore:
    """In-process store; values are deep-copied so callers never alias persisted state."""

    def __init__(self) -> None:
        self._entries: dict[tuple[str, str], Any] = {}

    async def get(self, namespace: str, key: str) -> Any | None:
        value = self._entries.get((namespace, key))
        return copy.deepcopy(value)

    async def set(self, namespace: str, key: str, value: Any) -> None:
        self._entries[(namespace, key)] = copy.deepcopy(value)

    async def remove(self, namespace: str, key: str) -> None:
        self._entries.pop((namespace, key), None)


class SqliteStore:
    """Thin SQLite access layer exposing the namespaced key-value contract."""

    def __init__(self, db_path: str | Path) -> None:
        # Calls are dispatched to worker threads one at a time, never concurrently.
        self._conn = sqlite3.connect(str(db_path), check_same_thread=False)
        self._conn.row_factory = sqlite3.Row
        self._closed = False

    def close(self) -> None:
        if self._closed:
            return
        self._conn.close()
        self._closed = True

    def initialize(self) -> None:
        # entries: one JSON document per (namespace, key).
        self._conn.executescript(
            """
            CREATE TABLE IF NOT EXISTS entries (
              namespace TEXT NOT NULL,
              key TEXT NOT NULL,
              value TEXT NOT NULL,
              PRIMARY KEY (namespace, key)
            );
            """
        )
        self._conn.commit()

    async def get(self, namespace: str, key: str) -> Any | None:
        return await asyncio.to_thread(self._get, namespace, key)

    async def set(self, namespace: str, key: str, value: Any) -> None:
        await asyncio.to_thread(self._set, namespace, key, value)

    async def remove(self, namespace: str, key: str) -> None:
        await asyncio.to_thread(self._remove, namespace, key)

    def _get(self, namespace: str, key: str) -> Any | None:
        row = self._conn.execute(
            "SELECT value FROM entries WHERE namespace = ? AND key = ?",
            (namespace, key),
        ).fetchone()
        if row is None:
            return None
        return json.loads(row["value"])

    def _set(self, namespace: str, key: str, value: Any) -> None:
        self._conn.execute(
            """
            INSERT INTO entries (namespace, key, value)
            VALUES (?, ?, ?)
            ON CONFLICT(namespace, key)
            DO UPDATE SET value=excluded.value
            """,
            (namespace, key, json.dumps(value)),
        )
        self._conn.commit()

    def _remove(self, namespace: str, key: str) -> None:
        self._conn.execute(
            "DELETE FROM entries WHERE namespace = ? AND key = ?",
            (namespace, key),
        )
        self._conn.commit()
