"""SQLite-backed key-value store for cached provider results."""

import asyncio
import sqlite3
from pathlib import Path
from typing import Any, Sequence

from daybrief.core.interfaces import KeyValueStore

CACHE_SCHEMA = """
CREATE TABLE IF NOT EXISTS cache (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL,
    expires_at INTEGER NOT NULL,
    created_at INTEGER NOT NULL
)
"""


class SqliteKeyValueStore(KeyValueStore):
    """Run statements against a SQLite file off the event loop."""

    def __init__(self, db_path: Path) -> None:
        self.db_path = db_path
        self._schema_ready = False

    def _connect(self) -> sqlite3.Connection:
        if not self._schema_ready:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        if not self._schema_ready:
            conn.execute(CACHE_SCHEMA)
            conn.commit()
            self._schema_ready = True
        return conn

    def _query(self, sql: str, params: Sequence[Any]) -> list[dict[str, Any]]:
        conn = self._connect()
        try:
            return [dict(row) for row in conn.execute(sql, tuple(params)).fetchall()]
        finally:
            conn.close()

    def _execute(self, sql: str, params: Sequence[Any]) -> None:
        conn = self._connect()
        try:
            conn.execute(sql, tuple(params))
            conn.commit()
        finally:
            conn.close()

    async def query(self, sql: str, params: Sequence[Any] = ()) -> list[dict[str, Any]]:
        return await asyncio.to_thread(self._query, sql, params)

    async def execute(self, sql: str, params: Sequence[Any] = ()) -> None:
        await asyncio.to_thread(self._execute, sql, params)
