"""SQLite-backed key-value persistence."""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path

import aiosqlite

from ticket_desk.backends.base import BaseBackend
from ticket_desk.errors import BackendError, CorruptStateError, InitializationError

_SCHEMA = """
CREATE TABLE IF NOT EXISTS preferences (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL,
    updated_at TEXT NOT NULL
);
"""


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class SQLiteBackend(BaseBackend):
    """Stores each key's list as a JSON array in a single table row."""

    def __init__(self, path: str | Path = "tickets.db"):
        self.path = str(path)
        self._db: aiosqlite.Connection | None = None

    async def open(self) -> None:
        if self._db is not None:
            return
        try:
            if self.path != ":memory:":
                Path(self.path).parent.mkdir(parents=True, exist_ok=True)
            self._db = await aiosqlite.connect(self.path)
            self._db.row_factory = aiosqlite.Row
            await self._db.executescript(_SCHEMA)
            await self._db.commit()
        except (aiosqlite.Error, OSError) as e:
            raise BackendError(f"Could not open SQLite database {self.path}: {e}") from e

    async def close(self) -> None:
        if self._db:
            await self._db.close()
            self._db = None

    @property
    def db(self) -> aiosqlite.Connection:
        if self._db is None:
            raise InitializationError("SQLiteBackend not opened. Call open() first.")
        return self._db

    async def get_string_list(self, key: str) -> list[str] | None:
        try:
            async with self.db.execute(
                "SELECT value FROM preferences WHERE key = ?", (key,)
            ) as cursor:
                row = await cursor.fetchone()
        except aiosqlite.Error as e:
            raise BackendError(f"Failed to read key '{key}': {e}") from e

        if row is None:
            return None
        try:
            return json.loads(row["value"])
        except json.JSONDecodeError as e:
            raise CorruptStateError(f"Value stored under '{key}' is not valid JSON: {e}") from e

    async def set_string_list(self, key: str, values: list[str]) -> None:
        payload = json.dumps(list(values), ensure_ascii=False)
        try:
            await self.db.execute(
                "INSERT INTO preferences (key, value, updated_at) VALUES (?, ?, ?) "
                "ON CONFLICT(key) DO UPDATE SET value = excluded.value, "
                "updated_at = excluded.updated_at",
                (key, payload, _now()),
            )
            await self.db.commit()
        except aiosqlite.Error as e:
            raise BackendError(f"Failed to write key '{key}': {e}") from e
