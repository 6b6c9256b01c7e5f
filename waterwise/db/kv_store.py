"""SQLite-backed key-value store."""

import json
import logging
from pathlib import Path
from typing import Any

import aiosqlite

from waterwise.engine.errors import PortFailure

logger = logging.getLogger(__name__)


class SqliteKeyValueStore:
    """Key-value persistence on a single SQLite table.

    Values are stored as JSON text.
    """

    def __init__(self, db_path: Path):
        self.db_path = db_path
        self._db: aiosqlite.Connection | None = None

    async def connect(self) -> None:
        """Open database connection."""
        self._db = await aiosqlite.connect(self.db_path)
        self._db.row_factory = aiosqlite.Row
        logger.info(f"Connected to database at {self.db_path}")

    async def close(self) -> None:
        """Close database connection."""
        if self._db:
            await self._db.close()
            self._db = None
            logger.info("Database connection closed")

    @property
    def db(self) -> aiosqlite.Connection:
        """Get the database connection."""
        if self._db is None:
            raise PortFailure("Database not connected")
        return self._db

    async def get(self, key: str) -> Any | None:
        """Read and decode a value, or None if the key is absent."""
        try:
            async with self.db.execute(
                "SELECT value FROM kv WHERE key = ?", (key,)
            ) as cursor:
                row = await cursor.fetchone()
        except aiosqlite.Error as e:
            raise PortFailure(f"Failed to read {key!r}: {e}") from e

        if row is None:
            return None

        try:
            return json.loads(row["value"])
        except json.JSONDecodeError as e:
            raise PortFailure(f"Corrupt value stored under {key!r}") from e

    async def set(self, key: str, value: Any) -> None:
        """Encode and store a value, replacing any existing one."""
        try:
            encoded = json.dumps(value)
        except (TypeError, ValueError) as e:
            raise PortFailure(f"Value for {key!r} is not serializable: {e}") from e

        try:
            await self.db.execute(
                """
                INSERT INTO kv (key, value) VALUES (?, ?)
                ON CONFLICT(key) DO UPDATE SET
                    value = excluded.value,
                    updated_at = datetime('now')
                """,
                (key, encoded),
            )
            await self.db.commit()
        except aiosqlite.Error as e:
            raise PortFailure(f"Failed to write {key!r}: {e}") from e

    async def remove(self, key: str) -> None:
        """Delete a key. Missing keys are ignored."""
        try:
            await self.db.execute("DELETE FROM kv WHERE key = ?", (key,))
            await self.db.commit()
        except aiosqlite.Error as e:
            raise PortFailure(f"Failed to remove {key!r}: {e}") from e
