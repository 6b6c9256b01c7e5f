"""Schema versioning for the key-value database."""

import logging
from pathlib import Path

import aiosqlite

from waterwise.engine.errors import PortFailure

logger = logging.getLogger(__name__)

SCHEMA_VERSION = 1
SCHEMA_FILE = Path(__file__).with_name("schema.sql")


async def run_migrations(db_path: Path) -> int:
    """Bring the database at ``db_path`` up to SCHEMA_VERSION.

    The applied version is kept in SQLite's ``user_version`` pragma, so
    running this against an up-to-date file changes nothing.

    Returns:
        The schema version of the database afterwards

    Raises:
        PortFailure: if the file was written by a newer schema
    """
    async with aiosqlite.connect(db_path) as db:
        async with db.execute("PRAGMA user_version") as cursor:
            (version,) = await cursor.fetchone()

        if version > SCHEMA_VERSION:
            raise PortFailure(
                f"{db_path} has schema version {version}, this build knows {SCHEMA_VERSION}"
            )

        if version < SCHEMA_VERSION:
            await db.executescript(SCHEMA_FILE.read_text())
            await db.execute(f"PRAGMA user_version = {SCHEMA_VERSION}")
            await db.commit()
            logger.info(f"Migrated {db_path} from schema v{version} to v{SCHEMA_VERSION}")

    return SCHEMA_VERSION
