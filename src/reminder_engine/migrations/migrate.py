"""
Database Migration Runner

Applies the bundled *.sql files in name order. Applied file names are
recorded in schema_migrations, so re-running only picks up new files.
Each file runs in its own transaction; the first failure stops the run.
"""
import asyncio
import logging
from pathlib import Path
from typing import List, Optional

import asyncpg

from reminder_engine.config import Config

logger = logging.getLogger("reminders.migrations")

MIGRATIONS_DIR = Path(__file__).parent

_CREATE_TRACKING_TABLE = """
    CREATE TABLE IF NOT EXISTS schema_migrations (
        name        TEXT PRIMARY KEY,
        applied_at  TIMESTAMPTZ NOT NULL DEFAULT NOW()
    )
"""


def pending_migrations(applied: set, directory: Path = MIGRATIONS_DIR) -> List[Path]:
    return [path for path in sorted(directory.glob("*.sql")) if path.name not in applied]


async def apply_migrations(dsn: Optional[str] = None, directory: Path = MIGRATIONS_DIR) -> List[str]:
    """Apply unapplied migrations, return the names applied in this run"""
    conn = await asyncpg.connect(dsn or Config.get_postgres_dsn())
    applied_now = []
    try:
        await conn.execute(_CREATE_TRACKING_TABLE)
        applied = {row["name"] for row in await conn.fetch("SELECT name FROM schema_migrations")}

        for path in pending_migrations(applied, directory):
            logger.info(f"Applying migration {path.name}")
            async with conn.transaction():
                await conn.execute(path.read_text())
                await conn.execute("INSERT INTO schema_migrations (name) VALUES ($1)", path.name)
            applied_now.append(path.name)
    finally:
        await conn.close()

    if applied_now:
        logger.info(f"Applied {len(applied_now)} migration(s): {', '.join(applied_now)}")
    else:
        logger.info("Database schema is up to date")
    return applied_now


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    asyncio.run(apply_migrations())
