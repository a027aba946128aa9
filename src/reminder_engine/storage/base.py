"""
Base Storage

One asyncpg pool per process (Database), shared by every storage class.
Storages only add queries on top of the helpers defined here.
"""
import asyncio
import logging
import os
import time
from typing import Any, Optional

import asyncpg

logger = logging.getLogger("reminders.storage")


def affected_rows(status: str) -> int:
    """Row count from an asyncpg command status ('UPDATE 3', 'DELETE 0')"""
    try:
        return int(status.rsplit(" ", 1)[-1])
    except (ValueError, AttributeError):
        return 0


class Database:
    """PostgreSQL connection pool with connect retries and fork detection"""

    def __init__(
        self,
        dsn: str,
        min_size: int = 1,
        max_size: int = 5,
        connect_attempts: int = 3,
        retry_delay: float = 1.0,
    ):
        self.dsn = dsn
        self.min_size = min_size
        self.max_size = max_size
        self.connect_attempts = connect_attempts
        self.retry_delay = retry_delay
        self.pool: Optional[asyncpg.Pool] = None
        self._pid = os.getpid()

    @property
    def is_connected(self) -> bool:
        return self.pool is not None and self._pid == os.getpid()

    async def connect(self):
        """Create the pool, retrying a few times while the server comes up"""
        if self.is_connected:
            return

        if self.pool is not None:
            # Pool inherited from the parent process is unusable here
            logger.info(f"Process changed ({self._pid} -> {os.getpid()}), creating new pool")
            self.pool = None
        self._pid = os.getpid()

        started = time.monotonic()
        for attempt in range(1, self.connect_attempts + 1):
            try:
                pool = await asyncpg.create_pool(
                    self.dsn,
                    min_size=self.min_size,
                    max_size=self.max_size,
                    command_timeout=60,
                )
                async with pool.acquire() as conn:
                    await conn.fetchval("SELECT 1")
                self.pool = pool
                duration_ms = round((time.monotonic() - started) * 1000, 2)
                logger.info(f"PostgreSQL connected in {duration_ms}ms (attempt {attempt}/{self.connect_attempts})")
                return
            except (OSError, asyncpg.PostgresError, asyncio.TimeoutError) as e:
                logger.error(f"PostgreSQL connection failed (attempt {attempt}/{self.connect_attempts}): {e}")
                if attempt < self.connect_attempts:
                    await asyncio.sleep(self.retry_delay)

        raise ConnectionError("Failed to connect to PostgreSQL after all retries")

    async def close(self):
        if self.pool:
            await self.pool.close()
            self.pool = None
            logger.info("PostgreSQL pool closed")

    def acquire(self):
        if self.pool is None:
            raise ConnectionError("Database is not connected")
        return self.pool.acquire()


class BaseStorage:
    """Query helpers over a shared Database"""

    def __init__(self, db: Database):
        self.db = db

    async def execute(self, query: str, *args) -> str:
        """Execute a statement and return its command status"""
        async with self.db.acquire() as conn:
            return await conn.execute(query, *args)

    async def fetch(self, query: str, *args) -> list:
        async with self.db.acquire() as conn:
            return await conn.fetch(query, *args)

    async def fetchrow(self, query: str, *args) -> Optional[asyncpg.Record]:
        async with self.db.acquire() as conn:
            return await conn.fetchrow(query, *args)

    async def fetchval(self, query: str, *args) -> Any:
        async with self.db.acquire() as conn:
            return await conn.fetchval(query, *args)
