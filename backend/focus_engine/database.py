"""
Focus Scheduling Engine - Database Connection
Async PostgreSQL with asyncpg (read-only access to the time_blocks history)
"""

import logging
from datetime import date
from typing import Optional, List

import asyncpg

from .config import DatabaseConfig, get_database_config

logger = logging.getLogger(__name__)


class Database:
    """Async database connection manager."""

    def __init__(self, config: Optional[DatabaseConfig] = None):
        self._config = config or get_database_config()
        self._pool = None

    @property
    def is_connected(self) -> bool:
        return self._pool is not None

    async def connect(self):
        """Create connection pool."""
        if not self._config.url:
            raise RuntimeError("DATABASE_URL is not configured")
        self._pool = await asyncpg.create_pool(
            self._config.url,
            min_size=self._config.min_pool_size,
            max_size=self._config.max_pool_size,
        )
        logger.info("Database connected")

    async def disconnect(self):
        """Close connection pool."""
        if self._pool:
            await self._pool.close()
            self._pool = None
            logger.info("Database disconnected")

    async def fetch(self, query: str, *args) -> List[dict]:
        """Fetch multiple rows."""
        async with self._pool.acquire() as conn:
            rows = await conn.fetch(query, *args)
            return [dict(row) for row in rows]

    async def fetch_one(self, query: str, *args) -> Optional[dict]:
        """Fetch single row."""
        async with self._pool.acquire() as conn:
            row = await conn.fetchrow(query, *args)
            return dict(row) if row else None


# ============================================
# TIME BLOCK QUERIES
# ============================================

TIME_BLOCKS_QUERY = """
    SELECT id, date, hour, start_minute, duration_minutes, category, completed, title
    FROM time_blocks
    WHERE user_id = $1 AND date BETWEEN $2 AND $3
    ORDER BY date, hour, start_minute
"""


async def fetch_time_blocks(database: Database, user_id: str, from_date: date, to_date: date) -> List[dict]:
    return await database.fetch(TIME_BLOCKS_QUERY, user_id, from_date, to_date)
