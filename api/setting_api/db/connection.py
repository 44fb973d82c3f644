"""Database connection utilities for the PTM BMUP Setting API."""

import logging
from typing import Optional

import asyncpg
from asyncpg import Pool
from fastapi import Request

from ..config import Settings
from ..errors.exceptions import ServiceUnavailableError


logger = logging.getLogger(__name__)


class DatabaseManager:
    """Owns the asyncpg pool for one application instance.

    Created in the application lifespan and stored on ``app.state.db``;
    request handlers receive it through ``get_database``.
    """

    def __init__(self, settings: Settings):
        self.pool: Optional[Pool] = None
        self._database_url = settings.database_url
        self._min_size = settings.db_pool_min_size
        self._max_size = settings.db_pool_max_size
        self._command_timeout = settings.db_command_timeout

    async def initialize(self) -> None:
        """Initialize the database connection pool."""
        if self.pool is None:
            self.pool = await asyncpg.create_pool(
                self._database_url,
                min_size=self._min_size,
                max_size=self._max_size,
                command_timeout=self._command_timeout
            )

    async def close(self) -> None:
        """Close the database connection pool."""
        if self.pool:
            await self.pool.close()
            self.pool = None

    async def ping(self) -> None:
        """Run a trivial query to verify connectivity."""
        async with self.pool.acquire() as conn:
            await conn.execute("SELECT 1")

    async def connection_count(self) -> int:
        """Number of server connections, used by the readiness probe."""
        async with self.pool.acquire() as conn:
            return await conn.fetchval("SELECT COUNT(*) FROM pg_stat_activity")


def get_database(request: Request) -> DatabaseManager:
    """FastAPI dependency returning the application's DatabaseManager."""
    db = getattr(request.app.state, "db", None)
    if db is None or db.pool is None:
        raise ServiceUnavailableError("Database is not initialized")
    return db


def get_db_pool(request: Request) -> Pool:
    """FastAPI dependency returning the application's connection pool."""
    return get_database(request).pool
