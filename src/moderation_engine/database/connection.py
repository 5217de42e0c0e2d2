"""Database connection management for the moderation engine."""

import logging

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import asyncpg

from asyncpg import Connection
from asyncpg import Pool

from moderation_engine.config.database import DatabaseSettings
from moderation_engine.config.database import get_database_settings
from moderation_engine.config.database import get_database_url

logger = logging.getLogger(__name__)


class Database:
    """Database connection manager with connection pooling."""

    def __init__(self, settings: DatabaseSettings | None = None):
        self._pool: Pool | None = None
        self._settings = settings or get_database_settings()

    async def connect(self) -> None:
        """Initialize the database connection pool."""
        if self._pool is not None:
            logger.warning("Database pool already initialized")
            return

        try:
            self._pool = await asyncpg.create_pool(
                get_database_url(self._settings),
                min_size=self._settings.min_pool_size,
                max_size=self._settings.max_pool_size,
                timeout=self._settings.pool_timeout,
                command_timeout=self._settings.command_timeout,
                server_settings={
                    "application_name": "moderation-engine",
                    "timezone": "UTC",
                },
            )
            logger.info("Database connection pool initialized")

        except Exception as e:
            logger.error(f"Failed to initialize database pool: {e}")
            raise

    async def disconnect(self) -> None:
        """Close the database connection pool."""
        if self._pool is None:
            logger.warning("Database pool not initialized")
            return

        await self._pool.close()
        self._pool = None
        logger.info("Database connection pool closed")

    @asynccontextmanager
    async def get_connection(self) -> AsyncGenerator[Connection]:
        """Get a database connection from the pool."""
        if self._pool is None:
            raise RuntimeError("Database pool not initialized. Call connect() first.")

        async with self._pool.acquire() as connection:
            yield connection

    @asynccontextmanager
    async def get_transaction(self) -> AsyncGenerator[Connection]:
        """Get a database connection with an active transaction."""
        async with self.get_connection() as connection:
            async with connection.transaction():
                yield connection

    async def health_check(self) -> bool:
        """Check if the database connection is healthy."""
        try:
            async with self.get_connection() as connection:
                await connection.fetchval("SELECT 1")
            return True
        except Exception as e:
            logger.error(f"Database health check failed: {e}")
            return False
