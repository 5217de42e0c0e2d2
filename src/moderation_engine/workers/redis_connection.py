"""Redis connection management for the re-analysis worker and publishers."""

import redis.asyncio as redis

from arq import create_pool
from arq.connections import ArqRedis
from arq.connections import RedisSettings as ArqRedisSettings

from moderation_engine.config.redis import RedisSettings
from moderation_engine.config.redis import get_redis_settings


def get_arq_redis_settings(settings: RedisSettings | None = None) -> ArqRedisSettings:
    """Convert Redis settings to Arq format."""
    settings = settings or get_redis_settings()
    return ArqRedisSettings(
        host=settings.host,
        port=settings.port,
        database=settings.database,
        password=settings.password,
        conn_timeout=int(settings.socket_connect_timeout),
    )


class RedisConnection:
    """Owns an Arq pool for enqueueing jobs and a client for pub/sub."""

    def __init__(self, settings: RedisSettings | None = None):
        self._pool: ArqRedis | None = None
        self._redis_client: redis.Redis | None = None
        self.settings = settings or get_redis_settings()

    async def get_pool(self) -> ArqRedis:
        """Get or create Redis connection pool for Arq."""
        if self._pool is None:
            self._pool = await create_pool(get_arq_redis_settings(self.settings))
        return self._pool

    async def get_redis_client(self) -> redis.Redis:
        """Get or create Redis client for direct operations."""
        if self._redis_client is None:
            self._redis_client = redis.from_url(
                self.settings.redis_url,
                max_connections=self.settings.max_connections,
                retry_on_timeout=self.settings.retry_on_timeout,
                socket_timeout=self.settings.socket_timeout,
                socket_connect_timeout=self.settings.socket_connect_timeout,
            )
        return self._redis_client

    async def close(self) -> None:
        """Close Redis connections."""
        if self._pool is not None:
            await self._pool.aclose()
            self._pool = None

        if self._redis_client is not None:
            await self._redis_client.aclose()
            self._redis_client = None
