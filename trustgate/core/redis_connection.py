"""
Redis Connection Manager
------------------------
Pooled async Redis client holding the token revocation list.
"""

from typing import Optional
import redis.asyncio as aioredis
from redis.asyncio.connection import ConnectionPool
from loguru import logger

from trustgate.core.config_manager import ApplicationSettings


class RedisManager:
    """Creates the pool from ApplicationSettings.redis_url and hands out one shared client."""

    def __init__(self, settings: ApplicationSettings):
        self._settings = settings
        self._pool: Optional[ConnectionPool] = None
        self._client: Optional[aioredis.Redis] = None

    def initialize(self) -> None:
        if self._pool is not None:
            logger.warning("RedisManager.initialize called twice; keeping current pool")
            return

        # Revocation keys are ASCII, so replies are decoded to str
        self._pool = ConnectionPool.from_url(
            self._settings.redis_url,
            max_connections=self._settings.redis_max_connections,
            decode_responses=True,
            socket_connect_timeout=5,
            health_check_interval=30,
        )
        self._client = aioredis.Redis(connection_pool=self._pool)
        logger.info(
            f"Redis pool ready for {self._settings.redis_host}:{self._settings.redis_port}"
            f" db={self._settings.redis_db}"
        )

    @property
    def client(self) -> aioredis.Redis:
        """
        Raises:
            RuntimeError: If initialize() has not run
        """
        if self._client is None:
            raise RuntimeError("Redis not initialized. Call initialize() first.")
        return self._client

    async def ping(self) -> bool:
        """True when Redis answers PING; connection errors are logged, not raised."""
        if self._client is None:
            return False
        try:
            return bool(await self._client.ping())
        except Exception as error:
            logger.error(f"Redis ping failed: {error}")
            return False

    async def close(self) -> None:
        if self._client is None:
            return
        client, pool = self._client, self._pool
        self._client = None
        self._pool = None
        await client.aclose()
        await pool.disconnect()
        logger.info("Redis pool closed")
