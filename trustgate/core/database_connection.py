"""
Database Connection Manager
---------------------------
Owns the async SQLAlchemy engine for the users and KYC tables.
Services never touch the engine; they borrow sessions from here.
"""

from typing import Any, AsyncGenerator, Dict, Optional
from contextlib import asynccontextmanager

from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from loguru import logger

from trustgate.core.config_manager import ApplicationSettings

# Seconds before a pooled connection is replaced
CONNECTION_RECYCLE_SECONDS = 3600
POOL_CHECKOUT_TIMEOUT_SECONDS = 30


class DatabaseManager:
    """
    PostgreSQL engine holder. Built once by the ServiceContainer and shared
    by every database service.
    """

    def __init__(self, settings: ApplicationSettings):
        self._settings = settings
        self._engine: Optional[AsyncEngine] = None
        self._sessionmaker: Optional[async_sessionmaker] = None

    @property
    def is_initialized(self) -> bool:
        return self._sessionmaker is not None

    async def initialize(self) -> None:
        if self._engine is not None:
            logger.warning("DatabaseManager.initialize called twice; keeping current engine")
            return

        settings = self._settings
        logger.info(
            f"Connecting to PostgreSQL {settings.database_name} at "
            f"{settings.database_host}:{settings.database_port}"
        )
        self._engine = create_async_engine(
            settings.database_url,
            pool_size=settings.database_pool_size,
            max_overflow=settings.database_max_overflow,
            pool_pre_ping=True,
            pool_recycle=CONNECTION_RECYCLE_SECONDS,
            pool_timeout=POOL_CHECKOUT_TIMEOUT_SECONDS,
        )
        self._sessionmaker = async_sessionmaker(self._engine, expire_on_commit=False)

    async def close(self) -> None:
        if self._engine is None:
            return
        await self._engine.dispose()
        self._engine = None
        self._sessionmaker = None
        logger.info("PostgreSQL engine disposed")

    @asynccontextmanager
    async def get_session(self) -> AsyncGenerator[AsyncSession, None]:
        """
        Yield a session scoped to one unit of work.

        The session commits when the block exits cleanly, rolls back when it
        raises, and is always closed.

        Raises:
            RuntimeError: If initialize() has not run
        """
        if not self.is_initialized:
            raise RuntimeError("Database not initialized. Call initialize() first.")

        session = self._sessionmaker()
        try:
            yield session
            await session.commit()
        except Exception as error:
            await session.rollback()
            logger.warning(f"Rolled back PostgreSQL transaction: {error}")
            raise
        finally:
            await session.close()

    async def fetch_scalar(
        self, query: str, params: Optional[Dict[str, Any]] = None
    ) -> Any:
        """Run `query` and return the first column of its single row, or None."""
        async with self.get_session() as session:
            result = await session.execute(text(query), params or {})
            return result.scalar_one_or_none()

    async def ping(self) -> bool:
        try:
            return await self.fetch_scalar("SELECT 1") == 1
        except Exception as error:
            logger.error(f"PostgreSQL ping failed: {error}")
            return False
