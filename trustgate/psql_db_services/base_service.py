"""
Base Database Service
--------------------
Shared plumbing for the PostgreSQL services: one transaction per call,
row fetch helpers over raw SQL, argument checks and operation logging.
"""

from typing import Any, AsyncGenerator, Dict, List, Optional
from contextlib import asynccontextmanager
from uuid import UUID

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession
from loguru import logger

from trustgate.core.database_connection import DatabaseManager


class BaseDatabaseService:
    """
    Base class for the users and KYC services.

    Subclasses write raw SQL through `text()`; every public method runs in
    its own transaction obtained from `transaction()`.
    """

    def __init__(self, database_manager: DatabaseManager):
        self.database_manager = database_manager
        self._service_name = type(self).__name__

    @asynccontextmanager
    async def transaction(self) -> AsyncGenerator[AsyncSession, None]:
        """
        Open a session that commits on success and rolls back on error.

        Example:
            async with self.transaction() as session:
                await session.execute(text("SELECT pg_advisory_xact_lock(1)"))
        """
        async with self.database_manager.get_session() as session:
            yield session

    async def fetch_rows(
        self, sql_query: str, query_parameters: Optional[Dict[str, Any]] = None
    ) -> List[Dict[str, Any]]:
        """Run one statement in its own transaction and return every row as a dict."""
        try:
            async with self.transaction() as session:
                result = await session.execute(text(sql_query), query_parameters or {})
                return [dict(row) for row in result.mappings().all()]
        except Exception as error:
            logger.error(f"{self._service_name}: query failed: {error}")
            raise

    async def fetch_first(
        self, sql_query: str, query_parameters: Optional[Dict[str, Any]] = None
    ) -> Optional[Dict[str, Any]]:
        rows = await self.fetch_rows(sql_query, query_parameters)
        return rows[0] if rows else None

    # ========================================================================
    # ARGUMENT CHECKS
    # ========================================================================

    @staticmethod
    def require_uuid(value: Any, name: str) -> None:
        """
        Raises:
            ValueError: If value is not a UUID instance
        """
        if not isinstance(value, UUID):
            raise ValueError(f"{name} must be a UUID, got {type(value).__name__}")

    @staticmethod
    def require_text(value: Any, name: str) -> None:
        """
        Raises:
            ValueError: If value is not a string with visible characters
        """
        if not isinstance(value, str) or not value.strip():
            raise ValueError(f"{name} must be a non-empty string")

    @staticmethod
    def check_page(page: int, limit: int, max_limit: int = 100) -> None:
        """
        Raises:
            ValueError: If page < 1 or limit is outside 1..max_limit
        """
        if page < 1:
            raise ValueError(f"page must be >= 1, got {page}")
        if not 1 <= limit <= max_limit:
            raise ValueError(f"limit must be between 1 and {max_limit}, got {limit}")

    def log_operation(
        self,
        operation_type: str,
        entity_identifier: Any,
        success: bool = True,
        additional_context: Optional[str] = None,
    ) -> None:
        """
        Log a completed write, e.g. "UsersService: CREATE succeeded for <id> - role=admin".
        """
        outcome = "succeeded" if success else "failed"
        message = f"{self._service_name}: {operation_type} {outcome} for {entity_identifier}"
        if additional_context:
            message = f"{message} - {additional_context}"

        if success:
            logger.info(message)
        else:
            logger.warning(message)
