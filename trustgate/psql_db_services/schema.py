"""
Database Schema
---------------
DDL for the users and KYC tables, applied idempotently at startup.

Statements are executed one at a time because asyncpg prepares each
statement separately.
"""

from sqlalchemy import text
from loguru import logger

from trustgate.core.database_connection import DatabaseManager

SCHEMA_STATEMENTS = [
    """
    CREATE TABLE IF NOT EXISTS users (
        id UUID PRIMARY KEY,
        email VARCHAR(254) NOT NULL,
        password_hash TEXT NOT NULL,
        role VARCHAR(16) NOT NULL DEFAULT 'user'
            CHECK (role IN ('user', 'admin')),
        created_at TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP,
        updated_at TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP,
        CONSTRAINT uq_users_email UNIQUE (email)
    )
    """,
    """
    CREATE INDEX IF NOT EXISTS idx_users_role_created_at
        ON users (role, created_at DESC)
    """,
    """
    CREATE TABLE IF NOT EXISTS kyc_submissions (
        id UUID PRIMARY KEY,
        user_id UUID NOT NULL REFERENCES users (id) ON DELETE CASCADE,
        image_url TEXT NOT NULL,
        video_url TEXT NOT NULL,
        status VARCHAR(16) NOT NULL DEFAULT 'pending'
            CHECK (status IN ('pending', 'approved', 'rejected')),
        created_at TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP,
        updated_at TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP,
        CONSTRAINT uq_kyc_submissions_user UNIQUE (user_id)
    )
    """,
]


async def ensure_schema(database_manager: DatabaseManager) -> None:
    """Create tables and indexes if they do not exist yet."""
    async with database_manager.get_session() as session:
        for statement in SCHEMA_STATEMENTS:
            await session.execute(text(statement))
    logger.info("Database schema verified")
