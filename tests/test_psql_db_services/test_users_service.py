"""
Unit Tests for UsersService
===========================
Async unit tests for the PostgreSQL credential store and user listing,
run against a mocked SQLAlchemy session.
"""

from contextlib import asynccontextmanager
from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest

from trustgate.auth.errors import DuplicateEmailError
from trustgate.core.database_connection import DatabaseManager
from trustgate.models.users_models import UserRecord
from trustgate.psql_db_services.users_service import (
    USER_REGISTRATION_LOCK_KEY,
    UsersService,
    escape_like_pattern,
)


def make_result(one=None, rows=None, scalar=None):
    """Build a mock SQLAlchemy result whose mappings() returns itself."""
    mock_result = MagicMock()
    mock_result.mappings.return_value = mock_result
    mock_result.one_or_none.return_value = one
    mock_result.all.return_value = rows or []
    mock_result.scalar_one_or_none.return_value = scalar
    return mock_result


def setup_mock_sqlalchemy_session(mock_db_manager, *results):
    """
    Wire mock_db_manager.get_session to a session whose execute() returns
    `results` in order. Executed statements are recorded on session.executed.
    """
    mock_session = MagicMock()
    mock_session.commit = AsyncMock()
    mock_session.rollback = AsyncMock()
    mock_session.executed = []
    pending = list(results)

    async def mock_execute(statement, params=None):
        mock_session.executed.append((str(statement), params))
        return pending.pop(0)

    mock_session.execute = mock_execute

    @asynccontextmanager
    async def mock_get_session_cm():
        try:
            yield mock_session
        except Exception:
            await mock_session.rollback()
            raise
        else:
            await mock_session.commit()

    mock_db_manager.get_session = MagicMock(side_effect=lambda: mock_get_session_cm())
    return mock_session


def user_row(email="alice@example.com", role="admin"):
    now = datetime.now(timezone.utc)
    return {
        "id": uuid4(),
        "email": email,
        "password_hash": "$2b$04$hash",
        "role": role,
        "created_at": now,
        "updated_at": now,
    }


class TestUsersServiceCreate:
    """Test identity creation."""

    @pytest.fixture
    def mock_db_manager(self):
        return MagicMock(spec=DatabaseManager)

    @pytest.fixture
    def users_service(self, mock_db_manager):
        return UsersService(mock_db_manager)

    @pytest.mark.asyncio
    async def test_create_user_success(self, users_service, mock_db_manager):
        """Test a new user is inserted under the registration lock."""
        row = user_row()
        session = setup_mock_sqlalchemy_session(
            mock_db_manager, make_result(), make_result(one=row)
        )

        user = await users_service.create_user("alice@example.com", "$2b$04$hash")

        assert isinstance(user, UserRecord)
        assert user.id == row["id"]
        assert user.role == "admin"

        lock_sql, lock_params = session.executed[0]
        assert "pg_advisory_xact_lock" in lock_sql
        assert lock_params == {"lock_key": USER_REGISTRATION_LOCK_KEY}

        insert_sql, insert_params = session.executed[1]
        assert "ON CONFLICT (email) DO NOTHING" in insert_sql
        assert "CASE WHEN EXISTS" in insert_sql
        assert insert_params["email"] == "alice@example.com"
        session.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_create_user_duplicate_email(self, users_service, mock_db_manager):
        """Test a conflicting insert raises DuplicateEmailError and rolls back."""
        session = setup_mock_sqlalchemy_session(
            mock_db_manager, make_result(), make_result(one=None)
        )

        with pytest.raises(DuplicateEmailError):
            await users_service.create_user("alice@example.com", "$2b$04$hash")

        session.rollback.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_create_user_empty_email(self, users_service):
        """Test empty email is rejected before touching the database."""
        with pytest.raises(ValueError, match="email"):
            await users_service.create_user("", "$2b$04$hash")


class TestUsersServiceRead:
    """Test user lookups."""

    @pytest.fixture
    def mock_db_manager(self):
        return MagicMock(spec=DatabaseManager)

    @pytest.fixture
    def users_service(self, mock_db_manager):
        return UsersService(mock_db_manager)

    @pytest.mark.asyncio
    async def test_get_user_by_email_found(self, users_service, mock_db_manager):
        """Test lookup by exact email returns the record."""
        row = user_row()
        session = setup_mock_sqlalchemy_session(mock_db_manager, make_result(rows=[row]))

        user = await users_service.get_user_by_email("alice@example.com")

        assert user.email == "alice@example.com"
        assert "WHERE email = :email" in session.executed[0][0]

    @pytest.mark.asyncio
    async def test_get_user_by_email_not_found(self, users_service, mock_db_manager):
        """Test lookup of an unknown email returns None."""
        setup_mock_sqlalchemy_session(mock_db_manager, make_result(rows=[]))

        assert await users_service.get_user_by_email("ghost@example.com") is None

    @pytest.mark.asyncio
    async def test_get_user_by_id_found(self, users_service, mock_db_manager):
        """Test lookup by id returns the record."""
        row = user_row(role="user")
        setup_mock_sqlalchemy_session(mock_db_manager, make_result(rows=[row]))

        user = await users_service.get_user_by_id(row["id"])

        assert user.id == row["id"]
        assert user.role == "user"

    @pytest.mark.asyncio
    async def test_get_user_by_id_invalid(self, users_service):
        """Test a non-UUID id is rejected."""
        with pytest.raises(ValueError, match="user_id"):
            await users_service.get_user_by_id("not-a-uuid")


class TestUsersServiceList:
    """Test the paginated user listing."""

    @pytest.fixture
    def mock_db_manager(self):
        return MagicMock(spec=DatabaseManager)

    @pytest.fixture
    def users_service(self, mock_db_manager):
        return UsersService(mock_db_manager)

    @pytest.mark.asyncio
    async def test_list_users_with_search(self, users_service, mock_db_manager):
        """Test search, pagination and KYC columns flow into the query."""
        row = {
            "id": uuid4(),
            "email": "bob@example.com",
            "role": "user",
            "joined_at": datetime.now(timezone.utc),
            "kyc_status": "not_submitted",
            "kyc_image": None,
            "kyc_video": None,
        }
        session = setup_mock_sqlalchemy_session(
            mock_db_manager, make_result(rows=[row]), make_result(scalar=11)
        )

        users, total = await users_service.list_users(page=2, limit=5, search="b_b")

        assert total == 11
        assert users[0].email == "bob@example.com"
        assert users[0].kyc_status == "not_submitted"

        list_sql, params = session.executed[0]
        assert "LEFT JOIN kyc_submissions" in list_sql
        assert "ILIKE" in list_sql
        assert "ORDER BY u.created_at DESC" in list_sql
        assert params["offset"] == 5
        assert params["limit"] == 5
        assert params["role"] == "user"
        assert params["pattern"] == "%b\\_b%"

    @pytest.mark.asyncio
    async def test_list_users_without_search(self, users_service, mock_db_manager):
        """Test no search means no ILIKE filter."""
        session = setup_mock_sqlalchemy_session(
            mock_db_manager, make_result(rows=[]), make_result(scalar=0)
        )

        users, total = await users_service.list_users()

        assert users == []
        assert total == 0
        assert "ILIKE" not in session.executed[0][0]

    @pytest.mark.asyncio
    async def test_list_users_invalid_page(self, users_service):
        """Test page below 1 is rejected."""
        with pytest.raises(ValueError, match="page"):
            await users_service.list_users(page=0)


def test_escape_like_pattern():
    """Test LIKE wildcards are escaped."""
    assert escape_like_pattern("50%_off\\") == "50\\%\\_off\\\\"
