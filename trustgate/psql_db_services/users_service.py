"""
PostgreSQL Operations for Users
-------------------------------
Credential store backing registration and login, plus the admin listing
of users joined with their KYC state.

- Email uniqueness is enforced by the uq_users_email constraint, not only by
  the session manager's pre-check.
- The admin-first role rule runs inside the insert transaction under an
  advisory lock, so two concurrent first registrations cannot both see an
  empty table.
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple
from uuid import UUID, uuid4

from sqlalchemy import text
from loguru import logger

from trustgate.auth.credential_store import CredentialStore
from trustgate.auth.errors import DuplicateEmailError
from trustgate.core.database_connection import DatabaseManager
from trustgate.models.kyc_models import UserListItem
from trustgate.models.users_models import ROLE_USER, UserRecord
from trustgate.psql_db_services.base_service import BaseDatabaseService

# pg_advisory_xact_lock key serializing registrations (admin-first rule)
USER_REGISTRATION_LOCK_KEY = 7_310_524_001

USER_COLUMNS = "id, email, password_hash, role, created_at, updated_at"


def escape_like_pattern(search: str) -> str:
    """Escape LIKE wildcards so user input is matched literally."""
    return search.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class UsersService(BaseDatabaseService, CredentialStore):
    """
    Database service for user records.

    Supports:
    - Identity creation with atomic role assignment
    - Lookup by email (case-sensitive) and by id
    - Paginated listing of `user`-role accounts with KYC status
    """

    def __init__(self, database_manager: DatabaseManager):
        super().__init__(database_manager)

    # ========================================================================
    # CREATE OPERATIONS
    # ========================================================================

    async def create_user(self, email: str, password_hash: str) -> UserRecord:
        """
        Create a new user record.

        Args:
            email: Email address, stored exactly as given
            password_hash: bcrypt hash of the password

        Returns:
            UserRecord: The stored row, with role `admin` for the very first user

        Raises:
            DuplicateEmailError: If the email already exists
            sqlalchemy.exc.SQLAlchemyError: On database errors
        """
        self.require_text(email, "email")
        self.require_text(password_hash, "password_hash")

        now = datetime.now(timezone.utc)
        params = {
            "id": uuid4(),
            "email": email,
            "password_hash": password_hash,
            "created_at": now,
            "updated_at": now,
        }

        async with self.transaction() as session:
            # Serializes concurrent registrations for the role decision
            await session.execute(
                text("SELECT pg_advisory_xact_lock(:lock_key)"),
                {"lock_key": USER_REGISTRATION_LOCK_KEY},
            )

            sql_query = f"""
                INSERT INTO users (id, email, password_hash, role, created_at, updated_at)
                SELECT :id, :email, :password_hash,
                       CASE WHEN EXISTS (SELECT 1 FROM users) THEN 'user' ELSE 'admin' END,
                       :created_at, :updated_at
                ON CONFLICT (email) DO NOTHING
                RETURNING {USER_COLUMNS}
            """
            result = await session.execute(text(sql_query), params)
            created_user = result.mappings().one_or_none()

            if not created_user:
                self.log_operation("CREATE", email, success=False, additional_context="duplicate email")
                raise DuplicateEmailError(email)

        user = UserRecord(**dict(created_user))
        self.log_operation("CREATE", user.id, additional_context=f"role={user.role}")
        return user

    # ========================================================================
    # READ OPERATIONS
    # ========================================================================

    async def get_user_by_email(self, email: str) -> Optional[UserRecord]:
        """
        Retrieve a user by their exact email address.

        Returns:
            UserRecord or None if not found
        """
        row = await self.fetch_first(
            f"SELECT {USER_COLUMNS} FROM users WHERE email = :email LIMIT 1",
            {"email": email},
        )
        return UserRecord(**row) if row else None

    async def get_user_by_id(self, user_id: UUID) -> Optional[UserRecord]:
        """
        Retrieve a user by their unique identifier.

        Returns:
            UserRecord or None if not found

        Raises:
            ValueError: If user_id is invalid
        """
        self.require_uuid(user_id, "user_id")

        row = await self.fetch_first(
            f"SELECT {USER_COLUMNS} FROM users WHERE id = :user_id",
            {"user_id": user_id},
        )
        return UserRecord(**row) if row else None

    async def list_users(
        self, page: int = 1, limit: int = 10, search: str = ""
    ) -> Tuple[List[UserListItem], int]:
        """
        List `user`-role accounts, newest first, with their KYC state.

        Args:
            page: 1-based page number
            limit: Page size
            search: Case-insensitive substring matched against email

        Returns:
            Tuple of (page of users, total matching users)
        """
        self.check_page(page, limit)

        where_clause = "u.role = :role"
        params: Dict[str, Any] = {
            "role": ROLE_USER,
            "limit": limit,
            "offset": (page - 1) * limit,
        }
        if search:
            where_clause += " AND u.email ILIKE :pattern ESCAPE '\\'"
            params["pattern"] = f"%{escape_like_pattern(search)}%"

        list_query = f"""
            SELECT u.id, u.email, u.role, u.created_at AS joined_at,
                   COALESCE(k.status, 'not_submitted') AS kyc_status,
                   k.image_url AS kyc_image,
                   k.video_url AS kyc_video
            FROM users u
            LEFT JOIN kyc_submissions k ON k.user_id = u.id
            WHERE {where_clause}
            ORDER BY u.created_at DESC
            LIMIT :limit OFFSET :offset
        """
        count_query = f"SELECT COUNT(*) FROM users u WHERE {where_clause}"

        async with self.transaction() as session:
            result = await session.execute(text(list_query), params)
            rows = result.mappings().all()
            count_result = await session.execute(text(count_query), params)
            total = count_result.scalar_one_or_none() or 0

        logger.debug(f"Listed {len(rows)} of {total} users (page={page}, limit={limit})")
        return [UserListItem(**dict(row)) for row in rows], total
