"""
PostgreSQL Operations for KYC Submissions
-----------------------------------------
Submission lifecycle: absent -> pending -> approved | rejected, and
rejected -> pending again on resubmission. Approved is terminal and a
pending submission cannot be replaced.
"""

from datetime import datetime, timezone
from typing import Optional, Tuple
from uuid import UUID, uuid4

from sqlalchemy import text
from loguru import logger

from trustgate.core.database_connection import DatabaseManager
from trustgate.core.errors import (
    KYCAlreadyApprovedError,
    KYCAlreadyPendingError,
    KYCNotFoundError,
)
from trustgate.models.kyc_models import (
    KYC_APPROVED,
    KYC_PENDING,
    KYC_REJECTED,
    KYCSubmission,
)
from trustgate.psql_db_services.base_service import BaseDatabaseService

KYC_COLUMNS = "id, user_id, image_url, video_url, status, created_at, updated_at"


def check_submission_allowed(current_status: Optional[str]) -> None:
    """
    Raise if a user with a submission in `current_status` may not submit.

    None means the user has never submitted.
    """
    if current_status == KYC_APPROVED:
        raise KYCAlreadyApprovedError()
    if current_status == KYC_PENDING:
        raise KYCAlreadyPendingError()


class KYCService(BaseDatabaseService):
    """Database service for KYC submissions, one row per user."""

    REVIEW_STATUSES = [KYC_APPROVED, KYC_REJECTED]

    def __init__(self, database_manager: DatabaseManager):
        super().__init__(database_manager)

    async def get_submission(self, user_id: UUID) -> Optional[KYCSubmission]:
        self.require_uuid(user_id, "user_id")

        row = await self.fetch_first(
            f"SELECT {KYC_COLUMNS} FROM kyc_submissions WHERE user_id = :user_id",
            {"user_id": user_id},
        )
        return KYCSubmission(**row) if row else None

    async def ensure_can_submit(self, user_id: UUID) -> None:
        """
        Fail fast before media is uploaded.

        Raises:
            KYCAlreadyApprovedError / KYCAlreadyPendingError
        """
        existing = await self.get_submission(user_id)
        check_submission_allowed(existing.status if existing else None)

    async def submit(
        self, user_id: UUID, image_url: str, video_url: str
    ) -> Tuple[KYCSubmission, bool]:
        """
        Create a pending submission, or reset a rejected one to pending.

        The upsert only overwrites rows in the rejected state, so a concurrent
        approval or a second pending submission cannot be clobbered.

        Returns:
            Tuple of (submission, created) where created is False for a resubmission

        Raises:
            KYCAlreadyApprovedError / KYCAlreadyPendingError
        """
        self.require_uuid(user_id, "user_id")
        self.require_text(image_url, "image_url")
        self.require_text(video_url, "video_url")

        now = datetime.now(timezone.utc)
        sql_query = f"""
            INSERT INTO kyc_submissions (
                id, user_id, image_url, video_url, status, created_at, updated_at
            )
            VALUES (:id, :user_id, :image_url, :video_url, 'pending', :now, :now)
            ON CONFLICT (user_id) DO UPDATE
                SET image_url = EXCLUDED.image_url,
                    video_url = EXCLUDED.video_url,
                    status = 'pending',
                    updated_at = EXCLUDED.updated_at
                WHERE kyc_submissions.status = 'rejected'
            RETURNING {KYC_COLUMNS}, (xmax = 0) AS inserted
        """
        params = {
            "id": uuid4(),
            "user_id": user_id,
            "image_url": image_url,
            "video_url": video_url,
            "now": now,
        }

        async with self.transaction() as session:
            result = await session.execute(text(sql_query), params)
            row = result.mappings().one_or_none()

            if row is None:
                status_result = await session.execute(
                    text("SELECT status FROM kyc_submissions WHERE user_id = :user_id"),
                    {"user_id": user_id},
                )
                check_submission_allowed(status_result.scalar_one_or_none())
                # Unreachable unless the row vanished between the two statements
                raise RuntimeError("KYC submission upsert returned no row")

        record = dict(row)
        created = bool(record.pop("inserted"))
        submission = KYCSubmission(**record)
        self.log_operation(
            "SUBMIT" if created else "RESUBMIT", user_id, additional_context="status=pending"
        )
        return submission, created

    async def set_status(self, user_id: UUID, status: str) -> KYCSubmission:
        """
        Record an admin review decision.

        Raises:
            ValueError: If status is not a review outcome
            KYCNotFoundError: If the user has no submission
        """
        self.require_uuid(user_id, "user_id")
        if status not in self.REVIEW_STATUSES:
            raise ValueError(
                f"Invalid review status '{status}'. Must be one of: {', '.join(self.REVIEW_STATUSES)}"
            )

        rows = await self.fetch_rows(
            f"""
                UPDATE kyc_submissions
                SET status = :status, updated_at = CURRENT_TIMESTAMP
                WHERE user_id = :user_id
                RETURNING {KYC_COLUMNS}
            """,
            {"status": status, "user_id": user_id},
        )
        if not rows:
            logger.warning(f"KYC review for user without submission: user_id={user_id}")
            raise KYCNotFoundError("KYC not found for this user")

        self.log_operation("REVIEW", user_id, additional_context=f"status={status}")
        return KYCSubmission(**rows[0])
