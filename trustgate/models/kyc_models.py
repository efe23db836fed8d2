"""
KYC Models
----------
Submission records and the admin user-listing payloads.
"""

from datetime import datetime
from typing import List, Literal, Optional
from uuid import UUID

from pydantic import ConfigDict, Field

from trustgate.models.base import CamelModel
from trustgate.models.users_models import UserRole

KYCStatus = Literal["pending", "approved", "rejected"]

KYC_PENDING = "pending"
KYC_APPROVED = "approved"
KYC_REJECTED = "rejected"
KYC_NOT_SUBMITTED = "not_submitted"


class KYCSubmission(CamelModel):
    """
    Pydantic model for the 'kyc_submissions' table.

    One row per user; the unique user_id column enforces single ownership.
    """

    model_config = ConfigDict(from_attributes=True)

    id: UUID = Field(..., description="Submission identifier")
    user_id: UUID = Field(..., description="Owning user")
    image_url: str = Field(..., description="URL of the identity image")
    video_url: str = Field(..., description="URL of the identity video")
    status: KYCStatus = Field(default=KYC_PENDING, description="Review status")
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class KYCSubmissionResponse(CamelModel):
    message: str
    kyc: KYCSubmission


class UserListItem(CamelModel):
    """A user row in the admin listing, flattened with its KYC state."""

    id: UUID
    email: str
    role: UserRole
    joined_at: datetime
    kyc_status: Literal["pending", "approved", "rejected", "not_submitted"] = (
        KYC_NOT_SUBMITTED
    )
    kyc_image: Optional[str] = None
    kyc_video: Optional[str] = None


class PaginatedUsersResponse(CamelModel):
    users: List[UserListItem]
    total: int
    page: int
    total_pages: int
