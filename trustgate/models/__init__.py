"""
Pydantic Models Package
-----------------------
Data models shared by the services and the API layer.
"""

from trustgate.models.base import CamelModel
from trustgate.models.users_models import (
    Identity,
    UserRecord,
    UserRole,
    ROLE_ADMIN,
    ROLE_USER,
)
from trustgate.models.kyc_models import (
    KYCStatus,
    KYCSubmission,
    KYCSubmissionResponse,
    UserListItem,
    PaginatedUsersResponse,
)
from trustgate.models.health_models import DependencyHealth, HealthStatus

__all__ = [
    "CamelModel",
    "Identity",
    "UserRecord",
    "UserRole",
    "ROLE_ADMIN",
    "ROLE_USER",
    "KYCStatus",
    "KYCSubmission",
    "KYCSubmissionResponse",
    "UserListItem",
    "PaginatedUsersResponse",
    "DependencyHealth",
    "HealthStatus",
]
