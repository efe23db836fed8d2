"""
Pytest configuration for TrustGate tests.
In-memory stand-ins for PostgreSQL, Redis and media storage, plus fixtures
wiring them into a ServiceContainer and a FastAPI app.
"""

import os
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Dict, List, Optional, Tuple
from uuid import UUID, uuid4

import pytest
from fastapi.testclient import TestClient

# Add the project root to Python path for all tests
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

# Set up test environment variables
os.environ.setdefault("ACCESS_TOKEN_SECRET", "test-access-signing-secret-0001")
os.environ.setdefault("REFRESH_TOKEN_SECRET", "test-refresh-signing-secret-0002")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("DEBUG", "true")

from trustgate.app import create_app  # noqa: E402
from trustgate.auth.credential_store import CredentialStore  # noqa: E402
from trustgate.auth.errors import DuplicateEmailError  # noqa: E402
from trustgate.auth.models import TokenClaims  # noqa: E402
from trustgate.auth.revocation_store import RevocationStore  # noqa: E402
from trustgate.auth.session_manager import AuthSessionManager  # noqa: E402
from trustgate.auth.token_codec import TokenCodec  # noqa: E402
from trustgate.core.config_manager import load_settings  # noqa: E402
from trustgate.core.container import ServiceContainer  # noqa: E402
from trustgate.core.errors import KYCNotFoundError  # noqa: E402
from trustgate.models.kyc_models import (  # noqa: E402
    KYC_NOT_SUBMITTED,
    KYC_PENDING,
    KYC_REJECTED,
    KYCSubmission,
    UserListItem,
)
from trustgate.models.users_models import ROLE_ADMIN, ROLE_USER, UserRecord  # noqa: E402
from trustgate.psql_db_services.kyc_service import check_submission_allowed  # noqa: E402
from trustgate.storage.media_storage import MediaStorage  # noqa: E402
from trustgate.utils.password_hashing import PasswordHasher  # noqa: E402


# ============================================================================
# IN-MEMORY STORES
# ============================================================================


class InMemoryRevocationStore(RevocationStore):
    def __init__(self):
        self.revoked = set()

    async def is_revoked(self, token: str) -> bool:
        return token in self.revoked

    async def revoke(self, token: str) -> bool:
        if token in self.revoked:
            return False
        self.revoked.add(token)
        return True


class InMemoryKYCService:
    """Same contract as KYCService, backed by a dict keyed by user id."""

    def __init__(self):
        self.submissions: Dict[UUID, KYCSubmission] = {}

    async def get_submission(self, user_id: UUID) -> Optional[KYCSubmission]:
        return self.submissions.get(user_id)

    async def ensure_can_submit(self, user_id: UUID) -> None:
        existing = self.submissions.get(user_id)
        check_submission_allowed(existing.status if existing else None)

    async def submit(
        self, user_id: UUID, image_url: str, video_url: str
    ) -> Tuple[KYCSubmission, bool]:
        existing = self.submissions.get(user_id)
        check_submission_allowed(existing.status if existing else None)
        now = datetime.now(timezone.utc)
        submission = KYCSubmission(
            id=existing.id if existing else uuid4(),
            user_id=user_id,
            image_url=image_url,
            video_url=video_url,
            status=KYC_PENDING,
            created_at=existing.created_at if existing else now,
            updated_at=now,
        )
        self.submissions[user_id] = submission
        return submission, existing is None

    async def set_status(self, user_id: UUID, status: str) -> KYCSubmission:
        existing = self.submissions.get(user_id)
        if existing is None:
            raise KYCNotFoundError("KYC not found for this user")
        updated = existing.model_copy(
            update={"status": status, "updated_at": datetime.now(timezone.utc)}
        )
        self.submissions[user_id] = updated
        return updated


class InMemoryUsersService(CredentialStore):
    """Same contract as UsersService: first user is admin, emails unique."""

    def __init__(self, kyc: Optional[InMemoryKYCService] = None):
        self.users: Dict[str, UserRecord] = {}
        self.kyc = kyc
        self._clock = datetime(2026, 1, 1, tzinfo=timezone.utc)

    async def create_user(self, email: str, password_hash: str) -> UserRecord:
        if email in self.users:
            raise DuplicateEmailError(email)
        # Strictly increasing timestamps keep "newest first" deterministic
        self._clock += timedelta(seconds=1)
        user = UserRecord(
            id=uuid4(),
            email=email,
            role=ROLE_ADMIN if not self.users else ROLE_USER,
            password_hash=password_hash,
            created_at=self._clock,
            updated_at=self._clock,
        )
        self.users[email] = user
        return user

    async def get_user_by_email(self, email: str) -> Optional[UserRecord]:
        return self.users.get(email)

    async def get_user_by_id(self, user_id: UUID) -> Optional[UserRecord]:
        for user in self.users.values():
            if user.id == user_id:
                return user
        return None

    async def list_users(
        self, page: int = 1, limit: int = 10, search: str = ""
    ) -> Tuple[List[UserListItem], int]:
        matches = [
            user
            for user in self.users.values()
            if user.role == ROLE_USER and search.lower() in user.email.lower()
        ]
        matches.sort(key=lambda user: user.created_at, reverse=True)
        start = (page - 1) * limit
        items = []
        for user in matches[start : start + limit]:
            submission = self.kyc.submissions.get(user.id) if self.kyc else None
            items.append(
                UserListItem(
                    id=user.id,
                    email=user.email,
                    role=user.role,
                    joined_at=user.created_at,
                    kyc_status=submission.status if submission else KYC_NOT_SUBMITTED,
                    kyc_image=submission.image_url if submission else None,
                    kyc_video=submission.video_url if submission else None,
                )
            )
        return items, len(matches)


class InMemoryMediaStorage(MediaStorage):
    def __init__(self):
        self.files: Dict[str, bytes] = {}

    async def save(self, folder: str, filename: str, content: bytes) -> str:
        url = f"/media/{folder}/{uuid4().hex}-{filename}"
        self.files[url] = content
        return url

    async def delete(self, url: str) -> None:
        self.files.pop(url, None)


# ============================================================================
# SERVICE FIXTURES
# ============================================================================


@pytest.fixture
def settings():
    return load_settings()


@pytest.fixture
def codec(settings):
    return TokenCodec.from_settings(settings)


@pytest.fixture
def revocations():
    return InMemoryRevocationStore()


@pytest.fixture
def kyc_service():
    return InMemoryKYCService()


@pytest.fixture
def users_service(kyc_service):
    return InMemoryUsersService(kyc_service)


@pytest.fixture
def media_storage():
    return InMemoryMediaStorage()


@pytest.fixture
def session_manager(users_service, revocations, codec):
    return AuthSessionManager(
        credentials=users_service,
        revocations=revocations,
        codec=codec,
        hasher=PasswordHasher(rounds=4),
    )


@pytest.fixture
def container(
    settings, codec, revocations, users_service, session_manager, kyc_service, media_storage
):
    return ServiceContainer(
        settings=settings,
        codec=codec,
        revocations=revocations,
        users=users_service,
        session_manager=session_manager,
        kyc=kyc_service,
        media=media_storage,
    )


@pytest.fixture
def app(container):
    return create_app(container=container)


@pytest.fixture
def client(app):
    return TestClient(app)


# ============================================================================
# AUTHENTICATION FIXTURES
# ============================================================================


@pytest.fixture
def admin_claims():
    return TokenClaims(id=uuid4(), email="admin@example.com", role=ROLE_ADMIN)


@pytest.fixture
def user_claims():
    return TokenClaims(id=uuid4(), email="user@example.com", role=ROLE_USER)


@pytest.fixture
def admin_headers(codec, admin_claims):
    return {"Authorization": f"Bearer {codec.issue_access(admin_claims)}"}


@pytest.fixture
def user_headers(codec, user_claims):
    return {"Authorization": f"Bearer {codec.issue_access(user_claims)}"}
