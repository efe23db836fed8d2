"""
Credential Store Contract
-------------------------
Persistence interface for user identities used by the session manager.
"""

from abc import ABC, abstractmethod
from typing import Optional
from uuid import UUID

from trustgate.models.users_models import UserRecord


class CredentialStore(ABC):
    @abstractmethod
    async def create_user(self, email: str, password_hash: str) -> UserRecord:
        """
        Persist a new identity.

        The first identity ever stored is assigned the `admin` role and every
        later one `user`; the store decides this atomically with the insert.

        Raises:
            DuplicateEmailError: If the email is already registered
        """

    @abstractmethod
    async def get_user_by_email(self, email: str) -> Optional[UserRecord]:
        """Exact, case-sensitive lookup."""

    @abstractmethod
    async def get_user_by_id(self, user_id: UUID) -> Optional[UserRecord]:
        ...
