from datetime import datetime
from typing import Literal, Optional
from uuid import UUID
from pydantic import BaseModel, ConfigDict, Field

UserRole = Literal["user", "admin"]

ROLE_USER = "user"
ROLE_ADMIN = "admin"


class Identity(BaseModel):
    """
    A registered user as seen outside the credential store.

    Never carries the password hash.
    """

    model_config = ConfigDict(from_attributes=True, frozen=True)

    id: UUID = Field(..., description="Unique identifier for the user")
    email: str = Field(..., description="Unique email address, case-sensitive")
    role: UserRole = Field(default=ROLE_USER, description="User role: user or admin")
    created_at: Optional[datetime] = Field(
        default=None, description="Timestamp of the user's creation"
    )


class UserRecord(Identity):
    """
    Pydantic model for a row of the 'users' table.

    Only the credential store and the session manager handle this model.
    """

    password_hash: str = Field(..., description="bcrypt password hash")
    updated_at: Optional[datetime] = Field(
        default=None, description="Timestamp of the user's last update"
    )

    def to_identity(self) -> Identity:
        return Identity(
            id=self.id, email=self.email, role=self.role, created_at=self.created_at
        )
