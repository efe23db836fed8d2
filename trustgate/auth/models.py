"""
JWT Authentication Models
-------------------------
Pydantic models for JWT token operations and auth endpoint payloads.
Defines the structure for token claims, requests, and responses.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID

from email_validator import EmailNotValidError, validate_email
from pydantic import BaseModel, ConfigDict, Field, field_validator

from trustgate.models.base import CamelModel
from trustgate.models.users_models import Identity, UserRole
from trustgate.utils.password_hashing import BCRYPT_MAX_PASSWORD_BYTES


class TokenClaims(BaseModel):
    """Identity attributes embedded in both access and refresh tokens."""

    model_config = ConfigDict(frozen=True)

    id: UUID = Field(..., description="User's unique identifier")
    email: str = Field(..., description="User's email address")
    role: UserRole = Field(..., description="User role: user or admin")

    @classmethod
    def from_identity(cls, identity: Identity) -> "TokenClaims":
        return cls(id=identity.id, email=identity.email, role=identity.role)


class AuthTokenPayload(TokenClaims):
    """
    Decoded JWT payload.

    The shape is fixed: tokens carrying extra or missing claims are rejected
    on decode. `jti` makes every issued token unique, even when two tokens
    for the same user are minted within the same second.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    jti: str = Field(..., description="Unique token identifier")
    iat: datetime = Field(..., description="Token issued at timestamp")
    exp: datetime = Field(..., description="Token expiration timestamp")


# ============================================================================
# REQUEST MODELS
# ============================================================================


class AuthCredentialsRequest(BaseModel):
    """Request body for register and login."""

    email: str = Field(..., min_length=3, max_length=254, description="Email address")
    password: str = Field(..., min_length=1, max_length=72, description="Password")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {"email": "alice@example.com", "password": "pw123456"}
        }
    )


class RegisterRequest(AuthCredentialsRequest):
    """
    Registration additionally checks the email syntax and that the password
    fits bcrypt's byte limit. The address is stored as given.
    """

    @field_validator("email")
    @classmethod
    def validate_email_syntax(cls, v: str) -> str:
        try:
            validate_email(v, check_deliverability=False)
        except EmailNotValidError as e:
            raise ValueError(f"Invalid email: {str(e)}")
        return v

    @field_validator("password")
    @classmethod
    def validate_password_bytes(cls, v: str) -> str:
        if len(v.encode("utf-8")) > BCRYPT_MAX_PASSWORD_BYTES:
            raise ValueError(
                f"Password must be at most {BCRYPT_MAX_PASSWORD_BYTES} bytes when UTF-8 encoded"
            )
        return v


class RefreshTokenRequest(CamelModel):
    """
    Request body for refresh and logout.

    Optional at the schema level so the endpoints can answer a missing
    token with their own status codes.
    """

    refresh_token: Optional[str] = Field(default=None, description="Refresh token")


# ============================================================================
# RESPONSE MODELS
# ============================================================================


class RegisterResponse(CamelModel):
    message: str
    user_id: UUID


class LoginUser(CamelModel):
    id: UUID
    email: str
    role: UserRole


class LoginResponse(CamelModel):
    access_token: str
    refresh_token: str
    user: LoginUser


class TokenPairResponse(CamelModel):
    access_token: str
    refresh_token: str


class MessageResponse(CamelModel):
    message: str
