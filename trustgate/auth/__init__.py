"""
Authentication Module
---------------------
Token-based authentication with rotation and revocation.

Core Components:
- token_codec: signs and verifies access and refresh tokens (separate secrets)
- revocation_store: blacklist of revoked tokens with time-bounded retention
- credential_store: persistence contract for identities
- session_manager: register, login, refresh with rotation, logout
- dependencies: FastAPI gates (RequestAuthenticator, RoleChecker)

Usage:
    from trustgate.auth import require_admin, get_current_user

    @router.get("/protected")
    async def protected(user: AuthTokenPayload = Depends(get_current_user)):
        return {"id": user.id, "role": user.role}
"""

from trustgate.auth.dependencies import (
    RequestAuthenticator,
    RoleChecker,
    get_current_user,
    get_session_manager,
    require_admin,
)
from trustgate.auth.errors import (
    AuthError,
    ForbiddenError,
    InvalidCredentialsError,
    InvalidRefreshTokenError,
    TokenBlacklistedError,
    UnauthenticatedError,
    UserExistsError,
)
from trustgate.auth.models import AuthTokenPayload, TokenClaims
from trustgate.auth.revocation_store import RedisRevocationStore, RevocationStore
from trustgate.auth.session_manager import AuthSessionManager, LoginResult, TokenPair
from trustgate.auth.token_codec import TokenCodec

__all__ = [
    # Dependencies
    "RequestAuthenticator",
    "RoleChecker",
    "get_current_user",
    "get_session_manager",
    "require_admin",
    # Errors
    "AuthError",
    "ForbiddenError",
    "InvalidCredentialsError",
    "InvalidRefreshTokenError",
    "TokenBlacklistedError",
    "UnauthenticatedError",
    "UserExistsError",
    # Models
    "AuthTokenPayload",
    "TokenClaims",
    # Services
    "AuthSessionManager",
    "LoginResult",
    "TokenPair",
    "TokenCodec",
    "RevocationStore",
    "RedisRevocationStore",
]
