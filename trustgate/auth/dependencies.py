"""
FastAPI Authentication Dependencies
-----------------------------------
Request gates for protected endpoints.

- RequestAuthenticator: bearer token -> revocation check -> access-path
  verification -> claims attached to the request.
- RoleChecker: requires the authenticated role to be one of the allowed roles.

Gate failures raise AuthError subclasses; the handler never runs.
"""

from typing import TYPE_CHECKING, List, Optional

from fastapi import Depends, Request
from fastapi.security import OAuth2PasswordBearer
from loguru import logger

from trustgate.auth.errors import (
    ADMIN_REQUIRED,
    ForbiddenError,
    TokenVerificationError,
    UnauthenticatedError,
)
from trustgate.auth.models import AuthTokenPayload
from trustgate.auth.session_manager import AuthSessionManager
from trustgate.models.users_models import ROLE_ADMIN, ROLE_USER

if TYPE_CHECKING:
    from trustgate.core.container import ServiceContainer
    from trustgate.psql_db_services.kyc_service import KYCService
    from trustgate.psql_db_services.users_service import UsersService
    from trustgate.storage.media_storage import MediaStorage

# Extracts "Authorization: Bearer <token>"; returns None instead of raising
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login", auto_error=False)


def get_container(request: Request) -> "ServiceContainer":
    return request.app.state.container


def get_session_manager(request: Request) -> AuthSessionManager:
    return get_container(request).session_manager


def get_users_service(request: Request) -> "UsersService":
    return get_container(request).users


def get_kyc_service(request: Request) -> "KYCService":
    return get_container(request).kyc


def get_media_storage(request: Request) -> "MediaStorage":
    return get_container(request).media


class RequestAuthenticator:
    """
    Admit a request carrying a valid, non-revoked access token.

    Raises:
        UnauthenticatedError (401): No bearer token
        ForbiddenError (403): Revoked, expired, or badly signed token
    """

    async def __call__(
        self, request: Request, token: Optional[str] = Depends(oauth2_scheme)
    ) -> AuthTokenPayload:
        if not token:
            logger.warning("Missing authorization token")
            raise UnauthenticatedError()

        container = get_container(request)

        if await container.revocations.is_revoked(token):
            logger.warning("Rejected revoked access token")
            raise ForbiddenError()

        try:
            payload = container.codec.verify_access(token)
        except TokenVerificationError as e:
            logger.warning(f"Access token validation failed: {e}")
            raise ForbiddenError() from None

        request.state.user = payload
        logger.debug(f"Token validated for user {payload.id} with role {payload.role}")
        return payload


get_current_user = RequestAuthenticator()


class RoleChecker:
    """
    Dependency class for role-based authorization.

    Usage:
        require_admin = RoleChecker(["admin"])
        @router.get("/admin-only", dependencies=[Depends(require_admin)])
    """

    VALID_ROLES = [ROLE_USER, ROLE_ADMIN]

    def __init__(self, allowed_roles: List[str]):
        for role in allowed_roles:
            if role not in self.VALID_ROLES:
                raise ValueError(
                    f"Invalid role '{role}'. Must be one of: {', '.join(self.VALID_ROLES)}"
                )
        self.allowed_roles = allowed_roles

    def __call__(
        self, payload: AuthTokenPayload = Depends(get_current_user)
    ) -> AuthTokenPayload:
        if payload.role not in self.allowed_roles:
            logger.warning(
                f"Access denied for user {payload.id} with role {payload.role}"
            )
            if self.allowed_roles == [ROLE_ADMIN]:
                raise ForbiddenError(ADMIN_REQUIRED)
            raise ForbiddenError()

        return payload


require_admin = RoleChecker([ROLE_ADMIN])
