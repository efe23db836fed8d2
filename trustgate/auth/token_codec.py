"""
Token Codec
-----------
Signs and verifies the two classes of bearer tokens used by the service.

Access and refresh tokens carry the same claim set but are signed with
independent secrets and verified through separate paths, so an access token
can never be replayed as a refresh token and vice versa.

Verification checks signature and expiry, then parses the payload into
TokenClaims; any other shape is rejected as invalid.
"""

from datetime import datetime, timedelta, timezone
from uuid import uuid4

from jose import ExpiredSignatureError, JWTError, jwt
from loguru import logger
from pydantic import ValidationError

from trustgate.auth.errors import InvalidTokenError, TokenExpiredError
from trustgate.auth.models import AuthTokenPayload, TokenClaims
from trustgate.core.config_manager import ApplicationSettings


class TokenCodec:
    """Issue and verify access and refresh tokens."""

    def __init__(
        self,
        access_secret: str,
        refresh_secret: str,
        algorithm: str = "HS256",
        access_ttl: timedelta = timedelta(minutes=15),
        refresh_ttl: timedelta = timedelta(days=7),
    ):
        if not access_secret or not refresh_secret:
            raise ValueError("Both access and refresh secrets must be configured")
        if access_secret == refresh_secret:
            raise ValueError("Access and refresh secrets must be distinct")

        self._access_secret = access_secret
        self._refresh_secret = refresh_secret
        self._algorithm = algorithm
        self.access_ttl = access_ttl
        self.refresh_ttl = refresh_ttl

    @classmethod
    def from_settings(cls, settings: ApplicationSettings) -> "TokenCodec":
        return cls(
            access_secret=settings.access_token_secret,
            refresh_secret=settings.refresh_token_secret,
            algorithm=settings.jwt_algorithm,
            access_ttl=timedelta(minutes=settings.access_token_expire_minutes),
            refresh_ttl=timedelta(days=settings.refresh_token_expire_days),
        )

    # ========================================================================
    # ISSUE
    # ========================================================================

    def issue_access(self, claims: TokenClaims) -> str:
        token = self._encode(claims, self._access_secret, self.access_ttl)
        logger.debug(f"Access token issued for user {claims.id} with role {claims.role}")
        return token

    def issue_refresh(self, claims: TokenClaims) -> str:
        token = self._encode(claims, self._refresh_secret, self.refresh_ttl)
        logger.debug(f"Refresh token issued for user {claims.id}")
        return token

    # ========================================================================
    # VERIFY
    # ========================================================================

    def verify_access(self, token: str) -> AuthTokenPayload:
        """
        Verify an access token.

        Raises:
            TokenExpiredError: If the token has expired
            InvalidTokenError: If the signature or payload is invalid
        """
        return self._decode(token, self._access_secret, "access")

    def verify_refresh(self, token: str) -> AuthTokenPayload:
        """
        Verify a refresh token.

        Raises:
            TokenExpiredError: If the token has expired
            InvalidTokenError: If the signature or payload is invalid
        """
        return self._decode(token, self._refresh_secret, "refresh")

    # ========================================================================
    # INTERNALS
    # ========================================================================

    def _encode(self, claims: TokenClaims, secret: str, ttl: timedelta) -> str:
        now = datetime.now(timezone.utc)
        payload = {
            "id": str(claims.id),
            "email": claims.email,
            "role": claims.role,
            "jti": uuid4().hex,
            "iat": now,
            "exp": now + ttl,
        }
        return jwt.encode(payload, secret, algorithm=self._algorithm)

    def _decode(self, token: str, secret: str, kind: str) -> AuthTokenPayload:
        try:
            payload = jwt.decode(token, secret, algorithms=[self._algorithm])
        except ExpiredSignatureError as e:
            logger.debug(f"Expired {kind} token: {e}")
            raise TokenExpiredError(f"{kind} token expired") from e
        except JWTError as e:
            logger.debug(f"Invalid {kind} token: {e}")
            raise InvalidTokenError(f"invalid {kind} token") from e

        try:
            return AuthTokenPayload.model_validate(payload)
        except ValidationError as e:
            logger.warning(f"Rejected {kind} token with unexpected claim set")
            raise InvalidTokenError(f"invalid {kind} token payload") from e
