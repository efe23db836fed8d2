"""
Auth Session Manager
--------------------
Registration, login, refresh-token rotation, and logout.

A session is implicit: it exists while a valid, non-revoked access token
and/or a valid, non-revoked, not-yet-rotated refresh token exist for an
identity. All cross-request state lives in the credential store and the
revocation store.

Revocation latency: logout and rotation only revoke refresh tokens.
Outstanding access tokens stay valid until they expire, so the worst-case
delay between logout and loss of API access equals the access-token TTL.
"""

from dataclasses import dataclass
from typing import Optional

from loguru import logger
from starlette.concurrency import run_in_threadpool

from trustgate.auth.credential_store import CredentialStore
from trustgate.auth.errors import (
    DuplicateEmailError,
    InvalidCredentialsError,
    InvalidRefreshTokenError,
    TokenBlacklistedError,
    TokenVerificationError,
    UserExistsError,
    UserNotFoundError,
)
from trustgate.auth.models import TokenClaims
from trustgate.auth.revocation_store import RevocationStore
from trustgate.auth.token_codec import TokenCodec
from trustgate.models.users_models import Identity, UserRecord
from trustgate.utils.password_hashing import PasswordHasher


@dataclass(frozen=True)
class TokenPair:
    access_token: str
    refresh_token: str


@dataclass(frozen=True)
class LoginResult:
    access_token: str
    refresh_token: str
    identity: Identity


class AuthSessionManager:
    """Orchestrates the credential store, revocation store, and token codec."""

    def __init__(
        self,
        credentials: CredentialStore,
        revocations: RevocationStore,
        codec: TokenCodec,
        hasher: PasswordHasher,
    ):
        self._credentials = credentials
        self._revocations = revocations
        self._codec = codec
        self._hasher = hasher
        self._dummy_hash: Optional[str] = None

    async def register(self, email: str, password: str) -> Identity:
        """
        Create a new identity.

        Raises:
            UserExistsError: If the email is already registered
        """
        if await self._credentials.get_user_by_email(email) is not None:
            logger.info("Registration rejected: email already registered")
            raise UserExistsError()

        password_hash = await run_in_threadpool(self._hasher.hash_password, password)

        try:
            user = await self._credentials.create_user(email, password_hash)
        except DuplicateEmailError:
            # Lost a race with a concurrent registration for the same email
            logger.info("Registration rejected by unique email constraint")
            raise UserExistsError() from None

        logger.info(f"User registered: user_id={user.id}, role={user.role}")
        return user.to_identity()

    async def login(self, email: str, password: str) -> LoginResult:
        """
        Verify credentials and issue a token pair.

        Raises:
            InvalidCredentialsError: Unknown email or wrong password, indistinguishably
        """
        user = await self._credentials.get_user_by_email(email)

        if user is None:
            # Burn the same bcrypt time as a real comparison
            await run_in_threadpool(
                self._hasher.verify_password, password, await self._get_dummy_hash()
            )
            logger.info("Login failed")
            raise InvalidCredentialsError()

        matches = await run_in_threadpool(
            self._hasher.verify_password, password, user.password_hash
        )
        if not matches:
            logger.info("Login failed")
            raise InvalidCredentialsError()

        pair = self._issue_pair(user)
        logger.info(f"User logged in: user_id={user.id}")
        return LoginResult(
            access_token=pair.access_token,
            refresh_token=pair.refresh_token,
            identity=user.to_identity(),
        )

    async def refresh(self, refresh_token: str) -> TokenPair:
        """
        Rotate a refresh token: revoke it and issue a brand new pair.

        Raises:
            TokenBlacklistedError: If the token was revoked, including by a
                concurrent refresh that won the rotation
            InvalidRefreshTokenError: On any verification failure or if the
                token's user no longer exists
        """
        if await self._revocations.is_revoked(refresh_token):
            logger.info("Refresh rejected: token is blacklisted")
            raise TokenBlacklistedError()

        try:
            claims = self._codec.verify_refresh(refresh_token)
            user = await self._credentials.get_user_by_id(claims.id)
            if user is None:
                raise UserNotFoundError()
        except (TokenVerificationError, UserNotFoundError) as e:
            # Collapsed into one error kind so callers cannot probe for users
            logger.info(f"Refresh rejected: {type(e).__name__}")
            raise InvalidRefreshTokenError() from None

        if not await self._revocations.revoke(refresh_token):
            logger.info("Refresh rejected: token rotated by a concurrent request")
            raise TokenBlacklistedError()

        pair = self._issue_pair(user)
        logger.info(f"Tokens rotated for user_id={user.id}")
        return pair

    async def logout(self, refresh_token: str) -> None:
        """Revoke a refresh token. Idempotent."""
        created = await self._revocations.revoke(refresh_token)
        logger.info(f"Logout processed (newly revoked={created})")

    def _issue_pair(self, user: UserRecord) -> TokenPair:
        claims = TokenClaims.from_identity(user)
        return TokenPair(
            access_token=self._codec.issue_access(claims),
            refresh_token=self._codec.issue_refresh(claims),
        )

    async def _get_dummy_hash(self) -> str:
        if self._dummy_hash is None:
            self._dummy_hash = await run_in_threadpool(
                self._hasher.hash_password, "timing-equalization-placeholder"
            )
        return self._dummy_hash
