"""
Authentication Errors
---------------------
Typed, user-safe failures raised by the session manager and the request gates.

Each AuthError carries the HTTP status it maps to and a message that is safe
to show to clients. Signing-library and storage errors never cross this
boundary: they are logged and either collapsed into one of these types or
surfaced as an internal error.
"""

from trustgate.core.errors import ServiceError

# User-facing messages, kept stable for clients
USER_CREATED = "User created successfully"
USER_EXISTS = "User already exists"
INVALID_CREDENTIALS = "Invalid credentials"
TOKEN_BLACKLISTED = "Token is blacklisted"
USER_NOT_FOUND = "User not found"
INVALID_REFRESH_TOKEN = "Invalid refresh token"
REFRESH_TOKEN_REQUIRED = "Refresh Token required"
LOGGED_OUT = "Logged out successfully"
AUTHORIZATION_REQUIRED = "Authorization token required"
ACCESS_DENIED = "Access denied"
ADMIN_REQUIRED = "Access denied. Admin role required."


class AuthError(ServiceError):
    """Base class for authentication failures mapped to HTTP responses."""

    default_message = "Authentication error"


class UserExistsError(AuthError):
    status_code = 400
    default_message = USER_EXISTS


class InvalidCredentialsError(AuthError):
    """Unknown email and wrong password both raise this, with the same message."""

    status_code = 401
    default_message = INVALID_CREDENTIALS


class TokenBlacklistedError(AuthError):
    status_code = 403
    default_message = TOKEN_BLACKLISTED


class InvalidRefreshTokenError(AuthError):
    status_code = 403
    default_message = INVALID_REFRESH_TOKEN


class UserNotFoundError(AuthError):
    """Internal only. Collapsed into InvalidRefreshTokenError on the refresh path."""

    status_code = 404
    default_message = USER_NOT_FOUND


class UnauthenticatedError(AuthError):
    status_code = 401
    default_message = AUTHORIZATION_REQUIRED
    headers = {"WWW-Authenticate": "Bearer"}


class ForbiddenError(AuthError):
    status_code = 403
    default_message = ACCESS_DENIED


class DuplicateEmailError(Exception):
    """Raised by the credential store when the unique email constraint fires."""

    def __init__(self, email: str) -> None:
        self.email = email
        super().__init__(f"Email '{email}' already exists")


# ============================================================================
# TOKEN CODEC ERRORS
# ============================================================================


class TokenVerificationError(Exception):
    """Base class for token decode failures. Never shown to clients as-is."""


class TokenExpiredError(TokenVerificationError):
    pass


class InvalidTokenError(TokenVerificationError):
    """Bad signature, malformed token, or a payload that is not a claim set."""
