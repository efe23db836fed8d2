"""
Authentication Endpoints
------------------------
Register, login, refresh-token rotation and logout.

Service errors (AuthError and friends) propagate to the exception handlers,
which render them as `{"error": message}`. Anything else is logged and
reported as a 500.
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from loguru import logger

from trustgate.auth.dependencies import get_current_user, get_session_manager
from trustgate.auth.errors import LOGGED_OUT, REFRESH_TOKEN_REQUIRED, USER_CREATED
from trustgate.auth.models import (
    AuthCredentialsRequest,
    AuthTokenPayload,
    LoginResponse,
    LoginUser,
    MessageResponse,
    RefreshTokenRequest,
    RegisterRequest,
    RegisterResponse,
    TokenPairResponse,
)
from trustgate.auth.session_manager import AuthSessionManager
from trustgate.core.errors import ServiceError

# ============================================================================
# ROUTER INITIALIZATION
# ============================================================================

router = APIRouter(prefix="/auth", tags=["Authentication"])


# ============================================================================
# ACCOUNT ENDPOINTS
# ============================================================================


@router.post(
    "/register",
    response_model=RegisterResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a new account",
    description="""
    Create an account with an email and password.
    The first account ever registered becomes the admin; later ones are users.
    """,
)
async def register(
    request: RegisterRequest,
    session_manager: AuthSessionManager = Depends(get_session_manager),
):
    """
    Register a new identity.

    Raises:
        UserExistsError (400): If the email is already registered
    """
    try:
        identity = await session_manager.register(request.email, request.password)
        return RegisterResponse(message=USER_CREATED, user_id=identity.id)

    except (ServiceError, HTTPException):
        raise
    except Exception as e:
        logger.exception(f"Registration error: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Registration failed",
        )


@router.post(
    "/login",
    response_model=LoginResponse,
    summary="Authenticate and get a token pair",
)
async def login(
    request: AuthCredentialsRequest,
    session_manager: AuthSessionManager = Depends(get_session_manager),
):
    """
    Verify credentials and return an access/refresh token pair.

    Raises:
        InvalidCredentialsError (401): Unknown email or wrong password
    """
    try:
        result = await session_manager.login(request.email, request.password)
        return LoginResponse(
            access_token=result.access_token,
            refresh_token=result.refresh_token,
            user=LoginUser(
                id=result.identity.id,
                email=result.identity.email,
                role=result.identity.role,
            ),
        )

    except (ServiceError, HTTPException):
        raise
    except Exception as e:
        logger.exception(f"Login error: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Authentication failed",
        )


# ============================================================================
# TOKEN LIFECYCLE ENDPOINTS
# ============================================================================


@router.post(
    "/refresh-token",
    response_model=TokenPairResponse,
    summary="Rotate a refresh token",
    description="""
    Exchange a refresh token for a new access/refresh pair.
    The presented refresh token is revoked and cannot be used again.
    """,
)
async def refresh_token(
    request: RefreshTokenRequest,
    session_manager: AuthSessionManager = Depends(get_session_manager),
):
    """
    Raises:
        HTTPException 400: If no refresh token was sent
        TokenBlacklistedError (403): If the token was already revoked
        InvalidRefreshTokenError (403): If the token does not verify
    """
    if not request.refresh_token:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail=REFRESH_TOKEN_REQUIRED
        )

    try:
        pair = await session_manager.refresh(request.refresh_token)
        return TokenPairResponse(
            access_token=pair.access_token, refresh_token=pair.refresh_token
        )

    except (ServiceError, HTTPException):
        raise
    except Exception as e:
        logger.exception(f"Token refresh error: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to refresh token",
        )


@router.post("/logout", response_model=MessageResponse, summary="Log out")
async def logout(
    request: Optional[RefreshTokenRequest] = None,
    session_manager: AuthSessionManager = Depends(get_session_manager),
):
    """Revoke the supplied refresh token, if any. Always succeeds unless storage fails."""
    try:
        if request is not None and request.refresh_token:
            await session_manager.logout(request.refresh_token)
        return MessageResponse(message=LOGGED_OUT)

    except Exception as e:
        logger.exception(f"Logout error: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Logout failed",
        )


@router.get("/dashboard", response_model=MessageResponse, summary="Protected greeting")
async def dashboard(current_user: AuthTokenPayload = Depends(get_current_user)):
    logger.debug(f"Dashboard accessed by user {current_user.id}")
    return MessageResponse(message="Welcome to the dashboard")
