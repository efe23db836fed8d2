"""
User Management Endpoints
-------------------------
Admin listing of registered users together with their KYC state.
"""

import math

from fastapi import APIRouter, Depends, HTTPException, Query, status
from loguru import logger

from trustgate.auth.dependencies import get_users_service, require_admin
from trustgate.auth.models import AuthTokenPayload
from trustgate.models.kyc_models import PaginatedUsersResponse
from trustgate.psql_db_services.users_service import UsersService


# ============================================================================
# ROUTER INITIALIZATION
# ============================================================================

router = APIRouter(prefix="/users", tags=["Users"])


# ============================================================================
# READ ENDPOINTS
# ============================================================================


@router.get(
    "",
    response_model=PaginatedUsersResponse,
    summary="List users (admin only)",
    description="""
    Page through `user`-role accounts, newest first.
    `search` matches a case-insensitive substring of the email address.
    """,
)
async def list_users(
    page: int = Query(1, ge=1, description="Page number (1-based)"),
    limit: int = Query(10, ge=1, le=100, description="Page size"),
    search: str = Query("", max_length=254, description="Email substring filter"),
    current_user: AuthTokenPayload = Depends(require_admin),
    users_service: UsersService = Depends(get_users_service),
):
    """
    List users with pagination and optional email search.

    Returns:
        PaginatedUsersResponse: Page of users, total count and page count

    Raises:
        HTTPException 500: On internal server error
    """
    logger.info(
        f"Admin {current_user.id} listing users: page={page}, limit={limit}, search={search!r}"
    )

    try:
        users, total = await users_service.list_users(
            page=page, limit=limit, search=search.strip()
        )
        return PaginatedUsersResponse(
            users=users,
            total=total,
            page=page,
            total_pages=math.ceil(total / limit),
        )

    except Exception as e:
        logger.exception(f"Error listing users: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Error fetching users",
        )
