"""
KYC Endpoints
-------------
Identity-verification media upload for users, review decisions for admins.
"""

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, File, HTTPException, Response, UploadFile, status
from loguru import logger

from trustgate.auth.dependencies import (
    get_current_user,
    get_kyc_service,
    get_media_storage,
    require_admin,
)
from trustgate.auth.models import AuthTokenPayload
from trustgate.core.errors import KYCMediaMissingError, KYCNotFoundError, ServiceError
from trustgate.models.kyc_models import (
    KYC_APPROVED,
    KYC_REJECTED,
    KYCSubmission,
    KYCSubmissionResponse,
)
from trustgate.psql_db_services.kyc_service import KYCService
from trustgate.storage.media_storage import MediaStorage

IMAGE_FOLDER = "kyc_images"
VIDEO_FOLDER = "kyc_videos"

# ============================================================================
# ROUTER INITIALIZATION
# ============================================================================

router = APIRouter(prefix="/kyc", tags=["KYC"])


async def _discard_media(media: MediaStorage, urls: list) -> None:
    """Remove media stored for an upload that was not recorded."""
    for url in urls:
        try:
            await media.delete(url)
        except Exception as e:
            logger.warning(f"Could not remove orphaned media {url}: {e}")


# ============================================================================
# USER ENDPOINTS
# ============================================================================


@router.post(
    "/upload",
    response_model=KYCSubmissionResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Submit KYC media",
    description="""
    Upload an identity image and video for review.

    Returns 201 for a first submission and 200 when a rejected submission
    is replaced. Approved or pending submissions cannot be replaced.
    """,
)
async def upload_kyc(
    response: Response,
    image: Optional[UploadFile] = File(None, description="Identity image"),
    video: Optional[UploadFile] = File(None, description="Identity video"),
    current_user: AuthTokenPayload = Depends(get_current_user),
    kyc_service: KYCService = Depends(get_kyc_service),
    media: MediaStorage = Depends(get_media_storage),
):
    """
    Raises:
        KYCAlreadyApprovedError / KYCAlreadyPendingError (400)
        KYCMediaMissingError (400): If either file is missing
    """
    logger.info(f"KYC upload from user {current_user.id}")

    try:
        await kyc_service.ensure_can_submit(current_user.id)

        if image is None or video is None:
            raise KYCMediaMissingError()

        image_bytes = await image.read()
        video_bytes = await video.read()
        if not image_bytes or not video_bytes:
            raise KYCMediaMissingError()

        stored_urls = []
        try:
            image_url = await media.save(IMAGE_FOLDER, image.filename, image_bytes)
            stored_urls.append(image_url)
            video_url = await media.save(VIDEO_FOLDER, video.filename, video_bytes)
            stored_urls.append(video_url)

            submission, created = await kyc_service.submit(
                current_user.id, image_url, video_url
            )
        except Exception:
            await _discard_media(media, stored_urls)
            raise

        if created:
            return KYCSubmissionResponse(
                message="KYC submitted successfully", kyc=submission
            )

        response.status_code = status.HTTP_200_OK
        return KYCSubmissionResponse(message="KYC updated successfully", kyc=submission)

    except (ServiceError, HTTPException):
        raise
    except Exception as e:
        logger.exception(f"KYC upload error: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal server error during KYC upload",
        )


@router.get("/status", response_model=KYCSubmission, summary="Get own KYC status")
async def get_kyc_status(
    current_user: AuthTokenPayload = Depends(get_current_user),
    kyc_service: KYCService = Depends(get_kyc_service),
):
    try:
        submission = await kyc_service.get_submission(current_user.id)
        if submission is None:
            raise KYCNotFoundError()
        return submission

    except (ServiceError, HTTPException):
        raise
    except Exception as e:
        logger.exception(f"KYC status error: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Error fetching KYC status",
        )


# ============================================================================
# ADMIN ENDPOINTS
# ============================================================================


async def _review(
    kyc_service: KYCService, admin: AuthTokenPayload, user_id: UUID, decision: str
) -> KYCSubmissionResponse:
    logger.info(f"Admin {admin.id} set KYC of user {user_id} to {decision}")
    try:
        submission = await kyc_service.set_status(user_id, decision)
        return KYCSubmissionResponse(
            message=f"KYC {decision} successfully", kyc=submission
        )

    except (ServiceError, HTTPException):
        raise
    except Exception as e:
        logger.exception(f"KYC review error: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Error updating KYC to {decision}",
        )


@router.patch(
    "/approve/{user_id}",
    response_model=KYCSubmissionResponse,
    summary="Approve a user's KYC (admin only)",
)
async def approve_kyc(
    user_id: UUID,
    current_user: AuthTokenPayload = Depends(require_admin),
    kyc_service: KYCService = Depends(get_kyc_service),
):
    return await _review(kyc_service, current_user, user_id, KYC_APPROVED)


@router.patch(
    "/reject/{user_id}",
    response_model=KYCSubmissionResponse,
    summary="Reject a user's KYC (admin only)",
)
async def reject_kyc(
    user_id: UUID,
    current_user: AuthTokenPayload = Depends(require_admin),
    kyc_service: KYCService = Depends(get_kyc_service),
):
    return await _review(kyc_service, current_user, user_id, KYC_REJECTED)
