"""
Service Errors
--------------
Base class for domain failures that map to HTTP responses, plus the KYC
submission errors. Authentication errors live in trustgate.auth.errors.
"""

from typing import Dict, Optional


class ServiceError(Exception):
    """
    Domain failure with an HTTP status and a client-safe message.

    Rendered as {"error": message} by the application's exception handlers.
    """

    status_code: int = 400
    default_message: str = "Request failed"
    headers: Optional[Dict[str, str]] = None

    def __init__(self, message: Optional[str] = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class KYCError(ServiceError):
    pass


class KYCAlreadyApprovedError(KYCError):
    status_code = 400
    default_message = "KYC already approved"


class KYCAlreadyPendingError(KYCError):
    status_code = 400
    default_message = "KYC already pending approval"


class KYCNotFoundError(KYCError):
    status_code = 404
    default_message = "KYC not found"


class KYCMediaMissingError(KYCError):
    status_code = 400
    default_message = "Both image and video are required"
