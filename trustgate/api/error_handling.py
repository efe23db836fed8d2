"""
Exception Handlers
------------------
Renders every failure as `{"error": message}` with the matching status code.
"""

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from loguru import logger
from starlette.exceptions import HTTPException as StarletteHTTPException

from trustgate.core.errors import ServiceError

INTERNAL_ERROR = "Internal server error"


def _error_response(status_code: int, message: str, headers=None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code, content={"error": message}, headers=headers
    )


def _describe_validation_errors(exc: RequestValidationError) -> str:
    parts = []
    for error in exc.errors():
        # Drop the "body"/"query" prefix from the location
        location = ".".join(str(item) for item in error.get("loc", ())[1:])
        message = error.get("msg", "Invalid value")
        parts.append(f"{location}: {message}" if location else message)
    return "; ".join(parts) or "Invalid request"


def register_exception_handlers(app: FastAPI) -> None:
    """Install handlers for service errors, validation errors and HTTP errors."""

    @app.exception_handler(ServiceError)
    async def handle_service_error(request: Request, exc: ServiceError):
        log_fn = logger.error if exc.status_code >= 500 else logger.warning
        log_fn(
            f"{request.method} {request.url.path} -> {exc.status_code} "
            f"{type(exc).__name__}: {exc.message}"
        )
        return _error_response(exc.status_code, exc.message, exc.headers)

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError):
        message = _describe_validation_errors(exc)
        logger.warning(f"{request.method} {request.url.path} -> 400 {message}")
        return _error_response(400, message)

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        if exc.status_code >= 500:
            logger.error(f"{request.method} {request.url.path} -> {exc.status_code}")
        message = exc.detail if isinstance(exc.detail, str) else INTERNAL_ERROR
        return _error_response(exc.status_code, message, getattr(exc, "headers", None))

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.opt(exception=exc).error(
            f"Unhandled error on {request.method} {request.url.path}"
        )
        return _error_response(500, INTERNAL_ERROR)
