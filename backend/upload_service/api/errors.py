"""
Exception Handlers
==================
Maps service exceptions to HTTP responses.
"""

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from upload_service.core.exceptions import (
    ConflictError,
    NotFoundError,
    StorageError,
    UploadServiceError,
    ValidationError,
)
from upload_service.core.logging_config import get_logger


logger = get_logger(__name__)


def status_code_for(exc: UploadServiceError) -> int:
    """Pick the HTTP status code for a service exception"""
    if isinstance(exc, ValidationError):
        return 422
    if isinstance(exc, ConflictError):
        return status.HTTP_409_CONFLICT
    if isinstance(exc, NotFoundError):
        return status.HTTP_404_NOT_FOUND
    if isinstance(exc, StorageError):
        if exc.is_transient:
            return status.HTTP_503_SERVICE_UNAVAILABLE
        return status.HTTP_502_BAD_GATEWAY
    return status.HTTP_500_INTERNAL_SERVER_ERROR


async def upload_service_exception_handler(request: Request, exc: UploadServiceError) -> JSONResponse:
    """Handle upload service exceptions"""
    status_code = status_code_for(exc)

    log = logger.warning if status_code < 500 else logger.error
    log(
        "Upload service exception: {type} - {message}",
        type=type(exc).__name__,
        message=exc.message,
        path=request.url.path,
        request_id=getattr(request.state, "request_id", None),
    )

    content = {
        "error": type(exc).__name__,
        "message": exc.message,
        "details": exc.details,
    }
    if isinstance(exc, StorageError):
        content["code"] = exc.code

    return JSONResponse(status_code=status_code, content=content)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(UploadServiceError, upload_service_exception_handler)
