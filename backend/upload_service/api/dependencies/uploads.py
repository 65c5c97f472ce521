"""
Upload Dependencies
===================
Exposes the upload service built during application startup.
"""

from fastapi import HTTPException, Request, status

from upload_service.services.uploads import UploadService


def get_upload_service(request: Request) -> UploadService:
    """
    Get the upload service for this process

    Raises:
        HTTPException 503: If startup did not complete
    """
    service = getattr(request.app.state, "upload_service", None)
    if service is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Upload service is not initialized"
        )
    return service
