"""
Upload Routes
=============
Upload submission and retrieval endpoints.
"""

from urllib.parse import quote

from fastapi import APIRouter, Depends, File, Form, Query, Response, UploadFile, status

from upload_service.api.dependencies import get_upload_service
from upload_service.core.exceptions import NotFoundError
from upload_service.models.upload import UploadList, UploadRecord
from upload_service.services.uploads import UploadService
from upload_service.core.logging_config import get_logger


logger = get_logger(__name__)
router = APIRouter()


# ============================================================================
# UPLOAD SUBMISSION
# ============================================================================

@router.post(
    "",
    response_model=UploadRecord,
    status_code=status.HTTP_201_CREATED,
    summary="Upload file",
    description="Store a titled file in the configured object store",
    tags=["uploads"],
)
async def create_upload(
    title: str = Form(..., description="Title of the upload"),
    file: UploadFile = File(..., description="File to upload"),
    service: UploadService = Depends(get_upload_service),
):
    """
    Upload File

    Validates the file, stores it under a key derived from the title and
    the current time, then records the upload.

    Raises:
        ValidationError (422): Size, extension, content type or title rejected
        ConflictError (409): Derived storage key already recorded
        StorageError (502/503): Backend failure
    """
    # One byte past the limit is enough for the size check to fail
    max_bytes = service.validator.policy.max_size_bytes
    data = await file.read(max_bytes + 1)

    result = await service.store(
        title=title,
        filename=file.filename or "",
        content_type=file.content_type or "",
        data=data,
    )

    logger.info(
        "Upload stored: {}",
        result.record.storage_key,
        record_id=result.record.id,
        size_bytes=result.record.size_bytes,
    )

    return UploadRecord.from_db(result.record)


# ============================================================================
# UPLOAD RETRIEVAL
# ============================================================================

@router.get(
    "",
    response_model=UploadList,
    summary="List uploads",
    description="Get recorded uploads, newest first",
    tags=["uploads"],
)
async def list_uploads(
    skip: int = Query(0, ge=0, description="Number of uploads to skip"),
    limit: int = Query(20, ge=1, le=100, description="Maximum number of uploads to return"),
    service: UploadService = Depends(get_upload_service),
):
    """List Uploads"""
    records = await service.repository.list(skip=skip, limit=limit)
    total = await service.repository.count()

    return UploadList(
        uploads=[UploadRecord.from_db(record) for record in records],
        total=total,
        skip=skip,
        limit=limit,
    )


@router.get(
    "/{upload_id}",
    response_model=UploadRecord,
    summary="Get upload details",
    tags=["uploads"],
)
async def get_upload(
    upload_id: str,
    service: UploadService = Depends(get_upload_service),
):
    """
    Get Upload Details

    Raises:
        NotFoundError (404): If no record exists
    """
    record = await service.repository.get_by_id(upload_id)
    if record is None:
        raise NotFoundError(upload_id, resource="upload")
    return UploadRecord.from_db(record)


@router.get(
    "/{upload_id}/content",
    summary="Download upload content",
    response_class=Response,
    tags=["uploads"],
)
async def get_upload_content(
    upload_id: str,
    service: UploadService = Depends(get_upload_service),
):
    """
    Download Upload Content

    Returns the stored bytes with their content type.
    """
    record, stored = await service.fetch(upload_id)
    return Response(
        content=stored.data,
        media_type=stored.content_type,
        headers={"Content-Disposition": f"inline; filename*=UTF-8''{quote(record.storage_key)}"},
    )
