"""
Data Models
===========
Pydantic models for data validation and serialization.
"""

from upload_service.models.upload import (
    FileMetadata,
    StoredObject,
    UploadList,
    UploadRecord,
    UploadRecordInDB,
    UploadResult,
    UploadStatus,
    ValidationIssue,
)


__all__ = [
    "FileMetadata",
    "StoredObject",
    "UploadList",
    "UploadRecord",
    "UploadRecordInDB",
    "UploadResult",
    "UploadStatus",
    "ValidationIssue",
]
