"""
Upload Models
=============
Pydantic models for upload records, file metadata and upload outcomes.
"""

from datetime import datetime, timezone
from typing import Optional, List, Annotated, Any
from enum import Enum

from pydantic import BaseModel, Field, BeforeValidator
from bson import ObjectId


def _object_id_to_str(value: Any) -> Any:
    if isinstance(value, ObjectId):
        return str(value)
    return value


PyObjectId = Annotated[str, BeforeValidator(_object_id_to_str)]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class UploadStatus(str, Enum):
    """Lifecycle of a single upload"""
    RECEIVED = "received"
    VALIDATED = "validated"
    STORED = "stored"
    RECORDED = "recorded"
    COMPLETE = "complete"
    REJECTED = "rejected"


class FileMetadata(BaseModel):
    """Declared metadata of an incoming file"""
    filename: str = Field(..., description="Original filename")
    content_type: str = Field(..., description="Declared MIME type")
    size_bytes: int = Field(..., ge=0, description="Payload size in bytes")

    @property
    def extension(self) -> str:
        """Lowercased extension without the dot, empty if none"""
        name = self.filename.replace("\\", "/").rsplit("/", 1)[-1]
        if "." not in name:
            return ""
        return name.rsplit(".", 1)[-1].strip().lower()


class ValidationIssue(BaseModel):
    """A single failing field"""
    field: str
    message: str


class StoredObject(BaseModel):
    """Object payload as returned by an object store"""
    key: str
    data: bytes
    content_type: str = "application/octet-stream"


class UploadRecordInDB(BaseModel):
    """Upload record in database"""
    id: Optional[PyObjectId] = Field(default=None, alias="_id")
    title: str = Field(..., description="Logical title supplied by the client")
    storage_key: str = Field(..., description="Key of the object in the store")

    content_type: str = Field(..., description="MIME type of the stored object")
    size_bytes: int = Field(..., description="Stored object size in bytes")
    original_filename: Optional[str] = Field(default=None)

    status: UploadStatus = Field(default=UploadStatus.COMPLETE)
    created_at: datetime = Field(default_factory=utc_now)

    model_config = {
        "populate_by_name": True,
        "frozen": True,
    }


class UploadRecord(BaseModel):
    """Upload record response model"""
    id: str
    title: str
    storage_key: str
    content_type: str
    size_bytes: int
    status: UploadStatus
    created_at: datetime

    @classmethod
    def from_db(cls, record: UploadRecordInDB) -> "UploadRecord":
        """Convert database model to response model"""
        return cls(
            id=str(record.id),
            title=record.title,
            storage_key=record.storage_key,
            content_type=record.content_type,
            size_bytes=record.size_bytes,
            status=record.status,
            created_at=record.created_at,
        )


class UploadList(BaseModel):
    """Paginated upload listing"""
    uploads: List[UploadRecord]
    total: int
    skip: int
    limit: int


class UploadResult(BaseModel):
    """Outcome of a successful upload"""
    record: UploadRecordInDB
    status: UploadStatus = UploadStatus.COMPLETE
    transitions: List[UploadStatus] = Field(default_factory=list)
