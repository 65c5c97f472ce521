"""
Custom Exceptions
=================
Application-specific exception classes.

Every failure in the upload flow ends in one of these types. The API layer
maps them to HTTP responses in ``upload_service.api.errors``.
"""

from enum import Enum
from typing import TYPE_CHECKING, Any, Dict, List, Optional

if TYPE_CHECKING:
    from upload_service.models.upload import ValidationIssue


class UploadServiceError(Exception):
    """Base exception for all upload service errors"""

    def __init__(self, message: str, details: Optional[Any] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details if details is not None else {}


class ConfigurationError(UploadServiceError):
    """Configuration is invalid or incomplete"""


class ValidationError(UploadServiceError):
    """
    Upload rejected by policy

    Carries every failing field, not just the first one.
    """

    def __init__(self, issues: List["ValidationIssue"]) -> None:
        self.issues = list(issues)
        fields = ", ".join(issue.field for issue in self.issues)
        super().__init__(
            f"Upload rejected: invalid {fields}",
            details=[issue.model_dump() for issue in self.issues],
        )

    @property
    def fields(self) -> List[str]:
        return [issue.field for issue in self.issues]


class ConflictError(UploadServiceError):
    """A record already exists for the storage key"""

    def __init__(self, storage_key: str) -> None:
        self.storage_key = storage_key
        super().__init__(
            f"Storage key already in use: {storage_key}",
            details={"storage_key": storage_key},
        )


class NotFoundError(UploadServiceError):
    """Object or record does not exist"""

    def __init__(self, key: str, resource: str = "object") -> None:
        self.key = key
        self.resource = resource
        super().__init__(
            f"{resource.capitalize()} not found: {key}",
            details={"resource": resource, "key": key},
        )


class StorageErrorKind(str, Enum):
    """Whether a storage failure is worth retrying"""
    TRANSIENT = "transient"
    PERMANENT = "permanent"


class StorageError(UploadServiceError):
    """Object store I/O failure"""

    kind: StorageErrorKind = StorageErrorKind.PERMANENT

    def __init__(
        self,
        message: str,
        code: str = "storage_error",
        kind: Optional[StorageErrorKind] = None,
    ) -> None:
        if kind is not None:
            self.kind = kind
        self.code = code
        details: Dict[str, str] = {"code": code, "kind": self.kind.value}
        super().__init__(message, details=details)

    @property
    def is_transient(self) -> bool:
        return self.kind is StorageErrorKind.TRANSIENT


class TransientStorageError(StorageError):
    """Network failure, timeout or throttling; retry with backoff"""
    kind = StorageErrorKind.TRANSIENT


class PermanentStorageError(StorageError):
    """Permission denied, missing bucket, quota exceeded"""
    kind = StorageErrorKind.PERMANENT

