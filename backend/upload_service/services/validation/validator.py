"""
Upload Validator
================
Checks declared file metadata against the upload policy before any bytes
are accepted. Pure: no I/O.
"""

from dataclasses import dataclass, field
from typing import Dict, FrozenSet, List, Optional

from upload_service.core.config import Settings
from upload_service.core.exceptions import ValidationError
from upload_service.models.upload import FileMetadata, ValidationIssue


# Extension -> MIME types a client may legitimately declare for it
EXTENSION_CONTENT_TYPES: Dict[str, FrozenSet[str]] = {
    "jpeg": frozenset({"image/jpeg", "image/pjpeg"}),
    "jpg": frozenset({"image/jpeg", "image/pjpeg"}),
    "png": frozenset({"image/png"}),
    "gif": frozenset({"image/gif"}),
    "svg": frozenset({"image/svg+xml"}),
}


@dataclass(frozen=True)
class UploadPolicy:
    """Limits applied to every upload"""

    max_size_bytes: int = 2 * 1024 * 1024
    allowed_extensions: FrozenSet[str] = frozenset({"jpeg", "jpg", "png", "gif", "svg"})
    allowed_content_types: FrozenSet[str] = frozenset(
        {"image/jpeg", "image/png", "image/gif", "image/svg+xml"}
    )
    max_title_length: int = 255
    extension_content_types: Dict[str, FrozenSet[str]] = field(
        default_factory=lambda: dict(EXTENSION_CONTENT_TYPES)
    )

    @classmethod
    def from_settings(cls, settings: Settings) -> "UploadPolicy":
        return cls(
            max_size_bytes=settings.MAX_UPLOAD_SIZE_BYTES,
            allowed_extensions=frozenset(e.lower().lstrip(".") for e in settings.ALLOWED_EXTENSIONS),
            allowed_content_types=frozenset(c.lower() for c in settings.ALLOWED_CONTENT_TYPES),
            max_title_length=settings.MAX_TITLE_LENGTH,
        )


class UploadValidator:
    """
    Upload Validator

    Evaluates every rule and reports all failing fields at once.
    """

    def __init__(self, policy: Optional[UploadPolicy] = None):
        self.policy = policy or UploadPolicy()

    def check(self, title: str, metadata: FileMetadata) -> List[ValidationIssue]:
        """
        Collect policy violations

        Args:
            title: Client supplied title
            metadata: Declared file metadata

        Returns:
            List[ValidationIssue]: Empty when the upload is acceptable
        """
        issues: List[ValidationIssue] = []
        policy = self.policy

        stripped = (title or "").strip()
        if not stripped:
            issues.append(ValidationIssue(field="title", message="Title is required"))
        elif len(stripped) > policy.max_title_length:
            issues.append(ValidationIssue(
                field="title",
                message=f"Title must be at most {policy.max_title_length} characters",
            ))

        if metadata.size_bytes == 0:
            issues.append(ValidationIssue(field="size", message="File is empty"))
        elif metadata.size_bytes > policy.max_size_bytes:
            issues.append(ValidationIssue(
                field="size",
                message=f"File too large. Maximum size: {policy.max_size_bytes} bytes",
            ))

        extension = metadata.extension
        if extension not in policy.allowed_extensions:
            issues.append(ValidationIssue(
                field="extension",
                message=(
                    f"File type '{extension or '(none)'}' not allowed. "
                    f"Allowed types: {', '.join(sorted(policy.allowed_extensions))}"
                ),
            ))

        content_type = metadata.content_type.split(";", 1)[0].strip().lower()
        if content_type not in policy.allowed_content_types:
            issues.append(ValidationIssue(
                field="content_type",
                message=f"Content type '{content_type or '(none)'}' not allowed",
            ))
        elif extension in policy.allowed_extensions:
            expected = policy.extension_content_types.get(extension)
            if expected is not None and content_type not in expected:
                issues.append(ValidationIssue(
                    field="content_type",
                    message=f"Content type '{content_type}' does not match extension '{extension}'",
                ))

        return issues

    def validate(self, title: str, metadata: FileMetadata) -> None:
        """
        Raise if the upload violates the policy

        Raises:
            ValidationError: Lists every failing field
        """
        issues = self.check(title, metadata)
        if issues:
            raise ValidationError(issues)
