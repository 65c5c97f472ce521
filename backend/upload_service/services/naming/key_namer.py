"""
Storage Key Naming
==================
Derives storage keys of the form ``{unix_timestamp}_{sanitized_title}.{extension}``.
"""

import re
from datetime import datetime, timezone
from typing import Union

from upload_service.core.exceptions import ValidationError
from upload_service.models.upload import ValidationIssue


Timestamp = Union[datetime, int, float]

_SEPARATORS = re.compile(r"[/\\]+")
_WHITESPACE = re.compile(r"\s+")
_UNDERSCORES = re.compile(r"_{2,}")


class KeyNamer:
    """
    Key Namer

    Same title, extension and second always yield the same key. Collisions
    are not resolved here; the upload service rejects them as conflicts.
    """

    def __init__(self, fallback_title: str = "untitled", max_title_length: int = 200):
        self.fallback_title = fallback_title
        self.max_title_length = max_title_length

    def sanitize(self, title: str) -> str:
        """
        Make a title safe for use inside a storage key

        Strips path separators and non-printable characters, collapses
        whitespace to underscores and removes leading dots.
        """
        cleaned = _SEPARATORS.sub("", title or "")
        cleaned = "".join(ch for ch in cleaned if ch.isprintable() or ch.isspace())
        cleaned = _WHITESPACE.sub("_", cleaned.strip())
        cleaned = _UNDERSCORES.sub("_", cleaned)
        cleaned = cleaned.lstrip(".")[: self.max_title_length]
        return cleaned or self.fallback_title

    @staticmethod
    def to_unix_seconds(timestamp: Timestamp) -> int:
        if isinstance(timestamp, datetime):
            if timestamp.tzinfo is None:
                timestamp = timestamp.replace(tzinfo=timezone.utc)
            return int(timestamp.timestamp())
        return int(timestamp)

    @staticmethod
    def normalize_extension(extension: str) -> str:
        ext = _SEPARATORS.sub("", extension or "").strip().lstrip(".").lower()
        return "".join(ch for ch in ext if ch.isalnum())

    def make_key(self, title: str, extension: str, timestamp: Timestamp) -> str:
        """
        Build the storage key for an upload

        Args:
            title: Client supplied title
            extension: File extension, with or without the dot
            timestamp: Upload time (datetime or unix seconds)

        Returns:
            str: Storage key

        Raises:
            ValidationError: If the extension is empty after normalization
        """
        ext = self.normalize_extension(extension)
        if not ext:
            raise ValidationError([
                ValidationIssue(field="extension", message="File extension is required")
            ])
        return f"{self.to_unix_seconds(timestamp)}_{self.sanitize(title)}.{ext}"
