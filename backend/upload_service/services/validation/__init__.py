"""
Validation Services
===================
Upload policy checks.
"""

from upload_service.services.validation.validator import (
    EXTENSION_CONTENT_TYPES,
    UploadPolicy,
    UploadValidator,
)

__all__ = ["EXTENSION_CONTENT_TYPES", "UploadPolicy", "UploadValidator"]
