"""
Upload Services
===============
Upload orchestration.
"""

from upload_service.services.uploads.service import UploadService

__all__ = ["UploadService"]
