"""
Database Repositories
=====================
"""

from upload_service.services.database.repositories.upload_repository import (
    UploadRepository,
    upload_repository,
)

__all__ = ["UploadRepository", "upload_repository"]
