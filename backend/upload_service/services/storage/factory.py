"""
Object Store Factory
====================
Selects the storage backend once, at process startup.
"""

from upload_service.core.config import Settings
from upload_service.core.exceptions import ConfigurationError
from upload_service.core.logging_config import get_logger
from upload_service.services.storage.base import ObjectStore
from upload_service.services.storage.local import LocalObjectStore
from upload_service.services.storage.s3 import S3ObjectStore


logger = get_logger(__name__)


def create_object_store(settings: Settings) -> ObjectStore:
    """
    Build the configured object store

    Args:
        settings: Application settings

    Returns:
        ObjectStore: Local or S3-compatible backend

    Raises:
        ConfigurationError: If the s3 backend is selected but not configured
    """
    if settings.STORAGE_BACKEND == "s3":
        if not settings.s3_configured:
            raise ConfigurationError(
                "STORAGE_BACKEND=s3 requires S3_BUCKET_NAME, S3_ACCESS_KEY_ID and S3_SECRET_ACCESS_KEY",
                details={"backend": "s3"},
            )
        logger.info("S3 configured. Using S3-compatible bucket for storage.")
        return S3ObjectStore(
            bucket_name=settings.S3_BUCKET_NAME,
            endpoint_url=settings.S3_ENDPOINT_URL,
            region_name=settings.S3_REGION,
            access_key_id=settings.S3_ACCESS_KEY_ID,
            secret_access_key=settings.S3_SECRET_ACCESS_KEY,
            read_timeout=settings.STORAGE_TIMEOUT_SECONDS,
        )

    logger.info("Using local filesystem storage.")
    return LocalObjectStore(settings.LOCAL_STORAGE_PATH)
