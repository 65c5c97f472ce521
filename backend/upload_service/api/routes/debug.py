"""
Debug Endpoints
===============
Development-only endpoints for debugging and inspection.

⚠️  THESE ENDPOINTS ARE DISABLED IN PRODUCTION
"""

from fastapi import APIRouter, HTTPException, status
from fastapi.responses import JSONResponse

from upload_service.core.config import settings
from upload_service.services.database import db_client


router = APIRouter()


def _require_development() -> None:
    if not settings.is_development:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Debug endpoints are only available in development mode"
        )


@router.get(
    "/config",
    summary="View configuration (dev only)",
    description="Returns current configuration with secrets masked. Only available in development.",
    tags=["debug"],
)
async def get_configuration():
    """
    Get Current Configuration

    Returns the current application configuration with all secrets masked.
    """
    _require_development()
    return JSONResponse(content=settings.to_safe_dict())


@router.get(
    "/config/storage",
    summary="View storage configuration",
    description="Returns object storage configuration. Only available in development.",
    tags=["debug"],
)
async def get_storage_config():
    """Get storage configuration"""
    _require_development()
    return settings.get_storage_config()


@router.get(
    "/database/indexes",
    summary="Verify database indexes",
    description="Returns all indexes for all collections. Only available in development.",
    tags=["debug"],
)
async def verify_database_indexes():
    """Verify all database indexes"""
    _require_development()

    indexes = await db_client.verify_indexes()
    total = sum(len(idx_list) for idx_list in indexes.values())

    return {
        "total_indexes": total,
        "collections": len(indexes),
        "indexes": indexes,
    }
