"""
Health Check Endpoints
======================
Provides health status for monitoring and observability.

Endpoints:
- GET /health - Simple health check (for load balancers)
- GET /health/detailed - Database and storage backend status
"""

import time
from datetime import datetime, timezone
from typing import Dict, Any

from fastapi import APIRouter, Request
from pydantic import BaseModel, Field

from upload_service.core.config import settings
from upload_service.services.database.mongodb import mongodb_manager


# ============================================================================
# RESPONSE MODELS
# ============================================================================

class HealthStatus(BaseModel):
    """Simple health status response"""
    status: str = Field(..., description="Overall system status")
    timestamp: str = Field(..., description="Current server timestamp")
    version: str = Field(..., description="API version")
    environment: str = Field(..., description="Current environment")


class DependencyHealth(BaseModel):
    """Health status of a single dependency"""
    name: str = Field(..., description="Dependency name")
    status: str = Field(..., description="Status: healthy, unhealthy, not_connected")
    response_time_ms: float | None = Field(None, description="Response time in milliseconds")
    message: str | None = Field(None, description="Additional information")
    details: Dict[str, Any] = Field(default_factory=dict, description="Extra details")


class DetailedHealthStatus(HealthStatus):
    """Detailed health status response"""
    uptime_seconds: float = Field(..., description="Server uptime in seconds")
    dependencies: list[DependencyHealth] = Field(default_factory=list, description="Dependency health checks")


SERVER_START_TIME = time.time()

router = APIRouter()


# ============================================================================
# HELPER FUNCTIONS
# ============================================================================

async def check_mongodb_health() -> DependencyHealth:
    """
    Check MongoDB connection health

    Returns:
        DependencyHealth: MongoDB health status
    """
    if not mongodb_manager.client:
        return DependencyHealth(
            name="mongodb",
            status="not_connected",
            message="MongoDB client not initialized",
        )

    start_time = time.time()
    is_healthy = await mongodb_manager.health_check()
    response_time_ms = (time.time() - start_time) * 1000

    return DependencyHealth(
        name="mongodb",
        status="healthy" if is_healthy else "unhealthy",
        response_time_ms=round(response_time_ms, 2),
        message="MongoDB connection is healthy" if is_healthy else "MongoDB ping failed",
        details={"database": settings.MONGODB_DB_NAME},
    )


def check_storage_backend(request: Request) -> DependencyHealth:
    """Report which object store was selected at startup"""
    store = getattr(request.app.state, "object_store", None)
    if store is None:
        return DependencyHealth(
            name="object_store",
            status="not_connected",
            message="Object store not initialized",
        )
    return DependencyHealth(
        name="object_store",
        status="healthy",
        details={"backend": store.name},
    )


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


# ============================================================================
# ENDPOINTS
# ============================================================================

@router.get(
    "/health",
    response_model=HealthStatus,
    summary="Basic health check",
    tags=["health"],
)
async def health_check():
    """Liveness check for load balancers"""
    return HealthStatus(
        status="healthy",
        timestamp=_now(),
        version=settings.APP_VERSION,
        environment=settings.ENVIRONMENT,
    )


@router.get(
    "/health/detailed",
    response_model=DetailedHealthStatus,
    summary="Detailed health check",
    tags=["health"],
)
async def detailed_health_check(request: Request):
    """Database and object store status"""
    dependencies = [await check_mongodb_health(), check_storage_backend(request)]
    overall = "healthy" if all(d.status == "healthy" for d in dependencies) else "degraded"

    return DetailedHealthStatus(
        status=overall,
        timestamp=_now(),
        version=settings.APP_VERSION,
        environment=settings.ENVIRONMENT,
        uptime_seconds=round(time.time() - SERVER_START_TIME, 2),
        dependencies=dependencies,
    )
