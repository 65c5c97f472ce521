"""
Object Upload Service - Main Application
========================================
FastAPI application entry point with lifecycle management.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator
from datetime import datetime, timezone

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from upload_service.core.config import settings, validate_configuration
from upload_service.api.errors import register_exception_handlers
from upload_service.api.routes import debug, health, uploads
from upload_service.core.logging_config import setup_logging, get_logger
from upload_service.api.dependencies.logging import RequestLoggingMiddleware
from upload_service.services.database import initialize_database, close_database
from upload_service.services.storage import create_object_store
from upload_service.services.uploads import UploadService

logger = get_logger(__name__)

# ============================================================================
# APPLICATION LIFESPAN MANAGEMENT
# ============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator:
    """
    Application Lifespan Manager
    Handles startup and shutdown events for the application.
    """

    # ========================================================================
    # STARTUP
    # ========================================================================

    setup_logging()
    validate_configuration()

    logger.info("=" * 70)
    logger.info("🚀 Starting {} v{}", settings.APP_NAME, settings.APP_VERSION)
    logger.info("=" * 70)

    logger.info("📋 Environment: {}", settings.ENVIRONMENT)
    logger.info("🐛 Debug Mode: {}", settings.DEBUG)
    logger.info("🌐 API Host: {}:{}", settings.API_HOST, settings.API_PORT)
    logger.info("🔐 CORS Allowed Origins: {}", settings.CORS_ORIGINS)

    try:
        await initialize_database()
        logger.info("✅ Database initialized successfully")
    except Exception as e:
        logger.error(f"❌ Failed to initialize database: {e}")
        if settings.is_production:
            raise

    # Backend is chosen once here and never re-dispatched per request
    object_store = create_object_store(settings)
    app.state.object_store = object_store
    app.state.upload_service = UploadService.from_settings(settings, object_store)
    logger.info("🗄️ Object store backend: {}", object_store.name)

    logger.info("✅ Application startup complete")
    logger.info("=" * 70)

    yield

    # ========================================================================
    # SHUTDOWN
    # ========================================================================

    logger.info("🛑 Shutting down application...")

    await object_store.close()

    try:
        await close_database()
        logger.info("✅ Database connection closed")
    except Exception:
        logger.exception("⚠️ Error while closing database connection")

    logger.info("✅ Shutdown complete")


# ============================================================================
# FASTAPI APPLICATION
# ============================================================================

def create_app() -> FastAPI:
    """Build the FastAPI application"""
    application = FastAPI(
        title=settings.APP_NAME,
        description="## Durable object upload service",
        version=settings.APP_VERSION,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
        openapi_tags=[
            {"name": "health", "description": "Health check and system status endpoints"},
            {"name": "uploads", "description": "Upload submission and retrieval endpoints"},
        ],
    )

    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "X-Process-Time"],
        max_age=600,
    )
    application.add_middleware(RequestLoggingMiddleware)

    register_exception_handlers(application)

    application.include_router(health.router, prefix="/api/v1", tags=["health"])
    application.include_router(uploads.router, prefix="/api/v1/uploads", tags=["uploads"])

    if settings.is_development:
        application.include_router(debug.router, prefix="/api/v1/debug", tags=["debug"])

    @application.get("/", summary="Root endpoint", tags=["health"])
    async def root():
        return {
            "name": settings.APP_NAME,
            "version": settings.APP_VERSION,
            "environment": settings.ENVIRONMENT,
            "status": "operational",
            "docs": "/docs",
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

    return application


app = create_app()


# ============================================================================
# APPLICATION ENTRY POINT
# ============================================================================

def run() -> None:
    import uvicorn

    from upload_service.core.server_config import get_uvicorn_config

    uvicorn.run(**get_uvicorn_config())


if __name__ == "__main__":
    run()
