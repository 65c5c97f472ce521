"""
API Dependencies
================
Centralized imports for API dependencies.
"""

from upload_service.api.dependencies.logging import RequestLoggingMiddleware
from upload_service.api.dependencies.uploads import get_upload_service

__all__ = [
    "get_upload_service",
    "RequestLoggingMiddleware",
]
