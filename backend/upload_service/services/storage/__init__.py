"""
Storage Services
================
Object store abstractions (S3-compatible bucket, local filesystem).
"""

from upload_service.services.storage.base import ObjectStore
from upload_service.services.storage.factory import create_object_store
from upload_service.services.storage.local import LocalObjectStore
from upload_service.services.storage.s3 import S3ObjectStore

__all__ = ["ObjectStore", "LocalObjectStore", "S3ObjectStore", "create_object_store"]
