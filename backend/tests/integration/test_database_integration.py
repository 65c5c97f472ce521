"""
Database Integration Tests
==========================
End-to-end upload flow against a real MongoDB.

Set RUN_MONGO_INTEGRATION=1 (and MONGODB_URL if not local) to run.
"""

import os

import pytest
import pytest_asyncio

from upload_service.core.exceptions import ConflictError
from upload_service.services.database import mongodb_manager, db_client
from upload_service.services.database.repositories import upload_repository
from upload_service.services.uploads import UploadService


pytestmark = pytest.mark.skipif(
    not os.getenv("RUN_MONGO_INTEGRATION"),
    reason="RUN_MONGO_INTEGRATION not set",
)


@pytest_asyncio.fixture
async def clean_database():
    """Setup and cleanup database"""
    await mongodb_manager.connect()
    await db_client.initialize()

    yield

    await db_client.get_uploads_collection().delete_many({"storage_key": {"$regex": "_integration"}})
    db_client.reset()
    await mongodb_manager.disconnect()


@pytest.mark.asyncio
async def test_complete_upload_workflow(clean_database, local_store, fixed_clock, jpeg_bytes):
    """Test store, conflict, lookup and download"""
    service = UploadService(local_store, clock=fixed_clock)

    result = await service.store("integration", "beach.jpg", "image/jpeg", jpeg_bytes)
    assert result.record.id is not None

    with pytest.raises(ConflictError):
        await service.store("integration", "beach.jpg", "image/jpeg", jpeg_bytes)

    found = await upload_repository.get_by_storage_key(result.record.storage_key)
    assert found is not None
    assert found.id == result.record.id

    record, stored = await service.fetch(result.record.id)
    assert record.title == "integration"
    assert stored.data == jpeg_bytes


@pytest.mark.asyncio
async def test_indexes_exist(clean_database):
    indexes = await db_client.verify_indexes()

    assert "storage_key_unique" in indexes["uploads"]
