"""
Shared test fixtures
"""

from datetime import datetime, timezone

import pytest
import pytest_asyncio
from mongomock_motor import AsyncMongoMockClient

from upload_service.services.database import db_client, mongodb_manager
from upload_service.services.storage import LocalObjectStore


FIXED_NOW = datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)
FIXED_TS = int(FIXED_NOW.timestamp())


@pytest_asyncio.fixture
async def mongo_database():
    """In-process MongoDB with the service indexes applied"""
    mongodb_manager.attach(AsyncMongoMockClient(), "uploads_test")
    await db_client.initialize()

    yield mongodb_manager.get_database()

    db_client.reset()
    mongodb_manager.client = None
    mongodb_manager.db = None


@pytest.fixture
def local_store(tmp_path):
    """Local object store rooted in a temp directory"""
    return LocalObjectStore(tmp_path / "objects")


@pytest.fixture
def fixed_clock():
    return lambda: FIXED_NOW


@pytest.fixture
def jpeg_bytes():
    """2 KiB payload with a JPEG header"""
    return b"\xff\xd8\xff\xe0" + b"\x00" * (2048 - 4)
