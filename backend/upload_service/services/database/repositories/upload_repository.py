"""
Upload Repository
=================
Database operations for upload records.
"""

from contextlib import contextmanager
from typing import Iterator, List, Optional

from bson import ObjectId
from pymongo import DESCENDING
from pymongo.errors import DuplicateKeyError, PyMongoError

from upload_service.core.exceptions import ConflictError, TransientStorageError
from upload_service.models.upload import UploadRecordInDB, UploadStatus, utc_now
from upload_service.services.database import db_client
from upload_service.services.database.mongodb import DatabaseNotConnectedError
from upload_service.core.logging_config import get_logger


logger = get_logger(__name__)


@contextmanager
def database_errors(action: str) -> Iterator[None]:
    """Map driver and connection failures to TransientStorageError"""
    try:
        yield
    except (PyMongoError, DatabaseNotConnectedError) as e:
        logger.error(f"Failed to {action}: {e}")
        raise TransientStorageError(f"Failed to {action}", code="database_error") from e


class UploadRepository:
    """
    Upload repository for database operations

    Records are insert-only: there is no update path, and deletion is an
    administrative concern outside this service.
    """

    @property
    def collection(self):
        return db_client.get_uploads_collection()

    async def create(
        self,
        title: str,
        storage_key: str,
        content_type: str,
        size_bytes: int,
        original_filename: Optional[str] = None,
    ) -> UploadRecordInDB:
        """
        Create a new upload record

        Args:
            title: Logical title supplied by the client
            storage_key: Key of the stored object
            content_type: MIME type of the stored object
            size_bytes: Stored object size
            original_filename: Filename as uploaded

        Returns:
            UploadRecordInDB: Created record

        Raises:
            ConflictError: If a record already uses the storage key
            TransientStorageError: If the database is unreachable
        """
        record_dict = {
            "title": title,
            "storage_key": storage_key,
            "content_type": content_type,
            "size_bytes": size_bytes,
            "original_filename": original_filename,
            "status": UploadStatus.COMPLETE.value,
            "created_at": utc_now(),
        }

        with database_errors(f"persist upload record for {storage_key}"):
            try:
                result = await self.collection.insert_one(record_dict)
            except DuplicateKeyError:
                logger.warning(f"Duplicate storage key attempted: {storage_key}")
                raise ConflictError(storage_key)

        record_dict["_id"] = result.inserted_id

        logger.info(
            "Upload record created: {}",
            storage_key,
            record_id=str(result.inserted_id),
        )

        return UploadRecordInDB(**record_dict)

    async def get_by_id(self, record_id: str) -> Optional[UploadRecordInDB]:
        """
        Get upload record by ID

        Returns:
            Optional[UploadRecordInDB]: Record if found
        """
        if not ObjectId.is_valid(record_id):
            return None

        with database_errors(f"load upload record {record_id}"):
            record = await self.collection.find_one({"_id": ObjectId(record_id)})

        if record:
            return UploadRecordInDB(**record)
        return None

    async def get_by_storage_key(self, storage_key: str) -> Optional[UploadRecordInDB]:
        """Get upload record by storage key"""
        with database_errors(f"look up storage key {storage_key}"):
            record = await self.collection.find_one({"storage_key": storage_key})

        if record:
            return UploadRecordInDB(**record)
        return None

    async def exists_by_storage_key(self, storage_key: str) -> bool:
        """Check whether a record already uses the storage key"""
        with database_errors(f"check storage key {storage_key}"):
            record = await self.collection.find_one({"storage_key": storage_key}, {"_id": 1})
        return record is not None

    async def list(self, skip: int = 0, limit: int = 20) -> List[UploadRecordInDB]:
        """
        Get upload records, newest first

        Args:
            skip: Number of records to skip
            limit: Maximum number of records to return

        Returns:
            List[UploadRecordInDB]: Records
        """
        records = []
        with database_errors("list upload records"):
            cursor = self.collection.find({}).sort("created_at", DESCENDING).skip(skip).limit(limit)
            async for record in cursor:
                records.append(UploadRecordInDB(**record))

        return records

    async def count(self) -> int:
        """Count upload records"""
        with database_errors("count upload records"):
            return await self.collection.count_documents({})


# Global repository instance
upload_repository = UploadRepository()
