"""
Database Client
===============
Centralized database access with collection management.
"""

from typing import Dict, List
from motor.motor_asyncio import AsyncIOMotorCollection

from upload_service.services.database.mongodb import mongodb_manager
from upload_service.core.logging_config import get_logger


logger = get_logger(__name__)


class DatabaseClient:
    """
    Database Client

    Provides access to the uploads collection and manages its indexes.
    """

    UPLOADS_COLLECTION = "uploads"

    def __init__(self):
        self._initialized = False

    async def initialize(self) -> None:
        """
        Initialize database collections and indexes
        """
        if self._initialized:
            logger.warning("Database already initialized")
            return

        logger.info("Initializing database collections and indexes...")

        try:
            await self._create_uploads_indexes()

            indexes = await self.verify_indexes()
            total_indexes = sum(len(idx_list) for idx_list in indexes.values())
            logger.info(f"✅ Verified {total_indexes} indexes across {len(indexes)} collections")

            self._initialized = True
            logger.info("✅ Database initialization complete")

        except Exception as e:
            logger.error(f"❌ Database initialization failed: {e}")
            raise

    def reset(self) -> None:
        """Forget initialization state (after reconnecting to another database)"""
        self._initialized = False

    # ========================================================================
    # COLLECTION GETTERS
    # ========================================================================

    def get_uploads_collection(self) -> AsyncIOMotorCollection:
        """Get uploads collection"""
        return mongodb_manager.get_collection(self.UPLOADS_COLLECTION)

    # ========================================================================
    # INDEX CREATION
    # ========================================================================

    async def _create_uploads_indexes(self) -> None:
        """Create indexes for uploads collection"""
        collection = self.get_uploads_collection()

        # Storage keys are unique across all records
        await collection.create_index("storage_key", unique=True, name="storage_key_unique")

        await collection.create_index("created_at")
        await collection.create_index("title")

        logger.info(f"✅ Created indexes for {self.UPLOADS_COLLECTION}")

    async def verify_indexes(self) -> Dict[str, List[str]]:
        """
        List index names per collection

        Returns:
            Dict[str, List[str]]: Index names keyed by collection
        """
        info = await self.get_uploads_collection().index_information()
        return {self.UPLOADS_COLLECTION: sorted(info.keys())}


# Global database client instance
db_client = DatabaseClient()
