"""
MongoDB Connection Manager
==========================
Owns the Motor client that backs the upload records collection.
"""

from typing import Optional

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorCollection, AsyncIOMotorDatabase
from pymongo.errors import ConnectionFailure, ServerSelectionTimeoutError

from upload_service.core.config import Settings, settings as default_settings
from upload_service.core.logging_config import get_logger


logger = get_logger(__name__)


class DatabaseNotConnectedError(RuntimeError):
    """Raised when the database is used before connect() or after disconnect()"""


def redact_url(url: str) -> str:
    """Drop credentials from a MongoDB URL for logging"""
    scheme, _, rest = url.partition("://")
    return f"{scheme}://{rest.split('@')[-1]}" if rest else url


class MongoDBManager:
    """
    MongoDB Connection Manager

    One client per process, created at startup and closed at shutdown.
    """

    def __init__(self):
        self.client: Optional[AsyncIOMotorClient] = None
        self.db: Optional[AsyncIOMotorDatabase] = None

    async def connect(self, config: Optional[Settings] = None) -> None:
        """
        Connect to MongoDB and verify the server answers

        Raises:
            ConnectionFailure: If the server cannot be reached
        """
        config = config or default_settings
        logger.info("Connecting to MongoDB at {}", redact_url(config.MONGODB_URL))

        client = AsyncIOMotorClient(
            config.MONGODB_URL,
            maxPoolSize=config.MONGODB_MAX_POOL_SIZE,
            minPoolSize=config.MONGODB_MIN_POOL_SIZE,
            serverSelectionTimeoutMS=5000,
            tz_aware=True,
        )
        try:
            await client.admin.command("ping")
        except (ConnectionFailure, ServerSelectionTimeoutError) as e:
            client.close()
            logger.error(f"❌ Failed to connect to MongoDB: {e}")
            raise

        self.attach(client, config.MONGODB_DB_NAME)
        logger.info(
            "✅ Connected to MongoDB database: {}",
            config.MONGODB_DB_NAME,
            max_pool_size=config.MONGODB_MAX_POOL_SIZE,
        )

    def attach(self, client, db_name: str) -> None:
        """
        Use an already constructed Motor compatible client

        Tests pass an in-memory client here instead of connecting.
        """
        self.client = client
        self.db = client[db_name]

    async def disconnect(self) -> None:
        if self.client is None:
            return
        self.client.close()
        self.client = None
        self.db = None
        logger.info("✅ MongoDB connection closed")

    async def health_check(self) -> bool:
        """Ping the server; False when disconnected or unreachable"""
        if self.client is None:
            return False

        try:
            await self.client.admin.command("ping")
            return True
        except Exception as e:
            logger.error(f"MongoDB health check failed: {e}")
            return False

    def get_database(self) -> AsyncIOMotorDatabase:
        """
        Get the database instance

        Raises:
            DatabaseNotConnectedError: If not connected
        """
        if self.db is None:
            raise DatabaseNotConnectedError("Database not connected. Call connect() first.")
        return self.db

    def get_collection(self, name: str) -> AsyncIOMotorCollection:
        return self.get_database()[name]


mongodb_manager = MongoDBManager()
