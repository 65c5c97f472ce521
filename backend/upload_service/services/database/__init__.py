"""
Database Services
=================
Database connection and client initialization.
"""

from upload_service.services.database.mongodb import mongodb_manager
from upload_service.services.database.client import db_client


async def initialize_database() -> None:
    """
    Initialize database connection and collections

    This function should be called during application startup.
    """
    await mongodb_manager.connect()
    await db_client.initialize()


async def close_database() -> None:
    """
    Close database connection

    This function should be called during application shutdown.
    """
    await mongodb_manager.disconnect()
    db_client.reset()


__all__ = [
    "mongodb_manager",
    "db_client",
    "initialize_database",
    "close_database",
]
