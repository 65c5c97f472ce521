"""
Object Store Interface
======================
Backend-agnostic put/get/delete over keyed binary objects.
"""

from abc import ABC, abstractmethod

from upload_service.models.upload import StoredObject


class ObjectStore(ABC):
    """
    Object Store

    Implementations guarantee that ``put`` never leaves a partially written
    object visible to later reads. They do not retry; retries belong to the
    caller.
    """

    #: Short backend name used in logs and health output
    name: str = "abstract"

    @abstractmethod
    async def put(self, key: str, data: bytes, content_type: str) -> str:
        """
        Store an object

        Args:
            key: Storage key
            data: Object payload
            content_type: MIME type

        Returns:
            str: The final key

        Raises:
            StorageError: On backend failure
        """

    @abstractmethod
    async def get(self, key: str) -> StoredObject:
        """
        Read an object

        Raises:
            NotFoundError: If no object exists for the key
            StorageError: On backend failure
        """

    @abstractmethod
    async def delete(self, key: str) -> None:
        """Remove an object. Deleting a missing key is a no-op."""

    @abstractmethod
    async def exists(self, key: str) -> bool:
        """Check whether an object exists for the key"""

    async def close(self) -> None:
        """Release backend resources"""
        return None
