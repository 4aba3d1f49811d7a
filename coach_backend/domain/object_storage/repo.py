"""Port interface for binary object storage."""
from abc import ABC, abstractmethod


class ObjectStorageRepository(ABC):
    """Durable blob store returning publicly readable URLs."""

    @abstractmethod
    async def upload(self, content: bytes, content_type: str, key: str) -> str:
        """Store *content* under *key* and return its public URL.

        Raises CheckInError(STORAGE_FAILURE) when the write fails.
        """
        ...
