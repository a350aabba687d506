"""Abstract contract for processed image storage."""

from abc import ABC, abstractmethod
from pathlib import Path


class StorageError(Exception):
    """Base exception for storage-related errors."""


class StorageObjectNotFoundError(StorageError):
    """Requested key does not exist in the backend."""

    def __init__(self, key: str):
        self.key = key
        super().__init__(f"Storage object not found: {key}")


class Storage(ABC):
    """Contract for storing processed image bytes.

    Implementations could be local disk, S3, GCS, etc.
    The image service depends on this interface, not the implementation.
    """

    @abstractmethod
    def save(self, key: str, content: bytes) -> str:
        """Persist content under key.

        Args:
            key: Storage key, e.g. ``2024/05/<id>.webp``
            content: Bytes to write

        Returns:
            Public URL for the stored object

        Raises:
            StorageError: If the write fails
        """

    @abstractmethod
    def delete(self, key: str) -> None:
        """Delete the object stored under key.

        Raises:
            StorageObjectNotFoundError: If nothing is stored under key
            StorageError: If deletion fails
        """

    @property
    def base_path(self) -> Path | None:
        """Filesystem root for static serving, if the backend has one."""
        return None
