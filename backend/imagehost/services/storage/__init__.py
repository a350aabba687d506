"""Storage backends for processed images."""

from imagehost.config import Settings
from imagehost.services.storage.base import Storage, StorageError, StorageObjectNotFoundError
from imagehost.services.storage.local import LocalStorage


def create_storage(settings: Settings) -> Storage:
    """Build the configured storage backend."""
    if settings.storage_type == "local":
        return LocalStorage(settings.storage_base_path, settings.storage_base_url)
    raise ValueError(f"Unsupported storage type: {settings.storage_type}")


__all__ = [
    "LocalStorage",
    "Storage",
    "StorageError",
    "StorageObjectNotFoundError",
    "create_storage",
]
