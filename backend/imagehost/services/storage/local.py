"""Local filesystem storage backend."""

import logging
from pathlib import Path

from imagehost.services.storage.base import Storage, StorageError, StorageObjectNotFoundError

logger = logging.getLogger(__name__)


class LocalStorage(Storage):
    """
    Stores objects as files under a base directory.

    URLs are built by joining the configured base URL with the key, so the
    files must be served statically from ``base_path`` at ``base_url``.
    """

    def __init__(self, base_path: str | Path, base_url: str):
        self._base_path = Path(base_path).resolve()
        self._base_url = base_url.rstrip("/")
        try:
            self._base_path.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageError(f"Failed to create storage directory {self._base_path}: {e}") from e

    @property
    def base_path(self) -> Path:
        return self._base_path

    @property
    def base_url(self) -> str:
        return self._base_url

    def _resolve(self, key: str) -> Path:
        """Map a key to a path inside the base directory."""
        path = (self._base_path / key.lstrip("/")).resolve()
        if path == self._base_path or not path.is_relative_to(self._base_path):
            raise StorageError(f"Invalid storage key: {key}")
        return path

    def url_for(self, key: str) -> str:
        return f"{self._base_url}/{key.lstrip('/')}"

    def save(self, key: str, content: bytes) -> str:
        path = self._resolve(key)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(content)
        except OSError as e:
            raise StorageError(f"Failed to write {key}: {e}") from e

        logger.debug(f"Saved {key} ({len(content)} bytes)")
        return self.url_for(key)

    def delete(self, key: str) -> None:
        path = self._resolve(key)
        try:
            path.unlink()
        except FileNotFoundError as e:
            raise StorageObjectNotFoundError(key) from e
        except OSError as e:
            raise StorageError(f"Failed to delete {key}: {e}") from e

        logger.debug(f"Deleted {key}")
