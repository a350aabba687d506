"""JSON-file backed metadata store.

All operations share one lock that guards both the in-memory table and the
file. Every mutation rewrites the whole table (write to a temp file, then
atomic rename) before the lock is released, so the file always matches the
last completed in-memory state. Each mutation is O(n) in the number of
records.
"""

import json
import logging
import os
import threading
from dataclasses import replace
from pathlib import Path

from imagehost.models.domain.image import Image
from imagehost.services.image.errors import ImageNotFoundError

logger = logging.getLogger(__name__)


class MetadataStoreError(Exception):
    """Raised when the metadata file cannot be written."""


class MetadataCorruptError(MetadataStoreError):
    """Raised when an existing metadata file cannot be read or parsed."""


class MetadataStore:
    """
    Durable table of image records keyed by id.

    Features:
    - Add/get/delete/list/count
    - Atomic whole-file rewrite on every mutation
    - Reload from disk
    """

    def __init__(self, file_path: str | Path):
        self._file_path = Path(file_path)
        self._tmp_path = self._file_path.with_name(self._file_path.name + ".tmp")
        self._lock = threading.Lock()
        self._images: dict[str, Image] = {}

        with self._lock:
            self._load_locked()

        logger.info(f"Loaded {len(self._images)} image records from {self._file_path}")

    @property
    def file_path(self) -> Path:
        return self._file_path

    def _load_locked(self) -> None:
        """Read the file into the table. Caller holds the lock."""
        try:
            raw = self._file_path.read_text(encoding="utf-8")
        except FileNotFoundError:
            self._images = {}
            return
        except OSError as e:
            raise MetadataCorruptError(f"Failed to read {self._file_path}: {e}") from e

        try:
            data = json.loads(raw)
            if not isinstance(data, dict):
                raise ValueError("top-level value is not an object")
            images = {image_id: Image.from_dict(record) for image_id, record in data.items()}
        except (ValueError, KeyError, TypeError) as e:
            raise MetadataCorruptError(f"Failed to parse {self._file_path}: {e}") from e

        self._images = images

    def _save_locked(self) -> None:
        """Write the table to disk atomically. Caller holds the lock."""
        payload = json.dumps(
            {image_id: image.to_dict() for image_id, image in self._images.items()},
            indent=2,
        )

        try:
            self._file_path.parent.mkdir(parents=True, exist_ok=True)
            self._tmp_path.write_text(payload, encoding="utf-8")
        except OSError as e:
            raise MetadataStoreError(f"Failed to write {self._tmp_path}: {e}") from e

        try:
            os.replace(self._tmp_path, self._file_path)
        except OSError as e:
            self._tmp_path.unlink(missing_ok=True)
            raise MetadataStoreError(f"Failed to replace {self._file_path}: {e}") from e

    def add(self, image: Image) -> None:
        """
        Add a record and persist the table.

        Raises:
            MetadataStoreError: If the table could not be written
        """
        with self._lock:
            previous = self._images.get(image.id)
            self._images[image.id] = image
            try:
                self._save_locked()
            except MetadataStoreError:
                # Keep memory consistent with the file
                if previous is None:
                    del self._images[image.id]
                else:
                    self._images[image.id] = previous
                raise

    def delete(self, image_id: str) -> None:
        """
        Remove a record and persist the table.

        Deleting an unknown id still rewrites the file and is not an error.
        """
        with self._lock:
            previous = self._images.pop(image_id, None)
            try:
                self._save_locked()
            except MetadataStoreError:
                if previous is not None:
                    self._images[image_id] = previous
                raise

    def get(self, image_id: str) -> Image:
        """
        Get a copy of a record.

        Raises:
            ImageNotFoundError: If no record has this id
        """
        with self._lock:
            image = self._images.get(image_id)
            if image is None:
                raise ImageNotFoundError(image_id)
            return replace(image)

    def list(self) -> list[Image]:
        """Copies of all records, newest first."""
        with self._lock:
            images = [replace(image) for image in self._images.values()]

        images.sort(key=lambda image: image.created_at, reverse=True)
        return images

    def count(self) -> int:
        with self._lock:
            return len(self._images)

    def reload(self) -> None:
        """
        Re-read the table from disk.

        Raises:
            MetadataCorruptError: If the file exists but cannot be parsed
        """
        with self._lock:
            self._load_locked()
