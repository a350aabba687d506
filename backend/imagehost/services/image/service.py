"""Upload pipeline and image lifecycle orchestration."""

import logging
import math
import uuid
from datetime import datetime, timezone
from typing import BinaryIO

from imagehost.models.domain.image import Image, ImageListItem, PaginatedList, UploadResult
from imagehost.services.image.errors import (
    FileTooLargeError,
    InvalidFileTypeError,
    MetadataFailedError,
    ProcessingFailedError,
    StorageFailedError,
)
from imagehost.services.image.metadata import MetadataStore, MetadataStoreError
from imagehost.services.image.processor import (
    OUTPUT_EXTENSION,
    DecodeError,
    ImageProcessor,
    ProcessingError,
    detect_mime_type,
    mime_type_to_format,
)
from imagehost.services.storage import Storage, StorageError, StorageObjectNotFoundError

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100

# Extensions a resolvable storage key may end with
STORAGE_EXTENSIONS = (".webp", ".jpg", ".jpeg", ".png")


def build_storage_path(image_id: str, now: datetime) -> str:
    """Storage key in the form ``YYYY/MM/<id>.webp``."""
    return f"{now.year}/{now.month:02d}/{image_id}{OUTPUT_EXTENSION}"


def is_valid_storage_path(path: str) -> bool:
    """Check a key names a file with a known image extension."""
    if not path or path == "/":
        return False
    return path.endswith(STORAGE_EXTENSIONS)


class ImageService:
    """
    Orchestrates validation, processing, storage, and metadata.

    Features:
    - Upload pipeline with compensation on metadata failure
    - Paginated listing, newest first
    - Delete with tolerance for already-missing files
    """

    def __init__(
        self,
        storage: Storage,
        processor: ImageProcessor,
        metadata: MetadataStore,
        allowed_types: list[str],
        max_size: int,
        public_url_prefix: str = "/images",
    ):
        self._storage = storage
        self._processor = processor
        self._metadata = metadata
        self._allowed_types = set(allowed_types)
        self._max_size = max_size
        self._url_prefix = public_url_prefix.rstrip("/") + "/"

    @property
    def storage(self) -> Storage:
        return self._storage

    @property
    def metadata(self) -> MetadataStore:
        return self._metadata

    def upload(self, stream: BinaryIO, declared_size: int) -> UploadResult:
        """
        Upload and process an image.

        The whole stream is buffered before the size check.

        Args:
            stream: Readable binary stream with the upload content
            declared_size: Size reported by the client

        Returns:
            UploadResult describing the stored image

        Raises:
            InvalidFileTypeError: Content is not an allowed image type
            FileTooLargeError: Content exceeds the maximum size
            ProcessingFailedError: Upload read, decode, or encode failed
            StorageFailedError: Processed bytes could not be saved
            MetadataFailedError: Record could not be committed
        """
        try:
            data = stream.read()
        except OSError as e:
            raise ProcessingFailedError(f"Failed to read upload: {e}") from e

        mime_type = detect_mime_type(data)
        if mime_type not in self._allowed_types:
            raise InvalidFileTypeError(
                f"Invalid file type: {mime_type}",
                details={"mime_type": mime_type},
            )

        if len(data) > self._max_size:
            raise FileTooLargeError(
                f"File too large: {len(data)} bytes (max: {self._max_size})",
                details={"size": len(data), "max_size": self._max_size},
            )

        try:
            result = self._processor.process(data, mime_type)
        except ProcessingError as e:
            raise ProcessingFailedError(
                f"Failed to process image: {e.message}",
                client_error=isinstance(e, DecodeError),
            ) from e

        now = datetime.now(timezone.utc)
        image_id = str(uuid.uuid4())
        storage_path = build_storage_path(image_id, now)

        try:
            url = self._storage.save(storage_path, result.data)
        except StorageError as e:
            raise StorageFailedError(f"Failed to save file: {e}") from e

        image = Image(
            id=image_id,
            url=url,
            original_format=mime_type_to_format(mime_type),
            original_size=declared_size,
            processed_size=len(result.data),
            width=result.width,
            height=result.height,
            created_at=now,
            filename=f"{image_id}{OUTPUT_EXTENSION}",
            storage_path=storage_path,
        )

        try:
            self._metadata.add(image)
        except MetadataStoreError as e:
            self._discard_orphan(storage_path)
            raise MetadataFailedError(f"Failed to save metadata: {e}") from e

        logger.info(
            f"Uploaded {image_id}: {image.original_format} {declared_size}B -> "
            f"webp {image.processed_size}B {image.width}x{image.height}"
        )

        return UploadResult.from_image(image)

    def _discard_orphan(self, storage_path: str) -> None:
        """Best-effort removal of a saved object whose record was not committed."""
        try:
            self._storage.delete(storage_path)
        except StorageError as e:
            logger.error(f"Failed to remove orphaned object {storage_path}: {e}")

    def get_image(self, image_id: str) -> Image:
        """
        Get a single image record.

        Raises:
            ImageNotFoundError: If the id is unknown
        """
        return self._metadata.get(image_id)

    def list_images(self, page: int, page_size: int) -> PaginatedList:
        """
        List images newest first.

        ``page`` below 1 becomes 1; ``page_size`` outside [1, 100] becomes 20.
        """
        if page < 1:
            page = 1
        if page_size < 1 or page_size > MAX_PAGE_SIZE:
            page_size = DEFAULT_PAGE_SIZE

        images = self._metadata.list()
        total = len(images)

        start = min((page - 1) * page_size, total)
        end = min(start + page_size, total)

        return PaginatedList(
            items=[ImageListItem.from_image(image) for image in images[start:end]],
            total=total,
            page=page,
            page_size=page_size,
            total_pages=math.ceil(total / page_size),
        )

    def resolve_storage_path(self, image: Image) -> str:
        """
        Storage key for a record.

        Records without a persisted key fall back to the URL with the
        public prefix removed.
        """
        if image.storage_path:
            return image.storage_path

        if image.url.startswith(self._url_prefix) and len(image.url) > len(self._url_prefix):
            return image.url[len(self._url_prefix):]

        return ""

    def delete_image(self, image_id: str) -> None:
        """
        Delete an image record and its stored object.

        When no usable storage key can be resolved only the record is
        removed.

        Raises:
            ImageNotFoundError: If the id is unknown
            StorageFailedError: Stored object could not be deleted
            MetadataFailedError: Record could not be removed
        """
        image = self._metadata.get(image_id)
        storage_path = self.resolve_storage_path(image)

        if not is_valid_storage_path(storage_path):
            logger.warning(f"Image {image_id} has no resolvable storage path, removing record only")
        else:
            try:
                self._storage.delete(storage_path)
            except StorageObjectNotFoundError:
                logger.warning(f"Stored object for {image_id} already missing: {storage_path}")
            except StorageError as e:
                raise StorageFailedError(f"Failed to delete file: {e}") from e

        try:
            self._metadata.delete(image_id)
        except MetadataStoreError as e:
            raise MetadataFailedError(f"Failed to delete metadata: {e}") from e

        logger.info(f"Deleted image {image_id}")
