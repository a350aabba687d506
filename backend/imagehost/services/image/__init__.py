"""Image ingestion service module."""

from imagehost.services.image.errors import (
    FileTooLargeError,
    ImageNotFoundError,
    ImageServiceError,
    InvalidFileTypeError,
    MetadataFailedError,
    ProcessingFailedError,
    StorageFailedError,
)
from imagehost.services.image.metadata import MetadataCorruptError, MetadataStore, MetadataStoreError
from imagehost.services.image.processor import (
    DecodeError,
    EncodeError,
    ImageProcessor,
    ProcessingError,
    ProcessResult,
    detect_mime_type,
)
from imagehost.services.image.service import ImageService

__all__ = [
    "DecodeError",
    "EncodeError",
    "FileTooLargeError",
    "ImageNotFoundError",
    "ImageProcessor",
    "ImageService",
    "ImageServiceError",
    "InvalidFileTypeError",
    "MetadataCorruptError",
    "MetadataFailedError",
    "MetadataStore",
    "MetadataStoreError",
    "ProcessResult",
    "ProcessingError",
    "ProcessingFailedError",
    "StorageFailedError",
    "detect_mime_type",
]
