"""Error kinds raised by the image service.

Each failure is classified where it happens; callers dispatch on the
exception type (or its ``code``) and never on the message text.
"""


class ImageServiceError(Exception):
    """Base image service error."""

    code = "IMAGE_SERVICE_ERROR"

    def __init__(self, message: str, details: dict | None = None):
        self.message = message
        self.details = details
        super().__init__(message)


class InvalidFileTypeError(ImageServiceError):
    """Sniffed content type is not in the allow-list."""

    code = "INVALID_FILE_TYPE"


class FileTooLargeError(ImageServiceError):
    """Upload exceeds the configured maximum size."""

    code = "FILE_TOO_LARGE"


class ProcessingFailedError(ImageServiceError):
    """Decode or encode failed.

    ``client_error`` is True when the input itself could not be decoded.
    """

    code = "PROCESSING_FAILED"

    def __init__(self, message: str, client_error: bool = False, details: dict | None = None):
        self.client_error = client_error
        super().__init__(message, details)


class StorageFailedError(ImageServiceError):
    """Storage backend could not save or delete an object."""

    code = "STORAGE_FAILED"


class MetadataFailedError(ImageServiceError):
    """Metadata store could not commit a change."""

    code = "METADATA_FAILED"


class ImageNotFoundError(ImageServiceError):
    """No record exists for the requested identifier."""

    code = "NOT_FOUND"

    def __init__(self, image_id: str):
        self.image_id = image_id
        super().__init__(f"Image not found: {image_id}")
