"""Image decoding, orientation correction, and WebP re-encoding.

Features:
- Content sniffing from magic bytes (never from filenames)
- Per-format decode dispatch (JPEG, PNG, WebP)
- EXIF orientation correction for JPEG input
- Lossy WebP output at a fixed quality
"""

import logging
from dataclasses import dataclass
from io import BytesIO

from PIL import ExifTags, Image

logger = logging.getLogger(__name__)

DEFAULT_QUALITY = 75
OUTPUT_FORMAT = "webp"
OUTPUT_EXTENSION = ".webp"
OCTET_STREAM = "application/octet-stream"

# Sniffed MIME type -> Pillow decoder name
DECODERS = {
    "image/jpeg": "JPEG",
    "image/png": "PNG",
    "image/webp": "WEBP",
}

# EXIF orientation value -> transpose that makes the pixels upright
ORIENTATION_TRANSFORMS = {
    2: Image.Transpose.FLIP_LEFT_RIGHT,
    3: Image.Transpose.ROTATE_180,
    4: Image.Transpose.FLIP_TOP_BOTTOM,
    5: Image.Transpose.TRANSPOSE,
    6: Image.Transpose.ROTATE_270,
    7: Image.Transpose.TRANSVERSE,
    8: Image.Transpose.ROTATE_90,
}


class ProcessingError(Exception):
    """Raised when an image cannot be processed."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class DecodeError(ProcessingError):
    """Input is malformed or of an unsupported type."""


class EncodeError(ProcessingError):
    """Decoded image could not be written as WebP."""


@dataclass
class ProcessResult:
    """Encoded output and its final pixel dimensions."""

    data: bytes
    width: int
    height: int
    format: str = OUTPUT_FORMAT


def detect_mime_type(data: bytes) -> str:
    """Detect MIME type from the leading magic bytes."""
    if len(data) < 4:
        return OCTET_STREAM

    if data.startswith(b"\xff\xd8\xff"):
        return "image/jpeg"

    if data.startswith(b"\x89PNG\r\n\x1a\n"):
        return "image/png"

    # WebP: RIFF....WEBP
    if len(data) >= 12 and data[:4] == b"RIFF" and data[8:12] == b"WEBP":
        return "image/webp"

    return OCTET_STREAM


def mime_type_to_format(mime_type: str) -> str:
    """Short format name for a MIME type."""
    return {
        "image/jpeg": "jpeg",
        "image/png": "png",
        "image/webp": "webp",
    }.get(mime_type, "unknown")


class ImageProcessor:
    """
    Converts uploads to the canonical WebP output.

    The processor holds no mutable state after construction, so one
    instance can serve concurrent uploads.
    """

    def __init__(self, quality: int = DEFAULT_QUALITY):
        if quality < 1 or quality > 100:
            logger.warning(f"WebP quality {quality} out of range, using {DEFAULT_QUALITY}")
            quality = DEFAULT_QUALITY
        self._quality = quality

    @property
    def quality(self) -> int:
        return self._quality

    def process(self, data: bytes, mime_type: str) -> ProcessResult:
        """
        Decode, orient, and re-encode an image.

        Args:
            data: Raw image bytes
            mime_type: Sniffed MIME type of ``data``

        Returns:
            ProcessResult with WebP bytes and final dimensions

        Raises:
            DecodeError: Input is unsupported or malformed
            EncodeError: WebP encoding failed
        """
        img = self._decode(data, mime_type)
        try:
            if mime_type == "image/jpeg":
                img = self.fix_orientation(img)

            encoded = self._encode_webp(img)
            width, height = img.size
        finally:
            img.close()

        logger.debug(
            f"Processed {mime_type_to_format(mime_type)} -> webp {width}x{height} "
            f"({len(data) / 1024:.1f}KB -> {len(encoded) / 1024:.1f}KB)"
        )

        return ProcessResult(data=encoded, width=width, height=height)

    def _decode(self, data: bytes, mime_type: str) -> Image.Image:
        decoder = DECODERS.get(mime_type)
        if decoder is None:
            raise DecodeError(f"Unsupported image type: {mime_type}")

        try:
            img = Image.open(BytesIO(data), formats=[decoder])
            img.load()
        except (OSError, SyntaxError, ValueError, Image.DecompressionBombError) as e:
            raise DecodeError(f"Failed to decode {mime_type_to_format(mime_type)} image: {e}") from e

        return img

    def read_orientation(self, img: Image.Image) -> int | None:
        """Read the EXIF orientation tag, or None when absent or unreadable."""
        try:
            exif = img.getexif()
            orientation = exif.get(ExifTags.Base.Orientation)
        except Exception as e:
            logger.debug(f"EXIF read failed (non-critical): {e}")
            return None

        if orientation is None:
            return None
        try:
            return int(orientation)
        except (TypeError, ValueError):
            return None

    def fix_orientation(self, img: Image.Image) -> Image.Image:
        """
        Apply the EXIF orientation transform.

        Missing EXIF data or an unknown orientation value leaves the
        image untouched.
        """
        orientation = self.read_orientation(img)
        transform = ORIENTATION_TRANSFORMS.get(orientation)
        if transform is None:
            return img

        rotated = img.transpose(transform)
        img.close()
        logger.debug(f"Applied EXIF orientation {orientation}")
        return rotated

    def _encode_webp(self, img: Image.Image) -> bytes:
        converted = None
        try:
            if img.mode not in ("RGB", "RGBA"):
                has_alpha = img.mode in ("RGBA", "LA", "PA") or "transparency" in img.info
                converted = img.convert("RGBA" if has_alpha else "RGB")
                img = converted

            output = BytesIO()
            img.save(output, format="WEBP", quality=self._quality, lossless=False)
        except (OSError, ValueError, KeyError) as e:
            raise EncodeError(f"Failed to encode webp: {e}") from e
        finally:
            if converted is not None:
                converted.close()

        return output.getvalue()
