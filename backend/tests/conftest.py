"""Shared fixtures for the image service tests.

Images are generated in memory with Pillow so no binary fixtures live in
the repository. Storage and metadata are written to ``tmp_path``.
"""

import io
from datetime import datetime, timedelta, timezone

import pytest
from PIL import Image as PILImage

from imagehost.config import Settings
from imagehost.models.domain.image import Image
from imagehost.services.image import ImageProcessor, ImageService, MetadataStore
from imagehost.services.storage import LocalStorage

EXIF_ORIENTATION = 0x0112

QUADRANT_COLORS = {
    "red": (255, 0, 0),
    "green": (0, 255, 0),
    "blue": (0, 0, 255),
    "yellow": (255, 255, 0),
}


def _encode(img: PILImage.Image, fmt: str, orientation: int | None = None) -> bytes:
    kwargs = {}
    if orientation is not None:
        exif = PILImage.Exif()
        exif[EXIF_ORIENTATION] = orientation
        kwargs["exif"] = exif.tobytes()
    if fmt == "JPEG":
        kwargs["quality"] = 95
    buf = io.BytesIO()
    img.save(buf, format=fmt, **kwargs)
    return buf.getvalue()


@pytest.fixture
def make_image():
    """Factory for solid-color encoded images."""

    def _make(
        fmt: str = "JPEG",
        size: tuple[int, int] = (64, 32),
        color=(200, 40, 40),
        mode: str = "RGB",
        orientation: int | None = None,
    ) -> bytes:
        return _encode(PILImage.new(mode, size, color), fmt, orientation)

    return _make


@pytest.fixture
def make_quadrant_image():
    """Factory for a 128x64 image with red/green/blue/yellow quadrants (TL/TR/BL/BR)."""

    def _make(fmt: str = "JPEG", orientation: int | None = None) -> bytes:
        img = PILImage.new("RGB", (128, 64))
        img.paste(QUADRANT_COLORS["red"], (0, 0, 64, 32))
        img.paste(QUADRANT_COLORS["green"], (64, 0, 128, 32))
        img.paste(QUADRANT_COLORS["blue"], (0, 32, 64, 64))
        img.paste(QUADRANT_COLORS["yellow"], (64, 32, 128, 64))
        return _encode(img, fmt, orientation)

    return _make


@pytest.fixture
def quadrant_colors():
    """Decode image bytes and name the color at each quadrant center."""

    def _nearest(pixel) -> str:
        return min(
            QUADRANT_COLORS,
            key=lambda name: sum((a - b) ** 2 for a, b in zip(pixel, QUADRANT_COLORS[name])),
        )

    def _read(data: bytes) -> dict[str, str]:
        with PILImage.open(io.BytesIO(data)) as img:
            rgb = img.convert("RGB")
            w, h = rgb.size
            return {
                "tl": _nearest(rgb.getpixel((w // 4, h // 4))),
                "tr": _nearest(rgb.getpixel((3 * w // 4, h // 4))),
                "bl": _nearest(rgb.getpixel((w // 4, 3 * h // 4))),
                "br": _nearest(rgb.getpixel((3 * w // 4, 3 * h // 4))),
            }

    return _read


@pytest.fixture
def make_record():
    """Factory for Image records with increasing creation times."""
    base = datetime(2024, 5, 1, 12, 0, 0, tzinfo=timezone.utc)

    def _make(index: int = 0, **overrides) -> Image:
        image_id = overrides.pop("id", f"img-{index:04d}")
        created_at = overrides.pop("created_at", base + timedelta(minutes=index))
        storage_path = overrides.pop(
            "storage_path", f"{created_at.year}/{created_at.month:02d}/{image_id}.webp"
        )
        fields = {
            "id": image_id,
            "url": f"/images/{storage_path}" if storage_path else f"/images/{image_id}",
            "original_format": "jpeg",
            "original_size": 1000 + index,
            "processed_size": 500 + index,
            "width": 64,
            "height": 32,
            "created_at": created_at,
            "filename": f"{image_id}.webp",
            "storage_path": storage_path,
        }
        fields.update(overrides)
        return Image(**fields)

    return _make


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        storage_base_path=str(tmp_path / "images"),
        storage_base_url="/images",
        image_quality=90,
        image_max_size=1024 * 1024,
        auth_enabled=False,
        cors_origins="*",
    )


@pytest.fixture
def storage(settings) -> LocalStorage:
    return LocalStorage(settings.storage_base_path, settings.storage_base_url)


@pytest.fixture
def metadata(settings) -> MetadataStore:
    return MetadataStore(settings.metadata_path)


@pytest.fixture
def processor(settings) -> ImageProcessor:
    return ImageProcessor(settings.image_quality)


@pytest.fixture
def service(settings, storage, processor, metadata) -> ImageService:
    return ImageService(
        storage=storage,
        processor=processor,
        metadata=metadata,
        allowed_types=settings.allowed_types_list,
        max_size=settings.image_max_size,
        public_url_prefix=settings.storage_base_url,
    )


def stored_files(storage: LocalStorage) -> list[str]:
    """Relative paths of image files under the storage root."""
    return sorted(
        str(p.relative_to(storage.base_path))
        for p in storage.base_path.rglob("*")
        if p.is_file() and p.suffix == ".webp"
    )


@pytest.fixture
def list_stored_files():
    return stored_files
