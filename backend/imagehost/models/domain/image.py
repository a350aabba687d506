"""Domain models for stored images."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any


def _parse_timestamp(value: str) -> datetime:
    """Parse an ISO timestamp; naive values are taken as UTC."""
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


@dataclass(frozen=True)
class Image:
    """Durable record of a processed upload.

    ``storage_path`` is internal: it is persisted in the metadata file but
    never included in API responses. Records written by older versions may
    not carry it.
    """

    id: str
    url: str
    original_format: str
    original_size: int
    processed_size: int
    width: int
    height: int
    created_at: datetime
    filename: str = ""
    storage_path: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for storage."""
        return {
            "id": self.id,
            "url": self.url,
            "original_format": self.original_format,
            "original_size": self.original_size,
            "processed_size": self.processed_size,
            "width": self.width,
            "height": self.height,
            "created_at": self.created_at.isoformat(),
            "filename": self.filename,
            "storage_path": self.storage_path,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Image":
        """Create from dictionary."""
        return cls(
            id=data["id"],
            url=data.get("url", ""),
            original_format=data.get("original_format", "unknown"),
            original_size=int(data.get("original_size", 0)),
            processed_size=int(data.get("processed_size", 0)),
            width=int(data.get("width", 0)),
            height=int(data.get("height", 0)),
            created_at=_parse_timestamp(data["created_at"]),
            filename=data.get("filename", ""),
            storage_path=data.get("storage_path") or None,
        )

    def to_api_response(self) -> dict[str, Any]:
        """Convert to API response format (storage path omitted)."""
        data = self.to_dict()
        data.pop("storage_path")
        return data


@dataclass(frozen=True)
class UploadResult:
    """Outcome of a successful upload."""

    id: str
    url: str
    original_format: str
    original_size: int
    processed_size: int
    width: int
    height: int
    created_at: datetime

    @classmethod
    def from_image(cls, image: Image) -> "UploadResult":
        return cls(
            id=image.id,
            url=image.url,
            original_format=image.original_format,
            original_size=image.original_size,
            processed_size=image.processed_size,
            width=image.width,
            height=image.height,
            created_at=image.created_at,
        )


@dataclass(frozen=True)
class ImageListItem:
    """Image entry as shown in a listing."""

    id: str
    url: str
    original_format: str
    processed_size: int
    width: int
    height: int
    created_at: datetime

    @classmethod
    def from_image(cls, image: Image) -> "ImageListItem":
        return cls(
            id=image.id,
            url=image.url,
            original_format=image.original_format,
            processed_size=image.processed_size,
            width=image.width,
            height=image.height,
            created_at=image.created_at,
        )


@dataclass
class PaginatedList:
    """One page of images plus paging counters."""

    items: list[ImageListItem] = field(default_factory=list)
    total: int = 0
    page: int = 1
    page_size: int = 20
    total_pages: int = 0
