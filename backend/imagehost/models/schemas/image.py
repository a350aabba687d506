"""Image API schemas."""

from datetime import datetime

from pydantic import BaseModel, Field


class ImageResponse(BaseModel):
    """Stored image details."""

    id: str = Field(..., description="Image identifier")
    url: str = Field(..., description="Public URL of the WebP file")
    original_format: str = Field(..., description="Format of the uploaded file")
    original_size: int = Field(..., description="Uploaded size in bytes")
    processed_size: int = Field(..., description="WebP size in bytes")
    width: int
    height: int
    created_at: datetime
    filename: str = ""


class UploadResponse(BaseModel):
    """Result of a successful upload."""

    id: str
    url: str
    original_format: str
    original_size: int
    processed_size: int
    width: int
    height: int
    created_at: datetime


class ImageListItemResponse(BaseModel):
    """Image entry in a listing."""

    id: str
    url: str
    original_format: str
    processed_size: int
    width: int
    height: int
    created_at: datetime


class ImageListResponse(BaseModel):
    """One page of images."""

    items: list[ImageListItemResponse]
    total: int
    page: int
    page_size: int
    total_pages: int


class DeleteResponse(BaseModel):
    """Delete confirmation."""

    deleted: bool = True
    id: str
