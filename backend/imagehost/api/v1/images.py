"""Image upload, listing, lookup, and delete endpoints."""

from dataclasses import asdict
from typing import Annotated

from fastapi import APIRouter, Depends, File, Query, UploadFile
from starlette.concurrency import run_in_threadpool

from imagehost.dependencies import get_image_service
from imagehost.models.schemas.image import (
    DeleteResponse,
    ImageListItemResponse,
    ImageListResponse,
    ImageResponse,
    UploadResponse,
)
from imagehost.services.image.service import ImageService

router = APIRouter()


@router.post("/upload", response_model=UploadResponse)
async def upload_image(
    file: Annotated[UploadFile, File(description="Image file (JPEG, PNG or WebP)")],
    service: Annotated[ImageService, Depends(get_image_service)],
):
    """
    Upload an image.

    The image is converted to WebP with its EXIF orientation applied.
    """
    declared_size = file.size if file.size is not None else 0
    result = await run_in_threadpool(service.upload, file.file, declared_size)
    return UploadResponse(**asdict(result))


@router.get("/images", response_model=ImageListResponse)
async def list_images(
    service: Annotated[ImageService, Depends(get_image_service)],
    page: Annotated[int, Query()] = 1,
    page_size: Annotated[int, Query()] = 20,
):
    """List images, newest first."""
    result = await run_in_threadpool(service.list_images, page, page_size)
    return ImageListResponse(
        items=[ImageListItemResponse(**asdict(item)) for item in result.items],
        total=result.total,
        page=result.page,
        page_size=result.page_size,
        total_pages=result.total_pages,
    )


@router.get("/image/{image_id}", response_model=ImageResponse)
async def get_image(
    image_id: str,
    service: Annotated[ImageService, Depends(get_image_service)],
):
    """Get a single image."""
    image = await run_in_threadpool(service.get_image, image_id)
    return ImageResponse(**image.to_api_response())


@router.delete("/image/{image_id}", response_model=DeleteResponse)
async def delete_image(
    image_id: str,
    service: Annotated[ImageService, Depends(get_image_service)],
):
    """Delete an image and its stored file."""
    await run_in_threadpool(service.delete_image, image_id)
    return DeleteResponse(id=image_id)
