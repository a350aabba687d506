"""Dependency injection factories."""

from typing import Annotated

from fastapi import Header, HTTPException, Request, status

from imagehost.config import Settings
from imagehost.services.image.service import ImageService


async def get_settings_dep(request: Request) -> Settings:
    """Get settings the app was created with."""
    return request.app.state.settings


async def get_image_service(request: Request) -> ImageService:
    """Get image service from app state."""
    return request.app.state.image_service


def _unauthorized(message: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail={
            "error": {
                "code": "UNAUTHORIZED",
                "message": message,
            }
        },
    )


async def verify_token(
    request: Request,
    authorization: Annotated[str | None, Header()] = None,
) -> None:
    """Check the Bearer token when auth is enabled."""
    settings = await get_settings_dep(request)
    if not settings.auth_enabled:
        return

    if not authorization:
        raise _unauthorized("Missing authorization header")

    parts = authorization.split(" ", 1)
    if len(parts) != 2 or parts[0].lower() != "bearer":
        raise _unauthorized("Invalid authorization format, expected: Bearer <token>")

    if parts[1] not in settings.auth_tokens_list:
        raise _unauthorized("Invalid token")
