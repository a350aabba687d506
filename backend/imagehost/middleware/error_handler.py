"""Global error handling."""

import logging
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from imagehost.services.image.errors import ImageServiceError, ProcessingFailedError

logger = logging.getLogger(__name__)

# Image service error code -> HTTP status
ERROR_STATUS = {
    "INVALID_FILE_TYPE": status.HTTP_400_BAD_REQUEST,
    "FILE_TOO_LARGE": status.HTTP_400_BAD_REQUEST,
    "PROCESSING_FAILED": status.HTTP_500_INTERNAL_SERVER_ERROR,
    "STORAGE_FAILED": status.HTTP_500_INTERNAL_SERVER_ERROR,
    "METADATA_FAILED": status.HTTP_500_INTERNAL_SERVER_ERROR,
    "NOT_FOUND": status.HTTP_404_NOT_FOUND,
}


def _get_cors_headers(request: Request) -> dict[str, str]:
    """Build CORS headers for error responses based on request origin."""
    origin = request.headers.get("origin")
    if not origin:
        return {}

    allowed_origins = request.app.state.settings.cors_origins_list

    # Check if origin is allowed (support wildcard)
    if "*" in allowed_origins or origin in allowed_origins:
        return {
            "Access-Control-Allow-Origin": origin,
            "Access-Control-Allow-Credentials": "true",
        }

    return {}


def _cors_json_response(
    request: Request,
    status_code: int,
    content: dict[str, Any],
) -> JSONResponse:
    """Create JSONResponse with CORS headers for error responses."""
    headers = _get_cors_headers(request)
    return JSONResponse(status_code=status_code, content=content, headers=headers)


def create_error_response(
    code: str,
    message: str,
    details: dict | None = None,
) -> dict:
    """Create standardized error response."""
    error = {
        "code": code,
        "message": message,
    }
    if details:
        error["details"] = details

    return {"error": error}


def status_for_error(exc: ImageServiceError) -> int:
    """HTTP status for an image service error."""
    if isinstance(exc, ProcessingFailedError) and exc.client_error:
        return status.HTTP_400_BAD_REQUEST
    return ERROR_STATUS.get(exc.code, status.HTTP_500_INTERNAL_SERVER_ERROR)


async def image_service_error_handler(request: Request, exc: ImageServiceError) -> JSONResponse:
    """Handle classified image service errors."""
    status_code = status_for_error(exc)
    if status_code >= 500:
        logger.error(f"ImageServiceError: {exc.code} - {exc.message}")
    else:
        logger.info(f"ImageServiceError: {exc.code} - {exc.message}")

    return _cors_json_response(
        request,
        status_code,
        create_error_response(exc.code, exc.message, exc.details),
    )


async def http_exception_handler(
    request: Request,
    exc: StarletteHTTPException,
) -> JSONResponse:
    """Handle HTTP exceptions."""
    # Check if detail is already in our format
    if isinstance(exc.detail, dict) and "error" in exc.detail:
        return _cors_json_response(request, exc.status_code, exc.detail)

    # Map status codes to error codes
    code_map = {
        400: "VALIDATION_ERROR",
        401: "UNAUTHORIZED",
        403: "FORBIDDEN",
        404: "NOT_FOUND",
        405: "METHOD_NOT_ALLOWED",
        413: "FILE_TOO_LARGE",
        500: "INTERNAL_ERROR",
        503: "SERVICE_UNAVAILABLE",
    }

    code = code_map.get(exc.status_code, "ERROR")
    message = exc.detail if isinstance(exc.detail, str) else str(exc.detail)

    return _cors_json_response(
        request,
        exc.status_code,
        create_error_response(code, message),
    )


async def validation_exception_handler(
    request: Request,
    exc: RequestValidationError,
) -> JSONResponse:
    """Handle request validation errors."""
    errors = exc.errors()

    # Format validation errors
    details = {}
    for error in errors:
        loc = ".".join(str(x) for x in error["loc"])
        details[loc] = error["msg"]

    logger.warning(f"Validation error: {details}")

    return _cors_json_response(
        request,
        status.HTTP_400_BAD_REQUEST,
        create_error_response(
            code="VALIDATION_ERROR",
            message="Request validation failed",
            details=details,
        ),
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unexpected exceptions."""
    logger.exception(f"Unexpected error: {exc}")

    return _cors_json_response(
        request,
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        create_error_response(
            code="INTERNAL_ERROR",
            message="An unexpected error occurred",
        ),
    )


def setup_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers."""
    app.add_exception_handler(ImageServiceError, image_service_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, generic_exception_handler)
