"""Common Pydantic schemas for API responses."""

from typing import Any

from pydantic import BaseModel, Field


class ErrorDetail(BaseModel):
    """Error detail structure."""

    code: str = Field(..., description="Error code")
    message: str = Field(..., description="Human readable message")
    details: dict[str, Any] | None = Field(None, description="Additional details")


class ErrorResponse(BaseModel):
    """Standard error response."""

    error: ErrorDetail


class HealthResponse(BaseModel):
    """Basic health check response."""

    status: str = Field(..., description="Health status: ok, degraded, error")
