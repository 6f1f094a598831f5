"""Standardized error response schema."""

from pydantic import BaseModel, Field


class ErrorDetail(BaseModel):
    code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable error message")


class ErrorResponse(BaseModel):
    """Standard error body for domain exceptions (4xx) and internal errors (500)."""

    error: ErrorDetail
