"""
Error response models.

Standardized error responses for the API.
"""

from pydantic import BaseModel
from typing import Any, Optional


class ErrorResponse(BaseModel):
    """Standard error response format."""

    success: bool = False
    error: str
    code: Optional[str] = None
    details: Optional[dict[str, Any]] = None


class FieldError(BaseModel):
    field: str
    message: str


class ValidationErrorResponse(BaseModel):
    """Validation error response format."""

    success: bool = False
    error: str = "Validation failed"
    details: list[FieldError]
