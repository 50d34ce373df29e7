"""
Error response schemas for API documentation and consistent error formatting.
Provides the error envelope model and per-status OpenAPI response examples.
"""

from pydantic import BaseModel, Field
from typing import List, Optional, Any, Dict


class ErrorDetail(BaseModel):
    """Schema for individual error detail."""

    field: Optional[str] = Field(None, description="Field name that caused the error", examples=["price"])
    message: str = Field(..., description="Human-readable error message", examples=["Field required"])
    type: Optional[str] = Field(None, description="Error type identifier", examples=["missing"])
    input: Optional[Any] = Field(None, description="Input value that caused the error")


class ErrorResponse(BaseModel):
    """Schema for standardized error responses."""

    code: str = Field(..., description="Error code identifier", examples=["VALIDATION_ERROR"])
    message: str = Field(..., description="Human-readable error message", examples=["Price must be a positive number"])
    timestamp: str = Field(..., description="Error timestamp in ISO format", examples=["2025-01-01T00:00:00Z"])
    request_id: Optional[str] = Field(None, description="Unique request identifier for tracking", examples=["abc12345"])
    details: Optional[List[ErrorDetail]] = Field(None, description="Detailed error information for validation errors")


class APIErrorResponse(BaseModel):
    """Schema for API error response wrapper."""

    error: ErrorResponse = Field(..., description="Error information")


def _example(code: str, message: str) -> Dict[str, Any]:
    return {
        "error": {
            "code": code,
            "message": message,
            "timestamp": "2025-01-01T00:00:00Z",
            "request_id": "abc12345",
        }
    }


COMMON_ERROR_RESPONSES = {
    400: {
        "description": "Bad Request - Invalid input",
        "model": APIErrorResponse,
        "content": {"application/json": {"examples": {
            "validation_error": {"summary": "Validation Error",
                                 "value": _example("VALIDATION_ERROR", "Required fields cannot be empty")},
            "invalid_id": {"summary": "Invalid Id", "value": _example("INVALID_ID", "Invalid property id")},
            "email_exists": {"summary": "Duplicate Email", "value": _example("EMAIL_EXISTS", "Email already exists")},
        }}},
    },
    401: {
        "description": "Unauthorized - Authentication required",
        "model": APIErrorResponse,
        "content": {"application/json": {"examples": {
            "missing_token": {"summary": "Token Missing",
                              "value": _example("UNAUTHORIZED", "Not authorized, token missing")},
            "invalid_token": {"summary": "Invalid Token",
                              "value": _example("INVALID_TOKEN", "Invalid or expired token")},
        }}},
    },
    403: {
        "description": "Forbidden - Access denied",
        "model": APIErrorResponse,
        "content": {"application/json": {"examples": {
            "insufficient_role": {"summary": "Insufficient Role",
                                  "value": _example("FORBIDDEN", "Access forbidden: insufficient role")},
            "property_ownership": {"summary": "Property Ownership Error",
                                   "value": _example("FORBIDDEN", "You don't own this property")},
        }}},
    },
    404: {
        "description": "Not Found - Resource not found",
        "model": APIErrorResponse,
        "content": {"application/json": {"example": _example(
            "NOT_FOUND", "Property not found with ID: 123e4567-e89b-12d3-a456-426614174000")}},
    },
    500: {
        "description": "Internal Server Error - Upstream or unexpected failure",
        "model": APIErrorResponse,
        "content": {"application/json": {"examples": {
            "upstream_error": {"summary": "Image Upload Failure",
                               "value": _example("UPSTREAM_ERROR", "Failed to upload one or more images")},
            "internal_error": {"summary": "Internal Server Error",
                               "value": _example("INTERNAL_SERVER_ERROR",
                                                 "An unexpected error occurred. Please try again later.")},
        }}},
    },
}


def error_responses(*status_codes: int) -> Dict[int, Dict[str, Any]]:
    """Select OpenAPI error responses for a route."""
    return {code: COMMON_ERROR_RESPONSES[code] for code in status_codes}
