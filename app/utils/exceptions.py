"""
Custom exception classes for the Realtor Listing API.
Provides structured error handling with appropriate HTTP status codes.
"""

from typing import Any, Dict, Optional, List
from fastapi import HTTPException, status


class APIException(HTTPException):
    """Base API exception class."""

    def __init__(
        self,
        status_code: int,
        detail: str,
        error_code: Optional[str] = None,
        headers: Optional[Dict[str, Any]] = None
    ):
        super().__init__(status_code=status_code, detail=detail, headers=headers)
        self.error_code = error_code


class ValidationError(APIException):
    """Malformed or out-of-range input."""

    def __init__(
        self,
        detail: str,
        field_errors: Optional[List[Dict[str, str]]] = None,
        error_code: str = "VALIDATION_ERROR"
    ):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=detail,
            error_code=error_code
        )
        self.field_errors = field_errors or []


class InvalidIdError(ValidationError):
    """Malformed resource identifier."""

    def __init__(self, resource: str = "Property"):
        super().__init__(f"Invalid {resource.lower()} id", error_code="INVALID_ID")


class InvalidFilterError(ValidationError):
    """Unrecognized value in a listing filter."""

    def __init__(self, detail: str):
        super().__init__(detail, error_code="INVALID_FILTER")


class NotFoundError(APIException):
    """Resource not found exception."""

    def __init__(self, resource: str, resource_id: Optional[str] = None):
        detail = f"{resource} not found"
        if resource_id:
            detail += f" with ID: {resource_id}"

        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=detail,
            error_code="NOT_FOUND"
        )


class UnauthorizedError(APIException):
    """Authentication required exception."""

    def __init__(self, detail: str = "Not authorized, token missing"):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            error_code="UNAUTHORIZED",
            headers={"WWW-Authenticate": "Bearer"}
        )


class ForbiddenError(APIException):
    """Access forbidden exception."""

    def __init__(self, detail: str = "Access forbidden"):
        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=detail,
            error_code="FORBIDDEN"
        )


class ConflictError(APIException):
    """Resource conflict exception."""

    def __init__(self, detail: str, status_code: int = status.HTTP_409_CONFLICT, error_code: str = "CONFLICT"):
        super().__init__(
            status_code=status_code,
            detail=detail,
            error_code=error_code
        )


class UpstreamError(APIException):
    """Asset store or database unavailable."""

    def __init__(self, detail: str = "Upstream service failure"):
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=detail,
            error_code="UPSTREAM_ERROR"
        )


# Authentication specific exceptions
class InvalidCredentialsError(UnauthorizedError):
    """Invalid login credentials exception."""

    def __init__(self, detail: str = "Invalid email or password"):
        super().__init__(detail)
        self.error_code = "INVALID_CREDENTIALS"


class InvalidTokenError(UnauthorizedError):
    """Missing, expired, forged or malformed session token."""

    def __init__(self, detail: str = "Invalid or expired token"):
        super().__init__(detail)
        self.error_code = "INVALID_TOKEN"


class InsufficientPermissionsError(ForbiddenError):
    """Valid identity whose role is not allowed."""

    def __init__(self, action: str):
        super().__init__(f"Insufficient permissions to {action}")


class PropertyOwnershipError(ForbiddenError):
    """Caller neither owns the listing nor is an admin."""

    def __init__(self, detail: str = "You don't own this property"):
        super().__init__(detail)


class DuplicateEmailError(ConflictError):
    """Email address already registered."""

    def __init__(self, detail: str = "Email already exists"):
        super().__init__(detail, status_code=status.HTTP_400_BAD_REQUEST, error_code="EMAIL_EXISTS")


# Image upload exceptions
class ResourceLimitExceededError(ValidationError):
    """Resource limit exceeded exception."""

    def __init__(self, resource: str, limit: int):
        super().__init__(f"{resource} limit exceeded (maximum: {limit})", error_code="LIMIT_EXCEEDED")


class UnsupportedFileTypeError(ValidationError):
    """Unsupported file type exception."""

    def __init__(self, file_type: str, supported_types: List[str]):
        supported = ", ".join(supported_types)
        super().__init__(
            f"Unsupported file type '{file_type}'. Supported types: {supported}",
            error_code="UNSUPPORTED_FILE_TYPE"
        )


class FileSizeExceededError(ValidationError):
    """File size exceeded exception."""

    def __init__(self, size: int, max_size: int):
        super().__init__(
            f"File size {size} bytes exceeds maximum allowed size {max_size} bytes",
            error_code="FILE_TOO_LARGE"
        )
