"""
Pydantic schemas for request/response validation.
"""

# Authentication schemas
from .auth import (
    SignupRequest,
    LoginRequest,
    AuthResponse,
    MeResponse,
    MessageResponse
)

# User schemas
from .user import (
    CamelModel,
    OwnerSummary,
    UserResponse,
    CurrentUserResponse
)

# Property schemas
from .property import (
    PropertyResponse,
    PropertyMutationResponse,
    PropertyDetailResponse,
    PropertyListResponse,
    MyPropertyListResponse
)

__all__ = [
    # Authentication
    "SignupRequest",
    "LoginRequest",
    "AuthResponse",
    "MeResponse",
    "MessageResponse",

    # User
    "CamelModel",
    "OwnerSummary",
    "UserResponse",
    "CurrentUserResponse",

    # Property
    "PropertyResponse",
    "PropertyMutationResponse",
    "PropertyDetailResponse",
    "PropertyListResponse",
    "MyPropertyListResponse"
]
