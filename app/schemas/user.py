"""
Pydantic schemas for user data returned by the API.
The credential hash never appears in any response model.
"""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import List
from datetime import datetime
from app.models.user import UserRole
import uuid


class CamelModel(BaseModel):
    """Base schema serialized with camelCase keys and readable from ORM objects."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class OwnerSummary(CamelModel):
    """Listing owner as embedded in property responses."""

    id: uuid.UUID
    full_name: str
    email: str
    role: UserRole


class UserResponse(CamelModel):
    """User response schema (excluding sensitive data)."""

    id: uuid.UUID = Field(..., description="User's unique identifier")
    full_name: str = Field(..., description="User's full name", examples=["Jane Doe"])
    email: str = Field(..., description="User's email address", examples=["agent@example.com"])
    role: UserRole = Field(..., description="User's role", examples=["Agent"])
    profile_picture: str = Field("", description="Profile image URL")
    is_verified: bool = Field(False, description="Whether the email address is verified")
    created_at: datetime = Field(..., description="Account creation timestamp")


class CurrentUserResponse(UserResponse):
    """Authenticated user with the ids of the listings they own, in creation order."""

    listings: List[uuid.UUID] = Field(default_factory=list)
