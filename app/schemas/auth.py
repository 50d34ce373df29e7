"""
Pydantic schemas for authentication requests and responses.
Field-level rules (required fields, password length, email format, allowed role)
are enforced by AuthService so every failure uses the same error envelope.
"""

from pydantic import Field
from typing import Optional
from app.schemas.user import CamelModel, UserResponse, CurrentUserResponse


class SignupRequest(CamelModel):
    """Registration request schema."""

    full_name: Optional[str] = Field(None, description="User's full name", examples=["Jane Doe"])
    email: Optional[str] = Field(None, description="User's email address", examples=["agent@example.com"])
    password: Optional[str] = Field(None, description="Password (minimum 8 characters)", examples=["password1"])
    role: Optional[str] = Field(None, description="Agent or Buyer, defaults to Buyer", examples=["Agent"])
    profile_picture: Optional[str] = Field(None, description="Profile image URL")


class LoginRequest(CamelModel):
    """Login request schema."""

    email: Optional[str] = Field(None, examples=["agent@example.com"])
    password: Optional[str] = Field(None, examples=["password1"])


class AuthResponse(CamelModel):
    """Response for signup and login."""

    message: str
    user: UserResponse
    redirect_url: str = Field(..., description="Client dashboard path for the user's role")
    token: str = Field(..., description="Session token, also set as an http-only cookie")


class MeResponse(CamelModel):
    user: CurrentUserResponse


class MessageResponse(CamelModel):
    message: str
