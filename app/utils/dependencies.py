"""
FastAPI dependency injection utilities for authentication and services.
Resolves the request identity from the session cookie or bearer header and gates routes by role.
"""

from typing import Optional
import uuid
from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession
from app.config import Settings
from app.database import get_db
from app.models.user import UserRole
from app.services.asset_store import AssetStore, CloudinaryAssetStore
from app.services.auth import AuthService
from app.services.notifications import NotificationService
from app.services.property import PropertyService
from app.utils.auth import verify_token
from app.utils.context import Anonymous, Authenticated, RequestContext
from app.utils.exceptions import (
    UnauthorizedError,
    InvalidTokenError,
    ForbiddenError,
)


# HTTP Bearer token security scheme
security = HTTPBearer(auto_error=False)


def get_app_settings(request: Request) -> Settings:
    """Settings the running application was built with."""
    return request.app.state.settings


def get_asset_store(settings: Settings = Depends(get_app_settings)) -> AssetStore:
    return CloudinaryAssetStore(settings)


def get_notification_service(settings: Settings = Depends(get_app_settings)) -> NotificationService:
    return NotificationService(settings)


async def get_auth_service(
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_app_settings)
) -> AuthService:
    """
    Get authentication service instance.

    Args:
        db: Database session
        settings: Application settings

    Returns:
        AuthService instance
    """
    return AuthService(db, settings)


async def get_property_service(
    db: AsyncSession = Depends(get_db),
    asset_store: AssetStore = Depends(get_asset_store)
) -> PropertyService:
    """
    Get property service instance.

    Args:
        db: Database session
        asset_store: Image storage adapter

    Returns:
        PropertyService instance
    """
    return PropertyService(db, asset_store)


async def get_request_context(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    settings: Settings = Depends(get_app_settings)
) -> RequestContext:
    """
    Resolve the caller's identity.

    The bearer header takes precedence over the session cookie. No token at
    all yields Anonymous; a token that fails verification is rejected.

    Raises:
        InvalidTokenError: If a presented token is invalid or expired
    """
    token = credentials.credentials if credentials else request.cookies.get(settings.cookie_name)
    if not token:
        return Anonymous()

    payload = verify_token(token, settings)
    try:
        return Authenticated(user_id=uuid.UUID(payload.user_id), role=UserRole(payload.role))
    except ValueError:
        raise InvalidTokenError()


async def require_auth(context: RequestContext = Depends(get_request_context)) -> Authenticated:
    """
    Require a verified session.

    Raises:
        UnauthorizedError: If no token was presented
    """
    if not isinstance(context, Authenticated):
        raise UnauthorizedError()
    return context


def require_roles(*roles: UserRole):
    """
    Create a dependency that admits only the given roles.

    Args:
        roles: Allowed roles

    Returns:
        Dependency function
    """
    async def role_checker(caller: Authenticated = Depends(require_auth)) -> Authenticated:
        if caller.role not in roles:
            raise ForbiddenError("Access forbidden: insufficient role")
        return caller

    return role_checker


require_agent = require_roles(UserRole.AGENT)
require_agent_or_admin = require_roles(UserRole.AGENT, UserRole.ADMIN)
