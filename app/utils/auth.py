"""
Authentication utilities for session token management and password hashing.
Provides JWT issue/verify bound to (user id, role) and bcrypt credential hashing.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional, Dict, Any
from jose import JWTError, jwt
from passlib.context import CryptContext
from app.config import Settings, ConfigurationError
from app.utils.exceptions import InvalidTokenError
import uuid


# Password hashing context
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

MIN_PASSWORD_LENGTH = 8


class InvalidArgumentError(ValueError):
    """Raised when a token is requested for an empty identity."""


class TokenPayload:
    """Verified session token claims."""

    def __init__(self, user_id: str, role: str, exp: datetime):
        self.user_id = user_id
        self.role = role
        self.exp = exp

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TokenPayload":
        """Create TokenPayload from decoded claims."""
        return cls(
            user_id=data["sub"],
            role=data["role"],
            exp=datetime.fromtimestamp(data["exp"], tz=timezone.utc)
        )


def create_access_token(
    user_id: uuid.UUID,
    role: str,
    settings: Settings,
    expires_delta: Optional[timedelta] = None
) -> str:
    """
    Create a signed session token for a user.

    Args:
        user_id: User's UUID
        role: User's role value
        settings: Application settings holding the signing secret
        expires_delta: Optional custom expiration time

    Returns:
        Encoded JWT token string

    Raises:
        ConfigurationError: If the signing secret is not configured
        InvalidArgumentError: If user id or role is empty
    """
    if not settings.jwt_secret:
        raise ConfigurationError("JWT_SECRET is not configured")

    role_value = getattr(role, "value", role)
    if not user_id or not str(user_id).strip():
        raise InvalidArgumentError("User id is required to issue a token")
    if not role_value or not str(role_value).strip():
        raise InvalidArgumentError("Role is required to issue a token")

    now = datetime.now(timezone.utc)
    expire = now + (expires_delta or timedelta(days=settings.access_token_expire_days))

    to_encode = {
        "sub": str(user_id),
        "role": str(role_value),
        "iat": now,
        "exp": expire,
    }

    return jwt.encode(
        to_encode,
        settings.jwt_secret,
        algorithm=settings.jwt_algorithm
    )


def verify_token(token: str, settings: Settings) -> TokenPayload:
    """
    Verify and decode a session token.

    Expiry, signature mismatch and malformed claims all raise the same
    error so callers cannot tell which check failed.

    Raises:
        InvalidTokenError: If the token is not valid
    """
    if not token:
        raise InvalidTokenError()

    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[settings.jwt_algorithm]
        )
    except JWTError:
        raise InvalidTokenError()

    if not payload.get("sub") or not payload.get("role") or "exp" not in payload:
        raise InvalidTokenError()

    try:
        return TokenPayload.from_dict(payload)
    except (KeyError, TypeError, ValueError, OverflowError):
        raise InvalidTokenError()


def hash_password(password: str) -> str:
    """
    Hash password using bcrypt.

    Raises:
        ValueError: If password is too short
    """
    if not password or len(password) < MIN_PASSWORD_LENGTH:
        raise ValueError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters long")

    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify password against hash."""
    if not plain_password or not hashed_password:
        return False
    return pwd_context.verify(plain_password, hashed_password)
