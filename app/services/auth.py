"""
Authentication service for registration, login and session identity.
Issues session tokens bound to (user id, role) and resolves the current account.
"""

from typing import Optional, Tuple, List, Dict, Any
from sqlalchemy.ext.asyncio import AsyncSession
from app.config import Settings
from app.database import transaction
from app.repositories.user import UserRepository
from app.models.user import User, UserRole
from app.utils.auth import create_access_token, MIN_PASSWORD_LENGTH
from app.utils.context import Authenticated
from app.utils.exceptions import (
    APIException,
    InvalidCredentialsError,
    UnauthorizedError,
    ValidationError,
)
import uuid
import logging

logger = logging.getLogger(__name__)

SELF_REGISTER_ROLES = (UserRole.AGENT, UserRole.BUYER)


class AuthService:
    """
    Authentication service for account registration and login.
    Admin accounts cannot be self-registered; they are created by scripts/create_admin.py.
    """

    def __init__(self, db_session: AsyncSession, settings: Settings):
        self.db = db_session
        self.settings = settings
        self.user_repo = UserRepository(db_session)

    def issue_token(self, user: User) -> str:
        """Create a session token for a user."""
        return create_access_token(user.id, user.role, self.settings)

    async def signup(self, user_data: Dict[str, Any]) -> Tuple[User, str]:
        """
        Register a new account and issue its session token.

        Args:
            user_data: full_name, email, password, optional role and profile_picture

        Returns:
            Tuple of (user, session token)

        Raises:
            ValidationError: If a field is missing or invalid
            DuplicateEmailError: If the email is already registered
        """
        full_name = (user_data.get("full_name") or "").strip()
        email = (user_data.get("email") or "").strip()
        password = user_data.get("password") or ""

        if not full_name or not email or not password:
            raise ValidationError("Please fill in all required fields")

        if len(password) < MIN_PASSWORD_LENGTH:
            raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")

        role = self._resolve_signup_role(user_data.get("role"))

        try:
            email = User.validate_email_format(email)
        except ValueError:
            raise ValidationError("Invalid email address")

        try:
            async with transaction(self.db):
                user = await self.user_repo.create_user({
                    "email": email,
                    "password": password,
                    "full_name": full_name,
                    "role": role,
                    "profile_picture": user_data.get("profile_picture"),
                })
        except APIException:
            raise
        except Exception as e:
            logger.error(f"Signup failed for {email}: {e}", exc_info=True)
            raise

        logger.info(f"User registered: {user.email} as {user.role.value}")
        return user, self.issue_token(user)

    async def login(self, email: str, password: str) -> Tuple[User, str]:
        """
        Authenticate with email and password.

        Raises:
            ValidationError: If email or password is empty
            InvalidCredentialsError: If the email is unknown or the password is wrong
        """
        if not email or not email.strip() or not password:
            raise ValidationError("Email and password are required")

        user = await self.user_repo.get_by_email(email, include_credential=True)
        if not user or not user.verify_password(password):
            # Same error for unknown email and wrong password
            logger.warning(f"Failed authentication attempt for email: {email}")
            raise InvalidCredentialsError()

        logger.info(f"User authenticated successfully: {user.email}")
        return user, self.issue_token(user)

    async def get_current_user(self, caller: Authenticated) -> Tuple[User, List[uuid.UUID]]:
        """
        Load the account behind a verified session together with its owned listing ids.

        Raises:
            UnauthorizedError: If the account no longer exists
        """
        user = await self.user_repo.get_by_id(caller.user_id)
        if not user:
            raise UnauthorizedError("User not found")

        listing_ids = await self.user_repo.get_listing_ids(user.id)
        return user, listing_ids

    @staticmethod
    def _resolve_signup_role(raw_role: Optional[str]) -> UserRole:
        if raw_role is None or not str(raw_role).strip():
            return UserRole.BUYER

        try:
            role = UserRole.parse(str(raw_role))
        except ValueError:
            raise ValidationError("Role must be Agent or Buyer")

        if role not in SELF_REGISTER_ROLES:
            raise ValidationError("Role must be Agent or Buyer")
        return role
