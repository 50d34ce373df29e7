"""
User repository for account lookup, registration and the owner listing index.
Credential hashes are only loaded when explicitly requested.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, insert, delete, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import undefer
from app.repositories.base import BaseRepository
from app.models.user import User, UserRole, user_listings
from app.utils.exceptions import DuplicateEmailError
from typing import Optional, List, Dict, Any
import uuid
import logging

logger = logging.getLogger(__name__)


class UserRepository(BaseRepository[User]):
    """
    Repository for user accounts.
    Writes flush into the caller's transaction and never commit.
    """

    def __init__(self, db: AsyncSession):
        super().__init__(User, db)

    async def create_user(self, user_data: Dict[str, Any]) -> User:
        """
        Create a new user with email normalization and password hashing.

        Args:
            user_data: Dictionary containing user information
                      Must include: email, password, full_name
                      Optional: role (defaults to BUYER), profile_picture

        Returns:
            Created user instance

        Raises:
            ValueError: If email or password validation fails
            DuplicateEmailError: If the email is already registered
        """
        data = dict(user_data)
        email = User.validate_email_format(data.pop("email"))

        if await self.get_by_email(email):
            logger.warning(f"Registration rejected, email already in use: {email}")
            raise DuplicateEmailError()

        user = User(
            email=email,
            full_name=data["full_name"].strip(),
            role=data.get("role") or UserRole.BUYER,
            profile_picture=data.get("profile_picture") or "",
            is_verified=data.get("is_verified", False),
        )
        user.set_password(data["password"])

        self.db.add(user)
        try:
            await self.db.flush()
        except IntegrityError:
            logger.warning(f"Unique index rejected duplicate email: {email}")
            raise DuplicateEmailError()
        await self.db.refresh(user)

        logger.info(f"Created user: {user.email} (ID: {user.id}, role: {user.role.value})")
        return user

    async def get_by_email(self, email: str, include_credential: bool = False) -> Optional[User]:
        """
        Get user by email address.

        Args:
            email: Email address, matched case-insensitively
            include_credential: Load the deferred password hash as well

        Returns:
            User instance if found, None otherwise
        """
        if not email:
            return None

        query = select(User).where(User.email == email.strip().lower())
        if include_credential:
            # populate_existing so an identity already in the session gets the hash too
            query = query.options(undefer(User.hashed_password)).execution_options(populate_existing=True)

        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def append_listing(self, user_id: uuid.UUID, property_id: uuid.UUID) -> None:
        """
        Append a listing reference to the owner index.
        A single INSERT, so concurrent appends for one user never collide.
        """
        await self.db.execute(
            insert(user_listings).values(user_id=user_id, property_id=property_id)
        )
        logger.debug(f"Appended property {property_id} to owner index of user {user_id}")

    async def remove_listing(self, user_id: uuid.UUID, property_id: uuid.UUID) -> bool:
        result = await self.db.execute(
            delete(user_listings).where(
                user_listings.c.user_id == user_id,
                user_listings.c.property_id == property_id,
            )
        )
        return result.rowcount > 0

    async def get_listing_ids(self, user_id: uuid.UUID) -> List[uuid.UUID]:
        """Owned listing ids in the order they were appended."""
        result = await self.db.execute(
            select(user_listings.c.property_id)
            .where(user_listings.c.user_id == user_id)
            .order_by(user_listings.c.seq)
        )
        return list(result.scalars().all())

    async def count_listings(self, user_id: uuid.UUID) -> int:
        result = await self.db.execute(
            select(func.count()).select_from(user_listings).where(user_listings.c.user_id == user_id)
        )
        return result.scalar() or 0
