"""
User model with credential handling, role management and the owner listing index.
Handles accounts for buyers, property agents and administrators.
"""

from sqlalchemy import String, Boolean, Integer, Column, ForeignKey, Table, Uuid, Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column
from app.database import Base
from app.utils.auth import hash_password, verify_password
from email_validator import validate_email, EmailNotValidError
import enum


class UserRole(str, enum.Enum):
    """User role enumeration for role-based access control."""
    AGENT = "Agent"
    BUYER = "Buyer"
    ADMIN = "Admin"

    @classmethod
    def parse(cls, value: str) -> "UserRole":
        """Resolve a role from user input, ignoring case."""
        normalized = (value or "").strip().lower()
        for role in cls:
            if role.value.lower() == normalized:
                return role
        raise ValueError(f"Invalid role '{value}'. Must be one of: {', '.join(r.value for r in cls)}")


DASHBOARD_URLS = {
    UserRole.ADMIN: "/dashboard/admin",
    UserRole.AGENT: "/dashboard/agent",
    UserRole.BUYER: "/dashboard/buyer",
}


# Owner index: ordered references from an agent to the listings they own.
# Rows are only ever inserted or deleted, so concurrent appends never overwrite each other.
user_listings = Table(
    "user_listings",
    Base.metadata,
    Column("seq", Integer, primary_key=True, autoincrement=True),
    Column("user_id", Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True),
    Column("property_id", Uuid, ForeignKey("properties.id", ondelete="CASCADE"), nullable=False, unique=True),
)


class User(Base):
    """
    User model for authentication and authorization.
    The credential hash is deferred and only loaded by the login lookup.
    """

    __tablename__ = "users"

    # User identification and authentication
    email: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        nullable=False,
        index=True,
        comment="Lowercased email address - must be unique"
    )

    hashed_password: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        deferred=True,
        comment="Bcrypt hashed password"
    )

    # User profile information
    full_name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="User's full name"
    )

    profile_picture: Mapped[str] = mapped_column(
        String(500),
        nullable=False,
        default="",
        comment="Profile image URL"
    )

    # Role and status
    role: Mapped[UserRole] = mapped_column(
        SQLEnum(UserRole),
        nullable=False,
        default=UserRole.BUYER,
        index=True,
        comment="User role for access control"
    )

    is_verified: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        comment="Whether the user has verified their email"
    )

    def __repr__(self) -> str:
        """String representation of the user."""
        return f"<User(id={self.id}, email={self.email}, role={self.role})>"

    @classmethod
    def validate_email_format(cls, email: str) -> str:
        """
        Validate email format using email-validator.

        Args:
            email: Email address to validate

        Returns:
            Normalized, lowercased email address

        Raises:
            ValueError: If email format is invalid
        """
        try:
            valid_email = validate_email(email.strip(), check_deliverability=False)
            return valid_email.normalized.lower()
        except EmailNotValidError as e:
            raise ValueError(f"Invalid email format: {str(e)}")

    def set_password(self, password: str) -> None:
        """Hash and store a new password."""
        self.hashed_password = hash_password(password)

    def verify_password(self, password: str) -> bool:
        """
        Verify a password against the stored hash.
        Requires the credential to have been loaded explicitly.
        """
        return verify_password(password, self.hashed_password)

    @property
    def is_admin(self) -> bool:
        """Check if user has admin role."""
        return self.role == UserRole.ADMIN

    @property
    def is_agent(self) -> bool:
        """Check if user has agent role."""
        return self.role == UserRole.AGENT

    @property
    def dashboard_url(self) -> str:
        """Client dashboard path for this user's role."""
        return DASHBOARD_URLS.get(self.role, DASHBOARD_URLS[UserRole.BUYER])
