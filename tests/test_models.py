"""
Tests for database models.
Tests enum parsing, credential handling, role helpers and column defaults.
"""

import pytest
import uuid

from app.models.user import User, UserRole, DASHBOARD_URLS
from app.models.property import Property, PropertyType, PropertyStatus
from app.utils.context import Authenticated, Anonymous
from tests.conftest import UserFactory


class TestUserModel:
    """Test User model validation and methods."""

    def test_email_validation_normalizes_case(self):
        """Emails are stored lowercased."""
        assert User.validate_email_format("  Jane.Doe@Example.COM ") == "jane.doe@example.com"

    def test_email_validation_valid(self):
        """Test valid email validation."""
        valid_emails = [
            "test@example.com",
            "user.name@domain.co.uk",
            "user+tag@example.org",
        ]

        for email in valid_emails:
            assert User.validate_email_format(email) == email.lower()

    def test_email_validation_invalid(self):
        """Test invalid email validation."""
        for email in ["invalid-email", "@example.com", "test@", ""]:
            with pytest.raises(ValueError, match="Invalid email format"):
                User.validate_email_format(email)

    def test_set_and_verify_password(self):
        """The stored hash is bcrypt and verifies only the original password."""
        user = User(email="a@example.com", full_name="A", role=UserRole.BUYER)
        user.set_password("testpassword123")

        assert user.hashed_password != "testpassword123"
        assert user.hashed_password.startswith("$2b$")
        assert user.verify_password("testpassword123") is True
        assert user.verify_password("wrongpassword") is False

    def test_set_password_too_short(self):
        user = User(email="a@example.com", full_name="A", role=UserRole.BUYER)
        with pytest.raises(ValueError):
            user.set_password("short")

    def test_role_properties(self):
        """Test role checking properties."""
        admin = User(role=UserRole.ADMIN)
        agent = User(role=UserRole.AGENT)
        buyer = User(role=UserRole.BUYER)

        assert admin.is_admin and not admin.is_agent
        assert agent.is_agent and not agent.is_admin
        assert not buyer.is_agent and not buyer.is_admin

    def test_dashboard_url_per_role(self):
        assert User(role=UserRole.ADMIN).dashboard_url == "/dashboard/admin"
        assert User(role=UserRole.AGENT).dashboard_url == "/dashboard/agent"
        assert User(role=UserRole.BUYER).dashboard_url == "/dashboard/buyer"
        assert set(DASHBOARD_URLS) == set(UserRole)

    def test_role_parse_is_case_insensitive(self):
        assert UserRole.parse("agent") == UserRole.AGENT
        assert UserRole.parse(" BUYER ") == UserRole.BUYER
        assert UserRole.parse("Admin") == UserRole.ADMIN

    def test_role_parse_invalid(self):
        with pytest.raises(ValueError, match="Invalid role"):
            UserRole.parse("Landlord")

    @pytest.mark.asyncio
    async def test_persisted_defaults(self, db_session):
        """Generated id, timestamps and profile defaults are populated after creation."""
        user = await UserFactory.create_user(db_session, email="defaults@example.com", role=UserRole.BUYER)

        assert isinstance(user.id, uuid.UUID)
        assert user.created_at is not None
        assert user.updated_at is not None
        assert user.profile_picture == ""
        assert user.is_verified is False


class TestPropertyEnums:
    """Test property type and status parsing."""

    @pytest.mark.parametrize("raw,expected", [
        ("House", PropertyType.HOUSE),
        ("apartment", PropertyType.APARTMENT),
        (" LAND ", PropertyType.LAND),
        ("Commercial", PropertyType.COMMERCIAL),
        ("other", PropertyType.OTHER),
    ])
    def test_type_parse(self, raw, expected):
        assert PropertyType.parse(raw) == expected

    def test_status_parse_multi_word(self):
        assert PropertyStatus.parse("under contract") == PropertyStatus.UNDER_CONTRACT

    def test_parse_unknown_member(self):
        with pytest.raises(ValueError):
            PropertyType.parse("Castle")
        with pytest.raises(ValueError):
            PropertyStatus.parse("Pending")

    def test_labels(self):
        assert PropertyType.labels() == ["House", "Apartment", "Land", "Commercial", "Other"]
        assert PropertyStatus.labels() == ["Available", "Under Contract", "Sold", "Rented"]


class TestPropertyModel:
    """Test Property model helpers."""

    def test_image_count(self):
        property_obj = Property(title="T", images=["https://a", "https://b"])
        assert property_obj.image_count == 2

    def test_image_count_without_images(self):
        assert Property(title="T").image_count == 0

    def test_property_repr(self):
        property_obj = Property(id=uuid.uuid4(), title="A very long listing title for the repr", price=100.0)
        assert "A very long listing title for " in repr(property_obj)


class TestRequestContext:
    """Test the identity resolved by the access guard."""

    def test_admin_manages_any_listing(self):
        caller = Authenticated(user_id=uuid.uuid4(), role=UserRole.ADMIN)
        assert caller.can_manage(uuid.uuid4())

    def test_agent_manages_only_own_listing(self):
        agent_id = uuid.uuid4()
        caller = Authenticated(user_id=agent_id, role=UserRole.AGENT)
        assert caller.can_manage(agent_id)
        assert not caller.can_manage(uuid.uuid4())

    def test_buyer_manages_nothing(self):
        buyer_id = uuid.uuid4()
        caller = Authenticated(user_id=buyer_id, role=UserRole.BUYER)
        assert not caller.can_manage(buyer_id)

    def test_contexts_are_immutable(self):
        caller = Authenticated(user_id=uuid.uuid4(), role=UserRole.AGENT)
        with pytest.raises(AttributeError):
            caller.role = UserRole.ADMIN
        assert Anonymous() == Anonymous()
