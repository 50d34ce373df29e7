"""
Test configuration and fixtures for the realtor listing API.
Provides database fixtures, fake external services, test data factories and common test utilities.
"""

import pytest
import asyncio
import uuid
from typing import AsyncGenerator, Dict, List, Optional, Set
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool
from httpx import AsyncClient, ASGITransport

from app.config import Settings
from app.database import Base, create_session_factory, transaction
from app.main import create_app
from app.models.user import User, UserRole
from app.models.property import Property
from app.repositories.user import UserRepository
from app.repositories.property import PropertyRepository
from app.services.asset_store import AssetStore, ImageUpload
from app.services.auth import AuthService
from app.services.notifications import NotificationService
from app.services.property import PropertyService
from app.utils.auth import create_access_token
from app.utils.context import Authenticated
from app.utils.dependencies import get_asset_store, get_notification_service


TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


def make_settings(**overrides) -> Settings:
    """Build settings for tests without reading the environment."""
    values = dict(
        environment="testing",
        database_url=TEST_DATABASE_URL,
        jwt_secret="test-secret-key-for-session-tokens",
        cloudinary_cloud_name="test-cloud",
        cloudinary_api_key="test-api-key",
        cloudinary_api_secret="test-api-secret",
        resend_api_key="re_test_key",
        email_from="noreply@example.com",
        email_to="ops@example.com",
        sender_name="Realtor App",
        client_url="http://localhost:5173",
    )
    values.update(overrides)
    return Settings(_env_file=None, **values)


class InMemoryAssetStore(AssetStore):
    """Asset store fake that keeps uploads in memory and can be told to fail."""

    def __init__(self, settings: Settings):
        super().__init__(settings)
        self.stored: Dict[str, bytes] = {}
        self.deleted: List[str] = []
        self.fail_filenames: Set[str] = set()
        self.upload_delay: float = 0.0

    async def _upload(self, image: ImageUpload) -> Optional[str]:
        if self.upload_delay:
            await asyncio.sleep(self.upload_delay)
        if image.filename in self.fail_filenames:
            raise ConnectionError("asset store unavailable")

        public_id = f"properties/{uuid.uuid4().hex}"
        self.stored[public_id] = image.data
        return f"https://res.cloudinary.com/test-cloud/image/upload/v1700000000/{public_id}.jpg"

    async def _delete(self, public_id: str) -> None:
        self.deleted.append(public_id)
        self.stored.pop(public_id, None)


class RecordingNotifier(NotificationService):
    """Notification fake that records messages instead of sending them."""

    def __init__(self, settings: Settings):
        super().__init__(settings)
        self.sent: List[Dict[str, str]] = []

    async def send_email(self, subject: str, html_body: str, to: Optional[str] = None) -> bool:
        self.sent.append({"to": to or self.settings.email_to, "subject": subject, "html": html_body})
        return True


def make_image(filename: str = "photo.jpg", content_type: str = "image/jpeg", size: int = 1024) -> ImageUpload:
    """Create an in-memory image upload."""
    return ImageUpload(filename=filename, content_type=content_type, data=b"\xff" * size)


@pytest.fixture
def test_settings() -> Settings:
    return make_settings()


@pytest.fixture
async def engine():
    """Fresh in-memory database per test."""
    test_engine = create_async_engine(
        TEST_DATABASE_URL,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield test_engine
    await test_engine.dispose()


@pytest.fixture
def session_factory(engine) -> async_sessionmaker:
    return create_session_factory(engine)


@pytest.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session."""
    async with session_factory() as session:
        yield session


@pytest.fixture
def asset_store(test_settings: Settings) -> InMemoryAssetStore:
    return InMemoryAssetStore(test_settings)


@pytest.fixture
def notifier(test_settings: Settings) -> RecordingNotifier:
    return RecordingNotifier(test_settings)


@pytest.fixture
def app(test_settings, session_factory, asset_store, notifier):
    """Application wired to the test database and fake external services."""
    application = create_app(test_settings)
    application.state.session_factory = session_factory
    application.dependency_overrides[get_asset_store] = lambda: asset_store
    application.dependency_overrides[get_notification_service] = lambda: notifier
    yield application
    application.dependency_overrides.clear()


@pytest.fixture
async def async_client(app) -> AsyncGenerator[AsyncClient, None]:
    """Create an async test client over the ASGI app."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client


# Repository fixtures
@pytest.fixture
def user_repository(db_session: AsyncSession) -> UserRepository:
    """Create a user repository instance."""
    return UserRepository(db_session)


@pytest.fixture
def property_repository(db_session: AsyncSession) -> PropertyRepository:
    """Create a property repository instance."""
    return PropertyRepository(db_session)


# Service fixtures
@pytest.fixture
def auth_service(db_session: AsyncSession, test_settings: Settings) -> AuthService:
    """Create an auth service instance."""
    return AuthService(db_session, test_settings)


@pytest.fixture
def property_service(db_session: AsyncSession, asset_store: InMemoryAssetStore) -> PropertyService:
    """Create a property service instance."""
    return PropertyService(db_session, asset_store)


# Test data factories
class UserFactory:
    """Factory for creating test users."""

    @staticmethod
    def create_user_data(
        email: str = None,
        password: str = "testpassword123",
        full_name: str = "Test User",
        role: UserRole = UserRole.AGENT
    ) -> dict:
        """Create user data dictionary."""
        return {
            "email": email or f"test{uuid.uuid4().hex[:8]}@example.com",
            "password": password,
            "full_name": full_name,
            "role": role
        }

    @staticmethod
    async def create_user(session: AsyncSession, **kwargs) -> User:
        """Create and commit a test user."""
        async with transaction(session):
            return await UserRepository(session).create_user(UserFactory.create_user_data(**kwargs))


class PropertyFactory:
    """Factory for creating test properties."""

    @staticmethod
    def create_property_data(**overrides) -> dict:
        """Listing fields keyed by wire name, as a client would send them."""
        data = {
            "title": "Test Property",
            "description": "A beautiful test property",
            "price": "250000",
            "location": "Lekki, Lagos",
            "type": "House",
            "status": "Available",
            "bedrooms": "3",
            "bathrooms": "2",
            "squareFootage": "1800",
        }
        data.update(overrides)
        return data

    @staticmethod
    async def create_property(
        service: PropertyService,
        owner: User,
        images: Optional[List[ImageUpload]] = None,
        **overrides
    ) -> Property:
        """Create a property through the mutation pipeline."""
        return await service.create_property(
            caller_for(owner),
            PropertyFactory.create_property_data(**overrides),
            images or []
        )


def caller_for(user: User) -> Authenticated:
    return Authenticated(user_id=user.id, role=user.role)


def auth_headers(user: User, settings: Settings) -> Dict[str, str]:
    """Bearer header for a user."""
    return {"Authorization": f"Bearer {create_access_token(user.id, user.role, settings)}"}


@pytest.fixture
def user_factory():
    """User factory fixture."""
    return UserFactory


@pytest.fixture
def property_factory():
    """Property factory fixture."""
    return PropertyFactory


@pytest.fixture
async def agent_user(db_session: AsyncSession) -> User:
    return await UserFactory.create_user(db_session, email="agent@example.com", full_name="Ada Agent")


@pytest.fixture
async def other_agent_user(db_session: AsyncSession) -> User:
    return await UserFactory.create_user(db_session, email="other.agent@example.com", full_name="Otto Agent")


@pytest.fixture
async def buyer_user(db_session: AsyncSession) -> User:
    return await UserFactory.create_user(
        db_session, email="buyer@example.com", full_name="Bea Buyer", role=UserRole.BUYER
    )


@pytest.fixture
async def admin_user(db_session: AsyncSession) -> User:
    return await UserFactory.create_user(
        db_session, email="admin@example.com", full_name="Al Admin", role=UserRole.ADMIN
    )
