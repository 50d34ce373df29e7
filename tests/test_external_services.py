"""
Tests for the Cloudinary asset store and the Resend notification service.
SDK calls are replaced with monkeypatched fakes.
"""

import pytest
import cloudinary
import cloudinary.exceptions
import cloudinary.uploader
import resend

from app.models.user import UserRole
from app.services.asset_store import CloudinaryAssetStore, extract_public_id
from app.services.notifications import NotificationService, render_welcome_email
from app.utils.exceptions import (
    ResourceLimitExceededError,
    UnsupportedFileTypeError,
    FileSizeExceededError,
)
from tests.conftest import make_image


class TestPublicIdExtraction:

    @pytest.mark.parametrize("url,expected", [
        ("https://res.cloudinary.com/demo/image/upload/v1700000000/properties/abc123.jpg", "properties/abc123"),
        ("https://res.cloudinary.com/demo/image/upload/properties/abc123.png", "properties/abc123"),
        ("https://res.cloudinary.com/demo/image/upload/v1/a/b/c.webp?x=1", "a/b/c"),
        ("https://res.cloudinary.com/demo/image/upload/v1/plain", "plain"),
    ])
    def test_extracts_public_id(self, url, expected):
        assert extract_public_id(url) == expected

    @pytest.mark.parametrize("url", ["https://example.com/photo.jpg", "https://res.cloudinary.com/demo/image/upload/"])
    def test_unrecognized_url(self, url):
        assert extract_public_id(url) is None


class TestImageBatchValidation:

    def test_accepts_valid_batch(self, asset_store):
        asset_store.validate_image_batch([make_image(), make_image("b.webp", "image/webp")])

    def test_limit(self, asset_store):
        with pytest.raises(ResourceLimitExceededError, match="maximum: 10"):
            asset_store.validate_image_batch([make_image() for _ in range(11)])

    def test_explicit_limit(self, asset_store):
        with pytest.raises(ResourceLimitExceededError):
            asset_store.validate_image_batch([make_image(), make_image()], limit=1)

    def test_media_type(self, asset_store):
        with pytest.raises(UnsupportedFileTypeError, match="image/gif"):
            asset_store.validate_image_batch([make_image("a.gif", "image/gif")])

    def test_media_type_case_insensitive(self, asset_store):
        asset_store.validate_image_batch([make_image("a.JPG", "IMAGE/JPEG")])

    def test_size(self, asset_store):
        with pytest.raises(FileSizeExceededError):
            asset_store.validate_image_batch([make_image(size=asset_store.max_file_size + 1)])


class TestCloudinaryAssetStore:
    """Test uploads and deletes against a patched Cloudinary SDK."""

    def test_configures_sdk_credentials(self, test_settings):
        CloudinaryAssetStore(test_settings)
        config = cloudinary.config()

        assert config.cloud_name == "test-cloud"
        assert config.api_key == "test-api-key"
        assert config.api_secret == "test-api-secret"

    @pytest.mark.asyncio
    async def test_upload_returns_secure_url(self, test_settings, monkeypatch):
        calls = []

        def fake_upload(file, **options):
            calls.append((file.read(), options))
            return {"secure_url": "https://res.cloudinary.com/test-cloud/image/upload/v1/properties/x.jpg"}

        monkeypatch.setattr(cloudinary.uploader, "upload", fake_upload)
        store = CloudinaryAssetStore(test_settings)

        url = await store.upload(make_image("x.jpg", size=16))

        assert url == "https://res.cloudinary.com/test-cloud/image/upload/v1/properties/x.jpg"
        data, options = calls[0]
        assert data == b"\xff" * 16
        assert options["folder"] == "properties"
        assert options["resource_type"] == "image"

    @pytest.mark.asyncio
    async def test_upload_without_secure_url_returns_none(self, test_settings, monkeypatch):
        monkeypatch.setattr(cloudinary.uploader, "upload", lambda file, **options: {"error": "bad key"})
        store = CloudinaryAssetStore(test_settings)

        assert await store.upload(make_image()) is None

    @pytest.mark.asyncio
    async def test_upload_error_returns_none(self, test_settings, monkeypatch):
        def fake_upload(file, **options):
            raise cloudinary.exceptions.Error("connection refused")

        monkeypatch.setattr(cloudinary.uploader, "upload", fake_upload)
        store = CloudinaryAssetStore(test_settings)

        assert await store.upload(make_image()) is None

    @pytest.mark.asyncio
    async def test_upload_many_omits_failures(self, test_settings, monkeypatch):
        def fake_upload(file, **options):
            if file.read() == b"\xff" * 2:
                raise cloudinary.exceptions.Error("server error")
            return {"secure_url": "https://res.cloudinary.com/c/image/upload/v1/p/ok.jpg"}

        monkeypatch.setattr(cloudinary.uploader, "upload", fake_upload)
        store = CloudinaryAssetStore(test_settings)

        urls = await store.upload_many([make_image("ok.jpg", size=1), make_image("bad.jpg", size=2)])

        assert urls == ["https://res.cloudinary.com/c/image/upload/v1/p/ok.jpg"]

    @pytest.mark.asyncio
    async def test_delete_by_url(self, test_settings, monkeypatch):
        destroyed = []

        def fake_destroy(public_id, **options):
            destroyed.append(public_id)
            return {"result": "ok"}

        monkeypatch.setattr(cloudinary.uploader, "destroy", fake_destroy)
        store = CloudinaryAssetStore(test_settings)

        deleted = await store.delete("https://res.cloudinary.com/test-cloud/image/upload/v1/properties/x.jpg")

        assert deleted is True
        assert destroyed == ["properties/x"]

    @pytest.mark.asyncio
    async def test_delete_failure_is_reported_not_raised(self, test_settings, monkeypatch):
        monkeypatch.setattr(cloudinary.uploader, "destroy", lambda public_id, **options: {"result": "not found"})
        store = CloudinaryAssetStore(test_settings)

        assert await store.delete("https://res.cloudinary.com/c/image/upload/v1/p/x.jpg") is False
        assert await store.delete("https://example.com/not-cloudinary.jpg") is False

    @pytest.mark.asyncio
    async def test_delete_many_counts_successes(self, test_settings, monkeypatch):
        def fake_destroy(public_id, **options):
            if public_id != "p/good":
                raise cloudinary.exceptions.Error("server error")
            return {"result": "ok"}

        monkeypatch.setattr(cloudinary.uploader, "destroy", fake_destroy)
        store = CloudinaryAssetStore(test_settings)

        count = await store.delete_many([
            "https://res.cloudinary.com/c/image/upload/v1/p/good.jpg",
            "https://res.cloudinary.com/c/image/upload/v1/p/bad.jpg",
        ])

        assert count == 1


class TestWelcomeEmail:

    def test_role_specific_content(self):
        body = render_welcome_email("Jane Doe", UserRole.AGENT, "https://app.example.com/", "Realtor")

        assert "Welcome, Trusted Agent" in body
        assert "start listing properties" in body
        assert 'href="https://app.example.com/login"' in body

    def test_buyer_content(self):
        body = render_welcome_email("Bob", UserRole.BUYER, "https://app.example.com", "Realtor")
        assert "Welcome, Smart Buyer" in body

    def test_name_is_escaped(self):
        body = render_welcome_email("<script>x</script>", UserRole.BUYER, "https://app.example.com", "Realtor")

        assert "<script>" not in body
        assert "&lt;script&gt;" in body


class TestNotificationService:
    """Test delivery through a patched Resend SDK."""

    @pytest.fixture
    def sent(self, monkeypatch):
        sent = []

        def fake_send(params):
            sent.append(params)
            return {"id": "email_123"}

        monkeypatch.setattr(resend.Emails, "send", fake_send)
        return sent

    def test_configures_api_key(self, test_settings):
        NotificationService(test_settings)
        assert resend.api_key == "re_test_key"

    @pytest.mark.asyncio
    async def test_send_email(self, test_settings, sent):
        service = NotificationService(test_settings)

        assert await service.send_email("Hello", "<p>Hi</p>", to="jane@example.com") is True
        assert sent == [{
            "from": "Realtor App <noreply@example.com>",
            "to": ["jane@example.com"],
            "subject": "Hello",
            "html": "<p>Hi</p>",
        }]

    @pytest.mark.asyncio
    async def test_default_recipient(self, test_settings, sent):
        service = NotificationService(test_settings)
        await service.send_email("Hello", "<p>Hi</p>")

        assert sent[0]["to"] == ["ops@example.com"]

    @pytest.mark.asyncio
    async def test_network_error_returns_false(self, test_settings, monkeypatch):
        def fake_send(params):
            raise ConnectionError("dns failure")

        monkeypatch.setattr(resend.Emails, "send", fake_send)
        service = NotificationService(test_settings)

        assert await service.send_email("Hello", "<p>Hi</p>") is False

    @pytest.mark.asyncio
    async def test_send_welcome_email(self, test_settings, sent):
        service = NotificationService(test_settings)
        assert await service.send_welcome_email("new@example.com", "New Agent", UserRole.AGENT)

        assert sent[0]["to"] == ["new@example.com"]
        assert sent[0]["subject"] == "Welcome to Realtor Listing API"
        assert "Welcome, Trusted Agent" in sent[0]["html"]
