"""
Configuration management using Pydantic settings.
Handles database URL, token secrets, asset store and email credentials loaded from the environment.
"""

from pydantic import ValidationError as PydanticValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List
from functools import lru_cache


class ConfigurationError(Exception):
    """Raised when a required setting is missing or invalid at startup."""


class Settings(BaseSettings):
    """
    Immutable application settings.
    Constructed once at startup and injected into every component that needs it.
    """

    # Application configuration
    app_name: str = "Realtor Listing API"
    app_version: str = "1.0.0"
    environment: str = "development"
    debug: bool = False

    # Server configuration
    host: str = "0.0.0.0"
    port: int = 5500
    api_v1_prefix: str = "/api/v1"

    # Database configuration
    database_url: str
    db_pool_size: int = 10
    db_max_overflow: int = 20
    db_pool_timeout: int = 5  # seconds to wait for a pooled connection

    # Session token configuration
    jwt_secret: str
    jwt_algorithm: str = "HS256"
    access_token_expire_days: int = 7
    cookie_name: str = "jwt"

    # Asset store (Cloudinary) configuration
    cloudinary_cloud_name: str
    cloudinary_api_key: str
    cloudinary_api_secret: str
    asset_folder: str = "properties"
    asset_upload_timeout: float = 60.0
    max_images_per_property: int = 10
    max_image_size: int = 5 * 1024 * 1024  # 5MB
    allowed_image_types: List[str] = ["image/jpeg", "image/jpg", "image/png", "image/webp"]

    # Outbound email (Resend) configuration
    resend_api_key: str
    email_from: str
    email_to: str
    sender_name: str

    # Public client origin, used for CORS and links in emails
    client_url: str

    @field_validator("database_url")
    @classmethod
    def validate_database_url(cls, v):
        """Ensure an async driver is used."""
        if v.startswith("postgresql://"):
            return v.replace("postgresql://", "postgresql+asyncpg://", 1)
        if v.startswith("sqlite://"):
            return v.replace("sqlite://", "sqlite+aiosqlite://", 1)
        return v

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v):
        """Validate environment setting."""
        allowed_envs = ["development", "testing", "staging", "production"]
        if v not in allowed_envs:
            raise ValueError(f"Environment must be one of: {allowed_envs}")
        return v

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.environment == "development"

    @property
    def is_testing(self) -> bool:
        """Check if running in testing mode."""
        return self.environment == "testing"

    @property
    def cookie_secure(self) -> bool:
        """Session cookie is only sent over HTTPS outside development."""
        return not self.is_development

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
    )


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Raises:
        ConfigurationError: If any required setting is missing or invalid
    """
    try:
        return Settings()
    except PydanticValidationError as e:
        missing = ", ".join(
            ".".join(str(loc) for loc in error["loc"]).upper() for error in e.errors()
        )
        raise ConfigurationError(f"Invalid or missing configuration: {missing}") from e
