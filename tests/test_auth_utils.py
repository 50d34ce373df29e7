"""
Tests for session token and password utilities.
"""

import pytest
import uuid
from datetime import timedelta
from jose import jwt

from app.config import ConfigurationError
from app.models.user import UserRole
from app.utils.auth import (
    create_access_token,
    verify_token,
    hash_password,
    verify_password,
    InvalidArgumentError,
)
from app.utils.exceptions import InvalidTokenError
from tests.conftest import make_settings


class TestSessionTokens:
    """Test token issue and verification."""

    def test_round_trip_claims(self, test_settings):
        user_id = uuid.uuid4()
        token = create_access_token(user_id, UserRole.AGENT, test_settings)

        payload = verify_token(token, test_settings)

        assert payload.user_id == str(user_id)
        assert payload.role == "Agent"

    def test_default_expiry_is_seven_days(self, test_settings):
        token = create_access_token(uuid.uuid4(), UserRole.BUYER, test_settings)
        claims = jwt.get_unverified_claims(token)

        assert claims["exp"] - claims["iat"] == 7 * 24 * 60 * 60

    def test_expired_token_rejected(self, test_settings):
        token = create_access_token(
            uuid.uuid4(), UserRole.AGENT, test_settings, expires_delta=timedelta(seconds=-1)
        )
        with pytest.raises(InvalidTokenError):
            verify_token(token, test_settings)

    def test_token_signed_with_other_secret_rejected(self, test_settings):
        other_settings = make_settings(jwt_secret="a-completely-different-secret")
        token = create_access_token(uuid.uuid4(), UserRole.AGENT, other_settings)

        with pytest.raises(InvalidTokenError):
            verify_token(token, test_settings)

    def test_tampered_token_rejected(self, test_settings):
        token = create_access_token(uuid.uuid4(), UserRole.BUYER, test_settings)
        header, payload, signature = token.split(".")
        forged = jwt.encode(
            {**jwt.get_unverified_claims(token), "role": "Admin"}, "guess", algorithm="HS256"
        ).split(".")[1]

        with pytest.raises(InvalidTokenError):
            verify_token(f"{header}.{forged}.{signature}", test_settings)

    @pytest.mark.parametrize("token", ["", "not-a-token", "a.b.c"])
    def test_malformed_token_rejected(self, test_settings, token):
        with pytest.raises(InvalidTokenError):
            verify_token(token, test_settings)

    def test_token_without_role_rejected(self, test_settings):
        token = jwt.encode(
            {"sub": str(uuid.uuid4()), "exp": 9999999999},
            test_settings.jwt_secret,
            algorithm=test_settings.jwt_algorithm
        )
        with pytest.raises(InvalidTokenError):
            verify_token(token, test_settings)

    def test_empty_identity_rejected(self, test_settings):
        with pytest.raises(InvalidArgumentError):
            create_access_token("", UserRole.AGENT, test_settings)
        with pytest.raises(InvalidArgumentError):
            create_access_token(uuid.uuid4(), "", test_settings)

    def test_missing_secret_is_configuration_error(self):
        settings = make_settings(jwt_secret="")
        with pytest.raises(ConfigurationError):
            create_access_token(uuid.uuid4(), UserRole.AGENT, settings)


class TestPasswords:
    """Test password hashing."""

    def test_hash_and_verify(self):
        hashed = hash_password("correct horse")

        assert hashed != "correct horse"
        assert verify_password("correct horse", hashed)
        assert not verify_password("wrong horse", hashed)

    def test_hashes_are_salted(self):
        assert hash_password("password123") != hash_password("password123")

    @pytest.mark.parametrize("password", ["", "short", "1234567"])
    def test_short_password_rejected(self, password):
        with pytest.raises(ValueError, match="at least 8 characters"):
            hash_password(password)

    def test_verify_with_missing_values(self):
        assert verify_password("", "hash") is False
        assert verify_password("password123", None) is False
