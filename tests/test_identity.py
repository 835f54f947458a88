"""Tests for telemetry_settings.identity module."""

import jwt
import pytest

from telemetry_settings.exceptions import IdentityError, InstallerError
from telemetry_settings.identity import (
    IdentityProvider,
    IdTokenIdentityProvider,
    derive_user_id,
)

SIGNING_KEY = "test-signing-key-that-is-long-enough-for-hs256"


def make_token(**claims):
    return jwt.encode(claims, SIGNING_KEY, algorithm="HS256")


class TestIdentityProvider:
    """Test cases for the base IdentityProvider class."""

    def test_base_provider_not_implemented(self):
        """Test that base IdentityProvider raises NotImplementedError."""
        with pytest.raises(NotImplementedError):
            IdentityProvider().get_user_id()


class TestDeriveUserId:
    """Test cases for derive_user_id."""

    def test_preferred_username(self):
        """Test that preferred_username wins."""
        token = make_token(preferred_username="alice", email="a@x.io", sub="123")

        assert derive_user_id(token) == "alice"

    def test_email_fallback(self):
        """Test fallback to email."""
        assert derive_user_id(make_token(email="a@x.io", sub="123")) == "a@x.io"

    def test_sub_fallback(self):
        """Test fallback to sub."""
        assert derive_user_id(make_token(sub="123")) == "123"

    def test_expired_token_accepted(self):
        """Test that expiry is not enforced for labelling."""
        assert derive_user_id(make_token(sub="123", exp=1)) == "123"

    def test_no_identity_claims(self):
        """Test that a token without identity claims is rejected."""
        with pytest.raises(IdentityError) as exc_info:
            derive_user_id(make_token(aud="x"))

        assert "preferred_username" in str(exc_info.value)

    def test_not_a_jwt(self):
        """Test that garbage input is rejected."""
        with pytest.raises(IdentityError) as exc_info:
            derive_user_id("not-a-token")

        assert "not a valid JWT" in str(exc_info.value)
        assert isinstance(exc_info.value, InstallerError)


class TestIdTokenIdentityProvider:
    """Test cases for IdTokenIdentityProvider."""

    def test_get_user_id(self):
        """Test that the provider reads the token."""
        provider = IdTokenIdentityProvider(make_token(preferred_username="bob"))

        assert provider.get_user_id() == "bob"

    def test_empty_token(self):
        """Test that an empty token is rejected on construction."""
        with pytest.raises(IdentityError):
            IdTokenIdentityProvider("")
