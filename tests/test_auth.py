"""Tests for authentication providers."""

from __future__ import annotations

import pytest

from pytest_bastion.auth import APIKeyAuth, BearerTokenAuth, CompositeAuth, NoAuth, resolve_env_value


class TestResolveEnvValue:
    """Tests for $VAR resolution."""

    def test_literal(self):
        """Test plain values are returned unchanged."""
        assert resolve_env_value("token") == "token"

    def test_env_reference(self, monkeypatch):
        """Test $VAR reads the environment."""
        monkeypatch.setenv("API_TOKEN", "s3cret")
        assert resolve_env_value("$API_TOKEN") == "s3cret"

    def test_missing_variable(self, monkeypatch):
        """Test unset variables raise."""
        monkeypatch.delenv("MISSING_TOKEN", raising=False)
        with pytest.raises(ValueError, match="MISSING_TOKEN"):
            resolve_env_value("$MISSING_TOKEN")


class TestProviders:
    """Tests for the built-in providers."""

    def test_no_auth(self):
        """Test NoAuth adds nothing."""
        assert NoAuth().get_headers() == {}
        assert NoAuth().get_query_params() == {}

    def test_bearer(self, monkeypatch):
        """Test bearer tokens are resolved at request time."""
        auth = BearerTokenAuth("$API_TOKEN")
        monkeypatch.setenv("API_TOKEN", "late")

        assert auth.get_headers() == {"Authorization": "Bearer late"}
        assert auth.get_query_params() == {}

    def test_api_key_default_header(self):
        """Test API keys default to the X-API-Key header."""
        auth = APIKeyAuth("k")
        assert auth.get_headers() == {"X-API-Key": "k"}
        assert auth.get_query_params() == {}

    def test_api_key_query_only(self):
        """Test a query parameter alone disables the header."""
        auth = APIKeyAuth("k", query_param="key")
        assert auth.get_headers() == {}
        assert auth.get_query_params() == {"key": "k"}

    def test_api_key_both(self):
        """Test header and query parameter together."""
        auth = APIKeyAuth("k", header_name="X-Key", query_param="key")
        assert auth.get_headers() == {"X-Key": "k"}
        assert auth.get_query_params() == {"key": "k"}

    def test_composite_later_wins(self):
        """Test later providers override earlier ones."""
        auth = CompositeAuth([BearerTokenAuth("a"), APIKeyAuth("k", header_name="Authorization", query_param="q")])

        assert auth.get_headers() == {"Authorization": "k"}
        assert auth.get_query_params() == {"q": "k"}
