"""
Tests for settings, credentials and the call context.
"""

import base64

import pytest

from apibridge.config import get_settings
from apibridge.config.schemas import Credentials
from apibridge.tools.context import CallContext, credentials_from_headers, resolve_credentials


def basic_header(user_pass):
    return "Basic " + base64.b64encode(user_pass.encode()).decode()


class TestCredentialsFromEnv:
    """Tests for Credentials.from_env."""

    def test_empty_environment(self):
        credentials = Credentials.from_env()

        assert not credentials.has_any()
        assert credentials.api_key_header is None

    def test_reads_all_variables(self, monkeypatch):
        monkeypatch.setenv("API_KEY", "k")
        monkeypatch.setenv("API_KEY_HEADER", "X-Key")
        monkeypatch.setenv("BEARER_TOKEN", "t")
        monkeypatch.setenv("BASIC_AUTH", "u:p")

        credentials = Credentials.from_env()

        assert credentials.api_key.get_secret_value() == "k"
        assert credentials.api_key_header == "X-Key"
        assert credentials.bearer_token.get_secret_value() == "t"
        assert credentials.basic_auth.get_secret_value() == "u:p"

    def test_secrets_hidden_in_repr(self, monkeypatch):
        monkeypatch.setenv("BEARER_TOKEN", "super-secret")

        assert "super-secret" not in repr(Credentials.from_env())

    def test_frozen(self):
        credentials = Credentials()

        with pytest.raises(Exception):
            credentials.api_key_header = "X"


class TestCredentialsFromHeaders:
    """Tests for Credentials.from_headers."""

    def test_bearer(self):
        credentials = Credentials.from_headers({"Authorization": "Bearer abc"})

        assert credentials.bearer_token.get_secret_value() == "abc"
        assert credentials.basic_auth is None

    def test_basic_is_decoded(self):
        credentials = Credentials.from_headers({"authorization": basic_header("alice:secret")})

        assert credentials.basic_auth.get_secret_value() == "alice:secret"

    def test_basic_raw_value_kept(self):
        credentials = Credentials.from_headers({"Authorization": "Basic not-base64!"})

        assert credentials.basic_auth.get_secret_value() == "not-base64!"

    @pytest.mark.parametrize("header", ["X-API-Key", "x-api-key", "Api-Key"])
    def test_api_key(self, header):
        credentials = Credentials.from_headers({header: "k1"})

        assert credentials.api_key.get_secret_value() == "k1"

    def test_base_values_kept(self):
        base = Credentials(api_key="base-key", api_key_header="X-Key")

        credentials = Credentials.from_headers({"Authorization": "Bearer t"}, base=base)

        assert credentials.api_key.get_secret_value() == "base-key"
        assert credentials.api_key_header == "X-Key"
        assert credentials.bearer_token.get_secret_value() == "t"

    def test_helper_matches_classmethod(self):
        headers = {"X-API-Key": "k"}

        assert credentials_from_headers(headers) == Credentials.from_headers(headers)


class TestSettings:
    """Tests for get_settings."""

    def test_defaults(self):
        settings = get_settings()

        assert settings.base_url is None
        assert settings.log_http is False

    def test_credentials_not_cached_in_settings(self, monkeypatch):
        settings = get_settings()
        monkeypatch.setenv("BEARER_TOKEN", "late")

        assert "credentials" not in type(settings).model_fields
        assert Credentials.from_env().bearer_token.get_secret_value() == "late"

    @pytest.mark.parametrize("variable", ["MCP_LOG_HTTP", "DEBUG"])
    def test_log_http(self, monkeypatch, variable):
        monkeypatch.setenv(variable, "1")

        assert get_settings().log_http is True

    def test_base_url_and_cache(self, monkeypatch):
        monkeypatch.setenv("OPENAPI_BASE_URL", "https://env.example.com")
        assert get_settings().base_url == "https://env.example.com"

        monkeypatch.setenv("OPENAPI_BASE_URL", "https://other.example.com")
        assert get_settings().base_url == "https://env.example.com"

        get_settings.cache_clear()
        assert get_settings().base_url == "https://other.example.com"


class TestResolveCredentials:
    """Tests for per-call credential resolution."""

    def test_context_wins(self):
        context = CallContext(credentials=Credentials(bearer_token="ctx"))

        credentials = resolve_credentials(context, lambda: pytest.fail("provider consulted"))

        assert credentials.bearer_token.get_secret_value() == "ctx"

    def test_provider_without_context(self):
        credentials = resolve_credentials(None, lambda: Credentials(api_key="p"))

        assert credentials.api_key.get_secret_value() == "p"

    def test_provider_when_context_has_no_credentials(self):
        context = CallContext(session_id="s1")

        credentials = resolve_credentials(context, lambda: Credentials(api_key="p"))

        assert credentials.api_key.get_secret_value() == "p"

    def test_context_from_headers(self):
        context = CallContext.from_headers({"Authorization": "Bearer h"}, session_id="s2")

        assert context.session_id == "s2"
        assert context.credentials.bearer_token.get_secret_value() == "h"
