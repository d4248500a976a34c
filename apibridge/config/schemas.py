"""
Configuration Schemas for apibridge.

Pydantic models for credentials and bridge settings.

Security:
    Credential fields use SecretStr to prevent accidental logging.
    Access the value with `.get_secret_value()`.
"""

from __future__ import annotations

import base64
import binascii
import os
from collections.abc import Mapping

from pydantic import BaseModel, Field, SecretStr


def _secret_from_env(name: str) -> SecretStr | None:
    value = os.getenv(name, "")
    return SecretStr(value) if value else None


class Credentials(BaseModel):
    """
    Credential set consulted when authenticating an outbound call.

    Three channels are supported:
    - API key (placed per the operation's apiKey scheme, or in
      `api_key_header` by the legacy fallback)
    - Bearer token (Authorization: Bearer <token>)
    - Basic auth as "user:pass" (Authorization: Basic <base64>)

    Instances are immutable. A credential set is resolved once per call
    and passed explicitly into the authenticate step.
    """

    model_config = {"frozen": True}

    api_key: SecretStr | None = Field(None, description="API key value")
    api_key_header: str | None = Field(
        None, description="Header name used by the legacy API key fallback"
    )
    bearer_token: SecretStr | None = Field(None, description="Bearer token")
    basic_auth: SecretStr | None = Field(None, description="Basic auth as user:pass")

    @classmethod
    def from_env(cls) -> Credentials:
        """
        Read credentials from the environment.

        Variables: API_KEY, API_KEY_HEADER, BEARER_TOKEN, BASIC_AUTH.
        Read at call time, so changes to the environment are picked up
        by the next call.
        """
        return cls(
            api_key=_secret_from_env("API_KEY"),
            api_key_header=os.getenv("API_KEY_HEADER") or None,
            bearer_token=_secret_from_env("BEARER_TOKEN"),
            basic_auth=_secret_from_env("BASIC_AUTH"),
        )

    @classmethod
    def from_headers(
        cls,
        headers: Mapping[str, str],
        *,
        base: Credentials | None = None,
    ) -> Credentials:
        """
        Build a request-scoped credential set from inbound HTTP headers.

        Recognized headers:
            X-API-Key / Api-Key  -> api_key
            Authorization: Bearer <token> -> bearer_token
            Authorization: Basic <base64(user:pass)> -> basic_auth

        Values not present in the headers are taken from `base`.
        """
        lowered = {k.lower(): v for k, v in headers.items()}
        base = base or cls()
        updates: dict[str, SecretStr] = {}

        api_key = lowered.get("x-api-key") or lowered.get("api-key")
        if api_key:
            updates["api_key"] = SecretStr(api_key)

        authorization = lowered.get("authorization", "")
        if authorization.startswith("Bearer ") and len(authorization) > 7:
            updates["bearer_token"] = SecretStr(authorization[7:])
        elif authorization.startswith("Basic ") and len(authorization) > 6:
            updates["basic_auth"] = SecretStr(_decode_basic(authorization[6:]))

        return base.model_copy(update=updates)

    def has_any(self) -> bool:
        """True if at least one credential channel is configured."""
        return bool(self.api_key or self.bearer_token or self.basic_auth)


def _decode_basic(value: str) -> str:
    """Decode a base64 Basic credential back to user:pass (raw value if not base64)."""
    try:
        decoded = base64.b64decode(value, validate=True).decode()
    except (binascii.Error, UnicodeDecodeError):
        return value
    return decoded if ":" in decoded else value


class BridgeSettings(BaseModel):
    """
    Bridge settings model.

    Used for type-safe settings access. Credentials are not part of the
    settings; they are resolved per call (see `Credentials.from_env`).
    """

    base_url: str | None = Field(
        None, description="Overrides the document's servers for every operation"
    )
    log_http: bool = Field(False, description="Trace outbound HTTP at INFO level")
