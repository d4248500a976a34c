"""
Outbound authentication.

Applies an operation's security requirements to a request draft using a
credential set resolved once for the call. Nothing here reads or writes
process-wide state.

Scheme handling:
    http bearer, oauth2  -> Authorization: Bearer <token>
    http basic           -> Authorization: Basic base64(user:pass)
    apiKey               -> header, query parameter or cookie named by the scheme

When no requirement is satisfied (or none is declared) the legacy
fallback applies: the API key goes into `api_key_header` when both are
configured, then the bearer token (else basic auth) into Authorization.
"""

from __future__ import annotations

import base64
import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from apibridge.config.schemas import Credentials

    from .models import Operation, SecurityScheme
    from .request import RequestParts

logger = logging.getLogger(__name__)


def basic_authorization(user_pass: str) -> str:
    """Authorization header value for a "user:pass" credential."""
    return "Basic " + base64.b64encode(user_pass.encode()).decode()


def apply_security(
    parts: RequestParts,
    operation: Operation,
    schemes: Mapping[str, SecurityScheme],
    credentials: Credentials,
) -> bool:
    """
    Authenticate a request draft.

    Alternatives are tried in order; within an alternative the first
    scheme that can be satisfied with the available credentials is used.
    The first satisfied alternative ends the search.

    Returns:
        True if a declared requirement was satisfied, False if the legacy
        fallback was used instead
    """
    for requirement in operation.security:
        for scheme_name in requirement:
            scheme = schemes.get(scheme_name)
            if scheme is None:
                logger.debug(
                    f"[auth] {operation.operation_id}: unknown security scheme '{scheme_name}'"
                )
                continue
            if fulfill_scheme(parts, scheme, credentials):
                logger.debug(
                    f"[auth] {operation.operation_id}: satisfied via '{scheme_name}'"
                )
                return True

    apply_legacy_credentials(parts, credentials)
    return False


def fulfill_scheme(
    parts: RequestParts,
    scheme: SecurityScheme,
    credentials: Credentials,
) -> bool:
    """Apply one security scheme. Returns False when the credential is missing."""
    kind = scheme.kind

    if kind in ("http-bearer", "oauth2"):
        if credentials.bearer_token:
            parts.headers["Authorization"] = (
                "Bearer " + credentials.bearer_token.get_secret_value()
            )
            return True
        return False

    if kind == "http-basic":
        if credentials.basic_auth:
            parts.headers["Authorization"] = basic_authorization(
                credentials.basic_auth.get_secret_value()
            )
            return True
        return False

    if kind == "apiKey":
        if not credentials.api_key or not scheme.name:
            return False
        api_key = credentials.api_key.get_secret_value()
        if scheme.location == "header":
            parts.headers[scheme.name] = api_key
        elif scheme.location == "query":
            parts.set_query(scheme.name, api_key)
        elif scheme.location == "cookie":
            parts.cookies.append((scheme.name, api_key))
        else:
            return False
        return True

    return False


def apply_legacy_credentials(parts: RequestParts, credentials: Credentials) -> None:
    """Credential placement used when no declared requirement applies."""
    if credentials.api_key and credentials.api_key_header:
        parts.headers[credentials.api_key_header] = credentials.api_key.get_secret_value()

    if credentials.bearer_token:
        parts.headers["Authorization"] = "Bearer " + credentials.bearer_token.get_secret_value()
    elif credentials.basic_auth:
        parts.headers["Authorization"] = basic_authorization(
            credentials.basic_auth.get_secret_value()
        )
