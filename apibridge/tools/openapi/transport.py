"""
HTTP transport for generated tools.

A transport is any async callable taking an `httpx.Request` and returning
a fully read `httpx.Response`. Tests inject fakes; production uses
`HttpxTransport`.

HTTP Client Lifecycle:
    - If http_client was provided: use it (caller manages lifecycle)
    - Otherwise: create a fresh client per call and close it afterwards
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from typing import Any

import httpx

from apibridge.config import get_settings

logger = logging.getLogger(__name__)

Transport = Callable[[httpx.Request], Awaitable[httpx.Response]]

MAX_LOGGED_BODY = 1000
REDACTED_HEADERS = frozenset({"authorization", "cookie"})


class HttpxTransport:
    """
    Default transport backed by httpx.AsyncClient.

    Example:
        transport = HttpxTransport(timeout=10.0)
        response = await transport(httpx.Request("GET", "https://api.example.com/pets"))
    """

    def __init__(
        self,
        *,
        timeout: float = 30.0,
        http_client: httpx.AsyncClient | None = None,
    ):
        """
        Args:
            timeout: Request timeout in seconds (owned clients only)
            http_client: Optional shared HTTP client (caller manages lifecycle)
        """
        self._timeout = timeout
        self._shared_client = http_client

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        if self._shared_client is not None:
            return await self._shared_client.send(request)

        async with httpx.AsyncClient(timeout=self._timeout) as client:
            return await client.send(request)

    def __repr__(self) -> str:
        shared = self._shared_client is not None
        return f"<HttpxTransport timeout={self._timeout} shared_client={shared}>"


# =============================================================================
# Trace logging
# =============================================================================


def _trace_level() -> int:
    return logging.INFO if get_settings().log_http else logging.DEBUG


def _truncate(body: bytes) -> str:
    text = body[:MAX_LOGGED_BODY].decode("utf-8", errors="replace")
    if len(body) > MAX_LOGGED_BODY:
        return f"{text}... ({len(body)} bytes)"
    return text


def _safe_headers(headers: httpx.Headers) -> dict[str, Any]:
    return {
        name: "[REDACTED]" if name.lower() in REDACTED_HEADERS else value
        for name, value in headers.items()
    }


def log_http_request(request: httpx.Request, body: bytes | None = None) -> None:
    """Trace an outbound request (credentials redacted)."""
    level = _trace_level()
    if not logger.isEnabledFor(level):
        return

    logger.log(level, f"[http] Request: {request.method} {request.url}")
    logger.log(level, f"[http] Request headers: {_safe_headers(request.headers)}")
    if body:
        logger.log(level, f"[http] Request body: {_truncate(body)}")


def log_http_response(response: httpx.Response) -> None:
    """Trace a response; non-text bodies are summarized, not dumped."""
    level = _trace_level()
    if not logger.isEnabledFor(level):
        return

    content_type = response.headers.get("Content-Type", "")
    logger.log(
        level,
        f"[http] Response: {response.status_code} {response.reason_phrase} "
        f"content_type={content_type!r} content_length={response.headers.get('Content-Length')}",
    )

    body = response.content
    if not body:
        return
    if "json" in content_type.lower() or "text" in content_type.lower():
        logger.log(level, f"[http] Response body: {_truncate(body)}")
    else:
        logger.log(
            level,
            f"[http] Response body: [Binary content, {len(body)} bytes, type: {content_type}]",
        )
