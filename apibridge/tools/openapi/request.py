"""
Outbound request construction.

Maps validated tool arguments onto an HTTP request for one operation:
path substitution, query pairs, header and cookie parameters, the JSON
body and the base URL join. The result is a `RequestParts` draft that the
auth step can still amend before it becomes an `httpx.Request`.
"""

from __future__ import annotations

import json
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import quote

import httpx

from .errors import RequestBuildError
from .models import Operation, Parameter
from .naming import escape_parameter_name
from .schema import REQUEST_BODY_KEY

ACCEPT_HEADER = "application/json, application/vnd.api+json"

_PATH_SAFE = ",:@!$&'()*+;=-._~"


@dataclass
class RequestParts:
    """
    Mutable draft of one outbound request.

    Only lives for the duration of a single call.
    """

    method: str
    url: str
    headers: httpx.Headers = field(default_factory=httpx.Headers)
    query: list[tuple[str, str]] = field(default_factory=list)
    cookies: list[tuple[str, str]] = field(default_factory=list)
    body: bytes | None = None

    def set_query(self, name: str, value: str) -> None:
        """Set a query parameter, replacing earlier values of the same name."""
        self.query = [(k, v) for k, v in self.query if k != name]
        self.query.append((name, value))

    def to_httpx(self) -> httpx.Request:
        """
        Finalize into an httpx.Request.

        Raises:
            RequestBuildError: If the URL cannot be parsed
        """
        headers = httpx.Headers(self.headers)
        if self.cookies:
            headers["Cookie"] = "; ".join(f"{k}={v}" for k, v in self.cookies)

        try:
            url = httpx.URL(self.url)
            if self.query:
                url = url.copy_merge_params(httpx.QueryParams(self.query))
            return httpx.Request(self.method, url, headers=headers, content=self.body)
        except (httpx.InvalidURL, ValueError, TypeError) as e:
            raise RequestBuildError(f"Invalid request URL '{self.url}': {e}") from e


# =============================================================================
# Argument lookup and formatting
# =============================================================================


def get_parameter_value(arguments: Mapping[str, Any], param: Parameter) -> tuple[bool, Any]:
    """
    Find the supplied value for a parameter.

    The escaped name is consulted first, then the declared name.

    Returns:
        (found, value)
    """
    escaped = escape_parameter_name(param.name)
    if escaped in arguments:
        return True, arguments[escaped]
    if param.name in arguments:
        return True, arguments[param.name]
    return False, None


def format_parameter_value(value: Any, is_integer: bool = False) -> str:
    """
    Render a scalar parameter value for a URL, header or cookie.

    Integer-typed parameters never carry a decimal point (5.0 -> "5").
    Booleans render as "true"/"false".
    """
    if isinstance(value, bool):
        return "true" if value else "false"
    if is_integer and isinstance(value, float) and value.is_integer():
        return str(int(value))
    if value is None:
        return ""
    if isinstance(value, (dict, list)):
        return json.dumps(value, separators=(",", ":"), default=str)
    return str(value)


def _format_many(value: Any, is_integer: bool) -> list[str]:
    if isinstance(value, (list, tuple)):
        return [format_parameter_value(item, is_integer) for item in value]
    return [format_parameter_value(value, is_integer)]


# =============================================================================
# URL
# =============================================================================


def substitute_path(operation: Operation, arguments: Mapping[str, Any]) -> str:
    """Replace {name} placeholders with supplied path parameter values."""
    path = operation.path
    for param in operation.parameters_in("path"):
        found, value = get_parameter_value(arguments, param)
        if not found:
            continue
        rendered = ",".join(_format_many(value, param.is_integer))
        path = path.replace("{" + param.name + "}", quote(rendered, safe=_PATH_SAFE))
    return path


def join_url(base_url: str, path: str) -> str:
    """
    Join a base URL and an operation path.

    Raises:
        RequestBuildError: If the base URL has no scheme or host
    """
    try:
        parsed = httpx.URL(base_url)
    except httpx.InvalidURL as e:
        raise RequestBuildError(f"Invalid base URL '{base_url}': {e}") from e

    if not parsed.scheme or not parsed.host:
        raise RequestBuildError(f"Invalid base URL '{base_url}': missing scheme or host")

    return base_url.rstrip("/") + "/" + path.lstrip("/")


# =============================================================================
# Assembly
# =============================================================================


def build_request(
    operation: Operation,
    arguments: Mapping[str, Any],
    base_url: str,
) -> RequestParts:
    """
    Build the request draft for one call (before authentication).

    Header and cookie parameters are NOT applied here; they are layered
    after authentication by `apply_parameter_headers`.
    """
    url = join_url(base_url, substitute_path(operation, arguments))
    parts = RequestParts(method=operation.http_method, url=url)

    for param in operation.parameters_in("query"):
        found, value = get_parameter_value(arguments, param)
        if found:
            for rendered in _format_many(value, param.is_integer):
                parts.query.append((param.name, rendered))

    if operation.request_body is not None:
        match = operation.request_body.json_media()
        if match is not None and match[1] is not None:
            media_type, _ = match
            payload = arguments.get(REQUEST_BODY_KEY)
            if payload is not None:
                parts.body = json.dumps(payload, default=str).encode()
                parts.headers["Content-Type"] = media_type

    parts.headers["Accept"] = ACCEPT_HEADER
    return parts


def apply_parameter_headers(
    parts: RequestParts,
    parameters: Sequence[Parameter],
    arguments: Mapping[str, Any],
) -> None:
    """Layer header and cookie parameters onto an (authenticated) draft."""
    for param in parameters:
        if param.location not in ("header", "cookie"):
            continue
        found, value = get_parameter_value(arguments, param)
        if not found:
            continue
        rendered = ",".join(_format_many(value, param.is_integer))
        if param.location == "header":
            parts.headers[param.name] = rendered
        else:
            parts.cookies.append((param.name, rendered))
