"""
Request dispatcher: the Tool bound to one OpenAPI operation.

Each call runs the same pipeline:

    validate -> confirm -> build -> authenticate -> send -> classify -> format

Validation failures, confirmation requests and upstream HTTP errors are
returned as ToolResults. Only a malformed request (RequestBuildError) or
a transport failure (TransportError) is raised.

Usage:
    tool = OpenAPIOperationTool(
        operation,
        input_schema=schema,
        description=generate_description(operation, schema),
        base_urls=("https://api.example.com",),
        schemes=document.security_schemes,
    )
    result = await tool.execute({"petId": 1})
"""

from __future__ import annotations

import base64
import json
import logging
import random
from collections.abc import Callable, Mapping, Sequence
from typing import TYPE_CHECKING, Any

import httpx

from apibridge.config.schemas import Credentials

from ..base import ContentBlock, Tool, ToolAnnotations, ToolResult
from ..context import resolve_credentials
from .auth import apply_security
from .errors import TransportError
from .guidance import guidance_for_status
from .request import apply_parameter_headers, build_request
from .transport import HttpxTransport, Transport, log_http_request, log_http_response
from .validation import format_validation_failure, validate_arguments

if TYPE_CHECKING:
    from ..context import CallContext
    from .models import Operation, SecurityScheme

logger = logging.getLogger(__name__)

CONFIRMED_KEY = "__confirmed"
STREAM_KEY = "stream"

JSON_CONTENT_PREFIXES = ("application/json", "application/vnd.api+json")
TEXT_CONTENT_PREFIX = "text/"
DEFAULT_FILE_NAME = "file"


class OpenAPIOperationTool(Tool):
    """
    Tool that invokes a single OpenAPI operation over HTTP.

    Instances are immutable after construction and safe to share across
    concurrent calls; all per-call state lives in locals.
    """

    def __init__(
        self,
        operation: Operation,
        *,
        input_schema: dict[str, Any],
        description: str,
        base_urls: Sequence[str],
        name: str | None = None,
        schemes: Mapping[str, SecurityScheme] | None = None,
        annotations: ToolAnnotations | None = None,
        confirm_dangerous_actions: bool = True,
        transport: Transport | None = None,
        credentials_provider: Callable[[], Credentials] | None = None,
    ):
        """
        Args:
            operation: Operation this tool invokes
            input_schema: Validation schema (JSON Schema mapping)
            description: Agent-facing description
            base_urls: Candidate base URLs; one is picked at random per call
            name: Tool name (defaults to the operation id)
            schemes: Security scheme table from the document
            annotations: Behavioral hints
            confirm_dangerous_actions: Gate POST/PUT/DELETE behind `__confirmed`
            transport: Async callable sending an httpx.Request
            credentials_provider: Credential source for calls without a context
        """
        if not base_urls:
            raise ValueError("At least one base URL is required")

        self._operation = operation
        self._name = name or operation.operation_id
        self._input_schema = input_schema
        self._description = description
        self._base_urls = tuple(base_urls)
        self._schemes = dict(schemes or {})
        self._annotations = annotations or ToolAnnotations()
        self._confirm = confirm_dangerous_actions
        self._transport: Transport = transport or HttpxTransport()
        self._credentials_provider = credentials_provider or Credentials.from_env

    @property
    def name(self) -> str:
        return self._name

    @property
    def description(self) -> str:
        return self._description

    @property
    def input_schema(self) -> dict[str, Any]:
        return self._input_schema

    @property
    def annotations(self) -> ToolAnnotations:
        return self._annotations

    @property
    def operation(self) -> Operation:
        return self._operation

    @property
    def base_urls(self) -> tuple[str, ...]:
        return self._base_urls

    # -------------------------------------------------------------------------
    # Execution
    # -------------------------------------------------------------------------

    async def execute(
        self,
        arguments: dict[str, Any],
        *,
        context: CallContext | None = None,
    ) -> ToolResult:
        """
        Execute the operation.

        Raises:
            RequestBuildError: If the request URL cannot be built
            TransportError: If the HTTP exchange fails
        """
        args: dict[str, Any] = dict(arguments or {})
        op = self._operation

        issues = validate_arguments(self._input_schema, args)
        if issues:
            logger.info(
                f"[openapi_tool:{self.name}] Validation failed with {len(issues)} issue(s)"
            )
            return ToolResult.error(
                format_validation_failure(self.name, self._input_schema, issues)
            )

        if self._confirm and op.is_mutating and args.get(CONFIRMED_KEY) is not True:
            logger.info(f"[openapi_tool:{self.name}] Confirmation required")
            return ToolResult.success(self._confirmation_text())

        credentials = resolve_credentials(context, self._credentials_provider)

        base_url = random.choice(self._base_urls)
        parts = build_request(op, args, base_url)
        apply_security(parts, op, self._schemes, credentials)
        apply_parameter_headers(parts, op.parameters, args)
        request = parts.to_httpx()

        logger.info(f"[openapi_tool:{self.name}] {request.method} {request.url}")
        log_http_request(request, parts.body)

        try:
            response = await self._transport(request)
            body = await response.aread()
        except httpx.HTTPError as e:
            logger.error(f"[openapi_tool:{self.name}] Transport error: {e}")
            raise TransportError(
                f"{request.method} {request.url} failed: {e}",
                operation_id=op.operation_id,
            ) from e

        log_http_response(response)
        logger.info(f"[openapi_tool:{self.name}] Response: {response.status_code}")

        return self._format_response(request, response, body, args)

    # -------------------------------------------------------------------------
    # Formatting
    # -------------------------------------------------------------------------

    def _confirmation_text(self) -> str:
        return (
            "CONFIRMATION REQUIRED\n\n"
            f"Action: {self.name}\n"
            "This action is irreversible. Proceed?\n\n"
            f'To confirm, retry the call with {{"{CONFIRMED_KEY}": true}} added to your arguments.'
        )

    def _format_response(
        self,
        request: httpx.Request,
        response: httpx.Response,
        body: bytes,
        args: dict[str, Any],
    ) -> ToolResult:
        op = self._operation
        status = response.status_code
        content_type = response.headers.get("Content-Type", "")
        binary = is_binary_response(content_type, body)

        if not 200 <= status < 300:
            text_body = "" if binary else response.text
            suggestion = guidance_for_status(status, op, self._input_schema, args, text_body)
            message = f"{httpx.codes.get_reason_phrase(status)} (HTTP {status})"
            summary = op.summary or op.description

            logger.warning(f"[openapi_tool:{self.name}] Error {status}")

            if binary:
                payload = {
                    "type": "api_response",
                    "error": {
                        "code": "http_error",
                        "http_status": status,
                        "message": message,
                        "details": "Binary response (see file_base64)",
                        "suggestion": suggestion,
                        "mime_type": content_type,
                        "file_base64": base64.b64encode(body).decode(),
                        "file_name": extract_file_name(response.headers),
                        "operation": self._operation_info(summary),
                    },
                }
                return ToolResult.from_json(
                    json.dumps(payload, indent=2), payload, is_error=True
                )

            lines = [f"HTTP {request.method} {request.url}", f"Error: {message}"]
            if text_body:
                lines.append(f"Details: {text_body}")
            if suggestion:
                lines.append(f"Suggestion: {suggestion}")
            lines.append(f"Operation: {op.operation_id} ({summary})")
            return ToolResult.error(
                "\n".join(lines),
                structured={"status_code": status, "error": text_body},
            )

        if binary:
            payload = {
                "type": "api_response",
                "http_status": status,
                "mime_type": content_type,
                "file_base64": base64.b64encode(body).decode(),
                "file_name": extract_file_name(response.headers),
                "operation": self._operation_info(op.summary),
            }
            return ToolResult.from_json(json.dumps(payload, indent=2), payload)

        text_body = response.text
        header = f"HTTP {request.method} {request.url}\nStatus: {status}\nResponse:"
        structured = _structured_json(content_type, text_body)

        if args.get(STREAM_KEY) is True:
            return ToolResult.success(
                header,
                structured=structured,
                additional_content=(ContentBlock.from_text(text_body),),
            )
        return ToolResult.success(f"{header}\n{text_body}", structured=structured)

    def _operation_info(self, summary: str) -> dict[str, str]:
        return {
            "id": self._operation.operation_id,
            "summary": summary,
            "description": self._operation.description,
        }


# =============================================================================
# Response helpers
# =============================================================================


def is_json_content_type(content_type: str) -> bool:
    # Media types are case-insensitive.
    return content_type.strip().lower().startswith(JSON_CONTENT_PREFIXES)


def is_binary_response(content_type: str, body: bytes) -> bool:
    """
    Neither JSON nor text.

    An empty body without a content type counts as text.
    """
    if not content_type:
        return bool(body)
    return not (
        is_json_content_type(content_type)
        or content_type.strip().lower().startswith(TEXT_CONTENT_PREFIX)
    )


def extract_file_name(headers: httpx.Headers) -> str:
    """File name from Content-Disposition, "file" when absent."""
    disposition = headers.get("Content-Disposition", "")
    if "filename=" not in disposition:
        return DEFAULT_FILE_NAME
    value = disposition.split("filename=", 1)[1].split(";", 1)[0].strip().strip('"')
    return value or DEFAULT_FILE_NAME


def _structured_json(content_type: str, text: str) -> dict[str, Any] | None:
    if not text or not is_json_content_type(content_type):
        return None
    try:
        data = json.loads(text)
    except ValueError:
        return None
    return data if isinstance(data, dict) else None
