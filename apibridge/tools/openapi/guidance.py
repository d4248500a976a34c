"""
Error guidance for non-2xx upstream responses.

Each function returns a block of plain text aimed at an agent: what went
wrong, what the tool expects, what was sent and how to recover. All
functions are pure.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any

from .examples import build_example_arguments
from .models import Operation
from .naming import escape_parameter_name

NOT_PROVIDED = "NOT_PROVIDED"

GENERIC_GUIDANCE = (
    "Check the input parameters, authentication, and consult the tool schema. "
    "See the OpenAPI documentation for more details."
)

_SERVER_ERROR_TYPES = {
    500: (
        "Internal Server Error",
        "This indicates a problem with the server's code or configuration.",
    ),
    502: (
        "Bad Gateway",
        "The server received an invalid response from an upstream server.",
    ),
    503: (
        "Service Unavailable",
        "The server is temporarily unable to handle the request.",
    ),
    504: (
        "Gateway Timeout",
        "The server didn't receive a timely response from an upstream server.",
    ),
}


# =============================================================================
# Dispatch
# =============================================================================


def guidance_for_status(
    status: int,
    operation: Operation,
    schema: Mapping[str, Any],
    arguments: Mapping[str, Any],
    body: str,
) -> str:
    """Pick the guidance text for an upstream status code."""
    if status in (401, 403):
        return auth_guidance(operation, schema, arguments, body, status)
    if status == 404:
        return not_found_guidance(operation, schema, arguments, body)
    if status == 400:
        return bad_request_guidance(operation, schema, arguments, body)
    if status >= 500:
        return server_error_guidance(operation, schema, arguments, body, status)
    return GENERIC_GUIDANCE


# =============================================================================
# 400
# =============================================================================


def bad_request_guidance(
    operation: Operation,
    schema: Mapping[str, Any],
    arguments: Mapping[str, Any],
    body: str,
) -> str:
    out = ["BAD REQUEST (400): The API call failed due to incorrect or invalid parameters.\n\n"]

    out.append(_operation_header(operation) + "\n")
    if operation.description:
        out.append(f"DESCRIPTION: {operation.description}\n")
    out.append("\n")

    properties: Mapping[str, Any] = schema.get("properties") or {}
    required = list(schema.get("required") or ())

    if properties:
        out.append("PARAMETER REQUIREMENTS:\n")

        if required:
            out.append("• Required parameters:\n")
            for name in required:
                prop = properties.get(name)
                if isinstance(prop, Mapping):
                    out.append(_describe_property(name, prop) + "\n")
            out.append("\n")

        out.append("• All available parameters:\n")
        for name, prop in properties.items():
            if not isinstance(prop, Mapping):
                continue
            line = f"  - {name}{_type_suffix(prop)}"
            if name in required:
                line += " [REQUIRED]"
            if prop.get("description"):
                line += f": {prop['description']}"
            if prop.get("enum"):
                line += " | Valid values: " + ", ".join(str(v) for v in prop["enum"])
            out.append(line + "\n")
        out.append("\n")

    out.append(_current_arguments("YOUR CURRENT ARGUMENTS", arguments))
    out.append(_server_details(body))

    out.append("EXAMPLE CORRECT USAGE:\n")
    if properties:
        example = build_example_arguments(schema, max_optional=3)
        out.append(f"call {operation.operation_id} {_pretty(example)}\n\n")

    out.append(
        "TROUBLESHOOTING STEPS:\n"
        "1. Verify all required parameters are provided\n"
        "2. Check parameter types match the schema (string, number, boolean, etc.)\n"
        "3. Ensure enum values are from the allowed list\n"
        "4. Validate parameter formats (dates, emails, URLs, etc.)\n"
        "5. Check for missing or incorrectly named parameters\n"
        "6. Review the server error details above for specific validation failures\n"
    )
    return "".join(out)


# =============================================================================
# 401 / 403
# =============================================================================


def auth_guidance(
    operation: Operation,
    schema: Mapping[str, Any],
    arguments: Mapping[str, Any],
    body: str,
    status: int,
) -> str:
    if status == 401:
        out = [
            "AUTHENTICATION REQUIRED (401): Your request lacks valid authentication "
            "credentials.\n\n"
        ]
    else:
        out = [
            "AUTHORIZATION FAILED (403): You don't have permission to access this "
            "resource.\n\n"
        ]

    out.append(_operation_header(operation) + "\n\n")

    out.append("AUTHENTICATION METHODS:\n")
    if operation.security:
        out.append("This operation requires one of the following authentication methods:\n")
        for index, requirement in enumerate(operation.security, start=1):
            out.append(f"{index}. {' + '.join(requirement)}\n")
    else:
        out.append(
            "• Check the OpenAPI spec for security requirements\n"
            "• This operation may require global authentication\n"
        )
    out.append("\n")

    out.append(
        "AUTHENTICATION SETUP:\n"
        "Set one of these environment variables based on your API:\n\n"
        "• API Key Authentication:\n"
        '  export API_KEY="your-api-key-here"\n'
        "  # Common header names: X-API-Key, Authorization, Api-Key\n\n"
        "• Bearer Token Authentication:\n"
        '  export BEARER_TOKEN="your-bearer-token-here"\n'
        "  # Sets Authorization: Bearer <token>\n\n"
        "• Basic Authentication:\n"
        '  export BASIC_AUTH="username:password"\n'
        "  # Sets Authorization: Basic <base64-encoded-credentials>\n\n"
    )

    out.append(_server_details(body))

    out.append("TROUBLESHOOTING STEPS:\n")
    if status == 401:
        out.append(
            "1. Verify you have set the correct authentication environment variable\n"
            "2. Check that your API key/token is valid and not expired\n"
            "3. Ensure the authentication method matches what the API expects\n"
            "4. Test your credentials with a simple API call (like GET /health)\n"
            "5. Check the API documentation for required authentication format\n"
            "6. Verify the API endpoint URL is correct\n"
        )
    else:
        out.append(
            "1. Verify your account has permission to access this resource\n"
            "2. Check if your API key has the required scopes/permissions\n"
            "3. Ensure you're accessing the correct resource ID/path\n"
            "4. Contact the API provider to verify your account permissions\n"
            "5. Check if there are rate limits or usage restrictions\n"
            "6. Verify your subscription/plan includes access to this endpoint\n"
        )
    return "".join(out)


# =============================================================================
# 404
# =============================================================================


def not_found_guidance(
    operation: Operation,
    schema: Mapping[str, Any],
    arguments: Mapping[str, Any],
    body: str,
) -> str:
    out = ["RESOURCE NOT FOUND (404): The requested resource could not be found.\n\n"]

    out.append(_operation_header(operation) + "\n")
    out.append(f"PATH: {operation.http_method} {operation.path}\n\n")

    out.append(_current_arguments("YOUR CURRENT ARGUMENTS", arguments))

    path_params = [p.name for p in operation.parameters_in("path")]
    if path_params:
        out.append("PATH PARAMETERS IN THIS ENDPOINT:\n")
        for name in path_params:
            out.append(f"• {name}: {_supplied_value(name, arguments)}\n")
        out.append("\n")

    out.append(_server_details(body))

    out.append("TROUBLESHOOTING STEPS:\n1. Verify all path parameters are correct and exist:\n")
    if path_params:
        for name in path_params:
            out.append(f"   - Check that {name} exists and is accessible\n")
    else:
        out.append("   - Verify the endpoint path is correct\n")
    out.append(
        "2. Ensure you're using the correct resource identifiers\n"
        "3. Check if the resource was recently deleted or moved\n"
        "4. Verify you have permission to access this resource\n"
        "5. Try listing resources first to find valid identifiers\n"
        "6. Check the API documentation for correct endpoint paths\n"
        "7. Ensure you're using the correct API base URL\n"
    )
    return "".join(out)


# =============================================================================
# 5xx
# =============================================================================


def server_error_guidance(
    operation: Operation,
    schema: Mapping[str, Any],
    arguments: Mapping[str, Any],
    body: str,
    status: int,
) -> str:
    out = [
        f"SERVER ERROR ({status}): The server encountered an error processing your "
        "request.\n\n"
    ]
    out.append(_operation_header(operation) + "\n\n")

    if status in _SERVER_ERROR_TYPES:
        label, explanation = _SERVER_ERROR_TYPES[status]
        out.append(f"ERROR TYPE: {label}\n{explanation}\n\n")
    else:
        out.append(
            f"ERROR TYPE: Server Error ({status})\n"
            "An unexpected server-side error occurred.\n\n"
        )

    out.append(_server_details(body))
    out.append(_current_arguments("YOUR REQUEST DETAILS", arguments))

    out.append("IMMEDIATE ACTIONS:\n")
    if status == 500:
        out.append(
            "1. Retry the request after a short delay (server issue)\n"
            "2. Check if the request data is valid and within expected limits\n"
            "3. Report the error to the API provider with request details\n"
        )
    elif status in (502, 503, 504):
        out.append(
            "1. Wait and retry after a few seconds (temporary issue)\n"
            "2. Check the API status page for known outages\n"
            "3. Implement exponential backoff for retries\n"
        )
    else:
        out.append(
            "1. Retry the request after a brief delay\n"
            "2. Check if this is a known issue with the API\n"
        )

    out.append(
        "\nTROUBLESHOOTING STEPS:\n"
        "1. Verify your request parameters are valid and properly formatted\n"
        "2. Check for any size limits on request data\n"
        "3. Ensure you're not hitting rate limits\n"
        "4. Try with a simpler request to isolate the issue\n"
        "5. Check the API's status page or documentation for known issues\n"
        "6. Monitor if the error persists or is intermittent\n"
        "7. Contact the API provider's support with error details\n"
        "\nRETRY STRATEGY:\n"
        "• Wait 1-2 seconds and retry once\n"
        "• If it fails again, wait longer (exponential backoff)\n"
        "• Maximum 3-5 retry attempts\n"
        "• Report persistent errors to the API provider\n"
    )

    properties: Mapping[str, Any] = schema.get("properties") or {}
    if properties:
        out.append(f"\nTOOL USAGE INFORMATION:\nTool Name: {operation.operation_id}\n")

        required = list(schema.get("required") or ())
        if required:
            out.append("Required Parameters (mandatory for all calls):\n")
            for name in required:
                prop = properties.get(name)
                if isinstance(prop, Mapping):
                    out.append(_describe_property(name, prop) + " [MANDATORY]\n")

        example = build_example_arguments(schema, max_optional=2)
        out.append(
            "\nExample Usage (retry with these correct parameters):\n"
            f"call {operation.operation_id} {_pretty(example)}\n"
        )

    return "".join(out)


# =============================================================================
# Helpers
# =============================================================================


def _operation_header(operation: Operation) -> str:
    header = f"OPERATION: {operation.operation_id}"
    if operation.summary:
        header += f" - {operation.summary}"
    return header


def _type_suffix(prop: Mapping[str, Any]) -> str:
    return f" ({prop['type']})" if isinstance(prop.get("type"), str) else ""


def _describe_property(name: str, prop: Mapping[str, Any]) -> str:
    line = f"  - {name}{_type_suffix(prop)}"
    if prop.get("description"):
        line += f": {prop['description']}"
    return line


def _current_arguments(title: str, arguments: Mapping[str, Any]) -> str:
    if not arguments:
        return ""
    return f"{title}:\n{_pretty(arguments)}\n\n"


def _server_details(body: str) -> str:
    if not body:
        return ""
    return f"SERVER ERROR DETAILS:\n{body}\n\n"


def _supplied_value(name: str, arguments: Mapping[str, Any]) -> str:
    escaped = escape_parameter_name(name)
    for key in (escaped, name):
        if key in arguments:
            value = arguments[key]
            return value if isinstance(value, str) else json.dumps(value, default=str)
    return NOT_PROVIDED


def _pretty(value: Any) -> str:
    return json.dumps(value, indent=2, default=str)
