"""
Agent-oriented tool descriptions.

The description is the main thing an agent reads before calling a tool,
so it spells out authentication, parameters, a sample call, the result
format and whether the call modifies data.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any

from .examples import build_example_arguments
from .models import Operation

_RESPONSE_METHODS = frozenset({"GET", "POST", "PUT"})


def generate_description(operation: Operation, schema: Mapping[str, Any]) -> str:
    """
    Build the tool description for an operation.

    Args:
        operation: Source operation
        schema: Assembled input schema as a JSON Schema mapping

    Returns:
        Deterministic multi-section description text
    """
    parts: list[str] = [operation.description or operation.summary or ""]

    if operation.security:
        schemes = [name for requirement in operation.security for name in requirement]
        parts.append(
            f"\n\nAUTHENTICATION: Required ({' OR '.join(schemes)}). "
            "Set environment variables: API_KEY, BEARER_TOKEN, or BASIC_AUTH"
        )

    properties: Mapping[str, Any] = schema.get("properties") or {}
    required = [name for name in schema.get("required") or () if name in properties]

    if properties:
        parts.append("\n\nPARAMETERS:")
        if required:
            parts.append("\n• Required:")
            for name in required:
                parts.append("\n" + _parameter_line(name, properties[name]))

        optional = [name for name in properties if name not in required]
        if optional:
            parts.append("\n• Optional:")
            for name in optional:
                parts.append("\n" + _parameter_line(name, properties[name]))

    example = build_example_arguments(schema, max_optional=2, cap=3)
    parts.append(
        f"\n\nEXAMPLE: call {operation.operation_id} "
        f"{json.dumps(example, separators=(',', ':'), default=str)}"
    )

    if operation.http_method in _RESPONSE_METHODS:
        parts.append(
            "\n\nRESPONSE: Returns HTTP status, headers, and response body. "
            "Success responses (2xx) return the data. "
            "Error responses include troubleshooting guidance."
        )

    if operation.is_mutating:
        parts.append(
            "\n\nSAFETY: This operation modifies data. "
            "You will be asked to confirm before execution."
        )

    return "".join(parts)


def _parameter_line(name: str, prop: Any) -> str:
    line = f"  - {name}"
    if not isinstance(prop, Mapping):
        return line

    if isinstance(prop.get("type"), str):
        line += f" ({prop['type']})"
    if prop.get("description"):
        line += f": {prop['description']}"
    if prop.get("enum"):
        line += " [values: " + ", ".join(str(value) for value in prop["enum"]) + "]"
    return line
