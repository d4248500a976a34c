"""
Argument validation.

Wraps `jsonschema.Draft7Validator` and turns its errors into a small set of
issue variants the dispatcher can render as agent-friendly text:

    MissingRequired  a required property is absent
    TypeMismatch     a value has the wrong JSON type
    EnumViolation    a value is not in the allowed list
    Other            anything else (format, oneOf/anyOf, bounds, ...)
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Union

from jsonschema import Draft7Validator
from jsonschema.exceptions import SchemaError, ValidationError

from .examples import build_example_arguments

logger = logging.getLogger(__name__)

ROOT_PATH = "(root)"


@dataclass(frozen=True, slots=True)
class MissingRequired:
    name: str
    path: str = ROOT_PATH


@dataclass(frozen=True, slots=True)
class TypeMismatch:
    path: str
    expected: str
    given: str


@dataclass(frozen=True, slots=True)
class EnumViolation:
    path: str
    allowed: tuple[Any, ...]
    given: Any


@dataclass(frozen=True, slots=True)
class Other:
    message: str
    path: str = ROOT_PATH


ValidationIssue = Union[MissingRequired, TypeMismatch, EnumViolation, Other]


def validate_arguments(
    schema: Mapping[str, Any],
    arguments: Mapping[str, Any],
) -> list[ValidationIssue]:
    """
    Validate an argument object against a tool schema.

    Returns:
        Issues in a stable order (empty when the arguments are valid).
        An invalid schema yields a single Other issue instead of raising.
    """
    try:
        Draft7Validator.check_schema(schema)
    except SchemaError as e:
        logger.warning(f"[validation] Invalid tool schema: {e.message}")
        return [Other(message=f"Validation error: {e.message}")]

    validator = Draft7Validator(schema)
    errors = sorted(validator.iter_errors(arguments), key=lambda e: e.json_path)

    issues: list[ValidationIssue] = []
    seen_missing: set[tuple[str, str]] = set()

    for error in errors:
        path = _display_path(error)

        if error.validator == "required":
            instance = error.instance if isinstance(error.instance, Mapping) else {}
            for name in error.validator_value:
                if name in instance or (path, name) in seen_missing:
                    continue
                seen_missing.add((path, name))
                issues.append(MissingRequired(name=name, path=path))

        elif error.validator == "type":
            expected = error.validator_value
            if isinstance(expected, list):
                expected = ", ".join(expected)
            issues.append(
                TypeMismatch(path=path, expected=str(expected), given=_json_type(error.instance))
            )

        elif error.validator == "enum":
            issues.append(
                EnumViolation(path=path, allowed=tuple(error.validator_value), given=error.instance)
            )

        elif error.validator in ("oneOf", "anyOf"):
            issues.append(Other(message=f"Invalid value. {_error_text(error)}", path=path))

        else:
            issues.append(Other(message=_error_text(error), path=path))

    return issues


def describe_issue(issue: ValidationIssue, properties: Mapping[str, Any]) -> str:
    """Render one issue as a single line of text."""
    if isinstance(issue, MissingRequired):
        prop = properties.get(issue.name) if issue.path == ROOT_PATH else None
        details: list[str] = []
        if isinstance(prop, Mapping):
            if prop.get("description"):
                details.append(str(prop["description"]))
            if isinstance(prop.get("type"), str):
                details.append(f"type: {prop['type']}")
        if details:
            return (
                f"Missing required parameter: '{issue.name}' ({', '.join(details)}). "
                "Please provide this parameter."
            )
        return f"Missing required parameter: '{issue.name}'"

    if isinstance(issue, TypeMismatch):
        return f"{issue.path}: Invalid type. Expected: {issue.expected}, given: {issue.given}"

    if isinstance(issue, EnumViolation):
        allowed = ", ".join(json.dumps(value, default=str) for value in issue.allowed)
        return f"{issue.path}: {issue.path} must be one of the following: {allowed}"

    return f"{issue.path}: {issue.message}"


def format_validation_failure(
    tool_name: str,
    schema: Mapping[str, Any],
    issues: list[ValidationIssue],
) -> str:
    """
    Full error text for a failed validation: one line per issue followed
    by a suggested retry call covering every schema property.
    """
    properties: Mapping[str, Any] = schema.get("properties") or {}
    lines = "\n".join(describe_issue(issue, properties) for issue in issues).strip()

    example = build_example_arguments(schema)
    retry = f"Try again with: call {tool_name} {json.dumps(example, default=str)}"
    return f"{lines}\n\n{retry}"


def _display_path(error: ValidationError) -> str:
    parts = [str(part) for part in error.absolute_path]
    return ".".join(parts) if parts else ROOT_PATH


def _error_text(error: ValidationError) -> str:
    # First line only; jsonschema messages can embed the whole instance.
    return error.message.splitlines()[0] if error.message else "Invalid value"


def _json_type(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, int):
        return "integer"
    if isinstance(value, float):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "array"
    if isinstance(value, Mapping):
        return "object"
    return type(value).__name__
