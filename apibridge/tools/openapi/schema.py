"""
Schema translation and assembly.

Turns OpenAPI parameter and request-body schemas into one validation
schema per operation:

    translate_schema(schema)                  -> SchemaNode | None
    assemble_schema(parameters, request_body) -> SchemaNode (type "object")

Composition keywords (allOf, oneOf, anyOf) are carried structurally.
oneOf/anyOf exclusivity and discriminator mapping are NOT evaluated;
only basic support is provided and a warning is logged when they appear.
Unknown keywords are dropped.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, replace
from typing import Any

from .models import (
    JSON_MEDIA_TYPES,
    SUPPORTED_LOCATIONS,
    Operation,
    Parameter,
    RequestBody,
    base_media_type,
    first_type,
)
from .naming import escape_parameter_name

logger = logging.getLogger(__name__)

REQUEST_BODY_KEY = "requestBody"
REQUEST_BODY_DESCRIPTION = "The JSON request body."


class _Missing:
    """Marker for an absent `default` (None is a legal default)."""

    _instance: _Missing | None = None

    def __new__(cls) -> _Missing:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING: Any = _Missing()


# =============================================================================
# Schema Node
# =============================================================================


@dataclass(frozen=True, slots=True)
class SchemaNode:
    """
    Canonical validation-schema node.

    Built fresh per operation at registration time and read-only
    afterwards. `to_dict()` renders the JSON Schema mapping used by the
    validator and by description/guidance generation.
    """

    type: str | None = None
    format: str | None = None
    description: str | None = None
    enum: tuple[Any, ...] | None = None
    default: Any = MISSING
    examples: tuple[Any, ...] | None = None
    properties: Mapping[str, SchemaNode] | None = None
    required: tuple[str, ...] = ()
    items: SchemaNode | None = None
    all_of: tuple[SchemaNode, ...] = ()
    one_of: tuple[SchemaNode, ...] = ()
    any_of: tuple[SchemaNode, ...] = ()
    discriminator: Any = None

    def to_dict(self) -> dict[str, Any]:
        """Render as a JSON Schema mapping (absent fields omitted)."""
        out: dict[str, Any] = {}

        if self.type is not None:
            out["type"] = self.type
        if self.format is not None:
            out["format"] = self.format
        if self.description is not None:
            out["description"] = self.description
        if self.enum is not None:
            out["enum"] = list(self.enum)
        if self.default is not MISSING:
            out["default"] = self.default
        if self.examples is not None:
            out["examples"] = list(self.examples)
        if self.properties is not None:
            out["properties"] = {
                name: node.to_dict() for name, node in self.properties.items()
            }
        if self.required:
            out["required"] = list(self.required)
        if self.items is not None:
            out["items"] = self.items.to_dict()
        if self.all_of:
            out["allOf"] = [node.to_dict() for node in self.all_of]
        if self.one_of:
            out["oneOf"] = [node.to_dict() for node in self.one_of]
        if self.any_of:
            out["anyOf"] = [node.to_dict() for node in self.any_of]
        if self.discriminator is not None:
            out["discriminator"] = self.discriminator

        return out


# =============================================================================
# Translation
# =============================================================================


def translate_schema(schema: Mapping[str, Any] | None) -> SchemaNode | None:
    """
    Translate one OpenAPI schema object (recursively).

    Returns None for an absent schema.
    """
    if schema is None:
        return None

    all_of = tuple(_translate_member(sub) for sub in schema.get("allOf") or ())

    one_of: tuple[SchemaNode, ...] = ()
    if schema.get("oneOf"):
        logger.warning("[schema] oneOf used in schema. Only basic support is provided.")
        one_of = tuple(_translate_member(sub) for sub in schema["oneOf"])

    any_of: tuple[SchemaNode, ...] = ()
    if schema.get("anyOf"):
        logger.warning("[schema] anyOf used in schema. Only basic support is provided.")
        any_of = tuple(_translate_member(sub) for sub in schema["anyOf"])

    discriminator = schema.get("discriminator")
    if discriminator is not None:
        logger.warning(
            "[schema] discriminator used in schema. Only basic support is provided."
        )

    node_type = first_type(schema)

    enum = schema.get("enum")
    examples: tuple[Any, ...] | None = None
    if "example" in schema:
        examples = (schema["example"],)
    elif isinstance(schema.get("examples"), list) and schema["examples"]:
        examples = tuple(schema["examples"])

    properties: dict[str, SchemaNode] | None = None
    required: tuple[str, ...] = ()
    if node_type == "object" and schema.get("properties") is not None:
        properties = {
            name: _translate_member(sub) for name, sub in schema["properties"].items()
        }
        required = tuple(schema.get("required") or ())

    items: SchemaNode | None = None
    if node_type == "array" and schema.get("items") is not None:
        items = translate_schema(schema["items"])

    return SchemaNode(
        type=node_type,
        format=schema.get("format") or None,
        description=schema.get("description") or None,
        enum=tuple(enum) if enum else None,
        default=schema["default"] if "default" in schema else MISSING,
        examples=examples,
        properties=properties,
        required=required,
        items=items,
        all_of=all_of,
        one_of=one_of,
        any_of=any_of,
        discriminator=discriminator,
    )


def _translate_member(schema: Mapping[str, Any] | None) -> SchemaNode:
    # A missing member schema accepts anything.
    return translate_schema(schema) or SchemaNode()


# =============================================================================
# Assembly
# =============================================================================


def assemble_schema(
    parameters: Iterable[Parameter],
    request_body: RequestBody | None = None,
) -> SchemaNode:
    """
    Combine an operation's parameters and JSON body into one object schema.

    - Parameters are keyed by their escaped names; a required parameter
      contributes its escaped name to `required`.
    - The JSON body (application/json, else application/vnd.api+json) is
      keyed as "requestBody".
    - Unsupported locations and media types are diagnosed, not rejected.
    """
    properties: dict[str, SchemaNode] = {}
    required: list[str] = []

    for param in parameters:
        if param.location not in SUPPORTED_LOCATIONS:
            logger.warning(
                f"[schema] Parameter '{param.name}' uses unsupported location "
                f"'{param.location}'."
            )
            continue

        if param.schema is None:
            continue

        if first_type(param.schema) == "string" and param.schema.get("format") == "binary":
            logger.warning(
                f"[schema] Parameter '{param.name}' uses 'string' with 'binary' format. "
                "Non-JSON body types are not fully supported."
            )

        node = translate_schema(param.schema)
        if node is None:
            continue

        if param.description:
            node = _with_description(node, param.description)

        escaped = escape_parameter_name(param.name)
        properties[escaped] = node
        if param.required:
            required.append(escaped)

    if request_body is not None:
        for media_type in request_body.content:
            if base_media_type(media_type) not in JSON_MEDIA_TYPES:
                logger.warning(
                    f"[schema] Request body uses media type '{media_type}'. Only "
                    "'application/json' and 'application/vnd.api+json' are fully supported."
                )

        match = request_body.json_media()
        if match is not None and match[1] is not None:
            body_node = translate_schema(match[1])
            if body_node is not None:
                properties[REQUEST_BODY_KEY] = _with_description(
                    body_node, REQUEST_BODY_DESCRIPTION
                )
                if request_body.required:
                    required.append(REQUEST_BODY_KEY)

    return SchemaNode(type="object", properties=properties, required=tuple(required))


def build_input_schema(
    operation: Operation,
    post_process: Callable[[SchemaNode], SchemaNode] | None = None,
) -> dict[str, Any]:
    """
    Assembled schema for an operation, as a JSON Schema mapping.

    `post_process` is applied once to the assembled node before rendering.
    """
    node = assemble_schema(operation.parameters, operation.request_body)
    if post_process is not None:
        node = post_process(node)
    return node.to_dict()


def _with_description(node: SchemaNode, description: str) -> SchemaNode:
    return replace(node, description=description)


# =============================================================================
# Date/time detection
# =============================================================================


_DATE_TIME_NAME_HINTS = ("date", "time", "created_at", "updated_at", "start_time", "end_time")
_DATE_TIME_FORMATS = ("date", "date-time")


def has_date_time_parameters(operation: Operation) -> bool:
    """
    Heuristic: does the operation take a date/time-shaped value?

    True when a parameter name hints at a date or time, a parameter has a
    date/date-time format, an integer parameter is named like a timestamp,
    or any request body schema contains a date/date-time format.
    """
    for param in operation.parameters:
        lowered = param.name.lower()
        if any(hint in lowered for hint in _DATE_TIME_NAME_HINTS):
            return True

        if param.schema:
            if param.schema.get("format") in _DATE_TIME_FORMATS:
                return True
            if param.is_integer and ("time" in lowered or "timestamp" in lowered):
                return True

    if operation.request_body is not None:
        for schema in operation.request_body.content.values():
            if schema and _schema_has_date_time(schema):
                return True

    return False


def _schema_has_date_time(schema: Mapping[str, Any]) -> bool:
    if schema.get("format") in _DATE_TIME_FORMATS:
        return True

    for sub in (schema.get("properties") or {}).values():
        if sub and _schema_has_date_time(sub):
            return True

    items = schema.get("items")
    if isinstance(items, Mapping) and _schema_has_date_time(items):
        return True

    for keyword in ("allOf", "anyOf", "oneOf"):
        for sub in schema.get(keyword) or ():
            if sub and _schema_has_date_time(sub):
                return True

    return False
