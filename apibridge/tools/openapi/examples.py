"""
Example values for tool arguments.

Shared by description generation, validation hints and error guidance, so
every place that shows the agent a sample call shows the same values.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

_STRING_FORMAT_EXAMPLES = {
    "email": "user@example.com",
    "uri": "https://example.com",
    "url": "https://example.com",
    "date": "2024-01-01",
    "date-time": "2024-01-01T00:00:00Z",
    "uuid": "123e4567-e89b-12d3-a456-426614174000",
}


def generate_example_value(prop: Mapping[str, Any]) -> Any:
    """
    Pick a plausible value for one schema property.

    Precedence: first enum value, then `example`, then the first entry of
    `examples`, then a value derived from the type.
    """
    enum = prop.get("enum")
    if enum:
        return enum[0]

    if "example" in prop:
        return prop["example"]

    examples = prop.get("examples")
    if isinstance(examples, list) and examples:
        return examples[0]

    prop_type = prop.get("type")
    if prop_type == "string":
        return _STRING_FORMAT_EXAMPLES.get(prop.get("format") or "", "example_string")
    if prop_type == "number":
        return 123.45
    if prop_type == "integer":
        return 123
    if prop_type == "boolean":
        return True
    if prop_type == "array":
        items = prop.get("items")
        if isinstance(items, Mapping):
            return [generate_example_value(items)]
        return ["item1", "item2"]
    if prop_type == "object":
        return {"key": "value"}
    return None


def build_example_arguments(
    schema: Mapping[str, Any],
    max_optional: int | None = None,
    *,
    cap: int | None = None,
) -> dict[str, Any]:
    """
    Build a sample argument object for a tool schema.

    Every required property gets a value. Then up to `max_optional`
    optional properties are added in declaration order (all of them when
    None). When `cap` is set, optional properties are only added while the
    total stays below it.
    """
    properties: Mapping[str, Any] = schema.get("properties") or {}
    args: dict[str, Any] = {}

    for name in schema.get("required") or ():
        prop = properties.get(name)
        if isinstance(prop, Mapping):
            args[name] = generate_example_value(prop)

    added = 0
    for name, prop in properties.items():
        if name in args or not isinstance(prop, Mapping):
            continue
        if max_optional is not None and added >= max_optional:
            break
        if cap is not None and len(args) >= cap:
            break
        args[name] = generate_example_value(prop)
        added += 1

    return args
