"""
Parameter name escaping.

Parameter names such as "filter[created_at]" are not valid property keys
for every tool host. They are exposed as "filter_created_at_": brackets
become underscores and a trailing underscore marks the name as escaped.

    escape_parameter_name("filter[created_at]")  -> "filter_created_at_"
    escape_parameter_name("page[size]")          -> "page_size_"
    escape_parameter_name("limit")               -> "limit"
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from .models import Parameter

logger = logging.getLogger(__name__)


def escape_parameter_name(name: str) -> str:
    """Escape a declared parameter name (unchanged if it has no brackets)."""
    if "[" not in name and "]" not in name:
        return name

    escaped = name.replace("[", "_").replace("]", "_")
    if not escaped.endswith("_"):
        escaped += "_"
    return escaped


def unescape_parameter_name(escaped: str, mapping: Mapping[str, str]) -> str:
    """Map an escaped name back to its declared name (unknown names pass through)."""
    return mapping.get(escaped, escaped)


def build_parameter_name_mapping(parameters: Iterable[Parameter]) -> dict[str, str]:
    """
    Build escaped -> declared mapping for one operation.

    Only names that change under escaping get an entry. If two declared
    names escape to the same string, the last one wins.
    """
    mapping: dict[str, str] = {}
    for param in parameters:
        escaped = escape_parameter_name(param.name)
        if escaped == param.name:
            continue
        if escaped in mapping and mapping[escaped] != param.name:
            logger.debug(
                f"[naming] Escaped name collision: {mapping[escaped]!r} and "
                f"{param.name!r} both map to {escaped!r}; keeping {param.name!r}"
            )
        mapping[escaped] = param.name
    return mapping
