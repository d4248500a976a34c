"""
Tool registrar.

Turns a list of operations into registered tools:

    registry = ToolRegistry()
    names = register_openapi_tools(
        registry,
        operations,
        document,
        ToolGenOptions(tag_filter=("pets",), version="3.0.3"),
    )

Per operation: filter, assemble the schema, post-process, describe, name,
annotate, bind an OpenAPIOperationTool. Afterwards the document meta-tools
(`externalDocs`, `info`) and, when any operation takes dates or times, the
`timestamp://current` resource are added.
"""

from __future__ import annotations

import json
import logging
import re
import sys
from collections.abc import Callable, Sequence
from typing import TYPE_CHECKING, Any

from apibridge.config import get_settings

from ..base import ToolAnnotations
from .description import generate_description
from .dispatcher import OpenAPIOperationTool
from .meta import ExternalDocsTool, InfoTool, timestamp_resource
from .models import APIDocument, Operation, ToolGenOptions
from .schema import build_input_schema, has_date_time_parameters

if TYPE_CHECKING:
    from ..registry import ToolRegistry

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "http://localhost:8080"

_READ_ONLY_METHODS = frozenset({"GET", "HEAD", "OPTIONS"})
_IDEMPOTENT_METHODS = frozenset({"GET", "PUT", "DELETE"})


def register_openapi_tools(
    registry: ToolRegistry,
    operations: Sequence[Operation],
    document: APIDocument,
    options: ToolGenOptions | None = None,
) -> list[str]:
    """
    Register one tool per selected operation, plus meta-tools.

    Args:
        registry: Registry receiving the tools
        operations: Operations in source order
        document: Document metadata (servers, security schemes, info)
        options: Generation options

    Returns:
        Tool names in registration order. In dry-run mode the names that
        would have been registered (no meta-tools).
    """
    options = options or ToolGenOptions()
    base_urls = resolve_base_urls(document, options)

    include = re.compile(options.include_description) if options.include_description else None
    exclude = re.compile(options.exclude_description) if options.exclude_description else None

    names: list[str] = []
    summaries: list[dict[str, Any]] = []

    for op in operations:
        if not _selected(op, options, include, exclude):
            logger.debug(f"[openapi_registrar] Skipping operation: {op.operation_id}")
            continue

        schema = build_input_schema(op, options.post_process_schema)

        description = generate_description(op, schema)
        name = options.name_format(op.operation_id) if options.name_format else op.operation_id

        if options.dry_run:
            summaries.append(
                {
                    "name": name,
                    "description": description,
                    "tags": list(op.tags),
                    "inputSchema": schema,
                }
            )
            names.append(name)
            continue

        tool = OpenAPIOperationTool(
            op,
            name=name,
            input_schema=schema,
            description=description,
            base_urls=base_urls,
            schemes=document.security_schemes,
            annotations=operation_annotations(op, options.version),
            confirm_dangerous_actions=options.confirm_dangerous_actions,
            transport=options.transport,
            credentials_provider=options.credentials_provider,
        )
        registry.register(tool, replace=True)
        names.append(name)

    if options.dry_run:
        _write_dry_run(summaries, options)
        return names

    if document.external_docs is not None and document.external_docs.url:
        registry.register(
            ExternalDocsTool(document.external_docs, version=options.version), replace=True
        )
        names.append("externalDocs")

    registry.register(InfoTool(document, version=options.version), replace=True)
    names.append("info")

    if any(has_date_time_parameters(op) for op in operations):
        registry.register_resource(timestamp_resource())

    logger.info(
        f"[openapi_registrar] Registered {len(names)} tools from '{document.title}' "
        f"(base_urls={list(base_urls)})"
    )
    return names


# =============================================================================
# Helpers
# =============================================================================


def resolve_base_urls(document: APIDocument, options: ToolGenOptions) -> tuple[str, ...]:
    """
    Base-URL candidates: explicit option, else OPENAPI_BASE_URL, else the
    document's servers, else http://localhost:8080.
    """
    if options.base_url:
        return (options.base_url,)

    settings = get_settings()
    if settings.base_url:
        return (settings.base_url,)

    servers = tuple(url for url in document.servers if url)
    if servers:
        return servers

    return (DEFAULT_BASE_URL,)


def operation_annotations(operation: Operation, version: str = "") -> ToolAnnotations:
    """Title from version and tags; hints from the HTTP method."""
    title_parts = []
    if version:
        title_parts.append(f"OpenAPI {version}")
    if operation.tags:
        title_parts.append("Tags: " + ", ".join(operation.tags))

    method = operation.http_method
    return ToolAnnotations(
        title=" | ".join(title_parts) if title_parts else None,
        read_only_hint=method in _READ_ONLY_METHODS,
        destructive_hint=method == "DELETE",
        idempotent_hint=method in _IDEMPOTENT_METHODS,
        open_world_hint=True,
    )


def _selected(
    op: Operation,
    options: ToolGenOptions,
    include: re.Pattern[str] | None,
    exclude: re.Pattern[str] | None,
) -> bool:
    if options.tag_filter and not set(op.tags) & set(options.tag_filter):
        return False

    if options.operation_ids and op.operation_id not in options.operation_ids:
        return False

    text = op.description or op.summary
    if include is not None and not include.search(text):
        return False
    if exclude is not None and exclude.search(text):
        return False

    return True


def _write_dry_run(summaries: list[dict[str, Any]], options: ToolGenOptions) -> None:
    out = options.output if options.output is not None else sys.stdout
    indent = 2 if options.pretty_print else None
    out.write(json.dumps(summaries, indent=indent, default=str) + "\n")


# =============================================================================
# Name formatters
# =============================================================================


_WORD_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")
_SEPARATORS = re.compile(r"[^A-Za-z0-9]+")


def _words(name: str) -> list[str]:
    return [w for w in _SEPARATORS.split(_WORD_BOUNDARY.sub("_", name)) if w]


def to_snake_case(name: str) -> str:
    return "_".join(word.lower() for word in _words(name))


def to_camel_case(name: str) -> str:
    words = _words(name)
    if not words:
        return ""
    return words[0].lower() + "".join(word[:1].upper() + word[1:].lower() for word in words[1:])


_FORMATTERS: dict[str, Callable[[str], str]] = {
    "lower": str.lower,
    "upper": str.upper,
    "snake": to_snake_case,
    "camel": to_camel_case,
}


def tool_name_formatter(style: str) -> Callable[[str], str]:
    """
    Built-in name formatter by style: lower, upper, snake or camel.

    Raises:
        ValueError: If the style is unknown
    """
    try:
        return _FORMATTERS[style.lower()]
    except KeyError:
        raise ValueError(
            f"Unknown tool name format '{style}'. Available: {sorted(_FORMATTERS)}"
        ) from None
