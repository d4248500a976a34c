"""
apibridge Tools.

Tools are what an agent calls. Each OpenAPI operation becomes one tool;
the registry hosts them next to a few read-only resources.

MCP Alignment:
    Tool interface follows Model Context Protocol standards.
    See: https://modelcontextprotocol.io/specification/

Usage:
    registry = ToolRegistry()
    register_openapi_tools(registry, operations, document)

    result = await registry.call("getPet", {"petId": 1})
"""

from .base import (
    ContentBlock,
    ContentType,
    Resource,
    Tool,
    ToolAnnotations,
    ToolResult,
)
from .context import CallContext, credentials_from_headers, resolve_credentials
from .registry import ToolRegistry, ToolRegistryError
from .openapi import (
    OpenAPIOperationTool,
    ToolGenOptions,
    register_openapi_tools,
)

__all__ = [
    # Core Tool Protocol
    "Tool",
    "ToolResult",
    "ToolAnnotations",
    "ContentBlock",
    "ContentType",
    "Resource",
    "ToolRegistry",
    "ToolRegistryError",
    # Call context
    "CallContext",
    "credentials_from_headers",
    "resolve_credentials",
    # OpenAPI
    "OpenAPIOperationTool",
    "ToolGenOptions",
    "register_openapi_tools",
]
