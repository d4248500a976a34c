"""
Tool Registry.

The registry is the hosting seam between generated tools and the runtime
that serves them (stdio, SSE, HTTP framing live outside this package):
- Registration with validation
- Lookup and invocation by name
- Resources (read-only documents such as the current time)
- Schema export for LLM / MCP

Design Principle:
    Tools are registered once at startup and immutable during execution.

Usage:
    registry = ToolRegistry()
    names = register_openapi_tools(registry, operations, document)

    result = await registry.call("getPet", {"petId": 1})
    schemas = registry.to_mcp_schemas()
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .base import Resource, Tool, ToolResult
    from .context import CallContext

logger = logging.getLogger(__name__)


class ToolRegistryError(Exception):
    """Error in tool registry operations."""

    pass


class ToolRegistry:
    """
    Registry of available tools and resources.

    Example:
        registry = ToolRegistry()
        registry.register(InfoTool(document))

        tool = registry.get("info")
        result = await registry.call("info", {})
    """

    def __init__(self) -> None:
        self._tools: dict[str, Tool] = {}
        self._resources: dict[str, Resource] = {}

    def register(self, tool: Tool, *, replace: bool = False) -> None:
        """
        Register a tool.

        Args:
            tool: Tool instance to register
            replace: If True, a tool with the same name is replaced
                (last registration wins) instead of raising

        Raises:
            ToolRegistryError: If tool name already registered and
                replace is False, or the tool is invalid
        """
        self._validate_tool(tool)

        if tool.name in self._tools:
            if not replace:
                raise ToolRegistryError(
                    f"Tool '{tool.name}' already registered. Use a unique name or unregister first."
                )
            logger.warning(f"[tool_registry] Replacing tool: {tool.name}")

        self._tools[tool.name] = tool
        logger.info(f"[tool_registry] Registered tool: {tool.name}")

    def unregister(self, name: str) -> bool:
        """
        Unregister a tool by name.

        Returns:
            True if tool was unregistered, False if not found
        """
        if name in self._tools:
            del self._tools[name]
            logger.info(f"[tool_registry] Unregistered tool: {name}")
            return True
        return False

    def get(self, name: str) -> Tool | None:
        """Get a tool by name, or None if not found."""
        return self._tools.get(name)

    def get_required(self, name: str) -> Tool:
        """
        Get a tool by name, raising if not found.

        Raises:
            ToolRegistryError: If tool not found
        """
        tool = self._tools.get(name)
        if tool is None:
            available = list(self._tools.keys())
            raise ToolRegistryError(f"Tool '{name}' not found. Available tools: {available}")
        return tool

    async def call(
        self,
        name: str,
        arguments: dict[str, Any] | None = None,
        *,
        context: CallContext | None = None,
    ) -> ToolResult:
        """
        Invoke a tool by name.

        Args:
            name: Tool name
            arguments: Argument object (None is treated as {})
            context: Request-scoped call context

        Raises:
            ToolRegistryError: If tool not found
        """
        tool = self.get_required(name)
        return await tool.execute(arguments or {}, context=context)

    def list_tools(self) -> list[Tool]:
        """List all registered tools."""
        return list(self._tools.values())

    def list_names(self) -> list[str]:
        """List all registered tool names."""
        return list(self._tools.keys())

    # -------------------------------------------------------------------------
    # Resources
    # -------------------------------------------------------------------------

    def register_resource(self, resource: Resource) -> None:
        """Register a resource (same URI replaces the earlier one)."""
        if resource.uri in self._resources:
            logger.warning(f"[tool_registry] Replacing resource: {resource.uri}")
        self._resources[resource.uri] = resource
        logger.info(f"[tool_registry] Registered resource: {resource.uri}")

    def get_resource(self, uri: str) -> Resource | None:
        return self._resources.get(uri)

    def list_resources(self) -> list[Resource]:
        return list(self._resources.values())

    async def read_resource(self, uri: str) -> str:
        """
        Read a resource by URI.

        Raises:
            ToolRegistryError: If resource not found
        """
        resource = self._resources.get(uri)
        if resource is None:
            raise ToolRegistryError(
                f"Resource '{uri}' not found. Available resources: {list(self._resources)}"
            )
        return await resource.read()

    # -------------------------------------------------------------------------
    # Export
    # -------------------------------------------------------------------------

    def to_llm_schemas(self) -> list[dict[str, Any]]:
        """Get all tool schemas for LLM tool use."""
        return [tool.to_llm_schema() for tool in self._tools.values()]

    def to_mcp_schemas(self) -> list[dict[str, Any]]:
        """Get all tool schemas in full MCP format."""
        return [tool.to_mcp_schema() for tool in self._tools.values()]

    def _validate_tool(self, tool: Tool) -> None:
        """
        Validate tool has required properties.

        Raises:
            ToolRegistryError: If tool is invalid
        """
        if not tool.name or not isinstance(tool.name, str):
            raise ToolRegistryError(f"Tool must have a valid name: {tool}")

        if not isinstance(tool.description, str):
            raise ToolRegistryError(f"Tool '{tool.name}' description must be a string")

        schema = tool.input_schema
        if not isinstance(schema, dict):
            raise ToolRegistryError(f"Tool '{tool.name}' input_schema must be a dict")

        if schema.get("type") != "object":
            raise ToolRegistryError(f"Tool '{tool.name}' input_schema must have type: 'object'")

        if "properties" not in schema:
            raise ToolRegistryError(f"Tool '{tool.name}' input_schema must have 'properties'")

    def __len__(self) -> int:
        return len(self._tools)

    def __contains__(self, name: str) -> bool:
        return name in self._tools

    def __repr__(self) -> str:
        return f"<ToolRegistry tools={list(self._tools.keys())}>"
