"""
Tool Base Classes (MCP-Aligned).

This module defines the core abstractions shared by generated tools:
- Tool: Base class for all tools
- ToolResult: Result from tool execution
- ToolAnnotations: Behavioral hints for tools
- ContentBlock: Content blocks in tool results
- Resource: Read-only resource exposed next to the tools

MCP Alignment:
    This interface follows Model Context Protocol standards:
    - Tool has name, description, input_schema
    - ToolResult has content blocks and is_error flag
    - Annotations are advisory hints only

Usage:
    class PingTool(Tool):
        @property
        def name(self) -> str:
            return "ping"

        @property
        def description(self) -> str:
            return "Check the API is reachable"

        @property
        def input_schema(self) -> dict:
            return {"type": "object", "properties": {}}

        async def execute(self, arguments, *, context=None) -> ToolResult:
            return ToolResult.success("pong")
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from .context import CallContext


class ContentType(Enum):
    """Type of content in a tool result (MCP-aligned)."""

    TEXT = "text"
    JSON = "json"


@dataclass(frozen=True, slots=True)
class ContentBlock:
    """
    Content block in tool result.

    TEXT blocks carry plain text. JSON blocks carry a serialized
    JSON object (used for binary file payloads encoded as base64).
    """

    type: ContentType
    text_content: str

    @classmethod
    def from_text(cls, content: str) -> ContentBlock:
        """Create a text content block."""
        return cls(type=ContentType.TEXT, text_content=content)

    @classmethod
    def from_json(cls, content: str) -> ContentBlock:
        """Create a JSON content block from already serialized text."""
        return cls(type=ContentType.JSON, text_content=content)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {"type": self.type.value, "text": self.text_content}


@dataclass(frozen=True, slots=True)
class ToolAnnotations:
    """
    Behavioral hints for tools (MCP-aligned).

    These are ADVISORY only - they do not enforce behavior and should
    not be relied upon for security decisions.

    Attributes:
        title: Human-readable title for display
        read_only_hint: If True, tool does not modify environment
        destructive_hint: For non-read-only tools, may destroy data
        idempotent_hint: Repeated calls with same args have no additional effect
        open_world_hint: Tool interacts with external entities
    """

    title: str | None = None
    read_only_hint: bool = False
    destructive_hint: bool = True
    idempotent_hint: bool = False
    open_world_hint: bool = False

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        result: dict[str, Any] = {}

        if self.title is not None:
            result["title"] = self.title
        if self.read_only_hint:
            result["readOnlyHint"] = True
        if not self.destructive_hint:
            result["destructiveHint"] = False
        if self.idempotent_hint:
            result["idempotentHint"] = True
        if self.open_world_hint:
            result["openWorldHint"] = True

        return result


@dataclass(frozen=True, slots=True)
class ToolResult:
    """
    Result from tool execution (MCP-aligned).

    Every tool execution returns a ToolResult containing:
    - content: Array of content blocks
    - is_error: Whether the execution failed
    - structured_content: Optional structured data

    Error Handling:
        Upstream and validation failures are reported IN the result,
        not as exceptions, so the agent can reason about them and retry.

    Example:
        ToolResult.success("HTTP GET https://api.example.com/items\\nStatus: 200 ...")
        ToolResult.error("Missing required parameter: 'id'")
    """

    content: tuple[ContentBlock, ...]
    is_error: bool = False
    structured_content: dict[str, Any] | None = None

    @classmethod
    def success(
        cls,
        text: str,
        *,
        structured: dict[str, Any] | None = None,
        additional_content: tuple[ContentBlock, ...] | None = None,
    ) -> ToolResult:
        """
        Create a successful result.

        Args:
            text: Human-readable result text
            structured: Optional structured data for programmatic use
            additional_content: Additional content blocks

        Returns:
            ToolResult with is_error=False
        """
        content = [ContentBlock.from_text(text)]
        if additional_content:
            content.extend(additional_content)

        return cls(
            content=tuple(content),
            is_error=False,
            structured_content=structured,
        )

    @classmethod
    def error(
        cls,
        message: str,
        *,
        structured: dict[str, Any] | None = None,
    ) -> ToolResult:
        """
        Create an error result.

        Args:
            message: Error description
            structured: Optional structured error data

        Returns:
            ToolResult with is_error=True
        """
        return cls(
            content=(ContentBlock.from_text(message),),
            is_error=True,
            structured_content=structured,
        )

    @classmethod
    def from_json(
        cls,
        serialized: str,
        structured: dict[str, Any],
        *,
        is_error: bool = False,
    ) -> ToolResult:
        """Create a result whose only block is a JSON document."""
        return cls(
            content=(ContentBlock.from_json(serialized),),
            is_error=is_error,
            structured_content=structured,
        )

    @property
    def text(self) -> str:
        """All block texts joined by newlines (convenience accessor)."""
        return "\n".join(block.text_content for block in self.content)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        result: dict[str, Any] = {
            "content": [block.to_dict() for block in self.content],
        }

        if self.is_error:
            result["isError"] = True
        if self.structured_content is not None:
            result["structuredContent"] = self.structured_content

        return result


@dataclass(frozen=True)
class Resource:
    """
    A read-only resource exposed alongside tools.

    `reader` is an async callable returning the resource text.
    """

    uri: str
    name: str
    description: str
    mime_type: str
    reader: Callable[[], Awaitable[str]] = field(repr=False, compare=False)

    async def read(self) -> str:
        return await self.reader()

    def to_dict(self) -> dict[str, Any]:
        return {
            "uri": self.uri,
            "name": self.name,
            "description": self.description,
            "mimeType": self.mime_type,
        }


class Tool(ABC):
    """
    Base class for all tools (MCP-aligned).

    Contract:
        - name: Unique identifier
        - description: Clear description for LLM understanding
        - input_schema: JSON Schema for arguments
        - execute: Async method that performs the action

    Tools are created once and never mutated; many concurrent
    invocations share one instance read-only.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Unique identifier for the tool."""
        ...

    @property
    @abstractmethod
    def description(self) -> str:
        """
        Human-readable description of what the tool does.

        This is used by the LLM to understand when to use the tool.
        """
        ...

    @property
    @abstractmethod
    def input_schema(self) -> dict[str, Any]:
        """
        JSON Schema defining expected input arguments.

        Must be a JSON Schema object with type "object" and
        a "properties" mapping. "required" is optional.
        """
        ...

    @property
    def annotations(self) -> ToolAnnotations:
        """Behavioral hints for the tool."""
        return ToolAnnotations()

    @abstractmethod
    async def execute(
        self,
        arguments: dict[str, Any],
        *,
        context: CallContext | None = None,
    ) -> ToolResult:
        """
        Execute the tool with the given arguments.

        Args:
            arguments: Dict matching input_schema
            context: Request-scoped call context (credentials, metadata)

        Returns:
            ToolResult with execution outcome

        Important:
            - Report errors in ToolResult.error(), don't raise exceptions
            - Exceptions should only be raised for unexpected failures
        """
        ...

    def to_llm_schema(self) -> dict[str, Any]:
        """
        Convert to schema format for LLM tool use.

        This format is compatible with Claude/OpenAI tool calling.
        """
        return {
            "name": self.name,
            "description": self.description,
            "input_schema": self.input_schema,
        }

    def to_mcp_schema(self) -> dict[str, Any]:
        """
        Convert to full MCP tool schema.

        Includes annotations when any are set.
        """
        schema = {
            "name": self.name,
            "description": self.description,
            "inputSchema": self.input_schema,
        }

        annotations = self.annotations.to_dict()
        if annotations:
            schema["annotations"] = annotations

        return schema

    def __repr__(self) -> str:
        return f"<Tool {self.name}>"
