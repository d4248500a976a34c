"""
Document meta-tools and the current-time resource.

- `info`: API title, version, description and terms of service
- `externalDocs`: the document's external documentation link
- `timestamp://current`: the current time, for APIs that take dates
"""

from __future__ import annotations

import json
import time
from datetime import datetime
from typing import TYPE_CHECKING, Any

from ..base import Resource, Tool, ToolAnnotations, ToolResult

if TYPE_CHECKING:
    from ..context import CallContext
    from .models import APIDocument, ExternalDocs

TIMESTAMP_RESOURCE_URI = "timestamp://current"

_EMPTY_SCHEMA: dict[str, Any] = {"type": "object", "properties": {}}


def _version_annotations(version: str) -> ToolAnnotations:
    return ToolAnnotations(
        title=f"OpenAPI {version}" if version else None,
        read_only_hint=True,
        destructive_hint=False,
        idempotent_hint=True,
    )


class InfoTool(Tool):
    """Reports document metadata. Takes no arguments and never fails."""

    def __init__(self, document: APIDocument, *, version: str = ""):
        self._document = document
        self._version = version

    @property
    def name(self) -> str:
        return "info"

    @property
    def description(self) -> str:
        return "Show API metadata: title, version, description, and terms of service."

    @property
    def input_schema(self) -> dict[str, Any]:
        return dict(_EMPTY_SCHEMA)

    @property
    def annotations(self) -> ToolAnnotations:
        return _version_annotations(self._version)

    async def execute(
        self,
        arguments: dict[str, Any],
        *,
        context: CallContext | None = None,
    ) -> ToolResult:
        doc = self._document
        lines = []
        if doc.title:
            lines.append(f"Title: {doc.title}")
        if doc.version:
            lines.append(f"Version: {doc.version}")
        if doc.description:
            lines.append(f"Description: {doc.description}")
        if doc.terms_of_service:
            lines.append(f"Terms of Service: {doc.terms_of_service}")
        return ToolResult.success("\n".join(lines).strip())


class ExternalDocsTool(Tool):
    """Reports the external documentation link."""

    def __init__(self, external_docs: ExternalDocs, *, version: str = ""):
        self._external_docs = external_docs
        self._version = version

    @property
    def name(self) -> str:
        return "externalDocs"

    @property
    def description(self) -> str:
        return "Show the OpenAPI external documentation URL and description."

    @property
    def input_schema(self) -> dict[str, Any]:
        return dict(_EMPTY_SCHEMA)

    @property
    def annotations(self) -> ToolAnnotations:
        return _version_annotations(self._version)

    async def execute(
        self,
        arguments: dict[str, Any],
        *,
        context: CallContext | None = None,
    ) -> ToolResult:
        text = f"External documentation URL: {self._external_docs.url}"
        if self._external_docs.description:
            text += f"\nDescription: {self._external_docs.description}"
        return ToolResult.success(text)


# =============================================================================
# Time resource
# =============================================================================


async def read_current_time() -> str:
    """Current time as {"unix_timestamp", "iso8601", "timezone"}."""
    now = datetime.now().astimezone()
    return json.dumps(
        {
            "unix_timestamp": int(time.time()),
            "iso8601": now.isoformat(timespec="seconds"),
            "timezone": now.tzname() or "UTC",
        }
    )


def timestamp_resource() -> Resource:
    return Resource(
        uri=TIMESTAMP_RESOURCE_URI,
        name="Current Unix Timestamp",
        description=(
            "Provides the current Unix timestamp in seconds to help the AI "
            "understand the current date and time"
        ),
        mime_type="application/json",
        reader=read_current_time,
    )
