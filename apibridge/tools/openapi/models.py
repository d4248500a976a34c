"""
OpenAPI data model.

Immutable, already-extracted views of an API description document:
operations, parameters, request bodies, security schemes and document
metadata. `$ref`s are expected to be resolved by whoever builds these.

Example:
    op = Operation(
        operation_id="getPet",
        method="get",
        path="/pets/{petId}",
        parameters=(
            Parameter(name="petId", location="path", required=True,
                      schema={"type": "integer"}),
        ),
        security=({"ApiKeyAuth": ()},),
        tags=("pets",),
    )
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import IO, TYPE_CHECKING, Any

if TYPE_CHECKING:
    from apibridge.config.schemas import Credentials

    from .schema import SchemaNode
    from .transport import Transport


SUPPORTED_LOCATIONS = ("query", "path", "header", "cookie")
JSON_MEDIA_TYPES = ("application/json", "application/vnd.api+json")
MUTATING_METHODS = frozenset({"POST", "PUT", "DELETE"})


@dataclass(frozen=True, slots=True)
class Parameter:
    """
    A single operation parameter.

    Attributes:
        name: Declared name (source of truth, may contain brackets)
        location: path, query, header or cookie
        required: Whether the caller must supply it
        schema: OpenAPI schema object for the value
        description: Overrides the schema's description when non-empty
    """

    name: str
    location: str
    required: bool = False
    schema: dict[str, Any] | None = None
    description: str = ""

    @property
    def is_integer(self) -> bool:
        if not self.schema:
            return False
        return first_type(self.schema) == "integer"


@dataclass(frozen=True, slots=True)
class RequestBody:
    """Request body keyed by media type (schema per media type)."""

    content: Mapping[str, dict[str, Any] | None] = field(default_factory=dict)
    required: bool = False
    description: str = ""

    def json_media(self) -> tuple[str, dict[str, Any] | None] | None:
        """
        Locate the JSON-compatible entry.

        Exact "application/json" first, then "application/vnd.api+json";
        parameters after ";" are ignored when matching.

        Returns:
            (base media type, schema) or None
        """
        for wanted in JSON_MEDIA_TYPES:
            for media_type, schema in self.content.items():
                if base_media_type(media_type) == wanted:
                    return wanted, schema
        return None


@dataclass(frozen=True, slots=True)
class Operation:
    """
    One addressable API operation (method + path).

    Attributes:
        operation_id: Unique identifier (default tool name)
        method: HTTP method, any case
        path: URL path template (e.g., /pets/{petId})
        parameters: Ordered parameters
        request_body: Optional request body
        security: Alternatives; each maps scheme name -> scopes.
            Satisfying any one alternative satisfies the requirement.
        summary: Brief description
        description: Detailed description
        tags: Operation tags for filtering
    """

    operation_id: str
    method: str
    path: str
    parameters: tuple[Parameter, ...] = ()
    request_body: RequestBody | None = None
    security: tuple[Mapping[str, Any], ...] = ()
    summary: str = ""
    description: str = ""
    tags: tuple[str, ...] = ()

    @property
    def http_method(self) -> str:
        return self.method.upper()

    @property
    def is_mutating(self) -> bool:
        return self.http_method in MUTATING_METHODS

    def parameters_in(self, location: str) -> list[Parameter]:
        return [p for p in self.parameters if p.location == location]


@dataclass(frozen=True, slots=True)
class SecurityScheme:
    """
    Security scheme from the document's component table.

    Attributes:
        type: http, apiKey, oauth2 or openIdConnect
        scheme: For http: "bearer" or "basic"
        location: For apiKey: header, query or cookie
        name: Header, query parameter or cookie name for apiKey
    """

    type: str
    scheme: str = ""
    location: str = ""
    name: str = ""

    @property
    def kind(self) -> str:
        """Normalized kind: http-bearer, http-basic, apiKey, oauth2 or the raw type."""
        if self.type == "http":
            return f"http-{self.scheme.lower()}" if self.scheme else "http"
        return self.type


@dataclass(frozen=True, slots=True)
class ExternalDocs:
    url: str
    description: str = ""


@dataclass(frozen=True, slots=True)
class APIDocument:
    """
    Document-level metadata needed at registration and dispatch time.
    """

    title: str = ""
    version: str = ""
    description: str = ""
    terms_of_service: str = ""
    servers: tuple[str, ...] = ()
    security_schemes: Mapping[str, SecurityScheme] = field(default_factory=dict)
    external_docs: ExternalDocs | None = None


@dataclass(frozen=True)
class ToolGenOptions:
    """
    Options recognized by the registrar.

    Attributes:
        tag_filter: Only operations with at least one of these tags
        operation_ids: Only operations with these ids
        include_description: Regex the description must match
        exclude_description: Regex the description must not match
        name_format: Maps an operation id to a tool name
        post_process_schema: Applied once to each assembled schema
        dry_run: Collect and print tool summaries instead of registering
        pretty_print: Indent the dry-run JSON
        confirm_dangerous_actions: Require `__confirmed: true` for POST/PUT/DELETE
        version: Document version shown in annotation titles
        transport: Async callable sending an httpx.Request
        base_url: Overrides env and document servers
        credentials_provider: Default credential source when a call has no context
        output: Stream for the dry-run summary (stdout when None)
    """

    tag_filter: tuple[str, ...] = ()
    operation_ids: tuple[str, ...] = ()
    include_description: str | None = None
    exclude_description: str | None = None
    name_format: Callable[[str], str] | None = None
    post_process_schema: Callable[[SchemaNode], SchemaNode] | None = None
    dry_run: bool = False
    pretty_print: bool = False
    confirm_dangerous_actions: bool = True
    version: str = ""
    transport: Transport | None = None
    base_url: str | None = None
    credentials_provider: Callable[[], Credentials] | None = None
    output: IO[str] | None = None


def first_type(schema: Mapping[str, Any]) -> str | None:
    """Declared type of a schema; the first entry when a list of types is given."""
    declared = schema.get("type")
    if isinstance(declared, list):
        return declared[0] if declared else None
    return declared


def base_media_type(media_type: str) -> str:
    """Media type without parameters ("application/json; charset=utf-8" -> "application/json")."""
    return media_type.split(";", 1)[0].strip().lower()
