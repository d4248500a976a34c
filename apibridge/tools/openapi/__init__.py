"""
OpenAPI operations as tools.

Each operation of an API description becomes one tool with a validation
schema, an agent-oriented description and a dispatcher that performs the
HTTP call.

Usage:
    registry = ToolRegistry()
    register_openapi_tools(registry, operations, document, ToolGenOptions())
"""

from .description import generate_description
from .dispatcher import OpenAPIOperationTool
from .errors import DispatchError, RequestBuildError, TransportError
from .examples import build_example_arguments, generate_example_value
from .guidance import guidance_for_status
from .meta import TIMESTAMP_RESOURCE_URI, ExternalDocsTool, InfoTool
from .models import (
    APIDocument,
    ExternalDocs,
    Operation,
    Parameter,
    RequestBody,
    SecurityScheme,
    ToolGenOptions,
)
from .naming import build_parameter_name_mapping, escape_parameter_name, unescape_parameter_name
from .registrar import register_openapi_tools, tool_name_formatter
from .schema import (
    SchemaNode,
    assemble_schema,
    build_input_schema,
    has_date_time_parameters,
    translate_schema,
)
from .transport import HttpxTransport, Transport
from .validation import validate_arguments

__all__ = [
    # Model
    "APIDocument",
    "ExternalDocs",
    "Operation",
    "Parameter",
    "RequestBody",
    "SecurityScheme",
    "ToolGenOptions",
    # Schema
    "SchemaNode",
    "assemble_schema",
    "build_input_schema",
    "translate_schema",
    "has_date_time_parameters",
    "escape_parameter_name",
    "unescape_parameter_name",
    "build_parameter_name_mapping",
    # Descriptions and examples
    "generate_description",
    "generate_example_value",
    "build_example_arguments",
    "guidance_for_status",
    "validate_arguments",
    # Tools
    "OpenAPIOperationTool",
    "InfoTool",
    "ExternalDocsTool",
    "TIMESTAMP_RESOURCE_URI",
    "register_openapi_tools",
    "tool_name_formatter",
    # Transport
    "HttpxTransport",
    "Transport",
    # Errors
    "DispatchError",
    "RequestBuildError",
    "TransportError",
]
