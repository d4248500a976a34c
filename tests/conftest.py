"""
Pytest configuration and fixtures for apibridge tests.
"""

import sys
from pathlib import Path

import httpx
import pytest

# Add the repository root to path for imports
# This allows `from apibridge.tools import ...` to work
repo_root = Path(__file__).parent.parent
if str(repo_root) not in sys.path:
    sys.path.insert(0, str(repo_root))

from apibridge.config import get_settings  # noqa: E402
from apibridge.config.schemas import Credentials  # noqa: E402
from apibridge.tools.openapi.models import (  # noqa: E402
    APIDocument,
    ExternalDocs,
    Operation,
    Parameter,
    RequestBody,
    SecurityScheme,
)


CREDENTIAL_ENV_VARS = (
    "API_KEY",
    "API_KEY_HEADER",
    "BEARER_TOKEN",
    "BASIC_AUTH",
    "OPENAPI_BASE_URL",
    "MCP_LOG_HTTP",
    "DEBUG",
)


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Every test starts without credentials or overrides in the environment."""
    for name in CREDENTIAL_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


class RecordingTransport:
    """Fake transport returning canned responses and recording requests."""

    def __init__(self, *responses: httpx.Response):
        self._responses = list(responses) or [httpx.Response(200, json={"ok": True})]
        self.requests: list[httpx.Request] = []

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        response = self._responses.pop(0) if len(self._responses) > 1 else self._responses[0]
        response.request = request
        return response

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]


@pytest.fixture
def transport():
    """Transport answering 200 {"ok": true} to everything."""
    return RecordingTransport()


@pytest.fixture
def no_credentials():
    """Credential provider returning an empty credential set."""
    return lambda: Credentials()


@pytest.fixture
def get_pet_operation():
    """GET /pets/{petId} with an integer path parameter."""
    return Operation(
        operation_id="getPet",
        method="get",
        path="/pets/{petId}",
        summary="Get a pet",
        description="Fetch a single pet by id",
        tags=("pets",),
        parameters=(
            Parameter(
                name="petId",
                location="path",
                required=True,
                schema={"type": "integer"},
                description="Pet identifier",
            ),
        ),
    )


@pytest.fixture
def create_pet_operation():
    """POST /pets with a required JSON body."""
    return Operation(
        operation_id="createPet",
        method="post",
        path="/pets",
        summary="Create a pet",
        tags=("pets",),
        request_body=RequestBody(
            required=True,
            content={
                "application/json": {
                    "type": "object",
                    "properties": {
                        "name": {"type": "string"},
                        "status": {"type": "string", "enum": ["available", "sold"]},
                    },
                    "required": ["name"],
                }
            },
        ),
    )


@pytest.fixture
def list_pets_operation():
    """GET /pets with query filters, one of them bracketed."""
    return Operation(
        operation_id="listPets",
        method="get",
        path="/pets",
        summary="List pets",
        tags=("pets", "search"),
        parameters=(
            Parameter(name="limit", location="query", schema={"type": "integer"}),
            Parameter(name="tags", location="query", schema={"type": "array", "items": {"type": "string"}}),
            Parameter(name="filter[status]", location="query", schema={"type": "string"}),
        ),
    )


@pytest.fixture
def pet_document():
    """Document with a server, API key scheme and external docs."""
    return APIDocument(
        title="Pet Store",
        version="1.0.0",
        description="A sample pet store",
        terms_of_service="https://example.com/terms",
        servers=("https://api.example.com/v1",),
        security_schemes={
            "ApiKeyAuth": SecurityScheme(type="apiKey", location="header", name="X-Key"),
            "BearerAuth": SecurityScheme(type="http", scheme="bearer"),
            "BasicAuth": SecurityScheme(type="http", scheme="basic"),
            "QueryKey": SecurityScheme(type="apiKey", location="query", name="api_key"),
            "CookieKey": SecurityScheme(type="apiKey", location="cookie", name="session"),
        },
        external_docs=ExternalDocs(url="https://docs.example.com", description="Full docs"),
    )


@pytest.fixture
def respond_with():
    """Factory for transports answering with the given responses."""
    return RecordingTransport
