"""
Request-scoped call context.

Carries the per-invocation information a tool needs at execution time:
- Credentials (API key, bearer token, basic auth)
- Caller identity
- Request metadata

Design Principle:
    "Context determines Execution."

    Credentials for a call come from the call's own context, not from
    process-wide state. Concurrent calls from different sessions with
    different credentials never observe each other.

Usage:
    context = CallContext(
        session_id="session-123",
        credentials=Credentials.from_headers(request.headers),
    )
    result = await registry.call("getPet", {"petId": 1}, context=context)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from apibridge.config.schemas import Credentials

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CallContext:
    """
    Context for a single tool invocation.

    Attributes:
        session_id: Identifier of the calling session (informational)
        credentials: Credential set for this call; None means "use the
            tool's default credential provider"
        metadata: Additional request context

    Note:
        This is frozen (immutable) to prevent accidental mutation
        of credentials during tool execution.
    """

    session_id: str | None = None
    credentials: Credentials | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_headers(
        cls,
        headers: Mapping[str, str],
        *,
        session_id: str | None = None,
        base: Credentials | None = None,
    ) -> CallContext:
        """Build a context whose credentials come from inbound HTTP headers."""
        return cls(
            session_id=session_id,
            credentials=Credentials.from_headers(headers, base=base),
        )


def resolve_credentials(
    context: CallContext | None,
    default_provider: Callable[[], Credentials],
) -> Credentials:
    """
    Resolve the credential set for one call.

    The context's credentials win; otherwise the default provider is
    consulted once.
    """
    if context is not None and context.credentials is not None:
        return context.credentials

    credentials = default_provider()
    logger.debug(
        f"[call_context] Using default credentials "
        f"(session_id={context.session_id if context else None})"
    )
    return credentials


def credentials_from_headers(
    headers: Mapping[str, str],
    *,
    base: Credentials | None = None,
) -> Credentials:
    """Request-scoped credential set from inbound HTTP headers."""
    return Credentials.from_headers(headers, base=base)
