"""
Dispatch exceptions.

Validation failures and upstream HTTP errors are reported inside a
ToolResult. Only failures that make the call itself impossible are raised.
"""

from __future__ import annotations


class DispatchError(Exception):
    """Base class for failures raised while dispatching a tool call."""

    def __init__(self, message: str, *, operation_id: str | None = None):
        super().__init__(message)
        self.operation_id = operation_id


class RequestBuildError(DispatchError):
    """The outbound request could not be constructed (e.g. malformed URL)."""

    pass


class TransportError(DispatchError):
    """The transport failed (network, DNS, timeout). Never retried."""

    pass
