"""Exception hierarchy for toolwire.

Every module imports from here. The hierarchy is:

    ToolwireError
    ├── ProtocolError
    │   ├── ProtocolVersionMismatch(supported, offered)
    │   ├── SchemaValidationError(path)
    │   ├── PaginationLoopError(cursor)
    │   ├── UnsupportedCapabilityError(capability, method)
    │   └── RemoteError(code, data)
    ├── ToolCallError(tool_name)
    │   ├── InputValidationError(path)
    │   └── OutputMappingError
    ├── OperationAborted
    │   ├── Cancelled
    │   └── TimedOut(timeout)
    ├── TransportError
    ├── SessionClosedError
    └── ConfigError

Tool-level failures reported by a server (``isError: true``) are not
exceptions. They come back as data on :class:`~toolwire.protocol.content.ToolResult`.
"""

from __future__ import annotations

from typing import Any


class ToolwireError(Exception):
    """Base exception for all toolwire errors."""


# ─── Protocol Errors ──────────────────────────────────────────


class ProtocolError(ToolwireError):
    """Base for violations of the tool protocol contract."""


class ProtocolVersionMismatch(ProtocolError):
    """Server offered a protocol version the client does not support.

    Fatal to session start.
    """

    def __init__(self, supported: tuple[str, ...] | list[str], offered: str) -> None:
        self.supported = tuple(supported)
        self.offered = offered
        super().__init__(
            f"Server protocol version {offered!r} is not supported "
            f"(supported: {', '.join(self.supported)})"
        )


class SchemaValidationError(ProtocolError):
    """A message failed validation. Names the offending path."""

    def __init__(self, path: str, message: str) -> None:
        self.path = path
        self.message = message
        super().__init__(f"Invalid message at {path}: {message}")


class PaginationLoopError(ProtocolError):
    """Server kept returning the same cursor (or too many pages)."""

    def __init__(self, cursor: str, message: str | None = None) -> None:
        self.cursor = cursor
        super().__init__(message or f"Pagination loop detected: cursor {cursor!r} repeated")


class UnsupportedCapabilityError(ProtocolError):
    """Request needs a capability the server did not declare."""

    def __init__(self, capability: str, method: str) -> None:
        self.capability = capability
        self.method = method
        super().__init__(f"Server does not support {capability} (required for {method})")


class RemoteError(ProtocolError):
    """Server answered a request with a JSON-RPC error object."""

    def __init__(self, code: int, message: str, data: Any = None) -> None:
        self.code = code
        self.data = data
        super().__init__(f"Remote error {code}: {message}")


# ─── Tool Call Errors ─────────────────────────────────────────


class ToolCallError(ToolwireError):
    """Base for errors fatal to a single tool call."""

    def __init__(self, tool_name: str, message: str) -> None:
        self.tool_name = tool_name
        super().__init__(f"[{tool_name}] {message}")


class InputValidationError(ToolCallError):
    """Tool input did not match its declared schema. Nothing was sent."""

    def __init__(self, tool_name: str, path: str, message: str) -> None:
        self.path = path
        self.message = message
        super().__init__(tool_name, f"Invalid input at {path}: {message}")


class OutputMappingError(ToolCallError):
    """The output mapping function for a tool raised."""


# ─── Aborted Operations ───────────────────────────────────────


class OperationAborted(ToolwireError):
    """Base for operations that stopped waiting before a response arrived."""


class Cancelled(OperationAborted):
    """The caller's cancel token fired."""


class TimedOut(OperationAborted):
    """The deadline elapsed before a response arrived."""

    def __init__(self, timeout: float | None = None, message: str | None = None) -> None:
        self.timeout = timeout
        if message is None:
            message = "Request timed out"
            if timeout is not None:
                message += f" after {timeout}s"
        super().__init__(message)


# ─── Transport / Lifecycle Errors ─────────────────────────────


class TransportError(ToolwireError):
    """The transport failed to deliver a message or read its reply."""


class SessionClosedError(ToolwireError):
    """Session is closed, failed negotiation, or was never initialized."""


# ─── Configuration Errors ─────────────────────────────────────


class ConfigError(ToolwireError):
    """Invalid configuration."""
