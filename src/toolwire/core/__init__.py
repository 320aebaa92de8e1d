"""Core errors and cancellation primitives."""

from toolwire.core.cancel import CancelToken, RequestOptions, wait_for_response
from toolwire.core.errors import (
    Cancelled,
    ConfigError,
    InputValidationError,
    OperationAborted,
    OutputMappingError,
    PaginationLoopError,
    ProtocolError,
    ProtocolVersionMismatch,
    RemoteError,
    SchemaValidationError,
    SessionClosedError,
    TimedOut,
    ToolCallError,
    ToolwireError,
    TransportError,
    UnsupportedCapabilityError,
)

__all__ = [
    "CancelToken",
    "Cancelled",
    "ConfigError",
    "InputValidationError",
    "OperationAborted",
    "OutputMappingError",
    "PaginationLoopError",
    "ProtocolError",
    "ProtocolVersionMismatch",
    "RemoteError",
    "RequestOptions",
    "SchemaValidationError",
    "SessionClosedError",
    "TimedOut",
    "ToolCallError",
    "ToolwireError",
    "TransportError",
    "UnsupportedCapabilityError",
    "wait_for_response",
]
