"""Wire schemas, version negotiation, capabilities, and content decoding."""

from toolwire.protocol.capabilities import CapabilityRegistry
from toolwire.protocol.content import (
    ToolResult,
    decode_content,
    decode_tool_result,
    normalize_tool_result,
)
from toolwire.protocol.registry import SchemaRegistry, default_registry
from toolwire.protocol.types import (
    BlobResourceContents,
    CallToolResult,
    ClientCapabilities,
    EmbeddedResource,
    ImageContent,
    Implementation,
    InitializeResult,
    LegacyToolResult,
    ListToolsResult,
    Notification,
    Request,
    Result,
    ServerCapabilities,
    TextContent,
    TextResourceContents,
    ToolDescriptor,
)
from toolwire.protocol.versions import (
    LATEST_PROTOCOL_VERSION,
    SUPPORTED_PROTOCOL_VERSIONS,
    negotiate_version,
)

__all__ = [
    "LATEST_PROTOCOL_VERSION",
    "SUPPORTED_PROTOCOL_VERSIONS",
    "BlobResourceContents",
    "CallToolResult",
    "CapabilityRegistry",
    "ClientCapabilities",
    "EmbeddedResource",
    "ImageContent",
    "Implementation",
    "InitializeResult",
    "LegacyToolResult",
    "ListToolsResult",
    "Notification",
    "Request",
    "Result",
    "SchemaRegistry",
    "ServerCapabilities",
    "TextContent",
    "TextResourceContents",
    "ToolDescriptor",
    "ToolResult",
    "decode_content",
    "decode_tool_result",
    "default_registry",
    "negotiate_version",
    "normalize_tool_result",
]
