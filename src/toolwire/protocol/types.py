"""Pydantic models for the tool protocol wire format.

Every message is an open record: known fields are type-checked and any
unrecognized field is kept in ``model_extra`` and written back out by
:meth:`~toolwire.protocol.registry.SchemaRegistry.dump`. Wire names are
camelCase aliases; Python attribute names are snake_case.
"""

from __future__ import annotations

import base64
import binascii
from typing import Annotated, Any, Literal, Union

from pydantic import (
    AfterValidator,
    BaseModel,
    ConfigDict,
    Discriminator,
    Field,
    SerializeAsAny,
    Tag,
    field_validator,
)

LATEST_PROTOCOL_VERSION = "2025-06-18"
SUPPORTED_PROTOCOL_VERSIONS: tuple[str, ...] = (
    LATEST_PROTOCOL_VERSION,
    "2025-03-26",
    "2024-11-05",
)

JSONRPC_VERSION = "2.0"


def _check_base64(value: str) -> str:
    try:
        base64.b64decode(value, validate=True)
    except (binascii.Error, ValueError) as e:
        msg = "must be valid base64"
        raise ValueError(msg) from e
    return value


Base64Str = Annotated[str, AfterValidator(_check_base64)]


class WireModel(BaseModel):
    """Base for all wire messages: open, immutable, alias-aware."""

    model_config = ConfigDict(extra="allow", frozen=True, populate_by_name=True)


# ── Envelopes ────────────────────────────────────────────────────


class Implementation(WireModel):
    """Identifies a client or server peer (``clientInfo``/``serverInfo``)."""

    name: str
    version: str


class Params(WireModel):
    """Base request/notification params; ``_meta`` is reserved passthrough."""

    meta: dict[str, Any] | None = Field(default=None, alias="_meta")


class Request(WireModel):
    method: str
    params: SerializeAsAny[Params] | None = None


class Notification(Request):
    """A one-way message; no reply is expected."""


class Result(WireModel):
    """Base result; method-specific results extend it."""

    meta: dict[str, Any] | None = Field(default=None, alias="_meta")


class JSONRPCRequest(WireModel):
    jsonrpc: Literal["2.0"]
    id: int | str
    method: str
    params: SerializeAsAny[Params] | None = None


class JSONRPCNotification(WireModel):
    jsonrpc: Literal["2.0"]
    method: str
    params: SerializeAsAny[Params] | None = None


class JSONRPCErrorObject(WireModel):
    code: int
    message: str
    data: Any = None


class JSONRPCResponse(WireModel):
    """Reply envelope. ``result`` is left raw for per-method validation."""

    jsonrpc: Literal["2.0"] = JSONRPC_VERSION
    id: int | str | None = None
    result: dict[str, Any] | None = None
    error: JSONRPCErrorObject | None = None


# ── Capabilities / handshake ─────────────────────────────────────


class PromptsCapability(WireModel):
    list_changed: bool | None = Field(default=None, alias="listChanged")


class ResourcesCapability(WireModel):
    subscribe: bool | None = None
    list_changed: bool | None = Field(default=None, alias="listChanged")


class ToolsCapability(WireModel):
    list_changed: bool | None = Field(default=None, alias="listChanged")


class ServerCapabilities(WireModel):
    """Capabilities a server declares. A missing key means "not declared"."""

    experimental: dict[str, Any] | None = None
    logging: dict[str, Any] | None = None
    prompts: PromptsCapability | None = None
    resources: ResourcesCapability | None = None
    tools: ToolsCapability | None = None


class RootsCapability(WireModel):
    list_changed: bool | None = Field(default=None, alias="listChanged")


class ClientCapabilities(WireModel):
    experimental: dict[str, Any] | None = None
    roots: RootsCapability | None = None
    sampling: dict[str, Any] | None = None


class InitializeParams(Params):
    protocol_version: str = Field(alias="protocolVersion")
    capabilities: ClientCapabilities
    client_info: Implementation = Field(alias="clientInfo")


class InitializeResult(Result):
    protocol_version: str = Field(alias="protocolVersion")
    capabilities: ServerCapabilities
    server_info: Implementation = Field(alias="serverInfo")
    instructions: str | None = None


# ── Tool catalog ─────────────────────────────────────────────────


class PaginatedParams(Params):
    cursor: str | None = None


class PaginatedResult(Result):
    """A page; absence of ``nextCursor`` marks the last page."""

    next_cursor: str | None = Field(default=None, alias="nextCursor")

    @field_validator("next_cursor", mode="before")
    @classmethod
    def _cursor_not_null(cls, value: Any) -> Any:
        # Absent means last page; an explicit null is malformed.
        if value is None:
            msg = "nextCursor must be a string when present"
            raise ValueError(msg)
        return value


class ToolInputSchema(WireModel):
    type: Literal["object"]
    properties: dict[str, Any] | None = None


class ToolDescriptor(WireModel):
    """Server-declared tool metadata. Untrusted."""

    name: str
    description: str | None = None
    input_schema: ToolInputSchema = Field(alias="inputSchema")


class ListToolsResult(PaginatedResult):
    tools: list[ToolDescriptor]


class CallToolParams(Params):
    name: str
    arguments: dict[str, Any] | None = None


# ── Content parts ────────────────────────────────────────────────


class TextContent(WireModel):
    type: Literal["text"]
    text: str


class ImageContent(WireModel):
    type: Literal["image"]
    data: Base64Str
    mime_type: str = Field(alias="mimeType")

    def decode(self) -> bytes:
        """Decoded image data."""
        return base64.b64decode(self.data)


class ResourceContents(WireModel):
    uri: str
    mime_type: str | None = Field(default=None, alias="mimeType")


class TextResourceContents(ResourceContents):
    text: str


class BlobResourceContents(ResourceContents):
    blob: Base64Str

    def decode(self) -> bytes:
        """Decoded blob payload."""
        return base64.b64decode(self.blob)


def _resource_kind(value: Any) -> str:
    if isinstance(value, dict):
        return "blob" if "blob" in value else "text"
    return "blob" if isinstance(value, BlobResourceContents) else "text"


class EmbeddedResource(WireModel):
    type: Literal["resource"]
    resource: Annotated[
        Union[  # noqa: UP007
            Annotated[TextResourceContents, Tag("text")],
            Annotated[BlobResourceContents, Tag("blob")],
        ],
        Discriminator(_resource_kind),
    ]

    @field_validator("resource", mode="before")
    @classmethod
    def _exactly_one_payload(cls, value: Any) -> Any:
        if isinstance(value, dict):
            has_text = "text" in value
            has_blob = "blob" in value
            if has_text and has_blob:
                msg = "resource carries both 'text' and 'blob'"
                raise ValueError(msg)
            if not has_text and not has_blob:
                msg = "resource carries neither 'text' nor 'blob'"
                raise ValueError(msg)
        return value


ContentPart = Annotated[
    TextContent | ImageContent | EmbeddedResource,
    Field(discriminator="type"),
]


# ── Tool results (two dialects) ──────────────────────────────────


class CallToolResult(Result):
    """Current dialect: a list of content parts plus an error flag."""

    content: list[ContentPart]
    is_error: bool = Field(default=False, alias="isError")


class LegacyToolResult(Result):
    """Legacy dialect: a single opaque ``toolResult`` value (may be null)."""

    tool_result: Any = Field(alias="toolResult")
