"""Content variant decoding and tool result normalization.

Both ``tools/call`` result dialects decode into one :class:`ToolResult`.
Downstream code never sees which wire shape the server used, except
through :attr:`ToolResult.dialect` if it cares to look.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Literal

from pydantic import TypeAdapter, ValidationError

from toolwire.core.errors import SchemaValidationError
from toolwire.protocol.registry import SchemaRegistry, default_registry, format_path
from toolwire.protocol.types import (
    BlobResourceContents,
    CallToolResult,
    ContentPart,
    EmbeddedResource,
    ImageContent,
    LegacyToolResult,
    TextContent,
    TextResourceContents,
)

_CONTENT_ADAPTER: TypeAdapter[TextContent | ImageContent | EmbeddedResource] = TypeAdapter(
    ContentPart
)


@dataclass(frozen=True, slots=True)
class ToolResult:
    """Normalized outcome of a tool call, success or in-band error."""

    content: tuple[TextContent | ImageContent | EmbeddedResource, ...]
    is_error: bool = False
    dialect: Literal["content", "legacy"] = "content"
    value: Any = None  # legacy ``toolResult`` payload; None for the content dialect
    meta: dict[str, Any] | None = None
    raw: CallToolResult | LegacyToolResult | None = field(default=None, repr=False)

    @property
    def text(self) -> str:
        """All text parts (including text resources) joined by newlines."""
        chunks: list[str] = []
        for part in self.content:
            if isinstance(part, TextContent):
                chunks.append(part.text)
            elif isinstance(part, EmbeddedResource) and isinstance(
                part.resource, TextResourceContents
            ):
                chunks.append(part.resource.text)
        return "\n".join(chunks)

    @property
    def images(self) -> list[ImageContent]:
        return [p for p in self.content if isinstance(p, ImageContent)]

    @property
    def resources(self) -> list[TextResourceContents | BlobResourceContents]:
        return [p.resource for p in self.content if isinstance(p, EmbeddedResource)]

    def to_wire(self) -> dict[str, Any]:
        """Serialize back to the wire shape the server sent."""
        if self.raw is None:
            return {
                "content": [SchemaRegistry.dump(p) for p in self.content],
                "isError": self.is_error,
            }
        return SchemaRegistry.dump(self.raw)


def decode_content(raw: Any) -> TextContent | ImageContent | EmbeddedResource:
    """Decode one raw content part by its ``type`` discriminator.

    Raises:
        SchemaValidationError: Unknown type or invalid variant fields.
    """
    if isinstance(raw, TextContent | ImageContent | EmbeddedResource):
        return raw
    try:
        return _CONTENT_ADAPTER.validate_python(raw, by_alias=True, by_name=False)
    except ValidationError as e:
        first = e.errors()[0]
        raise SchemaValidationError(format_path(first["loc"]), first["msg"]) from e


def _legacy_is_error(wire: LegacyToolResult) -> bool:
    extra = wire.model_extra or {}
    if extra.get("isError") is True:
        return True
    value = wire.tool_result
    return isinstance(value, Mapping) and value.get("isError") is True


def _legacy_text(value: Any) -> str:
    if isinstance(value, str):
        return value
    return json.dumps(value, default=str)


def normalize_tool_result(wire: CallToolResult | LegacyToolResult) -> ToolResult:
    """Collapse a validated wire result into a :class:`ToolResult`."""
    if isinstance(wire, CallToolResult):
        return ToolResult(
            content=tuple(wire.content),
            is_error=wire.is_error,
            dialect="content",
            meta=wire.meta,
            raw=wire,
        )
    text = TextContent(type="text", text=_legacy_text(wire.tool_result))
    return ToolResult(
        content=(text,),
        is_error=_legacy_is_error(wire),
        dialect="legacy",
        value=wire.tool_result,
        meta=wire.meta,
        raw=wire,
    )


def decode_tool_result(raw: Any, registry: SchemaRegistry | None = None) -> ToolResult:
    """Validate a raw ``tools/call`` result and normalize it.

    Raises:
        SchemaValidationError: The payload matches neither dialect.
    """
    wire = (registry or default_registry).validate_tool_result(raw)
    return normalize_tool_result(wire)
