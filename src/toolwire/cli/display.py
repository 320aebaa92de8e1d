"""Rich rendering for server info, tool catalogs, and tool results."""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from toolwire.protocol.types import (
    BlobResourceContents,
    EmbeddedResource,
    ImageContent,
    TextContent,
)

if TYPE_CHECKING:
    from collections.abc import Sequence

    from toolwire.protocol.capabilities import CapabilityRegistry
    from toolwire.protocol.content import ToolResult
    from toolwire.protocol.types import Implementation, ToolDescriptor

_TRUNCATE_LEN = 80


def _truncate(text: str, limit: int = _TRUNCATE_LEN) -> str:
    """Truncate text to *limit* characters with an ellipsis."""
    if len(text) <= limit:
        return text
    return text[:limit].rstrip() + " ..."


class SessionDisplay:
    """Renders session output. Accepts a Console for tests."""

    def __init__(self, console: Console | None = None) -> None:
        self._console = console or Console()

    def show_server(
        self,
        server_info: Implementation,
        protocol_version: str,
        capabilities: CapabilityRegistry,
        instructions: str | None = None,
    ) -> None:
        body = Text()
        body.append(f"{server_info.name} {server_info.version}\n", style="bold")
        body.append(f"Protocol: {protocol_version}\n")
        declared = [
            name
            for name in ("tools", "prompts", "resources", "logging", "experimental")
            if capabilities.declares(name)
        ]
        body.append(f"Capabilities: {', '.join(declared) or '(none)'}")
        if capabilities.tools_list_changed:
            body.append("\nTool list changes are announced")
        if instructions:
            body.append(f"\n\n{instructions}", style="dim")
        self._console.print(Panel(body, title="Server", border_style="cyan"))

    def show_tools(self, tools: Sequence[ToolDescriptor]) -> None:
        if not tools:
            self._console.print("No tools offered.")
            return
        table = Table(title=f"Tools ({len(tools)})")
        table.add_column("Name", style="bold")
        table.add_column("Description")
        table.add_column("Parameters", style="dim")
        for tool in tools:
            params = ", ".join(sorted((tool.input_schema.properties or {}).keys()))
            table.add_row(tool.name, _truncate(tool.description or ""), params)
        self._console.print(table)

    def show_result(self, name: str, result: ToolResult) -> None:
        style = "red" if result.is_error else "green"
        title = f"{name} ({'error' if result.is_error else 'ok'})"
        body = Text()
        for part in result.content:
            if isinstance(part, TextContent):
                body.append(part.text + "\n")
            elif isinstance(part, ImageContent):
                body.append(f"[image {part.mime_type}, {len(part.decode())} bytes]\n", style="dim")
            elif isinstance(part, EmbeddedResource):
                resource = part.resource
                if isinstance(resource, BlobResourceContents):
                    size = len(resource.decode())
                    body.append(f"[resource {resource.uri}, {size} bytes]\n", style="dim")
                else:
                    body.append(f"[resource {resource.uri}]\n", style="dim")
                    body.append(resource.text + "\n")
        self._console.print(Panel(body, title=title, border_style=style))
