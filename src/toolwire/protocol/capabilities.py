"""Capability registry built from the server's handshake declaration."""

from __future__ import annotations

from typing import Any

from toolwire.core.errors import UnsupportedCapabilityError
from toolwire.protocol.types import ServerCapabilities

# Request method prefix -> capability the server must declare.
_METHOD_CAPABILITIES: tuple[tuple[str, str], ...] = (
    ("tools/", "tools"),
    ("prompts/", "prompts"),
    ("resources/", "resources"),
    ("logging/", "logging"),
)


class CapabilityRegistry:
    """Read-only view over a server's declared capabilities.

    A capability whose key is absent is "not declared"; an empty object
    means "declared with defaults". Queries never mutate state, so the
    registry can be shared freely between concurrent tool calls.
    """

    __slots__ = ("_capabilities",)

    def __init__(self, capabilities: ServerCapabilities | None = None) -> None:
        self._capabilities = capabilities or ServerCapabilities()

    @property
    def raw(self) -> ServerCapabilities:
        return self._capabilities

    def declares(self, name: str) -> bool:
        """Whether the server declared capability *name* at all."""
        return self.get(name) is not None

    def get(self, name: str) -> Any:
        """Return the declared sub-object for *name*, or None."""
        if name in ServerCapabilities.model_fields:
            return getattr(self._capabilities, name)
        return (self._capabilities.model_extra or {}).get(name)

    # ── Feature queries ──────────────────────────────────────────

    @property
    def tools_list_changed(self) -> bool:
        tools = self._capabilities.tools
        return bool(tools and tools.list_changed)

    @property
    def prompts_list_changed(self) -> bool:
        prompts = self._capabilities.prompts
        return bool(prompts and prompts.list_changed)

    @property
    def resources_subscribe(self) -> bool:
        resources = self._capabilities.resources
        return bool(resources and resources.subscribe)

    @property
    def resources_list_changed(self) -> bool:
        resources = self._capabilities.resources
        return bool(resources and resources.list_changed)

    @property
    def supports_logging(self) -> bool:
        return self._capabilities.logging is not None

    def experimental(self, name: str) -> Any:
        """Return the experimental capability *name*, or None."""
        return (self._capabilities.experimental or {}).get(name)

    # ── Gating ───────────────────────────────────────────────────

    def capability_for_method(self, method: str) -> str | None:
        """Capability a request *method* depends on, if any."""
        for prefix, capability in _METHOD_CAPABILITIES:
            if method.startswith(prefix):
                return capability
        return None

    def require_for_method(self, method: str) -> None:
        """Raise if *method* depends on a capability the server lacks.

        Raises:
            UnsupportedCapabilityError: The capability was not declared.
        """
        capability = self.capability_for_method(method)
        if capability is not None and not self.declares(capability):
            raise UnsupportedCapabilityError(capability, method)

    def __repr__(self) -> str:
        declared = [
            name
            for name in (*ServerCapabilities.model_fields, *(self._capabilities.model_extra or {}))
            if self.declares(name)
        ]
        return f"CapabilityRegistry(declared={declared})"
