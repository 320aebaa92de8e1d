"""Client session: handshake, request correlation, and tool access.

A session moves through these states::

    new ──initialize()──> initializing ──> ready ──close()──> closed
     ^                        │    └──── version mismatch ──────┘
     └──── handshake failed ──┘

Only the handshake may be in flight while initializing, and only one
handshake at a time. Nothing may be sent once the session is closed.
"""

from __future__ import annotations

import enum
import itertools
import logging
from typing import TYPE_CHECKING, Any, cast

from toolwire.core.cancel import RequestOptions, wait_for_response
from toolwire.core.errors import ProtocolVersionMismatch, SessionClosedError
from toolwire.protocol.capabilities import CapabilityRegistry
from toolwire.protocol.content import ToolResult, normalize_tool_result
from toolwire.protocol.registry import SchemaRegistry, default_registry
from toolwire.protocol.types import (
    LATEST_PROTOCOL_VERSION,
    SUPPORTED_PROTOCOL_VERSIONS,
    CallToolParams,
    CallToolResult,
    ClientCapabilities,
    Implementation,
    InitializeParams,
    InitializeResult,
    JSONRPCNotification,
    JSONRPCRequest,
    LegacyToolResult,
    Notification,
    Params,
    Request,
)
from toolwire.protocol.versions import negotiate_version

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence
    from types import TracebackType

    from toolwire.client.pagination import CatalogPaginator
    from toolwire.client.proxy import OutputMapper, ToolProxy, ToolSchemas
    from toolwire.client.transport import Transport
    from toolwire.protocol.types import ListToolsResult, Result, ToolDescriptor

logger = logging.getLogger(__name__)

DEFAULT_CLIENT_INFO = Implementation(name="toolwire", version="0.1.0")

# Methods that are never gated on a server capability.
_UNGATED_METHODS = frozenset({"initialize", "ping"})


def _build_message(
    kind: type[Request],
    method: str,
    params: Params | Mapping[str, Any] | None,
) -> Request | dict[str, Any]:
    if isinstance(params, Params):
        return kind(method=method, params=params)
    message: dict[str, Any] = {"method": method}
    if params is not None:
        message["params"] = dict(params)
    return message


def _envelope_fields(request: Request) -> dict[str, Any]:
    # Absent params stay absent on the wire rather than null.
    fields: dict[str, Any] = {"method": request.method}
    if request.params is not None:
        fields["params"] = request.params
    return fields


class SessionState(enum.Enum):
    NEW = "new"
    INITIALIZING = "initializing"
    READY = "ready"
    CLOSED = "closed"


class ToolSession:
    """A negotiated connection to one tool server.

    The negotiated version, server info and capability registry are
    fixed by :meth:`initialize` and read-only afterwards, so any number
    of tool proxies may use the session concurrently.

    Usage::

        async with ToolSession(HttpTransport(url)) as session:
            tools = await session.tools()
            result = await tools["search"].execute({"query": "x"})
    """

    def __init__(
        self,
        transport: Transport,
        *,
        client_info: Implementation | None = None,
        capabilities: ClientCapabilities | None = None,
        supported_versions: Sequence[str] = SUPPORTED_PROTOCOL_VERSIONS,
        registry: SchemaRegistry | None = None,
        default_options: RequestOptions | None = None,
        max_pages: int = 1000,
    ) -> None:
        self._transport = transport
        self._client_info = client_info or DEFAULT_CLIENT_INFO
        self._client_capabilities = capabilities or ClientCapabilities()
        self._supported_versions = tuple(supported_versions)
        self._registry = registry or default_registry
        self._default_options = default_options
        self._max_pages = max_pages
        self._ids = itertools.count(1)
        self._state = SessionState.NEW
        self._init_result: InitializeResult | None = None
        self._protocol_version: str | None = None
        self._capabilities: CapabilityRegistry | None = None
        self._paginator: CatalogPaginator | None = None

    # ── Lifecycle ────────────────────────────────────────────────

    async def __aenter__(self) -> ToolSession:
        if self._state is SessionState.NEW:
            await self.initialize()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.close()

    async def initialize(self, options: RequestOptions | None = None) -> InitializeResult:
        """Run the handshake and negotiate the protocol version.

        Raises:
            ProtocolVersionMismatch: The server's version is unsupported.
                The session is closed and unusable afterwards.
            SessionClosedError: The session was already initialized or closed.
        """
        if self._state is not SessionState.NEW:
            msg = f"Cannot initialize a session in state {self._state.value!r}"
            raise SessionClosedError(msg)
        self._state = SessionState.INITIALIZING

        params = InitializeParams(
            protocol_version=self._preferred_version,
            capabilities=self._client_capabilities,
            client_info=self._client_info,
        )
        try:
            result = cast(
                "InitializeResult",
                await self.request("initialize", params, options=options),
            )
        except BaseException:
            # A failed handshake may be retried.
            if self._state is SessionState.INITIALIZING:
                self._state = SessionState.NEW
            raise

        try:
            version = negotiate_version(result.protocol_version, self._supported_versions)
        except ProtocolVersionMismatch:
            logger.warning(
                "Server %s offered unsupported protocol version %s",
                result.server_info.name,
                result.protocol_version,
            )
            await self.close()
            raise

        self._init_result = result
        self._protocol_version = version
        self._capabilities = CapabilityRegistry(result.capabilities)
        self._state = SessionState.READY
        logger.debug(
            "Initialized session with %s %s (protocol %s)",
            result.server_info.name,
            result.server_info.version,
            version,
        )
        self.notify("notifications/initialized")
        return result

    async def close(self) -> None:
        """Close the transport. Idempotent."""
        if self._state is SessionState.CLOSED:
            return
        self._state = SessionState.CLOSED
        await self._transport.close()

    @property
    def _preferred_version(self) -> str:
        if self._supported_versions:
            return self._supported_versions[0]
        return LATEST_PROTOCOL_VERSION

    # ── Negotiated state ─────────────────────────────────────────

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def protocol_version(self) -> str:
        self._require_ready()
        assert self._protocol_version is not None
        return self._protocol_version

    @property
    def capabilities(self) -> CapabilityRegistry:
        self._require_ready()
        assert self._capabilities is not None
        return self._capabilities

    @property
    def server_info(self) -> Implementation:
        self._require_ready()
        assert self._init_result is not None
        return self._init_result.server_info

    @property
    def instructions(self) -> str | None:
        self._require_ready()
        assert self._init_result is not None
        return self._init_result.instructions

    @property
    def registry(self) -> SchemaRegistry:
        return self._registry

    def _require_ready(self) -> ToolSession:
        if self._state is not SessionState.READY:
            msg = f"Session is {self._state.value}, not ready"
            raise SessionClosedError(msg)
        return self

    # ── Messaging ────────────────────────────────────────────────

    def _next_id(self) -> int:
        return next(self._ids)

    async def request(
        self,
        method: str,
        params: Params | Mapping[str, Any] | None = None,
        *,
        options: RequestOptions | None = None,
    ) -> Result:
        """Send a request and return its validated result.

        Each request gets a session-unique id. The result is validated
        against the schema registered for *method*.

        Raises:
            SessionClosedError: Session not ready (or closed).
            UnsupportedCapabilityError: *method* needs an undeclared capability.
            SchemaValidationError: Outbound params or inbound result invalid.
            Cancelled, TimedOut: Stopped waiting for the reply.
        """
        if method == "initialize":
            if self._state is not SessionState.INITIALIZING:
                msg = "Use initialize() to run the handshake"
                raise SessionClosedError(msg)
        else:
            self._require_ready()
        if self._capabilities is not None and method not in _UNGATED_METHODS:
            self._capabilities.require_for_method(method)

        request = self._registry.validate_request(_build_message(Request, method, params))
        message = JSONRPCRequest(
            jsonrpc="2.0",
            id=self._next_id(),
            **_envelope_fields(request),
        )
        opts = (options or RequestOptions()).with_defaults(self._default_options)
        logger.debug("-> %s (id=%s)", method, message.id)
        payload = await wait_for_response(lambda: self._transport.send(message, opts), opts)
        logger.debug("<- %s (id=%s)", method, message.id)
        return self._registry.validate_result(method, payload)

    def notify(
        self,
        method: str,
        params: Params | Mapping[str, Any] | None = None,
    ) -> None:
        """Send a notification. Never waits for the peer."""
        self._require_ready()
        notification = self._registry.validate_request(
            _build_message(Notification, method, params)
        )
        self._transport.notify(
            JSONRPCNotification(
                jsonrpc="2.0",
                **_envelope_fields(notification),
            )
        )

    # ── Tools ────────────────────────────────────────────────────

    @property
    def paginator(self) -> CatalogPaginator:
        if self._paginator is None:
            from toolwire.client.pagination import CatalogPaginator

            self._paginator = CatalogPaginator(self, max_pages=self._max_pages)
        return self._paginator

    async def list_tools(
        self,
        cursor: str | None = None,
        *,
        options: RequestOptions | None = None,
    ) -> ListToolsResult:
        """Fetch one page of the tool catalog."""
        return await self.paginator.list_tools(cursor, options=options)

    async def list_all_tools(
        self,
        *,
        options: RequestOptions | None = None,
    ) -> list[ToolDescriptor]:
        """Fetch the whole tool catalog (all pages, or nothing)."""
        return await self.paginator.list_all_tools(options=options)

    async def call_tool(
        self,
        name: str,
        arguments: Mapping[str, Any] | None = None,
        *,
        options: RequestOptions | None = None,
    ) -> ToolResult:
        """Invoke a tool without input validation and normalize its result.

        Tool-level failures come back as ``ToolResult(is_error=True)``.
        """
        params = CallToolParams(name=name, arguments=dict(arguments or {}))
        wire = cast(
            "CallToolResult | LegacyToolResult",
            await self.request("tools/call", params, options=options),
        )
        return normalize_tool_result(wire)

    async def tools(
        self,
        schemas: ToolSchemas = "automatic",
        *,
        output_mappers: Mapping[str, OutputMapper] | None = None,
        options: RequestOptions | None = None,
    ) -> dict[str, ToolProxy]:
        """Build callable proxies for the server's tools.

        Args:
            schemas: ``"automatic"`` to use each tool's declared input
                schema, or a mapping of tool name to ``{"inputSchema": ...}``
                to expose only those tools with locally supplied schemas.
            output_mappers: Optional per-tool functions applied to
                successful results.
            options: Deadline/cancellation for the catalog fetch.

        Raises:
            SchemaValidationError: A tool declared an input schema that is
                not valid JSON Schema. No proxies are returned; the error
                path starts with ``<tool name>.inputSchema``. Pass explicit
                *schemas* to work around a misbehaving tool.
        """
        from toolwire.client.proxy import generate_proxies

        catalog = await self.list_all_tools(options=options)
        return generate_proxies(
            self,
            catalog,
            schemas,
            output_mappers=output_mappers,
        )
