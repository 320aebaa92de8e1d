"""Transport interface and a JSON-RPC over HTTP implementation.

The protocol layer depends only on the :class:`Transport` protocol.
:class:`HttpTransport` is one concrete collaborator built on httpx.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

import httpx

from toolwire.core.errors import (
    RemoteError,
    SchemaValidationError,
    TimedOut,
    TransportError,
)
from toolwire.protocol.registry import SchemaRegistry, default_registry
from toolwire.protocol.types import JSONRPCResponse

if TYPE_CHECKING:
    from toolwire.core.cancel import RequestOptions
    from toolwire.protocol.types import JSONRPCNotification, JSONRPCRequest

logger = logging.getLogger(__name__)


@runtime_checkable
class Transport(Protocol):
    """Delivers protocol messages to a server.

    Implementations own the wire encoding. They must return the raw
    ``result`` object of the reply correlated to ``message.id``, or raise.
    """

    async def send(self, message: JSONRPCRequest, options: RequestOptions) -> dict[str, Any]:
        """Send a request and return the raw result payload.

        Raises:
            RemoteError: The server replied with an error object.
            TransportError: The message could not be delivered.
        """
        ...

    def notify(self, message: JSONRPCNotification) -> None:
        """Send a notification without waiting for any acknowledgment."""
        ...

    async def close(self) -> None:
        """Release underlying connections."""
        ...


class HttpTransport:
    """JSON-RPC 2.0 over HTTP POST.

    Each request is POSTed to ``url`` and the reply body is the JSON-RPC
    response. Notifications are posted from background tasks so the
    caller never waits on them.

    Usage::

        transport = HttpTransport("http://localhost:3000/mcp")
        async with ToolSession(transport) as session:
            tools = await session.tools()
    """

    def __init__(
        self,
        url: str,
        *,
        headers: dict[str, str] | None = None,
        timeout: float = 30.0,
        client: httpx.AsyncClient | None = None,
        registry: SchemaRegistry | None = None,
    ) -> None:
        self._url = url
        self._timeout = timeout
        self._registry = registry or default_registry
        self._client = client or httpx.AsyncClient(
            headers={
                "Accept": "application/json",
                "Content-Type": "application/json",
                **(headers or {}),
            },
            timeout=timeout,
        )
        self._pending: set[asyncio.Task[None]] = set()

    @property
    def url(self) -> str:
        return self._url

    async def send(self, message: JSONRPCRequest, options: RequestOptions) -> dict[str, Any]:
        timeout = options.deadline or self._timeout
        response = await self._post(SchemaRegistry.dump(message), timeout)
        if response.status_code >= 400:
            msg = f"HTTP {response.status_code} for {message.method}: {response.text}"
            raise TransportError(msg)
        try:
            body = response.json()
        except ValueError as e:
            msg = f"Invalid JSON in reply to {message.method}"
            raise TransportError(msg) from e

        envelope = self._registry.validate(JSONRPCResponse, body)
        if envelope.id != message.id:
            msg = f"reply id {envelope.id!r} does not match request id {message.id!r}"
            raise SchemaValidationError("id", msg)
        if envelope.error is not None:
            raise RemoteError(envelope.error.code, envelope.error.message, envelope.error.data)
        if envelope.result is None:
            raise SchemaValidationError("result", "reply carries neither result nor error")
        return envelope.result

    def notify(self, message: JSONRPCNotification) -> None:
        task = asyncio.get_running_loop().create_task(
            self._post_notification(SchemaRegistry.dump(message), message.method)
        )
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def close(self) -> None:
        if self._pending:
            await asyncio.gather(*self._pending, return_exceptions=True)
        await self._client.aclose()

    async def _post(self, payload: dict[str, Any], timeout: float) -> httpx.Response:
        try:
            return await self._client.post(self._url, json=payload, timeout=timeout)
        except httpx.TimeoutException as e:
            raise TimedOut(timeout) from e
        except httpx.HTTPError as e:
            msg = f"Request to {self._url} failed: {e}"
            raise TransportError(msg) from e

    async def _post_notification(self, payload: dict[str, Any], method: str) -> None:
        try:
            response = await self._post(payload, self._timeout)
        except (TransportError, TimedOut) as e:
            logger.warning("Notification %s was not delivered: %s", method, e)
            return
        if response.status_code >= 400:
            logger.warning(
                "Notification %s rejected with HTTP %d", method, response.status_code
            )
