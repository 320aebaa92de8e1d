"""Shared test fixtures for toolwire."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import pytest

from toolwire.client.session import ToolSession

if TYPE_CHECKING:
    from tests.fixtures.transports import FakeTransport as FakeTransportType


@pytest.fixture
def make_transport() -> Any:
    """Factory fixture for FakeTransport with per-method handlers."""
    from tests.fixtures.transports import FakeTransport

    def _make(handlers: dict[str, Any] | None = None, **kwargs: Any) -> FakeTransportType:
        return FakeTransport(handlers, **kwargs)

    return _make


@pytest.fixture
def make_session(make_transport: Any) -> Any:
    """Factory fixture returning an initialized session and its transport."""

    async def _make(
        handlers: dict[str, Any] | None = None,
        **session_kwargs: Any,
    ) -> tuple[ToolSession, FakeTransportType]:
        init_result = session_kwargs.pop("init_result", None)
        transport = make_transport(handlers, init_result=init_result)
        session = ToolSession(transport, **session_kwargs)
        await session.initialize()
        return session, transport

    return _make
