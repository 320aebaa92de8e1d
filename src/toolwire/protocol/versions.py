"""Protocol version negotiation."""

from __future__ import annotations

from typing import TYPE_CHECKING

from toolwire.core.errors import ProtocolVersionMismatch
from toolwire.protocol.types import LATEST_PROTOCOL_VERSION, SUPPORTED_PROTOCOL_VERSIONS

if TYPE_CHECKING:
    from collections.abc import Sequence

__all__ = [
    "LATEST_PROTOCOL_VERSION",
    "SUPPORTED_PROTOCOL_VERSIONS",
    "negotiate_version",
]


def negotiate_version(
    offered: str,
    supported: Sequence[str] = SUPPORTED_PROTOCOL_VERSIONS,
) -> str:
    """Pick the session's protocol version from the server's offer.

    The client always proposes its most preferred version; the server
    answers with the version it will speak. That answer is adopted only
    if the client supports it. One-shot, no retries.

    Raises:
        ProtocolVersionMismatch: If *offered* is not in *supported*.
    """
    if offered in supported:
        return offered
    raise ProtocolVersionMismatch(tuple(supported), offered)
