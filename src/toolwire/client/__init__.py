"""Client session, transports, catalog pagination, and tool proxies."""

from toolwire.client.pagination import CatalogPaginator
from toolwire.client.proxy import ToolProxy, generate_proxies
from toolwire.client.session import SessionState, ToolSession
from toolwire.client.transport import HttpTransport, Transport

__all__ = [
    "CatalogPaginator",
    "HttpTransport",
    "SessionState",
    "ToolProxy",
    "ToolSession",
    "Transport",
    "generate_proxies",
]
