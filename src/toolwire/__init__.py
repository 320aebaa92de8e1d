"""toolwire - versioned tool-invocation protocol client."""

__version__ = "0.1.0"

from toolwire.client import (  # noqa: E402
    CatalogPaginator,
    HttpTransport,
    ToolProxy,
    ToolSession,
    Transport,
    generate_proxies,
)
from toolwire.core import CancelToken, RequestOptions  # noqa: E402
from toolwire.protocol import ToolResult  # noqa: E402

__all__ = [
    "CancelToken",
    "CatalogPaginator",
    "HttpTransport",
    "RequestOptions",
    "ToolProxy",
    "ToolResult",
    "ToolSession",
    "Transport",
    "__version__",
    "generate_proxies",
]
