"""Cursor-paginated tool catalog retrieval."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, cast

from toolwire.core.errors import PaginationLoopError
from toolwire.protocol.types import PaginatedParams

if TYPE_CHECKING:
    from toolwire.client.session import ToolSession
    from toolwire.core.cancel import RequestOptions
    from toolwire.protocol.types import ListToolsResult, ToolDescriptor

logger = logging.getLogger(__name__)


class CatalogPaginator:
    """Fetches ``tools/list`` pages and aggregates the full catalog.

    Holds no aggregation state between calls: two concurrent
    :meth:`list_all_tools` calls are two independent page sequences.
    """

    def __init__(self, session: ToolSession, *, max_pages: int = 1000) -> None:
        if max_pages < 1:
            msg = f"max_pages must be at least 1, got {max_pages}"
            raise ValueError(msg)
        self._session = session
        self._max_pages = max_pages

    @property
    def watches_list_changes(self) -> bool:
        """Whether the server will announce catalog changes."""
        return self._session.capabilities.tools_list_changed

    async def list_tools(
        self,
        cursor: str | None = None,
        *,
        options: RequestOptions | None = None,
    ) -> ListToolsResult:
        """Fetch a single page, starting at *cursor* (first page if None)."""
        params = PaginatedParams(cursor=cursor) if cursor is not None else None
        return cast(
            "ListToolsResult",
            await self._session.request("tools/list", params, options=options),
        )

    async def list_all_tools(
        self,
        *,
        options: RequestOptions | None = None,
    ) -> list[ToolDescriptor]:
        """Fetch every page and concatenate the tools in page order.

        All or nothing: if any page fails, the error propagates and the
        tools gathered so far are dropped.

        Raises:
            PaginationLoopError: A page repeated the cursor it was fetched
                with, or the page limit was exceeded.
        """
        tools: list[ToolDescriptor] = []
        cursor: str | None = None
        pages = 0
        while True:
            page = await self.list_tools(cursor, options=options)
            pages += 1
            tools.extend(page.tools)
            next_cursor = page.next_cursor
            logger.debug(
                "tools/list page %d: %d tools, next cursor %r",
                pages,
                len(page.tools),
                next_cursor,
            )
            if next_cursor is None:
                return tools
            if next_cursor == cursor:
                raise PaginationLoopError(next_cursor)
            if pages >= self._max_pages:
                msg = f"Catalog exceeded {self._max_pages} pages (last cursor {next_cursor!r})"
                raise PaginationLoopError(next_cursor, msg)
            cursor = next_cursor
