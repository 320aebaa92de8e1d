"""Cooperative cancellation and deadlines for suspending protocol calls.

Every call that waits on the peer (handshake, page fetch, tool call)
accepts a :class:`RequestOptions`. :func:`wait_for_response` races the
response against the deadline and the caller's :class:`CancelToken`,
and abandons the response task when either fires first.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, TypeVar

from toolwire.core.errors import Cancelled, TimedOut

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

T = TypeVar("T")


class CancelToken:
    """Explicit cancellation signal threaded through suspending calls.

    Cancelling is idempotent; the first reason wins.
    """

    def __init__(self) -> None:
        self._event = asyncio.Event()
        self._reason: str | None = None

    def cancel(self, reason: str | None = None) -> None:
        """Signal cancellation to every waiter holding this token."""
        if self._event.is_set():
            return
        self._reason = reason
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    @property
    def reason(self) -> str | None:
        return self._reason

    async def wait(self) -> None:
        """Suspend until :meth:`cancel` is called."""
        await self._event.wait()

    def raise_if_cancelled(self) -> None:
        """Raise :class:`Cancelled` if the token already fired."""
        if self._event.is_set():
            raise Cancelled(self._reason or "Operation cancelled")


@dataclass(frozen=True, slots=True)
class RequestOptions:
    """Per-call deadline and cancellation settings.

    ``timeout`` bounds a single request; ``max_total_timeout`` caps it
    regardless of ``timeout``. Both are in seconds.
    """

    timeout: float | None = None
    max_total_timeout: float | None = None
    cancel: CancelToken | None = None

    @property
    def deadline(self) -> float | None:
        """Effective wait bound in seconds, or None for no bound."""
        bounds = [t for t in (self.timeout, self.max_total_timeout) if t is not None]
        return min(bounds) if bounds else None

    def with_defaults(self, defaults: RequestOptions | None) -> RequestOptions:
        """Fill unset fields from *defaults*."""
        if defaults is None:
            return self
        return replace(
            self,
            timeout=self.timeout if self.timeout is not None else defaults.timeout,
            max_total_timeout=(
                self.max_total_timeout
                if self.max_total_timeout is not None
                else defaults.max_total_timeout
            ),
            cancel=self.cancel if self.cancel is not None else defaults.cancel,
        )


def _discard_outcome(task: asyncio.Future[object]) -> None:
    # Retrieve the exception of an abandoned task so asyncio does not log it.
    if not task.cancelled():
        task.exception()


async def wait_for_response(
    fn: Callable[[], Awaitable[T]],
    options: RequestOptions | None = None,
) -> T:
    """Await ``fn()`` unless the deadline or the cancel token fires first.

    Args:
        fn: Zero-arg callable returning the awaitable response.
        options: Deadline and cancellation settings.

    Returns:
        The response.

    Raises:
        Cancelled: The token fired before the response arrived.
        TimedOut: The deadline elapsed before the response arrived.
    """
    opts = options or RequestOptions()
    token = opts.cancel
    if token is not None:
        token.raise_if_cancelled()

    response: asyncio.Future[T] = asyncio.ensure_future(fn())
    waiters: set[asyncio.Future[object]] = {response}  # type: ignore[arg-type]
    cancel_waiter: asyncio.Future[None] | None = None
    if token is not None:
        cancel_waiter = asyncio.ensure_future(token.wait())
        waiters.add(cancel_waiter)  # type: ignore[arg-type]

    try:
        done, _ = await asyncio.wait(
            waiters,
            timeout=opts.deadline,
            return_when=asyncio.FIRST_COMPLETED,
        )
    except BaseException:
        response.cancel()
        raise
    finally:
        if cancel_waiter is not None:
            cancel_waiter.cancel()

    # A fired token wins even if the reply landed in the same loop turn.
    cancelled = token is not None and token.cancelled
    if response in done and not cancelled:
        return response.result()

    # Stop waiting; a late reply can no longer resolve this call.
    response.cancel()
    response.add_done_callback(_discard_outcome)
    if cancelled:
        assert token is not None
        raise Cancelled(token.reason or "Operation cancelled")
    raise TimedOut(opts.deadline)
