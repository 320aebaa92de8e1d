"""Tests for cancel tokens, request options, and wait_for_response."""

from __future__ import annotations

import asyncio

import pytest

from toolwire.core.cancel import CancelToken, RequestOptions, wait_for_response
from toolwire.core.errors import Cancelled, TimedOut

# ── CancelToken ─────────────────────────────────────────────────────


class TestCancelToken:
    def test_initially_not_cancelled(self) -> None:
        token = CancelToken()
        assert not token.cancelled
        assert token.reason is None
        token.raise_if_cancelled()

    def test_cancel_sets_reason(self) -> None:
        token = CancelToken()
        token.cancel("user abort")
        assert token.cancelled
        assert token.reason == "user abort"

    def test_first_reason_wins(self) -> None:
        token = CancelToken()
        token.cancel("first")
        token.cancel("second")
        assert token.reason == "first"

    def test_raise_if_cancelled(self) -> None:
        token = CancelToken()
        token.cancel()
        with pytest.raises(Cancelled):
            token.raise_if_cancelled()

    async def test_wait_returns_after_cancel(self) -> None:
        token = CancelToken()
        asyncio.get_running_loop().call_soon(token.cancel)
        await asyncio.wait_for(token.wait(), timeout=1.0)
        assert token.cancelled


# ── RequestOptions ──────────────────────────────────────────────────


class TestRequestOptions:
    def test_no_deadline_by_default(self) -> None:
        assert RequestOptions().deadline is None

    def test_deadline_is_smallest_bound(self) -> None:
        assert RequestOptions(timeout=5.0).deadline == 5.0
        assert RequestOptions(max_total_timeout=3.0).deadline == 3.0
        assert RequestOptions(timeout=5.0, max_total_timeout=3.0).deadline == 3.0

    def test_with_defaults_fills_unset(self) -> None:
        token = CancelToken()
        opts = RequestOptions(timeout=1.0).with_defaults(
            RequestOptions(timeout=9.0, max_total_timeout=20.0, cancel=token)
        )
        assert opts.timeout == 1.0
        assert opts.max_total_timeout == 20.0
        assert opts.cancel is token

    def test_with_defaults_none(self) -> None:
        opts = RequestOptions(timeout=1.0)
        assert opts.with_defaults(None) is opts


# ── wait_for_response ───────────────────────────────────────────────


class TestWaitForResponse:
    async def test_returns_result(self) -> None:
        async def reply() -> str:
            return "ok"

        assert await wait_for_response(reply) == "ok"

    async def test_propagates_errors(self) -> None:
        async def reply() -> str:
            msg = "boom"
            raise RuntimeError(msg)

        with pytest.raises(RuntimeError, match="boom"):
            await wait_for_response(reply)

    async def test_times_out(self) -> None:
        async def slow() -> str:
            await asyncio.sleep(10)
            return "late"

        with pytest.raises(TimedOut) as exc_info:
            await wait_for_response(slow, RequestOptions(timeout=0.01))
        assert exc_info.value.timeout == 0.01

    async def test_already_cancelled_never_starts(self) -> None:
        started = False

        async def reply() -> str:
            nonlocal started
            started = True
            return "ok"

        token = CancelToken()
        token.cancel()
        with pytest.raises(Cancelled):
            await wait_for_response(reply, RequestOptions(cancel=token))
        assert not started

    async def test_cancel_before_reply_abandons_it(self) -> None:
        token = CancelToken()
        release = asyncio.Event()
        finished = False

        async def reply() -> str:
            nonlocal finished
            await release.wait()
            finished = True
            return "late"

        async def cancel_soon() -> None:
            await asyncio.sleep(0.01)
            token.cancel("stop")

        canceller = asyncio.create_task(cancel_soon())
        with pytest.raises(Cancelled, match="stop"):
            await wait_for_response(reply, RequestOptions(cancel=token))
        await canceller

        # A reply that becomes available afterwards does not resurface.
        release.set()
        await asyncio.sleep(0.01)
        assert not finished

    async def test_reply_wins_when_token_unused(self) -> None:
        token = CancelToken()

        async def reply() -> int:
            await asyncio.sleep(0)
            return 42

        assert await wait_for_response(reply, RequestOptions(cancel=token, timeout=1.0)) == 42
        assert not token.cancelled

    async def test_cancel_beats_reply_in_same_turn(self) -> None:
        token = CancelToken()
        release = asyncio.Event()

        async def reply() -> str:
            await release.wait()
            return "late"

        call = asyncio.create_task(wait_for_response(reply, RequestOptions(cancel=token)))
        await asyncio.sleep(0.01)
        token.cancel("stop")
        release.set()

        with pytest.raises(Cancelled, match="stop"):
            await call
