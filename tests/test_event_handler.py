"""
Tests for listener registration and dispatch.
"""

import asyncio
from unittest.mock import Mock

import pytest

from src.live_client.event_handler import LiveEventHandler


class TestDispatch:
    """Test synchronous and scheduled dispatch."""

    def test_sync_handlers_receive_args(self):
        handler = LiveEventHandler()
        first, second = Mock(), Mock()
        handler.on("tool_call", first)
        handler.on("tool_call", second)

        handler.dispatch("tool_call", "check_fact", {"claim": "x"})

        first.assert_called_once_with("check_fact", {"claim": "x"})
        second.assert_called_once_with("check_fact", {"claim": "x"})

    def test_handler_errors_are_contained(self):
        handler = LiveEventHandler()
        after = Mock()
        handler.on("transcript", Mock(side_effect=RuntimeError("boom")))
        handler.on("transcript", after)

        handler.dispatch("transcript", "hello")

        after.assert_called_once_with("hello")

    def test_off_removes_handlers(self):
        handler = LiveEventHandler()
        callback = Mock()
        handler.on("close", callback)
        handler.off("close", callback)
        handler.dispatch("close")
        callback.assert_not_called()

        handler.on("close", callback)
        handler.off("close")
        handler.dispatch("close")
        callback.assert_not_called()

    def test_on_requires_callable(self):
        with pytest.raises(TypeError):
            LiveEventHandler().on("close", "not callable")

    @pytest.mark.asyncio
    async def test_coroutine_handlers_are_scheduled(self):
        handler = LiveEventHandler()
        received = []

        async def on_transcript(text):
            received.append(text)

        handler.on("transcript", on_transcript)
        handler.dispatch("transcript", "hello")

        assert received == []
        await asyncio.sleep(0)
        assert received == ["hello"]

    @pytest.mark.asyncio
    async def test_failing_coroutine_is_logged(self, caplog):
        handler = LiveEventHandler()

        async def broken(*_):
            raise ValueError("bad handler")

        handler.on("tool_call", broken)
        handler.dispatch("tool_call", "check_fact", {})
        await asyncio.sleep(0)
        await asyncio.sleep(0)

        assert "bad handler" in caplog.text


class TestDispatchAsync:
    """Test awaited, ordered dispatch."""

    @pytest.mark.asyncio
    async def test_handlers_awaited_in_order(self):
        handler = LiveEventHandler()
        order = []

        async def slow(message):
            await asyncio.sleep(0)
            order.append(("slow", message))

        handler.on("message", slow)
        handler.on("message", lambda message: order.append(("sync", message)))

        await handler.dispatch_async("message", "a")
        await handler.dispatch_async("message", "b")

        assert order == [("slow", "a"), ("sync", "a"), ("slow", "b"), ("sync", "b")]

    @pytest.mark.asyncio
    async def test_wait_for_next(self):
        handler = LiveEventHandler()

        waiter = asyncio.create_task(handler.wait_for_next("ready"))
        await asyncio.sleep(0)
        handler.dispatch("ready", "payload")

        assert await asyncio.wait_for(waiter, timeout=1.0) == ("payload",)
        assert handler.event_handlers["ready"] == []
