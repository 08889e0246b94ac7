#!/usr/bin/env python3
"""
Tests for the one-directional output channel.
"""

import asyncio

import pytest

from llm_adapter.llm.streaming import open_channel


class TestChannel:

    @pytest.mark.asyncio
    async def test_items_arrive_in_order_then_end(self):
        sender, receiver = open_channel()
        for i in range(3):
            assert await sender.send(i) is True
        sender.close()

        assert [item async for item in receiver] == [0, 1, 2]
        assert await receiver.recv() is None

    @pytest.mark.asyncio
    async def test_send_after_receiver_closed_returns_false(self):
        sender, receiver = open_channel()
        receiver.close()

        assert await sender.send("x") is False
        assert sender.receiver_closed

    @pytest.mark.asyncio
    async def test_close_discards_buffered_items(self):
        sender, receiver = open_channel()
        await sender.send("a")
        await sender.send("b")

        receiver.close()

        assert receiver.is_closed
        assert await receiver.recv() is None

    @pytest.mark.asyncio
    async def test_recv_waits_for_sender(self):
        sender, receiver = open_channel()
        pending = asyncio.create_task(receiver.recv())
        await asyncio.sleep(0)
        assert not pending.done()

        await sender.send("late")

        assert await pending == "late"

    @pytest.mark.asyncio
    async def test_recv_wakes_on_sender_close(self):
        sender, receiver = open_channel()
        pending = asyncio.create_task(receiver.recv())
        await asyncio.sleep(0)

        sender.close()

        assert await pending is None

    @pytest.mark.asyncio
    async def test_bounded_send_applies_backpressure(self):
        sender, receiver = open_channel(1)
        assert await sender.send(1) is True

        blocked = asyncio.create_task(sender.send(2))
        await asyncio.sleep(0)
        assert not blocked.done()

        assert await receiver.recv() == 1
        assert await blocked is True
        assert await receiver.recv() == 2

    @pytest.mark.asyncio
    async def test_blocked_send_wakes_when_receiver_closes(self):
        sender, receiver = open_channel(1)
        await sender.send(1)

        blocked = asyncio.create_task(sender.send(2))
        await asyncio.sleep(0)
        receiver.close()

        assert await asyncio.wait_for(blocked, timeout=1.0) is False

    @pytest.mark.asyncio
    async def test_send_on_closed_sender_raises(self):
        sender, _ = open_channel()
        sender.close()

        with pytest.raises(RuntimeError):
            await sender.send("x")

    @pytest.mark.asyncio
    async def test_receiver_context_manager_closes(self):
        sender, receiver = open_channel()
        async with receiver:
            await sender.send("x")
            assert await receiver.recv() == "x"

        assert await sender.send("y") is False

    def test_negative_maxsize_rejected(self):
        with pytest.raises(ValueError):
            open_channel(-1)
