"""
One-directional async channel between a stream pump and its consumer.

The sending half reports a dropped receiver as a ``False`` return from
``send`` instead of raising, so a producer can treat downstream cancellation
as ordinary control flow.
"""

from __future__ import annotations

import asyncio
from typing import Generic, TypeVar

T = TypeVar("T")


class _ChannelState(Generic[T]):
    """Shared state for one sender/receiver pair."""

    def __init__(self, maxsize: int) -> None:
        self.queue: asyncio.Queue[T] = asyncio.Queue(maxsize=maxsize)
        self.sender_closed = False
        self.receiver_closed = False
        # Set when an item arrives or the sender closes
        self.readable = asyncio.Event()
        # Set when an item is taken or the receiver closes
        self.writable = asyncio.Event()


class ChannelSender(Generic[T]):
    """Sending half. Single owner; move it into the producing task."""

    def __init__(self, state: _ChannelState[T]) -> None:
        self._state = state

    async def send(self, item: T) -> bool:
        """
        Enqueue an item, waiting for space on a bounded channel.

        Returns:
            True if the item was enqueued, False if the receiver is gone.
        """
        state = self._state
        if state.sender_closed:
            raise RuntimeError("send on a closed channel")

        while True:
            if state.receiver_closed:
                return False
            try:
                state.queue.put_nowait(item)
            except asyncio.QueueFull:
                state.writable.clear()
                await state.writable.wait()
                continue
            state.readable.set()
            return True

    def close(self) -> None:
        """Mark end-of-stream. Idempotent."""
        self._state.sender_closed = True
        self._state.readable.set()

    @property
    def is_closed(self) -> bool:
        return self._state.sender_closed

    @property
    def receiver_closed(self) -> bool:
        return self._state.receiver_closed


class ChannelReceiver(Generic[T]):
    """Receiving half. Closing it is the consumer's way to cancel the stream."""

    def __init__(self, state: _ChannelState[T]) -> None:
        self._state = state

    async def recv(self) -> T | None:
        """
        Take the next item.

        Returns:
            The next item, or None once the sender has closed and every
            buffered item has been taken.
        """
        state = self._state
        while True:
            try:
                item = state.queue.get_nowait()
            except asyncio.QueueEmpty:
                if state.sender_closed or state.receiver_closed:
                    return None
                state.readable.clear()
                await state.readable.wait()
                continue
            state.writable.set()
            return item

    def close(self) -> None:
        """Drop the receiver, discarding anything still buffered."""
        state = self._state
        state.receiver_closed = True
        while not state.queue.empty():
            state.queue.get_nowait()
        state.writable.set()

    @property
    def is_closed(self) -> bool:
        return self._state.receiver_closed

    def __aiter__(self) -> ChannelReceiver[T]:
        return self

    async def __anext__(self) -> T:
        item = await self.recv()
        if item is None:
            raise StopAsyncIteration
        return item

    async def __aenter__(self) -> ChannelReceiver[T]:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


def open_channel(maxsize: int = 0) -> tuple[ChannelSender[T], ChannelReceiver[T]]:
    """Create a connected sender/receiver pair. ``maxsize=0`` is unbounded."""
    if maxsize < 0:
        raise ValueError("channel maxsize must be non-negative")
    state: _ChannelState[T] = _ChannelState(maxsize)
    return ChannelSender(state), ChannelReceiver(state)
