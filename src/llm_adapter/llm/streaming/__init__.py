"""
Streaming functionality for provider adapters.

- SSE event source over httpx streaming responses
- One-directional output channel with drop detection
- Stream pump normalizing vendor chunks into text deltas
"""

from __future__ import annotations

from .adapter import ChunkTranslator, StreamPump
from .channel import ChannelReceiver, ChannelSender, open_channel
from .models import (
    DONE_SENTINEL,
    RawSSEEvent,
    SSEEventType,
    StreamEvent,
    StreamEventType,
    StreamState,
)
from .parser import SSEEventSource

__all__ = [
    "DONE_SENTINEL",
    "ChannelReceiver",
    "ChannelSender",
    "ChunkTranslator",
    "RawSSEEvent",
    "SSEEventSource",
    "SSEEventType",
    "StreamEvent",
    "StreamEventType",
    "StreamPump",
    "StreamState",
    "open_channel",
]
