"""
Streaming-specific dataclasses: inbound SSE events and outbound stream events.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from ..exceptions import StreamingError

DONE_SENTINEL = "[DONE]"


class SSEEventType(Enum):
    """Server-Sent Event types produced by the event source."""
    OPEN = "open"
    MESSAGE = "message"
    HEARTBEAT = "heartbeat"
    ERROR = "error"
    COMPLETION = "completion"


@dataclass(frozen=True)
class RawSSEEvent:
    """One inbound event from the event source.

    MESSAGE events carry the undecoded ``data`` payload. ERROR events carry a
    transport diagnostic in ``error``. COMPLETION is the typed "stream closed
    normally" signal.
    """
    event_type: SSEEventType
    data: str = ""
    event: str = "message"
    event_id: str | None = None
    error: str | None = None


class StreamEventType(Enum):
    """Kinds of values delivered on the output channel."""
    DELTA = "delta"
    DONE = "done"
    ERROR = "error"


class StreamState(Enum):
    """Lifecycle of one stream pump. Every terminal state is absorbing."""
    RUNNING = "running"
    TERMINATED_CLEAN = "terminated_clean"
    TERMINATED_ERROR = "terminated_error"
    TERMINATED_CANCELLED = "terminated_cancelled"


@dataclass(frozen=True)
class StreamEvent:
    """A value on the output channel: a delta, the done sentinel, or an error."""
    event_type: StreamEventType
    content: str | None = None
    error: StreamingError | None = None

    @classmethod
    def delta(cls, text: str) -> StreamEvent:
        return cls(StreamEventType.DELTA, content=text)

    @classmethod
    def done(cls) -> StreamEvent:
        return cls(StreamEventType.DONE, content=DONE_SENTINEL)

    @classmethod
    def failure(cls, error: StreamingError) -> StreamEvent:
        return cls(StreamEventType.ERROR, error=error)

    @property
    def is_ok(self) -> bool:
        return self.error is None
