"""
SSE event source over an httpx streaming response.

Turns the response body into a lazy, consume-once async sequence of
``RawSSEEvent`` values. A clean end of body is reported as a typed
COMPLETION event; a transport failure as a single ERROR event.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator, AsyncIterator

import httpx
import structlog

from .models import RawSSEEvent, SSEEventType

logger = structlog.get_logger(__name__)

# Some providers terminate with an explicit marker instead of closing the body
COMPLETION_MARKER = "[DONE]"


class _EventBuilder:
    """Accumulates SSE fields until a blank line dispatches the event."""

    def __init__(self) -> None:
        self._reset()

    def _reset(self) -> None:
        self.data_lines: list[str] = []
        self.event_name: str | None = None
        self.event_id: str | None = None

    def feed(self, line: str) -> RawSSEEvent | None:
        if not line:
            return self.dispatch()

        if line.startswith(":"):
            return RawSSEEvent(
                event_type=SSEEventType.HEARTBEAT, data=line[1:].strip()
            )

        name, _, value = line.partition(":")
        if value.startswith(" "):
            value = value[1:]

        if name == "data":
            self.data_lines.append(value)
        elif name == "event":
            self.event_name = value
        elif name == "id":
            self.event_id = value
        # "retry" and unknown fields are ignored
        return None

    def dispatch(self) -> RawSSEEvent | None:
        if not self.data_lines:
            self._reset()
            return None

        data = "\n".join(self.data_lines)
        event = RawSSEEvent(
            event_type=(
                SSEEventType.COMPLETION
                if data.strip() == COMPLETION_MARKER
                else SSEEventType.MESSAGE
            ),
            data=data,
            event=self.event_name or "message",
            event_id=self.event_id,
        )
        self._reset()
        return event


class SSEEventSource:
    """Consume-once SSE event sequence owning an open streaming response."""

    def __init__(self, response: httpx.Response) -> None:
        self._response = response
        self._consumed = False
        self._closed = False
        self.stats = {
            'total_events': 0,
            'message_events': 0,
            'heartbeat_events': 0,
            'error_events': 0,
        }

    @property
    def is_closed(self) -> bool:
        return self._closed

    def __aiter__(self) -> AsyncIterator[RawSSEEvent]:
        if self._consumed:
            raise RuntimeError("SSE event source can only be consumed once")
        self._consumed = True
        return self._iter_events()

    async def _iter_events(self) -> AsyncGenerator[RawSSEEvent]:
        builder = _EventBuilder()
        yield self._count(RawSSEEvent(event_type=SSEEventType.OPEN, data=""))

        try:
            async for line in self._response.aiter_lines():
                event = builder.feed(line)
                if event is None:
                    continue
                yield self._count(event)
                if event.event_type == SSEEventType.COMPLETION:
                    return

        except (httpx.HTTPError, httpx.StreamError) as e:
            logger.debug("SSE transport failure", error=str(e))
            yield self._count(
                RawSSEEvent(event_type=SSEEventType.ERROR, error=f"Stream error: {e}")
            )
            return

        except TimeoutError as e:
            yield self._count(
                RawSSEEvent(event_type=SSEEventType.ERROR, error=f"Stream timeout: {e}")
            )
            return

        # Body ended; a final event may lack its blank-line terminator
        if (event := builder.dispatch()) is not None:
            yield self._count(event)
            if event.event_type == SSEEventType.COMPLETION:
                return

        yield self._count(RawSSEEvent(event_type=SSEEventType.COMPLETION))

    def _count(self, event: RawSSEEvent) -> RawSSEEvent:
        self.stats['total_events'] += 1
        if event.event_type == SSEEventType.MESSAGE:
            self.stats['message_events'] += 1
        elif event.event_type == SSEEventType.HEARTBEAT:
            self.stats['heartbeat_events'] += 1
        elif event.event_type == SSEEventType.ERROR:
            self.stats['error_events'] += 1
        return event

    def get_stats(self) -> dict[str, int]:
        """Get event counters for monitoring."""
        return self.stats.copy()

    async def aclose(self) -> None:
        """Release the underlying connection. Idempotent."""
        if self._closed:
            return
        self._closed = True
        await self._response.aclose()

    async def __aenter__(self) -> SSEEventSource:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()
