"""
Stream pump: drains a provider event source into an output channel.

One pump per connection. The pump owns the event source for the whole loop
and the channel sender until it exits; closing the receiver is the only way
to cancel it.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import AsyncIterable, AsyncIterator, Callable

import structlog
from pydantic import ValidationError

from ..exceptions import StreamingError, StreamParseError, StreamTransportError
from .channel import ChannelSender
from .models import RawSSEEvent, SSEEventType, StreamEvent, StreamState

logger = structlog.get_logger(__name__)

# Returns the delta text of one payload, or None when the chunk carries none.
# Raises ValueError (pydantic ValidationError included) on a malformed payload.
ChunkTranslator = Callable[[str], str | None]


class StreamPump:
    """Pumps SSE events into text deltas, then finalizes the channel."""

    def __init__(
        self,
        event_source: AsyncIterable[RawSSEEvent],
        sender: ChannelSender[StreamEvent],
        translator: ChunkTranslator,
        *,
        provider: str = "unknown",
        model: str = "unknown",
    ) -> None:
        self._event_source = event_source
        self._sender = sender
        self._translator = translator
        self.provider = provider
        self.model = model
        self.state = StreamState.RUNNING
        self.deltas_sent = 0
        self.events_seen = 0
        self._started = False
        self._logger = logger.bind(provider=provider, model=model)

    async def run(self) -> StreamState:
        """Run the pump to a terminal state. May only be called once."""
        if self._started:
            raise RuntimeError("stream pump has already run")
        self._started = True

        start_time = time.perf_counter()
        iterator = aiter(self._event_source)
        try:
            self.state = await self._pump(iterator)
            if self.state is StreamState.TERMINATED_CLEAN:
                await self._sender.send(StreamEvent.done())
        except asyncio.CancelledError:
            self.state = StreamState.TERMINATED_CANCELLED
            raise
        finally:
            self._sender.close()
            await self._release(iterator)
            self._log_outcome(start_time)

        return self.state

    async def _pump(self, iterator: AsyncIterator[RawSSEEvent]) -> StreamState:
        while True:
            try:
                raw = await anext(iterator)
            except StopAsyncIteration:
                # Source exhausted without an explicit completion event
                return StreamState.TERMINATED_CLEAN
            except Exception as e:
                return await self._fail(
                    StreamTransportError(str(e), self.provider, self.model)
                )

            self.events_seen += 1

            if raw.event_type == SSEEventType.MESSAGE:
                try:
                    text = self._translator(raw.data)
                except (ValidationError, ValueError) as e:
                    return await self._fail(
                        StreamParseError(str(e), self.provider, self.model)
                    )

                if text is None:
                    continue
                if not await self._sender.send(StreamEvent.delta(text)):
                    return StreamState.TERMINATED_CANCELLED
                self.deltas_sent += 1

            elif raw.event_type == SSEEventType.ERROR:
                return await self._fail(
                    StreamTransportError(
                        raw.error or "unknown stream error", self.provider, self.model
                    )
                )

            elif raw.event_type == SSEEventType.COMPLETION:
                return StreamState.TERMINATED_CLEAN

            # OPEN and HEARTBEAT carry no content

    async def _fail(self, error: StreamingError) -> StreamState:
        if not await self._sender.send(StreamEvent.failure(error)):
            return StreamState.TERMINATED_CANCELLED
        return StreamState.TERMINATED_ERROR

    async def _release(self, iterator: AsyncIterator[RawSSEEvent]) -> None:
        """Finalize the iterator and close the connection, if they support it."""
        for target in (iterator, self._event_source):
            if (close := getattr(target, "aclose", None)) is None:
                continue
            try:
                await close()
            except Exception as e:
                # Terminal state is already final
                self._logger.debug(
                    "Stream release failed",
                    error_type=type(e).__name__,
                    error_message=str(e),
                )

    def _log_outcome(self, start_time: float) -> None:
        duration = round((time.perf_counter() - start_time) * 1000, 2)
        log_data = {
            "state": self.state.value,
            "deltas": self.deltas_sent,
            "events": self.events_seen,
            "duration_ms": duration,
        }
        if self.state is StreamState.TERMINATED_ERROR:
            self._logger.warning("Stream ended abnormally", **log_data)
        else:
            self._logger.debug("Stream finished", **log_data)
