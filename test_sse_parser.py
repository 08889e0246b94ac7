#!/usr/bin/env python3
"""
Tests for the SSE event source over httpx responses.
"""

import httpx
import pytest

from llm_adapter.llm.streaming import SSEEventSource, SSEEventType


class FailingStream(httpx.AsyncByteStream):
    """Yields some bytes, then fails like a dropped connection."""

    def __init__(self, chunks):
        self.chunks = chunks
        self.closed = False

    async def __aiter__(self):
        for chunk in self.chunks:
            yield chunk
        raise httpx.ReadError("connection reset by peer")

    async def aclose(self):
        self.closed = True


def sse_response(body: bytes) -> httpx.Response:
    return httpx.Response(
        200, headers={"content-type": "text/event-stream"}, content=body
    )


async def collect(source):
    return [event async for event in source]


class TestSSEEventSource:

    @pytest.mark.asyncio
    async def test_messages_then_completion(self):
        source = SSEEventSource(sse_response(b'data: {"a": 1}\n\ndata: {"b": 2}\n\n'))
        events = await collect(source)

        assert [e.event_type for e in events] == [
            SSEEventType.OPEN,
            SSEEventType.MESSAGE,
            SSEEventType.MESSAGE,
            SSEEventType.COMPLETION,
        ]
        assert events[1].data == '{"a": 1}'
        assert events[2].data == '{"b": 2}'

    @pytest.mark.asyncio
    async def test_multiline_data_joined(self):
        events = await collect(SSEEventSource(sse_response(b"data: line1\ndata: line2\n\n")))

        assert events[1].data == "line1\nline2"

    @pytest.mark.asyncio
    async def test_crlf_line_endings(self):
        events = await collect(SSEEventSource(sse_response(b"data: x\r\n\r\ndata: y\r\n\r\n")))

        assert [e.data for e in events if e.event_type == SSEEventType.MESSAGE] == ["x", "y"]

    @pytest.mark.asyncio
    async def test_event_name_id_and_comments(self):
        body = b": keep-alive\nevent: update\nid: 7\nretry: 100\ndata: payload\n\n"
        events = await collect(SSEEventSource(sse_response(body)))

        assert events[1].event_type == SSEEventType.HEARTBEAT
        assert events[1].data == "keep-alive"
        message = events[2]
        assert message.event == "update"
        assert message.event_id == "7"
        assert message.data == "payload"

    @pytest.mark.asyncio
    async def test_trailing_event_without_blank_line_is_flushed(self):
        events = await collect(SSEEventSource(sse_response(b"data: one\n\ndata: two")))

        assert [e.data for e in events if e.event_type == SSEEventType.MESSAGE] == ["one", "two"]
        assert events[-1].event_type == SSEEventType.COMPLETION

    @pytest.mark.asyncio
    async def test_done_marker_is_completion(self):
        events = await collect(SSEEventSource(sse_response(b"data: x\n\ndata: [DONE]\n\ndata: y\n\n")))

        assert [e.event_type for e in events] == [
            SSEEventType.OPEN,
            SSEEventType.MESSAGE,
            SSEEventType.COMPLETION,
        ]

    @pytest.mark.asyncio
    async def test_empty_body_completes(self):
        events = await collect(SSEEventSource(sse_response(b"")))

        assert [e.event_type for e in events] == [SSEEventType.OPEN, SSEEventType.COMPLETION]

    @pytest.mark.asyncio
    async def test_transport_failure_yields_single_error(self):
        stream = FailingStream([b"data: x\n\n"])
        response = httpx.Response(
            200, headers={"content-type": "text/event-stream"}, stream=stream
        )
        source = SSEEventSource(response)
        events = await collect(source)

        assert [e.event_type for e in events] == [
            SSEEventType.OPEN,
            SSEEventType.MESSAGE,
            SSEEventType.ERROR,
        ]
        assert "connection reset by peer" in events[-1].error
        assert source.get_stats()["error_events"] == 1

        await source.aclose()
        assert stream.closed

    @pytest.mark.asyncio
    async def test_consume_once(self):
        source = SSEEventSource(sse_response(b"data: x\n\n"))
        await collect(source)

        with pytest.raises(RuntimeError):
            source.__aiter__()

    @pytest.mark.asyncio
    async def test_aclose_idempotent_and_context_manager(self):
        async with SSEEventSource(sse_response(b"data: x\n\n")) as source:
            await collect(source)

        assert source.is_closed
        await source.aclose()

    @pytest.mark.asyncio
    async def test_stats(self):
        source = SSEEventSource(sse_response(b": ping\n\ndata: a\n\ndata: b\n\n"))
        await collect(source)

        stats = source.get_stats()
        assert stats["message_events"] == 2
        assert stats["heartbeat_events"] == 1
        assert stats["total_events"] == 5
