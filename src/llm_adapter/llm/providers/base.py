"""
Provider capability surface.

Every vendor adapter conforms to ``LLMProvider``; no inheritance needed.
Response auditing is an injectable collaborator that does nothing unless a
deployment supplies one.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterable, Sequence
from typing import Protocol, runtime_checkable

import structlog

from ..models import GenerationConfig, LLMMessage, RequestDescriptor
from ..streaming.channel import ChannelSender
from ..streaming.models import RawSSEEvent, StreamEvent, StreamState


@runtime_checkable
class LLMProvider(Protocol):
    """Capabilities a provider adapter exposes."""

    @property
    def provider_name(self) -> str: ...

    def build_request(
        self,
        messages: Sequence[LLMMessage],
        generation: GenerationConfig,
        *,
        streaming: bool = False,
    ) -> RequestDescriptor: ...

    @staticmethod
    def parse_response(json_text: str) -> str: ...

    def stream_eventsource(
        self,
        event_source: AsyncIterable[RawSSEEvent],
        sender: ChannelSender[StreamEvent],
        *,
        model: str = "unknown",
    ) -> asyncio.Task[StreamState]: ...

    def log_response(self, request_text: str, response_text: str) -> None: ...


class ResponseAuditor(Protocol):
    """Receives each completed request/response pair."""

    def __call__(self, provider: str, request_text: str, response_text: str) -> None: ...


class NullAuditor:
    """Default auditor: no side effects."""

    def __call__(self, provider: str, request_text: str, response_text: str) -> None:
        return None


class LoggingAuditor:
    """Records request/response sizes, and optionally bodies, through structlog."""

    def __init__(self, include_bodies: bool = False) -> None:
        self.include_bodies = include_bodies
        self._logger = structlog.get_logger("llm_adapter.audit")

    def __call__(self, provider: str, request_text: str, response_text: str) -> None:
        log_data = {
            "provider": provider,
            "request_chars": len(request_text),
            "response_chars": len(response_text),
        }
        if self.include_bodies:
            log_data["request"] = request_text
            log_data["response"] = response_text
        self._logger.info("LLM response recorded", **log_data)
