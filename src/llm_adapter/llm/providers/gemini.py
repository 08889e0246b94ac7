"""
Gemini provider adapter.

Maps canonical messages onto the ``generateContent`` /
``streamGenerateContent`` REST endpoints and maps responses back to text.
Only the first part of the first candidate is ever read.
"""

from __future__ import annotations

import asyncio
import os
from collections.abc import AsyncIterable, Callable, Sequence
from typing import TYPE_CHECKING, Any

import structlog
from pydantic import ValidationError

from ..exceptions import AuthError, ProviderError
from ..models import (
    GeminiResponseChunk,
    GenerationConfig,
    LLMMessage,
    MessageRole,
    RequestDescriptor,
)
from ..streaming.adapter import StreamPump
from ..streaming.channel import ChannelSender
from ..streaming.models import RawSSEEvent, StreamEvent, StreamState
from .base import NullAuditor, ResponseAuditor

if TYPE_CHECKING:
    from ...config import Configuration

logger = structlog.get_logger(__name__)

DEFAULT_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"
DEFAULT_API_KEY_ENV = "GOOGLE_API_KEY"

GENERATE_METHOD = "generateContent"
STREAM_METHOD = "streamGenerateContent"

JSON_MIME_TYPE = "application/json"
TEXT_MIME_TYPE = "text/plain"

_ROLE_MAP = {
    MessageRole.USER: "user",
    MessageRole.ASSISTANT: "model",
}


def system_instruction(messages: Sequence[LLMMessage]) -> str:
    """All system messages, in order, joined by a blank line."""
    return "\n\n".join(
        msg.content for msg in messages if msg.role == MessageRole.SYSTEM
    )


def build_body(
    messages: Sequence[LLMMessage], generation: GenerationConfig
) -> dict[str, Any]:
    """Build the Gemini JSON request body. Pure; no credential lookup."""
    contents = [
        {"role": _ROLE_MAP[msg.role], "parts": [{"text": msg.content}]}
        for msg in messages
        if msg.role != MessageRole.SYSTEM
    ]

    body: dict[str, Any] = {"contents": contents}

    instruction = system_instruction(messages)
    if instruction:
        body["systemInstruction"] = {"parts": [{"text": instruction}]}

    # Values pass through unvalidated; range checks are the vendor's job
    body["generationConfig"] = {
        "temperature": generation.temperature,
        "maxOutputTokens": generation.max_tokens,
        "responseMimeType": JSON_MIME_TYPE if generation.json_mode else TEXT_MIME_TYPE,
    }
    return body


def translate_chunk(data: str) -> str | None:
    """Delta text of one streamed payload, None if it carries no text."""
    return GeminiResponseChunk.model_validate_json(data).first_text()


class GeminiProvider:
    """Gemini implementation of the provider capability set."""

    def __init__(
        self,
        *,
        base_url: str = DEFAULT_BASE_URL,
        api_key_env: str = DEFAULT_API_KEY_ENV,
        auditor: ResponseAuditor | None = None,
        api_key_source: Callable[[], str] | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.api_key_env = api_key_env
        # Called on every request; raises AuthError when no key is available
        self._api_key_source = api_key_source or self._api_key_from_env
        self._auditor: ResponseAuditor = auditor or NullAuditor()
        # Strong references so running pumps are not garbage collected
        self._background_tasks: set[asyncio.Task[StreamState]] = set()

    @classmethod
    def from_config(
        cls, config: Configuration, auditor: ResponseAuditor | None = None
    ) -> GeminiProvider:
        return cls(
            base_url=config.base_url,
            api_key_env=config.api_key_env,
            auditor=auditor,
            api_key_source=lambda: config.llm_api_key,
        )

    @property
    def provider_name(self) -> str:
        return "gemini"

    def _api_key_from_env(self) -> str:
        api_key = os.getenv(self.api_key_env)
        if not api_key:
            raise AuthError(
                f"API key '{self.api_key_env}' not found in environment variables",
                provider=self.provider_name,
            )
        return api_key

    def build_request(
        self,
        messages: Sequence[LLMMessage],
        generation: GenerationConfig,
        *,
        streaming: bool = False,
    ) -> RequestDescriptor:
        """
        Build the request descriptor for one call.

        Raises:
            AuthError: If the API key is not set. Raised before any I/O.
        """
        try:
            api_key = self._api_key_source()
        except AuthError as e:
            raise AuthError(
                e.message, provider=self.provider_name, model=generation.model
            ) from e

        method = STREAM_METHOD if streaming else GENERATE_METHOD
        params = {"key": api_key}
        if streaming:
            params["alt"] = "sse"

        return RequestDescriptor(
            url=f"{self.base_url}/models/{generation.model}:{method}",
            json=build_body(messages, generation),
            params=params,
            streaming=streaming,
        )

    @staticmethod
    def parse_response(json_text: str) -> str:
        """
        Extract the text of a complete (non-streamed) Gemini response.

        Raises:
            ProviderError: If the body does not parse, or carries no candidate
                or no part.
        """
        try:
            response = GeminiResponseChunk.model_validate_json(json_text)
        except ValidationError as e:
            raise ProviderError(
                f"Invalid Gemini response: {e}", provider="gemini"
            ) from e

        text = response.first_text()
        if text is None:
            raise ProviderError("Empty Gemini response", provider="gemini")
        return text

    def stream_eventsource(
        self,
        event_source: AsyncIterable[RawSSEEvent],
        sender: ChannelSender[StreamEvent],
        *,
        model: str = "unknown",
    ) -> asyncio.Task[StreamState]:
        """
        Pump ``event_source`` into ``sender`` on a background task.

        Must be called from a running event loop. Ownership of both the event
        source and the sender passes to the task. The returned task resolves
        to the terminal ``StreamState``; awaiting it is optional.
        """
        pump = StreamPump(
            event_source,
            sender,
            translate_chunk,
            provider=self.provider_name,
            model=model,
        )
        task = asyncio.create_task(pump.run(), name=f"{self.provider_name}-stream")
        self._background_tasks.add(task)
        task.add_done_callback(self._background_tasks.discard)
        logger.debug("Stream pump started", provider=self.provider_name, model=model)
        return task

    def log_response(self, request_text: str, response_text: str) -> None:
        """Hand a completed exchange to the configured auditor."""
        self._auditor(self.provider_name, request_text, response_text)
