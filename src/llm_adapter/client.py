"""
HTTP client that executes provider request descriptors over httpx.
"""

from __future__ import annotations

import json
from collections.abc import Sequence

import httpx

from .config import Configuration
from .llm.exceptions import ProviderError
from .llm.models import GenerationConfig, LLMMessage, RequestDescriptor
from .llm.providers import LLMProvider, LoggingAuditor, provider_from_config
from .llm.streaming import (
    ChannelReceiver,
    SSEEventSource,
    StreamEvent,
    StreamEventType,
    open_channel,
)
from .logging_utils import (
    ContextualLogger,
    configure_logging,
    log_operation,
    operation_context,
)

EVENT_STREAM_CONTENT_TYPE = "text/event-stream"


class GeminiClient:
    """Async HTTP client for Gemini, single-shot and streaming."""

    def __init__(
        self,
        config: Configuration,
        provider: LLMProvider | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        http_config = config.get_http_client_config()
        streaming_config = config.get_streaming_config()
        logging_config = config.get_logging_config()
        configure_logging(logging_config)

        if provider is None:
            audit = logging_config.get("audit_responses", False)
            provider = provider_from_config(
                config, auditor=LoggingAuditor() if audit else None
            )

        self.config = config
        self.provider = provider
        self.channel_size: int = streaming_config["channel_size"]
        self.client: httpx.AsyncClient = httpx.AsyncClient(
            timeout=httpx.Timeout(
                connect=http_config["connect_timeout"],
                read=http_config["read_timeout"],
                write=http_config["write_timeout"],
                pool=http_config["pool_timeout"],
            ),
            transport=transport,
        )
        self._logger = ContextualLogger({"provider": provider.provider_name})

    def _resolve(self, generation: GenerationConfig | None) -> GenerationConfig:
        return generation or self.config.get_generation_defaults()

    async def _send(
        self, descriptor: RequestDescriptor, model: str, *, stream: bool
    ) -> httpx.Response:
        try:
            return await self.client.send(
                descriptor.to_httpx(self.client), stream=stream
            )
        except httpx.HTTPError as e:
            raise ProviderError(
                f"HTTP error: {e!s}",
                provider=self.provider.provider_name,
                model=model,
            ) from e

    @log_operation("llm.generate")
    async def generate(
        self,
        messages: Sequence[LLMMessage],
        generation: GenerationConfig | None = None,
    ) -> str:
        """
        Run one non-streaming request and return the response text.

        Raises:
            AuthError: If the API key is missing; no request is sent.
            ProviderError: On transport failure, non-2xx status, or an empty
                or unparseable response.
        """
        generation = self._resolve(generation)
        descriptor = self.provider.build_request(messages, generation)

        response = await self._send(descriptor, generation.model, stream=False)
        if not response.is_success:
            raise ProviderError(
                f"Gemini API error {response.status_code}: {response.text}",
                provider=self.provider.provider_name,
                model=generation.model,
                status_code=response.status_code,
            )

        text = self.provider.parse_response(response.text)
        self.provider.log_response(json.dumps(descriptor.json), response.text)
        return text

    async def stream(
        self,
        messages: Sequence[LLMMessage],
        generation: GenerationConfig | None = None,
    ) -> ChannelReceiver[StreamEvent]:
        """
        Open a streaming request and return the output channel receiver.

        Connection setup happens before this returns; the stream itself is
        pumped on a background task. Close the receiver to cancel.

        Raises:
            AuthError: If the API key is missing; no request is sent.
            ProviderError: If the connection fails, the status is not 2xx or
                the response is not an event stream.
        """
        generation = self._resolve(generation)
        descriptor = self.provider.build_request(messages, generation, streaming=True)

        async with operation_context(
            "llm.stream.open",
            context={"provider": self.provider.provider_name, "model": generation.model},
        ):
            response = await self._send(descriptor, generation.model, stream=True)

            # FAIL FAST: Ensure streaming response is valid
            if not response.is_success:
                try:
                    error_text = (await response.aread()).decode(errors="replace")
                except httpx.HTTPError as e:
                    raise ProviderError(
                        f"Streaming API error {response.status_code}: "
                        f"failed to read error body: {e!s}",
                        provider=self.provider.provider_name,
                        model=generation.model,
                        status_code=response.status_code,
                    ) from e
                finally:
                    await response.aclose()
                raise ProviderError(
                    f"Streaming API error {response.status_code}: {error_text}",
                    provider=self.provider.provider_name,
                    model=generation.model,
                    status_code=response.status_code,
                )

            content_type = response.headers.get("content-type", "")
            if EVENT_STREAM_CONTENT_TYPE not in content_type:
                await response.aclose()
                raise ProviderError(
                    f"Expected streaming response, got content-type: {content_type}",
                    provider=self.provider.provider_name,
                    model=generation.model,
                    status_code=response.status_code,
                )

        sender, receiver = open_channel(self.channel_size)
        self.provider.stream_eventsource(
            SSEEventSource(response), sender, model=generation.model
        )
        self._logger.debug("Stream handed off", model=generation.model)
        return receiver

    async def close(self) -> None:
        """Close the HTTP client."""
        await self.client.aclose()

    async def __aenter__(self) -> GeminiClient:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()


async def collect_stream(receiver: ChannelReceiver[StreamEvent]) -> str:
    """
    Drain a stream receiver into the full response text.

    Raises:
        StreamingError: The terminal error carried by the stream. Deltas
            received before it are discarded as incomplete.
    """
    parts: list[str] = []
    async with receiver:
        async for event in receiver:
            if event.event_type is StreamEventType.DELTA:
                parts.append(event.content or "")
            elif event.event_type is StreamEventType.ERROR and event.error is not None:
                raise event.error
            else:
                break
    return "".join(parts)
