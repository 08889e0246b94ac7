"""
Gemini provider adapter with SSE streaming normalization.

Public entry points: canonical models, the Gemini provider (request builder,
response parser, stream pump), the output channel, and an httpx client.
"""

from __future__ import annotations

from .client import GeminiClient, collect_stream
from .config import Configuration
from .llm import (
    AuthError,
    GeminiProvider,
    GenerationConfig,
    LLMError,
    LLMMessage,
    LLMProvider,
    MessageRole,
    ProviderError,
    ProviderType,
    StreamingError,
    StreamParseError,
    StreamTransportError,
    create_provider,
    provider_from_config,
)
from .llm.streaming import (
    DONE_SENTINEL,
    StreamEvent,
    StreamEventType,
    StreamState,
    open_channel,
)

__version__ = "0.1.0"

__all__ = [
    "DONE_SENTINEL",
    "AuthError",
    "Configuration",
    "GeminiClient",
    "GeminiProvider",
    "GenerationConfig",
    "LLMError",
    "LLMMessage",
    "LLMProvider",
    "MessageRole",
    "ProviderError",
    "ProviderType",
    "StreamEvent",
    "StreamEventType",
    "StreamParseError",
    "StreamState",
    "StreamTransportError",
    "StreamingError",
    "collect_stream",
    "create_provider",
    "provider_from_config",
    "open_channel",
]
