"""
LLM provider adapters.

This package provides:
- Canonical message and generation config models
- A Gemini adapter (request builder, response parser, stream pump)
- SSE streaming with a cancellable output channel
- A typed error taxonomy
"""

from __future__ import annotations

from .exceptions import (
    AuthError,
    LLMError,
    ProviderError,
    StreamingError,
    StreamParseError,
    StreamTransportError,
)
from .models import (
    GenerationConfig,
    LLMMessage,
    MessageRole,
    ProviderType,
    RequestDescriptor,
)
from .providers import (
    GeminiProvider,
    LLMProvider,
    LoggingAuditor,
    NullAuditor,
    create_provider,
    provider_from_config,
)

__all__ = [
    "AuthError",
    "GeminiProvider",
    "GenerationConfig",
    "LLMError",
    "LLMMessage",
    "LLMProvider",
    "LoggingAuditor",
    "MessageRole",
    "NullAuditor",
    "ProviderError",
    "ProviderType",
    "RequestDescriptor",
    "StreamParseError",
    "StreamTransportError",
    "StreamingError",
    "create_provider",
    "provider_from_config",
]
