"""
Error taxonomy for provider adapter operations.

Errors raised synchronously to the caller:
- AuthError: credential missing before any request is built
- ProviderError: empty or unparseable single-shot response, non-2xx status

Errors delivered as values over a stream channel:
- StreamParseError: malformed chunk payload mid-stream
- StreamTransportError: transport failure mid-stream
"""

from __future__ import annotations


class LLMError(Exception):
    """Base LLM error with rich context."""

    def __init__(
        self,
        message: str,
        provider: str,
        model: str,
        status_code: int | None = None,
        response_data: dict | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.provider = provider
        self.model = model
        self.status_code = status_code
        self.response_data = response_data or {}


class AuthError(LLMError):
    """Missing or invalid credential, detected pre-flight."""

    def __init__(
        self,
        message: str = "API key not configured",
        provider: str = "unknown",
        model: str = "unknown",
        **kwargs,
    ):
        super().__init__(message, provider, model, **kwargs)


class ProviderError(LLMError):
    """Well-formed but semantically empty, or unusable, provider response."""

    def __init__(
        self,
        message: str,
        provider: str = "unknown",
        model: str = "unknown",
        **kwargs,
    ):
        super().__init__(message, provider, model, **kwargs)


class StreamingError(LLMError):
    """Streaming-specific errors."""

    kind = "stream_error"

    def __init__(
        self,
        message: str,
        provider: str = "unknown",
        model: str = "unknown",
        **kwargs,
    ):
        super().__init__(message, provider, model, **kwargs)

    @property
    def detail(self) -> str:
        return self.message

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, StreamingError):
            return NotImplemented
        return type(self) is type(other) and self.message == other.message

    def __hash__(self) -> int:
        return hash((type(self), self.message))


class StreamParseError(StreamingError):
    """A chunk payload could not be parsed; the stream ended abnormally."""

    kind = "parse_error"


class StreamTransportError(StreamingError):
    """The transport failed mid-stream; the stream ended abnormally."""

    kind = "stream_error"
