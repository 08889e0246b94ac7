"""
Core LLM models for the provider adapter.

This module provides:
- Canonical, provider-agnostic message structures
- Generation configuration
- Request descriptors handed to the HTTP transport
- Gemini vendor response shapes (pydantic)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

import httpx
from pydantic import BaseModel, ConfigDict, Field


class ProviderType(Enum):
    """Supported LLM providers."""
    GEMINI = "gemini"


class MessageRole(Enum):
    """Canonical message roles."""
    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


@dataclass(frozen=True)
class LLMMessage:
    """Canonical message: one conversation turn tagged by role."""
    role: MessageRole
    content: str

    @classmethod
    def system(cls, content: str) -> LLMMessage:
        return cls(MessageRole.SYSTEM, content)

    @classmethod
    def user(cls, content: str) -> LLMMessage:
        return cls(MessageRole.USER, content)

    @classmethod
    def assistant(cls, content: str) -> LLMMessage:
        return cls(MessageRole.ASSISTANT, content)


@dataclass(frozen=True)
class GenerationConfig:
    """Generation parameters, fixed for the lifetime of one request."""
    model: str
    temperature: float = 0.7
    max_tokens: int = 4096
    json_mode: bool = False


@dataclass(frozen=True)
class RequestDescriptor:
    """Everything the transport needs to execute one provider request."""
    url: str
    json: dict[str, Any]
    params: dict[str, str] = field(default_factory=dict)
    method: str = "POST"
    streaming: bool = False

    def to_httpx(self, client: httpx.AsyncClient) -> httpx.Request:
        """Build an httpx request on the given client."""
        return client.build_request(
            self.method, self.url, params=self.params, json=self.json
        )


# Gemini vendor shapes. Extra vendor fields (usageMetadata, finishReason,
# safetyRatings, ...) are ignored.

class GeminiPart(BaseModel):
    model_config = ConfigDict(extra="ignore")

    text: str


class GeminiContent(BaseModel):
    model_config = ConfigDict(extra="ignore")

    parts: list[GeminiPart] = Field(default_factory=list)
    role: str | None = None


class GeminiCandidate(BaseModel):
    model_config = ConfigDict(extra="ignore")

    content: GeminiContent


class GeminiResponseChunk(BaseModel):
    """One parsed unit of a streamed or single-shot Gemini response."""
    model_config = ConfigDict(extra="ignore")

    candidates: list[GeminiCandidate]

    def first_text(self) -> str | None:
        """Text of candidate[0].part[0]; None if either list is empty."""
        if not self.candidates:
            return None
        parts = self.candidates[0].content.parts
        if not parts:
            return None
        return parts[0].text
