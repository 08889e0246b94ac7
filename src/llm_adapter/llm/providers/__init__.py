"""Provider adapters and the capability surface they share."""

from __future__ import annotations

from typing import TYPE_CHECKING

from ..models import ProviderType
from .base import LLMProvider, LoggingAuditor, NullAuditor, ResponseAuditor
from .gemini import GeminiProvider

if TYPE_CHECKING:
    from ...config import Configuration

_PROVIDERS: dict[ProviderType, type[GeminiProvider]] = {
    ProviderType.GEMINI: GeminiProvider,
}


def _provider_class(provider_type: ProviderType | str) -> type[GeminiProvider]:
    try:
        return _PROVIDERS[ProviderType(provider_type)]
    except ValueError as e:
        raise ValueError(
            f"Unknown provider '{provider_type}'. "
            f"Registered: {[p.value for p in _PROVIDERS]}"
        ) from e


def create_provider(
    provider_type: ProviderType | str, **kwargs
) -> LLMProvider:
    """Construct the adapter for a provider type."""
    return _provider_class(provider_type)(**kwargs)


def provider_from_config(
    config: Configuration, auditor: ResponseAuditor | None = None
) -> LLMProvider:
    """Construct the adapter for the configured ``llm.active`` provider."""
    return _provider_class(config.active_provider).from_config(
        config, auditor=auditor
    )


__all__ = [
    "GeminiProvider",
    "LLMProvider",
    "LoggingAuditor",
    "NullAuditor",
    "ResponseAuditor",
    "create_provider",
    "provider_from_config",
]
