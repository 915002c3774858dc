"""
Provider registry -- single entry point for building adapters.

Supported providers:

  openai     OpenAI Chat Completions   -- needs OPENAI_API_KEY
  groq       Groq (OpenAI-compatible)  -- needs GROQ_API_KEY
  anthropic  Anthropic Messages API    -- needs ANTHROPIC_API_KEY
  google     Google Generative AI      -- needs GOOGLE_AI_API_KEY

Resolving a provider is a pure mapping: it never touches the network. A new
adapter is built per request; adapters keep nothing but their configuration
and the shared HTTP client.
"""

from __future__ import annotations

import logging
from typing import Callable

import httpx

from shared.contracts.catalog import SUPPORTED_PROVIDERS
from shared.errors import ConfigurationError, ProviderNotFoundError
from shared.llm_adapter.anthropic_provider import AnthropicProvider
from shared.llm_adapter.base import ChatProvider
from shared.llm_adapter.google_provider import GoogleProvider
from shared.llm_adapter.models import ProviderConfig
from shared.llm_adapter.openai_provider import OpenAICompatibleProvider

logger = logging.getLogger(__name__)

ProviderFactory = Callable[..., ChatProvider]

_DEFAULT_ADAPTERS: dict[str, ProviderFactory] = {
    "openai": OpenAICompatibleProvider,
    "groq": OpenAICompatibleProvider,
    "anthropic": AnthropicProvider,
    "google": GoogleProvider,
}


class ProviderRegistry:
    """Maps provider names to adapter classes (or any factory with the same signature)."""

    def __init__(self, timeout: float = 60.0) -> None:
        self._timeout = timeout
        self._adapters: dict[str, ProviderFactory] = dict(_DEFAULT_ADAPTERS)

    def register(self, provider_name: str, adapter: ProviderFactory) -> None:
        """Register or replace the adapter for a supported provider."""
        if provider_name not in SUPPORTED_PROVIDERS:
            raise ProviderNotFoundError(provider_name)
        self._adapters[provider_name] = adapter

    def resolve(
        self,
        provider_name: str,
        config: ProviderConfig | None,
        http_client: httpx.AsyncClient,
    ) -> ChatProvider:
        """
        Return a ready adapter for *provider_name*.

        Raises ProviderNotFoundError for names outside the fixed set and
        ConfigurationError when the provider has no credential.
        """
        adapter = self._adapters.get(provider_name)
        if adapter is None:
            raise ProviderNotFoundError(provider_name)
        if config is None or not config.available:
            raise ConfigurationError(
                f"API key not configured for {provider_name}", provider=provider_name
            )

        provider = adapter(config, http_client, timeout=self._timeout)
        logger.debug("Resolved %r for %s", provider, provider_name)
        return provider
