from shared.llm_adapter.base import ChatProvider
from shared.llm_adapter.anthropic_provider import AnthropicProvider
from shared.llm_adapter.factory import ProviderRegistry
from shared.llm_adapter.google_provider import GoogleProvider
from shared.llm_adapter.models import ProviderConfig
from shared.llm_adapter.openai_provider import OpenAICompatibleProvider

__all__ = [
    "ChatProvider",
    "ProviderConfig",
    "ProviderRegistry",
    "OpenAICompatibleProvider",
    "AnthropicProvider",
    "GoogleProvider",
]
