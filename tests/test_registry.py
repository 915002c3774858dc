import httpx
import pytest

from shared.contracts.catalog import MODEL_CATALOG, SUPPORTED_PROVIDERS, is_compatible, models_for
from shared.errors import ConfigurationError, ProviderNotFoundError
from shared.llm_adapter import (
    AnthropicProvider,
    GoogleProvider,
    OpenAICompatibleProvider,
    ProviderConfig,
    ProviderRegistry,
)


@pytest.fixture
def http():
    return httpx.AsyncClient()


def test_catalog_covers_every_provider():
    assert set(MODEL_CATALOG) == set(SUPPORTED_PROVIDERS)
    for provider in SUPPORTED_PROVIDERS:
        assert models_for(provider)


def test_compatibility_is_exact_per_provider():
    assert is_compatible("gpt-4o", "openai")
    assert is_compatible("openai/gpt-oss-120b", "groq")
    assert not is_compatible("openai/gpt-oss-120b", "openai")
    assert not is_compatible("claude-opus-4-20250514", "google")
    assert models_for("mistral") == []


@pytest.mark.parametrize(
    "name, base_url, adapter",
    [
        ("openai", "https://api.openai.com/v1", OpenAICompatibleProvider),
        ("groq", "https://api.groq.com/openai/v1", OpenAICompatibleProvider),
        ("anthropic", "https://api.anthropic.com", AnthropicProvider),
        ("google", "https://generativelanguage.googleapis.com", GoogleProvider),
    ],
)
def test_resolve_builds_matching_adapter(http, name, base_url, adapter):
    provider = ProviderRegistry().resolve(name, ProviderConfig(name, "key", base_url), http)
    assert isinstance(provider, adapter)
    assert provider.provider_name == name


def test_resolve_unknown_provider(http):
    with pytest.raises(ProviderNotFoundError) as exc_info:
        ProviderRegistry().resolve("mistral", None, http)
    assert exc_info.value.status_code == 404


def test_resolve_without_key_is_configuration_error(http):
    config = ProviderConfig("openai", None, "https://api.openai.com/v1")
    with pytest.raises(ConfigurationError) as exc_info:
        ProviderRegistry().resolve("openai", config, http)
    assert exc_info.value.provider == "openai"
    assert exc_info.value.status_code == 500


def test_register_rejects_unsupported_names():
    with pytest.raises(ProviderNotFoundError):
        ProviderRegistry().register("mistral", OpenAICompatibleProvider)


def test_provider_config_repr_hides_key():
    config = ProviderConfig("openai", "sk-secret", "https://api.openai.com/v1")
    assert "sk-secret" not in repr(config)
    assert config.available
    assert not ProviderConfig("openai", "", "x").available
