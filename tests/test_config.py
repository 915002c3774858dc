import pytest

from services.chat_gateway.config import GatewayConfig
from shared.errors import ConfigurationError


def test_defaults_without_environment():
    config = GatewayConfig.from_env({})
    assert config.environment == "development"
    assert config.port == 3001
    assert config.request_timeout == 60.0
    assert config.cors_origins == ("*",)
    assert config.available_providers() == []
    assert config.provider("anthropic").base_url == "https://api.anthropic.com"
    assert config.defaults.as_dict() == {
        "temperature": 0.7,
        "max_tokens": 1000,
        "top_p": 1.0,
        "frequency_penalty": 0.0,
        "presence_penalty": 0.0,
    }


def test_provider_keys_and_base_urls():
    config = GatewayConfig.from_env(
        {
            "OPENAI_API_KEY": "sk-1",
            "GROQ_API_KEY": "gsk-1",
            "GROQ_BASE_URL": "http://localhost:9000/v1/",
        }
    )
    assert config.available_providers() == ["openai", "groq"]
    assert config.provider("groq").base_url == "http://localhost:9000/v1"


def test_google_key_falls_back_to_legacy_name():
    config = GatewayConfig.from_env({"GOOGLE_API_KEY": "g-legacy"})
    assert config.provider("google").api_key == "g-legacy"
    config = GatewayConfig.from_env({"GOOGLE_API_KEY": "g-legacy", "GOOGLE_AI_API_KEY": "g-new"})
    assert config.provider("google").api_key == "g-new"


def test_production_requires_a_key():
    with pytest.raises(ConfigurationError):
        GatewayConfig.from_env({"APP_ENV": "production"})
    config = GatewayConfig.from_env({"APP_ENV": "production", "ANTHROPIC_API_KEY": "ak"})
    assert config.is_production


@pytest.mark.parametrize(
    "env",
    [
        {"APP_ENV": "staging"},
        {"DEFAULT_TEMPERATURE": "3"},
        {"DEFAULT_MAX_TOKENS": "lots"},
        {"PORT": "0"},
    ],
)
def test_invalid_values_fail_fast(env):
    with pytest.raises(ConfigurationError):
        GatewayConfig.from_env(env)


def test_cors_origins_are_split():
    config = GatewayConfig.from_env({"CORS_ALLOW_ORIGINS": "http://a.test, http://b.test"})
    assert config.cors_origins == ("http://a.test", "http://b.test")


def test_host_and_port_from_environment():
    config = GatewayConfig.from_env({"HOST": "127.0.0.1", "PORT": "8080"})
    assert config.host == "127.0.0.1"
    assert config.port == 8080
    assert GatewayConfig.from_env({}).host == "0.0.0.0"
