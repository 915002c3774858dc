from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Any, Mapping

from shared.errors import ConfigurationError
from shared.llm_adapter.models import ProviderConfig

ENVIRONMENTS = ("development", "production", "test")

# provider -> (api key variables in lookup order, base url variable, default base url)
_PROVIDER_ENV: dict[str, tuple[tuple[str, ...], str, str]] = {
    "openai": (("OPENAI_API_KEY",), "OPENAI_BASE_URL", "https://api.openai.com/v1"),
    "anthropic": (("ANTHROPIC_API_KEY",), "ANTHROPIC_BASE_URL", "https://api.anthropic.com"),
    "groq": (("GROQ_API_KEY",), "GROQ_BASE_URL", "https://api.groq.com/openai/v1"),
    "google": (
        ("GOOGLE_AI_API_KEY", "GOOGLE_API_KEY"),
        "GOOGLE_AI_BASE_URL",
        "https://generativelanguage.googleapis.com",
    ),
}


def _number(env: Mapping[str, str], name: str, default: float, low: float, high: float, cast=float):
    raw = (env.get(name) or "").strip()
    if not raw:
        return cast(default)
    try:
        value = cast(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}") from exc
    if not low <= value <= high:
        raise ConfigurationError(f"{name} must be between {low} and {high}, got {value}")
    return value


@dataclass(frozen=True)
class DefaultParameters:
    temperature: float = 0.7
    max_tokens: int = 1000
    top_p: float = 1.0
    frequency_penalty: float = 0.0
    presence_penalty: float = 0.0

    @classmethod
    def from_env(cls, env: Mapping[str, str]) -> DefaultParameters:
        return cls(
            temperature=_number(env, "DEFAULT_TEMPERATURE", 0.7, 0, 2),
            max_tokens=_number(env, "DEFAULT_MAX_TOKENS", 1000, 1, 8000, cast=int),
            top_p=_number(env, "DEFAULT_TOP_P", 1.0, 0, 1),
            frequency_penalty=_number(env, "DEFAULT_FREQUENCY_PENALTY", 0.0, -2, 2),
            presence_penalty=_number(env, "DEFAULT_PRESENCE_PENALTY", 0.0, -2, 2),
        )

    def as_dict(self) -> dict[str, Any]:
        return {
            "temperature": self.temperature,
            "max_tokens": self.max_tokens,
            "top_p": self.top_p,
            "frequency_penalty": self.frequency_penalty,
            "presence_penalty": self.presence_penalty,
        }


@dataclass(frozen=True)
class GatewayConfig:
    environment: str = "development"
    host: str = "0.0.0.0"
    port: int = 3001
    log_level: str = "INFO"
    version: str = "1.0.0"
    request_timeout: float = 60.0
    chat_history_dir: str = "chat_history"
    cors_origins: tuple[str, ...] = ("*",)
    providers: Mapping[str, ProviderConfig] = field(default_factory=dict)
    defaults: DefaultParameters = field(default_factory=DefaultParameters)

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    def provider(self, name: str) -> ProviderConfig | None:
        return self.providers.get(name)

    def available_providers(self) -> list[str]:
        return [name for name, pc in self.providers.items() if pc.available]

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> GatewayConfig:
        env = os.environ if environ is None else environ

        environment = (env.get("APP_ENV") or "development").strip().lower()
        if environment not in ENVIRONMENTS:
            raise ConfigurationError(
                f"APP_ENV must be one of {', '.join(ENVIRONMENTS)}, got {environment!r}"
            )

        providers: dict[str, ProviderConfig] = {}
        for name, (key_vars, url_var, default_url) in _PROVIDER_ENV.items():
            api_key = next((env[var] for var in key_vars if env.get(var)), None)
            providers[name] = ProviderConfig(
                name=name,
                api_key=api_key,
                base_url=(env.get(url_var) or default_url).rstrip("/"),
            )

        if environment == "production" and not any(pc.available for pc in providers.values()):
            raise ConfigurationError(
                "At least one AI model API key must be provided in production"
            )

        origins = tuple(
            item.strip()
            for item in (env.get("CORS_ALLOW_ORIGINS") or "*").split(",")
            if item.strip()
        )

        return cls(
            environment=environment,
            host=(env.get("HOST") or "0.0.0.0").strip(),
            port=_number(env, "PORT", 3001, 1, 65535, cast=int),
            log_level=(env.get("LOG_LEVEL") or "INFO").upper(),
            version=env.get("APP_VERSION") or "1.0.0",
            request_timeout=_number(env, "LLM_REQUEST_TIMEOUT", 60.0, 1, 600),
            chat_history_dir=env.get("CHAT_HISTORY_DIR") or "chat_history",
            cors_origins=origins or ("*",),
            providers=providers,
            defaults=DefaultParameters.from_env(env),
        )
