"""
Fixed model catalog and (model, provider) compatibility table.

This is the single source of truth for which providers exist and which
models each one accepts.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any


@dataclass(frozen=True)
class ModelInfo:
    id: str
    name: str
    description: str

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


SUPPORTED_PROVIDERS: tuple[str, ...] = ("openai", "anthropic", "groq", "google")

MODEL_CATALOG: dict[str, tuple[ModelInfo, ...]] = {
    "openai": (
        ModelInfo("gpt-4", "GPT-4", "Most capable model, best for complex tasks"),
        ModelInfo("gpt-4-turbo", "GPT-4 Turbo", "Faster and more efficient GPT-4"),
        ModelInfo("gpt-4o", "GPT-4o", "Latest GPT-4 optimized model"),
        ModelInfo("gpt-4o-mini", "GPT-4o Mini", "Compact version of GPT-4o"),
        ModelInfo("gpt-3.5-turbo", "GPT-3.5 Turbo", "Fast and efficient for most tasks"),
    ),
    "anthropic": (
        ModelInfo("claude-opus-4-1-20250805", "Claude Opus 4.1", "Latest Claude Opus model"),
        ModelInfo("claude-opus-4-20250514", "Claude Opus 4", "Most powerful Claude model"),
        ModelInfo("claude-sonnet-4-20250514", "Claude Sonnet 4", "Balanced Claude model for most tasks"),
    ),
    "groq": (
        ModelInfo("llama-3.1-8b-instant", "Llama 3.1 8B Instant", "Fast Llama model for quick responses"),
        ModelInfo("gemma2-9b-it", "Gemma2 9B IT", "Google Gemma2 instruction-tuned model"),
        ModelInfo("openai/gpt-oss-120b", "GPT OSS 120B", "Large open-source GPT model"),
    ),
    "google": (
        ModelInfo("gemini-2.5-pro", "Gemini 2.5 Pro", "Most advanced Gemini model"),
        ModelInfo("gemini-2.5-flash", "Gemini 2.5 Flash", "Fast and efficient Gemini model"),
        ModelInfo("gemini-2.5-flash-lite", "Gemini 2.5 Flash-Lite", "Lightweight Gemini model"),
        ModelInfo("gemini-2.0-flash", "Gemini 2.0 Flash", "Previous generation fast Gemini model"),
        ModelInfo("gemini-2.0-flash-lite", "Gemini 2.0 Flash-Lite", "Previous generation lightweight Gemini model"),
    ),
}

KNOWN_MODELS: frozenset[str] = frozenset(
    info.id for models in MODEL_CATALOG.values() for info in models
)

_COMPATIBLE_PAIRS: frozenset[tuple[str, str]] = frozenset(
    (info.id, provider)
    for provider, models in MODEL_CATALOG.items()
    for info in models
)


def is_supported_provider(provider: str) -> bool:
    return provider in MODEL_CATALOG


def is_compatible(model: str, provider: str) -> bool:
    return (model, provider) in _COMPATIBLE_PAIRS


def models_for(provider: str) -> list[dict[str, Any]]:
    """Catalog entries for *provider* as plain dicts (empty if unknown)."""
    return [info.to_dict() for info in MODEL_CATALOG.get(provider, ())]
