"""Builders and fakes shared by the test modules."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from services.chat_gateway.config import GatewayConfig
from shared.contracts.chat import (
    ChatParameters,
    NormalizedResponse,
    ResponseMetadata,
    StreamChunk,
    Usage,
)
from shared.llm_adapter.base import ChatProvider
from shared.llm_adapter.models import ProviderConfig

BASE_URLS = {
    "openai": "https://api.openai.com/v1",
    "anthropic": "https://api.anthropic.com",
    "groq": "https://api.groq.com/openai/v1",
    "google": "https://generativelanguage.googleapis.com",
}


def make_config(tmp_path, keys: dict[str, str] | None = None, **overrides) -> GatewayConfig:
    keys = {"openai": "sk-test"} if keys is None else keys
    providers = {
        name: ProviderConfig(name=name, api_key=keys.get(name), base_url=url)
        for name, url in BASE_URLS.items()
    }
    settings = {
        "environment": "test",
        "chat_history_dir": str(tmp_path / "history"),
        "providers": providers,
    }
    settings.update(overrides)
    return GatewayConfig(**settings)


@dataclass
class Script:
    """What the fake adapter returns, plus a record of how it was used."""

    content: str = "Hello there!"
    chunks: list[str] = field(default_factory=lambda: ["Hel", "lo"])
    error: Exception | None = None
    constructed: int = 0
    calls: list[tuple[str, str, str, ChatParameters]] = field(default_factory=list)


class FakeProvider(ChatProvider):
    def __init__(self, config: ProviderConfig, http_client: Any, timeout: float = 60.0, *, script: Script):
        script.constructed += 1
        self.provider_name = config.name
        self._script = script

    async def generate_completion(self, prompt, model, parameters):
        self._script.calls.append(("generate", prompt, model, parameters))
        if self._script.error is not None:
            raise self._script.error
        return NormalizedResponse(
            content=self._script.content,
            usage=Usage(prompt_tokens=3, completion_tokens=4, total_tokens=7),
            metadata=ResponseMetadata(model=model, finish_reason="stop"),
        )

    async def stream_completion(self, prompt, model, parameters):
        self._script.calls.append(("stream", prompt, model, parameters))
        for piece in self._script.chunks:
            yield StreamChunk.text(piece)
        if self._script.error is not None:
            raise self._script.error
        yield StreamChunk.done()


def sse_events(body: str) -> list[str]:
    """Data payloads of an SSE body, in order."""
    return [
        block[len("data: "):]
        for block in body.split("\n\n")
        if block.startswith("data: ")
    ]
