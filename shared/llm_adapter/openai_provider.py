"""
OpenAI-compatible chat provider.

Serves every upstream that speaks the OpenAI Chat Completions protocol:
  - OpenAI  (base_url=https://api.openai.com/v1)
  - Groq    (base_url=https://api.groq.com/openai/v1)

The SDK is used for auth, endpoint paths and error types; stream frames are
read line by line from the raw HTTP response so a single corrupt frame can
be skipped instead of aborting the stream.
"""

from __future__ import annotations

from typing import Any, AsyncIterator

import httpx
from openai import AsyncOpenAI

from shared.contracts.chat import (
    ChatParameters,
    NormalizedResponse,
    ResponseMetadata,
    StreamChunk,
    Usage,
)
from shared.errors import ConfigurationError
from shared.llm_adapter.base import ChatProvider
from shared.llm_adapter.errors import UPSTREAM_FAILURES, upstream_error
from shared.llm_adapter.models import ProviderConfig
from shared.llm_adapter.streaming import DONE_SENTINEL, iter_sse_data, parse_frame

_LABELS: dict[str, str] = {"openai": "OpenAI", "groq": "Groq"}


class OpenAICompatibleProvider(ChatProvider):
    """Chat Completions adapter; one instance per request."""

    def __init__(
        self,
        config: ProviderConfig,
        http_client: httpx.AsyncClient | None = None,
        timeout: float = 60.0,
    ) -> None:
        if not config.api_key:
            raise ConfigurationError(
                f"API key not configured for {config.name}", provider=config.name
            )
        self.provider_name = config.name
        self._label = _LABELS.get(config.name, config.name)
        self._client = AsyncOpenAI(
            api_key=config.api_key,
            base_url=config.base_url,
            timeout=timeout,
            max_retries=0,
            http_client=http_client,
        )

    @staticmethod
    def build_request(prompt: str, model: str, parameters: ChatParameters) -> dict[str, Any]:
        body: dict[str, Any] = {
            "model": model,
            "messages": [{"role": "user", "content": prompt}],
            "temperature": parameters.temperature,
            "max_tokens": parameters.max_tokens,
            "top_p": parameters.top_p,
            "frequency_penalty": parameters.frequency_penalty,
            "presence_penalty": parameters.presence_penalty,
            "stop": parameters.stop or None,
        }
        return {key: value for key, value in body.items() if value is not None}

    async def generate_completion(
        self, prompt: str, model: str, parameters: ChatParameters
    ) -> NormalizedResponse:
        operation = f"{self._label} completion"
        try:
            response = await self._client.chat.completions.create(
                **self.build_request(prompt, model, parameters), stream=False
            )
            choice = response.choices[0]
            usage = response.usage
            return NormalizedResponse(
                content=choice.message.content or "",
                usage=Usage(
                    prompt_tokens=usage.prompt_tokens or 0,
                    completion_tokens=usage.completion_tokens or 0,
                    total_tokens=usage.total_tokens or 0,
                )
                if usage
                else None,
                metadata=ResponseMetadata(
                    model=response.model or model,
                    finish_reason=choice.finish_reason,
                ),
            )
        except UPSTREAM_FAILURES as exc:
            raise upstream_error(exc, self.provider_name, operation) from exc

    async def stream_completion(
        self, prompt: str, model: str, parameters: ChatParameters
    ) -> AsyncIterator[StreamChunk]:
        operation = f"{self._label} streaming completion"
        try:
            async with self._client.chat.completions.with_streaming_response.create(
                **self.build_request(prompt, model, parameters), stream=True
            ) as response:
                async for data in iter_sse_data(response.http_response.aiter_lines()):
                    if data == DONE_SENTINEL:
                        break
                    frame = parse_frame(data, self.provider_name)
                    if frame is None:
                        continue
                    text = _delta_text(frame)
                    if text:
                        yield StreamChunk.text(text)
        except UPSTREAM_FAILURES as exc:
            raise upstream_error(exc, self.provider_name, operation) from exc
        yield StreamChunk.done()


def _delta_text(frame: dict[str, Any]) -> str | None:
    choices = frame.get("choices")
    if not isinstance(choices, list) or not choices or not isinstance(choices[0], dict):
        return None
    delta = choices[0].get("delta")
    if not isinstance(delta, dict):
        return None
    content = delta.get("content")
    return content if isinstance(content, str) else None
