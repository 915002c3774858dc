"""
Anthropic Messages API provider.

Talks to ``{base_url}/v1/messages`` directly over httpx. Streaming uses the
native SSE event stream; only ``text_delta`` content blocks carry text.
"""

from __future__ import annotations

from typing import Any, AsyncIterator

import httpx

from shared.contracts.chat import (
    ChatParameters,
    NormalizedResponse,
    ResponseMetadata,
    StreamChunk,
    Usage,
)
from shared.errors import ConfigurationError, UpstreamAPIError
from shared.llm_adapter.base import ChatProvider
from shared.llm_adapter.errors import (
    NETWORK_ERROR_STATUS,
    UPSTREAM_FAILURES,
    extract_error_message,
    upstream_error,
)
from shared.llm_adapter.models import ProviderConfig
from shared.llm_adapter.streaming import iter_sse_data, parse_frame

ANTHROPIC_VERSION = "2023-06-01"


class AnthropicProvider(ChatProvider):

    def __init__(
        self,
        config: ProviderConfig,
        http_client: httpx.AsyncClient,
        timeout: float = 60.0,
    ) -> None:
        if not config.api_key:
            raise ConfigurationError(
                f"API key not configured for {config.name}", provider=config.name
            )
        self.provider_name = config.name
        self._api_key = config.api_key
        self._url = f"{config.base_url}/v1/messages"
        self._http = http_client
        self._timeout = timeout

    def _headers(self) -> dict[str, str]:
        return {
            "x-api-key": self._api_key,
            "anthropic-version": ANTHROPIC_VERSION,
            "Content-Type": "application/json",
        }

    @staticmethod
    def build_request(
        prompt: str, model: str, parameters: ChatParameters, stream: bool = False
    ) -> dict[str, Any]:
        body: dict[str, Any] = {
            "model": model,
            "messages": [{"role": "user", "content": prompt}],
            "max_tokens": parameters.max_tokens,
            "temperature": parameters.temperature,
            "top_p": parameters.top_p,
            "stop_sequences": parameters.stop or None,
        }
        if stream:
            body["stream"] = True
        return {key: value for key, value in body.items() if value is not None}

    @staticmethod
    def normalize(data: dict[str, Any], model: str) -> NormalizedResponse:
        blocks = data["content"]
        text = "".join(
            block.get("text", "")
            for block in blocks
            if isinstance(block, dict) and block.get("type", "text") == "text"
        )
        usage = data.get("usage")
        normalized_usage = None
        if isinstance(usage, dict):
            prompt_tokens = int(usage.get("input_tokens") or 0)
            completion_tokens = int(usage.get("output_tokens") or 0)
            normalized_usage = Usage(
                prompt_tokens=prompt_tokens,
                completion_tokens=completion_tokens,
                total_tokens=prompt_tokens + completion_tokens,
            )
        return NormalizedResponse(
            content=text,
            usage=normalized_usage,
            metadata=ResponseMetadata(
                model=data.get("model") or model,
                finish_reason=data.get("stop_reason"),
            ),
        )

    async def generate_completion(
        self, prompt: str, model: str, parameters: ChatParameters
    ) -> NormalizedResponse:
        try:
            response = await self._http.post(
                self._url,
                json=self.build_request(prompt, model, parameters),
                headers=self._headers(),
                timeout=self._timeout,
            )
            response.raise_for_status()
            return self.normalize(response.json(), model)
        except UPSTREAM_FAILURES as exc:
            raise upstream_error(exc, self.provider_name, "Anthropic completion") from exc

    async def stream_completion(
        self, prompt: str, model: str, parameters: ChatParameters
    ) -> AsyncIterator[StreamChunk]:
        try:
            async with self._http.stream(
                "POST",
                self._url,
                json=self.build_request(prompt, model, parameters, stream=True),
                headers=self._headers(),
                timeout=self._timeout,
            ) as response:
                if response.is_error:
                    await response.aread()
                response.raise_for_status()
                async for data in iter_sse_data(response.aiter_lines()):
                    event = parse_frame(data, self.provider_name)
                    if event is None:
                        continue
                    event_type = event.get("type")
                    if event_type == "content_block_delta":
                        delta = event.get("delta")
                        if isinstance(delta, dict) and delta.get("type") == "text_delta":
                            text = delta.get("text")
                            if isinstance(text, str) and text:
                                yield StreamChunk.text(text)
                    elif event_type == "message_stop":
                        break
                    elif event_type == "error":
                        raise UpstreamAPIError(
                            extract_error_message(event) or "Anthropic stream error",
                            NETWORK_ERROR_STATUS,
                            self.provider_name,
                        )
        except UPSTREAM_FAILURES as exc:
            raise upstream_error(
                exc, self.provider_name, "Anthropic streaming completion"
            ) from exc
        yield StreamChunk.done()
