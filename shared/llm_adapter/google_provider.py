"""
Google Generative Language (Gemini) provider.

Uses ``models/{model}:generateContent`` with the API key as a query
parameter. There is no incremental API wired up here, so streaming degrades
to one blocking call followed by a single content chunk and a done chunk.

The same endpoint backs the speech helpers used by the speech routes.
"""

from __future__ import annotations

import base64
import json
import logging
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
from shared.llm_adapter.errors import NETWORK_ERROR_STATUS, UPSTREAM_FAILURES, upstream_error
from shared.llm_adapter.models import ProviderConfig

logger = logging.getLogger(__name__)

DEFAULT_SPEECH_MODEL = "gemini-2.5-flash-lite"

_SPEECH_GENERATION_CONFIG = {"temperature": 0.2, "topP": 0.8, "topK": 40}


def _function_tool(name: str, description: str, field_description: str) -> dict[str, Any]:
    return {
        "functionDeclarations": [
            {
                "name": name,
                "description": description,
                "parameters": {
                    "type": "object",
                    "properties": {
                        "text": {"type": "string", "description": field_description},
                    },
                    "required": ["text"],
                },
            }
        ]
    }


def _function_args(part: dict[str, Any]) -> dict[str, Any]:
    args = (part.get("functionCall") or {}).get("args") or {}
    if isinstance(args, str):
        args = json.loads(args)
    return args if isinstance(args, dict) else {}


def _inline_data(part: dict[str, Any]) -> dict[str, Any] | None:
    data = part.get("inline_data") or part.get("inlineData")
    return data if isinstance(data, dict) else None


class GoogleProvider(ChatProvider):

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
        self._base_url = config.base_url
        self._http = http_client
        self._timeout = timeout

    @staticmethod
    def build_request(prompt: str, parameters: ChatParameters) -> dict[str, Any]:
        generation_config = {
            "temperature": parameters.temperature,
            "maxOutputTokens": parameters.max_tokens,
            "topP": parameters.top_p,
            "stopSequences": parameters.stop or None,
        }
        return {
            "contents": [{"parts": [{"text": prompt}]}],
            "generationConfig": {
                key: value for key, value in generation_config.items() if value is not None
            },
        }

    def _first_candidate(self, data: dict[str, Any], what: str) -> dict[str, Any]:
        candidates = data.get("candidates") or []
        if not candidates or not isinstance(candidates[0], dict):
            raise UpstreamAPIError(f"No {what} generated", NETWORK_ERROR_STATUS, self.provider_name)
        return candidates[0]

    async def _generate_content(
        self, model: str, body: dict[str, Any], operation: str, what: str
    ) -> tuple[dict[str, Any], dict[str, Any]]:
        """POST one generateContent call; return the raw body and its first candidate."""
        try:
            response = await self._http.post(
                f"{self._base_url}/v1beta/models/{model}:generateContent",
                params={"key": self._api_key},
                json=body,
                headers={"Content-Type": "application/json"},
                timeout=self._timeout,
            )
            response.raise_for_status()
            data = response.json()
            return data, self._first_candidate(data, what)
        except UPSTREAM_FAILURES as exc:
            raise upstream_error(exc, self.provider_name, operation) from exc

    async def generate_completion(
        self, prompt: str, model: str, parameters: ChatParameters
    ) -> NormalizedResponse:
        data, candidate = await self._generate_content(
            model, self.build_request(prompt, parameters), "Google AI completion", "response"
        )
        try:
            parts = candidate["content"]["parts"]
            text = "".join(part.get("text", "") for part in parts if isinstance(part, dict))
        except UPSTREAM_FAILURES as exc:
            raise upstream_error(exc, self.provider_name, "Google AI completion") from exc

        usage = None
        meta = data.get("usageMetadata")
        if isinstance(meta, dict):
            prompt_tokens = int(meta.get("promptTokenCount") or 0)
            completion_tokens = int(meta.get("candidatesTokenCount") or 0)
            usage = Usage(
                prompt_tokens=prompt_tokens,
                completion_tokens=completion_tokens,
                total_tokens=int(meta.get("totalTokenCount") or prompt_tokens + completion_tokens),
            )

        return NormalizedResponse(
            content=text,
            usage=usage,
            metadata=ResponseMetadata(model=model, finish_reason=candidate.get("finishReason")),
        )

    async def stream_completion(
        self, prompt: str, model: str, parameters: ChatParameters
    ) -> AsyncIterator[StreamChunk]:
        result = await self.generate_completion(prompt, model, parameters)
        yield StreamChunk.text(result.content)
        yield StreamChunk.done()

    async def transcribe_speech(
        self, audio_base64: str, model: str = DEFAULT_SPEECH_MODEL
    ) -> dict[str, Any]:
        """Transcribe base64 WAV audio; prefers the speech_to_text function call."""
        body = {
            "contents": [
                {"parts": [{"inline_data": {"mime_type": "audio/wav", "data": audio_base64}}]}
            ],
            "generationConfig": _SPEECH_GENERATION_CONFIG,
            "tools": [
                _function_tool(
                    "speech_to_text",
                    "Convert speech audio to text",
                    "The transcribed text from the audio",
                )
            ],
        }
        logger.debug("Transcribing %d characters of base64 audio", len(audio_base64))
        _, candidate = await self._generate_content(
            model, body, "Google AI speech transcription", "transcription"
        )
        metadata = {"model": model, "finish_reason": candidate.get("finishReason")}

        try:
            parts = [p for p in candidate["content"]["parts"] if isinstance(p, dict)]
            for part in parts:
                if (part.get("functionCall") or {}).get("name") == "speech_to_text":
                    return {"text": _function_args(part).get("text", ""), "metadata": metadata}
            return {"text": parts[0].get("text", ""), "metadata": metadata}
        except UPSTREAM_FAILURES as exc:
            raise upstream_error(exc, self.provider_name, "Google AI speech transcription") from exc

    async def generate_speech(
        self, text: str, model: str = DEFAULT_SPEECH_MODEL
    ) -> tuple[bytes, str, dict[str, Any]]:
        """Return ``(audio_bytes, mime_type, metadata)`` for *text*."""
        body = {
            "contents": [{"parts": [{"text": text}]}],
            "generationConfig": _SPEECH_GENERATION_CONFIG,
            "tools": [
                _function_tool(
                    "text_to_speech",
                    "Convert text to speech audio",
                    "The text to convert to speech",
                )
            ],
        }
        _, candidate = await self._generate_content(
            model, body, "Google AI speech synthesis", "speech"
        )
        metadata = {"model": model, "finish_reason": candidate.get("finishReason")}

        try:
            parts = [p for p in candidate["content"]["parts"] if isinstance(p, dict)]
            for part in parts:
                inline = _inline_data(part)
                if inline and str(inline.get("mime_type") or inline.get("mimeType") or "").startswith("audio/"):
                    mime_type = inline.get("mime_type") or inline.get("mimeType")
                    return base64.b64decode(inline["data"]), mime_type, metadata
                if (part.get("functionCall") or {}).get("name") == "text_to_speech":
                    args = _function_args(part)
                    if args.get("audio_data"):
                        audio = base64.b64decode(args["audio_data"])
                        return audio, args.get("mime_type") or "audio/wav", metadata
        except UPSTREAM_FAILURES as exc:
            raise upstream_error(exc, self.provider_name, "Google AI speech synthesis") from exc

        raise UpstreamAPIError(
            "No audio data in response", NETWORK_ERROR_STATUS, self.provider_name
        )
