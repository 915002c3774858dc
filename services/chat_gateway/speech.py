"""Speech-to-text and text-to-speech routes (Google only)."""

from __future__ import annotations

import base64
import binascii
import logging
from typing import Any

from fastapi import APIRouter, Request, Response

from services.chat_gateway.dependencies import read_json_body, resolve_available
from shared.errors import ValidationError
from shared.llm_adapter.google_provider import DEFAULT_SPEECH_MODEL, GoogleProvider
from shared.logging.logger import log_fields

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/speech", tags=["speech"])

SPEECH_PROVIDERS = ("google",)


def _field_error(field: str, message: str, value: Any = None) -> ValidationError:
    return ValidationError(message, details=[{"field": field, "message": message, "value": value}])


def _speech_options(body: Any, field: str, label: str) -> tuple[str, str, str]:
    if not isinstance(body, dict):
        raise _field_error("body", "Request body must be a JSON object")
    value = body.get(field)
    if not isinstance(value, str) or not value:
        raise _field_error(field, f"{label} is required")
    provider = body.get("provider") or "google"
    if provider not in SPEECH_PROVIDERS:
        raise _field_error("provider", f"Speech is not supported by {provider}", provider)
    model = body.get("model") or DEFAULT_SPEECH_MODEL
    return value, provider, model


def _speech_adapter(request: Request, provider: str) -> GoogleProvider:
    adapter = resolve_available(request, provider)
    if not isinstance(adapter, GoogleProvider):
        raise _field_error("provider", f"Speech is not supported by {provider}", provider)
    return adapter


@router.post("/transcribe")
async def transcribe(request: Request):
    audio, provider, model = _speech_options(
        await read_json_body(request), "audioData", "Audio data"
    )
    try:
        base64.b64decode(audio, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise _field_error("audioData", "Audio data must be base64 encoded") from exc

    adapter = _speech_adapter(request, provider)
    result = await adapter.transcribe_speech(audio, model)
    logger.info(
        "Speech transcribed",
        extra=log_fields(provider=provider, model=model, text_length=len(result["text"])),
    )
    return result


@router.post("/synthesize")
async def synthesize(request: Request):
    text, provider, model = _speech_options(await read_json_body(request), "text", "Text")
    adapter = _speech_adapter(request, provider)
    audio, mime_type, _ = await adapter.generate_speech(text, model)
    logger.info(
        "Speech synthesized",
        extra=log_fields(provider=provider, model=model, audio_bytes=len(audio)),
    )
    return Response(
        content=audio,
        media_type=mime_type,
        headers={"Content-Disposition": 'attachment; filename="speech.wav"'},
    )
