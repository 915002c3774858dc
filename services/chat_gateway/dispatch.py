"""
Model catalog and chat dispatch routes.

  GET  /api/models/providers   -- every provider with availability and models
  GET  /api/models/{provider}  -- catalog for one provider
  POST /api/models/chat        -- blocking completion
  POST /api/models/stream      -- server-sent events relay

A chat request moves through validate -> resolve -> invoke -> respond. Any
failure before the stream starts is raised and rendered by the app's
exception handlers; once the SSE headers are out, failures become a single
in-band ``{"error": ...}`` event instead.
"""

from __future__ import annotations

import json
import logging
import time
from typing import Any, AsyncIterator

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse, StreamingResponse

from services.chat_gateway.dependencies import get_config, read_json_body, resolve_available
from services.chat_gateway.validation import validate_chat_request
from shared.contracts.catalog import SUPPORTED_PROVIDERS, is_supported_provider, models_for
from shared.contracts.chat import ChatRequest, StreamChunk
from shared.errors import ProviderNotFoundError, ProviderUnavailableError, utc_timestamp
from shared.llm_adapter.base import ChatProvider
from shared.llm_adapter.streaming import DONE_SENTINEL
from shared.logging.logger import log_fields
from shared.observability.metrics import chat_requests, record_usage, upstream_latency

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/models", tags=["models"])

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}


def _elapsed_ms(started: float) -> int:
    return round((time.perf_counter() - started) * 1000)


def sse_event(payload: Any) -> str:
    if isinstance(payload, str):
        return f"data: {payload}\n\n"
    return f"data: {json.dumps(payload)}\n\n"


@router.get("/providers")
async def list_providers(request: Request):
    config = get_config(request)
    providers = {}
    for name in SUPPORTED_PROVIDERS:
        provider_config = config.provider(name)
        providers[name] = {
            "available": bool(provider_config and provider_config.available),
            "models": models_for(name),
        }
    return {"providers": providers, "timestamp": utc_timestamp()}


@router.get("/{provider}")
async def provider_models(provider: str, request: Request):
    if not is_supported_provider(provider):
        raise ProviderNotFoundError(provider)

    provider_config = get_config(request).provider(provider)
    if provider_config is None or not provider_config.available:
        error = ProviderUnavailableError(provider)
        logger.warning(error.message, extra=log_fields(provider=provider))
        return JSONResponse(
            status_code=error.status_code,
            content={**error.to_envelope(), "available": False},
        )

    return {
        "provider": provider,
        "models": models_for(provider),
        "available": True,
        "timestamp": utc_timestamp(),
    }


async def _prepare(request: Request, mode: str) -> tuple[ChatRequest, ChatProvider]:
    body = await read_json_body(request)
    chat_request = validate_chat_request(body, get_config(request).defaults.as_dict())
    try:
        adapter = resolve_available(request, chat_request.provider)
    except ProviderUnavailableError:
        chat_requests.labels(provider=chat_request.provider, mode=mode, outcome="unavailable").inc()
        raise
    logger.info(
        "Chat request accepted",
        extra=log_fields(
            provider=chat_request.provider,
            model=chat_request.model,
            mode=mode,
            prompt_length=len(chat_request.prompt),
        ),
    )
    return chat_request, adapter


@router.post("/chat")
async def chat(request: Request):
    chat_request, adapter = await _prepare(request, "sync")
    provider, model = chat_request.provider, chat_request.model

    started = time.perf_counter()
    try:
        result = await adapter.generate_completion(
            chat_request.prompt, model, chat_request.parameters
        )
    except Exception:
        chat_requests.labels(provider=provider, mode="sync", outcome="error").inc()
        raise
    finally:
        upstream_latency.labels(provider=provider, mode="sync").observe(
            time.perf_counter() - started
        )

    duration = _elapsed_ms(started)
    chat_requests.labels(provider=provider, mode="sync", outcome="success").inc()
    record_usage(provider, result.usage)
    logger.info(
        "Chat completion finished",
        extra=log_fields(
            provider=provider,
            model=model,
            duration_ms=duration,
            response_length=len(result.content),
        ),
    )

    return {
        "success": True,
        "provider": provider,
        "model": model,
        "response": result.to_dict(),
        "duration": duration,
        "timestamp": utc_timestamp(),
    }


async def _relay(adapter: ChatProvider, chat_request: ChatRequest) -> AsyncIterator[str]:
    provider = chat_request.provider
    started = time.perf_counter()
    outcome = "success"
    chunks = 0
    try:
        async for chunk in adapter.stream_completion(
            chat_request.prompt, chat_request.model, chat_request.parameters
        ):
            chunks += 1
            yield sse_event(chunk.to_dict())
        yield sse_event(DONE_SENTINEL)
    # Headers are already committed; the client only learns of failures in-band.
    except Exception as exc:
        outcome = "error"
        logger.error(
            "Streaming failed after %d chunks",
            chunks,
            exc_info=True,
            extra=log_fields(provider=provider, model=chat_request.model),
        )
        yield sse_event(StreamChunk.failure(str(exc) or "Streaming failed").to_dict())
    finally:
        upstream_latency.labels(provider=provider, mode="stream").observe(
            time.perf_counter() - started
        )
        chat_requests.labels(provider=provider, mode="stream", outcome=outcome).inc()
        logger.info(
            "Streaming completion finished",
            extra=log_fields(
                provider=provider,
                model=chat_request.model,
                chunks=chunks,
                outcome=outcome,
                duration_ms=_elapsed_ms(started),
            ),
        )


@router.post("/stream")
async def stream(request: Request):
    chat_request, adapter = await _prepare(request, "stream")
    return StreamingResponse(
        _relay(adapter, chat_request),
        media_type="text/event-stream",
        headers=SSE_HEADERS,
    )
