"""
Chat Gateway -- one HTTP API in front of several LLM providers.

Routes:
1. GET  /health, GET /metrics
2. /api/models/*          -- catalog, blocking chat and SSE streaming chat
3. /api/save-chat etc.    -- file-backed chat history
4. /api/speech/*          -- Google speech-to-text / text-to-speech

Shared state (config, provider registry, one httpx client, history store)
is built once in the lifespan and hung off ``app.state``; nothing mutates it
while requests are in flight.
"""

from __future__ import annotations

import logging
import time
import traceback
from contextlib import asynccontextmanager
from http import HTTPStatus

import httpx
import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from services.chat_gateway import dispatch, history, speech
from services.chat_gateway.config import GatewayConfig
from services.chat_gateway.history import ChatHistoryStore
from shared.errors import GatewayError, InternalError, user_message, utc_timestamp
from shared.llm_adapter.factory import ProviderRegistry
from shared.logging.logger import log_fields, setup_logging
from shared.observability.metrics import metrics_response

SERVICE_NAME = "chat_gateway"

logger = logging.getLogger(SERVICE_NAME)


def _log_failure(request: Request, status_code: int, message: str, exc: BaseException) -> None:
    fields = log_fields(method=request.method, path=request.url.path, status=status_code)
    if status_code >= 500:
        logger.error(message, exc_info=exc, extra=fields)
    else:
        logger.warning(message, extra=fields)


async def gateway_error_handler(request: Request, exc: GatewayError) -> JSONResponse:
    _log_failure(request, exc.status_code, exc.message, exc)
    return JSONResponse(status_code=exc.status_code, content=exc.to_envelope())


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    try:
        kind = HTTPStatus(exc.status_code).phrase
    except ValueError:
        kind = "HTTP Error"
    _log_failure(request, exc.status_code, str(exc.detail), exc)
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": kind,
            "message": str(exc.detail),
            "userMessage": user_message(exc.status_code),
            "timestamp": utc_timestamp(),
        },
        headers=getattr(exc, "headers", None),
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    _log_failure(request, 500, "Unhandled error", exc)
    body = InternalError(str(exc) or None).to_envelope()
    if not request.app.state.config.is_production:
        body["stack"] = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    return JSONResponse(status_code=500, content=body)


def create_app(
    config: GatewayConfig | None = None,
    registry: ProviderRegistry | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> FastAPI:
    """
    Build the gateway application.

    ``config`` defaults to the environment; ``registry`` and ``transport``
    let callers swap adapters or the upstream network out.
    """
    cfg = config or GatewayConfig.from_env()

    @asynccontextmanager
    async def lifespan(application: FastAPI):
        setup_logging(SERVICE_NAME, cfg.log_level)

        application.state.config = cfg
        application.state.registry = registry or ProviderRegistry(timeout=cfg.request_timeout)
        application.state.http_client = httpx.AsyncClient(
            timeout=cfg.request_timeout, transport=transport
        )
        application.state.history = ChatHistoryStore(cfg.chat_history_dir)

        logger.info(
            "Chat Gateway ready",
            extra=log_fields(
                environment=cfg.environment,
                port=cfg.port,
                available_providers=cfg.available_providers(),
            ),
        )
        if not cfg.available_providers():
            logger.warning("No provider API keys configured; chat requests will return 503")
        yield

        logger.info("Shutting down")
        await application.state.http_client.aclose()

    application = FastAPI(
        title="Chat Gateway",
        version=cfg.version,
        description="Unified chat API over OpenAI, Anthropic, Groq and Google models",
        lifespan=lifespan,
    )
    # read by the exception handlers
    application.state.config = cfg

    application.add_middleware(
        CORSMiddleware,
        allow_origins=list(cfg.cors_origins),
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @application.middleware("http")
    async def log_requests(request: Request, call_next):
        started = time.perf_counter()
        response = await call_next(request)
        duration_ms = round((time.perf_counter() - started) * 1000)
        level = logging.WARNING if response.status_code >= 400 else logging.INFO
        logger.log(
            level,
            "%s %s",
            request.method,
            request.url.path,
            extra=log_fields(
                method=request.method,
                path=request.url.path,
                status=response.status_code,
                duration_ms=duration_ms,
            ),
        )
        return response

    application.add_exception_handler(GatewayError, gateway_error_handler)
    application.add_exception_handler(StarletteHTTPException, http_error_handler)
    application.add_exception_handler(Exception, unhandled_error_handler)

    @application.get("/health")
    async def health():
        return {
            "status": "OK",
            "timestamp": utc_timestamp(),
            "environment": cfg.environment,
            "version": cfg.version,
        }

    @application.get("/metrics")
    async def metrics():
        return metrics_response()

    application.include_router(dispatch.router)
    application.include_router(history.router)
    application.include_router(speech.router)
    return application


app = create_app()


def run() -> None:
    """Serve the module-level app on the configured host and port."""
    cfg = app.state.config
    # logging is configured by the lifespan
    uvicorn.run(app, host=cfg.host, port=cfg.port, log_config=None)


if __name__ == "__main__":
    run()
