from __future__ import annotations

import httpx
from fastapi import Request

from services.chat_gateway.config import GatewayConfig
from shared.errors import ProviderUnavailableError, ValidationError
from shared.llm_adapter.base import ChatProvider
from shared.llm_adapter.factory import ProviderRegistry


def get_config(request: Request) -> GatewayConfig:
    return request.app.state.config


def get_registry(request: Request) -> ProviderRegistry:
    return request.app.state.registry


def get_http_client(request: Request) -> httpx.AsyncClient:
    return request.app.state.http_client


def get_history(request: Request):
    return request.app.state.history


async def read_json_body(request: Request):
    """Parsed JSON body; an empty or undecodable body is a validation error."""
    try:
        return await request.json()
    except ValueError as exc:
        raise ValidationError(
            details=[{"field": "body", "message": "Request body must be valid JSON", "value": None}]
        ) from exc


def resolve_available(request: Request, provider_name: str) -> ChatProvider:
    """
    Build the adapter for *provider_name*, refusing unconfigured providers
    before anything is constructed.
    """
    config = get_config(request)
    provider_config = config.provider(provider_name)
    if provider_config is None or not provider_config.available:
        raise ProviderUnavailableError(provider_name)
    return get_registry(request).resolve(
        provider_name, provider_config, get_http_client(request)
    )
