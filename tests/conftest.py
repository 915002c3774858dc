from __future__ import annotations

import functools

import pytest
from fastapi.testclient import TestClient

from services.chat_gateway.config import GatewayConfig
from services.chat_gateway.main import create_app
from shared.llm_adapter.factory import ProviderRegistry
from tests.helpers import FakeProvider, Script, make_config


@pytest.fixture
def script() -> Script:
    return Script()


@pytest.fixture
def registry(script) -> ProviderRegistry:
    registry = ProviderRegistry()
    for name in ("openai", "anthropic", "groq", "google"):
        registry.register(name, functools.partial(FakeProvider, script=script))
    return registry


@pytest.fixture
def config(tmp_path) -> GatewayConfig:
    return make_config(tmp_path)


@pytest.fixture
def client(config, registry):
    with TestClient(create_app(config=config, registry=registry)) as test_client:
        yield test_client
