"""Pytest configuration and fixtures for the test suite."""

import os
from collections.abc import AsyncIterator

import pytest
import pytest_asyncio

from openrouter_client import OpenRouterClient, OpenRouterSettings
from tests.fixtures import API_KEY, BASE_URL


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch, tmp_path):
    """Keep real OPENROUTER_* variables and .env files out of tests."""
    for name in list(os.environ):
        if name.startswith("OPENROUTER_"):
            monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def settings() -> OpenRouterSettings:
    """Settings pointing at the mock base URL with instant retries."""
    return OpenRouterSettings(
        api_key=API_KEY,
        base_url=BASE_URL,
        retry_delay=0,
        max_retry_delay=0,
    )


@pytest_asyncio.fixture
async def client(settings: OpenRouterSettings) -> AsyncIterator[OpenRouterClient]:
    """Provide an OpenRouterClient that is closed after the test."""
    async with OpenRouterClient(settings=settings) as openrouter:
        yield openrouter
