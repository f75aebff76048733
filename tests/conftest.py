"""Pytest fixtures for the image analyzer."""

from __future__ import annotations

from typing import Any, Optional, Sequence

import pytest
from fastapi.testclient import TestClient

from app.config import Settings, get_settings
from app.main import app
from app.services.llm import LLMProvider, get_provider

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00\x00\x00\rIHDR" + bytes(range(64))
SORTED_TEXT = "Sorted from least to greatest:\n1. 2/6 = 0.333\n2. π/6 = 0.524\n3. √12 ≈ 3.464"


class FakeProvider(LLMProvider):
    """Records every call and returns a canned answer or raises ``error``."""

    name = "fake"

    def __init__(self, text: str = SORTED_TEXT, error: Optional[Exception] = None) -> None:
        self.text = text
        self.error = error
        self.calls: list[list[Any]] = []

    def chat(self, messages: Sequence[Any]) -> tuple[str, dict[str, Any]]:
        self.calls.append(list(messages))
        if self.error is not None:
            raise self.error
        return self.text, {"model": "fake"}


@pytest.fixture
def settings() -> Settings:
    """Configured, production-mode settings. Tests mutate fields as needed."""
    return Settings(openai_api_key="sk-test", environment="production", llm_provider="openai")


@pytest.fixture
def fake_provider() -> FakeProvider:
    return FakeProvider()


@pytest.fixture
def client(settings: Settings, fake_provider: FakeProvider):
    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_provider] = lambda: fake_provider
    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def png_file():
    return {"image": ("numbers.png", PNG_BYTES, "image/png")}
