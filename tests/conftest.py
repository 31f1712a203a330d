"""Shared pytest fixtures for Provador tests."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any
from unittest.mock import AsyncMock

import httpx
import pytest

from provador.core.config import ProvadorConfig
from provador.core.providers import ImageProvider
from provador.core.result_store import InMemoryResultStore
from provador.core.tiers import EscalationTier

SUBJECT_URL = "https://cdn.example.com/avatars/ana.jpg"
GARMENT_URL = "https://cdn.example.com/garments/blazer.jpg"

_DEFAULT_HEAD = (200, {"content-type": "image/jpeg", "content-length": "48000"})


class FakeProvider(ImageProvider):
    """Provider that replays scripted outcomes and records its calls.

    Each outcome is a response dict, ``None`` (skipped), or an exception
    instance to raise.  Once the script runs out the provider returns ``None``.
    """

    def __init__(self, name: str, outcomes: list[Any] | tuple = ()) -> None:
        self.name = name
        self._outcomes = list(outcomes)
        self.calls: list[tuple[str, str, str]] = []

    async def generate(self, prompt: str, subject_url: str, garment_url: str) -> Any | None:
        self.calls.append((prompt, subject_url, garment_url))
        outcome = self._outcomes.pop(0) if self._outcomes else None
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome


def build_image_response(url: str) -> dict:
    """Gateway response carrying *url* in the images array."""
    return {"choices": [{"message": {"role": "assistant", "images": [{"image_url": {"url": url}}]}}]}


@pytest.fixture
def image_response() -> Callable[[str], dict]:
    """Factory for gateway responses that contain an image."""
    return build_image_response


@pytest.fixture
def make_providers() -> Callable[..., dict[EscalationTier, FakeProvider]]:
    """Factory for one scripted FakeProvider per tier.

    Returns:
        Callable accepting ``fast``, ``balanced`` and ``premium`` outcome
        lists and returning the tier → provider mapping.
    """

    def _make(fast=(), balanced=(), premium=()) -> dict[EscalationTier, FakeProvider]:
        return {
            EscalationTier.FAST: FakeProvider("gemini-2.5-flash", fast),
            EscalationTier.BALANCED: FakeProvider("gemini-2.5-pro", balanced),
            EscalationTier.PREMIUM: FakeProvider("gemini-3-pro-image-preview", premium),
        }

    return _make


@pytest.fixture
def make_head_client() -> Callable[..., tuple[httpx.AsyncClient, list[tuple[str, str]]]]:
    """Factory for an AsyncClient whose HEAD responses are stubbed per URL.

    Unlisted URLs answer 200 with an ``image/jpeg`` content type.  URLs in
    ``error_urls`` raise a transport error instead.

    Returns:
        Callable returning ``(client, seen)`` where ``seen`` collects
        ``(method, url)`` for every request.
    """

    def _make(routes: dict | None = None, error_urls: tuple = ()):
        routes = routes or {}
        seen: list[tuple[str, str]] = []

        def handler(request: httpx.Request) -> httpx.Response:
            url = str(request.url)
            seen.append((request.method, url))
            if url in error_urls:
                raise httpx.ConnectError("connection refused", request=request)
            status, headers = routes.get(url, _DEFAULT_HEAD)
            return httpx.Response(status, headers=headers)

        return httpx.AsyncClient(transport=httpx.MockTransport(handler)), seen

    return _make


@pytest.fixture
def no_sleep() -> AsyncMock:
    """Awaitable sleep replacement that records requested delays."""
    return AsyncMock(return_value=None)


@pytest.fixture
def memory_store() -> InMemoryResultStore:
    return InMemoryResultStore()


@pytest.fixture
def test_config(monkeypatch) -> ProvadorConfig:
    """Configuration isolated from the developer's environment and .env file."""
    for name in (
        "PROVADOR_AI_GATEWAY_API_KEY",
        "PROVADOR_SUPABASE_URL",
        "PROVADOR_SUPABASE_SERVICE_ROLE_KEY",
        "PROVADOR_FALLBACK_DELAY_SECONDS",
    ):
        monkeypatch.delenv(name, raising=False)
    return ProvadorConfig(_env_file=None, ai_gateway_api_key="test-key")
