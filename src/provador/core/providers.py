"""Image-generation providers.

A provider turns a prompt plus the subject and garment image URLs into a raw
provider response.  Providers do not interpret the response; image extraction
happens in :mod:`provador.core.extraction` so every provider shares the same
shape handling.

Provider Contract
-----------------
``generate(prompt, subject_url, garment_url)`` either

- returns the decoded JSON response,
- returns ``None`` when the provider is not configured and was skipped, or
- raises :class:`~provador.core.errors.ProviderError`.

All three outcomes are non-fatal to the escalation chain.

Usage
-----
::

    async with httpx.AsyncClient() as client:
        providers = build_gateway_providers(config, client)
        response = await providers[EscalationTier.FAST].generate(prompt, subject, garment)
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any

import httpx

from provador.core.config import ProvadorConfig
from provador.core.errors import ProviderError
from provador.core.tiers import EscalationTier

logger = logging.getLogger(__name__)

# Keep logged/raised response excerpts short; bodies may embed base64 images.
_ERROR_BODY_LIMIT = 300


class ImageProvider(ABC):
    """Abstract base class for image-generation providers.

    Attributes:
        name: Identifier reported as ``model_used`` when this provider wins.
    """

    name: str = "base-provider"

    @abstractmethod
    async def generate(self, prompt: str, subject_url: str, garment_url: str) -> Any | None:
        """Request a try-on image.

        Args:
            prompt: Tier-specific instructions.
            subject_url: URL of the person photo (first image).
            garment_url: URL of the garment photo (second image).

        Returns:
            The decoded provider response, or ``None`` if skipped.

        Raises:
            ProviderError: If the provider call fails.
        """


class GatewayProvider(ImageProvider):
    """Provider backed by an OpenAI-compatible chat-completions gateway.

    Args:
        model_id: Gateway model identifier, e.g. ``"google/gemini-2.5-flash"``.
        client: Shared async HTTP client.
        url: Chat-completions endpoint.
        api_key: Bearer key.  When ``None`` the provider is skipped.
        timeout: Per-call timeout in seconds.
    """

    def __init__(
        self,
        model_id: str,
        client: httpx.AsyncClient,
        url: str,
        api_key: str | None,
        timeout: float = 120.0,
    ) -> None:
        self.model_id = model_id
        self.name = model_id.split("/")[-1]
        self._client = client
        self._url = url
        self._api_key = api_key
        self._timeout = timeout

    def build_payload(self, prompt: str, subject_url: str, garment_url: str) -> dict:
        return {
            "model": self.model_id,
            "messages": [
                {
                    "role": "user",
                    "content": [
                        {"type": "text", "text": prompt},
                        {"type": "image_url", "image_url": {"url": subject_url}},
                        {"type": "image_url", "image_url": {"url": garment_url}},
                    ],
                }
            ],
            "modalities": ["image", "text"],
        }

    async def generate(self, prompt: str, subject_url: str, garment_url: str) -> Any | None:
        if not self._api_key:
            logger.info("AI gateway key not configured, skipping %s", self.name)
            return None

        logger.info("Calling %s...", self.model_id)
        try:
            response = await self._client.post(
                self._url,
                headers={"Authorization": f"Bearer {self._api_key}"},
                json=self.build_payload(prompt, subject_url, garment_url),
                timeout=self._timeout,
            )
        except httpx.HTTPError as e:
            raise ProviderError(self.name, f"{self.name} request failed: {e!r}") from e

        if response.status_code >= 400:
            body = response.text[:_ERROR_BODY_LIMIT]
            logger.error("%s error: %s %s", self.name, response.status_code, body)
            raise ProviderError(
                self.name,
                f"{self.name} error: {response.status_code}",
                status_code=response.status_code,
            )

        try:
            data = response.json()
        except ValueError as e:
            raise ProviderError(self.name, f"{self.name} returned invalid JSON") from e

        logger.debug("%s response: %.500s", self.name, response.text)
        return data


def build_gateway_providers(
    config: ProvadorConfig, client: httpx.AsyncClient
) -> dict[EscalationTier, ImageProvider]:
    """Bind one gateway provider to each escalation tier."""
    models = {
        EscalationTier.FAST: config.fast_model,
        EscalationTier.BALANCED: config.balanced_model,
        EscalationTier.PREMIUM: config.premium_model,
    }
    return {
        tier: GatewayProvider(
            model_id,
            client,
            url=config.ai_gateway_url,
            api_key=config.ai_gateway_api_key,
            timeout=config.provider_timeout_seconds,
        )
        for tier, model_id in models.items()
    }
