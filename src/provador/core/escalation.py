"""Model escalation controller.

The controller obtains a generated try-on image by walking the escalation
chain from the requested tier upwards.  Candidates run strictly one after the
other; a later (more expensive) provider is never started while an earlier
one is still running, and nothing below the starting tier is ever tried.

Per-candidate outcomes
----------------------
- image extracted: the chain stops immediately and reports the provider
- no image (``None`` response or unknown layout): next candidate, no delay
- exception: logged, recorded, then one fixed pause before the next candidate

If the chain runs out, :class:`~provador.core.errors.ExhaustionError` is
raised carrying every recorded provider failure so the caller can classify
rate-limit and quota conditions from anywhere in the chain.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass, field

from provador.core.errors import AttemptFailure, ExhaustionError
from provador.core.extraction import extract_image
from provador.core.prompts import build_tryon_prompt
from provador.core.providers import ImageProvider
from provador.core.tiers import EscalationTier, candidate_tiers

logger = logging.getLogger(__name__)


@dataclass
class GenerationResult:
    """Image produced by the escalation chain."""

    image_url: str
    model_used: str
    tier: EscalationTier
    failures: list[AttemptFailure] = field(default_factory=list)


class EscalationController:
    """Try providers from a starting tier upwards until one yields an image.

    Args:
        providers: Exactly one provider per tier.
        fallback_delay: Seconds to wait after a provider raises before the
            next candidate is attempted.
        sleep: Awaitable sleep function (replaceable in tests).

    Raises:
        ValueError: If a tier has no provider.
    """

    def __init__(
        self,
        providers: Mapping[EscalationTier, ImageProvider],
        *,
        fallback_delay: float = 1.0,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        missing = [tier.value for tier in EscalationTier if tier not in providers]
        if missing:
            raise ValueError(f"No provider configured for tiers: {', '.join(missing)}")
        self._providers = dict(providers)
        self._fallback_delay = fallback_delay
        self._sleep = sleep

    @property
    def tier_models(self) -> dict[str, str]:
        """Provider name bound to each tier, in escalation order."""
        return {tier.value: self._providers[tier].name for tier in EscalationTier}

    def plan(self, start_tier: EscalationTier) -> list[tuple[EscalationTier, ImageProvider]]:
        """Return the ordered (tier, provider) candidates for *start_tier*."""
        return [(tier, self._providers[tier]) for tier in candidate_tiers(start_tier)]

    async def run(
        self,
        subject_url: str,
        garment_url: str,
        category: str | None,
        start_tier: EscalationTier,
    ) -> GenerationResult:
        """Generate a try-on image, escalating through the candidate list.

        Args:
            subject_url: Validated person photo URL.
            garment_url: Validated garment photo URL.
            category: Garment category hint passed into the prompt.
            start_tier: First tier to attempt.

        Returns:
            The first successfully extracted image and the provider that
            produced it.

        Raises:
            ExhaustionError: If no candidate produced an image.
        """
        failures: list[AttemptFailure] = []
        candidates = self.plan(start_tier)
        logger.info(
            "Escalation plan from %s: %s",
            start_tier.value,
            [provider.name for _, provider in candidates],
        )

        for tier, provider in candidates:
            prompt = build_tryon_prompt(tier, category)
            logger.info("Trying %s (%s tier)...", provider.name, tier.value)
            try:
                response = await provider.generate(prompt, subject_url, garment_url)
            except Exception as e:
                logger.warning("%s failed: %s", provider.name, e)
                failures.append(
                    AttemptFailure(provider.name, str(e), getattr(e, "status_code", None))
                )
                await self._sleep(self._fallback_delay)
                continue

            image_url = extract_image(response, provider.name) if response is not None else None
            if image_url:
                logger.info("%s succeeded", provider.name)
                return GenerationResult(image_url, provider.name, tier, failures)

            logger.info("%s returned no image, trying next...", provider.name)

        raise ExhaustionError(failures)
