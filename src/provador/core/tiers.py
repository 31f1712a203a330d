"""Escalation tiers for image generation.

Tiers rank providers by cost and quality.  A call starts at the tier chosen
from the client's retry count and may only escalate upwards from there, so
repeated client retries progressively skip the cheaper providers.

========  ===========  =========================================
retry     start tier   candidate order
========  ===========  =========================================
0         fast         fast, balanced, premium
1         balanced     balanced, premium
>= 2      premium      premium
========  ===========  =========================================
"""

from __future__ import annotations

from enum import Enum


class EscalationTier(str, Enum):
    """Ordered quality tier.  Declaration order is escalation order."""

    FAST = "fast"
    BALANCED = "balanced"
    PREMIUM = "premium"

    @property
    def rank(self) -> int:
        return _ORDER.index(self)


_ORDER: list[EscalationTier] = list(EscalationTier)


def tier_for_retry_count(retry_count: int) -> EscalationTier:
    """Select the starting tier for a caller-supplied retry count.

    Args:
        retry_count: Number of times the caller has already retried this
            try-on.  It is trusted as given and never incremented here.

    Returns:
        ``FAST`` for 0, ``BALANCED`` for 1, ``PREMIUM`` for anything higher.

    Raises:
        ValueError: If *retry_count* is negative.
    """
    if retry_count < 0:
        raise ValueError(f"retry_count must be non-negative, got {retry_count}")
    return _ORDER[min(retry_count, len(_ORDER) - 1)]


def candidate_tiers(start: EscalationTier) -> list[EscalationTier]:
    """Return *start* followed by every tier ranked above it."""
    return _ORDER[start.rank :]
