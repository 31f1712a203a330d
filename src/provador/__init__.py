"""Provador - virtual try-on service with tiered multi-model fallback."""

__version__ = "0.1.0"

from provador.core.config import ProvadorConfig, config
from provador.core.tiers import EscalationTier

__all__ = [
    "EscalationTier",
    "ProvadorConfig",
    "config",
]
