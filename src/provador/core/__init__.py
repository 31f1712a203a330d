"""Core try-on functionality.

This package contains everything the HTTP layer delegates to:

- **config.py**: Configuration management using Pydantic Settings
  (``PROVADOR_`` environment prefix)
- **tiers.py**: Escalation tiers and candidate ordering
- **prompts.py**: Tier-specific try-on prompts
- **providers.py**: Image-generation providers (AI gateway)
- **extraction.py**: Image extraction from heterogeneous provider responses
- **validation.py**: HEAD-based pre-flight checks of the input images
- **escalation.py**: Sequential provider fallback
- **errors.py**: Error taxonomy and user-facing message classification
- **result_store.py**: Durable try-on result records
- **tryon.py**: End-to-end orchestration of one try-on call

Usage Example
-------------
::

    import httpx

    from provador.core import (
        EscalationController,
        TryOnJob,
        TryOnService,
        build_gateway_providers,
        config,
        create_result_store,
    )

    async with httpx.AsyncClient() as client:
        controller = EscalationController(build_gateway_providers(config, client))
        service = TryOnService(client, controller, create_result_store(config))
        outcome = await service.run(TryOnJob(subject_url, garment_url, demo_mode=True))
"""

from provador.core.config import ProvadorConfig, config
from provador.core.escalation import EscalationController, GenerationResult
from provador.core.providers import GatewayProvider, ImageProvider, build_gateway_providers
from provador.core.result_store import (
    InMemoryResultStore,
    ResultStatus,
    ResultStore,
    SupabaseResultStore,
    create_result_store,
)
from provador.core.tiers import EscalationTier, candidate_tiers, tier_for_retry_count
from provador.core.tryon import TryOnJob, TryOnOutcome, TryOnService

__all__ = [
    "EscalationController",
    "EscalationTier",
    "GatewayProvider",
    "GenerationResult",
    "ImageProvider",
    "InMemoryResultStore",
    "ProvadorConfig",
    "ResultStatus",
    "ResultStore",
    "SupabaseResultStore",
    "TryOnJob",
    "TryOnOutcome",
    "TryOnService",
    "build_gateway_providers",
    "candidate_tiers",
    "config",
    "create_result_store",
    "tier_for_retry_count",
]
