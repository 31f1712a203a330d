"""Try-on orchestration: validation, escalation and result persistence.

:class:`TryOnService` runs one try-on call end to end::

    input check -> mark processing -> validate images (concurrently)
        -> escalate providers -> mark completed | failed -> outcome

The caller creates the pending record beforehand and passes its id together
with a retry count.  The retry count only selects the starting escalation
tier; it is stored as given and never incremented here, so the caller must
increment it across repeated attempts and serialise retries for one record.

Demo mode (no ``result_id``, or ``demo_mode`` set) runs exactly the same
validation and escalation but performs no store writes.

Store backends are synchronous, so every write runs in a worker thread via
:func:`asyncio.to_thread` and never blocks the event loop.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

import httpx

from provador.core.errors import (
    GENERIC_MESSAGE,
    InputError,
    TryOnError,
    classify_failure,
)
from provador.core.escalation import EscalationController
from provador.core.result_store import ResultStatus, ResultStore
from provador.core.tiers import tier_for_retry_count
from provador.core.validation import validate_inputs

logger = logging.getLogger(__name__)

FAILED_MODEL_MARKER = "failed"


@dataclass
class TryOnJob:
    """A single try-on call.  Transient; discarded after the response."""

    subject_image_url: str | None
    garment_image_url: str | None
    category: str | None = None
    result_id: str | None = None
    demo_mode: bool = False
    retry_count: int = 0

    @property
    def persists(self) -> bool:
        return bool(self.result_id) and not self.demo_mode


@dataclass
class TryOnOutcome:
    """Terminal result of a try-on call."""

    success: bool
    result_image_url: str | None = None
    processing_time_ms: int | None = None
    model_used: str | None = None
    retry_count: int = 0
    user_message: str | None = None
    is_rate_limited: bool = False

    @property
    def status_code(self) -> int:
        if self.success:
            return 200
        return 429 if self.is_rate_limited else 400

    def to_payload(self) -> dict[str, Any]:
        if self.success:
            return {
                "success": True,
                "resultImageUrl": self.result_image_url,
                "processingTimeMs": self.processing_time_ms,
                "model": self.model_used,
                "retryCount": self.retry_count,
            }
        return {"success": False, "error": self.user_message or GENERIC_MESSAGE}


class TryOnService:
    """Runs try-on calls against a controller and a result store.

    Args:
        client: Async HTTP client used for image validation.
        controller: Escalation controller holding the providers.
        store: Result store for non-demo calls.
        min_image_bytes: Small-image warning threshold for validation.
        default_category: Category used when the job has none.
        clock: Monotonic clock in seconds (replaceable in tests).
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        controller: EscalationController,
        store: ResultStore,
        *,
        min_image_bytes: int = 5000,
        default_category: str = "upper_body",
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._client = client
        self._controller = controller
        self._store = store
        self._min_image_bytes = min_image_bytes
        self._default_category = default_category
        self._clock = clock

    @property
    def store(self) -> ResultStore:
        return self._store

    @property
    def controller(self) -> EscalationController:
        return self._controller

    async def _write(self, job: TryOnJob, fields: dict[str, Any]) -> None:
        if not job.persists:
            return
        try:
            await asyncio.to_thread(self._store.update, job.result_id, fields)
        except Exception:
            # A failed write must not change the response the caller gets.
            logger.exception("Failed to update try-on result %s", job.result_id)

    def _check_input(self, job: TryOnJob) -> None:
        if not job.subject_image_url or not job.garment_image_url:
            raise InputError()
        if job.retry_count < 0:
            raise InputError("retryCount deve ser um número não negativo.")

    async def run(self, job: TryOnJob) -> TryOnOutcome:
        """Execute one try-on call.

        Returns:
            The outcome.  Failures are returned, not raised; their message
            is always one of the fixed user-safe strings.
        """
        logger.info(
            "Virtual try-on request: result_id=%s demo=%s retry=%s category=%s",
            job.result_id,
            job.demo_mode,
            job.retry_count,
            job.category,
        )

        try:
            self._check_input(job)
        except InputError as e:
            logger.warning("Rejected try-on request: %s", e)
            return TryOnOutcome(success=False, retry_count=job.retry_count, user_message=str(e))

        await self._write(job, {"status": ResultStatus.PROCESSING.value})
        started = self._clock()

        try:
            await validate_inputs(
                self._client,
                job.subject_image_url,
                job.garment_image_url,
                min_bytes=self._min_image_bytes,
            )
            start_tier = tier_for_retry_count(job.retry_count)
            logger.info("Target tier for retry %s: %s", job.retry_count, start_tier.value)
            result = await self._controller.run(
                job.subject_image_url,
                job.garment_image_url,
                job.category or self._default_category,
                start_tier,
            )
        except Exception as e:
            elapsed_ms = self._elapsed_ms(started)
            if isinstance(e, TryOnError):
                logger.error("Virtual try-on failed: %s", e)
            else:
                logger.exception("Unexpected virtual try-on error")

            classification = classify_failure(e)
            await self._write(
                job,
                {
                    "status": ResultStatus.FAILED.value,
                    "error_message": classification.user_message,
                    "processing_time_ms": elapsed_ms,
                    "model_used": FAILED_MODEL_MARKER,
                    "retry_count": job.retry_count,
                },
            )
            return TryOnOutcome(
                success=False,
                processing_time_ms=elapsed_ms,
                retry_count=job.retry_count,
                user_message=classification.user_message,
                is_rate_limited=classification.is_rate_limited,
            )

        elapsed_ms = self._elapsed_ms(started)
        logger.info("%s completed in %s ms", result.model_used, elapsed_ms)
        await self._write(
            job,
            {
                "status": ResultStatus.COMPLETED.value,
                "result_image_url": result.image_url,
                "processing_time_ms": elapsed_ms,
                "model_used": result.model_used,
                "retry_count": job.retry_count,
            },
        )
        return TryOnOutcome(
            success=True,
            result_image_url=result.image_url,
            processing_time_ms=elapsed_ms,
            model_used=result.model_used,
            retry_count=job.retry_count,
        )

    def _elapsed_ms(self, started: float) -> int:
        return max(0, int((self._clock() - started) * 1000))
