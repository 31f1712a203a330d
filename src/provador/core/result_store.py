"""Durable try-on result records.

The result record is owned by the application database; this service only
creates pending records on request and moves them through their lifecycle::

    pending -> processing -> completed | failed

Records are never read back by the try-on flow.  Exactly one writer is
expected per ``result_id``; concurrent calls sharing an id are not guarded.

The interface is synchronous.  Async callers run it in a worker thread
(``asyncio.to_thread``), so implementations must be thread-safe.

Backends
--------
SupabaseResultStore
    Writes to a Supabase (PostgreSQL) table through supabase-py.
InMemoryResultStore
    Keeps records in a dict.  Used for local development when Supabase is not
    configured, and in tests.
"""

from __future__ import annotations

import logging
import threading
import uuid
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from provador.core.config import ProvadorConfig

logger = logging.getLogger(__name__)


class ResultStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


class ResultStore(ABC):
    """Write-only view of the try-on results table."""

    backend: str = "base"

    @abstractmethod
    def create_pending(self, fields: dict[str, Any] | None = None) -> str:
        """Insert a ``pending`` record and return its id."""

    @abstractmethod
    def update(self, result_id: str, fields: dict[str, Any]) -> None:
        """Apply *fields* to the record identified by *result_id*."""


class InMemoryResultStore(ResultStore):
    """Dict-backed result store."""

    backend = "memory"

    def __init__(self) -> None:
        self._records: dict[str, dict[str, Any]] = {}
        self._lock = threading.Lock()

    def create_pending(self, fields: dict[str, Any] | None = None) -> str:
        result_id = str(uuid.uuid4())
        record = dict(fields or {})
        record.update(
            id=result_id,
            status=ResultStatus.PENDING.value,
            created_at=datetime.now(timezone.utc).isoformat(),
        )
        with self._lock:
            self._records[result_id] = record
        return result_id

    def update(self, result_id: str, fields: dict[str, Any]) -> None:
        with self._lock:
            record = self._records.setdefault(result_id, {"id": result_id})
            record.update(fields)

    def get(self, result_id: str) -> dict[str, Any] | None:
        with self._lock:
            record = self._records.get(result_id)
            return dict(record) if record is not None else None


class SupabaseResultStore(ResultStore):
    """Result store backed by a Supabase table.

    Args:
        client: A ``supabase.Client`` (service role key, so RLS is bypassed).
        table: Name of the results table.
    """

    backend = "supabase"

    def __init__(self, client: Any, table: str = "try_on_results") -> None:
        self.client = client
        self.table = table

    def create_pending(self, fields: dict[str, Any] | None = None) -> str:
        record = dict(fields or {})
        record["status"] = ResultStatus.PENDING.value
        response = self.client.table(self.table).insert(record).execute()
        if not response.data:
            raise RuntimeError(f"Insert into {self.table} returned no rows")
        return str(response.data[0]["id"])

    def update(self, result_id: str, fields: dict[str, Any]) -> None:
        self.client.table(self.table).update(fields).eq("id", result_id).execute()


def create_result_store(config: ProvadorConfig) -> ResultStore:
    """Build the result store selected by *config*."""
    if not config.supabase_configured:
        logger.warning("Supabase not configured. Using in-memory result store.")
        return InMemoryResultStore()

    from supabase import create_client

    client = create_client(config.supabase_url, config.supabase_service_role_key)
    logger.info("Using Supabase result store (table=%s)", config.results_table)
    return SupabaseResultStore(client, config.results_table)
