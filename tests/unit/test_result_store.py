"""Tests for provador.core.result_store — result record backends."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from provador.core.config import ProvadorConfig
from provador.core.result_store import (
    InMemoryResultStore,
    ResultStatus,
    SupabaseResultStore,
    create_result_store,
)


class TestInMemoryResultStore:
    """Test the dict-backed store."""

    def test_create_pending(self):
        store = InMemoryResultStore()
        result_id = store.create_pending({"garment_image_url": "https://g.jpg"})
        record = store.get(result_id)
        assert record["status"] == ResultStatus.PENDING.value
        assert record["garment_image_url"] == "https://g.jpg"
        assert record["id"] == result_id

    def test_ids_are_unique(self):
        store = InMemoryResultStore()
        assert store.create_pending() != store.create_pending()

    def test_update_merges_fields(self):
        store = InMemoryResultStore()
        result_id = store.create_pending()
        store.update(result_id, {"status": "processing"})
        store.update(result_id, {"status": "completed", "model_used": "gemini-2.5-pro"})
        record = store.get(result_id)
        assert record["status"] == "completed"
        assert record["model_used"] == "gemini-2.5-pro"

    def test_get_returns_copy(self):
        store = InMemoryResultStore()
        result_id = store.create_pending()
        store.get(result_id)["status"] = "tampered"
        assert store.get(result_id)["status"] == "pending"

    def test_get_unknown(self):
        assert InMemoryResultStore().get("missing") is None


class TestSupabaseResultStore:
    """Test query construction against a mocked supabase client."""

    def test_update_filters_by_id(self):
        client = MagicMock()
        store = SupabaseResultStore(client, "try_on_results")

        store.update("abc", {"status": "failed"})

        client.table.assert_called_once_with("try_on_results")
        table = client.table.return_value
        table.update.assert_called_once_with({"status": "failed"})
        table.update.return_value.eq.assert_called_once_with("id", "abc")
        table.update.return_value.eq.return_value.execute.assert_called_once()

    def test_create_pending_returns_inserted_id(self):
        client = MagicMock()
        client.table.return_value.insert.return_value.execute.return_value.data = [{"id": 42}]
        store = SupabaseResultStore(client)

        result_id = store.create_pending({"user_id": "u1"})

        assert result_id == "42"
        client.table.return_value.insert.assert_called_once_with(
            {"user_id": "u1", "status": "pending"}
        )

    def test_create_pending_without_rows_raises(self):
        client = MagicMock()
        client.table.return_value.insert.return_value.execute.return_value.data = []
        with pytest.raises(RuntimeError, match="no rows"):
            SupabaseResultStore(client).create_pending()


class TestCreateResultStore:
    """Test backend selection."""

    def test_memory_without_credentials(self, test_config: ProvadorConfig):
        store = create_result_store(test_config)
        assert isinstance(store, InMemoryResultStore)
        assert store.backend == "memory"

    def test_supabase_with_credentials(self, test_config: ProvadorConfig, monkeypatch):
        import supabase

        fake_client = MagicMock()
        create_client = MagicMock(return_value=fake_client)
        monkeypatch.setattr(supabase, "create_client", create_client)
        cfg = test_config.model_copy(
            update={"supabase_url": "https://x.supabase.co", "supabase_service_role_key": "k"}
        )

        store = create_result_store(cfg)

        assert isinstance(store, SupabaseResultStore)
        assert store.client is fake_client
        create_client.assert_called_once_with("https://x.supabase.co", "k")
