"""
Unit tests for the entity repositories.

Tests InMemoryEntityRepository and SupabaseEntityRepository (against the
mock Supabase client from conftest), plus a backup round trip through the
Supabase adapter.
"""

import pytest

from harka.adapters import InMemoryEntityRepository, SupabaseEntityRepository, demo_records
from harka.core.ports import record_id
from harka.domains.backup import BackupOptions, BackupService, RestoreOptions


class TestRecordId:
    """Tests for record identity."""

    def test_id_wins_over_key(self):
        assert record_id({"id": 5, "key": "k"}) == "5"

    def test_key_records(self):
        assert record_id({"key": "site_name", "value": "x"}) == "site_name"

    def test_no_identity(self):
        assert record_id({"name": "anonymous"}) is None


class TestInMemoryEntityRepository:
    """Tests for the dict-backed repository."""

    def test_seeded_with_demo_records(self):
        repository = InMemoryEntityRepository(seed=demo_records())
        assert repository.count("users") == 2
        assert repository.count("settings") == 2
        assert repository.exists("settings", "site_name")

    def test_fetch_returns_copies(self):
        repository = InMemoryEntityRepository(seed={"users": [{"id": "1", "name": "Ada"}]})
        repository.fetch_entities("users")[0]["name"] = "Changed"
        assert repository.fetch_entities("users")[0]["name"] == "Ada"

    def test_save_overwrites_by_id(self):
        repository = InMemoryEntityRepository()
        repository.save("users", {"id": "1", "name": "Ada"})
        repository.save("users", {"id": "1", "name": "Ada Lovelace"})
        assert repository.fetch_entities("users") == [{"id": "1", "name": "Ada Lovelace"}]

    def test_save_without_id(self):
        with pytest.raises(ValueError):
            InMemoryEntityRepository().save("users", {"name": "nobody"})

    def test_unknown_type_is_empty(self):
        repository = InMemoryEntityRepository()
        assert repository.fetch_entities("planets") == []
        assert repository.exists("planets", "1") is False

    def test_delete(self):
        repository = InMemoryEntityRepository(seed=demo_records())
        assert repository.delete("users", "1") is True
        assert repository.delete("users", "1") is False
        assert repository.count("users") == 1


class TestSupabaseEntityRepository:
    """Tests for the Supabase-backed repository."""

    def test_fetch_entities(self, mock_supabase_with_data):
        repository = SupabaseEntityRepository(mock_supabase_with_data)
        users = repository.fetch_entities("users")
        assert [u["id"] for u in users] == ["u-1", "u-2"]
        assert ("select", "users", "*") in mock_supabase_with_data.calls

    def test_unmapped_type_is_empty(self, mock_supabase_with_data):
        repository = SupabaseEntityRepository(mock_supabase_with_data)
        assert repository.fetch_entities("planets") == []
        assert repository.exists("planets", "1") is False

    def test_exists_uses_identity_column(self, mock_supabase_with_data):
        repository = SupabaseEntityRepository(mock_supabase_with_data)
        assert repository.exists("users", "u-1") is True
        assert repository.exists("users", "u-9") is False
        assert repository.exists("settings", "site_name") is True
        assert ("select", "settings", "key") in mock_supabase_with_data.calls

    def test_save_upserts(self, mock_supabase_with_data):
        repository = SupabaseEntityRepository(mock_supabase_with_data)
        repository.save("users", {"id": "u-1", "name": "Ada Lovelace"})
        repository.save("users", {"id": "u-3", "name": "New"})

        names = {r["id"]: r["name"] for r in mock_supabase_with_data.rows("users")}
        assert names == {"u-1": "Ada Lovelace", "u-2": "Sam Student", "u-3": "New"}

    def test_save_rejects_unknown_type_and_missing_id(self, mock_supabase):
        repository = SupabaseEntityRepository(mock_supabase)
        with pytest.raises(ValueError):
            repository.save("planets", {"id": "1"})
        with pytest.raises(ValueError):
            repository.save("users", {"name": "nobody"})

    def test_custom_table_mapping(self, mock_supabase):
        mock_supabase.seed_data("lms_users", [{"uid": "a"}])
        repository = SupabaseEntityRepository(mock_supabase, tables={"users": ("lms_users", "uid")})
        assert repository.exists("users", "a") is True

    def test_backup_and_restore_through_supabase(self, mock_supabase_with_data, clock):
        repository = SupabaseEntityRepository(mock_supabase_with_data)
        service = BackupService(repository, clock=clock)

        metadata = service.create_backup(
            BackupOptions(name="db", included_entities=["users", "courses", "settings"])
        )
        assert metadata.entity_counts == {"users": 2, "courses": 1, "settings": 1}

        mock_supabase_with_data.seed_data("users", [])
        result = service.restore_backup(RestoreOptions(backup_id=metadata.id))

        assert result.restored == {"users": 2, "courses": 0, "settings": 0}
        assert result.skipped == {"courses": 1, "settings": 1}
        assert len(mock_supabase_with_data.rows("users")) == 2
