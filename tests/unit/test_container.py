"""
Unit tests for the dependency injection container and app factory.
"""

import pytest
from fastapi.testclient import TestClient

from harka.adapters import InMemoryEntityRepository, SupabaseEntityRepository
from harka.config import BackupConfig, HarkaConfig, SearchConfig
from harka.core.container import Container
from harka.domains.search import SearchOptions
from harka.main import create_app
from harka.sdk import AdminApiClient


class TestContainer:
    """Tests for Container factories."""

    def test_memory_backend_is_seeded(self):
        container = Container(HarkaConfig())
        repository = container.entity_repository()
        assert isinstance(repository, InMemoryEntityRepository)
        assert repository.count("users") == 2

    def test_instances_are_cached(self):
        container = Container(HarkaConfig())
        assert container.search_service() is container.search_service()
        assert container.backup_service() is container.backup_service()

    def test_reset_drops_state_but_keeps_injected_repository(self, repository):
        container = Container(HarkaConfig(), repository=repository)
        service = container.backup_service()
        container.reset()
        assert container.backup_service() is not service
        assert container.entity_repository() is repository

    def test_search_fixtures_can_be_disabled(self):
        container = Container(HarkaConfig(search=SearchConfig(seed_fixtures=False)))
        service = container.search_service()
        assert service.entity_types() == []
        assert service.search("users", SearchOptions()).total == 0

    def test_supabase_backend_requires_credentials(self):
        container = Container(HarkaConfig(backup=BackupConfig(backend="supabase")))
        with pytest.raises(ValueError):
            container.entity_repository()

    def test_supabase_backend_with_client(self, mock_supabase_with_data):
        config = HarkaConfig(backup=BackupConfig(backend="supabase"))
        container = Container(config, supabase_client=mock_supabase_with_data)
        repository = container.entity_repository()
        assert isinstance(repository, SupabaseEntityRepository)
        assert len(repository.fetch_entities("users")) == 2

    def test_backup_service_uses_backup_config(self):
        config = HarkaConfig(backup=BackupConfig(max_age_days=7, expected_entities=["users"]))
        service = Container(config).backup_service()
        assert service._max_age_days == 7
        assert service._expected_entities == ["users"]

    @pytest.mark.asyncio
    async def test_api_client_is_built_from_config(self):
        container = Container(HarkaConfig())
        client = container.api_client()
        assert isinstance(client, AdminApiClient)
        assert container.api_client() is client
        await container.aclose()


class TestCreateApp:
    """Tests for the application factory."""

    def test_container_is_attached(self, container):
        app = create_app(container=container)
        assert app.state.container is container

    def test_health(self, test_config):
        with TestClient(create_app(config=test_config)) as client:
            data = client.get("/health").json()
        assert data["status"] == "healthy"
        assert data["environment"] == "test"
        assert data["backup_backend"] == "memory"

    def test_routes_are_mounted_under_admin_prefix(self, container):
        app = create_app(container=container)
        assert app.url_path_for("list_collections") == "/api/admin/search"
        assert app.url_path_for("search_collection", entity_type="users") == "/api/admin/search/users"
        assert app.url_path_for("list_backups") == "/api/admin/backups"
        assert app.url_path_for("list_schedules") == "/api/admin/backups/schedules"
        assert (
            app.url_path_for("restore_backup", backup_id="backup_1")
            == "/api/admin/backups/backup_1/restore"
        )

    def test_collection_roots_answer_without_trailing_slash(self, client):
        assert client.get("/api/admin/search").status_code == 200
        assert client.get("/api/admin/backups").status_code == 200
