"""
Dependency Injection Container

Builds and caches the services behind the admin API from a HarkaConfig.
The backup backend (memory or Supabase) is chosen by config without the
services knowing which one they got.

Usage:
    container = Container(get_config())
    search = container.search_service()
    backups = container.backup_service()
"""

import logging
from typing import Optional

from ..config import HarkaConfig
from ..domains.backup.services import BackupService
from ..domains.search.services import SearchIndexService
from .ports import EntityRepository

logger = logging.getLogger(__name__)


class Container:
    """
    Dependency injection container.

    Provides factory methods for repositories, services and clients.
    Instances are created on first use and cached until reset().
    """

    def __init__(
        self,
        config: Optional[HarkaConfig] = None,
        repository: Optional[EntityRepository] = None,
        supabase_client=None,
    ):
        self.config = config or HarkaConfig()

        # Injected instances survive reset()
        self._injected_repository = repository
        self._injected_supabase = supabase_client

        self._repository: Optional[EntityRepository] = repository
        self._supabase = supabase_client
        self._search_service: Optional[SearchIndexService] = None
        self._backup_service: Optional[BackupService] = None
        self._api_client = None

        logger.info(
            f"Container initialized: env={self.config.environment}, "
            f"backup_backend={self.config.backup.backend}"
        )

    # =============================================================================
    # INFRASTRUCTURE
    # =============================================================================

    def supabase(self):
        """Supabase client, or None when not configured."""
        if self._supabase is None:
            from ..infrastructure.supabase_client import create_supabase_client
            self._supabase = create_supabase_client(self.config.supabase)
        return self._supabase

    def entity_repository(self) -> EntityRepository:
        """
        Repository the backup service reads and restores through.

        Returns InMemoryEntityRepository or SupabaseEntityRepository based on
        backup.backend.
        """
        if self._repository is None:
            backend = self.config.backup.backend
            if backend == "memory":
                from ..adapters.memory import InMemoryEntityRepository, demo_records
                self._repository = InMemoryEntityRepository(seed=demo_records())
            elif backend == "supabase":
                client = self.supabase()
                if client is None:
                    raise ValueError("Supabase backup backend selected but SUPABASE_URL/SUPABASE_KEY are not set")
                from ..adapters.supabase import SupabaseEntityRepository
                self._repository = SupabaseEntityRepository(client)
            else:
                raise ValueError(f"Unknown backup backend: {backend}")
        return self._repository

    # =============================================================================
    # SERVICES
    # =============================================================================

    def search_service(self) -> SearchIndexService:
        if self._search_service is None:
            collections = None
            if self.config.search.seed_fixtures:
                from ..domains.search.fixtures import demo_collections
                collections = demo_collections()
            self._search_service = SearchIndexService(collections)
        return self._search_service

    def backup_service(self) -> BackupService:
        if self._backup_service is None:
            self._backup_service = BackupService(
                self.entity_repository(),
                expected_entities=self.config.backup.expected_entities,
                max_age_days=self.config.backup.max_age_days,
            )
        return self._backup_service

    def api_client(self):
        """Outbound AdminApiClient built from the api_client config section."""
        if self._api_client is None:
            from ..sdk import AdminApiClient
            self._api_client = AdminApiClient.from_config(self.config.api_client)
        return self._api_client

    # =============================================================================
    # UTILITY
    # =============================================================================

    async def aclose(self) -> None:
        """Close clients holding network resources."""
        if self._api_client is not None:
            await self._api_client.close()
            self._api_client = None

    def reset(self):
        """Drop cached instances (stored backups and index edits are lost)."""
        self._repository = self._injected_repository
        self._supabase = self._injected_supabase
        self._search_service = None
        self._backup_service = None
        self._api_client = None
        logger.info("Container reset")
