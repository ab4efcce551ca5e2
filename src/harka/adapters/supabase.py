"""
Supabase entity repository.

Reads and writes backup records through the Supabase table API, one table per
entity type.
"""

import logging
from typing import Dict, List, Optional

from ..core.ports import EntityRepository, Record, record_id

logger = logging.getLogger(__name__)


# Entity type -> (table, identity column)
ENTITY_TABLES: Dict[str, tuple] = {
    "users": ("users", "id"),
    "courses": ("courses", "id"),
    "lessons": ("lessons", "id"),
    "discussions": ("discussions", "id"),
    "comments": ("comments", "id"),
    "activities": ("activities", "id"),
    "content": ("content", "id"),
    "settings": ("settings", "key"),
    "subscriptions": ("subscriptions", "id"),
    "analytics": ("analytics", "id"),
}


class SupabaseEntityRepository(EntityRepository):
    """EntityRepository backed by a Supabase client."""

    def __init__(self, client, tables: Optional[Dict[str, tuple]] = None):
        self._client = client
        self._tables = tables or ENTITY_TABLES

    def fetch_entities(self, entity_type: str) -> List[Record]:
        if entity_type not in self._tables:
            logger.warning(f"⚠️ No table mapped for entity type: {entity_type}")
            return []

        table, _ = self._tables[entity_type]
        result = self._client.table(table).select("*").execute()
        records = result.data or []
        logger.info(f"✅ Fetched {len(records)} {entity_type} from Supabase")
        return records

    def exists(self, entity_type: str, entity_id: str) -> bool:
        if entity_type not in self._tables:
            return False

        table, column = self._tables[entity_type]
        result = self._client.table(table).select(column).eq(column, entity_id).limit(1).execute()
        return bool(result.data)

    def save(self, entity_type: str, record: Record) -> None:
        if entity_type not in self._tables:
            raise ValueError(f"Unknown entity type: {entity_type}")
        if record_id(record) is None:
            raise ValueError(f"{entity_type} record has no id")

        table, _ = self._tables[entity_type]
        self._client.table(table).upsert(record).execute()
