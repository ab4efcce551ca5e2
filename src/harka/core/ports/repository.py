"""
Entity Repository Port Interface

Abstract interface for reading and writing the platform records that
backups capture. Implementations can be:
- InMemoryEntityRepository (development, tests)
- SupabaseEntityRepository (production)
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

Record = Dict[str, Any]


def record_id(record: Record) -> Optional[str]:
    """Identity of a record: its "id", or "key" for key/value records like settings."""
    value = record.get("id", record.get("key"))
    return None if value is None else str(value)


class EntityRepository(ABC):
    """
    Abstract port interface for backup data access.

    All repositories must implement this interface so the backup service
    can switch between storage backends.
    """

    @abstractmethod
    def fetch_entities(self, entity_type: str) -> List[Record]:
        """
        Fetch every record of an entity type.

        Args:
            entity_type: Entity type name, e.g. "courses"

        Returns:
            List of records; unknown entity types return an empty list
        """
        pass

    @abstractmethod
    def exists(self, entity_type: str, entity_id: str) -> bool:
        """
        Check whether a record with this id is already stored.

        Args:
            entity_type: Entity type name
            entity_id: Record identity (see record_id)

        Returns:
            True if the record exists
        """
        pass

    @abstractmethod
    def save(self, entity_type: str, record: Record) -> None:
        """
        Insert or overwrite a record.

        Args:
            entity_type: Entity type name
            record: Record to store
        """
        pass
