"""
In-memory entity repository.

Dict-backed EntityRepository used in development and tests. Seeded with the
demo platform records so backups have something to capture.
"""

import copy
import logging
from datetime import datetime, timezone
from typing import Dict, List, Mapping, Optional

from ..core.ports import EntityRepository, Record, record_id

logger = logging.getLogger(__name__)


def demo_records() -> Dict[str, List[Record]]:
    """Demo records per entity type."""
    now = datetime.now(timezone.utc).isoformat()
    return {
        "users": [
            {"id": "1", "name": "John Doe", "email": "john@example.com", "role": "admin"},
            {"id": "2", "name": "Jane Smith", "email": "jane@example.com", "role": "user"},
        ],
        "courses": [
            {"id": "1", "title": "Advanced TypeScript", "description": "Learn advanced TS patterns", "difficulty": "advanced"},
            {"id": "2", "title": "React Performance", "description": "Optimize React apps", "difficulty": "intermediate"},
        ],
        "discussions": [
            {"id": "1", "title": "State management best practices", "content": "What are your thoughts?", "replies": 5},
        ],
        "activities": [
            {"id": "1", "type": "login", "userId": "1", "timestamp": now},
            {"id": "2", "type": "course_start", "userId": "2", "courseId": "1", "timestamp": now},
        ],
        "content": [
            {"id": "1", "title": "Introduction Video", "type": "video", "url": "/videos/intro.mp4"},
            {"id": "2", "title": "Course Materials", "type": "document", "url": "/docs/materials.pdf"},
        ],
        "settings": [
            {"key": "site_name", "value": "HARKA Learning Platform"},
            {"key": "max_upload_size", "value": "100MB"},
        ],
    }


class InMemoryEntityRepository(EntityRepository):
    """Records held in per-type dicts keyed by record id."""

    def __init__(self, seed: Optional[Mapping[str, List[Record]]] = None):
        self._tables: Dict[str, Dict[str, Record]] = {}
        for entity_type, records in (seed or {}).items():
            for record in records:
                self.save(entity_type, record)

    def fetch_entities(self, entity_type: str) -> List[Record]:
        return [copy.deepcopy(r) for r in self._tables.get(entity_type, {}).values()]

    def exists(self, entity_type: str, entity_id: str) -> bool:
        return entity_id in self._tables.get(entity_type, {})

    def save(self, entity_type: str, record: Record) -> None:
        key = record_id(record)
        if key is None:
            raise ValueError(f"{entity_type} record has no id")
        self._tables.setdefault(entity_type, {})[key] = copy.deepcopy(record)

    def delete(self, entity_type: str, entity_id: str) -> bool:
        """Remove a record; returns False if it was not stored."""
        return self._tables.get(entity_type, {}).pop(entity_id, None) is not None

    def count(self, entity_type: str) -> int:
        return len(self._tables.get(entity_type, {}))
