"""
Search Domain

In-memory admin search over per-entity-type collections:
- Free-text AND matching
- Field filters and multi-key sorting
- Facet counts and pagination
- Word suggestions

Routes live in .api and are registered by harka.routers.
"""

from .models import (
    EntityType,
    FilterOperator,
    SearchableEntity,
    SearchFilter,
    SearchOptions,
    SearchResult,
    SearchSort,
    SortDirection,
)
from .services import SearchIndexService

__all__ = [
    "EntityType",
    "FilterOperator",
    "SearchableEntity",
    "SearchFilter",
    "SearchOptions",
    "SearchResult",
    "SearchSort",
    "SortDirection",
    "SearchIndexService",
]
