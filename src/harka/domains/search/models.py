"""
Search Domain Models

Pydantic models for admin search requests and results.
JSON uses camelCase aliases (createdAt, hasMore) to match the admin UI.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# =============================================================================
# ENUMS
# =============================================================================

class EntityType(str, Enum):
    """Kinds of searchable records."""
    USER = "user"
    COURSE = "course"
    LESSON = "lesson"
    DISCUSSION = "discussion"
    COMMENT = "comment"
    ACTIVITY = "activity"
    CONTENT = "content"


class FilterOperator(str, Enum):
    """Supported filter operators."""
    EQUALS = "equals"
    CONTAINS = "contains"
    STARTS_WITH = "starts_with"
    ENDS_WITH = "ends_with"
    GREATER_THAN = "greater_than"
    LESS_THAN = "less_than"
    BETWEEN = "between"
    IN = "in"


class SortDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"


# =============================================================================
# ENTITIES
# =============================================================================

class SearchableEntity(BaseModel):
    """A record held in an in-memory search collection."""
    model_config = ConfigDict(populate_by_name=True)

    id: str
    type: EntityType
    title: Optional[str] = None
    content: Optional[str] = None
    description: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    metadata: Dict[str, Any] = Field(default_factory=dict)
    created_at: datetime = Field(default_factory=_utcnow, alias="createdAt")
    updated_at: datetime = Field(default_factory=_utcnow, alias="updatedAt")

    def searchable_text(self) -> str:
        """Lower-cased text that free-text queries match against."""
        parts = [self.title or "", self.content or "", self.description or "", *self.tags]
        return " ".join(parts).lower()


# =============================================================================
# QUERIES
# =============================================================================

class SearchFilter(BaseModel):
    """A single field filter; filters in a query combine with AND."""
    field: str = Field(..., min_length=1)
    operator: FilterOperator
    value: Any = None


class SearchSort(BaseModel):
    """One sort key; earlier keys take precedence."""
    field: str = Field(..., min_length=1)
    direction: SortDirection = SortDirection.ASC


class SearchOptions(BaseModel):
    """Query options for SearchIndexService.search."""
    query: Optional[str] = None
    filters: List[SearchFilter] = Field(default_factory=list)
    sort: List[SearchSort] = Field(default_factory=list)
    limit: int = Field(default=20, ge=0)
    offset: int = Field(default=0, ge=0)


class FacetCount(BaseModel):
    value: str
    count: int


class SearchResult(BaseModel):
    """Page of matching entities plus facet breakdowns."""
    model_config = ConfigDict(populate_by_name=True)

    data: List[SearchableEntity] = Field(default_factory=list)
    total: int = 0
    has_more: bool = Field(default=False, alias="hasMore")
    facets: Dict[str, List[FacetCount]] = Field(default_factory=dict)


class IndexStats(BaseModel):
    """Registered collection and its size."""
    entity_type: str
    count: int
