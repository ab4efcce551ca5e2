"""
Advanced Search Service

In-memory filter/sort/facet engine behind the admin search page.

Each entity type ("users", "courses", ...) has its own collection. A query
runs text matching, field filters, multi-key sorting, facet counting and
pagination, in that order. Searching never raises: unknown entity types and
missing fields degrade to empty results or non-matches.
"""

import functools
import logging
from collections import OrderedDict
from datetime import datetime, timezone
from operator import attrgetter
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional

from ..models import (
    FacetCount,
    FilterOperator,
    IndexStats,
    SearchableEntity,
    SearchFilter,
    SearchOptions,
    SearchResult,
    SearchSort,
    SortDirection,
)

logger = logging.getLogger(__name__)


# Facet keys per collection; "tags" counts every tag, other keys read metadata
FACET_FIELDS: Dict[str, tuple] = {
    "users": ("role", "status"),
    "courses": ("difficulty", "tags"),
    "discussions": ("category", "tags"),
}

SUGGESTION_MIN_LENGTH = 3


# =============================================================================
# FIELD ACCESS
# =============================================================================

_FIELD_ACCESSORS: Dict[str, Callable[[SearchableEntity], Any]] = {
    "id": attrgetter("id"),
    "type": lambda entity: entity.type.value,
    "title": attrgetter("title"),
    "content": attrgetter("content"),
    "description": attrgetter("description"),
    "tags": attrgetter("tags"),
    "metadata": attrgetter("metadata"),
    "created_at": attrgetter("created_at"),
    "createdAt": attrgetter("created_at"),
    "updated_at": attrgetter("updated_at"),
    "updatedAt": attrgetter("updated_at"),
}

# Fields that accept one dotted level, e.g. "metadata.role"
_NESTED_ACCESSORS: Dict[str, Callable[[SearchableEntity, str], Any]] = {
    "metadata": lambda entity, key: entity.metadata.get(key),
}


def resolve_field(entity: SearchableEntity, path: str) -> Any:
    """
    Resolve a field path against an entity.

    Supports top-level fields and a single dotted level into mapping fields.
    Unknown fields and deeper paths resolve to None.
    """
    if "." in path:
        parent, _, child = path.partition(".")
        accessor = _NESTED_ACCESSORS.get(parent)
        if accessor is None or not child or "." in child:
            return None
        return accessor(entity, child)

    accessor = _FIELD_ACCESSORS.get(path)
    return accessor(entity) if accessor else None


# =============================================================================
# FILTERING
# =============================================================================

def _parse_datetime(value: str) -> Optional[datetime]:
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _coerce(target: Any, like: Any) -> Any:
    """Coerce an ISO string filter value when the field holds a datetime."""
    if isinstance(like, datetime) and isinstance(target, str):
        parsed = _parse_datetime(target)
        if parsed is not None:
            if like.tzinfo is None:
                parsed = parsed.replace(tzinfo=None)
            return parsed
    return target


def _safe_compare(op: Callable[[Any, Any], bool], value: Any, target: Any) -> bool:
    if value is None or target is None:
        return False
    try:
        return bool(op(value, _coerce(target, value)))
    except TypeError:
        return False


def _text_match(value: Any, target: Any, predicate: Callable[[str, str], bool]) -> bool:
    if value is None or target is None:
        return False
    needle = str(target).lower()
    if isinstance(value, (list, tuple, set)):
        return any(predicate(str(item).lower(), needle) for item in value)
    return predicate(str(value).lower(), needle)


def apply_filter(entity: SearchableEntity, search_filter: SearchFilter) -> bool:
    """Check whether an entity passes one filter."""
    value = resolve_field(entity, search_filter.field)
    target = search_filter.value
    operator = search_filter.operator

    if operator is FilterOperator.EQUALS:
        return value == _coerce(target, value)
    if operator is FilterOperator.CONTAINS:
        return _text_match(value, target, lambda hay, needle: needle in hay)
    if operator is FilterOperator.STARTS_WITH:
        return _text_match(value, target, str.startswith)
    if operator is FilterOperator.ENDS_WITH:
        return _text_match(value, target, str.endswith)
    if operator is FilterOperator.GREATER_THAN:
        return _safe_compare(lambda a, b: a > b, value, target)
    if operator is FilterOperator.LESS_THAN:
        return _safe_compare(lambda a, b: a < b, value, target)
    if operator is FilterOperator.BETWEEN:
        if not isinstance(target, (list, tuple)) or len(target) != 2:
            return False
        low, high = target
        return (
            _safe_compare(lambda a, b: a >= b, value, low)
            and _safe_compare(lambda a, b: a <= b, value, high)
        )
    if operator is FilterOperator.IN:
        if not isinstance(target, (list, tuple, set)):
            return False
        if isinstance(value, (list, tuple, set)):
            return any(item in target for item in value)
        return value in target

    return True


# =============================================================================
# SORTING
# =============================================================================

def _compare_values(a: Any, b: Any) -> int:
    try:
        if a == b:
            return 0
        return -1 if a < b else 1
    except TypeError:
        left, right = str(a), str(b)
        return (left > right) - (left < right)


def _make_comparator(rules: List[SearchSort]) -> Callable[[SearchableEntity, SearchableEntity], int]:
    def compare(x: SearchableEntity, y: SearchableEntity) -> int:
        for rule in rules:
            a = resolve_field(x, rule.field)
            b = resolve_field(y, rule.field)

            # Missing values go last whatever the direction
            if a is None and b is None:
                continue
            if a is None:
                return 1
            if b is None:
                return -1

            result = _compare_values(a, b)
            if result == 0:
                continue
            return -result if rule.direction is SortDirection.DESC else result
        return 0

    return compare


# =============================================================================
# FACETS
# =============================================================================

def generate_facets(results: Iterable[SearchableEntity], entity_type: str) -> Dict[str, List[FacetCount]]:
    """Count distinct values of the collection's facet fields."""
    facet_keys = FACET_FIELDS.get(entity_type, ())
    counts: Dict[str, "OrderedDict[str, int]"] = {key: OrderedDict() for key in facet_keys}

    for entity in results:
        for key in facet_keys:
            if key == "tags":
                values = entity.tags
            else:
                raw = entity.metadata.get(key)
                values = [] if raw is None else [str(raw)]

            for value in values:
                counts[key][value] = counts[key].get(value, 0) + 1

    # sorted() is stable, so ties keep first-seen order
    return {
        key: [
            FacetCount(value=value, count=count)
            for value, count in sorted(bucket.items(), key=lambda item: -item[1])
        ]
        for key, bucket in counts.items()
    }


# =============================================================================
# SERVICE
# =============================================================================

class SearchIndexService:
    """
    In-memory search index keyed by entity type.

    Not thread-safe; reads observe whatever state exists at call time.
    """

    def __init__(self, collections: Optional[Mapping[str, Iterable[SearchableEntity]]] = None):
        self._collections: Dict[str, List[SearchableEntity]] = {}
        for entity_type, entities in (collections or {}).items():
            self._collections[entity_type] = list(entities)

    def entity_types(self) -> List[IndexStats]:
        """Registered collections and their sizes."""
        return [
            IndexStats(entity_type=entity_type, count=len(entities))
            for entity_type, entities in self._collections.items()
        ]

    def search(self, entity_type: str, options: Optional[SearchOptions] = None) -> SearchResult:
        """
        Query one collection.

        Args:
            entity_type: Collection name, e.g. "courses"
            options: Text query, filters, sort rules and pagination

        Returns:
            SearchResult with the requested page, the pre-pagination total
            and facet counts over every match
        """
        options = options or SearchOptions()
        entities = self._collections.get(entity_type)
        if entities is None:
            logger.debug(f"Search on unregistered entity type: {entity_type}")
            return SearchResult()

        results = list(entities)

        if options.query:
            terms = options.query.lower().split()
            if terms:
                results = [
                    entity for entity in results
                    if all(term in entity.searchable_text() for term in terms)
                ]

        if options.filters:
            results = [
                entity for entity in results
                if all(apply_filter(entity, f) for f in options.filters)
            ]

        if options.sort:
            results.sort(key=functools.cmp_to_key(_make_comparator(options.sort)))

        total = len(results)
        start = options.offset
        end = options.offset + options.limit

        return SearchResult(
            data=results[start:end],
            total=total,
            has_more=end < total,
            facets=generate_facets(results, entity_type),
        )

    def add_to_index(self, entity_type: str, entity: SearchableEntity) -> None:
        """Insert an entity or replace the one with the same id."""
        entities = self._collections.setdefault(entity_type, [])
        for position, existing in enumerate(entities):
            if existing.id == entity.id:
                entities[position] = entity
                return
        entities.append(entity)

    def remove_from_index(self, entity_type: str, entity_id: str) -> None:
        """Remove an entity by id. Unknown ids and types are ignored."""
        entities = self._collections.get(entity_type)
        if entities is None:
            return
        self._collections[entity_type] = [e for e in entities if e.id != entity_id]

    def get_search_suggestions(self, entity_type: str, query: str, limit: int = 5) -> List[str]:
        """Distinct indexed words containing the query, in first-seen order."""
        needle = (query or "").lower()
        suggestions: "OrderedDict[str, None]" = OrderedDict()

        for entity in self._collections.get(entity_type, []):
            for word in entity.searchable_text().split():
                if len(word) >= SUGGESTION_MIN_LENGTH and needle in word:
                    suggestions[word] = None

        return list(suggestions)[:max(limit, 0)]
