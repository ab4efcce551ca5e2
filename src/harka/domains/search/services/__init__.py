"""
Search Domain Services

Business logic for admin search operations.
"""

from .advanced_search import (
    FACET_FIELDS,
    SearchIndexService,
    apply_filter,
    generate_facets,
    resolve_field,
)

__all__ = [
    "FACET_FIELDS",
    "SearchIndexService",
    "apply_filter",
    "generate_facets",
    "resolve_field",
]
