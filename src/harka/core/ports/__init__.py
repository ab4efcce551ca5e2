"""
Ports (interfaces) for HARKA admin services.

Business logic depends on these abstractions; adapters in harka.adapters
implement them.
"""

from .repository import EntityRepository, Record, record_id

__all__ = [
    "EntityRepository",
    "Record",
    "record_id",
]
