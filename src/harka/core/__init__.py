"""
Core layer - interfaces and the dependency injection container.

This package contains:
- Port interfaces (abstract base classes) for entity storage
- The Container that wires adapters into domain services

The container lives in harka.core.container and is not imported here;
the domain services it builds depend on harka.core.ports.
"""

from .ports import EntityRepository, Record, record_id

__all__ = [
    "EntityRepository",
    "Record",
    "record_id",
]
