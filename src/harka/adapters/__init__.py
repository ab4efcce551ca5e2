"""
Adapters implementing the ports in harka.core.ports.

- memory: dict-backed repository seeded with demo records
- supabase: Supabase table repository
"""

from .memory import InMemoryEntityRepository, demo_records
from .supabase import ENTITY_TABLES, SupabaseEntityRepository

__all__ = [
    "InMemoryEntityRepository",
    "demo_records",
    "ENTITY_TABLES",
    "SupabaseEntityRepository",
]
