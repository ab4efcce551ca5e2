"""
Infrastructure components for HARKA admin services.

Components:
- logging_config: process-wide logging setup
- supabase_client: Supabase cloud database client factory
"""

from .logging_config import setup_logging
from .supabase_client import create_supabase_client, is_configured

__all__ = [
    "setup_logging",
    "create_supabase_client",
    "is_configured",
]
