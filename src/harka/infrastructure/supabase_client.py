"""
Supabase Client

Creates the Supabase client used by the Supabase-backed backup repository.

Usage:
    from .supabase_client import create_supabase_client

    client = create_supabase_client(config.supabase)
    result = client.table("courses").select("*").execute()
"""

import logging
from typing import Optional

from ..config import SupabaseConfig

logger = logging.getLogger(__name__)


def create_supabase_client(settings: SupabaseConfig):
    """
    Create a Supabase client from settings.

    Returns:
        Supabase client or None if not configured
    """
    if not settings.url or not settings.key:
        logger.warning("⚠️ Supabase not configured (missing SUPABASE_URL or SUPABASE_KEY)")
        return None

    from supabase import create_client

    try:
        client = create_client(settings.url, settings.key)
    except Exception as e:
        logger.error(f"❌ Failed to connect to Supabase: {e}")
        return None

    logger.info(f"✅ Connected to Supabase: {settings.url}")
    return client


def is_configured(settings: Optional[SupabaseConfig]) -> bool:
    """Check whether Supabase credentials are present."""
    return bool(settings and settings.url and settings.key)
