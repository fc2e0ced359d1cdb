"""Supabase client used for optional search/route history."""

import logging
from functools import lru_cache

from supabase import Client, create_client

from ..config import credential_usable, settings

logger = logging.getLogger(__name__)


@lru_cache()
def get_supabase_client() -> Client | None:
    """Cached Supabase client, or None when storage is not configured.

    Creating the client does not open a connection; individual queries can
    still fail and callers treat that as demo mode.
    """
    if not settings.supabase_url or not credential_usable(settings.supabase_key):
        logger.info("Supabase credentials not configured; search history disabled (demo mode)")
        return None

    try:
        return create_client(settings.supabase_url, settings.supabase_key)
    except Exception as e:
        logger.error(f"Failed to create Supabase client for {settings.supabase_url}: {e}")
        return None
