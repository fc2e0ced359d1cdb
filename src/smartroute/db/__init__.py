"""Optional Supabase storage."""

from .supabase import get_supabase_client

__all__ = ["get_supabase_client"]
