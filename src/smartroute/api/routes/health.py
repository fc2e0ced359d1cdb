"""Health endpoints."""

from __future__ import annotations

from fastapi import APIRouter, status

from ...config import credential_usable, settings

router = APIRouter(tags=["health"])


@router.get("/health", status_code=status.HTTP_200_OK)
def health_root() -> dict:
    """Simple health check endpoint that doesn't require any dependencies."""
    return {"status": "ok"}


@router.get("/health/providers", status_code=status.HTTP_200_OK)
def health_providers() -> dict:
    """Which geometry providers are configured; cache and synthetic always are."""
    return {
        "cache": True,
        "tomtom": credential_usable(settings.tomtom_api_key),
        "mapbox": credential_usable(settings.mapbox_token),
        "osrm": bool(settings.osrm_relay_url),
        "synthetic": True,
    }


@router.get("/health/database", status_code=status.HTTP_200_OK)
def check_database() -> dict:
    """Check database connection and route storage status."""
    from ...db.supabase import get_supabase_client

    supabase = get_supabase_client()
    if not supabase:
        return {
            "configured": False,
            "message": "Supabase not configured. Set SMARTROUTE_SUPABASE_URL and SMARTROUTE_SUPABASE_KEY environment variables.",
        }

    try:
        result = supabase.table("routes").select("id", count="exact").limit(1).execute()
        return {
            "configured": True,
            "connected": True,
            "routes_count": result.count or 0,
            "message": "Database connected.",
        }
    except Exception as exc:
        return {
            "configured": True,
            "connected": False,
            "error": str(exc),
            "message": f"Database connection error: {exc}",
        }
