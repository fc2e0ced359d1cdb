"""Database persistence for searches, routes and junctions.

Storage is optional: every method logs and swallows failures so route
generation keeps working without a database (demo mode).
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Optional

from ..db.supabase import get_supabase_client
from ..models.domain import Junction, Route, Search
from ..services.traffic import round_half_up

logger = logging.getLogger(__name__)


def search_to_row(search: Search) -> dict[str, Any]:
    return {
        "id": search.id,
        "start_location": search.start.name,
        "end_location": search.end.name,
        "start_lat": search.start.lat,
        "start_lng": search.start.lng,
        "end_lat": search.end.lat,
        "end_lng": search.end.lng,
        "search_timestamp": search.timestamp.isoformat(),
    }


def route_to_row(route: Route) -> dict[str, Any]:
    return {
        "id": route.id,
        "search_id": route.search_id,
        "route_name": route.name,
        "total_distance": route.total_distance_km,
        "estimated_time": round_half_up(route.estimated_time_min),
        "crowd_level": route.crowd_level.value,
        "path_coordinates": [{"lat": point.lat, "lng": point.lng} for point in route.path],
        "is_optimal": route.is_optimal,
    }


def junction_to_row(junction: Junction) -> dict[str, Any]:
    return {
        "id": junction.id,
        "route_id": junction.route_id,
        "junction_name": junction.name,
        "latitude": junction.coordinate.lat,
        "longitude": junction.coordinate.lng,
        "vehicles_waiting": junction.vehicles_waiting,
        "time_without_ai": junction.wait_without_ai_sec,
        "time_with_ai": junction.wait_with_ai_sec,
        "crowd_density": junction.crowd_density.value,
        "ai_optimization_active": junction.ai_active,
    }


class RouteStore:
    """Writes searches and generated routes to Supabase."""

    def __init__(self, client_factory: Callable[[], Any] | None = None) -> None:
        self._client_factory = client_factory or get_supabase_client

    def _client(self) -> Optional[Any]:
        client = self._client_factory()
        if client is None:
            logger.debug("Supabase not configured - skipping persistence")
        return client

    def save_search(self, search: Search) -> bool:
        supabase = self._client()
        if not supabase:
            return False
        try:
            supabase.table("user_searches").insert(search_to_row(search)).execute()
            return True
        except Exception as e:
            logger.warning(f"Database unavailable - running in demo mode (search {search.id}): {e}")
            return False

    def save_route(self, route: Route) -> bool:
        supabase = self._client()
        if not supabase:
            return False
        try:
            supabase.table("routes").insert(route_to_row(route)).execute()
            if route.junctions:
                supabase.table("junctions").insert(
                    [junction_to_row(junction) for junction in route.junctions]
                ).execute()
            return True
        except Exception as e:
            logger.warning(f"Could not save route {route.id} to database: {e}")
            return False

    def select_route(self, search_id: str, route_id: str) -> bool:
        supabase = self._client()
        if not supabase:
            return False
        try:
            supabase.table("user_searches").update({"selected_route_id": route_id}).eq("id", search_id).execute()
            return True
        except Exception as e:
            logger.warning(f"Could not record route selection for search {search_id}: {e}")
            return False
