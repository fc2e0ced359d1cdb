"""Static Delhi road network used for multi-hop path search."""

from __future__ import annotations

import functools
from types import MappingProxyType
from typing import Iterable, Mapping, Optional

from ..models.domain import Location, RoadEdge
from ..services.geospatial import haversine_km

LOCATIONS: tuple[Location, ...] = (
    Location("connaught_place", "Connaught Place", 28.6315, 77.2167, "major"),
    Location("india_gate", "India Gate", 28.6129, 77.2295, "landmark"),
    Location("chandni_chowk", "Chandni Chowk", 28.6506, 77.2303, "major"),
    Location("karol_bagh", "Karol Bagh", 28.6519, 77.1900, "major"),
    Location("rajouri_garden", "Rajouri Garden", 28.6414, 77.1214, "major"),
    Location("nehru_place", "Nehru Place", 28.5494, 77.2501, "major"),
    Location("saket", "Saket", 28.5244, 77.2066, "major"),
    Location("dwarka", "Dwarka", 28.5921, 77.0460, "major"),
    Location("noida_sector_18", "Noida Sector 18", 28.5697, 77.3227, "major"),
    Location("gurgaon_cyber_city", "Gurgaon Cyber City", 28.4950, 77.0870, "major"),
    Location("lajpat_nagar", "Lajpat Nagar", 28.5677, 77.2431, "major"),
    Location("hauz_khas", "Hauz Khas", 28.5494, 77.1932, "major"),
    Location("kashmere_gate", "Kashmere Gate", 28.6670, 77.2280, "junction"),
    Location("iffco_chowk", "IFFCO Chowk", 28.4730, 77.0320, "junction"),
)

ROADS: tuple[RoadEdge, ...] = (
    # Connaught Place
    RoadEdge("connaught_place", "india_gate", 2.5, "main", 35),
    RoadEdge("connaught_place", "karol_bagh", 5.2, "main", 30),
    RoadEdge("connaught_place", "chandni_chowk", 4.8, "local", 25),
    RoadEdge("connaught_place", "kashmere_gate", 5.5, "main", 35),
    # India Gate
    RoadEdge("india_gate", "lajpat_nagar", 6.5, "main", 40),
    RoadEdge("india_gate", "nehru_place", 8.0, "main", 40),
    # Chandni Chowk
    RoadEdge("chandni_chowk", "kashmere_gate", 2.0, "local", 20),
    # Karol Bagh
    RoadEdge("karol_bagh", "rajouri_garden", 6.0, "main", 35),
    RoadEdge("karol_bagh", "hauz_khas", 8.5, "main", 35),
    # Rajouri Garden
    RoadEdge("rajouri_garden", "dwarka", 12.0, "highway", 60),
    # Nehru Place
    RoadEdge("nehru_place", "lajpat_nagar", 3.5, "main", 30),
    RoadEdge("nehru_place", "saket", 5.0, "main", 35),
    RoadEdge("nehru_place", "noida_sector_18", 10.0, "highway", 55),
    # Saket
    RoadEdge("saket", "hauz_khas", 4.0, "main", 35),
    RoadEdge("saket", "gurgaon_cyber_city", 14.0, "highway", 60),
    # Hauz Khas
    RoadEdge("hauz_khas", "lajpat_nagar", 4.5, "main", 30),
    RoadEdge("hauz_khas", "iffco_chowk", 15.0, "highway", 55),
    # Dwarka / Gurgaon
    RoadEdge("dwarka", "iffco_chowk", 8.0, "highway", 60),
    RoadEdge("gurgaon_cyber_city", "iffco_chowk", 5.0, "highway", 50),
    # Lajpat Nagar
    RoadEdge("lajpat_nagar", "kashmere_gate", 11.0, "main", 35),
)


class RoadGraph:
    """Read-only undirected road graph; every declared edge implies its reverse."""

    def __init__(self, locations: Iterable[Location], roads: Iterable[RoadEdge]) -> None:
        self._locations: dict[str, Location] = {}
        for location in locations:
            if location.id in self._locations:
                raise ValueError(f"Duplicate location id '{location.id}'.")
            self._locations[location.id] = location

        adjacency: dict[str, dict[str, RoadEdge]] = {location_id: {} for location_id in self._locations}
        roads_seen: list[RoadEdge] = []
        for road in roads:
            if road.from_id == road.to_id:
                raise ValueError(f"Self-loop declared on '{road.from_id}'.")
            if road.distance_km <= 0 or road.base_speed_kmh <= 0:
                raise ValueError(f"Road {road.from_id}->{road.to_id} must have positive distance and speed.")
            if road.from_id not in adjacency or road.to_id not in adjacency:
                raise ValueError(f"Road {road.from_id}->{road.to_id} references an unknown location.")
            adjacency[road.from_id][road.to_id] = road
            adjacency[road.to_id][road.from_id] = road.reversed()
            roads_seen.append(road)

        self._adjacency = {node: MappingProxyType(edges) for node, edges in adjacency.items()}
        self.heuristic_scale = self._admissible_scale(roads_seen)

    def _admissible_scale(self, roads: Iterable[RoadEdge]) -> float:
        """Largest factor (at most 1.0) that keeps great-circle distance below every road length."""
        scale = 1.0
        for road in roads:
            a, b = self._locations[road.from_id], self._locations[road.to_id]
            straight = haversine_km(a.lat, a.lng, b.lat, b.lng)
            if straight > 0:
                scale = min(scale, road.distance_km / straight)
        return scale

    @property
    def locations(self) -> tuple[Location, ...]:
        return tuple(self._locations.values())

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._locations

    def location(self, node_id: str) -> Optional[Location]:
        return self._locations.get(node_id)

    def neighbors(self, node_id: str) -> Mapping[str, RoadEdge]:
        return self._adjacency.get(node_id, MappingProxyType({}))

    def edge_between(self, a: str, b: str) -> Optional[RoadEdge]:
        return self.neighbors(a).get(b)

    def find_by_name(self, text: str) -> Optional[Location]:
        """Exact (case-insensitive) name match first, then substring match in either direction."""
        normalized = text.strip().lower()
        if not normalized:
            return None
        for location in self._locations.values():
            if location.name.lower() == normalized:
                return location
        for location in self._locations.values():
            name = location.name.lower()
            if normalized in name or name in normalized:
                return location
        return None

    def nearest(self, lat: float, lng: float, max_km: float | None = None) -> Optional[Location]:
        best: Optional[Location] = None
        best_km = float("inf")
        for location in self._locations.values():
            distance = haversine_km(lat, lng, location.lat, location.lng)
            if distance < best_km:
                best, best_km = location, distance
        if max_km is not None and best_km > max_km:
            return None
        return best


@functools.lru_cache(maxsize=1)
def load_road_graph() -> RoadGraph:
    """Build the process-wide road graph once."""
    return RoadGraph(LOCATIONS, ROADS)
