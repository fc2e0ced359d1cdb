"""Route generation: path search or geometry resolution, cost model, junctions and scoring."""

from __future__ import annotations

import asyncio
import logging
import random
import uuid
from datetime import datetime
from typing import Callable, Optional, Sequence

from ...config import settings
from ...data.road_network import RoadGraph
from ...errors import NoRouteFoundError
from ...models.domain import (
    Coordinate,
    CrowdLevel,
    Junction,
    Location,
    RoadClass,
    RoadEdge,
    Route,
    Search,
)
from ...persistence.database import RouteStore
from ..geometry.base import ResolvedGeometry, crowd_for_color, segment_at
from ..geometry.pipeline import GeometryPipeline
from ..geospatial import haversine_km, path_length_km
from .. import traffic
from .astar import find_multiple_routes, path_segments
from .models import RouteGenerationResult

logger = logging.getLogger(__name__)

TIME_WEIGHT = 0.7
DISTANCE_WEIGHT = 0.3

GEOMETRY_ROUTE_NAMES = ("Primary Route", "Alternative Route", "Secondary Route")
MAX_ROUTES = 3
# A named location only counts as a graph node when the supplied coordinates are this close to it.
GRAPH_SNAP_KM = 2.0
JUNCTION_NAME_RADIUS_KM = 0.75
SYNTHETIC_SPEED_KMH: dict[str, float] = {"highway": 55.0, "main": 35.0, "local": 25.0}


def route_score(route: Route) -> float:
    return route.estimated_time_min * TIME_WEIGHT + route.total_distance_km * DISTANCE_WEIGHT


def mark_optimal(routes: Sequence[Route]) -> Route:
    """Flag the minimum-score route; ties go to the earliest candidate."""
    if not routes:
        raise ValueError("Cannot pick an optimal route from an empty candidate set.")
    best = routes[0]
    for route in routes[1:]:
        if route_score(route) < route_score(best):
            best = route
    best.is_optimal = True
    return best


def infer_road_class(distance_km: float | None, duration_min: float | None) -> RoadClass:
    if not distance_km or not duration_min:
        return "main"
    average_kmh = distance_km / (duration_min / 60.0)
    if average_kmh > 50:
        return "highway"
    if average_kmh > 30:
        return "main"
    return "local"


def junction_indices(point_count: int, spacing: int) -> list[int]:
    """Interior point indices standing in for intersections along a geometry."""
    indices = list(range(spacing, point_count - 1, spacing))
    if not indices and point_count >= 3:
        indices = [point_count // 2]
    return indices


def synthesize_segments(path: Sequence[Coordinate], road_class: RoadClass, spacing: int) -> list[RoadEdge]:
    """Cut a geometry into graph-like edges so the cost model can price it."""
    segments: list[RoadEdge] = []
    last = len(path) - 1
    for start in range(0, last, spacing):
        end = min(start + spacing, last)
        segments.append(
            RoadEdge(
                from_id=f"p{start}",
                to_id=f"p{end}",
                distance_km=path_length_km(path[start : end + 1]),
                road_class=road_class,
                base_speed_kmh=SYNTHETIC_SPEED_KMH[road_class],
            )
        )
    return segments


class RouteEngine:
    """Produces 1-3 ranked candidate routes between two locations.

    Graph search is used when both endpoints are road-graph nodes and a path
    exists; otherwise the geometry pipeline resolves the two endpoints.
    """

    def __init__(
        self,
        graph: RoadGraph,
        pipeline: GeometryPipeline,
        store: RouteStore | None = None,
        clock: Callable[[], datetime] | None = None,
        assumed_speed_kmh: float | None = None,
        junction_spacing: int | None = None,
    ) -> None:
        self.graph = graph
        self.pipeline = pipeline
        self.store = store
        self.clock = clock or datetime.now
        self.assumed_speed_kmh = assumed_speed_kmh or settings.assumed_speed_kmh
        self.junction_spacing = junction_spacing or settings.junction_spacing_points

    async def generate_routes(
        self,
        start: Location,
        end: Location,
        *,
        departure: datetime | None = None,
        seed: int | None = None,
    ) -> RouteGenerationResult:
        timestamp = departure or self.clock()
        rng = random.Random(seed if seed is not None else timestamp.timestamp())
        search = Search(id=str(uuid.uuid4()), start=start, end=end, timestamp=timestamp)
        await self._persist(self.store.save_search if self.store else None, search)

        candidates = self._graph_candidates(search.id, start, end, timestamp, rng)
        if not candidates:
            candidates = await self._geometry_candidates(search.id, start, end, timestamp, rng)
        if not candidates:
            raise NoRouteFoundError(f"No route found between '{start.name}' and '{end.name}'.")

        optimal = mark_optimal(candidates)
        logger.info(
            f"Generated {len(candidates)} route(s) for {start.name} -> {end.name}; "
            f"optimal '{optimal.name}' score={route_score(optimal):.2f}"
        )
        for route in candidates:
            await self._persist(self.store.save_route if self.store else None, route)

        ordered = [optimal, *(route for route in candidates if route is not optimal)]
        return RouteGenerationResult(search=search, routes=ordered)

    async def _persist(self, writer: Optional[Callable[[object], bool]], record: object) -> None:
        if writer is None:
            return
        try:
            await asyncio.to_thread(writer, record)
        except Exception as e:
            logger.warning(f"Persistence failed, continuing in demo mode: {e}")

    def graph_node(self, location: Location) -> Optional[Location]:
        """Graph node for ``location``, matched by id or name and only when its coordinates are close."""
        node = self.graph.location(location.id) or self.graph.find_by_name(location.name)
        if node is None:
            return None
        if haversine_km(node.lat, node.lng, location.lat, location.lng) > GRAPH_SNAP_KM:
            return None
        return node

    def _graph_candidates(
        self, search_id: str, start: Location, end: Location, timestamp: datetime, rng: random.Random
    ) -> list[Route]:
        start_node = self.graph_node(start)
        end_node = self.graph_node(end)
        if start_node is None or end_node is None:
            return []
        paths = find_multiple_routes(self.graph, start_node.id, end_node.id)
        if not paths:
            logger.info(f"No road-graph path between {start_node.id} and {end_node.id}; resolving geometry")
        return [self.assemble_graph_route(search_id, path, timestamp, rng) for path in paths[:MAX_ROUTES]]

    async def _geometry_candidates(
        self, search_id: str, start: Location, end: Location, timestamp: datetime, rng: random.Random
    ) -> list[Route]:
        geometries = await self.pipeline.resolve([start.coordinate, end.coordinate], start.name, end.name)
        return [
            self.assemble_geometry_route(search_id, geometry, timestamp, rng, GEOMETRY_ROUTE_NAMES[index])
            for index, geometry in enumerate(geometries[:MAX_ROUTES])
        ]

    def assemble_graph_route(
        self, search_id: str, path: Sequence[str], timestamp: datetime, rng: random.Random
    ) -> Route:
        segments = path_segments(self.graph, path)
        distance = sum(segment.distance_km for segment in segments)
        levels = traffic.segment_crowd_levels(segments, timestamp, rng)
        estimated = traffic.travel_time_minutes(distance, segments, timestamp, rng, crowd_levels=levels)
        nodes = [self.graph.location(node_id) for node_id in path]

        route_id = str(uuid.uuid4())
        junctions = [
            self._junction(route_id, node.name, node.coordinate, levels[i - 1], segments[i - 1].road_class, rng)
            for i, node in enumerate(nodes[1:-1], start=1)
        ]
        name = f"Via {nodes[1].name}" if len(nodes) > 2 else "Direct Route"
        return Route(
            id=route_id,
            search_id=search_id,
            name=name,
            total_distance_km=round(distance, 2),
            estimated_time_min=estimated,
            crowd_level=traffic.dominant_crowd_level(levels),
            path=[node.coordinate for node in nodes],
            junctions=junctions,
            source="graph",
        )

    def assemble_geometry_route(
        self,
        search_id: str,
        geometry: ResolvedGeometry,
        timestamp: datetime,
        rng: random.Random,
        name: str,
    ) -> Route:
        path = geometry.path
        distance = geometry.distance_km if geometry.distance_km is not None else path_length_km(path)
        if geometry.duration_min is not None:
            estimated = geometry.duration_min
        else:
            estimated = distance / self.assumed_speed_kmh * 60.0

        road_class = infer_road_class(geometry.distance_km, geometry.duration_min)
        segments = synthesize_segments(path, road_class, self.junction_spacing)
        if geometry.traffic_segments:
            levels = [crowd_for_color(segment.color) for segment in geometry.traffic_segments]
        else:
            levels = traffic.segment_crowd_levels(segments, timestamp, rng)

        route_id = str(uuid.uuid4())
        junctions = []
        for number, index in enumerate(junction_indices(len(path), self.junction_spacing), start=1):
            chunk = min(index // self.junction_spacing, len(segments) - 1)
            if geometry.traffic_segments:
                covering = segment_at(geometry.traffic_segments, index)
                level = crowd_for_color(covering.color) if covering else CrowdLevel.LOW
            else:
                level = levels[chunk]
            junctions.append(
                self._junction(route_id, self._junction_name(path[index], number), path[index], level, road_class, rng)
            )

        return Route(
            id=route_id,
            search_id=search_id,
            name=name,
            total_distance_km=round(distance, 2),
            estimated_time_min=round(estimated, 1),
            crowd_level=traffic.dominant_crowd_level(levels),
            path=list(path),
            junctions=junctions,
            traffic_segments=list(geometry.traffic_segments) if geometry.traffic_segments else None,
            traffic_signals=list(geometry.signals) or None,
            source=geometry.source,
        )

    def _junction_name(self, point: Coordinate, number: int) -> str:
        nearby = self.graph.nearest(point.lat, point.lng, max_km=JUNCTION_NAME_RADIUS_KM)
        return f"Near {nearby.name}" if nearby else f"Junction {number}"

    @staticmethod
    def _junction(
        route_id: str,
        name: str,
        coordinate: Coordinate,
        level: CrowdLevel,
        road_class: RoadClass,
        rng: random.Random,
    ) -> Junction:
        without_ai = traffic.junction_wait_without_ai(level, road_class, rng)
        return Junction(
            id=str(uuid.uuid4()),
            route_id=route_id,
            name=name,
            coordinate=coordinate,
            vehicles_waiting=traffic.vehicles_waiting(level, rng),
            wait_without_ai_sec=without_ai,
            wait_with_ai_sec=traffic.ai_optimized_wait(without_ai, level, rng),
            crowd_density=level,
            ai_active=True,
        )
