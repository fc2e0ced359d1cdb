"""A* path search over the road graph."""

from __future__ import annotations

import heapq
import itertools
from typing import Optional, Sequence

from ...data.road_network import RoadGraph
from ...errors import GraphInconsistencyError
from ...models.domain import RoadEdge
from ..geospatial import haversine_km

# The graph scales great-circle distance so that weight 1.0 never overestimates.
# Weights above 1.0 make the heuristic inadmissible: the search gets greedier
# and may return a longer path, which is what diversifies the candidate set.
PRIMARY_WEIGHTS: tuple[float, ...] = (1.0, 0.6, 1.5)
EXTRA_WEIGHT = 0.8
MAX_ROUTES = 3


def _heuristic(graph: RoadGraph, node_id: str, goal_id: str, weight: float) -> float:
    node = graph.location(node_id)
    goal = graph.location(goal_id)
    if node is None or goal is None:
        return float("inf")
    return haversine_km(node.lat, node.lng, goal.lat, goal.lng) * graph.heuristic_scale * weight


def astar(
    graph: RoadGraph,
    start_id: str,
    goal_id: str,
    heuristic_weight: float = 1.0,
) -> Optional[list[str]]:
    """Lowest-cost node sequence from start to goal, or None when unreachable.

    Cost is cumulative road distance; the heuristic is great-circle distance
    to the goal, shrunk by ``graph.heuristic_scale`` so it never exceeds any
    road length, then scaled by ``heuristic_weight``. Among equal f-scores the node
    discovered first is expanded first.
    """
    if start_id not in graph or goal_id not in graph:
        return None

    counter = itertools.count()
    g_score: dict[str, float] = {start_id: 0.0}
    parent: dict[str, Optional[str]] = {start_id: None}
    open_heap: list[tuple[float, int, str]] = [
        (_heuristic(graph, start_id, goal_id, heuristic_weight), next(counter), start_id)
    ]
    closed: set[str] = set()

    while open_heap:
        _, _, current = heapq.heappop(open_heap)
        if current in closed:
            continue
        if current == goal_id:
            return _reconstruct(parent, goal_id)
        closed.add(current)

        for neighbor_id, edge in graph.neighbors(current).items():
            if neighbor_id in closed:
                continue
            tentative = g_score[current] + edge.distance_km
            if tentative < g_score.get(neighbor_id, float("inf")):
                g_score[neighbor_id] = tentative
                parent[neighbor_id] = current
                f_score = tentative + _heuristic(graph, neighbor_id, goal_id, heuristic_weight)
                heapq.heappush(open_heap, (f_score, next(counter), neighbor_id))

    return None


def _reconstruct(parent: dict[str, Optional[str]], goal_id: str) -> list[str]:
    path: list[str] = []
    current: Optional[str] = goal_id
    while current is not None:
        path.append(current)
        current = parent[current]
    path.reverse()
    return path


def find_multiple_routes(graph: RoadGraph, start_id: str, goal_id: str) -> list[list[str]]:
    """Up to three distinct paths obtained by varying the heuristic weight.

    An empty list means the goal is unreachable from the start.
    """
    routes: list[list[str]] = []
    for index, weight in enumerate(PRIMARY_WEIGHTS):
        path = astar(graph, start_id, goal_id, weight)
        if path is None:
            if index == 0:
                return []
            continue
        if path not in routes:
            routes.append(path)

    if len(routes) < MAX_ROUTES:
        path = astar(graph, start_id, goal_id, EXTRA_WEIGHT)
        if path is not None and path not in routes:
            routes.append(path)

    return routes[:MAX_ROUTES]


def path_segments(graph: RoadGraph, path: Sequence[str]) -> list[RoadEdge]:
    segments: list[RoadEdge] = []
    for from_id, to_id in zip(path, path[1:]):
        edge = graph.edge_between(from_id, to_id)
        if edge is None:
            raise GraphInconsistencyError(f"No road declared between '{from_id}' and '{to_id}'.")
        segments.append(edge)
    return segments


def path_distance(graph: RoadGraph, path: Sequence[str]) -> float:
    return sum(edge.distance_km for edge in path_segments(graph, path))
