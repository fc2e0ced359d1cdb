"""Domain models for locations, road edges, routes and junctions."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Literal, Optional

RoadClass = Literal["highway", "main", "local"]
LocationCategory = Literal["major", "junction", "landmark"]
SignalState = Literal["red", "yellow", "green"]


class CrowdLevel(str, Enum):
    """Discrete congestion classification, ordered low < medium < high."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @property
    def rank(self) -> int:
        return _CROWD_RANK[self]

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, CrowdLevel):
            return NotImplemented
        return self.rank < other.rank

    def __le__(self, other: object) -> bool:
        if not isinstance(other, CrowdLevel):
            return NotImplemented
        return self.rank <= other.rank

    def __gt__(self, other: object) -> bool:
        if not isinstance(other, CrowdLevel):
            return NotImplemented
        return self.rank > other.rank

    def __ge__(self, other: object) -> bool:
        if not isinstance(other, CrowdLevel):
            return NotImplemented
        return self.rank >= other.rank


_CROWD_RANK = {CrowdLevel.LOW: 0, CrowdLevel.MEDIUM: 1, CrowdLevel.HIGH: 2}


@dataclass(frozen=True, slots=True)
class Coordinate:
    lat: float
    lng: float


@dataclass(frozen=True, slots=True)
class Location:
    """A named place. Graph locations are immutable reference data."""

    id: str
    name: str
    lat: float
    lng: float
    category: LocationCategory = "landmark"

    @property
    def coordinate(self) -> Coordinate:
        return Coordinate(self.lat, self.lng)


@dataclass(frozen=True, slots=True)
class RoadEdge:
    from_id: str
    to_id: str
    distance_km: float
    road_class: RoadClass
    base_speed_kmh: float

    def reversed(self) -> "RoadEdge":
        return RoadEdge(
            from_id=self.to_id,
            to_id=self.from_id,
            distance_km=self.distance_km,
            road_class=self.road_class,
            base_speed_kmh=self.base_speed_kmh,
        )


@dataclass(frozen=True, slots=True)
class TrafficSegment:
    """Congestion color over the inclusive index range [start_index, end_index] of a path."""

    color: str
    start_index: int
    end_index: int


@dataclass(frozen=True, slots=True)
class TrafficSignal:
    lat: float
    lng: float
    state: SignalState


@dataclass(slots=True)
class Junction:
    id: str
    route_id: str
    name: str
    coordinate: Coordinate
    vehicles_waiting: int
    wait_without_ai_sec: int
    wait_with_ai_sec: int
    crowd_density: CrowdLevel
    ai_active: bool = True


@dataclass(slots=True)
class Route:
    id: str
    search_id: str
    name: str
    total_distance_km: float
    estimated_time_min: float
    crowd_level: CrowdLevel
    path: List[Coordinate]
    junctions: List[Junction] = field(default_factory=list)
    traffic_segments: Optional[List[TrafficSegment]] = None
    traffic_signals: Optional[List[TrafficSignal]] = None
    source: str = "graph"
    is_optimal: bool = False


@dataclass(slots=True)
class Search:
    id: str
    start: Location
    end: Location
    timestamp: datetime
    selected_route_id: Optional[str] = None
