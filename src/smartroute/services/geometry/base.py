"""Shared types for geometry providers."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Protocol, Sequence

from ...models.domain import Coordinate, CrowdLevel, SignalState, TrafficSegment, TrafficSignal

LOW_COLOR = "#22c55e"
MEDIUM_COLOR = "#f59e0b"
HIGH_COLOR = "#ef4444"

TRAFFIC_COLORS: dict[CrowdLevel, str] = {
    CrowdLevel.LOW: LOW_COLOR,
    CrowdLevel.MEDIUM: MEDIUM_COLOR,
    CrowdLevel.HIGH: HIGH_COLOR,
}
_COLOR_LEVELS = {color: level for level, color in TRAFFIC_COLORS.items()}
_SIGNAL_STATES: dict[CrowdLevel, SignalState] = {
    CrowdLevel.LOW: "green",
    CrowdLevel.MEDIUM: "yellow",
    CrowdLevel.HIGH: "red",
}


def crowd_for_color(color: str) -> CrowdLevel:
    return _COLOR_LEVELS.get(color.lower(), CrowdLevel.LOW)


def signal_state_for(level: CrowdLevel) -> SignalState:
    return _SIGNAL_STATES[level]


@dataclass(frozen=True, slots=True)
class GeometryRequest:
    waypoints: tuple[Coordinate, ...]
    start_name: Optional[str] = None
    end_name: Optional[str] = None


@dataclass(slots=True)
class ResolvedGeometry:
    """One road-following path returned by a provider."""

    path: List[Coordinate]
    source: str
    traffic_segments: Optional[List[TrafficSegment]] = None
    signals: List[TrafficSignal] = field(default_factory=list)
    distance_km: Optional[float] = None
    duration_min: Optional[float] = None


class GeometryProvider(Protocol):
    """Resolves ordered waypoints to geometries; ``None`` or ``[]`` means "try the next one"."""

    name: str

    async def fetch(self, request: GeometryRequest) -> Optional[list[ResolvedGeometry]]: ...


def normalize_segments(
    sections: Iterable[tuple[int, int, str]],
    point_count: int,
) -> list[TrafficSegment]:
    """Turn possibly sparse, unordered (start, end, color) sections into full coverage.

    Adjacent segments share their boundary point index, the first starts at 0
    and the last ends at ``point_count - 1``; uncovered stretches are low.
    """
    last = point_count - 1
    if last < 1:
        return []

    segments: list[TrafficSegment] = []

    def _append(color: str, start: int, end: int) -> None:
        if segments and segments[-1].color == color and segments[-1].end_index == start:
            segments[-1] = TrafficSegment(color, segments[-1].start_index, end)
        else:
            segments.append(TrafficSegment(color, start, end))

    cursor = 0
    for start, end, color in sorted(sections):
        start = max(start, cursor)
        end = min(end, last)
        if end <= start:
            continue
        if start > cursor:
            _append(LOW_COLOR, cursor, start)
        _append(color, start, end)
        cursor = end

    if cursor < last:
        _append(LOW_COLOR, cursor, last)
    return segments


def segment_at(segments: Sequence[TrafficSegment], index: int) -> Optional[TrafficSegment]:
    for segment in segments:
        if segment.start_index <= index <= segment.end_index:
            return segment
    return None
