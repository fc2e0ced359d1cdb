"""Time-of-day traffic simulation and junction wait-time estimates.

Every function here is pure given its inputs: wall-clock time is passed in
explicitly and randomness comes from the ``rng`` argument (a
``random.Random`` or anything exposing ``uniform``), never from the global
generator.
"""

from __future__ import annotations

import math
from datetime import datetime
from typing import Iterable, Protocol, Sequence

from ..models.domain import CrowdLevel, RoadClass, RoadEdge


class UniformSource(Protocol):
    def uniform(self, a: float, b: float) -> float: ...


WEEKEND_FACTOR = 0.7

BASE_CROWD: dict[str, float] = {"highway": 0.3, "main": 0.6, "local": 0.8}
CROWD_NOISE = 0.2
CROWD_FLOOR, CROWD_CEILING = 0.1, 1.5

BASE_WAIT_SECONDS: dict[CrowdLevel, float] = {
    CrowdLevel.LOW: 45.0,
    CrowdLevel.MEDIUM: 90.0,
    CrowdLevel.HIGH: 150.0,
}
ROAD_WAIT_FACTOR: dict[str, float] = {"highway": 0.8, "main": 1.0, "local": 1.3}
WAIT_NOISE = 0.25
MIN_WAIT_WITHOUT_AI = 20
MIN_WAIT_WITH_AI = 15

AI_REDUCTION_RANGE: dict[CrowdLevel, tuple[float, float]] = {
    CrowdLevel.LOW: (0.05, 0.15),
    CrowdLevel.MEDIUM: (0.20, 0.35),
    CrowdLevel.HIGH: (0.30, 0.45),
}
VEHICLES_RANGE: dict[CrowdLevel, tuple[float, float]] = {
    CrowdLevel.LOW: (5.0, 15.0),
    CrowdLevel.MEDIUM: (15.0, 35.0),
    CrowdLevel.HIGH: (30.0, 55.0),
}
CROWD_SPEED_FACTOR: dict[CrowdLevel, float] = {
    CrowdLevel.LOW: 1.0,
    CrowdLevel.MEDIUM: 0.75,
    CrowdLevel.HIGH: 0.6,
}
BUFFER_MINUTES = (2.0, 5.0)
BASE_SPEED_FALLBACK_KMH = 35.0


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def traffic_multiplier(timestamp: datetime) -> float:
    """Congestion multiplier for the given wall-clock time (1.0 = normal)."""
    hour = timestamp.hour
    weekend_factor = WEEKEND_FACTOR if timestamp.weekday() >= 5 else 1.0

    if 8 <= hour < 10:
        bracket = 1.8  # morning rush
    elif 17 <= hour < 20:
        bracket = 2.0  # evening rush
    elif hour >= 23 or hour < 6:
        bracket = 0.5
    elif 10 <= hour < 17:
        bracket = 1.2
    elif 20 <= hour < 23:
        bracket = 0.8
    else:
        bracket = 1.0
    return bracket * weekend_factor


def crowd_level(road_class: RoadClass, timestamp: datetime, rng: UniformSource) -> CrowdLevel:
    congestion = BASE_CROWD[road_class] * traffic_multiplier(timestamp)
    congestion += rng.uniform(-CROWD_NOISE, CROWD_NOISE)
    congestion = max(CROWD_FLOOR, min(CROWD_CEILING, congestion))
    if congestion < 0.5:
        return CrowdLevel.LOW
    if congestion < 1.0:
        return CrowdLevel.MEDIUM
    return CrowdLevel.HIGH


def junction_wait_without_ai(level: CrowdLevel, road_class: RoadClass, rng: UniformSource) -> int:
    """Signal wait in seconds under fixed-cycle control."""
    base = BASE_WAIT_SECONDS[level] * ROAD_WAIT_FACTOR[road_class]
    wait = base * (1 + rng.uniform(-WAIT_NOISE, WAIT_NOISE))
    return round_half_up(max(MIN_WAIT_WITHOUT_AI, wait))


def ai_optimized_wait(wait_without_ai: int, level: CrowdLevel, rng: UniformSource) -> int:
    """Signal wait in seconds with adaptive control.

    Never above ``wait_without_ai``; the 15 s floor only applies when the
    fixed-cycle wait is itself at least that long.
    """
    low, high = AI_REDUCTION_RANGE[level]
    reduction = rng.uniform(low, high)
    optimized = round_half_up(max(MIN_WAIT_WITH_AI, wait_without_ai * (1 - reduction)))
    return min(optimized, wait_without_ai)


def vehicles_waiting(level: CrowdLevel, rng: UniformSource) -> int:
    low, high = VEHICLES_RANGE[level]
    return round_half_up(rng.uniform(low, high))


def dominant_crowd_level(levels: Iterable[CrowdLevel]) -> CrowdLevel:
    """Any high wins; otherwise medium wins ties against low."""
    counts = {CrowdLevel.LOW: 0, CrowdLevel.MEDIUM: 0, CrowdLevel.HIGH: 0}
    for level in levels:
        counts[CrowdLevel(level)] += 1
    if counts[CrowdLevel.HIGH] > 0:
        return CrowdLevel.HIGH
    if counts[CrowdLevel.MEDIUM] >= counts[CrowdLevel.LOW]:
        return CrowdLevel.MEDIUM
    return CrowdLevel.LOW


def segment_crowd_levels(
    segments: Sequence[RoadEdge], timestamp: datetime, rng: UniformSource
) -> list[CrowdLevel]:
    return [crowd_level(segment.road_class, timestamp, rng) for segment in segments]


def travel_time_minutes(
    distance_km: float,
    segments: Sequence[RoadEdge],
    timestamp: datetime,
    rng: UniformSource,
    crowd_levels: Sequence[CrowdLevel] | None = None,
) -> float:
    """Estimated travel time in whole minutes, including a 2-5 minute stop buffer.

    ``crowd_levels`` lets callers reuse levels already drawn for the same
    segments; otherwise one level per segment is drawn from ``rng``.
    ``distance_km`` is only used when no segments are given.
    """
    multiplier = traffic_multiplier(timestamp)
    if crowd_levels is None:
        crowd_levels = segment_crowd_levels(segments, timestamp, rng)
    elif len(crowd_levels) != len(segments):
        raise ValueError("crowd_levels must align with segments.")

    total_hours = 0.0
    for segment, level in zip(segments, crowd_levels):
        effective_speed = segment.base_speed_kmh / multiplier * CROWD_SPEED_FACTOR[level]
        total_hours += segment.distance_km / effective_speed

    if not segments and distance_km > 0:
        total_hours = distance_km / (BASE_SPEED_FALLBACK_KMH / multiplier)

    buffer = rng.uniform(*BUFFER_MINUTES)
    return float(round_half_up(total_hours * 60 + buffer))
