import random
from datetime import datetime

import pytest

from src.smartroute.models.domain import CrowdLevel, RoadEdge
from src.smartroute.services import traffic

MONDAY = datetime(2024, 1, 15)
SATURDAY = datetime(2024, 1, 20)


class FixedUniform:
    """Stands in for random.Random; always returns the same draw."""

    def __init__(self, value: float) -> None:
        self.value = value
        self.calls: list[tuple[float, float]] = []

    def uniform(self, a: float, b: float) -> float:
        self.calls.append((a, b))
        return self.value


@pytest.mark.parametrize(
    "hour, expected",
    [(3, 0.5), (7, 1.0), (9, 1.8), (12, 1.2), (18, 2.0), (21, 0.8), (23, 0.5)],
)
def test_weekday_hour_brackets(hour: int, expected: float) -> None:
    assert traffic.traffic_multiplier(MONDAY.replace(hour=hour)) == pytest.approx(expected)


def test_weekend_scales_every_bracket() -> None:
    assert traffic.traffic_multiplier(SATURDAY.replace(hour=18)) == pytest.approx(1.4)
    assert traffic.traffic_multiplier(SATURDAY.replace(hour=3)) == pytest.approx(0.35)
    assert traffic.traffic_multiplier(SATURDAY.replace(day=21, hour=9)) == pytest.approx(1.26)


def test_crowd_level_thresholds() -> None:
    no_noise = FixedUniform(0.0)

    assert traffic.crowd_level("highway", MONDAY.replace(hour=3), no_noise) is CrowdLevel.LOW
    assert traffic.crowd_level("main", MONDAY.replace(hour=12), no_noise) is CrowdLevel.MEDIUM
    assert traffic.crowd_level("local", MONDAY.replace(hour=18), no_noise) is CrowdLevel.HIGH
    assert no_noise.calls == [(-0.2, 0.2)] * 3


@pytest.mark.parametrize(
    "levels, expected",
    [
        ([], CrowdLevel.MEDIUM),
        ([CrowdLevel.LOW], CrowdLevel.LOW),
        ([CrowdLevel.LOW, CrowdLevel.MEDIUM], CrowdLevel.MEDIUM),
        ([CrowdLevel.LOW, CrowdLevel.LOW, CrowdLevel.MEDIUM], CrowdLevel.LOW),
        ([CrowdLevel.LOW, CrowdLevel.LOW, CrowdLevel.HIGH], CrowdLevel.HIGH),
    ],
)
def test_dominant_crowd_level(levels, expected) -> None:
    assert traffic.dominant_crowd_level(levels) is expected


def test_ai_wait_rounds_half_up() -> None:
    # 150 * (1 - 0.35) = 97.5
    assert traffic.ai_optimized_wait(150, CrowdLevel.HIGH, FixedUniform(0.35)) == 98


def test_wait_without_ai_applies_road_factor_and_noise() -> None:
    # 90 * 1.3 * 1.1 = 128.7
    assert traffic.junction_wait_without_ai(CrowdLevel.MEDIUM, "local", FixedUniform(0.1)) == 129
    # 45 * 0.8 * 0.75 = 27
    assert traffic.junction_wait_without_ai(CrowdLevel.LOW, "highway", FixedUniform(-0.25)) == 27


def test_ai_wait_never_exceeds_fixed_cycle_wait() -> None:
    assert traffic.ai_optimized_wait(16, CrowdLevel.LOW, FixedUniform(0.05)) == 15
    assert traffic.ai_optimized_wait(20, CrowdLevel.HIGH, FixedUniform(0.45)) == 15
    # below the 15 s floor the fixed-cycle wait is the ceiling
    assert traffic.ai_optimized_wait(10, CrowdLevel.LOW, FixedUniform(0.05)) == 10


def test_wait_bounds_hold_for_random_draws() -> None:
    rng = random.Random(42)
    for _ in range(500):
        level = rng.choice(list(CrowdLevel))
        road_class = rng.choice(["highway", "main", "local"])
        without_ai = traffic.junction_wait_without_ai(level, road_class, rng)
        with_ai = traffic.ai_optimized_wait(without_ai, level, rng)
        assert without_ai >= 20
        assert 15 <= with_ai <= without_ai


def test_vehicles_waiting_ranges() -> None:
    rng = random.Random(3)
    for _ in range(200):
        assert 5 <= traffic.vehicles_waiting(CrowdLevel.LOW, rng) <= 15
        assert 15 <= traffic.vehicles_waiting(CrowdLevel.MEDIUM, rng) <= 35
        assert 30 <= traffic.vehicles_waiting(CrowdLevel.HIGH, rng) <= 55


def test_travel_time_uses_supplied_crowd_levels() -> None:
    segment = RoadEdge("connaught_place", "india_gate", 2.5, "main", 35)
    rng = FixedUniform(3.0)

    # 2.5 km at 35 / 1.2 km/h is 5.14 min, plus a 3 minute buffer
    minutes = traffic.travel_time_minutes(2.5, [segment], MONDAY.replace(hour=12), rng, crowd_levels=[CrowdLevel.LOW])

    assert minutes == 8.0
    assert rng.calls == [(2.0, 5.0)]


def test_travel_time_slows_down_for_crowds() -> None:
    segment = RoadEdge("a", "b", 10.0, "main", 30)
    noon = MONDAY.replace(hour=12)

    low = traffic.travel_time_minutes(10.0, [segment], noon, FixedUniform(2.0), crowd_levels=[CrowdLevel.LOW])
    high = traffic.travel_time_minutes(10.0, [segment], noon, FixedUniform(2.0), crowd_levels=[CrowdLevel.HIGH])

    assert high > low


def test_travel_time_without_segments_falls_back_to_distance() -> None:
    minutes = traffic.travel_time_minutes(35.0, [], MONDAY.replace(hour=12), FixedUniform(3.0))

    assert minutes == 75.0


def test_travel_time_rejects_misaligned_levels() -> None:
    segment = RoadEdge("a", "b", 1.0, "main", 30)
    with pytest.raises(ValueError):
        traffic.travel_time_minutes(1.0, [segment], MONDAY, FixedUniform(0.0), crowd_levels=[])
