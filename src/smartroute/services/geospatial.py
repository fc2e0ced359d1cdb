"""Geospatial helper functions."""

from __future__ import annotations

import math
from typing import Sequence

from ..models.domain import Coordinate

EARTH_RADIUS_KM = 6371.0


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Compute distance between two coordinates using the Haversine formula."""

    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lon2 - lon1)

    a = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c


def path_length_km(path: Sequence[Coordinate]) -> float:
    """Sum of great-circle distances between consecutive points."""
    return sum(
        haversine_km(a.lat, a.lng, b.lat, b.lng)
        for a, b in zip(path, path[1:])
    )


def quadratic_curve(
    start: Coordinate,
    end: Coordinate,
    num_points: int = 20,
    offset_factor: float = 0.5,
) -> list[Coordinate]:
    """Quadratic Bezier arc from start to end, bowing perpendicular to the chord.

    Returns ``num_points + 1`` coordinates; the first and last are the inputs
    themselves so that consecutive arcs join exactly.
    """
    if num_points < 1:
        raise ValueError("num_points must be >= 1")

    mid_lat = (start.lat + end.lat) / 2
    mid_lng = (start.lng + end.lng) / 2
    d_lng = end.lng - start.lng
    d_lat = end.lat - start.lat
    control_lat = mid_lat - d_lng * offset_factor
    control_lng = mid_lng + d_lat * offset_factor

    points = [start]
    for i in range(1, num_points):
        t = i / num_points
        u = 1 - t
        points.append(
            Coordinate(
                lat=u * u * start.lat + 2 * u * t * control_lat + t * t * end.lat,
                lng=u * u * start.lng + 2 * u * t * control_lng + t * t * end.lng,
            )
        )
    points.append(end)
    return points


def decode_polyline(polyline: str, precision: int = 5) -> list[Coordinate]:
    """Decode a Google encoded polyline string (used by Mapbox and OSRM)."""
    coordinates: list[Coordinate] = []
    index = 0
    lat = 0
    lng = 0
    factor = 10 ** precision

    def _next_value() -> int:
        nonlocal index
        shift = 0
        result = 0
        while True:
            if index >= len(polyline):
                raise ValueError("Truncated polyline string.")
            b = ord(polyline[index]) - 63
            index += 1
            result |= (b & 0x1F) << shift
            shift += 5
            if b < 0x20:
                break
        return ~(result >> 1) if (result & 1) else (result >> 1)

    while index < len(polyline):
        lat += _next_value()
        lng += _next_value()
        coordinates.append(Coordinate(lat / factor, lng / factor))

    return coordinates
