"""Providers that answer without network I/O: the golden-path cache and the synthetic curve."""

from __future__ import annotations

from typing import Optional

from ...config import settings
from ...data.route_cache import NamedRouteCache
from ...models.domain import Coordinate
from ..geospatial import haversine_km, quadratic_curve
from .base import GeometryRequest, ResolvedGeometry


# A cached path is only reused when its ends lie this close to the requested waypoints.
CACHE_ENDPOINT_TOLERANCE_KM = 2.0


class NamedCacheProvider:
    name = "cache"

    def __init__(self, cache: NamedRouteCache) -> None:
        self.cache = cache

    async def fetch(self, request: GeometryRequest) -> Optional[list[ResolvedGeometry]]:
        path = self.cache.lookup(request.start_name, request.end_name)
        if path is None:
            return None
        start, end = request.waypoints[0], request.waypoints[-1]
        if (
            haversine_km(path[0].lat, path[0].lng, start.lat, start.lng) > CACHE_ENDPOINT_TOLERANCE_KM
            or haversine_km(path[-1].lat, path[-1].lng, end.lat, end.lng) > CACHE_ENDPOINT_TOLERANCE_KM
        ):
            return None
        return [ResolvedGeometry(path=path, source=self.name)]


class SyntheticCurveProvider:
    """Bowed quadratic curves between consecutive waypoints; always succeeds."""

    name = "synthetic"

    def __init__(self, points_per_segment: int | None = None, offset_factor: float | None = None) -> None:
        self.points_per_segment = points_per_segment or settings.curve_points_per_segment
        self.offset_factor = offset_factor if offset_factor is not None else settings.curve_offset_factor

    def interpolate(self, request: GeometryRequest) -> list[Coordinate]:
        waypoints = request.waypoints
        path: list[Coordinate] = []
        for start, end in zip(waypoints, waypoints[1:]):
            # drop each arc's last point; the next arc starts there
            path.extend(quadratic_curve(start, end, self.points_per_segment, self.offset_factor)[:-1])
        path.append(waypoints[-1])
        return path

    async def fetch(self, request: GeometryRequest) -> Optional[list[ResolvedGeometry]]:
        return [ResolvedGeometry(path=self.interpolate(request), source=self.name)]
