"""Hand-curated road geometries for well-known start/end pairs."""

from __future__ import annotations

import functools
import logging
from types import MappingProxyType
from typing import Mapping, Optional, Sequence

from ..models.domain import Coordinate

logger = logging.getLogger(__name__)


def _path(*points: tuple[float, float]) -> tuple[Coordinate, ...]:
    return tuple(Coordinate(lat, lng) for lat, lng in points)


GOLDEN_PATHS: dict[str, tuple[Coordinate, ...]] = {
    "Connaught Place-India Gate": _path(
        (28.6315, 77.2167),  # CP inner circle
        (28.6320, 77.2180),
        (28.6310, 77.2200),  # outer circle
        (28.6290, 77.2230),  # Barakhamba Road
        (28.6270, 77.2260),
        (28.6250, 77.2290),  # Mandi House roundabout
        (28.6230, 77.2295),  # Copernicus Marg
        (28.6200, 77.2295),
        (28.6170, 77.2290),  # India Gate hexagon
        (28.6150, 77.2285),
        (28.6129, 77.2295),
    ),
    "India Gate-Connaught Place": _path(
        (28.6129, 77.2295),
        (28.6150, 77.2305),
        (28.6170, 77.2300),
        (28.6200, 77.2295),
        (28.6250, 77.2290),
        (28.6270, 77.2260),
        (28.6290, 77.2230),
        (28.6310, 77.2200),
        (28.6320, 77.2180),
        (28.6315, 77.2167),
    ),
}


class NamedRouteCache:
    """Read-only lookup keyed by "<start name>-<end name>"."""

    def __init__(self, entries: Mapping[str, Sequence[Coordinate]]) -> None:
        self._entries = MappingProxyType({key: tuple(path) for key, path in entries.items()})

    @staticmethod
    def key(start_name: str, end_name: str) -> str:
        return f"{start_name}-{end_name}"

    def __len__(self) -> int:
        return len(self._entries)

    def lookup(self, start_name: str | None, end_name: str | None) -> Optional[list[Coordinate]]:
        if not start_name or not end_name:
            return None
        cached = self._entries.get(self.key(start_name, end_name))
        if cached is None:
            return None
        logger.info(f"Golden path cache hit for {self.key(start_name, end_name)}")
        return list(cached)


@functools.lru_cache(maxsize=1)
def load_route_cache() -> NamedRouteCache:
    return NamedRouteCache(GOLDEN_PATHS)
