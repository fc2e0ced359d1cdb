"""Priority-ordered geometry resolution: cache, live providers, then a synthetic curve."""

from __future__ import annotations

import asyncio
import logging
from typing import Optional, Sequence

import httpx

from ...config import settings
from ...data.route_cache import NamedRouteCache, load_route_cache
from ...models.domain import Coordinate
from .base import GeometryProvider, GeometryRequest, ResolvedGeometry
from .local import NamedCacheProvider, SyntheticCurveProvider
from .mapbox import MapboxDirectionsProvider
from .osrm import OSRMRelayProvider
from .tomtom import TomTomRoutingProvider

logger = logging.getLogger(__name__)


class GeometryPipeline:
    """Tries each provider in order and returns the first non-empty answer.

    Each call is bounded by ``timeout_seconds``. A provider that raises,
    times out or returns nothing is logged and skipped. Cancellation of the
    caller propagates into the in-flight provider call.
    """

    def __init__(self, providers: Sequence[GeometryProvider], timeout_seconds: float | None = None) -> None:
        self.providers = tuple(providers)
        self.timeout_seconds = timeout_seconds or settings.provider_timeout_seconds

    async def resolve(
        self,
        waypoints: Sequence[Coordinate],
        start_name: str | None = None,
        end_name: str | None = None,
    ) -> list[ResolvedGeometry]:
        if len(waypoints) < 2:
            raise ValueError("At least two waypoints are required to resolve a route geometry.")

        request = GeometryRequest(tuple(waypoints), start_name, end_name)
        for provider in self.providers:
            geometries = await self._try_provider(provider, request)
            if geometries:
                logger.info(f"Resolved {len(geometries)} geometry(ies) via {provider.name}")
                return geometries
        return []

    async def _try_provider(
        self, provider: GeometryProvider, request: GeometryRequest
    ) -> Optional[list[ResolvedGeometry]]:
        try:
            result = await asyncio.wait_for(provider.fetch(request), timeout=self.timeout_seconds)
        except asyncio.TimeoutError:
            logger.warning(f"Geometry provider '{provider.name}' timed out after {self.timeout_seconds:.1f}s")
            return None
        except httpx.HTTPStatusError as exc:
            logger.warning(f"Geometry provider '{provider.name}' returned HTTP {exc.response.status_code}")
            return None
        except Exception as exc:
            logger.warning(f"Geometry provider '{provider.name}' failed: {exc}")
            return None

        usable = [geometry for geometry in result or [] if len(geometry.path) >= 2]
        if not usable:
            logger.debug(f"Geometry provider '{provider.name}' returned no usable geometry")
            return None
        return usable


def build_geometry_pipeline(
    client: httpx.AsyncClient,
    cache: NamedRouteCache | None = None,
    timeout_seconds: float | None = None,
) -> GeometryPipeline:
    """Default chain: golden-path cache, TomTom, Mapbox, OSRM relay, synthetic curve."""
    providers: list[GeometryProvider] = [
        NamedCacheProvider(cache or load_route_cache()),
        TomTomRoutingProvider(client),
        MapboxDirectionsProvider(client),
        OSRMRelayProvider(client),
        SyntheticCurveProvider(),
    ]
    return GeometryPipeline(providers, timeout_seconds=timeout_seconds)
