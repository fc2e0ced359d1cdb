"""OSRM geometry via a relay, plus the relay's upstream fan-through."""

from __future__ import annotations

import logging
from typing import Any, Optional, Sequence

import httpx

from ...config import settings
from ...errors import ProviderError
from ...models.domain import Coordinate
from ..geospatial import decode_polyline
from .base import GeometryRequest, ResolvedGeometry

logger = logging.getLogger(__name__)

USER_AGENT = "SmartRouteRelay/1.0"


def format_coordinates(points: Sequence[Coordinate]) -> str:
    """OSRM wants 'lng,lat;lng,lat;...'."""
    return ";".join(f"{point.lng},{point.lat}" for point in points)


def parse_osrm_route(data: dict[str, Any]) -> ResolvedGeometry:
    if data.get("code") != "Ok":
        raise ProviderError(f"OSRM route request failed: {data.get('message', data.get('code'))}")
    routes = data.get("routes") or []
    if not routes:
        raise ProviderError("OSRM returned no routes.")

    route = routes[0]
    geometry = route.get("geometry")
    if isinstance(geometry, str):
        path = decode_polyline(geometry)
    elif isinstance(geometry, dict):
        path = [Coordinate(float(lat), float(lng)) for lng, lat in geometry.get("coordinates", [])]
    else:
        raise ProviderError("OSRM route is missing geometry.")

    return ResolvedGeometry(
        path=path,
        source=OSRMRelayProvider.name,
        distance_km=float(route["distance"]) / 1000.0 if "distance" in route else None,
        duration_min=float(route["duration"]) / 60.0 if "duration" in route else None,
    )


class OSRMRelayProvider:
    """Asks a relay (``GET {relay}/route?coordinates=...``) for an OSRM route."""

    name = "osrm"

    def __init__(self, client: httpx.AsyncClient, relay_url: str | None = None) -> None:
        self.client = client
        self.relay_url = (relay_url if relay_url is not None else settings.osrm_relay_url) or None
        if self.relay_url:
            self.relay_url = self.relay_url.rstrip("/")

    @property
    def configured(self) -> bool:
        return bool(self.relay_url)

    async def fetch(self, request: GeometryRequest) -> Optional[list[ResolvedGeometry]]:
        if not self.configured:
            logger.debug("OSRM relay URL not configured; skipping provider")
            return None

        response = await self.client.get(
            f"{self.relay_url}/route",
            params={"coordinates": format_coordinates(request.waypoints)},
        )
        response.raise_for_status()
        geometry = parse_osrm_route(response.json())
        logger.info(f"OSRM route fetched via relay: {len(geometry.path)} waypoints")
        return [geometry]


async def relay_route(
    client: httpx.AsyncClient,
    coordinates: str,
    upstream_urls: Sequence[str] | None = None,
    profile: str | None = None,
) -> dict[str, Any]:
    """Try each upstream OSRM server in order and return the first ``Ok`` payload."""
    upstreams = tuple(upstream_urls if upstream_urls is not None else settings.osrm_upstream_urls)
    profile = profile or settings.osrm_profile
    if not upstreams:
        raise ProviderError("No OSRM upstream servers configured.")

    failures: list[str] = []
    for base_url in upstreams:
        url = f"{base_url.rstrip('/')}/route/v1/{profile}/{coordinates}"
        try:
            response = await client.get(
                url,
                params={"overview": "full", "geometries": "geojson"},
                headers={"User-Agent": USER_AGENT},
            )
            if response.is_success:
                data = response.json()
                if data.get("code") == "Ok":
                    return data
                failures.append(f"{base_url}: code={data.get('code')}")
            else:
                failures.append(f"{base_url}: HTTP {response.status_code}")
        except (httpx.HTTPError, ValueError) as exc:
            failures.append(f"{base_url}: {exc}")
        logger.warning(f"OSRM upstream failed: {failures[-1]}")

    raise ProviderError(f"All OSRM endpoints failed: {'; '.join(failures)}")
