"""Mapbox Directions client: single geometry, no traffic coloring."""

from __future__ import annotations

import logging
from typing import Optional

import httpx

from ...config import credential_usable, settings
from ...errors import ProviderError
from ..geospatial import decode_polyline
from .base import GeometryRequest, ResolvedGeometry

logger = logging.getLogger(__name__)


class MapboxDirectionsProvider:
    name = "mapbox"

    def __init__(
        self,
        client: httpx.AsyncClient,
        token: str | None = None,
        base_url: str | None = None,
        profile: str = "mapbox/driving",
    ) -> None:
        self.client = client
        self.token = token if token is not None else settings.mapbox_token
        self.base_url = (base_url or settings.mapbox_base_url).rstrip("/")
        self.profile = profile

    @property
    def configured(self) -> bool:
        return credential_usable(self.token)

    async def fetch(self, request: GeometryRequest) -> Optional[list[ResolvedGeometry]]:
        if not self.configured:
            logger.debug("Mapbox token missing or placeholder; skipping provider")
            return None

        coordinate_str = ";".join(f"{point.lng},{point.lat}" for point in request.waypoints)
        url = f"{self.base_url}/directions/v5/{self.profile}/{coordinate_str}"
        params = {"geometries": "polyline", "overview": "full", "access_token": self.token}
        response = await self.client.get(url, params=params)
        response.raise_for_status()
        data = response.json()

        routes = data.get("routes") or []
        if not routes:
            raise ProviderError(f"Mapbox returned no routes (code={data.get('code')}).")

        route = routes[0]
        path = decode_polyline(route["geometry"])
        logger.info(f"Mapbox route fetched: {len(path)} points")
        return [
            ResolvedGeometry(
                path=path,
                source=self.name,
                distance_km=float(route["distance"]) / 1000.0 if "distance" in route else None,
                duration_min=float(route["duration"]) / 60.0 if "duration" in route else None,
            )
        ]
