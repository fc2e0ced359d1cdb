"""TomTom Routing client: traffic-aware geometry with alternatives."""

from __future__ import annotations

import logging
from typing import Any, Optional

import httpx

from ...config import credential_usable, settings
from ...errors import ProviderError
from ...models.domain import Coordinate, TrafficSignal
from .base import (
    HIGH_COLOR,
    MEDIUM_COLOR,
    GeometryRequest,
    ResolvedGeometry,
    crowd_for_color,
    normalize_segments,
    segment_at,
    signal_state_for,
)

logger = logging.getLogger(__name__)

SEVERE_CATEGORIES = {"JAM", "ROAD_WORK", "ROAD_CLOSURE"}
SIGNAL_MANEUVERS = ("TURN", "ROUNDABOUT", "MERGE", "FORK")


class TomTomRoutingProvider:
    name = "tomtom"

    def __init__(
        self,
        client: httpx.AsyncClient,
        api_key: str | None = None,
        base_url: str | None = None,
        max_alternatives: int | None = None,
    ) -> None:
        self.client = client
        self.api_key = api_key if api_key is not None else settings.tomtom_api_key
        self.base_url = (base_url or settings.tomtom_base_url).rstrip("/")
        self.max_alternatives = (
            max_alternatives if max_alternatives is not None else settings.tomtom_max_alternatives
        )

    @property
    def configured(self) -> bool:
        return credential_usable(self.api_key)

    async def fetch(self, request: GeometryRequest) -> Optional[list[ResolvedGeometry]]:
        if not self.configured:
            logger.debug("TomTom API key missing or placeholder; skipping provider")
            return None

        # TomTom expects lat,lng pairs joined by ':'
        locations = ":".join(f"{point.lat},{point.lng}" for point in request.waypoints)
        url = f"{self.base_url}/routing/1/calculateRoute/{locations}/json"
        params = {
            "key": self.api_key,
            "routeRepresentation": "polyline",
            "computeBestOrder": "false",
            "instructionsType": "tagged",
            "traffic": "true",
            "sectionType": "traffic",
            "maxAlternatives": str(self.max_alternatives),
        }
        response = await self.client.get(url, params=params)
        response.raise_for_status()
        data = response.json()

        routes = data.get("routes") or []
        if not routes:
            raise ProviderError("TomTom returned no routes.")

        parsed = [parse_tomtom_route(route) for route in routes]
        parsed = [geometry for geometry in parsed if len(geometry.path) >= 2]
        logger.info(f"TomTom traffic: found {len(parsed)} route(s)")
        return parsed


def _section_color(section: dict[str, Any]) -> Optional[str]:
    if section.get("sectionType") != "TRAFFIC":
        return None
    if str(section.get("simpleCategory", "")).upper() in SEVERE_CATEGORIES:
        return HIGH_COLOR
    return MEDIUM_COLOR


def parse_tomtom_route(route: dict[str, Any]) -> ResolvedGeometry:
    points = [
        Coordinate(float(point["latitude"]), float(point["longitude"]))
        for leg in route.get("legs", [])
        for point in leg.get("points", [])
    ]

    sections = []
    for section in route.get("sections") or []:
        color = _section_color(section)
        if color is None:
            continue
        sections.append((int(section["startPointIndex"]), int(section["endPointIndex"]), color))
    segments = normalize_segments(sections, len(points))

    signals: list[TrafficSignal] = []
    for instruction in (route.get("guidance") or {}).get("instructions", []):
        maneuver = str(instruction.get("maneuver", "")).upper()
        if not any(kind in maneuver for kind in SIGNAL_MANEUVERS):
            continue
        point = instruction.get("point")
        if not point:
            continue
        segment = segment_at(segments, int(instruction.get("pointIndex", -1)))
        level = crowd_for_color(segment.color) if segment else crowd_for_color("")
        signals.append(
            TrafficSignal(
                lat=float(point["latitude"]),
                lng=float(point["longitude"]),
                state=signal_state_for(level),
            )
        )

    summary = route.get("summary") or {}
    distance_m = summary.get("lengthInMeters")
    travel_s = summary.get("travelTimeInSeconds")
    return ResolvedGeometry(
        path=points,
        source=TomTomRoutingProvider.name,
        traffic_segments=segments,
        signals=signals,
        distance_km=float(distance_m) / 1000.0 if distance_m is not None else None,
        duration_min=float(travel_s) / 60.0 if travel_s is not None else None,
    )
