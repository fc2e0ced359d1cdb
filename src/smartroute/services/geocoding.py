"""Resolve free-text place names to locations."""

from __future__ import annotations

import logging
import re
from typing import Optional
from urllib.parse import quote

import httpx

from ..config import credential_usable, settings
from ..data.road_network import RoadGraph
from ..models.domain import Location
from .traffic import UniformSource

logger = logging.getLogger(__name__)

CITY_CENTER = (28.6139, 77.2090)
FALLBACK_SPREAD_DEG = 0.05

LANDMARKS: dict[str, tuple[float, float]] = {
    "Connaught Place": (28.6315, 77.2167),
    "India Gate": (28.6129, 77.2295),
    "Chandni Chowk": (28.6506, 77.2303),
    "Karol Bagh": (28.6519, 77.1900),
    "Rajouri Garden": (28.6414, 77.1214),
    "Nehru Place": (28.5494, 77.2501),
    "Saket": (28.5244, 77.2066),
    "Dwarka": (28.5921, 77.0460),
    "Noida Sector 18": (28.5697, 77.3227),
    "Gurgaon Cyber City": (28.4950, 77.0870),
    "Red Fort": (28.6562, 77.2410),
    "Qutub Minar": (28.5245, 77.1855),
    "Lotus Temple": (28.5535, 77.2588),
    "Akshardham": (28.6127, 77.2773),
}


def slugify(name: str) -> str:
    return re.sub(r"[^a-z0-9]+", "_", name.strip().lower()).strip("_") or "place"


def _landmark(name: str) -> Optional[Location]:
    query = name.strip().lower()
    if not query:
        return None
    for landmark, (lat, lng) in LANDMARKS.items():
        key = landmark.lower()
        if query in key or key in query:
            return Location(slugify(landmark), landmark, lat, lng, "landmark")
    return None


class LocationResolver:
    """Graph nodes first, then a landmark table, then TomTom search, then approximate coordinates."""

    def __init__(
        self,
        graph: RoadGraph,
        client: httpx.AsyncClient,
        rng: UniformSource,
        api_key: str | None = None,
        base_url: str | None = None,
    ) -> None:
        self.graph = graph
        self.client = client
        self.rng = rng
        self.api_key = api_key if api_key is not None else settings.tomtom_api_key
        self.base_url = (base_url or settings.tomtom_base_url).rstrip("/")

    async def resolve(self, name: str, lat: float | None = None, lng: float | None = None) -> Location:
        if lat is not None and lng is not None:
            return Location(slugify(name), name, lat, lng, "landmark")

        node = self.graph.find_by_name(name)
        if node is not None:
            return node

        landmark = _landmark(name)
        if landmark is not None:
            return landmark

        try:
            found = await self.search(name)
        except (httpx.HTTPError, ValueError, KeyError) as exc:
            logger.warning(f"TomTom search failed for '{name}': {exc}")
            found = None
        if found is not None:
            return found

        logger.info(f"Using approximate coordinates for '{name}'")
        return Location(
            slugify(name),
            name,
            CITY_CENTER[0] + self.rng.uniform(-FALLBACK_SPREAD_DEG, FALLBACK_SPREAD_DEG),
            CITY_CENTER[1] + self.rng.uniform(-FALLBACK_SPREAD_DEG, FALLBACK_SPREAD_DEG),
            "landmark",
        )

    async def search(self, query: str) -> Optional[Location]:
        if not credential_usable(self.api_key):
            logger.debug("TomTom search: missing or placeholder API key")
            return None

        url = f"{self.base_url}/search/2/search/{quote(query, safe='')}.json"
        response = await self.client.get(url, params={"key": self.api_key, "limit": "1"})
        response.raise_for_status()
        results = response.json().get("results") or []
        if not results:
            logger.info(f"TomTom search: no results found for '{query}'")
            return None

        result = results[0]
        position = result["position"]
        label = (result.get("address") or {}).get("freeformAddress") or (result.get("poi") or {}).get("name") or query
        logger.info(f"Geocoded '{query}' -> {label} ({position['lat']}, {position['lon']})")
        return Location(slugify(label), label, float(position["lat"]), float(position["lon"]), "landmark")
