"""Route group exports."""

from . import health, osrm, routes

__all__ = ["routes", "health", "osrm"]
