"""Geometry resolution services."""

from .base import GeometryProvider, GeometryRequest, ResolvedGeometry
from .pipeline import GeometryPipeline, build_geometry_pipeline

__all__ = [
    "GeometryProvider",
    "GeometryRequest",
    "ResolvedGeometry",
    "GeometryPipeline",
    "build_geometry_pipeline",
]
