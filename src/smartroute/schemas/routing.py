"""Routing request/response schemas."""

from __future__ import annotations

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, Field, model_validator

from ..models.domain import Junction, Location, Route, Search
from ..services.routing.models import RouteGenerationResult


class LocationInput(BaseModel):
    name: str = Field(..., min_length=1, description="Display name or free-text place name.")
    lat: Optional[float] = Field(default=None, ge=-90, le=90)
    lng: Optional[float] = Field(default=None, ge=-180, le=180)

    @model_validator(mode="after")
    def _coordinates_together(self) -> "LocationInput":
        if (self.lat is None) != (self.lng is None):
            raise ValueError("lat and lng must be provided together.")
        return self


class RouteRequest(BaseModel):
    start: LocationInput
    end: LocationInput
    departure_time: Optional[datetime] = Field(
        default=None, description="Wall-clock time used for the traffic model; defaults to now."
    )
    seed: Optional[int] = Field(default=None, description="Seed for reproducible traffic simulation.")


class CoordinateModel(BaseModel):
    lat: float
    lng: float


class LocationModel(BaseModel):
    id: str
    name: str
    lat: float
    lng: float
    category: Literal["major", "junction", "landmark"]

    @classmethod
    def from_domain(cls, location: Location) -> "LocationModel":
        return cls(id=location.id, name=location.name, lat=location.lat, lng=location.lng, category=location.category)


class TrafficSegmentModel(BaseModel):
    color: str
    start_index: int
    end_index: int


class TrafficSignalModel(BaseModel):
    lat: float
    lng: float
    state: Literal["red", "yellow", "green"]


class JunctionModel(BaseModel):
    id: str
    route_id: str
    junction_name: str
    latitude: float
    longitude: float
    vehicles_waiting: int
    time_without_ai: int
    time_with_ai: int
    crowd_density: Literal["low", "medium", "high"]
    ai_optimization_active: bool

    @classmethod
    def from_domain(cls, junction: Junction) -> "JunctionModel":
        return cls(
            id=junction.id,
            route_id=junction.route_id,
            junction_name=junction.name,
            latitude=junction.coordinate.lat,
            longitude=junction.coordinate.lng,
            vehicles_waiting=junction.vehicles_waiting,
            time_without_ai=junction.wait_without_ai_sec,
            time_with_ai=junction.wait_with_ai_sec,
            crowd_density=junction.crowd_density.value,
            ai_optimization_active=junction.ai_active,
        )


class RouteModel(BaseModel):
    id: str
    search_id: str
    route_name: str
    total_distance: float
    estimated_time: float
    crowd_level: Literal["low", "medium", "high"]
    path_coordinates: List[CoordinateModel]
    is_optimal: bool
    source: str
    junctions: List[JunctionModel]
    traffic_segments: Optional[List[TrafficSegmentModel]] = None
    traffic_signals: Optional[List[TrafficSignalModel]] = None

    @classmethod
    def from_domain(cls, route: Route) -> "RouteModel":
        return cls(
            id=route.id,
            search_id=route.search_id,
            route_name=route.name,
            total_distance=route.total_distance_km,
            estimated_time=route.estimated_time_min,
            crowd_level=route.crowd_level.value,
            path_coordinates=[CoordinateModel(lat=p.lat, lng=p.lng) for p in route.path],
            is_optimal=route.is_optimal,
            source=route.source,
            junctions=[JunctionModel.from_domain(j) for j in route.junctions],
            traffic_segments=[
                TrafficSegmentModel(color=s.color, start_index=s.start_index, end_index=s.end_index)
                for s in route.traffic_segments
            ]
            if route.traffic_segments is not None
            else None,
            traffic_signals=[
                TrafficSignalModel(lat=s.lat, lng=s.lng, state=s.state) for s in route.traffic_signals
            ]
            if route.traffic_signals is not None
            else None,
        )


class SearchModel(BaseModel):
    id: str
    start_location: str
    end_location: str
    start_lat: float
    start_lng: float
    end_lat: float
    end_lng: float
    search_timestamp: datetime

    @classmethod
    def from_domain(cls, search: Search) -> "SearchModel":
        return cls(
            id=search.id,
            start_location=search.start.name,
            end_location=search.end.name,
            start_lat=search.start.lat,
            start_lng=search.start.lng,
            end_lat=search.end.lat,
            end_lng=search.end.lng,
            search_timestamp=search.timestamp,
        )


class RouteResponse(BaseModel):
    search: SearchModel
    routes: List[RouteModel]

    @classmethod
    def from_result(cls, result: RouteGenerationResult) -> "RouteResponse":
        return cls(
            search=SearchModel.from_domain(result.search),
            routes=[RouteModel.from_domain(route) for route in result.routes],
        )


class SelectRouteRequest(BaseModel):
    route_id: str


class SelectRouteResponse(BaseModel):
    search_id: str
    route_id: str
    persisted: bool
