"""Routing endpoints."""

from __future__ import annotations

import logging
import random
from typing import List, Optional

import httpx
from fastapi import APIRouter, Header, HTTPException, status

from ...config import settings
from ...data.road_network import load_road_graph
from ...errors import GraphInconsistencyError, NoRouteFoundError, RequestSupersededError
from ...persistence.database import RouteStore
from ...schemas.routing import (
    LocationModel,
    RouteRequest,
    RouteResponse,
    SelectRouteRequest,
    SelectRouteResponse,
)
from ...services.geocoding import LocationResolver
from ...services.geometry import build_geometry_pipeline
from ...services.routing.models import RouteGenerationResult
from ...services.routing.service import RouteEngine
from ...services.routing.supersession import LatestRequestRunner

router = APIRouter(prefix="/routes", tags=["routes"])

_runner = LatestRequestRunner()


async def _generate(payload: RouteRequest) -> RouteGenerationResult:
    graph = load_road_graph()
    # Outer bound only; each provider call has its own timeout inside the pipeline.
    async with httpx.AsyncClient(timeout=settings.provider_timeout_seconds) as client:
        resolver = LocationResolver(graph, client, rng=random.Random(payload.seed))
        start = await resolver.resolve(payload.start.name, payload.start.lat, payload.start.lng)
        end = await resolver.resolve(payload.end.name, payload.end.lat, payload.end.lng)
        engine = RouteEngine(graph, build_geometry_pipeline(client), store=RouteStore())
        return await engine.generate_routes(start, end, departure=payload.departure_time, seed=payload.seed)


@router.get("/locations", response_model=List[LocationModel], status_code=status.HTTP_200_OK)
def list_locations() -> List[LocationModel]:
    return [LocationModel.from_domain(location) for location in load_road_graph().locations]


@router.post("/generate", response_model=RouteResponse, status_code=status.HTTP_200_OK)
async def generate(
    payload: RouteRequest,
    x_client_session: Optional[str] = Header(default=None),
) -> RouteResponse:
    try:
        if x_client_session:
            result = await _runner.run(x_client_session, _generate(payload))
        else:
            result = await _generate(payload)
        return RouteResponse.from_result(result)
    except RequestSupersededError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    except NoRouteFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except GraphInconsistencyError as exc:
        logging.exception(f"Road graph inconsistency while generating routes: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Road network data is inconsistent: {exc}",
        ) from exc
    except Exception as exc:
        logging.exception(f"Error generating routes: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to generate routes: {str(exc)}",
        ) from exc


@router.post(
    "/searches/{search_id}/select",
    response_model=SelectRouteResponse,
    status_code=status.HTTP_200_OK,
)
def select_route(search_id: str, payload: SelectRouteRequest) -> SelectRouteResponse:
    """Record which route the user picked; succeeds without a database."""
    persisted = RouteStore().select_route(search_id, payload.route_id)
    return SelectRouteResponse(search_id=search_id, route_id=payload.route_id, persisted=persisted)
