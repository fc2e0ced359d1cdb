"""OSRM relay endpoint, used as the OSRM geometry provider."""

from __future__ import annotations

import logging
import re

import httpx
from fastapi import APIRouter, HTTPException, Query, status

from ...config import settings
from ...errors import ProviderError
from ...services.geometry.osrm import relay_route

router = APIRouter(prefix="/osrm", tags=["osrm"])

_NUMBER = r"-?\d+(?:\.\d+)?"
_COORDINATES = re.compile(rf"^{_NUMBER},{_NUMBER}(?:;{_NUMBER},{_NUMBER})+$")


@router.get("/route", status_code=status.HTTP_200_OK)
async def osrm_route(
    coordinates: str = Query(..., description="Semicolon-separated lng,lat pairs."),
) -> dict:
    if not _COORDINATES.match(coordinates):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="coordinates must be at least two 'lng,lat' pairs separated by ';'",
        )
    try:
        async with httpx.AsyncClient(timeout=settings.provider_timeout_seconds) as client:
            return await relay_route(client, coordinates)
    except ProviderError as exc:
        logging.warning(f"OSRM relay failed: {exc}")
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc)) from exc
