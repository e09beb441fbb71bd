"""API routers."""
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Query

from sea_router.api.dependencies import get_router
from sea_router.api.schemas import (
    CalcRouteRequest,
    CalcRouteResponse,
    LineString,
    SnapRequest,
    SnapResponse,
    WaterResponse,
)
from sea_router.data.water_grid import GridLoadError
from sea_router.routing.router import SeaRouter, to_linestring

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/calc-route", response_model=CalcRouteResponse)
def calc_route(request: CalcRouteRequest, sea_router: SeaRouter = Depends(get_router)) -> CalcRouteResponse:
    outcome = sea_router.plan_route(
        request.from_lat,
        request.from_lng,
        request.to_lat,
        request.to_lng,
        simplify=request.simplify,
    )
    return CalcRouteResponse(
        success=True,
        route=LineString(**to_linestring(outcome.path)),
        distance_nm=outcome.distance_nm,
        fallback=outcome.fallback,
    )


@router.post("/snap", response_model=SnapResponse)
def snap(request: SnapRequest, sea_router: SeaRouter = Depends(get_router)) -> SnapResponse:
    result = sea_router.snap(request.lat, request.lng)
    return SnapResponse(lat=result.lat, lng=result.lng, snapped=result.snapped)


@router.get("/is-water", response_model=WaterResponse)
def is_water(
    lat: float = Query(..., ge=-90.0, le=90.0),
    lng: float = Query(..., ge=-180.0, le=180.0),
    sea_router: SeaRouter = Depends(get_router),
) -> WaterResponse:
    return WaterResponse(lat=lat, lng=lng, water=sea_router.store.is_water(lat, lng))


@router.post("/reload-grid")
async def reload_grid(sea_router: SeaRouter = Depends(get_router)) -> dict[str, str]:
    try:
        await sea_router.store.load()
    except GridLoadError as exc:
        logger.error("[api] Water grid reload failed: %s", exc)
        raise HTTPException(status_code=503, detail=f"Water grid unavailable: {exc}") from exc
    return {"status": "loaded"}
