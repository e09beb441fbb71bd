"""API request and response models."""
from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class CalcRouteRequest(_CamelModel):
    from_lat: float = Field(..., alias="fromLat", ge=-90.0, le=90.0)
    from_lng: float = Field(..., alias="fromLng", ge=-180.0, le=180.0)
    to_lat: float = Field(..., alias="toLat", ge=-90.0, le=90.0)
    to_lng: float = Field(..., alias="toLng", ge=-180.0, le=180.0)
    simplify: Optional[bool] = Field(None, description="Override path simplification")


class LineString(BaseModel):
    type: Literal["LineString"] = "LineString"
    coordinates: List[List[float]] = Field(..., description="[lng, lat] pairs")


class CalcRouteResponse(_CamelModel):
    success: bool = True
    route: LineString
    distance_nm: Optional[float] = Field(None, alias="distanceNm")
    fallback: bool = False


class SnapRequest(BaseModel):
    lat: float = Field(..., ge=-90.0, le=90.0)
    lng: float = Field(..., ge=-180.0, le=180.0)


class SnapResponse(BaseModel):
    lat: float
    lng: float
    snapped: bool


class WaterResponse(BaseModel):
    lat: float
    lng: float
    water: bool
