"""Snapping, grid A* and the SeaRouter facade."""

from sea_router.routing.router import RouteOutcome, SeaRouter, to_linestring
from sea_router.routing.snap import SnapResult, snap_to_water

__all__ = [
    "RouteOutcome",
    "SeaRouter",
    "SnapResult",
    "snap_to_water",
    "to_linestring",
]
