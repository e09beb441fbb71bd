"""Point-to-point sea routing over a loaded WaterGridStore."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Tuple

from sea_router.core.config import SeaRouterConfig
from sea_router.core.geodesy import path_length_nm
from sea_router.data.store import WaterGridStore
from sea_router.data.water_grid import WaterGrid
from sea_router.routing.astar import AStarResult, GridAStar
from sea_router.routing.simplify import drop_consecutive_duplicates, simplify_cells
from sea_router.routing.snap import SnapResult, snap_to_water

logger = logging.getLogger(__name__)

LatLng = Tuple[float, float]


@dataclass
class RouteOutcome:
    """A drawable route: the sea path when one exists, else a straight line."""
    path: List[LatLng]
    fallback: bool
    distance_nm: Optional[float]
    start: LatLng
    end: LatLng


def to_linestring(path: Sequence[LatLng]) -> Dict[str, Any]:
    """GeoJSON LineString for a (lat, lng) path ([lng, lat] ordering)."""
    return {
        "type": "LineString",
        "coordinates": [[lng, lat] for lat, lng in path],
    }


class SeaRouter:
    """Snaps endpoints to water and runs A* between them.

    The router holds no per-query state; one instance can serve concurrent
    requests against the same store.
    """

    def __init__(self, store: WaterGridStore, config: Optional[SeaRouterConfig] = None):
        self.store = store
        self.config = config or SeaRouterConfig()

    def snap(self, lat: float, lng: float, layer: Optional[WaterGrid] = None) -> SnapResult:
        layer = layer or self.store.layer_for(lat, lng)
        if layer is None:
            return SnapResult(lat, lng, snapped=False)
        result = snap_to_water(layer, lat, lng, max_radius=self.config.snap.max_radius_cells)
        if not result.snapped:
            logger.warning(
                "[SeaRouter] snap_to_water(%.4f, %.4f): no water within %d cells on '%s'",
                lat, lng, self.config.snap.max_radius_cells, layer.name,
            )
        elif result.radius:
            logger.debug(
                "[SeaRouter] snap_to_water(%.4f, %.4f): snapped to (%.4f, %.4f) at radius %d",
                lat, lng, result.lat, result.lng, result.radius,
            )
        return result

    def snap_to_water(self, lat: float, lng: float) -> LatLng:
        """Nearest water cell centre, or the input when none is in range."""
        return self.snap(lat, lng).coordinate

    def search(self, layer: WaterGrid, start: Tuple[int, int], goal: Tuple[int, int]) -> AStarResult:
        search_cfg = self.config.search
        astar = GridAStar(
            layer,
            max_iterations=search_cfg.max_iterations,
            geographic=search_cfg.geographic_costs,
            prefilter_components=search_cfg.prefilter_components,
            time_budget_s=search_cfg.time_budget_s,
        )
        return astar.search(start, goal)

    def find_route(
        self,
        from_lat: float,
        from_lng: float,
        to_lat: float,
        to_lng: float,
        simplify: Optional[bool] = None,
    ) -> Optional[List[LatLng]]:
        """Water path from one point to another, or None when there is none.

        Both endpoints are snapped first. The path runs on a regional layer
        when both endpoints share one, otherwise on the global layer.
        """
        if not self.store.loaded:
            logger.warning("[SeaRouter] find_route called but grid not loaded")
            return None

        layer = self.store.layer_for_pair((from_lat, from_lng), (to_lat, to_lng))
        if layer is None:
            return None
        start = self.snap(from_lat, from_lng, layer)
        goal = self.snap(to_lat, to_lng, layer)
        if not start.snapped or not goal.snapped:
            logger.warning("[SeaRouter] find_route: endpoints still on land after snap")
            return None

        if start.cell == goal.cell:
            # both ends in one cell; keep the raw points where they are on water
            a = (from_lat, from_lng) if start.radius == 0 else start.coordinate
            b = (to_lat, to_lng) if goal.radius == 0 else goal.coordinate
            path = drop_consecutive_duplicates([a, b])
            if len(path) < 2:
                logger.debug("[SeaRouter] find_route: both endpoints resolve to (%.4f, %.4f)", *a)
                return None
            return path

        result = self.search(layer, start.cell, goal.cell)
        if not result.success:
            logger.warning(
                "[SeaRouter] A* failed (%s) after %d iterations on '%s'",
                result.reason, result.explored, layer.name,
            )
            return None

        cells = result.cells
        do_simplify = self.config.simplify.enabled if simplify is None else simplify
        if do_simplify:
            cells = simplify_cells(cells, layer, self.config.simplify.tolerance_cells)
        logger.debug(
            "[SeaRouter] A* found path: %d raw cells, %d kept, %d iterations, res=%s",
            len(result.cells), len(cells), result.explored, layer.resolution,
        )
        return drop_consecutive_duplicates([layer.unproject(cell) for cell in cells])

    def plan_route(
        self,
        from_lat: float,
        from_lng: float,
        to_lat: float,
        to_lng: float,
        simplify: Optional[bool] = None,
    ) -> RouteOutcome:
        """Sea route with the straight-line fallback applied."""
        start = (from_lat, from_lng)
        end = (to_lat, to_lng)
        path = self.find_route(from_lat, from_lng, to_lat, to_lng, simplify=simplify)
        if path is None or len(path) < 2:
            logger.info(
                "[SeaRouter] No sea route (%.4f, %.4f) -> (%.4f, %.4f); using straight line",
                from_lat, from_lng, to_lat, to_lng,
            )
            return RouteOutcome(path=[start, end], fallback=True, distance_nm=None, start=start, end=end)
        return RouteOutcome(
            path=path,
            fallback=False,
            distance_nm=path_length_nm(path),
            start=start,
            end=end,
        )
