"""Snap coordinates that fall on land onto the nearest navigable cell."""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterator, Optional, Tuple

from sea_router.core.grid import GridCell
from sea_router.data.water_grid import WaterGrid


@dataclass(frozen=True)
class SnapResult:
    """Outcome of a ring search.

    ``lat``/``lng`` hold the centre of the chosen water cell, or the input
    coordinate when no water was found within the radius.
    """
    lat: float
    lng: float
    snapped: bool
    cell: Optional[GridCell] = None
    radius: Optional[int] = None

    @property
    def coordinate(self) -> Tuple[float, float]:
        return self.lat, self.lng


def ring_offsets(radius: int) -> Iterator[Tuple[int, int]]:
    """Offsets at Chebyshev distance exactly ``radius``, row by row."""
    if radius == 0:
        yield 0, 0
        return
    for dr in range(-radius, radius + 1):
        if abs(dr) == radius:
            for dc in range(-radius, radius + 1):
                yield dr, dc
        else:
            yield dr, -radius
            yield dr, radius


def snap_to_water(grid: WaterGrid, lat: float, lng: float, max_radius: int = 50) -> SnapResult:
    """Expanding ring search for the closest water cell.

    The origin is the projected cell (clamped into the grid when the point
    is outside it). At each radius the water cell whose centre is closest to
    ``(lat, lng)`` wins; earlier scan order breaks ties.
    """
    spec = grid.spec
    origin = spec.clamp(lat, lng)
    water = grid.water
    # beyond this radius every ring lies entirely outside the grid
    reach = max(origin.row, spec.rows - 1 - origin.row, origin.col, spec.cols - 1 - origin.col)

    for radius in range(0, min(max_radius, reach) + 1):
        best: Optional[GridCell] = None
        best_dist = math.inf
        for dr, dc in ring_offsets(radius):
            row, col = origin.row + dr, origin.col + dc
            if not spec.valid_index(row, col) or not water[row, col]:
                continue
            c_lat, c_lng = spec.unproject(row, col)
            dist = math.hypot(c_lat - lat, c_lng - lng)
            if dist < best_dist:
                best, best_dist = GridCell(row, col), dist
        if best is not None:
            c_lat, c_lng = spec.unproject(best.row, best.col)
            return SnapResult(c_lat, c_lng, snapped=True, cell=best, radius=radius)

    return SnapResult(lat, lng, snapped=False)
