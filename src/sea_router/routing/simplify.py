"""Polyline simplification helpers."""
from __future__ import annotations

import math
from typing import Callable, List, Sequence, Tuple, TypeVar

from sea_router.data.water_grid import WaterGrid


Cell = Tuple[int, int]
T = TypeVar("T")


def perpendicular_distance(point: Cell, line_start: Cell, line_end: Cell) -> float:
    """Distance in cells from ``point`` to the segment ``line_start``-``line_end``."""
    py, px = point
    ay, ax = line_start
    by, bx = line_end
    dy = by - ay
    dx = bx - ax

    # If line is a point, return distance to that point
    length_sq = dx * dx + dy * dy
    if length_sq == 0:
        return math.hypot(px - ax, py - ay)

    t = max(0.0, min(1.0, ((px - ax) * dx + (py - ay) * dy) / length_sq))
    return math.hypot(px - (ax + t * dx), py - (ay + t * dy))


def line_of_sight_clear(p0: Cell, p1: Cell, is_blocked: Callable[[int, int], bool]) -> bool:
    """Check if there's a clear line of sight between two (row, col) cells using Bresenham."""
    y0, x0 = p0
    y1, x1 = p1

    dx = abs(x1 - x0)
    dy = abs(y1 - y0)
    sx = 1 if x0 < x1 else -1
    sy = 1 if y0 < y1 else -1
    err = dx - dy

    x, y = x0, y0

    while True:
        if is_blocked(y, x):
            return False

        if x == x1 and y == y1:
            break

        e2 = 2 * err
        if e2 > -dy:
            err -= dy
            x += sx
        if e2 < dx:
            err += dx
            y += sy

    return True


def simplify_cells(cells: Sequence[Cell], grid: WaterGrid, tolerance_cells: float = 1.5) -> List[Cell]:
    """Douglas-Peucker over grid cells that never shortcuts across land.

    A run of cells collapses to its endpoints only when every interior cell is
    within ``tolerance_cells`` of the chord and the chord itself stays on water.
    """
    if len(cells) <= 2:
        return list(cells)

    def blocked(row: int, col: int) -> bool:
        return not grid.is_water_cell(row, col)

    keep = [False] * len(cells)
    keep[0] = keep[-1] = True
    stack = [(0, len(cells) - 1)]
    while stack:
        first, last = stack.pop()
        if last - first < 2:
            continue

        max_dist, max_idx = -1.0, first + 1
        for i in range(first + 1, last):
            d = perpendicular_distance(cells[i], cells[first], cells[last])
            if d > max_dist:
                max_dist, max_idx = d, i

        if max_dist <= tolerance_cells and line_of_sight_clear(cells[first], cells[last], blocked):
            continue
        if max_dist <= 0.0:
            # collinear but the chord clips land; split in the middle
            max_idx = (first + last) // 2
        keep[max_idx] = True
        stack.append((first, max_idx))
        stack.append((max_idx, last))

    return [cell for cell, kept in zip(cells, keep) if kept]


def drop_consecutive_duplicates(points: Sequence[T]) -> List[T]:
    out: List[T] = []
    for point in points:
        if not out or out[-1] != point:
            out.append(point)
    return out
