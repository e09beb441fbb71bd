"""A* search over the navigable cells of a water grid."""
from __future__ import annotations

import heapq
import itertools
import math
import time
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from sea_router.core.geodesy import SQRT2, lng_scale, octile_distance
from sea_router.core.grid import GridCell
from sea_router.data.water_grid import WaterGrid


Move = Tuple[int, int, float]
MOVES: List[Move] = [
    (-1, 0, 1.0),
    (1, 0, 1.0),
    (0, -1, 1.0),
    (0, 1, 1.0),
    (-1, -1, SQRT2),
    (-1, 1, SQRT2),
    (1, -1, SQRT2),
    (1, 1, SQRT2),
]

# Wall clock is only sampled every this many pops
_CLOCK_EVERY = 1024


@dataclass
class AStarResult:
    cells: List[GridCell]
    explored: int
    cost: float
    success: bool
    reason: str = "found"
    g_scores: List[float] = field(default_factory=list)


def reconstruct_path(came_from: Dict[GridCell, GridCell], current: GridCell) -> List[GridCell]:
    path = [current]
    while current in came_from:
        current = came_from[current]
        path.append(current)
    path.reverse()
    return path


class GridAStar:
    """8-connected A* restricted to water cells.

    With ``geographic=False`` moves cost 1 (orthogonal) or sqrt(2) (diagonal)
    and the octile heuristic is exact on open water. With ``geographic=True``
    the east-west part of each move is shrunk by ``cos(lat)``; the heuristic
    then uses the smallest shrink factor over the rows spanned by the start's
    water body, which no path of the search can leave.
    """

    def __init__(
        self,
        grid: WaterGrid,
        max_iterations: int = 500_000,
        geographic: bool = False,
        prefilter_components: bool = True,
        time_budget_s: Optional[float] = None,
    ):
        self.grid = grid
        self.max_iterations = max_iterations
        self.geographic = geographic
        self.prefilter_components = prefilter_components
        self.time_budget_s = time_budget_s
        if geographic:
            spec = grid.spec
            self._row_scale = [lng_scale(spec.unproject(r, 0)[0]) for r in range(spec.rows)]
            self._min_scale = min(self._row_scale) if self._row_scale else 1.0

    def move_cost(self, row: int, d_row: int, d_col: int, base: float) -> float:
        if not self.geographic:
            return base
        if d_col == 0:
            return 1.0
        scale = self._row_scale[row]
        if d_row == 0:
            return scale
        scale = 0.5 * (scale + self._row_scale[row + d_row])
        return math.hypot(scale, 1.0)

    def heuristic(self, cell: Tuple[int, int], goal: Tuple[int, int]) -> float:
        d_row = goal[0] - cell[0]
        d_col = goal[1] - cell[1]
        if not self.geographic:
            return octile_distance(d_row, d_col)
        return math.hypot(d_col * self._min_scale, d_row)

    def search(self, start: Tuple[int, int], goal: Tuple[int, int]) -> AStarResult:
        grid = self.grid
        start = GridCell(*start)
        goal = GridCell(*goal)
        if not grid.is_water_cell(*start) or not grid.is_water_cell(*goal):
            return AStarResult(cells=[], explored=0, cost=math.inf, success=False, reason="endpoint_on_land")
        if start == goal:
            return AStarResult(cells=[start], explored=0, cost=0.0, success=True, g_scores=[0.0])
        if self.prefilter_components and not grid.same_water_body(start, goal):
            return AStarResult(cells=[], explored=0, cost=math.inf, success=False, reason="disconnected")
        if self.geographic:
            first_row, last_row = grid.row_span(start)
            self._min_scale = min(self._row_scale[first_row:last_row])

        water = grid.water
        rows, cols = grid.spec.rows, grid.spec.cols
        counter = itertools.count()
        h0 = self.heuristic(start, goal)
        # (f, h, tie, cell): equal f prefers the smaller h, then FIFO
        open_set: List[Tuple[float, float, int, GridCell]] = [(h0, h0, next(counter), start)]
        came_from: Dict[GridCell, GridCell] = {}
        g_score: Dict[GridCell, float] = {start: 0.0}
        closed: set[GridCell] = set()
        explored = 0
        deadline = (
            time.perf_counter() + self.time_budget_s if self.time_budget_s is not None else None
        )

        while open_set:
            if explored >= self.max_iterations:
                return AStarResult(cells=[], explored=explored, cost=math.inf, success=False, reason="iteration_limit")
            if deadline is not None and explored % _CLOCK_EVERY == 0 and time.perf_counter() > deadline:
                return AStarResult(cells=[], explored=explored, cost=math.inf, success=False, reason="time_budget")

            _, _, _, current = heapq.heappop(open_set)
            explored += 1
            if current == goal:
                cells = reconstruct_path(came_from, current)
                return AStarResult(
                    cells=cells,
                    explored=explored,
                    cost=g_score[current],
                    success=True,
                    g_scores=[g_score[c] for c in cells],
                )
            if current in closed:
                continue
            closed.add(current)

            cur_row, cur_col = current
            cur_g = g_score[current]
            for d_row, d_col, base in MOVES:
                n_row, n_col = cur_row + d_row, cur_col + d_col
                if n_row < 0 or n_row >= rows or n_col < 0 or n_col >= cols:
                    continue
                if not water[n_row, n_col]:
                    continue
                neighbor = GridCell(n_row, n_col)
                if neighbor in closed:
                    continue
                tentative_g = cur_g + self.move_cost(cur_row, d_row, d_col, base)
                if tentative_g < g_score.get(neighbor, math.inf):
                    came_from[neighbor] = current
                    g_score[neighbor] = tentative_g
                    h = self.heuristic(neighbor, goal)
                    heapq.heappush(open_set, (tentative_g + h, h, next(counter), neighbor))

        return AStarResult(cells=[], explored=explored, cost=math.inf, success=False, reason="exhausted")
