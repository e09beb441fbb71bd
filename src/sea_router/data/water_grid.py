"""Immutable water/land grid layer."""
from __future__ import annotations

from functools import cached_property
from typing import Optional, Tuple

import numpy as np
from scipy import ndimage

from sea_router.core.grid import GridCell, GridSpec


class GridLoadError(RuntimeError):
    """Raised when a water grid source is unreachable or malformed."""


# 8-connectivity, matching the moves the router is allowed to make
_EIGHT_CONNECTED = np.ones((3, 3), dtype=bool)


class WaterGrid:
    """A single navigable-water mask at a fixed resolution.

    ``water[row, col]`` is True for navigable cells. The array is copied and
    marked read-only on construction, so one instance can be shared by any
    number of concurrent searches.
    """

    def __init__(self, spec: GridSpec, water: np.ndarray, name: str = "global"):
        water = np.array(water, dtype=bool, copy=True)
        if water.shape != spec.shape:
            raise GridLoadError(
                f"grid '{name}' has shape {water.shape}, metadata says {spec.shape}"
            )
        water.flags.writeable = False
        self.spec = spec
        self.water = water
        self.name = name

    @classmethod
    def from_land_mask(cls, spec: GridSpec, land: np.ndarray, name: str = "global") -> "WaterGrid":
        return cls(spec, ~np.asarray(land, dtype=bool), name=name)

    @classmethod
    def from_array(
        cls,
        water: np.ndarray,
        max_lat: float,
        min_lng: float,
        resolution: float,
        name: str = "global",
    ) -> "WaterGrid":
        water = np.asarray(water, dtype=bool)
        rows, cols = water.shape
        spec = GridSpec(resolution=resolution, max_lat=max_lat, min_lng=min_lng, rows=rows, cols=cols)
        return cls(spec, water, name=name)

    def __repr__(self) -> str:
        return f"WaterGrid(name={self.name!r}, shape={self.spec.shape}, resolution={self.spec.resolution})"

    @property
    def resolution(self) -> float:
        return self.spec.resolution

    def project(self, lat: float, lng: float) -> Optional[GridCell]:
        return self.spec.project(lat, lng)

    def unproject(self, cell: Tuple[int, int]) -> Tuple[float, float]:
        return self.spec.unproject(cell[0], cell[1])

    def is_water_cell(self, row: int, col: int) -> bool:
        if not self.spec.valid_index(row, col):
            return False
        return bool(self.water[row, col])

    def is_water(self, lat: float, lng: float) -> bool:
        """Whether a point lies on a navigable cell; False outside the layer."""
        cell = self.project(lat, lng)
        if cell is None:
            return False
        return bool(self.water[cell.row, cell.col])

    @cached_property
    def components(self) -> np.ndarray:
        """Connected water-body label per cell (0 = land)."""
        labels, _ = ndimage.label(self.water, structure=_EIGHT_CONNECTED)
        labels.flags.writeable = False
        return labels

    @cached_property
    def component_extents(self) -> list:
        """Bounding slices of each water body, indexed by label - 1."""
        return ndimage.find_objects(self.components)

    def row_span(self, cell: Tuple[int, int]) -> Tuple[int, int]:
        """Half-open row range covered by the water body containing ``cell``."""
        label = int(self.components[cell[0], cell[1]])
        if label == 0:
            return cell[0], cell[0] + 1
        rows, _ = self.component_extents[label - 1]
        return rows.start, rows.stop

    def same_water_body(self, a: Tuple[int, int], b: Tuple[int, int]) -> bool:
        labels = self.components
        la = labels[a[0], a[1]]
        return la != 0 and la == labels[b[0], b[1]]

    @property
    def water_fraction(self) -> float:
        if self.water.size == 0:
            return 0.0
        return float(self.water.mean())
