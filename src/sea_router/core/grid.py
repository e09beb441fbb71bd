"""Grid utilities for converting between geographic coordinates and array indices."""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import NamedTuple, Optional, Tuple


class GridCell(NamedTuple):
    """Integer (row, col) index into a grid layer."""

    row: int
    col: int


@dataclass(frozen=True)
class GridSpec:
    """Definition of a regular lat/lng grid layer.

    Attributes:
        resolution: Cell size in degrees, identical on both axes.
        max_lat: Latitude of the top (northern) edge.
        min_lng: Longitude of the left (western) edge.
        rows: Number of rows; row 0 touches ``max_lat``.
        cols: Number of columns; col 0 touches ``min_lng``.
    """

    resolution: float
    max_lat: float
    min_lng: float
    rows: int
    cols: int

    @property
    def min_lat(self) -> float:
        return self.max_lat - self.resolution * self.rows

    @property
    def max_lng(self) -> float:
        return self.min_lng + self.resolution * self.cols

    @property
    def shape(self) -> Tuple[int, int]:
        return self.rows, self.cols

    def contains(self, lat: float, lng: float) -> bool:
        return self.min_lat <= lat <= self.max_lat and self.min_lng <= lng <= self.max_lng

    def raw_indices(self, lat: float, lng: float) -> Tuple[int, int]:
        """Unchecked (row, col) for a point; may fall outside the grid."""
        row = int(math.floor((self.max_lat - lat) / self.resolution))
        col = int(math.floor((lng - self.min_lng) / self.resolution))
        return row, col

    def project(self, lat: float, lng: float) -> Optional[GridCell]:
        """Convert lat/lng to grid indices, or None when outside the layer."""
        row, col = self.raw_indices(lat, lng)
        if not self.valid_index(row, col):
            return None
        return GridCell(row, col)

    def unproject(self, row: int, col: int) -> Tuple[float, float]:
        """Geographic centre (lat, lng) of a cell."""
        lat = self.max_lat - (row + 0.5) * self.resolution
        lng = self.min_lng + (col + 0.5) * self.resolution
        return lat, lng

    def clamp(self, lat: float, lng: float) -> GridCell:
        """Project a point, pulling out-of-range indices onto the nearest edge cell."""
        row, col = self.raw_indices(lat, lng)
        return GridCell(min(max(row, 0), self.rows - 1), min(max(col, 0), self.cols - 1))

    def valid_index(self, row: int, col: int) -> bool:
        return 0 <= row < self.rows and 0 <= col < self.cols
