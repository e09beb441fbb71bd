"""Shared synthetic grids for sea router tests.

Grids are drawn as text: ``.`` is water, ``#`` is land. Unless stated
otherwise a grid uses 1 degree cells with its top-left corner at lat 10,
lng 0, so cell (row, col) has its centre at (9.5 - row, col + 0.5).
"""
from __future__ import annotations

from pathlib import Path
from typing import Sequence

import fiona
import numpy as np
import pytest
from shapely.geometry import mapping

from sea_router.data.store import WaterGridStore
from sea_router.data.water_grid import WaterGrid


def grid_from_text(
    lines: Sequence[str],
    max_lat: float = 10.0,
    min_lng: float = 0.0,
    resolution: float = 1.0,
    name: str = "global",
) -> WaterGrid:
    water = np.array([[ch == "." for ch in line] for line in lines], dtype=bool)
    return WaterGrid.from_array(water, max_lat=max_lat, min_lng=min_lng, resolution=resolution, name=name)


def center(grid: WaterGrid, row: int, col: int) -> tuple[float, float]:
    return grid.unproject((row, col))


def write_land_shapefile(path: Path, geoms) -> None:
    schema = {"geometry": "Polygon", "properties": {"id": "int"}}
    with fiona.open(
        path,
        mode="w",
        driver="ESRI Shapefile",
        crs="EPSG:4326",
        schema=schema,
    ) as dst:
        for i, geom in enumerate(geoms):
            dst.write({"geometry": mapping(geom), "properties": {"id": i}})


# Column 5 is land except row 0: a single strait along the top edge.
STRAIT = [".........."] + [".....#...."] * 9

# Column 5 is land on every row: two disconnected basins.
SPLIT = [".....#...."] * 10

OPEN = [".........."] * 10


@pytest.fixture
def strait_grid() -> WaterGrid:
    return grid_from_text(STRAIT)


@pytest.fixture
def split_grid() -> WaterGrid:
    return grid_from_text(SPLIT)


@pytest.fixture
def open_grid() -> WaterGrid:
    return grid_from_text(OPEN)


@pytest.fixture
def strait_store(strait_grid: WaterGrid) -> WaterGridStore:
    return WaterGridStore.from_grids(strait_grid)


@pytest.fixture
def split_store(split_grid: WaterGrid) -> WaterGridStore:
    return WaterGridStore.from_grids(split_grid)
