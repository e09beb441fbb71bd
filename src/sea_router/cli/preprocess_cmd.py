"""Rasterise land polygons into packed water grids."""
from __future__ import annotations

from pathlib import Path
from typing import Iterable, List, Optional, Tuple

import fiona
import numpy as np
import typer
from rasterio import features
from rasterio.transform import from_origin
from shapely.geometry import box, shape

from sea_router.core.grid import GridSpec
from sea_router.core.memmaps import save_mask
from sea_router.data.codec import GLOBAL_MAX_LAT, GLOBAL_MIN_LNG, encode_global, encode_regional
from sea_router.data.water_grid import WaterGrid

app = typer.Typer(help="Preprocessing utilities to rasterize land polygons onto water grids")

# name, min_lat, max_lat, min_lng, max_lng
DEFAULT_REGIONS: List[Tuple[str, float, float, float, float]] = [
    ("americas", 20.0, 45.0, -89.0, -53.0),
    ("europe", 35.0, 52.0, -11.0, 17.0),
]


def read_land_shapes(polygons_path: Path) -> list:
    with fiona.open(polygons_path) as src:
        total = len(src)
        typer.echo(f"Loaded {total:,} land features from {polygons_path}")
        return [shape(feat["geometry"]) for feat in src]


def rasterize_land(shapes: Iterable, spec: GridSpec) -> np.ndarray:
    """Burn land polygons into a uint8 mask; a cell is land when its centre is inside."""
    bounds = box(spec.min_lng, spec.min_lat, spec.max_lng, spec.max_lat)
    # pre-filter so regional tiles only test polygons that touch them
    relevant = [(geom, 1) for geom in shapes if geom.intersects(bounds)]
    if not relevant:
        return np.zeros(spec.shape, dtype=np.uint8)
    transform = from_origin(spec.min_lng, spec.max_lat, spec.resolution, spec.resolution)
    return features.rasterize(
        relevant,
        out_shape=spec.shape,
        transform=transform,
        fill=0,
        dtype="uint8",
        all_touched=False,
    )


def _report(grid: WaterGrid) -> None:
    land = int((~grid.water).sum())
    typer.echo(f"  {grid.name}: {grid.spec.cols}x{grid.spec.rows}, land: {land:,}, water: {grid.water.size - land:,}")


def parse_region(value: str) -> Tuple[str, float, float, float, float]:
    try:
        name, min_lat, max_lat, min_lng, max_lng = value.split(":")
        region = (name, float(min_lat), float(max_lat), float(min_lng), float(max_lng))
    except ValueError as exc:
        raise typer.BadParameter(f"expected name:minLat:maxLat:minLng:maxLng, got {value!r}") from exc
    if region[1] >= region[2] or region[3] >= region[4]:
        raise typer.BadParameter(f"empty region bounds in {value!r}")
    return region


@app.command("global")
def build_global(
    land: Path = typer.Option(..., exists=True, help="Land polygons (e.g. ne_50m_land.shp)"),
    resolution: float = typer.Option(0.1, help="Cell size in degrees"),
    out: Path = typer.Option(Path("data/processed/water-grid.bin"), help="Output WGRD file"),
    npy: Optional[Path] = typer.Option(None, help="Also write a .npy land mask with metadata"),
) -> None:
    """Build the global WGRD grid anchored at lat 90 / lng -180."""
    cols = int(round(360 / resolution))
    rows = int(round(180 / resolution))
    spec = GridSpec(resolution=resolution, max_lat=GLOBAL_MAX_LAT, min_lng=GLOBAL_MIN_LNG, rows=rows, cols=cols)
    typer.echo(f"Grid: {cols}x{rows} ({resolution} deg resolution)")

    grid = WaterGrid.from_land_mask(spec, rasterize_land(read_land_shapes(land), spec), name="global")
    _report(grid)

    out.parent.mkdir(parents=True, exist_ok=True)
    payload = encode_global(grid)
    out.write_bytes(payload)
    typer.echo(f"Written to {out} ({len(payload) / 1024:.0f} KB)")
    if npy:
        npy.parent.mkdir(parents=True, exist_ok=True)
        save_mask(npy, grid)
        typer.echo(f"Written to {npy}")


@app.command("regional")
def build_regional(
    land: Path = typer.Option(..., exists=True, help="Land polygons (e.g. ne_50m_land.shp)"),
    resolution: float = typer.Option(0.01, help="Cell size in degrees"),
    region: Optional[List[str]] = typer.Option(
        None, help="name:minLat:maxLat:minLng:maxLng (repeatable); defaults to americas and europe"
    ),
    out: Path = typer.Option(Path("data/processed/water-grid-regional.bin"), help="Output regional pack"),
) -> None:
    """Build high-resolution regional grids packed behind a JSON header."""
    regions = [parse_region(r) for r in region] if region else DEFAULT_REGIONS
    shapes = read_land_shapes(land)

    grids = []
    for name, min_lat, max_lat, min_lng, max_lng in regions:
        spec = GridSpec(
            resolution=resolution,
            max_lat=max_lat,
            min_lng=min_lng,
            rows=int(round((max_lat - min_lat) / resolution)),
            cols=int(round((max_lng - min_lng) / resolution)),
        )
        grid = WaterGrid.from_land_mask(spec, rasterize_land(shapes, spec), name=name)
        _report(grid)
        grids.append(grid)

    out.parent.mkdir(parents=True, exist_ok=True)
    payload = encode_regional(grids)
    out.write_bytes(payload)
    typer.echo(f"Written to {out} ({len(payload) / 1024:.0f} KB)")
