"""Helpers for reading and writing memmapped land masks."""
from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import numpy as np

from sea_router.core.grid import GridSpec
from sea_router.data.water_grid import GridLoadError, WaterGrid


_META_KEYS = ("shape", "dtype", "max_lat", "min_lng", "resolution")


def meta_path_for(path: str | Path) -> Path:
    return Path(path).with_suffix(".meta.json")


class MemMapLoader:
    """Lazy loader for a memmapped mask described by a ``.meta.json`` sidecar."""

    def __init__(self, path: str | Path, mode: str = "r"):
        self.path = Path(path)
        self.mode = mode
        self._arr: np.memmap | None = None

        meta_path = meta_path_for(self.path)
        try:
            with open(meta_path, "r") as f:
                self.meta: dict[str, Any] = json.load(f)
        except FileNotFoundError as exc:
            raise GridLoadError(f"missing mask metadata {meta_path}") from exc
        except json.JSONDecodeError as exc:
            raise GridLoadError(f"mask metadata {meta_path} is not valid JSON: {exc}") from exc

        if not isinstance(self.meta, dict):
            raise GridLoadError(f"mask metadata {meta_path} is not a JSON object")
        missing = [key for key in _META_KEYS if key not in self.meta]
        if missing:
            raise GridLoadError(f"mask metadata {meta_path} missing {', '.join(missing)}")
        try:
            self.shape = tuple(int(v) for v in self.meta["shape"])
            self.dtype = np.dtype(self.meta["dtype"])
            self._bounds = (
                float(self.meta["resolution"]),
                float(self.meta["max_lat"]),
                float(self.meta["min_lng"]),
            )
        except (TypeError, ValueError) as exc:
            raise GridLoadError(f"mask metadata {meta_path} is malformed: {exc}") from exc
        if len(self.shape) != 2 or min(self.shape) <= 0:
            raise GridLoadError(f"mask metadata {meta_path} has shape {self.shape}, expected (rows, cols)")

    @property
    def array(self) -> np.memmap:
        if self._arr is None:
            expected = int(np.prod(self.shape)) * self.dtype.itemsize
            actual = self.path.stat().st_size if self.path.exists() else -1
            if actual != expected:
                raise GridLoadError(
                    f"mask {self.path} holds {actual} bytes, metadata implies {expected}"
                )
            self._arr = np.memmap(self.path, mode=self.mode, dtype=self.dtype, shape=self.shape)
        return self._arr

    @property
    def spec(self) -> GridSpec:
        rows, cols = self.shape
        resolution, max_lat, min_lng = self._bounds
        return GridSpec(
            resolution=resolution,
            max_lat=max_lat,
            min_lng=min_lng,
            rows=rows,
            cols=cols,
        )


def save_mask(path: str | Path, grid: WaterGrid) -> None:
    """Save a grid as a uint8 land memmap with metadata for shape and bounds."""
    path = Path(path)
    land = (~grid.water).astype(np.uint8)

    arr = np.memmap(path, mode="w+", dtype=land.dtype, shape=land.shape)
    arr[:] = land
    arr.flush()
    del arr

    spec = grid.spec
    meta = {
        "shape": list(land.shape),
        "dtype": str(land.dtype),
        "max_lat": spec.max_lat,
        "min_lng": spec.min_lng,
        "resolution": spec.resolution,
        "name": grid.name,
    }
    with open(meta_path_for(path), "w") as f:
        json.dump(meta, f, indent=2)


def load_mask(path: str | Path) -> WaterGrid:
    loader = MemMapLoader(path)
    name = str(loader.meta.get("name", Path(path).stem))
    return WaterGrid.from_land_mask(loader.spec, loader.array, name=name)
