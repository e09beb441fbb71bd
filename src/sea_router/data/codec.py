"""Binary codecs for packed water/land masks.

Two layouts are supported, both storing one bit per cell (row-major,
most significant bit first, 1 = land):

* ``WGRD`` global grid: a 12 byte header (magic, big-endian uint16 cols,
  uint16 rows, float32 resolution) followed by the bit array. The grid is
  anchored at lat 90 / lng -180.
* Regional pack: a NUL-terminated JSON header
  ``{"resolution": r, "regions": [{name, minLat, maxLat, minLng, maxLng,
  cols, rows, offset, bytes}]}`` followed by the concatenated bit arrays.
"""
from __future__ import annotations

import json
import struct
from typing import List, Sequence, Tuple

import numpy as np

from sea_router.core.grid import GridSpec
from sea_router.data.water_grid import GridLoadError, WaterGrid


GLOBAL_MAGIC = b"WGRD"
GLOBAL_HEADER = struct.Struct(">4sHHf")
GLOBAL_MAX_LAT = 90.0
GLOBAL_MIN_LNG = -180.0

_REGION_KEYS = ("name", "minLat", "maxLat", "minLng", "maxLng", "cols", "rows", "offset")


def _whole_number(value) -> int:
    if isinstance(value, bool) or not float(value).is_integer():
        raise ValueError(f"expected a whole number, got {value!r}")
    return int(value)


def _float32_clean(value: float) -> float:
    # float32 keeps ~7 significant digits; drop the binary noise (0.1 -> 0.1, not 0.100000001)
    return float(f"{value:.7g}")


def _unpack_land(payload: bytes | memoryview, offset: int, rows: int, cols: int, what: str) -> np.ndarray:
    n_bits = rows * cols
    n_bytes = (n_bits + 7) // 8
    if offset < 0 or offset + n_bytes > len(payload):
        raise GridLoadError(
            f"{what}: expected {n_bytes} bytes of cell data at offset {offset}, "
            f"only {max(0, len(payload) - offset)} available"
        )
    packed = np.frombuffer(payload, dtype=np.uint8, count=n_bytes, offset=offset)
    bits = np.unpackbits(packed, count=n_bits, bitorder="big")
    return bits.reshape(rows, cols).astype(bool)


def _pack_land(grid: WaterGrid) -> bytes:
    land = ~grid.water
    return np.packbits(land.ravel(), bitorder="big").tobytes()


def decode_global(data: bytes) -> WaterGrid:
    """Parse a ``WGRD`` global mask."""
    if len(data) < GLOBAL_HEADER.size:
        raise GridLoadError(f"global grid too short ({len(data)} bytes)")
    magic, cols, rows, resolution = GLOBAL_HEADER.unpack_from(data, 0)
    if magic != GLOBAL_MAGIC:
        raise GridLoadError(f"invalid global water grid magic {magic!r}")
    if cols == 0 or rows == 0 or not resolution > 0:
        raise GridLoadError(f"invalid global grid dimensions {cols}x{rows} @ {resolution}")
    spec = GridSpec(
        resolution=_float32_clean(resolution),
        max_lat=GLOBAL_MAX_LAT,
        min_lng=GLOBAL_MIN_LNG,
        rows=rows,
        cols=cols,
    )
    payload = memoryview(data)[GLOBAL_HEADER.size:]
    land = _unpack_land(payload, 0, rows, cols, "global grid")
    return WaterGrid.from_land_mask(spec, land, name="global")


def encode_global(grid: WaterGrid) -> bytes:
    spec = grid.spec
    if spec.max_lat != GLOBAL_MAX_LAT or spec.min_lng != GLOBAL_MIN_LNG:
        raise ValueError("WGRD grids must be anchored at lat 90 / lng -180")
    if spec.cols > 0xFFFF or spec.rows > 0xFFFF:
        raise ValueError(f"grid {spec.cols}x{spec.rows} exceeds uint16 header fields")
    header = GLOBAL_HEADER.pack(GLOBAL_MAGIC, spec.cols, spec.rows, spec.resolution)
    return header + _pack_land(grid)


def decode_regional(data: bytes) -> List[WaterGrid]:
    """Parse a regional pack into one WaterGrid per region."""
    nul = data.find(b"\0")
    if nul < 0:
        raise GridLoadError("regional grid header is not NUL-terminated")
    try:
        header = json.loads(data[:nul].decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise GridLoadError(f"regional grid header is not valid JSON: {exc}") from exc

    resolution = header.get("resolution") if isinstance(header, dict) else None
    regions = header.get("regions") if isinstance(header, dict) else None
    if isinstance(resolution, bool) or not isinstance(resolution, (int, float)) or resolution <= 0:
        raise GridLoadError("regional grid header is missing a positive 'resolution'")
    if not isinstance(regions, list):
        raise GridLoadError("regional grid header is missing 'regions'")

    payload = memoryview(data)[nul + 1:]
    grids: List[WaterGrid] = []
    for index, region in enumerate(regions):
        if not isinstance(region, dict):
            raise GridLoadError(f"regional grid entry {index} is not an object")
        missing = [key for key in _REGION_KEYS if key not in region]
        if missing:
            raise GridLoadError(f"regional grid entry missing {', '.join(missing)}")
        name = str(region["name"])
        try:
            rows = _whole_number(region["rows"])
            cols = _whole_number(region["cols"])
            offset = _whole_number(region["offset"])
            spec = GridSpec(
                resolution=float(resolution),
                max_lat=float(region["maxLat"]),
                min_lng=float(region["minLng"]),
                rows=rows,
                cols=cols,
            )
        except (TypeError, ValueError) as exc:
            raise GridLoadError(f"region '{name}' has malformed metadata: {exc}") from exc
        if rows <= 0 or cols <= 0:
            raise GridLoadError(f"region '{name}' has invalid size {cols}x{rows}")
        land = _unpack_land(payload, offset, rows, cols, f"region '{name}'")
        grids.append(WaterGrid.from_land_mask(spec, land, name=name))
    return grids


def encode_regional(grids: Sequence[WaterGrid]) -> bytes:
    """Pack regional layers; all must share one resolution."""
    resolutions = {grid.resolution for grid in grids}
    if len(resolutions) > 1:
        raise ValueError(f"regional grids must share one resolution, got {sorted(resolutions)}")
    resolution = resolutions.pop() if resolutions else 0.0

    meta = []
    buffers = []
    offset = 0
    for grid in grids:
        packed = _pack_land(grid)
        spec = grid.spec
        meta.append({
            "name": grid.name,
            "minLat": spec.min_lat,
            "maxLat": spec.max_lat,
            "minLng": spec.min_lng,
            "maxLng": spec.max_lng,
            "cols": spec.cols,
            "rows": spec.rows,
            "offset": offset,
            "bytes": len(packed),
        })
        buffers.append(packed)
        offset += len(packed)

    header = json.dumps({"resolution": resolution, "regions": meta}).encode("utf-8") + b"\0"
    return header + b"".join(buffers)


def decode(data: bytes) -> Tuple[List[WaterGrid], str]:
    """Sniff the layout and decode; returns the layers and the layout name."""
    if data[:4] == GLOBAL_MAGIC:
        return [decode_global(data)], "global"
    if data[:1] == b"{":
        return decode_regional(data), "regional"
    raise GridLoadError("unrecognised water grid format")
