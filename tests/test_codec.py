from __future__ import annotations

import json
import struct

import numpy as np
import pytest

from sea_router.data.codec import (
    decode,
    decode_global,
    decode_regional,
    encode_global,
    encode_regional,
)
from sea_router.data.water_grid import GridLoadError, WaterGrid

from conftest import grid_from_text


def _wgrd(cols: int, rows: int, resolution: float, payload: bytes) -> bytes:
    return struct.pack(">4sHHf", b"WGRD", cols, rows, resolution) + payload


def test_decode_global_reads_msb_first_land_bits() -> None:
    # 8x2 grid: cell (0, 0) and cell (1, 7) are land
    grid = decode_global(_wgrd(8, 2, 0.1, bytes([0b10000000, 0b00000001])))

    assert grid.spec.shape == (2, 8)
    assert grid.resolution == 0.1
    assert grid.spec.max_lat == 90.0
    assert grid.spec.min_lng == -180.0
    assert not grid.water[0, 0]
    assert grid.water[0, 1]
    assert not grid.water[1, 7]
    assert int(grid.water.sum()) == 14


def test_decode_global_rejects_bad_magic() -> None:
    data = struct.pack(">4sHHf", b"NOPE", 8, 2, 0.1) + bytes(2)
    with pytest.raises(GridLoadError, match="magic"):
        decode_global(data)


def test_decode_global_rejects_truncated_payload() -> None:
    with pytest.raises(GridLoadError, match="expected 3 bytes"):
        decode_global(_wgrd(8, 3, 1.0, bytes(2)))


def test_decode_global_rejects_short_header() -> None:
    with pytest.raises(GridLoadError):
        decode_global(b"WGRD")


def test_global_grid_survives_encoding() -> None:
    water = np.ones((6, 12), dtype=bool)
    water[2:4, 3:9] = False
    grid = WaterGrid.from_array(water, max_lat=90.0, min_lng=-180.0, resolution=30.0)

    decoded = decode_global(encode_global(grid))

    assert decoded.spec == grid.spec
    assert np.array_equal(decoded.water, water)


def test_encode_global_requires_world_anchor() -> None:
    grid = grid_from_text(["..", ".."])
    with pytest.raises(ValueError):
        encode_global(grid)


def _regional(header: dict, payload: bytes) -> bytes:
    return json.dumps(header).encode("utf-8") + b"\0" + payload


def test_decode_regional_reads_each_region_at_its_offset() -> None:
    header = {
        "resolution": 0.5,
        "regions": [
            {"name": "north", "minLat": 9.0, "maxLat": 10.0, "minLng": 0.0, "maxLng": 4.0,
             "cols": 8, "rows": 2, "offset": 0, "bytes": 2},
            {"name": "south", "minLat": 0.0, "maxLat": 1.0, "minLng": 0.0, "maxLng": 1.0,
             "cols": 2, "rows": 2, "offset": 2, "bytes": 1},
        ],
    }
    payload = bytes([0xFF, 0x00, 0b01000000])
    north, south = decode_regional(_regional(header, payload))

    assert north.name == "north"
    assert north.spec.max_lat == 10.0 and north.spec.min_lng == 0.0
    assert not north.water[0].any()
    assert north.water[1].all()
    assert south.name == "south"
    assert south.water[0, 0] and not south.water[0, 1]
    assert south.water[1].all()


def test_decode_regional_requires_metadata() -> None:
    header = {"resolution": 0.5, "regions": [{"name": "x", "cols": 2, "rows": 2, "offset": 0}]}
    with pytest.raises(GridLoadError, match="missing"):
        decode_regional(_regional(header, bytes(1)))


def test_decode_regional_detects_dimension_mismatch() -> None:
    header = {
        "resolution": 1.0,
        "regions": [{"name": "x", "minLat": 0, "maxLat": 4, "minLng": 0, "maxLng": 4,
                     "cols": 4, "rows": 4, "offset": 0}],
    }
    with pytest.raises(GridLoadError, match="expected 2 bytes"):
        decode_regional(_regional(header, bytes(1)))


def test_decode_regional_rejects_unterminated_or_bad_header() -> None:
    with pytest.raises(GridLoadError, match="NUL"):
        decode_regional(b'{"resolution": 1}')
    with pytest.raises(GridLoadError, match="JSON"):
        decode_regional(b"{not json\0")


def test_encode_regional_packs_sequential_offsets() -> None:
    a = grid_from_text([".#", "#."], max_lat=2.0, min_lng=0.0, name="a")
    b = grid_from_text(["...", "###", "..."], max_lat=20.0, min_lng=10.0, name="b")

    layers, layout = decode(encode_regional([a, b]))

    assert layout == "regional"
    assert [g.name for g in layers] == ["a", "b"]
    assert np.array_equal(layers[0].water, a.water)
    assert np.array_equal(layers[1].water, b.water)
    assert layers[1].spec == b.spec


def test_decode_sniffs_unknown_format() -> None:
    with pytest.raises(GridLoadError, match="unrecognised"):
        decode(b"\x89PNG....")


def _one_region(**overrides) -> bytes:
    region = {"name": "x", "minLat": 0, "maxLat": 2, "minLng": 0, "maxLng": 2,
              "cols": 2, "rows": 2, "offset": 0}
    region.update(overrides)
    return _regional({"resolution": 1.0, "regions": [region]}, bytes(1))


@pytest.mark.parametrize(
    "overrides",
    [
        {"maxLat": "ten"},
        {"minLng": None},
        {"rows": 2.5},
        {"cols": "two"},
        {"offset": [0]},
        {"rows": True},
    ],
)
def test_decode_regional_rejects_mistyped_region_fields(overrides) -> None:
    with pytest.raises(GridLoadError, match="region 'x'"):
        decode_regional(_one_region(**overrides))


def test_decode_regional_rejects_non_object_entries() -> None:
    data = _regional({"resolution": 1.0, "regions": ["x", 3]}, bytes(1))
    with pytest.raises(GridLoadError, match="not an object"):
        decode_regional(data)


def test_decode_regional_rejects_non_numeric_resolution() -> None:
    data = _regional({"resolution": "fine", "regions": []}, b"")
    with pytest.raises(GridLoadError, match="resolution"):
        decode_regional(data)
