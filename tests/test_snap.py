from __future__ import annotations

from sea_router.routing.snap import ring_offsets, snap_to_water

from conftest import center, grid_from_text


def test_ring_offsets_cover_exactly_one_chebyshev_ring() -> None:
    assert list(ring_offsets(0)) == [(0, 0)]
    for radius in (1, 2, 5):
        offsets = list(ring_offsets(radius))
        assert len(offsets) == 8 * radius
        assert len(set(offsets)) == len(offsets)
        assert all(max(abs(dr), abs(dc)) == radius for dr, dc in offsets)


def test_point_on_water_snaps_to_its_own_cell_centre(open_grid) -> None:
    result = snap_to_water(open_grid, 5.2, 3.7)

    assert result.snapped
    assert result.radius == 0
    assert result.cell == (4, 3)
    assert result.coordinate == (5.5, 3.5)


def test_land_cell_ringed_by_land_snaps_at_radius_two() -> None:
    grid = grid_from_text([
        "..........",
        "..........",
        "..........",
        "..........",
        "....###...",
        "....###...",
        "....###...",
        "..........",
        "..........",
        "..........",
    ])
    lat, lng = center(grid, 5, 5)

    result = snap_to_water(grid, lat, lng)

    assert result.snapped
    assert result.radius == 2
    assert max(abs(result.cell.row - 5), abs(result.cell.col - 5)) == 2
    assert grid.is_water(*result.coordinate)


def test_nearest_cell_within_ring_wins_over_scan_order() -> None:
    # only (4, 5) and (6, 5) are water; the point sits in the south part of (5, 5)
    rows = ["##########"] * 10
    rows[4] = "#####.####"
    rows[6] = "#####.####"
    grid = grid_from_text(rows)

    result = snap_to_water(grid, 4.1, 5.5)

    assert result.cell == (6, 5)
    assert result.coordinate == center(grid, 6, 5)


def test_no_water_within_radius_returns_input() -> None:
    rows = ["##########"] * 10
    rows[0] = ".#########"
    grid = grid_from_text(rows)

    result = snap_to_water(grid, 0.5, 9.5, max_radius=3)

    assert not result.snapped
    assert result.coordinate == (0.5, 9.5)
    assert result.cell is None

    found = snap_to_water(grid, 0.5, 9.5, max_radius=9)
    assert found.snapped and found.cell == (0, 0)


def test_point_outside_grid_starts_from_clamped_cell(open_grid) -> None:
    result = snap_to_water(open_grid, 25.0, -30.0)

    assert result.snapped
    assert result.cell == (0, 0)
    assert result.coordinate == (9.5, 0.5)


def test_snapped_result_is_water_for_every_cell() -> None:
    grid = grid_from_text([
        "####......",
        "####......",
        "####......",
        "##########",
        "##########",
        "..........",
    ], max_lat=6.0)
    for row in range(grid.spec.rows):
        for col in range(grid.spec.cols):
            result = snap_to_water(grid, *center(grid, row, col), max_radius=5)
            assert result.snapped
            assert grid.is_water(*result.coordinate)
