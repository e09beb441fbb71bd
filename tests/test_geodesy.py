from __future__ import annotations

import math

import pytest

from sea_router.core.geodesy import (
    haversine_nm,
    lng_scale,
    octile_distance,
    path_length_nm,
    shortest_dlng,
)


def test_one_degree_of_latitude_is_sixty_nm() -> None:
    assert haversine_nm(0.0, 0.0, 1.0, 0.0) == pytest.approx(60.0, rel=0.01)


def test_haversine_crosses_the_antimeridian() -> None:
    assert haversine_nm(0.0, 179.5, 0.0, -179.5) == pytest.approx(haversine_nm(0.0, 0.0, 0.0, 1.0))


def test_shortest_dlng() -> None:
    assert shortest_dlng(170.0, -170.0) == pytest.approx(20.0)
    assert shortest_dlng(-170.0, 170.0) == pytest.approx(-20.0)


def test_path_length_sums_legs() -> None:
    path = [(0.0, 0.0), (1.0, 0.0), (1.0, 1.0)]
    expected = haversine_nm(0.0, 0.0, 1.0, 0.0) + haversine_nm(1.0, 0.0, 1.0, 1.0)
    assert path_length_nm(path) == pytest.approx(expected)
    assert path_length_nm(path[:1]) == 0.0


def test_lng_scale() -> None:
    assert lng_scale(0.0) == pytest.approx(1.0)
    assert lng_scale(60.0) == pytest.approx(0.5)
    assert lng_scale(90.0) == pytest.approx(0.0, abs=1e-12)


def test_octile_distance() -> None:
    assert octile_distance(0, 5) == 5
    assert octile_distance(-3, 3) == pytest.approx(3 * math.sqrt(2))
    assert octile_distance(2, -5) == pytest.approx(3 + 2 * math.sqrt(2))
