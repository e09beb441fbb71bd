"""Lightweight geodesy helpers."""
from __future__ import annotations

import math
from typing import Sequence, Tuple


EARTH_RADIUS_M = 6371008.8
NM_PER_METER = 1 / 1852
SQRT2 = math.sqrt(2.0)


def haversine_nm(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Great-circle distance in nautical miles."""
    lat1_r, lat2_r = math.radians(lat1), math.radians(lat2)
    dlat = lat2_r - lat1_r
    dlng = math.radians(shortest_dlng(lng1, lng2))
    a = math.sin(dlat / 2) ** 2 + math.cos(lat1_r) * math.cos(lat2_r) * math.sin(dlng / 2) ** 2
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(max(0.0, 1 - a)))
    return EARTH_RADIUS_M * c * NM_PER_METER


def shortest_dlng(lng1: float, lng2: float) -> float:
    """Return the shortest longitudinal delta from lng1 to lng2 in degrees."""
    return (lng2 - lng1 + 180) % 360 - 180


def path_length_nm(path: Sequence[Tuple[float, float]]) -> float:
    """Sum of great-circle leg lengths along a (lat, lng) polyline."""
    total = 0.0
    for (lat1, lng1), (lat2, lng2) in zip(path, path[1:]):
        total += haversine_nm(lat1, lng1, lat2, lng2)
    return total


def lng_scale(lat: float) -> float:
    """East-west shrink factor of a degree of longitude at ``lat``."""
    return max(0.0, math.cos(math.radians(lat)))


def octile_distance(d_row: int, d_col: int) -> float:
    dr, dc = abs(d_row), abs(d_col)
    return max(dr, dc) + (SQRT2 - 1) * min(dr, dc)
