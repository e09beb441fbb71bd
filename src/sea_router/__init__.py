"""Sea routing over a precomputed water/land grid: snapping, A* and preprocessing helpers."""

__all__ = [
    "core",
    "data",
    "routing",
    "api",
    "cli",
]
