"""Surface distance between two points of a height field.

This package measures the length of a straight path as it follows the terrain
of a discretized height field, and provides a CLI to:
- compute the surface distance along one path
- compare the same path over "pre" and "post" height fields
- export profiles as CSV and plots

See README.md for usage.
"""

from __future__ import annotations

__all__ = [
    "__version__",
    "compute_surface_distance",
    "intersect_ray_and_line",
    "traverse_voxels",
]

__version__ = "0.1.0"

from surface_distance.distance import compute_surface_distance  # noqa: E402
from surface_distance.geometry import intersect_ray_and_line  # noqa: E402
from surface_distance.traversal import traverse_voxels  # noqa: E402
