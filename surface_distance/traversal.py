"""Grid voxel traversal (Amanatides & Woo, "A Fast Voxel Traversal Algorithm
for Ray Tracing", http://www.cse.yorku.ca/~amana/research/grid.pdf).

The grid is the implicit unit grid spanning ``[0, grid_width) x [0, grid_height)``.
Segment endpoints are integer lattice points, i.e. voxel corners.
"""

from __future__ import annotations

import math
from typing import Sequence

import numpy as np

from surface_distance.geometry import Ray, VoxelCoord, intersect_ray_and_line, step_sign, to_voxel_coord


def _exit_param(
    ray: Ray,
    lower: tuple[np.ndarray, np.ndarray],
    upper: tuple[np.ndarray, np.ndarray],
) -> float:
    """Ray parameter where the ray leaves the slab between two parallel voxel edges.

    Returns ``inf`` when the ray never crosses them (runs parallel to the axis).
    """
    lo = intersect_ray_and_line(ray, *lower)
    hi = intersect_ray_and_line(ray, *upper)
    if lo.intersecting and hi.intersecting:
        return max(lo.ray, hi.ray)
    return math.inf


def _delta(component: float) -> float:
    if component == 0.0:
        return math.inf
    return abs(1.0 / component)


def traverse_voxels(
    begin: Sequence[int],
    end: Sequence[int],
    grid_width: int,
    grid_height: int,
) -> list[VoxelCoord]:
    """Return the voxels crossed by the segment ``begin -> end``, in order.

    The first voxel is the one entered from ``begin``, the last the one
    ``end`` is reached from. Voxels outside the grid are skipped. A
    zero-length segment crosses no voxel.
    """
    bx, by = int(begin[0]), int(begin[1])
    ex, ey = int(end[0]), int(end[1])
    if (bx, by) == (ex, ey):
        return []

    ray = Ray.through((bx, by), (ex, ey), normalize=True)
    direction = ray.direction

    voxel_x, voxel_y = to_voxel_coord((bx, by), direction)
    step_x = step_sign(direction[0])
    step_y = step_sign(direction[1])

    corner = np.array([voxel_x, voxel_y], dtype=np.float64)
    t_max_x = _exit_param(
        ray,
        (corner, corner + (0.0, 1.0)),
        (corner + (1.0, 0.0), corner + (1.0, 1.0)),
    )
    t_max_y = _exit_param(
        ray,
        (corner, corner + (1.0, 0.0)),
        (corner + (0.0, 1.0), corner + (1.0, 1.0)),
    )
    t_delta_x = _delta(direction[0])
    t_delta_y = _delta(direction[1])

    # Computed from the far end rather than by stepping, so floating point drift
    # in t_max cannot make the loop miss it.
    end_voxel = to_voxel_coord((ex, ey), -direction)

    voxels: list[VoxelCoord] = []
    while (
        0 <= voxel_x < grid_width
        and 0 <= voxel_y < grid_height
        and (voxel_x, voxel_y) != end_voxel
    ):
        voxels.append((voxel_x, voxel_y))
        if t_max_x < t_max_y:
            t_max_x += t_delta_x
            voxel_x += step_x
        else:
            t_max_y += t_delta_y
            voxel_y += step_y

    if (voxel_x, voxel_y) == end_voxel and 0 <= voxel_x < grid_width and 0 <= voxel_y < grid_height:
        voxels.append(end_voxel)
    return voxels
