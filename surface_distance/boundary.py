"""Crossings between a path segment and one voxel's boundary.

A voxel is split into two triangles by its diagonal from the bottom-right to the
top-left corner, matching how heights are interpolated inside the cell. The
boundary loop therefore has five edges: the four sides and that diagonal.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence, Union

import numpy as np

from surface_distance.geometry import IntersectionType, Ray, VoxelCoord, intersect_ray_and_line


@dataclass(frozen=True, slots=True)
class EdgeCrossing:
    """The path crosses edge ``start -> end`` at ``edge_param`` (0..1 along the edge).

    ``segment_param`` is the position along the whole path (0 at begin, 1 at end).
    """

    start: VoxelCoord
    end: VoxelCoord
    edge_param: float
    segment_param: float


@dataclass(frozen=True, slots=True)
class ColinearOverlap:
    """The path runs along edge ``start -> end`` over ``[t0, t1]`` of the edge."""

    start: VoxelCoord
    end: VoxelCoord
    t0: float
    t1: float


BoundaryRecord = Union[EdgeCrossing, ColinearOverlap]


def voxel_boundary_loop(voxel: VoxelCoord) -> list[VoxelCoord]:
    """Corner loop of a voxel: bottom, left, top, right sides, then the diagonal."""
    x, y = int(voxel[0]), int(voxel[1])
    return [
        (x + 1, y),
        (x, y),
        (x, y + 1),
        (x + 1, y + 1),
        (x + 1, y),
        (x, y + 1),
    ]


def _colinear_overlap(
    begin: np.ndarray,
    end: np.ndarray,
    edge_start: VoxelCoord,
    edge_end: VoxelCoord,
) -> tuple[float, float] | None:
    a = np.asarray(edge_start, dtype=np.float64)
    edge = np.asarray(edge_end, dtype=np.float64) - a
    edge_len2 = float(np.dot(edge, edge))
    if edge_len2 == 0.0:
        return None

    tline0 = float(np.dot(begin - a, edge)) / edge_len2
    tline1 = tline0 + float(np.dot(end - begin, edge)) / edge_len2
    # Path and edge may point in opposite directions.
    lo, hi = min(tline0, tline1), max(tline0, tline1)
    if hi >= 0.0 and lo <= 1.0:
        return max(lo, 0.0), min(hi, 1.0)
    return None


def intersect_segment_with_cell_boundary(
    begin: Sequence[float],
    end: Sequence[float],
    boundary_loop: Sequence[VoxelCoord],
) -> list[BoundaryRecord]:
    """Classify the path ``begin -> end`` against each consecutive edge of ``boundary_loop``.

    Returns one ``EdgeCrossing`` per edge the path's line crosses within the
    edge, and one ``ColinearOverlap`` per edge the path runs along. Parallel
    edges and crossings beyond the edge ends produce nothing.
    """
    ray = Ray.through(begin, end)
    records: list[BoundaryRecord] = []
    for edge_start, edge_end in zip(boundary_loop[:-1], boundary_loop[1:]):
        hit = intersect_ray_and_line(ray, edge_start, edge_end)
        if hit.type is IntersectionType.COLINEAR:
            overlap = _colinear_overlap(ray.origin, ray.origin + ray.direction, edge_start, edge_end)
            if overlap is not None:
                records.append(ColinearOverlap(tuple(edge_start), tuple(edge_end), *overlap))
        elif hit.type is IntersectionType.INTERSECTING and 0.0 <= hit.line <= 1.0:
            records.append(EdgeCrossing(tuple(edge_start), tuple(edge_end), hit.line, hit.ray))
    return records
