"""Surface (terrain-following) distance along a straight path over a height field.

The height field holds one elevation sample per lattice point, row-major
(index ``y * image_width + x``). Sample ``(x, y)`` sits at planar position
``(x, y) * pixel_distance`` with elevation ``sample * pixel_height``. Each grid
cell is split into two triangles along its bottom-right/top-left diagonal and
heights are linear on every cell edge.

Approach:
- traverse the cells crossed by the path on the ``(image_width-1) x (image_height-1)`` grid
- in each cell, find where the path crosses the four sides and the diagonal
- lift every crossing to 3D by linear interpolation along the crossed edge
- sum the 3D lengths between consecutive crossings (ordered along the path)

Precision degrades slowly with grid size since every cell adds its own rounding
error; results on grids much larger than 512x512 should be treated with care.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Callable, Iterator, Sequence

import numpy as np

from surface_distance.boundary import (
    ColinearOverlap,
    EdgeCrossing,
    intersect_segment_with_cell_boundary,
    voxel_boundary_loop,
)
from surface_distance.geometry import VoxelCoord
from surface_distance.traversal import traverse_voxels

ProgressFn = Callable[[str, int, int], None]


@dataclass(frozen=True, slots=True)
class VoxelContribution:
    voxel: VoxelCoord
    distance: float
    colinear: bool
    # (segment_param, xyz) pairs ordered along the path.
    crossings: list[tuple[float, np.ndarray]] = field(default_factory=list)


@dataclass(frozen=True, slots=True)
class DistanceComparison:
    pre: float
    post: float
    straight: float

    @property
    def delta(self) -> float:
        return self.post - self.pre


def _as_lattice_point(p: Sequence[int], name: str) -> tuple[int, int]:
    if len(p) != 2:
        raise ValueError(f"{name} must be an (x, y) pair, got {p!r}")
    out = []
    for v in p:
        if isinstance(v, (bool, np.bool_)) or not float(v).is_integer():
            raise ValueError(f"{name} must hold integer grid coordinates, got {p!r}")
        out.append(int(v))
    return out[0], out[1]


def validate_surface_inputs(
    begin: Sequence[int],
    end: Sequence[int],
    heights: Sequence[float] | np.ndarray,
    image_width: int,
    image_height: int,
    pixel_distance: float,
    pixel_height: float,
) -> tuple[tuple[int, int], tuple[int, int], np.ndarray]:
    """Check the preconditions of ``compute_surface_distance``.

    Returns the normalized endpoints and the flat, row-major height array.
    Raises ``ValueError`` on any violation.
    """
    image_width = int(image_width)
    image_height = int(image_height)
    if image_width < 1 or image_height < 1:
        raise ValueError(f"image size must be >= 1x1, got {image_width}x{image_height}")

    if isinstance(heights, (bytes, bytearray, memoryview)):
        h = np.frombuffer(heights, dtype=np.uint8)
    else:
        h = np.asarray(heights)
    if h.ndim == 2:
        if h.shape != (image_height, image_width):
            raise ValueError(
                f"2D height field must have shape (image_height, image_width)="
                f"({image_height}, {image_width}), got {h.shape}"
            )
        h = h.reshape(-1)
    elif h.ndim != 1:
        raise ValueError(f"height field must be 1D (row-major) or 2D, got {h.ndim}D")
    if h.size != image_width * image_height:
        raise ValueError(
            f"height field has {h.size} samples, expected {image_width}*{image_height}={image_width * image_height}"
        )
    if not (np.issubdtype(h.dtype, np.integer) or np.issubdtype(h.dtype, np.floating)):
        raise ValueError(f"height field must be numeric, got dtype {h.dtype}")
    if np.issubdtype(h.dtype, np.floating) and not np.all(np.isfinite(h)):
        raise ValueError("height field must be finite (NaN or inf samples found)")

    if not math.isfinite(float(pixel_distance)) or float(pixel_distance) <= 0:
        raise ValueError(f"pixel_distance must be > 0, got {pixel_distance}")
    if not math.isfinite(float(pixel_height)) or float(pixel_height) < 0:
        raise ValueError(f"pixel_height must be >= 0, got {pixel_height}")

    b = _as_lattice_point(begin, "begin")
    e = _as_lattice_point(end, "end")
    for name, (x, y) in (("begin", b), ("end", e)):
        if not (0 <= x < image_width and 0 <= y < image_height):
            raise ValueError(f"{name}={(x, y)} is outside the image [0, {image_width}) x [0, {image_height})")
    return b, e, h


def _segment_param_of(p: np.ndarray, begin: tuple[int, int], end: tuple[int, int], pixel_distance: float) -> float:
    """Position of the lifted point ``p`` along the path, 0 at begin and 1 at end."""
    d = np.array([end[0] - begin[0], end[1] - begin[1]], dtype=np.float64)
    q = p[:2] / pixel_distance - np.asarray(begin, dtype=np.float64)
    return float(np.dot(q, d) / np.dot(d, d))


def lift_edge_point(
    heights: np.ndarray,
    image_width: int,
    start: VoxelCoord,
    end: VoxelCoord,
    t: float,
    pixel_distance: float,
    pixel_height: float,
) -> np.ndarray:
    """3D point at parameter ``t`` along the lattice edge ``start -> end``."""
    z0 = float(heights[start[1] * image_width + start[0]]) * pixel_height
    z1 = float(heights[end[1] * image_width + end[0]]) * pixel_height
    p0 = np.array([pixel_distance * start[0], pixel_distance * start[1], z0], dtype=np.float64)
    p1 = np.array([pixel_distance * end[0], pixel_distance * end[1], z1], dtype=np.float64)
    return p0 + float(t) * (p1 - p0)


def voxel_contribution(
    voxel: VoxelCoord,
    begin: tuple[int, int],
    end: tuple[int, int],
    heights: np.ndarray,
    image_width: int,
    pixel_distance: float,
    pixel_height: float,
) -> VoxelContribution:
    """Surface length of the path inside one voxel.

    When the path runs along one of the voxel's edges, that overlap is the
    whole contribution and any crossings found in the same voxel are dropped.
    """
    records = intersect_segment_with_cell_boundary(begin, end, voxel_boundary_loop(voxel))

    colinear_distance: float | None = None
    crossings: list[tuple[float, np.ndarray]] = []
    for rec in records:
        if isinstance(rec, ColinearOverlap):
            p0 = lift_edge_point(heights, image_width, rec.start, rec.end, rec.t0, pixel_distance, pixel_height)
            p1 = lift_edge_point(heights, image_width, rec.start, rec.end, rec.t1, pixel_distance, pixel_height)
            colinear_distance = float(np.linalg.norm(p1 - p0))
            crossings = sorted(
                [
                    (_segment_param_of(p0, begin, end, pixel_distance), p0),
                    (_segment_param_of(p1, begin, end, pixel_distance), p1),
                ],
                key=lambda item: item[0],
            )
        elif isinstance(rec, EdgeCrossing) and colinear_distance is None:
            p = lift_edge_point(heights, image_width, rec.start, rec.end, rec.edge_param, pixel_distance, pixel_height)
            crossings.append((rec.segment_param, p))

    if colinear_distance is not None:
        return VoxelContribution(voxel=voxel, distance=colinear_distance, colinear=True, crossings=crossings)

    crossings.sort(key=lambda item: item[0])
    total = 0.0
    for (_, a), (_, b) in zip(crossings[:-1], crossings[1:]):
        total += float(np.linalg.norm(b - a))
    return VoxelContribution(voxel=voxel, distance=total, colinear=False, crossings=crossings)


def iter_voxel_contributions(
    begin: Sequence[int],
    end: Sequence[int],
    heights: Sequence[float] | np.ndarray,
    image_width: int,
    image_height: int,
    pixel_distance: float,
    pixel_height: float,
    *,
    progress: ProgressFn | None = None,
) -> Iterator[VoxelContribution]:
    """Yield one ``VoxelContribution`` per voxel crossed by the path, in path order."""
    b, e, h = validate_surface_inputs(begin, end, heights, image_width, image_height, pixel_distance, pixel_height)
    image_width = int(image_width)
    pixel_distance = float(pixel_distance)
    pixel_height = float(pixel_height)

    voxels = traverse_voxels(b, e, image_width - 1, int(image_height) - 1)
    total = len(voxels)
    for i, voxel in enumerate(voxels, start=1):
        yield voxel_contribution(voxel, b, e, h, image_width, pixel_distance, pixel_height)
        if progress is not None:
            progress("surface distance", i, total)


def compute_surface_distance(
    begin: Sequence[int],
    end: Sequence[int],
    heights: Sequence[float] | np.ndarray,
    image_width: int,
    image_height: int,
    pixel_distance: float,
    pixel_height: float,
    *,
    progress: ProgressFn | None = None,
) -> float:
    """Length of the straight path ``begin -> end`` measured over the height field.

    ``begin``/``end`` are integer sample coordinates inside the image. ``heights``
    is the flat row-major sample array (or a 2D ``(image_height, image_width)``
    array). Returns 0.0 for ``begin == end``.
    """
    total = 0.0
    for contribution in iter_voxel_contributions(
        begin,
        end,
        heights,
        image_width,
        image_height,
        pixel_distance,
        pixel_height,
        progress=progress,
    ):
        total += contribution.distance
    return total


def planar_distance(begin: Sequence[int], end: Sequence[int], pixel_distance: float) -> float:
    """Flat distance between two sample coordinates, in planar units."""
    return math.hypot(float(end[0]) - float(begin[0]), float(end[1]) - float(begin[1])) * float(pixel_distance)


def surface_profile(
    begin: Sequence[int],
    end: Sequence[int],
    heights: Sequence[float] | np.ndarray,
    image_width: int,
    image_height: int,
    pixel_distance: float,
    pixel_height: float,
) -> np.ndarray:
    """Ordered 3D points along the path.

    Returns a float64 array of shape (N, 4): ``segment_param, x, y, z``.
    Consecutive duplicate points (shared voxel corners and edges) are dropped.
    """
    rows: list[np.ndarray] = []
    for c in iter_voxel_contributions(begin, end, heights, image_width, image_height, pixel_distance, pixel_height):
        for s, p in c.crossings:
            rows.append(np.array([s, p[0], p[1], p[2]], dtype=np.float64))

    if not rows:
        return np.zeros((0, 4), dtype=np.float64)

    pts = np.vstack(rows)
    pts = pts[np.argsort(pts[:, 0], kind="stable")]
    keep = np.ones(len(pts), dtype=bool)
    keep[1:] = np.any(np.abs(np.diff(pts[:, 1:], axis=0)) > 1e-9, axis=1)
    return pts[keep]


def compare_surface_distances(
    begin: Sequence[int],
    end: Sequence[int],
    pre_heights: Sequence[float] | np.ndarray,
    post_heights: Sequence[float] | np.ndarray,
    image_width: int,
    image_height: int,
    pixel_distance: float,
    pixel_height: float,
    *,
    progress: ProgressFn | None = None,
) -> DistanceComparison:
    """Surface distance along the same path before and after a height-field change."""

    def _stage(label: str) -> ProgressFn | None:
        if progress is None:
            return None

        def _p(_: str, current: int, total: int) -> None:
            progress(label, current, total)

        return _p

    pre = compute_surface_distance(
        begin, end, pre_heights, image_width, image_height, pixel_distance, pixel_height, progress=_stage("pre")
    )
    post = compute_surface_distance(
        begin, end, post_heights, image_width, image_height, pixel_distance, pixel_height, progress=_stage("post")
    )
    return DistanceComparison(pre=pre, post=post, straight=planar_distance(begin, end, pixel_distance))
