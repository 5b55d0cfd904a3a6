"""2D geometry primitives: cross product, ray/segment classification, voxel corners.

Points and vectors are float64 numpy arrays of shape (2,). Voxel coordinates are
plain integer tuples ``(x, y)``; voxel ``(x, y)`` covers the unit square
``[x, x+1] x [y, y+1]``.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Sequence

import numpy as np

# Tolerance for the zero tests on cross products.
EPSILON = float(np.finfo(np.float64).eps)

VoxelCoord = tuple[int, int]


def as_point(p: Sequence[float] | np.ndarray) -> np.ndarray:
    a = np.asarray(p, dtype=np.float64)
    if a.shape != (2,):
        raise ValueError(f"expected a 2D point, got shape {a.shape}")
    return a


def cross(a: np.ndarray, b: np.ndarray) -> float:
    """Scalar 2D cross product a.x*b.y - a.y*b.x."""
    return float(a[0] * b[1] - a[1] * b[0])


class IntersectionType(enum.Enum):
    PARALLEL = "parallel"
    COLINEAR = "colinear"
    INTERSECTING = "intersecting"


@dataclass(frozen=True, slots=True)
class Ray:
    origin: np.ndarray
    direction: np.ndarray

    @classmethod
    def through(cls, begin: Sequence[float], end: Sequence[float], *, normalize: bool = False) -> "Ray":
        """Ray from ``begin`` towards ``end``.

        Without ``normalize`` the ray parameter is expressed in units of the
        full segment (0 at ``begin``, 1 at ``end``).
        """
        origin = as_point(begin)
        direction = as_point(end) - origin
        if normalize:
            length = float(np.hypot(direction[0], direction[1]))
            if length == 0.0:
                raise ValueError("cannot normalize a zero-length direction")
            direction = direction / length
        return cls(origin=origin, direction=direction)

    def point_at(self, t: float) -> np.ndarray:
        return self.origin + float(t) * self.direction


@dataclass(frozen=True, slots=True)
class RayLineIntersection:
    type: IntersectionType
    # Only meaningful when type is INTERSECTING.
    ray: float = float("nan")
    line: float = float("nan")

    @property
    def intersecting(self) -> bool:
        return self.type is IntersectionType.INTERSECTING


def intersect_ray_and_line(
    ray: Ray,
    line_begin: Sequence[float] | np.ndarray,
    line_end: Sequence[float] | np.ndarray,
) -> RayLineIntersection:
    """Classify a ray against the segment ``line_begin -> line_end``.

    For an INTERSECTING result the crossing point satisfies::

        ray.origin + ray.direction * result.ray
        == line_begin + (line_end - line_begin) * result.line

    ``result.ray`` is in units of ``ray.direction`` as given (normalized or not).
    The segment range is not enforced; callers check ``0 <= result.line <= 1``.
    """
    begin = as_point(line_begin)
    end = as_point(line_end)
    begin_origin = begin - ray.origin
    end_begin = end - begin

    denom = cross(ray.direction, end_begin)
    numer_line = cross(begin_origin, ray.direction)

    # Colinear must be tested first: colinear lines are parallel too.
    if abs(denom) < EPSILON and abs(numer_line) < EPSILON:
        return RayLineIntersection(IntersectionType.COLINEAR)
    if abs(denom) < EPSILON:
        return RayLineIntersection(IntersectionType.PARALLEL)

    return RayLineIntersection(
        IntersectionType.INTERSECTING,
        ray=cross(begin_origin, end_begin) / denom,
        line=numer_line / denom,
    )


def step_sign(component: float) -> int:
    # Zero (including -0.0) steps forward.
    return -1 if component < 0 else 1


# Start voxel correction by (step_x, step_y). A lattice point is the lower-left
# corner of voxel (x, y); moving towards negative x or y the voxel actually
# entered lies one cell back on that axis.
START_VOXEL_OFFSETS: dict[tuple[int, int], tuple[int, int]] = {
    (1, 1): (0, 0),
    (1, -1): (0, -1),
    (-1, -1): (-1, -1),
    (-1, 1): (-1, 0),
}


def start_voxel_offset(step_x: int, step_y: int) -> tuple[int, int]:
    try:
        return START_VOXEL_OFFSETS[(int(step_x), int(step_y))]
    except KeyError:
        raise ValueError(f"step signs must be +1/-1, got ({step_x}, {step_y})") from None


def to_voxel_coord(coord: Sequence[int], direction: np.ndarray) -> VoxelCoord:
    """Voxel entered when leaving lattice point ``coord`` along ``direction``."""
    dx, dy = start_voxel_offset(step_sign(direction[0]), step_sign(direction[1]))
    return int(coord[0]) + dx, int(coord[1]) + dy
