from __future__ import annotations

import pytest

from surface_distance.boundary import (
    ColinearOverlap,
    EdgeCrossing,
    intersect_segment_with_cell_boundary,
    voxel_boundary_loop,
)


def test_boundary_loop_has_four_sides_and_diagonal() -> None:
    loop = voxel_boundary_loop((2, 5))
    assert loop == [(3, 5), (2, 5), (2, 6), (3, 6), (3, 5), (2, 6)]
    edges = list(zip(loop[:-1], loop[1:]))
    assert len(edges) == 5
    # Last edge is the bottom-right -> top-left diagonal.
    assert edges[-1] == ((3, 5), (2, 6))


def test_diagonal_path_crossings() -> None:
    records = intersect_segment_with_cell_boundary((1, 0), (2, 1), voxel_boundary_loop((1, 0)))
    assert all(isinstance(r, EdgeCrossing) for r in records)
    by_edge = {(r.start, r.end): r for r in records}

    diag = by_edge[((2, 0), (1, 1))]
    assert diag.edge_param == pytest.approx(0.5)
    assert diag.segment_param == pytest.approx(0.5)

    bottom = by_edge[((2, 0), (1, 0))]
    assert bottom.edge_param == pytest.approx(1.0)
    assert bottom.segment_param == pytest.approx(0.0)

    top = by_edge[((1, 1), (2, 1))]
    assert top.edge_param == pytest.approx(1.0)
    assert top.segment_param == pytest.approx(1.0)
    assert len(records) == 5


def test_crossings_outside_edges_are_ignored() -> None:
    # Steep path through voxel (1, 0) of the segment (1, 0) -> (3, 4): the
    # right side x=2 is reached only at y=2, beyond the edge.
    records = intersect_segment_with_cell_boundary((1, 0), (3, 4), voxel_boundary_loop((1, 0)))
    edges = {(r.start, r.end) for r in records}
    assert ((2, 1), (2, 0)) not in edges
    assert ((2, 0), (1, 1)) in edges
    assert ((1, 1), (2, 1)) in edges


def test_colinear_path_along_left_side() -> None:
    records = intersect_segment_with_cell_boundary((1, 1), (1, 4), voxel_boundary_loop((1, 1)))
    overlaps = [r for r in records if isinstance(r, ColinearOverlap)]
    assert len(overlaps) == 1
    ov = overlaps[0]
    assert (ov.start, ov.end) == ((1, 1), (1, 2))
    assert (ov.t0, ov.t1) == (pytest.approx(0.0), pytest.approx(1.0))


def test_colinear_path_against_edge_orientation() -> None:
    # Bottom side runs right-to-left while the path runs left-to-right.
    records = intersect_segment_with_cell_boundary((1, 1), (4, 1), voxel_boundary_loop((2, 1)))
    overlaps = [r for r in records if isinstance(r, ColinearOverlap)]
    assert len(overlaps) == 1
    ov = overlaps[0]
    assert (ov.start, ov.end) == ((3, 1), (2, 1))
    assert (ov.t0, ov.t1) == (pytest.approx(0.0), pytest.approx(1.0))


def test_partial_colinear_overlap_is_clamped() -> None:
    # Path covers only the upper half of the left side.
    records = intersect_segment_with_cell_boundary((0.0, 0.5), (0.0, 3.0), voxel_boundary_loop((0, 0)))
    overlaps = [r for r in records if isinstance(r, ColinearOverlap)]
    assert len(overlaps) == 1
    assert overlaps[0].t0 == pytest.approx(0.5)
    assert overlaps[0].t1 == pytest.approx(1.0)


def test_colinear_line_without_overlap_is_ignored() -> None:
    # Same line as the left side, but the path stops before reaching it.
    records = intersect_segment_with_cell_boundary((1, 3), (1, 5), voxel_boundary_loop((1, 0)))
    assert not any(isinstance(r, ColinearOverlap) for r in records)


def test_path_missing_the_voxel_yields_no_crossing() -> None:
    records = intersect_segment_with_cell_boundary((0, 5), (5, 5), voxel_boundary_loop((1, 1)))
    assert records == []
