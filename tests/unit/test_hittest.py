"""
Unit tests for hit-testing: distances, segment decomposition, hit priority.
"""
from __future__ import annotations

import pytest

from edgeplot.hittest import (
    HitKind,
    HitResult,
    dist_to_segment,
    expand_orthogonal,
    find_nearest_segment,
    get_orthogonal_polyline_segments,
    get_polyline_segments,
    hit_test,
    orthogonal_bends,
)
from edgeplot.models import PathStyle, Point, PolylineSegment


# ---- dist_to_segment ----
def test_dist_to_segment_perpendicular() -> None:
    assert dist_to_segment(50, 5, 0, 0, 100, 0) == 5


def test_dist_to_segment_beyond_end() -> None:
    assert dist_to_segment(150, 0, 0, 0, 100, 0) == 50


def test_dist_to_segment_on_segment() -> None:
    assert dist_to_segment(50, 0, 0, 0, 100, 0) == 0


def test_dist_to_segment_zero_length() -> None:
    assert dist_to_segment(3, 4, 0, 0, 0, 0) == 5


# ---- segment decomposition ----
def test_orthogonal_segments_expand_diagonal() -> None:
    segs = get_orthogonal_polyline_segments([(0, 0), (100, 100)])
    assert len(segs) >= 2
    for seg in segs:
        assert abs(seg.bx - seg.ax) < 0.5 or abs(seg.by - seg.ay) < 0.5
        assert seg.insert_idx == 0
    assert segs[0] == PolylineSegment(0, 0, 100, 0, 0)
    assert segs[1] == PolylineSegment(100, 0, 100, 100, 0)


def test_orthogonal_segments_keep_insert_index_of_original_pair() -> None:
    segs = get_orthogonal_polyline_segments([(0, 0), (50, 0), (120, 80)])
    assert [s.insert_idx for s in segs] == [0, 1, 1]


def test_orthogonal_segments_skip_zero_length() -> None:
    segs = get_orthogonal_polyline_segments([(0, 0), (0, 0), (50, 0), (50.2, 0.1), (50, 100)])
    assert all(s.length >= 0.5 for s in segs)
    assert {s.insert_idx for s in segs} == {1, 3}


def test_polyline_segments_skip_zero_length() -> None:
    segs = get_polyline_segments([(0, 0), (0, 0), (30, 40)])
    assert segs == [PolylineSegment(0, 0, 30, 40, 1)]


def test_expand_orthogonal_matches_segments() -> None:
    pts = [(0, 0), (40, 60), (40, 60), (100, 100)]
    vertices = expand_orthogonal(pts)
    segs = get_orthogonal_polyline_segments(pts)
    chained = [Point(segs[0].ax, segs[0].ay)] + [Point(s.bx, s.by) for s in segs]
    assert vertices == chained


@pytest.mark.parametrize("pts", [
    [(0, 0), (0.3, 0.3), (100, 50)],
    [(0, 0), (0.4, 0.4), (100, 50)],
    [(0, 0), (60, 0.3), (60.2, 0.6), (100, 50)],
])
def test_near_duplicates_keep_every_piece_axis_aligned(pts) -> None:
    vertices = expand_orthogonal(pts)
    for a, b in zip(vertices, vertices[1:]):
        assert a.x == b.x or a.y == b.y
    segs = get_orthogonal_polyline_segments(pts)
    chained = [Point(segs[0].ax, segs[0].ay)] + [Point(s.bx, s.by) for s in segs]
    assert vertices == chained


def test_near_duplicate_start_expands_from_source() -> None:
    assert expand_orthogonal([(0, 0), (0.3, 0.3), (100, 50)]) == [Point(0, 0), Point(100, 0), Point(100, 50)]


def test_orthogonal_bends() -> None:
    assert orthogonal_bends([(0, 0), (40, 30), (100, 100)]) == [(Point(40, 0), 0), (Point(100, 30), 1)]
    assert orthogonal_bends([(0, 0), (50, 0), (50, 100)]) == []


# ---- find_nearest_segment ----
def test_find_nearest_segment_orthogonal() -> None:
    pts = [(0, 0), (50, 0), (50, 100), (100, 100)]
    assert find_nearest_segment((75, 95), pts, "orthogonal") == 2
    assert find_nearest_segment((25, 5), pts, PathStyle.ORTHOGONAL) == 0


def test_find_nearest_segment_straight() -> None:
    pts = [(0, 0), (100, 0), (100, 100)]
    assert find_nearest_segment((50, 0), pts, "straight") == 0
    assert find_nearest_segment((95, 60), pts, "straight") == 1


def test_find_nearest_segment_no_segments() -> None:
    assert find_nearest_segment((5, 5), [(0, 0)], "straight") == 0


# ---- hit_test ----
PTS = [(0, 0), (50, 0), (50, 100)]


def test_hit_waypoint() -> None:
    result = hit_test((50, 0), PTS, "orthogonal", handle_threshold=10, segment_threshold=12)
    assert result == HitResult(HitKind.WAYPOINT, 0)


def test_hit_endpoints() -> None:
    assert hit_test((2, 2), PTS, "orthogonal") == HitResult(HitKind.ENDPOINT, 0)
    assert hit_test((50, 98), PTS, "orthogonal") == HitResult(HitKind.ENDPOINT, 1)


def test_hit_waypoint_beats_nearer_endpoint() -> None:
    pts = [(0, 0), (5, 0), (100, 0)]
    # 1 from the source, 4 from the waypoint
    assert hit_test((1, 0), pts, "straight") == HitResult(HitKind.WAYPOINT, 0)


def test_hit_segment() -> None:
    assert hit_test((25, 6), PTS, "orthogonal") == HitResult(HitKind.SEGMENT, 0)
    assert hit_test((55, 60), PTS, "orthogonal") == HitResult(HitKind.SEGMENT, 1)


def test_hit_segment_uses_style_decomposition() -> None:
    pts = [(0, 0), (100, 100)]
    assert hit_test((60, 5), pts, "orthogonal") == HitResult(HitKind.SEGMENT, 0)
    assert hit_test((60, 5), pts, "straight") is None
    assert hit_test((60, 58), pts, "curved") == HitResult(HitKind.SEGMENT, 0)


@pytest.mark.parametrize("pos", [(500, 500), (25, 13)])
def test_hit_nothing(pos) -> None:
    assert hit_test(pos, PTS, "orthogonal") is None


def test_hit_needs_two_points() -> None:
    assert hit_test((0, 0), [(0, 0)], "straight") is None
