"""Hit-testing pointer positions against an edge's drawn route.

The orthogonal decomposition here is the one the renderer draws, so the
clickable regions always match the visible path.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

from .models import PathStyle, Point, PolylineSegment
from .normalize import AXIS_EPSILON

if TYPE_CHECKING:
    from collections.abc import Sequence

HANDLE_THRESHOLD = 8.0
SEGMENT_THRESHOLD = 12.0


class HitKind(Enum):
    """What a pointer landed on."""

    WAYPOINT = "waypoint"
    ENDPOINT = "endpoint"
    SEGMENT = "segment"


@dataclass(frozen=True)
class HitResult:
    """A resolved hit.

    ``index`` is the waypoint index for WAYPOINT, 0 (source) or 1 (target)
    for ENDPOINT, and the insert index for SEGMENT.
    """

    kind: HitKind
    index: int


def dist_to_segment(
    px: float, py: float,
    ax: float, ay: float,
    bx: float, by: float,
) -> float:
    """Distance from (px, py) to segment a-b; a == b degrades to point distance."""
    dx = bx - ax
    dy = by - ay
    len_sq = dx * dx + dy * dy
    if len_sq == 0:
        return math.hypot(px - ax, py - ay)
    t = max(0.0, min(1.0, ((px - ax) * dx + (py - ay) * dy) / len_sq))
    return math.hypot(px - (ax + t * dx), py - (ay + t * dy))


def _orthogonal_walk(
    points: Sequence[tuple[float, float]],
) -> tuple[list[tuple[Point, Point, int]], list[tuple[Point, int]]]:
    """Walk a route as the orthogonal renderer draws it.

    Each point is snapped against the last *kept* vertex and dropped when it
    lands within the axis tolerance of it, so every piece is exactly
    axis-aligned. A diagonal pair gets a horizontal-first corner
    ``(cur.x, last.y)``.

    Returns:
        ``(start, end, insert_idx)`` pieces and ``(corner, pair_idx)`` bends
    """
    pieces: list[tuple[Point, Point, int]] = []
    bends: list[tuple[Point, int]] = []
    if not points:
        return pieces, bends

    last = Point(*points[0])
    for i in range(1, len(points)):
        cx, cy = points[i]
        if abs(cx - last.x) < AXIS_EPSILON:
            cur = Point(last.x, cy)
        elif abs(cy - last.y) < AXIS_EPSILON:
            cur = Point(cx, last.y)
        else:
            corner = Point(cx, last.y)
            pieces.append((last, corner, i - 1))
            bends.append((corner, i - 1))
            last, cur = corner, Point(cx, cy)
        if math.hypot(cur.x - last.x, cur.y - last.y) < AXIS_EPSILON:
            continue
        pieces.append((last, cur, i - 1))
        last = cur
    return pieces, bends


def expand_orthogonal(points: Sequence[tuple[float, float]]) -> list[Point]:
    """Vertices of the drawn orthogonal path.

    Nearly aligned pairs are snapped onto the axis and every diagonal pair
    gets a horizontal-first corner. Vertices closer than the axis tolerance
    to the previous one are dropped.
    """
    if not points:
        return []
    pieces, _ = _orthogonal_walk(points)
    if not pieces:
        return [Point(*points[0])]
    return [pieces[0][0], *(end for _, end, _ in pieces)]


def orthogonal_bends(points: Sequence[tuple[float, float]]) -> list[tuple[Point, int]]:
    """Corners added by expanding diagonal pairs, with the pair's index."""
    return _orthogonal_walk(points)[1]


def get_orthogonal_polyline_segments(
    points: Sequence[tuple[float, float]],
) -> list[PolylineSegment]:
    """Axis-aligned segments of the drawn orthogonal path.

    A diagonal pair becomes ``prev -> (cur.x, prev.y) -> cur``; both halves
    carry the pair's index so a hit on either splices into the right place.
    """
    pieces, _ = _orthogonal_walk(points)
    return [PolylineSegment(a.x, a.y, b.x, b.y, idx) for a, b, idx in pieces]


def get_polyline_segments(
    points: Sequence[tuple[float, float]],
) -> list[PolylineSegment]:
    """Straight segments between consecutive points (zero-length ones skipped)."""
    segments = []
    for i in range(len(points) - 1):
        (ax, ay), (bx, by) = points[i], points[i + 1]
        if math.hypot(bx - ax, by - ay) < AXIS_EPSILON:
            continue
        segments.append(PolylineSegment(ax, ay, bx, by, i))
    return segments


def segments_for_style(
    points: Sequence[tuple[float, float]],
    style: PathStyle | str,
) -> list[PolylineSegment]:
    """Segment decomposition matching how the style is drawn."""
    if PathStyle.parse(style).is_orthogonal:
        return get_orthogonal_polyline_segments(points)
    return get_polyline_segments(points)


def find_nearest_segment(
    point: tuple[float, float],
    points: Sequence[tuple[float, float]],
    style: PathStyle | str = PathStyle.ORTHOGONAL,
) -> int:
    """Insert index of the segment nearest to point (0 if there are none)."""
    px, py = point
    best_idx = 0
    best_dist = math.inf
    for seg in segments_for_style(points, style):
        d = dist_to_segment(px, py, seg.ax, seg.ay, seg.bx, seg.by)
        if d < best_dist:
            best_dist = d
            best_idx = seg.insert_idx
    return best_idx


def hit_test(
    pos: tuple[float, float],
    points: Sequence[tuple[float, float]],
    style: PathStyle | str = PathStyle.ORTHOGONAL,
    handle_threshold: float = HANDLE_THRESHOLD,
    segment_threshold: float = SEGMENT_THRESHOLD,
) -> HitResult | None:
    """Resolve a pointer position against an edge.

    Priority: waypoint > endpoint > segment.

    Args:
        pos: Pointer position in diagram space
        points: Source anchor, waypoints, target anchor
        style: Path style the edge is drawn with
        handle_threshold: Radius for waypoint and endpoint handles
        segment_threshold: Radius for segment hits

    Returns:
        HitResult, or None when nothing is close enough
    """
    if len(points) < 2:
        return None

    px, py = pos
    for i in range(1, len(points) - 1):
        wx, wy = points[i]
        if math.hypot(px - wx, py - wy) <= handle_threshold:
            return HitResult(HitKind.WAYPOINT, i - 1)

    for end_idx, (ex, ey) in enumerate((points[0], points[-1])):
        if math.hypot(px - ex, py - ey) <= handle_threshold:
            return HitResult(HitKind.ENDPOINT, end_idx)

    best_idx = -1
    best_dist = segment_threshold
    for seg in segments_for_style(points, style):
        d = dist_to_segment(px, py, seg.ax, seg.ay, seg.bx, seg.by)
        if d < best_dist:
            best_dist = d
            best_idx = seg.insert_idx

    if best_idx >= 0:
        return HitResult(HitKind.SEGMENT, best_idx)
    return None
