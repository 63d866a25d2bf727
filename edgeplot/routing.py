"""Orthogonal routing and polyline simplification."""

from __future__ import annotations

from typing import TYPE_CHECKING

from .logger import get_logger
from .models import DefaultRoute, ExplicitRoute, Point, RouteState
from .normalize import (
    AXIS_EPSILON,
    merge_tiny_segments,
    normalize,
    remove_colinear,
    remove_duplicate_points,
    remove_zero_length_segments,
)

if TYPE_CHECKING:
    from collections.abc import Sequence

    from .models import Edge

MAX_SIMPLIFIED_POINTS = 4


def _snap_value(value: float, grid_size: float | None) -> float:
    if grid_size:
        return round(value / grid_size) * grid_size
    return round(value)


def default_corner_waypoints(
    source: tuple[float, float],
    target: tuple[float, float],
    grid_size: float | None = None,
) -> list[Point]:
    """Default corner pair for an orthogonal edge without waypoints.

    The corners sit on the horizontal midpoint, forming an L/Z-shape.
    Aligned anchors need no corners.

    Args:
        source: Source anchor
        target: Target anchor
        grid_size: Grid to snap the midpoint to, if grid snapping is on

    Returns:
        Zero or two corner points
    """
    sx, sy = source
    tx, ty = target
    if abs(sy - ty) < AXIS_EPSILON or abs(sx - tx) < AXIS_EPSILON:
        return []
    mx = _snap_value((sx + tx) / 2, grid_size)
    return [Point(mx, round(sy)), Point(mx, round(ty))]


def route_orthogonal(
    source: tuple[float, float],
    target: tuple[float, float],
    control_points: Sequence[tuple[float, float]],
    min_segment_length: float = 2.0,
    grid_size: float | None = None,
) -> list[Point]:
    """Route an orthogonal polyline from source to target through control points.

    Returns:
        Absolute points for the rendered path (source, ...waypoints, target)
    """
    points = [Point(*source), *(Point(*p) for p in control_points), Point(*target)]

    if len(points) == 2:
        corners = default_corner_waypoints(source, target, grid_size)
        if corners:
            points = [points[0], *corners, points[1]]

    points = normalize(points)
    points = remove_colinear(points, AXIS_EPSILON)
    return merge_tiny_segments(points, min_segment_length)


def manhattan_length(points: Sequence[tuple[float, float]]) -> float:
    """Sum of absolute horizontal and vertical travel along a route."""
    return sum(
        abs(b[0] - a[0]) + abs(b[1] - a[1])
        for a, b in zip(points, points[1:])
    )


def minimal_orthogonal_route(
    src: tuple[float, float],
    tgt: tuple[float, float],
) -> list[Point]:
    """Shortest clean route: 2 points if aligned, else 3 (H->V or V->H).

    Ties favor horizontal-first.
    """
    src, tgt = Point(*src), Point(*tgt)
    if abs(src.x - tgt.x) < AXIS_EPSILON or abs(src.y - tgt.y) < AXIS_EPSILON:
        return [src, tgt]
    hv = [src, Point(tgt.x, src.y), tgt]
    vh = [src, Point(src.x, tgt.y), tgt]
    return hv if manhattan_length(hv) <= manhattan_length(vh) else vh


def _is_horizontal(a: Point, b: Point) -> bool:
    return abs(a.y - b.y) < AXIS_EPSILON


def _direction(a: Point, b: Point) -> int:
    """+1 for right/down, -1 for left/up, 0 for no movement."""
    if _is_horizontal(a, b):
        delta = b.x - a.x
    else:
        delta = b.y - a.y
    return (delta > 0) - (delta < 0)


def _reverses(a: Point, b: Point, c: Point) -> bool:
    if _is_horizontal(a, b) != _is_horizontal(b, c):
        return False
    d1 = _direction(a, b)
    d2 = _direction(b, c)
    return d1 != 0 and d2 != 0 and d1 == -d2


def has_backtracking(points: Sequence[tuple[float, float]]) -> bool:
    """True if two consecutive same-orientation segments point opposite ways."""
    pts = [Point(*p) for p in points]
    return any(_reverses(pts[i], pts[i + 1], pts[i + 2]) for i in range(len(pts) - 2))


def collapse_backtracking(points: Sequence[tuple[float, float]]) -> list[Point]:
    """Delete the middle point of every U-turn until none remain."""
    out = [Point(*p) for p in points]
    changed = True
    while changed and len(out) > 3:
        changed = False
        for i in range(len(out) - 2):
            if _reverses(out[i], out[i + 1], out[i + 2]):
                del out[i + 1]
                changed = True
                break
    return out


def _simplify_pass(points: list[Point]) -> list[Point]:
    out = normalize(points)
    out = remove_duplicate_points(out)
    out = remove_colinear(out, AXIS_EPSILON)
    out = remove_zero_length_segments(out)
    out = collapse_backtracking(out)
    return normalize(out)


def simplify_orthogonal_polyline(
    points: Sequence[tuple[float, float]],
    src: tuple[float, float],
    tgt: tuple[float, float],
    max_points: int = MAX_SIMPLIFIED_POINTS,
    edge_id: str | None = None,
) -> list[Point]:
    """Simplify an orthogonal polyline, or replace it with the minimal route.

    Removes duplicates, colinear points and zero-length segments, then
    collapses U-turns. A result longer than ``max_points``, one that still
    backtracks, or one that no longer connects ``src`` to ``tgt`` is
    discarded in favor of :func:`minimal_orthogonal_route`. The fallback is
    expected behavior for tangled drag input and is only logged.

    Args:
        points: Route points including both anchors
        src: Source anchor
        tgt: Target anchor
        max_points: Complexity ceiling for a kept route
        edge_id: Edge the route belongs to, for logging

    Returns:
        Simplified route; simplifying it again returns it unchanged
    """
    if len(points) <= 2:
        return [Point(*p) for p in points]

    out = [Point(*p) for p in points]
    for _ in range(len(out) + 1):
        nxt = _simplify_pass(out)
        if nxt == out:
            break
        out = nxt

    reason = None
    if len(out) > max_points:
        reason = "too many points"
    elif has_backtracking(out):
        reason = "backtracking"
    elif not (_near(out[0], src) and _near(out[-1], tgt)):
        reason = "detached from anchors"

    if reason is not None:
        get_logger().note_fallback(edge_id, len(out), reason)
        return minimal_orthogonal_route(src, tgt)
    return out


def _near(a: tuple[float, float], b: tuple[float, float]) -> bool:
    return abs(a[0] - b[0]) < AXIS_EPSILON and abs(a[1] - b[1]) < AXIS_EPSILON


def route_state(edge: Edge, grid_size: float | None = None) -> RouteState:
    """Classify an edge as drawn through implicit defaults or explicit waypoints."""
    if edge.path_style.is_orthogonal and not edge.waypoints:
        if default_corner_waypoints(edge.source_anchor, edge.target_anchor, grid_size):
            return DefaultRoute()
    return ExplicitRoute(tuple(edge.waypoints))


def materialize(edge: Edge, grid_size: float | None = None) -> ExplicitRoute:
    """Turn an implicit default route into explicit, editable waypoints."""
    state = route_state(edge, grid_size)
    if isinstance(state, DefaultRoute):
        corners = default_corner_waypoints(edge.source_anchor, edge.target_anchor, grid_size)
        return ExplicitRoute(tuple(corners))
    return state


def effective_waypoints(edge: Edge, grid_size: float | None = None) -> list[Point]:
    """Waypoints as drawn and hit-tested, including implicit default corners."""
    return list(materialize(edge, grid_size).points)


def absolute_points(edge: Edge, grid_size: float | None = None) -> list[Point]:
    """Anchors plus effective waypoints, source to target."""
    return [edge.source_anchor, *effective_waypoints(edge, grid_size), edge.target_anchor]
