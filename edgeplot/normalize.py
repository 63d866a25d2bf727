"""Orthogonal normalization of polylines.

Snaps nearly axis-aligned segments onto the axis, drops colinear points and
merges segments too short to matter. All functions return new lists and
never mutate their input.
"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING

from .models import Point

if TYPE_CHECKING:
    from collections.abc import Sequence

AXIS_EPSILON = 0.5


def normalize(
    points: Sequence[tuple[float, float]],
    eps: float = AXIS_EPSILON,
) -> list[Point]:
    """Snap nearly horizontal/vertical segments to be exactly axis-aligned.

    Each point is compared with the previous *output* point, so snapping
    propagates along a run. Diagonal segments pass through unchanged.

    Args:
        points: Polyline points
        eps: Axis tolerance

    Returns:
        New list with the same number of points
    """
    if len(points) <= 1:
        return [Point(*p) for p in points]

    out = [Point(*points[0])]
    for cx, cy in points[1:]:
        last = out[-1]
        if abs(last.x - cx) < eps:
            out.append(Point(last.x, cy))
        elif abs(last.y - cy) < eps:
            out.append(Point(cx, last.y))
        else:
            out.append(Point(cx, cy))
    return out


# Same operation; name used by the router
ensure_orthogonal = normalize


def _are_colinear(
    p: tuple[float, float],
    q: tuple[float, float],
    r: tuple[float, float],
    eps: float,
) -> bool:
    """Check whether q lies on segment p-r within tolerance."""
    rx, ry = r[0] - p[0], r[1] - p[1]
    qx, qy = q[0] - p[0], q[1] - p[1]
    cross = qx * ry - qy * rx
    if abs(cross) > eps * math.hypot(rx, ry):
        return False
    dot = qx * rx + qy * ry
    len_sq = rx * rx + ry * ry
    return 0 <= dot <= len_sq + eps * eps


def remove_colinear(
    points: Sequence[tuple[float, float]],
    eps: float = AXIS_EPSILON,
) -> list[Point]:
    """Remove interior points lying on the line between their neighbors.

    Endpoints are always kept and right angles are never colinear.
    """
    if len(points) <= 2:
        return [Point(*p) for p in points]

    out = [Point(*points[0])]
    for i in range(1, len(points) - 1):
        cur = points[i]
        if not _are_colinear(out[-1], cur, points[i + 1], eps):
            out.append(Point(*cur))
    out.append(Point(*points[-1]))
    return out


def merge_tiny_segments(
    points: Sequence[tuple[float, float]],
    min_length: float = 2.0,
    eps: float = AXIS_EPSILON,
) -> list[Point]:
    """Merge segments shorter than min_length without breaking orthogonality.

    A short segment's shared vertex is only dropped when the segments on
    either side run in the same orientation.
    """
    if len(points) <= 2:
        return [Point(*p) for p in points]

    normalized = normalize(points, eps)
    out = [normalized[0]]

    for i in range(1, len(normalized)):
        prev = out[-1]
        cur = normalized[i]
        if math.hypot(cur.x - prev.x, cur.y - prev.y) >= min_length:
            out.append(cur)
            continue
        if i < len(normalized) - 1:
            nxt = normalized[i + 1]
            dx1, dy1 = cur.x - prev.x, cur.y - prev.y
            dx2, dy2 = nxt.x - cur.x, nxt.y - cur.y
            both_vertical = abs(dx1) < eps and abs(dx2) < eps
            both_horizontal = abs(dy1) < eps and abs(dy2) < eps
            if both_vertical or both_horizontal:
                continue
        out.append(cur)

    return remove_colinear(out, eps)


def remove_duplicate_points(
    points: Sequence[tuple[float, float]],
    eps: float = AXIS_EPSILON,
) -> list[Point]:
    """Drop points closer than eps to the previously kept point."""
    if len(points) <= 1:
        return [Point(*p) for p in points]

    out = [Point(*points[0])]
    for p in points[1:]:
        prev = out[-1]
        if math.hypot(p[0] - prev.x, p[1] - prev.y) >= eps:
            out.append(Point(*p))
    return out


def remove_zero_length_segments(
    points: Sequence[tuple[float, float]],
    eps: float = AXIS_EPSILON,
) -> list[Point]:
    """Drop segments shorter than eps, keeping the true last point."""
    if len(points) <= 2:
        return [Point(*p) for p in points]

    out = remove_duplicate_points(points, eps)
    last = Point(*points[-1])
    if out[-1] != last:
        # Replace rather than append so the end stays eps-separated
        if len(out) > 1:
            out[-1] = last
        else:
            out.append(last)
    return out
