"""Grid snapping, anchor snapping and anchor placement on node boxes."""

from __future__ import annotations

from typing import TYPE_CHECKING

from .models import Point

if TYPE_CHECKING:
    from .config import SnapConfig
    from .models import NodeBox


def snap_to_grid(point: tuple[float, float], grid_size: float) -> Point:
    """Round a point to the grid (to whole units when grid_size <= 0)."""
    x, y = point
    if grid_size <= 0:
        return Point(round(x), round(y))
    return Point(round(x / grid_size) * grid_size, round(y / grid_size) * grid_size)


def _clamp_axis(value: float, candidates: tuple[float, float], threshold: float) -> float | None:
    """Nearest candidate within threshold, or None."""
    best = None
    best_dist = threshold
    for candidate in candidates:
        dist = abs(value - candidate)
        if dist <= best_dist:
            best = candidate
            best_dist = dist
    return best


def resolve_snapped_point(
    raw: tuple[float, float],
    source: tuple[float, float],
    target: tuple[float, float],
    snap: SnapConfig,
    threshold: float = 8.0,
) -> Point:
    """Smart-snap a dragged or inserted waypoint.

    Each axis is clamped to the source or target anchor's coordinate when
    within ``threshold`` (the nearer anchor wins). An axis left unclamped is
    rounded to the grid when grid snapping is enabled, else to whole units.

    Args:
        raw: Pointer position in diagram space
        source: Source anchor
        target: Target anchor
        snap: Host snap configuration
        threshold: Anchor clamp distance

    Returns:
        The point to store
    """
    rx, ry = raw
    grid = snap.active_grid
    rounded = snap_to_grid(raw, grid if grid else 0)

    x = _clamp_axis(rx, (source[0], target[0]), threshold)
    y = _clamp_axis(ry, (source[1], target[1]), threshold)
    return Point(
        rounded.x if x is None else x,
        rounded.y if y is None else y,
    )


def anchor_for(box: NodeBox, toward: NodeBox) -> Point:
    """Anchor on the side of ``box`` facing ``toward``.

    Picks the mid-point of the left/right side when the boxes are mostly
    side by side, else of the top/bottom side.
    """
    cx, cy = box.center
    ox, oy = toward.center
    dx, dy = ox - cx, oy - cy
    if abs(dx) >= abs(dy):
        if dx >= 0:
            return Point(box.x + box.width, cy)
        return Point(box.x, cy)
    if dy >= 0:
        return Point(cx, box.y + box.height)
    return Point(cx, box.y)
