"""Configuration for routing, hit-testing and snapping."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class RoutingConfig:
    """Tunable constants shared by the router, hit tester and editor."""

    # Pointer radius for waypoint and endpoint handles
    handle_threshold: float = 8.0
    # Pointer radius for inserting on a segment (larger than handles)
    segment_threshold: float = 12.0
    # Distance within which a dragged point clamps to an anchor axis
    snap_threshold: float = 8.0
    # Fixed corner radius for rounded orthogonal paths
    corner_radius: float = 5.0
    # Segments shorter than this are merged away by the router
    min_segment_length: float = 2.0
    # Simplified routes longer than this fall back to the minimal route
    max_simplified_points: int = 4
    # Undo snapshots kept by the store
    history_limit: int = 50
    # Control-point offset of a curved edge without waypoints (share of dx)
    curve_offset_ratio: float = 0.25


@dataclass
class SnapConfig:
    """Grid snapping as configured by the host."""

    enabled: bool = False
    grid_size: float = 20.0

    @property
    def active_grid(self) -> float | None:
        """Grid size to round to, or None when grid snapping is off."""
        if self.enabled and self.grid_size > 0:
            return self.grid_size
        return None
