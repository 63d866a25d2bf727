"""Data models for edgeplot diagrams."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import NamedTuple, Union


class Point(NamedTuple):
    """A diagram-space coordinate."""

    x: float
    y: float


class PathStyle(Enum):
    """How an edge's route is drawn."""

    STRAIGHT = "straight"
    CURVED = "curved"
    ORTHOGONAL = "orthogonal"
    ROUNDED_ORTHOGONAL = "rounded_orthogonal"

    @property
    def is_orthogonal(self) -> bool:
        return self in (PathStyle.ORTHOGONAL, PathStyle.ROUNDED_ORTHOGONAL)

    @classmethod
    def parse(cls, value: PathStyle | str) -> PathStyle:
        """Convert a style name (or one of its editor aliases) to PathStyle."""
        if isinstance(value, PathStyle):
            return value
        aliases = {
            "bezier": cls.CURVED,
            "default": cls.CURVED,
            "step": cls.ORTHOGONAL,
            "smoothstep": cls.ROUNDED_ORTHOGONAL,
        }
        if value in aliases:
            return aliases[value]
        return cls(value)


@dataclass
class NodeBox:
    """Axis-aligned bounding box of a diagram node."""

    id: str
    x: float = 0
    y: float = 0
    width: float = 200
    height: float = 70

    @property
    def center(self) -> Point:
        return Point(self.x + self.width / 2, self.y + self.height / 2)


@dataclass
class Edge:
    """A directed connection between two nodes.

    Anchors belong to node geometry and are read-only inputs; the waypoint
    list is owned by the edge and only changes through the editor.
    """

    id: str
    source: str
    target: str
    source_anchor: Point
    target_anchor: Point
    waypoints: list[Point] = field(default_factory=list)
    path_style: PathStyle = PathStyle.CURVED
    stroke_width: float = 1.5
    animated: bool = False

    def __post_init__(self) -> None:
        self.source_anchor = Point(*self.source_anchor)
        self.target_anchor = Point(*self.target_anchor)
        self.waypoints = [Point(*p) for p in self.waypoints]
        self.path_style = PathStyle.parse(self.path_style)


@dataclass(frozen=True)
class PolylineSegment:
    """A drawn segment tagged with where a new waypoint would be spliced.

    ``insert_idx`` indexes the unexpanded waypoint list, so both halves of an
    expanded orthogonal pair share it.
    """

    ax: float
    ay: float
    bx: float
    by: float
    insert_idx: int

    @property
    def length(self) -> float:
        return math.hypot(self.bx - self.ax, self.by - self.ay)


@dataclass(frozen=True)
class DefaultRoute:
    """An orthogonal edge still drawn through its implicit default corners."""


@dataclass(frozen=True)
class ExplicitRoute:
    """An edge whose waypoints are stored and independently editable."""

    points: tuple[Point, ...] = ()


@dataclass(frozen=True)
class BendHandle:
    """A corner the orthogonal renderer adds between two diagonal points.

    Dragging it moves one coordinate of its owning waypoint: ``x`` when the
    waypoint ends the diagonal pair, ``y`` when it starts it.
    """

    position: Point
    waypoint_index: int
    axis: str


RouteState = Union[DefaultRoute, ExplicitRoute]
