"""Path rendering for edges, plus SVG output using drawsvg."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import drawsvg as draw

from .config import RoutingConfig
from .hittest import expand_orthogonal, orthogonal_bends
from .models import BendHandle, PathStyle, Point
from .normalize import AXIS_EPSILON, remove_zero_length_segments
from .routing import absolute_points, effective_waypoints

if TYPE_CHECKING:
    from collections.abc import Sequence

    from .models import Edge, NodeBox
    from .store import DiagramStore

PathCommand = dict


def _straight_commands(points: Sequence[Point]) -> list[PathCommand]:
    commands = [{'type': 'M', 'points': [points[0]]}]
    commands.extend({'type': 'L', 'points': [p]} for p in points[1:])
    return commands


def _same_orientation(a: Point, b: Point, c: Point) -> bool:
    horizontal_in = abs(a.y - b.y) < AXIS_EPSILON
    horizontal_out = abs(b.y - c.y) < AXIS_EPSILON
    return horizontal_in == horizontal_out


def compute_rounded_polyline(
    points: Sequence[Point],
    corner_radius: float = 5.0,
) -> list[PathCommand]:
    """Axis-aligned vertices to path commands with rounded corners.

    Each corner becomes a quadratic curve of radius
    ``min(corner_radius, len1 / 2, len2 / 2)``; a corner with no room for a
    positive radius stays sharp.

    Args:
        points: Expanded orthogonal vertices
        corner_radius: Fixed radius for rounded corners

    Returns:
        List of path commands: {'type': 'M'|'L'|'Q', 'points': [...]}
    """
    if len(points) < 3:
        return _straight_commands(points)

    commands = [{'type': 'M', 'points': [points[0]]}]

    for i in range(1, len(points) - 1):
        prev = points[i - 1]
        curr = points[i]
        next_pt = points[i + 1]

        if _same_orientation(prev, curr, next_pt):
            commands.append({'type': 'L', 'points': [curr]})
            continue

        v1x, v1y = curr.x - prev.x, curr.y - prev.y
        v2x, v2y = next_pt.x - curr.x, next_pt.y - curr.y
        len1 = math.hypot(v1x, v1y)
        len2 = math.hypot(v2x, v2y)

        radius = min(corner_radius, len1 / 2, len2 / 2)
        if radius < AXIS_EPSILON:
            # Too small to round
            commands.append({'type': 'L', 'points': [curr]})
            continue

        v1x, v1y = v1x / len1, v1y / len1
        v2x, v2y = v2x / len2, v2y / len2
        arc_start = Point(curr.x - v1x * radius, curr.y - v1y * radius)
        arc_end = Point(curr.x + v2x * radius, curr.y + v2y * radius)

        commands.append({'type': 'L', 'points': [arc_start]})
        # Control point is the original corner
        commands.append({'type': 'Q', 'points': [curr, arc_end]})

    commands.append({'type': 'L', 'points': [points[-1]]})
    return commands


def compute_curved_commands(
    points: Sequence[Point],
    offset_ratio: float = 0.25,
) -> list[PathCommand]:
    """Spline through all points.

    With waypoints this is a Catmull-Rom spline whose tangents come from each
    point's neighbors scaled by 1/6. Without, a single cubic whose control
    offsets are a share of the horizontal distance between the anchors.
    """
    (sx, sy), (tx, ty) = points[0], points[-1]
    if len(points) == 2:
        dx = abs(tx - sx) * offset_ratio
        return [
            {'type': 'M', 'points': [points[0]]},
            {'type': 'C', 'points': [Point(sx + dx, sy), Point(tx - dx, ty), points[1]]},
        ]

    commands = [{'type': 'M', 'points': [points[0]]}]
    last = len(points) - 1
    for i in range(last):
        p0 = points[max(i - 1, 0)]
        p1 = points[i]
        p2 = points[i + 1]
        p3 = points[min(i + 2, last)]
        c1 = Point(p1.x + (p2.x - p0.x) / 6, p1.y + (p2.y - p0.y) / 6)
        c2 = Point(p2.x - (p3.x - p1.x) / 6, p2.y - (p3.y - p1.y) / 6)
        commands.append({'type': 'C', 'points': [c1, c2, p2]})
    return commands


def build_path_commands(
    points: Sequence[tuple[float, float]],
    style: PathStyle | str,
    corner_radius: float = 5.0,
    curve_offset_ratio: float = 0.25,
) -> list[PathCommand]:
    """Drawable path for source anchor, waypoints and target anchor.

    Args:
        points: Unexpanded anchor + waypoint list
        style: Path style
        corner_radius: Radius for rounded orthogonal corners
        curve_offset_ratio: Control offset for curved edges without waypoints

    Returns:
        Path commands; empty when there are no points
    """
    style = PathStyle.parse(style)
    if not points:
        return []
    if len(points) == 1:
        return [{'type': 'M', 'points': [Point(*points[0])]}]

    if style is PathStyle.ORTHOGONAL:
        return _straight_commands(expand_orthogonal(points))
    if style is PathStyle.ROUNDED_ORTHOGONAL:
        return compute_rounded_polyline(expand_orthogonal(points), corner_radius)

    cleaned = remove_zero_length_segments(points)
    if len(cleaned) < 2:
        return [{'type': 'M', 'points': [cleaned[0]]}]
    if style is PathStyle.STRAIGHT:
        return _straight_commands(cleaned)
    return compute_curved_commands(cleaned, curve_offset_ratio)


def _fmt(value: float) -> str:
    text = f"{value:.2f}".rstrip('0').rstrip('.')
    return '0' if text == '-0' else text


def commands_to_svg(commands: Sequence[PathCommand]) -> str:
    """SVG ``d`` attribute for path commands."""
    parts = []
    for cmd in commands:
        coords = ' '.join(f"{_fmt(x)} {_fmt(y)}" for x, y in cmd['points'])
        parts.append(f"{cmd['type']} {coords}")
    return ' '.join(parts)


def to_drawsvg_path(commands: Sequence[PathCommand], **attrs) -> draw.Path:
    """Build a drawsvg Path from path commands."""
    path = draw.Path(**attrs)
    for cmd in commands:
        flat = [v for pt in cmd['points'] for v in pt]
        kind = cmd['type']
        if kind == 'M':
            path.M(*flat)
        elif kind == 'L':
            path.L(*flat)
        elif kind == 'Q':
            path.Q(*flat)
        elif kind == 'C':
            path.C(*flat)
        else:
            raise ValueError(f"Unknown path command: {kind}")
    return path


def edge_path(
    edge: Edge,
    config: RoutingConfig | None = None,
    grid_size: float | None = None,
) -> list[PathCommand]:
    """Path commands for an edge as currently stored."""
    config = config or RoutingConfig()
    return build_path_commands(
        absolute_points(edge, grid_size),
        edge.path_style,
        corner_radius=config.corner_radius,
        curve_offset_ratio=config.curve_offset_ratio,
    )


@dataclass
class EdgeHandles:
    """Interactive handle positions for the host to overlay."""

    waypoints: list[Point] = field(default_factory=list)
    # (midpoint, insert index) per segment of the unexpanded route
    insert_points: list[tuple[Point, int]] = field(default_factory=list)
    # Orthogonal styles only
    bends: list[BendHandle] = field(default_factory=list)


def get_bend_handles(points: Sequence[tuple[float, float]]) -> list[BendHandle]:
    """Drag handles for the corners added between diagonal points.

    A bend is owned by the waypoint ending its pair (moving that point's x
    slides the vertical leg). When the pair ends at the target anchor the
    waypoint starting it owns the bend instead (its y moves the horizontal
    leg). A bend between the two anchors has no owner and gets no handle.
    """
    last_waypoint = len(points) - 2
    handles = []
    for corner, pair_idx in orthogonal_bends(points):
        if pair_idx < last_waypoint:
            handles.append(BendHandle(corner, pair_idx, "x"))
        elif pair_idx >= 1:
            handles.append(BendHandle(corner, pair_idx - 1, "y"))
    return handles


def get_handles(edge: Edge, grid_size: float | None = None) -> EdgeHandles:
    """Waypoint handles, bend handles and segment-midpoint insert affordances."""
    points = absolute_points(edge, grid_size)
    inserts = [
        (Point((a.x + b.x) / 2, (a.y + b.y) / 2), i)
        for i, (a, b) in enumerate(zip(points, points[1:]))
    ]
    bends = get_bend_handles(points) if edge.path_style.is_orthogonal else []
    return EdgeHandles(
        waypoints=effective_waypoints(edge, grid_size),
        insert_points=inserts,
        bends=bends,
    )


class Theme:
    """Color theme for diagrams."""

    def __init__(
        self,
        background: str = "#ffffff",
        node_fill: str = "#f8fafc",
        node_stroke: str = "#cbd5e1",
        text_color: str = "#1e293b",
        edge_color: str = "#64748b",
        handle_fill: str = "#ffffff",
        accent_color: str = "#3b82f6",
    ):
        self.background = background
        self.node_fill = node_fill
        self.node_stroke = node_stroke
        self.text_color = text_color
        self.edge_color = edge_color
        self.handle_fill = handle_fill
        self.accent_color = accent_color


DEFAULT_THEME = Theme()


def _approach_point(commands: Sequence[PathCommand]) -> Point | None:
    """Point the path arrives at its final vertex from (for the arrowhead)."""
    if len(commands) < 2:
        return None
    last = commands[-1]
    if len(last['points']) > 1:
        return last['points'][-2]
    return commands[-2]['points'][-1]


class DiagramRenderer:
    """Renders a diagram store to an SVG drawing."""

    def __init__(
        self,
        theme: Theme | None = None,
        config: RoutingConfig | None = None,
        padding: float = 40,
        grid_size: float | None = None,
    ):
        self.theme = theme or DEFAULT_THEME
        self.config = config or RoutingConfig()
        self.padding = padding
        self.grid_size = grid_size

    def render(
        self,
        store: DiagramStore,
        show_handles_for: Sequence[str] = (),
    ) -> draw.Drawing:
        """Render nodes and edges; handles are drawn for the listed edge ids."""
        xs: list[float] = []
        ys: list[float] = []
        for box in store.nodes():
            xs.extend((box.x, box.x + box.width))
            ys.extend((box.y, box.y + box.height))
        for edge in store.edges():
            for px, py in absolute_points(edge, self.grid_size):
                xs.append(px)
                ys.append(py)
        if not xs:
            xs, ys = [0, 200], [0, 200]

        min_x, min_y = min(xs) - self.padding, min(ys) - self.padding
        width = max(xs) - min(xs) + 2 * self.padding
        height = max(ys) - min(ys) + 2 * self.padding

        d = draw.Drawing(width, height, origin=(min_x, min_y))
        d.append(draw.Rectangle(min_x, min_y, width, height, fill=self.theme.background))

        for box in store.nodes():
            self._render_node(d, box)
        for edge in store.edges():
            self._render_edge(d, edge)
            if edge.id in show_handles_for:
                self._render_handles(d, edge)
        return d

    def _render_node(self, d: draw.Drawing, box: NodeBox) -> None:
        d.append(
            draw.Rectangle(
                box.x, box.y, box.width, box.height,
                fill=self.theme.node_fill,
                stroke=self.theme.node_stroke,
                stroke_width=1,
                rx=6, ry=6,
            )
        )
        d.append(
            draw.Text(
                box.id,
                12,
                box.x + box.width / 2, box.y + box.height / 2,
                fill=self.theme.text_color,
                font_family="Inter, system-ui, sans-serif",
                text_anchor="middle",
                dominant_baseline="middle",
            )
        )

    def _render_edge(self, d: draw.Drawing, edge: Edge) -> None:
        commands = edge_path(edge, self.config, self.grid_size)
        if len(commands) < 2:
            return

        attrs = dict(
            stroke=self.theme.edge_color,
            stroke_width=edge.stroke_width,
            fill="none",
        )
        if edge.animated:
            attrs["stroke_dasharray"] = "5,5"
        d.append(to_drawsvg_path(commands, **attrs))

        tx, ty = commands[-1]['points'][-1]
        approach = _approach_point(commands)
        if approach is not None and (approach.x, approach.y) != (tx, ty):
            angle = math.atan2(ty - approach.y, tx - approach.x)
            self._draw_arrowhead(d, tx, ty, angle, 8)

    def _render_handles(self, d: draw.Drawing, edge: Edge) -> None:
        handles = get_handles(edge, self.grid_size)
        for wx, wy in handles.waypoints:
            d.append(
                draw.Circle(
                    wx, wy, 4,
                    fill=self.theme.handle_fill,
                    stroke=self.theme.accent_color,
                    stroke_width=1.5,
                )
            )
        for (mx, my), _ in handles.insert_points:
            d.append(draw.Circle(mx, my, 3, fill=self.theme.accent_color, fill_opacity=0.85))
        for bend in handles.bends:
            bx, by = bend.position
            d.append(
                draw.Rectangle(
                    bx - 3.5, by - 3.5, 7, 7,
                    fill=self.theme.handle_fill,
                    stroke=self.theme.accent_color,
                    stroke_width=1.5,
                )
            )

    def _draw_arrowhead(
        self,
        d: draw.Drawing,
        x: float,
        y: float,
        angle: float,
        size: float,
    ) -> None:
        """Draw an arrowhead at the given position and angle."""
        p1_x = x - size * math.cos(angle - math.pi / 6)
        p1_y = y - size * math.sin(angle - math.pi / 6)
        p2_x = x - size * math.cos(angle + math.pi / 6)
        p2_y = y - size * math.sin(angle + math.pi / 6)

        d.append(
            draw.Lines(
                x, y,
                p1_x, p1_y,
                p2_x, p2_y,
                x, y,
                fill=self.theme.edge_color,
                stroke="none",
            )
        )


def render_to_svg(
    store: DiagramStore,
    filename: str | None = None,
    theme: Theme | None = None,
    show_handles_for: Sequence[str] = (),
) -> str:
    """Render a diagram store to SVG.

    Args:
        store: The diagram to render
        filename: Optional filename to save to (without extension)
        theme: Color theme
        show_handles_for: Edge ids whose editing handles are drawn

    Returns:
        SVG content as string
    """
    renderer = DiagramRenderer(theme=theme, config=store.config, grid_size=store.snap.active_grid)
    drawing = renderer.render(store, show_handles_for=show_handles_for)

    if filename:
        drawing.save_svg(f"{filename}.svg")

    return drawing.as_svg()
