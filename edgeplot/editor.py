"""Waypoint editing as an explicit state machine.

The editor turns pointer gestures and context-menu choices into waypoint
mutations on a host (normally :class:`~edgeplot.store.DiagramStore`). Every
gesture opens exactly one undo snapshot; moves during a drag are written as
transient updates and the release commits the final list.

Usage:
    events = PointerEventSource()
    editor = WaypointEditor(store, events)

    editor.press(edge_id, (120, 40), selected=True)
    events.dispatch("move", (140, 60))
    events.dispatch("up", (140, 60))
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Callable, Protocol

from .config import RoutingConfig, SnapConfig
from .hittest import HitKind, find_nearest_segment, hit_test
from .logger import RoutingLogger, get_logger
from .models import DefaultRoute, Point
from .routing import absolute_points, effective_waypoints, materialize, route_state
from .snapping import resolve_snapped_point

if TYPE_CHECKING:
    from collections.abc import Sequence

    from .models import BendHandle, Edge

PointerListener = Callable[[tuple[float, float]], None]


class WaypointHost(Protocol):
    """State layer the editor mutates."""

    snap: SnapConfig

    def get_edge(self, edge_id: str) -> Edge: ...

    def set_waypoints(
        self, edge_id: str, points: Sequence[tuple[float, float]], is_final: bool = True
    ) -> None: ...

    def insert_waypoint(self, edge_id: str, insert_idx: int, point: tuple[float, float]) -> None: ...

    def remove_waypoint(self, edge_id: str, index: int) -> None: ...

    def open_undo_snapshot(self) -> None: ...


class PointerEventSource:
    """Document-level pointer listeners ("move" and "up").

    Listeners receive the screen position of the event. Registering at this
    level means a release anywhere ends the active gesture.
    """

    KINDS = ("move", "up")

    def __init__(self):
        self._listeners: dict[str, list[PointerListener]] = {kind: [] for kind in self.KINDS}

    def subscribe(self, kind: str, listener: PointerListener) -> None:
        self._listeners[kind].append(listener)

    def unsubscribe(self, kind: str, listener: PointerListener) -> None:
        if listener in self._listeners[kind]:
            self._listeners[kind].remove(listener)

    def dispatch(self, kind: str, screen_pos: tuple[float, float]) -> None:
        for listener in list(self._listeners[kind]):
            listener(screen_pos)

    def listener_count(self, kind: str | None = None) -> int:
        if kind is not None:
            return len(self._listeners[kind])
        return sum(len(listeners) for listeners in self._listeners.values())


class EditorState(Enum):
    """States of the waypoint editor."""

    IDLE = "idle"
    DRAGGING_WAYPOINT = "dragging_waypoint"
    DRAGGING_NEW_FROM_LINE = "dragging_new_from_line"
    DRAGGING_BEND = "dragging_bend"
    CONTEXT_MENU_OPEN = "context_menu_open"


class MenuAction(Enum):
    """Context-menu entries."""

    ADD_WAYPOINT = "add_waypoint"
    REMOVE_WAYPOINT = "remove_waypoint"
    CLEAR_WAYPOINTS = "clear_waypoints"


@dataclass
class ContextMenu:
    """An open context menu and what it was opened on."""

    edge_id: str
    position: Point
    waypoint_index: int | None = None
    # action -> enabled
    actions: dict[MenuAction, bool] = field(default_factory=dict)

    def is_enabled(self, action: MenuAction) -> bool:
        return self.actions.get(action, False)


_DRAG_STATES = (
    EditorState.DRAGGING_WAYPOINT,
    EditorState.DRAGGING_NEW_FROM_LINE,
    EditorState.DRAGGING_BEND,
)


def _identity(pos: tuple[float, float]) -> Point:
    return Point(*pos)


class WaypointEditor:
    """Finite-state machine for dragging, inserting and deleting waypoints."""

    def __init__(
        self,
        host: WaypointHost,
        events: PointerEventSource,
        to_diagram: Callable[[tuple[float, float]], tuple[float, float]] | None = None,
        snap: SnapConfig | None = None,
        config: RoutingConfig | None = None,
        logger: RoutingLogger | None = None,
    ):
        """Initialize the editor.

        Args:
            host: State layer holding the edges
            events: Document-level pointer event source
            to_diagram: Screen-to-diagram coordinate transform
            snap: Grid snapping (defaults to the host's)
            config: Thresholds and tolerances
            logger: Where notices go (defaults to the library logger)
        """
        self.host = host
        self.events = events
        self.to_diagram = to_diagram or _identity
        self.snap = snap if snap is not None else host.snap
        self.config = config or RoutingConfig()
        self.logger = logger or get_logger()

        self.state = EditorState.IDLE
        self.edge_id: str | None = None
        self.drag_index: int | None = None
        self.drag_axis: str | None = None
        self.menu: ContextMenu | None = None

    # ---- Helpers ----

    @property
    def _grid(self) -> float | None:
        return self.snap.active_grid

    def _snapped(self, edge: Edge, raw: tuple[float, float]) -> Point:
        return resolve_snapped_point(
            raw, edge.source_anchor, edge.target_anchor, self.snap, self.config.snap_threshold
        )

    def _ensure_explicit(self, edge: Edge) -> Edge:
        """Persist implicit default corners before the first edit."""
        if isinstance(route_state(edge, self._grid), DefaultRoute):
            corners = list(materialize(edge, self._grid).points)
            self.host.set_waypoints(edge.id, corners, is_final=False)
            self.logger.note_materialized(edge.id, corners)
            edge = self.host.get_edge(edge.id)
        return edge

    def _begin_edit(self, edge_id: str) -> Edge:
        """Open the gesture's undo boundary and make waypoints explicit."""
        self.host.open_undo_snapshot()
        return self._ensure_explicit(self.host.get_edge(edge_id))

    def _require(self, event: str, *states: EditorState) -> bool:
        if self.state in states:
            return True
        self.logger.note_ignored(self.edge_id, event, self.state.value)
        return False

    def _check_index(self, edge_id: str, index: int) -> None:
        """Reject a waypoint index before anything is written or snapshotted."""
        count = len(effective_waypoints(self.host.get_edge(edge_id), self._grid))
        if not 0 <= index < count:
            raise IndexError(f"Waypoint index {index} out of range for edge {edge_id}")

    def _start_drag(self, state: EditorState, edge_id: str, index: int) -> None:
        self.state = state
        self.edge_id = edge_id
        self.drag_index = index
        self.events.subscribe("move", self.on_pointer_move)
        self.events.subscribe("up", self.on_pointer_up)

    def _reset(self) -> None:
        self.state = EditorState.IDLE
        self.edge_id = None
        self.drag_index = None
        self.drag_axis = None
        self.menu = None

    # ---- Pointer gestures ----

    def press(self, edge_id: str, screen_pos: tuple[float, float], selected: bool) -> bool:
        """Resolve a press with the hit tester and start the matching gesture."""
        edge = self.host.get_edge(edge_id)
        pos = self.to_diagram(screen_pos)
        hit = hit_test(
            pos,
            absolute_points(edge, self._grid),
            edge.path_style,
            self.config.handle_threshold,
            self.config.segment_threshold,
        )
        if hit is None or hit.kind is HitKind.ENDPOINT:
            return False
        if hit.kind is HitKind.WAYPOINT:
            return self.press_waypoint(edge_id, hit.index)
        return self.press_edge_body(edge_id, screen_pos, selected)

    def press_waypoint(self, edge_id: str, index: int) -> bool:
        """Start dragging an existing waypoint handle."""
        if not self._require("press_waypoint", EditorState.IDLE):
            return False
        self._check_index(edge_id, index)
        self._begin_edit(edge_id)
        self._start_drag(EditorState.DRAGGING_WAYPOINT, edge_id, index)
        return True

    def press_bend(self, edge_id: str, bend: BendHandle) -> bool:
        """Start dragging an orthogonal bend; only its owner's ``bend.axis`` moves."""
        if not self._require("press_bend", EditorState.IDLE):
            return False
        self._check_index(edge_id, bend.waypoint_index)
        self._begin_edit(edge_id)
        self._start_drag(EditorState.DRAGGING_BEND, edge_id, bend.waypoint_index)
        self.drag_axis = bend.axis
        return True

    def press_edge_body(self, edge_id: str, screen_pos: tuple[float, float], selected: bool) -> bool:
        """Insert a waypoint on the nearest segment and start dragging it.

        Only a selected edge can be bent this way.
        """
        if not selected or not self._require("press_edge_body", EditorState.IDLE):
            return False
        raw = self.to_diagram(screen_pos)
        edge = self._begin_edit(edge_id)
        points = [edge.source_anchor, *edge.waypoints, edge.target_anchor]
        insert_idx = find_nearest_segment(raw, points, edge.path_style)
        self.host.insert_waypoint(edge_id, insert_idx, self._snapped(edge, raw))
        self._start_drag(EditorState.DRAGGING_NEW_FROM_LINE, edge_id, insert_idx)
        return True

    def on_pointer_move(self, screen_pos: tuple[float, float]) -> None:
        """Move the dragged waypoint (transient write)."""
        if self.state not in _DRAG_STATES:
            return
        edge = self.host.get_edge(self.edge_id)
        waypoints = list(edge.waypoints)
        snapped = self._snapped(edge, self.to_diagram(screen_pos))
        if self.state is EditorState.DRAGGING_BEND:
            old = waypoints[self.drag_index]
            snapped = Point(snapped.x, old.y) if self.drag_axis == "x" else Point(old.x, snapped.y)
        waypoints[self.drag_index] = snapped
        self.host.set_waypoints(self.edge_id, waypoints, is_final=False)

    def on_pointer_up(self, screen_pos: tuple[float, float]) -> None:
        """Commit the drag wherever the pointer is released."""
        self.events.unsubscribe("move", self.on_pointer_move)
        self.events.unsubscribe("up", self.on_pointer_up)
        if self.state not in _DRAG_STATES:
            return
        edge = self.host.get_edge(self.edge_id)
        self.host.set_waypoints(self.edge_id, list(edge.waypoints), is_final=True)
        self.logger.debug(f"[{self.edge_id}] {self.state.value} committed {len(edge.waypoints)} waypoints")
        self._reset()

    def double_click_waypoint(self, edge_id: str, index: int) -> bool:
        """Remove a waypoint immediately."""
        if not self._require("double_click_waypoint", EditorState.IDLE):
            return False
        self._check_index(edge_id, index)
        self._begin_edit(edge_id)
        self.host.remove_waypoint(edge_id, index)
        return True

    def click_insert(self, edge_id: str, insert_idx: int) -> bool:
        """Insert a waypoint at a segment midpoint without dragging."""
        if not self._require("click_insert", EditorState.IDLE):
            return False
        edge = self._begin_edit(edge_id)
        points = [edge.source_anchor, *edge.waypoints, edge.target_anchor]
        a, b = points[insert_idx], points[insert_idx + 1]
        midpoint = Point((a.x + b.x) / 2, (a.y + b.y) / 2)
        self.host.insert_waypoint(edge_id, insert_idx, self._snapped(edge, midpoint))
        return True

    # ---- Context menu ----

    def open_context_menu(
        self,
        edge_id: str,
        screen_pos: tuple[float, float],
        waypoint_index: int | None = None,
    ) -> ContextMenu | None:
        """Open the menu for the edge body, or for a waypoint if an index is given."""
        if not self._require("open_context_menu", EditorState.IDLE, EditorState.CONTEXT_MENU_OPEN):
            return None
        edge = self.host.get_edge(edge_id)
        if waypoint_index is not None:
            actions = {MenuAction.REMOVE_WAYPOINT: True}
        else:
            actions = {
                MenuAction.ADD_WAYPOINT: True,
                MenuAction.CLEAR_WAYPOINTS: bool(edge.waypoints),
            }
        self.menu = ContextMenu(edge_id, Point(*self.to_diagram(screen_pos)), waypoint_index, actions)
        self.state = EditorState.CONTEXT_MENU_OPEN
        self.edge_id = edge_id
        return self.menu

    def choose(self, action: MenuAction) -> bool:
        """Run a context-menu action and close the menu."""
        if not self._require("choose", EditorState.CONTEXT_MENU_OPEN):
            return False
        menu = self.menu
        if not menu.is_enabled(action):
            self.logger.note_ignored(menu.edge_id, f"choose {action.value}", "disabled")
            return False

        if action is MenuAction.CLEAR_WAYPOINTS:
            self.host.open_undo_snapshot()
            self.host.set_waypoints(menu.edge_id, [], is_final=True)
        elif action is MenuAction.REMOVE_WAYPOINT:
            self._begin_edit(menu.edge_id)
            self.host.remove_waypoint(menu.edge_id, menu.waypoint_index)
        else:
            edge = self._begin_edit(menu.edge_id)
            points = [edge.source_anchor, *edge.waypoints, edge.target_anchor]
            insert_idx = find_nearest_segment(menu.position, points, edge.path_style)
            self.host.insert_waypoint(menu.edge_id, insert_idx, self._snapped(edge, menu.position))

        self._reset()
        return True

    def close_context_menu(self) -> None:
        if self.state is EditorState.CONTEXT_MENU_OPEN:
            self._reset()
