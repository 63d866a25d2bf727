"""
Integration tests for WaypointEditor gestures against a real DiagramStore.
"""
from __future__ import annotations

import logging

import pytest

from edgeplot import EditorState, MenuAction, Point, WaypointEditor, get_handles


@pytest.fixture
def editor(store, events, notices) -> WaypointEditor:
    return WaypointEditor(store, events, logger=notices)


def _notice_types(notices) -> list[str]:
    return [n.notice_type for n in notices.get_notices()]


# ---- Dragging existing waypoints ----
def test_drag_waypoint_is_one_undoable_action(store, events, editor) -> None:
    assert editor.press("line", (101, 1), selected=True)
    assert editor.state is EditorState.DRAGGING_WAYPOINT
    assert events.listener_count() == 2

    events.dispatch("move", (120, 40))
    assert store.get_edge("line").waypoints == [Point(120, 40)]
    assert store.writes == [("line", False)]
    assert store.dirty_edge_ids == set()

    events.dispatch("up", (120, 40))
    assert store.writes[-1] == ("line", True)
    assert store.dirty_edge_ids == {"line"}
    assert events.listener_count() == 0
    assert editor.state is EditorState.IDLE
    assert store.snapshots == 1

    store.undo()
    assert store.get_edge("line").waypoints == [Point(100, 0)]


def test_drag_snaps_to_anchor_axis(store, events, editor) -> None:
    editor.press_waypoint("line", 0)
    events.dispatch("move", (197, 43.4))
    assert store.get_edge("line").waypoints == [Point(200, 43)]
    events.dispatch("up", (197, 43.4))


def test_release_anywhere_ends_drag(store, events, editor) -> None:
    editor.press_waypoint("line", 0)
    events.dispatch("up", (900, 900))
    assert editor.state is EditorState.IDLE
    assert store.get_edge("line").waypoints == [Point(100, 0)]
    events.dispatch("move", (50, 50))
    assert store.get_edge("line").waypoints == [Point(100, 0)]


# ---- Bending the edge body ----
def test_press_edge_body_requires_selection(store, editor) -> None:
    assert not editor.press_edge_body("line", (50, 2), selected=False)
    assert store.snapshots == 0
    assert editor.state is EditorState.IDLE


def test_press_edge_body_inserts_and_drags(store, events, editor) -> None:
    assert editor.press_edge_body("line", (50, 2), selected=True)
    assert store.get_edge("line").waypoints == [Point(50, 0), Point(100, 0)]
    assert editor.state is EditorState.DRAGGING_NEW_FROM_LINE
    assert editor.drag_index == 0

    events.dispatch("move", (60, 30))
    events.dispatch("up", (60, 30))
    assert store.get_edge("line").waypoints == [Point(60, 30), Point(100, 0)]
    assert store.snapshots == 1

    store.undo()
    assert store.get_edge("line").waypoints == [Point(100, 0)]


def test_press_routes_segment_hits_to_edge_body(store, events, editor) -> None:
    assert editor.press("line", (150, 48), selected=True)
    assert editor.state is EditorState.DRAGGING_NEW_FROM_LINE
    assert store.get_edge("line").waypoints == [Point(100, 0), Point(150, 48)]
    events.dispatch("up", (150, 48))


def test_press_on_endpoint_or_nothing(store, editor) -> None:
    assert not editor.press("line", (0, 0), selected=True)
    assert not editor.press("line", (500, 500), selected=True)
    assert store.snapshots == 0


# ---- Single-step edits ----
def test_double_click_removes_waypoint(store, editor) -> None:
    assert editor.double_click_waypoint("line", 0)
    assert store.get_edge("line").waypoints == []
    assert store.snapshots == 1


def test_click_insert_at_midpoint(store, editor) -> None:
    assert editor.click_insert("line", 1)
    assert store.get_edge("line").waypoints == [Point(100, 0), Point(150, 50)]
    assert editor.state is EditorState.IDLE


# ---- Default corners of orthogonal edges ----
def test_first_edit_materializes_default_corners(store, editor, notices) -> None:
    assert store.get_edge("step").waypoints == []
    editor.click_insert("step", 1)
    assert store.get_edge("step").waypoints == [Point(50, 0), Point(50, 50), Point(50, 100)]
    assert store.snapshots == 1
    assert store.writes == [("step", False)]
    assert "materialized_defaults" in _notice_types(notices)

    store.undo()
    assert store.get_edge("step").waypoints == []


def test_drag_default_corner(store, events, editor) -> None:
    assert editor.press("step", (50, 1), selected=True)
    assert editor.state is EditorState.DRAGGING_WAYPOINT
    events.dispatch("move", (70, 3))
    events.dispatch("up", (70, 3))
    assert store.get_edge("step").waypoints == [Point(70, 0), Point(50, 100)]
    assert store.snapshots == 1


# ---- Context menu ----
def test_edge_menu_add_waypoint(store, editor) -> None:
    menu = editor.open_context_menu("line", (150, 48))
    assert editor.state is EditorState.CONTEXT_MENU_OPEN
    assert menu.is_enabled(MenuAction.ADD_WAYPOINT)
    assert menu.is_enabled(MenuAction.CLEAR_WAYPOINTS)
    assert not menu.is_enabled(MenuAction.REMOVE_WAYPOINT)

    assert editor.choose(MenuAction.ADD_WAYPOINT)
    assert store.get_edge("line").waypoints == [Point(100, 0), Point(150, 48)]
    assert editor.state is EditorState.IDLE


def test_edge_menu_clear(store, editor) -> None:
    editor.open_context_menu("line", (50, 0))
    assert editor.choose(MenuAction.CLEAR_WAYPOINTS)
    assert store.get_edge("line").waypoints == []
    assert store.dirty_edge_ids == {"line"}
    assert store.snapshots == 1


def test_clear_disabled_without_waypoints(store, editor, notices) -> None:
    menu = editor.open_context_menu("step", (50, 0))
    assert not menu.is_enabled(MenuAction.CLEAR_WAYPOINTS)
    assert not editor.choose(MenuAction.CLEAR_WAYPOINTS)
    assert store.snapshots == 0
    assert "ignored_event" in _notice_types(notices)

    editor.close_context_menu()
    assert editor.state is EditorState.IDLE


def test_waypoint_menu_remove(store, editor) -> None:
    menu = editor.open_context_menu("line", (100, 0), waypoint_index=0)
    assert menu.is_enabled(MenuAction.REMOVE_WAYPOINT)
    assert not menu.is_enabled(MenuAction.ADD_WAYPOINT)
    assert editor.choose(MenuAction.REMOVE_WAYPOINT)
    assert store.get_edge("line").waypoints == []


# ---- Ignored events and transforms ----
def test_events_outside_their_state_are_ignored(store, editor, notices) -> None:
    assert not editor.choose(MenuAction.ADD_WAYPOINT)

    editor.press_waypoint("line", 0)
    assert not editor.click_insert("line", 0)
    assert not editor.double_click_waypoint("line", 0)

    ignored = [n for n in notices.get_notices() if n.notice_type == "ignored_event"]
    assert [n.details["state"] for n in ignored] == ["idle", "dragging_waypoint", "dragging_waypoint"]
    assert store.get_edge("line").waypoints == [Point(100, 0)]


def test_screen_to_diagram_transform(store, events, notices) -> None:
    editor = WaypointEditor(store, events, to_diagram=lambda p: (p[0] / 2, p[1] / 2), logger=notices)
    assert editor.press("line", (200, 0), selected=True)
    events.dispatch("move", (240, 80))
    events.dispatch("up", (240, 80))
    assert store.get_edge("line").waypoints == [Point(120, 40)]


# ---- Bend handles ----
@pytest.fixture
def bent_step(store) -> list:
    store.set_waypoints("step", [(40, 30)])
    store.writes.clear()
    return get_handles(store.get_edge("step")).bends


def test_drag_bend_moves_owner_x(store, events, editor, bent_step) -> None:
    assert editor.press_bend("step", bent_step[0])
    assert editor.state is EditorState.DRAGGING_BEND
    events.dispatch("move", (60, 5))
    assert store.get_edge("step").waypoints == [Point(60, 30)]
    events.dispatch("up", (60, 5))
    assert store.writes == [("step", False), ("step", True)]
    assert store.snapshots == 1
    assert editor.state is EditorState.IDLE

    store.undo()
    assert store.get_edge("step").waypoints == [Point(40, 30)]


def test_drag_bend_moves_owner_y(store, events, editor, bent_step) -> None:
    editor.press_bend("step", bent_step[1])
    events.dispatch("move", (97, 55))
    events.dispatch("up", (97, 55))
    assert store.get_edge("step").waypoints == [Point(40, 55)]


def test_remove_bend_owner(store, editor, bent_step) -> None:
    assert editor.double_click_waypoint("step", bent_step[1].waypoint_index)
    assert store.get_edge("step").waypoints == []


def test_commit_is_logged(store, events, editor, caplog) -> None:
    with caplog.at_level(logging.DEBUG, logger="edgeplot"):
        editor.press_waypoint("line", 0)
        events.dispatch("up", (100, 0))
    assert "committed 1 waypoints" in caplog.text


# ---- Index checks ----
def test_bad_index_opens_no_snapshot(store, editor) -> None:
    with pytest.raises(IndexError):
        editor.press_waypoint("line", 5)
    with pytest.raises(IndexError):
        editor.double_click_waypoint("line", 1)
    assert store.snapshots == 0
    assert not store.can_undo()
    assert editor.state is EditorState.IDLE


def test_bad_index_leaves_default_corners_implicit(store, editor) -> None:
    with pytest.raises(IndexError):
        editor.press_waypoint("step", 2)
    assert store.get_edge("step").waypoints == []
    assert editor.press_waypoint("step", 1)
    assert store.get_edge("step").waypoints == [Point(50, 0), Point(50, 100)]
