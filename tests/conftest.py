"""Shared fixtures: stores, event sources and a snapshot-counting store."""

import pytest

from edgeplot import DiagramStore, NodeBox, PointerEventSource
from edgeplot.logger import RoutingLogger


class CountingStore(DiagramStore):
    """DiagramStore that counts undo boundaries."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.snapshots = 0
        self.writes: list[tuple[str, bool]] = []

    def open_undo_snapshot(self) -> None:
        self.snapshots += 1
        super().open_undo_snapshot()

    def set_waypoints(self, edge_id, points, is_final=True) -> None:
        self.writes.append((edge_id, is_final))
        super().set_waypoints(edge_id, points, is_final)


@pytest.fixture
def store() -> CountingStore:
    """Two nodes joined by a straight edge with one waypoint and an orthogonal edge without."""
    s = CountingStore()
    s.add_node(NodeBox("a", -100, -25, 100, 50))
    s.add_node(NodeBox("b", 200, 75, 100, 50))
    s.add_edge("line", "a", "b", path_style="straight",
               source_anchor=(0, 0), target_anchor=(200, 100), waypoints=[(100, 0)])
    s.add_edge("step", "a", "b", path_style="orthogonal",
               source_anchor=(0, 0), target_anchor=(100, 100))
    return s


@pytest.fixture
def events() -> PointerEventSource:
    return PointerEventSource()


@pytest.fixture
def notices() -> RoutingLogger:
    """A private logger so tests can inspect notices."""
    return RoutingLogger()
