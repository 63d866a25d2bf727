"""In-memory diagram store with waypoint mutations and undo/redo.

Nodes and edges live in a NetworkX multigraph so several edges may join the
same pair of nodes. Undo snapshots capture every edge's waypoint list; the
caller decides where an undoable action begins by calling
:meth:`DiagramStore.open_undo_snapshot`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import networkx as nx

from .config import RoutingConfig, SnapConfig
from .models import Edge, NodeBox, PathStyle, Point
from .routing import route_orthogonal, simplify_orthogonal_polyline
from .snapping import anchor_for

if TYPE_CHECKING:
    from collections.abc import Iterator, Sequence


class UnknownElementError(KeyError):
    """Raised for a node or edge id the store does not hold."""


@dataclass
class HistorySnapshot:
    """Waypoints of every edge at one point in time."""

    waypoints: dict[str, list[Point]] = field(default_factory=dict)


class DiagramStore:
    """Holds nodes, edges and their waypoints for the editor."""

    def __init__(
        self,
        config: RoutingConfig | None = None,
        snap: SnapConfig | None = None,
    ):
        self.config = config or RoutingConfig()
        self.snap = snap or SnapConfig()
        self.graph: nx.MultiDiGraph = nx.MultiDiGraph()
        self._edge_ends: dict[str, tuple[str, str]] = {}
        self._past: list[HistorySnapshot] = []
        self._future: list[HistorySnapshot] = []
        self.dirty_edge_ids: set[str] = set()

    # ---- Nodes ----

    def add_node(self, box: NodeBox) -> NodeBox:
        self.graph.add_node(box.id, box=box)
        return box

    def get_node(self, node_id: str) -> NodeBox:
        if node_id not in self.graph:
            raise UnknownElementError(node_id)
        return self.graph.nodes[node_id]["box"]

    def nodes(self) -> list[NodeBox]:
        return [data["box"] for _, data in self.graph.nodes(data=True)]

    def remove_node(self, node_id: str) -> None:
        """Remove a node and every edge attached to it."""
        if node_id not in self.graph:
            raise UnknownElementError(node_id)
        attached = [
            key for u, v, key in self.graph.edges(keys=True)
            if node_id in (u, v)
        ]
        for edge_id in attached:
            self.remove_edge(edge_id)
        self.graph.remove_node(node_id)

    def move_node(self, node_id: str, x: float, y: float) -> None:
        """Move a node and re-anchor its auto-anchored edges."""
        box = self.get_node(node_id)
        box.x, box.y = x, y
        for edge in self._incident_edges(node_id):
            if self.graph.edges[edge.source, edge.target, edge.id].get("auto_anchor"):
                self._assign_anchors(edge)

    def neighbors(self, node_id: str) -> list[str]:
        """Nodes joined to node_id by an edge in either direction."""
        if node_id not in self.graph:
            raise UnknownElementError(node_id)
        return sorted(set(self.graph.successors(node_id)) | set(self.graph.predecessors(node_id)))

    def connected_subgraph(self, node_id: str) -> tuple[set[str], set[str]]:
        """Node ids and edge ids reachable from node_id ignoring direction."""
        if node_id not in self.graph:
            raise UnknownElementError(node_id)
        node_ids = nx.node_connected_component(self.graph.to_undirected(as_view=True), node_id)
        edge_ids = {
            key for u, v, key in self.graph.edges(keys=True)
            if u in node_ids and v in node_ids
        }
        return set(node_ids), edge_ids

    # ---- Edges ----

    def add_edge(
        self,
        edge_id: str,
        source: str,
        target: str,
        path_style: PathStyle | str = PathStyle.CURVED,
        source_anchor: tuple[float, float] | None = None,
        target_anchor: tuple[float, float] | None = None,
        waypoints: Sequence[tuple[float, float]] = (),
        stroke_width: float = 1.5,
        animated: bool = False,
    ) -> Edge:
        """Connect two nodes.

        Anchors not given are placed on the facing sides of the node boxes
        and follow the nodes when they move.
        """
        if edge_id in self._edge_ends:
            raise ValueError(f"Duplicate edge id: {edge_id}")
        src_box = self.get_node(source)
        tgt_box = self.get_node(target)
        auto_anchor = source_anchor is None and target_anchor is None
        edge = Edge(
            id=edge_id,
            source=source,
            target=target,
            source_anchor=source_anchor or anchor_for(src_box, tgt_box),
            target_anchor=target_anchor or anchor_for(tgt_box, src_box),
            waypoints=list(waypoints),
            path_style=path_style,
            stroke_width=stroke_width,
            animated=animated,
        )
        self.graph.add_edge(source, target, key=edge_id, edge=edge, auto_anchor=auto_anchor)
        self._edge_ends[edge_id] = (source, target)
        return edge

    def get_edge(self, edge_id: str) -> Edge:
        try:
            source, target = self._edge_ends[edge_id]
        except KeyError:
            raise UnknownElementError(edge_id) from None
        return self.graph.edges[source, target, edge_id]["edge"]

    def edges(self) -> list[Edge]:
        return [data["edge"] for _, _, data in self.graph.edges(data=True)]

    def remove_edge(self, edge_id: str) -> None:
        """Delete an edge together with its waypoints."""
        edge = self.get_edge(edge_id)
        self.graph.remove_edge(edge.source, edge.target, key=edge_id)
        del self._edge_ends[edge_id]
        self.dirty_edge_ids.discard(edge_id)

    def _incident_edges(self, node_id: str) -> Iterator[Edge]:
        for _, _, data in self.graph.out_edges(node_id, data=True):
            yield data["edge"]
        for _, _, data in self.graph.in_edges(node_id, data=True):
            yield data["edge"]

    def _assign_anchors(self, edge: Edge) -> None:
        src_box = self.get_node(edge.source)
        tgt_box = self.get_node(edge.target)
        edge.source_anchor = anchor_for(src_box, tgt_box)
        edge.target_anchor = anchor_for(tgt_box, src_box)

    # ---- Waypoint mutations ----

    def set_waypoints(
        self,
        edge_id: str,
        points: Sequence[tuple[float, float]],
        is_final: bool = True,
    ) -> None:
        """Replace an edge's waypoints.

        Transient writes (``is_final=False``) happen during a drag and do not
        mark the edge as modified.
        """
        edge = self.get_edge(edge_id)
        edge.waypoints = [Point(*p) for p in points]
        if is_final:
            self.dirty_edge_ids.add(edge_id)

    def insert_waypoint(self, edge_id: str, insert_idx: int, point: tuple[float, float]) -> None:
        edge = self.get_edge(edge_id)
        if not 0 <= insert_idx <= len(edge.waypoints):
            raise IndexError(f"Insert index {insert_idx} out of range for edge {edge_id}")
        edge.waypoints.insert(insert_idx, Point(*point))
        self.dirty_edge_ids.add(edge_id)

    def remove_waypoint(self, edge_id: str, index: int) -> None:
        edge = self.get_edge(edge_id)
        if not 0 <= index < len(edge.waypoints):
            raise IndexError(f"Waypoint index {index} out of range for edge {edge_id}")
        del edge.waypoints[index]
        self.dirty_edge_ids.add(edge_id)

    def clear_waypoints(self, edge_id: str) -> None:
        self.set_waypoints(edge_id, [], is_final=True)

    def simplify_route(self, edge_id: str) -> list[Point]:
        """Tidy an orthogonal edge's waypoints with the store's routing config.

        Tiny segments are merged and the route is simplified; a route that
        stays too complex is replaced by the minimal one. Other styles and
        edges without waypoints are left as they are.

        Returns:
            The edge's waypoints afterwards
        """
        edge = self.get_edge(edge_id)
        if not edge.path_style.is_orthogonal or not edge.waypoints:
            return list(edge.waypoints)
        routed = route_orthogonal(
            edge.source_anchor,
            edge.target_anchor,
            edge.waypoints,
            min_segment_length=self.config.min_segment_length,
            grid_size=self.snap.active_grid,
        )
        simplified = simplify_orthogonal_polyline(
            routed,
            edge.source_anchor,
            edge.target_anchor,
            max_points=self.config.max_simplified_points,
            edge_id=edge_id,
        )
        self.set_waypoints(edge_id, simplified[1:-1], is_final=True)
        return list(edge.waypoints)

    def mark_clean(self) -> None:
        self.dirty_edge_ids.clear()

    # ---- Undo / redo ----

    def _snapshot(self) -> HistorySnapshot:
        return HistorySnapshot({e.id: list(e.waypoints) for e in self.edges()})

    def _restore(self, snapshot: HistorySnapshot) -> None:
        for edge in self.edges():
            if edge.id in snapshot.waypoints:
                edge.waypoints = list(snapshot.waypoints[edge.id])
                self.dirty_edge_ids.add(edge.id)

    def open_undo_snapshot(self) -> None:
        """Start an undoable action: remember the current state, drop redo."""
        self._past.append(self._snapshot())
        del self._past[:-self.config.history_limit]
        self._future.clear()

    def undo(self) -> bool:
        if not self._past:
            return False
        self._future.insert(0, self._snapshot())
        self._restore(self._past.pop())
        return True

    def redo(self) -> bool:
        if not self._future:
            return False
        self._past.append(self._snapshot())
        del self._past[:-self.config.history_limit]
        self._restore(self._future.pop(0))
        return True

    def can_undo(self) -> bool:
        return bool(self._past)

    def can_redo(self) -> bool:
        return bool(self._future)

    def clear_history(self) -> None:
        self._past.clear()
        self._future.clear()
