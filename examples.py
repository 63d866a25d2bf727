"""Showcase examples for edgeplot README."""

from edgeplot import (
    DiagramStore,
    NodeBox,
    PointerEventSource,
    SnapConfig,
    WaypointEditor,
    get_handles,
    render_to_svg,
)


def styles_example():
    """All four path styles between the same kind of node pair."""
    store = DiagramStore()
    for row, style in enumerate(("straight", "curved", "orthogonal", "rounded_orthogonal")):
        y = row * 160
        store.add_node(NodeBox(f"{style} src", 0, y, 160, 60))
        store.add_node(NodeBox(f"{style} dst", 420, y + 80, 160, 60))
        store.add_edge(style, f"{style} src", f"{style} dst", path_style=style,
                       waypoints=[(300, y + 10)] if style in ("straight", "curved") else ())

    render_to_svg(store, filename="docs/styles", show_handles_for=[e.id for e in store.edges()])


def editing_example():
    """Bend an orthogonal edge by dragging, then undo and redo."""
    store = DiagramStore(snap=SnapConfig(enabled=True, grid_size=20))
    store.add_node(NodeBox("API", 0, 0, 160, 60))
    store.add_node(NodeBox("Database", 420, 240, 160, 60))
    edge = store.add_edge("api-db", "API", "Database", path_style="rounded_orthogonal")

    events = PointerEventSource()
    editor = WaypointEditor(store, events)

    # Drag the first default corner to the right
    corner = get_handles(edge, store.snap.active_grid).waypoints[0]
    editor.press(edge.id, corner, selected=True)
    events.dispatch("move", (330, 30))
    events.dispatch("up", (330, 30))
    render_to_svg(store, filename="docs/edited", show_handles_for=[edge.id])

    store.undo()
    render_to_svg(store, filename="docs/undone")
    store.redo()


if __name__ == "__main__":
    import os

    os.makedirs("docs", exist_ok=True)

    print("Generating path styles example...")
    styles_example()

    print("Generating editing example...")
    editing_example()

    print("\nAll examples generated in docs/")
