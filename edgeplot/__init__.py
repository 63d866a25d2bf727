"""edgeplot - Edge routing and waypoint editing for diagram editors.

Example usage:
    from edgeplot import DiagramStore, NodeBox, PointerEventSource, WaypointEditor

    store = DiagramStore()
    store.add_node(NodeBox("api", 0, 0))
    store.add_node(NodeBox("db", 400, 200))
    store.add_edge("e1", "api", "db", path_style="orthogonal")

    events = PointerEventSource()
    editor = WaypointEditor(store, events)
    editor.press("e1", (300, 35), selected=True)
    events.dispatch("move", (300, 120))
    events.dispatch("up", (300, 120))
"""

from .config import (
    RoutingConfig,
    SnapConfig,
)
from .editor import (
    ContextMenu,
    EditorState,
    MenuAction,
    PointerEventSource,
    WaypointEditor,
)
from .hittest import (
    HitKind,
    HitResult,
    dist_to_segment,
    find_nearest_segment,
    get_orthogonal_polyline_segments,
    hit_test,
    orthogonal_bends,
)
from .models import (
    BendHandle,
    DefaultRoute,
    Edge,
    ExplicitRoute,
    NodeBox,
    PathStyle,
    Point,
    PolylineSegment,
)
from .normalize import (
    merge_tiny_segments,
    normalize,
    remove_colinear,
)
from .renderer import (
    DEFAULT_THEME,
    DiagramRenderer,
    Theme,
    build_path_commands,
    commands_to_svg,
    get_handles,
    render_to_svg,
)
from .routing import (
    minimal_orthogonal_route,
    route_orthogonal,
    simplify_orthogonal_polyline,
)
from .snapping import (
    resolve_snapped_point,
    snap_to_grid,
)
from .store import (
    DiagramStore,
    UnknownElementError,
)

__version__ = "0.1.0"

__all__ = [
    # Models
    "Point",
    "Edge",
    "NodeBox",
    "PathStyle",
    "PolylineSegment",
    "DefaultRoute",
    "ExplicitRoute",
    "BendHandle",
    # Configuration
    "RoutingConfig",
    "SnapConfig",
    # Geometry
    "normalize",
    "remove_colinear",
    "merge_tiny_segments",
    "route_orthogonal",
    "minimal_orthogonal_route",
    "simplify_orthogonal_polyline",
    "resolve_snapped_point",
    "snap_to_grid",
    # Hit testing
    "hit_test",
    "HitKind",
    "HitResult",
    "dist_to_segment",
    "find_nearest_segment",
    "get_orthogonal_polyline_segments",
    "orthogonal_bends",
    # Rendering
    "build_path_commands",
    "commands_to_svg",
    "get_handles",
    "render_to_svg",
    "DiagramRenderer",
    "Theme",
    "DEFAULT_THEME",
    # Editing
    "DiagramStore",
    "UnknownElementError",
    "WaypointEditor",
    "PointerEventSource",
    "EditorState",
    "MenuAction",
    "ContextMenu",
    # Version
    "__version__",
]
