"""Positioned graph models produced by the layout engine."""

from dataclasses import dataclass


@dataclass(frozen=True)
class Position:
    """Top-left corner of a node box."""

    x: float
    y: float


@dataclass(frozen=True)
class LayoutSpacing:
    """Box size and separation constants for the layered layout."""

    node_width: float = 280.0
    node_height: float = 90.0
    node_sep: float = 50.0
    rank_sep: float = 80.0
    margin_x: float = 50.0
    margin_y: float = 50.0


@dataclass(frozen=True)
class GraphEdge:
    """A parent -> child edge."""

    source: str
    target: str

    @property
    def id(self) -> str:
        return f"{self.source}-{self.target}"


@dataclass(frozen=True)
class GraphNode:
    """A visible node ready to be drawn."""

    id: str
    label: str
    level: int
    position: Position
    collapsed: bool
    child_count: int
    highlighted: bool = False


@dataclass(frozen=True)
class VisibleGraph:
    """The nodes and edges currently rendered."""

    nodes: tuple[GraphNode, ...]
    edges: tuple[GraphEdge, ...]

    @property
    def node_ids(self) -> set[str]:
        return {n.id for n in self.nodes}


@dataclass(frozen=True)
class FitViewRequest:
    """Ask the renderer to animate the camera once the new node set is applied.

    node_ids is None to frame the whole visible graph.
    """

    padding: float
    duration_ms: int
    delay_ms: int
    node_ids: tuple[str, ...] | None = None
    min_zoom: float | None = None
    max_zoom: float | None = None
