"""Graph data models for the compound-graph editor.

A graph is a set of nodes and edges. Nodes may be nested: a node whose
``parent`` is set is drawn inside that parent (a compound node). A
collapsed compound node stashes its descendants and their edges in
``collapsed_elements`` until it is expanded again.

All positions are node centers in canvas coordinates [px].
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, Optional
import uuid

from graph_editor.constants import DEFAULT_NODE_HEIGHT, DEFAULT_NODE_WIDTH
from graph_editor.core.errors import ElementNotFoundError


def new_element_id(prefix: str) -> str:
    """Return a fresh, unique element id such as ``node-3f2a91c4``."""
    return f"{prefix}-{uuid.uuid4().hex[:8]}"


@dataclass
class Point2D:
    """2D point or offset in canvas coordinates [px]."""
    x: float = 0.0
    y: float = 0.0

    def __neg__(self) -> Point2D:
        return Point2D(-self.x, -self.y)


@dataclass
class NodeLayout:
    """Position and size of a single node, as captured by layout snapshots."""
    x: float
    y: float
    width: float
    height: float


@dataclass
class NodeData:
    """Single graph node.

    Attributes:
        id: Unique node identifier.
        label: Display text.
        position: Center position [px].
        width: Node width [px].
        height: Node height [px].
        parent: Id of the enclosing compound node (None = top level).
        selected: Selection state on the canvas.
        collapsed: True when the node's children are stashed.
        collapsed_elements: Descendants and their edges while collapsed.
        expanded_layout: Layout before the last collapse (restored by a
                         simple expand).
    """
    id: str
    label: str = ""
    position: Point2D = field(default_factory=Point2D)
    width: float = DEFAULT_NODE_WIDTH
    height: float = DEFAULT_NODE_HEIGHT
    parent: Optional[str] = None
    selected: bool = False
    collapsed: bool = False
    collapsed_elements: Optional[RemovedElements] = None
    expanded_layout: Optional[NodeLayout] = None

    @property
    def layout(self) -> NodeLayout:
        return NodeLayout(self.position.x, self.position.y, self.width, self.height)

    def apply_layout(self, layout: NodeLayout) -> None:
        self.position = Point2D(layout.x, layout.y)
        self.width = layout.width
        self.height = layout.height


@dataclass
class EdgeData:
    """Directed edge between two nodes."""
    id: str
    source: str
    target: str
    selected: bool = False


@dataclass
class Viewport:
    """Visible canvas rectangle (top-left corner plus size) [px]."""
    x: float = 0.0
    y: float = 0.0
    width: float = 0.0
    height: float = 0.0


@dataclass
class RemovedElements:
    """Copies of nodes and edges taken out of a graph.

    Nodes are stored parents-first and edges after all nodes, so the
    elements can be restored in list order.
    """
    nodes: list[NodeData] = field(default_factory=list)
    edges: list[EdgeData] = field(default_factory=list)

    @property
    def element_ids(self) -> list[str]:
        return [n.id for n in self.nodes] + [e.id for e in self.edges]


@dataclass
class Graph:
    """Complete editor document: nodes, edges and the current viewport."""
    name: str = "Untitled"
    nodes: dict[str, NodeData] = field(default_factory=dict)
    edges: dict[str, EdgeData] = field(default_factory=dict)
    viewport: Viewport = field(default_factory=Viewport)

    @property
    def node_count(self) -> int:
        return len(self.nodes)

    @property
    def edge_count(self) -> int:
        return len(self.edges)

    def has_element(self, element_id: str) -> bool:
        return element_id in self.nodes or element_id in self.edges

    def node(self, node_id: str) -> NodeData:
        """Return a node by id.

        Raises:
            ElementNotFoundError: If *node_id* is not in the graph.
        """
        try:
            return self.nodes[node_id]
        except KeyError:
            raise ElementNotFoundError(f"Node not found: {node_id!r}")

    def edge(self, edge_id: str) -> EdgeData:
        """Return an edge by id.

        Raises:
            ElementNotFoundError: If *edge_id* is not in the graph.
        """
        try:
            return self.edges[edge_id]
        except KeyError:
            raise ElementNotFoundError(f"Edge not found: {edge_id!r}")

    def children(self, node_id: str) -> list[NodeData]:
        return [n for n in self.nodes.values() if n.parent == node_id]

    def descendants(self, node_id: str) -> Iterator[NodeData]:
        """Yield every descendant of *node_id*, parents before children."""
        for child in self.children(node_id):
            yield child
            yield from self.descendants(child.id)

    def incident_edges(self, node_ids: set[str]) -> list[EdgeData]:
        """Edges with at least one endpoint in *node_ids*."""
        return [
            e for e in self.edges.values()
            if e.source in node_ids or e.target in node_ids
        ]

    def snapshot_layouts(self) -> dict[str, NodeLayout]:
        """Position and size of every node, keyed by id."""
        return {node_id: n.layout for node_id, n in self.nodes.items()}
