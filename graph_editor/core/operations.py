"""Editor operations — graph, hierarchy, geometry and selection mutations.

:class:`EditorOperations` is the capability interface the command layer
calls. Every mutating method returns whatever its inverse needs to put
the graph back (removed elements, created ids, prior layouts).

:class:`GraphOperations` implements it over an in-memory :class:`Graph`.
"""

from __future__ import annotations

import copy
import logging
from typing import Iterable, Optional, Protocol

import numpy as np

from graph_editor.constants import (
    COLLAPSED_NODE_HEIGHT,
    COLLAPSED_NODE_WIDTH,
    COMPOUND_PADDING,
    FIT_PADDING,
)
from graph_editor.core.errors import DuplicateElementError, ElementNotFoundError
from graph_editor.models.graph import (
    EdgeData,
    Graph,
    NodeData,
    NodeLayout,
    Point2D,
    RemovedElements,
    Viewport,
    new_element_id,
)
from graph_editor.models.params import (
    CollapseResult,
    DeleteSelectedParams,
    ExpandResult,
    MoveNodeParams,
    NewEdge,
    NewNode,
)

logger = logging.getLogger(__name__)


class EditorOperations(Protocol):
    """Host editor capabilities used by ``CommandFactory``."""

    # Element mutation
    def add_node(self, new_node: NewNode) -> str: ...
    def remove_added_node(self, node_id: str) -> NewNode: ...
    def remove_nodes(self, node_ids: list[str]) -> RemovedElements: ...
    def add_edge(self, new_edge: NewEdge) -> str: ...
    def remove_added_edge(self, edge_id: str) -> NewEdge: ...
    def remove_edges(self, edge_ids: list[str]) -> RemovedElements: ...
    def restore_elements(self, removed: RemovedElements) -> list[str]: ...

    # Hierarchy mutation
    def expand_node(self, node_id: str) -> ExpandResult: ...
    def undo_expand_node(self, result: ExpandResult) -> str: ...
    def collapse_node(self, node_id: str) -> CollapseResult: ...
    def undo_collapse_node(self, result: CollapseResult) -> str: ...

    # Geometry mutation
    def apply_layout(self, layouts: dict[str, NodeLayout]) -> dict[str, NodeLayout]: ...
    def move_node_conditionally(self, params: MoveNodeParams) -> MoveNodeParams: ...
    def move_node_reversely(self, params: MoveNodeParams) -> MoveNodeParams: ...

    # Selection
    def delete_selected(self, params: DeleteSelectedParams) -> RemovedElements: ...
    def restore_selected(self, removed: RemovedElements) -> DeleteSelectedParams: ...
    def selected_elements(self) -> list[str]: ...


def _bounding_box(nodes: Iterable[NodeData]) -> Optional[tuple[np.ndarray, np.ndarray]]:
    """Return (min corner, max corner) enclosing *nodes*, or None if empty."""
    rows = [(n.position.x, n.position.y, n.width / 2.0, n.height / 2.0) for n in nodes]
    if not rows:
        return None
    arr = np.asarray(rows, dtype=float)
    centers, half = arr[:, :2], arr[:, 2:]
    return (centers - half).min(axis=0), (centers + half).max(axis=0)


class GraphOperations:
    """In-memory implementation of :class:`EditorOperations`.

    Args:
        graph: Graph to mutate in place.
        fit_padding: Viewport padding applied after layout changes [px].
        compound_padding: Gap between a compound node and its children [px].
    """

    def __init__(
        self,
        graph: Graph,
        fit_padding: float = FIT_PADDING,
        compound_padding: float = COMPOUND_PADDING,
    ) -> None:
        self._graph = graph
        self._fit_padding = fit_padding
        self._compound_padding = compound_padding

    @property
    def graph(self) -> Graph:
        return self._graph

    # ------------------------------------------------------------------
    # Element mutation
    # ------------------------------------------------------------------

    def add_node(self, new_node: NewNode) -> str:
        """Create a node; return its id."""
        node_id = new_node.node_id or new_element_id("node")
        if self._graph.has_element(node_id):
            raise DuplicateElementError(f"Element already exists: {node_id!r}")
        if new_node.parent is not None:
            self._graph.node(new_node.parent)
        self._graph.nodes[node_id] = NodeData(
            id=node_id,
            label=new_node.label,
            position=Point2D(new_node.x, new_node.y),
            width=new_node.width,
            height=new_node.height,
            parent=new_node.parent,
        )
        logger.debug("Added node %s at (%.1f, %.1f)", node_id, new_node.x, new_node.y)
        return node_id

    def remove_added_node(self, node_id: str) -> NewNode:
        """Remove a node created by ``add_node``; return how to re-create it."""
        node = self._graph.node(node_id)
        recreate = NewNode(
            label=node.label,
            x=node.position.x,
            y=node.position.y,
            width=node.width,
            height=node.height,
            parent=node.parent,
            node_id=node.id,
        )
        self._remove([node_id])
        return recreate

    def remove_nodes(self, node_ids: list[str]) -> RemovedElements:
        """Remove nodes with their descendants and incident edges."""
        return self._remove(node_ids)

    def add_edge(self, new_edge: NewEdge) -> str:
        """Create an edge; return its id."""
        self._graph.node(new_edge.source)
        self._graph.node(new_edge.target)
        edge_id = new_edge.edge_id or new_element_id("edge")
        if self._graph.has_element(edge_id):
            raise DuplicateElementError(f"Element already exists: {edge_id!r}")
        self._graph.edges[edge_id] = EdgeData(edge_id, new_edge.source, new_edge.target)
        logger.debug("Added edge %s (%s -> %s)", edge_id, new_edge.source, new_edge.target)
        return edge_id

    def remove_added_edge(self, edge_id: str) -> NewEdge:
        """Remove an edge created by ``add_edge``; return how to re-create it."""
        edge = self._graph.edge(edge_id)
        self._remove([edge_id])
        return NewEdge(edge.source, edge.target, edge_id=edge.id)

    def remove_edges(self, edge_ids: list[str]) -> RemovedElements:
        return self._remove(edge_ids)

    def restore_elements(self, removed: RemovedElements) -> list[str]:
        """Put previously removed elements back; return their ids.

        Raises:
            DuplicateElementError: If an id is already in use.
            ElementNotFoundError: If a parent or edge endpoint is missing.
        """
        node_ids = set(self._graph.nodes)
        for node in removed.nodes:
            if self._graph.has_element(node.id):
                raise DuplicateElementError(f"Element already exists: {node.id!r}")
            if node.parent is not None and node.parent not in node_ids:
                raise ElementNotFoundError(f"Node not found: {node.parent!r}")
            node_ids.add(node.id)
        for edge in removed.edges:
            if self._graph.has_element(edge.id):
                raise DuplicateElementError(f"Element already exists: {edge.id!r}")
            for end in (edge.source, edge.target):
                if end not in node_ids:
                    raise ElementNotFoundError(f"Node not found: {end!r}")

        for node in removed.nodes:
            self._graph.nodes[node.id] = copy.deepcopy(node)
        for edge in removed.edges:
            self._graph.edges[edge.id] = copy.deepcopy(edge)
        logger.debug(
            "Restored %d nodes, %d edges", len(removed.nodes), len(removed.edges),
        )
        return removed.element_ids

    def _remove(self, element_ids: Iterable[str]) -> RemovedElements:
        """Remove elements atomically; all ids are checked before any removal."""
        graph = self._graph
        nodes: dict[str, NodeData] = {}
        edges: dict[str, EdgeData] = {}
        for element_id in element_ids:
            if element_id in graph.nodes:
                nodes.setdefault(element_id, graph.nodes[element_id])
                for child in graph.descendants(element_id):
                    nodes.setdefault(child.id, child)
            elif element_id in graph.edges:
                edges.setdefault(element_id, graph.edges[element_id])
            else:
                raise ElementNotFoundError(f"Element not found: {element_id!r}")
        for edge in graph.incident_edges(set(nodes)):
            edges.setdefault(edge.id, edge)

        ordered_nodes = sorted(nodes.values(), key=self._depth)
        removed = RemovedElements(
            nodes=[copy.deepcopy(n) for n in ordered_nodes],
            edges=[copy.deepcopy(e) for e in edges.values()],
        )
        for edge_id in edges:
            del graph.edges[edge_id]
        for node_id in nodes:
            del graph.nodes[node_id]
        logger.debug("Removed %d nodes, %d edges", len(nodes), len(edges))
        return removed

    def _depth(self, node: NodeData) -> int:
        depth = 0
        while node.parent is not None and node.parent in self._graph.nodes:
            node = self._graph.nodes[node.parent]
            depth += 1
        return depth

    # ------------------------------------------------------------------
    # Hierarchy mutation
    # ------------------------------------------------------------------

    def expand_node(self, node_id: str) -> ExpandResult:
        """Show a collapsed node's children and resize it to enclose them."""
        node = self._graph.node(node_id)
        if not node.collapsed:
            return ExpandResult(node_id=node_id, changed=False)
        result = ExpandResult(
            node_id=node_id,
            layouts=self._graph.snapshot_layouts(),
            expanded_layout=node.expanded_layout,
        )
        self._unstash(node)
        node.expanded_layout = None
        self._fit_compound(node)
        self.fit()
        return result

    def undo_expand_node(self, result: ExpandResult) -> str:
        """Restore the layout saved by the expand, then collapse again."""
        if not result.changed:
            return result.node_id
        self.apply_layout(result.layouts)
        node = self._graph.node(self.collapse_node(result.node_id).node_id)
        node.expanded_layout = result.expanded_layout
        # Collapsed size as it was before the expand, not the default
        saved = result.layouts.get(node.id)
        if saved is not None:
            node.apply_layout(saved)
        self.fit()
        return node.id

    def collapse_node(self, node_id: str) -> CollapseResult:
        """Hide a compound node's descendants and shrink it."""
        node = self._graph.node(node_id)
        if node.collapsed:
            return CollapseResult(node_id, changed=False)
        descendants = list(self._graph.descendants(node_id))
        stashed = self._remove([d.id for d in self._graph.children(node_id)])
        node.collapsed = True
        node.collapsed_elements = stashed
        node.expanded_layout = node.layout
        if descendants:
            node.width = COLLAPSED_NODE_WIDTH
            node.height = COLLAPSED_NODE_HEIGHT
        logger.debug("Collapsed %s (%d descendants)", node_id, len(descendants))
        return CollapseResult(node_id)

    def undo_collapse_node(self, result: CollapseResult) -> str:
        if result.changed:
            self.simple_expand_node(result.node_id)
        return result.node_id

    def simple_expand_node(self, node_id: str) -> str:
        """Expand without any layout: children and node size come back as stashed."""
        node = self._graph.node(node_id)
        if node.collapsed:
            self._unstash(node)
            if node.expanded_layout is not None:
                node.apply_layout(node.expanded_layout)
                node.expanded_layout = None
        return node_id

    def _unstash(self, node: NodeData) -> None:
        stashed = node.collapsed_elements or RemovedElements()
        # Crossing edges whose outside endpoint was deleted meanwhile are dropped
        present = set(self._graph.nodes) | {n.id for n in stashed.nodes}
        kept = [e for e in stashed.edges if e.source in present and e.target in present]
        if len(kept) != len(stashed.edges):
            logger.debug(
                "Dropping %d dangling edges of %s", len(stashed.edges) - len(kept), node.id,
            )
        node.collapsed = False
        node.collapsed_elements = None
        self.restore_elements(RemovedElements(stashed.nodes, kept))
        logger.debug("Expanded %s", node.id)

    def _fit_compound(self, node: NodeData) -> None:
        box = _bounding_box(self._graph.children(node.id))
        if box is None:
            return
        lo, hi = box
        center = (lo + hi) / 2.0
        size = hi - lo + 2.0 * self._compound_padding
        node.position = Point2D(float(center[0]), float(center[1]))
        node.width = float(size[0])
        node.height = float(size[1])

    # ------------------------------------------------------------------
    # Geometry mutation
    # ------------------------------------------------------------------

    def apply_layout(self, layouts: dict[str, NodeLayout]) -> dict[str, NodeLayout]:
        """Apply node positions/sizes and fit; return the replaced ones.

        Nodes absent from *layouts* keep their current geometry.
        """
        previous = self._graph.snapshot_layouts()
        for node_id, node in self._graph.nodes.items():
            layout = layouts.get(node_id)
            if layout is not None:
                node.apply_layout(layout)
        self.fit()
        return previous

    def move_node(self, node_id: str, position_diff: Point2D) -> None:
        """Offset a node and all of its descendants."""
        node = self._graph.node(node_id)
        self._shift(node, position_diff)
        for child in self._graph.children(node_id):
            self.move_node(child.id, position_diff)

    def _shift(self, node: NodeData, diff: Point2D) -> None:
        node.position = Point2D(node.position.x + diff.x, node.position.y + diff.y)
        if node.expanded_layout is not None:
            lay = node.expanded_layout
            node.expanded_layout = NodeLayout(lay.x + diff.x, lay.y + diff.y, lay.width, lay.height)
        if node.collapsed_elements is not None:
            for hidden in node.collapsed_elements.nodes:
                self._shift(hidden, diff)

    def move_node_conditionally(self, params: MoveNodeParams) -> MoveNodeParams:
        """Move unless the canvas already did (``params.move`` False)."""
        if params.move:
            self.move_node(params.node_id, params.position_diff)
        return params

    def move_node_reversely(self, params: MoveNodeParams) -> MoveNodeParams:
        """Move back by the recorded offset; the redo payload always moves."""
        self.move_node(params.node_id, -params.position_diff)
        return MoveNodeParams(params.node_id, params.position_diff, move=True)

    def fit(self, padding: Optional[float] = None) -> Viewport:
        """Fit the viewport around all nodes."""
        if padding is None:
            padding = self._fit_padding
        box = _bounding_box(self._graph.nodes.values())
        if box is None:
            self._graph.viewport = Viewport()
        else:
            lo, hi = box[0] - padding, box[1] + padding
            self._graph.viewport = Viewport(
                x=float(lo[0]),
                y=float(lo[1]),
                width=float(hi[0] - lo[0]),
                height=float(hi[1] - lo[1]),
            )
        return self._graph.viewport

    # ------------------------------------------------------------------
    # Selection
    # ------------------------------------------------------------------

    def selected_elements(self) -> list[str]:
        """Ids of selected nodes, then selected edges."""
        return (
            [n.id for n in self._graph.nodes.values() if n.selected]
            + [e.id for e in self._graph.edges.values() if e.selected]
        )

    def select(self, element_ids: Iterable[str], *, additive: bool = False) -> None:
        ids = set(element_ids)
        for element_id in ids:
            if not self._graph.has_element(element_id):
                raise ElementNotFoundError(f"Element not found: {element_id!r}")
        for element in [*self._graph.nodes.values(), *self._graph.edges.values()]:
            if element.id in ids:
                element.selected = True
            elif not additive:
                element.selected = False

    def clear_selection(self) -> None:
        self.select([])

    def delete_selected(self, params: DeleteSelectedParams) -> RemovedElements:
        """Remove the live selection (first time) or the recorded ids."""
        if params.first_time:
            return self._remove(self.selected_elements())
        return self._remove(params.element_ids)

    def restore_selected(self, removed: RemovedElements) -> DeleteSelectedParams:
        """Restore deleted elements; redo will delete exactly these ids."""
        restored = self.restore_elements(removed)
        return DeleteSelectedParams(first_time=False, element_ids=restored)
