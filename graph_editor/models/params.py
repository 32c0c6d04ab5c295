"""Command payloads.

Typed parameter objects passed between the forward and inverse actions
of a command. Layout mappings and id lists are passed as plain
``dict[str, NodeLayout]`` / ``list[str]``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from graph_editor.constants import DEFAULT_NODE_HEIGHT, DEFAULT_NODE_WIDTH
from graph_editor.models.graph import NodeLayout, Point2D


@dataclass
class NewNode:
    """Request to create a node.

    Attributes:
        label: Display text.
        x: Center x [px].
        y: Center y [px].
        width: Node width [px].
        height: Node height [px].
        parent: Enclosing compound node id.
        node_id: Explicit id; None = generate one. Set when a removed
                 node is re-created on redo.
    """
    label: str = ""
    x: float = 0.0
    y: float = 0.0
    width: float = DEFAULT_NODE_WIDTH
    height: float = DEFAULT_NODE_HEIGHT
    parent: Optional[str] = None
    node_id: Optional[str] = None


@dataclass
class NewEdge:
    """Request to create an edge from *source* to *target*."""
    source: str
    target: str
    edge_id: Optional[str] = None


@dataclass
class ExpandResult:
    """Returned by an expand: the node and every node's layout before it.

    ``expanded_layout`` is the node's remembered pre-collapse layout,
    put back when the expand is undone. ``changed`` is False when the
    node was already expanded and the undo has nothing to reverse.
    """
    node_id: str
    layouts: dict[str, NodeLayout] = field(default_factory=dict)
    expanded_layout: Optional[NodeLayout] = None
    changed: bool = True


@dataclass
class CollapseResult:
    """Returned by a collapse; ``changed`` False if already collapsed."""
    node_id: str
    changed: bool = True


@dataclass
class MoveNodeParams:
    """Reposition payload.

    Attributes:
        node_id: Node to move (its descendants follow).
        position_diff: Offset to apply [px].
        move: False when the canvas has already moved the node (drag end)
              and the forward action only needs to record it.
    """
    node_id: str
    position_diff: Point2D
    move: bool = True


@dataclass
class DeleteSelectedParams:
    """Delete-selected payload.

    ``first_time=True`` removes whatever is selected when the command
    runs. After an undo the payload is rewritten to ``first_time=False``
    with the exact ids that were removed.
    """
    first_time: bool = True
    element_ids: list[str] = field(default_factory=list)
