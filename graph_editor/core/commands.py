"""Commands — forward/inverse action pairs for the history controller.

A command pairs a forward action with its inverse and carries two
payload slots:

- ``params``: what the forward action is called with. The controller
  replaces it with the inverse's return value after an undo (when that
  value is not None), so a redo replays the edit as it was undone.
- ``undo_params``: what the forward action returned the last time it
  ran. The inverse is called with it.

Actions are opaque to the controller. New edit types only need a new
forward/inverse pair::

    cmd = Command(ops.add_node, ops.remove_added_node, NewNode("A"))
    history.execute(cmd)

Editor edits are built through :class:`CommandFactory`, which resolves
each :class:`CommandKind` to a method pair on the injected operations.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Callable, Optional

from graph_editor.models.graph import NodeLayout
from graph_editor.models.params import (
    DeleteSelectedParams,
    MoveNodeParams,
    NewEdge,
    NewNode,
)

if TYPE_CHECKING:
    from graph_editor.core.operations import EditorOperations


class CommandKind(Enum):
    ADD_NODE = "add_node"
    REMOVE_NODES = "remove_nodes"
    ADD_EDGE = "add_edge"
    REMOVE_EDGES = "remove_edges"
    EXPAND_NODE = "expand_node"
    COLLAPSE_NODE = "collapse_node"
    PERFORM_LAYOUT = "perform_layout"
    MOVE_NODE = "move_node"
    DELETE_SELECTED = "delete_selected"
    CUSTOM = "custom"


@dataclass(eq=False)
class Command:
    """One undoable edit.

    Attributes:
        forward: ``(params) -> undo_params``; performs the edit.
        inverse: ``(undo_params) -> new params | None``; reverses it.
        params: Current payload for *forward*.
        kind: Edit type tag.
        label: Human-readable name (menu text, log lines).
        undo_params: Payload for *inverse*; set on every forward run.
        executed: False until the forward action first succeeds; later
                  forward runs are logged as redos.
    """
    forward: Callable[[Any], Any]
    inverse: Callable[[Any], Any]
    params: Any = None
    kind: CommandKind = CommandKind.CUSTOM
    label: str = ""
    undo_params: Any = field(default=None, init=False)
    executed: bool = field(default=False, init=False)

    @property
    def description(self) -> str:
        return self.label or self.kind.value


# Kind -> (forward method, inverse method) on EditorOperations
_ACTIONS: dict[CommandKind, tuple[str, str]] = {
    CommandKind.ADD_NODE: ("add_node", "remove_added_node"),
    CommandKind.REMOVE_NODES: ("remove_nodes", "restore_elements"),
    CommandKind.ADD_EDGE: ("add_edge", "remove_added_edge"),
    CommandKind.REMOVE_EDGES: ("remove_edges", "restore_elements"),
    CommandKind.EXPAND_NODE: ("expand_node", "undo_expand_node"),
    CommandKind.COLLAPSE_NODE: ("collapse_node", "undo_collapse_node"),
    CommandKind.PERFORM_LAYOUT: ("apply_layout", "apply_layout"),
    CommandKind.MOVE_NODE: ("move_node_conditionally", "move_node_reversely"),
    CommandKind.DELETE_SELECTED: ("delete_selected", "restore_selected"),
}

_LABELS: dict[CommandKind, str] = {
    CommandKind.ADD_NODE: "Add Node",
    CommandKind.REMOVE_NODES: "Remove Nodes",
    CommandKind.ADD_EDGE: "Add Edge",
    CommandKind.REMOVE_EDGES: "Remove Edges",
    CommandKind.EXPAND_NODE: "Expand",
    CommandKind.COLLAPSE_NODE: "Collapse",
    CommandKind.PERFORM_LAYOUT: "Layout",
    CommandKind.MOVE_NODE: "Move Node",
    CommandKind.DELETE_SELECTED: "Delete Selected",
}


class CommandFactory:
    """Builds editor commands bound to one set of editor operations.

    Actions are looked up by name and not validated here: a missing or
    non-callable action surfaces as ``InvalidCommandError`` when the
    command is executed.

    Args:
        operations: Host editor capabilities (see ``EditorOperations``).
    """

    def __init__(self, operations: EditorOperations) -> None:
        self._operations = operations

    @property
    def operations(self) -> EditorOperations:
        return self._operations

    def create(self, kind: CommandKind, params: Any) -> Command:
        """Build a command of *kind* with *params* as its forward payload.

        Raises:
            KeyError: If *kind* has no registered action pair (CUSTOM).
        """
        forward_name, inverse_name = _ACTIONS[kind]
        return Command(
            forward=getattr(self._operations, forward_name, None),
            inverse=getattr(self._operations, inverse_name, None),
            params=params,
            kind=kind,
            label=_LABELS[kind],
        )

    def add_node(self, new_node: NewNode) -> Command:
        return self.create(CommandKind.ADD_NODE, new_node)

    def remove_nodes(self, node_ids: list[str]) -> Command:
        return self.create(CommandKind.REMOVE_NODES, list(node_ids))

    def add_edge(self, new_edge: NewEdge) -> Command:
        return self.create(CommandKind.ADD_EDGE, new_edge)

    def remove_edges(self, edge_ids: list[str]) -> Command:
        return self.create(CommandKind.REMOVE_EDGES, list(edge_ids))

    def expand_node(self, node_id: str) -> Command:
        return self.create(CommandKind.EXPAND_NODE, node_id)

    def collapse_node(self, node_id: str) -> Command:
        return self.create(CommandKind.COLLAPSE_NODE, node_id)

    def perform_layout(self, layouts: dict[str, NodeLayout]) -> Command:
        return self.create(CommandKind.PERFORM_LAYOUT, dict(layouts))

    def move_node(self, params: MoveNodeParams) -> Command:
        return self.create(CommandKind.MOVE_NODE, params)

    def delete_selected(
        self, params: Optional[DeleteSelectedParams] = None,
    ) -> Command:
        """Delete the live selection (or the ids in *params* if not first time)."""
        if params is None:
            params = DeleteSelectedParams(first_time=True)
        return self.create(CommandKind.DELETE_SELECTED, params)
