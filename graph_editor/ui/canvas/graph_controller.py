"""Graph controller — central mediator between the graph document and UI.

Owns one editor session: the Graph, the operations bound to it, the
command factory and the history controller. Every undoable edit is
issued as a command through the history; Qt signals tell the canvas
and the menus to refresh.
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional

from PyQt6.QtCore import QObject, pyqtSignal

from graph_editor.constants import CLEAR_REDO_ON_EXECUTE, MAX_HISTORY_LEVELS
from graph_editor.core.commands import Command, CommandFactory
from graph_editor.core.history import HistoryController
from graph_editor.core.operations import GraphOperations
from graph_editor.core.serializers import dict_to_graph, graph_to_dict
from graph_editor.models.graph import Graph, NodeLayout, Point2D
from graph_editor.models.params import (
    DeleteSelectedParams,
    MoveNodeParams,
    NewEdge,
    NewNode,
)

logger = logging.getLogger(__name__)


class GraphController(QObject):
    """Editor session: graph document plus its undo/redo history.

    Args:
        graph: Initial document (default: empty graph).
        max_levels: Undo depth bound (None = unbounded).
        clear_redo_on_execute: Drop redo entries on every new edit.
    """

    # Full canvas rebuild needed
    graph_changed = pyqtSignal()
    selection_changed = pyqtSignal()
    # Undo/redo state changed (for menu enable/disable)
    undo_state_changed = pyqtSignal()

    def __init__(
        self,
        graph: Optional[Graph] = None,
        parent: QObject | None = None,
        *,
        max_levels: Optional[int] = MAX_HISTORY_LEVELS,
        clear_redo_on_execute: bool = CLEAR_REDO_ON_EXECUTE,
    ):
        super().__init__(parent)
        self._graph = graph if graph is not None else Graph()
        self._operations = GraphOperations(self._graph)
        self._commands = CommandFactory(self._operations)
        self._history = HistoryController(
            max_levels,
            clear_redo_on_execute=clear_redo_on_execute,
            on_change=self.undo_state_changed.emit,
        )

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def graph(self) -> Graph:
        """Current document (read-only reference)."""
        return self._graph

    @property
    def history(self) -> HistoryController:
        return self._history

    @property
    def commands(self) -> CommandFactory:
        return self._commands

    @property
    def selected_elements(self) -> list[str]:
        return self._operations.selected_elements()

    # ------------------------------------------------------------------
    # Document
    # ------------------------------------------------------------------

    def load_graph(self, graph: Graph | dict) -> None:
        """Replace the document and discard all history."""
        if isinstance(graph, dict):
            graph = dict_to_graph(graph)
        self._graph = graph
        self._operations = GraphOperations(graph)
        self._commands = CommandFactory(self._operations)
        self._history.reset()
        logger.info("Loaded graph %r (%d nodes)", graph.name, graph.node_count)
        self.graph_changed.emit()

    def to_dict(self) -> dict:
        return graph_to_dict(self._graph)

    # ------------------------------------------------------------------
    # Undo / Redo
    # ------------------------------------------------------------------

    @property
    def can_undo(self) -> bool:
        return self._history.can_undo

    @property
    def can_redo(self) -> bool:
        return self._history.can_redo

    @property
    def undo_text(self) -> str:
        """Menu label of the next undo, empty if none."""
        command = self._history.peek_undo()
        return command.description if command else ""

    @property
    def redo_text(self) -> str:
        command = self._history.peek_redo()
        return command.description if command else ""

    def execute(self, command: Command) -> None:
        """Run any command (including custom forward/inverse pairs)."""
        self._history.execute(command)
        self.graph_changed.emit()

    def undo(self) -> None:
        """Revert the most recent edit."""
        if not self._history.can_undo:
            return
        self._history.undo()
        self.graph_changed.emit()

    def redo(self) -> None:
        """Re-apply the most recently undone edit."""
        if not self._history.can_redo:
            return
        self._history.redo()
        self.graph_changed.emit()

    def clear_undo(self) -> None:
        """Clear undo/redo stacks (e.g. on new document load)."""
        self._history.reset()

    # ------------------------------------------------------------------
    # Edits
    # ------------------------------------------------------------------

    def add_node(
        self,
        label: str = "",
        x: float = 0.0,
        y: float = 0.0,
        *,
        parent: str | None = None,
        node_id: str | None = None,
        **size: float,
    ) -> str:
        """Add a node; return its id."""
        command = self._commands.add_node(
            NewNode(label=label, x=x, y=y, parent=parent, node_id=node_id, **size)
        )
        self.execute(command)
        return command.undo_params

    def remove_nodes(self, node_ids: Iterable[str]) -> None:
        self.execute(self._commands.remove_nodes(list(node_ids)))

    def add_edge(self, source: str, target: str, *, edge_id: str | None = None) -> str:
        """Connect *source* to *target*; return the edge id."""
        command = self._commands.add_edge(NewEdge(source, target, edge_id=edge_id))
        self.execute(command)
        return command.undo_params

    def remove_edges(self, edge_ids: Iterable[str]) -> None:
        self.execute(self._commands.remove_edges(list(edge_ids)))

    def expand_node(self, node_id: str) -> None:
        self.execute(self._commands.expand_node(node_id))

    def collapse_node(self, node_id: str) -> None:
        self.execute(self._commands.collapse_node(node_id))

    def perform_layout(self, layouts: dict[str, NodeLayout]) -> None:
        """Apply a computed layout as one undoable step."""
        self.execute(self._commands.perform_layout(layouts))

    def move_node(
        self, node_id: str, dx: float, dy: float, *, already_moved: bool = False,
    ) -> None:
        """Move a node (and its descendants) by (dx, dy).

        Args:
            already_moved: True at the end of a canvas drag, when the item
                           is already in place and only the step is recorded.
        """
        params = MoveNodeParams(node_id, Point2D(dx, dy), move=not already_moved)
        self.execute(self._commands.move_node(params))

    def delete_selected(self) -> None:
        """Delete the selected nodes and edges."""
        if not self._operations.selected_elements():
            return
        self.execute(self._commands.delete_selected(DeleteSelectedParams(first_time=True)))
        self.selection_changed.emit()

    # ------------------------------------------------------------------
    # Selection (not undoable)
    # ------------------------------------------------------------------

    def select(self, element_ids: Iterable[str], *, additive: bool = False) -> None:
        self._operations.select(element_ids, additive=additive)
        self.selection_changed.emit()

    def clear_selection(self) -> None:
        self._operations.clear_selection()
        self.selection_changed.emit()
