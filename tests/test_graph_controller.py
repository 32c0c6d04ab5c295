"""Tests for GraphController — editor session mediator.

Tests edit methods, signal emissions, undo/redo wiring and document
loading.
"""

import pytest
from unittest.mock import MagicMock

from PyQt6.QtWidgets import QApplication
import sys

from graph_editor.core.commands import Command
from graph_editor.core.errors import ElementNotFoundError
from graph_editor.models.graph import Graph, NodeLayout, Point2D
from graph_editor.ui.canvas.graph_controller import GraphController

# QApplication instance needed for QObject / signals
_app = QApplication.instance() or QApplication(sys.argv)


class TestControllerDefaults:

    def setup_method(self):
        self.ctrl = GraphController()

    def test_empty_graph(self):
        assert self.ctrl.graph.node_count == 0
        assert not self.ctrl.can_undo
        assert not self.ctrl.can_redo

    def test_menu_texts_empty(self):
        assert self.ctrl.undo_text == ""
        assert self.ctrl.redo_text == ""

    def test_controllers_do_not_share_history(self):
        other = GraphController()
        self.ctrl.add_node("A", node_id="A")
        assert not other.can_undo


class TestControllerEdits:

    def setup_method(self):
        self.ctrl = GraphController()
        self.ctrl.add_node("A", 0, 0, node_id="A")
        self.ctrl.add_node("B", 100, 0, node_id="B")
        self.ctrl.clear_undo()

    def test_add_node_returns_id(self):
        node_id = self.ctrl.add_node("C", 5, 5, width=80.0)
        assert self.ctrl.graph.node(node_id).width == 80.0

    def test_add_node_undo_redo(self):
        self.ctrl.add_node("C", node_id="C")
        self.ctrl.undo()
        assert "C" not in self.ctrl.graph.nodes
        self.ctrl.redo()
        assert "C" in self.ctrl.graph.nodes

    def test_add_edge_and_remove_node(self):
        edge_id = self.ctrl.add_edge("A", "B")
        self.ctrl.remove_nodes(["A"])
        assert edge_id not in self.ctrl.graph.edges
        self.ctrl.undo()
        assert edge_id in self.ctrl.graph.edges

    def test_remove_edges(self):
        self.ctrl.add_edge("A", "B", edge_id="E")
        self.ctrl.remove_edges(["E"])
        assert "E" not in self.ctrl.graph.edges
        self.ctrl.undo()
        assert "E" in self.ctrl.graph.edges

    def test_move_node(self):
        self.ctrl.move_node("A", 10, 0)
        assert self.ctrl.graph.node("A").position == Point2D(10, 0)
        self.ctrl.undo()
        assert self.ctrl.graph.node("A").position == Point2D(0, 0)
        self.ctrl.redo()
        assert self.ctrl.graph.node("A").position == Point2D(10, 0)

    def test_move_node_after_drag(self):
        self.ctrl.graph.node("A").position = Point2D(4, 4)
        self.ctrl.move_node("A", 4, 4, already_moved=True)
        assert self.ctrl.graph.node("A").position == Point2D(4, 4)
        self.ctrl.undo()
        assert self.ctrl.graph.node("A").position == Point2D(0, 0)

    def test_expand_collapse(self):
        self.ctrl.add_node("C", 0, 0, parent="A", node_id="C")
        self.ctrl.collapse_node("A")
        assert "C" not in self.ctrl.graph.nodes
        self.ctrl.expand_node("A")
        assert "C" in self.ctrl.graph.nodes
        self.ctrl.undo()
        assert self.ctrl.graph.node("A").collapsed

    def test_perform_layout(self):
        self.ctrl.perform_layout({"B": NodeLayout(0, 100, 50, 50)})
        assert self.ctrl.graph.node("B").position == Point2D(0, 100)
        self.ctrl.undo()
        assert self.ctrl.graph.node("B").position == Point2D(100, 0)

    def test_delete_selected(self):
        self.ctrl.select(["A"])
        self.ctrl.delete_selected()
        assert "A" not in self.ctrl.graph.nodes
        self.ctrl.undo()
        self.ctrl.select(["B"])
        self.ctrl.redo()
        assert set(self.ctrl.graph.nodes) == {"B"}

    def test_delete_with_empty_selection_records_nothing(self):
        self.ctrl.delete_selected()
        assert not self.ctrl.can_undo

    def test_undo_text_uses_command_label(self):
        self.ctrl.move_node("A", 1, 1)
        assert self.ctrl.undo_text == "Move Node"
        self.ctrl.undo()
        assert self.ctrl.redo_text == "Move Node"

    def test_custom_command(self):
        log = []
        self.ctrl.execute(Command(log.append, lambda p: log.pop(), "x"))
        assert log == ["x"]
        self.ctrl.undo()
        assert log == []

    def test_new_edit_keeps_redo(self):
        self.ctrl.move_node("A", 1, 0)
        self.ctrl.undo()
        self.ctrl.move_node("B", 0, 1)
        assert self.ctrl.can_redo

    def test_domain_error_propagates(self):
        with pytest.raises(ElementNotFoundError):
            self.ctrl.move_node("missing", 1, 1)
        assert not self.ctrl.can_undo


class TestControllerSignals:

    def setup_method(self):
        self.ctrl = GraphController()

    def test_edit_emits_graph_changed(self):
        spy = MagicMock()
        self.ctrl.graph_changed.connect(spy)
        self.ctrl.add_node("A")
        spy.assert_called_once()

    def test_undo_emits_undo_state_changed(self):
        self.ctrl.add_node("A")
        spy = MagicMock()
        self.ctrl.undo_state_changed.connect(spy)
        self.ctrl.undo()
        spy.assert_called_once()

    def test_noop_undo_emits_nothing(self):
        graph_spy, state_spy = MagicMock(), MagicMock()
        self.ctrl.graph_changed.connect(graph_spy)
        self.ctrl.undo_state_changed.connect(state_spy)
        self.ctrl.undo()
        self.ctrl.redo()
        graph_spy.assert_not_called()
        state_spy.assert_not_called()

    def test_select_emits_selection_changed(self):
        self.ctrl.add_node("A", node_id="A")
        spy = MagicMock()
        self.ctrl.selection_changed.connect(spy)
        self.ctrl.select(["A"])
        spy.assert_called_once()
        assert self.ctrl.selected_elements == ["A"]


class TestControllerLoad:

    def setup_method(self):
        self.ctrl = GraphController(clear_redo_on_execute=True)
        self.ctrl.add_node("A", node_id="A")
        self.ctrl.add_node("B", node_id="B")
        self.ctrl.undo()

    def test_clear_redo_option(self):
        assert self.ctrl.can_redo
        self.ctrl.add_node("C")
        assert not self.ctrl.can_redo

    def test_load_graph_resets_history(self):
        spy = MagicMock()
        self.ctrl.graph_changed.connect(spy)
        self.ctrl.load_graph(Graph(name="Other"))
        assert self.ctrl.graph.name == "Other"
        assert not self.ctrl.can_undo
        assert not self.ctrl.can_redo
        spy.assert_called_once()

    def test_load_from_dict(self):
        data = self.ctrl.to_dict()
        other = GraphController()
        other.load_graph(data)
        assert set(other.graph.nodes) == {"A"}

    def test_edits_target_loaded_graph(self):
        self.ctrl.load_graph(Graph())
        self.ctrl.add_node("Z", node_id="Z")
        assert set(self.ctrl.graph.nodes) == {"Z"}
