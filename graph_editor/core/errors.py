"""Exception hierarchy for the editor core.

Domain failures raised by graph operations are never caught by the
history controller; they propagate to the editor's top-level handler.
"""


class EditorError(Exception):
    """Base class for all editor errors."""


class InvalidCommandError(EditorError, TypeError):
    """A command's forward or inverse action is not callable."""


class DomainOperationError(EditorError):
    """A graph, hierarchy or geometry operation could not be applied."""


class ElementNotFoundError(DomainOperationError, KeyError):
    """Referenced node or edge does not exist in the graph."""

    def __str__(self) -> str:
        # KeyError would repr() the message
        return str(self.args[0]) if self.args else ""


class DuplicateElementError(DomainOperationError, ValueError):
    """An element with the same id already exists in the graph."""


class ReentrantHistoryError(EditorError, RuntimeError):
    """execute/undo/redo was called from inside a running action."""
