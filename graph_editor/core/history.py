"""History controller — two-stack undo/redo over commands.

Executed commands live on the undo stack; undone commands live on the
redo stack. A command is on at most one stack at a time. Pure Python
class (no Qt dependency).

By default a fresh ``execute`` keeps the redo stack, so previously
undone edits stay redoable after new edits. Pass
``clear_redo_on_execute=True`` for the usual "new edit drops redo"
behaviour. History depth is unbounded unless *max_levels* is given.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional

from graph_editor.constants import CLEAR_REDO_ON_EXECUTE, MAX_HISTORY_LEVELS
from graph_editor.core.commands import Command
from graph_editor.core.errors import InvalidCommandError, ReentrantHistoryError

logger = logging.getLogger(__name__)


def _require_callable(command: Command, role: str) -> None:
    action = command.forward if role == "forward" else command.inverse
    if not callable(action):
        raise InvalidCommandError(
            f"{role} action of {command.description!r} is not callable: {action!r}"
        )


class HistoryController:
    """Undo/redo manager for one editor session.

    Usage::

        history = HistoryController()
        history.execute(factory.add_node(NewNode("A")))
        history.undo()
        history.redo()

    Args:
        max_levels: Undo depth bound; the oldest command is dropped when
                    exceeded. None = unbounded.
        clear_redo_on_execute: Empty the redo stack on every new execute.
        on_change: Called after every successful transition and reset.
    """

    def __init__(
        self,
        max_levels: Optional[int] = MAX_HISTORY_LEVELS,
        *,
        clear_redo_on_execute: bool = CLEAR_REDO_ON_EXECUTE,
        on_change: Optional[Callable[[], None]] = None,
    ) -> None:
        if max_levels is not None and max_levels < 1:
            raise ValueError(f"max_levels must be >= 1, got {max_levels}")
        self._undo_stack: list[Command] = []
        self._redo_stack: list[Command] = []
        self._max_levels = max_levels
        self._clear_redo_on_execute = clear_redo_on_execute
        self._on_change = on_change
        self._running = False

    # ------------------------------------------------------------------
    # Inspection
    # ------------------------------------------------------------------

    @property
    def undo_stack(self) -> list[Command]:
        """Copy of the undo stack, oldest first."""
        return list(self._undo_stack)

    @property
    def redo_stack(self) -> list[Command]:
        """Copy of the redo stack, oldest first."""
        return list(self._redo_stack)

    @property
    def max_levels(self) -> Optional[int]:
        return self._max_levels

    @property
    def can_undo(self) -> bool:
        return len(self._undo_stack) > 0

    @property
    def can_redo(self) -> bool:
        return len(self._redo_stack) > 0

    @property
    def undo_count(self) -> int:
        return len(self._undo_stack)

    @property
    def redo_count(self) -> int:
        return len(self._redo_stack)

    def is_undo_stack_empty(self) -> bool:
        return not self._undo_stack

    def is_redo_stack_empty(self) -> bool:
        return not self._redo_stack

    def peek_undo(self) -> Optional[Command]:
        """Command the next ``undo()`` would revert, or None."""
        return self._undo_stack[-1] if self._undo_stack else None

    def peek_redo(self) -> Optional[Command]:
        """Command the next ``redo()`` would replay, or None."""
        return self._redo_stack[-1] if self._redo_stack else None

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def execute(self, command: Command) -> None:
        """Run *command* forward and push it onto the undo stack.

        Exceptions from the forward action propagate; the command is
        not pushed in that case.

        Raises:
            InvalidCommandError: If the forward action is not callable.
            ReentrantHistoryError: If called from inside a running action.
        """
        self._execute(command)
        if self._clear_redo_on_execute and self._redo_stack:
            logger.debug("Dropping %d redo entries", len(self._redo_stack))
            self._redo_stack.clear()
        self._notify()

    def undo(self) -> None:
        """Revert the most recent command and move it to the redo stack.

        A non-None return value of the inverse action replaces the
        command's ``params``. No-op if the undo stack is empty.
        """
        if not self._undo_stack:
            logger.debug("Undo requested with empty undo stack")
            return
        self._check_not_running()
        command = self._undo_stack[-1]
        _require_callable(command, "inverse")
        self._undo_stack.pop()
        self._running = True
        try:
            result = command.inverse(command.undo_params)
        finally:
            self._running = False
        if result is not None:
            command.params = result
        self._redo_stack.append(command)
        logger.debug(
            "Undo %s (undo=%d, redo=%d)",
            command.description, len(self._undo_stack), len(self._redo_stack),
        )
        self._notify()

    def redo(self) -> None:
        """Replay the most recently undone command with its current params.

        No-op if the redo stack is empty.
        """
        if not self._redo_stack:
            logger.debug("Redo requested with empty redo stack")
            return
        self._check_not_running()
        command = self._redo_stack[-1]
        _require_callable(command, "forward")
        self._redo_stack.pop()
        self._execute(command)
        self._notify()

    def reset(self) -> None:
        """Clear both stacks (e.g. on new document load)."""
        self._undo_stack.clear()
        self._redo_stack.clear()
        logger.debug("History reset")
        self._notify()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _execute(self, command: Command) -> None:
        """Shared forward path of ``execute`` and ``redo``."""
        self._check_not_running()
        _require_callable(command, "forward")
        self._running = True
        try:
            undo_params = command.forward(command.params)
        finally:
            self._running = False
        verb = "Redo" if command.executed else "Do"
        command.undo_params = undo_params
        command.executed = True
        self._undo_stack.append(command)
        if self._max_levels is not None and len(self._undo_stack) > self._max_levels:
            dropped = self._undo_stack.pop(0)  # Drop oldest
            logger.debug("History bound reached, dropped %s", dropped.description)
        logger.debug(
            "%s %s (undo=%d, redo=%d)",
            verb, command.description, len(self._undo_stack), len(self._redo_stack),
        )

    def _check_not_running(self) -> None:
        if self._running:
            raise ReentrantHistoryError(
                "History transition requested from inside a running action"
            )

    def _notify(self) -> None:
        if self._on_change is not None:
            self._on_change()
