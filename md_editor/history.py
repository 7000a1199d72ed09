"""Bounded undo/redo history for one editing session."""

from __future__ import annotations

import logging

from .commands import Command, create_undo, execute, is_undoable
from .constants import DEFAULT_HISTORY_SIZE
from .exceptions import EditorError, UndoError
from .models import MarkdownEditorState
from .state import are_states_equivalent

logger = logging.getLogger(__name__)


class CommandHistory:
    """Undo and redo stacks of inverse commands.

    Each session owns one history. Executing an undoable command pushes its
    inverse onto the undo stack and clears the redo stack; the oldest entry is
    dropped once `max_size` is exceeded. Commands that leave the state
    unchanged are not recorded.

    Args:
        max_size: Maximum number of undo entries kept.

    Examples:
        history = CommandHistory()
        state = history.execute(InsertTextCommand("!", DocumentPosition(0, 11)), state)
        state = history.undo(state)
    """

    def __init__(self, max_size: int = DEFAULT_HISTORY_SIZE):
        self._undo_stack: list[Command] = []
        self._redo_stack: list[Command] = []
        self._max_size = max_size

    @property
    def max_size(self) -> int:
        return self._max_size

    def execute(self, command: Command, state: MarkdownEditorState) -> MarkdownEditorState:
        """Run `command` and record its inverse.

        Raises:
            EditorError: If the command fails; the history is left untouched.
        """
        new_state = execute(command, state)
        if not is_undoable(command):
            return new_state
        if are_states_equivalent(new_state, state):
            # Nothing changed; keep the redo stack.
            logger.debug("%s changed nothing", command.description)
            return new_state

        undo = create_undo(command, state)
        if undo is None:
            logger.debug("No undo available for %s", command.description)
            return new_state

        self._push(self._undo_stack, undo)
        # Any new edit invalidates redo history
        self._redo_stack.clear()
        logger.debug("Executed %s (undo depth %d)", command.description, len(self._undo_stack))
        return new_state

    def undo(self, state: MarkdownEditorState) -> MarkdownEditorState | None:
        """Revert the most recent edit.

        Returns:
            MarkdownEditorState | None: The reverted state, or None when there
                is nothing to undo.

        Raises:
            UndoError: If the recorded inverse no longer applies to `state`.
        """
        if not self._undo_stack:
            return None
        command = self._undo_stack[-1]
        new_state = self._replay(command, state, self._undo_stack, self._redo_stack)
        logger.debug("Undid %s", command.description)
        return new_state

    def redo(self, state: MarkdownEditorState) -> MarkdownEditorState | None:
        if not self._redo_stack:
            return None
        command = self._redo_stack[-1]
        new_state = self._replay(command, state, self._redo_stack, self._undo_stack)
        logger.debug("Redid %s", command.description)
        return new_state

    def can_undo(self) -> bool:
        return bool(self._undo_stack)

    def can_redo(self) -> bool:
        return bool(self._redo_stack)

    def clear(self):
        self._undo_stack.clear()
        self._redo_stack.clear()

    def _replay(
        self,
        command: Command,
        state: MarkdownEditorState,
        source: list[Command],
        opposite: list[Command],
    ) -> MarkdownEditorState:
        # The entry stays on `source` if it can no longer be replayed.
        try:
            inverse = create_undo(command, state)
            new_state = execute(command, state)
        except EditorError as error:
            raise UndoError(f"{command.description}: {error}") from error
        source.pop()
        if inverse is not None:
            self._push(opposite, inverse)
        return new_state

    def _push(self, stack: list[Command], command: Command):
        stack.append(command)
        # Cap history
        if len(stack) > self._max_size:
            stack.pop(0)
