"""Translation of raw input events into editing commands."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum, Flag, auto

from .commands import (
    ApplyFormattingCommand,
    Command,
    CompositeCommand,
    DeleteTextCommand,
    InsertTextCommand,
    NoOpCommand,
    SmartBackspaceCommand,
    SmartEnterCommand,
    replace_text,
)
from .config import EditorConfig
from .document import get_block, is_text_block
from .exceptions import StateError
from .history import CommandHistory
from .models import (
    DocumentPosition,
    FormattingOperation,
    InlineFormatting,
    ListBlock,
    MarkdownEditorState,
    TextRange,
)
from .parser import parse_markdown
from .state import validate_state

logger = logging.getLogger(__name__)


class KeyModifiers(Flag):
    NONE = 0
    SHIFT = auto()
    COMMAND = auto()
    OPTION = auto()
    CONTROL = auto()


class InputEventType(Enum):
    """Types of input events."""
    KEYSTROKE = "keystroke"
    BACKSPACE = "backspace"
    DELETE = "delete"
    ENTER = "enter"
    TAB = "tab"
    PASTE = "paste"
    CUT = "cut"
    COPY = "copy"


@dataclass(frozen=True)
class InputEvent:
    """A single input event from the host editor."""
    event_type: InputEventType
    character: str = ""  # Keystrokes only
    modifiers: KeyModifiers = KeyModifiers.NONE
    text: str = ""  # Paste only

    @classmethod
    def keystroke(cls, character: str, modifiers: KeyModifiers = KeyModifiers.NONE) -> InputEvent:
        return cls(InputEventType.KEYSTROKE, character=character, modifiers=modifiers)

    @classmethod
    def backspace(cls) -> InputEvent:
        return cls(InputEventType.BACKSPACE)

    @classmethod
    def delete(cls) -> InputEvent:
        return cls(InputEventType.DELETE)

    @classmethod
    def enter(cls) -> InputEvent:
        return cls(InputEventType.ENTER)

    @classmethod
    def tab(cls) -> InputEvent:
        return cls(InputEventType.TAB)

    @classmethod
    def paste(cls, text: str) -> InputEvent:
        return cls(InputEventType.PASTE, text=text)

    @classmethod
    def cut(cls) -> InputEvent:
        return cls(InputEventType.CUT)

    @classmethod
    def copy(cls) -> InputEvent:
        return cls(InputEventType.COPY)


# Command+key shortcuts that toggle inline formatting.
FORMATTING_SHORTCUTS = {
    "b": InlineFormatting.BOLD,
    "i": InlineFormatting.ITALIC,
    "u": InlineFormatting.STRIKETHROUGH,
    "`": InlineFormatting.CODE,
}


class InputEventProcessor:
    """Turns input events into commands and runs them through a history.

    Args:
        config: Session configuration; defaults to `EditorConfig()`.
        history: History that records the executed commands. A new one sized
            from `config.history_size` is created when omitted.

    Examples:
        processor = InputEventProcessor()
        state = processor.simulate_typing("!!", MarkdownEditorState.with_paragraph("Hi"))
        state = processor.history.undo(state)
    """

    def __init__(self, config: EditorConfig | None = None, history: CommandHistory | None = None):
        self.config = config or EditorConfig()
        self.history = history or CommandHistory(self.config.history_size)

    def process(self, event: InputEvent, state: MarkdownEditorState) -> MarkdownEditorState:
        """Run the command for one event.

        Raises:
            StateError: If the selection of `state` does not address its content.
            EditorError: If the command fails.
        """
        result = validate_state(state)
        if not result.is_valid:
            raise StateError("; ".join(str(error) for error in result.errors))

        command = self.command_for(event, state)
        logger.debug("%s -> %s", event.event_type.value, command.description)
        return self.history.execute(command, state)

    def process_events(self, events: Iterable[InputEvent], state: MarkdownEditorState) -> MarkdownEditorState:
        """Run events in order, stopping at the first failure.

        Raises:
            EditorError: The first failing event's error. Events before it
                stay applied in the history.
        """
        current = state
        for event in events:
            current = self.process(event, current)
        return current

    def simulate_typing(self, text: str, state: MarkdownEditorState) -> MarkdownEditorState:
        return self.process_events((InputEvent.keystroke(character) for character in text), state)

    def simulate_backspaces(self, count: int, state: MarkdownEditorState) -> MarkdownEditorState:
        return self.process_events((InputEvent.backspace() for _ in range(count)), state)

    def simulate_text_input(
        self, text: str, events: Iterable[InputEvent], state: MarkdownEditorState
    ) -> MarkdownEditorState:
        """Type `text`, then run `events`."""
        typed = [InputEvent.keystroke(character) for character in text]
        return self.process_events([*typed, *events], state)

    def command_for(self, event: InputEvent, state: MarkdownEditorState) -> Command:
        """Pick the command an event stands for in `state`.

        Raises:
            TypeError: If the event type is unknown.
        """
        handlers = {
            InputEventType.KEYSTROKE: self._keystroke_command,
            InputEventType.BACKSPACE: self._backspace_command,
            InputEventType.DELETE: self._delete_command,
            InputEventType.ENTER: self._enter_command,
            InputEventType.TAB: self._tab_command,
            InputEventType.PASTE: self._paste_command,
            InputEventType.CUT: self._cut_command,
            InputEventType.COPY: self._copy_command,
        }
        handler = handlers.get(event.event_type)
        if handler is None:
            raise TypeError(f"Unknown input event type: {event.event_type!r}")
        return handler(event, state)

    def _keystroke_command(self, event: InputEvent, state: MarkdownEditorState) -> Command:
        if KeyModifiers.COMMAND in event.modifiers:
            formatting = FORMATTING_SHORTCUTS.get(event.character.lower())
            if formatting is not None:
                return ApplyFormattingCommand(formatting, state.selection, FormattingOperation.TOGGLE)

        if event.character in ("\n", "\r"):
            return self._enter_command(event, state)
        return InsertTextCommand(event.character, state.selection.start)

    def _backspace_command(self, event: InputEvent, state: MarkdownEditorState) -> Command:
        if not state.selection.is_cursor:
            return DeleteTextCommand(state.selection)

        position = state.selection.start
        block = get_block(position, state.content)
        if isinstance(block, ListBlock):
            return SmartBackspaceCommand(position)
        if position == DocumentPosition.start():
            return NoOpCommand()
        if position.offset == 0:
            return SmartBackspaceCommand(position)

        start = DocumentPosition(position.block_index, position.offset - 1)
        return DeleteTextCommand(TextRange(start, position))

    def _delete_command(self, event: InputEvent, state: MarkdownEditorState) -> Command:
        if not state.selection.is_cursor:
            return DeleteTextCommand(state.selection)

        position = state.selection.start
        document = parse_markdown(state.content)
        if not 0 <= position.block_index < len(document.blocks):
            return NoOpCommand()

        block = document.blocks[position.block_index]
        if position.offset < len(block.text_content):
            after = DocumentPosition(position.block_index, position.offset + 1)
            if is_text_block(block):
                return DeleteTextCommand(TextRange(position, after))
            # Forward delete in a list is a backspace one character later.
            return SmartBackspaceCommand(after)

        if position.block_index + 1 < len(document.blocks):
            return SmartBackspaceCommand(DocumentPosition(position.block_index + 1, 0))
        return NoOpCommand()

    def _enter_command(self, event: InputEvent, state: MarkdownEditorState) -> Command:
        position = state.selection.start
        if state.selection.is_cursor:
            return SmartEnterCommand(position)
        return CompositeCommand(
            commands=(DeleteTextCommand(state.selection), SmartEnterCommand(position)),
            name="Enter",
        )

    def _tab_command(self, event: InputEvent, state: MarkdownEditorState) -> Command:
        return InsertTextCommand(" " * self.config.tab_width, state.selection.start)

    def _paste_command(self, event: InputEvent, state: MarkdownEditorState) -> Command:
        if state.selection.is_cursor:
            return InsertTextCommand(event.text, state.selection.start)
        command = replace_text(state.selection, event.text)
        return CompositeCommand(commands=command.commands, name="Paste")

    def _cut_command(self, event: InputEvent, state: MarkdownEditorState) -> Command:
        # Clipboard handling belongs to the host; only the deletion happens here.
        if state.selection.is_cursor:
            return NoOpCommand()
        return DeleteTextCommand(state.selection)

    def _copy_command(self, event: InputEvent, state: MarkdownEditorState) -> Command:
        return NoOpCommand()
