from __future__ import annotations

import logging

import pytest

from md_editor.commands import (
    ApplyFormattingCommand,
    CompositeCommand,
    DeleteTextCommand,
    InsertTextCommand,
    NoOpCommand,
    SetBlockTypeCommand,
    SmartBackspaceCommand,
    SmartEnterCommand,
)
from md_editor.config import EditorConfig
from md_editor.exceptions import StateError, UnsupportedOperationError
from md_editor.history import CommandHistory
from md_editor.input_events import InputEvent, InputEventProcessor, KeyModifiers
from md_editor.models import (
    UNORDERED_LIST,
    DocumentPosition,
    FormattingOperation,
    InlineFormatting,
    MarkdownBlockType,
    MarkdownEditorState,
    TextRange,
)
from md_editor.state import create_state, update_selection


def _range(block: int, start: int, end: int) -> TextRange:
    return TextRange(DocumentPosition(block, start), DocumentPosition(block, end))


def _at(content: str, block: int, offset: int) -> MarkdownEditorState:
    return create_state(content, DocumentPosition(block, offset))


def _selected(content: str, text_range: TextRange) -> MarkdownEditorState:
    return update_selection(text_range, _at(content, 0, 0))


def test_processor_defaults(processor):
    assert processor.config == EditorConfig()
    assert processor.history.max_size == EditorConfig().history_size


def test_processor_sizes_history_from_config():
    processor = InputEventProcessor(EditorConfig(history_size=3))

    assert processor.history.max_size == 3


def test_processor_uses_given_history():
    history = CommandHistory(max_size=5)

    assert InputEventProcessor(history=history).history is history


def test_keystroke_inserts_character(processor):
    command = processor.command_for(InputEvent.keystroke("a"), _at("Hi", 0, 2))

    assert command == InsertTextCommand("a", DocumentPosition(0, 2))


@pytest.mark.parametrize(
    ("key", "formatting"),
    [
        ("b", InlineFormatting.BOLD),
        ("I", InlineFormatting.ITALIC),
        ("u", InlineFormatting.STRIKETHROUGH),
        ("`", InlineFormatting.CODE),
    ],
)
def test_formatting_shortcuts(processor, key: str, formatting: InlineFormatting):
    state = _at("Hi", 0, 1)

    command = processor.command_for(InputEvent.keystroke(key, KeyModifiers.COMMAND), state)

    assert command == ApplyFormattingCommand(formatting, state.selection, FormattingOperation.TOGGLE)


def test_unbound_command_key_types_character(processor):
    event = InputEvent.keystroke("x", KeyModifiers.COMMAND | KeyModifiers.SHIFT)

    assert processor.command_for(event, _at("Hi", 0, 0)) == InsertTextCommand("x", DocumentPosition(0, 0))


@pytest.mark.parametrize("character", ["\n", "\r"])
def test_line_break_keystroke_is_enter(processor, character: str):
    command = processor.command_for(InputEvent.keystroke(character), _at("Hi", 0, 1))

    assert command == SmartEnterCommand(DocumentPosition(0, 1))


def test_backspace_with_selection_deletes_it(processor):
    state = _selected("Hello", _range(0, 1, 4))

    assert processor.command_for(InputEvent.backspace(), state) == DeleteTextCommand(_range(0, 1, 4))


def test_backspace_at_document_start_is_noop(processor):
    assert processor.command_for(InputEvent.backspace(), _at("Hello", 0, 0)) == NoOpCommand()


def test_backspace_on_empty_first_list_item(processor):
    command = processor.command_for(InputEvent.backspace(), _at("- ", 0, 0))

    assert command == SmartBackspaceCommand(DocumentPosition(0, 0))


def test_backspace_at_block_start_is_smart(processor):
    command = processor.command_for(InputEvent.backspace(), _at("a\n\nb", 1, 0))

    assert command == SmartBackspaceCommand(DocumentPosition(1, 0))


def test_backspace_inside_list_is_smart(processor):
    command = processor.command_for(InputEvent.backspace(), _at("- abc", 0, 2))

    assert command == SmartBackspaceCommand(DocumentPosition(0, 2))


def test_backspace_inside_text_deletes_character(processor):
    command = processor.command_for(InputEvent.backspace(), _at("Hello", 0, 3))

    assert command == DeleteTextCommand(_range(0, 2, 3))


def test_forward_delete(processor):
    delete = InputEvent.delete()

    assert processor.command_for(delete, _at("Hello", 0, 1)) == DeleteTextCommand(_range(0, 1, 2))
    assert processor.command_for(delete, _at("- ab", 0, 0)) == SmartBackspaceCommand(DocumentPosition(0, 1))
    assert processor.command_for(delete, _at("a\n\nb", 0, 1)) == SmartBackspaceCommand(DocumentPosition(1, 0))
    assert processor.command_for(delete, _at("a\n\nb", 1, 1)) == NoOpCommand()


def test_forward_delete_with_selection(processor):
    state = _selected("Hello", _range(0, 0, 2))

    assert processor.command_for(InputEvent.delete(), state) == DeleteTextCommand(_range(0, 0, 2))


def test_enter_with_selection_replaces_it(processor):
    state = _selected("Hello", _range(0, 1, 3))

    command = processor.command_for(InputEvent.enter(), state)

    assert command == CompositeCommand(
        (DeleteTextCommand(_range(0, 1, 3)), SmartEnterCommand(DocumentPosition(0, 1))), name="Enter"
    )


def test_tab_inserts_configured_spaces():
    processor = InputEventProcessor(EditorConfig(tab_width=2))

    command = processor.command_for(InputEvent.tab(), _at("Hi", 0, 0))

    assert command == InsertTextCommand("  ", DocumentPosition(0, 0))


def test_paste(processor):
    assert processor.command_for(InputEvent.paste("yo"), _at("Hi", 0, 2)) == InsertTextCommand(
        "yo", DocumentPosition(0, 2)
    )

    command = processor.command_for(InputEvent.paste("yo"), _selected("Hello", _range(0, 0, 5)))
    assert command.name == "Paste"
    assert command.commands == (DeleteTextCommand(_range(0, 0, 5)), InsertTextCommand("yo", DocumentPosition(0, 0)))


def test_cut_and_copy(processor):
    cursor = _at("Hello", 0, 2)
    selection = _selected("Hello", _range(0, 1, 3))

    assert processor.command_for(InputEvent.cut(), cursor) == NoOpCommand()
    assert processor.command_for(InputEvent.cut(), selection) == DeleteTextCommand(_range(0, 1, 3))
    assert processor.command_for(InputEvent.copy(), selection) == NoOpCommand()


def test_typing_then_undo_and_redo(processor):
    state = processor.simulate_typing("!!", MarkdownEditorState.with_paragraph("Hello world"))
    assert state.content == "Hello world!!"

    state = processor.history.undo(processor.history.undo(state))
    assert state.content == "Hello world"

    state = processor.history.redo(state)
    assert state.content == "Hello world!"


def test_simulate_backspaces(processor):
    state = processor.simulate_backspaces(3, MarkdownEditorState.with_paragraph("Hello"))

    assert state.content == "He"
    assert state.cursor == DocumentPosition(0, 2)


def test_simulate_text_input(processor):
    state = processor.simulate_text_input(
        "ab", [InputEvent.backspace()], MarkdownEditorState.with_paragraph("Hello")
    )

    assert state.content == "Helloa"


def test_typing_a_bullet_marker_starts_a_list(processor):
    state = processor.simulate_typing("- ", MarkdownEditorState.empty())

    assert state.content == "- "
    assert state.current_block_type == UNORDERED_LIST
    assert state.cursor == DocumentPosition(0, 0)


def test_paste_replaces_selection(processor):
    state = processor.process(InputEvent.paste("Howdy"), _selected("Hello world", _range(0, 0, 5)))

    assert state.content == "Howdy world"
    assert processor.history.can_undo()


def test_shortcut_toggles_typing_formatting(processor):
    state = processor.process(InputEvent.keystroke("b", KeyModifiers.COMMAND), _at("Hi", 0, 2))

    assert state.current_formatting == InlineFormatting.BOLD
    assert processor.history.undo(state).current_formatting == InlineFormatting.NONE


def test_shortcut_in_code_block_fails(processor):
    with pytest.raises(UnsupportedOperationError):
        processor.process(InputEvent.keystroke("b", KeyModifiers.COMMAND), _at("```\nx\n```", 0, 1))


def test_failing_event_stops_processing(processor):
    events = [InputEvent.backspace(), InputEvent.keystroke("x")]

    with pytest.raises(UnsupportedOperationError):
        processor.process_events(events, _at("- ab", 0, 2))

    assert processor.history.can_undo()


def test_process_logs_event(processor, caplog):
    with caplog.at_level(logging.DEBUG, logger="md_editor.input_events"):
        processor.process(InputEvent.tab(), _at("Hi", 0, 0))

    assert "tab -> Insert '    ' at (0, 0)" in caplog.text


def test_stale_selection_is_a_state_error(processor):
    stale = MarkdownEditorState(content="Hi", selection=TextRange.at(DocumentPosition(0, 5)))

    with pytest.raises(StateError, match="Invalid document position"):
        processor.process(InputEvent.keystroke("x"), stale)

    assert not processor.history.can_undo()


def test_backspace_empties_trailing_paragraph(processor):
    state = processor.process(InputEvent.backspace(), _at("Alpha\n\nB", 1, 1))

    assert state.content == "Alpha"
    assert state.cursor == DocumentPosition(0, 5)
    assert processor.history.undo(state).content == "Alpha\n\nB"


def test_backspace_at_list_start_keeps_redo(processor):
    history = processor.history
    command = SetBlockTypeCommand(MarkdownBlockType.heading(1), DocumentPosition(0, 0))
    heading = history.execute(command, _at("- item", 0, 0))
    state = history.undo(heading)

    state = processor.process(InputEvent.backspace(), state)

    assert state.content == "- item"
    assert history.can_redo()
    assert history.redo(state).content == "# item"


def test_enter_at_end_of_paragraph_adds_no_block(processor):
    state = processor.simulate_typing("Hello\nWorld", MarkdownEditorState.empty())

    assert state.content == "HelloWorld"


def test_leading_whitespace_in_empty_document_is_dropped(processor):
    assert processor.simulate_typing(" a", MarkdownEditorState.empty()).content == "a"
    assert processor.simulate_typing("b a", MarkdownEditorState.empty()).content == "b a"
