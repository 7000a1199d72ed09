"""Editing commands.

A command is a frozen dataclass describing one edit. Commands never hold state
of their own: `execute` turns an editor state into a new one, `create_undo`
builds the command that reverses an edit, and `can_execute` checks an edit
without committing it.

Examples:
    state = MarkdownEditorState.with_paragraph("Hello world")
    state = execute(InsertTextCommand("!", DocumentPosition(0, 11)), state)
    state.content  # "Hello world!"
"""

from __future__ import annotations

from dataclasses import dataclass, replace

from .document import (
    clamp_position,
    delete_text,
    ensure_position,
    insert_text,
    list_item_start,
    locate_list_item,
    insert_list_item,
    merge_with_previous,
    regenerate_markdown,
    remove_list_item,
    split_list_item,
    splice_blocks,
    text_in_range,
)
from .exceptions import EditorError, InvalidBlockTypeError, UnsupportedOperationError
from .formatting import apply_inline_formatting, set_block_type
from .generator import generate_markdown
from .models import (
    CodeBlock,
    DocumentPosition,
    FormattingOperation,
    Heading,
    InlineFormatting,
    ListBlock,
    ListItem,
    MarkdownBlockType,
    MarkdownEditorState,
    Paragraph,
    ParsedDocument,
    Quote,
    TextRange,
)
from .parser import parse_markdown
from .state import are_states_equivalent, update_selection, with_content


@dataclass(frozen=True)
class InsertTextCommand:
    text: str
    position: DocumentPosition

    @property
    def description(self) -> str:
        return f"Insert {self.text!r} at {self.position}"


@dataclass(frozen=True)
class DeleteTextCommand:
    text_range: TextRange

    @property
    def description(self) -> str:
        return f"Delete {self.text_range}"


@dataclass(frozen=True)
class ApplyFormattingCommand:
    formatting: InlineFormatting
    text_range: TextRange
    operation: FormattingOperation = FormattingOperation.TOGGLE

    @property
    def description(self) -> str:
        return f"{self.operation.value.title()} {self.formatting.describe()} formatting"


@dataclass(frozen=True)
class SetBlockTypeCommand:
    block_type: MarkdownBlockType
    position: DocumentPosition

    @property
    def description(self) -> str:
        return f"Set block type to {self.block_type}"


@dataclass(frozen=True)
class SmartEnterCommand:
    position: DocumentPosition

    @property
    def description(self) -> str:
        return "Smart Enter"


@dataclass(frozen=True)
class SmartBackspaceCommand:
    position: DocumentPosition

    @property
    def description(self) -> str:
        return "Smart Backspace"


@dataclass(frozen=True)
class CompositeCommand:
    """Sub-commands executed in order as one all-or-nothing edit."""

    commands: tuple[Command, ...]
    name: str = "Composite"

    @property
    def description(self) -> str:
        return self.name


@dataclass(frozen=True)
class NoOpCommand:
    @property
    def description(self) -> str:
        return "No operation"


@dataclass(frozen=True)
class UpdateSelectionCommand:
    selection: TextRange

    @property
    def description(self) -> str:
        return f"Select {self.selection}"


@dataclass(frozen=True)
class RestoreSnapshotCommand:
    """Put back a complete earlier content, selection, and typing formatting."""

    content: str
    selection: TextRange
    formatting: InlineFormatting = InlineFormatting.NONE

    @property
    def description(self) -> str:
        return "Restore snapshot"


Command = (
    InsertTextCommand
    | DeleteTextCommand
    | ApplyFormattingCommand
    | SetBlockTypeCommand
    | SmartEnterCommand
    | SmartBackspaceCommand
    | CompositeCommand
    | NoOpCommand
    | UpdateSelectionCommand
    | RestoreSnapshotCommand
)


def _commit(state: MarkdownEditorState, content: str, cursor: DocumentPosition) -> MarkdownEditorState:
    edited = with_content(state, content, cursor)
    return replace(edited, has_unsaved_changes=True, metadata=state.metadata.touched())


def _commit_document(
    state: MarkdownEditorState, document: ParsedDocument, cursor: DocumentPosition
) -> MarkdownEditorState:
    content = regenerate_markdown(document)
    return _commit(state, content, clamp_position(cursor, parse_markdown(content)))


def _execute_insert(command: InsertTextCommand, state: MarkdownEditorState) -> MarkdownEditorState:
    content = insert_text(command.text, command.position, state.content)
    # Block boundaries may have shifted; land at the end of whatever block `index` now is.
    cursor = DocumentPosition(command.position.block_index, len(content))
    return _commit(state, content, clamp_position(cursor, parse_markdown(content)))


def _execute_delete(command: DeleteTextCommand, state: MarkdownEditorState) -> MarkdownEditorState:
    content = delete_text(command.text_range, state.content)
    cursor = clamp_position(command.text_range.start, parse_markdown(content))
    return _commit(state, content, cursor)


def _execute_formatting(command: ApplyFormattingCommand, state: MarkdownEditorState) -> MarkdownEditorState:
    return apply_inline_formatting(command.formatting, command.text_range, state, command.operation)


def _execute_block_type(command: SetBlockTypeCommand, state: MarkdownEditorState) -> MarkdownEditorState:
    edited = set_block_type(command.block_type, command.position, state)
    return replace(edited, has_unsaved_changes=True, metadata=state.metadata.touched())


def _smart_enter_in_list(
    document: ParsedDocument, block: ListBlock, position: DocumentPosition
) -> tuple[ParsedDocument, DocumentPosition]:
    index = position.block_index
    item_index, item_offset = locate_list_item(block, position.offset)
    item = block.items[item_index]

    if not item.text.strip():
        if item_index == len(block.items) - 1:
            paragraph = Paragraph(text=" ".join(entry.text for entry in block.items).strip())
            edited = splice_blocks(document, index, index + 1, [paragraph])
            return edited, DocumentPosition(index, len(paragraph.text))
        new_block = insert_list_item(block, item_index + 1)
    else:
        new_block = split_list_item(block, item_index, item_offset)

    cursor = DocumentPosition(index, list_item_start(new_block, item_index + 1))
    return splice_blocks(document, index, index + 1, [new_block]), cursor


def _execute_smart_enter(command: SmartEnterCommand, state: MarkdownEditorState) -> MarkdownEditorState:
    document = parse_markdown(state.content)
    position = command.position
    ensure_position(position, document)

    index = position.block_index
    block = document.blocks[index]

    if isinstance(block, ListBlock):
        edited, cursor = _smart_enter_in_list(document, block, position)
        return _commit_document(state, edited, cursor)

    if isinstance(block, CodeBlock):
        raise UnsupportedOperationError("smart enter in code blocks")

    text = block.text_content
    head, tail = text[: position.offset], text[position.offset :]

    if isinstance(block, Quote):
        quote = Quote(text=head + "\n" + tail)
        edited = splice_blocks(document, index, index + 1, [quote])
        return _commit_document(state, edited, DocumentPosition(index, position.offset + 1))

    first = Heading(level=block.level, text=head) if isinstance(block, Heading) else Paragraph(text=head)
    edited = splice_blocks(document, index, index + 1, [first, Paragraph(text=tail)])
    content = generate_markdown(edited)
    reparsed = parse_markdown(content)

    # Empty paragraphs vanish on re-parse, so only a real new block moves the cursor down.
    if len(reparsed.blocks) > len(document.blocks):
        cursor = DocumentPosition(index + 1, 0)
    else:
        cursor = DocumentPosition(index, len(head))
    return _commit(state, content, clamp_position(cursor, reparsed))


def _smart_backspace_in_list(
    document: ParsedDocument, block: ListBlock, position: DocumentPosition
) -> tuple[ParsedDocument, DocumentPosition]:
    index = position.block_index
    item_index, item_offset = locate_list_item(block, position.offset)
    item = block.items[item_index]

    if not item.text.strip():
        if item_index == 0 and len(block.items) == 1:
            return splice_blocks(document, index, index + 1, [Paragraph(text="")]), DocumentPosition(index, 0)
        new_block = remove_list_item(block, item_index)
        if item_index == 0:
            return splice_blocks(document, index, index + 1, [new_block]), DocumentPosition(index, 0)
        previous = new_block.items[item_index - 1]
        cursor = DocumentPosition(index, list_item_start(new_block, item_index - 1) + len(previous.text))
        return splice_blocks(document, index, index + 1, [new_block]), cursor

    if item_offset > 0:
        text = item.text[: item_offset - 1] + item.text[item_offset:]
        items = block.items[:item_index] + (ListItem(text=text),) + block.items[item_index + 1 :]
        new_block = replace(block, items=items)
        return splice_blocks(document, index, index + 1, [new_block]), DocumentPosition(index, position.offset - 1)

    if item_index > 0:
        previous = block.items[item_index - 1]
        merged = ListItem(text=previous.text + item.text)
        items = block.items[: item_index - 1] + (merged,) + block.items[item_index + 1 :]
        new_block = replace(block, items=items)
        cursor = DocumentPosition(index, list_item_start(new_block, item_index - 1) + len(previous.text))
        return splice_blocks(document, index, index + 1, [new_block]), cursor

    return merge_with_previous(document, index)


def _execute_smart_backspace(command: SmartBackspaceCommand, state: MarkdownEditorState) -> MarkdownEditorState:
    document = parse_markdown(state.content)
    position = command.position
    ensure_position(position, document)

    index = position.block_index
    block = document.blocks[index]
    at_start = position == DocumentPosition.start()

    # An empty first list item still unwinds at the very start of the document.
    if isinstance(block, ListBlock) and not (at_start and block.items[0].text.strip()):
        edited, cursor = _smart_backspace_in_list(document, block, position)
        return _commit_document(state, edited, cursor)

    if at_start:
        return state

    if position.offset > 0:
        text_range = TextRange(DocumentPosition(index, position.offset - 1), position)
        return _execute_delete(DeleteTextCommand(text_range), state)

    edited, cursor = merge_with_previous(document, index)
    return _commit_document(state, edited, cursor)


def _execute_composite(command: CompositeCommand, state: MarkdownEditorState) -> MarkdownEditorState:
    current = state
    for sub_command in command.commands:
        current = execute(sub_command, current)
    return current


def _execute_noop(command: NoOpCommand, state: MarkdownEditorState) -> MarkdownEditorState:
    return state


def _execute_selection(command: UpdateSelectionCommand, state: MarkdownEditorState) -> MarkdownEditorState:
    return update_selection(command.selection, state)


def _execute_snapshot(command: RestoreSnapshotCommand, state: MarkdownEditorState) -> MarkdownEditorState:
    restored = with_content(state, command.content, command.selection.start)
    if not command.selection.is_cursor:
        restored = update_selection(command.selection, restored)
    return replace(
        restored,
        current_formatting=command.formatting,
        has_unsaved_changes=True,
        metadata=state.metadata.touched(),
    )


_EXECUTORS = {
    InsertTextCommand: _execute_insert,
    DeleteTextCommand: _execute_delete,
    ApplyFormattingCommand: _execute_formatting,
    SetBlockTypeCommand: _execute_block_type,
    SmartEnterCommand: _execute_smart_enter,
    SmartBackspaceCommand: _execute_smart_backspace,
    CompositeCommand: _execute_composite,
    NoOpCommand: _execute_noop,
    UpdateSelectionCommand: _execute_selection,
    RestoreSnapshotCommand: _execute_snapshot,
}


def _executor_for(command):
    try:
        return _EXECUTORS[type(command)]
    except KeyError:
        raise TypeError(f"Unknown command type: {type(command).__name__}") from None


def execute(command: Command, state: MarkdownEditorState) -> MarkdownEditorState:
    """Run `command` against `state` and return the resulting state.

    Args:
        command: The command to run.
        state: The state to edit; never modified.

    Returns:
        MarkdownEditorState: The edited state.

    Raises:
        EditorError: Any editing failure. A composite command raises the first
            failing sub-command's error unchanged.
        TypeError: If `command` is not a known command type.
    """
    return _executor_for(command)(command, state)


def can_execute(command: Command, state: MarkdownEditorState) -> bool:
    """Check whether `command` would succeed against `state`.

    The command is run on a throwaway copy, so a composite command is checked
    against the state each of its steps would actually see.

    Raises:
        TypeError: If `command` is not a known command type.
    """
    _executor_for(command)
    try:
        execute(command, state)
    except EditorError:
        return False
    return True


def is_undoable(command: Command) -> bool:
    _executor_for(command)
    return not isinstance(command, (NoOpCommand, UpdateSelectionCommand))


def _snapshot_of(state: MarkdownEditorState) -> RestoreSnapshotCommand:
    return RestoreSnapshotCommand(
        content=state.content, selection=state.selection, formatting=state.current_formatting
    )


def _verified(candidate: Command, command: Command, state: MarkdownEditorState) -> Command:
    """Return `candidate` if it exactly reverses `command`, else a snapshot restore.

    Re-parsing can reshape content in ways a targeted inverse cannot express,
    such as a leading ``#`` turning a paragraph into a heading.
    """
    edited = execute(command, state)
    try:
        reverted = execute(candidate, edited)
    except EditorError:
        return _snapshot_of(state)
    return candidate if are_states_equivalent(reverted, state) else _snapshot_of(state)


def _undo_insert(command: InsertTextCommand, state: MarkdownEditorState) -> Command | None:
    if "\n" in command.text:
        return _snapshot_of(state)
    end = DocumentPosition(command.position.block_index, command.position.offset + len(command.text))
    candidate = DeleteTextCommand(TextRange(command.position, end))
    return _verified(candidate, command, state)


def _undo_delete(command: DeleteTextCommand, state: MarkdownEditorState) -> Command | None:
    if command.text_range.is_multi_block:
        return None
    deleted = text_in_range(command.text_range, state.content)
    candidate = InsertTextCommand(deleted, command.text_range.start)
    return _verified(candidate, command, state)


def _undo_formatting(command: ApplyFormattingCommand, state: MarkdownEditorState) -> Command | None:
    before = state.current_formatting
    if command.operation is FormattingOperation.APPLY:
        changed = command.formatting & ~before
    elif command.operation is FormattingOperation.REMOVE:
        changed = command.formatting & before
    else:
        changed = command.formatting
    candidate = ApplyFormattingCommand(changed, command.text_range, command.operation.inverse)
    return _verified(candidate, command, state)


def _undo_block_type(command: SetBlockTypeCommand, state: MarkdownEditorState) -> Command | None:
    document = parse_markdown(state.content)
    ensure_position(command.position, document)
    previous = document.blocks[command.position.block_index].block_type
    candidate = SetBlockTypeCommand(previous, command.position)
    return _verified(candidate, command, state)


def _undo_composite(command: CompositeCommand, state: MarkdownEditorState) -> Command | None:
    undos = []
    current = state
    for sub_command in command.commands:
        undo = create_undo(sub_command, current)
        if undo is None:
            return None
        undos.append(undo)
        current = execute(sub_command, current)
    return CompositeCommand(commands=tuple(reversed(undos)), name=f"Undo {command.name}")


def create_undo(command: Command, state: MarkdownEditorState) -> Command | None:
    """Build the command that reverses `command` when run after it.

    Args:
        command: The command whose effect should be reversed.
        state: The state `command` is (or was) executed against.

    Returns:
        Command | None: The inverse command, or None when the edit cannot be
            undone (multi-block deletion, or a non-undoable command).

    Raises:
        EditorError: If `command` cannot run against `state`.
        TypeError: If `command` is not a known command type.
    """
    _executor_for(command)
    if isinstance(command, InsertTextCommand):
        return _undo_insert(command, state)
    if isinstance(command, DeleteTextCommand):
        return _undo_delete(command, state)
    if isinstance(command, ApplyFormattingCommand):
        return _undo_formatting(command, state)
    if isinstance(command, SetBlockTypeCommand):
        return _undo_block_type(command, state)
    if isinstance(command, CompositeCommand):
        return _undo_composite(command, state)
    if isinstance(command, (SmartEnterCommand, SmartBackspaceCommand, RestoreSnapshotCommand)):
        return _snapshot_of(state)
    return None


def replace_text(text_range: TextRange, text: str) -> CompositeCommand:
    """Build a command that replaces the text in `text_range` with `text`."""
    return CompositeCommand(
        commands=(DeleteTextCommand(text_range), InsertTextCommand(text, text_range.start)),
        name="Replace Text",
    )


def wrap_with_formatting(formatting: InlineFormatting, text_range: TextRange) -> ApplyFormattingCommand:
    return ApplyFormattingCommand(formatting, text_range, FormattingOperation.APPLY)


def convert_to_heading(level: int, position: DocumentPosition) -> SetBlockTypeCommand:
    return SetBlockTypeCommand(MarkdownBlockType.heading(level), position)


def convert_to_list(block_type: MarkdownBlockType, position: DocumentPosition) -> SetBlockTypeCommand:
    """Build a list conversion, toggling back to a paragraph if already that list.

    Raises:
        InvalidBlockTypeError: If `block_type` is not a list type.
    """
    if not block_type.is_list:
        raise InvalidBlockTypeError(f"{block_type} is not a list type")
    return SetBlockTypeCommand(block_type, position)
