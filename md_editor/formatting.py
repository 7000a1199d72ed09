"""Inline formatting and block-type changes on editor states."""

from __future__ import annotations

from dataclasses import replace

from .document import block_type_at, clamp_position, ensure_position, replace_block
from .exceptions import InvalidPositionError, InvalidRangeError, UnsupportedOperationError
from .models import (
    DocumentPosition,
    FormattingOperation,
    InlineFormatting,
    MarkdownBlockType,
    MarkdownEditorState,
    PARAGRAPH,
    TextRange,
)
from .parser import parse_markdown
from .rules import is_consistent, is_formatting_allowed
from .state import with_content


def combine_formatting(
    current: InlineFormatting, formatting: InlineFormatting, operation: FormattingOperation
) -> InlineFormatting:
    """Combine `formatting` into `current` according to `operation`.

    Examples:
        combine_formatting(BOLD, ITALIC, FormattingOperation.APPLY)  # BOLD|ITALIC
        combine_formatting(BOLD, BOLD, FormattingOperation.TOGGLE)  # NONE
    """
    if operation is FormattingOperation.APPLY:
        return current | formatting
    if operation is FormattingOperation.REMOVE:
        return current & ~formatting
    return current ^ formatting


def check_formatting(
    formatting: InlineFormatting,
    text_range: TextRange,
    state: MarkdownEditorState,
    operation: FormattingOperation,
) -> InlineFormatting:
    """Validate a formatting change and return the resulting formatting.

    Raises:
        UnsupportedOperationError: If the range spans several blocks, the block
            is a code block, or the result would mix inline code with emphasis.
        InvalidRangeError: If the range is outside the content.
    """
    if text_range.is_multi_block:
        raise UnsupportedOperationError("inline formatting across blocks")

    document = parse_markdown(state.content)
    try:
        ensure_position(text_range.start, document)
        ensure_position(text_range.end, document)
    except InvalidPositionError as error:
        raise InvalidRangeError(text_range) from error

    block_type = block_type_at(text_range.start, state.content)
    if not is_formatting_allowed(formatting, block_type):
        raise UnsupportedOperationError(f"inline formatting in {block_type} blocks")

    combined = combine_formatting(state.current_formatting, formatting, operation)
    if not is_consistent(combined):
        raise UnsupportedOperationError(
            f"combining {state.current_formatting.describe()} with {formatting.describe()}"
        )
    return combined


def apply_inline_formatting(
    formatting: InlineFormatting,
    text_range: TextRange,
    state: MarkdownEditorState,
    operation: FormattingOperation = FormattingOperation.TOGGLE,
) -> MarkdownEditorState:
    """Change the current inline formatting for a selection.

    Only the typing formatting of the state changes; the content is left alone.

    Args:
        formatting: Formatting flags to apply, remove, or toggle.
        text_range: Selection the change applies to; becomes the new selection.
        state: Current editor state.
        operation: How to combine `formatting` with the current formatting.

    Returns:
        MarkdownEditorState: State with the updated formatting.

    Raises:
        UnsupportedOperationError: If the change is not allowed here.
        InvalidRangeError: If the range is outside the content.
    """
    combined = check_formatting(formatting, text_range, state, operation)
    return replace(state, selection=text_range, current_formatting=combined)


def resolve_block_type(current: MarkdownBlockType, requested: MarkdownBlockType) -> MarkdownBlockType:
    """Requesting the list type a block already has turns it back into a paragraph."""
    if requested.is_list and requested == current:
        return PARAGRAPH
    return requested


def set_block_type(
    block_type: MarkdownBlockType, position: DocumentPosition, state: MarkdownEditorState
) -> MarkdownEditorState:
    """Convert the block under `position` to `block_type`.

    List types toggle: asking for the list type the block already has makes it
    a paragraph. The cursor stays at `position`, pulled back inside the block
    when the conversion shortened it.

    Raises:
        InvalidPositionError: If `position` does not address a block.

    Examples:
        set_block_type(UNORDERED_LIST, DocumentPosition(0, 0), state)
    """
    document = parse_markdown(state.content)
    ensure_position(position, document)

    current = document.blocks[position.block_index].block_type
    target = resolve_block_type(current, block_type)
    content = replace_block(position.block_index, target, state.content)

    cursor = clamp_position(position, parse_markdown(content))
    return with_content(state, content, cursor)
