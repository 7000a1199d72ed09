"""Creation and inspection of editor states."""

from __future__ import annotations

from dataclasses import replace

from .document import block_type_at, ensure_position, formatting_at, validate_document
from .exceptions import InvalidPositionError, InvalidRangeError
from .models import (
    DocumentPosition,
    InlineFormatting,
    MarkdownDocument,
    MarkdownEditorState,
    TextRange,
    ValidationResult,
)
from .parser import parse_markdown
from .rules import can_apply_formatting


def create_state(content: str, cursor_at: DocumentPosition) -> MarkdownEditorState:
    """Build a state for `content` with a cursor at `cursor_at`.

    The block type and inline formatting are read from the block under the
    cursor.

    Args:
        content: Markdown content.
        cursor_at: Cursor position.

    Returns:
        MarkdownEditorState: A fresh state without unsaved changes.

    Raises:
        InvalidPositionError: If `cursor_at` is outside the parsed content.

    Examples:
        create_state("# Title", DocumentPosition(0, 5)).current_block_type  # heading(level=1)
    """
    ensure_position(cursor_at, parse_markdown(content))
    return MarkdownEditorState(
        content=content,
        selection=TextRange.at(cursor_at),
        current_formatting=formatting_at(cursor_at, content),
        current_block_type=block_type_at(cursor_at, content),
    )


def create_state_from_document(
    document: MarkdownDocument, cursor_at: DocumentPosition | None = None
) -> MarkdownEditorState:
    """Build a state from a loaded document, keeping its metadata."""
    state = create_state(document.content, cursor_at or DocumentPosition.start())
    return replace(state, metadata=document.metadata)


def with_content(state: MarkdownEditorState, content: str, cursor_at: DocumentPosition) -> MarkdownEditorState:
    """Swap in new content and cursor, keeping the flags and metadata of `state`.

    Raises:
        InvalidPositionError: If `cursor_at` is outside `content`.
    """
    fresh = create_state(content, cursor_at)
    return replace(
        state,
        content=fresh.content,
        selection=fresh.selection,
        current_formatting=fresh.current_formatting,
        current_block_type=fresh.current_block_type,
    )


def update_selection(text_range: TextRange, state: MarkdownEditorState) -> MarkdownEditorState:
    """Move the selection and refresh the derived formatting and block type.

    Raises:
        InvalidRangeError: If either endpoint is outside the content.
    """
    document = parse_markdown(state.content)
    try:
        ensure_position(text_range.start, document)
        ensure_position(text_range.end, document)
    except InvalidPositionError as error:
        raise InvalidRangeError(text_range) from error

    return replace(
        state,
        selection=text_range,
        current_formatting=formatting_at(text_range.start, state.content),
        current_block_type=block_type_at(text_range.start, state.content),
    )


def validate_state(state: MarkdownEditorState) -> ValidationResult:
    """Collect problems with a state without raising.

    Document problems, out-of-bounds selection endpoints, and formatting that
    the block under the cursor cannot carry are all reported. Only the first
    two count as errors.
    """
    result = validate_document(state.content)
    errors = list(result.errors)
    warnings = list(result.warnings)

    document = parse_markdown(state.content)
    for position in (state.selection.start, state.selection.end):
        try:
            ensure_position(position, document)
        except InvalidPositionError as error:
            errors.append(error)

    if not errors:
        if state.current_formatting != InlineFormatting.NONE and not can_apply_formatting(
            state.current_formatting, state.selection, state
        ):
            warnings.append(
                f"Formatting {state.current_formatting.describe()} is not valid at {state.selection}"
            )
        if state.current_block_type != block_type_at(state.selection.start, state.content):
            warnings.append(f"Block type {state.current_block_type} does not match the content")

    return ValidationResult(is_valid=not errors, errors=errors, warnings=warnings)


def are_states_equivalent(first: MarkdownEditorState, second: MarkdownEditorState) -> bool:
    """Compare the user-visible parts of two states.

    Unsaved-change flags and metadata are ignored.
    """
    return (
        first.content == second.content
        and first.selection == second.selection
        and first.current_formatting == second.current_formatting
        and first.current_block_type == second.current_block_type
    )
