"""Formatting rules: which inline formats and block types may be used where."""

from __future__ import annotations

from .document import block_type_at, get_block
from .models import (
    BlockKind,
    CODE_BLOCK,
    DocumentPosition,
    InlineFormatting,
    MarkdownBlockType,
    MarkdownEditorState,
    ORDERED_LIST,
    PARAGRAPH,
    QUOTE,
    TextRange,
    UNORDERED_LIST,
)

SINGLE_FORMATS = (
    InlineFormatting.BOLD,
    InlineFormatting.ITALIC,
    InlineFormatting.STRIKETHROUGH,
    InlineFormatting.CODE,
)

# Inline code is rendered verbatim, so no emphasis can live inside it.
INCOMPATIBLE_WITH_CODE = InlineFormatting.BOLD | InlineFormatting.ITALIC | InlineFormatting.STRIKETHROUGH

ALL_BLOCK_TYPES = (
    PARAGRAPH,
    *(MarkdownBlockType.heading(level) for level in range(1, 7)),
    UNORDERED_LIST,
    ORDERED_LIST,
    CODE_BLOCK,
    QUOTE,
)


def is_formatting_allowed(formatting: InlineFormatting, block_type: MarkdownBlockType) -> bool:
    """Check whether inline formatting may appear in a block type.

    Args:
        formatting: Formatting to check.
        block_type: Target block type.

    Returns:
        bool: False for code blocks, True everywhere else.

    Examples:
        is_formatting_allowed(InlineFormatting.BOLD, CODE_BLOCK)  # False
    """
    return block_type.kind is not BlockKind.CODE_BLOCK


def are_compatible(first: InlineFormatting, second: InlineFormatting) -> bool:
    """Check whether two formatting sets can be combined.

    Inline code conflicts with bold, italic, and strikethrough; every other
    pairing is compatible. The check is symmetric.

    Examples:
        are_compatible(InlineFormatting.BOLD, InlineFormatting.ITALIC)  # True
        are_compatible(InlineFormatting.CODE, InlineFormatting.BOLD)  # False
    """
    if InlineFormatting.CODE in first and second & INCOMPATIBLE_WITH_CODE:
        return False
    if InlineFormatting.CODE in second and first & INCOMPATIBLE_WITH_CODE:
        return False
    return True


def is_consistent(formatting: InlineFormatting) -> bool:
    """Check that a single formatting set has no internal conflicts."""
    return are_compatible(formatting, formatting)


def can_apply_formatting(
    formatting: InlineFormatting, text_range: TextRange, state: MarkdownEditorState
) -> bool:
    """Decide whether `formatting` can be applied over `text_range`.

    Multi-block ranges are never eligible. Otherwise the block under the
    range start must allow inline formatting and the requested formatting
    must be compatible with the state's current formatting.
    """
    if text_range.is_multi_block:
        return False

    block_type = block_type_at(text_range.start, state.content)
    if not is_formatting_allowed(formatting, block_type):
        return False

    return are_compatible(state.current_formatting, formatting)


def can_set_block_type(
    block_type: MarkdownBlockType, position: DocumentPosition, state: MarkdownEditorState
) -> bool:
    """Every transition is allowed as long as the position addresses a block."""
    return get_block(position, state.content) is not None


def valid_formatting_options(text_range: TextRange, state: MarkdownEditorState) -> list[InlineFormatting]:
    return [
        formatting
        for formatting in SINGLE_FORMATS
        if can_apply_formatting(formatting, text_range, state)
    ]


def valid_block_type_options(position: DocumentPosition, state: MarkdownEditorState) -> list[MarkdownBlockType]:
    return [
        block_type
        for block_type in ALL_BLOCK_TYPES
        if can_set_block_type(block_type, position, state)
    ]
