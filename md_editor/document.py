"""Document-level operations on markdown content.

Every function takes markdown text (or a parsed document), works on a fresh
parse, and returns new values. Nothing here mutates its input.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import replace

from .exceptions import (
    DocumentValidationError,
    InvalidPositionError,
    InvalidRangeError,
    UnsupportedOperationError,
)
from .generator import generate_markdown
from .models import (
    BlockKind,
    CodeBlock,
    DocumentPosition,
    DocumentStats,
    Heading,
    InlineFormatting,
    ListBlock,
    ListItem,
    ListKind,
    MarkdownBlock,
    MarkdownBlockType,
    PARAGRAPH,
    Paragraph,
    ParsedDocument,
    Quote,
    TEXT_BLOCK_TYPES,
    TextRange,
    ValidationResult,
)
from .parser import parse_markdown


def ensure_position(position: DocumentPosition, document: ParsedDocument) -> None:
    """Check that a position addresses a character boundary in `document`.

    The block index must be within the block count and the offset must not
    exceed the length of the block's text content; ``offset == len(text)`` is
    the end-of-block position and is valid. A document without blocks accepts
    only ``(0, 0)``.

    Args:
        position: Position to check.
        document: Parsed document the position refers to.

    Raises:
        InvalidPositionError: If the position is out of bounds or negative.

    Examples:
        ensure_position(DocumentPosition(0, 11), parse_markdown("Hello world"))
    """
    if position.block_index < 0 or position.offset < 0:
        raise InvalidPositionError(position)

    if not document.blocks:
        if position != DocumentPosition.start():
            raise InvalidPositionError(position)
        return

    if position.block_index >= len(document.blocks):
        raise InvalidPositionError(position)

    if position.offset > len(document.blocks[position.block_index].text_content):
        raise InvalidPositionError(position)


def validate_position(position: DocumentPosition, content: str) -> None:
    """Validate a position against a fresh parse of `content`.

    Raises:
        InvalidPositionError: If the position is out of bounds.
    """
    ensure_position(position, parse_markdown(content))


def clamp_position(position: DocumentPosition, document: ParsedDocument) -> DocumentPosition:
    """Pull a position back inside `document`.

    Used after edits that can remove or shorten blocks. A block index past the
    last block lands at the end of the last block.
    """
    if not document.blocks:
        return DocumentPosition.start()
    last = len(document.blocks) - 1
    if position.block_index > last:
        return DocumentPosition(last, len(document.blocks[last].text_content))
    block_index = max(position.block_index, 0)
    text_length = len(document.blocks[block_index].text_content)
    return DocumentPosition(block_index, min(max(position.offset, 0), text_length))


def get_block(position: DocumentPosition, content: str) -> MarkdownBlock | None:
    document = parse_markdown(content)
    if 0 <= position.block_index < len(document.blocks):
        return document.blocks[position.block_index]
    return None


def block_type_at(position: DocumentPosition, content: str) -> MarkdownBlockType:
    """Return the type of the block under `position`, defaulting to paragraph."""
    block = get_block(position, content)
    return PARAGRAPH if block is None else block.block_type


def formatting_at(position: DocumentPosition, content: str) -> InlineFormatting:
    """Return the inline formatting of the spans covering `position`.

    Code blocks carry no inline formatting. In a list, the spans of the item
    under the offset are consulted with the offset made item-relative.
    """
    block = get_block(position, content)
    if block is None or isinstance(block, CodeBlock):
        return InlineFormatting.NONE

    offset = position.offset
    if isinstance(block, ListBlock):
        item_index, offset = locate_list_item(block, offset)
        spans = block.items[item_index].formatting if block.items else ()
    else:
        spans = block.formatting

    formatting = InlineFormatting.NONE
    for span in spans:
        if span.covers(offset):
            formatting |= span.formatting
    return formatting


def _with_text(block: MarkdownBlock, text: str) -> MarkdownBlock:
    if isinstance(block, Paragraph):
        return Paragraph(text=text)
    if isinstance(block, Heading):
        return Heading(level=block.level, text=text)
    if isinstance(block, Quote):
        return Quote(text=text)
    raise UnsupportedOperationError(f"text editing is not supported for {block.block_type} blocks")


def splice_blocks(
    document: ParsedDocument, start: int, stop: int, replacement: Sequence[MarkdownBlock]
) -> ParsedDocument:
    """Replace ``blocks[start:stop]`` with `replacement`."""
    blocks = document.blocks[:start] + tuple(replacement) + document.blocks[stop:]
    return ParsedDocument(blocks=blocks, metadata=document.metadata)


def regenerate_markdown(document: ParsedDocument) -> str:
    """Render `document` the way a fresh parse of the result would see it.

    Blocks that re-parse to nothing, such as a paragraph emptied by a
    deletion, are dropped along with their separator.

    Examples:
        regenerate_markdown(ParsedDocument((Paragraph("Alpha"), Paragraph(""))))  # "Alpha"
    """
    return generate_markdown(parse_markdown(generate_markdown(document)))


def insert_text(text: str, position: DocumentPosition, content: str) -> str:
    """Insert text into a paragraph, heading, or quote.

    Args:
        text: Text to insert; may contain line breaks, which can change the
            block structure once the result is parsed again.
        position: Insertion point.
        content: Markdown content to edit.

    Returns:
        str: The regenerated markdown.

    Raises:
        InvalidPositionError: If `position` is out of bounds.
        UnsupportedOperationError: If the block is a list or a code block.

    Examples:
        insert_text("!", DocumentPosition(0, 11), "Hello world")  # "Hello world!"
    """
    document = parse_markdown(content)
    ensure_position(position, document)

    block = document.blocks[position.block_index]
    block_text = block.text_content
    new_text = block_text[: position.offset] + text + block_text[position.offset :]
    new_block = _with_text(block, new_text)

    index = position.block_index
    return generate_markdown(splice_blocks(document, index, index + 1, [new_block]))


def _ensure_range(text_range: TextRange, document: ParsedDocument) -> None:
    if text_range.is_multi_block:
        raise UnsupportedOperationError("multi-block deletion is not supported")
    try:
        ensure_position(text_range.start, document)
        ensure_position(text_range.end, document)
    except InvalidPositionError as error:
        raise InvalidRangeError(text_range) from error
    if text_range.start.offset > text_range.end.offset:
        raise InvalidRangeError(text_range)


def text_in_range(text_range: TextRange, content: str) -> str:
    """Return the block text covered by a single-block range.

    Raises:
        UnsupportedOperationError: If the range spans several blocks.
        InvalidRangeError: If the range is reversed or out of bounds.
    """
    document = parse_markdown(content)
    _ensure_range(text_range, document)
    block_text = document.blocks[text_range.start.block_index].text_content
    return block_text[text_range.start.offset : text_range.end.offset]


def delete_text(text_range: TextRange, content: str) -> str:
    """Delete text inside a single paragraph, heading, or quote.

    Args:
        text_range: Range to delete; both ends must be in the same block.
        content: Markdown content to edit.

    Returns:
        str: The regenerated markdown.

    Raises:
        UnsupportedOperationError: If the range spans several blocks or the
            block is a list or a code block.
        InvalidRangeError: If the range is reversed or out of bounds.

    Examples:
        delete_text(TextRange(DocumentPosition(0, 6), DocumentPosition(0, 11)), "Hello world")
    """
    document = parse_markdown(content)
    _ensure_range(text_range, document)

    index = text_range.start.block_index
    block = document.blocks[index]
    block_text = block.text_content
    new_text = block_text[: text_range.start.offset] + block_text[text_range.end.offset :]
    new_block = _with_text(block, new_text)

    return regenerate_markdown(splice_blocks(document, index, index + 1, [new_block]))


def convert_block(block: MarkdownBlock, block_type: MarkdownBlockType) -> MarkdownBlock:
    """Rebuild `block` as `block_type`, keeping its text.

    Lines become list items when converting to a list; list items are joined
    with spaces for one-line targets and with newlines for quotes and code.
    """
    if isinstance(block, ListBlock):
        lines = [item.text for item in block.items]
    else:
        lines = block.text_content.split("\n")

    kind = block_type.kind
    if kind is BlockKind.PARAGRAPH:
        return Paragraph(text=" ".join(lines))
    if kind is BlockKind.HEADING:
        return Heading(level=block_type.level, text=" ".join(lines))
    if kind in (BlockKind.UNORDERED_LIST, BlockKind.ORDERED_LIST):
        list_kind = ListKind.BULLET if kind is BlockKind.UNORDERED_LIST else ListKind.ORDERED
        start = block.start if isinstance(block, ListBlock) else 1
        return ListBlock(kind=list_kind, items=tuple(ListItem(text=line) for line in lines), start=start)
    if kind is BlockKind.CODE_BLOCK:
        language = block.language if isinstance(block, CodeBlock) else None
        return CodeBlock(content="\n".join(lines), language=language)
    return Quote(text="\n".join(lines))


def replace_block(block_index: int, block_type: MarkdownBlockType, content: str) -> str:
    """Convert the block at `block_index` to another block type.

    Raises:
        InvalidPositionError: If `block_index` does not address a block.
    """
    document = parse_markdown(content)
    if not 0 <= block_index < len(document.blocks):
        raise InvalidPositionError(DocumentPosition(block_index, 0))

    new_block = convert_block(document.blocks[block_index], block_type)
    return generate_markdown(splice_blocks(document, block_index, block_index + 1, [new_block]))


def locate_list_item(block: ListBlock, offset: int) -> tuple[int, int]:
    """Map an offset in a list's text content to ``(item_index, item_offset)``.

    Item texts are joined with one newline, so the end of item ``i`` and the
    start of item ``i + 1`` are one offset apart. Offsets past the end map to
    the end of the last item.

    Examples:
        locate_list_item(ListBlock(ListKind.BULLET, (ListItem("ab"), ListItem("c"))), 3)  # (1, 0)
    """
    item_start = 0
    for index, item in enumerate(block.items):
        if offset <= item_start + len(item.text):
            return index, max(offset - item_start, 0)
        item_start += len(item.text) + 1
    last = max(len(block.items) - 1, 0)
    return last, len(block.items[last].text) if block.items else 0


def list_item_start(block: ListBlock, item_index: int) -> int:
    """Return the text-content offset where item `item_index` begins."""
    return sum(len(item.text) + 1 for item in block.items[:item_index])


def split_list_item(block: ListBlock, item_index: int, item_offset: int) -> ListBlock:
    """Split an item at `item_offset`; the tail becomes a new item below it."""
    text = block.items[item_index].text
    head, tail = ListItem(text=text[:item_offset]), ListItem(text=text[item_offset:])
    items = block.items[:item_index] + (head, tail) + block.items[item_index + 1 :]
    return replace(block, items=items)


def insert_list_item(block: ListBlock, item_index: int, text: str = "") -> ListBlock:
    """Insert a new item so that it ends up at `item_index`."""
    items = block.items[:item_index] + (ListItem(text=text),) + block.items[item_index:]
    return replace(block, items=items)


def remove_list_item(block: ListBlock, item_index: int) -> ListBlock:
    return replace(block, items=block.items[:item_index] + block.items[item_index + 1 :])


def merge_with_previous(document: ParsedDocument, block_index: int) -> tuple[ParsedDocument, DocumentPosition]:
    """Join the block at `block_index` onto the end of the block before it.

    When the merged block is a list, only its first item joins the previous
    block; the remaining items stay behind as a list.

    Args:
        document: Document to edit.
        block_index: Index of the block to merge; must be at least 1.

    Returns:
        tuple[ParsedDocument, DocumentPosition]: The edited document and the
            join point, i.e. the old end of the previous block.

    Raises:
        InvalidPositionError: If there is no previous block.
        UnsupportedOperationError: If either block is a code block.
    """
    if not 0 < block_index < len(document.blocks):
        raise InvalidPositionError(DocumentPosition(block_index, 0))

    previous = document.blocks[block_index - 1]
    current = document.blocks[block_index]
    if isinstance(previous, CodeBlock) or isinstance(current, CodeBlock):
        raise UnsupportedOperationError("merging code blocks is not supported")

    remainder: list[MarkdownBlock] = []
    if isinstance(current, ListBlock):
        head = current.items[0].text if current.items else ""
        if len(current.items) > 1:
            remainder.append(replace(current, items=current.items[1:], start=current.start + 1))
    else:
        head = current.text_content

    join_offset = len(previous.text_content)
    if isinstance(previous, ListBlock):
        last = previous.items[-1]
        merged = replace(previous, items=previous.items[:-1] + (ListItem(text=last.text + head),))
    else:
        merged = _with_text(previous, previous.text_content + head)

    edited = splice_blocks(document, block_index - 1, block_index + 1, [merged, *remainder])
    return edited, DocumentPosition(block_index - 1, join_offset)


def validate_document(content: str) -> ValidationResult:
    """Check parsed content for structural problems.

    Empty headings and empty code blocks are reported as warnings; an empty
    list is an error.
    """
    document = parse_markdown(content)
    errors = []
    warnings = []

    for index, block in enumerate(document.blocks):
        if isinstance(block, Heading) and not block.text:
            warnings.append(f"Empty heading at block {index}")
        elif isinstance(block, ListBlock) and not block.items:
            errors.append(DocumentValidationError(f"Empty list at block {index}"))
        elif isinstance(block, CodeBlock) and not block.content:
            warnings.append(f"Empty code block at block {index}")

    return ValidationResult(is_valid=not errors, errors=errors, warnings=warnings)


def document_stats(content: str) -> DocumentStats:
    document = parse_markdown(content)
    blocks = document.blocks
    return DocumentStats(
        character_count=document.character_count,
        word_count=document.word_count,
        paragraph_count=sum(isinstance(block, Paragraph) for block in blocks),
        heading_count=sum(isinstance(block, Heading) for block in blocks),
        list_count=sum(isinstance(block, ListBlock) for block in blocks),
        code_block_count=sum(isinstance(block, CodeBlock) for block in blocks),
        quote_count=sum(isinstance(block, Quote) for block in blocks),
    )


def is_text_block(block: MarkdownBlock) -> bool:
    return isinstance(block, TEXT_BLOCK_TYPES)
