"""Markdown parsing utilities."""

from __future__ import annotations

from .constants import (
    BULLET_MARKERS,
    CODE_FENCE,
    HEADING_PATTERN,
    INLINE_PATTERN,
    ORDERED_ITEM_PATTERN,
    QUOTE_PREFIX,
)
from .models import (
    CodeBlock,
    FormattedRange,
    Heading,
    InlineFormatting,
    ListBlock,
    ListItem,
    ListKind,
    MarkdownBlock,
    Paragraph,
    ParsedDocument,
    Quote,
)

_INLINE_GROUPS = {
    "code": InlineFormatting.CODE,
    "bold": InlineFormatting.BOLD,
    "strikethrough": InlineFormatting.STRIKETHROUGH,
    "italic": InlineFormatting.ITALIC,
}


def scan_inline_formatting(text: str) -> tuple[FormattedRange, ...]:
    """Locate inline formatting spans in a block's raw text.

    Spans never overlap and are returned sorted by start offset. A code span
    claims its characters first, so emphasis markers inside backticks are
    ignored.

    Args:
        text: Raw block text, markdown delimiters included.

    Returns:
        tuple[FormattedRange, ...]: One range per span, delimiters included.

    Examples:
        scan_inline_formatting("a **b** c")  # (FormattedRange(2, 7, BOLD),)
        scan_inline_formatting("`**x**`")  # (FormattedRange(0, 7, CODE),)
    """
    spans = []
    for match in INLINE_PATTERN.finditer(text):
        formatting = _INLINE_GROUPS[match.lastgroup]
        spans.append(FormattedRange(match.start(), match.end(), formatting))
    return tuple(spans)


def is_blank(line: str) -> bool:
    return not line.strip()


def _list_family(line: str) -> ListKind | None:
    """Return the list family a line opens, or None for non-list lines."""
    if line.startswith(BULLET_MARKERS):
        return ListKind.BULLET
    if ORDERED_ITEM_PATTERN.match(line):
        return ListKind.ORDERED
    return None


def starts_block(line: str) -> bool:
    """Determine whether a line opens a heading, list, quote, or code block.

    Args:
        line: Line without its trailing newline.

    Returns:
        bool: True when the line cannot continue a paragraph.

    Examples:
        starts_block("## Title")  # True
        starts_block("-not a list")  # False
    """
    return (
        line.startswith("#")
        or line.startswith(CODE_FENCE)
        or line.startswith(QUOTE_PREFIX)
        or _list_family(line) is not None
    )


def _parse_heading(line: str) -> Heading:
    match = HEADING_PATTERN.match(line)
    text = match.group(2).strip()
    return Heading(level=len(match.group(1)), text=text, formatting=scan_inline_formatting(text))


def _consume_list(lines: list[str], index: int) -> tuple[ListBlock, int]:
    """Collect contiguous list items of the family opened at `index`.

    A marker of the other family ends the run, so ``- a`` followed by ``1. b``
    yields two lists.

    Args:
        lines: All document lines.
        index: Index of the first list line.

    Returns:
        tuple[ListBlock, int]: The list and the index of the first line after it.
    """
    kind = _list_family(lines[index])
    start = 1
    items: list[ListItem] = []

    while index < len(lines):
        line = lines[index]
        if _list_family(line) is not kind:
            break

        if kind is ListKind.BULLET:
            text = line[2:]
        else:
            match = ORDERED_ITEM_PATTERN.match(line)
            if not items:
                start = int(match.group(1))
            text = match.group(2)

        items.append(ListItem(text=text, formatting=scan_inline_formatting(text)))
        index += 1

    return ListBlock(kind=kind, items=tuple(items), start=start), index


def _consume_code_block(lines: list[str], index: int) -> tuple[CodeBlock, int]:
    """Collect a fenced code block opened at `index`.

    The closing fence is optional at end of input. Neither fence line is part
    of the content.
    """
    language = lines[index][len(CODE_FENCE) :].strip()
    index += 1
    content: list[str] = []

    while index < len(lines):
        line = lines[index]
        index += 1
        if line == CODE_FENCE:
            break
        content.append(line)

    return CodeBlock(content="\n".join(content), language=language or None), index


def _consume_quote(lines: list[str], index: int) -> tuple[Quote, int]:
    content: list[str] = []
    while index < len(lines) and lines[index].startswith(QUOTE_PREFIX):
        content.append(lines[index][len(QUOTE_PREFIX) :])
        index += 1

    text = "\n".join(content)
    return Quote(text=text, formatting=scan_inline_formatting(text)), index


def _consume_paragraph(lines: list[str], index: int) -> tuple[Paragraph, int]:
    """Collect paragraph lines, joined with single spaces.

    A bare marker such as ``-``, ``>`` or ``1.`` on the first line stays a
    paragraph of its own: joining the next line onto it would produce text
    that parses as a list or a quote once rendered.
    """
    content: list[str] = []
    while index < len(lines):
        line = lines[index]
        if is_blank(line) or (content and starts_block(line)):
            break
        if len(content) == 1 and starts_block(f"{content[0]} {line}"):
            break
        content.append(line)
        index += 1

    text = " ".join(content)
    return Paragraph(text=text, formatting=scan_inline_formatting(text)), index


def parse_markdown(content: str) -> ParsedDocument:
    """Parse markdown text into an ordered sequence of blocks.

    Single forward pass over the lines. Blank lines separate blocks and are
    never content, except inside a fenced code block. Malformed input degrades
    to paragraph text; the function never fails.

    Args:
        content: The markdown content to parse.

    Returns:
        ParsedDocument: The blocks in document order. Always holds at least one
            block: content with nothing but blank lines parses to a single
            empty paragraph.

    Examples:
        parse_markdown("# Title\\n\\nBody text")
        parse_markdown("")  # ParsedDocument(blocks=(Paragraph(text=''),))
    """
    lines = content.splitlines()
    blocks: list[MarkdownBlock] = []
    index = 0

    while index < len(lines):
        line = lines[index]

        if is_blank(line):
            index += 1
            continue

        if line.startswith("#"):
            blocks.append(_parse_heading(line))
            index += 1
            continue

        if _list_family(line) is not None:
            block, index = _consume_list(lines, index)
        elif line.startswith(CODE_FENCE):
            block, index = _consume_code_block(lines, index)
        elif line.startswith(QUOTE_PREFIX):
            block, index = _consume_quote(lines, index)
        else:
            block, index = _consume_paragraph(lines, index)
        blocks.append(block)

    if not blocks:
        blocks.append(Paragraph(text=""))

    return ParsedDocument(blocks=tuple(blocks))
