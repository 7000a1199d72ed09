"""Markdown generation from parsed documents."""

from __future__ import annotations

from .constants import BLOCK_SEPARATOR, CODE_FENCE, QUOTE_PREFIX
from .exceptions import SerializationError
from .models import CodeBlock, Heading, ListBlock, MarkdownBlock, Paragraph, ParsedDocument, Quote


def render_block(block: MarkdownBlock) -> str:
    """Serialize one block back to markdown.

    Args:
        block: The block to render.

    Returns:
        str: Markdown for the block, without surrounding blank lines. Its length
            equals ``block.character_count``.

    Raises:
        TypeError: If `block` is not one of the known block types.

    Examples:
        render_block(Heading(level=2, text="Usage"))  # "## Usage"
        render_block(Quote(text="a\\nb"))  # "> a\\n> b"
    """
    if isinstance(block, Paragraph):
        return block.text
    if isinstance(block, Heading):
        return "#" * block.level + " " + block.text
    if isinstance(block, ListBlock):
        return "\n".join(
            block.marker(index) + item.text for index, item in enumerate(block.items)
        )
    if isinstance(block, CodeBlock):
        return f"{CODE_FENCE}{block.language or ''}\n{block.content}\n{CODE_FENCE}"
    if isinstance(block, Quote):
        return "\n".join(QUOTE_PREFIX + line for line in block.text.split("\n"))
    raise TypeError(f"Unknown block type: {type(block).__name__}")


def generate_markdown(document: ParsedDocument) -> str:
    """Render a parsed document as markdown text.

    Blocks are joined with one blank line. The output is the structural
    inverse of `parse_markdown`, not a byte-exact copy of the original input:
    paragraph line breaks collapse to spaces and ``*`` bullets become ``-``.

    Args:
        document: The document to render.

    Returns:
        str: Markdown text.

    Examples:
        generate_markdown(parse_markdown("# Title\\n\\nBody text"))  # "# Title\\n\\nBody text"
    """
    return BLOCK_SEPARATOR.join(render_block(block) for block in document.blocks)


def _spans_to_list(spans) -> list[dict]:
    return [
        {"start": span.start, "end": span.end, "formatting": span.formatting.describe()}
        for span in spans
    ]


def block_to_dict(block: MarkdownBlock) -> dict:
    """Describe a block as JSON-compatible data.

    Raises:
        SerializationError: If `block` is not one of the known block types.
    """
    if not isinstance(block, (Paragraph, Heading, ListBlock, CodeBlock, Quote)):
        raise SerializationError(f"unknown block type {type(block).__name__}")

    data: dict = {"type": block.block_type.kind.value}
    if isinstance(block, Heading):
        data.update(level=block.level, text=block.text, formatting=_spans_to_list(block.formatting))
    elif isinstance(block, (Paragraph, Quote)):
        data.update(text=block.text, formatting=_spans_to_list(block.formatting))
    elif isinstance(block, ListBlock):
        data.update(
            start=block.start,
            items=[
                {"text": item.text, "formatting": _spans_to_list(item.formatting)}
                for item in block.items
            ],
        )
    else:
        data.update(language=block.language, content=block.content)
    return data


def document_to_dict(document: ParsedDocument) -> dict:
    return {
        "blocks": [block_to_dict(block) for block in document.blocks],
        "character_count": document.character_count,
        "word_count": document.word_count,
    }
