from __future__ import annotations

import pytest

from md_editor.exceptions import InvalidBlockTypeError
from md_editor.models import (
    CODE_BLOCK,
    PARAGRAPH,
    QUOTE,
    UNORDERED_LIST,
    BlockKind,
    CodeBlock,
    DocumentMetadata,
    DocumentPosition,
    FormattedRange,
    FormattingOperation,
    Heading,
    InlineFormatting,
    ListBlock,
    ListItem,
    ListKind,
    MarkdownBlockType,
    MarkdownEditorState,
    Paragraph,
    ParsedDocument,
    Quote,
    TextRange,
    ValidationResult,
)


def test_text_range_shapes():
    cursor = TextRange.at(DocumentPosition(1, 4))
    selection = TextRange(DocumentPosition(0, 1), DocumentPosition(0, 3))
    spanning = TextRange(DocumentPosition(0, 1), DocumentPosition(2, 0))

    assert cursor.is_cursor and not cursor.is_multi_block
    assert not selection.is_cursor and not selection.is_multi_block
    assert spanning.is_multi_block
    assert str(selection) == "(0, 1)-(0, 3)"


def test_inline_formatting_set_algebra():
    bold_italic = InlineFormatting.BOLD | InlineFormatting.ITALIC

    assert InlineFormatting.BOLD in bold_italic
    assert bold_italic & ~InlineFormatting.BOLD == InlineFormatting.ITALIC
    assert bold_italic ^ InlineFormatting.ITALIC == InlineFormatting.BOLD
    assert bold_italic ^ InlineFormatting.CODE == bold_italic | InlineFormatting.CODE


def test_inline_formatting_syntax_and_description():
    assert InlineFormatting.BOLD.markdown_syntax == ("**", "**")
    assert InlineFormatting.CODE.markdown_syntax == ("`", "`")
    assert InlineFormatting.NONE.markdown_syntax == ("", "")
    assert (InlineFormatting.BOLD | InlineFormatting.CODE).describe() == "bold, code"
    assert InlineFormatting.NONE.describe() == "none"


def test_formatting_operation_inverse():
    assert FormattingOperation.APPLY.inverse is FormattingOperation.REMOVE
    assert FormattingOperation.REMOVE.inverse is FormattingOperation.APPLY
    assert FormattingOperation.TOGGLE.inverse is FormattingOperation.TOGGLE


def test_block_type_prefixes():
    assert MarkdownBlockType.heading(3).markdown_prefix == "### "
    assert UNORDERED_LIST.markdown_prefix == "- "
    assert MarkdownBlockType.ordered_list().markdown_prefix == "1. "
    assert QUOTE.markdown_prefix == "> "
    assert CODE_BLOCK.markdown_suffix == "\n```"
    assert PARAGRAPH.markdown_prefix == ""
    assert UNORDERED_LIST.is_list and not PARAGRAPH.is_list


@pytest.mark.parametrize("level", [0, 7, None, True])
def test_heading_type_rejects_bad_levels(level):
    with pytest.raises(InvalidBlockTypeError):
        MarkdownBlockType(BlockKind.HEADING, level)


def test_non_heading_type_rejects_level():
    with pytest.raises(InvalidBlockTypeError):
        MarkdownBlockType(BlockKind.PARAGRAPH, 2)


def test_heading_block_validates_level():
    with pytest.raises(InvalidBlockTypeError):
        Heading(level=9, text="x")


def test_block_types_of_blocks():
    assert Paragraph("x").block_type == PARAGRAPH
    assert Heading(2, "x").block_type == MarkdownBlockType.heading(2)
    assert ListBlock(ListKind.ORDERED, (ListItem("x"),)).block_type == MarkdownBlockType.ordered_list()
    assert CodeBlock("x").block_type == CODE_BLOCK
    assert Quote("x").block_type == QUOTE


def test_list_text_content_excludes_markers():
    block = ListBlock(ListKind.ORDERED, (ListItem("one"), ListItem("two")), start=7)

    assert block.text_content == "one\ntwo"
    assert block.marker(1) == "8. "
    assert block.word_count == 2


def test_counts():
    assert Heading(1, "Title").character_count == len("# Title")
    assert CodeBlock("abc", "py").character_count == len("```py\nabc\n```")
    assert Quote("a\nb").character_count == len("> a\n> b")
    assert Paragraph("two  words").word_count == 2
    assert ParsedDocument(blocks=(Paragraph("a b"), Heading(1, "c"))).word_count == 3


def test_formatted_range_covers_is_half_open():
    span = FormattedRange(2, 5, InlineFormatting.BOLD)

    assert not span.covers(1)
    assert span.covers(2)
    assert span.covers(4)
    assert not span.covers(5)


def test_parsed_document_equality_ignores_metadata():
    first = ParsedDocument(blocks=(Paragraph("x"),), metadata=DocumentMetadata(version="1.0"))
    second = ParsedDocument(blocks=(Paragraph("x"),), metadata=DocumentMetadata(version="2.0"))

    assert first == second
    assert ParsedDocument.with_paragraph("x") == first


def test_metadata_touched_updates_modified_time_only():
    metadata = DocumentMetadata()
    touched = metadata.touched()

    assert touched.created_at == metadata.created_at
    assert touched.modified_at >= metadata.modified_at
    assert touched.version == metadata.version


def test_editor_state_factories():
    empty = MarkdownEditorState.empty()
    paragraph = MarkdownEditorState.with_paragraph("Hello")
    heading = MarkdownEditorState.with_heading(2, "Title")

    assert empty.content == "" and empty.cursor == DocumentPosition(0, 0)
    assert paragraph.cursor == DocumentPosition(0, 5)
    assert heading.content == "## Title"
    assert heading.cursor == DocumentPosition(0, 5)
    assert heading.current_block_type == MarkdownBlockType.heading(2)
    assert not paragraph.has_unsaved_changes


def test_validation_result_constructors():
    assert ValidationResult.valid() == ValidationResult(is_valid=True, errors=[], warnings=[])

    error = InvalidBlockTypeError("x")
    invalid = ValidationResult.invalid([error])

    assert not invalid.is_valid
    assert invalid.errors == [error]
