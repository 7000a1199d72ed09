"""Data models for md-editor.

Every value here is immutable. Offsets, ranges and character counts are
measured in Unicode code points, i.e. plain `str` indexing.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum, Flag, auto

from .exceptions import EditorError, InvalidBlockTypeError

MIN_HEADING_LEVEL = 1
MAX_HEADING_LEVEL = 6


@dataclass(frozen=True)
class DocumentPosition:
    """A character offset inside one block of a parsed document.

    Attributes:
        block_index: Zero-based index of the block.
        offset: Zero-based offset into the block's `text_content`.
    """

    block_index: int
    offset: int

    @classmethod
    def start(cls) -> DocumentPosition:
        return cls(0, 0)

    def __str__(self) -> str:
        return f"({self.block_index}, {self.offset})"


@dataclass(frozen=True)
class TextRange:
    """A span between two document positions.

    Attributes:
        start: Inclusive start position.
        end: Exclusive end position.
    """

    start: DocumentPosition
    end: DocumentPosition

    @classmethod
    def at(cls, position: DocumentPosition) -> TextRange:
        """Build a collapsed range representing a cursor."""
        return cls(position, position)

    @property
    def is_cursor(self) -> bool:
        return self.start == self.end

    @property
    def is_multi_block(self) -> bool:
        return self.start.block_index != self.end.block_index

    def __str__(self) -> str:
        return f"{self.start}-{self.end}"


class InlineFormatting(Flag):
    """Inline formatting flags.

    Combine with ``|``; subtract with ``a & ~b``; toggle with ``^``.
    """

    NONE = 0
    BOLD = auto()
    ITALIC = auto()
    STRIKETHROUGH = auto()
    CODE = auto()

    @property
    def markdown_syntax(self) -> tuple[str, str]:
        """Return the delimiters for the first flag set, in priority order."""
        if InlineFormatting.BOLD in self:
            return ("**", "**")
        if InlineFormatting.ITALIC in self:
            return ("*", "*")
        if InlineFormatting.STRIKETHROUGH in self:
            return ("~~", "~~")
        if InlineFormatting.CODE in self:
            return ("`", "`")
        return ("", "")

    def describe(self) -> str:
        names = [
            name
            for flag, name in (
                (InlineFormatting.BOLD, "bold"),
                (InlineFormatting.ITALIC, "italic"),
                (InlineFormatting.STRIKETHROUGH, "strikethrough"),
                (InlineFormatting.CODE, "code"),
            )
            if flag in self
        ]
        return ", ".join(names) if names else "none"


class FormattingOperation(Enum):
    """How an inline formatting change combines with the current formatting."""

    APPLY = "apply"
    REMOVE = "remove"
    TOGGLE = "toggle"

    @property
    def inverse(self) -> FormattingOperation:
        if self is FormattingOperation.APPLY:
            return FormattingOperation.REMOVE
        if self is FormattingOperation.REMOVE:
            return FormattingOperation.APPLY
        return FormattingOperation.TOGGLE


class BlockKind(Enum):
    PARAGRAPH = "paragraph"
    HEADING = "heading"
    UNORDERED_LIST = "unordered_list"
    ORDERED_LIST = "ordered_list"
    CODE_BLOCK = "code_block"
    QUOTE = "quote"


@dataclass(frozen=True)
class MarkdownBlockType:
    """The shape of a block, independent of its content.

    Attributes:
        kind: Which construct the block is.
        level: Heading level (1-6) for headings, otherwise None.

    Raises:
        InvalidBlockTypeError: If a heading level is out of range or a level
            is given for a non-heading kind.
    """

    kind: BlockKind
    level: int | None = None

    def __post_init__(self):
        if self.kind is BlockKind.HEADING:
            if (
                isinstance(self.level, bool)
                or not isinstance(self.level, int)
                or not MIN_HEADING_LEVEL <= self.level <= MAX_HEADING_LEVEL
            ):
                raise InvalidBlockTypeError(f"heading level {self.level!r}")
        elif self.level is not None:
            raise InvalidBlockTypeError(f"{self.kind.value} with level {self.level!r}")

    @classmethod
    def paragraph(cls) -> MarkdownBlockType:
        return cls(BlockKind.PARAGRAPH)

    @classmethod
    def heading(cls, level: int) -> MarkdownBlockType:
        return cls(BlockKind.HEADING, level)

    @classmethod
    def unordered_list(cls) -> MarkdownBlockType:
        return cls(BlockKind.UNORDERED_LIST)

    @classmethod
    def ordered_list(cls) -> MarkdownBlockType:
        return cls(BlockKind.ORDERED_LIST)

    @classmethod
    def code_block(cls) -> MarkdownBlockType:
        return cls(BlockKind.CODE_BLOCK)

    @classmethod
    def quote(cls) -> MarkdownBlockType:
        return cls(BlockKind.QUOTE)

    @property
    def is_list(self) -> bool:
        return self.kind in (BlockKind.UNORDERED_LIST, BlockKind.ORDERED_LIST)

    @property
    def markdown_prefix(self) -> str:
        if self.kind is BlockKind.HEADING:
            return "#" * self.level + " "
        if self.kind is BlockKind.UNORDERED_LIST:
            return "- "
        if self.kind is BlockKind.ORDERED_LIST:
            return "1. "
        if self.kind is BlockKind.CODE_BLOCK:
            return "```\n"
        if self.kind is BlockKind.QUOTE:
            return "> "
        return ""

    @property
    def markdown_suffix(self) -> str:
        return "\n```" if self.kind is BlockKind.CODE_BLOCK else ""

    def __str__(self) -> str:
        if self.kind is BlockKind.HEADING:
            return f"heading(level={self.level})"
        return self.kind.value


PARAGRAPH = MarkdownBlockType.paragraph()
UNORDERED_LIST = MarkdownBlockType.unordered_list()
ORDERED_LIST = MarkdownBlockType.ordered_list()
CODE_BLOCK = MarkdownBlockType.code_block()
QUOTE = MarkdownBlockType.quote()


@dataclass(frozen=True)
class FormattedRange:
    """Inline formatting over ``text[start:end]`` of a block.

    Offsets include the markdown delimiters, because block text is stored raw.
    """

    start: int
    end: int
    formatting: InlineFormatting

    def covers(self, offset: int) -> bool:
        return self.start <= offset < self.end


def _count_words(text: str) -> int:
    return len(text.split())


@dataclass(frozen=True)
class Paragraph:
    text: str
    formatting: tuple[FormattedRange, ...] = ()

    @property
    def text_content(self) -> str:
        return self.text

    @property
    def character_count(self) -> int:
        return len(self.text)

    @property
    def word_count(self) -> int:
        return _count_words(self.text)

    @property
    def block_type(self) -> MarkdownBlockType:
        return PARAGRAPH


@dataclass(frozen=True)
class Heading:
    level: int
    text: str
    formatting: tuple[FormattedRange, ...] = ()

    def __post_init__(self):
        # Reuse the block-type validation for the level.
        MarkdownBlockType.heading(self.level)

    @property
    def text_content(self) -> str:
        return self.text

    @property
    def character_count(self) -> int:
        return self.level + 1 + len(self.text)

    @property
    def word_count(self) -> int:
        return _count_words(self.text)

    @property
    def block_type(self) -> MarkdownBlockType:
        return MarkdownBlockType.heading(self.level)


class ListKind(Enum):
    BULLET = "bullet"
    ORDERED = "ordered"


@dataclass(frozen=True)
class ListItem:
    text: str
    formatting: tuple[FormattedRange, ...] = ()


@dataclass(frozen=True)
class ListBlock:
    """A run of list items sharing one marker family.

    Attributes:
        kind: Bullet or ordered.
        items: The items in document order.
        start: First number of an ordered list; ignored for bullets.
    """

    kind: ListKind
    items: tuple[ListItem, ...]
    start: int = 1

    def marker(self, index: int) -> str:
        """Return the markdown marker for the item at `index`."""
        if self.kind is ListKind.BULLET:
            return "- "
        return f"{self.start + index}. "

    @property
    def text_content(self) -> str:
        return "\n".join(item.text for item in self.items)

    @property
    def character_count(self) -> int:
        markers = sum(len(self.marker(index)) for index in range(len(self.items)))
        texts = sum(len(item.text) for item in self.items)
        return markers + texts + max(len(self.items) - 1, 0)

    @property
    def word_count(self) -> int:
        return _count_words(self.text_content)

    @property
    def block_type(self) -> MarkdownBlockType:
        return UNORDERED_LIST if self.kind is ListKind.BULLET else ORDERED_LIST


@dataclass(frozen=True)
class CodeBlock:
    content: str
    language: str | None = None

    @property
    def text_content(self) -> str:
        return self.content

    @property
    def character_count(self) -> int:
        # Opening fence + language + newline, content, newline + closing fence.
        return 3 + len(self.language or "") + 1 + len(self.content) + 1 + 3

    @property
    def word_count(self) -> int:
        return _count_words(self.content)

    @property
    def block_type(self) -> MarkdownBlockType:
        return CODE_BLOCK


@dataclass(frozen=True)
class Quote:
    text: str
    formatting: tuple[FormattedRange, ...] = ()

    @property
    def text_content(self) -> str:
        return self.text

    @property
    def character_count(self) -> int:
        return len(self.text) + 2 * len(self.text.split("\n"))

    @property
    def word_count(self) -> int:
        return _count_words(self.text)

    @property
    def block_type(self) -> MarkdownBlockType:
        return QUOTE


MarkdownBlock = Paragraph | Heading | ListBlock | CodeBlock | Quote

TEXT_BLOCK_TYPES = (Paragraph, Heading, Quote)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class DocumentMetadata:
    """Timestamps and version attached to a document or state."""

    created_at: datetime = field(default_factory=_utcnow)
    modified_at: datetime = field(default_factory=_utcnow)
    version: str = "1.0"

    def touched(self) -> DocumentMetadata:
        """Return a copy whose `modified_at` is now."""
        return replace(self, modified_at=_utcnow())


@dataclass(frozen=True)
class ParsedDocument:
    """Ordered blocks derived from markdown text.

    Attributes:
        blocks: Blocks in document order. Never empty when produced by
            `parse_markdown`.
        metadata: Timestamps; excluded from equality.
    """

    blocks: tuple[MarkdownBlock, ...]
    metadata: DocumentMetadata = field(default_factory=DocumentMetadata, compare=False)

    @classmethod
    def with_paragraph(cls, text: str) -> ParsedDocument:
        return cls(blocks=(Paragraph(text),))

    @property
    def character_count(self) -> int:
        return sum(block.character_count for block in self.blocks)

    @property
    def word_count(self) -> int:
        return sum(block.word_count for block in self.blocks)


@dataclass(frozen=True)
class MarkdownDocument:
    """Raw markdown handed over by the rendering layer on load."""

    content: str
    metadata: DocumentMetadata = field(default_factory=DocumentMetadata)


@dataclass(frozen=True)
class DocumentStats:
    character_count: int
    word_count: int
    paragraph_count: int
    heading_count: int
    list_count: int
    code_block_count: int
    quote_count: int


@dataclass(frozen=True)
class MarkdownEditorState:
    """Complete state of an editor at one point in time.

    Attributes:
        content: The document as markdown text.
        selection: Cursor or selection.
        current_formatting: Inline formatting at the selection start.
        current_block_type: Block type at the selection start.
        has_unsaved_changes: Whether content changed since load.
        metadata: Document metadata.
    """

    content: str
    selection: TextRange
    current_formatting: InlineFormatting = InlineFormatting.NONE
    current_block_type: MarkdownBlockType = PARAGRAPH
    has_unsaved_changes: bool = False
    metadata: DocumentMetadata = field(default_factory=DocumentMetadata)

    @classmethod
    def empty(cls) -> MarkdownEditorState:
        return cls(content="", selection=TextRange.at(DocumentPosition.start()))

    @classmethod
    def with_paragraph(cls, text: str) -> MarkdownEditorState:
        return cls(content=text, selection=TextRange.at(DocumentPosition(0, len(text))))

    @classmethod
    def with_heading(cls, level: int, text: str) -> MarkdownEditorState:
        block_type = MarkdownBlockType.heading(level)
        return cls(
            content=block_type.markdown_prefix + text,
            selection=TextRange.at(DocumentPosition(0, len(text))),
            current_block_type=block_type,
        )

    @property
    def cursor(self) -> DocumentPosition:
        return self.selection.start


@dataclass
class ValidationResult:
    """Outcome of validating a document or a state.

    Attributes:
        is_valid: False when at least one error was found.
        errors: Hard failures.
        warnings: Soft issues that do not invalidate the subject.
    """

    is_valid: bool
    errors: list[EditorError] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @classmethod
    def valid(cls) -> ValidationResult:
        return cls(is_valid=True)

    @classmethod
    def invalid(cls, errors: list[EditorError]) -> ValidationResult:
        return cls(is_valid=False, errors=list(errors))
